# app/routes/menu.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.config import load_config
from app.database.models import MenuCategory
from app.utils.auth import get_session_user
from app.utils.database_manager import list_menu_items
from app.utils.exceptions import AppError
from app.utils.flash import get_flash, set_flash
from app.utils.menu_submission import MenuItemSubmission
from app.utils.photo import get_image_host
from app.utils.profile_utils import resolve_tenant
from app.utils.supabase_client import get_supabase

router = APIRouter(prefix="/menu", tags=["menu"])
templates = Jinja2Templates(directory="app/templates")


def _read_upload(upload: Optional[UploadFile], max_bytes: int) -> Optional[bytes]:
    """Read at most one byte past the limit so oversized files still fail validation."""
    if upload is None or not upload.filename:
        return None
    return upload.file.read(max_bytes + 1)


def _render_form(request: Request, user, values: Optional[dict] = None,
                 error: Optional[str] = None, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "menu/form.html",
        {
            "user": user,
            "categories": [c.value for c in MenuCategory],
            "form": values or {},
            "max_image_mb": load_config().MAX_IMAGE_BYTES // (1024 * 1024),
            "error": error,
            "flash": get_flash(request),
        },
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse)
def menu_page(request: Request, user=Depends(get_session_user), client=Depends(get_supabase)):
    items, error, status_code = [], None, 200
    try:
        items = list_menu_items(client, resolve_tenant(client, user))
    except AppError as e:
        logging.error(f"Failed to load menu items: {e.message}")
        error, status_code = e.message, e.status_code

    return templates.TemplateResponse(
        request,
        "menu/list.html",
        {"user": user, "items": items, "error": error, "flash": get_flash(request)},
        status_code=status_code,
    )


@router.get("/new", response_class=HTMLResponse)
def new_menu_item_page(request: Request, user=Depends(get_session_user)):
    return _render_form(request, user)


@router.post("/upload-image")
def upload_image(
    image: Optional[UploadFile] = File(None),
    user=Depends(get_session_user),
    client=Depends(get_supabase),
    image_host=Depends(get_image_host),
):
    """Upload the selected image ahead of submitting the form."""
    max_bytes = load_config().MAX_IMAGE_BYTES
    submission = MenuItemSubmission(image_host, max_bytes=max_bytes)
    try:
        resolve_tenant(client, user)
        data = _read_upload(image, max_bytes)
        if data is None:
            return JSONResponse({"status": "error", "message": "Please select an image file"}, status_code=400)
        submission.select_file(image.filename, image.content_type, data)
        url = submission.upload()
    except AppError as e:
        logging.error(f"Error uploading image: {e.message}")
        return JSONResponse({"status": "error", "message": e.message}, status_code=e.status_code)

    return JSONResponse({
        "status": "success",
        "message": "Image uploaded successfully",
        "image_url": url,
    })


@router.post("/items")
def submit_menu_item(
    request: Request,
    name: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    category: str = Form(""),
    image_url: str = Form(""),
    image: Optional[UploadFile] = File(None),
    user=Depends(get_session_user),
    client=Depends(get_supabase),
    image_host=Depends(get_image_host),
):
    """Add a menu item. A selected image that was not uploaded yet is uploaded first."""
    values = {"name": name, "description": description, "price": price, "category": category}
    max_bytes = load_config().MAX_IMAGE_BYTES
    submission = MenuItemSubmission(image_host, image_url=image_url, max_bytes=max_bytes)
    try:
        tenant = resolve_tenant(client, user)
        data = None if submission.image_url else _read_upload(image, max_bytes)
        if data is not None:
            submission.select_file(image.filename, image.content_type, data)
        submission.submit(client, tenant, **values)
    except AppError as e:
        logging.error(f"Error adding menu item: {e.message}")
        # a URL from a failed attempt is never echoed back into the form
        values["image_url"] = submission.image_url
        return _render_form(request, user, values, error=e.message, status_code=e.status_code)

    response = RedirectResponse(url="/menu", status_code=status.HTTP_303_SEE_OTHER)
    set_flash(response, "Menu item added successfully", "success", "Success")
    return response
