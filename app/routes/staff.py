# app/routes/staff.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.database.models import StaffPosition, StaffShift
from app.schemas.staff import StaffForm
from app.utils.auth import get_session_user
from app.utils.database_manager import delete_staff_member, get_staff_member, list_staff, save_staff_member
from app.utils.exceptions import AppError, parse_form
from app.utils.flash import get_flash, set_flash
from app.utils.profile_utils import resolve_tenant
from app.utils.supabase_client import get_supabase

router = APIRouter(prefix="/staff", tags=["staff"])
templates = Jinja2Templates(directory="app/templates")


def _form_context(values: Optional[dict] = None) -> dict:
    return {
        "positions": [p.value for p in StaffPosition],
        "shifts": [s.value for s in StaffShift],
        "form": values or {"position": StaffPosition.WAITER.value, "shift": StaffShift.MORNING.value},
    }


def _render_list(request: Request, user, client, error: Optional[str] = None,
                 values: Optional[dict] = None, status_code: int = 200):
    staff = []
    try:
        staff = list_staff(client, resolve_tenant(client, user))
    except AppError as e:
        logging.error(f"Failed to load staff: {e.message}")
        error = error or e.message
        status_code = status_code if status_code != 200 else e.status_code

    return templates.TemplateResponse(
        request,
        "staff/list.html",
        {
            "user": user,
            "staff": staff,
            "error": error,
            "dialog_open": values is not None,
            "flash": get_flash(request),
            **_form_context(values),
        },
        status_code=status_code,
    )


def _render_edit(request: Request, user, staff_id: str, values: dict,
                 error: Optional[str] = None, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "staff/edit.html",
        {
            "user": user,
            "staff_id": staff_id,
            "error": error,
            "flash": get_flash(request),
            **_form_context(values),
        },
        status_code=status_code,
    )


def _redirect(message: str, category: str = "success", title: Optional[str] = None) -> RedirectResponse:
    response = RedirectResponse(url="/staff", status_code=status.HTTP_303_SEE_OTHER)
    set_flash(response, message, category, title)
    return response


@router.get("", response_class=HTMLResponse)
def staff_page(request: Request, user=Depends(get_session_user), client=Depends(get_supabase)):
    """Staff roster with the add staff dialog."""
    return _render_list(request, user, client)


@router.post("")
def create_staff(
    request: Request,
    first_name: str = Form(""),
    last_name: str = Form(""),
    position: str = Form(""),
    shift: str = Form(""),
    phone: str = Form(""),
    email: str = Form(""),
    user=Depends(get_session_user),
    client=Depends(get_supabase),
):
    values = {
        "first_name": first_name, "last_name": last_name, "position": position,
        "shift": shift, "phone": phone, "email": email,
    }
    try:
        tenant = resolve_tenant(client, user)
        save_staff_member(client, tenant, parse_form(StaffForm, values))
    except AppError as e:
        logging.error(f"Error adding staff member: {e.message}")
        return _render_list(request, user, client, error=e.message, values=values, status_code=e.status_code)

    return _redirect("Staff member added successfully")


@router.get("/{staff_id}/edit", response_class=HTMLResponse)
def edit_staff_page(staff_id: str, request: Request, user=Depends(get_session_user), client=Depends(get_supabase)):
    try:
        member = get_staff_member(client, resolve_tenant(client, user), staff_id)
    except AppError as e:
        logging.error(f"Error loading staff member {staff_id}: {e.message}")
        return _redirect(e.message, "error", e.title)

    values = {
        "first_name": member.first_name,
        "last_name": member.last_name,
        "position": member.position or StaffPosition.WAITER.value,
        "shift": member.shift or StaffShift.MORNING.value,
        "phone": member.phone or "",
        "email": member.email or "",
    }
    return _render_edit(request, user, staff_id, values)


@router.post("/{staff_id}")
def update_staff(
    staff_id: str,
    request: Request,
    first_name: str = Form(""),
    last_name: str = Form(""),
    position: str = Form(""),
    shift: str = Form(""),
    phone: str = Form(""),
    email: str = Form(""),
    user=Depends(get_session_user),
    client=Depends(get_supabase),
):
    values = {
        "first_name": first_name, "last_name": last_name, "position": position,
        "shift": shift, "phone": phone, "email": email,
    }
    try:
        tenant = resolve_tenant(client, user)
        save_staff_member(client, tenant, parse_form(StaffForm, values), staff_id=staff_id)
    except AppError as e:
        logging.error(f"Error updating staff member {staff_id}: {e.message}")
        return _render_edit(request, user, staff_id, values, error=e.message, status_code=e.status_code)

    return _redirect("Staff member updated successfully")


@router.post("/{staff_id}/delete")
def delete_staff(staff_id: str, user=Depends(get_session_user), client=Depends(get_supabase)):
    try:
        delete_staff_member(client, resolve_tenant(client, user), staff_id)
    except AppError as e:
        logging.error(f"Error deleting staff member {staff_id}: {e.message}")
        return _redirect(e.message, "error", e.title)

    return _redirect("Staff member deleted successfully")
