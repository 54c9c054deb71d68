# app/routes/login.py
import logging
from urllib.parse import urlparse

from fastapi import APIRouter, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.config import load_config
from app.middleware.session_auth import ACCESS_COOKIE, REFRESH_COOKIE
from app.utils.flash import get_flash, set_flash
from app.utils.supabase_client import get_auth_client

router = APIRouter(tags=["authentication"])
templates = Jinja2Templates(directory="app/templates")


def get_cookie_settings() -> dict:
    parsed_url = urlparse(load_config().APP_URL)
    domain = parsed_url.hostname if parsed_url.hostname not in ("localhost", "127.0.0.1") else None
    return {
        "httponly": True,
        "secure": parsed_url.scheme == "https",
        "samesite": "lax",
        "domain": domain
    }


def _safe_next(next_url: str) -> str:
    # only same-site paths, never an absolute URL
    if not next_url or not next_url.startswith("/") or next_url.startswith("//"):
        return "/"
    return next_url


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, next: str = "/"):
    return templates.TemplateResponse(
        request, "login.html", {"next": _safe_next(next), "flash": get_flash(request)}
    )


@router.post("/login")
def login_form(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    next: str = Form("/")
):
    try:
        result = get_auth_client().auth.sign_in_with_password({"email": email, "password": password})
        session = result.session
        if session is None:
            raise ValueError("No session returned")
    except Exception as e:
        logging.warning(f"Login failed for {email}: {type(e).__name__}")
        return templates.TemplateResponse(
            request,
            "login.html",
            {"error": "Login failed. Please check your credentials.", "next": _safe_next(next)},
            status_code=status.HTTP_401_UNAUTHORIZED
        )

    settings = get_cookie_settings()
    response = RedirectResponse(url=_safe_next(next), status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(ACCESS_COOKIE, session.access_token, max_age=3600, **settings)
    response.set_cookie(REFRESH_COOKIE, session.refresh_token, max_age=60 * 60 * 24 * 30, **settings)
    logging.info(f"User {email} logged in")
    return response


@router.post("/logout")
def logout(request: Request):
    settings = {k: v for k, v in get_cookie_settings().items() if k != "httponly"}
    response = RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(ACCESS_COOKIE, **settings)
    response.delete_cookie(REFRESH_COOKIE, **settings)
    set_flash(response, "You have been signed out", "info")
    return response
