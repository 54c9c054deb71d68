# app/routes/leaves.py
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.database.models import LeaveStatus
from app.schemas.leave import LeaveCreate
from app.utils.auth import get_session_user
from app.utils.database_manager import create_leave, list_leaves, list_staff_options, update_leave_status
from app.utils.exceptions import AppError, FormValidationError, parse_form
from app.utils.flash import get_flash, set_flash
from app.utils.profile_utils import resolve_tenant
from app.utils.supabase_client import get_supabase

router = APIRouter(prefix="/staff/leaves", tags=["leaves"])
templates = Jinja2Templates(directory="app/templates")

STATUS_BADGES = {
    LeaveStatus.PENDING: "badge-pending",
    LeaveStatus.APPROVED: "badge-approved",
    LeaveStatus.REJECTED: "badge-rejected",
}


def _render(request: Request, user, client, error: Optional[str] = None,
            values: Optional[dict] = None, status_code: int = 200):
    leaves, staff_options = [], []
    try:
        tenant = resolve_tenant(client, user)
        leaves = list_leaves(client, tenant)
        staff_options = list_staff_options(client, tenant)
    except AppError as e:
        logging.error(f"Failed to load leave requests: {e.message}")
        error = error or e.message
        status_code = status_code if status_code != 200 else e.status_code

    return templates.TemplateResponse(
        request,
        "leaves/list.html",
        {
            "user": user,
            "leaves": leaves,
            "staff_options": staff_options,
            "status_badges": STATUS_BADGES,
            "today": date.today().isoformat(),
            "form": values or {},
            "dialog_open": values is not None,
            "error": error,
            "flash": get_flash(request),
        },
        status_code=status_code,
    )


def _redirect(message: str, category: str = "success", title: Optional[str] = None) -> RedirectResponse:
    response = RedirectResponse(url="/staff/leaves", status_code=status.HTTP_303_SEE_OTHER)
    set_flash(response, message, category, title)
    return response


@router.get("", response_class=HTMLResponse)
def leaves_page(request: Request, user=Depends(get_session_user), client=Depends(get_supabase)):
    """Leave requests, newest start date first, with the request leave dialog."""
    return _render(request, user, client)


@router.post("")
def request_leave(
    request: Request,
    staff_id: str = Form(""),
    start_date: str = Form(""),
    end_date: str = Form(""),
    reason: str = Form(""),
    user=Depends(get_session_user),
    client=Depends(get_supabase),
):
    values = {"staff_id": staff_id, "start_date": start_date, "end_date": end_date, "reason": reason}
    try:
        tenant = resolve_tenant(client, user)
        if not (staff_id and start_date and end_date):
            raise FormValidationError("Please fill in all required fields")
        create_leave(client, tenant, parse_form(LeaveCreate, values))
    except AppError as e:
        logging.error(f"Error adding leave: {e.message}")
        return _render(request, user, client, error=e.message, values=values, status_code=e.status_code)

    return _redirect("The leave request has been added successfully", title="Leave request submitted")


def _decide(leave_id: str, target: LeaveStatus, user, client) -> RedirectResponse:
    try:
        update_leave_status(client, resolve_tenant(client, user), leave_id, target)
    except AppError as e:
        logging.error(f"Error updating leave status for {leave_id}: {e.message}")
        return _redirect(e.message, "error", e.title)

    return _redirect(f"The leave request has been {target.value}", title=f"Leave {target.value}")


@router.post("/{leave_id}/approved")
def approve_leave(leave_id: str, user=Depends(get_session_user), client=Depends(get_supabase)):
    return _decide(leave_id, LeaveStatus.APPROVED, user, client)


@router.post("/{leave_id}/rejected")
def reject_leave(leave_id: str, user=Depends(get_session_user), client=Depends(get_supabase)):
    return _decide(leave_id, LeaveStatus.REJECTED, user, client)
