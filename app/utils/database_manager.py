"""
Database Manager - Supabase operations for the staff roster, leave requests and menu items.

Every function takes the Supabase client and a resolved TenantContext. Reads
are filtered by the tenant's restaurant_id; writes attach or match it.
"""
import logging
from typing import List, Optional

from app.config import load_config
from app.database.models import TABLES, LeaveStatus
from app.schemas.leave import LeaveCreate, LeaveRequest
from app.schemas.menu import MenuItem, MenuItemCreate
from app.schemas.profile import TenantContext
from app.schemas.staff import StaffForm, StaffMember, StaffOption
from app.utils.cache import cache, tenant_key
from app.utils.exceptions import (
    BackendError,
    FormValidationError,
    LeaveTransitionError,
    RecordNotFoundError,
)

LEAVE_SELECT = '''
    *,
    staff:staff_id (
        first_name,
        last_name,
        position
    )
'''


def _execute(query, action: str):
    try:
        return query.execute()
    except Exception as e:
        logging.error(f"Supabase error while trying to {action}: {e}")
        raise BackendError(action, e)


def _ttl() -> int:
    return load_config().LIST_CACHE_TTL


# --- Roster ---------------------------------------------------------------

def list_staff(client, tenant: TenantContext) -> List[StaffMember]:
    return cache.get_or_set(
        tenant_key("staff", tenant.restaurant_id),
        lambda: _fetch_staff(client, tenant),
        _ttl(),
    )


def _fetch_staff(client, tenant: TenantContext) -> List[StaffMember]:
    response = _execute(
        client.table(TABLES['STAFF']).select("*").eq("restaurant_id", tenant.restaurant_id).order("first_name"),
        "load staff",
    )
    return [StaffMember.model_validate(row) for row in response.data or []]


def list_staff_options(client, tenant: TenantContext) -> List[StaffOption]:
    return [
        StaffOption(id=m.id, first_name=m.first_name, last_name=m.last_name, position=m.position)
        for m in list_staff(client, tenant)
    ]


def get_staff_member(client, tenant: TenantContext, staff_id: str) -> StaffMember:
    response = _execute(
        client.table(TABLES['STAFF']).select("*")
        .eq("id", staff_id).eq("restaurant_id", tenant.restaurant_id).limit(1),
        "load staff member",
    )
    if not response.data:
        raise RecordNotFoundError("Staff member", staff_id)
    return StaffMember.model_validate(response.data[0])


def save_staff_member(client, tenant: TenantContext, form: StaffForm, staff_id: Optional[str] = None) -> StaffMember:
    """Insert a new staff member, or replace the mutable fields of `staff_id`."""
    row = form.to_row()
    if staff_id:
        response = _execute(
            client.table(TABLES['STAFF']).update(row)
            .eq("id", staff_id).eq("restaurant_id", tenant.restaurant_id),
            "update staff member",
        )
        if not response.data:
            raise RecordNotFoundError("Staff member", staff_id)
        logging.info(f"Staff member {staff_id} updated for restaurant {tenant.restaurant_id}")
    else:
        row["restaurant_id"] = tenant.restaurant_id
        response = _execute(client.table(TABLES['STAFF']).insert(row), "add staff member")
        logging.info(f"Staff member added for restaurant {tenant.restaurant_id}")

    # leave rows display staff names, so both lists go stale
    cache.invalidate(
        tenant_key("staff", tenant.restaurant_id),
        tenant_key("leaves", tenant.restaurant_id),
    )
    return StaffMember.model_validate(response.data[0])


def delete_staff_member(client, tenant: TenantContext, staff_id: str) -> None:
    response = _execute(
        client.table(TABLES['STAFF']).delete()
        .eq("id", staff_id).eq("restaurant_id", tenant.restaurant_id),
        "delete staff member",
    )
    cache.invalidate(
        tenant_key("staff", tenant.restaurant_id),
        tenant_key("leaves", tenant.restaurant_id),
    )
    if not response.data:
        raise RecordNotFoundError("Staff member", staff_id)
    logging.info(f"Staff member {staff_id} deleted from restaurant {tenant.restaurant_id}")


# --- Leave requests -------------------------------------------------------

def list_leaves(client, tenant: TenantContext) -> List[LeaveRequest]:
    return cache.get_or_set(
        tenant_key("leaves", tenant.restaurant_id),
        lambda: _fetch_leaves(client, tenant),
        _ttl(),
    )


def _fetch_leaves(client, tenant: TenantContext) -> List[LeaveRequest]:
    response = _execute(
        client.table(TABLES['STAFF_LEAVES']).select(LEAVE_SELECT)
        .eq("restaurant_id", tenant.restaurant_id)
        .order("start_date", desc=True),
        "load leave requests",
    )
    return [LeaveRequest.model_validate(row) for row in response.data or []]


def create_leave(client, tenant: TenantContext, form: LeaveCreate) -> LeaveRequest:
    """Insert a leave request. New requests are always pending."""
    staff = _execute(
        client.table(TABLES['STAFF']).select("id")
        .eq("id", form.staff_id).eq("restaurant_id", tenant.restaurant_id).limit(1),
        "check staff member",
    )
    if not staff.data:
        raise RecordNotFoundError("Staff member", form.staff_id)

    response = _execute(
        client.table(TABLES['STAFF_LEAVES']).insert(form.to_row(tenant.restaurant_id)),
        "add leave request",
    )
    cache.invalidate(tenant_key("leaves", tenant.restaurant_id))
    logging.info(f"Leave request for staff {form.staff_id} submitted in restaurant {tenant.restaurant_id}")
    return LeaveRequest.model_validate(response.data[0])


def update_leave_status(client, tenant: TenantContext, leave_id: str, status: LeaveStatus) -> LeaveRequest:
    """Approve or reject a pending leave request.

    The update only matches rows that are still pending, so of two concurrent
    decisions the second one fails instead of overwriting the first.
    """
    if status not in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
        raise FormValidationError(f"Cannot move a leave request to {status.value}")

    response = _execute(
        client.table(TABLES['STAFF_LEAVES']).update({"status": status.value})
        .eq("id", leave_id)
        .eq("restaurant_id", tenant.restaurant_id)
        .eq("status", LeaveStatus.PENDING.value),
        "update leave status",
    )
    cache.invalidate(tenant_key("leaves", tenant.restaurant_id))

    if not response.data:
        existing = _execute(
            client.table(TABLES['STAFF_LEAVES']).select("id, status")
            .eq("id", leave_id).eq("restaurant_id", tenant.restaurant_id).limit(1),
            "load leave request",
        )
        if not existing.data:
            raise RecordNotFoundError("Leave request", leave_id)
        raise LeaveTransitionError(leave_id)

    logging.info(f"Leave request {leave_id} {status.value} by user {tenant.user_id}")
    return LeaveRequest.model_validate(response.data[0])


# --- Menu -----------------------------------------------------------------

def list_menu_items(client, tenant: TenantContext) -> List[MenuItem]:
    return cache.get_or_set(
        tenant_key("menu", tenant.restaurant_id),
        lambda: _fetch_menu_items(client, tenant),
        _ttl(),
    )


def _fetch_menu_items(client, tenant: TenantContext) -> List[MenuItem]:
    response = _execute(
        client.table(TABLES['MENU_ITEMS']).select("*").eq("restaurant_id", tenant.restaurant_id).order("name"),
        "load menu items",
    )
    return [MenuItem.model_validate(row) for row in response.data or []]


def insert_menu_item(client, tenant: TenantContext, item: MenuItemCreate) -> MenuItem:
    response = _execute(
        client.table(TABLES['MENU_ITEMS']).insert(item.to_row(tenant.restaurant_id)),
        "add menu item",
    )
    cache.invalidate(tenant_key("menu", tenant.restaurant_id))
    logging.info(f"Menu item '{item.name}' added for restaurant {tenant.restaurant_id}")
    return MenuItem.model_validate(response.data[0])
