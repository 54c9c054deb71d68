import logging
from typing import Optional

from app.config import load_config
from app.database.models import TABLES
from app.schemas.profile import SessionUser, TenantContext
from app.utils.cache import cache, tenant_key
from app.utils.exceptions import BackendError, NotAuthenticatedError, TenantNotFoundError


def _fetch_restaurant_id(client, user_id: str) -> Optional[str]:
    try:
        response = client.table(TABLES['PROFILES']).select("restaurant_id").eq("id", user_id).limit(1).execute()
    except Exception as e:
        logging.error(f"Failed to load profile for user {user_id}: {e}")
        raise BackendError("load your profile", e)

    rows = response.data or []
    restaurant_id = rows[0].get("restaurant_id") if rows else None
    return str(restaurant_id) if restaurant_id else None


def resolve_tenant(client, user: Optional[SessionUser]) -> TenantContext:
    """Look up the restaurant linked to the signed-in user.

    Every store adapter takes the returned context, so nothing can be queried
    before this succeeds.
    """
    if user is None or not user.id:
        raise NotAuthenticatedError()

    restaurant_id = cache.get_or_set(
        tenant_key("profile", user.id),
        lambda: _fetch_restaurant_id(client, user.id),
        load_config().LIST_CACHE_TTL,
    )
    if not restaurant_id:
        logging.warning(f"User {user.id} has no restaurant linked to their profile")
        raise TenantNotFoundError()

    return TenantContext(user_id=user.id, restaurant_id=restaurant_id, email=user.email)
