from typing import Optional
from pydantic import BaseModel, ConfigDict


class SessionUser(BaseModel):
    """Identity taken from a validated Supabase access token."""
    id: str
    email: Optional[str] = None
    exp: Optional[int] = None


class TenantContext(BaseModel):
    """Resolved acting user and the restaurant every query is scoped to."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    restaurant_id: str
    email: Optional[str] = None
