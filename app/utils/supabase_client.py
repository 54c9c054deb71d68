from functools import lru_cache

from supabase import create_client, Client

from app.config import load_config


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """Service-role client for table access. Tenant scoping is applied by every query."""
    config = load_config()
    return create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_KEY)


@lru_cache(maxsize=1)
def get_auth_client() -> Client:
    """Anon-key client used only for password sign-in and sign-out."""
    config = load_config()
    return create_client(config.SUPABASE_URL, config.SUPABASE_ANON_KEY)
