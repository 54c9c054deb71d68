from datetime import datetime, timezone
from typing import Optional
import logging

import requests
from fastapi import Request, HTTPException, status
from jose import jwt, jwk
from jose.exceptions import JWTError

from app.config import load_config
from app.schemas.profile import SessionUser

# JWKS cache
_jwks_cache: Optional[dict] = None
_jwks_cache_time: Optional[datetime] = None
JWKS_CACHE_TTL = 300  # seconds


def get_jwks() -> dict:
    """Fetch the project's JWKS, cached for JWKS_CACHE_TTL seconds."""
    global _jwks_cache, _jwks_cache_time

    now = datetime.now()
    if _jwks_cache is None or (_jwks_cache_time and (now - _jwks_cache_time).total_seconds() > JWKS_CACHE_TTL):
        config = load_config()
        try:
            resp = requests.get(f"{config.SUPABASE_URL}/auth/v1/.well-known/jwks.json", timeout=10)
            resp.raise_for_status()
            _jwks_cache = resp.json()
            _jwks_cache_time = now
            logging.info("JWKS cache updated")
        except requests.RequestException as e:
            logging.error(f"Failed to fetch JWKS: {e}")
            if _jwks_cache is None:
                raise

    return _jwks_cache


def decode_supabase_jwt(token: str) -> Optional[dict]:
    """Verify a Supabase access token against the JWKS. Returns the payload or None."""
    expected_alg = load_config().SUPABASE_JWT_ALG
    try:
        headers = jwt.get_unverified_header(token)
        if headers.get("alg") != expected_alg:
            logging.error(f"Unsupported JWT alg: {headers.get('alg')}")
            return None

        keys = get_jwks().get("keys", [])
        key_data = next((k for k in keys if k.get("kid") == headers.get("kid")), None)
        if not key_data:
            logging.error(f"No key found for kid: {headers.get('kid')}")
            return None

        return jwt.decode(
            token,
            jwk.construct(key_data),
            algorithms=[expected_alg],
            options={"verify_aud": False}
        )
    except JWTError as e:
        logging.warning(f"JWT decode error: {e}")
        return None
    except requests.RequestException:
        return None


def refresh_supabase_token(refresh_token: str) -> Optional[dict]:
    """Exchange a refresh token for a new access/refresh pair."""
    config = load_config()
    try:
        response = requests.post(
            f"{config.SUPABASE_URL}/auth/v1/token?grant_type=refresh_token",
            headers={"apikey": config.SUPABASE_ANON_KEY, "Content-Type": "application/json"},
            json={"refresh_token": refresh_token},
            timeout=10
        )
        response.raise_for_status()
        data = response.json()
        return {
            "access_token": data["access_token"],
            "refresh_token": data.get("refresh_token", refresh_token),
            "expires_at": data.get("expires_at")
        }
    except (requests.RequestException, KeyError, ValueError) as e:
        logging.error(f"Token refresh failed: {e}")
        return None


def user_from_payload(payload: Optional[dict]) -> Optional[SessionUser]:
    """Turn a decoded token into a session user, dropping expired tokens."""
    if not payload or not payload.get("sub"):
        return None

    exp = payload.get("exp")
    if exp and datetime.fromtimestamp(exp, tz=timezone.utc) <= datetime.now(tz=timezone.utc):
        logging.warning(f"Token expired for user {payload.get('sub')}")
        return None

    return SessionUser(id=payload["sub"], email=payload.get("email"), exp=exp)


def get_session_user(request: Request) -> SessionUser:
    """Dependency: the user the session middleware authenticated."""
    user = getattr(request.state, "user", None)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return user
