from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote
import logging

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import load_config
from app.schemas.profile import SessionUser
from app.utils import auth

ACCESS_COOKIE = "sb_access_token"
REFRESH_COOKIE = "sb_refresh_token"


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """
    Validates the Supabase session on every request, refreshes tokens that
    are about to expire, and sends anonymous visitors to the login page.
    """

    SKIP_AUTH_PATHS = {"/login", "/health", "/wake", "/favicon.ico"}
    SKIP_AUTH_PREFIXES = ("/static",)
    REFRESH_WINDOW = 300  # seconds before expiry

    def should_skip_auth(self, request: Request) -> bool:
        path = request.url.path
        if path in self.SKIP_AUTH_PATHS:
            return True
        return any(path.startswith(prefix) for prefix in self.SKIP_AUTH_PREFIXES)

    def get_tokens_from_request(self, request: Request) -> tuple[Optional[str], Optional[str]]:
        refresh_token = request.cookies.get(REFRESH_COOKIE)
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            return auth_header.split(" ", 1)[1], refresh_token
        return request.cookies.get(ACCESS_COOKIE), refresh_token

    def unauthenticated_response(self, request: Request):
        if request.url.path.startswith("/menu/upload-image"):
            return JSONResponse({"status": "error", "message": "Not authenticated"}, status_code=401)

        original_url = request.url.path
        if request.query_params:
            original_url += "?" + str(request.query_params)
        return RedirectResponse(url=f"/login?next={quote(original_url)}", status_code=303)

    def should_refresh(self, user: SessionUser) -> bool:
        if not user.exp:
            return False
        remaining = datetime.fromtimestamp(user.exp, tz=timezone.utc) - datetime.now(tz=timezone.utc)
        return remaining.total_seconds() < self.REFRESH_WINDOW

    def set_token_cookies(self, response, tokens: dict):
        is_secure = not load_config().APP_URL.startswith("http://localhost")
        response.set_cookie(
            key=ACCESS_COOKIE, value=tokens["access_token"],
            httponly=True, secure=is_secure, samesite="lax", max_age=3600
        )
        response.set_cookie(
            key=REFRESH_COOKIE, value=tokens["refresh_token"],
            httponly=True, secure=is_secure, samesite="lax", max_age=86400 * 30
        )

    def _refresh(self, refresh_token: str) -> tuple[Optional[SessionUser], Optional[dict]]:
        tokens = auth.refresh_supabase_token(refresh_token)
        if not tokens:
            return None, None
        user = auth.user_from_payload(auth.decode_supabase_jwt(tokens["access_token"]))
        if not user:
            logging.error("Refreshed token validation failed")
            return None, None
        return user, tokens

    async def dispatch(self, request: Request, call_next):
        request.state.user = None
        if self.should_skip_auth(request):
            return await call_next(request)

        access_token, refresh_token = self.get_tokens_from_request(request)
        if not access_token and not refresh_token:
            return self.unauthenticated_response(request)

        user = None
        new_tokens = None
        if access_token:
            user = auth.user_from_payload(auth.decode_supabase_jwt(access_token))
            if user and refresh_token and self.should_refresh(user):
                logging.info(f"Proactively refreshing token for user {user.id}")
                refreshed_user, new_tokens = self._refresh(refresh_token)
                user = refreshed_user or user

        if not user and refresh_token:
            logging.info("Access token invalid, attempting refresh")
            user, new_tokens = self._refresh(refresh_token)

        if not user:
            logging.warning("No valid authentication found, redirecting to login")
            return self.unauthenticated_response(request)

        request.state.user = user
        response = await call_next(request)

        if new_tokens:
            self.set_token_cookies(response, new_tokens)
        return response
