# app/utils/flash.py
import json
from typing import Optional, Dict, Any, Union

from fastapi import Request, Response
from starlette.responses import Response as StarletteResponse

FLASH_COOKIE = "flash"


def set_flash(
    response: Union[Response, StarletteResponse],
    message: str,
    category: str = "info",
    title: Optional[str] = None,
) -> None:
    """Queue a one-shot notification for the next page the browser loads."""
    flash_data = {"message": message, "category": category}
    if title:
        flash_data["title"] = title
    response.set_cookie(
        key=FLASH_COOKIE,
        value=json.dumps(flash_data),
        httponly=True,
        max_age=30,
        samesite="lax",
    )


def get_flash(request: Request) -> Optional[Dict[str, Any]]:
    """Read the pending notification and mark it for clearing."""
    flash_cookie = request.cookies.get(FLASH_COOKIE)
    if not flash_cookie:
        return None

    request.scope["flash_to_clear"] = True
    try:
        flash_data = json.loads(flash_cookie)
    except ValueError:
        return None
    return flash_data if isinstance(flash_data, dict) else None


class FlashMiddleware:
    """Clears the flash cookie on the response that displayed it."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        scope["flash_to_clear"] = False

        async def send_wrapper(message):
            if message["type"] == "http.response.start" and scope.get("flash_to_clear"):
                headers = list(message.get("headers", []))
                already_set = any(
                    name.lower() == b"set-cookie" and value.startswith(f"{FLASH_COOKIE}=".encode())
                    for name, value in headers
                )
                if not already_set:
                    headers.append(
                        (b"set-cookie", f"{FLASH_COOKIE}=; Path=/; Max-Age=0; HttpOnly; SameSite=lax".encode())
                    )
                message["headers"] = headers

            await send(message)

        await self.app(scope, receive, send_wrapper)
