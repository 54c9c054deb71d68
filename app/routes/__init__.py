# app/routes/__init__.py

from app.routes import (
    health,
    leaves,
    login,
    menu,
    staff,
)
