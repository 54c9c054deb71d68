"""
Application errors raised by the store adapters and the menu submission flow.

Routes catch AppError at the point of the triggering action, log it and turn
it into a flash notification or a re-rendered form. Nothing here is retried.
"""
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)


class AppError(Exception):
    """Base class. `message` is safe to show to the user."""

    title = "Error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotAuthenticatedError(AppError):
    title = "Not signed in"
    status_code = 401

    def __init__(self, message: str = "No user found"):
        super().__init__(message)


class TenantNotFoundError(AppError):
    title = "No restaurant"
    status_code = 403

    def __init__(self, message: str = "No restaurant found for user"):
        super().__init__(message)


class BackendError(AppError):
    """A Supabase query or mutation failed."""

    status_code = 502

    def __init__(self, action: str, cause: Optional[Exception] = None):
        super().__init__(f"Failed to {action}. Please try again.")
        self.action = action
        self.cause = cause


class RecordNotFoundError(AppError):
    title = "Not found"
    status_code = 404

    def __init__(self, entity: str, record_id: Optional[str] = None):
        if record_id is not None:
            message = f"{entity} {record_id} not found"
        else:
            message = f"{entity} not found"
        super().__init__(message)
        self.entity = entity
        self.record_id = record_id


class LeaveTransitionError(AppError):
    """The leave request is no longer pending, someone else decided it first."""

    title = "Already decided"
    status_code = 409

    def __init__(self, leave_id: str):
        super().__init__(f"Leave request {leave_id} is no longer pending")
        self.leave_id = leave_id


class FormValidationError(AppError):
    title = "Invalid input"

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "FormValidationError":
        """Collapse a pydantic error into one readable line."""
        parts = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error.get("loc", ()))
            msg = error.get("msg", "invalid value")
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, "):]
            parts.append(f"{field}: {msg}" if field else msg)
        return cls("; ".join(parts) or "Invalid input")


class ImageUploadError(AppError):
    title = "Upload failed"
    status_code = 502


def parse_form(model: Type[M], data: dict) -> M:
    """Build a schema from submitted form values, raising FormValidationError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise FormValidationError.from_pydantic(e)
