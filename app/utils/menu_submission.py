"""
One attempt at adding a menu item, with an optional image attachment.

    IDLE -> FILE_SELECTED -> UPLOADING -> UPLOADED
                 ^               |
                 +---- failure --+

A file only reaches FILE_SELECTED after it passes validate_image(), so bad
files never cause a network call. Progress is not measured; while UPLOADING
the form shows an indeterminate indicator.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from app.schemas.menu import MenuItem, MenuItemCreate
from app.schemas.profile import TenantContext
from app.utils.database_manager import insert_menu_item
from app.utils.exceptions import FormValidationError, ImageUploadError, TenantNotFoundError
from app.utils.photo import validate_image


class UploadState(str, Enum):
    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"


@dataclass
class SelectedFile:
    filename: str
    content_type: Optional[str]
    data: bytes


class MenuItemSubmission:

    def __init__(self, image_host, image_url: str = "", max_bytes: Optional[int] = None):
        self.image_host = image_host
        self.max_bytes = max_bytes
        self.selected_file: Optional[SelectedFile] = None
        self.image_url = (image_url or "").strip()
        self.error: Optional[str] = None
        self.state = UploadState.UPLOADED if self.image_url else UploadState.IDLE

    def select_file(self, filename: str, content_type: Optional[str], data: bytes) -> None:
        """Attach a file. An invalid file leaves the current state untouched."""
        validate_image(filename, content_type, data, self.max_bytes)
        self.selected_file = SelectedFile(filename, content_type, data)
        self.image_url = ""
        self.error = None
        self.state = UploadState.FILE_SELECTED

    def remove_image(self) -> None:
        self.selected_file = None
        self.image_url = ""
        self.error = None
        self.state = UploadState.IDLE

    def upload(self) -> str:
        if self.selected_file is None:
            raise FormValidationError("Please select an image file")

        self.state = UploadState.UPLOADING
        try:
            url = self.image_host.upload(self.selected_file.data, self.selected_file.filename)
        except ImageUploadError as e:
            self.state = UploadState.FILE_SELECTED
            self.error = e.message
            raise

        self.image_url = url
        self.error = None
        self.state = UploadState.UPLOADED
        return url

    def submit(self, client, tenant: Optional[TenantContext], **fields) -> MenuItem:
        """Validate the fields, upload a pending image, then insert the item.

        A failed upload raises before the insert, so a URL from a failed
        attempt can never be stored.
        """
        if tenant is None or not tenant.restaurant_id:
            raise TenantNotFoundError("No restaurant assigned to user")

        try:
            item = MenuItemCreate(**fields, image_url=self.image_url)
        except ValidationError as e:
            raise FormValidationError.from_pydantic(e)

        if self.state == UploadState.FILE_SELECTED:
            logging.info(f"Uploading {self.selected_file.filename} before adding menu item")
            item = item.model_copy(update={"image_url": self.upload()})

        return insert_menu_item(client, tenant, item)
