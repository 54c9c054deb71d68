# app/utils/photo.py
import base64
import io
import logging
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from app.config import load_config
from app.utils.exceptions import FormValidationError, ImageUploadError

# raster formats Pillow can decode; other image/* types (svg, heic, ...) pass on MIME alone
VERIFIABLE_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp", "image/bmp"}


def validate_image(filename: str, content_type: Optional[str], data: bytes, max_bytes: Optional[int] = None) -> None:
    """Reject oversized or non-image files before anything touches the network."""
    if max_bytes is None:
        max_bytes = load_config().MAX_IMAGE_BYTES
    if len(data) > max_bytes:
        raise FormValidationError(f"File too large. Maximum file size is {max_bytes // (1024 * 1024)}MB")

    if not (content_type or "").startswith("image/"):
        raise FormValidationError("Invalid file type. Please select an image file")

    if content_type not in VERIFIABLE_TYPES:
        return

    try:
        with Image.open(io.BytesIO(data)) as image:
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        logging.warning(f"Rejected unreadable image {filename}: {e}")
        raise FormValidationError("Invalid file type. Please select an image file")


def encode_image(data: bytes) -> str:
    """Base64 text of the raw file, as the image host expects in `source`."""
    return base64.b64encode(data).decode("ascii")


class ImageHostClient:
    """Uploads images to freeimage.host and returns the hosted URL.

    One request per call. Nothing is retried and nothing is cleaned up on the
    host if a later step fails.
    """

    def __init__(self, api_key: str, upload_url: str, timeout: int = 60):
        self.api_key = api_key
        self.upload_url = upload_url
        self.timeout = timeout

    @classmethod
    def from_config(cls) -> "ImageHostClient":
        config = load_config()
        return cls(config.FREEIMAGE_API_KEY, config.FREEIMAGE_UPLOAD_URL, config.IMAGE_UPLOAD_TIMEOUT)

    def upload(self, data: bytes, filename: str = "image") -> str:
        if not self.api_key:
            logging.error("FREEIMAGE_API_KEY is not set, cannot upload images")
            raise ImageUploadError("Image hosting is not configured")

        # multipart/form-data, every part a plain field
        form = {
            'key': (None, self.api_key),
            'source': (None, encode_image(data)),
            'format': (None, 'json'),
        }

        try:
            response = requests.post(self.upload_url, files=form, timeout=self.timeout)
        except requests.RequestException as e:
            logging.error(f"Image upload request failed for {filename}: {e}")
            raise ImageUploadError("Failed to upload image")

        if not response.ok:
            logging.error(f"Image upload failed: {response.status_code} - {response.text}")
            raise ImageUploadError(f"Upload failed with status: {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            logging.error(f"Image host returned non-JSON body: {response.text[:200]}")
            raise ImageUploadError("Invalid response from image host")

        if not isinstance(payload, dict):
            payload = {}
        image = payload.get("image")
        url = image.get("url") if isinstance(image, dict) else None
        if payload.get("status_code") != 200 or not url:
            logging.error(f"Unexpected image host response: {payload}")
            raise ImageUploadError("Invalid response from image host")

        logging.info(f"Image {filename} uploaded to {url}")
        return url


def get_image_host() -> ImageHostClient:
    """Dependency returning the configured image host."""
    return ImageHostClient.from_config()
