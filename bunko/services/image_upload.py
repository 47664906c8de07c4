import base64
import logging
import os
from typing import Optional

import requests


logger = logging.getLogger(__name__)

IMGBB_UPLOAD_URL = "https://api.imgbb.com/1/upload"
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}
MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class UploadError(Exception):
    def __init__(self, message, status=502):
        super().__init__(message)
        self.status = status


class ImgbbUploader:
    def __init__(self, api_key: Optional[str], upload_url: str = IMGBB_UPLOAD_URL, timeout: float = 10):
        self.api_key = api_key
        self.upload_url = upload_url
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            config.get("IMGBB_API_KEY"),
            upload_url=config.get("IMGBB_UPLOAD_URL", IMGBB_UPLOAD_URL),
            timeout=config.get("REQUEST_TIMEOUT", 10),
        )

    def upload(self, filename: str, data: bytes) -> str:
        if not self.api_key:
            raise UploadError("Image upload is not configured", status=500)
        ext = os.path.splitext(filename or "")[1].lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise UploadError(f"Unsupported image type: {ext or 'unknown'}", status=400)
        if not data:
            raise UploadError("Empty image file", status=400)
        if len(data) > MAX_UPLOAD_BYTES:
            raise UploadError("Image is larger than 5 MB", status=400)

        try:
            response = requests.post(
                self.upload_url,
                params={"key": self.api_key},
                data={"image": base64.b64encode(data).decode("ascii"), "name": os.path.splitext(filename)[0]},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise UploadError(f"Image upload failed: {exc}") from exc
        if response.status_code != 200:
            raise UploadError(f"Unexpected status code {response.status_code} from image host")
        try:
            url = response.json()["data"]["url"]
        except (ValueError, KeyError, TypeError) as exc:
            raise UploadError("Malformed response from image host") from exc
        logger.info("Uploaded cover image %s", url)
        return url
