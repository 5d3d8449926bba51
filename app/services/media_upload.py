"""Upload encoded files to Cloudinary and return their durable URL."""

from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import TYPE_CHECKING, Protocol

import httpx

from app.core.errors import ConfigurationError, MediaUploadError

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"


class MediaUploader(Protocol):
    """Accepts a data URI and returns the URL the media host serves it from."""

    async def upload(self, data_uri: str) -> str: ...


def _is_cloudinary_configured(settings: Settings) -> bool:
    if not settings.CLOUDINARY_CLOUD_NAME or not settings.CLOUDINARY_CLOUD_NAME.strip():
        return False
    if not settings.CLOUDINARY_API_KEY or not settings.CLOUDINARY_API_KEY.strip():
        return False
    if settings.CLOUDINARY_API_SECRET is None:
        return False
    secret = settings.CLOUDINARY_API_SECRET.get_secret_value()
    if not secret or not secret.strip():
        return False
    return True


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """
    Cloudinary request signature: SHA-1 of the params sorted by key and joined as
    k=v pairs with '&', followed directly by the API secret.
    """
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] != "")
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


class CloudinaryUploader:
    """MediaUploader backed by Cloudinary's signed image upload endpoint."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def upload(self, data_uri: str) -> str:
        """
        Upload data_uri into CLOUDINARY_FOLDER and return the secure_url.

        Raises ConfigurationError if Cloudinary settings are missing and
        MediaUploadError on transport errors or a non-2xx response.
        """
        settings = self.settings
        if not _is_cloudinary_configured(settings):
            raise ConfigurationError(
                "Cloudinary is not configured; set CLOUDINARY_CLOUD_NAME, "
                "CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET."
            )
        cloud_name = (settings.CLOUDINARY_CLOUD_NAME or "").strip()
        api_key = (settings.CLOUDINARY_API_KEY or "").strip()
        api_secret = settings.CLOUDINARY_API_SECRET.get_secret_value()
        timeout = max(1.0, min(120.0, settings.CLOUDINARY_REQUEST_TIMEOUT_SEC))

        params = {
            "folder": settings.CLOUDINARY_FOLDER,
            "timestamp": str(int(time.time())),
        }
        form = {
            **params,
            "file": data_uri,
            "api_key": api_key,
            "signature": sign_params(params, api_secret),
        }
        url = f"{CLOUDINARY_API_BASE}/{cloud_name}/image/upload"

        async with httpx.AsyncClient() as client:
            try:
                resp = await client.post(url, data=form, timeout=timeout)
            except httpx.TimeoutException as e:
                raise MediaUploadError("Cloudinary upload timed out.") from e
            except httpx.HTTPError as e:
                raise MediaUploadError(f"Cloudinary unreachable: {e!s}") from e

        if resp.status_code == 401:
            raise MediaUploadError("Cloudinary authentication failed (invalid API key or secret).", 401)
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("error", {}).get("message") or json.dumps(resp.json())[:500]
            except Exception:
                detail = resp.text[:500] if resp.text else "Unknown error"
            raise MediaUploadError(f"Cloudinary returned {resp.status_code}: {detail}", resp.status_code)

        secure_url = resp.json().get("secure_url")
        if not secure_url:
            raise MediaUploadError("Cloudinary response missing secure_url.")
        logger.info("Uploaded media to Cloudinary", extra={"folder": settings.CLOUDINARY_FOLDER})
        return secure_url
