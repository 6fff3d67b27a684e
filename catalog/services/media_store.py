"""
Media host client.

Uploads product images to Cloudinary through its signed REST API and deletes
them again by public id. Requests are signed with the Cloudinary SDK, while
the I/O goes through one httpx.AsyncClient shared for the lifetime of the
store so it can be awaited. Every call has a timeout and transient failures
(transport errors, 5xx) are retried with exponential backoff.
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

import httpx
from cloudinary.utils import api_sign_request, now

from catalog.config import Settings
from catalog.exceptions import MediaError

logger = logging.getLogger(__name__)


class MediaStore(Protocol):
    async def upload(self, blob: bytes, folder: str) -> str: ...

    async def delete(self, key: str) -> None: ...


def media_key_from_url(url: str) -> str:
    """Derive the delete key from a media URL: last path segment without extension."""
    segment = url.rstrip("/").rsplit("/", 1)[-1]
    if "." in segment:
        segment = segment.rsplit(".", 1)[0]
    return segment


class CloudinaryMediaStore:
    """Cloudinary image upload/destroy over httpx."""

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        *,
        api_base: str = "https://api.cloudinary.com/v1_1",
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_backoff: float = 0.5,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            cloud_name: Cloudinary cloud name
            api_key: Cloudinary API key
            api_secret: Cloudinary API secret, used only for signing
            api_base: API root, overridable for tests
            timeout: Per-request timeout in seconds
            max_retries: Extra attempts after a transient failure
            retry_backoff: Base delay in seconds, doubled on each retry
            client: Pre-built client (tests inject one with a mock transport)
        """
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._api_base = api_base.rstrip("/")
        self._max_retries = max_retries
        self._retry_backoff = retry_backoff
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudinaryMediaStore":
        return cls(
            settings.cloudinary_cloud_name,
            settings.cloudinary_api_key,
            settings.cloudinary_api_secret,
            api_base=settings.cloudinary_api_base,
            timeout=settings.media_timeout_seconds,
            max_retries=settings.media_max_retries,
            retry_backoff=settings.media_retry_backoff_seconds,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def sign(self, params: Dict[str, Any]) -> str:
        """SHA-1 signature over the sorted request params plus the API secret."""
        return api_sign_request(params, self._api_secret)

    def _signed(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params = dict(params, timestamp=now())
        return dict(params, signature=self.sign(params), api_key=self._api_key)

    async def upload(self, blob: bytes, folder: str) -> str:
        """Upload one image and return its secure URL."""
        data = self._signed({"folder": folder})
        payload = await self._post("upload", data, files={"file": ("upload", blob)})
        url = payload.get("secure_url")
        if not url:
            raise MediaError("Media host returned no URL for upload")
        logger.info("Uploaded media %s", payload.get("public_id", url))
        return url

    async def delete(self, key: str) -> None:
        """Destroy the image whose public id is ``key``."""
        data = self._signed({"public_id": key})
        payload = await self._post("destroy", data)
        if payload.get("result") != "ok":
            logger.warning("Media host reported %r when deleting %s", payload.get("result"), key)
        else:
            logger.info("Deleted media %s", key)

    async def _post(self, action: str, data: Dict[str, Any], files=None) -> Dict[str, Any]:
        url = f"{self._api_base}/{self._cloud_name}/image/{action}"
        attempt = 0
        while True:
            try:
                response = await self._client.post(url, data=data, files=files)
            except httpx.TransportError as exc:
                reason = f"{type(exc).__name__}: {exc}"
            else:
                if response.status_code < 500:
                    return self._parse(action, response)
                reason = f"HTTP {response.status_code}"

            if attempt >= self._max_retries:
                raise MediaError(f"Media {action} failed after {attempt + 1} attempts ({reason})")

            delay = self._retry_backoff * 2 ** attempt
            logger.warning(
                "Media %s failed (%s), retrying in %.1fs (attempt %d/%d)",
                action, reason, delay, attempt + 1, self._max_retries,
            )
            await asyncio.sleep(delay)
            attempt += 1

    @staticmethod
    def _parse(action: str, response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            raise MediaError(f"Media {action} returned a non-JSON response (HTTP {response.status_code})")

        if response.is_error:
            error = payload.get("error") or {}
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise MediaError(f"Media {action} rejected (HTTP {response.status_code}): {message}")
        return payload
