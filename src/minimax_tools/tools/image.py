"""
ImageResolver: turns a user-supplied image reference into a data URL.

Accepted references:
  data:...            passed through untouched
  http(s)://...       downloaded; format taken from the content-type header
  anything else       read from the local filesystem; format taken from
                      the file extension

A single leading "@" is stripped first (chat clients use it to mark paths).
When the format cannot be detected the result is tagged as jpeg.
"""
from __future__ import annotations

import base64
import logging
from pathlib import Path

import httpx

from .client import http_client
from .errors import ImageReadError, NetworkError

_log = logging.getLogger(__name__)

DEFAULT_FORMAT = "jpeg"

# Checked in order; first match wins.
_CONTENT_TYPE_FORMATS: tuple[tuple[str, str], ...] = (
    ("png", "png"),
    ("webp", "webp"),
    ("jpeg", "jpeg"),
    ("jpg", "jpeg"),
)
_EXTENSION_FORMATS: tuple[tuple[str, str], ...] = (
    (".png", "png"),
    (".webp", "webp"),
    (".jpg", "jpeg"),
    (".jpeg", "jpeg"),
)


def format_from_content_type(content_type: str | None) -> str:
    ct = (content_type or "").lower()
    for needle, fmt in _CONTENT_TYPE_FORMATS:
        if needle in ct:
            return fmt
    return DEFAULT_FORMAT


def format_from_path(path: str | Path) -> str:
    lowered = str(path).lower()
    for suffix, fmt in _EXTENSION_FORMATS:
        if lowered.endswith(suffix):
            return fmt
    return DEFAULT_FORMAT


def to_data_url(data: bytes, image_format: str) -> str:
    b64 = base64.standard_b64encode(data).decode("ascii")
    return f"data:image/{image_format};base64,{b64}"


class ImageResolver:
    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def resolve(self, reference: str) -> str:
        """Return *reference* as a ``data:image/<fmt>;base64,...`` URL.

        Raises NetworkError for failed downloads and ImageReadError for
        unreadable local files.
        """
        if reference.startswith("@"):
            reference = reference[1:]

        if reference.startswith("data:"):
            return reference

        if reference.startswith(("http://", "https://")):
            return await self._from_url(reference)

        return self._from_file(reference)

    async def _from_url(self, url: str) -> str:
        _log.debug("downloading image %s", url)
        try:
            async with http_client(self._timeout, self._transport) as client:
                response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise NetworkError(
                f"Failed to download image from URL: {exc}",
                cause=exc,
            ) from exc

        if not response.is_success:
            raise NetworkError(
                "Failed to download image from URL: "
                f"Failed to download image: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        image_format = format_from_content_type(response.headers.get("content-type"))
        return to_data_url(response.content, image_format)

    def _from_file(self, path: str) -> str:
        try:
            resolved = Path(path).expanduser().resolve()
            _log.debug("reading local image %s", resolved)
            data = resolved.read_bytes()
        except (OSError, ValueError, RuntimeError) as exc:
            raise ImageReadError(
                f"Failed to read local image file: {exc}",
                cause=exc,
            ) from exc
        return to_data_url(data, format_from_path(resolved))
