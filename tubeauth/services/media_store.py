"""Media store interface and HTTP upload client."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import httpx
import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MediaAsset:
    """A file that now lives in the media store."""

    url: str
    public_id: str = ""


class MediaStore(Protocol):
    """Uploads a local file and returns where it can be fetched from."""

    async def upload(self, local_path: Optional[str]) -> Optional[MediaAsset]:
        """Return the stored asset, or None when nothing was uploaded."""
        ...


class HttpMediaStore:
    """Client for a Cloudinary-style multipart upload endpoint.

    The local file is a temporary spool of an incoming request and is
    removed once the upload attempt finishes, successful or not.
    """

    def __init__(
        self,
        upload_url: str,
        api_key: str = "",
        timeout_seconds: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.upload_url = upload_url
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def upload(self, local_path: Optional[str]) -> Optional[MediaAsset]:
        """Upload a file to the media service.

        Args:
            local_path: Path of the spooled upload; None or "" uploads nothing

        Returns:
            MediaAsset with the public URL, or None if the upload failed
        """
        if not local_path:
            return None

        path = Path(local_path)
        headers = {"X-Api-Key": self.api_key} if self.api_key else {}

        try:
            content = path.read_bytes()
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(
                    self.upload_url,
                    data={"resource_type": "auto"},
                    files={"file": (path.name, content)},
                    headers=headers,
                )
                response.raise_for_status()
                body = response.json()
        except (OSError, httpx.HTTPError, ValueError) as e:
            logger.warning("media_upload_failed", file=path.name, error=str(e))
            return None
        finally:
            path.unlink(missing_ok=True)

        if not isinstance(body, dict):
            body = {}
        url = body.get("secure_url") or body.get("url")
        if not url:
            logger.warning("media_upload_missing_url", file=path.name)
            return None

        logger.info("media_uploaded", file=path.name, url=url)
        return MediaAsset(url=url, public_id=str(body.get("public_id", "")))
