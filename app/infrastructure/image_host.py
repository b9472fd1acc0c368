"""Image host HTTP client (Cloudinary-compatible signed REST API).

Uploads are fatal to the enclosing write: failures raise ``DependencyException``.
Deletes are best-effort: failures are logged and reported as ``False``.
"""

import asyncio
import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Sequence

import httpx

from app.config import get_settings
from app.core.exceptions import DependencyException
from app.domain.schemas.item import ImageInfo

logger = logging.getLogger(__name__)

THUMBNAIL_TRANSFORMATION = "c_fill,w_200,h_200"


@dataclass(frozen=True)
class ImageFile:
    """An image received from a client, read fully into memory."""
    filename: str
    content_type: str
    content: bytes


class ImageHost(Protocol):
    async def upload(
        self,
        content: bytes,
        mime_type: str,
        original_name: str,
        category: str,
        flight_number: str,
    ) -> ImageInfo:
        ...

    async def delete(self, public_id: str) -> bool:
        ...


def sign_params(params: dict, api_secret: str) -> str:
    """Signature over the alphabetically sorted parameters, as the host expects."""
    payload = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{payload}{api_secret}".encode("utf-8")).hexdigest()


def thumbnail_url(url: str) -> str:
    """Derive a delivery URL with the thumbnail transformation applied."""
    marker = "/upload/"
    if marker not in url:
        return url
    head, tail = url.split(marker, 1)
    return f"{head}{marker}{THUMBNAIL_TRANSFORMATION}/{tail}"


class ImageHostClient:
    """Client for the image hosting service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        folder: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.IMAGE_HOST_URL).rstrip("/")
        self.cloud_name = cloud_name if cloud_name is not None else settings.IMAGE_HOST_CLOUD_NAME
        self.api_key = api_key if api_key is not None else settings.IMAGE_HOST_API_KEY
        self.api_secret = api_secret if api_secret is not None else settings.IMAGE_HOST_API_SECRET
        self.folder = folder if folder is not None else settings.IMAGE_HOST_FOLDER
        self.transport = transport
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def _endpoint(self, action: str) -> str:
        return f"{self.base_url}/{self.cloud_name}/image/{action}"

    def _signed(self, params: dict) -> dict:
        params = {**params, "timestamp": int(time.time())}
        return {**params, "api_key": self.api_key, "signature": sign_params(params, self.api_secret)}

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self.transport)

    async def upload(
        self,
        content: bytes,
        mime_type: str,
        original_name: str,
        category: str,
        flight_number: str,
    ) -> ImageInfo:
        """
        Upload one image into ``<folder>/<category>/<flight_number>``.

        Retries transport errors and 5xx responses with a linear backoff.
        """
        folder = f"{self.folder}/{category}/{flight_number}".strip("/")
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            data = self._signed({"folder": folder})
            try:
                async with self._client(timeout=60) as client:
                    response = await client.post(
                        self._endpoint("upload"),
                        data=data,
                        files={"file": (original_name, content, mime_type)},
                    )
                    response.raise_for_status()
                    body = response.json()
                url = body.get("secure_url") or body["url"]
                logger.info(f"Image uploaded: {body['public_id']} ({original_name}, attempt {attempt})")
                return ImageInfo(
                    public_id=body["public_id"],
                    url=url,
                    thumbnail_url=thumbnail_url(url),
                )
            except httpx.HTTPStatusError as e:
                last_error = e
                logger.warning(
                    f"Image host error (attempt {attempt}/{self.max_retries}): "
                    f"{e.response.status_code} - {e.response.text[:200]}"
                )
                if e.response.status_code < 500 and e.response.status_code != 429:
                    break
            except (httpx.HTTPError, KeyError, ValueError) as e:
                last_error = e
                logger.warning(f"Image host upload failed (attempt {attempt}/{self.max_retries}): {e}")

            if attempt < self.max_retries:
                await asyncio.sleep(self.retry_delay * attempt)

        raise DependencyException(
            "Image upload failed",
            details={"file": original_name, "error": str(last_error)},
        )

    async def delete(self, public_id: str) -> bool:
        """Destroy a hosted image. Never raises."""
        try:
            async with self._client(timeout=30) as client:
                response = await client.post(
                    self._endpoint("destroy"),
                    data=self._signed({"public_id": public_id}),
                )
                response.raise_for_status()
                result = response.json().get("result")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to delete image {public_id}: {e}")
            return False

        if result != "ok":
            logger.warning(f"Image host refused to delete {public_id}: {result}")
            return False
        return True


async def upload_images(
    image_host: ImageHost,
    files: Sequence[ImageFile],
    category: str,
    flight_number: str,
) -> list[ImageInfo]:
    """
    Upload several images in order. If one fails, the ones already uploaded
    are destroyed before the failure is re-raised.
    """
    uploaded: list[ImageInfo] = []
    for image in files:
        try:
            info = await image_host.upload(
                image.content, image.content_type, image.filename, category, flight_number
            )
        except DependencyException:
            await purge_images(image_host, [i.public_id for i in uploaded])
            raise
        uploaded.append(info)
    return uploaded


async def purge_images(image_host: ImageHost, public_ids: Iterable[str]) -> list[str]:
    """Best-effort deletion of several images; returns the ids that could not be deleted."""
    ids = [public_id for public_id in public_ids if public_id]
    if not ids:
        return []
    results = await asyncio.gather(*(image_host.delete(public_id) for public_id in ids))
    failed = [public_id for public_id, ok in zip(ids, results) if not ok]
    if failed:
        logger.warning(f"Image purge left {len(failed)} orphaned image(s) on the host: {failed}")
    return failed
