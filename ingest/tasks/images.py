import io
import os
import uuid
from dataclasses import dataclass
from functools import cached_property
from logging import getLogger
from typing import Iterable, Tuple
from urllib.parse import urlparse

import requests
from django.core.files.base import ContentFile
from PIL import Image, UnidentifiedImageError

from mangasync.logging import HarvestLogger
from mangasync.storage import page_storage

from ..exceptions import DecodeError, DownloadError, PersistenceError
from ..utils import shard_storage_name

logger = getLogger(__name__)
structured_logger = HarvestLogger.get_logger(__name__)

#: URL extension -> Pillow format. Anything else is rejected before download.
ACCEPTED_IMAGE_TYPES = {"jpg": "JPEG", "png": "PNG"}

ACCEPTED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/pjpeg", "image/png"}

#: Untyped bodies are left to the decoder
UNTYPED_CONTENT_TYPES = {"", "application/octet-stream"}


@dataclass(frozen=True)
class HostedPage:
    manga_src: str
    page_no: int
    hosted_manga_src: str
    storage_name: str


def image_type(url: str) -> str:
    """
    Return ``"jpg"`` or ``"png"`` from the URL's path, raising DownloadError
    for any other type
    """
    extension = os.path.splitext(urlparse(url).path)[1].lstrip(".").lower()
    if extension not in ACCEPTED_IMAGE_TYPES:
        raise DownloadError(f"Only png and jpg are supported, received {url}")
    return extension


def download_image(client, url: str) -> Image.Image:
    """
    Download and decode a JPEG or PNG image using a pooled client
    """
    extension = image_type(url)

    try:
        resp = client.get(url)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise DownloadError(f"Unable to download {url}: {exc}") from exc

    content_type = (resp.headers.get("Content-Type") or "").split(";")[0]
    content_type = content_type.strip().lower()
    if content_type not in ACCEPTED_CONTENT_TYPES | UNTYPED_CONTENT_TYPES:
        raise DownloadError(f"Unsupported content type {content_type} for {url}")

    try:
        image = Image.open(
            io.BytesIO(resp.content), formats=(ACCEPTED_IMAGE_TYPES[extension],)
        )
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise DecodeError(f"Unable to decode the image from {url}") from exc

    return image


def apply_watermark(
    image: Image.Image, watermark: Image.Image, offset: Tuple[int, int] = (10, 5)
) -> Image.Image:
    """
    Draw ``watermark`` over ``image`` with its top-left corner at ``offset``,
    honouring the watermark's alpha channel. Parts of the watermark falling
    outside the image are clipped. Returns a new RGB image.
    """
    canvas = image.convert("RGBA")
    canvas.alpha_composite(watermark.convert("RGBA"), dest=tuple(offset))
    return canvas.convert("RGB")


def encode_jpeg(image: Image.Image, quality: int = 75) -> bytes:
    buf = io.BytesIO()
    try:
        image.convert("RGB").save(buf, format="JPEG", quality=quality)
    except (OSError, ValueError) as exc:
        raise DecodeError("Unable to encode the image as JPEG") from exc
    return buf.getvalue()


def load_watermark(path: str) -> Image.Image:
    try:
        with Image.open(path, formats=("PNG",)) as watermark:
            return watermark.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise DecodeError(f"Unable to load the watermark image {path}") from exc


class PageImagePipeline:
    """
    Turns a page of a chapter into a watermarked JPEG in sharded storage.

    Each call makes its own network requests through the client pool and
    writes its own file; nothing is retried here; errors propagate to the
    chapter worker, which decides whether the batch survives.
    """

    def __init__(
        self,
        source,
        pool,
        storage,
        watermark_path="watermark.png",
        watermark_offset=(10, 5),
        shard_count=100,
        jpeg_quality=75,
    ):
        self.source = source
        self.pool = pool
        self.storage = storage
        self.watermark_path = watermark_path
        self.watermark_offset = tuple(watermark_offset)
        self.shard_count = shard_count
        self.jpeg_quality = jpeg_quality

    @classmethod
    def from_config(cls, config, source, pool, storage=None):
        if storage is None:
            storage = page_storage(config.storage_root, config.images_base_url)
        return cls(
            source,
            pool,
            storage=storage,
            watermark_path=config.watermark_path,
            watermark_offset=config.watermark_offset,
            shard_count=config.shard_count,
            jpeg_quality=config.jpeg_quality,
        )

    @cached_property
    def watermark(self):
        return load_watermark(self.watermark_path)

    def store(self, data: bytes) -> str:
        """
        Write encoded bytes under a fresh content identifier and return the
        storage name (``<bucket>/<identifier>.jpg``)
        """
        identifier = uuid.uuid4().hex
        name = shard_storage_name(identifier, self.shard_count)
        try:
            saved_name = self.storage.save(name, ContentFile(data))
        except OSError as exc:
            raise PersistenceError(f"Unable to write {name} to storage") from exc
        logger.info("Written %s to storage", saved_name)
        return saved_name

    def process_page(self, page) -> HostedPage:
        manga_src = self.source.resolve_page_image(page)

        with self.pool.client() as client:
            image = download_image(client, manga_src)

        composed = apply_watermark(image, self.watermark, self.watermark_offset)
        storage_name = self.store(encode_jpeg(composed, self.jpeg_quality))

        structured_logger.debug(
            "Page image stored.",
            event_code="page_image_stored",
            page=page,
            storage_name=storage_name,
        )

        return HostedPage(
            manga_src=manga_src,
            page_no=page.page_no,
            hosted_manga_src=self.storage.url(storage_name),
            storage_name=storage_name,
        )

    def host_image(self, url: str) -> str:
        """
        Store an image as-is (re-encoded as JPEG, no watermark) and return
        its servable URL. Used for category covers.
        """
        with self.pool.client() as client:
            image = download_image(client, url)
        storage_name = self.store(encode_jpeg(image, self.jpeg_quality))
        return self.storage.url(storage_name)

    def discard(self, storage_names: Iterable[str]) -> None:
        """
        Delete files written for a batch that was thrown away. Failures are
        logged and otherwise ignored so they don't hide the batch's own error.
        """
        for name in storage_names:
            try:
                self.storage.delete(name)
            except OSError:
                logger.exception("Unable to delete orphaned page image %s", name)
