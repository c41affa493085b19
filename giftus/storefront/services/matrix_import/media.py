"""
Images for imported products.

An .xlsx file is a ZIP container; pictures pasted into the sheet end up as
``xl/media/imageN.<ext>`` entries. The price list does not anchor pictures to
cells reliably, so entries are handed out one per imported product in name
order, starting over from the first entry when they run out.
"""
from __future__ import annotations

import io
import logging
import mimetypes
import posixpath
import zipfile
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Union
from urllib.parse import urlparse

import requests
from django.conf import settings
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

MEDIA_PREFIX = "xl/media/"
DEFAULT_EXTENSION = "jpg"
MAX_EXTENSION_LENGTH = 4

PIL_FORMAT_EXTENSIONS = {
    "JPEG": "jpg",
    "PNG": "png",
    "GIF": "gif",
    "BMP": "bmp",
    "WEBP": "webp",
    "TIFF": "tiff",
}


@dataclass
class ImageBlob:
    """Raw image bytes plus the extension they should be stored with."""

    name: str
    content: bytes
    extension: str


def sniff_extension(content: bytes) -> str:
    """Detect image type by content via Pillow; unknown data is treated as JPEG."""
    try:
        with Image.open(io.BytesIO(content)) as image:
            return PIL_FORMAT_EXTENSIONS.get(image.format or "", DEFAULT_EXTENSION)
    except (UnidentifiedImageError, OSError, ValueError):
        return DEFAULT_EXTENSION


def detect_extension(name: str, content: bytes) -> str:
    """
    Use the entry's own extension when it looks like one (at most 4 chars),
    otherwise look at the bytes.
    """
    extension = posixpath.splitext(name or "")[1].lstrip(".").lower()
    if extension and len(extension) <= MAX_EXTENSION_LENGTH:
        return extension
    return sniff_extension(content)


class EmbeddedMediaQueue:
    """
    Round-robin reader over ``xl/media/`` entries of one uploaded workbook.

    The archive is read once, on first use; later calls reuse the cached bytes.
    """

    def __init__(self, source: Union[str, BinaryIO]):
        self._source = source
        self._entries: Optional[List[ImageBlob]] = None
        self._position = 0

    def _load(self) -> List[ImageBlob]:
        if hasattr(self._source, "seek"):
            self._source.seek(0)
        entries: List[ImageBlob] = []
        with zipfile.ZipFile(self._source) as archive:
            infos = [
                info
                for info in archive.infolist()
                if info.filename.lower().startswith(MEDIA_PREFIX)
                and not info.is_dir()
                and info.file_size > 0
            ]
            infos.sort(key=lambda info: posixpath.basename(info.filename))
            for info in infos:
                content = archive.read(info)
                name = posixpath.basename(info.filename)
                entries.append(ImageBlob(name=name, content=content, extension=detect_extension(name, content)))
        logger.debug(f"Workbook contains {len(entries)} embedded images")
        return entries

    @property
    def entries(self) -> List[ImageBlob]:
        if self._entries is None:
            try:
                self._entries = self._load()
            except (zipfile.BadZipFile, OSError) as exc:
                logger.warning(f"Cannot read embedded media: {exc}")
                self._entries = []
        return self._entries

    def __len__(self) -> int:
        return len(self.entries)

    def next(self) -> Optional[ImageBlob]:
        """Next image in name order, wrapping to the first one when exhausted."""
        entries = self.entries
        if not entries:
            return None
        if self._position >= len(entries):
            self._position = 0
        blob = entries[self._position]
        self._position += 1
        return blob


def is_image_url(value: str) -> bool:
    scheme = urlparse((value or "").strip()).scheme.lower()
    return scheme in ("http", "https")


def verify_image(content: bytes) -> str:
    """
    Check that the bytes really are a picture and return their extension.

    Raises ``ValueError`` for anything Pillow cannot identify.
    """
    try:
        with Image.open(io.BytesIO(content)) as image:
            image_format = image.format or ""
            image.verify()
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as exc:
        raise ValueError(f"Downloaded file is not an image: {exc}") from exc
    return PIL_FORMAT_EXTENSIONS.get(image_format, DEFAULT_EXTENSION)


def download_image(url: str, timeout: Optional[int] = None) -> ImageBlob:
    """
    Fetch an image referenced by URL in the image cell.

    Raises ``requests.RequestException`` on network or HTTP errors and
    ``ValueError`` when the response is not an image (e.g. a share page
    returned as HTML).
    """
    if timeout is None:
        timeout = getattr(settings, "BULK_IMPORT_IMAGE_TIMEOUT", 15)
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    content = response.content
    if not content:
        raise requests.RequestException(f"Empty response body for {url}")

    content_type = (response.headers.get("Content-Type") or "").split(";")[0].strip().lower()
    if content_type and not content_type.startswith("image/"):
        raise ValueError(f"Unexpected content type {content_type!r} for {url}")
    sniffed = verify_image(content)

    name = posixpath.basename(urlparse(url).path) or "image"
    extension = posixpath.splitext(name)[1].lstrip(".").lower()
    if not extension or len(extension) > MAX_EXTENSION_LENGTH:
        guessed = mimetypes.guess_extension(content_type) if content_type else None
        if guessed:
            extension = guessed.lstrip(".").replace("jpeg", "jpg").replace("jpe", "jpg")
        else:
            extension = sniffed
    return ImageBlob(name=name, content=content, extension=extension)
