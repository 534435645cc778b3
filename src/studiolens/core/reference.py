"""
Reference image handling for studiolens.

All images move through the system as data URIs
(``data:<mime>;base64,<payload>``). This module parses and builds them, loads
reference photos from disk, and keeps the per-role reference lists (model
photos, clothing photos) with their selection state.
"""

import base64
import binascii
import io
import re
import secrets
from collections.abc import Iterator
from dataclasses import dataclass, replace
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from studiolens.core.catalog import MAX_REFERENCE_IMAGES
from studiolens.logging_config import get_logger
from studiolens.utils.exceptions import (
    ImageProcessingError,
    InvalidImageFormatError,
    ValidationError,
)

logger = get_logger(__name__)

# Pillow format name -> MIME type for formats accepted as references.
# MPO is the multi-picture JPEG written by many phone cameras; HEIF needs the
# optional pillow-heif plugin to be identified.
SUPPORTED_FORMATS = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "MPO": "image/jpeg",
    "WEBP": "image/webp",
    "HEIF": "image/heif",
}

_DATA_URL_RE = re.compile(r"^data:(.+);base64,(.+)$")
_MIME_RE = re.compile(r":(.*?);")


@dataclass(frozen=True)
class InlineImage:
    """Base64 image payload as sent in a request part."""

    mime_type: str
    data: str

    def to_part(self) -> dict[str, dict[str, str]]:
        """Render as a Gemini ``inlineData`` content part."""
        return {"inlineData": {"mimeType": self.mime_type, "data": self.data}}


def parse_data_url(data_url: str) -> InlineImage:
    """
    Split a data URI into MIME type and base64 payload.

    Accepts the canonical ``data:<mime>;base64,<payload>`` form. Otherwise,
    a string with exactly one comma is split there; the MIME type is taken
    from a ``:...;`` segment of the header when present, else image/png.

    Raises:
        InvalidImageFormatError: If neither form matches
    """
    match = _DATA_URL_RE.match(data_url)
    if match:
        return InlineImage(mime_type=match.group(1), data=match.group(2))

    pieces = data_url.split(",")
    if len(pieces) == 2:
        mime_match = _MIME_RE.search(pieces[0])
        mime_type = mime_match.group(1) if mime_match else "image/png"
        logger.debug("Parsed non-canonical data URL mime=%s", mime_type)
        return InlineImage(mime_type=mime_type, data=pieces[1])

    raise InvalidImageFormatError()


def create_image_data_url(encoded_image: str, mime_type: str = "image/png") -> str:
    """
    Create a data URL from a base64 encoded image.

    Args:
        encoded_image: Base64 encoded image string
        mime_type: MIME type of the image

    Returns:
        Data URL string
    """
    return f"data:{mime_type};base64,{encoded_image}"


def decode_data_url(data_url: str) -> bytes:
    """
    Return the raw bytes behind a data URI.

    Raises:
        InvalidImageFormatError: If the URI is malformed or the payload is not base64
    """
    inline = parse_data_url(data_url)
    try:
        return base64.b64decode(inline.data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageFormatError() from e


def load_image_from_data_url(data_url: str) -> Image.Image:
    """
    Decode a data URI into a PIL Image.

    Raises:
        InvalidImageFormatError: If the URI is malformed
        ImageProcessingError: If the payload is not a readable image
    """
    raw = decode_data_url(data_url)
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
        return image
    except (UnidentifiedImageError, OSError) as e:
        raise ImageProcessingError(f"Failed to decode image data: {e}") from e


def load_reference_image(image_path: str | Path) -> str:
    """
    Read an image file and return it as a data URI.

    The file is identified with Pillow to reject non-images and unsupported
    formats; the original bytes are embedded unchanged. Multi-picture JPEGs
    (MPO) are sent as image/jpeg.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the format is not one of SUPPORTED_FORMATS
        ImageProcessingError: If the file cannot be read as an image
    """
    path = Path(image_path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    raw = path.read_bytes()
    try:
        from pillow_heif import register_heif_opener

        register_heif_opener()
    except ImportError:
        pass
    try:
        with Image.open(io.BytesIO(raw)) as image:
            fmt = (image.format or "").upper()
            image.verify()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageProcessingError(f"Failed to load image: {e}", image_path=str(path)) from e

    mime_type = SUPPORTED_FORMATS.get(fmt)
    if mime_type is None:
        raise ValidationError(
            f"Unsupported image format: {fmt or 'unknown'}. "
            f"Supported formats: {', '.join(sorted(SUPPORTED_FORMATS))}",
            field="image_format",
        )

    logger.debug("Loaded reference image path=%s format=%s bytes=%d", path, fmt, len(raw))
    return create_image_data_url(base64.b64encode(raw).decode("ascii"), mime_type)


def _new_reference_id() -> str:
    return secrets.token_hex(5)


@dataclass(frozen=True)
class ReferenceImage:
    """A user-supplied photo used for identity or outfit transfer."""

    id: str
    url: str
    selected: bool = True

    @classmethod
    def create(cls, url: str, selected: bool = True) -> "ReferenceImage":
        return cls(id=_new_reference_id(), url=url, selected=selected)


class ReferenceSet:
    """Ordered reference images for one role (model photos or clothing photos).

    Order is insertion order; it determines the order images are sent in.
    """

    def __init__(
        self,
        images: list[ReferenceImage] | None = None,
        max_images: int = MAX_REFERENCE_IMAGES,
    ) -> None:
        self._images: list[ReferenceImage] = list(images or [])
        self.max_images = max_images

    def __iter__(self) -> Iterator[ReferenceImage]:
        return iter(self._images)

    def __len__(self) -> int:
        return len(self._images)

    @property
    def remaining_slots(self) -> int:
        return max(0, self.max_images - len(self._images))

    def add(self, url: str, selected: bool = True) -> ReferenceImage:
        """
        Append a new reference image.

        Raises:
            ValidationError: If the set already holds max_images entries
        """
        if self.remaining_slots == 0:
            raise ValidationError(
                f"You can upload at most {self.max_images} images.",
                field="references",
            )
        ref = ReferenceImage.create(url, selected=selected)
        self._images.append(ref)
        return ref

    def toggle(self, ref_id: str) -> None:
        """Flip the selection of the image with ``ref_id``; unknown ids are ignored."""
        self._images = [
            replace(img, selected=not img.selected) if img.id == ref_id else img
            for img in self._images
        ]

    def remove(self, ref_id: str) -> None:
        """Drop the image with ``ref_id``; unknown ids are ignored."""
        self._images = [img for img in self._images if img.id != ref_id]

    def selected(self) -> list[ReferenceImage]:
        """Selected images in list order."""
        return [img for img in self._images if img.selected]
