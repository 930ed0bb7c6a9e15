"""In-process image conversion with Pillow."""

from __future__ import annotations

import io
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from media_converter.application.requests import ConversionRequest
from media_converter.application.results import ConvertedArtifact
from media_converter.errors import (
    EncodingFailedError,
    InvalidInputError,
    UnsupportedConversionError,
)
from media_converter.naming import output_filename
from media_converter.strategies.base import freeze, matches_family

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageCapability:
    """Target format produced by Pillow."""

    extension: str
    codec_format: str


IMAGE_TABLE = freeze(
    {
        "image/png": ImageCapability(extension="png", codec_format="PNG"),
        "image/jpeg": ImageCapability(extension="jpg", codec_format="JPEG"),
    }
)

# Modes each encoder can write as is; anything else is converted first.
_WRITABLE_MODES = {
    "PNG": {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"},
    "JPEG": {"1", "L", "RGB", "CMYK"},
}
_GRAYSCALE_MODES = {"LA", "I", "I;16", "I;16B", "I;16L", "F"}


def _decode(data: bytes) -> Image.Image:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.copy()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
    ) as exc:
        raise InvalidInputError(
            "The uploaded file does not appear to be a supported image.",
            diagnostics=str(exc),
        ) from exc


def _writable(img: Image.Image, codec_format: str) -> Image.Image:
    if img.mode in _WRITABLE_MODES[codec_format]:
        return img
    if img.mode in _GRAYSCALE_MODES:
        return img.convert("L")
    if codec_format == "PNG" and "A" in img.getbands():
        return img.convert("RGBA")
    return img.convert("RGB")


def _encode(img: Image.Image, codec_format: str) -> bytes:
    buffer = io.BytesIO()
    try:
        img = _writable(img, codec_format)
        img.save(buffer, format=codec_format)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodingFailedError(
            f"Encoding to {codec_format} failed.", diagnostics=str(exc)
        ) from exc
    return buffer.getvalue()


class PillowImageStrategy:
    """Decode and re-encode ``image/*`` sources without a subprocess."""

    name = "pillow-image"
    source_family = "image/"
    default_base_name = "image"
    is_fallback = False

    @property
    def capabilities(self) -> Mapping[str, ImageCapability]:
        return IMAGE_TABLE

    def supports(self, source_mime_type: str, target_mime_type: str) -> bool:
        return (
            matches_family(source_mime_type, self.source_family)
            and target_mime_type in IMAGE_TABLE
        )

    def convert(self, request: ConversionRequest) -> ConvertedArtifact:
        capability = IMAGE_TABLE.get(request.target_mime_type)
        if capability is None:
            raise UnsupportedConversionError(
                request.source_mime_type, request.target_mime_type
            )
        img = _decode(request.data)
        logger.debug(
            "%s: decoded %sx%s %s image", self.name, img.width, img.height, img.mode
        )
        data = _encode(img, capability.codec_format)
        return ConvertedArtifact(
            filename=output_filename(
                request.filename, self.default_base_name, capability.extension
            ),
            mime_type=request.target_mime_type,
            data=data,
        )
