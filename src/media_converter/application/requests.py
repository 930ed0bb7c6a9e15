"""Normalized conversion request."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import ValidationError

from media_converter.errors import InvalidInputError
from media_converter.schemas import ConversionRequestConfig


@dataclass(frozen=True)
class ConversionRequest:
    """Normalized conversion request.

    Parameters
    ----------
    data : bytes
        Source payload; treated as opaque bytes.
    source_mime_type : str
        Declared source mime type, ``application/octet-stream`` when unknown.
    target_mime_type : str
        Requested target mime type, lower-cased and non-empty.
    filename : str | None, default=None
        Original upload filename.
    """

    data: bytes = field(repr=False)
    source_mime_type: str
    target_mime_type: str
    filename: str | None = None


def build_request(
    data: bytes,
    target_mime_type: str,
    *,
    source_mime_type: str | None = None,
    filename: str | None = None,
) -> ConversionRequest:
    """Validate raw inputs and build a :class:`ConversionRequest`.

    Raises
    ------
    InvalidInputError
        If the payload is missing or the target mime type is blank.
    """
    try:
        config = ConversionRequestConfig(
            data=data,
            target_mime_type=target_mime_type,
            source_mime_type=source_mime_type,
            filename=filename,
        )
    except ValidationError as exc:
        raise InvalidInputError(f"Invalid conversion request: {exc}") from exc
    return ConversionRequest(
        data=config.data,
        source_mime_type=config.source_mime_type,
        target_mime_type=config.target_mime_type,
        filename=config.filename,
    )
