"""Shared conversion-daemon core utilities."""

from __future__ import annotations

from dataclasses import dataclass
from hashlib import sha256

from media_converter.application.requests import build_request
from media_converter.application.results import ConvertedArtifact
from media_converter.naming import safe_upload_filename
from media_converter.router import ConversionRouter


@dataclass(frozen=True)
class UploadOutcome:
    """Converted artifact plus integrity metadata for transports."""

    artifact: ConvertedArtifact
    input_sha256: str
    output_sha256: str


def digest_bytes(data: bytes) -> str:
    """Compute SHA-256 digest for byte payload."""
    return sha256(data).hexdigest()


def normalize_mime_type(value: str | None) -> str | None:
    """Lower-case a mime type and drop parameters; blanks become ``None``."""
    if value is None:
        return None
    normalized = value.split(";", 1)[0].strip().lower()
    return normalized or None


def convert_upload(
    router: ConversionRouter,
    data: bytes,
    target_mime_type: str,
    *,
    source_mime_type: str | None = None,
    filename: str | None = None,
) -> UploadOutcome:
    """Convert uploaded bytes and return input/output digests.

    Raises
    ------
    InvalidInputError
        If the request fields are invalid.
    ConversionError
        If conversion fails.
    """
    request = build_request(
        data,
        target_mime_type,
        source_mime_type=normalize_mime_type(source_mime_type),
        filename=safe_upload_filename(filename),
    )
    artifact = router.convert(request)
    return UploadOutcome(
        artifact=artifact,
        input_sha256=digest_bytes(data),
        output_sha256=digest_bytes(artifact.data),
    )
