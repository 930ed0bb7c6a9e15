"""Convert uploaded audio, video and image files between formats."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from media_converter.application.results import (
        ConversionOutcome,
        ConvertedArtifact,
    )
    from media_converter.router import ConversionRouter

__version__ = "0.1.0"


def convert(
    data: bytes,
    target_mime_type: str,
    source_mime_type: str | None = None,
    filename: str | None = None,
    *,
    router: ConversionRouter | None = None,
) -> ConvertedArtifact:
    """Convert an in-memory payload to ``target_mime_type``.

    Parameters
    ----------
    data : bytes
        Source payload.
    target_mime_type : str
        Requested target mime type.
    source_mime_type : str | None, optional
        Declared source mime type.
    filename : str | None, optional
        Original filename.
    router : ConversionRouter | None, optional
        Router overriding the process-wide default.

    Returns
    -------
    ConvertedArtifact
        Output filename, mime type and bytes.
    """
    from .api import convert_bytes as _impl

    return _impl(
        data,
        target_mime_type,
        source_mime_type=source_mime_type,
        filename=filename,
        router=router,
    )


def try_convert(
    data: bytes,
    target_mime_type: str,
    source_mime_type: str | None = None,
    filename: str | None = None,
    *,
    router: ConversionRouter | None = None,
) -> ConversionOutcome:
    """Convert a payload and return the outcome instead of raising."""
    from .api import try_convert_bytes as _impl

    return _impl(
        data,
        target_mime_type,
        source_mime_type=source_mime_type,
        filename=filename,
        router=router,
    )


def convert_file(
    input_path: str | Path,
    target_mime_type: str,
    source_mime_type: str | None = None,
    output_dir: str | Path | None = None,
) -> Path:
    """Convert a local file and return the written artifact path."""
    from .api import convert_file as _impl

    return _impl(
        Path(input_path),
        target_mime_type,
        source_mime_type=source_mime_type,
        output_dir=Path(output_dir) if output_dir is not None else None,
    )


__all__ = ["__version__", "convert", "convert_file", "try_convert"]
