"""Public API wrappers for in-process conversion."""

from __future__ import annotations

import mimetypes
from functools import lru_cache
from pathlib import Path

from media_converter.application.requests import build_request
from media_converter.application.results import (
    ConversionFailure,
    ConversionOutcome,
    ConvertedArtifact,
)
from media_converter.errors import ConversionError, IOFailureError
from media_converter.router import ConversionRouter, create_default_router


@lru_cache(maxsize=1)
def default_router() -> ConversionRouter:
    """Return the process-wide router built from environment settings."""
    return create_default_router()


def guess_mime_type(path: Path) -> str | None:
    """Guess a source mime type from a filename suffix."""
    guessed, _ = mimetypes.guess_type(path.name, strict=False)
    return guessed


def convert_bytes(
    data: bytes,
    target_mime_type: str,
    *,
    source_mime_type: str | None = None,
    filename: str | None = None,
    router: ConversionRouter | None = None,
) -> ConvertedArtifact:
    """Convert an in-memory payload.

    Parameters
    ----------
    data : bytes
        Source payload.
    target_mime_type : str
        Requested target mime type, e.g. ``audio/wav``.
    source_mime_type : str | None, optional
        Declared source mime type; unknown when omitted.
    filename : str | None, optional
        Original filename, used for the encoder input suffix and output name.
    router : ConversionRouter | None, optional
        Router to use instead of :func:`default_router`.

    Returns
    -------
    ConvertedArtifact
        Output filename, mime type and bytes.

    Raises
    ------
    ConversionError
        Subclass describing the failure.
    """
    request = build_request(
        data,
        target_mime_type,
        source_mime_type=source_mime_type,
        filename=filename,
    )
    return (router or default_router()).convert(request)


def try_convert_bytes(
    data: bytes,
    target_mime_type: str,
    *,
    source_mime_type: str | None = None,
    filename: str | None = None,
    router: ConversionRouter | None = None,
) -> ConversionOutcome:
    """Like :func:`convert_bytes`, but returns failures as values."""
    try:
        request = build_request(
            data,
            target_mime_type,
            source_mime_type=source_mime_type,
            filename=filename,
        )
    except ConversionError as exc:
        return ConversionOutcome(failure=ConversionFailure.from_error(exc))
    return (router or default_router()).try_convert(request)


def convert_file(
    input_path: Path,
    target_mime_type: str,
    *,
    source_mime_type: str | None = None,
    output_dir: Path | None = None,
    router: ConversionRouter | None = None,
) -> Path:
    """Convert a local file and write the artifact next to it.

    Parameters
    ----------
    input_path : Path
        File to convert.
    target_mime_type : str
        Requested target mime type.
    source_mime_type : str | None, optional
        Source mime type; guessed from the suffix when omitted.
    output_dir : Path | None, optional
        Destination directory; defaults to the input's directory.
    router : ConversionRouter | None, optional
        Router to use instead of :func:`default_router`.

    Returns
    -------
    Path
        Path of the written artifact.
    """
    input_path = Path(input_path)
    try:
        data = input_path.read_bytes()
    except OSError as exc:
        raise IOFailureError(f"Could not read {input_path}: {exc}") from exc

    artifact = convert_bytes(
        data,
        target_mime_type,
        source_mime_type=source_mime_type or guess_mime_type(input_path),
        filename=input_path.name,
        router=router,
    )
    destination = Path(output_dir) if output_dir is not None else input_path.parent
    output_path = destination / artifact.filename
    try:
        destination.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(artifact.data)
    except OSError as exc:
        raise IOFailureError(f"Could not write {output_path}: {exc}") from exc
    return output_path
