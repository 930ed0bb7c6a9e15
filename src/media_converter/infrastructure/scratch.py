"""Uniquely named scratch files with guaranteed cleanup."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from media_converter.errors import IOFailureError

logger = logging.getLogger(__name__)

INPUT_PREFIX = "upload_"
OUTPUT_PREFIX = "converted_"


def discard(path: Path) -> None:
    """Delete ``path`` if it exists; failures are logged, never raised."""
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("could not delete scratch file %s: %s", path, exc)


@contextmanager
def scratch_file(
    prefix: str,
    extension: str,
    *,
    directory: Path | None = None,
) -> Iterator[Path]:
    """Create an empty scratch file and delete it when the block exits.

    Parameters
    ----------
    prefix : str
        Filename prefix, e.g. ``upload_``.
    extension : str
        Extension without the dot; lets the encoder infer the container.
    directory : Path | None, optional
        Parent directory. Defaults to the system temp directory.

    Yields
    ------
    Path
        Absolute path of the scratch file, exclusively owned by the caller.

    Raises
    ------
    IOFailureError
        If the file cannot be created.
    """
    try:
        fd, raw_path = tempfile.mkstemp(
            prefix=prefix,
            suffix=f".{extension}",
            dir=str(directory) if directory is not None else None,
        )
    except OSError as exc:
        raise IOFailureError(f"Could not create scratch file: {exc}") from exc
    os.close(fd)
    path = Path(raw_path).resolve()
    try:
        yield path
    finally:
        discard(path)


def write_scratch(path: Path, data: bytes) -> None:
    """Write ``data`` to a scratch file, mapping OS errors to the domain."""
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise IOFailureError(f"Could not write scratch file {path.name}: {exc}") from exc


def read_scratch(path: Path) -> bytes:
    """Read a scratch file fully into memory."""
    try:
        return path.read_bytes()
    except OSError as exc:
        raise IOFailureError(f"Could not read scratch file {path.name}: {exc}") from exc
