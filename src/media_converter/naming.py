"""Filename and extension helpers shared by all strategies."""

from __future__ import annotations

from pathlib import PurePosixPath

PLACEHOLDER_EXTENSION = "dat"
CONVERTED_SUFFIX = "_converted"


def extension_of(filename: str) -> str:
    """Return the text after the last ``.``, or ``""`` when there is none.

    A trailing dot (``"name."``) also yields ``""``.
    """
    dot = filename.rfind(".")
    if 0 <= dot < len(filename) - 1:
        return filename[dot + 1 :]
    return ""


def input_extension_hint(filename: str | None) -> str:
    """Extension used for the encoder's input scratch file."""
    ext = extension_of(filename or "")
    return ext or PLACEHOLDER_EXTENSION


def strip_extension(filename: str) -> str:
    """Drop the last extension segment; dotfiles keep their name."""
    dot = filename.rfind(".")
    if dot > 0:
        return filename[:dot]
    return filename


def output_filename(original: str | None, default_base: str, extension: str) -> str:
    """Build ``<base>_converted.<extension>`` for a converted artifact.

    Parameters
    ----------
    original : str | None
        Filename supplied with the upload.
    default_base : str
        Base name used when ``original`` is absent or blank.
    extension : str
        Extension mapped from the target mime type, without the dot.

    Returns
    -------
    str
        Output filename. The result depends only on the arguments.
    """
    name = original if original and original.strip() else default_base
    return f"{strip_extension(name)}{CONVERTED_SUFFIX}.{extension}"


def safe_upload_filename(filename: str | None) -> str | None:
    """Return the basename of an uploaded filename, or ``None`` if unusable."""
    if filename is None:
        return None
    raw = filename.strip()
    if not raw:
        return None
    # Normalize Windows-style separators before basename extraction.
    candidate = PurePosixPath(raw.replace("\\", "/")).name
    if candidate in {"", ".", ".."}:
        return None
    return candidate
