"""Shared type aliases for converter modules."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

type MimeType = str
type EncoderArguments = Sequence[str]
type MediaFamily = Literal["audio/", "video/", "image/", "*"]

DEFAULT_SOURCE_MIME_TYPE: MimeType = "application/octet-stream"
