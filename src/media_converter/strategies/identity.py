"""Passthrough fallback that relabels bytes without converting them."""

from __future__ import annotations

import mimetypes
from collections.abc import Mapping
from types import MappingProxyType

from media_converter.application.requests import ConversionRequest
from media_converter.application.results import ConvertedArtifact
from media_converter.naming import output_filename

PASSTHROUGH_EXTENSION = "bin"


def guess_extension(mime_type: str) -> str:
    """Best-effort extension for a mime type, ``bin`` when unknown."""
    guessed = mimetypes.guess_extension(mime_type, strict=False)
    if not guessed:
        return PASSTHROUGH_EXTENSION
    return guessed.lstrip(".")


class PassthroughStrategy:
    """Return the input bytes unchanged under the requested mime label.

    Supports every pair, so a router only accepts it as the last entry.
    """

    name = "passthrough"
    source_family = "*"
    default_base_name = "file"
    is_fallback = True

    def __init__(self, extensions: Mapping[str, str] | None = None) -> None:
        self._extensions = MappingProxyType(dict(extensions or {}))

    @property
    def capabilities(self) -> Mapping[str, object]:
        return MappingProxyType({})

    def supports(self, source_mime_type: str, target_mime_type: str) -> bool:
        del source_mime_type, target_mime_type
        return True

    def convert(self, request: ConversionRequest) -> ConvertedArtifact:
        extension = self._extensions.get(request.target_mime_type) or guess_extension(
            request.target_mime_type
        )
        return ConvertedArtifact(
            filename=output_filename(request.filename, self.default_base_name, extension),
            mime_type=request.target_mime_type,
            data=request.data,
        )
