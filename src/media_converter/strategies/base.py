"""Shared building blocks for conversion strategies."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from media_converter.application.ports import EncoderRunner
from media_converter.application.requests import ConversionRequest
from media_converter.application.results import ConvertedArtifact
from media_converter.errors import UnsupportedConversionError
from media_converter.infrastructure.process import DEFAULT_TIMEOUT_SECONDS
from media_converter.naming import input_extension_hint, output_filename
from media_converter.types import MediaFamily

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncoderCapability:
    """Target format produced by the external encoder."""

    extension: str
    arguments: tuple[str, ...]


def freeze[T](table: Mapping[str, T]) -> Mapping[str, T]:
    """Return a read-only view of a capability table."""
    return MappingProxyType(dict(table))


def matches_family(source_mime_type: str, family: MediaFamily) -> bool:
    """Check whether a source mime type belongs to a media family."""
    return family == "*" or source_mime_type.startswith(family)


class EncoderStrategy:
    """Strategy that delegates to an external encoder through a runner.

    Subclasses provide ``name``, ``source_family``, ``default_base_name`` and
    ``table``.
    """

    name: str
    source_family: MediaFamily
    default_base_name: str
    table: Mapping[str, EncoderCapability]
    is_fallback = False

    def __init__(
        self,
        runner: EncoderRunner,
        encoder_path: str = "ffmpeg",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._runner = runner
        self.encoder_path = encoder_path
        self.timeout = timeout

    @property
    def capabilities(self) -> Mapping[str, EncoderCapability]:
        return self.table

    def supports(self, source_mime_type: str, target_mime_type: str) -> bool:
        return (
            matches_family(source_mime_type, self.source_family)
            and target_mime_type in self.table
        )

    def convert(self, request: ConversionRequest) -> ConvertedArtifact:
        capability = self.table.get(request.target_mime_type)
        if capability is None:
            raise UnsupportedConversionError(
                request.source_mime_type, request.target_mime_type
            )
        logger.debug(
            "%s: %s -> %s via %s",
            self.name,
            request.source_mime_type,
            request.target_mime_type,
            self.encoder_path,
        )
        data = self._runner.run(
            self.encoder_path,
            request.data,
            input_extension_hint(request.filename),
            capability.extension,
            capability.arguments,
            self.timeout,
        )
        return ConvertedArtifact(
            filename=output_filename(
                request.filename, self.default_base_name, capability.extension
            ),
            mime_type=request.target_mime_type,
            data=data,
        )
