"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from media_converter.application.requests import ConversionRequest
from media_converter.application.results import ConvertedArtifact
from media_converter.types import EncoderArguments, MediaFamily


class Capability(Protocol):
    """One row of a strategy's capability table."""

    extension: str


@runtime_checkable
class ConversionStrategy(Protocol):
    """Protocol implemented by conversion strategies."""

    name: str
    source_family: MediaFamily
    is_fallback: bool

    @property
    def capabilities(self) -> Mapping[str, Capability]:
        """Read-only mapping of target mime type to capability."""

    def supports(self, source_mime_type: str, target_mime_type: str) -> bool:
        """Check whether this strategy can perform the conversion.

        Parameters
        ----------
        source_mime_type : str
            Declared source mime type.
        target_mime_type : str
            Requested target mime type.

        Returns
        -------
        bool
            ``True`` if the strategy handles this pair.
        """

    def convert(self, request: ConversionRequest) -> ConvertedArtifact:
        """Convert the request payload into the target format."""


class EncoderRunner(Protocol):
    """Run an external encoder over an in-memory payload."""

    def run(
        self,
        encoder_path: str,
        input_bytes: bytes,
        input_extension: str,
        output_extension: str,
        arguments: EncoderArguments,
        timeout: float,
    ) -> bytes:
        """Return the encoder's output file contents."""
