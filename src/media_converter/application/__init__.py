"""Application-layer requests, results and ports."""

from __future__ import annotations

from media_converter.application.ports import ConversionStrategy, EncoderRunner
from media_converter.application.requests import ConversionRequest, build_request
from media_converter.application.results import (
    ConversionFailure,
    ConversionOutcome,
    ConvertedArtifact,
)

__all__ = [
    "ConversionFailure",
    "ConversionOutcome",
    "ConversionRequest",
    "ConversionStrategy",
    "ConvertedArtifact",
    "EncoderRunner",
    "build_request",
]
