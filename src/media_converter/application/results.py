"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass, field

from media_converter.errors import ConversionError, ErrorKind


@dataclass(frozen=True)
class ConvertedArtifact:
    """Converted output handed back to the caller."""

    filename: str
    mime_type: str
    data: bytes = field(repr=False)

    @property
    def size_bytes(self) -> int:
        """Length of the converted payload."""
        return len(self.data)


@dataclass(frozen=True)
class ConversionFailure:
    """Typed description of a failed conversion."""

    kind: ErrorKind
    message: str
    diagnostics: str = ""

    @classmethod
    def from_error(cls, exc: ConversionError) -> ConversionFailure:
        """Build a failure record from a raised domain error."""
        return cls(kind=exc.kind, message=exc.message, diagnostics=exc.diagnostics)


@dataclass(frozen=True)
class ConversionOutcome:
    """Either a converted artifact or a failure, never both."""

    artifact: ConvertedArtifact | None = None
    failure: ConversionFailure | None = None

    def __post_init__(self) -> None:
        if (self.artifact is None) == (self.failure is None):
            raise ValueError("ConversionOutcome needs exactly one of artifact or failure")

    @property
    def ok(self) -> bool:
        """Whether the conversion produced an artifact."""
        return self.artifact is not None
