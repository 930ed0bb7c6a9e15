"""Domain errors raised by the conversion pipeline."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Enumerated failure categories surfaced to callers."""

    UNSUPPORTED_CONVERSION = "unsupported_conversion"
    INVALID_INPUT = "invalid_input"
    TIMEOUT = "timeout"
    ENCODING_FAILED = "encoding_failed"
    IO_FAILURE = "io_failure"


class ConversionError(Exception):
    """Base class for conversion failures.

    Parameters
    ----------
    message : str
        Human readable failure summary.
    diagnostics : str, default=""
        Captured encoder output or codec details explaining the failure.

    Notes
    -----
    ``exit_code`` is the process exit code the CLI uses for this failure.
    """

    kind: ErrorKind = ErrorKind.ENCODING_FAILED
    exit_code: int = 1

    def __init__(self, message: str, *, diagnostics: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.diagnostics = diagnostics

    def __str__(self) -> str:
        if not self.diagnostics:
            return self.message
        return f"{self.message}\n{self.diagnostics.rstrip()}"


class UnsupportedConversionError(ConversionError):
    """No registered strategy supports the requested mime pair."""

    kind = ErrorKind.UNSUPPORTED_CONVERSION
    exit_code = 2

    def __init__(self, source_mime_type: str, target_mime_type: str) -> None:
        super().__init__(
            f"Conversion from {source_mime_type} to {target_mime_type} is not supported."
        )
        self.source_mime_type = source_mime_type
        self.target_mime_type = target_mime_type


class InvalidInputError(ConversionError):
    """Input bytes or request fields cannot be used for conversion."""

    kind = ErrorKind.INVALID_INPUT
    exit_code = 3


class ConversionTimeoutError(ConversionError):
    """Encoder exceeded its allotted time and was killed."""

    kind = ErrorKind.TIMEOUT
    exit_code = 4

    def __init__(
        self, timeout_seconds: float, *, diagnostics: str = ""
    ) -> None:
        super().__init__(
            f"Encoder did not finish within {timeout_seconds:g}s and was killed.",
            diagnostics=diagnostics,
        )
        self.timeout_seconds = timeout_seconds


class EncodingFailedError(ConversionError):
    """Encoder exited non-zero or the in-process codec failed to write."""

    kind = ErrorKind.ENCODING_FAILED
    exit_code = 5

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        diagnostics: str = "",
    ) -> None:
        super().__init__(message, diagnostics=diagnostics)
        self.returncode = returncode


class IOFailureError(ConversionError):
    """Scratch or output file creation, read or write failed."""

    kind = ErrorKind.IO_FAILURE
    exit_code = 6


class RegistryError(ValueError):
    """Strategy registry is misconfigured."""
