"""Pydantic schemas for runtime validation of conversion inputs and settings."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from media_converter.types import DEFAULT_SOURCE_MIME_TYPE

ENV_PREFIX = "MEDIA_CONVERTER_"


def _default_process_limit() -> int:
    return os.cpu_count() or 1


class ConversionRequestConfig(BaseModel):
    """Validated input for a single conversion request."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    data: bytes
    target_mime_type: str
    source_mime_type: str = DEFAULT_SOURCE_MIME_TYPE
    filename: str | None = None

    @field_validator("target_mime_type")
    @classmethod
    def _validate_target(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError("target_mime_type must not be empty.")
        return normalized

    @field_validator("source_mime_type", mode="before")
    @classmethod
    def _default_source(cls, value: object) -> object:
        if value is None:
            return DEFAULT_SOURCE_MIME_TYPE
        if isinstance(value, str):
            # Content-Type headers may carry parameters (``audio/wav; codecs=1``).
            normalized = value.split(";", 1)[0].strip().lower()
            return normalized or DEFAULT_SOURCE_MIME_TYPE
        return value

    @field_validator("filename")
    @classmethod
    def _blank_filename_is_absent(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value


class Settings(BaseModel):
    """Process-wide converter configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    ffmpeg_path: str = "ffmpeg"
    timeout_seconds: float = Field(default=300.0, gt=0)
    max_concurrent_processes: int = Field(default_factory=_default_process_limit, ge=1)
    scratch_dir: Path | None = None
    enable_passthrough: bool = False

    @field_validator("ffmpeg_path")
    @classmethod
    def _validate_ffmpeg_path(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("ffmpeg_path must not be empty.")
        return value.strip()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``MEDIA_CONVERTER_*`` environment variables.

        Parameters
        ----------
        environ : Mapping[str, str] | None, optional
            Environment mapping; defaults to ``os.environ``.

        Returns
        -------
        Settings
            Validated settings. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        fields = {
            "ffmpeg_path": "FFMPEG_PATH",
            "timeout_seconds": "TIMEOUT_SECONDS",
            "max_concurrent_processes": "MAX_PROCESSES",
            "scratch_dir": "SCRATCH_DIR",
            "enable_passthrough": "ENABLE_PASSTHROUGH",
        }
        values: dict[str, str] = {}
        for field, suffix in fields.items():
            raw = env.get(ENV_PREFIX + suffix)
            if raw is not None and raw.strip():
                values[field] = raw.strip()
        return cls.model_validate(values)
