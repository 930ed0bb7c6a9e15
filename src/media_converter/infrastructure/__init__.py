"""Subprocess and filesystem adapters."""

from .process import DEFAULT_TIMEOUT_SECONDS, ProcessExecutor, build_command
from .scratch import scratch_file

__all__ = ["DEFAULT_TIMEOUT_SECONDS", "ProcessExecutor", "build_command", "scratch_file"]
