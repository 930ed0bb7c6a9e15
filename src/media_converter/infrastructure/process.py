"""External encoder execution with timeout, output capture and cleanup."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from pathlib import Path

from media_converter.errors import ConversionTimeoutError, EncodingFailedError
from media_converter.infrastructure.scratch import (
    INPUT_PREFIX,
    OUTPUT_PREFIX,
    read_scratch,
    scratch_file,
    write_scratch,
)
from media_converter.types import EncoderArguments

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 300.0


def build_command(
    encoder_path: str,
    input_path: Path,
    arguments: EncoderArguments,
    output_path: Path,
) -> list[str]:
    """Assemble ``encoder -y -i <input> <arguments...> <output>``."""
    return [
        encoder_path,
        "-y",
        "-i",
        str(input_path.absolute()),
        *arguments,
        str(output_path.absolute()),
    ]


def _kill(process: subprocess.Popen[bytes]) -> None:
    """Forcibly stop the encoder and anything it spawned."""
    if os.name == "posix":
        try:
            os.killpg(process.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
        except PermissionError:
            pass
    process.kill()


def _decode(output: bytes | None) -> str:
    if not output:
        return ""
    return output.decode("utf-8", errors="replace")


class ProcessExecutor:
    """Drive an external encoder over scratch files.

    Parameters
    ----------
    max_concurrent : int | None, optional
        Upper bound on encoder processes alive at the same time across all
        callers sharing this executor. Defaults to the CPU count.
    scratch_dir : Path | None, optional
        Directory for scratch files. Defaults to the system temp directory.
    """

    def __init__(
        self,
        max_concurrent: int | None = None,
        scratch_dir: Path | None = None,
    ) -> None:
        limit = max_concurrent if max_concurrent is not None else (os.cpu_count() or 1)
        if limit < 1:
            raise ValueError("max_concurrent must be >= 1")
        self.max_concurrent = limit
        self.scratch_dir = scratch_dir
        self._gate = threading.BoundedSemaphore(limit)

    def run(
        self,
        encoder_path: str,
        input_bytes: bytes,
        input_extension: str,
        output_extension: str,
        arguments: EncoderArguments,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> bytes:
        """Run the encoder and return the output file contents.

        Parameters
        ----------
        encoder_path : str
            Encoder executable name or path.
        input_bytes : bytes
            Payload written to the input scratch file.
        input_extension : str
            Extension for the input scratch file.
        output_extension : str
            Extension for the output scratch file; selects the container.
        arguments : Sequence[str]
            Codec arguments placed between input and output paths.
        timeout : float, default=300.0
            Seconds to wait before the encoder is killed.

        Returns
        -------
        bytes
            Contents of the output scratch file.

        Raises
        ------
        ConversionTimeoutError
            If the encoder did not finish in time.
        EncodingFailedError
            If the encoder is missing or exits non-zero.
        IOFailureError
            If scratch files cannot be created, written or read.
        """
        with (
            scratch_file(INPUT_PREFIX, input_extension, directory=self.scratch_dir) as input_path,
            scratch_file(OUTPUT_PREFIX, output_extension, directory=self.scratch_dir) as output_path,
        ):
            write_scratch(input_path, input_bytes)
            command = build_command(encoder_path, input_path, arguments, output_path)
            with self._gate:
                self._execute(command, timeout)
            return read_scratch(output_path)

    def _execute(self, command: list[str], timeout: float) -> None:
        logger.debug("running encoder: %s", " ".join(command))
        started = time.monotonic()
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                start_new_session=os.name == "posix",
            )
        except OSError as exc:
            raise EncodingFailedError(
                f"Could not start encoder '{command[0]}': {exc}"
            ) from exc

        with process:
            try:
                output, _ = process.communicate(timeout=timeout)
            except subprocess.TimeoutExpired:
                _kill(process)
                output, _ = process.communicate()
                logger.warning(
                    "encoder killed after %.1fs timeout: %s", timeout, command[0]
                )
                raise ConversionTimeoutError(timeout, diagnostics=_decode(output)) from None
            except BaseException:
                # Caller interrupted while waiting; never leave the encoder running.
                _kill(process)
                process.wait()
                raise

        elapsed = time.monotonic() - started
        if process.returncode != 0:
            raise EncodingFailedError(
                f"Encoder failed (exit code {process.returncode}).",
                returncode=process.returncode,
                diagnostics=_decode(output),
            )
        logger.debug("encoder finished in %.2fs", elapsed)
