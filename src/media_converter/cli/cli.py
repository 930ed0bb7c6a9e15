#!/usr/bin/env python3
"""
media_converter.cli.cli

Typer-based CLI for converting local media files.

Examples
--------
Convert a song to WAV next to the input:

    convert-media convert song.mp3 --to audio/wav

List supported targets:

    convert-media formats
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
import traceback
from pathlib import Path

import typer

from media_converter.errors import ConversionError, UnsupportedConversionError
from media_converter.router import ConversionRouter, create_default_router
from media_converter.schemas import Settings
from media_converter.strategies import EncoderStrategy

app = typer.Typer(
    name="convert-media",
    help="Convert audio, video and image files between formats.",
    no_args_is_help=True,
)


def _print_conversion_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly conversion error.

    Parameters
    ----------
    exc : Exception
        Exception raised during conversion.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _build_router() -> ConversionRouter:
    """Build the router from environment settings, as a CLI error on bad config."""
    try:
        return create_default_router(Settings.from_env())
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid converter configuration: {exc}") from exc


def _require_encoder(router: ConversionRouter, source: str | None, target: str) -> None:
    """Fail early with an install hint when the resolved encoder is missing."""
    try:
        strategy = router.resolve(source, target)
    except UnsupportedConversionError:
        return
    if isinstance(strategy, EncoderStrategy) and shutil.which(strategy.encoder_path) is None:
        raise typer.BadParameter(
            f"Encoder '{strategy.encoder_path}' was not found on PATH. "
            "Install ffmpeg or set MEDIA_CONVERTER_FFMPEG_PATH."
        )


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False, "--debug", help="Show debug logs and full tracebacks on error."
    ),
) -> None:
    """Initialize shared CLI state.

    Parameters
    ----------
    ctx : typer.Context
        Typer context object used to store shared state.
    debug : bool, default=False
        Whether to enable debug logging and error output.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    input_path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="File to convert.",
    ),
    target: str = typer.Option(
        ..., "--to", "-t", help="Target mime type, e.g. audio/wav or image/jpeg."
    ),
    source: str | None = typer.Option(
        None, "--from", "-f", help="Source mime type; guessed from the suffix if omitted."
    ),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        "-o",
        file_okay=False,
        help="Directory for the converted file (default: next to the input).",
    ),
) -> None:
    """Convert a media file to another format.

    Parameters
    ----------
    ctx : typer.Context
        Typer context containing global options.
    input_path : Path
        Source file.
    target : str
        Requested target mime type.
    source : str | None
        Source mime type override.
    output_dir : Path | None
        Destination directory.
    """
    debug: bool = bool(ctx.obj.get("debug", False))

    from media_converter.api import convert_file, guess_mime_type

    router = _build_router()
    source_mime = source or guess_mime_type(input_path)
    _require_encoder(router, source_mime, target.strip().lower())

    try:
        out = convert_file(
            input_path,
            target,
            source_mime_type=source_mime,
            output_dir=output_dir,
            router=router,
        )
        typer.echo(f"✓ Saved: {out}")
    except ConversionError as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug))
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        raise typer.Exit(code=_print_conversion_error(exc, debug))


@app.command("formats")
def formats_cmd() -> None:
    """List supported conversion targets in resolution order."""
    router = _build_router()
    for row in router.capabilities():
        typer.echo(
            f"{row.strategy:<14} {row.source_family + '*':<9} "
            f"{row.target_mime_type:<18} .{row.extension}"
        )
    if any(strategy.is_fallback for strategy in router.strategies):
        typer.echo("passthrough    *         (any)              relabel only")


@app.command("doctor")
def doctor_cmd() -> None:
    """Print encoder and codec versions plus the active configuration."""
    import importlib.metadata as metadata

    typer.echo(f"Python: {sys.version.split()[0]}")
    try:
        typer.echo(f"Pillow: {metadata.version('Pillow')}")
    except metadata.PackageNotFoundError:
        typer.echo("Pillow: <not installed>")

    try:
        settings = Settings.from_env()
    except ValueError as exc:
        typer.echo(f"settings: <invalid> {exc}")
        raise typer.Exit(code=1)

    encoder = shutil.which(settings.ffmpeg_path)
    if encoder is None:
        typer.echo(f"ffmpeg: <not found: {settings.ffmpeg_path}>")
    else:
        try:
            result = subprocess.run(
                [encoder, "-version"],
                capture_output=True,
                text=True,
                timeout=10,
                check=False,
            )
            first_line = (result.stdout or result.stderr).splitlines()[:1]
            typer.echo(f"ffmpeg: {first_line[0] if first_line else encoder}")
        except (OSError, subprocess.TimeoutExpired) as exc:
            typer.echo(f"ffmpeg: <unusable: {exc}>")

    typer.echo(f"timeout: {settings.timeout_seconds:g}s")
    typer.echo(f"max processes: {settings.max_concurrent_processes}")
    typer.echo(f"passthrough: {'enabled' if settings.enable_passthrough else 'disabled'}")
    router = create_default_router(settings)
    typer.echo(f"strategies: {', '.join(router.names())}")


if __name__ == "__main__":
    app()
