#!/usr/bin/env python3
"""Examples for converting media with the in-process API."""

from __future__ import annotations

import io
import shutil
import subprocess
import tempfile
from pathlib import Path

from PIL import Image

import media_converter
from media_converter.errors import ConversionError


def image_example(workdir: Path) -> None:
    """Flatten a transparent PNG into a JPEG."""
    buffer = io.BytesIO()
    Image.new("RGBA", (64, 48), (255, 80, 0, 128)).save(buffer, format="PNG")
    source = workdir / "overlay.png"
    source.write_bytes(buffer.getvalue())

    out = media_converter.convert_file(source, "image/jpeg")
    print(f"image: {source.name} -> {out.name} ({out.stat().st_size} bytes)")


def audio_example(workdir: Path) -> None:
    """Encode a generated tone to MP3 through ffmpeg."""
    if shutil.which("ffmpeg") is None:
        print("audio: skipped, ffmpeg not found on PATH")
        return
    source = workdir / "tone.wav"
    subprocess.run(
        [
            "ffmpeg", "-y", "-loglevel", "error",
            "-f", "lavfi", "-i", "sine=frequency=440:duration=1",
            str(source),
        ],
        check=True,
    )
    artifact = media_converter.convert(
        source.read_bytes(), "audio/mpeg", "audio/wav", source.name
    )
    print(f"audio: {source.name} -> {artifact.filename} ({artifact.size_bytes} bytes)")


def failure_example() -> None:
    """Show failures returned as values."""
    outcome = media_converter.try_convert(b"plain text", "application/pdf", "text/plain")
    if outcome.failure is not None:
        print(f"unsupported: {outcome.failure.kind}: {outcome.failure.message}")

    try:
        media_converter.convert(b"not a png", "image/jpeg", "image/png")
    except ConversionError as exc:
        print(f"raised: {type(exc).__name__} (exit code {exc.exit_code})")


def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        workdir = Path(tmp)
        image_example(workdir)
        audio_example(workdir)
    failure_example()


if __name__ == "__main__":
    main()
