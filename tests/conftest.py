"""Shared pytest configuration, marker assignment and media fixtures."""

from __future__ import annotations

import io
import os
import stat
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

type EncoderFactory = Callable[[str], Path]


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def png_bytes() -> bytes:
    """Small RGBA PNG with a semi-transparent pixel."""
    img = Image.new("RGBA", (4, 3), (255, 0, 0, 128))
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    """Dedicated scratch directory so tests can assert it ends up empty."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def fake_encoder(tmp_path: Path) -> EncoderFactory:
    """Write an executable POSIX shell script standing in for ffmpeg.

    The returned factory takes the script body. ``$3`` is the input path and
    ``$last`` the output path, matching ``encoder -y -i IN ... OUT``.
    """
    if os.name != "posix":
        pytest.skip("fake encoder scripts need a POSIX shell")

    counter = iter(range(1000))

    def _make(body: str) -> Path:
        script = tmp_path / f"fake-ffmpeg-{next(counter)}"
        script.write_text(
            "#!/bin/sh\n"
            "for last; do :; done\n"
            f"{body}\n",
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


@pytest.fixture
def copying_encoder(fake_encoder: EncoderFactory, tmp_path: Path) -> Path:
    """Encoder that records its argv and writes ``converted:`` + input."""
    args_file = tmp_path / "encoder-args.txt"
    return fake_encoder(
        f"printf '%s\\n' \"$@\" > '{args_file}'\n"
        "printf 'converted:' > \"$last\"\n"
        "cat \"$3\" >> \"$last\""
    )


@pytest.fixture
def encoder_args(tmp_path: Path) -> Callable[[], list[str]]:
    """Read the argv recorded by :func:`copying_encoder`."""

    def _read() -> list[str]:
        return (tmp_path / "encoder-args.txt").read_text(encoding="utf-8").splitlines()

    return _read
