"""Unit tests for filename and extension helpers."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from media_converter import naming


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("song.mp3", "mp3"),
        ("archive.tar.gz", "gz"),
        ("noext", ""),
        ("trailing.", ""),
        (".bashrc", "bashrc"),
        ("", ""),
    ],
)
def test_extension_of(filename: str, expected: str) -> None:
    """Return the text after the last dot, empty for none or trailing dot."""
    assert naming.extension_of(filename) == expected


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("clip.mov", "mov"),
        ("clip", "dat"),
        ("clip.", "dat"),
        (None, "dat"),
    ],
)
def test_input_extension_hint_falls_back_to_placeholder(
    filename: str | None, expected: str
) -> None:
    """Use the placeholder extension when the filename has none."""
    assert naming.input_extension_hint(filename) == expected


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("song.mp3", "song"),
        ("archive.tar.gz", "archive.tar"),
        ("noext", "noext"),
        (".bashrc", ".bashrc"),
    ],
)
def test_strip_extension(filename: str, expected: str) -> None:
    """Drop only the last segment and keep dotfiles intact."""
    assert naming.strip_extension(filename) == expected


@pytest.mark.parametrize(
    ("original", "default_base", "extension", "expected"),
    [
        ("song.mp3", "audio", "wav", "song_converted.wav"),
        ("clip.mov", "video", "webm", "clip_converted.webm"),
        ("pic.png", "image", "jpg", "pic_converted.jpg"),
        (None, "audio", "mp3", "audio_converted.mp3"),
        ("   ", "image", "png", "image_converted.png"),
        ("README", "file", "pdf", "README_converted.pdf"),
    ],
)
def test_output_filename(
    original: str | None, default_base: str, extension: str, expected: str
) -> None:
    """Build ``<base>_converted.<ext>`` with default base for blank names."""
    assert naming.output_filename(original, default_base, extension) == expected


@given(
    original=st.one_of(st.none(), st.text(max_size=40)),
    extension=st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=1, max_size=5),
)
def test_output_filename_is_deterministic(original: str | None, extension: str) -> None:
    """Calling the naming rule twice on the same inputs yields the same name."""
    first = naming.output_filename(original, "file", extension)
    second = naming.output_filename(original, "file", extension)
    assert first == second
    assert first.endswith(f"_converted.{extension}")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("song.mp3", "song.mp3"),
        ("../../etc/passwd", "passwd"),
        ("/tmp/clip.mov", "clip.mov"),
        ("..\\..\\secret.wav", "secret.wav"),
        ("", None),
        ("   ", None),
        ("/", None),
        ("..", None),
        (None, None),
    ],
)
def test_safe_upload_filename(value: str | None, expected: str | None) -> None:
    """Sanitize potentially unsafe upload filenames."""
    assert naming.safe_upload_filename(value) == expected
