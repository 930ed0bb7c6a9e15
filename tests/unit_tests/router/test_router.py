"""Unit tests for strategy registry validation and first-match dispatch."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

import pytest
from hypothesis import given
from hypothesis import strategies as st

from media_converter.application.requests import ConversionRequest
from media_converter.application.results import ConvertedArtifact
from media_converter.errors import (
    EncodingFailedError,
    ErrorKind,
    RegistryError,
    UnsupportedConversionError,
)
from media_converter.router import ConversionRouter, create_default_router
from media_converter.schemas import Settings
from media_converter.strategies import (
    AUDIO_TABLE,
    IMAGE_TABLE,
    VIDEO_TABLE,
    PassthroughStrategy,
)


@dataclass(frozen=True)
class _Cap:
    extension: str


class _Strategy:
    """Simple strategy test double."""

    is_fallback = False

    def __init__(
        self,
        name: str,
        family: str = "audio/",
        targets: tuple[str, ...] = ("audio/wav",),
        handles: bool | None = None,
        error: Exception | None = None,
    ) -> None:
        self.name = name
        self.source_family = family
        self._targets = targets
        self._handles = handles
        self._error = error
        self.calls = 0

    @property
    def capabilities(self) -> Mapping[str, _Cap]:
        return MappingProxyType({t: _Cap(t.rsplit("/", 1)[-1]) for t in self._targets})

    def supports(self, source_mime_type: str, target_mime_type: str) -> bool:
        if self._handles is not None:
            return self._handles
        return source_mime_type.startswith(self.source_family) and (
            target_mime_type in self._targets
        )

    def convert(self, request: ConversionRequest) -> ConvertedArtifact:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return ConvertedArtifact(
            filename=f"{self.name}.out", mime_type=request.target_mime_type, data=b"x"
        )


def _request(source: str, target: str) -> ConversionRequest:
    return ConversionRequest(
        data=b"payload", source_mime_type=source, target_mime_type=target
    )


@pytest.fixture
def default_router() -> ConversionRouter:
    return create_default_router(Settings(max_concurrent_processes=2))


def test_every_declared_pair_resolves_to_a_real_strategy() -> None:
    """Each table pair resolves to exactly one non-fallback strategy."""
    router = create_default_router(
        Settings(max_concurrent_processes=1, enable_passthrough=True)
    )
    samples = {
        "ffmpeg-audio": ("audio/mpeg", AUDIO_TABLE),
        "ffmpeg-video": ("video/mp4", VIDEO_TABLE),
        "pillow-image": ("image/png", IMAGE_TABLE),
    }
    for expected_name, (source, table) in samples.items():
        for target in table:
            strategy = router.resolve(source, target)
            assert strategy.name == expected_name
            assert not strategy.is_fallback
            matching = [
                s for s in router.strategies if not s.is_fallback and s.supports(source, target)
            ]
            assert len(matching) == 1


def test_default_registry_order_and_passthrough_is_opt_in(
    default_router: ConversionRouter,
) -> None:
    """Exclude passthrough by default and append it last when enabled."""
    assert default_router.names() == ["ffmpeg-audio", "ffmpeg-video", "pillow-image"]
    enabled = create_default_router(
        Settings(max_concurrent_processes=1, enable_passthrough=True)
    )
    assert enabled.names()[-1] == "passthrough"


def test_unsupported_pair_raises_without_fallback(default_router: ConversionRouter) -> None:
    """Text to PDF is unsupported when passthrough is disabled."""
    with pytest.raises(UnsupportedConversionError) as excinfo:
        default_router.convert(_request("text/plain", "application/pdf"))
    assert excinfo.value.kind is ErrorKind.UNSUPPORTED_CONVERSION


def test_unsupported_pair_passes_through_when_enabled() -> None:
    """Text to PDF is relabelled only when passthrough is enabled."""
    router = create_default_router(
        Settings(max_concurrent_processes=1, enable_passthrough=True)
    )
    artifact = router.convert(
        ConversionRequest(
            data=b"hello",
            source_mime_type="text/plain",
            target_mime_type="application/pdf",
            filename="notes.txt",
        )
    )
    assert artifact.data == b"hello"
    assert artifact.filename == "notes_converted.pdf"


def test_resolve_defaults_blank_source_to_octet_stream() -> None:
    """Use application/octet-stream when the source mime is unknown."""
    seen: list[str] = []

    class _Recorder(_Strategy):
        def supports(self, source_mime_type: str, target_mime_type: str) -> bool:
            seen.append(source_mime_type)
            return False

    router = ConversionRouter([_Recorder("r")])
    for source in (None, "", "   "):
        with pytest.raises(UnsupportedConversionError, match="application/octet-stream"):
            router.resolve(source, "audio/wav")
    assert seen == ["application/octet-stream"] * 3


def test_first_match_wins_and_later_strategies_are_not_consulted() -> None:
    """Pick the earliest registered matching strategy."""
    first = _Strategy("first", family="audio/", targets=("audio/wav",))
    second = _Strategy("second", family="video/", targets=("audio/wav",), handles=True)
    router = ConversionRouter([first, second])

    artifact = router.convert(_request("audio/mpeg", "audio/wav"))

    assert artifact.filename == "first.out"
    assert first.calls == 1
    assert second.calls == 0


@given(
    st.permutations(["a", "b", "c", "d"]),
    st.lists(st.booleans(), min_size=4, max_size=4),
)
def test_resolution_is_deterministic_for_any_order(
    order: list[str], handles: list[bool]
) -> None:
    """Always select the earliest registered strategy whose predicate matches."""
    families = {"a": "audio/", "b": "video/", "c": "image/", "d": "text/"}
    strategies = [
        _Strategy(name, family=families[name], targets=(f"x/{name}",), handles=flag)
        for name, flag in zip(order, handles, strict=True)
    ]
    router = ConversionRouter(strategies)
    expected = next((s.name for s in strategies if s.supports("audio/mpeg", "x/any")), None)
    if expected is None:
        with pytest.raises(UnsupportedConversionError):
            router.resolve("audio/mpeg", "x/any")
    else:
        assert router.resolve("audio/mpeg", "x/any").name == expected
        assert router.resolve("audio/mpeg", "x/any").name == expected


def test_fallback_must_be_registered_last() -> None:
    """Reject a catch-all fallback that would pre-empt real strategies."""
    with pytest.raises(RegistryError, match="must be registered last"):
        ConversionRouter([PassthroughStrategy(), _Strategy("audio")])


def test_overlapping_regular_strategies_are_rejected() -> None:
    """Reject two non-fallback strategies declaring the same capability."""
    with pytest.raises(RegistryError, match="overlap on audio/wav"):
        ConversionRouter(
            [
                _Strategy("one", family="audio/", targets=("audio/wav", "audio/ogg")),
                _Strategy("two", family="audio/", targets=("audio/wav",)),
            ]
        )


def test_nested_family_prefixes_overlap() -> None:
    """Treat a narrower family prefix as overlapping its parent family."""
    with pytest.raises(RegistryError, match="overlap on audio/wav"):
        ConversionRouter(
            [
                _Strategy("broad", family="audio/", targets=("audio/wav",)),
                _Strategy("narrow", family="audio/x-", targets=("audio/wav",)),
            ]
        )


def test_same_target_for_different_families_is_allowed() -> None:
    """Allow a shared target when the source families are disjoint."""
    router = ConversionRouter(
        [
            _Strategy("audio", family="audio/", targets=("audio/mpeg",)),
            _Strategy("video", family="video/", targets=("audio/mpeg",)),
        ]
    )
    assert router.resolve("video/mp4", "audio/mpeg").name == "video"


@pytest.mark.parametrize(
    ("strategies", "message"),
    [
        ([_Strategy("  ")], "non-empty 'name'"),
        ([_Strategy("x", family="audio/"), _Strategy("x", family="video/")], "Duplicate"),
    ],
)
def test_registry_rejects_bad_names(strategies: list[_Strategy], message: str) -> None:
    """Require unique non-empty strategy names."""
    with pytest.raises(RegistryError, match=message):
        ConversionRouter(strategies)


def test_get_unknown_strategy_raises(default_router: ConversionRouter) -> None:
    """Raise clear error for unknown strategy lookup."""
    assert default_router.get("pillow-image").name == "pillow-image"
    with pytest.raises(KeyError, match="Unknown strategy"):
        default_router.get("missing")


def test_try_convert_returns_failure_value() -> None:
    """Return typed failures instead of raising domain errors."""
    failing = _Strategy(
        "failing",
        error=EncodingFailedError("Encoder failed.", returncode=1, diagnostics="log"),
    )
    router = ConversionRouter([failing])

    outcome = router.try_convert(_request("audio/mpeg", "audio/wav"))
    assert not outcome.ok
    assert outcome.artifact is None
    assert outcome.failure is not None
    assert outcome.failure.kind is ErrorKind.ENCODING_FAILED
    assert outcome.failure.diagnostics == "log"

    unsupported = router.try_convert(_request("text/plain", "audio/wav"))
    assert unsupported.failure is not None
    assert unsupported.failure.kind is ErrorKind.UNSUPPORTED_CONVERSION


def test_try_convert_returns_artifact_on_success() -> None:
    """Wrap successful conversions in an ok outcome."""
    router = ConversionRouter([_Strategy("ok")])
    outcome = router.try_convert(_request("audio/mpeg", "audio/wav"))
    assert outcome.ok
    assert outcome.artifact is not None
    assert outcome.artifact.filename == "ok.out"


def test_try_convert_propagates_unexpected_errors() -> None:
    """Leave non-domain exceptions to the caller."""
    router = ConversionRouter([_Strategy("bug", error=RuntimeError("boom"))])
    with pytest.raises(RuntimeError, match="boom"):
        router.try_convert(_request("audio/mpeg", "audio/wav"))


def test_capabilities_lists_table_rows_in_order(default_router: ConversionRouter) -> None:
    """Expose every capability row, grouped in resolution order."""
    rows = default_router.capabilities()
    assert [r.strategy for r in rows] == (
        ["ffmpeg-audio"] * 3 + ["ffmpeg-video"] * 4 + ["pillow-image"] * 2
    )
    pairs = {(r.target_mime_type, r.extension) for r in rows}
    assert ("video/quicktime", "mov") in pairs
    assert ("video/x-matroska", "mkv") in pairs
    assert ("image/jpeg", "jpg") in pairs
