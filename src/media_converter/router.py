"""Ordered strategy registry and first-match conversion dispatch."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass

from media_converter.application.ports import ConversionStrategy
from media_converter.application.requests import ConversionRequest
from media_converter.application.results import (
    ConversionFailure,
    ConversionOutcome,
    ConvertedArtifact,
)
from media_converter.errors import (
    ConversionError,
    RegistryError,
    UnsupportedConversionError,
)
from media_converter.infrastructure.process import ProcessExecutor
from media_converter.schemas import Settings
from media_converter.strategies import (
    FfmpegAudioStrategy,
    FfmpegVideoStrategy,
    PassthroughStrategy,
    PillowImageStrategy,
)
from media_converter.types import DEFAULT_SOURCE_MIME_TYPE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapabilityRow:
    """One supported (source family, target mime) pair."""

    strategy: str
    source_family: str
    target_mime_type: str
    extension: str


def _families_overlap(left: str, right: str) -> bool:
    if left == "*" or right == "*":
        return True
    return left.startswith(right) or right.startswith(left)


def _validate_registry(strategies: tuple[ConversionStrategy, ...]) -> None:
    """Reject registries whose resolution would depend on fragile ordering.

    Raises
    ------
    RegistryError
        On blank or duplicate names, a fallback that is not last, or two
        regular strategies declaring the same capability.
    """
    seen_names: set[str] = set()
    for index, strategy in enumerate(strategies):
        name = getattr(strategy, "name", "").strip()
        if not name:
            raise RegistryError("Strategy must define a non-empty 'name'.")
        if name in seen_names:
            raise RegistryError(f"Duplicate strategy name '{name}'.")
        seen_names.add(name)
        if strategy.is_fallback and index != len(strategies) - 1:
            raise RegistryError(
                f"Fallback strategy '{name}' must be registered last."
            )

    regular = [s for s in strategies if not s.is_fallback]
    for position, first in enumerate(regular):
        for second in regular[position + 1 :]:
            if not _families_overlap(first.source_family, second.source_family):
                continue
            shared = sorted(set(first.capabilities) & set(second.capabilities))
            if shared:
                raise RegistryError(
                    f"Strategies '{first.name}' and '{second.name}' overlap on "
                    f"{', '.join(shared)}."
                )


class ConversionRouter:
    """Resolve each request to the first strategy that supports it.

    Parameters
    ----------
    strategies : Iterable[ConversionStrategy]
        Strategies in resolution order. The registry is fixed at
        construction and validated once.
    """

    def __init__(self, strategies: Iterable[ConversionStrategy]) -> None:
        self._strategies = tuple(strategies)
        _validate_registry(self._strategies)

    @property
    def strategies(self) -> tuple[ConversionStrategy, ...]:
        """Registered strategies in resolution order."""
        return self._strategies

    def names(self) -> list[str]:
        """Return strategy names in resolution order."""
        return [strategy.name for strategy in self._strategies]

    def get(self, name: str) -> ConversionStrategy:
        """Get strategy by name.

        Raises
        ------
        KeyError
            If no strategy with that name is registered.
        """
        for strategy in self._strategies:
            if strategy.name == name:
                return strategy
        raise KeyError(
            f"Unknown strategy '{name}'. Available strategies: {', '.join(self.names())}"
        )

    def resolve(
        self, source_mime_type: str | None, target_mime_type: str
    ) -> ConversionStrategy:
        """Return the first strategy supporting the pair.

        Parameters
        ----------
        source_mime_type : str | None
            Declared source mime type; blank or ``None`` means
            ``application/octet-stream``.
        target_mime_type : str
            Requested target mime type.

        Returns
        -------
        ConversionStrategy
            Earliest registered strategy whose ``supports`` is true.

        Raises
        ------
        UnsupportedConversionError
            If no strategy supports the pair.
        """
        source = (source_mime_type or "").strip() or DEFAULT_SOURCE_MIME_TYPE
        for strategy in self._strategies:
            if strategy.supports(source, target_mime_type):
                return strategy
        raise UnsupportedConversionError(source, target_mime_type)

    def convert(self, request: ConversionRequest) -> ConvertedArtifact:
        """Convert a request with the resolved strategy.

        Raises
        ------
        ConversionError
            Subclass describing why the conversion failed.
        """
        strategy = self.resolve(request.source_mime_type, request.target_mime_type)
        logger.debug(
            "resolved %s -> %s to strategy %s",
            request.source_mime_type,
            request.target_mime_type,
            strategy.name,
        )
        started = time.monotonic()
        artifact = strategy.convert(request)
        logger.info(
            "converted %s (%d bytes) to %s (%d bytes) with %s in %.2fs",
            request.filename or "<unnamed>",
            len(request.data),
            artifact.filename,
            artifact.size_bytes,
            strategy.name,
            time.monotonic() - started,
        )
        return artifact

    def try_convert(self, request: ConversionRequest) -> ConversionOutcome:
        """Convert a request, returning failures as values instead of raising."""
        try:
            return ConversionOutcome(artifact=self.convert(request))
        except ConversionError as exc:
            logger.info("conversion failed (%s): %s", exc.kind, exc.message)
            return ConversionOutcome(failure=ConversionFailure.from_error(exc))

    def capabilities(self) -> list[CapabilityRow]:
        """List every declared capability in resolution order."""
        return [
            CapabilityRow(
                strategy=strategy.name,
                source_family=strategy.source_family,
                target_mime_type=target,
                extension=capability.extension,
            )
            for strategy in self._strategies
            for target, capability in strategy.capabilities.items()
        ]


def create_default_router(
    settings: Settings | None = None,
    executor: ProcessExecutor | None = None,
) -> ConversionRouter:
    """Create the default router.

    Parameters
    ----------
    settings : Settings | None, optional
        Converter settings; defaults to ``Settings.from_env()``.
    executor : ProcessExecutor | None, optional
        Shared executor; one is built from ``settings`` when omitted.

    Returns
    -------
    ConversionRouter
        Audio, video and image strategies, followed by the passthrough
        fallback only when ``settings.enable_passthrough`` is set.
    """
    settings = settings or Settings.from_env()
    executor = executor or ProcessExecutor(
        max_concurrent=settings.max_concurrent_processes,
        scratch_dir=settings.scratch_dir,
    )
    strategies: list[ConversionStrategy] = [
        FfmpegAudioStrategy(
            executor,
            encoder_path=settings.ffmpeg_path,
            timeout=settings.timeout_seconds,
        ),
        FfmpegVideoStrategy(
            executor,
            encoder_path=settings.ffmpeg_path,
            timeout=settings.timeout_seconds,
        ),
        PillowImageStrategy(),
    ]
    if settings.enable_passthrough:
        extensions = {
            target: capability.extension
            for strategy in strategies
            for target, capability in strategy.capabilities.items()
        }
        strategies.append(PassthroughStrategy(extensions))
    return ConversionRouter(strategies)
