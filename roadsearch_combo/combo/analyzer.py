"""RoadSearch Combo Analyzer - Several Analyzers Behind One Name.

A combo analyzer runs every configured sub-analyzer over the same text and
merges their outputs into a single stream, so that one field can be indexed
under several linguistic treatments at once.

Sub-analyzer names are resolved lazily, on first use: resolving them goes
through the analysis registry, which may itself still be under construction
when the combo analyzer is created.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Mapping, Optional, Tuple, Union

from roadsearch_combo.analyzers.base import Analyzer, Token, TokenStream
from roadsearch_combo.analyzers.registry import register_analyzer_type
from roadsearch_combo.combo.dedup import DeduplicationFilter
from roadsearch_combo.combo.merge import MergeScheduler, TieBreak
from roadsearch_combo.combo.pipeline import PipelineAdapter
from roadsearch_combo.settings import AnalysisConfigurationError, Settings

logger = logging.getLogger(__name__)

Resolver = Callable[[str], Optional[Analyzer]]


@dataclass
class ComboSettings:
    """Combo analyzer configuration.

    Attributes:
        sub_analyzers: Sub-analyzer names, in declaration order
        deduplication: Drop same-term tokens sharing a merged position
        tokenstream_caching: Replay buffered pipeline output for repeated texts
        tokenstream_cache_size: Number of (pipeline, text) entries buffered
        tie_break: Ordering of equal-position tokens across pipelines
    """

    sub_analyzers: List[str] = field(default_factory=list)
    deduplication: bool = False
    tokenstream_caching: bool = True
    tokenstream_cache_size: int = 64
    tie_break: TieBreak = TieBreak.DECLARATION

    @classmethod
    def from_settings(cls, name: str, settings: Settings) -> "ComboSettings":
        """Read the combo keys of one analyzer's settings group."""
        sub_analyzers = settings.get_as_list("sub_analyzers")
        if not sub_analyzers:
            raise AnalysisConfigurationError(
                f"Analyzer [{name}] of type [{ComboAnalyzer.NAME}] "
                f"must have a \"sub_analyzers\" list property"
            )
        return cls(
            sub_analyzers=sub_analyzers,
            deduplication=settings.get_as_bool("deduplication", False),
            tokenstream_caching=settings.get_as_bool("tokenstream_caching", True),
            tokenstream_cache_size=settings.get_as_int("tokenstream_cache_size", 64),
            tie_break=TieBreak.parse(settings.get_as_str("tie_break", "declaration")),
        )


class ComboAnalyzer(Analyzer):
    """Analyzer merging the outputs of several sub-analyzers.

    The instance is safe to share between threads: the resolved
    sub-analyzer list is built once and never modified afterwards, and
    every analysis request gets its own adapters and scheduler.
    """

    NAME = "combo"

    def __init__(
        self,
        name: str,
        settings: Union[ComboSettings, Settings, Mapping[str, Any]],
        resolver: Resolver,
    ):
        """Initialize combo analyzer.

        Args:
            name: Analyzer name
            settings: Combo configuration, or the raw settings group
            resolver: Sub-analyzer lookup returning None for unknown names

        Raises:
            AnalysisConfigurationError: If ``sub_analyzers`` is absent or empty
        """
        super().__init__()
        if isinstance(settings, ComboSettings):
            if not settings.sub_analyzers:
                raise AnalysisConfigurationError(
                    f"Analyzer [{name}] of type [{self.NAME}] "
                    f"must have a \"sub_analyzers\" list property"
                )
            config = settings
        else:
            if not isinstance(settings, Settings):
                settings = Settings(settings)
            config = ComboSettings.from_settings(name, settings)

        self.name = name
        self.config = config
        self._resolver = resolver
        self._pipelines: Optional[Tuple[Tuple[str, Analyzer], ...]] = None
        self._init_lock = threading.Lock()
        self._buffered = functools.lru_cache(maxsize=config.tokenstream_cache_size)(
            self._buffer_tokens
        )

    def _init(self) -> Tuple[Tuple[str, Analyzer], ...]:
        """Resolve the sub-analyzers once."""
        pipelines = self._pipelines
        if pipelines is not None:
            return pipelines

        with self._init_lock:
            if self._pipelines is not None:
                return self._pipelines

            resolved = []
            for sub_name in self.config.sub_analyzers:
                analyzer = self._resolver(sub_name)
                if analyzer is None:
                    logger.debug(f"[{self.name}] Sub-analyzer \"{sub_name}\" not found!")
                else:
                    resolved.append((sub_name, analyzer))

            self._pipelines = tuple(resolved)
            logger.info(
                f"Combo analyzer [{self.name}] initialized with "
                f"{len(resolved)}/{len(self.config.sub_analyzers)} sub-analyzers"
            )
            return self._pipelines

    @property
    def initialized(self) -> bool:
        return self._pipelines is not None

    @property
    def sub_analyzer_names(self) -> List[str]:
        """Names of the sub-analyzers that resolved, in declaration order."""
        return [name for name, _ in self._init()]

    def _buffer_tokens(self, index: int, text: str) -> Tuple[Token, ...]:
        _, analyzer = self._init()[index]
        return tuple(analyzer.analyze(text))

    def _adapter(self, index: int, name: str, analyzer: Analyzer, text: str) -> PipelineAdapter:
        if self.config.tokenstream_caching:
            return PipelineAdapter(index, name, lambda: self._buffered(index, text))
        return PipelineAdapter.for_analyzer(index, name, analyzer, text)

    def create_scheduler(self, text: str) -> MergeScheduler:
        """Build a fresh merge scheduler over ``text``."""
        adapters = [
            self._adapter(index, name, analyzer, text)
            for index, (name, analyzer) in enumerate(self._init())
        ]
        batch_filter = DeduplicationFilter() if self.config.deduplication else None
        return MergeScheduler(
            adapters,
            tie_break=self.config.tie_break,
            batch_filter=batch_filter,
        )

    def token_stream(self, text: str) -> Iterator[Token]:
        """Lazily produce the merged tokens for ``text``."""
        return iter(self.create_scheduler(text))

    def analyze(self, text: str) -> TokenStream:
        return TokenStream(self.token_stream(text))

    def close(self) -> None:
        """Drop buffered token streams."""
        self._buffered.cache_clear()

    def __repr__(self) -> str:
        return f"ComboAnalyzer({self.name!r}, sub_analyzers={self.config.sub_analyzers!r})"


@register_analyzer_type(ComboAnalyzer.NAME)
def provide_combo_analyzer(name: str, settings: Settings, registry) -> ComboAnalyzer:
    """Build a combo analyzer whose sub-analyzers come from ``registry``.

    Other combo analyzers are never eligible as sub-analyzers.
    """
    return ComboAnalyzer(
        name,
        settings,
        resolver=lambda sub_name: registry.get(sub_name, include_combo=False),
    )


__all__ = [
    "ComboAnalyzer",
    "ComboSettings",
    "provide_combo_analyzer",
]
