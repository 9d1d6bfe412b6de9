"""RoadSearch Combo Pipelines - Per-Pipeline Token Sources.

A :class:`PipelineAdapter` turns one resolved sub-analyzer and one input
text into a forward-only source of tokens, tracking the absolute position
of each token with its own :class:`PositionTracker`.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, Optional, Tuple

from roadsearch_combo.analyzers.base import Analyzer, Token

logger = logging.getLogger(__name__)


class PositionTracker:
    """Cumulative absolute position of one pipeline.

    Starts at -1 so that a first token with increment 1 sits on position 0.
    """

    def __init__(self):
        self.current_position = -1

    def advance(self, token: Token) -> int:
        """Account for ``token`` and return its absolute position."""
        if token.position_increment < 0:
            raise ValueError(
                f"Negative position increment {token.position_increment} "
                f"for token {token.text!r}"
            )
        self.current_position += token.position_increment
        return self.current_position


class PipelineAdapter:
    """Single-use token source over one sub-analyzer and one text.

    The sub-analyzer only runs on the first pull, and any exception it
    raises reaches the caller unchanged. Once exhausted the adapter stays
    exhausted; analyzing another text needs a new adapter.

    Attributes:
        index: Declaration index of the pipeline within its combo analyzer
        name: Sub-analyzer name, for diagnostics
    """

    def __init__(
        self,
        index: int,
        name: str,
        source: Callable[[], Iterable[Token]],
    ):
        """Initialize adapter.

        Args:
            index: Declaration index of the pipeline
            name: Sub-analyzer name
            source: Zero-argument callable producing the pipeline's tokens
        """
        self.index = index
        self.name = name
        self._source = source
        self._tokens: Optional[Iterator[Token]] = None
        self._tracker = PositionTracker()
        self._exhausted = False
        self.pulled = 0

    @classmethod
    def for_analyzer(
        cls,
        index: int,
        name: str,
        analyzer: Analyzer,
        text: str,
    ) -> "PipelineAdapter":
        """Create an adapter running ``analyzer`` over ``text``."""
        return cls(index, name, lambda: analyzer.analyze(text))

    @classmethod
    def for_tokens(
        cls,
        index: int,
        name: str,
        tokens: Tuple[Token, ...],
    ) -> "PipelineAdapter":
        """Create an adapter replaying already buffered tokens."""
        return cls(index, name, lambda: tokens)

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def position(self) -> int:
        """Absolute position of the last pulled token (-1 before any)."""
        return self._tracker.current_position

    def next_token(self) -> Optional[Tuple[int, Token]]:
        """Pull the next token.

        Returns:
            ``(absolute_position, token)``, or None once the pipeline is done
        """
        if self._exhausted:
            return None
        if self._tokens is None:
            self._tokens = iter(self._source())

        token = next(self._tokens, None)
        if token is None:
            self._exhausted = True
            self._tokens = None
            logger.debug(f"Pipeline {self.name!r} exhausted after {self.pulled} tokens")
            return None

        self.pulled += 1
        return self._tracker.advance(token), token

    def __iter__(self) -> Iterator[Tuple[int, Token]]:
        while True:
            item = self.next_token()
            if item is None:
                return
            yield item

    def __repr__(self) -> str:
        return f"PipelineAdapter({self.index}, {self.name!r}, pos={self.position})"


__all__ = [
    "PositionTracker",
    "PipelineAdapter",
]
