"""RoadSearch Combo Merge - K-Way Merge of Pipeline Token Streams.

The :class:`MergeScheduler` interleaves the outputs of several pipelines
into one position-ordered stream. Tokens are grouped into batches sharing
one absolute position; every emitted token gets a position increment
recomputed against the previously emitted position.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, Union

from roadsearch_combo.analyzers.base import Token
from roadsearch_combo.combo.pipeline import PipelineAdapter
from roadsearch_combo.settings import AnalysisConfigurationError

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    """Merge scheduler lifecycle."""

    PRIMING = auto()
    EMITTING = auto()
    EXHAUSTED = auto()


class TieBreak(Enum):
    """Order of tokens from different pipelines sharing a position.

    DECLARATION orders them by pipeline declaration order. ARRIVAL orders
    them by the moment each token was pulled from its pipeline, except that
    a pipeline whose token was just emitted goes on emitting while its next
    tokens share the position. Both keep the pipeline-internal order of
    co-located tokens.
    """

    DECLARATION = "declaration"
    ARRIVAL = "arrival"

    @classmethod
    def parse(cls, value: Union[str, "TieBreak"]) -> "TieBreak":
        if isinstance(value, TieBreak):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            choices = ", ".join(t.value for t in cls)
            raise AnalysisConfigurationError(
                f"Unknown tie_break policy [{value}], expected one of: {choices}"
            ) from e


@dataclass(frozen=True)
class PositionedToken:
    """A token held by the scheduler, with its merge bookkeeping.

    Attributes:
        position: Absolute position within the source pipeline
        pipeline: Declaration index of the source pipeline
        sequence: Global pull order within this merge
        token: Token as produced by the pipeline
    """

    position: int
    pipeline: int
    sequence: int
    token: Token


Batch = List[PositionedToken]


class MergeScheduler:
    """K-way merge of pipeline adapters keyed by absolute position.

    A scheduler is single-use: it consumes its adapters. Iterating yields
    the merged tokens; :meth:`batches` yields the same tokens grouped by
    position, before increments are recomputed.
    """

    def __init__(
        self,
        adapters: Sequence[PipelineAdapter],
        tie_break: TieBreak = TieBreak.DECLARATION,
        batch_filter: Optional[Callable[[Batch], Batch]] = None,
    ):
        """Initialize scheduler.

        Args:
            adapters: Pipeline adapters, in declaration order
            tie_break: Ordering of equal-position tokens across pipelines
            batch_filter: Optional per-batch post-processing step
        """
        self._adapters = list(adapters)
        self.tie_break = tie_break
        self._batch_filter = batch_filter
        self._heap: List[Tuple] = []
        self._sequence = 0
        self.state = SchedulerState.PRIMING

    def _key(self, item: PositionedToken) -> Tuple:
        if self.tie_break is TieBreak.ARRIVAL:
            return (item.position, item.sequence)
        return (item.position, item.pipeline, item.sequence)

    def _next(self, adapter: PipelineAdapter) -> Optional[PositionedToken]:
        pulled = adapter.next_token()
        if pulled is None:
            return None
        position, token = pulled
        item = PositionedToken(position, adapter.index, self._sequence, token)
        self._sequence += 1
        return item

    def _push(self, item: PositionedToken, adapter: PipelineAdapter) -> None:
        heapq.heappush(self._heap, self._key(item) + (item, adapter))

    def _pull(self, adapter: PipelineAdapter) -> None:
        """Pull the next token of ``adapter`` into the heap, if any."""
        item = self._next(adapter)
        if item is not None:
            self._push(item, adapter)

    def _drain(self, adapter: PipelineAdapter, position: int, batch: Batch) -> None:
        """Move the tokens of ``adapter`` sitting on ``position`` into ``batch``."""
        while True:
            item = self._next(adapter)
            if item is None:
                return
            if item.position != position:
                self._push(item, adapter)
                return
            batch.append(item)

    def _prime(self) -> None:
        for adapter in self._adapters:
            self._pull(adapter)
        self.state = SchedulerState.EMITTING if self._heap else SchedulerState.EXHAUSTED
        logger.debug(f"Primed {len(self._adapters)} pipelines, {len(self._heap)} holding tokens")

    def next_batch(self) -> Optional[Batch]:
        """Collect every token sitting on the lowest pending position.

        Each contributing adapter is refilled right after its token is
        taken, so zero-increment chains end up in the same batch. Under
        ARRIVAL such a chain follows its first token directly.

        Returns:
            The batch, or None once every pipeline is exhausted
        """
        if self.state is SchedulerState.PRIMING:
            self._prime()
        if self.state is SchedulerState.EXHAUSTED:
            return None

        position = self._heap[0][0]
        batch: Batch = []
        while self._heap and self._heap[0][0] == position:
            entry = heapq.heappop(self._heap)
            item, adapter = entry[-2], entry[-1]
            batch.append(item)
            if self.tie_break is TieBreak.ARRIVAL:
                self._drain(adapter, position, batch)
            else:
                self._pull(adapter)

        if not self._heap:
            self.state = SchedulerState.EXHAUSTED
        return batch

    def batches(self) -> Iterator[Batch]:
        """Iterate over the position batches, after the batch filter."""
        while True:
            batch = self.next_batch()
            if batch is None:
                return
            if self._batch_filter is not None:
                batch = self._batch_filter(batch)
            if batch:
                yield batch

    def __iter__(self) -> Iterator[Token]:
        last_position = -1
        for batch in self.batches():
            for item in batch:
                yield item.token.copy_with(
                    position=item.position,
                    position_increment=item.position - last_position,
                )
                last_position = item.position


__all__ = [
    "Batch",
    "MergeScheduler",
    "PositionedToken",
    "SchedulerState",
    "TieBreak",
]
