"""RoadSearch Combo Deduplication - Same-Position Duplicate Removal.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Set

from roadsearch_combo.combo.merge import Batch

logger = logging.getLogger(__name__)


def deduplicate(batch: Batch) -> Batch:
    """Drop tokens repeating the term of an earlier token in the batch.

    Only the term text is compared; the first occurrence wins and the
    batch order is kept.
    """
    seen: Set[str] = set()
    kept = []
    for item in batch:
        if item.token.text in seen:
            continue
        seen.add(item.token.text)
        kept.append(item)
    return kept


class DeduplicationFilter:
    """Batch filter for :class:`~roadsearch_combo.combo.merge.MergeScheduler`.

    Counts the tokens it removes, which is handy when tuning a combo
    analyzer's pipelines.
    """

    def __init__(self):
        self.removed = 0

    def __call__(self, batch: Batch) -> Batch:
        kept = deduplicate(batch)
        dropped = len(batch) - len(kept)
        if dropped:
            self.removed += dropped
            logger.debug(f"Dropped {dropped} duplicate tokens at position {batch[0].position}")
        return kept


__all__ = [
    "deduplicate",
    "DeduplicationFilter",
]
