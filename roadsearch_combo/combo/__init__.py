"""RoadSearch Combo - Merged Multi-Analyzer Token Streams.

Importing this package registers the ``combo`` analyzer type with the
analysis registry.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from roadsearch_combo.combo.pipeline import (
    PipelineAdapter,
    PositionTracker,
)
from roadsearch_combo.combo.merge import (
    MergeScheduler,
    PositionedToken,
    SchedulerState,
    TieBreak,
)
from roadsearch_combo.combo.dedup import (
    DeduplicationFilter,
    deduplicate,
)
from roadsearch_combo.combo.analyzer import (
    ComboAnalyzer,
    ComboSettings,
)

__all__ = [
    "PipelineAdapter",
    "PositionTracker",
    "MergeScheduler",
    "PositionedToken",
    "SchedulerState",
    "TieBreak",
    "DeduplicationFilter",
    "deduplicate",
    "ComboAnalyzer",
    "ComboSettings",
]
