"""RoadSearch Combo - Multi-Analyzer Text Analysis for RoadSearch.

A combo analyzer indexes one field under several linguistic treatments
at once (whitespace-split, stemmed, exact keyword, ...) by merging the
token streams of independently configured analyzers into a single,
position-ordered stream.

Architecture:
┌─────────────────────────────────────────────────────────────────────────────┐
│                           Combo Analyzer                                    │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                             │
│   ┌────────────┐   resolve once    ┌─────────────────────────────────────┐  │
│   │  Analysis  │ ───────────────→  │  sub-analyzers (declaration order)  │  │
│   │  Registry  │                   └─────────────────────────────────────┘  │
│   └────────────┘                                     │ per request          │
│                                                      ↓                      │
│   ┌────────────┐  ┌────────────┐  ┌────────────┐                            │
│   │  Pipeline  │  │  Pipeline  │  │  Pipeline  │   position trackers        │
│   │  Adapter   │  │  Adapter   │  │  Adapter   │                            │
│   └────────────┘  └────────────┘  └────────────┘                            │
│          └───────────────┼───────────────┘                                  │
│                          ↓                                                  │
│                ┌──────────────────┐   ┌──────────────────┐                  │
│                │ Merge Scheduler  │ → │  Deduplication   │ → tokens         │
│                └──────────────────┘   └──────────────────┘                  │
│                                                                             │
└─────────────────────────────────────────────────────────────────────────────┘

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

__version__ = "1.0.0"
__author__ = "BlackRoad OS"
__license__ = "Proprietary"

from roadsearch_combo.settings import (
    AnalysisConfigurationError,
    Settings,
)
from roadsearch_combo.analyzers import (
    Analyzer,
    AnalysisRegistry,
    Token,
    TokenStream,
    TokenType,
)
from roadsearch_combo.combo import (
    ComboAnalyzer,
    ComboSettings,
    MergeScheduler,
    PipelineAdapter,
    TieBreak,
)

__all__ = [
    "AnalysisConfigurationError",
    "Settings",
    "Analyzer",
    "AnalysisRegistry",
    "Token",
    "TokenStream",
    "TokenType",
    "ComboAnalyzer",
    "ComboSettings",
    "MergeScheduler",
    "PipelineAdapter",
    "TieBreak",
]
