"""RoadSearch Standard Analyzers - Pre-configured Analyzers.

Common analyzer configurations, registered by name so that index settings
and combo analyzers can refer to them.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from roadsearch_combo.analyzers.base import (
    Analyzer,
    CharacterFilter,
    Tokenizer,
    TokenFilter,
)
from roadsearch_combo.analyzers.tokenizers import (
    KeywordTokenizer,
    LetterTokenizer,
    StandardTokenizer,
    WhitespaceTokenizer,
)
from roadsearch_combo.analyzers.filters import (
    ASCIIFoldingFilter,
    LowercaseFilter,
    StemmerFilter,
    STOPWORDS,
    StopwordFilter,
)

# name -> zero-argument analyzer factory
BUILTIN_ANALYZERS: Dict[str, Callable[[], Analyzer]] = {}


def register_analyzer(name: str) -> Callable[[type], type]:
    """Decorator registering an analyzer class as a built-in.

    Args:
        name: Analyzer name used in settings

    Returns:
        Decorator function
    """
    def decorator(cls: type) -> type:
        BUILTIN_ANALYZERS[name] = cls
        return cls
    return decorator


def get_builtin_analyzer(name: str) -> Optional[Analyzer]:
    """Instantiate a built-in analyzer, or return None if unknown."""
    factory = BUILTIN_ANALYZERS.get(name)
    return factory() if factory is not None else None


class CustomAnalyzer(Analyzer):
    """Analyzer assembled from settings.

    Each component is already instantiated; see
    :class:`~roadsearch_combo.analyzers.registry.AnalysisRegistry` for the
    settings format.
    """

    def __init__(
        self,
        tokenizer: Tokenizer,
        char_filters: Optional[List[CharacterFilter]] = None,
        token_filters: Optional[List[TokenFilter]] = None,
    ):
        super().__init__(
            char_filters=char_filters,
            tokenizer=tokenizer,
            token_filters=token_filters,
        )


@register_analyzer("standard")
class StandardAnalyzer(Analyzer):
    """Standard analyzer for general text.

    Uses standard tokenization with lowercasing. Stopword removal is off
    unless a stopword set is given.
    """

    def __init__(
        self,
        stopwords: Optional[Iterable[str]] = None,
        max_token_length: int = 255,
    ):
        token_filters: List[TokenFilter] = [LowercaseFilter()]
        if stopwords:
            token_filters.append(StopwordFilter(stopwords=stopwords))
        super().__init__(
            tokenizer=StandardTokenizer(max_token_length=max_token_length),
            token_filters=token_filters,
        )


@register_analyzer("simple")
class SimpleAnalyzer(Analyzer):
    """Breaks on non-letters and lowercases."""

    def __init__(self):
        super().__init__(
            tokenizer=LetterTokenizer(),
            token_filters=[LowercaseFilter()],
        )


@register_analyzer("whitespace")
class WhitespaceAnalyzer(Analyzer):
    """Splits only on whitespace, preserves case and punctuation."""

    def __init__(self):
        super().__init__(tokenizer=WhitespaceTokenizer())


@register_analyzer("keyword")
class KeywordAnalyzer(Analyzer):
    """Treats entire input as a single token. Useful for exact matching."""

    def __init__(self):
        super().__init__(tokenizer=KeywordTokenizer())


@register_analyzer("stop")
class StopAnalyzer(Analyzer):
    """Simple analyzer with stopword removal."""

    def __init__(self, stopwords: Optional[Iterable[str]] = None):
        super().__init__(
            tokenizer=LetterTokenizer(),
            token_filters=[
                LowercaseFilter(),
                StopwordFilter(stopwords=stopwords),
            ],
        )


@register_analyzer("folding")
class FoldingAnalyzer(Analyzer):
    """Lowercases and converts accented characters to ASCII."""

    def __init__(self):
        super().__init__(
            tokenizer=StandardTokenizer(),
            token_filters=[
                LowercaseFilter(),
                ASCIIFoldingFilter(),
            ],
        )


class LanguageAnalyzer(Analyzer):
    """Base class for language-specific analyzers.

    Standard tokenization, lowercasing, language stopwords and the
    language's Snowball stemmer.
    """

    def __init__(self, language: str = "english"):
        self.language = language
        super().__init__(
            tokenizer=StandardTokenizer(),
            token_filters=[
                LowercaseFilter(),
                StopwordFilter(stopwords=STOPWORDS.get(language, frozenset())),
                StemmerFilter(language=language),
            ],
        )


@register_analyzer("english")
class EnglishAnalyzer(LanguageAnalyzer):
    def __init__(self):
        super().__init__(language="english")


@register_analyzer("spanish")
class SpanishAnalyzer(LanguageAnalyzer):
    def __init__(self):
        super().__init__(language="spanish")


@register_analyzer("french")
class FrenchAnalyzer(LanguageAnalyzer):
    def __init__(self):
        super().__init__(language="french")


@register_analyzer("german")
class GermanAnalyzer(LanguageAnalyzer):
    def __init__(self):
        super().__init__(language="german")


__all__ = [
    "BUILTIN_ANALYZERS",
    "register_analyzer",
    "get_builtin_analyzer",
    "CustomAnalyzer",
    "StandardAnalyzer",
    "SimpleAnalyzer",
    "WhitespaceAnalyzer",
    "KeywordAnalyzer",
    "StopAnalyzer",
    "FoldingAnalyzer",
    "LanguageAnalyzer",
    "EnglishAnalyzer",
    "SpanishAnalyzer",
    "FrenchAnalyzer",
    "GermanAnalyzer",
]
