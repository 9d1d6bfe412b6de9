"""RoadSearch Analyzers - Text Analysis Pipeline.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from roadsearch_combo.analyzers.base import (
    Analyzer,
    CharacterFilter,
    Token,
    TokenFilter,
    TokenStream,
    TokenType,
    Tokenizer,
)
from roadsearch_combo.analyzers.standard import (
    CustomAnalyzer,
    EnglishAnalyzer,
    FoldingAnalyzer,
    KeywordAnalyzer,
    SimpleAnalyzer,
    StandardAnalyzer,
    StopAnalyzer,
    WhitespaceAnalyzer,
    register_analyzer,
)
from roadsearch_combo.analyzers.filters import (
    ASCIIFoldingFilter,
    LengthFilter,
    LowercaseFilter,
    StemmerFilter,
    StopwordFilter,
    SynonymFilter,
    TrimFilter,
    UniqueFilter,
    UppercaseFilter,
)
from roadsearch_combo.analyzers.tokenizers import (
    KeywordTokenizer,
    LetterTokenizer,
    PatternTokenizer,
    StandardTokenizer,
    WhitespaceTokenizer,
)
from roadsearch_combo.analyzers.registry import (
    AnalysisRegistry,
    register_analyzer_type,
)

__all__ = [
    "Analyzer",
    "CharacterFilter",
    "Token",
    "TokenFilter",
    "TokenStream",
    "TokenType",
    "Tokenizer",
    "CustomAnalyzer",
    "EnglishAnalyzer",
    "FoldingAnalyzer",
    "KeywordAnalyzer",
    "SimpleAnalyzer",
    "StandardAnalyzer",
    "StopAnalyzer",
    "WhitespaceAnalyzer",
    "register_analyzer",
    "ASCIIFoldingFilter",
    "LengthFilter",
    "LowercaseFilter",
    "StemmerFilter",
    "StopwordFilter",
    "SynonymFilter",
    "TrimFilter",
    "UniqueFilter",
    "UppercaseFilter",
    "KeywordTokenizer",
    "LetterTokenizer",
    "PatternTokenizer",
    "StandardTokenizer",
    "WhitespaceTokenizer",
    "AnalysisRegistry",
    "register_analyzer_type",
]
