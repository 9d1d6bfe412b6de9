"""RoadSearch Token Filters - Token Transformation Pipeline.

Various filters for transforming, removing, or adding tokens. Filters
that drop tokens preserve position gaps; filters that add tokens place
them on the position of their source token (increment 0).

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import unicodedata
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

import Stemmer

from roadsearch_combo.analyzers.base import (
    TokenFilter,
    TokenStream,
    TokenType,
)


class LowercaseFilter(TokenFilter):
    """Converts tokens to lowercase."""

    def filter(self, stream: TokenStream) -> TokenStream:
        return stream.map(lambda t: t.copy_with(text=t.text.lower()))


class UppercaseFilter(TokenFilter):
    """Converts tokens to uppercase."""

    def filter(self, stream: TokenStream) -> TokenStream:
        return stream.map(lambda t: t.copy_with(text=t.text.upper()))


ENGLISH_STOPWORDS = frozenset([
    "a", "an", "and", "are", "as", "at", "be", "but", "by",
    "for", "if", "in", "into", "is", "it", "no", "not", "of",
    "on", "or", "such", "that", "the", "their", "then", "there",
    "these", "they", "this", "to", "was", "will", "with",
])

STOPWORDS = {
    "english": ENGLISH_STOPWORDS,
    "spanish": frozenset([
        "de", "la", "que", "el", "en", "y", "a", "los", "se", "del",
        "las", "un", "por", "con", "no", "una", "su", "para", "es", "al",
    ]),
    "french": frozenset([
        "le", "de", "la", "et", "les", "des", "en", "un", "du", "une",
        "que", "est", "pour", "qui", "dans", "ce", "il", "sur", "son", "ne",
    ]),
    "german": frozenset([
        "der", "die", "und", "in", "den", "von", "zu", "das", "mit", "sich",
        "des", "auf", "für", "ist", "im", "dem", "nicht", "ein", "eine", "als",
    ]),
}


class StopwordFilter(TokenFilter):
    """Removes common stopwords.

    The position increments of removed tokens are carried over to the next
    kept token, so phrase positions stay faithful to the original text.
    """

    def __init__(
        self,
        stopwords: Optional[Iterable[str]] = None,
        ignore_case: bool = True,
    ):
        """Initialize filter.

        Args:
            stopwords: Custom stopword set (defaults to English)
            ignore_case: Case-insensitive matching
        """
        words = ENGLISH_STOPWORDS if stopwords is None else stopwords
        self.ignore_case = ignore_case
        if ignore_case:
            self.stopwords: FrozenSet[str] = frozenset(w.lower() for w in words)
        else:
            self.stopwords = frozenset(words)

    def filter(self, stream: TokenStream) -> TokenStream:
        def keep(token):
            check_text = token.text.lower() if self.ignore_case else token.text
            return check_text not in self.stopwords

        return stream.filter(keep)


class StemmerFilter(TokenFilter):
    """Applies a Snowball stemmer to every token.

    Backed by PyStemmer; ``language`` is any algorithm name listed by
    ``Stemmer.algorithms()`` ("english", "porter", "spanish", ...).
    """

    def __init__(self, language: str = "english", ignore: Optional[Iterable[str]] = None):
        """Initialize filter.

        Args:
            language: Stemming algorithm name
            ignore: Terms that must not be stemmed
        """
        self.language = language
        self._stemmer = Stemmer.Stemmer(language)
        self.ignore = frozenset() if ignore is None else frozenset(ignore)

    @staticmethod
    def algorithms() -> List[str]:
        """List the stemming algorithms known to PyStemmer."""
        return Stemmer.algorithms()

    def filter(self, stream: TokenStream) -> TokenStream:
        stem = self._stemmer.stemWord
        ignore = self.ignore
        return stream.map(
            lambda t: t if t.text in ignore else t.copy_with(text=stem(t.text))
        )


class SynonymFilter(TokenFilter):
    """Expands tokens with synonyms.

    Synonyms are added on the same position as the original token.
    """

    def __init__(
        self,
        synonyms: Dict[str, List[str]],
        expand: bool = True,
        ignore_case: bool = True,
    ):
        """Initialize filter.

        Args:
            synonyms: Mapping of word -> synonyms
            expand: Keep the original token next to its synonyms
            ignore_case: Case-insensitive matching
        """
        self.expand = expand
        self.ignore_case = ignore_case

        if ignore_case:
            self.synonyms = {
                k.lower(): [s.lower() for s in v]
                for k, v in synonyms.items()
            }
        else:
            self.synonyms = dict(synonyms)

    def filter(self, stream: TokenStream) -> TokenStream:
        tokens = []

        for token in stream:
            lookup_text = token.text.lower() if self.ignore_case else token.text
            synonyms = self.synonyms.get(lookup_text)
            if not synonyms:
                tokens.append(token)
                continue

            increment = token.position_increment
            if self.expand:
                tokens.append(token)
                increment = 0

            for synonym in synonyms:
                tokens.append(token.copy_with(
                    text=synonym,
                    position_increment=increment,
                    token_type=TokenType.SYNONYM,
                ))
                increment = 0

        return TokenStream(tokens)


class ASCIIFoldingFilter(TokenFilter):
    """Converts non-ASCII letters to their ASCII equivalents.

    Letters without a canonical decomposition (stroked or ligature forms)
    are folded through an explicit table; everything else goes through
    NFD decomposition with the combining marks dropped.
    """

    MAPPINGS = {
        "ł": "l", "Ł": "L", "đ": "d", "Đ": "D", "ø": "o", "Ø": "O",
        "ħ": "h", "Ħ": "H", "ŧ": "t", "Ŧ": "T", "ı": "i",
        "æ": "ae", "Æ": "AE", "œ": "oe", "Œ": "OE", "ß": "ss",
        "þ": "th", "Þ": "TH", "ð": "d", "Ð": "D",
    }

    def __init__(self, preserve_original: bool = False):
        """Initialize filter.

        Args:
            preserve_original: Keep the unfolded token too, on the same position
        """
        self.preserve_original = preserve_original

    def fold(self, text: str) -> str:
        """Fold one string to ASCII where a mapping exists."""
        folded = []
        for char in text:
            if ord(char) < 128:
                folded.append(char)
            elif char in self.MAPPINGS:
                folded.append(self.MAPPINGS[char])
            else:
                normalized = unicodedata.normalize("NFD", char)
                ascii_char = "".join(c for c in normalized if ord(c) < 128)
                folded.append(ascii_char or char)
        return "".join(folded)

    def filter(self, stream: TokenStream) -> TokenStream:
        tokens = []
        for token in stream:
            folded = self.fold(token.text)
            if not self.preserve_original:
                tokens.append(token.copy_with(text=folded))
                continue

            tokens.append(token)
            if folded != token.text:
                tokens.append(token.copy_with(text=folded, position_increment=0))

        return TokenStream(tokens)


class LengthFilter(TokenFilter):
    """Filters tokens by length."""

    def __init__(self, min_length: int = 0, max_length: int = 255):
        self.min_length = min_length
        self.max_length = max_length

    def filter(self, stream: TokenStream) -> TokenStream:
        return stream.filter(lambda t: self.min_length <= len(t.text) <= self.max_length)


class TrimFilter(TokenFilter):
    """Trims whitespace from tokens, dropping tokens that become empty."""

    def filter(self, stream: TokenStream) -> TokenStream:
        trimmed = stream.map(lambda t: t.copy_with(text=t.text.strip()))
        return trimmed.filter(lambda t: bool(t.text))


class UniqueFilter(TokenFilter):
    """Drops tokens repeating a term already seen.

    With ``only_on_same_position`` the seen-set is reset on every position
    advance, so only co-located duplicates are dropped.
    """

    def __init__(self, only_on_same_position: bool = False):
        self.only_on_same_position = only_on_same_position

    def filter(self, stream: TokenStream) -> TokenStream:
        seen: Set[str] = set()

        def keep(token):
            if self.only_on_same_position and token.position_increment > 0:
                seen.clear()
            if token.text in seen:
                return False
            seen.add(token.text)
            return True

        return stream.filter(keep)


FILTER_TYPES = {
    "lowercase": LowercaseFilter,
    "uppercase": UppercaseFilter,
    "stop": StopwordFilter,
    "stemmer": StemmerFilter,
    "synonym": SynonymFilter,
    "asciifolding": ASCIIFoldingFilter,
    "length": LengthFilter,
    "trim": TrimFilter,
    "unique": UniqueFilter,
}


def get_filter_type(name: str) -> Optional[type]:
    """Look up a built-in token filter class by its settings type name."""
    return FILTER_TYPES.get(name)


__all__ = [
    "TokenFilter",
    "LowercaseFilter",
    "UppercaseFilter",
    "StopwordFilter",
    "StemmerFilter",
    "SynonymFilter",
    "ASCIIFoldingFilter",
    "LengthFilter",
    "TrimFilter",
    "UniqueFilter",
    "ENGLISH_STOPWORDS",
    "STOPWORDS",
    "FILTER_TYPES",
    "get_filter_type",
]
