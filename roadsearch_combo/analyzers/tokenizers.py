"""RoadSearch Tokenizers - Text Tokenization Strategies.

Various tokenization strategies for breaking text into tokens.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import re
from abc import abstractmethod
from typing import List, Optional

from roadsearch_combo.analyzers.base import (
    Tokenizer,
    Token,
    TokenStream,
    TokenType,
)


class StandardTokenizer(Tokenizer):
    """Standard tokenizer.

    Breaks text on whitespace and punctuation while keeping emails, URLs,
    decimal numbers and contractions together. CJK ideographs become one
    token each.
    """

    WORD_PATTERN = re.compile(
        r"""
        (?:
            # Email addresses
            [a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}
            |
            # URLs
            https?://[^\s]+
            |
            # Numbers with decimals
            \d+(?:[.,]\d+)+
            |
            # CJK characters
            [\u4e00-\u9fff\u3040-\u309f\u30a0-\u30ff]
            |
            # Words and contractions
            [^\W_\u4e00-\u9fff\u3040-\u309f\u30a0-\u30ff]+(?:'[^\W_]+)?
        )
        """,
        re.VERBOSE,
    )

    EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
    URL_PATTERN = re.compile(r"https?://[^\s]+")
    NUMBER_PATTERN = re.compile(r"\d+(?:[.,]\d+)*")

    def __init__(self, max_token_length: int = 255):
        """Initialize tokenizer.

        Args:
            max_token_length: Tokens longer than this are skipped
        """
        self.max_token_length = max_token_length

    def tokenize(self, text: str) -> TokenStream:
        tokens = []
        skipped = 0

        for match in self.WORD_PATTERN.finditer(text):
            token_text = match.group()
            if len(token_text) > self.max_token_length:
                skipped += 1
                continue

            tokens.append(Token(
                text=token_text,
                start_offset=match.start(),
                end_offset=match.end(),
                position_increment=1 + skipped,
                token_type=self._classify_token(token_text),
            ))
            skipped = 0

        return TokenStream(tokens)

    def _classify_token(self, text: str) -> TokenType:
        if self.EMAIL_PATTERN.fullmatch(text):
            return TokenType.EMAIL
        if self.URL_PATTERN.fullmatch(text):
            return TokenType.URL
        if self.NUMBER_PATTERN.fullmatch(text):
            return TokenType.NUMBER
        if any("\u4e00" <= c <= "\u9fff" for c in text):
            return TokenType.CJK
        return TokenType.ALPHANUM


class _CharClassTokenizer(Tokenizer):
    """Emits maximal runs of characters accepted by :meth:`is_token_char`."""

    @abstractmethod
    def is_token_char(self, char: str) -> bool:
        pass

    def tokenize(self, text: str) -> TokenStream:
        tokens = []
        start = 0
        in_token = False

        for i, char in enumerate(text):
            if self.is_token_char(char):
                if not in_token:
                    start = i
                    in_token = True
            elif in_token:
                tokens.append(Token(text=text[start:i], start_offset=start, end_offset=i))
                in_token = False

        if in_token:
            tokens.append(Token(text=text[start:], start_offset=start, end_offset=len(text)))

        return TokenStream(tokens)


class WhitespaceTokenizer(_CharClassTokenizer):
    """Splits text on whitespace only, preserving punctuation and case."""

    def is_token_char(self, char: str) -> bool:
        return not char.isspace()


class LetterTokenizer(_CharClassTokenizer):
    """Splits on non-letter characters, producing only letter tokens."""

    def is_token_char(self, char: str) -> bool:
        return char.isalpha()


class KeywordTokenizer(Tokenizer):
    """Emits the entire input as a single token."""

    def tokenize(self, text: str) -> TokenStream:
        if not text:
            return TokenStream()
        return TokenStream([Token(text=text, start_offset=0, end_offset=len(text))])


class PatternTokenizer(Tokenizer):
    """Pattern-based tokenizer.

    Uses a regex pattern either to split the text (default) or to match the
    tokens themselves.
    """

    def __init__(
        self,
        pattern: str = r"\W+",
        group: int = -1,
        flags: int = 0,
    ):
        """Initialize tokenizer.

        Args:
            pattern: Regex pattern
            group: Capture group to emit; -1 splits the text on the pattern
            flags: ``re`` flags
        """
        self.pattern = re.compile(pattern, flags)
        self.group = group

    def tokenize(self, text: str) -> TokenStream:
        if self.group < 0:
            return TokenStream(self._split(text))

        tokens = []
        for match in self.pattern.finditer(text):
            token_text = match.group(self.group)
            if not token_text:
                continue
            tokens.append(Token(
                text=token_text,
                start_offset=match.start(self.group),
                end_offset=match.end(self.group),
            ))
        return TokenStream(tokens)

    def _split(self, text: str) -> List[Token]:
        tokens = []
        offset = 0
        for match in self.pattern.finditer(text):
            if match.start() > offset:
                tokens.append(Token(
                    text=text[offset:match.start()],
                    start_offset=offset,
                    end_offset=match.start(),
                ))
            offset = match.end()
        if offset < len(text):
            tokens.append(Token(text=text[offset:], start_offset=offset, end_offset=len(text)))
        return tokens


TOKENIZER_TYPES = {
    "standard": StandardTokenizer,
    "whitespace": WhitespaceTokenizer,
    "letter": LetterTokenizer,
    "keyword": KeywordTokenizer,
    "pattern": PatternTokenizer,
}


def get_tokenizer_type(name: str) -> Optional[type]:
    """Look up a built-in tokenizer class by its settings type name."""
    return TOKENIZER_TYPES.get(name)


__all__ = [
    "Tokenizer",
    "StandardTokenizer",
    "WhitespaceTokenizer",
    "LetterTokenizer",
    "KeywordTokenizer",
    "PatternTokenizer",
    "TOKENIZER_TYPES",
    "get_tokenizer_type",
]
