"""RoadSearch Analyzer Base - Core Text Analysis Components.

Provides the token model and the base classes for the text analysis
pipeline: character filters, tokenizers, token filters and analyzers.

Tokens carry a position increment relative to the previous token of the
same pipeline. Absolute positions are derived from the increments once a
pipeline has finished running.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import bisect
import dataclasses
import html
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Token type classification."""

    WORD = "word"
    ALPHANUM = "<ALPHANUM>"
    NUMBER = "<NUM>"
    EMAIL = "<EMAIL>"
    URL = "<URL>"
    CJK = "<IDEOGRAPHIC>"
    SYNONYM = "SYNONYM"


@dataclass(frozen=True)
class Token:
    """A token in the analysis stream.

    Attributes:
        text: Token text
        start_offset: Start character offset
        end_offset: End character offset
        position_increment: Gap to the previous token of the same stream
        token_type: Type classification, or None when untyped
        position: Absolute position, filled in once increments are resolved
    """

    text: str
    start_offset: int = 0
    end_offset: int = 0
    position_increment: int = 1
    token_type: Optional[TokenType] = TokenType.WORD
    position: int = 0

    def __post_init__(self):
        if self.start_offset < 0 or self.end_offset < self.start_offset:
            raise ValueError(
                f"Invalid offsets for {self.text!r}: "
                f"[{self.start_offset}, {self.end_offset}]"
            )
        if self.position_increment < 0:
            raise ValueError(
                f"Negative position increment for {self.text!r}: "
                f"{self.position_increment}"
            )

    def __repr__(self) -> str:
        type_name = self.token_type.name if self.token_type else None
        return f"Token({self.text!r}, pos={self.position}, type={type_name})"

    def copy_with(self, **changes: Any) -> "Token":
        """Create a copy of this token with some fields replaced."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "token": self.text,
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
            "type": self.token_type.value if self.token_type else None,
            "position": self.position,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Token":
        """Create from dictionary."""
        type_value = data.get("type", TokenType.WORD.value)
        return cls(
            text=data["token"],
            start_offset=data.get("start_offset", 0),
            end_offset=data.get("end_offset", 0),
            position_increment=data.get("position_increment", 1),
            token_type=TokenType(type_value) if type_value is not None else None,
            position=data.get("position", 0),
        )


class TokenStream:
    """A finite, ordered stream of tokens.

    Filters never mutate a stream in place; they build a new one.
    """

    def __init__(self, tokens: Optional[Iterable[Token]] = None):
        self._tokens: List[Token] = list(tokens) if tokens is not None else []

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __getitem__(self, index: int) -> Token:
        return self._tokens[index]

    def to_list(self) -> List[Token]:
        """Convert to list of tokens."""
        return list(self._tokens)

    def get_texts(self) -> List[str]:
        """Get list of token texts."""
        return [t.text for t in self._tokens]

    def filter(self, predicate: Callable[[Token], bool]) -> "TokenStream":
        """Keep tokens matching ``predicate``.

        Increments of dropped tokens are folded into the next kept token so
        the remaining tokens keep their original positions.
        """
        kept = []
        skipped = 0
        for token in self._tokens:
            if predicate(token):
                if skipped:
                    token = token.copy_with(
                        position_increment=token.position_increment + skipped
                    )
                    skipped = 0
                kept.append(token)
            else:
                skipped += token.position_increment
        return TokenStream(kept)

    def map(self, func: Callable[[Token], Token]) -> "TokenStream":
        """Map function over tokens."""
        return TokenStream([func(t) for t in self._tokens])

    def with_positions(self) -> "TokenStream":
        """Resolve absolute positions from the position increments.

        The first token with an increment of 1 lands on position 0.
        """
        position = -1
        tokens = []
        for token in self._tokens:
            position += token.position_increment
            tokens.append(token.copy_with(position=position))
        return TokenStream(tokens)


class OffsetMap:
    """Maps offsets in filtered text back to offsets in the unfiltered text.

    Holds one (output offset, input offset) breakpoint at each edge of an
    edited span. Between breakpoints offsets shift by the last breakpoint's
    difference, without running past the next breakpoint's input offset.
    """

    def __init__(self):
        self._outputs: List[int] = []
        self._inputs: List[int] = []

    def __len__(self) -> int:
        return len(self._outputs)

    def add(self, output_offset: int, input_offset: int) -> None:
        self._outputs.append(output_offset)
        self._inputs.append(input_offset)

    def correct(self, offset: int) -> int:
        """Translate a filtered-text offset into an input-text offset."""
        i = bisect.bisect_right(self._outputs, offset) - 1
        if i < 0:
            return offset
        corrected = self._inputs[i] + offset - self._outputs[i]
        if i + 1 < len(self._inputs):
            corrected = min(corrected, self._inputs[i + 1])
        return corrected


def _substitute(
    pattern: re.Pattern,
    text: str,
    replace: Callable[[re.Match], str],
) -> Tuple[str, OffsetMap]:
    """Replace every match of ``pattern``, recording the offset shifts."""
    offsets = OffsetMap()
    pieces = []
    last = 0
    output_length = 0
    for match in pattern.finditer(text):
        start, end = match.span()
        replacement = replace(match)
        if replacement == match.group():
            continue
        pieces.append(text[last:start])
        output_length += start - last
        offsets.add(output_length, start)
        pieces.append(replacement)
        output_length += len(replacement)
        offsets.add(output_length, end)
        last = end
    pieces.append(text[last:])
    return "".join(pieces), offsets


class CharacterFilter(ABC):
    """Transforms the input text before tokenization.

    Filters that change the text length report how offsets moved, so
    token offsets can be mapped back onto the analyzer input.
    """

    @abstractmethod
    def apply(self, text: str) -> Tuple[str, OffsetMap]:
        """Filter text.

        Args:
            text: Input text

        Returns:
            Filtered text and the map back to ``text`` offsets
        """
        pass

    def filter(self, text: str) -> str:
        return self.apply(text)[0]


class HTMLCharacterFilter(CharacterFilter):
    """Blanks out HTML tags, optionally decoding entities."""

    TAG_PATTERN = re.compile(r"<[^>]+>")
    ENTITY_PATTERN = re.compile(r"&(?:#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")

    def __init__(self, escaped: bool = False):
        """Initialize filter.

        Args:
            escaped: Decode HTML entities such as ``&amp;``
        """
        self.escaped = escaped

    def apply(self, text: str) -> Tuple[str, OffsetMap]:
        text = self.TAG_PATTERN.sub(lambda m: " " * len(m.group()), text)
        if self.escaped:
            return _substitute(self.ENTITY_PATTERN, text, lambda m: html.unescape(m.group()))
        return text, OffsetMap()


class MappingCharacterFilter(CharacterFilter):
    """Maps character sequences based on a mapping table.

    The longest matching key wins; replaced text is never matched again.
    """

    def __init__(self, mappings: Dict[str, str]):
        self.mappings = {k: v for k, v in mappings.items() if k}
        keys = sorted(self.mappings, key=len, reverse=True)
        self._pattern = re.compile("|".join(re.escape(k) for k in keys)) if keys else None

    def apply(self, text: str) -> Tuple[str, OffsetMap]:
        if self._pattern is None:
            return text, OffsetMap()
        return _substitute(self._pattern, text, lambda m: self.mappings[m.group()])


class PatternReplaceCharacterFilter(CharacterFilter):
    """Replaces patterns using regex."""

    def __init__(self, pattern: str, replacement: str):
        self.pattern = re.compile(pattern)
        self.replacement = replacement

    def apply(self, text: str) -> Tuple[str, OffsetMap]:
        return _substitute(self.pattern, text, lambda m: m.expand(self.replacement))


class Tokenizer(ABC):
    """Base class for tokenizers.

    Tokenizers break text into tokens, each carrying a position increment
    of at least 1.
    """

    @abstractmethod
    def tokenize(self, text: str) -> TokenStream:
        """Tokenize text.

        Args:
            text: Input text

        Returns:
            Token stream
        """
        pass


class TokenFilter(ABC):
    """Base class for token filters.

    Token filters transform, remove, or add tokens in the stream.
    """

    @abstractmethod
    def filter(self, stream: TokenStream) -> TokenStream:
        """Filter token stream.

        Args:
            stream: Input token stream

        Returns:
            Filtered token stream
        """
        pass


class Analyzer(ABC):
    """Base class for text analyzers.

    An analyzer combines character filters, a tokenizer, and token
    filters into a complete text analysis pipeline. Analyzer instances
    are stateless definitions: every call to :meth:`analyze` runs the
    pipeline from scratch over the given text.
    """

    def __init__(
        self,
        char_filters: Optional[List[CharacterFilter]] = None,
        tokenizer: Optional[Tokenizer] = None,
        token_filters: Optional[List[TokenFilter]] = None,
    ):
        """Initialize analyzer.

        Args:
            char_filters: Character filters to apply
            tokenizer: Tokenizer to use
            token_filters: Token filters to apply
        """
        self._char_filters = char_filters or []
        self._tokenizer = tokenizer
        self._token_filters = token_filters or []

    def analyze(self, text: str) -> TokenStream:
        """Analyze text into tokens with resolved positions.

        Args:
            text: Input text

        Returns:
            Token stream, with offsets into ``text``
        """
        offset_maps = []
        for char_filter in self._char_filters:
            text, offsets = char_filter.apply(text)
            if offsets:
                offset_maps.append(offsets)

        if self._tokenizer is None:
            raise NotImplementedError(
                f"{type(self).__name__} has no tokenizer configured"
            )
        stream = self._tokenizer.tokenize(text)

        if offset_maps:
            def correct(offset: int) -> int:
                for offsets in reversed(offset_maps):
                    offset = offsets.correct(offset)
                return offset

            stream = stream.map(lambda t: t.copy_with(
                start_offset=correct(t.start_offset),
                end_offset=correct(t.end_offset),
            ))

        for token_filter in self._token_filters:
            stream = token_filter.filter(stream)

        return stream.with_positions()

    def get_terms(self, text: str) -> List[str]:
        """Get analyzed terms from text."""
        return self.analyze(text).get_texts()

    def get_tokens_with_positions(self, text: str) -> List[Tuple[str, int, int]]:
        """Get (term, position, start offset) tuples."""
        return [(t.text, t.position, t.start_offset) for t in self.analyze(text)]

    def close(self) -> None:
        """Release resources held by the analyzer."""
        pass


__all__ = [
    "Analyzer",
    "Token",
    "TokenType",
    "TokenStream",
    "Tokenizer",
    "TokenFilter",
    "CharacterFilter",
    "OffsetMap",
    "HTMLCharacterFilter",
    "MappingCharacterFilter",
    "PatternReplaceCharacterFilter",
]
