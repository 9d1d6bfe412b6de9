"""Shared fixtures for the RoadSearch combo test suite."""

import threading
from typing import Iterable, List, Optional, Tuple

import pytest

from roadsearch_combo.analyzers.base import Analyzer, Token, TokenStream


class ScriptedAnalyzer(Analyzer):
    """Analyzer returning a fixed token script, whatever the input.

    The script is a list of ``(text, position_increment)`` pairs; offsets
    are synthesized from the script order. Calls are counted.
    """

    def __init__(self, script: Iterable[Tuple[str, int]]):
        super().__init__()
        self.script = list(script)
        self.calls = 0
        self._lock = threading.Lock()

    def analyze(self, text: str) -> TokenStream:
        with self._lock:
            self.calls += 1
        tokens = []
        offset = 0
        for term, increment in self.script:
            tokens.append(Token(
                text=term,
                start_offset=offset,
                end_offset=offset + len(term),
                position_increment=increment,
            ))
            offset += len(term) + 1
        return TokenStream(tokens).with_positions()


class FailingAnalyzer(Analyzer):
    """Analyzer raising the given exception on every call."""

    def __init__(self, error: Exception):
        super().__init__()
        self.error = error

    def analyze(self, text: str) -> TokenStream:
        raise self.error


class CountingResolver:
    """Dict-backed sub-analyzer lookup recording every call."""

    def __init__(self, analyzers, delay: float = 0.0):
        self.analyzers = dict(analyzers)
        self.delay = delay
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def __call__(self, name: str) -> Optional[Analyzer]:
        if self.delay:
            threading.Event().wait(self.delay)
        with self._lock:
            self.calls.append(name)
        return self.analyzers.get(name)


@pytest.fixture
def scripted():
    """Factory for scripted analyzers."""
    return ScriptedAnalyzer


@pytest.fixture
def resolver_for():
    """Factory for counting resolvers."""
    return CountingResolver


def terms(tokens) -> List[str]:
    return [t.text for t in tokens]


def positions(tokens) -> List[int]:
    return [t.position for t in tokens]
