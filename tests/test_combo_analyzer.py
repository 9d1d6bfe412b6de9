"""
Tests for the ComboAnalyzer facade.

This module tests:
1. Configuration validation at construction
2. Lazy, one-time sub-analyzer resolution (including under concurrency)
3. Degraded operation when sub-analyzers cannot be resolved
4. Deduplication, caching and fault propagation per request
"""

import threading

import pytest

from roadsearch_combo.combo.analyzer import ComboAnalyzer, ComboSettings
from roadsearch_combo.combo.merge import TieBreak
from roadsearch_combo.settings import AnalysisConfigurationError, Settings

from tests.conftest import (
    CountingResolver,
    FailingAnalyzer,
    ScriptedAnalyzer,
    positions,
    terms,
)


@pytest.fixture
def pipelines():
    return {
        "lower": ScriptedAnalyzer([("ławka", 1), ("kółko", 1), ("slowo", 1)]),
        "folded": ScriptedAnalyzer([("Lawka", 1), ("Kolko", 1), ("slowo", 1)]),
    }


class TestConfiguration:
    """Test construction-time validation."""

    def test_missing_sub_analyzers(self):
        with pytest.raises(AnalysisConfigurationError, match="sub_analyzers"):
            ComboAnalyzer("broken", {"deduplication": True}, resolver=lambda name: None)

    def test_empty_sub_analyzers(self):
        with pytest.raises(AnalysisConfigurationError):
            ComboAnalyzer("broken", {"sub_analyzers": []}, resolver=lambda name: None)
        with pytest.raises(AnalysisConfigurationError):
            ComboAnalyzer("broken", ComboSettings(), resolver=lambda name: None)

    def test_defaults(self):
        combo = ComboAnalyzer("c", {"sub_analyzers": ["a"]}, resolver=lambda name: None)
        assert combo.config.deduplication is False
        assert combo.config.tokenstream_caching is True
        assert combo.config.tie_break is TieBreak.DECLARATION

    def test_settings_values(self):
        combo = ComboAnalyzer(
            "c",
            Settings({
                "sub_analyzers": "a, b",
                "deduplication": "true",
                "tokenstream_caching": False,
                "tie_break": "arrival",
            }),
            resolver=lambda name: None,
        )
        assert combo.config == ComboSettings(
            sub_analyzers=["a", "b"],
            deduplication=True,
            tokenstream_caching=False,
            tie_break=TieBreak.ARRIVAL,
        )

    def test_bad_tie_break(self):
        with pytest.raises(AnalysisConfigurationError):
            ComboAnalyzer("c", {"sub_analyzers": ["a"], "tie_break": "random"}, resolver=lambda n: None)


class TestLazyResolution:
    """Test one-time, lazy sub-analyzer resolution."""

    def test_not_resolved_at_construction(self, pipelines):
        resolver = CountingResolver(pipelines)
        combo = ComboAnalyzer("c", {"sub_analyzers": ["lower", "folded"]}, resolver)
        assert resolver.calls == []
        assert not combo.initialized

        combo.analyze("text")
        combo.analyze("other text")
        assert resolver.calls == ["lower", "folded"]
        assert combo.sub_analyzer_names == ["lower", "folded"]

    def test_concurrent_first_use_resolves_once(self, pipelines):
        resolver = CountingResolver(pipelines, delay=0.05)
        combo = ComboAnalyzer("c", {"sub_analyzers": ["lower", "folded"]}, resolver)
        barrier = threading.Barrier(8)
        results = []
        errors = []

        def worker():
            barrier.wait()
            try:
                results.append(terms(combo.analyze("text")))
            except Exception as e:  # surfaced through the errors list
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert resolver.calls == ["lower", "folded"]
        assert len(results) == 8
        assert all(result == results[0] for result in results)

    def test_unresolved_names_are_skipped(self, pipelines, caplog):
        resolver = CountingResolver(pipelines)
        combo = ComboAnalyzer("c", {"sub_analyzers": ["missing", "folded"]}, resolver)
        with caplog.at_level("DEBUG", logger="roadsearch_combo.combo.analyzer"):
            tokens = combo.analyze("text")
        assert terms(tokens) == ["Lawka", "Kolko", "slowo"]
        assert combo.sub_analyzer_names == ["folded"]
        assert "missing" in caplog.text

    def test_all_unresolved_gives_empty_output(self):
        combo = ComboAnalyzer("c", {"sub_analyzers": ["x", "y"]}, resolver=lambda name: None)
        assert list(combo.token_stream("any text at all")) == []
        assert len(combo.analyze("more text")) == 0


class TestAnalysis:
    """Test per-request analysis behavior."""

    def test_merged_output(self, pipelines):
        combo = ComboAnalyzer("c", {"sub_analyzers": ["lower", "folded"]}, CountingResolver(pipelines))
        tokens = combo.analyze("Ławka Kółko slowo")
        assert terms(tokens) == ["ławka", "Lawka", "kółko", "Kolko", "slowo", "slowo"]
        assert positions(tokens) == [0, 0, 1, 1, 2, 2]

    def test_deduplication(self, pipelines):
        combo = ComboAnalyzer(
            "c",
            {"sub_analyzers": ["lower", "folded"], "deduplication": True},
            CountingResolver(pipelines),
        )
        tokens = combo.analyze("Ławka Kółko slowo")
        assert terms(tokens) == ["ławka", "Lawka", "kółko", "Kolko", "slowo"]
        assert positions(tokens) == [0, 0, 1, 1, 2]

    def test_same_pipeline_twice_without_dedup(self, pipelines):
        combo = ComboAnalyzer("c", {"sub_analyzers": ["lower", "lower"]}, CountingResolver(pipelines))
        assert terms(combo.analyze("x")) == ["ławka", "ławka", "kółko", "kółko", "slowo", "slowo"]

    @pytest.mark.parametrize("caching", [True, False])
    def test_idempotent(self, pipelines, caching):
        combo = ComboAnalyzer(
            "c",
            {"sub_analyzers": ["lower", "folded"], "tokenstream_caching": caching},
            CountingResolver(pipelines),
        )
        first = combo.analyze("Ławka Kółko slowo").to_list()
        second = combo.analyze("Ławka Kółko slowo").to_list()
        assert first == second

    def test_caching_replays_buffered_streams(self, pipelines):
        combo = ComboAnalyzer("c", {"sub_analyzers": ["lower"]}, CountingResolver(pipelines))
        combo.analyze("same")
        combo.analyze("same")
        assert pipelines["lower"].calls == 1
        combo.analyze("different")
        assert pipelines["lower"].calls == 2

        combo.close()
        combo.analyze("same")
        assert pipelines["lower"].calls == 3

    def test_without_caching_pipelines_rerun(self, pipelines):
        combo = ComboAnalyzer(
            "c",
            {"sub_analyzers": ["lower"], "tokenstream_caching": False},
            CountingResolver(pipelines),
        )
        combo.analyze("same")
        combo.analyze("same")
        assert pipelines["lower"].calls == 2

    @pytest.mark.parametrize("caching", [True, False])
    def test_sub_analyzer_fault_propagates(self, pipelines, caching):
        error = UnicodeError("malformed input")
        analyzers = dict(pipelines, bad=FailingAnalyzer(error))
        combo = ComboAnalyzer(
            "c",
            {"sub_analyzers": ["lower", "bad"], "tokenstream_caching": caching},
            CountingResolver(analyzers),
        )
        for _ in range(2):
            with pytest.raises(UnicodeError) as exc_info:
                combo.analyze("text")
            assert exc_info.value is error

    def test_token_stream_is_lazy(self, pipelines):
        combo = ComboAnalyzer(
            "c",
            {"sub_analyzers": ["lower"], "tokenstream_caching": False},
            CountingResolver(pipelines),
        )
        stream = combo.token_stream("text")
        assert pipelines["lower"].calls == 0
        assert next(stream).text == "ławka"
        assert pipelines["lower"].calls == 1
