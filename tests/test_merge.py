"""
Tests for the token-stream merge core.

This module tests:
1. Per-pipeline position tracking
2. Pipeline adapters (laziness, single use, fault propagation)
3. The k-way merge scheduler and its tie-break policies
4. Same-position deduplication
"""

import pytest

from roadsearch_combo.analyzers.base import Token
from roadsearch_combo.combo.dedup import DeduplicationFilter, deduplicate
from roadsearch_combo.combo.merge import (
    MergeScheduler,
    PositionedToken,
    SchedulerState,
    TieBreak,
)
from roadsearch_combo.combo.pipeline import PipelineAdapter, PositionTracker
from roadsearch_combo.settings import AnalysisConfigurationError

from tests.conftest import FailingAnalyzer, ScriptedAnalyzer, positions, terms


def adapters_for(*scripts):
    return [
        PipelineAdapter.for_analyzer(i, f"p{i}", ScriptedAnalyzer(script), "ignored")
        for i, script in enumerate(scripts)
    ]


def merge(*scripts, tie_break=TieBreak.DECLARATION, batch_filter=None):
    return list(MergeScheduler(adapters_for(*scripts), tie_break=tie_break, batch_filter=batch_filter))


class TestPositionTracker:
    """Test cumulative position tracking."""

    def test_starts_before_first_position(self):
        tracker = PositionTracker()
        assert tracker.current_position == -1
        assert tracker.advance(Token("a")) == 0
        assert tracker.advance(Token("b", position_increment=0)) == 0
        assert tracker.advance(Token("c", position_increment=3)) == 3


class TestPipelineAdapter:
    """Test the single-use pipeline adapter."""

    def test_source_runs_lazily(self):
        analyzer = ScriptedAnalyzer([("a", 1)])
        adapter = PipelineAdapter.for_analyzer(0, "p", analyzer, "text")
        assert analyzer.calls == 0
        position, token = adapter.next_token()
        assert (position, token.text) == (0, "a")
        assert analyzer.calls == 1

    def test_yields_absolute_positions(self):
        analyzer = ScriptedAnalyzer([("a", 1), ("b", 0), ("c", 2)])
        adapter = PipelineAdapter.for_analyzer(0, "p", analyzer, "text")
        assert [(pos, tok.text) for pos, tok in adapter] == [(0, "a"), (0, "b"), (2, "c")]
        assert adapter.pulled == 3

    def test_stays_exhausted(self):
        adapter = PipelineAdapter.for_tokens(0, "p", (Token("a"),))
        assert adapter.next_token() is not None
        assert adapter.next_token() is None
        assert adapter.exhausted
        assert adapter.next_token() is None

    def test_fault_propagates_unchanged(self):
        error = RuntimeError("analyzer fault")
        adapter = PipelineAdapter.for_analyzer(0, "p", FailingAnalyzer(error), "text")
        with pytest.raises(RuntimeError) as exc_info:
            adapter.next_token()
        assert exc_info.value is error


class TestMergeScheduler:
    """Test the k-way merge by absolute position."""

    def test_interleaves_by_position(self):
        tokens = merge([("a", 1), ("b", 1)], [("x", 1), ("y", 2)])
        assert terms(tokens) == ["a", "x", "b", "y"]
        assert positions(tokens) == [0, 0, 1, 2]

    def test_recomputes_increments_against_emitted_positions(self):
        tokens = merge([("a", 1), ("b", 1)], [("x", 1), ("y", 2)])
        assert [t.position_increment for t in tokens] == [1, 0, 1, 1]

    def test_keeps_source_offsets(self):
        tokens = merge([("ab", 1), ("cd", 1)])
        assert [(t.start_offset, t.end_offset) for t in tokens] == [(0, 2), (3, 5)]

    def test_zero_increment_chain_declaration_order(self):
        tokens = merge([("fast", 1), ("quick", 0), ("run", 1)], [("fast", 1)])
        assert terms(tokens) == ["fast", "quick", "fast", "run"]
        assert positions(tokens) == [0, 0, 0, 1]

    def test_zero_increment_chain_arrival_order(self):
        """A pipeline keeps emitting while its tokens share the position."""
        tokens = merge(
            [("fast", 1), ("quick", 0), ("run", 1)],
            [("fast", 1)],
            tie_break=TieBreak.ARRIVAL,
        )
        assert terms(tokens) == ["fast", "quick", "fast", "run"]
        assert positions(tokens) == [0, 0, 0, 1]

    def test_zero_increment_chain_in_later_pipeline_arrival_order(self):
        tokens = merge(
            [("fast", 1), ("run", 1)],
            [("fast", 1), ("quick", 0), ("speedy", 0), ("run", 1)],
            tie_break=TieBreak.ARRIVAL,
        )
        assert terms(tokens) == ["fast", "fast", "quick", "speedy", "run", "run"]
        assert positions(tokens) == [0, 0, 0, 0, 1, 1]

    def test_declaration_order_at_shared_positions(self):
        literal = [("just", 1), ("a", 1), ("little", 1), ("test", 1)]
        stemmed = [("just", 1), ("littl", 2), ("test", 1)]
        tokens = merge(literal, stemmed)
        assert terms(tokens) == ["just", "just", "a", "little", "littl", "test", "test"]

    def test_arrival_order_at_shared_positions(self):
        literal = [("just", 1), ("a", 1), ("little", 1), ("test", 1)]
        stemmed = [("just", 1), ("littl", 2), ("test", 1)]
        keyword = [("just a little test", 1)]
        tokens = merge(literal, stemmed, keyword, tie_break=TieBreak.ARRIVAL)
        assert terms(tokens) == [
            "just", "just", "just a little test", "a", "littl", "little", "test", "test",
        ]
        assert positions(tokens) == [0, 0, 0, 1, 2, 2, 3, 3]

    def test_batches_group_equal_positions(self):
        scheduler = MergeScheduler(adapters_for([("a", 1), ("b", 0), ("c", 1)], [("x", 2)]))
        batches = [[(item.position, item.pipeline, item.token.text) for item in batch]
                   for batch in scheduler.batches()]
        assert batches == [
            [(0, 0, "a"), (0, 0, "b")],
            [(1, 0, "c"), (1, 1, "x")],
        ]

    def test_state_machine(self):
        scheduler = MergeScheduler(adapters_for([("a", 1), ("b", 1)]))
        assert scheduler.state is SchedulerState.PRIMING
        assert terms(item.token for item in scheduler.next_batch()) == ["a"]
        assert scheduler.state is SchedulerState.EMITTING
        assert terms(item.token for item in scheduler.next_batch()) == ["b"]
        assert scheduler.state is SchedulerState.EXHAUSTED
        assert scheduler.next_batch() is None

    def test_no_pipelines_yield_nothing(self):
        scheduler = MergeScheduler([])
        assert list(scheduler) == []
        assert scheduler.state is SchedulerState.EXHAUSTED

    def test_empty_pipelines_are_skipped(self):
        tokens = merge([], [("only", 1)], [])
        assert terms(tokens) == ["only"]

    def test_fault_mid_stream_propagates(self):
        def source():
            yield Token("ok")
            raise KeyError("broken pipeline")

        scheduler = MergeScheduler([
            PipelineAdapter(0, "broken", source),
            PipelineAdapter.for_tokens(1, "fine", (Token("a"), Token("b"), Token("c"))),
        ])
        with pytest.raises(KeyError):
            list(scheduler)

    def test_positions_non_decreasing(self):
        tokens = merge(
            [("a", 1), ("b", 3), ("c", 0), ("d", 1)],
            [("w", 2), ("x", 0), ("y", 1), ("z", 4)],
            [("k", 1)],
        )
        assert positions(tokens) == sorted(positions(tokens))
        assert sum(t.position_increment for t in tokens) == tokens[-1].position + 1

    def test_parse_tie_break(self):
        assert TieBreak.parse("ARRIVAL") is TieBreak.ARRIVAL
        assert TieBreak.parse(TieBreak.DECLARATION) is TieBreak.DECLARATION
        with pytest.raises(AnalysisConfigurationError):
            TieBreak.parse("alphabetical")


class TestDeduplication:
    """Test same-position deduplication."""

    def test_keeps_first_occurrence_in_order(self):
        batch = [
            PositionedToken(2, 0, 0, Token("slowo", start_offset=12, end_offset=17)),
            PositionedToken(2, 1, 1, Token("other")),
            PositionedToken(2, 1, 2, Token("slowo", start_offset=0, end_offset=5)),
        ]
        kept = deduplicate(batch)
        assert [item.token.text for item in kept] == ["slowo", "other"]
        assert kept[0].token.start_offset == 12

    def test_filter_in_scheduler(self):
        dedup = DeduplicationFilter()
        tokens = merge(
            [("just", 1), ("little", 1)],
            [("just", 1), ("littl", 1)],
            batch_filter=dedup,
        )
        assert terms(tokens) == ["just", "little", "littl"]
        assert positions(tokens) == [0, 1, 1]
        assert dedup.removed == 1

    def test_duplicates_at_different_positions_are_kept(self):
        tokens = merge([("a", 1), ("b", 1)], [("b", 1), ("a", 1)], batch_filter=deduplicate)
        assert terms(tokens) == ["a", "b", "b", "a"]

    def test_dedup_gap_recomputes_increment(self):
        tokens = merge([("a", 1), ("b", 1)], [("a", 1)], batch_filter=deduplicate)
        assert [t.position_increment for t in tokens] == [1, 1]
