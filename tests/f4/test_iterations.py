"""Tests for iteration tracking (F4)."""

import csv
import io
import json

import pytest

from journey.core.iterations import (
    IterationError,
    IterationEvent,
    create_iteration_event,
    export_history,
    filter_iterations,
    format_duration,
    format_event_date,
    history_rows,
    iteration_stats,
    suggest_iteration_type,
)
from journey.core.phases import PhaseType


class TestSuggestion:
    def test_distance_picks_type(self):
        assert suggest_iteration_type("BRAINSTORM", "ANALYZE") == ("quick_loop", 1)
        assert suggest_iteration_type("PROTOTYPE", "ANALYZE") == ("major_pivot", 3)
        assert suggest_iteration_type("EVALUATE", "ANALYZE") == ("complete_restart", 7)

    def test_same_phase_is_quick_loop(self):
        assert suggest_iteration_type("PROTOTYPE", "PROTOTYPE") == ("quick_loop", 1)


class TestCreateEvent:
    def test_requires_reason(self):
        with pytest.raises(IterationError):
            create_iteration_event("PROTOTYPE", "ANALYZE")

    def test_suggested_type_and_duration(self, now):
        event = create_iteration_event(
            "PROTOTYPE", "ANALYZE", selected_reason="Solution not feasible", now=now
        )
        assert event.iteration_type == "major_pivot"
        assert event.duration == 3 * 480
        assert event.timestamp == now.isoformat()
        assert event.metadata.estimated_days == 3

    def test_custom_reason_wins(self):
        event = create_iteration_event(
            "BRAINSTORM",
            "ANALYZE",
            selected_reason="Quick research needed",
            custom_reason="Survey results changed the brief",
        )
        assert event.reason == "Survey results changed the brief"

    def test_explicit_type_uses_its_default_days(self):
        event = create_iteration_event(
            "PROTOTYPE", "ANALYZE", selected_reason="Gap", iteration_type="quick_loop"
        )
        assert event.duration == 480

    def test_explicit_days(self):
        event = create_iteration_event(
            "EVALUATE", "PROTOTYPE", selected_reason="Fix", estimated_days=2, strategies=["Quick prototype test"]
        )
        assert event.duration == 960
        assert event.metadata.strategies == ["Quick prototype test"]

    def test_unknown_type(self):
        with pytest.raises(IterationError):
            create_iteration_event("EVALUATE", "ANALYZE", selected_reason="x", iteration_type="sprint")


class TestStats:
    """Tests for iteration_stats."""

    def test_empty(self):
        stats = iteration_stats([], 8)
        assert stats.total_iterations == 0
        assert stats.most_common_type is None
        assert stats.patterns == []

    def test_summary(self, events):
        stats = iteration_stats(events, 8)
        assert stats.total_iterations == 4
        assert stats.average_duration == 1680
        assert stats.most_common_type == "major_pivot"
        assert stats.most_iterated_phase == PhaseType.ANALYZE
        # 6720 / (8 * 2400) minutes
        assert stats.time_impact == pytest.approx(35.0)

    def test_patterns(self, events):
        patterns = {p.type: p for p in iteration_stats(events, 8).patterns}
        assert patterns["frequent_return"].count == 3
        assert patterns["escalating"].count == 3
        assert "early_stage" not in patterns

    def test_single_event_patterns(self, events):
        types = [p.type for p in iteration_stats(events[:1], 8).patterns]
        assert types == ["frequent_return", "early_stage"]

    def test_to_dict(self, events):
        data = iteration_stats(events, 8).to_dict()
        assert data["most_iterated_phase"] == "ANALYZE"
        assert len(data["patterns"]) == 2


class TestFilter:
    def _ids(self, events):
        return [e.id for e in events]

    def test_default_sort_newest_first(self, events):
        assert self._ids(filter_iterations(events)) == ["e4", "e3", "e2", "e1"]

    def test_by_type(self, events):
        assert self._ids(filter_iterations(events, iteration_type="major_pivot")) == ["e3", "e2"]

    def test_by_phase(self, events):
        assert self._ids(filter_iterations(events, phase="ANALYZE")) == ["e4", "e2", "e1"]

    def test_query_matches_reason_or_notes(self, events):
        assert self._ids(filter_iterations(events, query="FEASIBLE")) == ["e2"]
        assert self._ids(filter_iterations(events, query="neighbours")) == ["e1"]

    def test_time_range(self, events, now):
        assert self._ids(filter_iterations(events, time_range="week", now=now)) == ["e4"]
        assert len(filter_iterations(events, time_range="month", now=now)) == 4

    def test_sort_by_duration_and_type(self, events):
        assert self._ids(filter_iterations(events, sort_by="duration")) == ["e4", "e2", "e3", "e1"]
        assert self._ids(filter_iterations(events, sort_by="type")) == ["e4", "e2", "e3", "e1"]

    def test_unknown_phase(self, events):
        with pytest.raises(ValueError):
            filter_iterations(events, phase="DESIGN")


class TestFormatting:
    def test_format_duration(self):
        assert format_duration(480) == "1 day"
        assert format_duration(1440) == "3 days"
        assert format_duration(120) == "2 hours"
        assert format_duration(60) == "1 hour"
        assert format_duration(30) == "30 minutes"

    def test_format_event_date(self, now):
        assert format_event_date("2026-03-05T10:00:00+00:00", now) == "Mar 5"
        assert format_event_date("2025-12-01T10:00:00Z", now) == "Dec 1, 2025"

    def test_history_rows(self, events, now):
        row = history_rows(events, now)[0]
        assert row == {
            "date": "Sep 8",
            "from": "Brainstorm",
            "to": "Analyze",
            "type": "quick_loop",
            "reason": "Missing user data",
            "duration": "1 day",
            "strategies": "",
            "notes": "Interview more neighbours",
        }

    def test_missing_metadata_is_unknown(self, now):
        event = IterationEvent.from_dict(
            {"from_phase": "EVALUATE", "to_phase": "PROTOTYPE", "reason": "x", "timestamp": now.isoformat()}
        )
        assert history_rows([event], now)[0]["type"] == "unknown"


class TestExport:
    def test_export_json(self, events, tmp_path, now):
        result = export_history(events, tmp_path, "json", now)
        assert result.success
        assert result.rows == 4
        assert result.export_path.name == "iteration-history-2026-10-02.json"
        assert len(json.loads(result.export_path.read_text())) == 4

    def test_export_csv(self, events, tmp_path, now):
        result = export_history(events, tmp_path, "csv", now)
        rows = list(csv.DictReader(io.StringIO(result.export_path.read_text())))
        assert [r["to"] for r in rows] == ["Analyze", "Analyze", "Brainstorm", "Analyze"]

    def test_export_empty_warns(self, tmp_path, now):
        result = export_history([], tmp_path, "json", now)
        assert result.success
        assert result.warnings == ["No iterations to export"]
        assert json.loads(result.export_path.read_text()) == []

    def test_unsupported_format(self, events, tmp_path):
        result = export_history(events, tmp_path, "xml")
        assert not result.success
        assert result.export_path is None
