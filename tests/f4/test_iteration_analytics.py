"""Tests for iteration analytics (F4)."""

from journey.core.iteration_analytics import (
    format_work_time,
    iteration_insights,
    iteration_kpis,
    iteration_metrics,
    velocity_by_week,
)
from journey.core.phases import (
    CreativePhase,
    PhaseActivity,
    PhaseDeliverable,
    PhaseObjective,
    PhaseType,
    default_phases,
)


def _complete(phase: CreativePhase) -> CreativePhase:
    phase.objectives = [PhaseObjective("o1", "a"), PhaseObjective("o2", "b")]
    phase.activities = [PhaseActivity("a1", "x", "y", "1d"), PhaseActivity("a2", "x", "y", "1d")]
    phase.deliverables = [PhaseDeliverable("d1", "z", "doc")]
    return phase


class TestMetrics:
    """Tests for iteration_metrics."""

    def test_velocity_and_efficiency(self, events, start_date, now):
        metrics = iteration_metrics(events, default_phases(), 8, start_date, now)
        assert metrics.total_iterations == 4
        assert metrics.total_time == 6720
        assert metrics.avg_iteration_time == 1680
        # 31 days since start -> 4 whole weeks
        assert metrics.velocity == 1.0
        assert metrics.efficiency == 74
        assert metrics.type_distribution == {
            "quick_loop": 1,
            "major_pivot": 2,
            "complete_restart": 1,
        }

    def test_phase_metrics(self, events, start_date, now):
        metrics = iteration_metrics(events, default_phases(), 8, start_date, now)
        by_phase = {p.phase: p for p in metrics.phase_metrics}
        assert by_phase[PhaseType.ANALYZE].iterations == 3
        assert by_phase[PhaseType.ANALYZE].time_spent == 5280
        assert by_phase[PhaseType.ANALYZE].efficiency == 48
        assert by_phase[PhaseType.BRAINSTORM].efficiency == 77
        assert by_phase[PhaseType.PROTOTYPE].efficiency == 100

    def test_first_week_counts_as_one(self, events, now):
        metrics = iteration_metrics(events, default_phases(), 8, "2026-09-30T00:00:00+00:00", now)
        assert metrics.velocity == 4.0

    def test_completion_rate(self, start_date, now):
        phases = default_phases()
        _complete(phases[0])
        phases[1].objectives = [PhaseObjective("o1", "a")]
        metrics = iteration_metrics([], phases, 8, start_date, now)
        assert metrics.phase_metrics[0].completion_rate == 100
        assert metrics.phase_metrics[1].completion_rate == 20

    def test_empty(self, start_date, now):
        metrics = iteration_metrics([], default_phases(), 8, start_date, now)
        assert metrics.velocity == 0
        assert metrics.efficiency == 100
        assert metrics.avg_iteration_time == 0


class TestInsights:
    def test_bottleneck_and_long_iterations(self, events, start_date, now):
        phases = default_phases()
        metrics = iteration_metrics(events, phases, 8, start_date, now)
        insights = iteration_insights(metrics, events, phases, 2)
        assert [i.id for i in insights] == ["phase-bottleneck", "long-iterations"]
        assert insights[0].title == "Analyze Phase Bottleneck"

    def test_early_stage(self, start_date, now):
        phases = default_phases()
        metrics = iteration_metrics([], phases, 8, start_date, now)
        assert [i.id for i in iteration_insights(metrics, [], phases, 0)] == ["early-stage"]

    def test_completed_phases(self, start_date, now):
        phases = default_phases()
        _complete(phases[0])
        metrics = iteration_metrics([], phases, 8, start_date, now)
        insights = iteration_insights(metrics, [], phases, 1)
        assert insights[0].title == "1 Phase Successfully Completed"

    def test_high_velocity_and_restarts(self, events, now):
        restarts = [events[3], events[3], events[3]]
        phases = default_phases()
        metrics = iteration_metrics(restarts, phases, 8, "2026-09-30T00:00:00+00:00", now)
        ids = [i.id for i in iteration_insights(metrics, restarts, phases, 3)]
        assert ids[:2] == ["high-velocity", "low-efficiency"]
        assert "multiple-restarts" in ids


class TestChartsAndKpis:
    def test_velocity_by_week(self, events, now):
        buckets = velocity_by_week(events, now)
        assert [b["week"] for b in buckets] == ["Week 4", "Week 3", "Week 2", "Week 1"]
        assert all(b["count"] == 1 for b in buckets)

    def test_format_work_time(self):
        assert format_work_time(1680) == "3d 4h"
        assert format_work_time(90) == "1h 30m"

    def test_kpis(self, events, start_date, now):
        metrics = iteration_metrics(events, default_phases(), 8, start_date, now)
        kpis = {k.label: k for k in iteration_kpis(metrics)}
        assert kpis["Iteration Velocity"].value == "1.0/week"
        assert kpis["Iteration Velocity"].trend == "up"
        assert kpis["Project Efficiency"].color == "orange"
        assert kpis["Avg. Resolution Time"].value == "3d 4h"
        assert kpis["Total Iterations"].value == 4
