"""Tests for adaptive learning paths and the adaptation loop."""

import asyncio
import random

import pytest

from journey.core.adaptive import (
    ADAPTIVE_CONTENT_LIBRARY,
    AdaptationEngine,
    BehaviorSample,
    LearningProfile,
    PerformanceAnalysis,
    adaptation_recommendation,
    adaptation_status,
    analyze_performance,
    calculate_flow_state,
    cognitive_load_pace,
    deliver_next_content,
    flow_difficulty,
    generate_adaptive_path,
    modality_match,
    run_adaptation_loop,
    update_learning_profile,
    zpd_difficulty,
)
from journey.core.phases import PhaseType, default_phases


def _analysis(average=70.0, velocity=1.0) -> PerformanceAnalysis:
    return PerformanceAnalysis(
        average_performance=average,
        engagement_score=60,
        iteration_rate=1.0,
        learning_velocity=velocity,
        struggling_areas=[],
        strength_areas=[],
    )


def _engine(report, seed=7) -> AdaptationEngine:
    return AdaptationEngine(
        LearningProfile(student_id="s1"),
        report.student("s1"),
        _analysis(),
        rng=random.Random(seed),
    )


class TestAdaptationRules:
    def test_zpd_difficulty(self):
        assert zpd_difficulty(50, 5) == 4.5
        assert zpd_difficulty(90, 5) == pytest.approx(5.3)
        assert zpd_difficulty(70, 5) == 5
        assert zpd_difficulty(10, 1) == 1
        assert zpd_difficulty(95, 10) == 10

    def test_flow_difficulty(self):
        assert flow_difficulty(80, 5) == 5
        assert flow_difficulty(90, 5) == pytest.approx(5.2)
        assert flow_difficulty(50, 5) == pytest.approx(4.8)
        assert flow_difficulty(40, 1) == 1

    def test_cognitive_load_pace(self):
        assert cognitive_load_pace(90, 1.0) == pytest.approx(0.8)
        assert cognitive_load_pace(30, 1.0) == pytest.approx(1.2)
        assert cognitive_load_pace(60, 1.0) == 1.0
        assert cognitive_load_pace(90, 0.5) == 0.5
        assert cognitive_load_pace(30, 1.9) == 2.0

    def test_modality_match_orders_by_preference(self):
        content = ADAPTIVE_CONTENT_LIBRARY[PhaseType.ANALYZE]

        visual = modality_match("visual", content)
        mixed = modality_match("mixed", content)

        assert [c.id for c in visual] == ["analyze-intro-easy", "analyze-research-medium"]
        assert [c.id for c in mixed] == ["analyze-research-medium", "analyze-intro-easy"]


class TestPaths:
    def test_generate_adaptive_path(self, now):
        profile = LearningProfile(student_id="s1", learning_style="mixed")

        path = generate_adaptive_path(default_phases(), 0, "Ana", profile, _analysis(), 3, now=now)

        assert path.id == f"adaptive-ANALYZE-{int(now.timestamp() * 1000)}"
        assert path.name == "Personalized Analyze Journey"
        assert "Ana's learning style" in path.description
        assert [c.id for c in path.content] == ["analyze-research-medium", "analyze-intro-easy"]
        assert path.difficulty_progression == [5, 2]
        assert path.estimated_time == 30
        assert [b.target_position for b in path.branches] == [-1, 0]

    def test_low_performance_lowers_target(self, now):
        profile = LearningProfile(student_id="s1", learning_style="visual")

        path = generate_adaptive_path(
            default_phases(), 0, "Ana", profile, _analysis(average=50), 5, now=now
        )

        # Target drops to 4.5, the easy item is still 2.5 away
        assert [c.id for c in path.content] == ["analyze-research-medium"]

    def test_deliver_next_content(self, now):
        profile = LearningProfile(student_id="s1", learning_style="mixed")
        path = generate_adaptive_path(default_phases(), 0, "Ana", profile, _analysis(), 3, now=now)

        first, path = deliver_next_content(path)
        second, path = deliver_next_content(path)
        done, final = deliver_next_content(path)

        assert first.id == "analyze-research-medium"
        assert second.id == "analyze-intro-easy"
        assert done is None
        assert final.finished
        assert final.completion == 100


class TestProfile:
    def test_flow_state(self, report):
        analytics = report.student("s1")
        analytics.engagement_score = 50

        sample = BehaviorSample(time_spent=30, performance=80)
        assert calculate_flow_state(sample, analytics) == 70

    def test_struggle_raises_cognitive_load(self, report):
        analytics = report.student("s1")
        analytics.engagement_score = 50
        profile = LearningProfile(student_id="s1")

        updated = update_learning_profile(
            profile, BehaviorSample(time_spent=35, performance=50), analytics
        )

        assert updated.cognitive_load == 60
        assert updated.flow_state.level == 53
        assert updated.flow_state.trends == [65, 70, 65, 68, 53]
        assert profile.cognitive_load == 50

    def test_high_performance_lowers_cognitive_load(self, report):
        profile = LearningProfile(student_id="s1")

        updated = update_learning_profile(
            profile, BehaviorSample(time_spent=10, performance=90), report.student("s1")
        )

        assert updated.cognitive_load == 45
        assert len(updated.flow_state.trends) == 5

    def test_recommendations(self):
        profile = LearningProfile(student_id="s1")

        overloaded = LearningProfile(student_id="s1", cognitive_load=85)
        assert adaptation_recommendation(overloaded, _analysis()).startswith("High cognitive load")

        profile.flow_state.level = 40
        assert adaptation_recommendation(profile, _analysis()).startswith("Flow state is low")

        profile.flow_state.level = 65
        assert adaptation_recommendation(profile, _analysis(velocity=0.2)).startswith(
            "Learning pace is slow"
        )
        assert adaptation_recommendation(profile, _analysis()).startswith(
            "Learning is progressing well"
        )

    def test_status_labels(self):
        profile = LearningProfile(student_id="s1")

        assert adaptation_status(profile, _analysis()).label == "Monitoring"
        profile.flow_state.level = 75
        assert adaptation_status(profile, _analysis()).label == "Optimal"
        profile.flow_state.level = 40
        status = adaptation_status(profile, _analysis())
        assert status.label == "Adjusting"
        assert status.needs_adjustment


class TestPerformance:
    def test_analyze_performance(self, classroom, report):
        progress = classroom.progress_for("s1")
        assessments = [a for a in classroom.assessments if a.student_id == "s1"]

        analysis = analyze_performance(
            assessments, report.student("s1"), progress.iteration_events, progress
        )

        assert analysis.average_performance == 75
        assert analysis.iteration_rate == 1.0
        assert analysis.learning_velocity == pytest.approx(70 / 900 * 60)
        assert analysis.strength_areas == ["creative-ideas"]
        assert analysis.struggling_areas == []

    def test_defaults_without_assessments(self, classroom, report):
        progress = classroom.progress_for("s3")

        analysis = analyze_performance([], report.student("s3"), [], progress)

        assert analysis.average_performance == 70
        assert analysis.learning_velocity == 0


class TestEngine:
    def test_first_tick_uses_previous_profile(self, report):
        engine = _engine(report)

        metrics = engine.tick()

        # Default flow 65 is 10 below optimal, load 50 keeps the pace
        assert metrics.difficulty == pytest.approx(4.8)
        assert metrics.pace == 1.0
        assert 70 <= metrics.engagement <= 80
        assert engine.ticks == 1

    def test_seeded_runs_are_reproducible(self, report):
        first = _engine(report, seed=3)
        second = _engine(report, seed=3)

        for _ in range(4):
            first.tick()
            second.tick()

        assert first.metrics == second.metrics
        assert first.profile == second.profile

    def test_metrics_stay_in_range(self, report):
        engine = _engine(report)

        for _ in range(25):
            metrics = engine.tick()
            assert 0 <= metrics.engagement <= 100
            assert 1 <= metrics.difficulty <= 10
            assert 0.5 <= metrics.pace <= 2.0
            assert 0 <= metrics.satisfaction <= 100


class TestLoop:
    def test_runs_until_max_ticks(self, report):
        engine = _engine(report)

        count = asyncio.run(run_adaptation_loop(engine, interval=0, max_ticks=3))

        assert count == 3
        assert engine.ticks == 3

    def test_stops_when_event_set(self, report):
        engine = _engine(report)

        async def run() -> int:
            stop = asyncio.Event()
            stop.set()
            return await run_adaptation_loop(engine, interval=0, stop=stop)

        assert asyncio.run(run()) == 0
        assert engine.ticks == 0

    def test_stop_during_run(self, report):
        engine = _engine(report)

        async def run() -> int:
            stop = asyncio.Event()
            task = asyncio.create_task(run_adaptation_loop(engine, interval=0.01, stop=stop))
            while engine.ticks < 2:
                await asyncio.sleep(0.005)
            stop.set()
            return await task

        count = asyncio.run(run())
        assert count == engine.ticks
        assert count >= 2
