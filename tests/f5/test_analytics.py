"""Tests for individual and classroom learning analytics."""

import pytest

from journey.core.analytics import (
    calculate_collaboration_score,
    calculate_creativity_index,
    calculate_engagement_score,
    export_payload,
    format_percentage,
    generate_predictive_insights,
    trend_direction,
)
from journey.core.peer_review import PeerRecognition, PeerReview


@pytest.fixture
def report(classroom):
    return classroom.analytics()


def _review(*badges: str) -> PeerReview:
    return PeerReview(
        id="r",
        reviewer_id="a",
        reviewer_name="A",
        reviewee_id="b",
        reviewee_name="B",
        recognition=[PeerRecognition(id=b, type=b, message="") for b in badges],
    )


class TestScores:
    def test_engagement_without_data(self):
        assert calculate_engagement_score(None, [], []) == 0

    def test_collaboration_score(self):
        reviews = [_review("collaboration"), _review(), _review("collaboration", "creativity")]
        assert calculate_collaboration_score(reviews) == 3 * 15 + 2 * 25

    def test_collaboration_score_capped(self):
        assert calculate_collaboration_score([_review("collaboration")] * 5) == 100

    def test_creativity_from_badges_only(self):
        assert calculate_creativity_index([], [_review("creativity"), _review("leadership")]) == 10

    def test_trend_direction(self):
        assert trend_direction(5, 3) == "up"
        assert trend_direction(3, 5) == "down"
        assert trend_direction(4, 4) == "stable"

    def test_format_percentage(self):
        assert format_percentage(62.5) == "63%"


class TestIndividualAnalytics:
    def test_ahead_student(self, report):
        ana = report.student("s1")

        assert ana.student_name == "Ana"
        assert ana.assessment_trends == [60, 90]
        # 70 * 0.4 + 75 * 0.3 + 40 * 0.3
        assert ana.engagement_score == 63
        assert ana.collaboration_score == 80
        # criterion points 3 + 4 plus one creativity badge
        assert ana.creativity_index == 17
        assert ana.persistence_metric == 50
        assert ana.iteration_frequency == 0.5
        assert ana.phase_completion_times == {
            "ANALYZE": 600,
            "BRAINSTORM": 300,
            "PROTOTYPE": 0,
            "EVALUATE": 0,
        }

    def test_behind_students(self, report):
        ben = report.student("s2")
        cleo = report.student("s3")

        assert ben.engagement_score == 29
        assert ben.collaboration_score == 15
        assert ben.creativity_index == 0
        assert ben.iteration_frequency == 0.25
        assert cleo.engagement_score == 4
        assert cleo.assessment_trends == []
        assert cleo.persistence_metric == 0

    def test_unknown_student(self, report):
        assert report.student("nobody") is None


class TestClassroomAnalytics:
    def test_aggregates(self, report):
        classroom = report.classroom

        assert classroom.total_students == 3
        assert classroom.average_progress == pytest.approx(100 / 3)
        assert classroom.average_iterations == 1.0
        assert classroom.phase_distribution == {
            "ANALYZE": 1,
            "BRAINSTORM": 1,
            "PROTOTYPE": 1,
            "EVALUATE": 0,
        }

    def test_iteration_patterns(self, report):
        assert report.classroom.high_iterators == []
        assert report.classroom.low_iterators == ["s2", "s3"]

    def test_risk_and_top_performers(self, report):
        assert report.classroom.risk_students == ["s2", "s3"]
        assert report.classroom.top_performers == []

    def test_performance_trends(self, report):
        assert report.classroom.performance_trends == {
            "improving": 1,
            "stable": 0,
            "declining": 0,
        }

    def test_collaboration_network(self, report):
        nodes = {n.node_id: n for n in report.classroom.collaboration_network}

        assert nodes["s1"].connections == ["s2", "s3", "s2"]
        assert nodes["s1"].strength == 30
        assert nodes["s2"].connections == ["s1", "s1"]
        assert nodes["s3"].strength == 10


class TestPredictiveInsights:
    def test_insights_sorted_by_priority(self, report):
        kinds = [i.type for i in report.insights]
        assert kinds == ["risk_alert", "intervention_needed", "opportunity"]

    def test_risk_alert(self, report):
        risk = report.insights[0]

        assert risk.priority == "high"
        assert risk.confidence == 85
        assert risk.student_ids == ["s2", "s3"]
        assert risk.description.startswith("2 students")

    def test_success_prediction(self, report):
        ana = report.student("s1")
        ana.engagement_score = 95
        ana.creativity_index = 80

        insights = generate_predictive_insights(report.individual, report.classroom, 4, 8)

        success = next(i for i in insights if i.type == "success_prediction")
        assert success.student_ids == ["s1"]
        assert [i.priority for i in insights] == ["high", "medium", "medium", "low"]

    def test_no_insights_for_empty_class(self, report):
        report.classroom.total_students = 0
        assert generate_predictive_insights([], report.classroom, 4, 8) == []


class TestExport:
    def test_payload(self, report, now):
        payload = export_payload(report, 4, "middle", 8, now=now)

        assert payload["$schema"] == "analytics_export_v1"
        assert payload["timestamp"] == now.isoformat()
        assert payload["project_week"] == 4
        assert payload["metadata"] == {
            "grade_level": "middle",
            "project_duration": 8,
            "total_students": 3,
        }
        assert payload["classroom"]["iteration_patterns"]["low_iterators"] == ["s2", "s3"]
        assert len(payload["individual"]) == 3
