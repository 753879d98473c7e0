"""Tests for assessment scoring (F2)."""

import json
from datetime import datetime, timezone

import pytest

from journey.core.assessment import (
    Assessment,
    AssessmentError,
    Evidence,
    add_evidence,
    calculate_assessment,
    feedback_suggestions,
    generate_insights,
    load_assessment,
    new_assessment,
    remove_evidence,
    save_assessment,
    submit_assessment,
    update_feedback,
    update_score,
)
from journey.core.rubric import Rubric

NOW = datetime(2026, 10, 5, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def rubric(rubric_data) -> Rubric:
    return Rubric.from_dict(rubric_data)


@pytest.fixture
def assessment(assessment_data) -> Assessment:
    return Assessment.from_dict(assessment_data)


class TestCalculations:
    """Tests for totals, percentage and pass/fail."""

    def test_weighted_percentage(self, assessment, rubric):
        calc = calculate_assessment(assessment, rubric)
        # 4/4*40 + 3/4*30 + 1/4*30
        assert calc.percentage == 70
        assert calc.total_points == 8
        assert calc.max_points == 12
        assert calc.completed_criteria == 3
        assert calc.progress == 100
        assert calc.is_passing

    def test_holistic_percentage(self, assessment, rubric_data):
        rubric = Rubric.from_dict({**rubric_data, "type": "holistic"})
        # 8 / 12 = 66.67
        assert calculate_assessment(assessment, rubric).percentage == 67

    def test_partial_scoring(self, rubric):
        assessment = update_score(new_assessment(rubric, "s2", "Ben"), "c2", "proficient", 3)
        calc = calculate_assessment(assessment, rubric)
        assert calc.completed_criteria == 1
        assert calc.progress == pytest.approx(100 / 3)
        assert calc.percentage == 23  # 22.5 rounds half up
        assert not calc.is_passing

    def test_scores_outside_rubric_ignored(self, assessment, rubric):
        assessment = update_score(assessment, "unknown", "exemplary", 4)
        assert calculate_assessment(assessment, rubric).total_points == 8

    def test_empty_rubric(self):
        rubric = Rubric(id="r", name="Empty", type="holistic")
        calc = calculate_assessment(Assessment(id="a", student_id="s", student_name="", rubric_id="r"), rubric)
        assert calc.percentage == 0
        assert calc.progress == 0


class TestScoreEditing:
    def test_update_score_keeps_feedback(self, assessment):
        updated = update_score(assessment, "c1", "proficient", 3, assessor_id="t1", now=NOW)
        score = updated.score_for("c1")
        assert score.points == 3
        assert score.feedback == "Very thorough research"
        assert score.assessor_id == "t1"
        assert score.timestamp == NOW.isoformat()
        assert updated.status == "in_progress"

    def test_assessor_defaults_to_student(self, assessment):
        updated = update_score(assessment, "c3", "developing", 2, assessor_type="self")
        assert updated.score_for("c3").assessor_id == "s1"

    def test_feedback_requires_existing_score(self, rubric):
        blank = new_assessment(rubric, "s2", "Ben")
        assert update_feedback(blank, "c1", "Nice") is blank

    def test_evidence(self, assessment):
        evidence = Evidence(id="ev1", type="link", content="https://example.org/poster")
        updated = add_evidence(assessment, "c2", evidence)
        assert updated.score_for("c2").evidence == [evidence]
        assert remove_evidence(updated, "c2", "ev1").score_for("c2").evidence == []

    def test_feedback_suggestions(self):
        assert len(feedback_suggestions("exemplary")) == 3
        assert feedback_suggestions("unknown") == []


class TestInsights:
    def test_strengths_and_improvements(self, assessment, rubric):
        result = generate_insights(assessment, rubric)
        assert result.strengths == [
            "Strong performance in Problem Understanding",
            "Strong performance in Creative Solutions",
            "Demonstrates strong creativity skills",
        ]
        assert result.improvements == ["Focus on improving Communication"]

    def test_limit(self, assessment, rubric):
        result = generate_insights(assessment, rubric, limit=10)
        assert "Demonstrates strong analysis skills" in result.strengths
        assert len(result.strengths) == 4


class TestSaveSubmit:
    def test_save_draft(self, assessment, rubric, tmp_path):
        result = save_assessment(assessment, rubric, tmp_path)
        assert result.assessment.status == "in_progress"
        assert result.assessment.percentage == 70
        assert result.assessment_path.exists()

    def test_teacher_submit_is_graded(self, assessment, rubric, tmp_path):
        result = submit_assessment(assessment, rubric, tmp_path, mode="teacher", now=NOW)
        assert result.assessment.status == "graded"
        assert result.assessment.graded_at == NOW.isoformat()
        assert result.warnings == []
        data = json.loads(result.assessment_path.read_text())
        assert data["$schema"] == "assessment_v1"
        assert data["total_score"] == 8

    def test_peer_submit_is_submitted(self, assessment, rubric, tmp_path):
        result = submit_assessment(assessment, rubric, tmp_path, mode="peer", now=NOW)
        assert result.success is True
        assert result.assessment.status == "submitted"
        assert result.assessment.graded_at is None

    def test_partial_submit_refused(self, rubric, tmp_path):
        partial = update_score(new_assessment(rubric, "s2", "Ben"), "c1", "developing", 2)
        result = submit_assessment(partial, rubric, tmp_path, mode="peer", now=NOW)
        assert result.success is False
        assert result.assessment is None
        assert result.message == "Cannot submit: only 1/3 criteria scored"
        assert not (tmp_path / "assessments").exists()

    def test_unscored_submit_refused(self, rubric, tmp_path):
        result = submit_assessment(
            new_assessment(rubric, "s1", "Ana"), rubric, tmp_path, mode="teacher", now=NOW
        )
        assert result.success is False
        assert result.assessment_path is None
        assert not (tmp_path / "assessments").exists()

    def test_load_roundtrip(self, assessment, rubric, tmp_path):
        result = submit_assessment(assessment, rubric, tmp_path, now=NOW)
        loaded = load_assessment(result.assessment_path)
        assert loaded.percentage == 70
        assert [s.criterion_id for s in loaded.scores] == ["c1", "c2", "c3"]

    def test_load_missing(self, tmp_path):
        with pytest.raises(AssessmentError):
            load_assessment(tmp_path / "nope.json")
