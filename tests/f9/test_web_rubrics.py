"""Tests for rubric and assessment endpoints (F9)."""

import pytest
from fastapi.testclient import TestClient

from journey.web.api import create_app


@pytest.fixture
def client():
    return TestClient(create_app())


class TestValidateRubric:
    """Tests for POST /api/rubrics/validate."""

    def test_valid_rubric(self, client, rubric_data):
        response = client.post("/api/rubrics/validate", json={"rubric": rubric_data})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["errors"] == []
        assert data["calculations"]["total_weight"] == 100
        assert data["calculations"]["max_points"] == 12
        assert data["calculations"]["is_weight_valid"] is True

    def test_weights_not_summing_to_100(self, client, rubric_data):
        rubric_data["criteria"][0]["weight"] = 10
        data = client.post("/api/rubrics/validate", json={"rubric": rubric_data}).json()
        assert data["valid"] is False
        assert data["errors"]
        assert data["calculations"]["is_weight_valid"] is False

    def test_missing_id_is_422(self, client, rubric_data):
        del rubric_data["id"]
        response = client.post("/api/rubrics/validate", json={"rubric": rubric_data})
        assert response.status_code == 422

    def test_unknown_grade_level_is_422(self, client, rubric_data):
        rubric_data["grade_level"] = "college"
        response = client.post("/api/rubrics/validate", json={"rubric": rubric_data})
        assert response.status_code == 422

    def test_body_without_rubric_is_422(self, client):
        response = client.post("/api/rubrics/validate", json={})
        assert response.status_code == 422


class TestRubricCalculations:
    """Tests for POST /api/rubrics/calculations."""

    def test_returns_totals(self, client, rubric_data):
        response = client.post("/api/rubrics/calculations", json={"rubric": rubric_data})
        assert response.status_code == 200
        data = response.json()
        assert data["total_weight"] == 100
        assert data["max_points"] == 12


class TestScoreAssessment:
    """Tests for POST /api/assessments/score."""

    def test_scores_against_rubric(self, client, rubric_data, assessment_data):
        response = client.post(
            "/api/assessments/score",
            json={"rubric": rubric_data, "assessment": assessment_data},
        )
        assert response.status_code == 200
        calc = response.json()["calculations"]
        assert calc["total_points"] == 8
        assert calc["max_points"] == 12
        assert calc["percentage"] == 70
        assert calc["completed_criteria"] == 3
        assert calc["is_passing"] is True

    def test_returns_insight_lists(self, client, rubric_data, assessment_data):
        data = client.post(
            "/api/assessments/score",
            json={"rubric": rubric_data, "assessment": assessment_data},
        ).json()
        assert isinstance(data["strengths"], list)
        assert isinstance(data["improvements"], list)

    def test_invalid_assessment_is_422(self, client, rubric_data, assessment_data):
        del assessment_data["student_id"]
        del assessment_data["id"]
        assessment_data["scores"] = [{"level": "exemplary"}]
        response = client.post(
            "/api/assessments/score",
            json={"rubric": rubric_data, "assessment": assessment_data},
        )
        assert response.status_code == 422
