"""Tests for peer review, iteration and analytics endpoints (F9)."""

import pytest
from fastapi.testclient import TestClient

from journey.web.api import create_app


@pytest.fixture
def client():
    return TestClient(create_app())


class TestPeerReviewStats:
    """Tests for POST /api/peer-reviews/stats."""

    def test_stats_for_student(self, client, classroom_data):
        response = client.post(
            "/api/peer-reviews/stats",
            json={"classroom": classroom_data, "student_id": "s1"},
        )
        assert response.status_code == 200
        stats = response.json()["stats"]
        assert stats["reviews_given"] == 1
        assert stats["reviews_received"] == 2
        assert [s["id"] for s in stats["pending_students"]] == ["s3"]
        assert stats["completion_rate"] == 50

    def test_summary_flags_top_collaborator(self, client, classroom_data):
        summary = client.post(
            "/api/peer-reviews/stats",
            json={"classroom": classroom_data, "student_id": "s1"},
        ).json()["summary"]
        assert summary["student_name"] == "Ana"
        assert summary["top_collaborator"] is True
        assert "Great leader" in summary["strengths"]

    def test_unknown_student_is_404(self, client, classroom_data):
        response = client.post(
            "/api/peer-reviews/stats",
            json={"classroom": classroom_data, "student_id": "nobody"},
        )
        assert response.status_code == 404

    def test_malformed_classroom_is_422(self, client, classroom_data):
        classroom_data["grade_level"] = "college"
        response = client.post(
            "/api/peer-reviews/stats",
            json={"classroom": classroom_data, "student_id": "s1"},
        )
        assert response.status_code == 422


class TestIterationStats:
    """Tests for POST /api/iterations/stats."""

    def test_stats_and_history(self, client, classroom_data):
        response = client.post(
            "/api/iterations/stats",
            json={"iterations": classroom_data["iterations"], "project_duration": 8},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["stats"]["total_iterations"] == 3
        assert data["count"] == 3
        assert len(data["history"]) == 3

    def test_filter_by_type(self, client, classroom_data):
        data = client.post(
            "/api/iterations/stats",
            json={"iterations": classroom_data["iterations"], "iteration_type": "major_pivot"},
        ).json()
        assert data["count"] == 1
        assert data["history"][0]["type"] == "major_pivot"
        # Stats always cover the full history
        assert data["stats"]["total_iterations"] == 3

    def test_filter_by_target_phase(self, client, classroom_data):
        data = client.post(
            "/api/iterations/stats",
            json={"iterations": classroom_data["iterations"], "phase": "ANALYZE"},
        ).json()
        assert data["count"] == 2

    def test_empty_history(self, client):
        data = client.post("/api/iterations/stats", json={}).json()
        assert data["count"] == 0
        assert data["stats"]["total_iterations"] == 0

    def test_unknown_phase_is_422(self, client, classroom_data):
        response = client.post(
            "/api/iterations/stats",
            json={"iterations": classroom_data["iterations"], "phase": "DREAM"},
        )
        assert response.status_code == 422


class TestAnalytics:
    """Tests for POST /api/analytics."""

    def test_export_payload(self, client, classroom_data):
        response = client.post("/api/analytics", json={"classroom": classroom_data})
        assert response.status_code == 200
        data = response.json()
        assert data["$schema"] == "analytics_export_v1"
        assert data["project_week"] == 4
        assert data["metadata"]["grade_level"] == "middle"
        assert data["metadata"]["total_students"] == 3

    def test_individual_and_classroom_sections(self, client, classroom_data):
        data = client.post("/api/analytics", json={"classroom": classroom_data}).json()
        assert [a["student_id"] for a in data["individual"]] == ["s1", "s2", "s3"]
        assert data["classroom"]["total_students"] == 3
        assert data["classroom"]["iteration_patterns"]["low_iterators"] == ["s2", "s3"]

    def test_malformed_classroom_is_422(self, client):
        response = client.post(
            "/api/analytics",
            json={"classroom": {"students": [{"name": "no id"}]}},
        )
        assert response.status_code == 422


class TestGuidance:
    """Tests for POST /api/analytics/guidance."""

    def test_actions_and_stats(self, client, classroom_data):
        response = client.post("/api/analytics/guidance", json={"classroom": classroom_data})
        assert response.status_code == 200
        data = response.json()
        assert [a["id"] for a in data["actions"]] == [
            "intervention-1",
            "facilitation-1",
            "communication-1",
        ]
        assert data["stats"]["total_class_iterations"] == 3
        assert data["stats"]["students_on_track"] == 1
        assert isinstance(data["patterns"], list)
