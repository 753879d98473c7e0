"""Tests for resource and phase template endpoints (F9)."""

import pytest
from fastapi.testclient import TestClient

from journey.core.journey_editor import new_journey
from journey.web.api import create_app


@pytest.fixture
def client():
    return TestClient(create_app())


@pytest.fixture
def journey_data():
    return new_journey("Rain garden", "middle", 8).to_dict()


class TestResources:
    """Tests for GET /api/resources."""

    def test_filtered_with_recommendations(self, client):
        response = client.get(
            "/api/resources",
            params={"phase": "ANALYZE", "grade_level": "middle", "recent_iteration_type": "complete_restart"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["resources"][0]["id"] == "iteration-template-1"
        assert data["count"] == 4
        assert data["categories"] == {"guide": 2, "video": 0, "template": 1, "worksheet": 1}
        assert [r["id"] for r in data["recommended"]] == [
            "analyze-guide-1",
            "iteration-template-1",
            "iteration-guide-1",
        ]

    def test_featured_search(self, client):
        data = client.get(
            "/api/resources", params={"phase": "EVALUATE", "query": "reflection", "featured_only": True}
        ).json()
        assert [r["id"] for r in data["resources"]] == ["evaluate-template-1"]

    def test_bad_iteration_type_is_400(self, client):
        response = client.get(
            "/api/resources", params={"phase": "ANALYZE", "recent_iteration_type": "sideways"}
        )
        assert response.status_code == 400

    def test_unknown_phase_is_422(self, client):
        assert client.get("/api/resources", params={"phase": "DREAM"}).status_code == 422

    def test_get_one(self, client):
        assert client.get("/api/resources/prototype-video-1").json()["url"] == "/videos/prototype-testing"
        assert client.get("/api/resources/nope").status_code == 404


class TestPhaseTemplates:
    """Tests for /api/phase-templates."""

    def test_list_by_grade(self, client):
        data = client.get("/api/phase-templates", params={"grade_level": "elementary"}).json()
        assert [t["id"] for t in data["templates"]] == ["creative-arts"]
        assert data["categories"] == ["Science & Engineering", "Arts & Humanities"]

    def test_list_by_subject(self, client):
        data = client.get("/api/phase-templates", params={"query": "engineering"}).json()
        assert [t["id"] for t in data["templates"]] == ["stem-investigation"]

    def test_get_unknown(self, client):
        assert client.get("/api/phase-templates/cooking").status_code == 404

    def test_suggestions(self, client):
        data = client.get(
            "/api/phase-templates/suggestions",
            params={"phase": "PROTOTYPE", "subject": "Science", "grade_level": "elementary"},
        ).json()
        assert data["objectives"][0] == "Build a simple solution"
        assert data["activities"][0]["duration"] == "2 class periods"

    def test_apply_template(self, client, journey_data):
        response = client.post("/api/phase-templates/creative-arts/apply", json={"journey": journey_data})
        assert response.status_code == 200
        phases = response.json()["phases"]
        assert [len(p["objectives"]) for p in phases] == [3, 3, 3, 3]
        assert phases[0]["activities"][0]["student_choice"] is True

    def test_apply_unknown_template(self, client, journey_data):
        response = client.post("/api/phase-templates/cooking/apply", json={"journey": journey_data})
        assert response.status_code == 404

    def test_apply_selected_suggestions(self, client, journey_data):
        response = client.post(
            "/api/phase-templates/suggestions/apply",
            json={
                "journey": journey_data,
                "phase": "evaluate",
                "subject": "Drama",
                "items": ["objective-1", "deliverable-0"],
            },
        )
        assert response.status_code == 200
        evaluate = response.json()["phases"][3]
        assert [o["text"] for o in evaluate["objectives"]] == ["Reflect on learning"]
        assert evaluate["activities"] == []
        assert evaluate["deliverables"][0]["name"] == "Final Presentation"

    def test_apply_bad_phase(self, client, journey_data):
        response = client.post(
            "/api/phase-templates/suggestions/apply",
            json={"journey": journey_data, "phase": "dream", "subject": "Drama"},
        )
        assert response.status_code == 400

    def test_invalid_journey_is_422(self, client):
        response = client.post("/api/phase-templates/creative-arts/apply", json={"journey": {"title": "x"}})
        assert response.status_code == 422
