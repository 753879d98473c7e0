"""Tests for phase templates, suggestions and bulk adding them to a journey."""

import pytest

from journey.core.journey_editor import JourneyEditor, new_journey
from journey.core.phases import (
    PhaseObjective,
    PhaseType,
    filter_templates,
    get_phase_template,
    is_phase_complete,
    phase_suggestions,
    template_categories,
)


@pytest.fixture
def editor():
    return JourneyEditor(new_journey("Rain garden", "middle", 8), history_limit=10)


class TestTemplateLibrary:
    def test_filter_by_grade(self):
        assert [t.id for t in filter_templates("middle")] == ["stem-investigation", "creative-arts"]
        assert [t.id for t in filter_templates("elementary")] == ["creative-arts"]

    def test_filter_by_category(self):
        templates = filter_templates("high", category="Science & Engineering")
        assert [t.id for t in templates] == ["stem-investigation"]

    def test_search_matches_subjects(self):
        assert [t.id for t in filter_templates("high", query="drama")] == ["creative-arts"]
        assert filter_templates("high", query="history") == []

    def test_categories(self):
        assert template_categories() == ["Science & Engineering", "Arts & Humanities"]

    def test_unknown_template(self):
        assert get_phase_template("cooking") is None

    def test_every_phase_covered(self):
        template = get_phase_template("stem-investigation")
        assert list(template.phases) == list(PhaseType)
        assert template.to_dict()["phases"]["PROTOTYPE"]["deliverables"][1]["name"] == "Test Results"


class TestSuggestions:
    def test_elementary_analyze(self):
        content = phase_suggestions("ANALYZE", "elementary", "Science")

        assert content.objectives[1] == "Research basic concepts related to Science"
        assert content.activities[0]["duration"] == "1 class period"
        assert content.activities[0]["student_choice"] is False
        assert content.deliverables[0]["format"] == "Visual poster"

    def test_high_evaluate(self):
        content = phase_suggestions(PhaseType.EVALUATE, "high", "Art")

        assert content.objectives[0] == "Assess the complex solution"
        assert content.activities[0]["student_choice"] is True
        assert content.deliverables[0]["format"] == "Formal presentation"

    def test_build_selected_items(self):
        objectives, activities, deliverables = phase_suggestions(
            "BRAINSTORM", "middle", "Music"
        ).build({"objective-0", "deliverable-0"})

        assert [o.text for o in objectives] == ["Generate moderate solutions"]
        assert activities == []
        assert deliverables[0].assessment_criteria == ["Quantity", "Creativity", "Feasibility"]
        assert deliverables[0].id.startswith("del-")


class TestBulkAdd:
    def test_bulk_add_is_one_edit(self, editor):
        objectives, activities, deliverables = phase_suggestions("PROTOTYPE", "middle", "Science").build()

        editor.bulk_add(2, objectives, activities, deliverables)

        phase = editor.current.phases[2]
        assert len(phase.objectives) == 3
        assert phase.activities[0].resources == ["Materials", "Tools", "Workspace"]
        assert len(editor.history) == 2
        editor.undo()
        assert editor.current.phases[2].objectives == []

    def test_invalid_items_skipped(self, editor):
        editor.bulk_add(0, objectives=[PhaseObjective("o1", "Map the site"), PhaseObjective("o2", " ")])

        assert [o.text for o in editor.current.phases[0].objectives] == ["Map the site"]

    def test_nothing_valid_leaves_history(self, editor):
        before = editor.current
        assert editor.bulk_add(0, objectives=[PhaseObjective("o1", "")]) is before
        assert not editor.can_undo

    def test_apply_template_completes_phases(self, editor):
        editor.apply_template(get_phase_template("creative-arts"))

        journey = editor.current
        assert all(is_phase_complete(p) for p in journey.phases)
        assert journey.phases[3].deliverables[0].name == "Artist Statement"
        assert len(editor.history) == 2
        assert editor.has_changes
