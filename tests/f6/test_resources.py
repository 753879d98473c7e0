"""Tests for the support resource library."""

import pytest

from journey.core.phases import PhaseType
from journey.core.resources import (
    RESOURCES,
    category_counts,
    filter_resources,
    get_resource,
    recommended_resources,
)


def _ids(resources):
    return [r.id for r in resources]


class TestFilter:
    """Tests for filter_resources."""

    def test_phase_and_grade(self):
        resources = filter_resources(PhaseType.ANALYZE, "middle")

        assert _ids(resources) == [
            "iteration-guide-1",
            "analyze-guide-1",
            "analyze-template-1",
            "iteration-template-1",
        ]

    def test_grade_excludes_high_only(self):
        assert "analyze-video-1" not in _ids(filter_resources("ANALYZE", "middle"))
        assert "analyze-video-1" in _ids(filter_resources("ANALYZE", "high"))

    def test_recent_iteration_ranked_first(self):
        resources = filter_resources("ANALYZE", "middle", recent_iteration_type="complete_restart")

        assert _ids(resources) == [
            "iteration-template-1",
            "iteration-guide-1",
            "analyze-guide-1",
            "analyze-template-1",
        ]

    def test_category(self):
        assert _ids(filter_resources("ANALYZE", "middle", category="worksheet")) == [
            "analyze-template-1"
        ]

    def test_query_searches_tags(self):
        assert _ids(filter_resources("ANALYZE", "elementary", query="CHECKLIST")) == [
            "iteration-template-1"
        ]

    def test_featured_only(self):
        assert _ids(filter_resources("ANALYZE", "middle", featured_only=True)) == [
            "iteration-guide-1",
            "analyze-guide-1",
        ]

    def test_no_match(self):
        assert filter_resources("EVALUATE", "middle", query="robotics") == []

    def test_bad_iteration_type(self):
        with pytest.raises(ValueError):
            filter_resources("ANALYZE", "middle", recent_iteration_type="sideways")


class TestRecommendations:
    """Tests for recommended_resources."""

    def test_featured_and_iteration_pick(self):
        picks = recommended_resources("ANALYZE", "middle", recent_iteration_type="quick_loop")

        # the most popular all-phase pick is already the quick_loop guide
        assert _ids(picks) == ["analyze-guide-1", "iteration-guide-1"]

    def test_three_picks_for_high_school(self):
        picks = recommended_resources("PROTOTYPE", "high", recent_iteration_type="major_pivot")

        assert _ids(picks) == ["prototype-guide-1", "iteration-video-1", "iteration-guide-1"]

    def test_without_phase_feature(self):
        assert _ids(recommended_resources("BRAINSTORM", "elementary")) == ["iteration-template-1"]


class TestCategories:
    def test_counts_follow_filtered_list(self):
        counts = category_counts(filter_resources("ANALYZE", "middle"))

        assert counts == {"guide": 2, "video": 0, "template": 1, "worksheet": 1}

    def test_counts_cover_library(self):
        assert sum(category_counts(RESOURCES).values()) == len(RESOURCES)

    def test_get_resource(self):
        assert get_resource("evaluate-template-1").title == "Reflection Framework"
        assert get_resource("nope") is None
        assert get_resource("iteration-guide-1").to_dict()["phase"] == "all"
