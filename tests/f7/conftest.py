"""Fixtures for F7 tests - Reports and message templates."""

from datetime import datetime, timezone

import pytest

from journey.core.classroom import ClassroomSnapshot
from journey.core.reports import ReportBuilder

NOW = datetime(2026, 10, 2, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def classroom(classroom_data) -> ClassroomSnapshot:
    return ClassroomSnapshot.from_dict(classroom_data)


def _make_builder(classroom: ClassroomSnapshot, with_analytics: bool = True) -> ReportBuilder:
    return ReportBuilder(
        classroom.students,
        classroom.progress,
        classroom.assessments,
        classroom.peer_reviews,
        classroom.iterations,
        classroom.analytics() if with_analytics else None,
        classroom.grade_level,
        classroom.project_duration,
        classroom.current_week,
    )


@pytest.fixture
def make_builder(classroom):
    """Builder factory; pass with_analytics=False to drop analytics."""

    def factory(with_analytics: bool = True) -> ReportBuilder:
        return _make_builder(classroom, with_analytics)

    return factory


@pytest.fixture
def builder(make_builder) -> ReportBuilder:
    return make_builder()
