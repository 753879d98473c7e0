"""Fixtures for F6 tests - Adaptive learning, tutor and teacher guidance."""

from datetime import datetime, timezone

import pytest

from journey.core.classroom import ClassroomSnapshot

NOW = datetime(2026, 10, 2, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def classroom(classroom_data) -> ClassroomSnapshot:
    return ClassroomSnapshot.from_dict(classroom_data)


@pytest.fixture
def report(classroom):
    return classroom.analytics()
