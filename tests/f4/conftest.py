"""Fixtures for F4 tests - Iterations and iteration analytics."""

from datetime import datetime, timezone

import pytest

from journey.core.iterations import IterationEvent, IterationMetadata
from journey.core.phases import PhaseType

NOW = datetime(2026, 10, 2, tzinfo=timezone.utc)
START = "2026-09-01T00:00:00+00:00"


def _event(id, from_phase, to_phase, kind, days, timestamp, reason, notes=""):
    return IterationEvent(
        id=id,
        from_phase=from_phase,
        to_phase=to_phase,
        reason=reason,
        timestamp=timestamp,
        duration=days * 480,
        metadata=IterationMetadata(iteration_type=kind, notes=notes, estimated_days=days),
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def start_date() -> str:
    return START


@pytest.fixture
def events() -> list[IterationEvent]:
    """Four iterations, one per week, of increasing severity."""
    return [
        _event(
            "e1",
            PhaseType.BRAINSTORM,
            PhaseType.ANALYZE,
            "quick_loop",
            1,
            "2026-09-08T10:00:00+00:00",
            "Missing user data",
            notes="Interview more neighbours",
        ),
        _event(
            "e2",
            PhaseType.PROTOTYPE,
            PhaseType.ANALYZE,
            "major_pivot",
            3,
            "2026-09-15T10:00:00+00:00",
            "Solution not feasible",
        ),
        _event(
            "e3",
            PhaseType.EVALUATE,
            PhaseType.BRAINSTORM,
            "major_pivot",
            3,
            "2026-09-22T10:00:00+00:00",
            "Stakeholder feedback requires change",
        ),
        _event(
            "e4",
            PhaseType.EVALUATE,
            PhaseType.ANALYZE,
            "complete_restart",
            7,
            "2026-09-29T10:00:00+00:00",
            "Fundamental misunderstanding",
        ),
    ]
