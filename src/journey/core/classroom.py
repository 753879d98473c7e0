"""Classroom snapshot loading.

A snapshot is a single JSON document holding everything the class-wide
computations read: roster, progress, assessments, peer reviews,
iterations and the journey phases.

Input structure (JSON):
{
    "grade_level": "middle",
    "project_duration": 8,
    "current_week": 3,
    "start_date": "2026-09-01T00:00:00+00:00",
    "current_phase": 1,
    "students": [{"id": "s1", "name": "Ana"}],
    "progress": [...],
    "assessments": [...],
    "peer_reviews": [...],
    "iterations": [...],
    "phases": [...],          # optional, defaults to the four standard phases
    "rubric": {...}           # optional
}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from journey.core.analytics import AnalyticsReport, compute_analytics
from journey.core.assessment import Assessment
from journey.core.iterations import IterationEvent
from journey.core.peer_review import PeerReview, Student
from journey.core.phases import CreativePhase, GradeLevel, default_phases
from journey.core.rubric import Rubric
from journey.core.student_progress import StudentProgress

logger = structlog.get_logger(__name__)


class ClassroomDataError(Exception):
    """Snapshot file is missing or malformed."""

    pass


@dataclass
class ClassroomSnapshot:
    grade_level: GradeLevel = GradeLevel.MIDDLE
    project_duration: int = 8
    current_week: int = 1
    start_date: str | None = None
    current_phase: int = 0
    students: list[Student] = field(default_factory=list)
    progress: list[StudentProgress] = field(default_factory=list)
    assessments: list[Assessment] = field(default_factory=list)
    peer_reviews: list[PeerReview] = field(default_factory=list)
    iterations: list[IterationEvent] = field(default_factory=list)
    phases: list[CreativePhase] = field(default_factory=default_phases)
    rubric: Rubric | None = None

    def student(self, student_id: str) -> Student | None:
        return next((s for s in self.students if s.id == student_id), None)

    def progress_for(self, student_id: str) -> StudentProgress:
        found = next((p for p in self.progress if p.student_id == student_id), None)
        return found or StudentProgress(student_id=student_id)

    def iterations_by_student(self) -> dict[str, list[IterationEvent]]:
        """Iterations grouped by the student whose progress lists them."""
        by_id = {e.id: e for e in self.iterations}
        grouped: dict[str, list[IterationEvent]] = {}
        for progress in self.progress:
            events = [by_id.get(e.id, e) for e in progress.iteration_events]
            if events:
                grouped[progress.student_id] = events
        return grouped

    def analytics(self) -> AnalyticsReport:
        return compute_analytics(
            self.students,
            self.progress,
            self.assessments,
            self.peer_reviews,
            self.iterations,
            self.phases,
            self.project_duration,
            self.current_week,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClassroomSnapshot:
        phases = data.get("phases")
        rubric = data.get("rubric")
        try:
            return cls(
                grade_level=GradeLevel(data.get("grade_level", "middle")),
                project_duration=int(data.get("project_duration", 8)),
                current_week=int(data.get("current_week", 1)),
                start_date=data.get("start_date"),
                current_phase=int(data.get("current_phase", 0)),
                students=[Student.from_dict(s) for s in data.get("students", [])],
                progress=[StudentProgress.from_dict(p) for p in data.get("progress", [])],
                assessments=[Assessment.from_dict(a) for a in data.get("assessments", [])],
                peer_reviews=[PeerReview.from_dict(r) for r in data.get("peer_reviews", [])],
                iterations=[IterationEvent.from_dict(e) for e in data.get("iterations", [])],
                phases=[CreativePhase.from_dict(p) for p in phases] if phases else default_phases(),
                rubric=Rubric.from_dict(rubric) if rubric else None,
            )
        except (KeyError, ValueError, TypeError) as e:
            raise ClassroomDataError(f"Invalid classroom data: {e}") from e


def load_json(path: Path) -> Any:
    """Read a JSON input file.

    Raises:
        ClassroomDataError: If the file is missing or not valid JSON
    """
    if not path.exists():
        raise ClassroomDataError(f"File not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ClassroomDataError(f"Invalid JSON in {path}: {e}") from e


def load_classroom(path: Path) -> ClassroomSnapshot:
    snapshot = ClassroomSnapshot.from_dict(load_json(path))
    logger.debug(
        "classroom_loaded",
        path=str(path),
        students=len(snapshot.students),
        iterations=len(snapshot.iterations),
    )
    return snapshot
