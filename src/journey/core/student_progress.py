"""Student progress module.

Responsibilities (F5):
- Weighted per-phase completion for one student
- Overall progress, time budget and pace
- Achievement badges and phase milestones

Phase completion weights: objectives 0.3 (target 2), activities 0.4
(target 3), deliverables 0.3 (target 1).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Literal

import structlog

from journey.core.assessment import Assessment
from journey.core.iterations import IterationEvent
from journey.core.phases import CreativePhase, PhaseType
from journey.utils.numbers import round_half_up
from journey.utils.time_utils import (
    MINUTES_PER_WORKDAY,
    MINUTES_PER_WORKWEEK,
    parse_iso,
    utc_now,
)

logger = structlog.get_logger(__name__)

AchievementCategory = Literal["phase", "iteration", "collaboration", "excellence", "growth"]
MilestoneStatus = Literal["upcoming", "in_progress", "completed", "overdue"]

# (id, name, description, category)
_ACHIEVEMENT_DEFS = [
    ("first-phase", "Journey Begins", "Complete your first phase", "phase"),
    ("all-phases", "Full Circle", "Complete all four phases", "phase"),
    ("analyze-master", "Research Expert", "Excel in the Analyze phase", "excellence"),
    ("creative-thinker", "Creative Thinker", "Generate 10+ unique ideas", "excellence"),
    ("prototype-builder", "Master Builder", "Create an outstanding prototype", "excellence"),
    ("quick-learner", "Quick Learner", "Complete iteration in under 2 days", "iteration"),
    ("persistent", "Persistent", "Successfully iterate and improve", "iteration"),
    ("team-player", "Team Player", "Help 3+ classmates", "collaboration"),
    (
        "communicator",
        "Great Communicator",
        "Receive excellent feedback on presentation",
        "collaboration",
    ),
    ("growth-mindset", "Growth Mindset", "Show consistent improvement", "growth"),
]

ACHIEVEMENTS: list[dict[str, str]] = [
    {"id": i, "name": n, "description": d, "category": c} for i, n, d, c in _ACHIEVEMENT_DEFS
]


# Fixed reference growth curve shown until per-skill history is tracked
GROWTH_METRICS: list[dict[str, Any]] = [
    {
        "category": category,
        "start_value": start,
        "current_value": current,
        "target_value": target,
        "unit": "%",
        "trend": trend,
    }
    for category, start, current, target, trend in [
        ("Problem Solving", 60, 75, 90, "improving"),
        ("Creativity", 70, 85, 95, "improving"),
        ("Collaboration", 65, 80, 85, "stable"),
        ("Communication", 55, 70, 80, "improving"),
    ]
]


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class PhaseProgress:
    """Time and completion for one phase of one student."""

    phase_type: PhaseType
    time_spent: int = 0  # Minutes
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase_type": self.phase_type.value,
            "time_spent": self.time_spent,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PhaseProgress:
        return cls(
            phase_type=PhaseType(data["phase_type"]),
            time_spent=int(data.get("time_spent", 0)),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class StudentProgress:
    """Where a student stands in the journey."""

    student_id: str
    phase_progress: list[PhaseProgress] = field(default_factory=list)
    current_phase: int = 0
    overall_progress: float = 0
    iteration_events: list[IterationEvent] = field(default_factory=list)

    @property
    def current_phase_type(self) -> PhaseType:
        return list(PhaseType)[min(self.current_phase, len(PhaseType) - 1)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "student_id": self.student_id,
            "phase_progress": [p.to_dict() for p in self.phase_progress],
            "current_phase": self.current_phase,
            "overall_progress": self.overall_progress,
            "iteration_events": [e.to_dict() for e in self.iteration_events],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StudentProgress:
        return cls(
            student_id=str(data["student_id"]),
            phase_progress=[PhaseProgress.from_dict(p) for p in data.get("phase_progress", [])],
            current_phase=int(data.get("current_phase", 0)),
            overall_progress=float(data.get("overall_progress", 0)),
            iteration_events=[IterationEvent.from_dict(e) for e in data.get("iteration_events", [])],
        )


@dataclass
class PhaseCompletion:
    phase: PhaseType
    name: str
    completion: int
    is_active: bool
    iterations: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "name": self.name,
            "completion": self.completion,
            "is_active": self.is_active,
            "iterations": self.iterations,
        }


@dataclass
class Achievement:
    id: str
    name: str
    description: str
    category: str  # AchievementCategory
    earned_at: str | None = None
    progress: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "earned_at": self.earned_at,
            "progress": self.progress,
        }


@dataclass
class ProgressMilestone:
    id: str
    name: str
    description: str
    target_date: str
    status: str  # MilestoneStatus
    completed_date: str | None = None
    phase_type: PhaseType | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "target_date": self.target_date,
            "status": self.status,
            "completed_date": self.completed_date,
            "phase_type": self.phase_type.value if self.phase_type else None,
        }


@dataclass
class ProgressMetrics:
    phase_completion: list[PhaseCompletion]
    overall_progress: int
    time_spent: int
    time_remaining: int
    pace_status: Literal["behind", "on-track"]
    average_score: int
    growth_metrics: list[dict[str, Any]]
    achievements: list[Achievement]
    milestones: list[ProgressMilestone]

    @property
    def earned_achievements(self) -> list[Achievement]:
        return [a for a in self.achievements if a.earned_at]

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase_completion": [p.to_dict() for p in self.phase_completion],
            "overall_progress": self.overall_progress,
            "time_spent": self.time_spent,
            "time_remaining": self.time_remaining,
            "pace_status": self.pace_status,
            "average_score": self.average_score,
            "growth_metrics": [dict(m) for m in self.growth_metrics],
            "achievements": [a.to_dict() for a in self.achievements],
            "milestones": [m.to_dict() for m in self.milestones],
        }


# =============================================================================
# CALCULATIONS
# =============================================================================


def calculate_phase_completion(phase: CreativePhase) -> int:
    """Weighted completion percentage of a phase."""
    objective_progress = min(100.0, (len(phase.objectives) / 2) * 100)
    activity_progress = min(100.0, (len(phase.activities) / 3) * 100)
    deliverable_progress = min(100.0, len(phase.deliverables) * 100.0)
    return round_half_up(
        objective_progress * 0.3 + activity_progress * 0.4 + deliverable_progress * 0.3
    )


def _achievements(
    completion: list[PhaseCompletion],
    iterations: list[IterationEvent],
    growth: list[dict[str, Any]],
    stamp: str,
) -> list[Achievement]:
    results = []
    for definition in ACHIEVEMENTS:
        earned = False
        progress = 0
        achievement_id = definition["id"]

        if achievement_id == "first-phase":
            earned = any(p.completion == 100 for p in completion)
        elif achievement_id == "all-phases":
            earned = bool(completion) and all(p.completion == 100 for p in completion)
            progress = sum(1 for p in completion if p.completion == 100) * 25
        elif achievement_id == "quick-learner":
            earned = any(e.duration < 2 * MINUTES_PER_WORKDAY for e in iterations)
        elif achievement_id == "persistent":
            earned = len(iterations) > 0
        elif achievement_id == "growth-mindset":
            earned = sum(1 for m in growth if m["trend"] == "improving") >= 3

        results.append(
            Achievement(
                id=achievement_id,
                name=definition["name"],
                description=definition["description"],
                category=definition["category"],
                earned_at=stamp if earned else None,
                progress=100 if earned else progress,
            )
        )
    return results


def progress_metrics(
    progress: StudentProgress,
    phases: list[CreativePhase],
    assessments: list[Assessment],
    iterations: list[IterationEvent],
    project_duration: int,
    current_week: int,
    now: datetime | None = None,
) -> ProgressMetrics:
    """Everything the student progress view shows for one student."""
    now = parse_iso(now or utc_now())
    stamp = now.isoformat()

    completion = [
        PhaseCompletion(
            phase=phase.type,
            name=phase.name,
            completion=calculate_phase_completion(phase),
            is_active=idx == progress.current_phase,
            iterations=sum(1 for e in iterations if e.to_phase == phase.type),
        )
        for idx, phase in enumerate(phases)
    ]

    overall = round_half_up(sum(p.completion for p in completion) / len(phases)) if phases else 0
    time_spent = sum(p.time_spent for p in progress.phase_progress)
    time_remaining = (project_duration - current_week) * MINUTES_PER_WORKWEEK
    behind = project_duration > 0 and current_week / project_duration > overall / 100

    average_score = (
        round_half_up(sum(a.percentage for a in assessments) / len(assessments))
        if assessments
        else 0
    )

    growth = [dict(m) for m in GROWTH_METRICS]

    milestones = []
    for idx, phase in enumerate(phases):
        done = completion[idx].completion == 100
        if done:
            status = "completed"
        elif completion[idx].is_active:
            status = "in_progress"
        elif idx < progress.current_phase:
            status = "overdue"
        else:
            status = "upcoming"
        milestones.append(
            ProgressMilestone(
                id=phase.type.value,
                name=f"Complete {phase.name} Phase",
                description=phase.description,
                target_date=(now + timedelta(weeks=idx + 1)).isoformat(),
                completed_date=stamp if done else None,
                phase_type=phase.type,
                status=status,
            )
        )

    metrics = ProgressMetrics(
        phase_completion=completion,
        overall_progress=overall,
        time_spent=time_spent,
        time_remaining=time_remaining,
        pace_status="behind" if behind else "on-track",
        average_score=average_score,
        growth_metrics=growth,
        achievements=_achievements(completion, iterations, growth, stamp),
        milestones=milestones,
    )

    logger.debug(
        "progress_metrics_computed",
        student_id=progress.student_id,
        overall=overall,
        pace=metrics.pace_status,
        earned=[a.id for a in metrics.earned_achievements],
    )
    return metrics
