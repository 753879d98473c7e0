"""Teacher guidance module.

Responsibilities (F6):
- Class-wide iteration patterns
- Prioritized facilitation, intervention and communication actions
- Facilitation tips per phase
- Parent communication drafts rendered from templates/parents/*.md

Input shape: a mapping student_id -> that student's iteration events.
Students without iterations are simply absent from the mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

from journey.core.iterations import ITERATION_TYPES, IterationEvent
from journey.core.phases import PHASE_NAMES, PHASE_ORDER, PhaseType
from journey.templates.registry import MessageTemplate, get_message

logger = structlog.get_logger(__name__)

PatternType = Literal["positive", "concern", "neutral"]
ActionType = Literal["intervention", "communication", "facilitation", "assessment"]

ACTION_PRIORITY_ORDER = {"urgent": 0, "high": 1, "medium": 2, "low": 3}

PARENT_TEMPLATES = {
    "iteration_update": "parents/iteration_update",
    "struggling_student": "parents/struggling_student",
}

# Students with more iterations than this need support
STRUGGLE_THRESHOLD = 3

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class FacilitationTip:
    id: str
    phase: PhaseType
    situation: str
    strategy: str
    example: str | None = None
    grade_specific: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "phase": self.phase.value,
            "situation": self.situation,
            "strategy": self.strategy,
            "example": self.example,
            "grade_specific": self.grade_specific,
        }


@dataclass
class ClassPattern:
    id: str
    type: str  # PatternType
    pattern: str
    affected_count: int
    recommendation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "pattern": self.pattern,
            "affected_count": self.affected_count,
            "recommendation": self.recommendation,
        }


@dataclass
class GuidanceAction:
    id: str
    type: str  # ActionType
    priority: str  # urgent | high | medium | low
    title: str
    description: str
    suggested_timing: str
    resources: list[str] = field(default_factory=list)
    target_students: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "suggested_timing": self.suggested_timing,
            "resources": list(self.resources),
            "target_students": list(self.target_students),
        }


@dataclass
class ClassStats:
    average_iterations_per_student: float
    total_class_iterations: int
    average_iteration_time: float
    iteration_types: dict[str, int]
    students_on_track: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "average_iterations_per_student": self.average_iterations_per_student,
            "total_class_iterations": self.total_class_iterations,
            "average_iteration_time": self.average_iteration_time,
            "iteration_types": dict(self.iteration_types),
            "students_on_track": self.students_on_track,
        }


FACILITATION_TIPS: list[FacilitationTip] = [
    FacilitationTip(
        id="analyze-1",
        phase=PhaseType.ANALYZE,
        situation="Students struggling to define the problem",
        strategy='Use the "5 Whys" technique to help students dig deeper into root causes',
        example=(
            "Why is playground safety important? Why do accidents happen? Keep asking why..."
        ),
    ),
    FacilitationTip(
        id="analyze-2",
        phase=PhaseType.ANALYZE,
        situation="Analysis paralysis - too much research",
        strategy="Set clear research boundaries with time limits and source requirements",
        example="You have 2 class periods and need 3 credible sources minimum, 5 maximum",
    ),
    FacilitationTip(
        id="brainstorm-1",
        phase=PhaseType.BRAINSTORM,
        situation="Limited idea generation",
        strategy="Use SCAMPER method to expand thinking",
        example="Substitute, Combine, Adapt, Modify, Put to another use, Eliminate, Reverse",
    ),
    FacilitationTip(
        id="prototype-1",
        phase=PhaseType.PROTOTYPE,
        situation="Perfectionism preventing progress",
        strategy='Emphasize "fail fast, learn faster" mindset',
        example=(
            "Your first prototype should be ugly but functional - "
            'we call it the "ugly duckling" stage'
        ),
    ),
    FacilitationTip(
        id="evaluate-1",
        phase=PhaseType.EVALUATE,
        situation="Superficial reflection",
        strategy="Use structured reflection prompts with specific examples",
        example=(
            "Describe one specific moment when you had to change your approach. "
            "What triggered it?"
        ),
    ),
]


# =============================================================================
# PATTERNS AND ACTIONS
# =============================================================================


def class_patterns(
    student_iterations: dict[str, list[IterationEvent]],
    class_size: int,
    project_week: int,
    total_weeks: int,
) -> list[ClassPattern]:
    patterns: list[ClassPattern] = []
    with_iterations = len(student_iterations)
    rate = (with_iterations / class_size) * 100 if class_size else 0

    if rate > 70:
        patterns.append(
            ClassPattern(
                id="high-iteration",
                type="concern",
                pattern="Majority of class requiring iterations",
                affected_count=with_iterations,
                recommendation="Consider whole-class reteaching of current phase concepts",
            )
        )
    elif rate < 20 and project_week > 1:
        patterns.append(
            ClassPattern(
                id="low-iteration",
                type="positive",
                pattern="Strong initial planning across class",
                affected_count=class_size - with_iterations,
                recommendation="Highlight successful planning strategies in class discussion",
            )
        )

    repeated = sum(1 for events in student_iterations.values() if len(events) > STRUGGLE_THRESHOLD)
    if repeated > class_size * 0.2:
        patterns.append(
            ClassPattern(
                id="multiple-iterations",
                type="concern",
                pattern="Several students with repeated iterations",
                affected_count=repeated,
                recommendation="Form small support groups for targeted assistance",
            )
        )

    per_phase = {phase: 0 for phase in PHASE_ORDER}
    for events in student_iterations.values():
        for event in events:
            per_phase[event.to_phase] += 1

    problem = next(
        ((phase, count) for phase, count in per_phase.items() if count > with_iterations * 2),
        None,
    )
    if problem is not None:
        phase, count = problem
        patterns.append(
            ClassPattern(
                id="phase-difficulty",
                type="concern",
                pattern=f"{phase.value} phase causing difficulties",
                affected_count=count,
                recommendation=(
                    f"Review {phase.value.lower()} phase requirements "
                    "and provide additional scaffolding"
                ),
            )
        )

    if project_week > total_weeks * 0.5 and rate < 50:
        patterns.append(
            ClassPattern(
                id="good-progress",
                type="positive",
                pattern="Class maintaining good progress past midpoint",
                affected_count=class_size,
                recommendation="Continue current facilitation approach",
            )
        )

    return patterns


def struggling_students(student_iterations: dict[str, list[IterationEvent]]) -> list[str]:
    """Students with many iterations or a complete restart."""
    return [
        student_id
        for student_id, events in student_iterations.items()
        if len(events) > STRUGGLE_THRESHOLD
        or any(e.iteration_type == "complete_restart" for e in events)
    ]


def guidance_actions(
    student_iterations: dict[str, list[IterationEvent]],
    class_size: int,
    project_week: int,
    total_weeks: int,
) -> list[GuidanceAction]:
    """Actions for the teacher, most urgent first."""
    actions: list[GuidanceAction] = []
    struggling = struggling_students(student_iterations)

    if struggling:
        actions.append(
            GuidanceAction(
                id="intervention-1",
                type="intervention",
                priority="urgent",
                title="Students Needing Support",
                description=f"{len(struggling)} student(s) showing signs of significant struggle",
                target_students=struggling,
                suggested_timing="Today or tomorrow",
                resources=["One-on-one conferencing guide", "Differentiation strategies"],
            )
        )

    quarter = total_weeks // 4
    if quarter > 0 and project_week % quarter == 0:
        actions.append(
            GuidanceAction(
                id="facilitation-1",
                type="facilitation",
                priority="high",
                title="Phase Transition Check-in",
                description="Conduct whole-class review before phase transition",
                suggested_timing="End of this week",
                resources=["Phase transition checklist", "Reflection prompts"],
            )
        )

    if len(struggling) > class_size * 0.15:
        actions.append(
            GuidanceAction(
                id="communication-1",
                type="communication",
                priority="medium",
                title="Parent Update Recommended",
                description="Send project update to parents about iteration process",
                suggested_timing="Within 2-3 days",
                resources=["Parent email template", "Project overview handout"],
            )
        )

    if project_week >= total_weeks - 1:
        actions.append(
            GuidanceAction(
                id="assessment-1",
                type="assessment",
                priority="high",
                title="Final Assessment Preparation",
                description="Review rubrics and prepare for final presentations",
                suggested_timing="This week",
                resources=["Presentation rubric", "Peer evaluation forms"],
            )
        )

    actions.sort(key=lambda a: ACTION_PRIORITY_ORDER[a.priority])
    logger.info(
        "guidance_actions_generated",
        week=project_week,
        struggling=len(struggling),
        actions=[a.id for a in actions],
    )
    return actions


def tips_for_phase(phase: PhaseType | str, include_general: bool = True) -> list[FacilitationTip]:
    """Tips for the phase plus every tip that is not grade specific."""
    phase = PhaseType(phase)
    return [
        tip
        for tip in FACILITATION_TIPS
        if tip.phase == phase or (include_general and not tip.grade_specific)
    ]


def class_stats(
    student_iterations: dict[str, list[IterationEvent]], class_size: int
) -> ClassStats:
    total = 0
    total_time = 0
    types = {kind: 0 for kind in ITERATION_TYPES}
    for events in student_iterations.values():
        for event in events:
            total += 1
            total_time += event.duration or 0
            if event.iteration_type:
                types[event.iteration_type] = types.get(event.iteration_type, 0) + 1

    return ClassStats(
        average_iterations_per_student=total / max(1, len(student_iterations)),
        total_class_iterations=total,
        average_iteration_time=total_time / max(1, total),
        iteration_types=types,
        students_on_track=class_size - len(student_iterations),
    )


# =============================================================================
# PARENT COMMUNICATION
# =============================================================================


def parent_message(
    template: str,
    student_name: str,
    phase: PhaseType | str,
    teacher_name: str = "",
    support_areas: list[str] | None = None,
) -> MessageTemplate:
    """Parent email draft with the student's details filled in.

    Raises:
        KeyError: If the template name is unknown
    """
    if template not in PARENT_TEMPLATES:
        raise KeyError(f"Unknown parent template: {template}")

    areas = "\n".join(f"- {area}" for area in support_areas or [])
    message = get_message(
        PARENT_TEMPLATES[template],
        student_name=student_name,
        phase_name=PHASE_NAMES[PhaseType(phase)],
        teacher_name=teacher_name or "[TEACHER_NAME]",
        support_areas=areas or "[SUPPORT_AREAS]",
    )
    logger.debug("parent_message_rendered", template=template)
    return message
