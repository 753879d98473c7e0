"""Creative process phases.

Responsibilities (F1):
- Define the four fixed phases (Analyze, Brainstorm, Prototype, Evaluate)
- Hold static curriculum content: objectives, activities, deliverables
- Validate user-entered phase content
- Compute phase and journey completion
- Offer project-type templates and per-phase starter suggestions

Completion rule: a phase is complete with >= 2 objectives,
>= 2 activities and >= 1 deliverable.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

import structlog

from journey.utils.numbers import round_half_up
from journey.utils.validators import generate_id

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================


class PhaseType(str, Enum):
    """One of the four fixed stages of the creative process."""

    ANALYZE = "ANALYZE"
    BRAINSTORM = "BRAINSTORM"
    PROTOTYPE = "PROTOTYPE"
    EVALUATE = "EVALUATE"


class GradeLevel(str, Enum):
    """Grade band used to pick age-appropriate language."""

    ELEMENTARY = "elementary"
    MIDDLE = "middle"
    HIGH = "high"


PHASE_ORDER: list[PhaseType] = [
    PhaseType.ANALYZE,
    PhaseType.BRAINSTORM,
    PhaseType.PROTOTYPE,
    PhaseType.EVALUATE,
]

PHASE_NAMES: dict[PhaseType, str] = {
    PhaseType.ANALYZE: "Analyze",
    PhaseType.BRAINSTORM: "Brainstorm",
    PhaseType.PROTOTYPE: "Prototype",
    PhaseType.EVALUATE: "Evaluate",
}

PHASE_DESCRIPTIONS: dict[PhaseType, str] = {
    PhaseType.ANALYZE: "Understand the problem, its context and the people it affects",
    PhaseType.BRAINSTORM: "Generate and develop many possible solutions",
    PhaseType.PROTOTYPE: "Build and test a working version of the chosen idea",
    PhaseType.EVALUATE: "Judge the solution against success criteria and reflect",
}

# Thresholds for a complete phase
MIN_OBJECTIVES = 2
MIN_ACTIVITIES = 2
MIN_DELIVERABLES = 1

# Field limits
MAX_OBJECTIVE_TEXT = 200
MAX_ACTIVITY_NAME = 100
MAX_ACTIVITY_DESCRIPTION = 300
MAX_DELIVERABLE_NAME = 100


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class PhaseObjective:
    """A learning objective for a phase."""

    id: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PhaseObjective:
        return cls(id=str(data.get("id", "")), text=data.get("text", ""))


@dataclass
class PhaseActivity:
    """A classroom activity within a phase."""

    id: str
    name: str
    description: str
    duration: str
    resources: list[str] = field(default_factory=list)
    student_choice: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "duration": self.duration,
            "resources": list(self.resources),
            "student_choice": self.student_choice,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PhaseActivity:
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            description=data.get("description", ""),
            duration=data.get("duration", ""),
            resources=list(data.get("resources") or []),
            student_choice=bool(data.get("student_choice", False)),
        )


@dataclass
class PhaseDeliverable:
    """A piece of student work produced in a phase."""

    id: str
    name: str
    format: str
    assessment_criteria: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "format": self.format,
            "assessment_criteria": list(self.assessment_criteria),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PhaseDeliverable:
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            format=data.get("format", ""),
            assessment_criteria=list(data.get("assessment_criteria") or []),
        )


@dataclass
class CreativePhase:
    """One phase of the creative process journey."""

    type: PhaseType
    name: str
    description: str = ""
    objectives: list[PhaseObjective] = field(default_factory=list)
    activities: list[PhaseActivity] = field(default_factory=list)
    deliverables: list[PhaseDeliverable] = field(default_factory=list)
    allocation: float = 0.25  # Share of project time (0-1)
    duration: str = ""
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type.value,
            "name": self.name,
            "description": self.description,
            "objectives": [o.to_dict() for o in self.objectives],
            "activities": [a.to_dict() for a in self.activities],
            "deliverables": [d.to_dict() for d in self.deliverables],
            "allocation": self.allocation,
            "duration": self.duration,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CreativePhase:
        phase_type = PhaseType(data["type"])
        return cls(
            type=phase_type,
            name=data.get("name", PHASE_NAMES[phase_type]),
            description=data.get("description", ""),
            objectives=[PhaseObjective.from_dict(o) for o in data.get("objectives", [])],
            activities=[PhaseActivity.from_dict(a) for a in data.get("activities", [])],
            deliverables=[PhaseDeliverable.from_dict(d) for d in data.get("deliverables", [])],
            allocation=float(data.get("allocation", 0.25)),
            duration=data.get("duration", ""),
            completed=bool(data.get("completed", False)),
        )


class JourneyValidationError(Exception):
    """Invalid phase content entered by the user."""

    def __init__(self, field_name: str, value: Any, message: str):
        self.field = field_name
        self.value = value
        self.message = message
        super().__init__(f"{field_name}: {message}")


# =============================================================================
# VALIDATION
# =============================================================================


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def validate_objective(objective: PhaseObjective) -> None:
    """Raise JourneyValidationError if the objective is not acceptable."""
    if _is_blank(objective.text):
        raise JourneyValidationError("objective.text", objective.text, "Objective text is required")
    if len(objective.text) > MAX_OBJECTIVE_TEXT:
        raise JourneyValidationError(
            "objective.text",
            objective.text,
            f"Objective text must be less than {MAX_OBJECTIVE_TEXT} characters",
        )


def validate_activity(activity: PhaseActivity) -> None:
    """Raise JourneyValidationError if the activity is not acceptable."""
    if _is_blank(activity.name):
        raise JourneyValidationError("activity.name", activity.name, "Activity name is required")
    if len(activity.name) > MAX_ACTIVITY_NAME:
        raise JourneyValidationError(
            "activity.name",
            activity.name,
            f"Activity name must be less than {MAX_ACTIVITY_NAME} characters",
        )
    if _is_blank(activity.description):
        raise JourneyValidationError(
            "activity.description", activity.description, "Activity description is required"
        )
    if len(activity.description) > MAX_ACTIVITY_DESCRIPTION:
        raise JourneyValidationError(
            "activity.description",
            activity.description,
            f"Activity description must be less than {MAX_ACTIVITY_DESCRIPTION} characters",
        )
    if _is_blank(activity.duration):
        raise JourneyValidationError(
            "activity.duration", activity.duration, "Activity duration is required"
        )


def validate_deliverable(deliverable: PhaseDeliverable) -> None:
    """Raise JourneyValidationError if the deliverable is not acceptable."""
    if _is_blank(deliverable.name):
        raise JourneyValidationError(
            "deliverable.name", deliverable.name, "Deliverable name is required"
        )
    if len(deliverable.name) > MAX_DELIVERABLE_NAME:
        raise JourneyValidationError(
            "deliverable.name",
            deliverable.name,
            f"Deliverable name must be less than {MAX_DELIVERABLE_NAME} characters",
        )
    if _is_blank(deliverable.format):
        raise JourneyValidationError(
            "deliverable.format", deliverable.format, "Deliverable format is required"
        )


# =============================================================================
# COMPUTATIONS
# =============================================================================


def default_phases() -> list[CreativePhase]:
    """Build the four empty phases with equal time allocation."""
    return [
        CreativePhase(
            type=phase_type,
            name=PHASE_NAMES[phase_type],
            description=PHASE_DESCRIPTIONS[phase_type],
            allocation=0.25,
        )
        for phase_type in PHASE_ORDER
    ]


def phase_index(phase_type: PhaseType | str) -> int:
    """Position of a phase in the fixed order."""
    return PHASE_ORDER.index(PhaseType(phase_type))


def is_phase_complete(phase: CreativePhase) -> bool:
    """Whether the phase has enough content to count as complete."""
    return (
        len(phase.objectives) >= MIN_OBJECTIVES
        and len(phase.activities) >= MIN_ACTIVITIES
        and len(phase.deliverables) >= MIN_DELIVERABLES
    )


def phase_progress(phase: CreativePhase) -> int:
    """Percentage progress of a phase towards completion (0-100)."""
    objective_progress = min(100.0, (len(phase.objectives) / MIN_OBJECTIVES) * 100)
    activity_progress = min(100.0, (len(phase.activities) / MIN_ACTIVITIES) * 100)
    deliverable_progress = min(100.0, len(phase.deliverables) * 100.0)
    return round_half_up((objective_progress + activity_progress + deliverable_progress) / 3)


def overall_progress(phases: list[CreativePhase]) -> int:
    """Percentage of phases that are complete."""
    if not phases:
        return 0
    completed = sum(1 for phase in phases if is_phase_complete(phase))
    return round_half_up((completed / len(phases)) * 100)


def is_journey_complete(phases: list[CreativePhase]) -> bool:
    return all(is_phase_complete(phase) for phase in phases)


def format_duration_weeks(weeks: int) -> str:
    """'1 week' / 'N weeks'."""
    return f"{weeks} week{'s' if weeks != 1 else ''}"


def apply_time_allocations(
    phases: list[CreativePhase],
    allocations: list[float],
    project_duration: int,
) -> list[CreativePhase]:
    """Return phases with new allocations and derived duration strings.

    Raises:
        JourneyValidationError: If the allocation count doesn't match
    """
    if len(allocations) != len(phases):
        raise JourneyValidationError(
            "allocations",
            allocations,
            f"Expected {len(phases)} allocations, got {len(allocations)}",
        )

    updated = []
    for phase, allocation in zip(phases, allocations):
        weeks = round_half_up(project_duration * allocation)
        updated.append(
            replace(phase, allocation=allocation, duration=format_duration_weeks(weeks))
        )

    logger.debug("time_allocations_applied", allocations=allocations, weeks=project_duration)
    return updated


# =============================================================================
# PHASE TEMPLATES
# =============================================================================


@dataclass
class PhaseContent:
    """Ready-made content for one phase, before ids are assigned."""

    objectives: list[str] = field(default_factory=list)
    activities: list[dict[str, Any]] = field(default_factory=list)
    deliverables: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "objectives": list(self.objectives),
            "activities": [dict(a) for a in self.activities],
            "deliverables": [dict(d) for d in self.deliverables],
        }

    def build(
        self, selected: set[str] | None = None
    ) -> tuple[list[PhaseObjective], list[PhaseActivity], list[PhaseDeliverable]]:
        """Turn the content into phase items with fresh ids.

        Args:
            selected: Item keys like "objective-0" or "activity-1" to keep;
                None keeps everything
        """

        def keep(kind: str, idx: int) -> bool:
            return selected is None or f"{kind}-{idx}" in selected

        objectives = [
            PhaseObjective(id=generate_id("obj"), text=text)
            for idx, text in enumerate(self.objectives)
            if keep("objective", idx)
        ]
        activities = [
            PhaseActivity.from_dict({**activity, "id": generate_id("act")})
            for idx, activity in enumerate(self.activities)
            if keep("activity", idx)
        ]
        deliverables = [
            PhaseDeliverable.from_dict({**deliverable, "id": generate_id("del")})
            for idx, deliverable in enumerate(self.deliverables)
            if keep("deliverable", idx)
        ]
        return objectives, activities, deliverables


@dataclass
class PhaseTemplate:
    """A project-type template covering all four phases."""

    id: str
    name: str
    description: str
    category: str
    grade_levels: list[GradeLevel]
    subjects: list[str]
    phases: dict[PhaseType, PhaseContent]

    def matches(self, query: str) -> bool:
        query = query.lower()
        return (
            query in self.name.lower()
            or query in self.description.lower()
            or any(query in subject.lower() for subject in self.subjects)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "grade_levels": [g.value for g in self.grade_levels],
            "subjects": list(self.subjects),
            "phases": {t.value: content.to_dict() for t, content in self.phases.items()},
        }


def _activity(
    name: str, description: str, duration: str, resources: list[str], student_choice: bool = False
) -> dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "duration": duration,
        "resources": resources,
        "student_choice": student_choice,
    }


def _deliverable(name: str, fmt: str, criteria: list[str]) -> dict[str, Any]:
    return {"name": name, "format": fmt, "assessment_criteria": criteria}


PHASE_TEMPLATES: list[PhaseTemplate] = [
    PhaseTemplate(
        id="stem-investigation",
        name="STEM Investigation",
        description="Scientific inquiry and engineering design process",
        category="Science & Engineering",
        grade_levels=[GradeLevel.MIDDLE, GradeLevel.HIGH],
        subjects=["Science", "Engineering", "Technology"],
        phases={
            PhaseType.ANALYZE: PhaseContent(
                objectives=[
                    "Identify and define the problem or phenomenon",
                    "Research existing solutions and scientific principles",
                    "Develop testable hypotheses",
                ],
                activities=[
                    _activity(
                        "Problem Analysis",
                        "Break down the problem into manageable components",
                        "2 class periods",
                        ["Research materials", "Scientific journals"],
                    ),
                    _activity(
                        "Literature Review",
                        "Research existing solutions and theories",
                        "3 class periods",
                        ["Online databases", "Library resources"],
                        student_choice=True,
                    ),
                ],
                deliverables=[
                    _deliverable(
                        "Problem Statement",
                        "Written document",
                        ["Clarity", "Scientific accuracy", "Completeness"],
                    ),
                ],
            ),
            PhaseType.BRAINSTORM: PhaseContent(
                objectives=[
                    "Generate multiple solution approaches",
                    "Apply scientific principles creatively",
                    "Evaluate feasibility of ideas",
                ],
                activities=[
                    _activity(
                        "Solution Ideation",
                        "Generate and sketch multiple solution concepts",
                        "2 class periods",
                        ["Sketching materials", "Collaboration tools"],
                    ),
                    _activity(
                        "Feasibility Analysis",
                        "Evaluate ideas based on scientific principles",
                        "1 class period",
                        ["Evaluation rubric", "Reference materials"],
                    ),
                ],
                deliverables=[
                    _deliverable(
                        "Solution Concepts",
                        "Visual presentation",
                        ["Creativity", "Scientific basis", "Feasibility"],
                    ),
                ],
            ),
            PhaseType.PROTOTYPE: PhaseContent(
                objectives=[
                    "Build and test solution prototypes",
                    "Collect and analyze data",
                    "Iterate based on test results",
                ],
                activities=[
                    _activity(
                        "Prototype Construction",
                        "Build physical or digital prototypes",
                        "4 class periods",
                        ["Materials", "Tools", "Software"],
                    ),
                    _activity(
                        "Testing & Data Collection",
                        "Conduct controlled experiments and gather data",
                        "3 class periods",
                        ["Testing equipment", "Data sheets"],
                    ),
                    _activity(
                        "Data Analysis",
                        "Analyze results and identify improvements",
                        "2 class periods",
                        ["Analysis software", "Graphing tools"],
                        student_choice=True,
                    ),
                ],
                deliverables=[
                    _deliverable(
                        "Working Prototype",
                        "Physical or digital model",
                        ["Functionality", "Design quality", "Innovation"],
                    ),
                    _deliverable(
                        "Test Results", "Data report", ["Accuracy", "Analysis depth", "Conclusions"]
                    ),
                ],
            ),
            PhaseType.EVALUATE: PhaseContent(
                objectives=[
                    "Evaluate solution effectiveness",
                    "Reflect on the design process",
                    "Communicate findings professionally",
                ],
                activities=[
                    _activity(
                        "Solution Evaluation",
                        "Assess how well the solution meets criteria",
                        "1 class period",
                        ["Evaluation rubric", "Peer review forms"],
                    ),
                    _activity(
                        "Presentation Preparation",
                        "Prepare professional presentation of findings",
                        "2 class periods",
                        ["Presentation software", "Visual aids"],
                        student_choice=True,
                    ),
                ],
                deliverables=[
                    _deliverable(
                        "Final Presentation",
                        "Oral presentation with visuals",
                        ["Communication", "Technical accuracy", "Professionalism"],
                    ),
                    _deliverable(
                        "Reflection Document",
                        "Written reflection",
                        ["Depth of reflection", "Learning insights", "Future applications"],
                    ),
                ],
            ),
        },
    ),
    PhaseTemplate(
        id="creative-arts",
        name="Creative Arts Project",
        description="Artistic exploration and creative expression",
        category="Arts & Humanities",
        grade_levels=[GradeLevel.ELEMENTARY, GradeLevel.MIDDLE, GradeLevel.HIGH],
        subjects=["Visual Arts", "Music", "Drama", "Creative Writing"],
        phases={
            PhaseType.ANALYZE: PhaseContent(
                objectives=[
                    "Explore artistic themes and inspirations",
                    "Research artistic techniques and styles",
                    "Understand target audience and context",
                ],
                activities=[
                    _activity(
                        "Artistic Research",
                        "Study works by established artists in the field",
                        "2 class periods",
                        ["Art books", "Online galleries", "Museums"],
                        student_choice=True,
                    ),
                    _activity(
                        "Technique Exploration",
                        "Experiment with different artistic techniques",
                        "2 class periods",
                        ["Art supplies", "Tutorial videos"],
                    ),
                ],
                deliverables=[
                    _deliverable(
                        "Inspiration Board",
                        "Visual collage",
                        ["Research depth", "Visual organization", "Theme clarity"],
                    ),
                ],
            ),
            PhaseType.BRAINSTORM: PhaseContent(
                objectives=[
                    "Generate creative concepts",
                    "Explore multiple artistic approaches",
                    "Develop unique artistic voice",
                ],
                activities=[
                    _activity(
                        "Concept Sketching",
                        "Create multiple rough drafts or sketches",
                        "2 class periods",
                        ["Sketching materials", "Digital tools"],
                    ),
                    _activity(
                        "Peer Feedback Session",
                        "Share ideas and receive constructive feedback",
                        "1 class period",
                        ["Feedback forms", "Discussion guidelines"],
                    ),
                ],
                deliverables=[
                    _deliverable(
                        "Concept Portfolio",
                        "Collection of sketches/drafts",
                        ["Variety", "Creativity", "Development"],
                    ),
                ],
            ),
            PhaseType.PROTOTYPE: PhaseContent(
                objectives=[
                    "Create the artistic work",
                    "Refine technique and execution",
                    "Incorporate feedback iteratively",
                ],
                activities=[
                    _activity(
                        "Creation Process",
                        "Produce the main artistic work",
                        "5 class periods",
                        ["Studio space", "Materials", "Tools"],
                    ),
                    _activity(
                        "Critique and Revision",
                        "Receive feedback and make improvements",
                        "2 class periods",
                        ["Critique guidelines", "Revision materials"],
                    ),
                ],
                deliverables=[
                    _deliverable(
                        "Artistic Work",
                        "Final piece or performance",
                        ["Technical skill", "Creativity", "Expression"],
                    ),
                    _deliverable(
                        "Process Documentation",
                        "Photo/video documentation",
                        ["Completeness", "Quality", "Reflection"],
                    ),
                ],
            ),
            PhaseType.EVALUATE: PhaseContent(
                objectives=[
                    "Reflect on artistic choices",
                    "Analyze audience response",
                    "Plan future artistic development",
                ],
                activities=[
                    _activity(
                        "Exhibition/Performance",
                        "Present work to an audience",
                        "1 class period",
                        ["Display space", "Presentation equipment"],
                    ),
                    _activity(
                        "Artist Statement",
                        "Write about artistic choices and meaning",
                        "1 class period",
                        ["Writing guidelines", "Examples"],
                    ),
                ],
                deliverables=[
                    _deliverable(
                        "Artist Statement", "Written document", ["Clarity", "Insight", "Connection to work"]
                    ),
                    _deliverable(
                        "Portfolio",
                        "Curated collection",
                        ["Organization", "Presentation", "Growth evidence"],
                    ),
                ],
            ),
        },
    ),
]

# Wording and pacing of generated suggestions per grade band
SUGGESTION_LEVELS: dict[GradeLevel, dict[str, str]] = {
    GradeLevel.ELEMENTARY: {"complexity": "simple", "duration": "shorter", "vocabulary": "basic"},
    GradeLevel.MIDDLE: {"complexity": "moderate", "duration": "medium", "vocabulary": "intermediate"},
    GradeLevel.HIGH: {"complexity": "complex", "duration": "longer", "vocabulary": "advanced"},
}


def template_categories() -> list[str]:
    """Distinct template categories, in library order."""
    categories: list[str] = []
    for template in PHASE_TEMPLATES:
        if template.category not in categories:
            categories.append(template.category)
    return categories


def filter_templates(
    grade_level: GradeLevel | str,
    category: str = "all",
    query: str = "",
) -> list[PhaseTemplate]:
    """Templates for a grade level, narrowed by category and a name/subject search."""
    grade_level = GradeLevel(grade_level)
    return [
        template
        for template in PHASE_TEMPLATES
        if grade_level in template.grade_levels
        and (category == "all" or template.category == category)
        and (not query or template.matches(query))
    ]


def get_phase_template(template_id: str) -> PhaseTemplate | None:
    return next((t for t in PHASE_TEMPLATES if t.id == template_id), None)


def phase_suggestions(
    phase_type: PhaseType | str, grade_level: GradeLevel | str, subject: str
) -> PhaseContent:
    """Grade-appropriate starter content for one phase of a subject."""
    phase_type = PhaseType(phase_type)
    grade_level = GradeLevel(grade_level)
    level = SUGGESTION_LEVELS[grade_level]
    complexity, vocabulary = level["complexity"], level["vocabulary"]
    shorter = level["duration"] == "shorter"
    simple = complexity == "simple"

    if phase_type == PhaseType.ANALYZE:
        return PhaseContent(
            objectives=[
                f"Understand the {complexity} aspects of the topic",
                f"Research {vocabulary} concepts related to {subject}",
                "Identify key questions to explore",
            ],
            activities=[
                _activity(
                    f"{vocabulary.capitalize()} Research Activity",
                    f"Explore foundational concepts at {grade_level.value} level",
                    "1 class period" if shorter else "2 class periods",
                    ["Grade-appropriate resources", "Research tools"],
                    student_choice=grade_level != GradeLevel.ELEMENTARY,
                ),
            ],
            deliverables=[
                _deliverable(
                    "Research Summary",
                    "Visual poster" if simple else "Written report",
                    ["Understanding", "Effort", "Presentation"],
                ),
            ],
        )
    if phase_type == PhaseType.BRAINSTORM:
        return PhaseContent(
            objectives=[
                f"Generate {complexity} solutions",
                f"Think creatively within {subject} context",
                "Collaborate with peers effectively",
            ],
            activities=[
                _activity(
                    "Idea Generation Session",
                    f"Create multiple {vocabulary} solutions",
                    "1 class period",
                    ["Brainstorming tools", "Collaboration space"],
                    student_choice=True,
                ),
            ],
            deliverables=[
                _deliverable(
                    "Idea Collection",
                    "Visual or written compilation",
                    ["Quantity", "Creativity", "Feasibility"],
                ),
            ],
        )
    if phase_type == PhaseType.PROTOTYPE:
        return PhaseContent(
            objectives=[
                f"Build a {complexity} solution",
                "Test and refine the creation",
                "Document the process",
            ],
            activities=[
                _activity(
                    "Building Phase",
                    f"Construct {vocabulary} prototype",
                    "2 class periods" if shorter else "4 class periods",
                    ["Materials", "Tools", "Workspace"],
                ),
            ],
            deliverables=[
                _deliverable(
                    "Prototype",
                    "Physical or digital creation",
                    ["Functionality", "Effort", "Innovation"],
                ),
            ],
        )
    return PhaseContent(
        objectives=[
            f"Assess the {complexity} solution",
            "Reflect on learning",
            "Share findings with others",
        ],
        activities=[
            _activity(
                "Presentation Preparation",
                f"Prepare {vocabulary} presentation",
                "1 class period",
                ["Presentation tools", "Templates"],
                student_choice=grade_level == GradeLevel.HIGH,
            ),
        ],
        deliverables=[
            _deliverable(
                "Final Presentation",
                "Show and tell" if simple else "Formal presentation",
                ["Communication", "Understanding", "Reflection"],
            ),
        ],
    )
