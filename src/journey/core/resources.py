"""Support resources module.

Responsibilities (F6):
- Library of guides, videos, templates and worksheets per phase
- Filter by phase, grade level, category, search text and featured flag
- Rank by the student's most recent iteration type, then popularity
- Pick up to three recommendations and count resources per category

A resource whose phase is None applies to every phase.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

from journey.core.iterations import ITERATION_TYPES
from journey.core.phases import GradeLevel, PhaseType

logger = structlog.get_logger(__name__)

ResourceType = Literal["article", "video", "template", "worksheet", "guide"]
Difficulty = Literal["beginner", "intermediate", "advanced"]

MAX_RECOMMENDATIONS = 3

ALL_GRADES = [GradeLevel.ELEMENTARY, GradeLevel.MIDDLE, GradeLevel.HIGH]
UPPER_GRADES = [GradeLevel.MIDDLE, GradeLevel.HIGH]

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class Resource:
    """A support resource shown next to the journey."""

    id: str
    title: str
    description: str
    type: str  # ResourceType
    phase: PhaseType | None
    grade_levels: list[GradeLevel]
    difficulty: str  # Difficulty
    popularity: int
    last_updated: str
    tags: list[str] = field(default_factory=list)
    iteration_type: str | None = None
    duration: str | None = None
    url: str | None = None
    download_url: str | None = None
    featured: bool = False

    def matches(self, query: str) -> bool:
        query = query.lower()
        return (
            query in self.title.lower()
            or query in self.description.lower()
            or any(query in tag.lower() for tag in self.tags)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "phase": self.phase.value if self.phase else "all",
            "grade_levels": [g.value for g in self.grade_levels],
            "iteration_type": self.iteration_type,
            "duration": self.duration,
            "difficulty": self.difficulty,
            "tags": list(self.tags),
            "url": self.url,
            "download_url": self.download_url,
            "featured": self.featured,
            "popularity": self.popularity,
            "last_updated": self.last_updated,
        }


@dataclass
class ResourceCategory:
    id: str
    name: str
    description: str


RESOURCE_CATEGORIES: list[ResourceCategory] = [
    ResourceCategory("guide", "Guides", "In-depth explanations"),
    ResourceCategory("video", "Videos", "Visual tutorials"),
    ResourceCategory("template", "Templates", "Ready-to-use formats"),
    ResourceCategory("worksheet", "Worksheets", "Interactive exercises"),
]

RESOURCES: list[Resource] = [
    Resource(
        id="analyze-guide-1",
        title="Effective Research Strategies",
        description="Learn how to conduct thorough research and avoid common pitfalls that lead to iterations.",
        type="guide",
        phase=PhaseType.ANALYZE,
        grade_levels=UPPER_GRADES,
        duration="15 min read",
        difficulty="intermediate",
        tags=["research", "planning", "analysis"],
        featured=True,
        popularity=95,
        last_updated="2024-01-15",
    ),
    Resource(
        id="analyze-template-1",
        title="Problem Definition Worksheet",
        description="A structured template to clearly define your problem before moving forward.",
        type="worksheet",
        phase=PhaseType.ANALYZE,
        grade_levels=ALL_GRADES,
        difficulty="beginner",
        tags=["problem-solving", "planning"],
        download_url="/templates/problem-definition.pdf",
        popularity=88,
        last_updated="2024-01-10",
    ),
    Resource(
        id="analyze-video-1",
        title="Avoiding Analysis Paralysis",
        description="Video tutorial on knowing when you have enough information to proceed.",
        type="video",
        phase=PhaseType.ANALYZE,
        grade_levels=[GradeLevel.HIGH],
        duration="12 min",
        difficulty="advanced",
        tags=["decision-making", "efficiency"],
        url="/videos/analysis-paralysis",
        featured=True,
        popularity=92,
        last_updated="2024-01-20",
    ),
    Resource(
        id="brainstorm-guide-1",
        title="Creative Ideation Techniques",
        description="Master various brainstorming methods to generate innovative solutions.",
        type="guide",
        phase=PhaseType.BRAINSTORM,
        grade_levels=UPPER_GRADES,
        duration="20 min read",
        difficulty="intermediate",
        tags=["creativity", "ideation", "collaboration"],
        featured=True,
        popularity=90,
        last_updated="2024-01-18",
    ),
    Resource(
        id="brainstorm-template-1",
        title="Idea Evaluation Matrix",
        description="Template for systematically evaluating and prioritizing ideas.",
        type="template",
        phase=PhaseType.BRAINSTORM,
        grade_levels=UPPER_GRADES,
        difficulty="intermediate",
        tags=["evaluation", "decision-making"],
        download_url="/templates/idea-matrix.xlsx",
        popularity=85,
        last_updated="2024-01-12",
    ),
    Resource(
        id="prototype-guide-1",
        title="Rapid Prototyping Methods",
        description="Build quick, testable prototypes without overcommitting resources.",
        type="guide",
        phase=PhaseType.PROTOTYPE,
        grade_levels=[GradeLevel.HIGH],
        duration="25 min read",
        difficulty="advanced",
        tags=["prototyping", "testing", "iteration"],
        featured=True,
        popularity=93,
        last_updated="2024-01-22",
    ),
    Resource(
        id="prototype-video-1",
        title="Testing Your Prototype",
        description="Learn effective testing strategies to identify issues early.",
        type="video",
        phase=PhaseType.PROTOTYPE,
        grade_levels=UPPER_GRADES,
        duration="18 min",
        difficulty="intermediate",
        tags=["testing", "feedback", "improvement"],
        url="/videos/prototype-testing",
        popularity=87,
        last_updated="2024-01-16",
    ),
    Resource(
        id="evaluate-template-1",
        title="Reflection Framework",
        description="Structured reflection template to capture learnings and improvements.",
        type="worksheet",
        phase=PhaseType.EVALUATE,
        grade_levels=ALL_GRADES,
        difficulty="beginner",
        tags=["reflection", "assessment", "learning"],
        download_url="/templates/reflection-framework.pdf",
        featured=True,
        popularity=91,
        last_updated="2024-01-19",
    ),
    Resource(
        id="iteration-guide-1",
        title="When to Iterate: Decision Guide",
        description="Clear criteria for deciding when iteration is necessary vs. moving forward.",
        type="guide",
        phase=None,
        grade_levels=UPPER_GRADES,
        iteration_type="quick_loop",
        duration="10 min read",
        difficulty="intermediate",
        tags=["iteration", "decision-making"],
        featured=True,
        popularity=96,
        last_updated="2024-01-25",
    ),
    Resource(
        id="iteration-video-1",
        title="Managing Major Pivots",
        description="Strategies for handling significant project changes without losing momentum.",
        type="video",
        phase=None,
        grade_levels=[GradeLevel.HIGH],
        iteration_type="major_pivot",
        duration="22 min",
        difficulty="advanced",
        tags=["iteration", "change-management", "resilience"],
        url="/videos/major-pivots",
        featured=True,
        popularity=89,
        last_updated="2024-01-21",
    ),
    Resource(
        id="iteration-template-1",
        title="Iteration Planning Checklist",
        description="Ensure your iteration is well-planned and time-boxed.",
        type="template",
        phase=None,
        grade_levels=ALL_GRADES,
        iteration_type="complete_restart",
        difficulty="beginner",
        tags=["planning", "iteration", "checklist"],
        download_url="/templates/iteration-checklist.pdf",
        popularity=84,
        last_updated="2024-01-14",
    ),
]


# =============================================================================
# QUERIES
# =============================================================================


def _check_iteration_type(iteration_type: str | None) -> None:
    if iteration_type is not None and iteration_type not in ITERATION_TYPES:
        raise ValueError(f"Unknown iteration type: {iteration_type}")


def filter_resources(
    phase: PhaseType | str,
    grade_level: GradeLevel | str,
    category: str = "all",
    query: str = "",
    featured_only: bool = False,
    recent_iteration_type: str | None = None,
) -> list[Resource]:
    """Resources for the current phase and grade, most relevant first.

    Resources made for the recent iteration type come first; ties are
    broken by popularity.

    Raises:
        ValueError: For an unknown phase, grade level or iteration type
    """
    phase = PhaseType(phase)
    grade_level = GradeLevel(grade_level)
    _check_iteration_type(recent_iteration_type)

    matches = [
        r
        for r in RESOURCES
        if (r.phase is None or r.phase == phase)
        and grade_level in r.grade_levels
        and (category == "all" or r.type == category)
        and (not query or r.matches(query))
        and (not featured_only or r.featured)
    ]

    def rank(resource: Resource) -> tuple[int, int]:
        boost = 10 if recent_iteration_type and resource.iteration_type == recent_iteration_type else 0
        return (-boost, -resource.popularity)

    return sorted(matches, key=rank)


def recommended_resources(
    phase: PhaseType | str,
    grade_level: GradeLevel | str,
    recent_iteration_type: str | None = None,
) -> list[Resource]:
    """Up to three picks: the phase's featured resource, one for the
    recent iteration type, and the most popular all-phase resource.
    """
    phase = PhaseType(phase)
    grade_level = GradeLevel(grade_level)
    _check_iteration_type(recent_iteration_type)

    picks: list[Resource] = []
    phase_featured = next(
        (r for r in RESOURCES if r.phase == phase and r.featured and grade_level in r.grade_levels),
        None,
    )
    if phase_featured:
        picks.append(phase_featured)

    if recent_iteration_type:
        for_iteration = next(
            (
                r
                for r in RESOURCES
                if r.iteration_type == recent_iteration_type and grade_level in r.grade_levels
            ),
            None,
        )
        if for_iteration:
            picks.append(for_iteration)

    general = sorted(
        (r for r in RESOURCES if r.phase is None and grade_level in r.grade_levels),
        key=lambda r: -r.popularity,
    )
    if general and general[0] not in picks:
        picks.append(general[0])

    logger.debug(
        "resources_recommended",
        phase=phase.value,
        grade_level=grade_level.value,
        picks=[r.id for r in picks],
    )
    return picks[:MAX_RECOMMENDATIONS]


def category_counts(resources: list[Resource]) -> dict[str, int]:
    """Number of resources per library category."""
    return {c.id: sum(1 for r in resources if r.type == c.id) for c in RESOURCE_CATEGORIES}


def get_resource(resource_id: str) -> Resource | None:
    return next((r for r in RESOURCES if r.id == resource_id), None)
