"""Rubric builder module.

Responsibilities (F2):
- Model rubrics: weighted criteria with named performance levels
- Build criteria from templates with grade-appropriate level labels
- Compute weight totals and maximum points
- Validate, version, publish and export rubrics
- Persist rubrics to data/rubrics/

Output structure (JSON):
- rubric_v1 schema with criteria array
- Export file name: {name with whitespace as _}_rubric.json
"""

from __future__ import annotations

import csv
import io
import json
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

import structlog

from journey.config.app_config import load_app_config
from journey.core.phases import GradeLevel, PhaseType
from journey.utils.time_utils import now_iso, utc_now
from journey.utils.validators import generate_id

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================

RubricType = Literal["holistic", "analytical", "single_point", "developmental"]
PerformanceLevel = Literal["exemplary", "proficient", "developing", "beginning"]

PERFORMANCE_LEVEL_ORDER: list[str] = ["exemplary", "proficient", "developing", "beginning"]

PERFORMANCE_LEVELS: dict[str, dict[str, dict[str, Any]]] = {
    "elementary": {
        "exemplary": {"label": "Amazing!", "color": "green", "points": 4},
        "proficient": {"label": "Great Job!", "color": "blue", "points": 3},
        "developing": {"label": "Getting There", "color": "yellow", "points": 2},
        "beginning": {"label": "Keep Trying", "color": "gray", "points": 1},
    },
    "middle": {
        "exemplary": {"label": "Exceeds Expectations", "color": "green", "points": 4},
        "proficient": {"label": "Meets Expectations", "color": "blue", "points": 3},
        "developing": {"label": "Approaching", "color": "yellow", "points": 2},
        "beginning": {"label": "Beginning", "color": "gray", "points": 1},
    },
    "high": {
        "exemplary": {"label": "Exemplary", "color": "green", "points": 4},
        "proficient": {"label": "Proficient", "color": "blue", "points": 3},
        "developing": {"label": "Developing", "color": "yellow", "points": 2},
        "beginning": {"label": "Emerging", "color": "gray", "points": 1},
    },
}

CRITERIA_TEMPLATES: list[dict[str, Any]] = [
    {
        "name": "Problem Understanding",
        "description": "Demonstrates clear understanding of the problem and its context",
        "weight": 20,
        "essential": True,
        "phase_alignment": PhaseType.ANALYZE,
    },
    {
        "name": "Creative Solutions",
        "description": "Generates innovative and feasible solutions",
        "weight": 20,
        "essential": False,
        "phase_alignment": PhaseType.BRAINSTORM,
    },
    {
        "name": "Implementation Quality",
        "description": "Executes solution with attention to detail and quality",
        "weight": 25,
        "essential": True,
        "phase_alignment": PhaseType.PROTOTYPE,
    },
    {
        "name": "Critical Reflection",
        "description": "Reflects thoughtfully on process and outcomes",
        "weight": 15,
        "essential": False,
        "phase_alignment": PhaseType.EVALUATE,
    },
    {
        "name": "Collaboration",
        "description": "Works effectively with team members",
        "weight": 10,
        "essential": False,
    },
    {
        "name": "Communication",
        "description": "Presents ideas clearly and professionally",
        "weight": 10,
        "essential": False,
    },
]


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class RubricLevel:
    """One performance level of a criterion."""

    level: str  # PerformanceLevel
    description: str = ""
    points: int = 0
    indicators: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "description": self.description,
            "points": self.points,
            "indicators": list(self.indicators),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RubricLevel:
        return cls(
            level=data["level"],
            description=data.get("description", ""),
            points=int(data.get("points", 0)),
            indicators=list(data.get("indicators") or []),
        )


@dataclass
class RubricCriterion:
    """A weighted assessment criterion."""

    id: str
    name: str
    description: str = ""
    weight: float = 10  # Percentage 0-100
    levels: list[RubricLevel] = field(default_factory=list)
    essential: bool = False  # Must meet to pass
    phase_alignment: PhaseType | None = None
    standards_alignment: list[str] = field(default_factory=list)

    @property
    def max_points(self) -> int:
        return max((level.points for level in self.levels), default=0)

    def level(self, name: str) -> RubricLevel | None:
        return next((lvl for lvl in self.levels if lvl.level == name), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "weight": self.weight,
            "levels": [lvl.to_dict() for lvl in self.levels],
            "essential": self.essential,
            "phase_alignment": self.phase_alignment.value if self.phase_alignment else None,
            "standards_alignment": list(self.standards_alignment),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RubricCriterion:
        phase = data.get("phase_alignment")
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            description=data.get("description", ""),
            weight=data.get("weight", 10),
            levels=[RubricLevel.from_dict(lvl) for lvl in data.get("levels", [])],
            essential=bool(data.get("essential", False)),
            phase_alignment=PhaseType(phase) if phase else None,
            standards_alignment=list(data.get("standards_alignment") or []),
        )


@dataclass
class Rubric:
    """An assessment rubric."""

    id: str
    name: str
    type: str = "analytical"  # RubricType
    description: str = ""
    grade_level: GradeLevel = GradeLevel.MIDDLE
    criteria: list[RubricCriterion] = field(default_factory=list)
    total_points: int = 0
    passing_score: int = 70
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)
    version: int = 1
    published: bool = False

    def criterion(self, criterion_id: str) -> RubricCriterion | None:
        return next((c for c in self.criteria if c.id == criterion_id), None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "$schema": "rubric_v1",
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "grade_level": self.grade_level.value,
            "criteria": [c.to_dict() for c in self.criteria],
            "total_points": self.total_points,
            "passing_score": self.passing_score,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "version": self.version,
            "published": self.published,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Rubric:
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            type=data.get("type", "analytical"),
            description=data.get("description", ""),
            grade_level=GradeLevel(data.get("grade_level", "middle")),
            criteria=[RubricCriterion.from_dict(c) for c in data.get("criteria", [])],
            total_points=int(data.get("total_points", 0)),
            passing_score=int(data.get("passing_score", 70)),
            created_at=data.get("created_at") or now_iso(),
            updated_at=data.get("updated_at") or now_iso(),
            version=int(data.get("version", 1)),
            published=bool(data.get("published", False)),
        )


@dataclass
class RubricCalculations:
    """Weight and point totals of a rubric."""

    total_weight: float
    max_points: int
    weighted_max_points: float
    is_weight_valid: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_weight": self.total_weight,
            "max_points": self.max_points,
            "weighted_max_points": self.weighted_max_points,
            "is_weight_valid": self.is_weight_valid,
        }


@dataclass
class RubricResult:
    """Result of saving or publishing a rubric."""

    success: bool
    rubric_path: Path | None
    rubric: Rubric | None
    message: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class RubricValidationError(Exception):
    """Rubric failed validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class RubricNotFoundError(Exception):
    """Rubric file does not exist."""

    pass


# =============================================================================
# BUILDING
# =============================================================================


def _touch(rubric: Rubric, **changes: Any) -> Rubric:
    return replace(rubric, updated_at=now_iso(), **changes)


def new_rubric(
    grade_level: GradeLevel | str = GradeLevel.MIDDLE,
    passing_score: int | None = None,
) -> Rubric:
    """Create an empty analytical rubric."""
    if passing_score is None:
        passing_score = load_app_config().scoring.passing_score
    return Rubric(
        id=generate_id("rubric"),
        name="New Assessment Rubric",
        type="analytical",
        grade_level=GradeLevel(grade_level),
        passing_score=passing_score,
    )


def default_levels(grade_level: GradeLevel | str) -> list[RubricLevel]:
    """Empty levels with the grade's point values, best first."""
    labels = PERFORMANCE_LEVELS[GradeLevel(grade_level).value]
    return [RubricLevel(level=name, points=labels[name]["points"]) for name in PERFORMANCE_LEVEL_ORDER]


def level_label(grade_level: GradeLevel | str, level: str) -> str:
    """Grade-appropriate label for a performance level."""
    return PERFORMANCE_LEVELS[GradeLevel(grade_level).value][level]["label"]


def add_criterion(rubric: Rubric, template: dict[str, Any] | None = None) -> Rubric:
    """Append a criterion built from a template (or blank)."""
    template = template or {}
    criterion = RubricCriterion(
        id=generate_id("crit"),
        name=template.get("name") or "New Criterion",
        description=template.get("description") or "",
        weight=template.get("weight") or load_app_config().scoring.default_criterion_weight,
        levels=default_levels(rubric.grade_level),
        essential=bool(template.get("essential", False)),
        phase_alignment=template.get("phase_alignment"),
        standards_alignment=list(template.get("standards_alignment") or []),
    )
    logger.debug("criterion_added", rubric_id=rubric.id, criterion=criterion.name)
    return _touch(rubric, criteria=[*rubric.criteria, criterion])


def update_criterion(rubric: Rubric, criterion_id: str, **updates: Any) -> Rubric:
    criteria = [replace(c, **updates) if c.id == criterion_id else c for c in rubric.criteria]
    return _touch(rubric, criteria=criteria)


def delete_criterion(rubric: Rubric, criterion_id: str) -> Rubric:
    return _touch(rubric, criteria=[c for c in rubric.criteria if c.id != criterion_id])


def _map_level(rubric: Rubric, criterion_id: str, level: str, change) -> Rubric:
    criteria = []
    for criterion in rubric.criteria:
        if criterion.id == criterion_id:
            levels = [change(lvl) if lvl.level == level else lvl for lvl in criterion.levels]
            criterion = replace(criterion, levels=levels)
        criteria.append(criterion)
    return _touch(rubric, criteria=criteria)


def update_level_description(rubric: Rubric, criterion_id: str, level: str, description: str) -> Rubric:
    return _map_level(rubric, criterion_id, level, lambda lvl: replace(lvl, description=description))


def add_indicator(rubric: Rubric, criterion_id: str, level: str, indicator: str) -> Rubric:
    """Add an observable indicator to a level; blank input is ignored."""
    if not indicator.strip():
        return rubric
    return _map_level(
        rubric, criterion_id, level, lambda lvl: replace(lvl, indicators=[*lvl.indicators, indicator])
    )


def remove_indicator(rubric: Rubric, criterion_id: str, level: str, index: int) -> Rubric:
    return _map_level(
        rubric,
        criterion_id,
        level,
        lambda lvl: replace(lvl, indicators=[x for i, x in enumerate(lvl.indicators) if i != index]),
    )


# =============================================================================
# CALCULATIONS AND VALIDATION
# =============================================================================


def rubric_calculations(rubric: Rubric) -> RubricCalculations:
    """Total weight, max points and weighted max points."""
    total_weight = sum(c.weight for c in rubric.criteria)
    max_points = sum(c.max_points for c in rubric.criteria)
    weighted_max_points = sum(c.max_points * c.weight / 100 for c in rubric.criteria)
    return RubricCalculations(
        total_weight=total_weight,
        max_points=max_points,
        weighted_max_points=weighted_max_points,
        is_weight_valid=abs(total_weight - 100) < 0.01,
    )


def validate_rubric(rubric: Rubric) -> list[str]:
    """Return a list of validation errors (empty when valid)."""
    errors: list[str] = []

    if not rubric.name.strip():
        errors.append("Rubric name is required")

    if not rubric.criteria:
        errors.append("At least one criterion is required")

    if rubric.type == "analytical" and not rubric_calculations(rubric).is_weight_valid:
        errors.append("Criterion weights must total 100%")

    for criterion in rubric.criteria:
        if not criterion.name.strip():
            errors.append(f'Criterion "{criterion.name}" needs a name')
        if not any(lvl.description.strip() for lvl in criterion.levels):
            errors.append(f'Criterion "{criterion.name}" needs at least one level description')

    return errors


def finalize_rubric(rubric: Rubric) -> Rubric:
    """Validate and bump the version, filling total points.

    Raises:
        RubricValidationError: If the rubric is invalid
    """
    errors = validate_rubric(rubric)
    if errors:
        logger.warning("rubric_validation_failed", rubric_id=rubric.id, errors=errors)
        raise RubricValidationError(errors)
    return _touch(
        rubric,
        total_points=rubric_calculations(rubric).max_points,
        version=rubric.version + 1,
    )


def publish_rubric(rubric: Rubric) -> Rubric:
    """Mark a valid rubric as published.

    Raises:
        RubricValidationError: If the rubric is invalid
    """
    errors = validate_rubric(rubric)
    if errors:
        raise RubricValidationError(errors)
    logger.info("rubric_published", rubric_id=rubric.id)
    return _touch(rubric, published=True)


def import_template(template: Rubric, grade_level: GradeLevel | str) -> Rubric:
    """Start a new rubric from a template, re-targeted to a grade level."""
    now = now_iso()
    return replace(
        template,
        id=generate_id("rubric"),
        grade_level=GradeLevel(grade_level),
        created_at=now,
        updated_at=now,
        version=1,
        published=False,
    )


# =============================================================================
# EXPORT AND PERSISTENCE
# =============================================================================


def export_filename(rubric: Rubric) -> str:
    stem = re.sub(r"\s+", "_", rubric.name)
    return f"{stem}_rubric.json"


def export_document(rubric: Rubric, export_date: datetime | None = None) -> dict[str, Any]:
    """Rubric plus export date, grade level and calculations."""
    document = rubric.to_dict()
    document["export_date"] = (export_date or utc_now()).isoformat()
    document["calculations"] = rubric_calculations(rubric).to_dict()
    return document


def export_csv(rubric: Rubric) -> str:
    """One row per criterion and level."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["criterion", "weight", "essential", "level", "label", "points", "description", "indicators"])
    for criterion in rubric.criteria:
        for lvl in criterion.levels:
            writer.writerow(
                [
                    criterion.name,
                    criterion.weight,
                    "yes" if criterion.essential else "no",
                    lvl.level,
                    level_label(rubric.grade_level, lvl.level),
                    lvl.points,
                    lvl.description,
                    "; ".join(lvl.indicators),
                ]
            )
    return buffer.getvalue()


def save_rubric(rubric: Rubric, data_dir: Path) -> RubricResult:
    """Validate, version and persist a rubric to data_dir/rubrics/."""
    try:
        saved = finalize_rubric(rubric)
    except RubricValidationError as e:
        return RubricResult(
            success=False,
            rubric_path=None,
            rubric=None,
            message="Rubric is not valid",
            errors=e.errors,
        )

    rubrics_dir = data_dir / "rubrics"
    rubrics_dir.mkdir(parents=True, exist_ok=True)
    path = rubrics_dir / f"{saved.id}.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(saved.to_dict(), f, indent=2, ensure_ascii=False)

    warnings = []
    if not any(c.essential for c in saved.criteria):
        warnings.append("No criterion is marked essential")

    logger.info("rubric_saved", rubric_id=saved.id, version=saved.version, path=str(path))
    return RubricResult(
        success=True,
        rubric_path=path,
        rubric=saved,
        message=f"Rubric saved (version {saved.version})",
        warnings=warnings,
    )


def load_rubric(path: Path) -> Rubric:
    """Load a rubric JSON file.

    Raises:
        RubricNotFoundError: If the file doesn't exist
    """
    if not path.exists():
        raise RubricNotFoundError(f"Rubric not found: {path}")
    with open(path, encoding="utf-8") as f:
        return Rubric.from_dict(json.load(f))
