"""Assessment scoring module.

Responsibilities (F2):
- Record per-criterion scores against a rubric (teacher, peer or self)
- Compute totals, weighted percentage, progress and pass/fail
- Derive strengths and improvement areas from scores and feedback
- Save and submit assessments to data/assessments/

Scoring rules:
- Analytical rubric: percentage = round(sum(points / max_level * weight))
- Other rubric types: percentage = round(total / max * 100), 0 when max is 0
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

import structlog

from journey.config.app_config import load_app_config
from journey.core.phases import PhaseType
from journey.core.rubric import Rubric
from journey.utils.numbers import round_half_up
from journey.utils.time_utils import now_iso, utc_now
from journey.utils.validators import generate_id

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================

AssessorType = Literal["teacher", "peer", "self"]
AssessmentStatus = Literal["not_started", "in_progress", "submitted", "graded", "returned"]
EvidenceType = Literal["text", "image", "video", "audio", "link", "file"]

FEEDBACK_TEMPLATES: dict[str, list[str]] = {
    "exemplary": [
        "Outstanding work demonstrating mastery of the concept",
        "Exceptional understanding and application shown",
        "Goes above and beyond expectations with creative solutions",
    ],
    "proficient": [
        "Solid understanding demonstrated throughout",
        "Meets all requirements with good quality work",
        "Shows competent application of concepts",
    ],
    "developing": [
        "Making good progress toward mastery",
        "Some areas need additional development",
        "Consider reviewing the concepts and trying again",
    ],
    "beginning": [
        "Early stages of understanding",
        "Would benefit from additional support and practice",
        "Let's work together to strengthen these skills",
    ],
}

# Keywords in feedback that reveal a strength category
STRENGTH_PATTERNS: dict[str, list[str]] = {
    "creativity": ["innovative", "creative", "original", "unique"],
    "analysis": ["thorough", "detailed", "comprehensive", "systematic"],
    "collaboration": ["teamwork", "cooperative", "helpful", "supportive"],
    "communication": ["clear", "articulate", "well-presented", "organized"],
    "effort": ["hardworking", "persistent", "dedicated", "committed"],
}


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class Evidence:
    """A piece of student work attached to a score."""

    id: str
    type: str  # EvidenceType
    content: str
    description: str = ""
    phase_type: PhaseType | None = None
    uploaded_at: str = field(default_factory=now_iso)
    uploaded_by: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "content": self.content,
            "description": self.description,
            "phase_type": self.phase_type.value if self.phase_type else None,
            "uploaded_at": self.uploaded_at,
            "uploaded_by": self.uploaded_by,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Evidence:
        phase = data.get("phase_type")
        return cls(
            id=str(data.get("id") or generate_id("ev")),
            type=data.get("type", "text"),
            content=data.get("content", ""),
            description=data.get("description", ""),
            phase_type=PhaseType(phase) if phase else None,
            uploaded_at=data.get("uploaded_at") or now_iso(),
            uploaded_by=data.get("uploaded_by", ""),
        )


@dataclass
class AssessmentScore:
    """Score given for one rubric criterion."""

    criterion_id: str
    level: str  # PerformanceLevel
    points: int
    evidence: list[Evidence] = field(default_factory=list)
    feedback: str = ""
    assessor_id: str = ""
    assessor_type: str = "teacher"  # AssessorType
    timestamp: str = field(default_factory=now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "criterion_id": self.criterion_id,
            "level": self.level,
            "points": self.points,
            "evidence": [e.to_dict() for e in self.evidence],
            "feedback": self.feedback,
            "assessor_id": self.assessor_id,
            "assessor_type": self.assessor_type,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssessmentScore:
        return cls(
            criterion_id=str(data["criterion_id"]),
            level=data["level"],
            points=int(data.get("points", 0)),
            evidence=[Evidence.from_dict(e) for e in data.get("evidence", [])],
            feedback=data.get("feedback", ""),
            assessor_id=data.get("assessor_id", ""),
            assessor_type=data.get("assessor_type", "teacher"),
            timestamp=data.get("timestamp") or now_iso(),
        )


@dataclass
class Assessment:
    """A student's assessment against a rubric."""

    id: str
    student_id: str
    student_name: str
    rubric_id: str
    project_id: str = ""
    scores: list[AssessmentScore] = field(default_factory=list)
    total_score: int = 0
    percentage: int = 0
    status: str = "not_started"  # AssessmentStatus
    submitted_at: str | None = None
    graded_at: str | None = None
    comments: str = ""
    strengths: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)

    def score_for(self, criterion_id: str) -> AssessmentScore | None:
        return next((s for s in self.scores if s.criterion_id == criterion_id), None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "$schema": "assessment_v1",
            "id": self.id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "rubric_id": self.rubric_id,
            "project_id": self.project_id,
            "scores": [s.to_dict() for s in self.scores],
            "total_score": self.total_score,
            "percentage": self.percentage,
            "status": self.status,
            "submitted_at": self.submitted_at,
            "graded_at": self.graded_at,
            "comments": self.comments,
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Assessment:
        return cls(
            id=str(data["id"]),
            student_id=str(data["student_id"]),
            student_name=data.get("student_name", ""),
            rubric_id=str(data.get("rubric_id", "")),
            project_id=str(data.get("project_id", "")),
            scores=[AssessmentScore.from_dict(s) for s in data.get("scores", [])],
            total_score=int(data.get("total_score", 0)),
            percentage=int(data.get("percentage", 0)),
            status=data.get("status", "not_started"),
            submitted_at=data.get("submitted_at"),
            graded_at=data.get("graded_at"),
            comments=data.get("comments", ""),
            strengths=list(data.get("strengths") or []),
            improvements=list(data.get("improvements") or []),
        )


@dataclass
class AssessmentCalculations:
    """Derived totals for an assessment."""

    total_points: int
    max_points: int
    percentage: int
    progress: float
    completed_criteria: int
    is_passing: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_points": self.total_points,
            "max_points": self.max_points,
            "percentage": self.percentage,
            "progress": self.progress,
            "completed_criteria": self.completed_criteria,
            "is_passing": self.is_passing,
        }


@dataclass
class AssessmentResult:
    """Result of saving or submitting an assessment."""

    success: bool
    assessment_path: Path | None
    assessment: Assessment | None
    message: str
    warnings: list[str] = field(default_factory=list)


class AssessmentError(Exception):
    """Error scoring or persisting an assessment."""

    pass


# =============================================================================
# CALCULATIONS
# =============================================================================


def new_assessment(
    rubric: Rubric, student_id: str, student_name: str, project_id: str = ""
) -> Assessment:
    """Create an empty assessment of a student against a rubric."""
    return Assessment(
        id=generate_id("asmt"),
        student_id=student_id,
        student_name=student_name,
        rubric_id=rubric.id,
        project_id=project_id or generate_id("proj"),
    )


def calculate_assessment(assessment: Assessment, rubric: Rubric) -> AssessmentCalculations:
    """Compute totals, percentage, progress and pass/fail.

    Scores for criteria that are not in the rubric are ignored.
    """
    total_points = 0
    max_points = 0
    weighted_score = 0.0
    completed = 0

    for criterion in rubric.criteria:
        max_level = criterion.max_points
        score = assessment.score_for(criterion.id)
        if score is not None:
            total_points += score.points
            completed += 1
            if rubric.type == "analytical" and max_level > 0:
                weighted_score += (score.points / max_level) * criterion.weight
        max_points += max_level

    if rubric.type == "analytical":
        percentage = round_half_up(weighted_score)
    elif max_points > 0:
        percentage = round_half_up((total_points / max_points) * 100)
    else:
        percentage = 0

    progress = (completed / len(rubric.criteria)) * 100 if rubric.criteria else 0

    return AssessmentCalculations(
        total_points=total_points,
        max_points=max_points,
        percentage=percentage,
        progress=progress,
        completed_criteria=completed,
        is_passing=percentage >= rubric.passing_score,
    )


# =============================================================================
# SCORE EDITING
# =============================================================================


def _replace_score(assessment: Assessment, criterion_id: str, change) -> Assessment:
    """Apply change to an existing score; unscored criteria are left alone."""
    if assessment.score_for(criterion_id) is None:
        return assessment
    scores = [change(s) if s.criterion_id == criterion_id else s for s in assessment.scores]
    return replace(assessment, scores=scores)


def update_score(
    assessment: Assessment,
    criterion_id: str,
    level: str,
    points: int,
    assessor_id: str = "",
    assessor_type: AssessorType = "teacher",
    now: datetime | None = None,
) -> Assessment:
    """Set the level for a criterion, keeping prior evidence and feedback."""
    existing = assessment.score_for(criterion_id)
    score = AssessmentScore(
        criterion_id=criterion_id,
        level=level,
        points=points,
        evidence=list(existing.evidence) if existing else [],
        feedback=existing.feedback if existing else "",
        assessor_id=assessor_id or assessment.student_id,
        assessor_type=assessor_type,
        timestamp=(now or utc_now()).isoformat(),
    )

    if existing is not None:
        scores = [score if s.criterion_id == criterion_id else s for s in assessment.scores]
    else:
        scores = [*assessment.scores, score]

    return replace(assessment, scores=scores, status="in_progress")


def update_feedback(assessment: Assessment, criterion_id: str, feedback: str) -> Assessment:
    return _replace_score(assessment, criterion_id, lambda s: replace(s, feedback=feedback))


def add_evidence(assessment: Assessment, criterion_id: str, evidence: Evidence) -> Assessment:
    return _replace_score(
        assessment, criterion_id, lambda s: replace(s, evidence=[*s.evidence, evidence])
    )


def remove_evidence(assessment: Assessment, criterion_id: str, evidence_id: str) -> Assessment:
    return _replace_score(
        assessment,
        criterion_id,
        lambda s: replace(s, evidence=[e for e in s.evidence if e.id != evidence_id]),
    )


def feedback_suggestions(level: str) -> list[str]:
    """Canned feedback sentences for a performance level."""
    return list(FEEDBACK_TEMPLATES.get(level, []))


# =============================================================================
# INSIGHTS
# =============================================================================


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def generate_insights(
    assessment: Assessment, rubric: Rubric, limit: int | None = None
) -> Assessment:
    """Fill strengths and improvements from levels and feedback keywords."""
    if limit is None:
        limit = load_app_config().scoring.max_insights

    strengths: list[str] = []
    improvements: list[str] = []

    for score in assessment.scores:
        criterion = rubric.criterion(score.criterion_id)
        if criterion is None:
            continue
        if score.level in ("exemplary", "proficient"):
            strengths.append(f"Strong performance in {criterion.name}")
        elif score.level == "beginning":
            improvements.append(f"Focus on improving {criterion.name}")

    for category, keywords in STRENGTH_PATTERNS.items():
        if any(
            score.feedback and any(k in score.feedback.lower() for k in keywords)
            for score in assessment.scores
        ):
            strengths.append(f"Demonstrates strong {category} skills")

    return replace(
        assessment,
        strengths=_dedupe(strengths)[:limit],
        improvements=_dedupe(improvements)[:limit],
    )


# =============================================================================
# SAVE / SUBMIT
# =============================================================================


def finalize_for_save(assessment: Assessment, rubric: Rubric) -> Assessment:
    """Fill totals and mark in progress."""
    calc = calculate_assessment(assessment, rubric)
    return replace(
        assessment,
        total_score=calc.total_points,
        percentage=calc.percentage,
        status="in_progress",
    )


def finalize_for_submit(
    assessment: Assessment,
    rubric: Rubric,
    mode: AssessorType = "teacher",
    now: datetime | None = None,
) -> Assessment:
    """Fill totals; teacher submissions are graded, others submitted."""
    calc = calculate_assessment(assessment, rubric)
    stamp = (now or utc_now()).isoformat()
    graded = mode == "teacher"
    return replace(
        assessment,
        total_score=calc.total_points,
        percentage=calc.percentage,
        status="graded" if graded else "submitted",
        submitted_at=stamp,
        graded_at=stamp if graded else None,
    )


def _write(assessment: Assessment, data_dir: Path) -> Path:
    assessments_dir = data_dir / "assessments"
    assessments_dir.mkdir(parents=True, exist_ok=True)
    path = assessments_dir / f"{assessment.id}.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(assessment.to_dict(), f, indent=2, ensure_ascii=False)
    return path


def save_assessment(assessment: Assessment, rubric: Rubric, data_dir: Path) -> AssessmentResult:
    """Persist a draft assessment."""
    saved = finalize_for_save(assessment, rubric)
    path = _write(saved, data_dir)
    logger.info("assessment_saved", assessment_id=saved.id, percentage=saved.percentage)
    return AssessmentResult(
        success=True, assessment_path=path, assessment=saved, message="Assessment saved"
    )


def submit_assessment(
    assessment: Assessment,
    rubric: Rubric,
    data_dir: Path,
    mode: AssessorType = "teacher",
    now: datetime | None = None,
) -> AssessmentResult:
    """Persist a submitted (or graded) assessment.

    Assessments with unscored criteria are refused and nothing is written.
    """
    warnings: list[str] = []
    calc = calculate_assessment(assessment, rubric)
    if calc.completed_criteria < len(rubric.criteria):
        message = (
            f"Cannot submit: only {calc.completed_criteria}/{len(rubric.criteria)} criteria scored"
        )
        logger.warning(
            "assessment_submit_refused",
            assessment_id=assessment.id,
            completed=calc.completed_criteria,
            criteria=len(rubric.criteria),
        )
        return AssessmentResult(
            success=False, assessment_path=None, assessment=None, message=message
        )

    submitted = finalize_for_submit(assessment, rubric, mode, now)
    path = _write(submitted, data_dir)

    logger.info(
        "assessment_submitted",
        assessment_id=submitted.id,
        status=submitted.status,
        percentage=submitted.percentage,
        passing=calc.is_passing,
    )
    return AssessmentResult(
        success=True,
        assessment_path=path,
        assessment=submitted,
        message=f"Assessment {submitted.status}",
        warnings=warnings,
    )


def load_assessment(path: Path) -> Assessment:
    """Load an assessment JSON file.

    Raises:
        AssessmentError: If the file doesn't exist
    """
    if not path.exists():
        raise AssessmentError(f"Assessment not found: {path}")
    with open(path, encoding="utf-8") as f:
        return Assessment.from_dict(json.load(f))
