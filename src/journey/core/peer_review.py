"""Peer review module.

Responsibilities (F3):
- Grade-appropriate evaluation categories, recognition badges and prompts
- Draft a review: ratings (1-5), feedback and recognitions
- Refuse incomplete reviews on submission
- Aggregate given/received reviews for a student

A review is complete when every category for the grade is rated
and at least one piece of feedback was added.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

import structlog

from journey.core.phases import GradeLevel, PhaseType
from journey.utils.numbers import round_half_up
from journey.utils.time_utils import now_iso, utc_now
from journey.utils.validators import generate_id, validate_score

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================

FeedbackType = Literal["strength", "improvement", "question", "suggestion"]
RecognitionType = Literal["collaboration", "creativity", "leadership", "support", "quality"]
ReviewStatus = Literal["pending", "in_progress", "submitted", "viewed"]

EVALUATION_CATEGORIES: dict[str, list[dict[str, str]]] = {
    "elementary": [
        {"key": "teamwork", "label": "Teamwork", "description": "How well did they work with others?"},
        {"key": "ideas", "label": "Ideas", "description": "Did they share good ideas?"},
        {"key": "listening", "label": "Listening", "description": "Did they listen to others?"},
        {"key": "helping", "label": "Helping", "description": "Did they help teammates?"},
        {"key": "effort", "label": "Effort", "description": "Did they try their best?"},
    ],
    "middle": [
        {"key": "collaboration", "label": "Collaboration", "description": "Quality of teamwork and cooperation"},
        {"key": "contribution", "label": "Contribution", "description": "Value of ideas and work shared"},
        {"key": "communication", "label": "Communication", "description": "Clear and respectful interaction"},
        {"key": "reliability", "label": "Reliability", "description": "Dependability and follow-through"},
        {"key": "leadership", "label": "Leadership", "description": "Initiative and positive influence"},
    ],
    "high": [
        {"key": "collaboration", "label": "Collaboration", "description": "Professional teamwork and synergy"},
        {"key": "innovation", "label": "Innovation", "description": "Creative problem-solving and ideas"},
        {"key": "communication", "label": "Communication", "description": "Professional and effective dialogue"},
        {"key": "accountability", "label": "Accountability", "description": "Ownership and responsibility"},
        {"key": "leadership", "label": "Leadership", "description": "Strategic thinking and influence"},
    ],
}

RECOGNITION_TYPES: list[dict[str, str]] = [
    {"type": "collaboration", "label": "Team Player", "description": "Excellent collaboration skills"},
    {"type": "creativity", "label": "Creative Thinker", "description": "Innovative ideas and solutions"},
    {"type": "leadership", "label": "Natural Leader", "description": "Strong leadership qualities"},
    {"type": "support", "label": "Supportive Friend", "description": "Always there to help"},
    {"type": "quality", "label": "Quality Champion", "description": "Commitment to excellence"},
]

FEEDBACK_PROMPTS: dict[str, dict[str, str]] = {
    "elementary": {
        "strength": "Something they did really well was...",
        "improvement": "Next time they could try...",
        "question": "I wonder if they could explain...",
        "suggestion": "A fun idea might be...",
    },
    "middle": {
        "strength": "A key strength I observed was...",
        "improvement": "An area for growth might be...",
        "question": "I'm curious about...",
        "suggestion": "I suggest considering...",
    },
    "high": {
        "strength": "Professional strength demonstrated...",
        "improvement": "Constructive feedback for improvement...",
        "question": "Critical question to explore...",
        "suggestion": "Strategic recommendation...",
    },
}

# Received collaboration badges needed to count as a top collaborator
TOP_COLLABORATOR_THRESHOLD = 2


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class PeerRating:
    category: str
    score: int  # 1-5
    comment: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "score": self.score, "comment": self.comment}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PeerRating:
        return cls(
            category=data["category"],
            score=int(data["score"]),
            comment=data.get("comment") or "",
        )


@dataclass
class PeerFeedback:
    type: str  # FeedbackType
    content: str
    phase_related: PhaseType | None = None
    helpful: int = 0  # Count of "helpful" votes

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "content": self.content,
            "phase_related": self.phase_related.value if self.phase_related else None,
            "helpful": self.helpful,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PeerFeedback:
        phase = data.get("phase_related")
        return cls(
            type=data["type"],
            content=data.get("content", ""),
            phase_related=PhaseType(phase) if phase else None,
            helpful=int(data.get("helpful") or 0),
        )


@dataclass
class PeerRecognition:
    id: str
    type: str  # RecognitionType
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "message": self.message}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PeerRecognition:
        return cls(
            id=str(data.get("id") or generate_id("rec")),
            type=data["type"],
            message=data.get("message", ""),
        )


@dataclass
class PeerReview:
    """A submitted review of one student by another."""

    id: str
    reviewer_id: str
    reviewer_name: str
    reviewee_id: str
    reviewee_name: str
    project_id: str = ""
    phase_type: PhaseType = PhaseType.ANALYZE
    anonymous: bool = False
    status: str = "pending"  # ReviewStatus
    submitted_at: str | None = None
    viewed_at: str | None = None
    ratings: list[PeerRating] = field(default_factory=list)
    feedback: list[PeerFeedback] = field(default_factory=list)
    recognition: list[PeerRecognition] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "$schema": "peer_review_v1",
            "id": self.id,
            "reviewer_id": self.reviewer_id,
            "reviewer_name": self.reviewer_name,
            "reviewee_id": self.reviewee_id,
            "reviewee_name": self.reviewee_name,
            "project_id": self.project_id,
            "phase_type": self.phase_type.value,
            "anonymous": self.anonymous,
            "status": self.status,
            "submitted_at": self.submitted_at,
            "viewed_at": self.viewed_at,
            "ratings": [r.to_dict() for r in self.ratings],
            "feedback": [f.to_dict() for f in self.feedback],
            "recognition": [r.to_dict() for r in self.recognition],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PeerReview:
        return cls(
            id=str(data.get("id") or generate_id("review")),
            reviewer_id=str(data["reviewer_id"]),
            reviewer_name=data.get("reviewer_name", ""),
            reviewee_id=str(data["reviewee_id"]),
            reviewee_name=data.get("reviewee_name", ""),
            project_id=str(data.get("project_id", "")),
            phase_type=PhaseType(data.get("phase_type") or "ANALYZE"),
            anonymous=bool(data.get("anonymous", False)),
            status=data.get("status", "pending"),
            submitted_at=data.get("submitted_at"),
            viewed_at=data.get("viewed_at"),
            ratings=[PeerRating.from_dict(r) for r in data.get("ratings", [])],
            feedback=[PeerFeedback.from_dict(f) for f in data.get("feedback", [])],
            recognition=[PeerRecognition.from_dict(r) for r in data.get("recognition", [])],
        )


@dataclass
class Student:
    """Minimal roster entry."""

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Student:
        return cls(id=str(data["id"]), name=data.get("name", ""))


@dataclass
class ReviewStats:
    """Review progress and received feedback for one student."""

    pending_students: list[Student]
    reviews_given: int
    reviews_received: int
    average_rating: float
    strengths: list[str]
    improvements: list[str]
    recognitions: list[PeerRecognition]
    completion_rate: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "pending_students": [s.to_dict() for s in self.pending_students],
            "reviews_given": self.reviews_given,
            "reviews_received": self.reviews_received,
            "average_rating": self.average_rating,
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
            "recognitions": [r.to_dict() for r in self.recognitions],
            "completion_rate": self.completion_rate,
        }


@dataclass
class PeerEvaluationSummary:
    student_id: str
    student_name: str
    reviews_given: int
    reviews_received: int
    average_rating: float
    strengths: list[str]
    improvements: list[str]
    recognitions: list[PeerRecognition]
    top_collaborator: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "student_id": self.student_id,
            "student_name": self.student_name,
            "reviews_given": self.reviews_given,
            "reviews_received": self.reviews_received,
            "average_rating": self.average_rating,
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
            "recognitions": [r.to_dict() for r in self.recognitions],
            "top_collaborator": self.top_collaborator,
        }


class ReviewIncompleteError(Exception):
    """Review is missing ratings or feedback."""

    pass


# =============================================================================
# DRAFTING
# =============================================================================


def categories_for(grade_level: GradeLevel | str) -> list[dict[str, str]]:
    return EVALUATION_CATEGORIES[GradeLevel(grade_level).value]


def _category_keys(grade_level: GradeLevel | str) -> set[str]:
    return {c["key"] for c in categories_for(grade_level)}


def prompts_for(grade_level: GradeLevel | str) -> dict[str, str]:
    return FEEDBACK_PROMPTS[GradeLevel(grade_level).value]


class ReviewDraft:
    """A review being filled in by one student about another."""

    def __init__(self, anonymous: bool = False, grade_level: GradeLevel | str | None = None):
        self.ratings: list[PeerRating] = []
        self.feedback: list[PeerFeedback] = []
        self.recognition: list[PeerRecognition] = []
        self.anonymous = anonymous
        self.grade_level = GradeLevel(grade_level) if grade_level else None

    def update_rating(self, category: str, score: int) -> None:
        """Set the score for a category, keeping any comment.

        Raises:
            ValueError: If score is outside 1-5, or the draft has a grade
                level and the category is not one of its categories
        """
        if self.grade_level is not None and category not in _category_keys(self.grade_level):
            raise ValueError(f"Unknown category for {self.grade_level.value} reviews: {category}")
        score = validate_score(score, 1, 5)
        existing = next((r for r in self.ratings if r.category == category), None)
        self.ratings = [r for r in self.ratings if r.category != category]
        self.ratings.append(
            PeerRating(category=category, score=score, comment=existing.comment if existing else "")
        )

    def add_feedback(
        self, feedback_type: FeedbackType, content: str, phase: PhaseType | None = None
    ) -> bool:
        """Append feedback; blank content is ignored. Returns whether it was added."""
        if not content.strip():
            return False
        self.feedback.append(PeerFeedback(type=feedback_type, content=content, phase_related=phase))
        return True

    def toggle_recognition(self, recognition_type: RecognitionType) -> None:
        """Add a badge, or remove it when already given."""
        badge = next((r for r in RECOGNITION_TYPES if r["type"] == recognition_type), None)
        if badge is None:
            return
        if any(r.type == recognition_type for r in self.recognition):
            self.recognition = [r for r in self.recognition if r.type != recognition_type]
            return
        self.recognition.append(
            PeerRecognition(id=generate_id("rec"), type=recognition_type, message=badge["description"])
        )

    def is_complete(self, grade_level: GradeLevel | str) -> bool:
        rated = {r.category for r in self.ratings}
        return _category_keys(grade_level) <= rated and len(self.feedback) > 0

    def build_review(
        self,
        students: list[Student],
        reviewer_id: str,
        reviewee_id: str,
        grade_level: GradeLevel | str,
        phase_type: PhaseType | None = None,
        project_id: str = "",
        now: datetime | None = None,
    ) -> PeerReview:
        """Turn the draft into a submitted PeerReview.

        Raises:
            ReviewIncompleteError: If the draft is not complete or the
                reviewee is unknown
        """
        if not self.is_complete(grade_level):
            logger.warning(
                "peer_review_incomplete",
                ratings=len(self.ratings),
                feedback=len(self.feedback),
            )
            raise ReviewIncompleteError(
                "Rate every category and add at least one piece of feedback"
            )

        reviewee = next((s for s in students if s.id == reviewee_id), None)
        if reviewee is None:
            raise ReviewIncompleteError(f"Unknown student: {reviewee_id}")
        reviewer = next((s for s in students if s.id == reviewer_id), None)

        review = PeerReview(
            id=generate_id("review"),
            reviewer_id=reviewer_id,
            reviewer_name=reviewer.name if reviewer else "Anonymous",
            reviewee_id=reviewee_id,
            reviewee_name=reviewee.name,
            project_id=project_id or generate_id("proj"),
            phase_type=phase_type or PhaseType.ANALYZE,
            anonymous=self.anonymous,
            status="submitted",
            submitted_at=(now or utc_now()).isoformat(),
            ratings=[r for r in self.ratings if r.category in _category_keys(grade_level)],
            feedback=list(self.feedback),
            recognition=list(self.recognition),
        )
        logger.info(
            "peer_review_submitted",
            review_id=review.id,
            reviewee_id=reviewee_id,
            recognitions=len(review.recognition),
        )
        return review


def mark_viewed(review: PeerReview) -> PeerReview:
    """Flag a received review as read."""
    review.status = "viewed"
    review.viewed_at = now_iso()
    return review


# =============================================================================
# AGGREGATION
# =============================================================================


def review_stats(
    reviews: list[PeerReview], students: list[Student], current_student_id: str
) -> ReviewStats:
    """Review progress and received feedback for the current student."""
    given = [r for r in reviews if r.reviewer_id == current_student_id]
    received = [r for r in reviews if r.reviewee_id == current_student_id]

    reviewed_ids = {r.reviewee_id for r in given}
    pending = [s for s in students if s.id != current_student_id and s.id not in reviewed_ids]

    scores = [rating.score for r in received for rating in r.ratings]
    average = sum(scores) / len(scores) if scores else 0

    all_feedback = [f for r in received for f in r.feedback]
    peers = len(students) - 1

    return ReviewStats(
        pending_students=pending,
        reviews_given=len(given),
        reviews_received=len(received),
        average_rating=round_half_up(average, 1),
        strengths=[f.content for f in all_feedback if f.type == "strength"],
        improvements=[f.content for f in all_feedback if f.type == "improvement"],
        recognitions=[rec for r in received for rec in r.recognition],
        completion_rate=round_half_up(len(given) / peers * 100) if peers > 0 else 0,
    )


def summarize_student(
    reviews: list[PeerReview], students: list[Student], student_id: str
) -> PeerEvaluationSummary:
    """Per-student summary used by class reports."""
    stats = review_stats(reviews, students, student_id)
    student = next((s for s in students if s.id == student_id), None)
    collaboration_badges = sum(1 for r in stats.recognitions if r.type == "collaboration")
    return PeerEvaluationSummary(
        student_id=student_id,
        student_name=student.name if student else "",
        reviews_given=stats.reviews_given,
        reviews_received=stats.reviews_received,
        average_rating=stats.average_rating,
        strengths=stats.strengths,
        improvements=stats.improvements,
        recognitions=stats.recognitions,
        top_collaborator=collaboration_badges >= TOP_COLLABORATOR_THRESHOLD,
    )
