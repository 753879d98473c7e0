"""Learning analytics module.

Responsibilities (F5):
- Per-student learning analytics (engagement, creativity, collaboration, persistence)
- Classroom aggregates (progress, phase distribution, trends, network)
- Rule-based predictive insights for the teacher
- Export payload for dashboards and reports

Engagement = 0.4 * progress + 0.3 * mean assessment % + 0.3 * min(100, 20 * iterations)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

import structlog

from journey.core.assessment import Assessment
from journey.core.iterations import IterationEvent
from journey.core.peer_review import PeerReview, Student
from journey.core.phases import CreativePhase, GradeLevel
from journey.core.student_progress import StudentProgress
from journey.utils.numbers import mean, round_half_up
from journey.utils.time_utils import parse_iso, utc_now

logger = structlog.get_logger(__name__)

InsightKind = Literal["success_prediction", "risk_alert", "intervention_needed", "opportunity"]
Priority = Literal["high", "medium", "low"]

PRIORITY_ORDER: dict[str, int] = {"high": 3, "medium": 2, "low": 1}

# Substrings of criterion ids that count towards the creativity index
CREATIVITY_CRITERIA = ["creativity", "innovation", "ideas", "creative"]

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class LearningAnalytics:
    student_id: str
    student_name: str
    overall_progress: float
    phase_completion_times: dict[str, int]
    iteration_frequency: float
    assessment_trends: list[int]
    engagement_score: int
    collaboration_score: int
    creativity_index: int
    persistence_metric: int
    prediction_score: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "student_id": self.student_id,
            "student_name": self.student_name,
            "overall_progress": self.overall_progress,
            "phase_completion_times": dict(self.phase_completion_times),
            "iteration_frequency": self.iteration_frequency,
            "assessment_trends": list(self.assessment_trends),
            "engagement_score": self.engagement_score,
            "collaboration_score": self.collaboration_score,
            "creativity_index": self.creativity_index,
            "persistence_metric": self.persistence_metric,
            "prediction_score": self.prediction_score,
        }


@dataclass
class CollaborationNode:
    node_id: str
    connections: list[str]
    strength: int

    def to_dict(self) -> dict[str, Any]:
        return {"node_id": self.node_id, "connections": list(self.connections), "strength": self.strength}


@dataclass
class ClassroomAnalytics:
    total_students: int
    average_progress: float
    phase_distribution: dict[str, int]
    high_iterators: list[str]
    low_iterators: list[str]
    average_iterations: float
    performance_trends: dict[str, int]
    collaboration_network: list[CollaborationNode]
    risk_students: list[str]
    top_performers: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_students": self.total_students,
            "average_progress": self.average_progress,
            "phase_distribution": dict(self.phase_distribution),
            "iteration_patterns": {
                "high_iterators": list(self.high_iterators),
                "low_iterators": list(self.low_iterators),
                "average_iterations": self.average_iterations,
            },
            "performance_trends": dict(self.performance_trends),
            "collaboration_network": [n.to_dict() for n in self.collaboration_network],
            "risk_students": list(self.risk_students),
            "top_performers": list(self.top_performers),
        }


@dataclass
class PredictiveInsight:
    type: str  # InsightKind
    confidence: int  # 0-100
    title: str
    description: str
    recommendations: list[str]
    timeline: str
    priority: str  # Priority
    student_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "confidence": self.confidence,
            "title": self.title,
            "description": self.description,
            "recommendations": list(self.recommendations),
            "timeline": self.timeline,
            "priority": self.priority,
            "student_ids": list(self.student_ids),
        }


@dataclass
class AnalyticsReport:
    individual: list[LearningAnalytics]
    classroom: ClassroomAnalytics
    insights: list[PredictiveInsight]

    def student(self, student_id: str) -> LearningAnalytics | None:
        return next((a for a in self.individual if a.student_id == student_id), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "individual": [a.to_dict() for a in self.individual],
            "classroom": self.classroom.to_dict(),
            "insights": [i.to_dict() for i in self.insights],
        }


# =============================================================================
# SCORES
# =============================================================================


def calculate_engagement_score(
    progress: StudentProgress | None,
    assessments: list[Assessment],
    iterations: list[IterationEvent],
) -> int:
    progress_score = progress.overall_progress if progress else 0
    assessment_score = mean([a.percentage for a in assessments])
    iteration_score = min(100, len(iterations) * 20)
    return round_half_up(progress_score * 0.4 + assessment_score * 0.3 + iteration_score * 0.3)


def calculate_creativity_index(assessments: list[Assessment], reviews: list[PeerReview]) -> int:
    """Points on creativity-related criteria plus 10 per creativity badge, capped at 100."""
    assessment_points = sum(
        score.points
        for a in assessments
        for score in a.scores
        if any(c in score.criterion_id.lower() for c in CREATIVITY_CRITERIA)
    )
    badges = sum(1 for r in reviews for rec in r.recognition if rec.type == "creativity")
    return min(100, assessment_points + badges * 10)


def calculate_collaboration_score(reviews: list[PeerReview]) -> int:
    with_badge = sum(
        1 for r in reviews if any(rec.type == "collaboration" for rec in r.recognition)
    )
    return min(100, len(reviews) * 15 + with_badge * 25)


def trend_direction(current: float, previous: float) -> Literal["up", "down", "stable"]:
    if current > previous:
        return "up"
    if current < previous:
        return "down"
    return "stable"


def format_percentage(value: float) -> str:
    return f"{round_half_up(value)}%"


# =============================================================================
# AGGREGATION
# =============================================================================


def _graded_key(assessment: Assessment) -> float:
    graded = parse_iso(assessment.graded_at)
    return graded.timestamp() if graded else 0


def _student_iterations(
    progress: StudentProgress | None, iterations: list[IterationEvent]
) -> list[IterationEvent]:
    if progress is None:
        return []
    own_ids = {e.id for e in progress.iteration_events}
    return [e for e in iterations if e.id in own_ids]


def _individual(
    student: Student,
    progress: StudentProgress | None,
    assessments: list[Assessment],
    reviews: list[PeerReview],
    iterations: list[IterationEvent],
    phases: list[CreativePhase],
    current_week: int,
) -> LearningAnalytics:
    own_assessments = [a for a in assessments if a.student_id == student.id]
    own_reviews = [r for r in reviews if r.reviewee_id == student.id]
    own_iterations = _student_iterations(progress, iterations)

    completion_times: dict[str, int] = {}
    for phase in phases:
        entry = None
        if progress is not None:
            entry = next((p for p in progress.phase_progress if p.phase_type == phase.type), None)
        completion_times[phase.type.value] = entry.time_spent if entry else 0

    trends = [a.percentage for a in sorted(own_assessments, key=_graded_key)]

    return LearningAnalytics(
        student_id=student.id,
        student_name=student.name,
        overall_progress=progress.overall_progress if progress else 0,
        phase_completion_times=completion_times,
        iteration_frequency=len(own_iterations) / max(1, current_week),
        assessment_trends=trends,
        engagement_score=calculate_engagement_score(progress, own_assessments, own_iterations),
        collaboration_score=calculate_collaboration_score(own_reviews),
        creativity_index=calculate_creativity_index(own_assessments, own_reviews),
        persistence_metric=min(100, len(own_iterations) * 25),
    )


def _performance_trends(individual: list[LearningAnalytics]) -> dict[str, int]:
    trends = {"improving": 0, "stable": 0, "declining": 0}
    for analytics in individual:
        recent = analytics.assessment_trends[-2:]
        if len(recent) < 2:
            continue
        # Categories overlap: a small rise is both improving and stable
        if recent[1] > recent[0]:
            trends["improving"] += 1
        if abs(recent[1] - recent[0]) <= 5:
            trends["stable"] += 1
        if recent[1] < recent[0]:
            trends["declining"] += 1
    return trends


def _collaboration_network(
    individual: list[LearningAnalytics], reviews: list[PeerReview]
) -> list[CollaborationNode]:
    network = []
    for analytics in individual:
        sid = analytics.student_id
        involved = [r for r in reviews if sid in (r.reviewer_id, r.reviewee_id)]
        connections = [r.reviewee_id if r.reviewer_id == sid else r.reviewer_id for r in involved]
        network.append(
            CollaborationNode(
                node_id=sid,
                connections=[c for c in connections if c != sid],
                strength=min(100, len(involved) * 10),
            )
        )
    return network


def _classroom(
    individual: list[LearningAnalytics],
    progress_list: list[StudentProgress],
    reviews: list[PeerReview],
    iterations: list[IterationEvent],
    phases: list[CreativePhase],
    project_duration: int,
    current_week: int,
) -> ClassroomAnalytics:
    total = len(individual)
    average_progress = mean([a.overall_progress for a in individual])

    distribution = {
        phase.type.value: sum(1 for p in progress_list if p.current_phase_type == phase.type)
        for phase in phases
    }

    by_student = {p.student_id: p for p in progress_list}
    iteration_count = sum(
        len(_student_iterations(by_student.get(a.student_id), iterations)) for a in individual
    )
    average_iterations = iteration_count / total if total else 0

    high_iterators = [
        a.student_id for a in individual if a.iteration_frequency > average_iterations * 1.5
    ]
    low_iterators = [
        a.student_id for a in individual if a.iteration_frequency < average_iterations * 0.5
    ]

    risk_threshold = (current_week / project_duration) * 100 - 20 if project_duration else 0
    risk_students = [
        a.student_id
        for a in individual
        if a.overall_progress < risk_threshold and a.engagement_score < 60
    ]

    top = sorted(
        (
            a
            for a in individual
            if a.overall_progress > average_progress + 15 and a.engagement_score > 80
        ),
        key=lambda a: a.overall_progress,
        reverse=True,
    )
    top_performers = [a.student_id for a in top[: math.ceil(total * 0.2)]]

    return ClassroomAnalytics(
        total_students=total,
        average_progress=average_progress,
        phase_distribution=distribution,
        high_iterators=high_iterators,
        low_iterators=low_iterators,
        average_iterations=average_iterations,
        performance_trends=_performance_trends(individual),
        collaboration_network=_collaboration_network(individual, reviews),
        risk_students=risk_students,
        top_performers=top_performers,
    )


def generate_predictive_insights(
    individual: list[LearningAnalytics],
    classroom: ClassroomAnalytics,
    current_week: int,
    total_weeks: int,
) -> list[PredictiveInsight]:
    """Rule-based insights, highest priority first (stable within a priority)."""
    insights: list[PredictiveInsight] = []
    threshold = (current_week / total_weeks) * 100 if total_weeks else 0

    at_risk = [a for a in individual if a.overall_progress < threshold - 20 and a.engagement_score < 60]
    if at_risk:
        insights.append(
            PredictiveInsight(
                type="risk_alert",
                confidence=85,
                title="Students at Risk",
                description=f"{len(at_risk)} students are falling behind and need intervention",
                recommendations=[
                    "Schedule one-on-one check-ins",
                    "Provide additional scaffolding resources",
                    "Consider peer mentoring partnerships",
                ],
                timeline="Within 1 week",
                priority="high",
                student_ids=[a.student_id for a in at_risk],
            )
        )

    excelling = [
        a
        for a in individual
        if a.overall_progress > threshold + 10
        and a.engagement_score > 80
        and a.creativity_index > 70
    ]
    if excelling:
        insights.append(
            PredictiveInsight(
                type="success_prediction",
                confidence=92,
                title="Excellence Trajectory",
                description=f"{len(excelling)} students are on track for exceptional outcomes",
                recommendations=[
                    "Provide advanced challenges",
                    "Consider leadership roles in peer collaboration",
                    "Document exemplary work for portfolios",
                ],
                timeline="Rest of project",
                priority="medium",
                student_ids=[a.student_id for a in excelling],
            )
        )

    low_iterators = [a for a in individual if a.iteration_frequency < 0.5]
    if len(low_iterators) > classroom.total_students * 0.3:
        insights.append(
            PredictiveInsight(
                type="intervention_needed",
                confidence=78,
                title="Low Iteration Activity",
                description="Many students are not engaging in iterative improvement",
                recommendations=[
                    "Introduce structured iteration prompts",
                    "Share iteration success stories",
                    "Reduce perfectionism through growth mindset activities",
                ],
                timeline="Next 2 weeks",
                priority="medium",
                student_ids=[a.student_id for a in low_iterators],
            )
        )

    isolated = [a for a in individual if a.collaboration_score < 40]
    if isolated:
        insights.append(
            PredictiveInsight(
                type="opportunity",
                confidence=70,
                title="Collaboration Enhancement",
                description="Some students could benefit from stronger peer connections",
                recommendations=[
                    "Create structured collaboration opportunities",
                    "Form diverse working groups",
                    "Implement peer mentoring system",
                ],
                timeline="Next phase",
                priority="low",
                student_ids=[a.student_id for a in isolated],
            )
        )

    return sorted(insights, key=lambda i: PRIORITY_ORDER[i.priority], reverse=True)


def compute_analytics(
    students: list[Student],
    progress_list: list[StudentProgress],
    assessments: list[Assessment],
    reviews: list[PeerReview],
    iterations: list[IterationEvent],
    phases: list[CreativePhase],
    project_duration: int,
    current_week: int,
) -> AnalyticsReport:
    """Individual, classroom and predictive analytics for a class."""
    by_student = {p.student_id: p for p in progress_list}
    individual = [
        _individual(
            student,
            by_student.get(student.id),
            assessments,
            reviews,
            iterations,
            phases,
            current_week,
        )
        for student in students
    ]
    classroom = _classroom(
        individual, progress_list, reviews, iterations, phases, project_duration, current_week
    )
    insights = generate_predictive_insights(individual, classroom, current_week, project_duration)

    logger.info(
        "analytics_computed",
        students=len(students),
        average_progress=round(classroom.average_progress, 1),
        risk=len(classroom.risk_students),
        insights=[i.type for i in insights],
    )
    return AnalyticsReport(individual=individual, classroom=classroom, insights=insights)


def export_payload(
    report: AnalyticsReport,
    current_week: int,
    grade_level: GradeLevel | str,
    project_duration: int,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Analytics export document."""
    return {
        "$schema": "analytics_export_v1",
        "timestamp": (now or utc_now()).isoformat(),
        "project_week": current_week,
        "individual": [a.to_dict() for a in report.individual],
        "classroom": report.classroom.to_dict(),
        "insights": [i.to_dict() for i in report.insights],
        "metadata": {
            "grade_level": GradeLevel(grade_level).value,
            "project_duration": project_duration,
            "total_students": len(report.individual),
        },
    }
