"""Analytics and teacher guidance endpoints (F9)."""

from typing import Any

from fastapi import APIRouter

from journey.core.analytics import export_payload
from journey.core.teacher_guidance import class_patterns, class_stats, guidance_actions
from journey.web.routes.peer_reviews import parse_classroom
from journey.web.schemas import ClassroomRequest

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.post("")
async def analytics(body: ClassroomRequest) -> dict[str, Any]:
    """Individual and class analytics with predictive insights."""
    snapshot = parse_classroom(body.classroom)
    return export_payload(
        snapshot.analytics(),
        snapshot.current_week,
        snapshot.grade_level,
        snapshot.project_duration,
    )


@router.post("/guidance")
async def guidance(body: ClassroomRequest) -> dict[str, Any]:
    """Class patterns, prioritized actions and iteration stats."""
    snapshot = parse_classroom(body.classroom)
    by_student = snapshot.iterations_by_student()
    class_size = len(snapshot.students)
    week, total = snapshot.current_week, snapshot.project_duration
    return {
        "actions": [a.to_dict() for a in guidance_actions(by_student, class_size, week, total)],
        "patterns": [p.to_dict() for p in class_patterns(by_student, class_size, week, total)],
        "stats": class_stats(by_student, class_size).to_dict(),
    }
