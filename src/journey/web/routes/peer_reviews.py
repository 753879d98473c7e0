"""Peer review endpoints (F9)."""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from journey.core.classroom import ClassroomDataError, ClassroomSnapshot
from journey.core.peer_review import review_stats, summarize_student
from journey.web.schemas import PeerStatsRequest

router = APIRouter(prefix="/api/peer-reviews", tags=["peer-reviews"])


def parse_classroom(data: dict[str, Any]) -> ClassroomSnapshot:
    """Build a ClassroomSnapshot from a request payload or fail with 422."""
    try:
        return ClassroomSnapshot.from_dict(data)
    except ClassroomDataError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.post("/stats")
async def peer_stats(body: PeerStatsRequest) -> dict[str, Any]:
    """Review progress and received feedback for one student."""
    snapshot = parse_classroom(body.classroom)
    if snapshot.student(body.student_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Student '{body.student_id}' not found",
        )

    stats = review_stats(snapshot.peer_reviews, snapshot.students, body.student_id)
    summary = summarize_student(snapshot.peer_reviews, snapshot.students, body.student_id)
    return {"stats": stats.to_dict(), "summary": summary.to_dict()}
