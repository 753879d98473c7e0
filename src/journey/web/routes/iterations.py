"""Iteration history endpoints (F9)."""

from fastapi import APIRouter, HTTPException, status

from journey.core.iterations import (
    IterationEvent,
    filter_iterations,
    history_rows,
    iteration_stats,
)
from journey.web.schemas import IterationStatsRequest, IterationStatsResponse

router = APIRouter(prefix="/api/iterations", tags=["iterations"])


@router.post("/stats", response_model=IterationStatsResponse)
async def stats(body: IterationStatsRequest) -> IterationStatsResponse:
    """Stats over every iteration plus the filtered history."""
    try:
        events = [IterationEvent.from_dict(e) for e in body.iterations]
        filtered = filter_iterations(
            events,
            iteration_type=body.iteration_type,
            phase=body.phase,
            query=body.query,
            time_range=body.time_range,
            sort_by=body.sort_by,
        )
    except (KeyError, ValueError, TypeError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid iterations: {e}",
        )

    rows = history_rows(filtered)
    return IterationStatsResponse(
        stats=iteration_stats(events, body.project_duration).to_dict(),
        history=rows,
        count=len(rows),
    )
