"""Support resource endpoints (F9)."""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from journey.core.phases import GradeLevel, PhaseType
from journey.core.resources import (
    category_counts,
    filter_resources,
    get_resource,
    recommended_resources,
)
from journey.web.schemas import ResourceListResponse

router = APIRouter(prefix="/api/resources", tags=["resources"])


@router.get("", response_model=ResourceListResponse)
async def list_resources(
    phase: PhaseType,
    grade_level: GradeLevel = GradeLevel.MIDDLE,
    category: str = "all",
    query: str = "",
    featured_only: bool = False,
    recent_iteration_type: str | None = None,
) -> ResourceListResponse:
    """Resources for a phase and grade, most relevant first."""
    try:
        found = filter_resources(
            phase, grade_level, category, query, featured_only, recent_iteration_type
        )
        picks = recommended_resources(phase, grade_level, recent_iteration_type)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ResourceListResponse(
        resources=[r.to_dict() for r in found],
        recommended=[r.to_dict() for r in picks],
        categories=category_counts(found),
        count=len(found),
    )


@router.get("/{resource_id}")
async def get_one(resource_id: str) -> dict[str, Any]:
    resource = get_resource(resource_id)
    if resource is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Resource '{resource_id}' not found",
        )
    return resource.to_dict()
