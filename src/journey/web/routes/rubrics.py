"""Rubric endpoints (F9)."""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from journey.core.rubric import Rubric, rubric_calculations, validate_rubric
from journey.web.schemas import (
    RubricCalculationsResponse,
    RubricRequest,
    RubricValidationResponse,
)

router = APIRouter(prefix="/api/rubrics", tags=["rubrics"])


def parse_rubric(data: dict[str, Any]) -> Rubric:
    """Build a Rubric from a request payload or fail with 422."""
    try:
        return Rubric.from_dict(data)
    except (KeyError, ValueError, TypeError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid rubric: {e}",
        )


@router.post("/validate", response_model=RubricValidationResponse)
async def validate(body: RubricRequest) -> RubricValidationResponse:
    """Validate a rubric before publishing."""
    rubric = parse_rubric(body.rubric)
    errors = validate_rubric(rubric)
    return RubricValidationResponse(
        valid=not errors,
        errors=errors,
        calculations=RubricCalculationsResponse(**rubric_calculations(rubric).to_dict()),
    )


@router.post("/calculations", response_model=RubricCalculationsResponse)
async def calculations(body: RubricRequest) -> RubricCalculationsResponse:
    """Total weight and points of a rubric."""
    rubric = parse_rubric(body.rubric)
    return RubricCalculationsResponse(**rubric_calculations(rubric).to_dict())
