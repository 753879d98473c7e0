"""Assessment endpoints (F9)."""

from fastapi import APIRouter, HTTPException, status

from journey.core.assessment import Assessment, calculate_assessment, generate_insights
from journey.web.routes.rubrics import parse_rubric
from journey.web.schemas import (
    AssessmentCalculationsResponse,
    AssessmentScoreRequest,
    AssessmentScoreResponse,
)

router = APIRouter(prefix="/api/assessments", tags=["assessments"])


@router.post("/score", response_model=AssessmentScoreResponse)
async def score_assessment(body: AssessmentScoreRequest) -> AssessmentScoreResponse:
    """Score an assessment against its rubric."""
    rubric = parse_rubric(body.rubric)
    try:
        assessment = Assessment.from_dict(body.assessment)
    except (KeyError, ValueError, TypeError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid assessment: {e}",
        )

    calc = calculate_assessment(assessment, rubric)
    assessment = generate_insights(assessment, rubric)
    return AssessmentScoreResponse(
        calculations=AssessmentCalculationsResponse(**calc.to_dict()),
        strengths=assessment.strengths,
        improvements=assessment.improvements,
    )
