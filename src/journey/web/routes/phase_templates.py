"""Phase template endpoints (F9).

Applying a template or suggestions takes a journey document and returns
it with the new content; nothing is stored.
"""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from journey.core.journey_editor import JourneyData, JourneyEditor
from journey.core.phases import (
    PHASE_ORDER,
    GradeLevel,
    PhaseType,
    filter_templates,
    get_phase_template,
    phase_suggestions,
    template_categories,
)
from journey.web.schemas import JourneyRequest, SuggestionApplyRequest

router = APIRouter(prefix="/api/phase-templates", tags=["phase-templates"])


def parse_journey(data: dict[str, Any]) -> JourneyData:
    """Build a JourneyData from a request payload or fail with 422."""
    try:
        return JourneyData.from_dict(data)
    except (KeyError, ValueError, TypeError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid journey: {e}",
        )


@router.get("")
async def list_phase_templates(
    grade_level: GradeLevel = GradeLevel.MIDDLE,
    category: str = "all",
    query: str = "",
) -> dict[str, Any]:
    """Project templates for a grade level."""
    templates = [t.to_dict() for t in filter_templates(grade_level, category, query)]
    return {"templates": templates, "categories": template_categories(), "count": len(templates)}


@router.get("/suggestions")
async def suggestions(
    phase: PhaseType, subject: str, grade_level: GradeLevel = GradeLevel.MIDDLE
) -> dict[str, Any]:
    """Starter content for one phase."""
    return phase_suggestions(phase, grade_level, subject).to_dict()


@router.post("/suggestions/apply")
async def apply_suggestions(body: SuggestionApplyRequest) -> dict[str, Any]:
    """Bulk add selected suggestions (all when none are named) to a phase."""
    journey = parse_journey(body.journey)
    try:
        phase = PhaseType(body.phase.upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown phase: {body.phase}",
        )
    content = phase_suggestions(phase, journey.grade_level, body.subject)
    editor = JourneyEditor(journey)
    updated = editor.bulk_add(PHASE_ORDER.index(phase), *content.build(set(body.items) or None))
    return updated.to_dict()


@router.get("/{template_id}")
async def get_one(template_id: str) -> dict[str, Any]:
    template = get_phase_template(template_id)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Phase template '{template_id}' not found",
        )
    return template.to_dict()


@router.post("/{template_id}/apply")
async def apply(template_id: str, body: JourneyRequest) -> dict[str, Any]:
    """Append a template's content to every phase of a journey."""
    template = get_phase_template(template_id)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Phase template '{template_id}' not found",
        )
    editor = JourneyEditor(parse_journey(body.journey))
    return editor.apply_template(template).to_dict()
