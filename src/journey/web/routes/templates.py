"""Message template endpoints (F9)."""

from fastapi import APIRouter, HTTPException, status

from journey.core.phases import PhaseType
from journey.core.teacher_guidance import parent_message
from journey.templates.registry import get_message, list_templates
from journey.web.schemas import ParentMessageRequest, TemplateListResponse, TemplateResponse

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("", response_model=TemplateListResponse)
async def list_all() -> TemplateListResponse:
    """List available template keys."""
    keys = list_templates()
    return TemplateListResponse(templates=keys, count=len(keys))


@router.post("/parent-message", response_model=TemplateResponse)
async def render_parent_message(body: ParentMessageRequest) -> TemplateResponse:
    """Parent email draft for a student."""
    try:
        phase = PhaseType(body.phase.upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown phase: {body.phase}",
        )
    try:
        message = parent_message(
            body.template,
            student_name=body.student_name,
            phase=phase,
            teacher_name=body.teacher_name,
            support_areas=body.support_areas,
        )
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Parent template '{body.template}' not found",
        )
    return TemplateResponse.model_validate(message)


@router.get("/{key:path}", response_model=TemplateResponse)
async def get_one(key: str) -> TemplateResponse:
    """Raw template with its placeholders."""
    try:
        message = get_message(key)
    except FileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Template '{key}' not found",
        )
    return TemplateResponse.model_validate(message)
