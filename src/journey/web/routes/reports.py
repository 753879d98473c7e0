"""Report endpoints (F9)."""

from typing import Any

from fastapi import APIRouter, HTTPException, Response, status

from journey.core.phases import GradeLevel
from journey.core.reports import (
    ReportBuilder,
    ReportGenerationError,
    available_templates,
    render_report,
    report_filename,
)
from journey.utils.validators import (
    AmbiguousStudentIdError,
    StudentNotFoundError,
    resolve_student_id,
)
from journey.web.routes.peer_reviews import parse_classroom
from journey.web.schemas import ReportRenderRequest, ReportRenderResponse

router = APIRouter(prefix="/api/reports", tags=["reports"])

MEDIA_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


@router.get("/templates")
async def list_report_templates(grade_level: GradeLevel = GradeLevel.MIDDLE) -> dict[str, Any]:
    """Report templates offered for a grade level."""
    templates = [t.to_dict() for t in available_templates(grade_level)]
    return {"templates": templates, "count": len(templates)}


@router.post("/render", response_model=ReportRenderResponse)
async def render(body: ReportRenderRequest) -> ReportRenderResponse | Response:
    """Render a report without saving it.

    Text formats come back as JSON; pdf and docx as the document itself.
    """
    snapshot = parse_classroom(body.classroom)
    builder = ReportBuilder(
        snapshot.students,
        snapshot.progress,
        snapshot.assessments,
        snapshot.peer_reviews,
        snapshot.iterations,
        snapshot.analytics(),
        snapshot.grade_level,
        snapshot.project_duration,
        snapshot.current_week,
    )
    if not builder.select_template(body.template_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Report template '{body.template_id}' not found",
        )

    candidates = [s.id for s in snapshot.students]
    for prefix in body.students:
        try:
            builder.toggle_student(resolve_student_id(prefix, candidates))
        except StudentNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        except AmbiguousStudentIdError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    for section_id in body.sections:
        builder.toggle_section(section_id)
    if body.title:
        builder.title = body.title

    try:
        builder.set_format(body.format)
        config = builder.final_config()
        content = render_report(builder.report_data(), config, builder.template)
    except (ValueError, ReportGenerationError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    filename = report_filename(config)
    if isinstance(content, bytes):
        return Response(
            content=content,
            media_type=MEDIA_TYPES[config.format],
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    return ReportRenderResponse(filename=filename, format=config.format, content=content)
