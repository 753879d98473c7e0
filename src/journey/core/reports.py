"""Report generation module.

Responsibilities (F7):
- Report templates (built-in, grade-level and custom)
- Report configuration built step by step (template, students, sections, settings)
- Collect the report data for the selected students
- Render reports as JSON, CSV, HTML, PDF or DOCX and save them to data/reports/

Output structure (JSON):
{
    "$schema": "report_v1",
    "config": {...},
    "metadata": {"generated_at": "...", "template": "...", ...},
    "sections": {"progress-overview": [...], ...},
    "students": [...],
    ...
}

PDF (reportlab) and DOCX (python-docx) are rendered to bytes from the
same section rows as the text formats.
"""

from __future__ import annotations

import csv
import html
import io
import json
import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Literal

import structlog
from docx import Document
from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from journey.core.analytics import AnalyticsReport
from journey.core.assessment import Assessment
from journey.core.iterations import IterationEvent
from journey.core.peer_review import PeerReview, Student
from journey.core.phases import PHASE_NAMES, GradeLevel
from journey.core.student_progress import StudentProgress
from journey.utils.numbers import mean, round_half_up
from journey.utils.time_utils import parse_iso, utc_now

logger = structlog.get_logger(__name__)

ReportFormat = Literal["pdf", "csv", "json", "docx", "html"]
DataSource = Literal["progress", "assessments", "peers", "analytics", "iterations"]
BuilderStep = Literal["template", "students", "sections", "settings", "review"]

REPORT_FORMATS: list[str] = ["pdf", "csv", "json", "docx", "html"]
BUILDER_STEPS: list[str] = ["template", "students", "sections", "settings", "review"]
DEFAULT_RANGE_DAYS = 30

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ReportSection:
    id: str
    name: str
    description: str
    required: bool
    data_source: str  # DataSource
    visualizations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "required": self.required,
            "data_source": self.data_source,
            "visualizations": list(self.visualizations),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReportSection:
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            description=data.get("description", ""),
            required=bool(data.get("required", False)),
            data_source=data.get("data_source", "progress"),
            visualizations=list(data.get("visualizations", [])),
        )


@dataclass
class ReportTemplate:
    id: str
    name: str
    description: str
    type: str  # individual | classroom | parent | portfolio | summary
    sections: list[ReportSection]
    format: list[str]
    grade_level: GradeLevel | None = None
    customizable: bool = True

    def section(self, section_id: str) -> ReportSection | None:
        return next((s for s in self.sections if s.id == section_id), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "sections": [s.to_dict() for s in self.sections],
            "format": list(self.format),
            "grade_level": self.grade_level.value if self.grade_level else None,
            "customizable": self.customizable,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReportTemplate:
        grade = data.get("grade_level")
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            description=data.get("description", ""),
            type=data.get("type", "individual"),
            sections=[ReportSection.from_dict(s) for s in data.get("sections", [])],
            format=list(data.get("format", ["pdf"])),
            grade_level=GradeLevel(grade) if grade else None,
            customizable=bool(data.get("customizable", True)),
        )


@dataclass
class ReportConfiguration:
    template_id: str
    title: str
    date_start: str
    date_end: str
    include_students: list[str]
    sections: list[str]
    format: str  # ReportFormat
    subtitle: str | None = None
    customizations: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "template_id": self.template_id,
            "title": self.title,
            "subtitle": self.subtitle,
            "date_range": {"start": self.date_start, "end": self.date_end},
            "include_students": list(self.include_students),
            "sections": list(self.sections),
            "format": self.format,
            "customizations": dict(self.customizations),
        }


@dataclass
class ReportData:
    """Everything a report may show, restricted to the selected students."""

    metadata: dict[str, Any]
    students: list[Student]
    progress: list[StudentProgress]
    assessments: list[Assessment]
    peer_reviews: list[PeerReview]
    iterations: list[IterationEvent]
    analytics: AnalyticsReport | None = None


@dataclass
class ReportResult:
    """Result of writing a report to disk."""

    success: bool
    report_path: Path | None
    message: str
    warnings: list[str] = field(default_factory=list)


class ReportGenerationError(Exception):
    """Report cannot be produced in the requested format."""

    pass


# =============================================================================
# TEMPLATES
# =============================================================================


def _section(id: str, name: str, description: str, required: bool, source: str, *vis: str):
    return ReportSection(id, name, description, required, source, list(vis))


REPORT_TEMPLATES: list[ReportTemplate] = [
    ReportTemplate(
        id="individual-comprehensive",
        name="Individual Student Report",
        description="Comprehensive progress report for individual student",
        type="individual",
        sections=[
            _section(
                "progress-overview",
                "Progress Overview",
                "Overall progress and phase completion",
                True,
                "progress",
                "progress",
                "chart",
            ),
            _section(
                "assessment-results",
                "Assessment Results",
                "Detailed assessment scores and feedback",
                True,
                "assessments",
                "table",
                "chart",
            ),
            _section(
                "peer-feedback",
                "Peer Feedback",
                "Feedback received from peers",
                False,
                "peers",
                "text",
                "badge",
            ),
            _section(
                "iteration-history",
                "Learning Iterations",
                "History of iterations and improvements",
                False,
                "iterations",
                "timeline",
                "text",
            ),
        ],
        format=["pdf", "docx"],
    ),
    ReportTemplate(
        id="classroom-summary",
        name="Classroom Summary Report",
        description="Overview of entire classroom performance",
        type="classroom",
        sections=[
            _section(
                "class-progress",
                "Class Progress Overview",
                "Overall classroom progress statistics",
                True,
                "analytics",
                "chart",
                "table",
            ),
            _section(
                "student-rankings",
                "Student Performance",
                "Individual student performance summary",
                True,
                "progress",
                "table",
                "chart",
            ),
            _section(
                "insights",
                "Key Insights",
                "Predictive insights and recommendations",
                True,
                "analytics",
                "text",
            ),
        ],
        format=["pdf", "csv"],
    ),
    ReportTemplate(
        id="parent-summary",
        name="Parent-Friendly Report",
        description="Simple, clear report for parents",
        type="parent",
        sections=[
            _section(
                "child-progress",
                "Your Child's Progress",
                "Easy-to-understand progress summary",
                True,
                "progress",
                "progress",
                "text",
            ),
            _section(
                "strengths-growth",
                "Strengths & Growth Areas",
                "What your child excels at and areas for growth",
                True,
                "assessments",
                "text",
                "badge",
            ),
            _section(
                "next-steps",
                "What's Next",
                "Upcoming activities and how to support at home",
                True,
                "analytics",
                "text",
            ),
        ],
        format=["pdf", "html"],
        customizable=False,
    ),
    ReportTemplate(
        id="portfolio-showcase",
        name="Student Portfolio",
        description="Showcase of student work and achievements",
        type="portfolio",
        sections=[
            _section(
                "achievements",
                "Achievements & Awards",
                "Badges and recognitions earned",
                True,
                "assessments",
                "badge",
                "text",
            ),
            _section(
                "work-samples",
                "Work Samples",
                "Examples of student work from each phase",
                True,
                "progress",
                "text",
            ),
            _section(
                "reflections",
                "Student Reflections",
                "Student's thoughts on their learning journey",
                False,
                "assessments",
                "text",
            ),
        ],
        format=["pdf", "html"],
    ),
]


# Grade-level templates are individual reports offered as PDF only
GRADE_LEVEL_TEMPLATES: dict[GradeLevel, list[ReportTemplate]] = {
    GradeLevel.ELEMENTARY: [
        ReportTemplate(
            id="elementary-progress",
            name="Learning Adventure Report",
            description="Fun, visual progress report for young learners",
            type="individual",
            sections=[
                _section(
                    "learning-journey",
                    "My Learning Adventure",
                    "Visual journey through the creative process",
                    True,
                    "progress",
                    "progress",
                    "badge",
                ),
                _section(
                    "superpowers",
                    "My Superpowers",
                    "Strengths and special abilities discovered",
                    True,
                    "assessments",
                    "badge",
                    "text",
                ),
            ],
            format=["pdf"],
            grade_level=GradeLevel.ELEMENTARY,
        )
    ],
    GradeLevel.MIDDLE: [
        ReportTemplate(
            id="middle-portfolio",
            name="Creative Process Portfolio",
            description="Comprehensive portfolio showcasing growth",
            type="individual",
            sections=[
                _section(
                    "project-showcase",
                    "Project Showcase",
                    "Highlighted work from each phase",
                    True,
                    "progress",
                    "text",
                    "timeline",
                ),
                _section(
                    "collaboration-impact",
                    "Collaboration & Impact",
                    "Teamwork and peer contributions",
                    True,
                    "peers",
                    "text",
                    "badge",
                ),
            ],
            format=["pdf"],
            grade_level=GradeLevel.MIDDLE,
        )
    ],
    GradeLevel.HIGH: [
        ReportTemplate(
            id="high-professional",
            name="Professional Portfolio",
            description="Industry-style portfolio and performance review",
            type="individual",
            sections=[
                _section(
                    "executive-summary",
                    "Executive Summary",
                    "High-level overview of achievements",
                    True,
                    "analytics",
                    "text",
                    "chart",
                ),
                _section(
                    "skill-development",
                    "Skill Development Trajectory",
                    "Professional skills gained and demonstrated",
                    True,
                    "assessments",
                    "chart",
                    "table",
                ),
            ],
            format=["pdf"],
            grade_level=GradeLevel.HIGH,
        )
    ],
}


def available_templates(
    grade_level: GradeLevel | str, custom: list[ReportTemplate] | None = None
) -> list[ReportTemplate]:
    """Built-in, grade-level and custom templates usable at this grade."""
    grade = GradeLevel(grade_level)
    candidates = [*REPORT_TEMPLATES, *GRADE_LEVEL_TEMPLATES[grade], *(custom or [])]
    return [t for t in candidates if t.grade_level is None or t.grade_level == grade]


# =============================================================================
# BUILDER
# =============================================================================


class ReportBuilder:
    """Step-by-step report configuration.

    Usage:
        builder = ReportBuilder(students, progress, ..., grade_level="middle")
        builder.select_template("classroom-summary")
        builder.toggle_student("s1")
        config = builder.final_config()
    """

    def __init__(
        self,
        students: list[Student],
        progress: list[StudentProgress],
        assessments: list[Assessment],
        peer_reviews: list[PeerReview],
        iterations: list[IterationEvent],
        analytics: AnalyticsReport | None,
        grade_level: GradeLevel | str,
        project_duration: int,
        current_week: int,
        custom_templates: list[ReportTemplate] | None = None,
    ):
        self.students = students
        self.progress = progress
        self.assessments = assessments
        self.peer_reviews = peer_reviews
        self.iterations = iterations
        self.analytics = analytics
        self.grade_level = GradeLevel(grade_level)
        self.project_duration = project_duration
        self.current_week = current_week
        self.templates = available_templates(self.grade_level, custom_templates)

        self.template: ReportTemplate | None = None
        self.title: str = ""
        self.subtitle: str | None = None
        self.format: str = "pdf"
        self.include_students: list[str] = []
        self.sections: list[str] = []
        self.date_range: tuple[str, str] | None = None
        self.customizations: dict[str, Any] = {
            "include_images": True,
            "include_comments": True,
            "parent_friendly": False,
        }
        self.step: str = "template"

    def select_template(self, template_id: str) -> bool:
        """Pick a template; unknown ids leave the builder unchanged."""
        template = next((t for t in self.templates if t.id == template_id), None)
        if template is None:
            logger.warning("report_template_not_found", template_id=template_id)
            return False
        self.template = template
        self.title = template.name
        self.sections = [s.id for s in template.sections if s.required]
        self.format = template.format[0]
        self.step = "students"
        return True

    def toggle_section(self, section_id: str) -> None:
        if section_id in self.sections:
            self.sections = [s for s in self.sections if s != section_id]
        else:
            self.sections = [*self.sections, section_id]

    def toggle_student(self, student_id: str) -> None:
        if student_id in self.include_students:
            self.include_students = [s for s in self.include_students if s != student_id]
        else:
            self.include_students = [*self.include_students, student_id]

    def select_all_students(self) -> None:
        self.include_students = [s.id for s in self.students]

    def set_format(self, fmt: str) -> None:
        if fmt not in REPORT_FORMATS:
            raise ValueError(f"Unsupported report format: {fmt}")
        self.format = fmt

    def go_to(self, step: str) -> None:
        if step not in BUILDER_STEPS:
            raise ValueError(f"Unknown builder step: {step}")
        self.step = step

    def step_progress(self) -> float:
        return (BUILDER_STEPS.index(self.step) + 1) / len(BUILDER_STEPS) * 100

    def _selected_students(self) -> list[Student]:
        if not self.include_students:
            return list(self.students)
        return [s for s in self.students if s.id in self.include_students]

    def report_data(self, now: datetime | None = None) -> ReportData | None:
        """Data for the selected students, or None before a template is chosen."""
        if self.template is None:
            return None

        students = self._selected_students()
        ids = {s.id for s in students}
        selected_progress = [p for p in self.progress if p.student_id in ids]
        own_iteration_ids = {e.id for p in selected_progress for e in p.iteration_events}

        analytics = None
        if self.analytics is not None:
            analytics = replace(
                self.analytics,
                individual=[a for a in self.analytics.individual if a.student_id in ids],
            )

        return ReportData(
            metadata={
                "generated_at": parse_iso(now or utc_now()).isoformat(),
                "template": self.template.name,
                "student_count": len(students),
                "project_week": self.current_week,
                "total_weeks": self.project_duration,
                "grade_level": self.grade_level.value,
            },
            students=students,
            progress=selected_progress,
            assessments=[a for a in self.assessments if a.student_id in ids],
            peer_reviews=[r for r in self.peer_reviews if r.reviewee_id in ids],
            iterations=[e for e in self.iterations if e.id in own_iteration_ids],
            analytics=analytics,
        )

    def _config(self, include: list[str], fmt: str, now: datetime | None) -> ReportConfiguration:
        if self.template is None:
            raise ReportGenerationError("Select a report template first")
        if self.date_range is not None:
            start, end = self.date_range
        else:
            end_dt = parse_iso(now or utc_now())
            start, end = (end_dt - timedelta(days=DEFAULT_RANGE_DAYS)).isoformat(), end_dt.isoformat()
        return ReportConfiguration(
            template_id=self.template.id,
            title=self.title or self.template.name,
            subtitle=self.subtitle,
            date_start=start,
            date_end=end,
            include_students=include,
            sections=list(self.sections),
            format=fmt,
            customizations=dict(self.customizations),
        )

    def final_config(self, now: datetime | None = None) -> ReportConfiguration:
        """Configuration to generate; every student when none is selected."""
        include = list(self.include_students) or [s.id for s in self.students]
        return self._config(include, self.format, now)

    def preview_config(self, now: datetime | None = None) -> ReportConfiguration:
        """HTML configuration; previews the first student when none is selected."""
        include = list(self.include_students) or [s.id for s in self.students[:1]]
        return self._config(include, "html", now)


# =============================================================================
# RENDERING
# =============================================================================


def _student_name(data: ReportData, student_id: str) -> str:
    return next((s.name for s in data.students if s.id == student_id), student_id)


def _progress_rows(data: ReportData) -> list[dict[str, Any]]:
    by_student = {p.student_id: p for p in data.progress}
    rows = []
    for student in data.students:
        progress = by_student.get(student.id)
        rows.append(
            {
                "student_id": student.id,
                "student": student.name,
                "overall_progress": progress.overall_progress if progress else 0,
                "current_phase": PHASE_NAMES[progress.current_phase_type] if progress else "",
                "time_spent": sum(p.time_spent for p in progress.phase_progress) if progress else 0,
            }
        )
    return rows


def _assessment_rows(data: ReportData) -> list[dict[str, Any]]:
    return [
        {
            "student_id": a.student_id,
            "student": a.student_name or _student_name(data, a.student_id),
            "rubric_id": a.rubric_id,
            "percentage": a.percentage,
            "status": a.status,
            "strengths": list(a.strengths),
            "improvements": list(a.improvements),
        }
        for a in data.assessments
    ]


def _peer_rows(data: ReportData) -> list[dict[str, Any]]:
    rows = []
    for review in data.peer_reviews:
        scores = [r.score for r in review.ratings]
        rows.append(
            {
                "student_id": review.reviewee_id,
                "student": review.reviewee_name or _student_name(data, review.reviewee_id),
                "reviewer": "Anonymous" if review.anonymous else review.reviewer_name,
                "average_rating": round_half_up(mean(scores), 1),
                "feedback": [f.content for f in review.feedback],
                "recognition": [r.type for r in review.recognition],
            }
        )
    return rows


def _iteration_rows(data: ReportData) -> list[dict[str, Any]]:
    return [
        {
            "date": e.timestamp,
            "from": PHASE_NAMES[e.from_phase],
            "to": PHASE_NAMES[e.to_phase],
            "type": e.iteration_type or "",
            "reason": e.reason,
            "duration": e.duration,
        }
        for e in data.iterations
    ]


def _analytics_rows(data: ReportData) -> list[dict[str, Any]]:
    if data.analytics is None:
        return []
    classroom = data.analytics.classroom
    rows: list[dict[str, Any]] = [
        {
            "metric": "average_progress",
            "value": round_half_up(classroom.average_progress),
        },
        {"metric": "total_students", "value": classroom.total_students},
        {"metric": "risk_students", "value": len(classroom.risk_students)},
        {"metric": "top_performers", "value": len(classroom.top_performers)},
    ]
    for insight in data.analytics.insights:
        rows.append(
            {
                "metric": f"insight:{insight.type}",
                "value": insight.title,
                "description": insight.description,
                "recommendations": list(insight.recommendations),
            }
        )
    return rows


_SECTION_BUILDERS = {
    "progress": _progress_rows,
    "assessments": _assessment_rows,
    "peers": _peer_rows,
    "iterations": _iteration_rows,
    "analytics": _analytics_rows,
}


def section_rows(data: ReportData, section: ReportSection) -> list[dict[str, Any]]:
    return _SECTION_BUILDERS[section.data_source](data)


def _selected_sections(template: ReportTemplate, config: ReportConfiguration) -> list[ReportSection]:
    return [s for s in template.sections if s.id in config.sections]


def _render_json(data: ReportData, config: ReportConfiguration, sections: list[ReportSection]) -> str:
    document = {
        "$schema": "report_v1",
        "config": config.to_dict(),
        "metadata": data.metadata,
        "students": [s.to_dict() for s in data.students],
        "sections": {s.id: section_rows(data, s) for s in sections},
    }
    if data.analytics is not None:
        document["analytics"] = data.analytics.to_dict()
    return json.dumps(document, indent=2, ensure_ascii=False)


def _cell(value: Any) -> str:
    if isinstance(value, list):
        return "; ".join(str(v) for v in value)
    return str(value)


def _render_csv(data: ReportData, sections: list[ReportSection]) -> str:
    """One block per section: a section,<id> line followed by its table."""
    buffer = io.StringIO()
    for idx, section in enumerate(sections):
        rows = section_rows(data, section)
        if idx > 0:
            buffer.write("\n")
        buffer.write(f"section,{section.id}\n")
        if not rows:
            continue
        writer = csv.DictWriter(buffer, fieldnames=_headers(rows), lineterminator="\n")
        writer.writeheader()
        for row in rows:
            writer.writerow({k: _cell(v) for k, v in row.items()})
    return buffer.getvalue()


def _headers(rows: list[dict[str, Any]]) -> list[str]:
    headers: list[str] = []
    for row in rows:
        headers.extend(k for k in row if k not in headers)
    return headers


def _byline(config: ReportConfiguration) -> str:
    school = config.customizations.get("school_name")
    teacher = config.customizations.get("teacher_name")
    return " - ".join(v for v in (school, teacher) if v)


def _meta_line(data: ReportData, separator: str = " - ") -> str:
    return (
        f"Week {data.metadata['project_week']} of {data.metadata['total_weeks']}"
        f"{separator}{data.metadata['student_count']} students"
    )


def _render_html(data: ReportData, config: ReportConfiguration, sections: list[ReportSection]) -> str:
    esc = html.escape
    parts = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        f"<head><meta charset=\"utf-8\"><title>{esc(config.title)}</title></head>",
        "<body>",
        f"<h1>{esc(config.title)}</h1>",
    ]
    if config.subtitle:
        parts.append(f"<p class=\"subtitle\">{esc(config.subtitle)}</p>")
    byline = _byline(config)
    if byline:
        parts.append(f"<p class=\"byline\">{esc(byline)}</p>")
    parts.append(f"<p class=\"meta\">{_meta_line(data, ' &middot; ')}</p>")

    for section in sections:
        rows = section_rows(data, section)
        parts.append(f"<section id=\"{esc(section.id)}\">")
        parts.append(f"<h2>{esc(section.name)}</h2>")
        parts.append(f"<p>{esc(section.description)}</p>")
        if not rows:
            parts.append("<p class=\"empty\">No data for this section.</p>")
        else:
            headers = _headers(rows)
            parts.append("<table>")
            parts.append("<tr>" + "".join(f"<th>{esc(h)}</th>" for h in headers) + "</tr>")
            for row in rows:
                cells = "".join(f"<td>{esc(_cell(row.get(h, '')))}</td>" for h in headers)
                parts.append(f"<tr>{cells}</tr>")
            parts.append("</table>")
        parts.append("</section>")

    parts.extend(["</body>", "</html>"])
    return "\n".join(parts) + "\n"


def _render_pdf(data: ReportData, config: ReportConfiguration, sections: list[ReportSection]) -> bytes:
    """Landscape letter PDF with one table per section."""

    def esc(value: str) -> str:
        return html.escape(value, quote=False)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(letter),
        title=config.title,
        topMargin=0.5 * inch,
        bottomMargin=0.5 * inch,
        leftMargin=0.5 * inch,
        rightMargin=0.5 * inch,
    )
    styles = getSampleStyleSheet()
    cell_style = ParagraphStyle("ReportCell", parent=styles["Normal"], fontSize=8, leading=10)

    story: list[Any] = [Paragraph(esc(config.title), styles["Title"])]
    if config.subtitle:
        story.append(Paragraph(esc(config.subtitle), styles["Heading3"]))
    byline = _byline(config)
    if byline:
        story.append(Paragraph(esc(byline), styles["Normal"]))
    story.append(Paragraph(esc(_meta_line(data)), styles["Normal"]))

    for section in sections:
        rows = section_rows(data, section)
        story.append(Spacer(1, 0.2 * inch))
        story.append(Paragraph(esc(section.name), styles["Heading2"]))
        if section.description:
            story.append(Paragraph(esc(section.description), styles["Italic"]))
        if not rows:
            story.append(Paragraph("No data for this section.", styles["Normal"]))
            continue

        headers = _headers(rows)
        table_data = [[Paragraph(f"<b>{esc(h)}</b>", cell_style) for h in headers]]
        for row in rows:
            table_data.append([Paragraph(esc(_cell(row.get(h, ""))), cell_style) for h in headers])
        table = Table(table_data, colWidths=[doc.width / len(headers)] * len(headers), repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ]
            )
        )
        story.append(table)

    doc.build(story)
    return buffer.getvalue()


def _render_docx(data: ReportData, config: ReportConfiguration, sections: list[ReportSection]) -> bytes:
    document = Document()
    document.core_properties.title = config.title
    document.add_heading(config.title, level=0)
    if config.subtitle:
        document.add_paragraph(config.subtitle, style="Subtitle")
    byline = _byline(config)
    if byline:
        document.add_paragraph(byline)
    document.add_paragraph(_meta_line(data))

    for section in sections:
        rows = section_rows(data, section)
        document.add_heading(section.name, level=1)
        if section.description:
            document.add_paragraph(section.description)
        if not rows:
            document.add_paragraph("No data for this section.")
            continue

        headers = _headers(rows)
        table = document.add_table(rows=1, cols=len(headers))
        table.style = "Table Grid"
        for cell, header in zip(table.rows[0].cells, headers):
            cell.text = header
        for row in rows:
            for cell, header in zip(table.add_row().cells, headers):
                cell.text = _cell(row.get(header, ""))

    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def render_report(
    data: ReportData, config: ReportConfiguration, template: ReportTemplate
) -> str | bytes:
    """Render a report in the configured format.

    Returns:
        Text for json/csv/html, bytes for pdf/docx

    Raises:
        ReportGenerationError: For an unknown format
    """
    if config.format not in REPORT_FORMATS:
        raise ReportGenerationError(
            f"Format '{config.format}' is not supported; use one of {', '.join(REPORT_FORMATS)}"
        )
    sections = _selected_sections(template, config)
    if config.format == "json":
        return _render_json(data, config, sections)
    if config.format == "csv":
        return _render_csv(data, sections)
    if config.format == "pdf":
        return _render_pdf(data, config, sections)
    if config.format == "docx":
        return _render_docx(data, config, sections)
    return _render_html(data, config, sections)


def report_filename(config: ReportConfiguration, now: datetime | None = None) -> str:
    stem = re.sub(r"[^a-z0-9]+", "_", config.title.lower()).strip("_") or "report"
    return f"{stem}_{parse_iso(now or utc_now()).strftime('%Y-%m-%d')}.{config.format}"


def write_report(
    data: ReportData,
    config: ReportConfiguration,
    template: ReportTemplate,
    data_dir: Path,
    now: datetime | None = None,
) -> ReportResult:
    """Render and save a report to data_dir/reports/."""
    warnings: list[str] = []
    if not data.students:
        warnings.append("Report has no students")
    missing = [s for s in config.sections if template.section(s) is None]
    if missing:
        warnings.append(f"Unknown sections ignored: {', '.join(missing)}")

    try:
        content = render_report(data, config, template)
    except ReportGenerationError as e:
        logger.warning("report_generation_failed", format=config.format, error=str(e))
        return ReportResult(success=False, report_path=None, message=str(e), warnings=warnings)

    reports_dir = data_dir / "reports"
    reports_dir.mkdir(parents=True, exist_ok=True)
    path = reports_dir / report_filename(config, now)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")

    logger.info(
        "report_written",
        path=str(path),
        template=template.id,
        format=config.format,
        students=len(data.students),
    )
    return ReportResult(
        success=True,
        report_path=path,
        message=f"Report saved to {path}",
        warnings=warnings,
    )
