"""Pydantic schemas for Web API (F9).

Domain payloads (rubrics, assessments, classroom snapshots) are accepted
as plain JSON objects and parsed with the core from_dict loaders, so the
request bodies match the files the CLI reads.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# HEALTH
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    timestamp: str


# =============================================================================
# RUBRIC SCHEMAS
# =============================================================================


class RubricRequest(BaseModel):
    """Request body holding a rubric document."""

    rubric: dict[str, Any]


class RubricCalculationsResponse(BaseModel):
    total_weight: float
    max_points: int
    weighted_max_points: float
    is_weight_valid: bool


class RubricValidationResponse(BaseModel):
    """Validation result for a rubric."""

    valid: bool
    errors: list[str]
    calculations: RubricCalculationsResponse


# =============================================================================
# ASSESSMENT SCHEMAS
# =============================================================================


class AssessmentScoreRequest(BaseModel):
    rubric: dict[str, Any]
    assessment: dict[str, Any]


class AssessmentCalculationsResponse(BaseModel):
    total_points: int
    max_points: int
    percentage: int
    progress: float
    completed_criteria: int
    is_passing: bool


class AssessmentScoreResponse(BaseModel):
    """Scored assessment with generated strengths and improvements."""

    calculations: AssessmentCalculationsResponse
    strengths: list[str]
    improvements: list[str]


# =============================================================================
# CLASSROOM SCHEMAS
# =============================================================================


class ClassroomRequest(BaseModel):
    """Request body holding a classroom snapshot."""

    classroom: dict[str, Any]


class PeerStatsRequest(ClassroomRequest):
    student_id: str = Field(..., min_length=1)


class IterationStatsRequest(BaseModel):
    """Iterations plus history filters."""

    iterations: list[dict[str, Any]] = Field(default_factory=list)
    project_duration: int = Field(default=8, ge=1)
    iteration_type: str = "all"
    phase: str = "all"
    query: str = ""
    time_range: str = "all"
    sort_by: str = "date"


class IterationStatsResponse(BaseModel):
    stats: dict[str, Any]
    history: list[dict[str, str]]
    count: int


# =============================================================================
# REPORT SCHEMAS
# =============================================================================


class ReportRenderRequest(ClassroomRequest):
    """Report builder choices."""

    template_id: str = "classroom-summary"
    format: str = "json"
    students: list[str] = Field(default_factory=list)
    sections: list[str] = Field(default_factory=list)
    title: str | None = None


class ReportRenderResponse(BaseModel):
    filename: str
    format: str
    content: str


# =============================================================================
# TEMPLATE SCHEMAS
# =============================================================================


class TemplateListResponse(BaseModel):
    templates: list[str]
    count: int


class TemplateResponse(BaseModel):
    """A message template split into subject and body."""

    key: str
    subject: str
    body: str

    model_config = {"from_attributes": True}


class ParentMessageRequest(BaseModel):
    template: str
    student_name: str = Field(..., min_length=1, max_length=100)
    phase: str = "ANALYZE"
    teacher_name: str = ""
    support_areas: list[str] = Field(default_factory=list)


# =============================================================================
# RESOURCE AND PHASE TEMPLATE SCHEMAS
# =============================================================================


class ResourceListResponse(BaseModel):
    """Filtered resources with recommendations and per-category counts."""

    resources: list[dict[str, Any]]
    recommended: list[dict[str, Any]]
    categories: dict[str, int]
    count: int


class JourneyRequest(BaseModel):
    """Request body holding a journey document."""

    journey: dict[str, Any]


class SuggestionApplyRequest(JourneyRequest):
    phase: str
    subject: str = Field(..., min_length=1)
    items: list[str] = Field(default_factory=list)
