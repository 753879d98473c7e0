"""Route handlers for Web API (F9)."""

from journey.web.routes.health import router as health_router
from journey.web.routes.rubrics import router as rubrics_router
from journey.web.routes.assessments import router as assessments_router
from journey.web.routes.peer_reviews import router as peer_reviews_router
from journey.web.routes.iterations import router as iterations_router
from journey.web.routes.analytics import router as analytics_router
from journey.web.routes.reports import router as reports_router
from journey.web.routes.templates import router as templates_router
from journey.web.routes.resources import router as resources_router
from journey.web.routes.phase_templates import router as phase_templates_router

__all__ = [
    "health_router",
    "rubrics_router",
    "assessments_router",
    "peer_reviews_router",
    "iterations_router",
    "analytics_router",
    "reports_router",
    "templates_router",
    "resources_router",
    "phase_templates_router",
]
