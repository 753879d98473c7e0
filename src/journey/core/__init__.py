"""Core business logic for the creative process journey.

Modules:
- phases: Creative phases, objectives, activities, deliverables
- journey_editor: Journey editing with undo/redo history
- rubric: Rubric building, validation and export
- assessment: Rubric-based scoring and insights
- peer_review: Peer review drafts, stats and summaries
- iterations: Iteration events, history filters, stats and export
- iteration_analytics: Iteration metrics, KPIs and insights
- student_progress: Per-student progress, achievements, milestones
- analytics: Individual and class analytics, predictive insights
- adaptive: Adaptive learning paths and the adaptation loop
- tutor: Skill gaps, recommendations and tutor replies
- teacher_guidance: Class patterns, actions, tips and parent emails
- reports: Report builder and rendering
- classroom: Classroom snapshot loading
"""

__all__ = [
    "phases",
    "journey_editor",
    "rubric",
    "assessment",
    "peer_review",
    "iterations",
    "iteration_analytics",
    "student_progress",
    "analytics",
    "adaptive",
    "tutor",
    "teacher_guidance",
    "reports",
    "classroom",
]
