"""Journey editor module.

Responsibilities (F1):
- Hold the state of a creative process journey being edited
- Apply edit actions as new snapshots with undo/redo history
- Reject invalid phase content without changing state
- Bulk-add suggested content and apply phase templates
- Persist journeys to data/journeys/

Output structure (JSON):
- journey_v1 schema with phases and iteration_history arrays
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Literal

import structlog

from journey.config.app_config import load_app_config
from journey.core.iterations import IterationEvent
from journey.core.phases import (
    PHASE_ORDER,
    CreativePhase,
    GradeLevel,
    JourneyValidationError,
    PhaseActivity,
    PhaseDeliverable,
    PhaseObjective,
    PhaseTemplate,
    PhaseType,
    apply_time_allocations,
    default_phases,
    validate_activity,
    validate_deliverable,
    validate_objective,
)
from journey.utils.time_utils import now_iso, utc_now
from journey.utils.validators import generate_id

logger = structlog.get_logger(__name__)

SaveStatus = Literal["saved", "saving", "error"]

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class JourneyData:
    """A creative process journey: phases plus iteration history."""

    journey_id: str
    title: str
    grade_level: GradeLevel = GradeLevel.MIDDLE
    project_duration: int = 8  # Weeks
    current_phase: int = 0
    phases: list[CreativePhase] = field(default_factory=default_phases)
    iteration_history: list[IterationEvent] = field(default_factory=list)

    @property
    def current_phase_type(self) -> PhaseType:
        return self.phases[self.current_phase].type

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "$schema": "journey_v1",
            "journey_id": self.journey_id,
            "title": self.title,
            "grade_level": self.grade_level.value,
            "project_duration": self.project_duration,
            "current_phase": self.current_phase,
            "phases": [p.to_dict() for p in self.phases],
            "iteration_history": [e.to_dict() for e in self.iteration_history],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JourneyData:
        phases = data.get("phases")
        return cls(
            journey_id=data["journey_id"],
            title=data.get("title", ""),
            grade_level=GradeLevel(data.get("grade_level", "middle")),
            project_duration=int(data.get("project_duration", 8)),
            current_phase=int(data.get("current_phase", 0)),
            phases=[CreativePhase.from_dict(p) for p in phases] if phases else default_phases(),
            iteration_history=[
                IterationEvent.from_dict(e) for e in data.get("iteration_history", [])
            ],
        )


@dataclass
class JourneySaveResult:
    """Result of persisting a journey."""

    success: bool
    journey_path: Path | None
    message: str
    warnings: list[str] = field(default_factory=list)


class JourneyNotFoundError(Exception):
    """Journey file does not exist."""

    pass


# =============================================================================
# EDITOR
# =============================================================================


class JourneyEditor:
    """Snapshot-based editor with bounded undo/redo history.

    Every successful action pushes a new snapshot; actions taken after
    an undo discard the redo tail. History keeps at most history_limit
    snapshots, dropping the oldest.
    """

    def __init__(
        self,
        journey: JourneyData,
        history_limit: int | None = None,
        autosave_interval_ms: int | None = None,
    ):
        editor_config = load_app_config().editor
        if history_limit is None:
            history_limit = editor_config.history_limit
        if autosave_interval_ms is None:
            autosave_interval_ms = editor_config.autosave_interval_ms
        self.history_limit = history_limit
        self.autosave_interval = timedelta(milliseconds=autosave_interval_ms)
        self.history: list[JourneyData] = [journey]
        self.history_index = 0
        self.has_changes = False
        self.last_change_at: datetime | None = None
        self.save_status: SaveStatus = "saved"
        self.error: str | None = None

    @property
    def current(self) -> JourneyData:
        return self.history[self.history_index]

    @property
    def can_undo(self) -> bool:
        return self.history_index > 0

    @property
    def can_redo(self) -> bool:
        return self.history_index < len(self.history) - 1

    # -------------------------------------------------------------------------
    # History plumbing
    # -------------------------------------------------------------------------

    def _push(self, data: JourneyData) -> JourneyData:
        history = self.history[: self.history_index + 1]
        history.append(data)
        if len(history) > self.history_limit:
            history.pop(0)
        self.history = history
        self.history_index = len(history) - 1
        self._touch()
        return data

    def _touch(self) -> None:
        self.has_changes = True
        self.last_change_at = utc_now()

    def _phases_copy(self) -> list[CreativePhase]:
        return copy.deepcopy(self.current.phases)

    def _with_phase(self, phase_index: int, **changes: Any) -> JourneyData:
        phases = self._phases_copy()
        phases[phase_index] = replace(phases[phase_index], **changes)
        return self._push(replace(self.current, phases=phases))

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def set_journey(self, journey: JourneyData) -> JourneyData:
        """Replace the journey and reset history."""
        self.history = [journey]
        self.history_index = 0
        self.has_changes = False
        return journey

    def update_phase(self, phase_index: int, **updates: Any) -> JourneyData:
        return self._with_phase(phase_index, **updates)

    def add_objective(self, phase_index: int, objective: PhaseObjective) -> JourneyData:
        try:
            validate_objective(objective)
        except JourneyValidationError as e:
            logger.warning("journey_validation_rejected", field=e.field, error=e.message)
            return self.current
        phase = self.current.phases[phase_index]
        return self._with_phase(phase_index, objectives=[*phase.objectives, objective])

    def remove_objective(self, phase_index: int, objective_id: str) -> JourneyData:
        phase = self.current.phases[phase_index]
        return self._with_phase(
            phase_index, objectives=[o for o in phase.objectives if o.id != objective_id]
        )

    def add_activity(self, phase_index: int, activity: PhaseActivity) -> JourneyData:
        try:
            validate_activity(activity)
        except JourneyValidationError as e:
            logger.warning("journey_validation_rejected", field=e.field, error=e.message)
            return self.current
        phase = self.current.phases[phase_index]
        return self._with_phase(phase_index, activities=[*phase.activities, activity])

    def remove_activity(self, phase_index: int, activity_id: str) -> JourneyData:
        phase = self.current.phases[phase_index]
        return self._with_phase(
            phase_index, activities=[a for a in phase.activities if a.id != activity_id]
        )

    def add_deliverable(self, phase_index: int, deliverable: PhaseDeliverable) -> JourneyData:
        try:
            validate_deliverable(deliverable)
        except JourneyValidationError as e:
            logger.warning("journey_validation_rejected", field=e.field, error=e.message)
            return self.current
        phase = self.current.phases[phase_index]
        return self._with_phase(phase_index, deliverables=[*phase.deliverables, deliverable])

    def remove_deliverable(self, phase_index: int, deliverable_id: str) -> JourneyData:
        phase = self.current.phases[phase_index]
        return self._with_phase(
            phase_index,
            deliverables=[d for d in phase.deliverables if d.id != deliverable_id],
        )

    def bulk_add(
        self,
        phase_index: int,
        objectives: list[PhaseObjective] | None = None,
        activities: list[PhaseActivity] | None = None,
        deliverables: list[PhaseDeliverable] | None = None,
    ) -> JourneyData:
        """Add several items to one phase as a single undoable edit.

        Invalid items are skipped; nothing is pushed when none are left.
        """
        phases = self._phases_copy()
        added = self._extend_phase(phases, phase_index, objectives, activities, deliverables)
        if not added:
            return self.current
        return self._push(replace(self.current, phases=phases))

    def apply_template(self, template: PhaseTemplate) -> JourneyData:
        """Append a template's content to every phase as a single edit."""
        phases = self._phases_copy()
        added = 0
        for phase_type, content in template.phases.items():
            added += self._extend_phase(phases, PHASE_ORDER.index(phase_type), *content.build())
        logger.info(
            "journey_template_applied",
            journey_id=self.current.journey_id,
            template_id=template.id,
            items=added,
        )
        if not added:
            return self.current
        return self._push(replace(self.current, phases=phases))

    def _extend_phase(
        self,
        phases: list[CreativePhase],
        phase_index: int,
        objectives: list[PhaseObjective] | None,
        activities: list[PhaseActivity] | None,
        deliverables: list[PhaseDeliverable] | None,
    ) -> int:
        valid_objectives = _valid(objectives or [], validate_objective)
        valid_activities = _valid(activities or [], validate_activity)
        valid_deliverables = _valid(deliverables or [], validate_deliverable)
        phase = phases[phase_index]
        phases[phase_index] = replace(
            phase,
            objectives=[*phase.objectives, *valid_objectives],
            activities=[*phase.activities, *valid_activities],
            deliverables=[*phase.deliverables, *valid_deliverables],
        )
        return len(valid_objectives) + len(valid_activities) + len(valid_deliverables)

    def set_current_phase(self, phase_index: int) -> JourneyData:
        return self._push(replace(self.current, current_phase=phase_index))

    def add_iteration(self, event: IterationEvent) -> JourneyData:
        return self._push(
            replace(self.current, iteration_history=[*self.current.iteration_history, event])
        )

    def update_time_allocations(self, allocations: list[float]) -> JourneyData:
        phases = apply_time_allocations(
            self._phases_copy(), allocations, self.current.project_duration
        )
        return self._push(replace(self.current, phases=phases))

    def mark_phase_complete(self, phase_index: int) -> JourneyData:
        return self._with_phase(phase_index, completed=True)

    def undo(self) -> JourneyData:
        if self.can_undo:
            self.history_index -= 1
            self._touch()
        return self.current

    def redo(self) -> JourneyData:
        if self.can_redo:
            self.history_index += 1
            self._touch()
        return self.current

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def flush(self, on_save: Callable[[JourneyData], Any]) -> SaveStatus:
        """Hand pending changes to on_save and record the outcome.

        Args:
            on_save: Callback that persists the journey; raising marks an error

        Returns:
            The resulting save status
        """
        if not self.has_changes:
            return self.save_status

        self.save_status = "saving"
        try:
            on_save(self.current)
        except Exception as e:
            self.save_status = "error"
            self.error = str(e) or "Failed to save"
            logger.error("journey_save_failed", journey_id=self.current.journey_id, error=self.error)
            return self.save_status

        self.save_status = "saved"
        self.error = None
        self.has_changes = False
        return self.save_status

    def autosave(
        self, on_save: Callable[[JourneyData], Any], now: datetime | None = None
    ) -> SaveStatus:
        """Flush once no edit has happened for the autosave interval.

        Edits inside the interval postpone the save; the returned status
        stays as it was until the journey is quiet long enough.
        """
        if not self.has_changes:
            return self.save_status
        now = now or utc_now()
        if self.last_change_at is not None and now - self.last_change_at < self.autosave_interval:
            return self.save_status
        return self.flush(on_save)


def _valid(items: list[Any], validate: Callable[[Any], None]) -> list[Any]:
    kept = []
    for item in items:
        try:
            validate(item)
        except JourneyValidationError as e:
            logger.warning("journey_validation_rejected", field=e.field, error=e.message)
            continue
        kept.append(item)
    return kept


# =============================================================================
# PERSISTENCE
# =============================================================================


def new_journey(
    title: str,
    grade_level: GradeLevel | str = GradeLevel.MIDDLE,
    project_duration: int = 8,
) -> JourneyData:
    """Create an empty journey with the four default phases."""
    journey = JourneyData(
        journey_id=generate_id("journey"),
        title=title,
        grade_level=GradeLevel(grade_level),
        project_duration=project_duration,
    )
    # Derive initial phase durations from the default allocations
    journey.phases = apply_time_allocations(
        journey.phases, [p.allocation for p in journey.phases], project_duration
    )
    return journey


def save_journey(journey: JourneyData, data_dir: Path) -> JourneySaveResult:
    """Persist a journey to data_dir/journeys/{journey_id}.json."""
    journeys_dir = data_dir / "journeys"
    journeys_dir.mkdir(parents=True, exist_ok=True)

    payload = journey.to_dict()
    payload["saved_at"] = now_iso()

    path = journeys_dir / f"{journey.journey_id}.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)

    logger.info("journey_saved", journey_id=journey.journey_id, path=str(path))
    return JourneySaveResult(success=True, journey_path=path, message="Journey saved")


def load_journey(journey_id: str, data_dir: Path) -> JourneyData:
    """Load a journey from data_dir/journeys/.

    Raises:
        JourneyNotFoundError: If the journey file doesn't exist
    """
    path = data_dir / "journeys" / f"{journey_id}.json"
    if not path.exists():
        raise JourneyNotFoundError(f"Journey not found: {journey_id}")

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    return JourneyData.from_dict(data)
