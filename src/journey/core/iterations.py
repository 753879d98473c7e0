"""Iteration tracking module.

Responsibilities (F4):
- Describe the three kinds of iteration (quick loop, major pivot, restart)
- Suggest an iteration type from the distance between phases
- Build IterationEvent records from a documented return to an earlier phase
- Summarize, filter and export an iteration history

Output structure (JSON):
- Array of flattened rows (date, from, to, type, reason, duration, strategies, notes)
- File name: iteration-history-YYYY-MM-DD.{json,csv}
"""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Literal

import structlog

from journey.core.phases import PHASE_NAMES, PHASE_ORDER, PhaseType
from journey.utils.time_utils import (
    MINUTES_PER_WORKDAY,
    MINUTES_PER_WORKWEEK,
    iso_date,
    now_iso,
    parse_iso,
    utc_now,
)
from journey.utils.validators import generate_id

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================

IterationType = Literal["quick_loop", "major_pivot", "complete_restart"]
TimeRange = Literal["all", "week", "month"]
SortKey = Literal["date", "duration", "type"]
ExportFormat = Literal["json", "csv"]

ITERATION_TYPES: list[str] = ["quick_loop", "major_pivot", "complete_restart"]

ITERATION_OPTIONS: dict[str, dict[str, Any]] = {
    "quick_loop": {
        "title": "Quick Loop Back",
        "description": "Minor adjustments or filling gaps in understanding",
        "time_impact": "1-2 days",
        "reasons": [
            "Missing information discovered",
            "Need to clarify understanding",
            "Quick research needed",
            "Minor adjustment required",
        ],
        "strategies": [
            "Focused research sprint",
            "Expert consultation",
            "Peer knowledge sharing",
            "Quick prototype test",
        ],
    },
    "major_pivot": {
        "title": "Major Pivot",
        "description": "Significant change in approach or direction",
        "time_impact": "3-5 days",
        "reasons": [
            "Solution not feasible",
            "Major flaw discovered",
            "Stakeholder feedback requires change",
            "Resource constraints identified",
        ],
        "strategies": [
            "Reframe the problem",
            "Alternative solution exploration",
            "Stakeholder re-engagement",
            "Resource reallocation",
        ],
    },
    "complete_restart": {
        "title": "Complete Restart",
        "description": "Starting fresh with new understanding",
        "time_impact": "Full phase duration",
        "reasons": [
            "Fundamental misunderstanding",
            "Complete change in requirements",
            "Critical failure in approach",
            "New opportunity identified",
        ],
        "strategies": [
            "Full team reset meeting",
            "Comprehensive re-planning",
            "New timeline development",
            "Stakeholder realignment",
        ],
    },
}


DEFAULT_ESTIMATED_DAYS: dict[str, int] = {
    "quick_loop": 1,
    "major_pivot": 3,
    "complete_restart": 7,
}


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class IterationMetadata:
    """Details documented alongside an iteration."""

    iteration_type: str | None = None
    strategies: list[str] = field(default_factory=list)
    notes: str = ""
    week_number: int | None = None
    estimated_days: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "iteration_type": self.iteration_type,
            "strategies": list(self.strategies),
            "notes": self.notes,
            "week_number": self.week_number,
            "estimated_days": self.estimated_days,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IterationMetadata:
        return cls(
            iteration_type=data.get("iteration_type"),
            strategies=list(data.get("strategies") or []),
            notes=data.get("notes") or "",
            week_number=data.get("week_number"),
            estimated_days=data.get("estimated_days"),
        )


@dataclass
class IterationEvent:
    """A documented return from one phase to an earlier one."""

    id: str
    from_phase: PhaseType
    to_phase: PhaseType
    reason: str
    timestamp: str  # ISO format
    duration: int = 0  # Minutes
    metadata: IterationMetadata | None = None

    @property
    def iteration_type(self) -> str | None:
        return self.metadata.iteration_type if self.metadata else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "id": self.id,
            "from_phase": self.from_phase.value,
            "to_phase": self.to_phase.value,
            "reason": self.reason,
            "timestamp": self.timestamp,
            "duration": self.duration,
        }
        if self.metadata is not None:
            result["metadata"] = self.metadata.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IterationEvent:
        metadata = data.get("metadata")
        return cls(
            id=str(data.get("id") or generate_id("iter")),
            from_phase=PhaseType(data["from_phase"]),
            to_phase=PhaseType(data["to_phase"]),
            reason=data.get("reason", ""),
            timestamp=data.get("timestamp") or now_iso(),
            duration=int(data.get("duration", 0)),
            metadata=IterationMetadata.from_dict(metadata) if metadata else None,
        )


@dataclass
class IterationPattern:
    """A recognized pattern in an iteration history."""

    type: Literal["frequent_return", "escalating", "early_stage"]
    description: str
    severity: Literal["info", "warning", "success"]
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "severity": self.severity,
            "count": self.count,
        }


@dataclass
class IterationStats:
    """Summary of an iteration history."""

    total_iterations: int
    average_duration: float
    most_common_type: str | None
    most_iterated_phase: PhaseType | None
    time_impact: float  # Percentage of project time
    patterns: list[IterationPattern] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_iterations": self.total_iterations,
            "average_duration": self.average_duration,
            "most_common_type": self.most_common_type,
            "most_iterated_phase": (
                self.most_iterated_phase.value if self.most_iterated_phase else None
            ),
            "time_impact": self.time_impact,
            "patterns": [p.to_dict() for p in self.patterns],
        }


@dataclass
class IterationExportResult:
    """Result of exporting an iteration history."""

    success: bool
    export_path: Path | None
    message: str
    rows: int = 0
    warnings: list[str] = field(default_factory=list)


class IterationError(Exception):
    """Error building or exporting iterations."""

    pass


# =============================================================================
# EVENT CREATION
# =============================================================================


def suggest_iteration_type(
    from_phase: PhaseType | str, to_phase: PhaseType | str
) -> tuple[str, int]:
    """Suggest an iteration type and estimated days from the phase distance.

    Returns:
        (iteration_type, estimated_days)
    """
    distance = PHASE_ORDER.index(PhaseType(from_phase)) - PHASE_ORDER.index(PhaseType(to_phase))
    if distance >= 3:
        return "complete_restart", 7
    if distance == 2:
        return "major_pivot", 3
    return "quick_loop", 1


def create_iteration_event(
    from_phase: PhaseType | str,
    to_phase: PhaseType | str,
    *,
    selected_reason: str = "",
    custom_reason: str = "",
    iteration_type: str | None = None,
    strategies: list[str] | None = None,
    estimated_days: int | None = None,
    notes: str = "",
    week_number: int | None = None,
    now: datetime | None = None,
) -> IterationEvent:
    """Build an IterationEvent from a documented iteration.

    A custom reason wins over a selected one. Duration is
    estimated_days working days of 8 hours, in minutes.

    Raises:
        IterationError: If no reason was given or the type is unknown
    """
    reason = custom_reason or selected_reason
    if not reason:
        logger.warning("iteration_missing_reason", from_phase=str(from_phase), to_phase=str(to_phase))
        raise IterationError("Please provide a reason for the iteration")

    suggested_type, suggested_days = suggest_iteration_type(from_phase, to_phase)
    kind = iteration_type or suggested_type
    if kind not in ITERATION_OPTIONS:
        raise IterationError(f"Unknown iteration type: {kind}")

    if estimated_days is None:
        estimated_days = suggested_days if iteration_type is None else DEFAULT_ESTIMATED_DAYS[kind]

    event = IterationEvent(
        id=generate_id("iter"),
        from_phase=PhaseType(from_phase),
        to_phase=PhaseType(to_phase),
        reason=reason,
        timestamp=(now or utc_now()).isoformat(),
        duration=estimated_days * MINUTES_PER_WORKDAY,
        metadata=IterationMetadata(
            iteration_type=kind,
            strategies=list(strategies or []),
            notes=notes,
            week_number=week_number,
            estimated_days=estimated_days,
        ),
    )

    logger.info(
        "iteration_created",
        iteration_id=event.id,
        iteration_type=kind,
        from_phase=event.from_phase.value,
        to_phase=event.to_phase.value,
        duration=event.duration,
    )
    return event


# =============================================================================
# STATISTICS
# =============================================================================


def _argmax_with_default(counts: dict[str, int], default: str) -> str:
    """First key with a strictly higher count than the running best."""
    best = default
    for key, count in counts.items():
        if count > counts.get(best, 0):
            best = key
    return best


def iteration_stats(iterations: list[IterationEvent], project_duration: int) -> IterationStats:
    """Summarize an iteration history.

    Args:
        iterations: Events in chronological order
        project_duration: Project length in weeks

    Returns:
        IterationStats with counts, time impact and detected patterns
    """
    if not iterations:
        return IterationStats(
            total_iterations=0,
            average_duration=0,
            most_common_type=None,
            most_iterated_phase=None,
            time_impact=0,
        )

    type_counts = {t: 0 for t in ITERATION_TYPES}
    phase_counts = {p.value: 0 for p in PHASE_ORDER}
    total_duration = 0

    for event in iterations:
        if event.iteration_type in type_counts:
            type_counts[event.iteration_type] += 1
        phase_counts[event.to_phase.value] += 1
        total_duration += event.duration

    total = len(iterations)
    patterns: list[IterationPattern] = []

    if phase_counts[PhaseType.ANALYZE.value] > total * 0.4:
        patterns.append(
            IterationPattern(
                type="frequent_return",
                description="Frequent returns to Analyze phase suggest unclear requirements",
                severity="warning",
                count=phase_counts[PhaseType.ANALYZE.value],
            )
        )

    recent = iterations[-3:]
    if all(e.iteration_type in ("major_pivot", "complete_restart") for e in recent):
        patterns.append(
            IterationPattern(
                type="escalating",
                description="Recent iterations show escalating severity",
                severity="warning",
                count=len(recent),
            )
        )

    # Events in the first half of the history, by position
    early_count = sum(1 for i in range(total) if i < total / 2)
    if early_count > total * 0.7:
        patterns.append(
            IterationPattern(
                type="early_stage",
                description="Most iterations occurred early, indicating good problem resolution",
                severity="success",
                count=early_count,
            )
        )

    planned = project_duration * MINUTES_PER_WORKWEEK
    stats = IterationStats(
        total_iterations=total,
        average_duration=total_duration / total,
        most_common_type=_argmax_with_default(type_counts, "quick_loop"),
        most_iterated_phase=PhaseType(_argmax_with_default(phase_counts, PhaseType.ANALYZE.value)),
        time_impact=(total_duration / planned * 100) if planned > 0 else 0,
        patterns=patterns,
    )

    logger.debug(
        "iteration_stats_computed",
        total=total,
        time_impact=round(stats.time_impact, 1),
        patterns=[p.type for p in patterns],
    )
    return stats


# =============================================================================
# FILTERING
# =============================================================================


def filter_iterations(
    iterations: list[IterationEvent],
    *,
    iteration_type: str = "all",
    phase: PhaseType | str = "all",
    query: str = "",
    time_range: TimeRange = "all",
    sort_by: SortKey = "date",
    now: datetime | None = None,
) -> list[IterationEvent]:
    """Filter and sort iterations the way the history view lists them.

    Search matches reason or notes, case-insensitively. Date sort is
    newest first, duration sort longest first, type sort ascending.
    """
    filtered = list(iterations)

    if iteration_type != "all":
        filtered = [e for e in filtered if e.iteration_type == iteration_type]

    if phase != "all":
        target = PhaseType(phase)
        filtered = [e for e in filtered if e.to_phase == target]

    if query:
        needle = query.lower()
        filtered = [
            e
            for e in filtered
            if needle in e.reason.lower()
            or (e.metadata is not None and needle in e.metadata.notes.lower())
        ]

    if time_range != "all":
        days = 7 if time_range == "week" else 30
        cutoff = parse_iso(now or utc_now()) - timedelta(days=days)
        filtered = [e for e in filtered if parse_iso(e.timestamp) >= cutoff]

    if sort_by == "duration":
        filtered.sort(key=lambda e: e.duration, reverse=True)
    elif sort_by == "type":
        filtered.sort(key=lambda e: e.iteration_type or "")
    else:
        filtered.sort(key=lambda e: parse_iso(e.timestamp), reverse=True)

    return filtered


# =============================================================================
# FORMATTING AND EXPORT
# =============================================================================


def _plural(value: int, unit: str) -> str:
    return f"{value} {unit}{'s' if value != 1 else ''}"


def format_duration(minutes: int) -> str:
    """Human duration using 8-hour working days."""
    hours = minutes // 60
    days = hours // 8
    if days > 0:
        return _plural(days, "day")
    if hours > 0:
        return _plural(hours, "hour")
    return _plural(minutes, "minute")


def format_event_date(timestamp: str, now: datetime | None = None) -> str:
    """Short date like 'Mar 5', with the year when not the current one."""
    moment = parse_iso(timestamp)
    label = f"{moment:%b} {moment.day}"
    if moment.year != (now or utc_now()).year:
        label += f", {moment.year}"
    return label


def history_rows(
    iterations: list[IterationEvent], now: datetime | None = None
) -> list[dict[str, str]]:
    """Flatten iterations into export rows."""
    rows = []
    for event in iterations:
        metadata = event.metadata or IterationMetadata()
        rows.append(
            {
                "date": format_event_date(event.timestamp, now),
                "from": PHASE_NAMES[event.from_phase],
                "to": PHASE_NAMES[event.to_phase],
                "type": metadata.iteration_type or "unknown",
                "reason": event.reason,
                "duration": format_duration(event.duration),
                "strategies": ", ".join(metadata.strategies),
                "notes": metadata.notes,
            }
        )
    return rows


def export_filename(fmt: ExportFormat, now: datetime | None = None) -> str:
    return f"iteration-history-{iso_date(now)}.{fmt}"


def render_history(rows: list[dict[str, str]], fmt: ExportFormat) -> str:
    """Serialize export rows as JSON or CSV text.

    Raises:
        IterationError: If the format is not supported
    """
    if fmt == "json":
        return json.dumps(rows, indent=2, ensure_ascii=False)
    if fmt == "csv":
        buffer = io.StringIO()
        if rows:
            writer = csv.DictWriter(buffer, fieldnames=list(rows[0].keys()), lineterminator="\n")
            writer.writeheader()
            writer.writerows(rows)
        return buffer.getvalue()
    raise IterationError(f"Unsupported export format: {fmt}")


def export_history(
    iterations: list[IterationEvent],
    output_dir: Path,
    fmt: ExportFormat = "json",
    now: datetime | None = None,
) -> IterationExportResult:
    """Write an iteration history export to output_dir."""
    warnings: list[str] = []
    if not iterations:
        warnings.append("No iterations to export")

    try:
        content = render_history(history_rows(iterations, now), fmt)
    except IterationError as e:
        return IterationExportResult(success=False, export_path=None, message=str(e))

    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(fmt, now)
    path.write_text(content, encoding="utf-8")

    logger.info("iteration_history_exported", path=str(path), rows=len(iterations), format=fmt)
    return IterationExportResult(
        success=True,
        export_path=path,
        message=f"Exported {len(iterations)} iterations",
        rows=len(iterations),
        warnings=warnings,
    )
