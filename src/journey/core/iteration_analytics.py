"""Iteration analytics module.

Responsibilities (F4):
- Compute velocity, efficiency and per-phase iteration metrics
- Turn metrics into prioritized insights for the student or teacher
- Bucket iterations by week for the velocity chart
- Build KPI cards

Time units: minutes; a working day is 8 hours and a working week 40.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

import structlog

from journey.core.iterations import IterationEvent
from journey.core.phases import PHASE_NAMES, CreativePhase, PhaseType, is_phase_complete
from journey.utils.numbers import round_half_up
from journey.utils.time_utils import (
    MINUTES_PER_WORKDAY,
    MINUTES_PER_WORKWEEK,
    SECONDS_PER_WEEK,
    parse_iso,
    utc_now,
)

logger = structlog.get_logger(__name__)

InsightType = Literal["success", "warning", "info", "recommendation"]
Impact = Literal["high", "medium", "low"]

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class PhaseMetrics:
    phase: PhaseType
    iterations: int
    time_spent: int
    efficiency: int
    completion_rate: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "iterations": self.iterations,
            "time_spent": self.time_spent,
            "efficiency": self.efficiency,
            "completion_rate": self.completion_rate,
        }


@dataclass
class IterationMetrics:
    total_iterations: int
    total_time: int
    avg_iteration_time: float
    velocity: float  # Iterations per week
    efficiency: int  # Planned / (planned + iteration time), percent
    type_distribution: dict[str, int] = field(default_factory=dict)
    phase_metrics: list[PhaseMetrics] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_iterations": self.total_iterations,
            "total_time": self.total_time,
            "avg_iteration_time": self.avg_iteration_time,
            "velocity": self.velocity,
            "efficiency": self.efficiency,
            "type_distribution": dict(self.type_distribution),
            "phase_metrics": [p.to_dict() for p in self.phase_metrics],
        }


@dataclass
class IterationInsight:
    id: str
    type: str  # InsightType
    title: str
    description: str
    impact: str  # Impact
    action: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "impact": self.impact,
            "action": self.action,
        }


@dataclass
class KPI:
    label: str
    value: str | int
    color: str
    change: int | None = None
    trend: Literal["up", "down", "stable"] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "value": self.value,
            "color": self.color,
            "change": self.change,
            "trend": self.trend,
        }


# =============================================================================
# METRICS
# =============================================================================


def _phase_completion_rate(phase: CreativePhase) -> int:
    if is_phase_complete(phase):
        return 100
    return round_half_up(
        (
            (len(phase.objectives) / 2) * 0.4
            + (len(phase.activities) / 2) * 0.4
            + len(phase.deliverables) * 0.2
        )
        * 100
    )


def iteration_metrics(
    iterations: list[IterationEvent],
    phases: list[CreativePhase],
    project_duration: int,
    start_date: datetime | str,
    now: datetime | None = None,
) -> IterationMetrics:
    """Compute iteration velocity, efficiency and per-phase metrics.

    Args:
        iterations: Iteration history
        phases: Journey phases (allocation drives phase efficiency)
        project_duration: Project length in weeks
        start_date: Project start
        now: Reference time (defaults to current UTC time)
    """
    now = parse_iso(now or utc_now())
    total = len(iterations)
    total_time = sum(e.duration for e in iterations)
    avg_time = total_time / total if total else 0

    elapsed = (now - parse_iso(start_date)).total_seconds()
    weeks_since_start = max(1, int(elapsed // SECONDS_PER_WEEK))
    velocity = total / weeks_since_start

    planned = project_duration * MINUTES_PER_WORKWEEK
    if planned + total_time > 0:
        efficiency = round_half_up(planned / (planned + total_time) * 100)
    else:
        efficiency = 100

    distribution: dict[str, int] = {}
    for event in iterations:
        kind = event.iteration_type or "quick_loop"
        distribution[kind] = distribution.get(kind, 0) + 1

    phase_metrics = []
    for phase in phases:
        to_phase = [e for e in iterations if e.to_phase == phase.type]
        phase_time = sum(e.duration for e in to_phase)
        budget = phase.allocation * planned
        phase_metrics.append(
            PhaseMetrics(
                phase=phase.type,
                iterations=len(to_phase),
                time_spent=phase_time,
                efficiency=(
                    round_half_up(budget / (budget + phase_time) * 100) if phase_time > 0 else 100
                ),
                completion_rate=_phase_completion_rate(phase),
            )
        )

    return IterationMetrics(
        total_iterations=total,
        total_time=total_time,
        avg_iteration_time=avg_time,
        velocity=velocity,
        efficiency=efficiency,
        type_distribution=distribution,
        phase_metrics=phase_metrics,
    )


# =============================================================================
# INSIGHTS
# =============================================================================


def iteration_insights(
    metrics: IterationMetrics,
    iterations: list[IterationEvent],
    phases: list[CreativePhase],
    current_phase: int,
) -> list[IterationInsight]:
    """Rule-based insights, in a fixed rule order."""
    results: list[IterationInsight] = []
    total = len(iterations)

    if metrics.velocity > 2:
        results.append(
            IterationInsight(
                id="high-velocity",
                type="warning",
                title="High Iteration Frequency",
                description=(
                    f"You're averaging {metrics.velocity:.1f} iterations per week. "
                    "Consider more thorough planning in each phase."
                ),
                impact="high",
                action="Review planning process",
            )
        )
    elif metrics.velocity < 0.5 and total > 0:
        results.append(
            IterationInsight(
                id="good-velocity",
                type="success",
                title="Stable Progress",
                description="Your iteration rate suggests good initial planning and steady progress.",
                impact="medium",
            )
        )

    if metrics.efficiency < 70:
        results.append(
            IterationInsight(
                id="low-efficiency",
                type="warning",
                title="Timeline Impact",
                description=(
                    f"Iterations have extended your timeline by {100 - metrics.efficiency}%. "
                    "Consider adjusting expectations."
                ),
                impact="high",
                action="Update project timeline",
            )
        )

    bottleneck = next((p for p in metrics.phase_metrics if p.iterations > total * 0.4), None)
    if bottleneck is not None:
        results.append(
            IterationInsight(
                id="phase-bottleneck",
                type="warning",
                title=f"{PHASE_NAMES[bottleneck.phase]} Phase Bottleneck",
                description=(
                    f"{bottleneck.iterations} iterations returned to this phase. "
                    "Focus on clarifying requirements here."
                ),
                impact="high",
                action="Schedule review meeting",
            )
        )

    if metrics.type_distribution.get("complete_restart", 0) > 1:
        results.append(
            IterationInsight(
                id="multiple-restarts",
                type="warning",
                title="Multiple Complete Restarts",
                description="Consider breaking down the project into smaller, more manageable pieces.",
                impact="high",
                action="Reassess project scope",
            )
        )

    completed = [
        p
        for i, p in enumerate(metrics.phase_metrics)
        if i < current_phase and p.completion_rate == 100
    ]
    if completed:
        count = len(completed)
        results.append(
            IterationInsight(
                id="phases-complete",
                type="success",
                title=f"{count} Phase{'s' if count != 1 else ''} Successfully Completed",
                description="Great progress! Keep maintaining this momentum.",
                impact="medium",
            )
        )

    if current_phase == 0 and total == 0:
        results.append(
            IterationInsight(
                id="early-stage",
                type="info",
                title="Early Stage Project",
                description="Focus on thorough analysis to minimize future iterations.",
                impact="low",
            )
        )

    if metrics.avg_iteration_time > 3 * MINUTES_PER_WORKDAY:
        results.append(
            IterationInsight(
                id="long-iterations",
                type="recommendation",
                title="Consider Smaller Iterations",
                description=(
                    "Your iterations average over 3 days. "
                    "Try breaking them into smaller, quicker loops."
                ),
                impact="medium",
                action="Review iteration planning",
            )
        )

    logger.debug("iteration_insights_generated", insights=[r.id for r in results])
    return results


# =============================================================================
# CHARTS AND KPIS
# =============================================================================


def format_work_time(minutes: float) -> str:
    """'Nd Nh' with 8-hour days, or 'Nh Nm' below a day."""
    minutes = int(minutes)
    hours = minutes // 60
    days = hours // 8
    if days > 0:
        return f"{days}d {hours % 8}h"
    return f"{hours}h {minutes % 60}m"


def velocity_by_week(
    iterations: list[IterationEvent], now: datetime | None = None, limit: int = 8
) -> list[dict[str, Any]]:
    """Iteration counts per week, counted back from now, oldest bucket first."""
    now = parse_iso(now or utc_now())
    weekly: dict[int, int] = {}
    for event in iterations:
        weeks_ago = int((now - parse_iso(event.timestamp)).total_seconds() // SECONDS_PER_WEEK)
        weekly[weeks_ago] = weekly.get(weeks_ago, 0) + 1

    buckets = [{"week": f"Week {week + 1}", "count": weekly[week]} for week in sorted(weekly)]
    buckets.reverse()
    return buckets[:limit]


def iteration_kpis(metrics: IterationMetrics) -> list[KPI]:
    fast = metrics.velocity > 1.5
    slow = metrics.efficiency < 80
    return [
        KPI(
            label="Iteration Velocity",
            value=f"{metrics.velocity:.1f}/week",
            change=-15 if fast else 10,
            trend="down" if fast else "up",
            color="red" if fast else "green",
        ),
        KPI(
            label="Project Efficiency",
            value=f"{metrics.efficiency}%",
            change=-20 if slow else 5,
            trend="down" if slow else "stable",
            color="orange" if slow else "green",
        ),
        KPI(
            label="Avg. Resolution Time",
            value=format_work_time(metrics.avg_iteration_time),
            trend="stable",
            color="blue",
        ),
        KPI(label="Total Iterations", value=metrics.total_iterations, color="purple"),
    ]
