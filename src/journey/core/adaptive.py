"""Adaptive learning module.

Responsibilities (F6):
- Learning profile of a student (style, cognitive load, flow state)
- Difficulty, pacing and modality adaptation rules
- Adaptive learning path per phase from the content library
- Periodic adaptation tick driven by simulated behaviour data

The tick does not read real telemetry: behaviour samples are drawn from
an injected random.Random so runs are reproducible.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Literal

import structlog

from journey.config.app_config import load_app_config
from journey.core.analytics import LearningAnalytics
from journey.core.assessment import Assessment
from journey.core.iterations import IterationEvent
from journey.core.phases import CreativePhase, PhaseType
from journey.core.student_progress import StudentProgress
from journey.utils.numbers import clamp, mean, round_half_up
from journey.utils.time_utils import parse_iso, utc_now

logger = structlog.get_logger(__name__)

LearningStyle = Literal["visual", "auditory", "kinesthetic", "reading", "mixed"]
Modality = Literal["text", "visual", "audio", "interactive", "collaborative"]

MODALITY_PREFERENCES: dict[str, list[str]] = {
    "visual": ["visual", "interactive"],
    "auditory": ["audio", "collaborative"],
    "kinesthetic": ["interactive", "collaborative"],
    "reading": ["text", "visual"],
    "mixed": ["interactive", "visual", "audio"],
}

ZPD_MIN = 60
ZPD_MAX = 80
OPTIMAL_FLOW = 75

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class MotivationalFactor:
    type: str  # achievement | curiosity | collaboration | creativity | recognition | mastery
    strength: int  # 0-100
    triggers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "strength": self.strength, "triggers": list(self.triggers)}


@dataclass
class FlowStateIndicator:
    level: float  # 0-100
    challenge_skill_balance: int = 70
    clear_goals: int = 80
    immediate_feedback: int = 60
    concentration: int = 65
    trends: list[float] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "factors": {
                "challenge_skill_balance": self.challenge_skill_balance,
                "clear_goals": self.clear_goals,
                "immediate_feedback": self.immediate_feedback,
                "concentration": self.concentration,
            },
            "trends": list(self.trends),
        }


@dataclass
class LearningProfile:
    """Personalization state of one student."""

    student_id: str
    learning_style: str = "mixed"
    difficulty_preference: str = "steady_progress"
    pace_preference: str = "moderate"
    collaboration_style: str = "varied"
    feedback_preference: str = "checkpoint"
    motivational_factors: list[MotivationalFactor] = field(
        default_factory=lambda: [
            MotivationalFactor("achievement", 70, ["completion", "progress"]),
            MotivationalFactor("curiosity", 60, ["questions", "exploration"]),
        ]
    )
    cognitive_load: float = 50
    flow_state: FlowStateIndicator = field(
        default_factory=lambda: FlowStateIndicator(level=65, trends=[60, 65, 70, 65, 68])
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "student_id": self.student_id,
            "learning_style": self.learning_style,
            "difficulty_preference": self.difficulty_preference,
            "pace_preference": self.pace_preference,
            "collaboration_style": self.collaboration_style,
            "feedback_preference": self.feedback_preference,
            "motivational_factors": [m.to_dict() for m in self.motivational_factors],
            "cognitive_load": self.cognitive_load,
            "flow_state": self.flow_state.to_dict(),
        }


@dataclass
class AdaptationTrigger:
    condition: str  # e.g. "performance_below_60"
    action: str  # e.g. "add_scaffolding"
    magnitude: float  # 0-1


@dataclass
class AdaptiveContent:
    id: str
    title: str
    description: str
    type: str  # explanation | example | practice | challenge | reflection
    modality: str  # Modality
    difficulty: int  # 1-10
    estimated_time: int  # Minutes
    prerequisites: list[str] = field(default_factory=list)
    learning_objectives: list[str] = field(default_factory=list)
    adaptation_triggers: list[AdaptationTrigger] = field(default_factory=list)
    phase_alignment: list[PhaseType] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "modality": self.modality,
            "difficulty": self.difficulty,
            "estimated_time": self.estimated_time,
            "prerequisites": list(self.prerequisites),
            "learning_objectives": list(self.learning_objectives),
            "adaptation_triggers": [
                {"condition": t.condition, "action": t.action, "magnitude": t.magnitude}
                for t in self.adaptation_triggers
            ],
            "phase_alignment": [p.value for p in self.phase_alignment],
        }


@dataclass
class PathBranch:
    condition: str
    target_position: int  # -1 jumps to the most advanced item
    reason: str


@dataclass
class LearningPath:
    id: str
    name: str
    description: str
    content: list[AdaptiveContent]
    branches: list[PathBranch]
    current_position: int = 0
    completion: float = 0
    estimated_time: int = 0
    difficulty_progression: list[int] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.current_position >= len(self.content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "content": [c.to_dict() for c in self.content],
            "branches": [
                {"condition": b.condition, "target_position": b.target_position, "reason": b.reason}
                for b in self.branches
            ],
            "current_position": self.current_position,
            "completion": self.completion,
            "estimated_time": self.estimated_time,
            "difficulty_progression": list(self.difficulty_progression),
        }


@dataclass
class RealTimeMetrics:
    engagement: float = 75
    difficulty: float = 5
    pace: float = 1.0
    satisfaction: float = 80

    def to_dict(self) -> dict[str, Any]:
        return {
            "engagement": self.engagement,
            "difficulty": self.difficulty,
            "pace": self.pace,
            "satisfaction": self.satisfaction,
        }


@dataclass
class PerformanceAnalysis:
    average_performance: float
    engagement_score: int
    iteration_rate: float
    learning_velocity: float  # Progress points per hour
    struggling_areas: list[str]
    strength_areas: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "average_performance": self.average_performance,
            "engagement_score": self.engagement_score,
            "iteration_rate": self.iteration_rate,
            "learning_velocity": self.learning_velocity,
            "struggling_areas": list(self.struggling_areas),
            "strength_areas": list(self.strength_areas),
        }


@dataclass
class BehaviorSample:
    time_spent: float  # Minutes
    performance: float
    clicks_per_minute: float = 0
    scroll_speed: float = 0


@dataclass
class AdaptationStatus:
    is_optimal: bool
    is_improving: bool
    needs_adjustment: bool
    recommendation: str

    @property
    def label(self) -> str:
        if self.is_optimal:
            return "Optimal"
        if self.needs_adjustment:
            return "Adjusting"
        return "Monitoring"

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_optimal": self.is_optimal,
            "is_improving": self.is_improving,
            "needs_adjustment": self.needs_adjustment,
            "recommendation": self.recommendation,
            "label": self.label,
        }


# =============================================================================
# CONTENT LIBRARY
# =============================================================================


def _content(
    id: str,
    title: str,
    description: str,
    type: str,
    modality: str,
    difficulty: int,
    estimated_time: int,
    prerequisites: list[str],
    objectives: list[str],
    trigger: tuple[str, str, float],
    phase: PhaseType,
) -> AdaptiveContent:
    return AdaptiveContent(
        id=id,
        title=title,
        description=description,
        type=type,
        modality=modality,
        difficulty=difficulty,
        estimated_time=estimated_time,
        prerequisites=prerequisites,
        learning_objectives=objectives,
        adaptation_triggers=[AdaptationTrigger(*trigger)],
        phase_alignment=[phase],
    )


ADAPTIVE_CONTENT_LIBRARY: dict[PhaseType, list[AdaptiveContent]] = {
    PhaseType.ANALYZE: [
        _content(
            "analyze-intro-easy",
            "Understanding Problems",
            "Learn to break down complex problems into smaller parts",
            "explanation",
            "visual",
            2,
            10,
            [],
            ["Identify problem components", "Ask clarifying questions"],
            ("performance_below_60", "add_scaffolding", 0.8),
            PhaseType.ANALYZE,
        ),
        _content(
            "analyze-research-medium",
            "Research Strategies",
            "Explore effective methods for gathering information",
            "practice",
            "interactive",
            5,
            20,
            ["analyze-intro-easy"],
            ["Apply research methods", "Evaluate source credibility"],
            ("engagement_low", "gamify", 0.6),
            PhaseType.ANALYZE,
        ),
        _content(
            "analyze-synthesis-hard",
            "Information Synthesis",
            "Combine multiple sources into coherent insights",
            "challenge",
            "collaborative",
            8,
            30,
            ["analyze-research-medium"],
            ["Synthesize information", "Draw meaningful conclusions"],
            ("cognitive_load_high", "break_into_chunks", 0.7),
            PhaseType.ANALYZE,
        ),
    ],
    PhaseType.BRAINSTORM: [
        _content(
            "brainstorm-divergent-easy",
            "Idea Generation",
            "Learn techniques for generating many creative ideas",
            "practice",
            "interactive",
            3,
            15,
            [],
            ["Generate multiple ideas", "Suspend judgment"],
            ("creativity_low", "add_prompts", 0.8),
            PhaseType.BRAINSTORM,
        ),
        _content(
            "brainstorm-build-medium",
            "Building on Ideas",
            "Develop and expand promising concepts",
            "practice",
            "collaborative",
            5,
            25,
            ["brainstorm-divergent-easy"],
            ["Build on others' ideas", "Make connections"],
            ("collaboration_struggling", "provide_structure", 0.6),
            PhaseType.BRAINSTORM,
        ),
    ],
    PhaseType.PROTOTYPE: [
        _content(
            "prototype-plan-medium",
            "Planning Your Prototype",
            "Create a roadmap for building your solution",
            "example",
            "visual",
            4,
            20,
            [],
            ["Create implementation plans", "Identify resources needed"],
            ("overwhelmed", "simplify_scope", 0.7),
            PhaseType.PROTOTYPE,
        ),
        _content(
            "prototype-iterate-hard",
            "Rapid Iteration",
            "Learn to quickly test and improve your prototypes",
            "challenge",
            "interactive",
            7,
            35,
            ["prototype-plan-medium"],
            ["Test hypotheses", "Iterate based on feedback"],
            ("perfectionism_high", "emphasize_iteration", 0.9),
            PhaseType.PROTOTYPE,
        ),
    ],
    PhaseType.EVALUATE: [
        _content(
            "evaluate-criteria-easy",
            "Setting Success Criteria",
            "Define what makes a solution successful",
            "explanation",
            "text",
            3,
            12,
            [],
            ["Define success metrics", "Consider stakeholder needs"],
            ("abstract_thinking_low", "provide_examples", 0.8),
            PhaseType.EVALUATE,
        ),
        _content(
            "evaluate-reflect-medium",
            "Reflective Analysis",
            "Analyze your learning journey and outcomes",
            "reflection",
            "audio",
            6,
            25,
            ["evaluate-criteria-easy"],
            ["Reflect on process", "Identify learning gains"],
            ("self_awareness_low", "guided_questions", 0.7),
            PhaseType.EVALUATE,
        ),
    ],
}


# =============================================================================
# ADAPTATION RULES
# =============================================================================


def zpd_difficulty(performance: float, current_difficulty: float) -> float:
    """Keep performance inside the 60-80 zone of proximal development."""
    if performance < ZPD_MIN:
        return max(1, current_difficulty - 0.5)
    if performance > ZPD_MAX:
        return min(10, current_difficulty + 0.3)
    return current_difficulty


def flow_difficulty(flow_level: float, current_difficulty: float) -> float:
    difference = flow_level - OPTIMAL_FLOW
    if abs(difference) < 10:
        return current_difficulty
    adjustment = 0.2 if difference > 0 else -0.2
    return clamp(current_difficulty + adjustment, 1, 10)


def cognitive_load_pace(load: float, current_pace: float) -> float:
    if load > 80:
        return max(0.5, current_pace * 0.8)
    if load < 40:
        return min(2.0, current_pace * 1.2)
    return current_pace


def modality_match(learning_style: str, content: list[AdaptiveContent]) -> list[AdaptiveContent]:
    """Content in a preferred modality, most preferred modality first."""
    preferred = MODALITY_PREFERENCES.get(learning_style, ["interactive"])
    matched = [c for c in content if c.modality in preferred]
    return sorted(matched, key=lambda c: preferred.index(c.modality))


# =============================================================================
# ANALYSIS AND PATHS
# =============================================================================


def analyze_performance(
    assessments: list[Assessment],
    analytics: LearningAnalytics,
    iterations: list[IterationEvent],
    progress: StudentProgress,
) -> PerformanceAnalysis:
    recent = assessments[-3:]
    average = mean([a.percentage for a in recent]) if recent else 70
    total_time = sum(p.time_spent for p in progress.phase_progress)
    velocity = (analytics.overall_progress / total_time) * 60 if total_time > 0 else 0
    scores = [s for a in recent for s in a.scores]

    return PerformanceAnalysis(
        average_performance=average,
        engagement_score=analytics.engagement_score,
        iteration_rate=len(iterations) / max(1, len(progress.phase_progress)),
        learning_velocity=velocity,
        struggling_areas=[s.criterion_id for s in scores if s.points < 3],
        strength_areas=[s.criterion_id for s in scores if s.points >= 4],
    )


def generate_adaptive_path(
    phases: list[CreativePhase],
    current_phase: int,
    student_name: str,
    profile: LearningProfile,
    analysis: PerformanceAnalysis,
    current_difficulty: float,
    now: datetime | None = None,
) -> LearningPath:
    """Build a personalized path through the current phase's content."""
    settings = load_app_config().adaptive
    phase = phases[current_phase]
    matched = modality_match(profile.learning_style, ADAPTIVE_CONTENT_LIBRARY[phase.type])
    target = zpd_difficulty(analysis.average_performance, current_difficulty)
    suitable = [c for c in matched if abs(c.difficulty - target) <= settings.difficulty_window]
    stamp = int(parse_iso(now or utc_now()).timestamp() * 1000)

    path = LearningPath(
        id=f"adaptive-{phase.type.value}-{stamp}",
        name=f"Personalized {phase.name} Journey",
        description=f"Adapted for {student_name}'s learning style and current performance",
        content=suitable[: settings.max_path_items],
        branches=[
            PathBranch(
                condition="performance_above_85",
                target_position=-1,
                reason="High performance detected, advancing difficulty",
            ),
            PathBranch(
                condition="performance_below_60",
                target_position=0,
                reason="Need additional support, reviewing fundamentals",
            ),
        ],
        estimated_time=sum(c.estimated_time for c in suitable),
        difficulty_progression=[c.difficulty for c in suitable],
    )
    logger.debug(
        "adaptive_path_generated",
        phase=phase.type.value,
        target_difficulty=target,
        items=[c.id for c in path.content],
    )
    return path


def deliver_next_content(path: LearningPath) -> tuple[AdaptiveContent | None, LearningPath]:
    """Next content item and the advanced path; (None, path) once finished."""
    if path.finished:
        return None, path
    item = path.content[path.current_position]
    position = path.current_position + 1
    advanced = replace(path, current_position=position, completion=position / len(path.content) * 100)
    return item, advanced


def calculate_flow_state(behavior: BehaviorSample, analytics: LearningAnalytics) -> int:
    engagement_factor = analytics.engagement_score / 100
    performance_factor = min(1, behavior.performance / 80)
    time_factor = max(0, 1 - behavior.time_spent / 60)
    return round_half_up(
        (engagement_factor * 0.4 + performance_factor * 0.4 + time_factor * 0.2) * 100
    )


def update_learning_profile(
    profile: LearningProfile, behavior: BehaviorSample, analytics: LearningAnalytics
) -> LearningProfile:
    load = profile.cognitive_load
    if behavior.time_spent > 30 and behavior.performance < 60:
        load = min(100, load + 10)
    elif behavior.performance > 80:
        load = max(0, load - 5)

    level = calculate_flow_state(behavior, analytics)
    flow = replace(profile.flow_state, level=level, trends=[*profile.flow_state.trends[-4:], level])
    return replace(profile, cognitive_load=load, flow_state=flow)


def adaptation_recommendation(profile: LearningProfile, analysis: PerformanceAnalysis) -> str:
    if profile.cognitive_load > 80:
        return "High cognitive load detected. Reducing complexity and adding breaks."
    if profile.flow_state.level < 50:
        return "Flow state is low. Adjusting difficulty and improving feedback loops."
    if analysis.learning_velocity < 0.5:
        return "Learning pace is slow. Providing additional scaffolding and motivation."
    return "Learning is progressing well. Maintaining current approach with minor optimizations."


def adaptation_status(profile: LearningProfile, analysis: PerformanceAnalysis) -> AdaptationStatus:
    trend = profile.flow_state.trends[-3:]
    return AdaptationStatus(
        is_optimal=profile.flow_state.level > 70,
        is_improving=len(trend) >= 2 and trend[-1] > trend[-2],
        needs_adjustment=profile.cognitive_load > 80 or profile.flow_state.level < 50,
        recommendation=adaptation_recommendation(profile, analysis),
    )


# =============================================================================
# ENGINE
# =============================================================================


class AdaptationEngine:
    """Holds the adaptive state of one student and advances it per tick.

    Usage:
        engine = AdaptationEngine(profile, analytics, analysis, rng=random.Random(7))
        engine.tick()
    """

    def __init__(
        self,
        profile: LearningProfile,
        analytics: LearningAnalytics,
        analysis: PerformanceAnalysis,
        rng: random.Random | None = None,
        metrics: RealTimeMetrics | None = None,
    ):
        self.profile = profile
        self.analytics = analytics
        self.analysis = analysis
        self.rng = rng or random.Random()
        self.metrics = metrics or RealTimeMetrics(
            difficulty=load_app_config().adaptive.initial_difficulty
        )
        self.ticks = 0

    def sample_behavior(self) -> BehaviorSample:
        rng = self.rng
        return BehaviorSample(
            time_spent=rng.random() * 20 + 10,
            performance=self.analysis.average_performance + (rng.random() - 0.5) * 20,
            clicks_per_minute=rng.random() * 10 + 5,
            scroll_speed=rng.random() * 100 + 50,
        )

    def tick(self) -> RealTimeMetrics:
        """One adaptation step: new behaviour sample, profile and metrics."""
        behavior = self.sample_behavior()
        # Metrics react to the profile as it was before this sample
        flow_level = self.profile.flow_state.level
        load = self.profile.cognitive_load

        self.profile = update_learning_profile(self.profile, behavior, self.analytics)

        previous = self.metrics
        self.metrics = RealTimeMetrics(
            engagement=clamp(previous.engagement + (self.rng.random() - 0.5) * 10, 0, 100),
            difficulty=flow_difficulty(flow_level, previous.difficulty),
            pace=cognitive_load_pace(load, previous.pace),
            satisfaction=clamp(previous.satisfaction + (self.rng.random() - 0.5) * 5, 0, 100),
        )
        self.ticks += 1

        logger.debug(
            "adaptation_tick",
            student_id=self.profile.student_id,
            tick=self.ticks,
            flow=self.profile.flow_state.level,
            cognitive_load=self.profile.cognitive_load,
            difficulty=round(self.metrics.difficulty, 2),
        )
        return self.metrics

    def status(self) -> AdaptationStatus:
        return adaptation_status(self.profile, self.analysis)


async def run_adaptation_loop(
    engine: AdaptationEngine,
    interval: float | None = None,
    stop: asyncio.Event | None = None,
    max_ticks: int | None = None,
) -> int:
    """Tick the engine every `interval` seconds until stopped.

    Stops when `stop` is set, after `max_ticks` ticks, or when the task is
    cancelled. Returns the number of ticks run.
    """
    if interval is None:
        interval = load_app_config().adaptive.tick_interval_seconds
    stop = stop or asyncio.Event()
    count = 0

    logger.info("adaptation_loop_started", student_id=engine.profile.student_id, interval=interval)
    try:
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
                break
            except asyncio.TimeoutError:
                pass
            engine.tick()
            count += 1
            if max_ticks is not None and count >= max_ticks:
                break
    finally:
        logger.info("adaptation_loop_stopped", student_id=engine.profile.student_id, ticks=count)
    return count
