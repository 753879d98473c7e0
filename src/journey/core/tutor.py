"""Tutor guidance module.

Responsibilities (F6):
- Tutor configuration (personality, scaffolding, feedback frequency)
- Skill levels against grade-level expectations, and skill gaps
- Personalized learning recommendations
- Canned grade-level responses to student messages

Skill levels (0-100):
    creativity        = analytics.creativity_index
    collaboration     = analytics.collaboration_score
    persistence       = analytics.persistence_metric
    critical_thinking = 0.8 * mean of the last 3 assessment percentages
    communication     = 15 * peer feedback items mentioning communicate/present/explain
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Literal

import structlog

from journey.core.analytics import LearningAnalytics
from journey.core.assessment import Assessment
from journey.core.peer_review import PeerReview
from journey.core.phases import CreativePhase, GradeLevel, PhaseType
from journey.core.student_progress import StudentProgress
from journey.utils.numbers import clamp, mean
from journey.utils.time_utils import parse_iso, utc_now

logger = structlog.get_logger(__name__)

ResponseType = Literal["question", "hint_needed", "encouragement_needed", "general"]
RecommendationType = Literal["resource", "activity", "strategy", "collaboration", "break"]

AI_RESPONSE_TEMPLATES: dict[GradeLevel, dict[str, list[str]]] = {
    GradeLevel.ELEMENTARY: {
        "encouragement": [
            "Great job exploring that idea! What else could you try?",
            "You're being so creative! I love how you're thinking about this.",
            "That's an interesting approach! What do you think might happen next?",
            "You're doing amazing work! Want to share what you discovered?",
        ],
        "hint": [
            "Here's a little hint to help you: {hint}",
            "Think about it like this: {analogy}",
            "What if you tried looking at it from a different angle?",
            "Remember when we talked about {concept}? That might help here!",
        ],
        "question_response": [
            "That's a wonderful question! Let me help you think through it.",
            "I can see you're really thinking hard about this!",
            "Great question! Here's what I think might help...",
        ],
    },
    GradeLevel.MIDDLE: {
        "encouragement": [
            "Your critical thinking skills are really developing! Keep pushing yourself.",
            "I can see you're making connections between ideas. That's excellent!",
            "You're approaching this challenge with great persistence.",
            "Your analysis is getting stronger with each iteration.",
        ],
        "hint": [
            "Consider this perspective: {hint}",
            "What patterns do you notice? {observation}",
            "Try breaking this down into smaller parts.",
            "What evidence supports your current thinking?",
        ],
        "question_response": [
            "That's a sophisticated question that shows deep thinking.",
            "Let's explore that together. What's your initial hypothesis?",
            "Your question reveals good analytical thinking.",
        ],
    },
    GradeLevel.HIGH: {
        "encouragement": [
            "Your analytical approach demonstrates mature thinking.",
            "The connections you're making show sophisticated reasoning.",
            "Your ability to synthesize information is impressive.",
            "You're demonstrating excellent metacognitive awareness.",
        ],
        "hint": [
            "Consider the broader implications: {context}",
            "What theoretical framework might apply here?",
            "How does this connect to {relevant_concept}?",
            "What would a {expert_role} think about this approach?",
        ],
        "question_response": [
            "That's an insightful question that gets to the heart of the matter.",
            "Your question demonstrates critical thinking about complex issues.",
            "That's exactly the kind of inquiry that leads to breakthrough thinking.",
        ],
    },
}

SKILL_FRAMEWORK: dict[str, dict[str, list[str]]] = {
    "creativity": {
        "indicators": ["original_ideas", "unique_solutions", "innovative_approaches"],
        "assessment_criteria": ["novelty", "usefulness", "elaboration"],
    },
    "critical_thinking": {
        "indicators": ["analysis", "evaluation", "synthesis"],
        "assessment_criteria": ["accuracy", "relevance", "depth"],
    },
    "collaboration": {
        "indicators": ["peer_interaction", "feedback_quality", "team_contribution"],
        "assessment_criteria": ["frequency", "helpfulness", "leadership"],
    },
    "communication": {
        "indicators": ["clarity", "organization", "audience_awareness"],
        "assessment_criteria": ["coherence", "persuasiveness", "engagement"],
    },
    "persistence": {
        "indicators": ["iteration_frequency", "challenge_acceptance", "goal_pursuit"],
        "assessment_criteria": ["consistency", "improvement", "resilience"],
    },
}

EXPECTED_LEVELS: dict[GradeLevel, dict[str, int]] = {
    GradeLevel.ELEMENTARY: {
        "creativity": 60,
        "critical_thinking": 50,
        "collaboration": 65,
        "communication": 55,
        "persistence": 60,
    },
    GradeLevel.MIDDLE: {
        "creativity": 70,
        "critical_thinking": 65,
        "collaboration": 70,
        "communication": 65,
        "persistence": 70,
    },
    GradeLevel.HIGH: {
        "creativity": 80,
        "critical_thinking": 75,
        "collaboration": 75,
        "communication": 75,
        "persistence": 80,
    },
}

SKILL_INTERVENTIONS: dict[str, list[str]] = {
    "creativity": [
        'Practice brainstorming with "What if?" questions',
        "Try the SCAMPER method for idea generation",
        "Explore ideas from different perspectives",
        "Combine unrelated concepts for new solutions",
    ],
    "critical_thinking": [
        'Ask "Why?" and "How do you know?" more often',
        "Practice comparing pros and cons",
        "Look for evidence to support claims",
        "Consider alternative viewpoints",
    ],
    "collaboration": [
        "Practice active listening skills",
        "Ask peers for their opinions",
        "Offer help to struggling teammates",
        "Share your ideas clearly and kindly",
    ],
    "communication": [
        "Practice explaining ideas in different ways",
        "Use visual aids to support explanations",
        "Ask for feedback on clarity",
        "Organize thoughts before speaking",
    ],
    "persistence": [
        "Set small, achievable goals",
        "Celebrate small wins along the way",
        "View mistakes as learning opportunities",
        "Take breaks when feeling overwhelmed",
    ],
}

SKILL_RESOURCES: dict[str, dict[GradeLevel, list[str]]] = {
    "creativity": {
        GradeLevel.ELEMENTARY: [
            "Art supplies for idea sketching",
            "Building blocks for 3D thinking",
            "Story cubes for inspiration",
        ],
        GradeLevel.MIDDLE: [
            "Mind mapping tools",
            "Design thinking worksheets",
            "Creative problem-solving games",
        ],
        GradeLevel.HIGH: [
            "Innovation frameworks",
            "TRIZ methodology resources",
            "Case studies of creative solutions",
        ],
    },
    "critical_thinking": {
        GradeLevel.ELEMENTARY: [
            "Question starter cards",
            "Simple logic puzzles",
            "Cause and effect games",
        ],
        GradeLevel.MIDDLE: ["Argument mapping tools", "Logic puzzle books", "Debate topics"],
        GradeLevel.HIGH: [
            "Formal logic resources",
            "Cognitive bias awareness",
            "Research methodology guides",
        ],
    },
}

GENERIC_RESOURCES = ["Online tutorials", "Practice exercises", "Peer discussion groups"]

COMMUNICATION_KEYWORDS = ("communicate", "present", "explain")

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class AITutorConfig:
    personality_mode: str = "adaptive"  # encouraging | challenging | balanced | adaptive
    difficulty_level: str = "adaptive"  # below_grade | on_grade | above_grade | adaptive
    scaffolding_style: str = "moderate"  # heavy | moderate | light | minimal
    feedback_frequency: str = "checkpoint"  # immediate | checkpoint | completion | on_demand
    language_complexity: str = "grade_appropriate"
    voice_enabled: bool = False
    conversational_mode: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "personality_mode": self.personality_mode,
            "difficulty_level": self.difficulty_level,
            "scaffolding_style": self.scaffolding_style,
            "feedback_frequency": self.feedback_frequency,
            "language_complexity": self.language_complexity,
            "voice_enabled": self.voice_enabled,
            "conversational_mode": self.conversational_mode,
        }


@dataclass
class SkillGap:
    skill: str
    current_level: float
    expected_level: int
    gap: float
    interventions: list[str] = field(default_factory=list)
    resources: list[str] = field(default_factory=list)
    time_to_improve: int = 0  # Weeks

    def to_dict(self) -> dict[str, Any]:
        return {
            "skill": self.skill,
            "current_level": self.current_level,
            "expected_level": self.expected_level,
            "gap": self.gap,
            "interventions": list(self.interventions),
            "resources": list(self.resources),
            "time_to_improve": self.time_to_improve,
        }


@dataclass
class SkillAnalysis:
    average_score: float
    skill_levels: dict[str, float]
    gaps: list[SkillGap]
    strong_areas: list[str]
    improvement_areas: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "average_score": self.average_score,
            "skill_levels": dict(self.skill_levels),
            "gaps": [g.to_dict() for g in self.gaps],
            "strong_areas": list(self.strong_areas),
            "improvement_areas": list(self.improvement_areas),
        }


@dataclass
class LearningRecommendation:
    id: str
    type: str  # RecommendationType
    priority: str  # high | medium | low
    title: str
    description: str
    reasoning: str
    estimated_time: int  # Minutes
    phase_relevance: list[PhaseType] = field(default_factory=list)
    prerequisites: list[str] = field(default_factory=list)
    outcomes: list[str] = field(default_factory=list)
    adaptive_level: int = 1  # 1-10

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "reasoning": self.reasoning,
            "estimated_time": self.estimated_time,
            "phase_relevance": [p.value for p in self.phase_relevance],
            "prerequisites": list(self.prerequisites),
            "outcomes": list(self.outcomes),
            "adaptive_level": self.adaptive_level,
        }


@dataclass
class AIInteraction:
    id: str
    timestamp: str
    student_id: str
    type: str
    context: dict[str, Any]
    input: str
    response: str
    response_type: str = "text"
    follow_up_needed: bool = False
    effectiveness: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "student_id": self.student_id,
            "type": self.type,
            "context": dict(self.context),
            "input": self.input,
            "response": self.response,
            "response_type": self.response_type,
            "follow_up_needed": self.follow_up_needed,
            "effectiveness": self.effectiveness,
        }


# =============================================================================
# CONFIG
# =============================================================================


def update_config(config: AITutorConfig, **updates: Any) -> AITutorConfig:
    """Return a copy of config with the given fields replaced."""
    unknown = set(updates) - set(AITutorConfig.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown tutor settings: {', '.join(sorted(unknown))}")
    return replace(config, **updates)


# =============================================================================
# SKILLS
# =============================================================================


def skill_label(skill: str) -> str:
    return skill.replace("_", " ", 1)


def skill_interventions(skill: str, gap: float) -> list[str]:
    return SKILL_INTERVENTIONS.get(skill, [])[: math.ceil(gap / 10)]


def skill_resources(skill: str, grade_level: GradeLevel | str) -> list[str]:
    by_grade = SKILL_RESOURCES.get(skill)
    if by_grade is None:
        return list(GENERIC_RESOURCES)
    return list(by_grade[GradeLevel(grade_level)])


def analyze_skills(
    assessments: list[Assessment],
    reviews: list[PeerReview],
    analytics: LearningAnalytics,
    grade_level: GradeLevel | str,
) -> SkillAnalysis:
    """Skill levels, significant gaps (> 5 points) and strong areas."""
    grade = GradeLevel(grade_level)
    average = mean([a.percentage for a in assessments[-3:]])

    communication_mentions = sum(
        1
        for review in reviews
        for item in review.feedback
        if any(k in item.content.lower() for k in COMMUNICATION_KEYWORDS)
    )
    raw = {
        "creativity": analytics.creativity_index,
        "critical_thinking": average * 0.8,
        "collaboration": analytics.collaboration_score,
        "communication": min(100, communication_mentions * 15),
        "persistence": analytics.persistence_metric,
    }
    levels = {skill: clamp(raw[skill], 0, 100) for skill in SKILL_FRAMEWORK}
    expected = EXPECTED_LEVELS[grade]

    gaps = []
    for skill, current in levels.items():
        gap = expected[skill] - current
        if gap <= 5:
            continue
        gaps.append(
            SkillGap(
                skill=skill,
                current_level=current,
                expected_level=expected[skill],
                gap=gap,
                interventions=skill_interventions(skill, gap) if gap > 10 else [],
                resources=skill_resources(skill, grade) if gap > 10 else [],
                time_to_improve=math.ceil(gap / 10),
            )
        )

    return SkillAnalysis(
        average_score=average,
        skill_levels=levels,
        gaps=gaps,
        strong_areas=[s for s, level in levels.items() if level >= expected[s]],
        improvement_areas=[g.skill for g in gaps],
    )


def _format_points(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.1f}"


def generate_recommendations(
    analysis: SkillAnalysis,
    analytics: LearningAnalytics,
    progress: StudentProgress,
    phases: list[CreativePhase],
    current_phase: int,
    now: datetime | None = None,
    limit: int = 5,
) -> list[LearningRecommendation]:
    """Personalized recommendations, at most `limit` of them."""
    stamp = int(parse_iso(now or utc_now()).timestamp() * 1000)
    phase_type = phases[current_phase].type
    results: list[LearningRecommendation] = []

    for gap in analysis.gaps:
        if gap.gap <= 15:
            continue
        label = skill_label(gap.skill)
        results.append(
            LearningRecommendation(
                id=f"skill-{gap.skill}-{stamp}",
                type="strategy",
                priority="high",
                title=f"Strengthen {label} Skills",
                description=f"Focus on improving your {label} through targeted practice",
                reasoning=(
                    f"Your {label} is {_format_points(gap.gap)} points below grade level expectations"
                ),
                estimated_time=gap.time_to_improve * 30,
                phase_relevance=[phase_type],
                outcomes=list(gap.interventions),
                adaptive_level=math.ceil(gap.gap / 10),
            )
        )

    if analytics.iteration_frequency < 1:
        results.append(
            LearningRecommendation(
                id=f"iteration-boost-{stamp}",
                type="strategy",
                priority="medium",
                title="Try More Iterations",
                description="Experiment with different approaches to strengthen your solution",
                reasoning=(
                    "You haven't iterated much yet - this is a great way to improve your work"
                ),
                estimated_time=20,
                phase_relevance=[phase_type],
                outcomes=["Improved solution quality", "Enhanced problem-solving skills"],
                adaptive_level=3,
            )
        )

    if analytics.collaboration_score < 50:
        results.append(
            LearningRecommendation(
                id=f"collaboration-{stamp}",
                type="collaboration",
                priority="medium",
                title="Connect with Peers",
                description="Engage more with your classmates to share ideas and get feedback",
                reasoning="Collaboration can help you see new perspectives and improve your work",
                estimated_time=15,
                phase_relevance=[p.type for p in phases],
                outcomes=[
                    "Better peer relationships",
                    "Diverse perspectives",
                    "Improved communication",
                ],
                adaptive_level=2,
            )
        )

    if sum(p.time_spent for p in progress.phase_progress) > 180:
        results.append(
            LearningRecommendation(
                id=f"break-{stamp}",
                type="break",
                priority="low",
                title="Take a Creative Break",
                description="Step away for a few minutes to refresh your mind",
                reasoning=(
                    "You've been working hard - a break can help you return with fresh ideas"
                ),
                estimated_time=10,
                outcomes=["Refreshed perspective", "Reduced mental fatigue"],
                adaptive_level=1,
            )
        )

    logger.debug("tutor_recommendations", ids=[r.id for r in results[:limit]])
    return results[:limit]


# =============================================================================
# CONVERSATION
# =============================================================================


def determine_response_type(text: str) -> ResponseType:
    lowered = text.lower()
    if "?" in lowered:
        return "question"
    if any(word in lowered for word in ("stuck", "confused", "help")):
        return "hint_needed"
    if any(word in lowered for word in ("frustrated", "hard", "difficult")):
        return "encouragement_needed"
    return "general"


def personalize_response(template: str, context: dict[str, Any]) -> str:
    """Fill {studentName}, {currentPhase}, {strongSkill} and {improvementArea}.

    Other placeholders are left in place.
    """
    strong = context.get("strong_skill")
    improve = context.get("improvement_area")
    return (
        template.replace("{studentName}", str(context.get("student_name", "")), 1)
        .replace("{currentPhase}", str(context.get("current_phase", "")), 1)
        .replace("{strongSkill}", skill_label(strong) if strong else "problem-solving", 1)
        .replace("{improvementArea}", skill_label(improve) if improve else "collaboration", 1)
    )


def generate_response(
    text: str,
    grade_level: GradeLevel | str,
    context: dict[str, Any],
    rng: random.Random | None = None,
) -> str:
    templates = AI_RESPONSE_TEMPLATES[GradeLevel(grade_level)]
    rng = rng or random.Random()
    kind = determine_response_type(text)
    if kind == "question":
        pool = templates["question_response"]
    elif kind == "hint_needed":
        pool = templates["hint"]
    else:
        pool = templates["encouragement"]
    return personalize_response(rng.choice(pool), context)


def record_interaction(
    history: list[AIInteraction],
    text: str,
    student_id: str,
    student_name: str,
    grade_level: GradeLevel | str,
    phases: list[CreativePhase],
    current_phase: int,
    analytics: LearningAnalytics,
    analysis: SkillAnalysis,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[AIInteraction]:
    """Append the student's message and the tutor response to the history.

    Blank messages are ignored and the history is returned unchanged.
    """
    if not text.strip():
        return history

    now = parse_iso(now or utc_now())
    phase = phases[current_phase]
    context = {
        "phase_type": phase.type.value,
        "current_progress": analytics.overall_progress,
        "struggling_area": analysis.improvement_areas[0] if analysis.improvement_areas else None,
    }
    response = generate_response(
        text,
        grade_level,
        {
            "student_name": student_name,
            "current_phase": phase.name,
            "recent_progress": analytics.overall_progress,
            "strong_skill": analysis.strong_areas[0] if analysis.strong_areas else None,
            "improvement_area": context["struggling_area"],
        },
        rng=rng,
    )
    interaction = AIInteraction(
        id=str(int(now.timestamp() * 1000)),
        timestamp=now.isoformat(),
        student_id=student_id,
        type="question",
        context=context,
        input=text,
        response=response,
    )
    logger.info(
        "tutor_interaction_recorded",
        student_id=student_id,
        response_type=determine_response_type(text),
    )
    return [*history, interaction]
