"""layout_ai.agents.insight_builder

Builds the explanatory parts of a response: contextual suggestions, user patterns,
recommendations, learning insights and the overall confidence.

The suggestion boost reads the prompt history and user patterns read the stored user context,
both as they were before this request. Learning insights summarize the records written after
earlier successful responses.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from layout_ai.contracts.agent_base import BaseAgent, RecommendContext
from layout_ai.contracts.models import (
    ContextualLayout,
    ContextualSuggestion,
    Interaction,
    Insights,
    ParsedIntent,
    UserContext,
)
from layout_ai.store.learning_store import LearningStore, derive_preferences, time_of_day


SUGGESTIONS: dict[str, ContextualSuggestion] = {
    "planning": ContextualSuggestion(
        layout_type="Weekly Planner",
        reasoning="Perfect for organizing tasks and events over time",
        confidence=0.9,
        alternatives=["Daily Planner", "Monthly Overview", "Project Timeline"],
    ),
    "tracking": ContextualSuggestion(
        layout_type="Habit Tracker",
        reasoning="Ideal for monitoring progress and building consistency",
        confidence=0.85,
        alternatives=["Goal Tracker", "Progress Dashboard", "Mood Tracker"],
    ),
    "creative": ContextualSuggestion(
        layout_type="Creative Journal",
        reasoning="Designed for brainstorming and artistic expression",
        confidence=0.8,
        alternatives=["Mind Map", "Sketch Pad", "Idea Board"],
    ),
    "study": ContextualSuggestion(
        layout_type="Cornell Notes",
        reasoning="Proven method for effective learning and retention",
        confidence=0.9,
        alternatives=["Concept Map", "Study Guide", "Flash Cards"],
    ),
}

RECOMMENDATIONS: dict[str, list[str]] = {
    "planning": ["Try a weekly planner for better organization", "Consider a project timeline for complex planning"],
    "tracking": ["Use a habit tracker for consistent progress", "Try a goal tracker for long-term objectives"],
    "creative": ["Explore mind mapping layouts for brainstorming", "Try a creative journal for inspiration"],
    "study": ["Use Cornell notes for effective learning", "Try flashcards for memorization"],
}

PREFERRED_BOOST = 0.1
MAX_RECOMMENDATIONS = 3
RECENT_LEARNING = 10

_HOUR_BINS = [-1, 5, 11, 17, 23]
_HOUR_LABELS = ["night", "morning", "afternoon", "evening"]


def contextual_suggestions(intent: ParsedIntent, prompt_history: tuple[Interaction, ...] = ()) -> list[ContextualSuggestion]:
    """Suggestion for the primary intent, boosted when the user's past prompts favour it."""
    base = SUGGESTIONS.get(intent.primary_intent)
    if base is None:
        return []
    preferred = derive_preferences(prompt_history).preferred_categories
    confidence = base.confidence
    if intent.primary_intent in preferred:
        confidence = min(1.0, confidence + PREFERRED_BOOST)
    out = [
        ContextualSuggestion(
            layout_type=base.layout_type,
            reasoning=base.reasoning,
            confidence=confidence,
            alternatives=list(base.alternatives),
        )
    ]
    return sorted(out, key=lambda s: s.confidence, reverse=True)


def most_active_time(user: UserContext) -> str:
    if not user.history:
        return user.time_of_day
    hours = pd.Series([i.timestamp.hour for i in user.history])
    buckets = pd.cut(hours, bins=_HOUR_BINS, labels=_HOUR_LABELS)
    counts = buckets.value_counts(sort=False)
    return str(counts.idxmax())


def user_patterns(user: Optional[UserContext]) -> dict[str, Any]:
    if user is None or user.is_anonymous:
        return {"message": "No user data available"}
    return {
        "total_interactions": len(user.history),
        "preferred_categories": list(user.preferences.preferred_categories),
        "average_complexity": user.preferences.preferred_complexity,
        "most_active_time": most_active_time(user),
    }


def recommendations(intent: ParsedIntent, patterns: dict[str, Any]) -> list[str]:
    out = list(RECOMMENDATIONS.get(intent.primary_intent, []))
    if intent.complexity == "simple" and patterns.get("average_complexity") == "complex":
        out.append("You might enjoy more detailed layouts")
    return out[:MAX_RECOMMENDATIONS]


def summarize_learning(entries: tuple[dict[str, Any], ...]) -> dict[str, Any]:
    """Totals, most common intent, mean confidence and the most recent records."""
    if not entries:
        return {"message": "No learning data available"}
    patterns = Counter(e.get("primary_intent", "general") for e in entries)
    confidences = [float(e.get("confidence", 0.0)) for e in entries]
    return {
        "total_interactions": len(entries),
        "most_common_intent": patterns.most_common(1)[0][0],
        "average_confidence": sum(confidences) / len(confidences),
        "patterns": dict(patterns),
        "recent_activity": list(entries[-RECENT_LEARNING:]),
    }


def overall_confidence(intent: ParsedIntent, layouts: list[ContextualLayout]) -> float:
    if not layouts:
        return 0.0
    mean = sum(l.metadata.confidence for l in layouts) / len(layouts)
    return (mean + intent.confidence) / 2.0


@dataclass
class InsightReport:
    suggestions: list[ContextualSuggestion] = field(default_factory=list)
    insights: Insights = field(default_factory=Insights)
    confidence: float = 0.0


class InsightBuilderAgent(BaseAgent[InsightReport]):
    name = "insight_builder"

    def __init__(self, store: LearningStore, logger: logging.Logger):
        self.store = store
        self.logger = logger

    def learning_insights(self, user_id: Optional[str]) -> dict[str, Any]:
        if not user_id:
            return {"message": "Learning insights require user identification"}
        return summarize_learning(self.store.learning_data(user_id))

    def run(self, ctx: RecommendContext) -> InsightReport:
        if ctx.intent is None:
            raise ValueError("insight_builder needs an intent")
        patterns = user_patterns(ctx.user_context)
        report = InsightReport(
            suggestions=contextual_suggestions(ctx.intent, ctx.prompt_history),
            insights=Insights(
                intent_analysis=ctx.intent,
                user_patterns=patterns,
                recommendations=recommendations(ctx.intent, patterns),
                learning_insights=self.learning_insights(ctx.user_id),
            ),
            confidence=overall_confidence(ctx.intent, ctx.layouts),
        )
        ctx.tracer.add(
            self.name,
            {
                "suggestions": [s.layout_type for s in report.suggestions],
                "recommendations": len(report.insights.recommendations),
                "confidence": round(report.confidence, 4),
            },
        )
        return report
