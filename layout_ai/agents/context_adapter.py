"""layout_ai.agents.context_adapter

Context Adapter Agent: synthesizes layouts fitted to the user and the moment.

The primary layout's name, fields and explanation come from three independent narratives:
- time: time of day, day of week and the intent's time frame
- domain: primary intent, domain, and whether it matches the user's preferred intents
- social: individual vs collaborative, plus recent collaborative activity

Stylistic siblings (minimalist, detailed, creative) are added when alternatives are requested.
For known users the primary layout is appended to their history (bounded) and their preferences
are recomputed; anonymous contexts are never stored.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from layout_ai.contracts.agent_base import BaseAgent, RecommendContext
from layout_ai.contracts.models import (
    ContextualLayout,
    EditableField,
    Interaction,
    LayoutContext,
    LayoutMetadata,
    ParsedIntent,
    Personalization,
    UserContext,
    to_payload,
)
from layout_ai.store.learning_store import LearningStore


TIME_NARRATIVES: dict[str, str] = {
    "morning": "Focus on planning and goal-setting layouts",
    "afternoon": "Emphasize productivity and task management",
    "evening": "Favor reflection and creative layouts",
    "night": "Simple, minimal layouts for quick notes",
}

DAY_NARRATIVES: dict[str, str] = {
    "monday": "Weekly planning and goal setting",
    "friday": "Week review and weekend planning",
    "saturday": "Creative and personal layouts",
    "sunday": "Creative and personal layouts",
}

LAYOUT_NAMES: dict[str, str] = {
    "planning": "Smart Planner",
    "tracking": "Progress Tracker",
    "creative": "Creative Canvas",
    "study": "Study Guide",
    "business": "Business Dashboard",
    "fitness": "Fitness Tracker",
    "journal": "Personal Journal",
    "general": "Custom Layout",
}

ALTERNATIVE_NAMES: dict[str, list[str]] = {
    "planning": ["Weekly Planner", "Daily Schedule", "Project Timeline"],
    "tracking": ["Habit Tracker", "Progress Dashboard", "Goal Tracker"],
}

TONE_BACKGROUNDS: dict[str, str] = {
    "professional": "#FAFAFA",
    "casual": "#F8F9FA",
    "creative": "#FFF8E1",
    "academic": "#F3F4F6",
    "personal": "#FDF2F8",
}

PRIMARY_CONFIDENCE = 0.85
PREFERRED_INTENT_BONUS = 0.05
SYNTHESIZED_POPULARITY = 50


def _f(id: str, type: str, x: float, y: float, w: float, h: float,
       placeholder: Optional[str] = None, options: tuple[str, ...] = ()) -> EditableField:
    return EditableField(id=id, type=type, x=x, y=y, width=w, height=h, placeholder=placeholder, options=options)


# ---------- narratives ----------

def time_narrative(intent: ParsedIntent, user: UserContext) -> str:
    text = TIME_NARRATIVES.get(user.time_of_day, "General purpose layout")
    day = DAY_NARRATIVES.get(user.day_of_week)
    if day:
        text += f" with {day}"
    if intent.context.time_frame:
        text += f" optimized for {intent.context.time_frame} timeframe"
    return text


def domain_narrative(intent: ParsedIntent, user: UserContext) -> str:
    text = f"Primary intent: {intent.primary_intent}"
    if intent.context.domain:
        text += f" in {intent.context.domain} domain"
    if intent.primary_intent in user.preferences.preferred_categories:
        text += " (matches user preferences)"
    return text


def social_narrative(intent: ParsedIntent, user: UserContext) -> str:
    text = "Collaborative layout with sharing capabilities" if intent.context.collaboration else "Individual use"
    if any(i.collaborative for i in user.recent_activity):
        text += " (user has recent collaborative activity)"
    return text


# ---------- primary layout ----------

def layout_name(intent: ParsedIntent, user: UserContext) -> str:
    name = LAYOUT_NAMES.get(intent.primary_intent, "Custom Layout")
    if intent.complexity == "complex":
        name = f"Advanced {name}"
    elif intent.complexity == "simple":
        name = f"Simple {name}"
    tf = intent.context.time_frame
    if tf and tf != "ongoing":
        name = f"{tf.capitalize()} {name}"
    if user.time_of_day == "morning":
        name += " (Morning)"
    elif user.time_of_day == "evening":
        name += " (Evening)"
    return name


def layout_description(intent: ParsedIntent, time_ctx: str, domain_ctx: str) -> str:
    text = f"A {intent.complexity} {intent.primary_intent} layout"
    if intent.context.time_frame:
        text += f" designed for {intent.context.time_frame} use"
    if intent.context.collaboration:
        text += " with collaborative features"
    return f"{text}. {time_ctx}. {domain_ctx}."


def contextual_fields(intent: ParsedIntent) -> list[EditableField]:
    pi = intent.primary_intent
    if pi == "planning":
        fields = [
            _f("title", "text", 60, 30, 200, 30, "Plan Title"),
            _f("notes", "textarea", 60, 100, 1080, 200, "Plan details..."),
        ]
        if intent.complexity != "simple":
            fields += [
                _f("date", "date", 60, 320, 150, 30),
                _f("priority", "select", 230, 320, 100, 30, options=("High", "Medium", "Low")),
            ]
    elif pi == "tracking":
        fields = [
            _f("metric", "text", 60, 30, 200, 30, "Metric Name"),
            _f("value", "number", 60, 100, 100, 30, "0"),
        ]
    elif pi == "creative":
        fields = [
            _f("title", "text", 60, 30, 200, 30, "Creative Title"),
            _f("ideas", "textarea", 60, 100, 1080, 300, "Your creative ideas..."),
        ]
    elif pi == "study":
        fields = [
            _f("topic", "text", 60, 30, 200, 30, "Study Topic"),
            _f("notes", "textarea", 60, 100, 500, 400, "Study notes..."),
            _f("keypoints", "textarea", 580, 100, 200, 400, "Key points..."),
        ]
    elif pi == "business":
        fields = [
            _f("title", "text", 60, 30, 300, 30, "Meeting / Project"),
            _f("agenda", "textarea", 60, 100, 1080, 150, "Agenda..."),
            _f("action-items", "textarea", 60, 270, 1080, 150, "Action items..."),
        ]
    elif pi == "fitness":
        fields = [
            _f("date", "date", 60, 30, 150, 30),
            _f("workout", "textarea", 60, 100, 520, 200, "Workout..."),
            _f("nutrition", "textarea", 620, 100, 520, 200, "Nutrition..."),
        ]
    elif pi == "journal":
        fields = [
            _f("date", "date", 60, 30, 150, 30),
            _f("entry", "textarea", 60, 100, 1080, 300, "Today I..."),
            _f("gratitude", "textarea", 60, 420, 1080, 60, "Grateful for..."),
        ]
    else:
        fields = [
            _f("title", "text", 60, 30, 200, 30, "Title"),
            _f("content", "textarea", 60, 100, 1080, 200, "Content..."),
        ]

    if intent.context.collaboration:
        fields.append(_f("shared_notes", "textarea", 60, 500, 1080, 100, "Shared notes..."))
    return fields


def contextual_svg(intent: ParsedIntent, title: str) -> str:
    bg = TONE_BACKGROUNDS.get(intent.emotional_tone, "#FFFFFF")
    height = {"simple": 200, "medium": 300, "complex": 400}.get(intent.complexity, 300)
    svg = (
        "<svg xmlns='http://www.w3.org/2000/svg' width='1200' height='1600'>"
        f"<rect width='100%' height='100%' fill='{bg}'/>"
        f"<rect x='50' y='50' width='1100' height='{height}' fill='none' stroke='#E5E5E5' stroke-width='2'/>"
        f"<text x='60' y='80' font-size='18' fill='#333'>{title}</text>"
    )
    if intent.complexity != "simple":
        svg += "<line x1='60' y1='100' x2='1140' y2='100' stroke='#E5E5E5'/>"
    return svg + "</svg>"


def next_suggestions(user: UserContext) -> list[str]:
    if user.time_of_day == "morning":
        return ["Try a goal-setting layout", "Consider a daily planner"]
    if user.time_of_day == "evening":
        return ["Try a reflection journal", "Consider a mood tracker"]
    return []


def learning_insights(user: UserContext, intent: ParsedIntent) -> dict:
    history = user.history
    if not history:
        patterns: dict = {"message": "No patterns detected yet"}
        most_common = None
    else:
        most_common = user.preferences.preferred_categories[0] if user.preferences.preferred_categories else "general"
        patterns = {
            "most_common_intent": most_common,
            "total_interactions": len(history),
            "preferred_complexity": user.preferences.preferred_complexity,
        }

    recent = [i.intent.primary_intent for i in history[-10:]]
    if len(recent) < 3:
        evolution: dict = {"message": "Insufficient data for evolution analysis"}
    else:
        evolution = {
            "is_evolving": intent.primary_intent in recent,
            "recent_trend": recent[-3:],
            "current_intent": intent.primary_intent,
        }

    recommendations: list[str] = []
    if most_common and most_common != intent.primary_intent:
        recommendations.append(f"Try exploring {most_common} layouts")
    if user.time_of_day == "morning" and intent.primary_intent != "planning":
        recommendations.append("Consider planning layouts for morning productivity")

    return {"user_patterns": patterns, "intent_evolution": evolution, "recommendations": recommendations}


def adaptation_level(user: UserContext) -> str:
    if user.is_anonymous:
        return "none"
    if len(user.history) < 10:
        return "medium"
    return "high"


# ---------- stylistic variants ----------

def _variant(
    intent: ParsedIntent,
    prefix: str,
    stamp: int,
    name: str,
    description: str,
    fields: list[EditableField],
    confidence: float,
    complexity: str,
    adaptation: str,
    tags: list[str],
    svg: str,
) -> ContextualLayout:
    social = "Collaborative" if intent.context.collaboration else "Individual use"
    domain = f"Primary intent: {intent.primary_intent}"
    return ContextualLayout(
        id=f"{prefix}_{stamp}",
        name=name,
        description=description,
        category=intent.primary_intent,
        editable_fields=fields,
        context=LayoutContext(
            time_context="Any time",
            domain_context=domain,
            social_context=social,
            explanation=f"Any time. {domain}. {social}",
        ),
        personalization=Personalization(adaptation_level=adaptation),
        metadata=LayoutMetadata(
            confidence=confidence,
            reasoning=[f"{prefix.capitalize()} variant of the {intent.primary_intent} layout"],
            complexity=complexity,  # type: ignore[arg-type]
            generation_method=prefix,
            tags=tags,
            popularity=SYNTHESIZED_POPULARITY,
        ),
        source="contextual",
        svg_template=svg,
    )


def minimalist_variant(intent: ParsedIntent, stamp: int) -> ContextualLayout:
    label = intent.primary_intent.capitalize()
    return _variant(
        intent, "minimalist", stamp,
        name=f"Minimalist {label}",
        description=f"A clean, minimalist {intent.primary_intent} layout focused on essential elements",
        fields=[_f("main-content", "textarea", 60, 100, 1080, 560, "Your content here...")],
        confidence=0.8, complexity="simple", adaptation="medium",
        tags=["minimalist", intent.primary_intent, "clean"],
        svg=(
            "<svg xmlns='http://www.w3.org/2000/svg' width='1200' height='800'>"
            "<rect width='100%' height='100%' fill='#FFFFFF'/>"
            f"<text x='50' y='40' font-size='24' fill='#2C2C2C' font-weight='bold'>Minimalist {intent.primary_intent}</text>"
            "<rect x='50' y='80' width='1100' height='600' fill='none' stroke='#E5E5E5' stroke-width='1'/>"
            "</svg>"
        ),
    )


def detailed_variant(intent: ParsedIntent, stamp: int) -> ContextualLayout:
    label = intent.primary_intent.capitalize()
    boxes = [(70, 120), (590, 120), (70, 340), (590, 340)]
    fields = [
        _f(f"section-{n}", "textarea", x, y, 480, 160, f"Section {n}...") for n, (x, y) in enumerate(boxes, start=1)
    ]
    rects = "".join(
        f"<rect x='{x - 10}' y='{y - 20}' width='500' height='200' fill='none' stroke='#E5E5E5' stroke-width='1'/>"
        f"<text x='{x}' y='{y}' font-size='14' fill='#666'>Section {n}</text>"
        for n, (x, y) in enumerate(boxes, start=1)
    )
    return _variant(
        intent, "detailed", stamp,
        name=f"Comprehensive {label}",
        description=f"A detailed {intent.primary_intent} layout with comprehensive sections and features",
        fields=fields,
        confidence=0.85, complexity="complex", adaptation="high",
        tags=["detailed", intent.primary_intent, "comprehensive"],
        svg=(
            "<svg xmlns='http://www.w3.org/2000/svg' width='1200' height='800'>"
            "<rect width='100%' height='100%' fill='#F8F9FA'/>"
            f"<text x='50' y='40' font-size='24' fill='#2C2C2C' font-weight='bold'>Comprehensive {intent.primary_intent}</text>"
            f"{rects}</svg>"
        ),
    )


def creative_variant(intent: ParsedIntent, stamp: int) -> ContextualLayout:
    label = intent.primary_intent.capitalize()
    spots = [(120, 120), (320, 120), (520, 120), (220, 320), (420, 320)]
    fields = [_f(f"idea-{n}", "textarea", x, y, 160, 60, f"Idea {n}...") for n, (x, y) in enumerate(spots, start=1)]
    circles = "".join(
        f"<circle cx='{x + 80}' cy='{y + 30}' r='80' fill='none' stroke='#667eea' stroke-width='2'/>" for x, y in spots
    )
    return _variant(
        intent, "creative", stamp,
        name=f"Creative {label}",
        description=f"An innovative and creative {intent.primary_intent} layout with unique design elements",
        fields=fields,
        confidence=0.75, complexity="medium", adaptation="high",
        tags=["creative", intent.primary_intent, "innovative"],
        svg=(
            "<svg xmlns='http://www.w3.org/2000/svg' width='1200' height='800'>"
            f"<text x='50' y='40' font-size='24' fill='#667eea' font-weight='bold'>Creative {intent.primary_intent}</text>"
            f"{circles}</svg>"
        ),
    )


def stylistic_variants(intent: ParsedIntent, stamp: int) -> list[ContextualLayout]:
    out: list[ContextualLayout] = []
    if intent.complexity != "simple":
        out.append(minimalist_variant(intent, stamp))
    if intent.complexity != "complex":
        out.append(detailed_variant(intent, stamp))
    if intent.primary_intent == "creative" or intent.emotional_tone == "creative":
        out.append(creative_variant(intent, stamp))
    return out


class ContextAdapterAgent(BaseAgent[list[ContextualLayout]]):
    name = "context_adapter"

    def __init__(
        self,
        store: LearningStore,
        logger: logging.Logger,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.logger = logger
        self.clock = clock

    def run(self, ctx: RecommendContext) -> list[ContextualLayout]:
        if ctx.intent is None:
            raise ValueError("context_adapter needs an intent")
        user = ctx.user_context or self.store.user_context(ctx.user_id, ctx.now)
        layouts = [self.adapt(ctx.intent, user, now=ctx.now)]
        if ctx.request.options.include_alternatives:
            layouts.extend(stylistic_variants(ctx.intent, int(ctx.now.timestamp() * 1000)))
        ctx.tracer.add(
            self.name,
            {
                "user": user.user_id,
                "time_of_day": user.time_of_day,
                "day_of_week": user.day_of_week,
                "history_size": len(user.history),
                "layouts": [(l.id, l.name) for l in layouts],
            },
        )
        return layouts

    def adapt(self, intent: ParsedIntent, user: UserContext, now: Optional[datetime] = None) -> ContextualLayout:
        now = now or self.clock()
        stamp = int(now.timestamp() * 1000)

        time_ctx = time_narrative(intent, user)
        domain_ctx = domain_narrative(intent, user)
        social_ctx = social_narrative(intent, user)
        name = layout_name(intent, user)

        confidence = PRIMARY_CONFIDENCE
        if intent.primary_intent in user.preferences.preferred_categories:
            confidence = min(1.0, confidence + PREFERRED_INTENT_BONUS)

        tags = [intent.primary_intent, intent.complexity, "contextual"]
        if intent.context.time_frame:
            tags.append(intent.context.time_frame)

        layout = ContextualLayout(
            id=f"contextual_{stamp}",
            name=name,
            description=layout_description(intent, time_ctx, domain_ctx),
            category=intent.primary_intent,
            editable_fields=contextual_fields(intent),
            context=LayoutContext(
                time_context=time_ctx,
                domain_context=domain_ctx,
                social_context=social_ctx,
                explanation=f"{time_ctx}. {domain_ctx}. {social_ctx}",
                history_size=len(user.history),
            ),
            personalization=Personalization(
                user_preferences=to_payload(user.preferences),
                learning_insights=learning_insights(user, intent),
                adaptation_level=adaptation_level(user),
            ),
            metadata=LayoutMetadata(
                confidence=confidence,
                reasoning=[f"Generated based on {time_ctx} and {domain_ctx}"],
                complexity=intent.complexity,
                generation_method="contextual",
                alternatives=ALTERNATIVE_NAMES.get(intent.primary_intent, [])[:3],
                next_suggestions=next_suggestions(user)[:2],
                tags=tags,
                popularity=SYNTHESIZED_POPULARITY,
            ),
            source="contextual",
            svg_template=contextual_svg(intent, name),
        )

        if not user.is_anonymous:
            self.store.record_interaction(
                user.user_id,
                Interaction(
                    timestamp=now,
                    intent=intent,
                    chosen_template_id=layout.id,
                    collaborative=intent.context.collaboration,
                ),
            )
        return layout
