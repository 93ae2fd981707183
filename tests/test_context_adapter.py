from datetime import datetime

import pytest

from layout_ai.agents.context_adapter import (
    ContextAdapterAgent,
    layout_name,
    stylistic_variants,
    time_narrative,
)
from layout_ai.contracts.agent_base import RecommendContext
from layout_ai.contracts.models import LayoutRequest, RequestOptions, UserContext
from layout_ai.nlp.fallback_rules import fallback_extract
from layout_ai.store.learning_store import LearningStore

from tests.fakes import FIXED_NOW


WEEKLY = "I need a weekly planner for my work projects"


def test_primary_layout_for_monday_morning(store, logger, clock):
    agent = ContextAdapterAgent(store, logger, clock=clock)
    user = store.user_context("u1", FIXED_NOW)
    layout = agent.adapt(fallback_extract(WEEKLY), user)

    assert layout.name == "Weekly Smart Planner (Morning)"
    assert layout.source == "contextual"
    assert layout.context.time_context == (
        "Focus on planning and goal-setting layouts with Weekly planning and goal setting"
        " optimized for weekly timeframe"
    )
    assert layout.context.domain_context == "Primary intent: planning"
    assert layout.context.social_context == "Individual use"
    assert [f.id for f in layout.editable_fields] == ["title", "notes", "date", "priority"]
    assert layout.metadata.confidence == 0.85
    assert layout.metadata.next_suggestions == ["Try a goal-setting layout", "Consider a daily planner"]
    assert layout.metadata.alternatives == ["Weekly Planner", "Daily Schedule", "Project Timeline"]
    assert layout.id == f"contextual_{int(FIXED_NOW.timestamp() * 1000)}"


def test_evening_and_weekend_narrative():
    intent = fallback_extract("creative sketch ideas for my art class")
    user = UserContext(user_id="u1", time_of_day="evening", day_of_week="saturday")
    assert time_narrative(intent, user).startswith(
        "Favor reflection and creative layouts with Creative and personal layouts"
    )
    assert layout_name(intent, user) == "Creative Canvas (Evening)"


def test_interaction_recorded_for_known_user(store, logger, clock):
    agent = ContextAdapterAgent(store, logger, clock=clock)
    layout = agent.adapt(fallback_extract(WEEKLY), store.user_context("u1", FIXED_NOW))
    history = store.user_context("u1", FIXED_NOW).history
    assert len(history) == 1
    assert history[0].chosen_template_id == layout.id
    assert history[0].intent.primary_intent == "planning"


def test_anonymous_not_stored(store, logger, clock):
    agent = ContextAdapterAgent(store, logger, clock=clock)
    layout = agent.adapt(fallback_extract(WEEKLY), store.user_context(None, FIXED_NOW))
    assert layout.personalization.adaptation_level == "none"
    assert len(store.contexts) == 0


def test_history_capped_at_100(logger, clock):
    store = LearningStore(max_history_size=100)
    agent = ContextAdapterAgent(store, logger, clock=clock)
    intent = fallback_extract(WEEKLY)
    for _ in range(101):
        agent.adapt(intent, store.user_context("u1", FIXED_NOW))
    assert len(store.user_context("u1", FIXED_NOW).history) == 100


def test_preferences_follow_history(store, logger, clock):
    agent = ContextAdapterAgent(store, logger, clock=clock)
    planning = fallback_extract(WEEKLY)
    for _ in range(3):
        agent.adapt(planning, store.user_context("u1", FIXED_NOW))
    agent.adapt(fallback_extract("creative sketch ideas for my art class"), store.user_context("u1", FIXED_NOW))

    user = store.user_context("u1", FIXED_NOW)
    assert user.preferences.preferred_categories[0] == "planning"
    assert user.preferences.preferred_complexity == "medium"

    layout = agent.adapt(planning, user)
    assert layout.metadata.confidence == pytest.approx(0.9)
    assert layout.context.domain_context.endswith("(matches user preferences)")


def test_collaboration_adds_shared_notes(store, logger, clock):
    agent = ContextAdapterAgent(store, logger, clock=clock)
    intent = fallback_extract("shared planner for the team")
    first = agent.adapt(intent, store.user_context("u1", FIXED_NOW))
    assert first.editable_fields[-1].id == "shared_notes"
    assert first.context.social_context == "Collaborative layout with sharing capabilities"

    second = agent.adapt(intent, store.user_context("u1", FIXED_NOW))
    assert second.context.social_context.endswith("(user has recent collaborative activity)")


def test_stale_activity_is_not_recent(store, logger, clock):
    agent = ContextAdapterAgent(store, logger, clock=clock)
    intent = fallback_extract("shared planner for the team")
    agent.adapt(intent, store.user_context("u1", FIXED_NOW), now=datetime(2025, 12, 1, 9, 0))
    user = store.user_context("u1", FIXED_NOW)
    assert user.recent_activity == ()
    assert len(user.history) == 1


def test_stylistic_variants():
    intent = fallback_extract("creative sketch ideas for my art class")
    assert intent.complexity == "medium"
    variants = stylistic_variants(intent, 1)
    by_prefix = {v.id.split("_")[0]: v for v in variants}
    assert set(by_prefix) == {"minimalist", "detailed", "creative"}
    assert by_prefix["minimalist"].metadata.confidence == 0.8
    assert by_prefix["detailed"].metadata.confidence == 0.85
    assert by_prefix["creative"].metadata.confidence == 0.75
    assert len(by_prefix["minimalist"].editable_fields) == 1
    assert len(by_prefix["detailed"].editable_fields) == 4
    assert len(by_prefix["creative"].editable_fields) == 5
    assert by_prefix["minimalist"].metadata.complexity == "simple"
    assert by_prefix["detailed"].metadata.complexity == "complex"


def test_no_creative_variant_for_planning():
    variants = stylistic_variants(fallback_extract(WEEKLY), 1)
    assert [v.id.split("_")[0] for v in variants] == ["minimalist", "detailed"]


def test_run_adds_variants_only_when_requested(store, logger, clock):
    agent = ContextAdapterAgent(store, logger, clock=clock)
    intent = fallback_extract(WEEKLY)

    ctx = RecommendContext(request=LayoutRequest(prompt=WEEKLY), now=FIXED_NOW, intent=intent)
    assert len(agent.run(ctx)) == 1

    ctx = RecommendContext(
        request=LayoutRequest(prompt=WEEKLY, options=RequestOptions(include_alternatives=True)),
        now=FIXED_NOW,
        intent=intent,
    )
    layouts = agent.run(ctx)
    assert len(layouts) == 3
    assert "context_adapter" in ctx.tracer.steps()
