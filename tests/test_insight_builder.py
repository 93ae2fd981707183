from datetime import datetime

import pytest

from layout_ai.agents.insight_builder import (
    InsightBuilderAgent,
    contextual_suggestions,
    most_active_time,
    overall_confidence,
    recommendations,
    summarize_learning,
    user_patterns,
)
from layout_ai.agents.result_composer import layout_from_match
from layout_ai.contracts.models import Interaction, MatchResult, UserContext
from layout_ai.corpus.store import template_from_record
from layout_ai.nlp.fallback_rules import fallback_extract

from tests.fakes import template_record


def _interaction(hour, prompt="weekly planner"):
    return Interaction(timestamp=datetime(2026, 1, 5, hour, 0), intent=fallback_extract(prompt))


def test_suggestion_per_intent():
    out = contextual_suggestions(fallback_extract("weekly planner"))
    assert len(out) == 1
    assert out[0].layout_type == "Weekly Planner"
    assert out[0].confidence == 0.9
    assert out[0].alternatives == ["Daily Planner", "Monthly Overview", "Project Timeline"]
    assert contextual_suggestions(fallback_extract("xyz")) == []


def test_prior_prompts_boost_suggestion():
    history = (_interaction(9, "habit tracker"), _interaction(10, "habit tracker"))
    tracking = contextual_suggestions(fallback_extract("habit tracker"), history)
    assert tracking[0].confidence == pytest.approx(0.95)
    # planning is not among the past prompts
    planning = contextual_suggestions(fallback_extract("weekly planner"), history)
    assert planning[0].confidence == 0.9


def test_suggestion_boost_is_clamped():
    out = contextual_suggestions(fallback_extract("weekly planner"), (_interaction(9),))
    assert out[0].confidence == pytest.approx(1.0)


def test_most_active_time_from_history():
    user = UserContext(user_id="u1", history=(_interaction(20), _interaction(21), _interaction(8)))
    assert most_active_time(user) == "evening"
    assert most_active_time(UserContext(user_id="u1", time_of_day="night")) == "night"


def test_user_patterns():
    assert user_patterns(None) == {"message": "No user data available"}
    assert user_patterns(UserContext()) == {"message": "No user data available"}
    patterns = user_patterns(UserContext(user_id="u1", history=(_interaction(9),)))
    assert patterns["total_interactions"] == 1
    assert patterns["most_active_time"] == "morning"


def test_recommendations():
    planning = fallback_extract("weekly planner")
    assert recommendations(planning, {}) == [
        "Try a weekly planner for better organization",
        "Consider a project timeline for complex planning",
    ]
    simple = fallback_extract("habit tracker")
    out = recommendations(simple, {"average_complexity": "complex"})
    assert out[-1] == "You might enjoy more detailed layouts"
    assert len(out) == 3


def test_summarize_learning():
    assert summarize_learning(()) == {"message": "No learning data available"}
    entries = tuple(
        {"prompt": f"p{i}", "primary_intent": "planning" if i % 3 else "study", "confidence": 0.5}
        for i in range(12)
    )
    summary = summarize_learning(entries)
    assert summary["total_interactions"] == 12
    assert summary["most_common_intent"] == "planning"
    assert summary["average_confidence"] == pytest.approx(0.5)
    assert summary["patterns"] == {"study": 4, "planning": 8}
    assert len(summary["recent_activity"]) == 10
    assert summary["recent_activity"][-1]["prompt"] == "p11"


def test_overall_confidence():
    intent = fallback_extract("weekly planner")
    assert overall_confidence(intent, []) == 0.0
    c = template_from_record(template_record("a"))
    layout = layout_from_match(MatchResult("a", 0.5, 0.9, [], c))
    assert overall_confidence(intent, [layout]) == pytest.approx((0.9 + intent.confidence) / 2)


def test_learning_insights_need_user(store, logger):
    agent = InsightBuilderAgent(store, logger)
    assert agent.learning_insights(None) == {"message": "Learning insights require user identification"}
    assert agent.learning_insights("u1") == {"message": "No learning data available"}
