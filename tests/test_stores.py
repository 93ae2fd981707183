import threading
from datetime import datetime, timedelta

import pytest

from layout_ai.contracts.models import Interaction, LayoutRequest, RequestOptions
from layout_ai.errors import FeedbackError
from layout_ai.nlp.fallback_rules import fallback_extract
from layout_ai.store.keyed_store import InMemoryKeyedStore
from layout_ai.store.learning_store import (
    LearningStore,
    cache_key,
    day_of_week,
    derive_preferences,
    time_of_day,
)

from tests.fakes import FIXED_NOW


def _interaction(prompt="weekly planner", ts=FIXED_NOW):
    return Interaction(timestamp=ts, intent=fallback_extract(prompt), prompt=prompt)


def test_append_bounded_drops_oldest():
    s = InMemoryKeyedStore()
    for i in range(101):
        out = s.append_bounded("k", i, 100)
    assert len(out) == 100
    assert out[0] == 1
    assert s.get("k") == out
    assert s.append_bounded("z", 1, 0) == ()


def test_concurrent_appends_are_not_lost():
    s = InMemoryKeyedStore()

    def worker(key):
        for i in range(200):
            s.append_bounded(key, i, 1000)

    threads = [threading.Thread(target=worker, args=(k,)) for k in ("a", "a", "b", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(s.get("a")) == 400
    assert len(s.get("b")) == 400


def test_keyed_store_basics():
    s = InMemoryKeyedStore()
    s.put("a", 1)
    assert s.update("a", lambda v: v + 1) == 2
    assert s.get("missing", "d") == "d"
    assert len(s) == 1
    s.delete("a")
    assert len(s) == 0
    s.put("b", 1)
    s.clear()
    assert list(s.keys()) == []


def test_time_helpers():
    assert time_of_day(FIXED_NOW) == "morning"
    assert time_of_day(FIXED_NOW.replace(hour=3)) == "night"
    assert time_of_day(FIXED_NOW.replace(hour=14)) == "afternoon"
    assert time_of_day(FIXED_NOW.replace(hour=19)) == "evening"
    assert day_of_week(FIXED_NOW) == "monday"


def test_cache_key_normalizes_prompt_and_includes_options():
    a = LayoutRequest(prompt="Weekly   Planner", user_id="u1")
    b = LayoutRequest(prompt="weekly planner ", user_id="u1")
    c = LayoutRequest(prompt="weekly planner", user_id="u2")
    d = LayoutRequest(prompt="weekly planner", user_id="u1", options=RequestOptions(max_results=2))
    assert cache_key(a) == cache_key(b)
    assert cache_key(a) != cache_key(c)
    assert cache_key(a) != cache_key(d)


def test_record_interaction_bound_and_preferences():
    store = LearningStore(max_history_size=100)
    for i in range(100):
        store.record_interaction("u1", _interaction("weekly planner"))
    store.record_interaction("u1", _interaction("habit tracker"))
    user = store.user_context("u1", FIXED_NOW)
    assert len(user.history) == 100
    assert user.history[-1].prompt == "habit tracker"
    assert user.preferences.preferred_categories == ("planning", "tracking")


def test_derive_preferences_ties_keep_first_seen():
    history = (_interaction("habit tracker"), _interaction("weekly planner"))
    prefs = derive_preferences(history)
    assert prefs.preferred_categories == ("tracking", "planning")
    assert derive_preferences(()).preferred_categories == ()


def test_user_context_time_fields_and_recent_activity(store):
    store.record_interaction("u1", _interaction(ts=FIXED_NOW - timedelta(days=2)))
    store.record_interaction("u1", _interaction(ts=FIXED_NOW - timedelta(hours=1)))
    user = store.user_context("u1", FIXED_NOW)
    assert user.time_of_day == "morning"
    assert user.day_of_week == "monday"
    assert len(user.history) == 2
    assert len(user.recent_activity) == 1


def test_unknown_user_context_not_stored(store):
    user = store.user_context("new", FIXED_NOW)
    assert user.history == ()
    assert len(store.contexts) == 0
    assert store.user_context(None, FIXED_NOW).is_anonymous
    assert store.user_context(None, FIXED_NOW).user_id is None


def test_feedback_validation(store):
    store.record_feedback("u1", "weekly-planner", 0.75)
    assert store.feedback("u1", "weekly-planner") == 0.75
    assert store.feedback("u2", "weekly-planner") is None
    assert store.feedback(None, "weekly-planner") is None
    for bad in (-0.1, 1.5, "abc", float("nan"), None):
        with pytest.raises(FeedbackError):
            store.record_feedback("u1", "weekly-planner", bad)
    with pytest.raises(FeedbackError):
        store.record_feedback("", "weekly-planner", 0.5)


def test_feedback_keys_do_not_collide(store):
    store.record_feedback("a:b", "c", 0.1)
    store.record_feedback("a", "b:c", 0.9)
    assert store.feedback("a:b", "c") == 0.1
    assert store.feedback("a", "b:c") == 0.9


def test_stats_and_histories(store):
    store.record_learning("u1", {"primary_intent": "planning", "confidence": 0.5})
    store.record_learning("u1", {"primary_intent": "study", "confidence": 0.7})
    store.record_search("u1", {"matches": []})
    store.record_feedback("u1", "x", 0.5)
    store.append_prompt("u1", _interaction())
    store.append_prompt("u2", _interaction())
    store.record_interaction("u1", _interaction())
    stats = store.stats()
    assert stats == {
        "cache_size": 0,
        "users_with_prompt_history": 2,
        "users_with_context": 1,
        "users_with_learning_data": 1,
        "total_interactions": 2,
        "feedback_count": 1,
        "total_searches": 1,
    }


def test_search_history_bounded():
    store = LearningStore(search_history_size=50)
    for i in range(60):
        store.record_search("u1", {"i": i})
    assert len(store.search_history("u1")) == 50
    assert store.search_history(None) == ()


def test_user_named_anonymous_is_a_real_user(store):
    store.record_interaction("anonymous", _interaction())
    user = store.user_context("anonymous", FIXED_NOW)
    assert not user.is_anonymous
    assert len(user.history) == 1
    assert cache_key(LayoutRequest(prompt="x", user_id="anonymous")) != cache_key(LayoutRequest(prompt="x"))
