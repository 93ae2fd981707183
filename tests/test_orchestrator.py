import pytest

from layout_ai.contracts.models import LayoutRequest, RequestOptions
from layout_ai.errors import FeedbackError
from layout_ai.main import build_service, handle_request

from tests.fakes import FailingIntentTool, FakeIntentTool

WEEKLY = "I need a weekly planner for my work projects"


def test_weekly_planner_end_to_end(service):
    resp = service.recommend(LayoutRequest(prompt=WEEKLY, user_id="u1"))
    assert resp.success
    assert resp.error is None
    assert resp.insights.intent_analysis.primary_intent == "planning"
    assert resp.insights.intent_analysis.source == "rules"
    assert 1 <= len(resp.layouts) <= 5
    assert any(l.source == "contextual" for l in resp.layouts)
    assert any(l.source == "corpus" for l in resp.layouts)
    assert len({l.id for l in resp.layouts}) == len(resp.layouts)
    assert resp.suggestions[0].layout_type == "Weekly Planner"
    assert 0.0 < resp.metadata.confidence <= 1.0
    assert resp.metadata.cache_hit is False
    assert resp.metadata.traces is None


def test_cache_hit_skips_pipeline(settings, corpus, store, clock, logger):
    tool = FakeIntentTool({"primary_intent": "planning", "confidence": 0.8})
    svc = build_service(settings=settings, tool=tool, store=store, corpus=corpus, clock=clock, logger=logger)
    try:
        req = LayoutRequest(prompt=WEEKLY, user_id="u1")
        first = svc.recommend(req)
        second = svc.recommend(LayoutRequest(prompt="  i need a WEEKLY planner for my work projects", user_id="u1"))
    finally:
        svc.close()
    assert len(tool.calls) == 1
    assert len(store.search_history("u1")) == 1
    assert second.metadata.cache_hit is True
    assert first.metadata.cache_hit is False
    assert [l.id for l in second.layouts] == [l.id for l in first.layouts]
    assert second.insights == first.insights


def test_debug_returns_traces(service):
    resp = service.recommend(LayoutRequest(prompt=WEEKLY, options=RequestOptions(debug=True)))
    steps = [t["step"] for t in resp.metadata.traces]
    for step in ("cache", "intent_extractor.fallback", "intent_extractor", "similarity_scorer",
                 "context_adapter", "result_composer", "insight_builder"):
        assert step in steps


def test_pipeline_error_becomes_failure_response(service, monkeypatch):
    def boom(ctx):
        raise RuntimeError("scorer exploded")

    monkeypatch.setattr(service.scorer, "run", boom)
    resp = service.recommend(LayoutRequest(prompt=WEEKLY, user_id="u1"))
    assert resp.success is False
    assert resp.error
    assert resp.layouts == [] and resp.suggestions == []
    assert resp.search_results.matches == []
    assert service.stats()["cache_size"] == 0
    assert service.learning_insights("u1") == {"message": "No learning data available"}


def test_empty_prompt_fails_softly(service):
    resp = service.recommend({"prompt": "   "})
    assert resp.success is False
    assert resp.error == "Prompt is required"


def test_no_candidates_still_returns_contextual(service):
    resp = service.recommend(LayoutRequest(prompt="xyz qwerty"))
    assert resp.success
    assert resp.insights.intent_analysis.primary_intent == "general"
    assert resp.insights.intent_analysis.confidence == 0.3
    assert all(m.similarity_score > 0.3 for m in resp.search_results.matches)
    assert resp.layouts[0].source in ("contextual", "corpus")


def test_alternatives_and_max_results(service):
    resp = service.recommend(
        LayoutRequest(prompt=WEEKLY, options=RequestOptions(include_alternatives=True, max_results=10))
    )
    prefixes = {l.id.split("_")[0] for l in resp.layouts if l.source == "contextual"}
    # medium professional planning prompt: no creative sibling
    assert prefixes == {"contextual", "minimalist", "detailed"}
    small = service.recommend(LayoutRequest(prompt=WEEKLY, options=RequestOptions(max_results=2)))
    assert len(small.layouts) == 2


def test_learning_recorded_only_in_learning_mode(service):
    service.recommend(LayoutRequest(prompt=WEEKLY, user_id="u1"))
    service.recommend(LayoutRequest(prompt="habit tracker for the month", user_id="u1"))
    service.recommend(LayoutRequest(prompt="study notes", user_id="u1", options=RequestOptions(learning_mode=False)))
    insights = service.learning_insights("u1")
    assert insights["total_interactions"] == 2
    assert insights["patterns"] == {"planning": 1, "tracking": 1}
    assert insights["recent_activity"][0]["prompt"] == WEEKLY


def test_feedback_changes_later_ranking(service):
    req = LayoutRequest(prompt=WEEKLY, user_id="u1", options=RequestOptions(max_results=10))
    before = service.recommend(req)
    last = before.layouts[-1]
    for layout in before.layouts[:-1]:
        service.record_feedback("u1", layout.id, 0.0)
    service.record_feedback("u1", last.id, 1.0)
    service.clear_cache()
    after = service.recommend(req)
    before_ids = [l.id for l in before.layouts]
    after_ids = [l.id for l in after.layouts]
    assert len(before_ids) > 1
    assert after_ids.index(last.id) < before_ids.index(last.id)


def test_feedback_validation_is_raised(service):
    with pytest.raises(FeedbackError):
        service.record_feedback("u1", "weekly-planner", 2)


def test_stats(service):
    service.recommend(LayoutRequest(prompt=WEEKLY, user_id="u1"))
    stats = service.stats()
    assert stats["corpus_size"] == 16
    assert stats["extractor_mode"] == "rules"
    assert stats["cache_size"] == 1
    assert stats["users_with_context"] == 1
    assert stats["users_with_learning_data"] == 1
    assert stats["total_searches"] == 1
    service.clear_cache()
    assert service.stats()["cache_size"] == 0


def test_handle_request_returns_camel_case(service):
    out = handle_request({"prompt": WEEKLY, "userId": "u1", "options": {"maxResults": 3}}, service=service)
    assert out["success"] is True
    assert len(out["layouts"]) <= 3
    assert "processingTimeMs" in out["metadata"]
    assert out["insights"]["intentAnalysis"]["primaryIntent"] == "planning"
    assert "totalMatches" in out["searchResults"]


def test_remote_failure_falls_back_and_notifies(settings, corpus, store, clock, logger):
    seen = []
    tool = FailingIntentTool()
    svc = build_service(
        settings=settings, tool=tool, store=store, corpus=corpus, clock=clock, logger=logger,
        on_fallback=lambda reason, err: seen.append((reason, type(err).__name__)),
    )
    try:
        resp = svc.recommend(LayoutRequest(prompt=WEEKLY, options=RequestOptions(debug=True)))
        assert svc.stats()["extractor_mode"] == "remote"
    finally:
        svc.close()
    assert resp.success
    assert resp.insights.intent_analysis.source == "rules"
    assert tool.calls == 1
    assert seen == [("ToolError: service unavailable", "ToolError")]
    fallback = [t for t in resp.metadata.traces if t["step"] == "intent_extractor.fallback"]
    assert fallback[0]["payload"]["error_type"] == "ToolError"


def test_prompt_history_boosts_later_suggestions(service):
    first = service.recommend(LayoutRequest(prompt=WEEKLY, user_id="u1"))
    second = service.recommend(LayoutRequest(prompt="daily planner to organize my week", user_id="u1"))
    assert first.suggestions[0].confidence == pytest.approx(0.9)
    assert second.insights.intent_analysis.primary_intent == "planning"
    assert second.suggestions[0].confidence == pytest.approx(1.0)
    assert service.stats()["users_with_prompt_history"] == 1


def test_user_named_anonymous_gets_stored_context(service):
    service.recommend(LayoutRequest(prompt=WEEKLY, user_id="anonymous"))
    stats = service.stats()
    assert stats["users_with_context"] == 1
    assert stats["users_with_learning_data"] == 1
    assert service.store.user_context("anonymous", service.clock()).history
