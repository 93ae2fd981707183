from layout_ai.config import Settings
from layout_ai.contracts.models import (
    LayoutRequest,
    LayoutResponse,
    ParsedIntent,
    response_to_dict,
    to_payload,
)


def test_missing_credential_is_not_a_problem(monkeypatch):
    for name in ("OPENAI_API_KEY", "AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_CHAT_DEPLOYMENT", "AZURE_OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    s = Settings.load()
    assert s.validate() == []
    assert s.extractor_enabled is False


def test_openai_key_enables_extractor(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    assert Settings.load().extractor_enabled is True


def test_env_overrides_and_bad_values(monkeypatch):
    monkeypatch.setenv("LAYOUT_AI_MAX_RESULTS", "7")
    monkeypatch.setenv("LAYOUT_AI_SIMILARITY_THRESHOLD", "not-a-number")
    monkeypatch.setenv("LAYOUT_AI_LEARNING", "off")
    s = Settings.load()
    assert s.default_max_results == 7
    assert s.similarity_threshold == 0.3
    assert s.learning_enabled is False


def test_validate_reports_ranges():
    problems = Settings(similarity_threshold=1.5, default_max_results=0, extractor_timeout_seconds=0).validate()
    assert len(problems) == 3


def test_request_from_camel_case():
    req = LayoutRequest.from_dict(
        {
            "prompt": "weekly planner",
            "userId": "u1",
            "context": {"previousLayouts": ["a"], "category": "planning", "sessionData": {"k": 1}},
            "options": {"maxResults": "3", "includeAlternatives": True, "learningMode": False, "personalizationLevel": "high"},
        }
    )
    assert req.user_id == "u1"
    assert req.context.previous_layouts == ["a"]
    assert req.context.session_data == {"k": 1}
    assert req.options.max_results == 3
    assert req.options.include_alternatives is True
    assert req.options.learning_mode is False
    assert req.options.personalization_level == "high"


def test_request_defaults():
    req = LayoutRequest.from_dict({"prompt": "x", "options": {"personalizationLevel": "extreme"}})
    assert req.user_id is None
    assert req.options.learning_mode is True
    assert req.options.personalization_level is None


def test_payload_is_camel_case():
    payload = to_payload(ParsedIntent())
    assert payload["primaryIntent"] == "general"
    assert payload["layoutRequirements"]["visualStyle"] == "minimal"
    assert payload["context"]["timeFrame"] is None


def test_failure_response_has_empty_lists():
    out = response_to_dict(LayoutResponse.failure("boom", 1.0, "1.0.0"))
    assert out["success"] is False
    assert out["error"] == "boom"
    assert out["layouts"] == [] and out["suggestions"] == []
    assert out["searchResults"]["matches"] == []
    assert out["insights"]["recommendations"] == []
    assert out["metadata"]["cacheHit"] is False
