"""layout_ai.main

Wiring for tools + store + agents + orchestrator.

Two-strategy intent extraction:
- Primary: remote intent model, only when a credential is configured
- Fallback: deterministic rules (always available; the only strategy without a credential)
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from layout_ai.agents.context_adapter import ContextAdapterAgent
from layout_ai.agents.insight_builder import InsightBuilderAgent
from layout_ai.agents.intent_extractor import FallbackHook, IntentExtractorAgent
from layout_ai.agents.result_composer import ResultComposerAgent
from layout_ai.agents.similarity_scorer import SimilarityScorerAgent
from layout_ai.config import Settings
from layout_ai.contracts.models import response_to_dict
from layout_ai.contracts.tool_base import IntentModelTool
from layout_ai.corpus.store import TemplateCorpus
from layout_ai.env_loader import load_env
from layout_ai.errors import ConfigError
from layout_ai.logging_utils import build_logger
from layout_ai.orchestrator import LayoutService
from layout_ai.store.learning_store import LearningStore
from layout_ai.tools.openai_tool import build_intent_tool


def build_service(
    settings: Optional[Settings] = None,
    tool: Optional[IntentModelTool] = None,
    store: Optional[LearningStore] = None,
    corpus: Optional[TemplateCorpus] = None,
    clock: Callable[[], datetime] = datetime.now,
    on_fallback: Optional[FallbackHook] = None,
    logger: Optional[logging.Logger] = None,
) -> LayoutService:
    if settings is None:
        load_env()  # load .env if present
        settings = Settings.load()
    problems = settings.validate()
    if problems:
        raise ConfigError("Invalid settings: " + "; ".join(problems))

    logger = logger or build_logger(settings.log_dir)
    corpus = corpus or TemplateCorpus.load(settings.corpus_path, logger=logger)
    store = store or LearningStore(
        max_history_size=settings.max_history_size,
        search_history_size=settings.search_history_size,
    )
    if tool is None:
        tool = build_intent_tool(settings, logger)
    if tool is None:
        logger.info("No intent model credential configured; using rule-based extraction")

    extractor = IntentExtractorAgent(
        tool,
        store,
        logger,
        timeout_seconds=settings.extractor_timeout_seconds,
        clock=clock,
        on_fallback=on_fallback,
    )
    scorer = SimilarityScorerAgent(
        corpus,
        store,
        logger,
        threshold=settings.similarity_threshold,
        search_limit=settings.search_limit,
        clock=clock,
    )
    adapter = ContextAdapterAgent(store, logger, clock=clock)
    composer = ResultComposerAgent(
        store,
        logger,
        default_max_results=settings.default_max_results,
        default_personalization=settings.default_personalization,
    )
    insight_builder = InsightBuilderAgent(store, logger)

    return LayoutService(
        extractor=extractor,
        scorer=scorer,
        adapter=adapter,
        composer=composer,
        insight_builder=insight_builder,
        store=store,
        logger=logger,
        clock=clock,
        model_version=settings.model_version,
        cache_enabled=settings.cache_enabled,
        learning_enabled=settings.learning_enabled,
        default_debug=settings.default_debug,
    )


def handle_request(payload: dict[str, Any], service: Optional[LayoutService] = None) -> dict[str, Any]:
    """Dict in, camelCase dict out. Builds a throwaway service when none is given."""
    if service is not None:
        return response_to_dict(service.recommend(payload))
    svc = build_service()
    try:
        return response_to_dict(svc.recommend(payload))
    finally:
        svc.close()
