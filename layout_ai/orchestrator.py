"""layout_ai.orchestrator

LayoutService: the composed recommendation pipeline.

Flow per request:
1) cache lookup on the canonical request hash (hit -> same response, cache_hit=True)
2) intent extraction (remote model with timeout, rule-based fallback)
3) corpus scoring and context adaptation, in parallel
4) composition: dedupe, rank, personalization level
5) insights, overall confidence
6) learning record and cache write, for successful responses only

Every unexpected error is caught here and turned into a `success=False` response.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Optional

from layout_ai.agents.context_adapter import ContextAdapterAgent
from layout_ai.agents.insight_builder import InsightBuilderAgent
from layout_ai.agents.intent_extractor import IntentExtractorAgent
from layout_ai.agents.result_composer import ResultComposerAgent
from layout_ai.agents.similarity_scorer import SimilarityScorerAgent
from layout_ai.contracts.agent_base import RecommendContext
from layout_ai.contracts.models import LayoutRequest, LayoutResponse, ResponseMetadata
from layout_ai.errors import PipelineFailure
from layout_ai.logging_utils import log_event
from layout_ai.store.learning_store import LearningStore, cache_key


@dataclass
class LayoutService:
    extractor: IntentExtractorAgent
    scorer: SimilarityScorerAgent
    adapter: ContextAdapterAgent
    composer: ResultComposerAgent
    insight_builder: InsightBuilderAgent
    store: LearningStore
    logger: logging.Logger
    clock: Callable[[], datetime] = datetime.now
    model_version: str = "1.0.0"
    cache_enabled: bool = True
    learning_enabled: bool = True
    default_debug: bool = False
    max_workers: int = 4
    _pool: ThreadPoolExecutor = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="layout-pipeline")

    def recommend(self, request: LayoutRequest | dict[str, Any]) -> LayoutResponse:
        t0 = time.perf_counter()
        try:
            if isinstance(request, dict):
                request = LayoutRequest.from_dict(request)
            if not request.prompt.strip():
                raise PipelineFailure("Prompt is required")
            return self._recommend(request, t0)
        except Exception as e:
            self.logger.exception("Layout recommendation failed")
            message = str(e) if isinstance(e, PipelineFailure) else f"Failed to generate layouts: {type(e).__name__}"
            return LayoutResponse.failure(message, _elapsed_ms(t0), self.model_version)

    def _recommend(self, request: LayoutRequest, t0: float) -> LayoutResponse:
        key = cache_key(request)
        if self.cache_enabled:
            cached = self.store.get_response(key)
            if cached is not None:
                log_event(self.logger, "cache.hit", user_id=request.user_id)
                return replace(cached, metadata=replace(cached.metadata, cache_hit=True))

        ctx = RecommendContext(request=request, now=self.clock())
        ctx.tracer.add("cache", {"hit": False, "enabled": self.cache_enabled})
        # state before this request; the adapter and insight builder both read it
        ctx.user_context = self.store.user_context(ctx.user_id, ctx.now)
        ctx.prompt_history = self.store.prompt_history(ctx.user_id)

        # 1) Intent
        ctx.intent = self.extractor.run(ctx)

        # 2) Corpus matches and contextual layouts
        search_future = self._pool.submit(self.scorer.run, ctx)
        adapt_future = self._pool.submit(self.adapter.run, ctx)
        ctx.search = search_future.result()
        ctx.contextual_layouts = adapt_future.result()

        # 3) Compose
        ctx.layouts = self.composer.run(ctx)

        # 4) Insights
        report = self.insight_builder.run(ctx)

        debug = request.options.debug or self.default_debug
        response = LayoutResponse(
            success=True,
            layouts=ctx.layouts,
            suggestions=report.suggestions,
            search_results=ctx.search,
            insights=report.insights,
            metadata=ResponseMetadata(
                processing_time_ms=_elapsed_ms(t0),
                confidence=report.confidence,
                cache_hit=False,
                model_version=self.model_version,
                traces=list(ctx.tracer.traces) if debug else None,
            ),
        )

        if self.learning_enabled and request.options.learning_mode and ctx.user_id:
            self._record_learning(ctx, response)
        if self.cache_enabled:
            self.store.put_response(key, response)

        log_event(
            self.logger,
            "recommend.ok",
            user_id=ctx.user_id,
            intent=ctx.intent.primary_intent,
            source=ctx.intent.source,
            layouts=len(response.layouts),
            ms=round(response.metadata.processing_time_ms, 1),
        )
        return response

    def _record_learning(self, ctx: RecommendContext, response: LayoutResponse) -> None:
        assert ctx.user_id and ctx.intent is not None
        self.store.record_learning(
            ctx.user_id,
            {
                "prompt": ctx.request.prompt,
                "primary_intent": ctx.intent.primary_intent,
                "selected_layout": response.layouts[0].id if response.layouts else None,
                "timestamp": ctx.now.isoformat(),
                "confidence": response.metadata.confidence,
            },
        )

    # ---------- secondary operations ----------

    def record_feedback(self, user_id: str, candidate_id: str, score: float) -> None:
        self.store.record_feedback(user_id, candidate_id, score)
        log_event(self.logger, "feedback.recorded", user_id=user_id, candidate_id=candidate_id, score=score)

    def learning_insights(self, user_id: Optional[str]) -> dict[str, Any]:
        return self.insight_builder.learning_insights(user_id)

    def stats(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.store.stats())
        out["corpus_size"] = len(self.scorer.corpus)
        out["extractor_mode"] = "remote" if self.extractor.remote_enabled else "rules"
        return out

    def clear_cache(self) -> None:
        self.store.clear_cache()
        self.logger.info("Response cache cleared")

    def close(self) -> None:
        self._pool.shutdown(wait=False, cancel_futures=True)
        self.extractor.close()


def _elapsed_ms(t0: float) -> float:
    return (time.perf_counter() - t0) * 1000.0
