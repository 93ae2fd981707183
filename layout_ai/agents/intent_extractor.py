"""layout_ai.agents.intent_extractor

Intent Extractor Agent: turns the request text into a ParsedIntent.

Two strategies:
- Primary: the remote intent model (IntentModelTool), bounded by a timeout, normalized through the
  alias table in layout_ai.nlp.normalizer.
- Fallback: deterministic keyword rules (layout_ai.nlp.fallback_rules).

`extract` never raises for extractor problems. A remote error or timeout is logged, traced and
reported to the optional `on_fallback(reason, error)` hook, then the fallback answers.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from datetime import datetime
from typing import Any, Callable, Optional

from layout_ai.contracts.agent_base import BaseAgent, RecommendContext
from layout_ai.contracts.models import Interaction, ParsedIntent, RequestContext, to_payload
from layout_ai.contracts.tool_base import IntentModelTool
from layout_ai.errors import ExtractorUnavailable
from layout_ai.logging_utils import log_event
from layout_ai.nlp.fallback_rules import fallback_extract
from layout_ai.nlp.normalizer import normalize
from layout_ai.store.learning_store import LearningStore
from layout_ai.tracing import TraceCollector

FallbackHook = Callable[[str, Optional[BaseException]], None]


def session_context(user_id: Optional[str], ctx: Optional[RequestContext]) -> dict[str, Any]:
    """Request context as sent to the remote model (empty values dropped)."""
    out: dict[str, Any] = {"user_id": user_id} if user_id else {}
    if ctx is not None:
        out.update({k: v for k, v in to_payload(ctx).items() if v})
    return out


class IntentExtractorAgent(BaseAgent[ParsedIntent]):
    name = "intent_extractor"

    def __init__(
        self,
        tool: Optional[IntentModelTool],
        store: LearningStore,
        logger: logging.Logger,
        timeout_seconds: float = 8.0,
        clock: Callable[[], datetime] = datetime.now,
        on_fallback: Optional[FallbackHook] = None,
        max_workers: int = 4,
    ):
        self.tool = tool
        self.store = store
        self.logger = logger
        self.timeout_seconds = timeout_seconds
        self.clock = clock
        self.on_fallback = on_fallback
        self._executor = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="intent-model") if tool is not None else None
        )

    @property
    def remote_enabled(self) -> bool:
        return self.tool is not None

    def run(self, ctx: RecommendContext) -> ParsedIntent:
        return self.extract(
            ctx.request.prompt,
            user_id=ctx.user_id,
            context=session_context(ctx.user_id, ctx.request.context),
            tracer=ctx.tracer,
        )

    def extract(
        self,
        prompt: str,
        user_id: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
        tracer: Optional[TraceCollector] = None,
    ) -> ParsedIntent:
        tracer = tracer or TraceCollector()
        intent: Optional[ParsedIntent] = None

        if self.tool is None:
            tracer.add(f"{self.name}.fallback", {"reason": "disabled"})
        else:
            try:
                intent = self._extract_remote(prompt, context or {}, tracer)
            except ExtractorUnavailable as e:
                self._report_fallback(str(e), e.__cause__ or e, tracer)

        if intent is None:
            intent = fallback_extract(prompt)

        tracer.add(
            self.name,
            {
                "source": intent.source,
                "primary_intent": intent.primary_intent,
                "complexity": intent.complexity,
                "emotional_tone": intent.emotional_tone,
                "time_frame": intent.context.time_frame,
                "confidence": intent.confidence,
            },
        )

        if user_id:
            self.store.append_prompt(user_id, Interaction(timestamp=self.clock(), intent=intent, prompt=prompt))
        return intent

    def _extract_remote(self, prompt: str, context: dict[str, Any], tracer: TraceCollector) -> ParsedIntent:
        assert self.tool is not None and self._executor is not None
        future = self._executor.submit(self.tool.extract_intent, prompt, context)
        try:
            raw = future.result(timeout=self.timeout_seconds)
        except FutureTimeout as e:
            future.cancel()
            raise ExtractorUnavailable(f"timeout after {self.timeout_seconds}s") from e
        except Exception as e:
            raise ExtractorUnavailable(f"{type(e).__name__}: {e}") from e

        intent, defaulted = normalize(raw)
        if defaulted:
            tracer.add(f"{self.name}.defaulted_fields", {"fields": defaulted})
            log_event(self.logger, "intent_extractor.defaulted_fields", fields=defaulted)
        return intent

    def _report_fallback(self, reason: str, error: BaseException, tracer: TraceCollector) -> None:
        tracer.add(f"{self.name}.fallback", {"reason": reason, "error_type": type(error).__name__})
        log_event(
            self.logger,
            "intent_extractor.fallback",
            level=logging.WARNING,
            reason=reason,
            error_type=type(error).__name__,
        )
        if self.on_fallback is None:
            return
        try:
            self.on_fallback(reason, error)
        except Exception:
            self.logger.exception("on_fallback hook failed")

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
        if self.tool is not None:
            self.tool.close()
