"""layout_ai.agents.result_composer

Result Composer Agent: merges contextual layouts and corpus matches into one ranked list.

Steps:
1) convert corpus matches to ContextualLayout (generic, no personalization)
2) dedupe by id, first occurrence wins (contextual layouts are listed first)
3) rank by the shared combined score, blending in recorded feedback for known users
4) stable sort, so equal scores keep insertion order
5) apply the personalization level against max_results
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional

from layout_ai.agents.similarity_scorer import candidate_complexity, rank_score
from layout_ai.contracts.agent_base import BaseAgent, RecommendContext
from layout_ai.contracts.models import (
    ContextualLayout,
    LayoutContext,
    LayoutMetadata,
    MatchResult,
    Personalization,
    RequestOptions,
)
from layout_ai.store.learning_store import LearningStore


def layout_from_match(match: MatchResult) -> ContextualLayout:
    c = match.candidate
    return ContextualLayout(
        id=c.id,
        name=c.name,
        description=c.description,
        category=c.category,
        editable_fields=list(c.editable_fields),
        context=LayoutContext(
            time_context="General purpose",
            domain_context=c.category,
            social_context="Individual use",
            explanation=f"General purpose. {c.category}. Individual use",
        ),
        personalization=Personalization(),
        metadata=LayoutMetadata(
            confidence=match.confidence_score,
            reasoning=list(match.reasoning),
            complexity=candidate_complexity(c),  # type: ignore[arg-type]
            generation_method="semantic",
            tags=sorted(c.tags),
            similarity_score=match.similarity_score,
            popularity=c.popularity,
        ),
        source="corpus",
        svg_template=c.svg_template,
    )


def dedupe(layouts: Iterable[ContextualLayout]) -> list[ContextualLayout]:
    seen: set[str] = set()
    out: list[ContextualLayout] = []
    for layout in layouts:
        if layout.id in seen:
            continue
        seen.add(layout.id)
        out.append(layout)
    return out


def apply_personalization(ranked: list[ContextualLayout], level: str, max_results: int) -> list[ContextualLayout]:
    """Cut the ranked list to `max_results` under the given personalization level."""
    n = max(0, max_results)
    if level == "low":
        head = math.ceil(n / 2)
        best = ranked[:head]
        next_best = ranked[head:head + n // 2]
        return best + next_best
    # high and medium both keep the top n
    return ranked[:n]


class ResultComposerAgent(BaseAgent[list[ContextualLayout]]):
    name = "result_composer"

    def __init__(
        self,
        store: LearningStore,
        logger: logging.Logger,
        default_max_results: int = 5,
        default_personalization: str = "medium",
    ):
        self.store = store
        self.logger = logger
        self.default_max_results = default_max_results
        self.default_personalization = default_personalization

    def run(self, ctx: RecommendContext) -> list[ContextualLayout]:
        matches = ctx.search.matches if ctx.search is not None else []
        scores: dict[str, float] = {}
        layouts = self.compose(ctx.contextual_layouts, matches, ctx.request.options, ctx.user_id, scores)
        ctx.tracer.add(
            self.name,
            {
                "contextual": len(ctx.contextual_layouts),
                "matches": len(matches),
                "returned": [(l.id, round(scores.get(l.id, 0.0), 4)) for l in layouts],
            },
        )
        return layouts

    def score(self, layout: ContextualLayout, user_id: Optional[str]) -> float:
        meta = layout.metadata
        primary = meta.similarity_score if meta.similarity_score is not None else meta.confidence
        return rank_score(primary, meta.confidence, meta.popularity, self.store.feedback(user_id, layout.id), user_id)

    def compose(
        self,
        contextual: list[ContextualLayout],
        matches: list[MatchResult],
        options: Optional[RequestOptions] = None,
        user_id: Optional[str] = None,
        scores: Optional[dict[str, float]] = None,
    ) -> list[ContextualLayout]:
        options = options or RequestOptions()
        unique = dedupe(list(contextual) + [layout_from_match(m) for m in matches])

        ranked_scores = {l.id: self.score(l, user_id) for l in unique}
        if scores is not None:
            scores.update(ranked_scores)
        # list.sort is stable: ties keep insertion order
        ranked = sorted(unique, key=lambda l: ranked_scores[l.id], reverse=True)

        level = options.personalization_level or self.default_personalization
        max_results = options.max_results or self.default_max_results
        return apply_personalization(ranked, level, max_results)
