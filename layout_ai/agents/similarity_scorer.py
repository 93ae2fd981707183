"""layout_ai.agents.similarity_scorer

Similarity Scorer Agent: scores corpus candidates against a ParsedIntent.

`score(intent, candidate)` is a pure function of its inputs: a weighted sum over five dimensions,
each in [0, 1], with weights summing to 1.0. `run` scores the whole corpus, drops candidates at or
below the similarity threshold, ranks the rest and wraps them in a SearchResult with suggestions.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Iterable, Optional

from layout_ai.contracts.agent_base import BaseAgent, RecommendContext
from layout_ai.contracts.models import CandidateTemplate, MatchResult, ParsedIntent, SearchResult
from layout_ai.corpus.store import TemplateCorpus
from layout_ai.nlp.semantic import keyword_similarity
from layout_ai.store.learning_store import LearningStore


WEIGHTS: dict[str, float] = {
    "intent_category": 0.40,
    "keywords": 0.25,
    "complexity": 0.15,
    "tone": 0.10,
    "layout_requirements": 0.10,
}

INTENT_CATEGORIES: dict[str, frozenset[str]] = {
    "planning": frozenset({"productivity", "business"}),
    "tracking": frozenset({"productivity", "fitness", "study"}),
    "creative": frozenset({"creative"}),
    "study": frozenset({"study", "academic"}),
    "business": frozenset({"business", "productivity"}),
    "fitness": frozenset({"fitness", "health"}),
    "journal": frozenset({"creative", "personal"}),
    "general": frozenset({"productivity", "study", "creative"}),
}

TONE_CATEGORIES: dict[str, frozenset[str]] = {
    "professional": frozenset({"business", "productivity"}),
    "casual": frozenset({"creative", "personal"}),
    "creative": frozenset({"creative", "art"}),
    "academic": frozenset({"study", "academic"}),
    "personal": frozenset({"creative", "journal"}),
}

ALTERNATIVE_QUERIES: dict[str, list[str]] = {
    "planning": ["weekly planner", "daily schedule", "project timeline"],
    "tracking": ["habit tracker", "progress log", "goal tracker"],
    "creative": ["creative journal", "brainstorming template", "idea board"],
    "study": ["study notes", "cornell notes", "exam prep"],
}

_COMPLEXITY_LEVEL = {"simple": 1, "medium": 2, "complex": 3}
_INTERACTIVITY_LEVEL = {"low": 1, "medium": 2, "high": 3}


def tier_score(a: int, b: int) -> float:
    """1.0 for the same tier, 0.7 for adjacent tiers, 0.3 otherwise."""
    d = abs(a - b)
    if d == 0:
        return 1.0
    if d == 1:
        return 0.7
    return 0.3


def candidate_complexity(candidate: CandidateTemplate) -> str:
    n = candidate.field_count
    if n <= 3:
        return "simple"
    if n <= 8:
        return "medium"
    return "complex"


def candidate_interactivity(candidate: CandidateTemplate) -> str:
    n = candidate.field_count
    if n <= 2:
        return "low"
    if n <= 6:
        return "medium"
    return "high"


def intent_tokens(intent: ParsedIntent) -> list[str]:
    """Intent-side tokens for keyword similarity: topics, dates, secondary intents, domain, time frame."""
    items: list[str] = []
    items.extend(intent.entities.topics)
    items.extend(intent.entities.dates)
    items.extend(intent.secondary_intents)
    if intent.context.domain:
        items.append(intent.context.domain)
    if intent.context.time_frame:
        items.append(intent.context.time_frame)
    return [str(i).lower() for i in items if i]


# ---------- dimensions ----------

def category_score(intent: ParsedIntent, candidate: CandidateTemplate) -> float:
    accepted = INTENT_CATEGORIES.get(intent.primary_intent, frozenset({"general"}))
    return 1.0 if candidate.category in accepted else 0.3


def keyword_score(intent: ParsedIntent, candidate: CandidateTemplate) -> float:
    return keyword_similarity(intent_tokens(intent), sorted(candidate.keywords | candidate.tags))


def complexity_score(intent: ParsedIntent, candidate: CandidateTemplate) -> float:
    return tier_score(
        _COMPLEXITY_LEVEL.get(intent.complexity, 2),
        _COMPLEXITY_LEVEL[candidate_complexity(candidate)],
    )


def tone_score(intent: ParsedIntent, candidate: CandidateTemplate) -> float:
    accepted = TONE_CATEGORIES.get(intent.emotional_tone, frozenset({"general"}))
    return 1.0 if candidate.category in accepted else 0.5


def requirements_score(intent: ParsedIntent, candidate: CandidateTemplate) -> float:
    req = intent.layout_requirements

    structure = 1.0 if req.structure in candidate.structure_hints else 0.5

    wanted = [e.lower() for e in req.elements if e]
    if wanted:
        names = [n.lower() for f in candidate.editable_fields for n in (f.type, f.id)]
        hit = sum(1 for w in wanted if any(w in n or n in w for n in names))
        elements = hit / len(wanted)
    else:
        elements = 0.5

    interactivity = tier_score(
        _INTERACTIVITY_LEVEL.get(req.interactivity, 2),
        _INTERACTIVITY_LEVEL[candidate_interactivity(candidate)],
    )
    return (structure + elements + interactivity) / 3.0


_DIMENSIONS: dict[str, Callable[[ParsedIntent, CandidateTemplate], float]] = {
    "intent_category": category_score,
    "keywords": keyword_score,
    "complexity": complexity_score,
    "tone": tone_score,
    "layout_requirements": requirements_score,
}


def confidence_score(intent: ParsedIntent, candidate: CandidateTemplate, similarity: float) -> float:
    conf = similarity
    if candidate.popularity > 80:
        conf += 0.1
    elif candidate.popularity > 50:
        conf += 0.05
    if intent.primary_intent == candidate.category:
        conf += 0.1
    conf += 0.1 * intent.confidence
    return max(0.0, min(1.0, conf))


def reasoning(intent: ParsedIntent, candidate: CandidateTemplate, similarity: float) -> list[str]:
    reasons: list[str] = []
    if intent.primary_intent == candidate.category:
        reasons.append(f"Perfect match for {intent.primary_intent} intent")
    if similarity > 0.8:
        reasons.append("High semantic similarity")
    elif similarity > 0.6:
        reasons.append("Good semantic similarity")
    if candidate.popularity > 80:
        reasons.append("Highly popular layout")
    if intent.complexity == candidate_complexity(candidate):
        reasons.append("Matches complexity requirements")
    return reasons or ["General layout match"]


def score(intent: ParsedIntent, candidate: CandidateTemplate) -> MatchResult:
    dims = {name: fn(intent, candidate) for name, fn in _DIMENSIONS.items()}
    similarity = sum(WEIGHTS[name] * value for name, value in dims.items())
    similarity = max(0.0, min(1.0, similarity))
    return MatchResult(
        candidate_id=candidate.id,
        similarity_score=similarity,
        confidence_score=confidence_score(intent, candidate, similarity),
        reasoning=reasoning(intent, candidate, similarity),
        candidate=candidate,
        dimension_scores={k: round(v, 4) for k, v in dims.items()},
    )


def rank_score(primary: float, confidence: float, popularity: int, feedback: Optional[float] = None,
               user_id: Optional[str] = None) -> float:
    """Combined rank score shared by corpus search and final composition."""
    s = 0.5 * primary + 0.3 * confidence + 0.2 * (popularity / 100.0)
    if user_id:
        s = 0.8 * s + 0.2 * (0.5 if feedback is None else feedback)
    return s


# ---------- suggestions ----------

def search_suggestions(intent: ParsedIntent, matches: list[MatchResult]) -> list[str]:
    if not matches:
        return ["Try a more specific prompt", "Consider different layout categories"]
    out: list[str] = []
    if matches[0].similarity_score < 0.7:
        out.append("Try refining your prompt for better matches")
    if intent.complexity == "simple" and any(m.candidate.field_count > 5 for m in matches):
        out.append("Consider simpler layouts for your needs")
    tf = intent.context.time_frame
    if tf and not any(tf in m.candidate.name.lower() for m in matches):
        out.append(f'Try searching for "{tf}" specific layouts')
    return out


def alternative_queries(intent: ParsedIntent) -> list[str]:
    alts = list(ALTERNATIVE_QUERIES.get(intent.primary_intent, []))
    if intent.context.time_frame:
        alts.append(f"{intent.context.time_frame} {intent.primary_intent}")
    return alts[:3]


class SimilarityScorerAgent(BaseAgent[SearchResult]):
    name = "similarity_scorer"

    def __init__(
        self,
        corpus: TemplateCorpus,
        store: LearningStore,
        logger: logging.Logger,
        threshold: float = 0.3,
        search_limit: int = 10,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.corpus = corpus
        self.store = store
        self.logger = logger
        self.threshold = threshold
        self.search_limit = search_limit
        self.clock = clock

    def run(self, ctx: RecommendContext) -> SearchResult:
        if ctx.intent is None:
            raise ValueError("similarity_scorer needs an intent")
        limit = ctx.request.options.max_results or self.search_limit
        result = self.search(ctx.intent, user_id=ctx.user_id, limit=limit)
        ctx.tracer.add(
            self.name,
            {
                "scored": len(self.corpus),
                "above_threshold": result.total_matches,
                "top": [(m.candidate_id, round(m.similarity_score, 3)) for m in result.matches[:5]],
                "search_time_ms": round(result.search_time_ms, 2),
            },
        )
        return result

    def score_all(self, intent: ParsedIntent, candidates: Optional[Iterable[CandidateTemplate]] = None) -> list[MatchResult]:
        pool = self.corpus.templates() if candidates is None else candidates
        scored = [score(intent, c) for c in pool]
        return [m for m in scored if m.similarity_score > self.threshold]

    def search(self, intent: ParsedIntent, user_id: Optional[str] = None, limit: Optional[int] = None) -> SearchResult:
        t0 = time.perf_counter()
        matches = self.score_all(intent)
        total = len(matches)
        matches.sort(
            key=lambda m: rank_score(
                m.similarity_score,
                m.confidence_score,
                m.candidate.popularity,
                self.store.feedback(user_id, m.candidate_id),
                user_id,
            ),
            reverse=True,
        )
        matches = matches[: max(0, limit or self.search_limit)]
        elapsed_ms = (time.perf_counter() - t0) * 1000.0

        if user_id:
            self.store.record_search(
                user_id,
                {
                    "timestamp": self.clock().isoformat(),
                    "primary_intent": intent.primary_intent,
                    "matches": [{"id": m.candidate_id, "score": round(m.similarity_score, 4)} for m in matches],
                },
            )

        return SearchResult(
            matches=matches,
            total_matches=total,
            search_time_ms=elapsed_ms,
            suggestions=search_suggestions(intent, matches),
            alternative_queries=alternative_queries(intent),
        )
