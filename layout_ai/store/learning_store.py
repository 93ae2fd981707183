"""layout_ai.store.learning_store

Cache & Learning Store: every piece of state shared across requests lives here.

Partitions (each an injected KeyedStore, in-memory by default):
- responses:   canonical request hash -> LayoutResponse (no TTL; cleared explicitly)
- prompts:     user id -> prompt history written by the intent extractor (bounded)
- contexts:    user id -> UserContext written by the context adapter (bounded history + preferences)
- feedback:    (user id, candidate id) -> explicit score in [0, 1]
- learning:    user id -> learning records appended after successful responses (bounded)
- searches:    user id -> scorer search history (bounded)

Anonymous requests (no user id) never write per-user state.
"""

from __future__ import annotations

import hashlib
import json
import math
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Optional

from layout_ai.contracts.models import (
    Interaction,
    LayoutRequest,
    LayoutResponse,
    UserContext,
    UserPreferences,
    to_payload,
)
from layout_ai.contracts.tool_base import KeyedStore
from layout_ai.errors import FeedbackError
from layout_ai.store.keyed_store import InMemoryKeyedStore

RECENT_WINDOW = timedelta(hours=24)
_DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def time_of_day(now: datetime) -> str:
    h = now.hour
    if h < 6:
        return "night"
    if h < 12:
        return "morning"
    if h < 18:
        return "afternoon"
    return "evening"


def day_of_week(now: datetime) -> str:
    return _DAYS[now.weekday()]


def normalize_prompt(prompt: str) -> str:
    return " ".join((prompt or "").lower().split())


def cache_key(request: LayoutRequest) -> str:
    """Canonical hash of (normalized prompt, user id, context, options)."""
    parts = [
        normalize_prompt(request.prompt),
        request.user_id or None,
        to_payload(request.context),
        to_payload(request.options),
    ]
    blob = json.dumps(parts, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(blob.encode("utf-8")).hexdigest()


def derive_preferences(history: tuple[Interaction, ...]) -> UserPreferences:
    """Top-3 intents by frequency, modal complexity and modal tone. Ties keep first-seen order."""
    if not history:
        return UserPreferences()
    intents = Counter(i.intent.primary_intent for i in history)
    complexities = Counter(i.intent.complexity for i in history)
    tones = Counter(i.intent.emotional_tone for i in history)
    return UserPreferences(
        preferred_categories=tuple(k for k, _ in intents.most_common(3)),
        preferred_complexity=complexities.most_common(1)[0][0],
        preferred_tone=tones.most_common(1)[0][0],
    )


def _feedback_key(user_id: str, candidate_id: str) -> str:
    return json.dumps([user_id, candidate_id])


@dataclass
class LearningStore:
    """Shared keyed state. Safe for concurrent use from independent requests."""

    max_history_size: int = 100
    search_history_size: int = 50
    responses: KeyedStore = field(default_factory=InMemoryKeyedStore)
    prompts: KeyedStore = field(default_factory=InMemoryKeyedStore)
    contexts: KeyedStore = field(default_factory=InMemoryKeyedStore)
    feedback_scores: KeyedStore = field(default_factory=InMemoryKeyedStore)
    learning: KeyedStore = field(default_factory=InMemoryKeyedStore)
    searches: KeyedStore = field(default_factory=InMemoryKeyedStore)

    # ---------- response cache ----------

    def get_response(self, key: str) -> Optional[LayoutResponse]:
        return self.responses.get(key)

    def put_response(self, key: str, response: LayoutResponse) -> None:
        self.responses.put(key, response)

    def clear_cache(self) -> None:
        self.responses.clear()

    # ---------- prompt history (intent extractor) ----------

    def append_prompt(self, user_id: str, interaction: Interaction) -> tuple[Interaction, ...]:
        return self.prompts.append_bounded(user_id, interaction, self.max_history_size)

    def prompt_history(self, user_id: Optional[str]) -> tuple[Interaction, ...]:
        if not user_id:
            return ()
        return self.prompts.get(user_id, ())

    # ---------- user context (context adapter) ----------

    def user_context(self, user_id: Optional[str], now: datetime) -> UserContext:
        """Snapshot for `user_id` with time fields computed from `now`.

        Unknown users get a fresh context; it is only stored once an interaction is recorded.
        """
        stored: Optional[UserContext] = self.contexts.get(user_id) if user_id else None
        base = stored or UserContext(user_id=user_id or None)
        recent = tuple(i for i in base.history if now - i.timestamp <= RECENT_WINDOW)
        return replace(base, time_of_day=time_of_day(now), day_of_week=day_of_week(now), recent_activity=recent)

    def record_interaction(self, user_id: str, interaction: Interaction) -> UserContext:
        """Append to the user's history (bounded) and recompute preferences atomically."""
        cap = self.max_history_size

        def _apply(old: Optional[UserContext]) -> UserContext:
            base = old or UserContext(user_id=user_id)
            history = (base.history + (interaction,))[-cap:] if cap > 0 else ()
            return replace(base, history=history, preferences=derive_preferences(history))

        return self.contexts.update(user_id, _apply)

    # ---------- feedback ----------

    def record_feedback(self, user_id: str, candidate_id: str, score: float) -> None:
        if not user_id or not candidate_id:
            raise FeedbackError("Feedback needs both a user id and a candidate id")
        try:
            value = float(score)
        except (TypeError, ValueError) as e:
            raise FeedbackError(f"Feedback score is not a number: {score!r}") from e
        if math.isnan(value) or not 0.0 <= value <= 1.0:
            raise FeedbackError(f"Feedback score must be in [0, 1], got {score!r}")
        self.feedback_scores.put(_feedback_key(user_id, candidate_id), value)

    def feedback(self, user_id: Optional[str], candidate_id: str) -> Optional[float]:
        if not user_id:
            return None
        return self.feedback_scores.get(_feedback_key(user_id, candidate_id))

    # ---------- learning data / search history ----------

    def record_learning(self, user_id: str, entry: dict[str, Any]) -> tuple[dict[str, Any], ...]:
        return self.learning.append_bounded(user_id, entry, self.max_history_size)

    def learning_data(self, user_id: Optional[str]) -> tuple[dict[str, Any], ...]:
        if not user_id:
            return ()
        return self.learning.get(user_id, ())

    def record_search(self, user_id: str, entry: dict[str, Any]) -> tuple[dict[str, Any], ...]:
        return self.searches.append_bounded(user_id, entry, self.search_history_size)

    def search_history(self, user_id: Optional[str]) -> tuple[dict[str, Any], ...]:
        if not user_id:
            return ()
        return self.searches.get(user_id, ())

    # ---------- stats ----------

    def stats(self) -> dict[str, int]:
        learning_users = list(self.learning.keys())
        return {
            "cache_size": len(self.responses),
            "users_with_prompt_history": len(self.prompts),
            "users_with_context": len(self.contexts),
            "users_with_learning_data": len(learning_users),
            "total_interactions": sum(len(self.learning.get(u, ())) for u in learning_users),
            "feedback_count": len(self.feedback_scores),
            "total_searches": sum(len(self.searches.get(u, ())) for u in self.searches.keys()),
        }
