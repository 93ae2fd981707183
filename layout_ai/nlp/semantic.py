"""layout_ai.nlp.semantic

Keyword similarity between an intent's tokens and a template's keywords/tags.

Deliberately simple: Jaccard overlap plus a small fixed table of synonym clusters and substring
credit. The scorer weights and the 0.3 cut-off are tuned against this method, so it is not a
stand-in for embeddings.
"""

from __future__ import annotations

from typing import Iterable

SEMANTIC_GROUPS: dict[str, frozenset[str]] = {
    "time": frozenset({"daily", "weekly", "monthly", "yearly", "today", "tomorrow", "schedule"}),
    "planning": frozenset({"plan", "organize", "schedule", "arrange", "prepare", "goal"}),
    "tracking": frozenset({"track", "monitor", "log", "record", "progress", "habit"}),
    "creative": frozenset({"creative", "art", "design", "draw", "sketch", "brainstorm"}),
    "study": frozenset({"study", "learn", "notes", "academic", "research", "exam"}),
    "business": frozenset({"meeting", "agenda", "project", "professional", "work"}),
    "fitness": frozenset({"workout", "exercise", "fitness", "health", "nutrition"}),
}

JACCARD_WEIGHT = 0.6
SEMANTIC_WEIGHT = 0.4
SAME_GROUP_CREDIT = 1.0
SUBSTRING_CREDIT = 0.5


def normalize_tokens(items: Iterable[str]) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for it in items:
        t = str(it or "").strip().lower()
        if t and t not in seen:
            seen.add(t)
            out.append(t)
    return out


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    sa, sb = set(a), set(b)
    union = sa | sb
    if not union:
        return 0.0
    return len(sa & sb) / len(union)


def same_group(a: str, b: str) -> bool:
    return any(a in words and b in words for words in SEMANTIC_GROUPS.values())


def semantic_similarity(intent_words: list[str], template_words: list[str]) -> float:
    """Average credit over the word pairs that earned any: same cluster 1.0, substring 0.5.

    A pair in the same cluster that is also a substring pair counts twice, once per rule.
    """
    total = 0.0
    comparisons = 0
    for iw in intent_words:
        for tw in template_words:
            if same_group(iw, tw):
                total += SAME_GROUP_CREDIT
                comparisons += 1
            if iw in tw or tw in iw:
                total += SUBSTRING_CREDIT
                comparisons += 1
    return total / comparisons if comparisons else 0.0


def keyword_similarity(intent_words: Iterable[str], template_words: Iterable[str]) -> float:
    iw = normalize_tokens(intent_words)
    tw = normalize_tokens(template_words)
    return JACCARD_WEIGHT * jaccard(iw, tw) + SEMANTIC_WEIGHT * semantic_similarity(iw, tw)
