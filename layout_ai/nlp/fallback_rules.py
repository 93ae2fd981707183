"""layout_ai.nlp.fallback_rules

Deterministic rule-based intent extraction, used when the remote model is unavailable.

Approach:
- Keyword buckets per intent; the bucket with the most matched keywords wins (ties keep the first bucket)
- Independent keyword/regex checks for complexity, tone, time frame, urgency and collaboration
- Light regex entity extraction (dates, numbers, capitalized topics, "with <Name>", "at/in <Name>")

No network access and no randomness: the same prompt always yields the same ParsedIntent.
"""

from __future__ import annotations

import re
from typing import Optional

from layout_ai.contracts.models import (
    Entities,
    IntentContext,
    LayoutRequirements,
    ParsedIntent,
)


INTENT_KEYWORDS: dict[str, list[str]] = {
    "planning": ["plan", "schedule", "organize", "arrange", "prepare", "weekly", "daily", "monthly"],
    "tracking": ["track", "monitor", "log", "record", "progress", "habit", "goal"],
    "creative": ["creative", "art", "draw", "sketch", "design", "brainstorm", "ideas"],
    "study": ["study", "learn", "notes", "academic", "exam", "course", "research"],
    "business": ["meeting", "agenda", "project", "business", "professional", "work"],
    "fitness": ["workout", "exercise", "fitness", "health", "nutrition", "training"],
    "journal": ["journal", "diary", "mood", "reflection", "personal", "thoughts"],
}

# Checked in order; first hit wins
TONE_KEYWORDS: list[tuple[str, list[str]]] = [
    ("professional", ["meeting", "business", "professional", "work", "project", "agenda"]),
    ("casual", ["fun", "cool", "awesome", "nice", "simple", "easy"]),
    ("creative", ["creative", "art", "design", "beautiful", "colorful", "inspiring"]),
    ("academic", ["study", "research", "academic", "course", "exam", "learning"]),
    ("personal", ["personal", "diary", "journal", "mood", "thoughts", "reflection"]),
]

TIME_FRAME_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("daily", re.compile(r"\b(daily|day|days|today|tonight)\b", re.IGNORECASE)),
    ("weekly", re.compile(r"\b(weekly|week|weeks)\b", re.IGNORECASE)),
    ("monthly", re.compile(r"\b(monthly|month|months)\b", re.IGNORECASE)),
    ("yearly", re.compile(r"\b(yearly|year|years|annual)\b", re.IGNORECASE)),
]

_HIGH_URGENCY = re.compile(r"\b(urgent|asap|immediately|quick)\b", re.IGNORECASE)
_LOW_URGENCY = re.compile(r"\b(soon|later|eventually)\b", re.IGNORECASE)
_COLLABORATION = re.compile(r"\b(team|teams|group|groups|together|collaborate|collaborative|share|shared|sharing)\b", re.IGNORECASE)

_CONNECTIVE = re.compile(r"\b(and|with|plus)\b|\+", re.IGNORECASE)
_DETAIL_WORDS = re.compile(r"\b(specific|detailed|comprehensive|thorough)\b", re.IGNORECASE)
_ARTICLES = {"a", "an", "the"}

_DATE = re.compile(
    r"\b(\d{1,2}[/-]\d{1,2}[/-]\d{2,4}|\d{4}[/-]\d{1,2}[/-]\d{1,2}"
    r"|today|tomorrow|yesterday|tonight"
    r"|monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b",
    re.IGNORECASE,
)
_NUMBER = re.compile(r"\b\d+\b")
_CAPITALIZED = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\b")
_PERSON = re.compile(r"\bwith\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)")
_LOCATION = re.compile(r"\b(?:at|in)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)")

_REQUIREMENTS_BY_INTENT: dict[str, tuple[str, list[str]]] = {
    "planning": ("grid", ["calendar", "tasks", "notes"]),
    "tracking": ("hierarchical", ["progress", "metrics", "goals"]),
    "creative": ("freeform", ["canvas", "notes", "inspiration"]),
    "study": ("hierarchical", ["notes", "questions", "summary"]),
}


def tokenize(text: str) -> list[str]:
    return [t for t in re.split(r"[^a-z0-9]+", (text or "").lower()) if t]


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for it in items:
        if it not in seen:
            seen.add(it)
            out.append(it)
    return out


def matched_keywords(tokens: list[str], keywords: list[str]) -> list[str]:
    """Keywords hit by some token of length >= 3 (either string containing the other)."""
    words = [t for t in tokens if len(t) >= 3]
    return [k for k in keywords if any(k in w or w in k for w in words)]


def classify_intent(prompt: str) -> tuple[str, list[str]]:
    """Return (primary intent, matched keywords of the winning bucket)."""
    tokens = tokenize(prompt)
    best, best_hits = "general", []
    for intent, keywords in INTENT_KEYWORDS.items():
        hits = matched_keywords(tokens, keywords)
        if len(hits) > len(best_hits):
            best, best_hits = intent, hits
    return best, best_hits


def secondary_intents(prompt: str, primary: str) -> list[str]:
    tokens = tokenize(prompt)
    return [i for i, kws in INTENT_KEYWORDS.items() if i != primary and matched_keywords(tokens, kws)]


def word_count(prompt: str) -> int:
    return len([w for w in (prompt or "").split() if w.lower() not in _ARTICLES])


def assess_complexity(prompt: str) -> str:
    words = word_count(prompt)
    connective = bool(_CONNECTIVE.search(prompt or ""))
    detailed = bool(_DETAIL_WORDS.search(prompt or ""))
    if words <= 3 and not connective:
        return "simple"
    if words <= 8 and not connective and not detailed:
        return "medium"
    return "complex"


def detect_tone(prompt: str) -> str:
    p = (prompt or "").lower()
    for tone, words in TONE_KEYWORDS:
        if any(w in p for w in words):
            return tone
    return "casual"


def detect_time_frame(prompt: str) -> str:
    for frame, pattern in TIME_FRAME_PATTERNS:
        if pattern.search(prompt or ""):
            return frame
    return "ongoing"


def detect_urgency(prompt: str) -> str:
    if _HIGH_URGENCY.search(prompt or ""):
        return "high"
    if _LOW_URGENCY.search(prompt or ""):
        return "low"
    return "medium"


def detect_collaboration(prompt: str) -> bool:
    return bool(_COLLABORATION.search(prompt or ""))


def extract_entities(prompt: str, keyword_hits: Optional[list[str]] = None) -> Entities:
    text = prompt or ""
    people = _dedupe(_PERSON.findall(text))
    locations = _dedupe(_LOCATION.findall(text))
    topics = [t for t in _CAPITALIZED.findall(text) if t not in people and t not in locations]
    topics.extend(keyword_hits or [])
    return Entities(
        dates=_dedupe([d.lower() for d in _DATE.findall(text)]),
        topics=_dedupe(topics),
        people=people,
        locations=locations,
        numbers=_dedupe(_NUMBER.findall(text)),
    )


def infer_layout_requirements(intent: str, complexity: str, tone: str) -> LayoutRequirements:
    structure, elements = _REQUIREMENTS_BY_INTENT.get(intent, ("linear", []))

    interactivity = "medium"
    if complexity == "complex":
        interactivity = "high"
    elif complexity == "simple":
        interactivity = "low"

    visual_style = "minimal"
    if tone == "creative":
        visual_style = "colorful"
    elif tone == "professional":
        visual_style = "professional"
    elif tone == "academic":
        visual_style = "detailed"

    return LayoutRequirements(
        structure=structure,  # type: ignore[arg-type]
        elements=list(elements),
        interactivity=interactivity,  # type: ignore[arg-type]
        visual_style=visual_style,  # type: ignore[arg-type]
    )


def fallback_extract(prompt: str) -> ParsedIntent:
    """Rule-based ParsedIntent for `prompt`."""
    primary, hits = classify_intent(prompt)
    complexity = assess_complexity(prompt)
    tone = detect_tone(prompt)
    return ParsedIntent(
        primary_intent=primary,  # type: ignore[arg-type]
        secondary_intents=secondary_intents(prompt, primary),
        complexity=complexity,  # type: ignore[arg-type]
        context=IntentContext(
            time_frame=detect_time_frame(prompt),  # type: ignore[arg-type]
            domain=None,
            urgency=detect_urgency(prompt),  # type: ignore[arg-type]
            collaboration=detect_collaboration(prompt),
        ),
        emotional_tone=tone,  # type: ignore[arg-type]
        entities=extract_entities(prompt, hits),
        layout_requirements=infer_layout_requirements(primary, complexity, tone),
        confidence=0.7 if hits else 0.3,
        source="rules",
    )
