"""layout_ai.nlp.normalizer

Normalizes the remote model's JSON into a ParsedIntent.

The model is asked for a fixed schema but answers with varying casings and wrappers
("Primary Intent", "PrimaryIntent", "primary_intent", nested under "Analysis" or not).
`FIELD_ALIASES` is the ordered alias table: for each canonical field every alias path is tried,
under every root, before the field falls back to its default. Each field defaults independently.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from layout_ai.contracts.models import (
    COMPLEXITIES,
    EMOTIONAL_TONES,
    INTERACTIVITY_LEVELS,
    PRIMARY_INTENTS,
    STRUCTURES,
    TIME_FRAMES,
    URGENCIES,
    VISUAL_STYLES,
    Entities,
    IntentContext,
    LayoutRequirements,
    ParsedIntent,
)

AliasPath = tuple[str, ...]

_MISSING = object()

# Wrappers the model sometimes puts around the analysis, tried in order
ROOT_KEYS: tuple[str, ...] = ("Analysis", "analysis")


def _ctx(*names: str) -> list[AliasPath]:
    return [(outer, n) for outer in ("Context", "context") for n in names]


def _ent(*names: str) -> list[AliasPath]:
    return [(outer, n) for outer in ("Entities", "entities") for n in names]


def _req(*names: str) -> list[AliasPath]:
    outers = ("Layout Requirements", "LayoutRequirements", "layout_requirements", "layoutRequirements")
    return [(outer, n) for outer in outers for n in names]


FIELD_ALIASES: list[tuple[str, list[AliasPath]]] = [
    ("primary_intent", [("Primary Intent",), ("PrimaryIntent",), ("primary_intent",), ("primaryIntent",)]),
    ("secondary_intents", [("Secondary Intents",), ("SecondaryIntents",), ("secondary_intents",), ("secondaryIntents",)]),
    ("complexity", [("Complexity Level",), ("ComplexityLevel",), ("complexity_level",), ("complexityLevel",), ("complexity",)]),
    ("context.time_frame", _ctx("Timeframe", "TimeFrame", "Time Frame", "timeframe", "time_frame", "timeFrame")),
    ("context.domain", _ctx("Domain", "domain")),
    ("context.urgency", _ctx("Urgency", "urgency")),
    ("context.collaboration", _ctx("Collaboration", "collaboration")),
    ("emotional_tone", [("Emotional Tone",), ("EmotionalTone",), ("emotional_tone",), ("emotionalTone",)]),
    ("entities.dates", _ent("Dates", "dates")),
    ("entities.topics", _ent("Topics", "topics")),
    ("entities.people", _ent("People", "people")),
    ("entities.locations", _ent("Locations", "locations")),
    ("entities.numbers", _ent("Numbers", "numbers")),
    ("layout_requirements.structure", _req("Structure", "structure")),
    ("layout_requirements.elements", _req("Elements", "elements")),
    ("layout_requirements.interactivity", _req("Interactivity", "interactivity")),
    ("layout_requirements.visual_style", _req("Visual Style", "VisualStyle", "visual_style", "visualStyle")),
    ("confidence", [("Confidence Score",), ("ConfidenceScore",), ("confidence_score",), ("confidenceScore",), ("confidence",)]),
]


# ---------- coercion ----------

def _enum(allowed: tuple[str, ...]) -> Callable[[Any], Any]:
    def coerce(v: Any) -> Any:
        if not isinstance(v, str):
            return _MISSING
        s = v.strip().lower()
        return s if s in allowed else _MISSING
    return coerce


def _text(v: Any) -> Any:
    if v is None:
        return _MISSING
    s = str(v).strip()
    return s if s else _MISSING


def _str_list(v: Any) -> Any:
    if isinstance(v, str):
        return [v.strip()] if v.strip() else []
    if isinstance(v, (list, tuple)):
        return [str(x).strip() for x in v if x is not None and str(x).strip()]
    return _MISSING


def _collab(v: Any) -> Any:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v.strip().lower() in ("collaborative", "yes", "true", "team", "shared")
    return _MISSING


def _confidence(v: Any) -> Any:
    if isinstance(v, bool):
        return _MISSING
    try:
        f = float(v)
    except (TypeError, ValueError):
        return _MISSING
    if f != f:  # NaN
        return _MISSING
    return max(0.0, min(1.0, f))


@dataclass(frozen=True)
class _FieldRule:
    coerce: Callable[[Any], Any]
    default: Callable[[], Any]


_RULES: dict[str, _FieldRule] = {
    "primary_intent": _FieldRule(_enum(PRIMARY_INTENTS), lambda: "general"),
    "secondary_intents": _FieldRule(_str_list, list),
    "complexity": _FieldRule(_enum(COMPLEXITIES), lambda: "medium"),
    "context.time_frame": _FieldRule(_enum(TIME_FRAMES), lambda: "ongoing"),
    "context.domain": _FieldRule(_text, lambda: None),
    "context.urgency": _FieldRule(_enum(URGENCIES), lambda: "medium"),
    "context.collaboration": _FieldRule(_collab, lambda: False),
    "emotional_tone": _FieldRule(_enum(EMOTIONAL_TONES), lambda: "casual"),
    "entities.dates": _FieldRule(_str_list, list),
    "entities.topics": _FieldRule(_str_list, list),
    "entities.people": _FieldRule(_str_list, list),
    "entities.locations": _FieldRule(_str_list, list),
    "entities.numbers": _FieldRule(_str_list, list),
    "layout_requirements.structure": _FieldRule(_enum(STRUCTURES), lambda: "linear"),
    "layout_requirements.elements": _FieldRule(_str_list, list),
    "layout_requirements.interactivity": _FieldRule(_enum(INTERACTIVITY_LEVELS), lambda: "medium"),
    "layout_requirements.visual_style": _FieldRule(_enum(VISUAL_STYLES), lambda: "minimal"),
    "confidence": _FieldRule(_confidence, lambda: 0.5),
}


# ---------- resolution ----------

def _walk(obj: Any, path: AliasPath) -> Any:
    cur = obj
    for key in path:
        if not isinstance(cur, dict) or key not in cur:
            return _MISSING
        cur = cur[key]
    return _MISSING if cur is None else cur


def _roots(raw: dict[str, Any]) -> list[dict[str, Any]]:
    roots = [raw[k] for k in ROOT_KEYS if isinstance(raw.get(k), dict)]
    roots.append(raw)
    return roots


def resolve_field(raw: dict[str, Any], aliases: list[AliasPath], coerce: Callable[[Any], Any]) -> Any:
    """First alias (under any root) whose value coerces cleanly; `_MISSING` when none does."""
    for root in _roots(raw):
        for path in aliases:
            value = _walk(root, path)
            if value is _MISSING:
                continue
            coerced = coerce(value)
            if coerced is not _MISSING:
                return coerced
    return _MISSING


def normalize(raw: Optional[dict[str, Any]]) -> tuple[ParsedIntent, list[str]]:
    """Return (ParsedIntent, canonical names of fields that fell back to defaults)."""
    raw = raw if isinstance(raw, dict) else {}
    values: dict[str, Any] = {}
    defaulted: list[str] = []
    for name, aliases in FIELD_ALIASES:
        rule = _RULES[name]
        v = resolve_field(raw, aliases, rule.coerce)
        if v is _MISSING:
            defaulted.append(name)
            v = rule.default()
        values[name] = v

    intent = ParsedIntent(
        primary_intent=values["primary_intent"],
        secondary_intents=values["secondary_intents"],
        complexity=values["complexity"],
        context=IntentContext(
            time_frame=values["context.time_frame"],
            domain=values["context.domain"],
            urgency=values["context.urgency"],
            collaboration=values["context.collaboration"],
        ),
        emotional_tone=values["emotional_tone"],
        entities=Entities(
            dates=values["entities.dates"],
            topics=values["entities.topics"],
            people=values["entities.people"],
            locations=values["entities.locations"],
            numbers=values["entities.numbers"],
        ),
        layout_requirements=LayoutRequirements(
            structure=values["layout_requirements.structure"],
            elements=values["layout_requirements.elements"],
            interactivity=values["layout_requirements.interactivity"],
            visual_style=values["layout_requirements.visual_style"],
        ),
        confidence=values["confidence"],
        source="model",
    )
    return intent, defaulted
