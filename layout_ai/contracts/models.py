"""layout_ai.contracts.models

Shared models for the UI, orchestrator, agents, stores and tools.

Request/response dataclasses use snake_case attributes; `to_payload` renders any of them in the
camelCase JSON shape the notebook application consumes, and `LayoutRequest.from_dict` parses it.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from typing import Any, Literal, Optional, get_args

PrimaryIntent = Literal["planning", "tracking", "creative", "study", "business", "fitness", "journal", "general"]
Complexity = Literal["simple", "medium", "complex"]
TimeFrame = Literal["daily", "weekly", "monthly", "yearly", "ongoing"]
Urgency = Literal["low", "medium", "high"]
EmotionalTone = Literal["professional", "casual", "creative", "academic", "personal"]
Structure = Literal["linear", "grid", "hierarchical", "freeform"]
Interactivity = Literal["low", "medium", "high"]
VisualStyle = Literal["minimal", "detailed", "colorful", "professional"]
PersonalizationLevel = Literal["low", "medium", "high"]
IntentSource = Literal["model", "rules"]

PRIMARY_INTENTS: tuple[str, ...] = get_args(PrimaryIntent)
COMPLEXITIES: tuple[str, ...] = get_args(Complexity)
TIME_FRAMES: tuple[str, ...] = get_args(TimeFrame)
URGENCIES: tuple[str, ...] = get_args(Urgency)
EMOTIONAL_TONES: tuple[str, ...] = get_args(EmotionalTone)
STRUCTURES: tuple[str, ...] = get_args(Structure)
INTERACTIVITY_LEVELS: tuple[str, ...] = get_args(Interactivity)
VISUAL_STYLES: tuple[str, ...] = get_args(VisualStyle)
PERSONALIZATION_LEVELS: tuple[str, ...] = get_args(PersonalizationLevel)


# ---------- Intent ----------

@dataclass
class IntentContext:
    """Situational hints extracted from the request."""
    time_frame: Optional[TimeFrame] = None
    domain: Optional[str] = None
    urgency: Optional[Urgency] = None
    collaboration: bool = False


@dataclass
class Entities:
    """Extracted entities. Lists may be empty, never None."""
    dates: list[str] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)
    people: list[str] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)
    numbers: list[str] = field(default_factory=list)


@dataclass
class LayoutRequirements:
    structure: Structure = "linear"
    elements: list[str] = field(default_factory=list)
    interactivity: Interactivity = "medium"
    visual_style: VisualStyle = "minimal"


@dataclass
class ParsedIntent:
    """Structured interpretation of a free-text request.

    `confidence` is the extractor's certainty about this interpretation; it says nothing about how
    well any template matches.
    """
    primary_intent: PrimaryIntent = "general"
    secondary_intents: list[str] = field(default_factory=list)
    complexity: Complexity = "medium"
    context: IntentContext = field(default_factory=IntentContext)
    emotional_tone: EmotionalTone = "casual"
    entities: Entities = field(default_factory=Entities)
    layout_requirements: LayoutRequirements = field(default_factory=LayoutRequirements)
    confidence: float = 0.5
    source: IntentSource = "rules"


# ---------- Corpus ----------

@dataclass(frozen=True)
class EditableField:
    """A typed, editable region of a template."""
    id: str
    type: str
    x: float
    y: float
    width: float
    height: float
    placeholder: Optional[str] = None
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class CandidateTemplate:
    """Immutable corpus record; built at load time, read-only during requests."""
    id: str
    name: str
    category: str
    description: str
    keywords: frozenset[str]
    tags: frozenset[str]
    editable_fields: tuple[EditableField, ...]
    popularity: int
    svg_template: str = ""
    structure_hints: frozenset[str] = frozenset()

    @property
    def field_count(self) -> int:
        return len(self.editable_fields)


@dataclass
class MatchResult:
    """Score of one candidate against one intent. Lives for a single request."""
    candidate_id: str
    similarity_score: float
    confidence_score: float
    reasoning: list[str]
    candidate: CandidateTemplate
    dimension_scores: dict[str, float] = field(default_factory=dict)


@dataclass
class SearchResult:
    matches: list[MatchResult] = field(default_factory=list)
    total_matches: int = 0
    search_time_ms: float = 0.0
    suggestions: list[str] = field(default_factory=list)
    alternative_queries: list[str] = field(default_factory=list)


# ---------- User state ----------

@dataclass(frozen=True)
class Interaction:
    """One history entry. The extractor records prompts, the adapter records chosen layouts."""
    timestamp: datetime
    intent: ParsedIntent
    prompt: Optional[str] = None
    chosen_template_id: Optional[str] = None
    collaborative: bool = False


@dataclass(frozen=True)
class UserPreferences:
    preferred_categories: tuple[str, ...] = ()
    preferred_complexity: Complexity = "medium"
    preferred_tone: EmotionalTone = "casual"


@dataclass(frozen=True)
class UserContext:
    """Snapshot of one user's state. Time fields are computed at request time, not stored."""
    user_id: Optional[str] = None
    history: tuple[Interaction, ...] = ()
    preferences: UserPreferences = field(default_factory=UserPreferences)
    time_of_day: str = "morning"
    day_of_week: str = "monday"
    recent_activity: tuple[Interaction, ...] = ()

    @property
    def is_anonymous(self) -> bool:
        return not self.user_id


# ---------- Layouts ----------

@dataclass
class LayoutContext:
    time_context: str
    domain_context: str
    social_context: str
    explanation: str
    history_size: int = 0


@dataclass
class Personalization:
    user_preferences: dict[str, Any] = field(default_factory=dict)
    learning_insights: dict[str, Any] = field(default_factory=dict)
    adaptation_level: str = "none"


@dataclass
class LayoutMetadata:
    confidence: float
    reasoning: list[str] = field(default_factory=list)
    complexity: Complexity = "medium"
    generation_method: str = "contextual"
    alternatives: list[str] = field(default_factory=list)
    next_suggestions: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    similarity_score: Optional[float] = None
    popularity: int = 50


@dataclass
class ContextualLayout:
    """A ranked layout: either synthesized for this user/moment or a generic corpus match."""
    id: str
    name: str
    description: str
    category: str
    editable_fields: list[EditableField]
    context: LayoutContext
    personalization: Personalization
    metadata: LayoutMetadata
    source: Literal["contextual", "corpus"] = "contextual"
    svg_template: str = ""


@dataclass
class ContextualSuggestion:
    layout_type: str
    reasoning: str
    confidence: float
    alternatives: list[str] = field(default_factory=list)


# ---------- Request / response ----------

@dataclass
class RequestContext:
    previous_layouts: list[str] = field(default_factory=list)
    preferences: dict[str, Any] = field(default_factory=dict)
    category: Optional[str] = None
    session_data: dict[str, Any] = field(default_factory=dict)


@dataclass
class RequestOptions:
    max_results: Optional[int] = None
    include_alternatives: bool = False
    learning_mode: bool = True
    personalization_level: Optional[PersonalizationLevel] = None
    debug: bool = False


@dataclass
class LayoutRequest:
    """Incoming recommendation request from the notebook application."""
    prompt: str
    user_id: Optional[str] = None
    context: RequestContext = field(default_factory=RequestContext)
    options: RequestOptions = field(default_factory=RequestOptions)

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "LayoutRequest":
        ctx = payload.get("context") or {}
        opts = payload.get("options") or {}
        level = opts.get("personalizationLevel")
        max_results = opts.get("maxResults")
        return LayoutRequest(
            prompt=str(payload.get("prompt") or ""),
            user_id=(str(payload["userId"]) if payload.get("userId") else None),
            context=RequestContext(
                previous_layouts=[str(x) for x in (ctx.get("previousLayouts") or [])],
                preferences=dict(ctx.get("preferences") or {}),
                category=(str(ctx["category"]) if ctx.get("category") else None),
                session_data=dict(ctx.get("sessionData") or {}),
            ),
            options=RequestOptions(
                max_results=(int(max_results) if max_results is not None else None),
                include_alternatives=bool(opts.get("includeAlternatives", False)),
                learning_mode=(opts.get("learningMode") is not False),
                personalization_level=(level if level in PERSONALIZATION_LEVELS else None),
                debug=bool(opts.get("debug", False)),
            ),
        )


@dataclass
class Insights:
    intent_analysis: Optional[ParsedIntent] = None
    user_patterns: dict[str, Any] = field(default_factory=dict)
    recommendations: list[str] = field(default_factory=list)
    learning_insights: dict[str, Any] = field(default_factory=dict)


@dataclass
class ResponseMetadata:
    processing_time_ms: float
    confidence: float
    cache_hit: bool
    model_version: str
    traces: list[dict[str, Any]] | None = None


@dataclass
class LayoutResponse:
    """Final response from the orchestrator. List fields are always present."""
    success: bool
    layouts: list[ContextualLayout]
    suggestions: list[ContextualSuggestion]
    search_results: SearchResult
    insights: Insights
    metadata: ResponseMetadata
    error: Optional[str] = None

    @staticmethod
    def failure(message: str, processing_time_ms: float, model_version: str) -> "LayoutResponse":
        return LayoutResponse(
            success=False,
            layouts=[],
            suggestions=[],
            search_results=SearchResult(search_time_ms=processing_time_ms),
            insights=Insights(),
            metadata=ResponseMetadata(
                processing_time_ms=processing_time_ms,
                confidence=0.0,
                cache_hit=False,
                model_version=model_version,
            ),
            error=message,
        )


# ---------- Serialization ----------

def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def to_payload(obj: Any) -> Any:
    """Render dataclasses as camelCase JSON-ready structures. Dict keys are left as they are."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {_camel(f.name): to_payload(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {str(k): to_payload(v) for k, v in obj.items()}
    if isinstance(obj, (frozenset, set)):
        return sorted(to_payload(v) for v in obj)
    if isinstance(obj, (list, tuple)):
        return [to_payload(v) for v in obj]
    if isinstance(obj, datetime):
        return obj.isoformat()
    return obj


def response_to_dict(resp: LayoutResponse) -> dict[str, Any]:
    return to_payload(resp)
