"""layout_ai.contracts.agent_base

Base abstractions for agents and the shared per-request context.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar, Optional

from layout_ai.contracts.models import (
    ContextualLayout,
    Interaction,
    LayoutRequest,
    ParsedIntent,
    SearchResult,
    UserContext,
)
from layout_ai.tracing import TraceCollector

T = TypeVar("T")


@dataclass
class RecommendContext:
    """Shared context passed across the pipeline. Owned by one request."""
    request: LayoutRequest
    now: datetime
    tracer: TraceCollector = field(default_factory=TraceCollector)
    intent: Optional[ParsedIntent] = None
    user_context: Optional[UserContext] = None
    prompt_history: tuple[Interaction, ...] = ()
    search: Optional[SearchResult] = None
    contextual_layouts: list[ContextualLayout] = field(default_factory=list)
    layouts: list[ContextualLayout] = field(default_factory=list)

    @property
    def user_id(self) -> Optional[str]:
        return self.request.user_id


class BaseAgent(ABC, Generic[T]):
    """Abstract agent interface."""

    name: str

    @abstractmethod
    def run(self, ctx: RecommendContext) -> T:
        """Run this agent step and return a typed result."""
        raise NotImplementedError
