"""layout_ai.tracing

Trace collection for debug mode.
Each pipeline step appends a structured payload; the response carries them when debug is on.
One collector per request; the scorer and adapter may append from different threads.
"""

from __future__ import annotations
import threading
from dataclasses import dataclass, field
from typing import Any


@dataclass
class TraceCollector:
    """Collects per-step traces for a single recommendation request."""
    traces: list[dict[str, Any]] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add(self, step_name: str, payload: dict[str, Any]) -> None:
        with self._lock:
            self.traces.append({"step": step_name, "payload": payload})

    def steps(self) -> list[str]:
        with self._lock:
            return [t["step"] for t in self.traces]
