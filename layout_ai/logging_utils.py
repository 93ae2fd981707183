"""layout_ai.logging_utils

Logging utilities:
- Rotating file log + console for operational debugging (fallbacks, pipeline failures)
- `log_event` writes one structured line per event so fallbacks can be grepped and counted
- Per-request step details go to TraceCollector, not to the log
"""

from __future__ import annotations
import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any


def build_logger(log_dir: str, name: str = "layout_ai", filename: str = "layout_ai.log") -> logging.Logger:
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    # Streamlit reruns and repeated build_service() calls reuse the same logger
    if logger.handlers:
        return logger

    handler = RotatingFileHandler(str(Path(log_dir) / filename), maxBytes=2_000_000, backupCount=5, encoding="utf-8")
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    handler.setFormatter(fmt)
    logger.addHandler(handler)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    logger.addHandler(console)
    return logger


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    """Log `event` followed by its fields as compact, key-sorted JSON."""
    logger.log(level, "%s %s", event, json.dumps(fields, default=str, sort_keys=True))
