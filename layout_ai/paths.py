"""layout_ai.paths

Helpers for resolving file system paths consistently (Streamlit and scripts run from different CWDs).
"""

from __future__ import annotations
from pathlib import Path


def project_root() -> Path:
    """Return the repository root folder (parent of `layout_ai/`)."""
    return Path(__file__).resolve().parents[1]


def data_dir() -> Path:
    """Return the packaged data directory."""
    return Path(__file__).resolve().parent / "data"


def default_corpus_path() -> Path:
    return data_dir() / "templates.jsonl"
