"""layout_ai.config

Centralized configuration for the layout recommender.

Uses environment variables to avoid hardcoded secrets. A missing model credential is not a
configuration problem: the intent extractor simply runs in rule-based mode.
"""

from __future__ import annotations
from dataclasses import dataclass
import os

from layout_ai.paths import default_corpus_path


def _env(name: str, default: str | None = None) -> str | None:
    val = os.getenv(name)
    return val if val is not None else default


def _env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Recommender settings loaded from environment variables."""

    # Remote intent model (OpenAI)
    openai_api_key: str | None = None
    openai_model: str = "gpt-4"
    openai_max_tokens: int = 1000
    openai_temperature: float = 0.3

    # Remote intent model (Azure OpenAI)
    azure_openai_endpoint: str = ""
    azure_openai_chat_deployment: str = ""
    azure_openai_api_version: str = "2024-12-01-preview"

    extractor_timeout_seconds: float = 8.0

    # Matching
    similarity_threshold: float = 0.3
    search_limit: int = 10
    default_max_results: int = 5

    # Learning
    max_history_size: int = 100
    search_history_size: int = 50
    learning_enabled: bool = True
    cache_enabled: bool = True
    default_personalization: str = "medium"

    # Runtime
    log_dir: str = "logs"
    corpus_path: str = ""
    model_version: str = "1.0.0"
    default_debug: bool = False

    @property
    def extractor_enabled(self) -> bool:
        """True when any remote credential is configured."""
        from layout_ai.auth import extractor_credentials_available

        return extractor_credentials_available(self)

    def validate(self) -> list[str]:
        """Return a list of problems; empty means the settings are usable."""
        errors: list[str] = []
        if not 0.0 <= self.similarity_threshold <= 1.0:
            errors.append("Similarity threshold must be between 0 and 1")
        if not 1 <= self.default_max_results <= 50:
            errors.append("Max results must be between 1 and 50")
        if not 1 <= self.search_limit <= 50:
            errors.append("Search limit must be between 1 and 50")
        if not 1 <= self.max_history_size <= 1000:
            errors.append("Max history size must be between 1 and 1000")
        if self.extractor_timeout_seconds <= 0:
            errors.append("Extractor timeout must be positive")
        if self.default_personalization not in ("low", "medium", "high"):
            errors.append("Personalization level must be low, medium or high")
        return errors

    @staticmethod
    def load() -> "Settings":
        return Settings(
            openai_api_key=(_env("OPENAI_API_KEY") or "").strip() or None,
            openai_model=_env("LAYOUT_AI_OPENAI_MODEL", "gpt-4") or "gpt-4",
            openai_max_tokens=_env_int("LAYOUT_AI_OPENAI_MAX_TOKENS", 1000),
            openai_temperature=_env_float("LAYOUT_AI_OPENAI_TEMPERATURE", 0.3),
            azure_openai_endpoint=_env("AZURE_OPENAI_ENDPOINT", "") or "",
            azure_openai_chat_deployment=_env("AZURE_OPENAI_CHAT_DEPLOYMENT", "") or "",
            azure_openai_api_version=_env("AZURE_OPENAI_API_VERSION", "2024-12-01-preview") or "2024-12-01-preview",
            extractor_timeout_seconds=_env_float("EXTRACTOR_TIMEOUT_SECONDS", 8.0),
            similarity_threshold=_env_float("LAYOUT_AI_SIMILARITY_THRESHOLD", 0.3),
            search_limit=_env_int("LAYOUT_AI_SEARCH_LIMIT", 10),
            default_max_results=_env_int("LAYOUT_AI_MAX_RESULTS", 5),
            max_history_size=_env_int("LAYOUT_AI_MAX_HISTORY", 100),
            search_history_size=_env_int("LAYOUT_AI_SEARCH_HISTORY", 50),
            learning_enabled=_env_bool("LAYOUT_AI_LEARNING", True),
            cache_enabled=_env_bool("LAYOUT_AI_CACHE", True),
            default_personalization=(_env("LAYOUT_AI_PERSONALIZATION", "medium") or "medium").strip().lower(),
            log_dir=_env("LOG_DIR", "logs") or "logs",
            corpus_path=_env("LAYOUT_AI_CORPUS", str(default_corpus_path())) or str(default_corpus_path()),
            model_version=_env("LAYOUT_AI_MODEL_VERSION", "1.0.0") or "1.0.0",
            default_debug=_env_bool("LAYOUT_AI_DEBUG", False),
        )
