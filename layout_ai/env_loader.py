"""layout_ai.env_loader

.env loading for the remote intent model credentials (OPENAI_API_KEY, AZURE_OPENAI_*).

LAYOUT_AI_ENV_FILE names an explicit file; otherwise python-dotenv looks for the nearest
.env from the working directory upward. Variables already in the environment are kept.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv


def load_env(dotenv_path: str | None = None, override: bool = False) -> str | None:
    """Load a .env file and return its path, or None when there is nothing to load."""
    path = dotenv_path or os.getenv("LAYOUT_AI_ENV_FILE") or find_dotenv(usecwd=True)
    if not path or not Path(path).expanduser().is_file():
        return None
    path = str(Path(path).expanduser())
    load_dotenv(dotenv_path=path, override=override)
    return path
