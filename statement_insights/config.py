"""Environment-driven settings for the AI collaborators.

Values are read from the process environment at call time. The CLI loads a
local ``.env`` with ``python-dotenv`` before anything reads them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MODEL = "gpt-5"
DEFAULT_MAX_WORKERS = 4
MAX_WORKERS_CAP = 16


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved runtime settings.

    Attributes
    ----------
    model:
        Responses API model used for extraction and insights
        (``STATEMENT_INSIGHTS_MODEL``).
    max_workers:
        Upper bound on concurrent statement analyses
        (``STATEMENT_INSIGHTS_MAX_WORKERS``).
    """

    model: str = DEFAULT_MODEL
    max_workers: int = DEFAULT_MAX_WORKERS

    def workers_for(self, n_files: int) -> int:
        """Cap ``max_workers`` to the number of files, never below 1."""

        return max(1, min(self.max_workers, n_files, MAX_WORKERS_CAP))


def _env_positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


def load_settings() -> Settings:
    model = (os.getenv("STATEMENT_INSIGHTS_MODEL") or "").strip() or DEFAULT_MODEL
    return Settings(
        model=model,
        max_workers=_env_positive_int("STATEMENT_INSIGHTS_MAX_WORKERS", DEFAULT_MAX_WORKERS),
    )


def has_openai_api_key() -> bool:
    return bool((os.getenv("OPENAI_API_KEY") or "").strip())
