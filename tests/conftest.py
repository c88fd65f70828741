"""Pytest configuration for test isolation.

The package reads its settings (model, worker count, log level, API key) from
the environment at call time. An autouse fixture removes those variables so
a developer's shell or ``.env`` cannot leak into test behavior; tests that
need a value set it explicitly with ``monkeypatch.setenv``.
"""

from __future__ import annotations

import pytest

_ENV_VARS = (
    "OPENAI_API_KEY",
    "STATEMENT_INSIGHTS_MODEL",
    "STATEMENT_INSIGHTS_MAX_WORKERS",
    "STATEMENT_INSIGHTS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _no_global_logging_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CLI invocations from attaching handlers to the package logger.

    ``configure_logging`` disables propagation, which would hide records from
    ``caplog`` in every later test.
    """

    import statement_insights.cli as cli_mod

    monkeypatch.setattr(cli_mod, "configure_logging", lambda *a, **kw: None)
