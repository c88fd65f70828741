"""Exception types raised by the statement collaborators.

The aggregation pipeline itself never raises for well-typed input; only the
AI-backed collaborators in :mod:`statement_insights.analysis` do.
"""

from __future__ import annotations


class StatementInsightsError(Exception):
    """Base class for errors raised by ``statement_insights``."""


class StatementAnalysisError(StatementInsightsError):
    """Transaction extraction failed.

    The message is meant to be shown to the user as-is.
    """


class InsightGenerationError(StatementInsightsError):
    """Insight generation failed. Hosts treat this as non-fatal."""
