"""Public interface for the ``statement_insights`` package.

Re-exports the aggregation pipeline, the AI collaborators and the public
models. There is no runtime logic here, only symbol re-exports.
"""

from .analysis import StatementFile, analyze_statements, generate_financial_insights
from .errors import InsightGenerationError, StatementAnalysisError, StatementInsightsError
from .models import (
    ALL_CATEGORIES,
    MISCELLANEOUS,
    CategoryRankings,
    CategoryTotal,
    DashboardView,
    DateFilter,
    FilterSelection,
    Summary,
    Transaction,
    TransactionType,
)
from .pipeline import (
    derive_views,
    distinct_categories,
    filter_transactions,
    parse_calendar_date,
    rank_categories,
    sort_transactions,
    summarize,
)
from .session import StatementSession

__all__ = [
    # Pipeline
    "sort_transactions",
    "filter_transactions",
    "summarize",
    "rank_categories",
    "distinct_categories",
    "derive_views",
    "parse_calendar_date",
    # Collaborators
    "analyze_statements",
    "generate_financial_insights",
    "StatementFile",
    "StatementSession",
    # Models / types
    "ALL_CATEGORIES",
    "MISCELLANEOUS",
    "Transaction",
    "TransactionType",
    "DateFilter",
    "FilterSelection",
    "Summary",
    "CategoryTotal",
    "CategoryRankings",
    "DashboardView",
    # Errors
    "StatementInsightsError",
    "StatementAnalysisError",
    "InsightGenerationError",
]
