"""Host-side session state for one statement-analysis workflow.

A :class:`StatementSession` owns the loaded transaction list, the generated
insights, the user-visible error and the current :class:`FilterSelection`.
Derived views are never stored; :meth:`StatementSession.view` recomputes them
from the current state on every call.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from os import PathLike

from . import analysis
from .errors import InsightGenerationError, StatementAnalysisError
from .logging_setup import get_logger
from .models import ALL_CATEGORIES, DashboardView, DateFilter, FilterSelection, Transaction
from .pipeline import derive_views, sort_transactions

_logger = get_logger("statement_insights.session")

type Analyzer = Callable[[Sequence[analysis.StatementFile | str | PathLike[str]]], list[Transaction]]
type InsightGenerator = Callable[[Sequence[Transaction]], list[str]]


class StatementSession:
    """Mutable workflow state around the pure pipeline.

    ``analyzer`` and ``insight_generator`` default to the OpenAI-backed
    collaborators in :mod:`statement_insights.analysis`; hosts and tests may
    pass their own callables.
    """

    def __init__(
        self,
        *,
        analyzer: Analyzer | None = None,
        insight_generator: InsightGenerator | None = None,
        generate_insights: bool = True,
    ) -> None:
        self._analyzer = analyzer or analysis.analyze_statements
        self._insight_generator = insight_generator or analysis.generate_financial_insights
        self._generate_insights = generate_insights
        self.transactions: list[Transaction] = []
        self.insights: list[str] = []
        self.error: str | None = None
        self.selection = FilterSelection()

    def load_statements(self, files: Iterable[analysis.StatementFile | str | PathLike[str]]) -> bool:
        """Replace the loaded transactions with those extracted from ``files``.

        Returns ``True`` on success. On extraction failure the message is kept
        in :attr:`error`, the transaction list stays empty and ``False`` is
        returned. Insight failures are logged and leave :attr:`insights`
        empty. An empty ``files`` is a no-op.
        """

        files = list(files)
        if not files:
            return False

        self.error = None
        self.transactions = []
        self.insights = []

        try:
            extracted = self._analyzer(files)
        except StatementAnalysisError as e:
            _logger.error("session:load_failed files=%d error=%s", len(files), e)
            self.error = str(e)
            return False
        except Exception as e:
            _logger.exception("session:load_failed files=%d error=%r", len(files), e)
            self.error = f"Failed to analyze statements: {e}"
            return False

        self.transactions = sort_transactions(extracted)
        _logger.info(
            "session:loaded files=%d num_transactions=%d", len(files), len(self.transactions)
        )

        if self._generate_insights:
            try:
                self.insights = list(self._insight_generator(self.transactions))
            except InsightGenerationError as e:
                _logger.warning("session:insights_failed error=%s", e)
            except Exception as e:
                _logger.warning("session:insights_failed error=%r", e, exc_info=True)
        return True

    def load_transactions(self, transactions: Iterable[Transaction]) -> None:
        """Adopt an already-extracted transaction list (no AI calls)."""

        self.error = None
        self.insights = []
        self.transactions = sort_transactions(transactions)

    def set_category_filter(self, category: str) -> None:
        self.selection = replace(self.selection, category=category)

    def set_date_filter(self, date_filter: DateFilter) -> None:
        self.selection = replace(self.selection, date_filter=date_filter)

    def reset_filters(self) -> None:
        self.selection = FilterSelection(category=ALL_CATEGORIES, date_filter=DateFilter())

    def dismiss_error(self) -> None:
        self.error = None

    def reset(self) -> None:
        """Forget everything and start a new analysis."""

        self.transactions = []
        self.insights = []
        self.error = None
        self.reset_filters()

    def view(self) -> DashboardView:
        return derive_views(self.transactions, self.selection)
