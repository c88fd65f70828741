"""Transaction aggregation and filtering engine.

Pure functions over an immutable snapshot of :class:`Transaction` records:

- :func:`sort_transactions` orders by calendar date.
- :func:`filter_transactions` applies the category and inclusive date-range
  predicates.
- :func:`summarize` folds a filtered subset into a :class:`Summary`.
- :func:`rank_categories` returns the top categories per transaction type.
- :func:`distinct_categories` lists the categories of the full collection.
- :func:`derive_views` recomputes all of the above for one selection.

None of these functions mutate their input or keep state between calls.

Dates are compared as ``datetime.date`` values (year, month, day); no time
zone is involved. A date string that does not parse as ``YYYY-MM-DD`` sorts
after every valid date and fails any bounded range test. A non-empty filter
bound that does not parse matches nothing.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from .models import (
    ALL_CATEGORIES,
    MISCELLANEOUS,
    ZERO,
    CategoryRankings,
    CategoryTotal,
    DashboardView,
    DateFilter,
    FilterSelection,
    Summary,
    Transaction,
    TransactionType,
)

TOP_N_DEFAULT = 3

_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_calendar_date(value: str | None) -> date | None:
    """Parse a strict ``YYYY-MM-DD`` string; return ``None`` when malformed."""

    if not isinstance(value, str):
        return None
    s = value.strip()
    if not _ISO_DATE_RE.fullmatch(s):
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        # Shape is right but the day does not exist (e.g. 2024-02-30).
        return None


def _sort_key(tx: Transaction) -> tuple[bool, date]:
    parsed = parse_calendar_date(tx.date)
    return (parsed is None, parsed or date.min)


def sort_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Return a new list ordered ascending by calendar date.

    The sort is stable: equal dates keep their input order, and malformed
    dates go last in input order.
    """

    return sorted(transactions, key=_sort_key)


# ---- Filter engine -----------------------------------------------------------


class _DateRange:
    """Resolved inclusive bounds for one filter pass."""

    __slots__ = ("has_start", "has_end", "start", "end")

    def __init__(self, date_filter: DateFilter | None) -> None:
        date_filter = date_filter or DateFilter()
        self.has_start = bool(date_filter.start_date)
        self.has_end = bool(date_filter.end_date)
        self.start = parse_calendar_date(date_filter.start_date) if self.has_start else None
        self.end = parse_calendar_date(date_filter.end_date) if self.has_end else None

    @property
    def unbounded(self) -> bool:
        return not (self.has_start or self.has_end)

    def contains(self, raw_date: str) -> bool:
        if self.unbounded:
            return True
        d = parse_calendar_date(raw_date)
        if d is None:
            return False
        if self.has_start and (self.start is None or d < self.start):
            return False
        if self.has_end and (self.end is None or d > self.end):
            return False
        return True


def filter_transactions(
    transactions: Iterable[Transaction],
    category_filter: str = ALL_CATEGORIES,
    date_filter: DateFilter | None = None,
) -> list[Transaction]:
    """Return the transactions matching both the category and date tests.

    ``category_filter`` is either :data:`ALL_CATEGORIES` or an exact,
    case-sensitive category. Both date bounds are inclusive. Input order is
    preserved.
    """

    date_range = _DateRange(date_filter)
    match_all = category_filter == ALL_CATEGORIES
    return [
        tx
        for tx in transactions
        if (match_all or tx.category == category_filter) and date_range.contains(tx.date)
    ]


# ---- Aggregation -------------------------------------------------------------


def summarize(
    filtered_transactions: Sequence[Transaction],
    transactions: Sequence[Transaction],
) -> Summary | None:
    """Fold ``filtered_transactions`` into totals.

    ``transactions`` is the full, unfiltered collection. When it is empty
    there is nothing to summarize and ``None`` is returned; when it is not
    but the filters matched nothing, a zero :class:`Summary` is returned.
    """

    if not filtered_transactions:
        return Summary() if transactions else None

    total_income = ZERO
    total_spending = ZERO
    for tx in filtered_transactions:
        if tx.type == TransactionType.INCOME:
            total_income += tx.amount
        else:
            total_spending += tx.amount

    return Summary(
        total_transactions=len(filtered_transactions),
        total_income=total_income,
        total_spending=total_spending,
    )


# ---- Ranking -----------------------------------------------------------------


def _top(totals: dict[str, Decimal], limit: int) -> tuple[CategoryTotal, ...]:
    # Largest amount first; equal amounts fall back to category name.
    ranked = sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))
    return tuple(CategoryTotal(category=c, amount=a) for c, a in ranked[:limit])


def rank_categories(
    filtered_transactions: Iterable[Transaction],
    limit: int = TOP_N_DEFAULT,
) -> CategoryRankings:
    """Sum amounts per category and type, and keep the ``limit`` largest.

    Empty categories are grouped under :data:`MISCELLANEOUS`. Lists shorter
    than ``limit`` are returned as-is.
    """

    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise ValueError("limit must be a non-negative integer")

    income: dict[str, Decimal] = {}
    expenses: dict[str, Decimal] = {}
    for tx in filtered_transactions:
        bucket = income if tx.type == TransactionType.INCOME else expenses
        category = tx.category or MISCELLANEOUS
        bucket[category] = bucket.get(category, ZERO) + tx.amount

    return CategoryRankings(top_income=_top(income, limit), top_expenses=_top(expenses, limit))


# ---- Catalog -----------------------------------------------------------------


def distinct_categories(transactions: Iterable[Transaction]) -> list[str]:
    """Return the sorted distinct categories, empty string included."""

    return sorted({tx.category for tx in transactions})


# ---- Composition -------------------------------------------------------------


def derive_views(
    transactions: Iterable[Transaction],
    selection: FilterSelection | None = None,
) -> DashboardView:
    """Recompute every derived view from the authoritative list."""

    selection = selection or FilterSelection()
    ordered = sort_transactions(transactions)
    filtered = filter_transactions(ordered, selection.category, selection.date_filter)
    return DashboardView(
        sorted_transactions=tuple(ordered),
        categories=tuple(distinct_categories(ordered)),
        filtered_transactions=tuple(filtered),
        summary=summarize(filtered, ordered),
        rankings=rank_categories(filtered),
    )
