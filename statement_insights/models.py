"""Data models for ``statement_insights``.

Domain values (:class:`Transaction`, :class:`Summary`, rankings, filter
selections) are frozen dataclasses compared structurally. The
:class:`WireTransaction` pydantic model validates transactions arriving from
outside the process: model output from the statement analysis call and JSON
files previously exported by the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Category filter sentinel meaning "no category restriction".
ALL_CATEGORIES = "all"

# Ranking label for transactions with an empty category.
MISCELLANEOUS = "Miscellaneous"

ZERO = Decimal("0")


class TransactionType(StrEnum):
    INCOME = "income"
    EXPENSE = "expense"


# ---------------------------------------------------------------------------
# Core records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single financial event extracted from a statement document.

    Attributes
    ----------
    date:
        Calendar date as an ISO-8601 ``YYYY-MM-DD`` string. Kept as text so a
        malformed value survives extraction; see
        :func:`statement_insights.pipeline.parse_calendar_date`.
    amount:
        Non-negative magnitude. The direction is carried by ``type``.
    category:
        Free-text label, possibly empty.
    notes, source_file:
        Carried for display only; the pipeline ignores them.
    """

    date: str
    description: str
    amount: Decimal
    type: TransactionType
    category: str
    notes: str = ""
    source_file: str = ""


@dataclass(frozen=True, slots=True)
class DateFilter:
    """Inclusive calendar-date bounds; ``None`` (or ``""``) means unbounded.

    ``start_date <= end_date`` is not enforced: an inverted range is legal and
    matches nothing.
    """

    start_date: str | None = None
    end_date: str | None = None


@dataclass(frozen=True, slots=True)
class FilterSelection:
    """The user's current category and date selections."""

    category: str = ALL_CATEGORIES
    date_filter: DateFilter = field(default_factory=DateFilter)


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Summary:
    total_transactions: int = 0
    total_income: Decimal = ZERO
    total_spending: Decimal = ZERO


@dataclass(frozen=True, slots=True)
class CategoryTotal:
    category: str
    amount: Decimal


@dataclass(frozen=True, slots=True)
class CategoryRankings:
    """Top categories by summed amount, largest first, per transaction type."""

    top_income: tuple[CategoryTotal, ...] = ()
    top_expenses: tuple[CategoryTotal, ...] = ()


@dataclass(frozen=True, slots=True)
class DashboardView:
    """Every derived view recomputed from one transaction list and selection.

    ``summary`` is ``None`` only when no transactions were loaded at all.
    """

    sorted_transactions: tuple[Transaction, ...]
    categories: tuple[str, ...]
    filtered_transactions: tuple[Transaction, ...]
    summary: Summary | None
    rankings: CategoryRankings


# ---------------------------------------------------------------------------
# Wire model
# ---------------------------------------------------------------------------


class WireTransaction(BaseModel):
    """Validated transaction as it appears in JSON.

    Field names follow the JSON shape (``sourceFile``). Strings are stripped,
    ``type`` is matched case-insensitively and a negative ``amount`` is stored
    as its magnitude. ``date`` is kept verbatim: malformed dates are handled
    by the pipeline rather than rejected here.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, populate_by_name=True)

    date: str
    description: str = ""
    amount: Decimal = Field(allow_inf_nan=False)
    type: TransactionType
    category: str = ""
    notes: str = ""
    source_file: str = Field(default="", alias="sourceFile")

    @field_validator("description", "category", "notes", "source_file", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_from_text(cls, v: Any) -> Any:
        # Route floats through ``str`` so 0.1 becomes Decimal("0.1"), not its
        # binary expansion.
        if isinstance(v, float):
            return str(v)
        if isinstance(v, str):
            return v.strip().replace(",", "").lstrip("$")
        return v

    @field_validator("amount")
    @classmethod
    def _magnitude(cls, v: Decimal) -> Decimal:
        return abs(v)

    @field_validator("type", mode="before")
    @classmethod
    def _type_casefold(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def to_transaction(self, *, source_file: str | None = None) -> Transaction:
        return Transaction(
            date=self.date,
            description=self.description,
            amount=self.amount,
            type=self.type,
            category=self.category,
            notes=self.notes,
            source_file=self.source_file if source_file is None else source_file,
        )


def transaction_to_wire(tx: Transaction) -> dict[str, Any]:
    """Return the JSON-ready mapping for ``tx``.

    ``amount`` stays a ``Decimal``; dump with ``simplejson`` and
    ``use_decimal=True`` to write it as an exact JSON number.
    """

    return {
        "date": tx.date,
        "description": tx.description,
        "amount": tx.amount,
        "type": str(tx.type),
        "category": tx.category,
        "notes": tx.notes,
        "sourceFile": tx.source_file,
    }
