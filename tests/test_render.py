from __future__ import annotations

from decimal import Decimal

from statement_insights import (
    CategoryRankings,
    CategoryTotal,
    Summary,
    Transaction,
    TransactionType,
    derive_views,
)
from statement_insights.render import (
    format_currency,
    render_dashboard,
    render_rankings,
    render_summary,
    render_transactions,
)


def test_format_currency():
    assert format_currency(Decimal("0")) == "$0.00"
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(Decimal("2.005")) == "$2.01"
    assert format_currency(Decimal("-3")) == "-$3.00"


def test_render_summary_absent_and_present():
    assert render_summary(None) == "No transactions loaded."
    text = render_summary(Summary(2, Decimal("1000"), Decimal("50")))
    assert "Total Transactions: 2" in text
    assert "$1,000.00" in text
    assert "$50.00" in text


def test_render_rankings_marks_empty_lists():
    text = render_rankings(CategoryRankings(top_expenses=(CategoryTotal("Food", Decimal("50")),)))
    assert text.splitlines() == [
        "Top Categories",
        "  Income",
        "    (none)",
        "  Expenses",
        "    1. Food  $50.00",
    ]


def test_render_transactions_aligns_columns():
    txs = [
        Transaction("2024-01-01", "ACME Payroll", Decimal("1000"), TransactionType.INCOME, "Salary"),
        Transaction("2024-01-05", "Tea", Decimal("3.5"), TransactionType.EXPENSE, "Food"),
    ]
    lines = render_transactions(txs).splitlines()

    assert lines[0].startswith("Date")
    assert len(lines) == 3
    assert lines[1].endswith("$1,000.00")
    assert lines[2].endswith("$3.50")
    assert len(lines[1]) == len(lines[2])


def test_render_dashboard_sections():
    view = derive_views([])
    text = render_dashboard(view, ["Keep it up."])
    assert "No transactions loaded." in text
    assert "  - Keep it up." in text
    assert "No transactions match the current filters." in text
