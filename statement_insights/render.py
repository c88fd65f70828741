"""Plain-text rendering of dashboard views for the terminal."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from .models import CategoryRankings, CategoryTotal, DashboardView, Summary, Transaction

_CENT = Decimal("0.01")
_DESCRIPTION_WIDTH = 40


def format_currency(amount: Decimal) -> str:
    """Format as dollars with two decimals, e.g. ``$1,234.50``."""

    quantized = amount.quantize(_CENT, rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    return f"{sign}${abs(quantized):,.2f}"


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 1] + "…"


def render_summary(summary: Summary | None) -> str:
    if summary is None:
        return "No transactions loaded."
    return "\n".join(
        [
            "Financial Summary",
            f"  Total Transactions: {summary.total_transactions}",
            f"  Total Income:       {format_currency(summary.total_income)}",
            f"  Total Spending:     {format_currency(summary.total_spending)}",
        ]
    )


def _render_ranked(title: str, entries: Sequence[CategoryTotal]) -> list[str]:
    lines = [f"  {title}"]
    if not entries:
        lines.append("    (none)")
    for rank, entry in enumerate(entries, start=1):
        lines.append(f"    {rank}. {entry.category}  {format_currency(entry.amount)}")
    return lines


def render_rankings(rankings: CategoryRankings) -> str:
    lines = ["Top Categories"]
    lines += _render_ranked("Income", rankings.top_income)
    lines += _render_ranked("Expenses", rankings.top_expenses)
    return "\n".join(lines)


def render_transactions(transactions: Iterable[Transaction]) -> str:
    rows = [("Date", "Description", "Category", "Type", "Amount")]
    for tx in transactions:
        amount = format_currency(tx.amount)
        rows.append(
            (
                tx.date,
                _truncate(tx.description, _DESCRIPTION_WIDTH),
                tx.category,
                str(tx.type),
                amount,
            )
        )
    if len(rows) == 1:
        return "No transactions match the current filters."

    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    out: list[str] = []
    for row in rows:
        cells = [cell.ljust(widths[i]) for i, cell in enumerate(row[:-1])]
        cells.append(row[-1].rjust(widths[-1]))
        out.append("  ".join(cells).rstrip())
    return "\n".join(out)


def render_insights(insights: Sequence[str]) -> str:
    if not insights:
        return "Financial Insights\n  (none)"
    return "\n".join(["Financial Insights", *(f"  - {s}" for s in insights)])


def render_dashboard(view: DashboardView, insights: Sequence[str] = ()) -> str:
    sections = [
        render_summary(view.summary),
        render_insights(insights),
        render_rankings(view.rankings),
        "Filtered Transactions\n" + render_transactions(view.filtered_transactions),
    ]
    return "\n\n".join(sections)
