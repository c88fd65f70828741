"""CLI for the ``statement_insights`` package.

Command handlers (``cmd_*``) return a process exit status and write
user-facing errors to stderr. The Typer app below wraps them. Environment
variables (notably ``OPENAI_API_KEY``) are loaded from a local ``.env`` with
``python-dotenv`` before any command runs.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .config import has_openai_api_key
from .logging_setup import configure_logging
from .models import ALL_CATEGORIES, DateFilter, FilterSelection, Transaction
from .pipeline import distinct_categories, parse_calendar_date
from .render import render_dashboard
from .session import StatementSession


def _validate_date_option(value: str | None) -> str | None:
    if value is None:
        return None
    if parse_calendar_date(value) is None:
        raise typer.BadParameter(f"expected a date as YYYY-MM-DD, got {value!r}")
    return value.strip()


def _selection(category: str, start: str | None, end: str | None) -> FilterSelection:
    return FilterSelection(category=category, date_filter=DateFilter(start_date=start, end_date=end))


def _load_json_or_report(path: Path) -> list[Transaction] | None:
    from .wire import load_transactions_json

    try:
        return load_transactions_json(path)
    except FileNotFoundError:
        print(f"Error: File not found: {path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {path}", file=sys.stderr)
    except ValueError as e:
        print(f"Error: Failed to parse transactions JSON: {e}", file=sys.stderr)
    return None


def cmd_analyze(
    files: Sequence[Path],
    *,
    selection: FilterSelection,
    insights: bool = True,
    json_out: Path | None = None,
) -> int:
    """Extract transactions from statement files and print the dashboard."""

    if not files:
        print("Error: no statement files given.", file=sys.stderr)
        return 1
    if not has_openai_api_key():
        print("Error: OPENAI_API_KEY is not set in the environment.", file=sys.stderr)
        return 1

    session = StatementSession(generate_insights=insights)
    if not session.load_statements(files):
        print(f"Error: {session.error}", file=sys.stderr)
        return 1

    session.set_category_filter(selection.category)
    session.set_date_filter(selection.date_filter)

    if json_out is not None:
        from .wire import write_transactions_json

        try:
            write_transactions_json(json_out, session.transactions)
        except OSError as e:
            print(f"Error: could not write '{json_out}': {e}", file=sys.stderr)
            return 1

    print(render_dashboard(session.view(), session.insights))
    return 0


def cmd_report(transactions_json: Path, *, selection: FilterSelection) -> int:
    """Print the dashboard for a previously exported transactions file."""

    transactions = _load_json_or_report(transactions_json)
    if transactions is None:
        return 1

    session = StatementSession(generate_insights=False)
    session.load_transactions(transactions)
    session.set_category_filter(selection.category)
    session.set_date_filter(selection.date_filter)
    print(render_dashboard(session.view()))
    return 0


def cmd_categories(transactions_json: Path) -> int:
    """Print the distinct categories of a transactions file, one per line."""

    transactions = _load_json_or_report(transactions_json)
    if transactions is None:
        return 1
    for category in distinct_categories(transactions):
        print(category)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Extract transactions from bank statements with OpenAI and summarize them. "
        "Loads OPENAI_API_KEY from a local .env before running."
    ),
)

# Module-level option objects keep calls out of parameter defaults (ruff B008).
CATEGORY_OPTION: OptionInfo = typer.Option(
    "--category",
    help=f"Exact category to keep ('{ALL_CATEGORIES}' keeps every category).",
)
START_OPTION: OptionInfo = typer.Option(
    "--start",
    help="Earliest date to keep (YYYY-MM-DD, inclusive).",
    callback=_validate_date_option,
)
END_OPTION: OptionInfo = typer.Option(
    "--end",
    help="Latest date to keep (YYYY-MM-DD, inclusive).",
    callback=_validate_date_option,
)


@app.command("analyze")
def analyze_cmd(
    files: Annotated[list[Path], typer.Argument(help="Statement PDFs or images.")],
    category: Annotated[str, CATEGORY_OPTION] = ALL_CATEGORIES,
    start: Annotated[str | None, START_OPTION] = None,
    end: Annotated[str | None, END_OPTION] = None,
    insights: Annotated[
        bool, typer.Option("--insights/--no-insights", help="Generate AI insights.")
    ] = True,
    json_out: Annotated[
        Path | None,
        typer.Option("--json-out", help="Also write the extracted transactions as JSON."),
    ] = None,
) -> None:
    """Analyze statement files and print the summary, rankings and transactions."""

    raise typer.Exit(
        cmd_analyze(
            files,
            selection=_selection(category, start, end),
            insights=insights,
            json_out=json_out,
        )
    )


@app.command("report")
def report_cmd(
    transactions_json: Annotated[Path, typer.Argument(help="Transactions JSON file.")],
    category: Annotated[str, CATEGORY_OPTION] = ALL_CATEGORIES,
    start: Annotated[str | None, START_OPTION] = None,
    end: Annotated[str | None, END_OPTION] = None,
) -> None:
    """Print the dashboard for an exported transactions file (no AI calls)."""

    raise typer.Exit(cmd_report(transactions_json, selection=_selection(category, start, end)))


@app.command("categories")
def categories_cmd(
    transactions_json: Annotated[Path, typer.Argument(help="Transactions JSON file.")],
) -> None:
    """List the distinct categories of an exported transactions file."""

    raise typer.Exit(cmd_categories(transactions_json))


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


def main() -> None:  # pragma: no cover - console script entry point
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
