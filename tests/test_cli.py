from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

import statement_insights.analysis as analysis_mod
from statement_insights.cli import app
from tests.helpers.openai_stub import ApiStatusError, OpenAIStub, statement_name

runner = CliRunner()

ROWS: list[dict[str, Any]] = [
    {
        "date": "2024-01-05",
        "description": "Corner Grocer",
        "amount": 50,
        "type": "expense",
        "category": "Food",
        "notes": "",
        "sourceFile": "jan.pdf",
    },
    {
        "date": "2024-01-01",
        "description": "ACME Payroll",
        "amount": 1000,
        "type": "income",
        "category": "Salary",
        "notes": "",
        "sourceFile": "jan.pdf",
    },
    {
        "date": "2024-01-09",
        "description": "Street vendor",
        "amount": 20,
        "type": "expense",
        "category": "",
        "notes": "",
        "sourceFile": "jan.pdf",
    },
]


@pytest.fixture()
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    # The root callback loads .env from the working directory.
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def transactions_json(workdir: Path) -> Path:
    path = workdir / "transactions.json"
    path.write_text(json.dumps(ROWS), encoding="utf-8")
    return path


def test_report_prints_dashboard(transactions_json: Path):
    result = runner.invoke(app, ["report", str(transactions_json)])

    assert result.exit_code == 0, result.output
    assert "Total Transactions: 3" in result.output
    assert "Total Income:       $1,000.00" in result.output
    assert "Total Spending:     $70.00" in result.output
    assert "1. Salary  $1,000.00" in result.output
    assert "Miscellaneous  $20.00" in result.output
    lines = result.output.splitlines()
    payroll = next(i for i, line in enumerate(lines) if "ACME Payroll" in line)
    grocer = next(i for i, line in enumerate(lines) if "Corner Grocer" in line)
    assert payroll < grocer


def test_report_with_filters(transactions_json: Path):
    result = runner.invoke(
        app, ["report", str(transactions_json), "--category", "Food", "--start", "2024-01-02"]
    )

    assert result.exit_code == 0, result.output
    assert "Total Transactions: 1" in result.output
    assert "Total Spending:     $50.00" in result.output
    assert "ACME Payroll" not in result.output


def test_report_no_matches_shows_zero_summary(transactions_json: Path):
    result = runner.invoke(app, ["report", str(transactions_json), "--end", "2023-12-31"])

    assert result.exit_code == 0, result.output
    assert "Total Transactions: 0" in result.output
    assert "No transactions match the current filters." in result.output


def test_report_rejects_malformed_date_option(transactions_json: Path):
    result = runner.invoke(app, ["report", str(transactions_json), "--start", "01/02/2024"])
    assert result.exit_code != 0


def test_report_missing_file(workdir: Path):
    result = runner.invoke(app, ["report", str(workdir / "nope.json")])
    assert result.exit_code == 1
    assert "File not found" in result.output


def test_report_invalid_json(workdir: Path):
    path = workdir / "bad.json"
    path.write_text('{"not": "a list"}', encoding="utf-8")

    result = runner.invoke(app, ["report", str(path)])
    assert result.exit_code == 1
    assert "Failed to parse transactions JSON" in result.output


def test_categories_lists_full_catalog(transactions_json: Path):
    result = runner.invoke(app, ["categories", str(transactions_json)])

    assert result.exit_code == 0, result.output
    assert result.output.split("\n") == ["", "Food", "Salary", ""]


def test_analyze_requires_api_key(workdir: Path):
    pdf = workdir / "jan.pdf"
    pdf.write_bytes(b"%PDF-1.4 stub")

    result = runner.invoke(app, ["analyze", str(pdf)])
    assert result.exit_code == 1
    assert "OPENAI_API_KEY is not set" in result.output


def _stub(monkeypatch: pytest.MonkeyPatch, extract) -> OpenAIStub:
    stub = OpenAIStub(
        {
            "statement_transactions": extract,
            "financial_insights": lambda kwargs: {"insights": ["Food is your largest expense."]},
        }
    )
    monkeypatch.setattr(analysis_mod, "OpenAI", stub.factory())
    monkeypatch.setattr(analysis_mod, "_sleep_backoff", lambda attempt_no: None)
    return stub


def test_analyze_end_to_end_with_json_export(workdir: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    pdf = workdir / "jan.pdf"
    pdf.write_bytes(b"%PDF-1.4 stub")
    rows = [{k: v for k, v in r.items() if k != "sourceFile"} for r in ROWS]
    stub = _stub(monkeypatch, lambda kwargs: {"transactions": rows})
    out = workdir / "export.json"

    result = runner.invoke(app, ["analyze", str(pdf), "--json-out", str(out)])

    assert result.exit_code == 0, result.output
    assert "Total Transactions: 3" in result.output
    assert "Food is your largest expense." in result.output
    assert len(stub.calls) == 2

    exported = json.loads(out.read_text(encoding="utf-8"))
    assert [r["description"] for r in exported] == ["ACME Payroll", "Corner Grocer", "Street vendor"]
    assert {r["sourceFile"] for r in exported} == {"jan.pdf"}

    report = runner.invoke(app, ["report", str(out), "--category", "Salary"])
    assert report.exit_code == 0, report.output
    assert "Total Income:       $1,000.00" in report.output


def test_analyze_no_insights_skips_second_request(workdir: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    pdf = workdir / "jan.pdf"
    pdf.write_bytes(b"%PDF-1.4 stub")
    stub = _stub(monkeypatch, lambda kwargs: {"transactions": []})

    result = runner.invoke(app, ["analyze", str(pdf), "--no-insights"])

    assert result.exit_code == 0, result.output
    assert [c["text"]["format"]["name"] for c in stub.calls] == ["statement_transactions"]


def test_analyze_extraction_failure_exits_non_zero(workdir: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    pdf = workdir / "jan.pdf"
    pdf.write_bytes(b"%PDF-1.4 stub")

    def _boom(kwargs: dict[str, Any]) -> Any:
        return ApiStatusError(401, f"unauthorized for {statement_name(kwargs)}")

    _stub(monkeypatch, _boom)

    result = runner.invoke(app, ["analyze", str(pdf)])
    assert result.exit_code == 1
    assert "Error: Failed to analyze 'jan.pdf'" in result.output
