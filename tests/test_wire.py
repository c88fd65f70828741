from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from statement_insights import Transaction, TransactionType
from statement_insights.models import WireTransaction
from statement_insights.wire import (
    dump_transactions_json,
    load_transactions_json,
    parse_transactions_json,
    write_transactions_json,
)


def test_parse_accepts_wire_field_names_and_normalizes():
    text = json.dumps(
        [
            {
                "date": "2024-01-05",
                "description": " Corner Grocer ",
                "amount": 0.1,
                "type": "Expense",
                "category": None,
                "notes": None,
                "sourceFile": "jan.pdf",
                "unexpected": "ignored",
            }
        ]
    )

    (tx,) = parse_transactions_json(text)

    assert tx == Transaction(
        date="2024-01-05",
        description="Corner Grocer",
        amount=Decimal("0.1"),
        type=TransactionType.EXPENSE,
        category="",
        notes="",
        source_file="jan.pdf",
    )


def test_parse_keeps_malformed_dates_verbatim():
    (tx,) = parse_transactions_json('[{"date": "Jan 5", "amount": 3, "type": "income"}]')
    assert tx.date == "Jan 5"


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        '{"date": "2024-01-01"}',
        '[{"date": "2024-01-01", "amount": 3, "type": "refund"}]',
        '[{"date": "2024-01-01", "type": "income"}]',
    ],
)
def test_parse_rejects_invalid_documents(text: str):
    with pytest.raises(ValueError):
        parse_transactions_json(text)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(-12.5, Decimal("12.5")), ("$1,200.00", Decimal("1200.00")), (7, Decimal("7"))],
)
def test_wire_amount_coercion(raw, expected):
    w = WireTransaction.model_validate({"date": "2024-01-01", "amount": raw, "type": "expense"})
    assert w.amount == expected


def test_dump_uses_numbers_and_source_file_key():
    tx = Transaction("2024-01-01", "Pay", Decimal("1000.50"), TransactionType.INCOME, "Salary", "", "a.pdf")
    (row,) = json.loads(dump_transactions_json([tx]))
    assert row == {
        "date": "2024-01-01",
        "description": "Pay",
        "amount": 1000.5,
        "type": "income",
        "category": "Salary",
        "notes": "",
        "sourceFile": "a.pdf",
    }


def test_write_then_load_file(tmp_path: Path):
    txs = [
        Transaction("2024-01-01", "Pay", Decimal("1000.5"), TransactionType.INCOME, "Salary", "n", "a.pdf"),
        Transaction("2024-01-02", "Tea", Decimal("3.25"), TransactionType.EXPENSE, "", "", "a.pdf"),
    ]
    path = tmp_path / "out.json"
    write_transactions_json(path, txs)
    assert load_transactions_json(path) == txs


def test_round_trip_keeps_every_digit_of_the_amount(tmp_path: Path):
    tx = Transaction(
        "2024-01-01", "Bond sale", Decimal("12345678901234567.89"), TransactionType.INCOME, "Investments"
    )
    path = tmp_path / "out.json"
    write_transactions_json(path, [tx])

    assert "12345678901234567.89" in path.read_text(encoding="utf-8")
    (loaded,) = load_transactions_json(path)
    assert loaded.amount == Decimal("12345678901234567.89")
