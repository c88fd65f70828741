"""JSON import/export of transaction lists.

The on-disk shape is a JSON array of objects with the fields ``date``,
``description``, ``amount`` (number), ``type``, ``category``, ``notes`` and
``sourceFile``.
"""

from __future__ import annotations

import simplejson as json
from collections.abc import Iterable
from os import PathLike
from pathlib import Path

from pydantic import TypeAdapter

from .models import Transaction, WireTransaction, transaction_to_wire

_WIRE_LIST = TypeAdapter(list[WireTransaction])


def parse_transactions_json(text: str) -> list[Transaction]:
    """Parse and validate a JSON array of transactions.

    Raises ``ValueError`` (``pydantic.ValidationError`` included) when the
    text is not a JSON array of valid transactions.
    """

    try:
        raw = json.loads(text, use_decimal=True)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e
    if not isinstance(raw, list):
        raise ValueError("Expected a JSON array of transactions")
    return [w.to_transaction() for w in _WIRE_LIST.validate_python(raw)]


def load_transactions_json(path: str | PathLike[str]) -> list[Transaction]:
    return parse_transactions_json(Path(path).read_text(encoding="utf-8"))


def dump_transactions_json(transactions: Iterable[Transaction], *, indent: int | None = 2) -> str:
    return json.dumps(
        [transaction_to_wire(tx) for tx in transactions],
        ensure_ascii=False,
        indent=indent,
        use_decimal=True,
    )


def write_transactions_json(path: str | PathLike[str], transactions: Iterable[Transaction]) -> None:
    Path(path).write_text(dump_transactions_json(transactions) + "\n", encoding="utf-8")
