"""Prompt construction and strict response formats for the AI collaborators.

This module builds:
- The instructions and per-file user text for statement extraction.
- A deterministic JSON serialization of transactions for the insights call.
- The strict ``text.format`` (JSON Schema) objects for the OpenAI Responses
  API, one per task.
"""

from __future__ import annotations

import simplejson as json
from collections.abc import Iterable

from openai.types.responses.response_format_text_json_schema_config_param import (
    ResponseFormatTextJSONSchemaConfigParam,
)

from .models import Transaction, TransactionType, transaction_to_wire

EXTRACTION_FORMAT_NAME = "statement_transactions"
INSIGHTS_FORMAT_NAME = "financial_insights"

BEGIN_MARKER = "BEGIN_TRANSACTIONS_JSON\n"
END_MARKER = "\nEND_TRANSACTIONS_JSON"

# Fields sent to the insights call, in order. ``sourceFile`` is left out.
TRANSACTION_FIELD_ORDER: tuple[str, ...] = (
    "date",
    "description",
    "amount",
    "type",
    "category",
    "notes",
)


def serialize_transactions_to_json(transactions: Iterable[Transaction]) -> str:
    """Serialize transactions to a JSON array with a fixed field order."""

    arr: list[dict[str, object]] = []
    for tx in transactions:
        wire = transaction_to_wire(tx)
        arr.append({key: wire[key] for key in TRANSACTION_FIELD_ORDER})
    return json.dumps(arr, ensure_ascii=False, use_decimal=True)


# ---- Statement extraction ----------------------------------------------------


def build_extraction_instructions() -> str:
    return (
        "You are an agent that extracts every transaction from a bank statement document. "
        "Report each transaction exactly once, in the order it appears. Use ISO dates "
        "(YYYY-MM-DD), resolving the year from the statement period when a row omits it. "
        "Report the amount as a positive number and put the direction in 'type': 'income' "
        "for money received (deposits, credits, refunds) and 'expense' for money spent "
        "(debits, payments, fees). Assign a short spending or income category (for example "
        "Groceries, Salary, Utilities, Transfer). Never invent transactions; skip balance "
        "lines and totals. Output JSON only that conforms to the specified schema."
    )


def build_extraction_prompt(file_name: str) -> str:
    return (
        f"Extract all transactions from the attached statement '{file_name}'. "
        "Use 'notes' for reference numbers or other useful detail, or an empty string. "
        "Return an empty 'transactions' list if the document holds no transactions."
    )


def build_extraction_response_format() -> ResponseFormatTextJSONSchemaConfigParam:
    """Return the strict JSON Schema format for statement extraction.

    Shape: ``{"transactions": [{date, description, amount, type, category,
    notes}, ...]}`` with every field required and no extra properties.
    """

    result: ResponseFormatTextJSONSchemaConfigParam = {
        "type": "json_schema",
        "name": EXTRACTION_FORMAT_NAME,
        "schema": {
            "type": "object",
            "properties": {
                "transactions": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "date": {"type": "string"},
                            "description": {"type": "string"},
                            "amount": {"type": "number", "minimum": 0},
                            "type": {
                                "type": "string",
                                "enum": [t.value for t in TransactionType],
                            },
                            "category": {"type": "string"},
                            "notes": {"type": "string"},
                        },
                        "required": list(TRANSACTION_FIELD_ORDER),
                        "additionalProperties": False,
                    },
                }
            },
            "required": ["transactions"],
            "additionalProperties": False,
        },
        "strict": True,
    }
    return result


# ---- Insights ----------------------------------------------------------------


def build_insights_instructions() -> str:
    return (
        "You are a personal finance assistant. Given a list of bank transactions, write "
        "short, specific observations about spending and income patterns: the largest "
        "spending categories, recurring charges, unusual transactions and simple savings "
        "suggestions. Refer to concrete amounts and categories. Output JSON only that "
        "conforms to the specified schema."
    )


def build_insights_user_content(transactions_json: str, *, max_insights: int = 5) -> str:
    return (
        f"Provide at most {max_insights} insights for these transactions.\n"
        f"{BEGIN_MARKER}{transactions_json}{END_MARKER}"
    )


def build_insights_response_format() -> ResponseFormatTextJSONSchemaConfigParam:
    result: ResponseFormatTextJSONSchemaConfigParam = {
        "type": "json_schema",
        "name": INSIGHTS_FORMAT_NAME,
        "schema": {
            "type": "object",
            "properties": {
                "insights": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["insights"],
            "additionalProperties": False,
        },
        "strict": True,
    }
    return result
