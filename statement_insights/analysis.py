"""AI collaborators: statement extraction and financial insights.

Public API:
    - :func:`analyze_statements`
    - :func:`generate_financial_insights`
    - :class:`StatementFile`

Both calls go through the OpenAI Responses API with a strict JSON Schema
response format. No client is created and no environment is read at import
time.
"""

from __future__ import annotations

import base64
import json
import mimetypes
import random
import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from os import PathLike
from pathlib import Path
from typing import Any

from openai import OpenAI
from openai.types.responses import ResponseTextConfigParam
from pydantic import BaseModel, ConfigDict, field_validator

from . import prompting
from .config import Settings, load_settings
from .errors import InsightGenerationError, StatementAnalysisError
from .logging_setup import get_logger
from .models import Transaction, WireTransaction
from .pmap import p_map

# ---- Tunables (private) ------------------------------------------------------

_MAX_ATTEMPTS: int = 3
_BACKOFF_SCHEDULE_SEC: tuple[float, ...] = (0.5, 2.0)
_JITTER_PCT: float = 0.20
_MAX_INSIGHTS: int = 5

PDF_MIME_TYPE = "application/pdf"

_logger = get_logger("statement_insights.analysis")


@dataclass(frozen=True, slots=True)
class StatementFile:
    """An uploaded statement document held in memory."""

    name: str
    mime_type: str
    data: bytes

    @classmethod
    def from_path(cls, path: str | PathLike[str]) -> StatementFile:
        p = Path(path)
        mime_type, _ = mimetypes.guess_type(p.name)
        return cls(name=p.name, mime_type=mime_type or "application/octet-stream", data=p.read_bytes())

    @property
    def is_supported(self) -> bool:
        return self.mime_type == PDF_MIME_TYPE or self.mime_type.startswith("image/")

    def data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


# ---- Internal helpers --------------------------------------------------------


def _create_client() -> OpenAI:
    return OpenAI()


def _is_retryable(exc: BaseException) -> bool:
    """Return True only for HTTP 429 and 5xx errors."""

    sc = getattr(exc, "status_code", None)
    return isinstance(sc, int) and (sc == 429 or 500 <= sc < 600)


def _sleep_backoff(attempt_no: int) -> None:
    base = _BACKOFF_SCHEDULE_SEC[min(attempt_no - 1, len(_BACKOFF_SCHEDULE_SEC) - 1)]
    jitter = base * _JITTER_PCT
    time.sleep(max(0.0, base + random.uniform(-jitter, jitter)))


def _extract_response_json_mapping(resp: Any) -> Mapping[str, Any]:
    """Decode the JSON object from a Responses API result.

    Prefers ``resp.output_text`` and falls back to
    ``resp.output[0].content[0].text``. Numbers with a fraction are decoded
    as ``Decimal``. Raises ``ValueError`` when no text is found or it is not
    a JSON object.
    """

    text: str | None = getattr(resp, "output_text", None)
    if not text:
        try:
            first = resp.output[0] if getattr(resp, "output", None) else None
            content = getattr(first, "content", None)
            if content:
                txt_obj = getattr(content[0], "text", None)
                if isinstance(txt_obj, str):
                    text = txt_obj
                else:
                    maybe_val = getattr(txt_obj, "value", None)
                    if isinstance(maybe_val, str):
                        text = maybe_val
        except (AttributeError, IndexError, TypeError):
            text = None
    if not text or not isinstance(text, str):
        raise ValueError("Unexpected Responses API shape; unable to locate text output")

    try:
        decoded = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise ValueError("Model output was not valid JSON per the requested schema") from e
    if not isinstance(decoded, Mapping):
        raise ValueError("Model output was not a JSON object")
    return decoded


def _call_with_retries(
    client: OpenAI,
    *,
    label: str,
    **create_kwargs: Any,
) -> Mapping[str, Any]:
    """Run ``client.responses.create`` and decode its JSON body.

    HTTP 429 and 5xx errors are retried with backoff; anything else
    (including ``ValueError`` from decoding) propagates unchanged.
    """

    attempt = 1
    while True:
        t0 = time.perf_counter()
        try:
            resp = client.responses.create(**create_kwargs)
            return _extract_response_json_mapping(resp)
        except Exception as e:
            dt_ms = (time.perf_counter() - t0) * 1000.0
            if attempt >= _MAX_ATTEMPTS or not _is_retryable(e):
                _logger.error(
                    "%s:failed_terminal latency_ms=%.2f attempt=%d error=%s",
                    label,
                    dt_ms,
                    attempt,
                    e.__class__.__name__,
                )
                raise
            _logger.warning(
                "%s:retry latency_ms=%.2f attempt=%d error=%s",
                label,
                dt_ms,
                attempt,
                e.__class__.__name__,
            )
            _sleep_backoff(attempt)
            attempt += 1


class _ExtractionBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    transactions: list[WireTransaction]


class _InsightsBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    insights: list[str]

    @field_validator("insights")
    @classmethod
    def _drop_blank(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s.strip()]


def _file_content_part(statement: StatementFile) -> dict[str, Any]:
    if statement.mime_type == PDF_MIME_TYPE:
        return {
            "type": "input_file",
            "filename": statement.name,
            "file_data": statement.data_url(),
        }
    return {"type": "input_image", "image_url": statement.data_url(), "detail": "high"}


def _analyze_one(statement: StatementFile, *, settings: Settings) -> list[Transaction]:
    label = f"analyze_statements file={statement.name}"
    _logger.info(
        "analyze_statements:file_start file=%s mime_type=%s bytes=%d",
        statement.name,
        statement.mime_type,
        len(statement.data),
    )
    t0 = time.perf_counter()
    try:
        client = _create_client()
        body = _call_with_retries(
            client,
            label=label,
            model=settings.model,
            instructions=prompting.build_extraction_instructions(),
            input=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "input_text",
                            "text": prompting.build_extraction_prompt(statement.name),
                        },
                        _file_content_part(statement),
                    ],
                }
            ],
            text=ResponseTextConfigParam(format=prompting.build_extraction_response_format()),
        )
        parsed = _ExtractionBody.model_validate(body)
    except ValueError as e:
        # Includes pydantic.ValidationError; the model answered but not usefully.
        raise StatementAnalysisError(
            f"Could not read transactions from '{statement.name}': {e}"
        ) from e
    except Exception as e:
        raise StatementAnalysisError(f"Failed to analyze '{statement.name}': {e}") from e

    transactions = [w.to_transaction(source_file=statement.name) for w in parsed.transactions]
    _logger.info(
        "analyze_statements:file_done file=%s num_transactions=%d latency_ms=%.2f",
        statement.name,
        len(transactions),
        (time.perf_counter() - t0) * 1000.0,
    )
    return transactions


def _coerce_files(files: Iterable[StatementFile | str | PathLike[str]]) -> list[StatementFile]:
    out: list[StatementFile] = []
    for f in files:
        if isinstance(f, StatementFile):
            out.append(f)
            continue
        try:
            out.append(StatementFile.from_path(f))
        except OSError as e:
            raise StatementAnalysisError(f"Could not read statement file '{f}': {e}") from e
    return out


# ---- Public API --------------------------------------------------------------


def analyze_statements(
    files: Iterable[StatementFile | str | PathLike[str]],
    *,
    settings: Settings | None = None,
) -> list[Transaction]:
    """Extract transactions from statement documents.

    Each file is sent to the model in its own request; requests run
    concurrently (bounded by ``settings.max_workers``) and the results are
    concatenated in file order. The returned list is not sorted.

    Raises
    ------
    StatementAnalysisError
        When a file cannot be read, has an unsupported type, or its analysis
        fails. The first failure aborts the whole call.
    """

    statements = _coerce_files(files)
    if not statements:
        return []

    unsupported = [s.name for s in statements if not s.is_supported]
    if unsupported:
        raise StatementAnalysisError(
            "Unsupported file type (expected PDF or image): " + ", ".join(unsupported)
        )

    settings = settings or load_settings()
    per_file: list[list[Transaction]] = p_map(
        statements,
        lambda s: _analyze_one(s, settings=settings),
        concurrency=settings.workers_for(len(statements)),
    )
    transactions = [tx for batch in per_file for tx in batch]
    _logger.info(
        "analyze_statements:done files=%d num_transactions=%d",
        len(statements),
        len(transactions),
    )
    return transactions


def generate_financial_insights(
    transactions: Sequence[Transaction],
    *,
    settings: Settings | None = None,
) -> list[str]:
    """Ask the model for short observations about ``transactions``.

    Returns ``[]`` without a request when ``transactions`` is empty.

    Raises
    ------
    InsightGenerationError
        On any request or parsing failure.
    """

    if not transactions:
        return []

    settings = settings or load_settings()
    user_content = prompting.build_insights_user_content(
        prompting.serialize_transactions_to_json(transactions), max_insights=_MAX_INSIGHTS
    )
    try:
        client = _create_client()
        body = _call_with_retries(
            client,
            label="generate_financial_insights",
            model=settings.model,
            instructions=prompting.build_insights_instructions(),
            input=user_content,
            text=ResponseTextConfigParam(format=prompting.build_insights_response_format()),
        )
        insights = _InsightsBody.model_validate(body).insights
    except Exception as e:
        raise InsightGenerationError(f"Failed to generate insights: {e}") from e

    _logger.info("generate_financial_insights:done num_insights=%d", len(insights))
    return insights[:_MAX_INSIGHTS]
