"""
Parse and strictly validate raw model output against the report schema.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, List, Union

from pydantic import ValidationError

from ..errors import MalformedJsonError, SchemaValidationError
from .schema import ValidatedReport

logger = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\n?[ \t]*```$")


def strip_code_fences(text: str) -> str:
    """
    Remove one optional layer of markdown fencing (```json ... ``` or ``` ... ```).

    Only a fence at the very start and one at the very end are removed; inner
    backticks are left alone.
    """
    cleaned = (text or "").strip()
    if not cleaned.startswith("```"):
        return cleaned
    cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_and_validate_report(text: str) -> ValidatedReport:
    """
    Turn raw model text into a schema-conformant report.

    Args:
        text: Raw text returned by the model client.

    Returns:
        The validated report.

    Raises:
        MalformedJsonError: If the text is not JSON after fence stripping.
        SchemaValidationError: If the JSON does not match the schema; carries every
            violated field path.
    """
    payload = _load_json(text)
    try:
        report = ValidatedReport.model_validate(payload)
    except ValidationError as exc:
        violations = _format_violations(exc)
        logger.warning("Model output failed schema validation: %s", "; ".join(violations))
        raise SchemaValidationError(violations, raw_text=text) from exc
    logger.debug("Validated model report with %s days", len(report.days))
    return report


@dataclass(frozen=True)
class ValidationOk:
    report: ValidatedReport
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ValidationErr:
    violations: List[str]
    error: Union[MalformedJsonError, SchemaValidationError]
    ok: bool = field(default=False, init=False)


ValidationResult = Union[ValidationOk, ValidationErr]


def validate_report(text: str) -> ValidationResult:
    """
    Non-raising variant of parse_and_validate_report returning a tagged result.
    """
    try:
        return ValidationOk(parse_and_validate_report(text))
    except SchemaValidationError as exc:
        return ValidationErr(violations=exc.violations, error=exc)
    except MalformedJsonError as exc:
        return ValidationErr(violations=[f"$: {exc}"], error=exc)


def _load_json(text: str) -> Any:
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        snippet = cleaned[:200]
        logger.warning("Model output is not valid JSON (%s): %r", exc, snippet)
        raise MalformedJsonError(f"Model output is not valid JSON: {exc}", raw_text=text) from exc


def _format_violations(exc: ValidationError) -> List[str]:
    violations: List[str] = []
    for error in exc.errors(include_url=False):
        path = ".".join(str(part) for part in error.get("loc", ())) or "$"
        violations.append(f"{path}: {error.get('msg', 'invalid value')}")
    return violations
