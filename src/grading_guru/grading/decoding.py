"""
Module: decoding

Purpose:
    Turns the grader's raw text reply into a GradingResult. The remote
    model is free to send anything, so every field is rebuilt through one
    explicit rule and the result is either complete or an error.

Rules:
    - Numbers: parse as float; missing, unparsable, boolean, NaN or
      infinite values become 0.0. Strings must be numeric in full
      ("7.5" -> 7.5, "7.5abc" -> 0.0).
    - Text: missing or null becomes ""; non-strings are stringified.
    - Lists: anything that is not a list becomes []; every element is
      stringified the way a JavaScript client would ([1, True] -> ["1", "true"]).
    - Objects: rebuilt field by field; unknown keys are dropped.

Key Functions:
    - strip_code_fences(text)
    - coerce_number(value), coerce_text(value), coerce_string_list(value)
    - decode_grading_payload(payload): dict -> GradingResult
    - decode_grading_response(text): raw reply -> GradingResult

Used By:
    - grading.providers.OpenAIGradingProvider
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Mapping

from grading_guru.core.models.grading import (
    GradingBreakdown,
    GradingFeedback,
    GradingResult,
    MatchedQuestion,
    OcrQuality,
    SchemaCriterion,
)
from grading_guru.grading.errors import GradingResponseError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


# ─────────────────────────────────────────────────────────────────────────────
# Field Rules
# ─────────────────────────────────────────────────────────────────────────────

def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (``` or ```json) and surrounding whitespace."""
    return _FENCE_RE.sub("", text).strip()


def coerce_number(value: Any) -> float:
    """Finite float, or 0.0 when the value cannot be read as one."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        candidate = value.strip()
        if not _NUMBER_RE.match(candidate):
            return 0.0
        number = float(candidate)
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return _stringify(value)


def coerce_string_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(_stringify(item) for item in value)


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, dict) else {}


# ─────────────────────────────────────────────────────────────────────────────
# Object Rules
# ─────────────────────────────────────────────────────────────────────────────

def _decode_criterion(raw: Any) -> SchemaCriterion:
    data = _as_mapping(raw)
    return SchemaCriterion(
        criterion=coerce_text(data.get("criterion")),
        points_awarded=coerce_number(data.get("points_awarded")),
        points_possible=coerce_number(data.get("points_possible")),
        deduction_reason=coerce_text(data.get("deduction_reason")),
    )


def _decode_ocr_quality(raw: Any) -> OcrQuality | None:
    if not isinstance(raw, dict):
        return None
    return OcrQuality(
        issues=coerce_string_list(raw.get("issues")),
        impact_on_grading=coerce_text(raw.get("impact_on_grading")),
    )


def decode_grading_payload(payload: Any) -> GradingResult:
    """
    Rebuild a parsed JSON reply into a GradingResult.

    Raises:
        GradingResponseError: If the payload is not a JSON object
    """
    if not isinstance(payload, dict):
        detail = f"Expected a JSON object, got {type(payload).__name__}"
        logger.error(f"Grading response has the wrong shape: {detail}")
        raise GradingResponseError(detail)

    matched = _as_mapping(payload.get("matched_question"))
    grading = _as_mapping(payload.get("grading"))
    feedback = _as_mapping(payload.get("feedback"))
    criteria_raw = grading.get("schema_criteria")

    return GradingResult(
        matched_question=MatchedQuestion(
            question=coerce_text(matched.get("question")),
            confidence=coerce_number(matched.get("confidence")),
        ),
        grading=GradingBreakdown(
            final_score=coerce_number(grading.get("final_score")),
            total_points_possible=coerce_number(grading.get("total_points_possible")),
            confidence=coerce_number(grading.get("confidence")),
            schema_criteria=tuple(
                _decode_criterion(c) for c in criteria_raw
            ) if isinstance(criteria_raw, list) else (),
        ),
        feedback=GradingFeedback(
            detailed_comments=coerce_text(feedback.get("detailed_comments")),
            criteria_met=coerce_string_list(feedback.get("criteria_met")),
            criteria_unmet=coerce_string_list(feedback.get("criteria_unmet")),
            improvements=coerce_string_list(feedback.get("improvements")),
        ),
        ocr_quality=_decode_ocr_quality(payload.get("ocr_quality")),
    )


def decode_grading_response(text: str) -> GradingResult:
    """
    Decode the grader's raw reply.

    Raises:
        GradingResponseError: Empty reply, unparseable JSON or a non-object
    """
    if not text or not text.strip():
        logger.error("Grading response is empty")
        raise GradingResponseError("Empty response")
    cleaned = strip_code_fences(text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Grading response is not valid JSON: {e}")
        raise GradingResponseError(f"Invalid JSON: {e}") from e
    except RecursionError as e:
        logger.error(f"Grading response is nested too deeply to parse: {e}")
        raise GradingResponseError("JSON nested too deeply") from e
    return decode_grading_payload(payload)
