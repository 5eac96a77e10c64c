"""
Unit tests for grading response decoding.
"""
import json
import logging
import math

import pytest

from grading_guru.grading.decoding import (
    coerce_number,
    coerce_string_list,
    coerce_text,
    decode_grading_payload,
    decode_grading_response,
    strip_code_fences,
)
from grading_guru.grading.errors import GradingResponseError

FULL_REPLY = {
    "matched_question": {"question": "Explain Newton's second law.", "confidence": 0.95},
    "grading": {
        "final_score": 7.5,
        "total_points_possible": 10,
        "confidence": 0.8,
        "schema_criteria": [
            {
                "criterion": "States F = ma",
                "points_awarded": 2,
                "points_possible": 2,
                "deduction_reason": "",
            }
        ],
    },
    "feedback": {
        "detailed_comments": "Good answer.",
        "criteria_met": ["States the law"],
        "criteria_unmet": [],
        "improvements": ["Define acceleration"],
    },
}


class TestFieldRules:

    @pytest.mark.parametrize(
        "value, expected",
        [
            (7.5, 7.5),
            (3, 3.0),
            ("7.5", 7.5),
            (" 4 ", 4.0),
            ("1e2", 100.0),
            ("7.5abc", 0.0),
            ("", 0.0),
            (None, 0.0),
            (True, 0.0),
            ([1], 0.0),
            ({"a": 1}, 0.0),
            (float("nan"), 0.0),
            (float("inf"), 0.0),
            ("NaN", 0.0),
            (10**400, 0.0),
        ],
    )
    def test_coerce_number(self, value, expected):
        result = coerce_number(value)
        assert result == expected
        assert math.isfinite(result)

    def test_coerce_text_when_none_then_empty(self):
        assert coerce_text(None) == ""
        assert coerce_text(12) == "12"
        assert coerce_text("ok") == "ok"

    def test_coerce_string_list_when_mixed_elements_then_stringified(self):
        assert coerce_string_list(["a", 1, 2.0, True, None]) == ("a", "1", "2", "true", "null")

    def test_coerce_string_list_when_not_list_then_empty(self):
        assert coerce_string_list("not a list") == ()
        assert coerce_string_list(None) == ()
        assert coerce_string_list({"a": 1}) == ()

    def test_strip_code_fences_when_fenced_then_bare_json(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('```\n{"a": 1}```') == '{"a": 1}'
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


class TestDecodePayload:

    def test_decode_when_full_reply_then_every_field_mapped(self):
        result = decode_grading_payload(FULL_REPLY)
        assert result.matched_question.confidence == 0.95
        assert result.grading.final_score == 7.5
        assert result.grading.total_points_possible == 10.0
        assert result.grading.schema_criteria[0].criterion == "States F = ma"
        assert result.feedback.improvements == ("Define acceleration",)
        assert result.ocr_quality is None
        assert result.score_label == "7.5/10"

    def test_decode_when_empty_object_then_complete_defaults(self):
        result = decode_grading_payload({})
        assert result.matched_question.question == ""
        assert result.grading.final_score == 0.0
        assert result.grading.schema_criteria == ()
        assert result.feedback.criteria_met == ()
        assert result.score_label == "0/0"

    def test_decode_when_fields_malformed_then_coerced(self):
        payload = {
            "matched_question": "not an object",
            "grading": {
                "final_score": "8",
                "total_points_possible": "ten",
                "schema_criteria": [{"criterion": 5, "points_awarded": "x"}, "junk"],
            },
            "feedback": {"criteria_met": "one", "improvements": [1, False]},
            "ocr_quality": {"issues": ["smudge"], "impact_on_grading": None},
            "extra": "ignored",
        }
        result = decode_grading_payload(payload)
        assert result.matched_question.question == ""
        assert result.grading.final_score == 8.0
        assert result.grading.total_points_possible == 0.0
        assert result.grading.schema_criteria[0].criterion == "5"
        assert result.grading.schema_criteria[0].points_awarded == 0.0
        assert result.grading.schema_criteria[1].criterion == ""
        assert result.feedback.criteria_met == ()
        assert result.feedback.improvements == ("1", "false")
        assert result.ocr_quality.issues == ("smudge",)
        assert result.ocr_quality.impact_on_grading == ""

    def test_decode_when_not_object_then_raises_error(self):
        with pytest.raises(GradingResponseError):
            decode_grading_payload([1, 2])


class TestDecodeResponse:

    def test_decode_when_fenced_json_then_parsed(self):
        text = "```json\n" + json.dumps(FULL_REPLY) + "\n```"
        assert decode_grading_response(text).grading.final_score == 7.5

    @pytest.mark.parametrize(
        "text",
        ["", "   ", "not json", "[1, 2]", "null", "[" * 100000 + "]" * 100000],
        ids=["empty", "blank", "prose", "array", "null", "deeply-nested"],
    )
    def test_decode_when_unusable_then_generic_message(self, text):
        with pytest.raises(GradingResponseError) as exc_info:
            decode_grading_response(text)
        assert str(exc_info.value) == "Failed to process grading response"
        assert exc_info.value.detail

    def test_decode_when_not_object_then_logs_detail(self, caplog):
        with caplog.at_level(logging.ERROR, logger="grading_guru.grading.decoding"):
            with pytest.raises(GradingResponseError):
                decode_grading_response("[1, 2]")
        assert "Expected a JSON object, got list" in caplog.text
