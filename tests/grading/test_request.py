"""
Unit tests for grading request preconditions and prompt rendering.
"""
import json

import pytest

from grading_guru.core.models.exams import Exam, Question
from grading_guru.grading.errors import GradingPreconditionError
from grading_guru.grading.prompts import (
    SYSTEM_INSTRUCTION,
    render_exam_context,
    render_grading_prompt,
    render_questions,
)
from grading_guru.grading.request import GradingRequest


class TestGradingRequest:

    def test_for_exam_when_exam_given_then_questions_copied(self, sample_exam, sample_data_url):
        request = GradingRequest.for_exam(sample_exam, sample_data_url)
        assert request.questions == sample_exam.questions
        request.validate()

    @pytest.mark.parametrize(
        "make_request, field, message",
        [
            (lambda exam, img: GradingRequest.for_exam(None, img), "exam", "No exam selected"),
            (lambda exam, img: GradingRequest.for_exam(exam, None), "image", "No image data provided"),
            (lambda exam, img: GradingRequest.for_exam(exam, ""), "image", "No image data provided"),
            (
                lambda exam, img: GradingRequest(exam=exam, questions=(), image_data=img),
                "questions",
                "No exam questions provided",
            ),
        ],
    )
    def test_validate_when_input_missing_then_names_it(
        self, sample_exam, sample_data_url, make_request, field, message
    ):
        with pytest.raises(GradingPreconditionError) as exc_info:
            make_request(sample_exam, sample_data_url).validate()
        assert exc_info.value.field == field
        assert str(exc_info.value) == message

    def test_validate_when_exam_and_image_missing_then_exam_reported_first(self):
        with pytest.raises(GradingPreconditionError) as exc_info:
            GradingRequest.for_exam(None, None).validate()
        assert exc_info.value.field == "exam"


class TestPrompts:

    def test_system_instruction_requests_bare_json(self):
        assert "JSON" in SYSTEM_INSTRUCTION
        assert "markdown" in SYSTEM_INSTRUCTION

    def test_render_exam_context_when_unset_level_then_defaults(self):
        exam = Exam(id="e", title="Quiz", date="")
        context = json.loads(render_exam_context(exam).split("\n", 1)[1])
        assert context["level"] == "undergraduate"
        assert context["harshness"] == "moderate"
        assert context["subject"] == ""

    def test_render_questions_when_text_has_quotes_then_valid_json_blocks(self):
        q = Question(id="q", question='He said "hi"\nthen left', marking_schema="1 mark")
        rendered = render_questions([q])
        block = rendered.split("\n", 1)[1].split("\n\nNote:")[0]
        assert json.loads(block)["question"] == 'He said "hi"\nthen left'

    def test_render_grading_prompt_when_exam_given_then_sections_in_order(self, sample_exam):
        prompt = render_grading_prompt(sample_exam, sample_exam.questions)
        assert "undergraduate-level Physics exam with strict grading standards" in prompt
        positions = [
            prompt.index(marker)
            for marker in (
                "EXAM METADATA:",
                "AVAILABLE QUESTIONS:",
                "GRADING REQUIREMENTS:",
                "RESPONSE FORMAT",
                "SPECIAL INSTRUCTIONS:",
            )
        ]
        assert positions == sorted(positions)
        assert "Explain Newton's second law." in prompt
