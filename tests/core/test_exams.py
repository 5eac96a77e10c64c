"""
Unit Tests for Exam and Question records
"""

from dataclasses import FrozenInstanceError

import pytest

from grading_guru.core.models.exams import (
    DEFAULT_HARSHNESS,
    DEFAULT_LEVEL,
    Exam,
    Question,
)


class TestQuestion:

    def test_new_when_called_then_unique_ids_and_empty_text(self):
        a, b = Question.new(), Question.new()
        assert a.id != b.id
        assert (a.question, a.example_answer, a.marking_schema) == ("", "", "")

    def test_to_dict_when_serialized_then_uses_camel_case_keys(self, sample_question):
        d = sample_question.to_dict()
        assert set(d) == {"id", "question", "exampleAnswer", "markingSchema"}
        assert d["markingSchema"].startswith("2 marks")

    def test_from_dict_when_fields_missing_then_defaults(self):
        q = Question.from_dict({"question": "Why?"})
        assert q.id
        assert q.question == "Why?"
        assert q.example_answer == ""


class TestExam:

    def test_new_when_called_then_defaults_applied(self):
        exam = Exam.new()
        assert exam.title == "New Exam"
        assert exam.level == DEFAULT_LEVEL
        assert exam.harshness == DEFAULT_HARSHNESS
        assert exam.questions == ()
        assert exam.date

    def test_init_when_invalid_level_then_raises_error(self):
        with pytest.raises(ValueError, match="Invalid exam level"):
            Exam(id="x", title="t", date="", level="kindergarten")

    def test_exam_when_assigned_then_immutable(self, sample_exam):
        with pytest.raises(FrozenInstanceError):
            sample_exam.title = "Changed"

    def test_with_changes_when_id_passed_then_id_and_date_kept(self, sample_exam):
        changed = sample_exam.with_changes(id="other", date="never", title="Final")
        assert changed.title == "Final"
        assert changed.id == sample_exam.id
        assert changed.date == sample_exam.date
        assert sample_exam.title == "Mechanics Midterm"

    def test_with_question_updated_when_known_id_then_only_that_field_changes(self, sample_exam):
        updated = sample_exam.with_question_updated("q-1", marking_schema="3 marks")
        q = updated.get_question("q-1")
        assert q.marking_schema == "3 marks"
        assert q.question == sample_exam.questions[0].question

    def test_with_question_updated_when_unknown_id_then_raises_key_error(self, sample_exam):
        with pytest.raises(KeyError):
            sample_exam.with_question_updated("missing", question="x")

    def test_add_then_remove_question_when_called_then_order_preserved(self, sample_exam):
        extra = Question(id="q-2", question="Second")
        exam = sample_exam.with_question_added(extra)
        assert [q.id for q in exam.questions] == ["q-1", "q-2"]
        exam = exam.with_question_removed("q-1")
        assert [q.id for q in exam.questions] == ["q-2"]

    def test_effective_values_when_unset_then_defaults(self):
        exam = Exam(id="x", title="t", date="")
        assert exam.effective_level == DEFAULT_LEVEL
        assert exam.effective_harshness == DEFAULT_HARSHNESS

    def test_from_dict_when_unknown_level_then_dropped(self, sample_exam):
        data = sample_exam.to_dict()
        data["level"] = "kindergarten"
        exam = Exam.from_dict(data)
        assert exam.level is None
        assert exam.harshness == "strict"

    def test_from_dict_when_missing_title_then_raises_key_error(self):
        with pytest.raises(KeyError):
            Exam.from_dict({"id": "x"})

    def test_to_dict_when_optional_fields_none_then_omitted(self):
        d = Exam(id="x", title="t", date="").to_dict()
        assert "subject" not in d
        assert "level" not in d
        assert d["questions"] == []
