"""
Prompt text for the grading call.

The user prompt is assembled from fixed sections; exam metadata and the
candidate questions are rendered as JSON so quotes and newlines in
question text cannot break the structure the model is asked to read.
"""
from __future__ import annotations

import json
from typing import Sequence

from grading_guru.core.models.exams import Exam, Question

SYSTEM_INSTRUCTION = (
    "You are an expert grading assistant evaluating student exam answers from images. "
    "Return only a single, complete JSON response without any markdown formatting or code blocks."
)

ROLE = (
    "You are grading a {level}-level {subject} exam with {harshness} grading standards. "
    "The attached image shows one student's answer. Identify which of the available "
    "questions it addresses and grade it strictly according to that question's marking schema."
)

REQUIREMENTS = """GRADING REQUIREMENTS:
1. Question Identification:
   - Analyze the student's answer to determine which question it addresses
   - Provide a confidence between 0 and 1 for the identification

2. Point-Based Assessment:
   - Follow the marking schema EXACTLY as provided
   - List each point deduction with reference to the schema
   - Apply the harshness level only within schema guidelines

3. Marking Schema Application:
   - Document which criteria from the schema were met/unmet
   - Show point deductions for each unmet criterion
   - Explain any partial credit awarded"""

RESPONSE_FORMAT = """RESPONSE FORMAT (a single JSON object):
{
  "matched_question": {
    "question": "the matched question text",
    "confidence": 0.95
  },
  "grading": {
    "final_score": 8,
    "total_points_possible": 10,
    "confidence": 0.9,
    "schema_criteria": [
      {
        "criterion": "Understanding of core concepts",
        "points_awarded": 4,
        "points_possible": 5,
        "deduction_reason": "Partial explanation of key concepts"
      }
    ]
  },
  "feedback": {
    "detailed_comments": "Your answer demonstrates good understanding...",
    "criteria_met": ["Clear explanation of basic concepts"],
    "criteria_unmet": ["Missing some key comparisons"],
    "improvements": ["Consider adding more specific examples"]
  },
  "ocr_quality": {
    "issues": ["Second line partially illegible"],
    "impact_on_grading": "One criterion could not be verified"
  }
}"""

SPECIAL_INSTRUCTIONS = """SPECIAL INSTRUCTIONS:
1. Marking Schema Priority:
   - The marking schema is the PRIMARY authority for grading
   - Do not deviate from point allocations in the schema

2. Harshness Levels (apply within schema bounds):
   - lenient: Award maximum partial credit allowed by the schema
   - moderate: Award reasonable partial credit within the schema
   - strict: Minimal partial credit, require clear criterion match
   - very-strict: No partial credit unless explicitly allowed in the schema

3. Legibility:
   - Flag unclear handwriting that affects schema criteria in ocr_quality
   - Do not assume content in unclear sections

Important: Return a single, complete JSON response without any markdown formatting or code blocks."""


def render_exam_context(exam: Exam) -> str:
    metadata = {
        "id": exam.id,
        "title": exam.title,
        "date": exam.date,
        "subject": exam.subject or "",
        "level": exam.effective_level,
        "harshness": exam.effective_harshness,
    }
    return "EXAM METADATA:\n" + json.dumps(metadata, indent=2, ensure_ascii=False)


def render_questions(questions: Sequence[Question]) -> str:
    blocks = []
    for number, question in enumerate(questions, start=1):
        payload = {
            "number": number,
            "id": question.id,
            "question": question.question,
            "exampleAnswer": question.example_answer,
            "markingSchema": question.marking_schema,
        }
        blocks.append(json.dumps(payload, indent=2, ensure_ascii=False))
    return (
        "AVAILABLE QUESTIONS:\n"
        + "\n\n".join(blocks)
        + "\n\nNote: The marking schema for each question defines specific point "
        "allocations and deductions. Follow these schemas strictly when grading."
    )


def render_grading_prompt(exam: Exam, questions: Sequence[Question]) -> str:
    """Build the user-message text for one grading call."""
    role = ROLE.format(
        level=exam.effective_level,
        subject=exam.subject or "general",
        harshness=exam.effective_harshness,
    )
    return "\n\n".join(
        [
            role,
            render_exam_context(exam),
            render_questions(questions),
            REQUIREMENTS,
            RESPONSE_FORMAT,
            SPECIAL_INSTRUCTIONS,
        ]
    )
