import base64
import io
import os
import sys
from pathlib import Path

import pytest
from PIL import Image

# Run Qt headless unless a platform is explicitly chosen
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add src to sys.path so we can import grading_guru
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from grading_guru.core.models.exams import Exam, Question  # noqa: E402


# Common test fixtures
@pytest.fixture
def sample_question():
    return Question(
        id="q-1",
        question="Explain Newton's second law.",
        example_answer="F = ma; force equals mass times acceleration.",
        marking_schema="2 marks: states F = ma\n1 mark: defines each term",
    )


@pytest.fixture
def sample_exam(sample_question):
    return Exam(
        id="exam-1",
        title="Mechanics Midterm",
        date="2024-03-01T09:00:00+00:00",
        subject="Physics",
        level="undergraduate",
        harshness="strict",
        questions=(sample_question,),
    )


@pytest.fixture
def sample_image():
    """A 40x20 RGB image with a red left half and a blue right half."""
    img = Image.new("RGB", (40, 20), color="blue")
    img.paste((255, 0, 0), (0, 0, 20, 20))
    return img


@pytest.fixture
def sample_data_url(sample_image):
    buffer = io.BytesIO()
    sample_image.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
