import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import fitz
import pytest
from PIL import Image

# Add src to sys.path so we can import exam_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from exam_toolkit.core.models import EssayQuestion, ExamSet, MultipleChoiceQuestion
from exam_toolkit.core.models.questions import new_question_id
from exam_toolkit.errors import ServiceError
from exam_toolkit.generation import GenerationRequest, QuestionGenerator, RegenerationRequest


def _make_mcq(text: str = "What is 2 + 2?", answer: str = "D", qid: Optional[str] = None) -> MultipleChoiceQuestion:
    return MultipleChoiceQuestion(
        id=qid or new_question_id(),
        prompt_text=text,
        options=("1", "2", "3", "4", "5"),
        correct_option=answer,
    )


def _make_essay(text: str = "Explain photosynthesis.", guideline: str = "Light, CO2, glucose.", qid: Optional[str] = None) -> EssayQuestion:
    return EssayQuestion(id=qid or new_question_id(), prompt_text=text, answer_guideline=guideline)


class FakeGenerator(QuestionGenerator):
    """
    In-memory generator recording every request.

    Set fail_with to make the next calls raise; set gate to an
    asyncio.Event to hold calls until it is set; set swap_kinds to make
    regenerate answer with the other question variant.
    """

    def __init__(self):
        self.generate_calls: List[GenerationRequest] = []
        self.regenerate_calls: List[RegenerationRequest] = []
        self.fail_with: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.swap_kinds = False
        self.counter = 0

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    async def generate(self, request: GenerationRequest) -> ExamSet:
        self.generate_calls.append(request)
        await self._wait()
        return ExamSet(
            mcqs=tuple(_make_mcq(f"MCQ {i + 1}") for i in range(request.mcq_count)),
            essays=tuple(_make_essay(f"Essay {j + 1}") for j in range(request.essay_count)),
        )

    async def regenerate(self, request: RegenerationRequest) -> MultipleChoiceQuestion | EssayQuestion:
        self.regenerate_calls.append(request)
        await self._wait()
        self.counter += 1
        if (request.kind.value == "multiple_choice") != self.swap_kinds:
            return _make_mcq(f"Fresh MCQ {self.counter}", answer="A")
        return _make_essay(f"Fresh essay {self.counter}", guideline="New guideline")


# Common test fixtures
@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def service_error() -> ServiceError:
    return ServiceError("boom", "Could not communicate with the AI service.")


@pytest.fixture
def sample_exam() -> ExamSet:
    """Three multiple-choice questions followed by two essays."""
    return ExamSet(
        mcqs=(_make_mcq("Q1", "A"), _make_mcq("Q2", "B"), _make_mcq("Q3", "C")),
        essays=(_make_essay("E1"), _make_essay("E2")),
    )


@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def sample_pdf(tmp_path: Path):
    """Create a two-page PDF with known text."""
    pdf_path = tmp_path / "sample.pdf"
    doc = fitz.open()
    for text in ("First page about mitosis", "Second page about meiosis"):
        page = doc.new_page()
        page.insert_text((72, 72), text)
    doc.save(pdf_path)
    doc.close()
    return pdf_path


@pytest.fixture
def make_mcq():
    """Factory for multiple-choice questions."""
    return _make_mcq


@pytest.fixture
def make_essay():
    """Factory for essay questions."""
    return _make_essay
