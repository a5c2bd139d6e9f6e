"""Test, segment and question models."""
from typing import Literal

from pydantic import Field

from knowcode.models.base import ApiModel, Identifier

Option = Literal["A", "B", "C", "D"]
OPTIONS: tuple[str, ...] = ("A", "B", "C", "D")


class Segment(ApiModel):
    """Named interval of exam audio; ``end_time=None`` runs to the end."""

    name: str
    start_time: float = 0
    end_time: float | None = None
    enables_copy: bool = False
    enables_questions: bool = False


class Test(ApiModel):
    """Exam definition as served by ``GET /api/tests``."""

    id: Identifier
    title: str = ""
    speed_wpm: int = 20
    year: int | str | None = None
    audio_url: str = ""
    segments: list[Segment] = Field(default_factory=list)
    question_count: int = 0
    active: bool = True
    passing_score: int | None = None


class Question(ApiModel):
    """Public question (no correct option)."""

    id: Identifier
    question_number: int
    question_text: str
    option_a: str = ""
    option_b: str = ""
    option_c: str = ""
    option_d: str = ""

    def options(self) -> list[tuple[str, str]]:
        """Letter/text pairs in display order."""
        return [
            ("A", self.option_a),
            ("B", self.option_b),
            ("C", self.option_c),
            ("D", self.option_d),
        ]


class AdminQuestion(Question):
    """Question with its correct option, admin endpoints only."""

    correct_option: Option = "A"


class QuestionInput(ApiModel):
    """Body for creating or updating a question."""

    question_number: int = Field(..., ge=1)
    question_text: str = Field(..., min_length=1)
    option_a: str = Field(..., min_length=1)
    option_b: str = Field(..., min_length=1)
    option_c: str = Field(..., min_length=1)
    option_d: str = Field(..., min_length=1)
    correct_option: Option = "A"


class TestUpdate(ApiModel):
    """Body for ``PUT /api/admin/tests/{id}``; unset fields are omitted."""

    active: bool | None = None
    segments: list[Segment] | None = None
