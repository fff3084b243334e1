"""Generated quizzes.

Quizzes are produced on request and handed back to the caller; they are not
stored or scored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from civicsim.models.preferences import Difficulty


class QuizQuestion(BaseModel):
    """A multiple-choice question.

    Attributes:
        question: Question text
        options: Answer texts keyed by letter ("A".."D")
        correct_answer: Key of the correct option
        explanation: Why the correct answer is correct
        topic: Civic topic the question covers
        difficulty: Difficulty of this question
    """

    model_config = ConfigDict(frozen=True)

    question: str = Field(..., min_length=1)
    options: dict[str, str] = Field(..., min_length=2)
    correct_answer: str
    explanation: str = Field(..., min_length=1)
    topic: str | None = None
    difficulty: Difficulty | None = None

    @field_validator("correct_answer", mode="before")
    @classmethod
    def normalize_answer(cls, v: Any) -> str:
        return str(v).strip().upper()

    @model_validator(mode="after")
    def check_answer_is_an_option(self) -> QuizQuestion:
        if self.correct_answer not in self.options:
            raise ValueError(
                f"Correct answer {self.correct_answer!r} is not one of the options {sorted(self.options)}"
            )
        return self


class Quiz(BaseModel):
    """A generated quiz."""

    model_config = ConfigDict(frozen=True)

    quiz_title: str = Field(..., min_length=1)
    description: str = ""
    difficulty_level: Difficulty = Difficulty.BEGINNER
    estimated_time: str = ""
    questions: list[QuizQuestion] = Field(..., min_length=1)
    learning_objectives: list[str] = Field(default_factory=list)
    additional_resources: list[str] = Field(default_factory=list)
    is_generated: bool = True

    @property
    def question_count(self) -> int:
        return len(self.questions)
