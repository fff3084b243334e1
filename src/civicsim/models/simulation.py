"""Simulation definitions.

A Simulation is an ordered list of Steps; each Step offers Choices worth a
fixed number of points. Definitions are immutable once built: the built-in
table is constructed at import time and generated simulations are loaded from
the simulation repository.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from civicsim.models.preferences import Difficulty, Topic


class Choice(BaseModel):
    """A selectable option at a step.

    Attributes:
        id: Identifier unique within the step (e.g. "A", "choice_1")
        text: Display text
        points: Score awarded for picking this choice
        feedback: Explanation shown after the choice is made
        consequences: Optional narrative consequence
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    text: str
    points: int
    feedback: str = ""
    consequences: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)


class Step(BaseModel):
    """One decision point of a simulation."""

    model_config = ConfigDict(frozen=True)

    step: int = Field(..., ge=1)
    title: str
    description: str
    image: str = ""
    choices: list[Choice] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_unique_choice_ids(self) -> Step:
        ids = [c.id for c in self.choices]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Step {self.step} has duplicate choice ids: {ids}")
        return self

    @property
    def max_points(self) -> int:
        """Highest point value among this step's choices."""
        return max(c.points for c in self.choices)

    def get_choice(self, choice_id: str) -> Choice | None:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None


class ScenarioContext(BaseModel):
    """Background story for generated simulations."""

    model_config = ConfigDict(frozen=True)

    context: str = ""
    role: str = ""
    challenge: str = ""


class Conclusion(BaseModel):
    """Closing messages shown with the results."""

    model_config = ConfigDict(frozen=True)

    success_message: str = ""
    failure_message: str = ""
    key_learnings: list[str] = Field(default_factory=list)


class Simulation(BaseModel):
    """A complete simulation definition.

    Steps must be numbered 1..N in order. The maximum possible score is
    computed once when the model is built.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    category: Topic = Topic.GOVERNANCE
    difficulty: Difficulty = Difficulty.BEGINNER
    estimated_time: str = ""
    learning_objectives: list[str] = Field(default_factory=list)
    steps: list[Step] = Field(..., min_length=1)
    context: ScenarioContext | None = None
    conclusion: Conclusion | None = None
    is_generated: bool = False

    _max_possible_score: int = PrivateAttr(default=0)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)

    @model_validator(mode="after")
    def check_step_numbering(self) -> Simulation:
        numbers = [s.step for s in self.steps]
        expected = list(range(1, len(self.steps) + 1))
        if numbers != expected:
            raise ValueError(f"Steps must be numbered {expected}, got {numbers}")
        return self

    def model_post_init(self, __context: Any) -> None:
        self._max_possible_score = sum(step.max_points for step in self.steps)

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def max_possible_score(self) -> int:
        """Sum over steps of the highest point value at that step."""
        return self._max_possible_score

    def get_step(self, step_number: int) -> Step | None:
        """Return the step at a 1-based position, or None when out of range."""
        if 1 <= step_number <= len(self.steps):
            return self.steps[step_number - 1]
        return None

    def get_choice(self, step_number: int, choice_id: str) -> Choice | None:
        step = self.get_step(step_number)
        return step.get_choice(choice_id) if step is not None else None

    def summary(self) -> dict[str, Any]:
        """Listing view of the simulation."""
        return {
            "id": self.id,
            "title": self.title,
            "total_steps": self.total_steps,
            "description": self.description or self.steps[0].description,
            "category": self.category.value,
            "difficulty": self.difficulty.value,
            "is_generated": self.is_generated,
        }
