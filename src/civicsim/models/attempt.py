"""Attempt state: one user's traversal of a simulation.

An Attempt is the only mutable object in the engine. It is created by
``SimulationEngine.start`` (or rebuilt from persisted progress by
``SimulationEngine.resume``), mutated once per submitted choice, and discarded
after the result has been aggregated.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from civicsim.clock import utcnow


class AttemptStatus(str, Enum):
    """Lifecycle of an attempt. COMPLETED is terminal."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class RecordedChoice(BaseModel):
    """A choice as it was recorded in the attempt history."""

    model_config = ConfigDict(frozen=True)

    step: int = Field(..., ge=1)
    choice_id: str
    points: int
    text: str = ""
    feedback: str = ""
    consequences: str | None = None


class ProgressSummary(BaseModel):
    """Compact progress view returned with every step."""

    model_config = ConfigDict(frozen=True)

    current_step: int
    total_steps: int
    percentage: int
    score: int


class Attempt(BaseModel):
    """In-memory state of an attempt.

    Attributes:
        user_id: Owning user
        simulation_id: Simulation being played
        total_steps: Step count of the simulation, copied at creation
        current_step: 1-based pointer; total_steps + 1 means completed
        score: Cumulative points
        choices: Recorded choices in submission order
        started_at: Wall-clock start time
        status: Lifecycle state
    """

    user_id: Any
    simulation_id: str
    total_steps: int = Field(..., ge=1)
    current_step: int = Field(default=1, ge=1)
    score: int = 0
    choices: list[RecordedChoice] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=utcnow)
    status: AttemptStatus = AttemptStatus.NOT_STARTED

    @property
    def is_completed(self) -> bool:
        return self.current_step > self.total_steps

    def to_progress(self) -> dict[str, Any]:
        """Persisted shape of this attempt, as stored by a ProgressRepository."""
        return {
            "user_id": self.user_id,
            "simulation_id": self.simulation_id,
            "current_step": self.current_step,
            "total_score": self.score,
            "choices": [c.model_dump() for c in self.choices],
            "started_at": self.started_at.isoformat(),
        }
