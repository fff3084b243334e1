"""Result records produced when an attempt completes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from civicsim.models.attempt import RecordedChoice


@dataclass(frozen=True)
class PerformanceTier:
    """Coarse performance label derived from the score percentage.

    Attributes:
        level: Performance level (Excellent, Good, Fair, Needs Improvement)
        badge: Badge label awarded for the level
        min_percentage: Lowest percentage that falls in this tier
    """

    level: str
    badge: str
    min_percentage: int


# Checked in order; first tier whose threshold is met wins
EXCELLENT = PerformanceTier("Excellent", "Civic Champion", 85)
GOOD = PerformanceTier("Good", "Active Citizen", 70)
FAIR = PerformanceTier("Fair", "Learning Citizen", 55)
NEEDS_IMPROVEMENT = PerformanceTier("Needs Improvement", "Participant", 0)

PERFORMANCE_TIERS: tuple[PerformanceTier, ...] = (EXCELLENT, GOOD, FAIR)


class SimulationResult(BaseModel):
    """Immutable outcome of a completed attempt.

    This is the only piece of an attempt that is persisted long-term.
    """

    model_config = ConfigDict(frozen=True)

    simulation_id: str
    simulation_title: str
    user_id: Any = None
    total_score: int
    max_possible_score: int
    percentage: int
    performance_level: str
    badge: str
    duration_minutes: int
    choices: list[RecordedChoice]
    started_at: datetime
    completed_at: datetime

    def to_view(self) -> dict[str, Any]:
        """Result view returned to clients."""
        return {
            "simulation_id": self.simulation_id,
            "simulation_title": self.simulation_title,
            "total_score": self.total_score,
            "max_possible_score": self.max_possible_score,
            "percentage": self.percentage,
            "performance_level": self.performance_level,
            "badge": self.badge,
            "duration_minutes": self.duration_minutes,
            "choices": [c.model_dump() for c in self.choices],
            "completed_at": self.completed_at.isoformat(),
        }
