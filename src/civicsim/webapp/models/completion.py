"""Completed simulation records.

A completion is the only long-term record of an attempt; in-progress state
lives in the progress store and is deleted once the attempt completes.
"""

from typing import Any

from civicsim.clock import utcnow
from civicsim.models.results import SimulationResult

from ..extensions import db


class SimulationCompletion(db.Model):
    """One finished attempt with its aggregated result."""

    __tablename__ = "simulation_completions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    simulation_id = db.Column(db.String(64), nullable=False, index=True)
    simulation_title = db.Column(db.String(256), nullable=False)

    # Aggregated result
    total_score = db.Column(db.Integer, nullable=False)
    max_possible_score = db.Column(db.Integer, nullable=False)
    percentage = db.Column(db.Integer, nullable=False)
    performance_level = db.Column(db.String(32), nullable=False)
    badge = db.Column(db.String(64), nullable=False)
    points_awarded = db.Column(db.Integer, nullable=False, default=0)
    duration_minutes = db.Column(db.Integer, nullable=False, default=0)
    choices = db.Column(db.JSON, nullable=False, default=list)

    started_at = db.Column(db.DateTime, nullable=False)
    completed_at = db.Column(db.DateTime, default=utcnow, index=True)

    __table_args__ = (
        # An attempt is identified by its start time; finalising twice is a no-op
        db.UniqueConstraint("user_id", "simulation_id", "started_at", name="unique_attempt_completion"),
    )

    @classmethod
    def from_result(cls, user_id: int, result: SimulationResult, points_awarded: int) -> "SimulationCompletion":
        return cls(
            user_id=user_id,
            simulation_id=result.simulation_id,
            simulation_title=result.simulation_title,
            total_score=result.total_score,
            max_possible_score=result.max_possible_score,
            percentage=result.percentage,
            performance_level=result.performance_level,
            badge=result.badge,
            points_awarded=points_awarded,
            duration_minutes=result.duration_minutes,
            choices=[c.model_dump() for c in result.choices],
            started_at=result.started_at,
            completed_at=result.completed_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "simulation_id": self.simulation_id,
            "simulation_title": self.simulation_title,
            "total_score": self.total_score,
            "max_possible_score": self.max_possible_score,
            "percentage": self.percentage,
            "performance_level": self.performance_level,
            "badge": self.badge,
            "points_awarded": self.points_awarded,
            "duration_minutes": self.duration_minutes,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    def __repr__(self) -> str:
        return f"<SimulationCompletion {self.simulation_id} user={self.user_id} {self.percentage}%>"
