"""SQLAlchemy models for the webapp."""

from .achievement import Achievement, UserAchievement
from .completion import SimulationCompletion
from .user import User

__all__ = ["User", "SimulationCompletion", "Achievement", "UserAchievement"]
