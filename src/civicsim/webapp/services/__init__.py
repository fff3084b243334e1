"""Services for the webapp."""

from .leaderboard import get_leaderboard, get_user_position
from .simulation_service import SimulationService, get_simulation_service

__all__ = ["get_simulation_service", "SimulationService", "get_leaderboard", "get_user_position"]
