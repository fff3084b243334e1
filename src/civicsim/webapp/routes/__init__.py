"""Route blueprints for the webapp."""

from . import auth, leaderboard, quizzes, simulations, whatsapp

__all__ = ["auth", "leaderboard", "quizzes", "simulations", "whatsapp"]
