"""Civicsim data models.

This module exports the core data structures for simulations and attempts.
"""

from .attempt import Attempt, AttemptStatus, ProgressSummary, RecordedChoice
from .preferences import (
    DEFAULT_IMAGE,
    TOPIC_IMAGES,
    Difficulty,
    GenerationPreferences,
    Topic,
    image_for_topic,
)
from .quiz import Quiz, QuizQuestion
from .results import (
    EXCELLENT,
    FAIR,
    GOOD,
    NEEDS_IMPROVEMENT,
    PERFORMANCE_TIERS,
    PerformanceTier,
    SimulationResult,
)
from .simulation import Choice, Conclusion, ScenarioContext, Simulation, Step

__all__ = [
    # Definitions
    "Choice",
    "Step",
    "Simulation",
    "ScenarioContext",
    "Conclusion",
    # Attempts
    "Attempt",
    "AttemptStatus",
    "RecordedChoice",
    "ProgressSummary",
    # Results
    "PerformanceTier",
    "SimulationResult",
    "PERFORMANCE_TIERS",
    "EXCELLENT",
    "GOOD",
    "FAIR",
    "NEEDS_IMPROVEMENT",
    # Preferences
    "Difficulty",
    "Topic",
    "GenerationPreferences",
    "TOPIC_IMAGES",
    "DEFAULT_IMAGE",
    "image_for_topic",
    # Quizzes
    "Quiz",
    "QuizQuestion",
]
