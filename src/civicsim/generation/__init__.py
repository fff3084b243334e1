"""LLM generation of civic simulations and quizzes."""

from .quiz_generator import (
    QuizGenerator,
    QuizResult,
    convert_quiz,
    fallback_quiz,
    sanitize_quiz,
    validate_quiz_structure,
)
from .schemas import GENERATED_QUIZ_SCHEMA, GENERATED_SIMULATION_SCHEMA
from .simulation_generator import (
    DRAFT_SIMULATION_ID,
    GenerationResult,
    SimulationGenerator,
    convert_generated,
    fallback_simulation,
    sanitize_simulation,
    sanitize_text,
    validate_simulation_structure,
)

__all__ = [
    "GENERATED_SIMULATION_SCHEMA",
    "GENERATED_QUIZ_SCHEMA",
    "DRAFT_SIMULATION_ID",
    "GenerationResult",
    "SimulationGenerator",
    "convert_generated",
    "fallback_simulation",
    "sanitize_simulation",
    "sanitize_text",
    "validate_simulation_structure",
    "QuizGenerator",
    "QuizResult",
    "convert_quiz",
    "fallback_quiz",
    "sanitize_quiz",
    "validate_quiz_structure",
]
