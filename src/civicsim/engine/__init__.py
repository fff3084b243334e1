"""Simulation engine: step traversal and results aggregation."""

from .results import (
    aggregate_results,
    calculate_max_possible_score,
    calculate_percentage,
    classify_performance,
    duration_minutes,
    points_awarded,
    round_half_up,
)
from .simulation_engine import ResumeView, SimulationEngine, StartView, SubmitOutcome

__all__ = [
    "SimulationEngine",
    "StartView",
    "ResumeView",
    "SubmitOutcome",
    "aggregate_results",
    "calculate_max_possible_score",
    "calculate_percentage",
    "classify_performance",
    "duration_minutes",
    "points_awarded",
    "round_half_up",
]
