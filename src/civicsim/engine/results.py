"""Results aggregation for completed attempts.

Formulas:
    Max_Possible_Score = sum over steps of max(choice.points)
    Percentage = round_half_up(100 * Total_Score / Max_Possible_Score), 0 when max is 0
    Duration = round_half_up((finished_at - started_at) in minutes), never negative
    Points_Awarded = round_half_up(Percentage / 10)

Performance tiers (checked in order):
    >= 85 -> Excellent / Civic Champion
    >= 70 -> Good / Active Citizen
    >= 55 -> Fair / Learning Citizen
    else  -> Needs Improvement / Participant
"""

from __future__ import annotations

import math
from datetime import datetime

from civicsim.models.attempt import Attempt
from civicsim.models.results import (
    NEEDS_IMPROVEMENT,
    PERFORMANCE_TIERS,
    PerformanceTier,
    SimulationResult,
)
from civicsim.models.simulation import Simulation


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded up.

    Python's round() uses banker's rounding (round(2.5) == 2); scores and
    durations use the schoolbook rule instead.
    """
    return int(math.floor(value + 0.5))


def calculate_max_possible_score(simulation: Simulation) -> int:
    """Sum, over all steps, of the highest choice point value."""
    return sum(max(choice.points for choice in step.choices) for step in simulation.steps)


def calculate_percentage(score: int, max_possible_score: int) -> int:
    """Score as a whole-number percentage of the maximum.

    Simulations whose steps are all worth zero points yield 0 rather than
    dividing by zero.
    """
    if max_possible_score == 0:
        return 0
    return round_half_up(100 * score / max_possible_score)


def classify_performance(percentage: int) -> PerformanceTier:
    """Map a percentage to its performance tier."""
    for tier in PERFORMANCE_TIERS:
        if percentage >= tier.min_percentage:
            return tier
    return NEEDS_IMPROVEMENT


def duration_minutes(started_at: datetime, finished_at: datetime) -> int:
    """Whole minutes between start and finish, rounded to nearest."""
    seconds = (finished_at - started_at).total_seconds()
    return max(0, round_half_up(seconds / 60))


def points_awarded(percentage: int) -> int:
    """Profile points granted for a completion (0-10)."""
    return round_half_up(percentage / 10)


def aggregate_results(
    attempt: Attempt,
    simulation: Simulation,
    finished_at: datetime,
) -> SimulationResult:
    """Convert a completed attempt into its immutable result.

    Args:
        attempt: The completed attempt
        simulation: Definition the attempt was played against
        finished_at: Finalisation time

    Returns:
        SimulationResult

    Raises:
        ValueError: If the attempt has not been completed
    """
    if not attempt.is_completed:
        raise ValueError(
            f"Attempt is at step {attempt.current_step} of {attempt.total_steps}; "
            "results are only available once every step has been answered"
        )

    max_score = simulation.max_possible_score
    percentage = calculate_percentage(attempt.score, max_score)
    tier = classify_performance(percentage)

    return SimulationResult(
        simulation_id=simulation.id,
        simulation_title=simulation.title,
        user_id=attempt.user_id,
        total_score=attempt.score,
        max_possible_score=max_score,
        percentage=percentage,
        performance_level=tier.level,
        badge=tier.badge,
        duration_minutes=duration_minutes(attempt.started_at, finished_at),
        choices=list(attempt.choices),
        started_at=attempt.started_at,
        completed_at=finished_at,
    )
