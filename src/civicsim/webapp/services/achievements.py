"""Achievement evaluation and awarding.

Conditions are thresholds over the user's completion history; an
achievement is awarded when ANY of its conditions holds:

    min_simulations     completed simulations >= value
    min_average_score   mean completion percentage >= value
    min_perfect_scores  completions at 100% >= value
    min_score           percentage of the attempt just finished >= value
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import case, func

from civicsim.models.results import SimulationResult

from ..extensions import db
from ..models.achievement import Achievement, UserAchievement
from ..models.completion import SimulationCompletion
from ..models.user import User

logger = logging.getLogger(__name__)

SIMULATION_COMPLETION = "simulation_completion"

DEFAULT_ACHIEVEMENTS: list[dict[str, Any]] = [
    {
        "code": "first_steps",
        "title": "First Steps",
        "description": "Complete your first simulation",
        "conditions": {"min_simulations": 1},
        "points": 50,
        "badge": "🎯",
    },
    {
        "code": "civic_learner",
        "title": "Civic Learner",
        "description": "Complete 5 simulations",
        "conditions": {"min_simulations": 5},
        "points": 100,
        "badge": "📘",
    },
    {
        "code": "simulation_master",
        "title": "Simulation Master",
        "description": "Complete 10 simulations",
        "conditions": {"min_simulations": 10},
        "points": 200,
        "badge": "🏅",
    },
    {
        "code": "excellence_award",
        "title": "Excellence Award",
        "description": "Keep an average score of 90% or higher",
        "conditions": {"min_average_score": 90},
        "points": 150,
        "badge": "🌟",
    },
    {
        "code": "perfect_citizen",
        "title": "Perfect Citizen",
        "description": "Make the best choice at every step of a simulation",
        "conditions": {"min_perfect_scores": 1},
        "points": 100,
        "badge": "🇷🇼",
    },
    {
        "code": "high_achiever",
        "title": "High Achiever",
        "description": "Score 85% or higher in a simulation",
        "conditions": {"min_score": 85},
        "points": 75,
        "badge": "🏆",
    },
]


@dataclass(frozen=True)
class CompletionStats:
    """Aggregates over a user's completions."""

    completed: int
    average_score: float
    perfect_scores: int


def seed_achievements() -> None:
    """Insert the default achievements that do not exist yet."""
    existing = {code for (code,) in db.session.query(Achievement.code).all()}
    for data in DEFAULT_ACHIEVEMENTS:
        if data["code"] not in existing:
            db.session.add(Achievement(achievement_type=SIMULATION_COMPLETION, **data))
    db.session.commit()


def get_completion_stats(user_id: int) -> CompletionStats:
    completed, average, perfect = (
        db.session.query(
            func.count(SimulationCompletion.id),
            func.avg(SimulationCompletion.percentage),
            func.sum(case((SimulationCompletion.percentage >= 100, 1), else_=0)),
        )
        .filter(SimulationCompletion.user_id == user_id)
        .one()
    )
    return CompletionStats(
        completed=completed or 0,
        average_score=float(average or 0),
        perfect_scores=int(perfect or 0),
    )


def evaluate_conditions(
    conditions: dict[str, Any],
    stats: CompletionStats,
    result: Optional[SimulationResult] = None,
) -> bool:
    """True when any condition is satisfied. Unknown keys are ignored."""
    if not conditions:
        return False

    min_simulations = conditions.get("min_simulations")
    if min_simulations and stats.completed >= min_simulations:
        return True

    min_average = conditions.get("min_average_score")
    if min_average and stats.completed > 0 and stats.average_score >= min_average:
        return True

    min_perfect = conditions.get("min_perfect_scores")
    if min_perfect and stats.perfect_scores >= min_perfect:
        return True

    min_score = conditions.get("min_score")
    if min_score and result is not None and result.percentage >= min_score:
        return True

    return False


def check_and_award(user: User, result: Optional[SimulationResult] = None) -> list[Achievement]:
    """Award every satisfied achievement the user does not hold yet.

    Achievement points are added to the user's total.

    Returns:
        Newly awarded achievements
    """
    stats = get_completion_stats(user.id)
    held = {
        achievement_id
        for (achievement_id,) in db.session.query(UserAchievement.achievement_id)
        .filter(UserAchievement.user_id == user.id)
        .all()
    }

    awarded = []
    for achievement in Achievement.query.filter_by(achievement_type=SIMULATION_COMPLETION).all():
        if achievement.id in held:
            continue
        if not evaluate_conditions(achievement.conditions or {}, stats, result):
            continue
        db.session.add(UserAchievement(user_id=user.id, achievement_id=achievement.id))
        user.total_points = (user.total_points or 0) + (achievement.points or 0)
        awarded.append(achievement)

    if awarded:
        db.session.commit()
        logger.info(f"Awarded {[a.code for a in awarded]} to user {user.id}")
    return awarded


def get_user_achievements(user_id: int) -> list[dict[str, Any]]:
    rows = (
        UserAchievement.query.filter_by(user_id=user_id)
        .order_by(UserAchievement.awarded_at.asc())
        .all()
    )
    return [
        {**row.achievement.to_dict(), "awarded_at": row.awarded_at.isoformat() if row.awarded_at else None}
        for row in rows
    ]
