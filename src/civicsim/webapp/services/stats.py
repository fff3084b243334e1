"""Per-user simulation statistics."""

from typing import Any

from civicsim.engine.results import round_half_up

from ..models.completion import SimulationCompletion
from .achievements import get_completion_stats, get_user_achievements

RECENT_COMPLETIONS = 5


def get_user_simulation_stats(user_id: int, in_progress: int = 0) -> dict[str, Any]:
    """Completion statistics for a user.

    Args:
        user_id: User to summarise
        in_progress: Number of attempts currently saved in the progress store
    """
    stats = get_completion_stats(user_id)
    completions = (
        SimulationCompletion.query.filter_by(user_id=user_id)
        .order_by(SimulationCompletion.completed_at.desc())
        .all()
    )

    badges = []
    for completion in completions:
        if completion.badge not in badges:
            badges.append(completion.badge)

    return {
        "total_completed": stats.completed,
        "average_score": round_half_up(stats.average_score),
        "perfect_scores": stats.perfect_scores,
        "badges": badges,
        "achievements": get_user_achievements(user_id),
        "recent_completions": [c.to_dict() for c in completions[:RECENT_COMPLETIONS]],
        "in_progress": in_progress,
    }
