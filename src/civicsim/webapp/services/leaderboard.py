"""Leaderboard service.

Ranking: points in the period descending, then last activity ascending
(earlier wins ties). All-time points are the user's running total; weekly
and monthly points are the completion and achievement points earned inside
the window.

When the database cannot be queried, the last board computed for the same
(period, limit) is served and marked "cached"; with nothing cached, an empty
board marked "unavailable" is returned. Entries are never made up.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from civicsim.clock import utcnow
from civicsim.engine.results import classify_performance, round_half_up

from ..extensions import db
from ..models.achievement import Achievement, UserAchievement
from ..models.completion import SimulationCompletion
from ..models.user import User

logger = logging.getLogger(__name__)

PERIODS = ("all", "weekly", "monthly")
PERIOD_WINDOWS = {"weekly": timedelta(days=7), "monthly": timedelta(days=30)}

SOURCE_LIVE = "live"
SOURCE_CACHED = "cached"
SOURCE_UNAVAILABLE = "unavailable"

_cache: dict[tuple[str, int], list[dict[str, Any]]] = {}
_cache_lock = threading.Lock()


@dataclass
class LeaderboardResult:
    """A leaderboard and where it came from."""

    period: str
    entries: list[dict[str, Any]] = field(default_factory=list)
    source: str = SOURCE_LIVE
    warning: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "count": len(self.entries),
            "entries": self.entries,
            "source": self.source,
            "warning": self.warning,
        }


def clear_cache() -> None:
    with _cache_lock:
        _cache.clear()


def _window_start(period: str, now: datetime) -> Optional[datetime]:
    window = PERIOD_WINDOWS.get(period)
    return now - window if window else None


def _compute_rankings(period: str, now: datetime) -> list[dict[str, Any]]:
    """Full ranking for a period (no limit)."""
    since = _window_start(period, now)

    completion_query = db.session.query(
        SimulationCompletion.user_id,
        func.count(SimulationCompletion.id).label("completed"),
        func.avg(SimulationCompletion.percentage).label("average"),
        func.sum(SimulationCompletion.points_awarded).label("points"),
        func.max(SimulationCompletion.completed_at).label("last_activity"),
    )
    if since is not None:
        completion_query = completion_query.filter(SimulationCompletion.completed_at >= since)
    completions = {row.user_id: row for row in completion_query.group_by(SimulationCompletion.user_id).all()}

    achievement_points: dict[int, int] = {}
    if since is not None:
        rows = (
            db.session.query(UserAchievement.user_id, func.sum(Achievement.points))
            .join(Achievement, UserAchievement.achievement_id == Achievement.id)
            .filter(UserAchievement.awarded_at >= since)
            .group_by(UserAchievement.user_id)
            .all()
        )
        achievement_points = {user_id: int(points or 0) for user_id, points in rows}

    users = User.query.filter(User.id.in_(set(completions) | set(achievement_points))).all()

    rankings = []
    for user in users:
        stats = completions.get(user.id)
        if since is None:
            points = user.total_points or 0
        else:
            points = int(stats.points or 0) if stats else 0
            points += achievement_points.get(user.id, 0)
        if points <= 0:
            continue
        average = round_half_up(float(stats.average)) if stats and stats.average is not None else 0
        rankings.append({
            "user_id": user.id,
            "username": user.username,
            "name": user.display_name,
            "total_points": points,
            "simulations_completed": stats.completed if stats else 0,
            "average_score": average,
            "badge": classify_performance(average).badge if stats else None,
            "last_activity": stats.last_activity if stats else None,
        })

    rankings.sort(key=lambda e: (-e["total_points"], e["last_activity"] or datetime.max))
    for rank, entry in enumerate(rankings, start=1):
        entry["rank"] = rank
        entry["last_activity"] = entry["last_activity"].isoformat() if entry["last_activity"] else None
    return rankings


def get_leaderboard(period: str = "all", limit: int = 10, now: Optional[datetime] = None) -> LeaderboardResult:
    """Get the ranked leaderboard for a period.

    Args:
        period: "all", "weekly" or "monthly"
        limit: Maximum number of entries
        now: Reference time for the period window (defaults to utcnow)

    Raises:
        ValueError: If period is unknown
    """
    if period not in PERIODS:
        raise ValueError(f"Unknown leaderboard period: {period}")
    now = now or utcnow()
    key = (period, limit)

    try:
        entries = _compute_rankings(period, now)[:limit]
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.warning(f"Leaderboard query failed for {period}: {e}")
        with _cache_lock:
            cached = _cache.get(key)
        if cached is not None:
            return LeaderboardResult(
                period=period,
                entries=cached,
                source=SOURCE_CACHED,
                warning="Live rankings are unavailable; showing the last known leaderboard.",
            )
        return LeaderboardResult(
            period=period,
            source=SOURCE_UNAVAILABLE,
            warning="Leaderboard is temporarily unavailable.",
        )

    with _cache_lock:
        _cache[key] = entries
    return LeaderboardResult(period=period, entries=entries)


def get_user_position(user_id: int, now: Optional[datetime] = None) -> dict[str, Any]:
    """Rank of a user in each period (position 0 when not ranked).

    A period whose rankings cannot be queried reports None for every field
    rather than a made-up rank.
    """
    now = now or utcnow()
    positions = {}
    for period in PERIODS:
        try:
            rankings = _compute_rankings(period, now)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning(f"Position query failed for user {user_id} in {period}: {e}")
            positions[period] = {"position": None, "points": None, "total_users": None}
            continue
        entry = next((e for e in rankings if e["user_id"] == user_id), None)
        positions[period] = {
            "position": entry["rank"] if entry else 0,
            "points": entry["total_points"] if entry else 0,
            "total_users": len(rankings),
        }
    return positions
