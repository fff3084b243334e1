"""Achievement definitions and awards."""

from typing import Any

from civicsim.clock import utcnow

from ..extensions import db


class Achievement(db.Model):
    """An achievement users can earn.

    ``conditions`` is a JSON object of thresholds; see
    services.achievements.evaluate_conditions for the supported keys.
    """

    __tablename__ = "achievements"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), unique=True, nullable=False)
    title = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    achievement_type = db.Column(db.String(64), nullable=False, default="simulation_completion", index=True)
    conditions = db.Column(db.JSON, nullable=False, default=dict)
    points = db.Column(db.Integer, nullable=False, default=0)
    badge = db.Column(db.String(16), nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "title": self.title,
            "description": self.description,
            "points": self.points,
            "badge": self.badge,
        }

    def __repr__(self) -> str:
        return f"<Achievement {self.code}>"


class UserAchievement(db.Model):
    """Award of an achievement to a user. Each pair is awarded at most once."""

    __tablename__ = "user_achievements"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    achievement_id = db.Column(db.Integer, db.ForeignKey("achievements.id"), nullable=False)
    awarded_at = db.Column(db.DateTime, default=utcnow, index=True)

    achievement = db.relationship("Achievement")

    __table_args__ = (
        db.UniqueConstraint("user_id", "achievement_id", name="unique_user_achievement"),
    )
