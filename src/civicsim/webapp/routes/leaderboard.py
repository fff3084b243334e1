"""Leaderboard routes."""

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from ..services.leaderboard import PERIODS, clear_cache, get_leaderboard, get_user_position

bp = Blueprint("leaderboard", __name__, url_prefix="/api/leaderboard")


def _parse_args():
    """Period and limit from the query string; returns (period, limit, error)."""
    period = request.args.get("period", "all")
    if period not in PERIODS:
        return None, None, f"period must be one of {', '.join(PERIODS)}"

    default_limit = current_app.config["LEADERBOARD_LIMIT"]
    try:
        limit = int(request.args.get("limit", default_limit))
    except ValueError:
        return None, None, "limit must be an integer"
    if limit < 1:
        return None, None, "limit must be positive"
    return period, min(limit, current_app.config["LEADERBOARD_MAX_LIMIT"]), None


@bp.route("/")
def index():
    """Ranked leaderboard: ?period=all|weekly|monthly&limit=N."""
    period, limit, error = _parse_args()
    if error:
        return jsonify({"error": error}), 400
    return jsonify(get_leaderboard(period, limit).to_dict())


@bp.route("/refresh", methods=["POST"])
@login_required
def refresh():
    """Drop cached boards and recompute."""
    period, limit, error = _parse_args()
    if error:
        return jsonify({"error": error}), 400
    clear_cache()
    return jsonify(get_leaderboard(period, limit).to_dict())


@bp.route("/me")
@login_required
def me():
    """Current user's position in every period."""
    positions = get_user_position(current_user.id)
    body = {"user_id": current_user.id, "positions": positions}
    if any(p["position"] is None for p in positions.values()):
        body["warning"] = "Leaderboard positions are temporarily unavailable."
    return jsonify(body)
