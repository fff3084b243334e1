"""Quiz routes (JSON API).

Generated quizzes are returned to the caller and not stored.
"""

from flask import Blueprint, jsonify
from flask_login import login_required

from ..services.simulation_service import get_simulation_service
from .simulations import generation_request

bp = Blueprint("quizzes", __name__, url_prefix="/api/quizzes")


@bp.route("/generate", methods=["POST"])
@login_required
def generate():
    """Generate a quiz with the LLM.

    Body: {"prompt": str, "topic": str, "difficulty": str, "question_count": int}
    """
    prompt, preferences, error = generation_request()
    if error:
        return error
    return jsonify(get_simulation_service().generate_quiz(prompt, preferences))
