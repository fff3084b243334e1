"""Simulation routes (JSON API)."""

import logging

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required
from pydantic import ValidationError

from civicsim.errors import (
    ChoiceNotFoundError,
    InvalidProgressError,
    SimulationNotFoundError,
    StepConflictError,
    TransientStorageError,
)
from civicsim.models.preferences import GenerationPreferences

from ..services.simulation_service import get_simulation_service

logger = logging.getLogger(__name__)

bp = Blueprint("simulations", __name__, url_prefix="/api/simulations")


@bp.errorhandler(SimulationNotFoundError)
def simulation_not_found(error):
    return jsonify({"error": str(error)}), 404


@bp.errorhandler(ChoiceNotFoundError)
def choice_not_found(error):
    return jsonify({"error": str(error), "step": error.step, "choice_id": error.choice_id}), 404


@bp.errorhandler(StepConflictError)
def step_conflict(error):
    return jsonify({
        "error": str(error),
        "expected_step": error.expected_step,
        "submitted_step": error.submitted_step,
    }), 409


@bp.errorhandler(InvalidProgressError)
def invalid_progress(error):
    return jsonify({"error": str(error)}), 400


@bp.errorhandler(TransientStorageError)
def storage_unavailable(error):
    logger.warning(f"Storage unavailable: {error}")
    return jsonify({"error": "Progress storage is temporarily unavailable. Please try again."}), 503


def _user():
    return current_user._get_current_object()


@bp.route("/")
def index():
    """List all playable simulations."""
    simulations = get_simulation_service().list_simulations()
    return jsonify({"simulations": simulations, "count": len(simulations)})


@bp.route("/<simulation_id>")
def detail(simulation_id: str):
    return jsonify({"simulation": get_simulation_service().get_simulation(simulation_id)})


@bp.route("/<simulation_id>/steps/<int:step_number>")
def step(simulation_id: str, step_number: int):
    return jsonify({"step": get_simulation_service().get_step(simulation_id, step_number)})


@bp.route("/<simulation_id>/start", methods=["POST"])
@login_required
def start(simulation_id: str):
    return jsonify(get_simulation_service().start(simulation_id, _user())), 201


@bp.route("/<simulation_id>/resume", methods=["POST"])
@login_required
def resume(simulation_id: str):
    return jsonify(get_simulation_service().resume(simulation_id, _user()))


@bp.route("/<simulation_id>/restart", methods=["POST"])
@login_required
def restart(simulation_id: str):
    return jsonify(get_simulation_service().restart(simulation_id, _user())), 201


@bp.route("/<simulation_id>/choice", methods=["POST"])
@login_required
def submit_choice(simulation_id: str):
    """Submit the choice for a step: {"step": <int>, "choice_id": <str>}."""
    data = request.get_json(silent=True) or {}
    step_number = data.get("step")
    choice_id = data.get("choice_id")

    if step_number is None or choice_id in (None, ""):
        return jsonify({"error": "Both step and choice_id are required."}), 400
    if isinstance(step_number, bool) or not isinstance(step_number, int):
        try:
            step_number = int(step_number)
        except (TypeError, ValueError):
            return jsonify({"error": "step must be an integer."}), 400

    return jsonify(get_simulation_service().submit_choice(simulation_id, _user(), step_number, str(choice_id)))


@bp.route("/<simulation_id>/progress")
@login_required
def progress(simulation_id: str):
    return jsonify(get_simulation_service().progress(simulation_id, _user()))


@bp.route("/stats")
@login_required
def stats():
    """Completion statistics for the current user."""
    return jsonify(get_simulation_service().stats(_user()))


@bp.route("/generate", methods=["POST"])
@login_required
def generate():
    """Generate a new simulation with the LLM.

    Body: {"prompt": str, "topic": str, "difficulty": str, "question_count": int}
    """
    prompt, preferences, error = generation_request()
    if error:
        return error
    return jsonify(get_simulation_service().generate(prompt, preferences)), 201


def generation_request():
    """Prompt and preferences from a generation request body.

    Returns:
        (prompt, preferences, None), or (None, None, error_response)
    """
    data = request.get_json(silent=True) or {}
    prompt = (data.get("prompt") or "").strip()
    if not prompt:
        return None, None, (jsonify({"error": "prompt is required."}), 400)

    try:
        preferences = GenerationPreferences.model_validate(
            {
                key: data[key].lower() if isinstance(data[key], str) else data[key]
                for key in ("topic", "difficulty", "question_count")
                if key in data
            }
        )
    except ValidationError as e:
        details = [err["msg"] for err in e.errors()]
        return None, None, (jsonify({"error": "Invalid generation preferences.", "details": details}), 422)
    return prompt, preferences, None
