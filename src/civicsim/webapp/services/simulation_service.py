"""Simulation service - binds the engine to storage, completions and notifications.

Every request rebuilds the attempt from the progress store, so any number
of web workers can serve the same user. Progress writes after a submission
are conditional on the stored step pointer; a concurrent submission for the
same step loses with a StepConflictError instead of double-counting points.

Storage policy:
    start / restart   save failure -> warning, attempt still returned
    resume            load failure -> fresh start with a warning
    submit_choice     load failure -> TransientStorageError (503)
                      no attempt   -> StepConflictError (409)
                      stale write  -> StepConflictError (409)
                      save failure -> warning, outcome still returned
    completion        written once per attempt; later failures are logged
"""

import asyncio
import logging
from typing import Any, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from civicsim.engine import SimulationEngine
from civicsim.engine.results import points_awarded
from civicsim.errors import ProgressConflictError, StepConflictError, TransientStorageError
from civicsim.generation import QuizGenerator, SimulationGenerator
from civicsim.models.attempt import Attempt, ProgressSummary
from civicsim.models.preferences import GenerationPreferences
from civicsim.models.results import SimulationResult
from civicsim.models.simulation import Simulation, Step
from civicsim.notifications import NotificationDispatcher, WhatsAppClient
from civicsim.scenarios import BUILTIN_SIMULATIONS, SimulationRegistry
from civicsim.storage import (
    FileProgressRepository,
    FileSimulationRepository,
    ProgressStore,
    SQLiteProgressRepository,
    SQLiteSimulationRepository,
)

from ..extensions import db
from ..models.completion import SimulationCompletion
from ..models.user import User
from .achievements import check_and_award
from .stats import get_user_simulation_stats

logger = logging.getLogger(__name__)

EXTENSION_KEY = "civicsim.simulation_service"

PROGRESS_SAVE_WARNING = "Progress could not be saved; it may be lost if you leave this simulation."
PROGRESS_LOAD_WARNING = "Saved progress could not be loaded; starting from the beginning."


def step_view(step: Optional[Step]) -> Optional[dict[str, Any]]:
    return step.model_dump(mode="json") if step is not None else None


def simulation_view(simulation: Simulation) -> dict[str, Any]:
    return {
        **simulation.model_dump(mode="json"),
        "total_steps": simulation.total_steps,
        "max_possible_score": simulation.max_possible_score,
    }


class SimulationService:
    """Web-facing simulation operations.

    Args:
        registry: Simulation lookup
        progress: Progress store for in-progress attempts
        dispatcher: Notification dispatcher (None disables notifications)
        generator: LLM simulation generator
        quiz_generator: LLM quiz generator
    """

    def __init__(
        self,
        registry: SimulationRegistry,
        progress: ProgressStore,
        dispatcher: Optional[NotificationDispatcher] = None,
        generator: Optional[SimulationGenerator] = None,
        quiz_generator: Optional[QuizGenerator] = None,
    ):
        self.registry = registry
        self.engine = SimulationEngine(registry)
        self.progress_store = progress
        self.dispatcher = dispatcher
        self.generator = generator or SimulationGenerator(enabled=False)
        self.quiz_generator = quiz_generator or QuizGenerator(enabled=False)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "SimulationService":
        if config.get("STORAGE_BACKEND") == "sqlite":
            database_uri = config["STORAGE_DATABASE_URI"]
            simulations = SQLiteSimulationRepository(database_uri)
            progress = SQLiteProgressRepository(database_uri)
        else:
            simulations = FileSimulationRepository(config["SIMULATIONS_PATH"])
            progress = FileProgressRepository(config["PROGRESS_PATH"])

        dispatcher = NotificationDispatcher(
            WhatsAppClient.from_config(config),
            max_workers=config.get("NOTIFICATION_WORKERS", 2),
        )
        return cls(
            registry=SimulationRegistry(BUILTIN_SIMULATIONS, simulations),
            progress=ProgressStore(progress),
            dispatcher=dispatcher,
            generator=SimulationGenerator(enabled=config.get("GENERATION_ENABLED", True)),
            quiz_generator=QuizGenerator(enabled=config.get("GENERATION_ENABLED", True)),
        )

    # -------------------------------------------------------------------------
    # Catalogue
    # -------------------------------------------------------------------------

    def list_simulations(self) -> list[dict[str, Any]]:
        return self.registry.summaries()

    def get_simulation(self, simulation_id: str) -> dict[str, Any]:
        return simulation_view(self.engine.get_simulation(simulation_id))

    def get_step(self, simulation_id: str, step_number: int) -> dict[str, Any]:
        return step_view(self.engine.get_step(simulation_id, step_number))

    # -------------------------------------------------------------------------
    # Attempts
    # -------------------------------------------------------------------------

    def start(self, simulation_id: str, user: User) -> dict[str, Any]:
        """Begin a fresh attempt, replacing any saved progress."""
        view = self.engine.start(simulation_id, user.id)
        warnings = self._save(view.attempt)
        logger.info(f"User {user.id} started simulation {view.simulation.id}")
        return {
            "simulation": simulation_view(view.simulation),
            "step": step_view(view.step),
            "progress": view.progress.model_dump(),
            "warnings": warnings,
        }

    def restart(self, simulation_id: str, user: User) -> dict[str, Any]:
        return self.start(simulation_id, user)

    def resume(self, simulation_id: str, user: User) -> dict[str, Any]:
        """Continue from saved progress, or start fresh when there is none.

        Raises:
            SimulationNotFoundError: If the simulation does not exist
            InvalidProgressError: If the saved progress does not fit the simulation
        """
        simulation = self.engine.get_simulation(simulation_id)
        loaded = self.progress_store.load(user.id, simulation.id)
        if not loaded.ok:
            response = self.start(simulation.id, user)
            response["warnings"].insert(0, PROGRESS_LOAD_WARNING)
            response["resumed"] = False
            return response
        if loaded.value is None:
            response = self.start(simulation.id, user)
            response["resumed"] = False
            return response

        view = self.engine.resume(simulation.id, user.id, loaded.value)
        response = {
            "simulation": simulation_view(view.simulation),
            "step": step_view(view.step),
            "progress": view.progress.model_dump(),
            "history": [c.model_dump() for c in view.history],
            "completed": view.completed,
            "resumed": True,
            "warnings": [],
        }
        if view.completed:
            response.update(self._finalize(user, view.result, response["warnings"]))
        return response

    def submit_choice(self, simulation_id: str, user: User, step_number: int, choice_id: str) -> dict[str, Any]:
        """Record a choice for the user's current step.

        Raises:
            SimulationNotFoundError: If the simulation does not exist
            ChoiceNotFoundError: If the choice is not offered at the step
            StepConflictError: If the step is stale, or no attempt is in progress
                (never started, or already completed)
            InvalidProgressError: If the saved progress does not fit the simulation
            TransientStorageError: If saved progress cannot be read
        """
        attempt = self._load_attempt(simulation_id, user, step_number)
        outcome = self.engine.submit_choice(attempt, step_number, choice_id)

        saved = self.progress_store.save(
            user.id, attempt.simulation_id, attempt.to_progress(), expected_step=step_number
        )
        warnings = []
        if not saved.ok:
            if isinstance(saved.error, ProgressConflictError):
                raise StepConflictError(
                    f"Step {step_number} was already answered",
                    expected_step=saved.error.stored_step,
                    submitted_step=step_number,
                )
            warnings.append(PROGRESS_SAVE_WARNING)

        response = {
            "choice": outcome.recorded_choice.model_dump(),
            "feedback": outcome.feedback,
            "updated_score": outcome.updated_score,
            "completed": outcome.completed,
            "next_step": step_view(outcome.next_step),
            "progress": outcome.progress.model_dump(),
            "warnings": warnings,
        }
        if outcome.completed:
            response.update(self._finalize(user, outcome.result, response["warnings"]))
        return response

    def progress(self, simulation_id: str, user: User) -> dict[str, Any]:
        """Progress summary for the user's saved attempt (not started when none)."""
        simulation = self.engine.get_simulation(simulation_id)
        loaded = self.progress_store.load(user.id, simulation.id)
        if not loaded.ok:
            raise loaded.error
        if loaded.value is None:
            summary = ProgressSummary(
                current_step=1, total_steps=simulation.total_steps, percentage=0, score=0
            )
            return {"started": False, "progress": summary.model_dump()}
        view = self.engine.resume(simulation.id, user.id, loaded.value)
        return {"started": True, "completed": view.completed, "progress": view.progress.model_dump()}

    def stats(self, user: User) -> dict[str, Any]:
        listed = self.progress_store.list_for_user(user.id)
        in_progress = len(listed.value) if listed.ok else 0
        stats = get_user_simulation_stats(user.id, in_progress=in_progress)
        if not listed.ok:
            stats["warnings"] = ["In-progress simulations are temporarily unavailable."]
        return stats

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def generate(self, prompt: str, preferences: GenerationPreferences) -> dict[str, Any]:
        """Generate a simulation and store it so it can be played."""
        result = asyncio.run(self.generator.generate(prompt, preferences))
        response = {"used_fallback": result.used_fallback, "persisted": True, "warnings": []}
        try:
            simulation = self.registry.add_generated(result.simulation)
        except TransientStorageError as e:
            logger.warning(f"Generated simulation not stored: {e}")
            simulation = result.simulation
            response["persisted"] = False
            response["warnings"].append("The simulation was generated but could not be saved.")
        response["simulation"] = simulation_view(simulation)
        return response

    def generate_quiz(self, prompt: str, preferences: GenerationPreferences) -> dict[str, Any]:
        """Generate a quiz; quizzes are returned to the caller, never stored."""
        result = asyncio.run(self.quiz_generator.generate(prompt, preferences))
        return {"used_fallback": result.used_fallback, "quiz": result.quiz.model_dump(mode="json")}

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _save(self, attempt: Attempt) -> list[str]:
        saved = self.progress_store.save(attempt.user_id, attempt.simulation_id, attempt.to_progress())
        return [] if saved.ok else [PROGRESS_SAVE_WARNING]

    def _load_attempt(self, simulation_id: str, user: User, step_number: int) -> Attempt:
        simulation = self.engine.get_simulation(simulation_id)
        loaded = self.progress_store.load(user.id, simulation.id)
        if not loaded.ok:
            raise loaded.error
        if loaded.value is None:
            # Completed attempts are deleted; playing again needs an explicit start
            raise StepConflictError(
                f"No attempt in progress on simulation {simulation.id}; start the simulation first",
                expected_step=None,
                submitted_step=step_number,
            )
        return self.engine.resume(simulation.id, user.id, loaded.value).attempt

    def _finalize(self, user: User, result: SimulationResult, warnings: list[str]) -> dict[str, Any]:
        """Record a completed attempt exactly once and award points.

        The completion row and the point increment share one commit; the
        unique (user, simulation, started_at) constraint turns a second
        finalisation of the same attempt into a no-op.
        """
        points = points_awarded(result.percentage)
        response: dict[str, Any] = {
            "result": result.to_view(),
            "points_awarded": points,
            "achievements": [],
        }

        db.session.add(SimulationCompletion.from_result(user.id, result, points))
        user.total_points = (user.total_points or 0) + points
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            logger.info(f"Completion of {result.simulation_id} by user {user.id} already recorded")
            response["points_awarded"] = 0
            self._clear_progress(user, result)
            return response
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to record completion of {result.simulation_id} by user {user.id}: {e}")
            response["points_awarded"] = 0
            warnings.append("Your result could not be recorded yet; resume the simulation to retry.")
            return response

        logger.info(
            f"User {user.id} completed {result.simulation_id}: "
            f"{result.percentage}% ({result.badge}), +{points} points"
        )
        self._clear_progress(user, result)

        try:
            awarded = check_and_award(user, result)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Achievement check failed for user {user.id}: {e}")
            awarded = []
        response["achievements"] = [a.to_dict() for a in awarded]

        self._notify(user, result, awarded)
        return response

    def _clear_progress(self, user: User, result: SimulationResult) -> None:
        deleted = self.progress_store.delete(user.id, result.simulation_id)
        if not deleted.ok:
            logger.warning(f"Stale progress left for user {user.id} on {result.simulation_id}")

    def _notify(self, user: User, result: SimulationResult, awarded: list) -> None:
        if self.dispatcher is None or not user.phone_number:
            return
        self.dispatcher.notify_simulation_completed(
            user.phone_number,
            user.display_name,
            result.simulation_title,
            result.total_score,
            percentage=result.percentage,
            badge=result.badge,
        )
        for achievement in awarded:
            self.dispatcher.notify_achievement(
                user.phone_number, user.display_name, achievement.title, achievement.description
            )


def get_simulation_service() -> SimulationService:
    """Get the simulation service for the current app, building it on first use."""
    service = current_app.extensions.get(EXTENSION_KEY)
    if service is None:
        service = SimulationService.from_config(current_app.config)
        current_app.extensions[EXTENSION_KEY] = service
    return service
