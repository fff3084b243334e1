"""Simulation step engine.

The engine walks one user through the fixed sequence of steps of a
simulation and tallies the score. It holds no state of its own between
calls: every operation takes or returns an ``Attempt``, which the caller
persists through a ProgressRepository and replays with ``resume``.

Attempt lifecycle:
    NOT_STARTED --start/resume--> IN_PROGRESS --last submit_choice--> COMPLETED

Per submission:
1. REJECT if the attempt is completed (Conflict)
2. REJECT if the submitted step is not the current pointer (Conflict)
3. REJECT if the choice id is not offered at the current step (NotFound)
4. RECORD the choice, add its points, advance the pointer
5. FINALISE when the pointer passes the last step
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from civicsim.clock import as_naive_utc, utcnow
from civicsim.engine.results import aggregate_results, round_half_up
from civicsim.errors import (
    ChoiceNotFoundError,
    InvalidProgressError,
    SimulationNotFoundError,
    StepConflictError,
)
from civicsim.models.attempt import Attempt, AttemptStatus, ProgressSummary, RecordedChoice
from civicsim.models.results import SimulationResult
from civicsim.models.simulation import Simulation, Step

if TYPE_CHECKING:
    from civicsim.scenarios.registry import SimulationRegistry

logger = logging.getLogger(__name__)


@dataclass
class StartView:
    """Returned by start(): the first step of a fresh attempt."""

    simulation: Simulation
    step: Step
    progress: ProgressSummary
    attempt: Attempt


@dataclass
class ResumeView:
    """Returned by resume(): an attempt rebuilt from persisted progress.

    Attributes:
        simulation: Simulation being played
        step: Step at the restored pointer (None when already completed)
        progress: Progress summary at the restored pointer
        history: Choices recorded before the resume
        attempt: The rebuilt attempt
        completed: True when every step had already been answered
        result: Aggregated result when completed, else None
    """

    simulation: Simulation
    step: Optional[Step]
    progress: ProgressSummary
    history: list[RecordedChoice]
    attempt: Attempt
    completed: bool = False
    result: Optional[SimulationResult] = None


@dataclass
class SubmitOutcome:
    """Result of submitting a choice.

    Attributes:
        recorded_choice: The history entry appended by this submission
        updated_score: Cumulative score after the submission
        completed: True when this submission answered the last step
        next_step: Step at the new pointer (None when completed)
        result: Aggregated result when completed, else None
        progress: Progress summary after the submission
    """

    recorded_choice: RecordedChoice
    updated_score: int
    completed: bool
    progress: ProgressSummary
    next_step: Optional[Step] = None
    result: Optional[SimulationResult] = None
    feedback: dict[str, Any] = field(default_factory=dict)


class SimulationEngine:
    """Drives attempts through simulations from a read-only registry.

    Args:
        registry: Source of simulation definitions
        clock: Callable returning the current time (injectable for tests)
    """

    def __init__(
        self,
        registry: SimulationRegistry,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.registry = registry
        self.clock = clock

    def get_simulation(self, simulation_id: str) -> Simulation:
        """Look up a simulation definition.

        Raises:
            SimulationNotFoundError: If the id is unknown
        """
        simulation = self.registry.get(str(simulation_id))
        if simulation is None:
            raise SimulationNotFoundError(str(simulation_id))
        return simulation

    def get_step(self, simulation_id: str, step_number: int) -> Step:
        """Presentation data for one step, independent of any attempt.

        Raises:
            SimulationNotFoundError: If the simulation or the step does not exist
        """
        simulation = self.get_simulation(simulation_id)
        step = simulation.get_step(step_number)
        if step is None:
            raise SimulationNotFoundError(f"{simulation.id} step {step_number}")
        return step

    def start(self, simulation_id: str, user_id: Any) -> StartView:
        """Begin a fresh attempt at step 1 with score 0.

        Raises:
            SimulationNotFoundError: If the id is unknown
        """
        simulation = self.get_simulation(simulation_id)
        attempt = Attempt(
            user_id=user_id,
            simulation_id=simulation.id,
            total_steps=simulation.total_steps,
            started_at=self.clock(),
            status=AttemptStatus.IN_PROGRESS,
        )
        logger.debug(f"Started attempt: user={user_id} simulation={simulation.id}")
        return StartView(
            simulation=simulation,
            step=simulation.steps[0],
            progress=self.progress(attempt),
            attempt=attempt,
        )

    def restart(self, simulation_id: str, user_id: Any) -> StartView:
        """Discard any previous attempt and start over."""
        return self.start(simulation_id, user_id)

    def resume(self, simulation_id: str, user_id: Any, persisted: dict[str, Any]) -> ResumeView:
        """Rebuild an attempt from persisted progress.

        Args:
            simulation_id: Simulation being resumed
            user_id: Owning user
            persisted: Progress dict as stored by a ProgressRepository
                ({current_step, total_score, choices, started_at})

        Raises:
            SimulationNotFoundError: If the id is unknown
            InvalidProgressError: If the persisted state cannot belong to this
                simulation (pointer out of range, history inconsistent)
        """
        simulation = self.get_simulation(simulation_id)
        total = simulation.total_steps

        try:
            current_step = int(persisted.get("current_step", 1))
            score = int(persisted.get("total_score", 0))
        except (TypeError, ValueError) as e:
            raise InvalidProgressError(f"Malformed progress for simulation {simulation.id}: {e}") from e

        if not 1 <= current_step <= total + 1:
            raise InvalidProgressError(
                f"Step pointer {current_step} out of range [1, {total + 1}] "
                f"for simulation {simulation.id}"
            )

        history = self._replay_history(simulation, persisted.get("choices") or [])
        if len(history) != current_step - 1:
            raise InvalidProgressError(
                f"Progress at step {current_step} has {len(history)} recorded choices, "
                f"expected {current_step - 1}"
            )
        if sum(c.points for c in history) != score:
            raise InvalidProgressError(
                f"Recorded score {score} does not match choice history "
                f"({sum(c.points for c in history)})"
            )

        attempt = Attempt(
            user_id=user_id,
            simulation_id=simulation.id,
            total_steps=total,
            current_step=current_step,
            score=score,
            choices=history,
            started_at=_parse_timestamp(persisted.get("started_at")) or self.clock(),
            status=AttemptStatus.IN_PROGRESS,
        )

        if attempt.is_completed:
            attempt.status = AttemptStatus.COMPLETED
            result = aggregate_results(attempt, simulation, self.clock())
            return ResumeView(
                simulation=simulation,
                step=None,
                progress=self.progress(attempt),
                history=list(history),
                attempt=attempt,
                completed=True,
                result=result,
            )

        return ResumeView(
            simulation=simulation,
            step=simulation.get_step(current_step),
            progress=self.progress(attempt),
            history=list(history),
            attempt=attempt,
        )

    def submit_choice(self, attempt: Attempt, step_number: int, choice_id: str) -> SubmitOutcome:
        """Record a choice for the attempt's current step.

        The attempt is mutated only when every check passes.

        Raises:
            StepConflictError: If the attempt is completed or step_number is stale
            ChoiceNotFoundError: If choice_id is not offered at the current step
        """
        if attempt.status == AttemptStatus.COMPLETED or attempt.is_completed:
            raise StepConflictError(
                f"Attempt on simulation {attempt.simulation_id} is already completed",
                expected_step=None,
                submitted_step=step_number,
            )
        if step_number != attempt.current_step:
            raise StepConflictError(
                f"Choice submitted for step {step_number} but attempt is at step {attempt.current_step}",
                expected_step=attempt.current_step,
                submitted_step=step_number,
            )

        simulation = self.get_simulation(attempt.simulation_id)
        choice = simulation.get_choice(attempt.current_step, str(choice_id))
        if choice is None:
            raise ChoiceNotFoundError(attempt.current_step, str(choice_id))

        recorded = RecordedChoice(
            step=attempt.current_step,
            choice_id=choice.id,
            points=choice.points,
            text=choice.text,
            feedback=choice.feedback,
            consequences=choice.consequences,
        )
        attempt.choices.append(recorded)
        attempt.score += choice.points
        attempt.current_step += 1
        if attempt.status == AttemptStatus.NOT_STARTED:
            attempt.status = AttemptStatus.IN_PROGRESS

        feedback = {"feedback": choice.feedback, "consequences": choice.consequences, "points": choice.points}

        if attempt.is_completed:
            attempt.status = AttemptStatus.COMPLETED
            result = aggregate_results(attempt, simulation, self.clock())
            logger.debug(
                f"Completed attempt: user={attempt.user_id} simulation={simulation.id} "
                f"score={result.total_score}/{result.max_possible_score}"
            )
            return SubmitOutcome(
                recorded_choice=recorded,
                updated_score=attempt.score,
                completed=True,
                progress=self.progress(attempt),
                result=result,
                feedback=feedback,
            )

        return SubmitOutcome(
            recorded_choice=recorded,
            updated_score=attempt.score,
            completed=False,
            progress=self.progress(attempt),
            next_step=simulation.get_step(attempt.current_step),
            feedback=feedback,
        )

    def progress(self, attempt: Attempt) -> ProgressSummary:
        """Progress summary: percentage of steps answered so far."""
        answered = min(attempt.current_step - 1, attempt.total_steps)
        return ProgressSummary(
            current_step=attempt.current_step,
            total_steps=attempt.total_steps,
            percentage=round_half_up(answered / attempt.total_steps * 100),
            score=attempt.score,
        )

    def _replay_history(self, simulation: Simulation, raw_choices: list[Any]) -> list[RecordedChoice]:
        """Validate persisted choices against the simulation definition."""
        history = []
        for index, raw in enumerate(raw_choices, start=1):
            if not isinstance(raw, dict):
                raise InvalidProgressError(f"Recorded choice {index} is not an object: {raw!r}")
            step_number = raw.get("step")
            choice_id = str(raw.get("choice_id", raw.get("choiceId", "")))
            if step_number != index:
                raise InvalidProgressError(
                    f"Recorded choice {index} is for step {step_number}; history must be in step order"
                )
            choice = simulation.get_choice(index, choice_id)
            if choice is None:
                raise InvalidProgressError(
                    f"Recorded choice {choice_id!r} does not belong to step {index} "
                    f"of simulation {simulation.id}"
                )
            history.append(
                RecordedChoice(
                    step=index,
                    choice_id=choice.id,
                    points=choice.points,
                    text=choice.text,
                    feedback=choice.feedback,
                    consequences=choice.consequences,
                )
            )
        return history


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return as_naive_utc(value)
    if isinstance(value, str) and value:
        try:
            # Aware timestamps ("...Z", "+02:00") are stored by other clients
            return as_naive_utc(datetime.fromisoformat(value))
        except ValueError:
            logger.warning(f"Ignoring unparseable progress timestamp: {value!r}")
    return None
