"""Exceptions raised by the simulation engine and the storage layer.

NotFound-style errors subclass LookupError and conflict/state errors subclass
ValueError, so callers that only care about the broad category can catch the
built-in base.
"""


class SimulationError(Exception):
    """Base class for all civicsim errors."""


class SimulationNotFoundError(SimulationError, LookupError):
    """Unknown simulation id."""

    def __init__(self, simulation_id: str):
        self.simulation_id = simulation_id
        super().__init__(f"Simulation not found: {simulation_id}")


class ChoiceNotFoundError(SimulationError, LookupError):
    """Choice id that does not belong to the current step."""

    def __init__(self, step: int, choice_id: str):
        self.step = step
        self.choice_id = choice_id
        super().__init__(f"Choice {choice_id!r} is not available at step {step}")


class StepConflictError(SimulationError, ValueError):
    """Choice submitted for a step other than the attempt's current step.

    Also raised for any submission on an attempt that is already completed.
    """

    def __init__(self, message: str, expected_step: int | None = None, submitted_step: int | None = None):
        self.expected_step = expected_step
        self.submitted_step = submitted_step
        super().__init__(message)


class InvalidProgressError(SimulationError, ValueError):
    """Persisted progress that cannot be replayed against its simulation."""


class ProgressConflictError(SimulationError, ValueError):
    """Conditional progress write rejected because another writer got there first."""

    def __init__(self, user_id, simulation_id: str, expected_step: int, stored_step: int):
        self.user_id = user_id
        self.simulation_id = simulation_id
        self.expected_step = expected_step
        self.stored_step = stored_step
        super().__init__(
            f"Progress for user {user_id} on simulation {simulation_id} is at step "
            f"{stored_step}, expected {expected_step}"
        )


class TransientStorageError(SimulationError):
    """Progress Store or another collaborator is unreachable."""
