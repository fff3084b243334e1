"""Abstract repository interfaces for civicsim storage.

This module defines the abstract base classes for simulation and progress
repositories. Both file-based (JSON) and SQLite backends implement these
interfaces, allowing the CLI and webapp to use storage without knowing
which backend is active.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class SimulationRepository(ABC):
    """Abstract base class for generated simulation storage."""

    @abstractmethod
    def list_simulations(self) -> list[dict]:
        """Return metadata for all stored simulations.

        Returns:
            List of dicts containing: {id, title, category, difficulty, total_steps}
        """
        pass

    @abstractmethod
    def get_simulation(self, simulation_id: str) -> Optional[dict]:
        """Load complete simulation definition by ID.

        Args:
            simulation_id: Unique identifier for the simulation

        Returns:
            Complete simulation dict, or None if not found
        """
        pass

    @abstractmethod
    def save_simulation(self, simulation: dict) -> str:
        """Save simulation, return ID.

        The simulation's own 'id' is used when present; otherwise the file
        backend slugifies the title and the SQLite backend generates a UUID.

        Args:
            simulation: Complete simulation dict with required 'title' field

        Returns:
            ID of saved simulation

        Raises:
            ValueError: If simulation lacks required 'title' field
        """
        pass

    @abstractmethod
    def delete_simulation(self, simulation_id: str) -> bool:
        """Delete simulation.

        Args:
            simulation_id: ID of simulation to delete

        Returns:
            True if deleted, False if not found
        """
        pass


class ProgressRepository(ABC):
    """Abstract base class for in-progress attempt storage.

    One record per (user, simulation) pair. Records are shaped like
    ``Attempt.to_progress()``: {user_id, simulation_id, current_step,
    total_score, choices, started_at}, plus an ``updated_at`` stamp.
    """

    @abstractmethod
    def load_progress(self, user_id: Any, simulation_id: str) -> Optional[dict]:
        """Load progress for a user and simulation.

        Returns:
            Progress dict, or None if the user has no saved progress
        """
        pass

    @abstractmethod
    def save_progress(
        self,
        user_id: Any,
        simulation_id: str,
        progress: dict,
        expected_step: Optional[int] = None,
    ) -> None:
        """Persist progress, optionally as a conditional update.

        Args:
            user_id: Owning user
            simulation_id: Simulation the progress belongs to
            progress: Progress dict to store
            expected_step: When given, the stored step pointer must equal this
                value or the write is rejected. A missing record counts as
                pointer 1. None writes unconditionally.

        Raises:
            ProgressConflictError: If expected_step does not match the stored pointer
        """
        pass

    @abstractmethod
    def delete_progress(self, user_id: Any, simulation_id: str) -> bool:
        """Delete progress.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    def list_progress(self, user_id: Any) -> list[dict]:
        """List every saved progress record of a user, most recent first."""
        pass
