"""Read-only simulation lookup.

Built-in simulations are held in memory and never change. Generated
simulations are written to a SimulationRepository and looked up there on
demand; the in-memory table is never extended at runtime.
"""

from __future__ import annotations

import logging
import random
import string
import time
from collections.abc import Iterator, Mapping
from typing import Any, Optional

from pydantic import ValidationError

from civicsim.errors import TransientStorageError
from civicsim.models.simulation import Simulation
from civicsim.storage.repository import SimulationRepository

logger = logging.getLogger(__name__)


def new_generated_id() -> str:
    """Id for a generated simulation: ai_sim_<epoch millis>_<9 base-36 chars>."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"ai_sim_{int(time.time() * 1000)}_{suffix}"


class SimulationRegistry:
    """Lookup over built-in simulations and, optionally, a repository.

    Args:
        builtins: Mapping of id to built-in Simulation
        repository: Store of generated simulations (None disables them)
    """

    def __init__(
        self,
        builtins: Mapping[str, Simulation],
        repository: Optional[SimulationRepository] = None,
    ) -> None:
        self._builtins: dict[str, Simulation] = dict(builtins)
        self.repository = repository

    def __contains__(self, simulation_id: object) -> bool:
        return self.get(str(simulation_id)) is not None

    def __iter__(self) -> Iterator[Simulation]:
        return iter(self.list())

    def get(self, simulation_id: str) -> Optional[Simulation]:
        """Return a simulation by id, or None if it does not exist.

        Repository failures are logged and reported as "not found".
        """
        simulation_id = str(simulation_id)
        if simulation_id in self._builtins:
            return self._builtins[simulation_id]
        if self.repository is None:
            return None

        try:
            data = self.repository.get_simulation(simulation_id)
        except Exception as e:
            logger.warning(f"Simulation repository lookup failed for {simulation_id}: {e}")
            return None
        if data is None:
            return None
        return _load(data)

    def list(self) -> list[Simulation]:
        """Built-in simulations first (by id), then stored ones (by title)."""
        simulations = [self._builtins[key] for key in sorted(self._builtins)]
        if self.repository is None:
            return simulations

        try:
            stored = self.repository.list_simulations()
        except Exception as e:
            logger.warning(f"Could not list generated simulations: {e}")
            return simulations

        for meta in stored:
            if meta["id"] in self._builtins:
                continue
            simulation = self.get(meta["id"])
            if simulation is not None:
                simulations.append(simulation)
        return simulations

    def summaries(self) -> list[dict[str, Any]]:
        return [simulation.summary() for simulation in self.list()]

    def add_generated(self, simulation: Simulation) -> Simulation:
        """Persist a generated simulation under a fresh id.

        Returns:
            The stored simulation, carrying its new id

        Raises:
            TransientStorageError: If there is no repository or the write fails
        """
        if self.repository is None:
            raise TransientStorageError("No simulation repository configured")

        stored = simulation.model_copy(update={"id": new_generated_id(), "is_generated": True})
        try:
            self.repository.save_simulation(stored.model_dump(mode="json"))
        except Exception as e:
            raise TransientStorageError(f"Failed to save generated simulation: {e}") from e

        logger.info(f"Stored generated simulation {stored.id}: {stored.title}")
        return stored


def _load(data: dict) -> Optional[Simulation]:
    try:
        return Simulation.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid stored simulation {data.get('id')}: {e}")
        return None
