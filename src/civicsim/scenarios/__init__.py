"""Simulation definitions: the built-in table and the registry."""

from .builtin import BUILTIN_SIMULATIONS
from .registry import SimulationRegistry, new_generated_id

__all__ = ["BUILTIN_SIMULATIONS", "SimulationRegistry", "new_generated_id"]
