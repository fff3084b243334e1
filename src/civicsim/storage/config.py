"""Storage configuration for civicsim.

This module provides configuration for storage backends and factory functions
to create appropriate repository instances based on configuration.
"""

import os
from enum import Enum

from .file_repo import FileProgressRepository, FileSimulationRepository
from .repository import ProgressRepository, SimulationRepository
from .sqlite_repo import SQLiteProgressRepository, SQLiteSimulationRepository


class StorageBackend(Enum):
    """Available storage backends."""

    FILE = "file"
    SQLITE = "sqlite"


# Default configuration (can be overridden via environment variables)
DEFAULT_STORAGE_BACKEND = StorageBackend.FILE
DEFAULT_SIMULATIONS_PATH = "simulations"
DEFAULT_PROGRESS_PATH = "progress"
DEFAULT_DATABASE_URI = "instance/civicsim.db"


def get_storage_backend() -> StorageBackend:
    """Get configured storage backend from environment.

    Returns:
        StorageBackend enum value
    """
    backend_str = os.environ.get("CIVICSIM_STORAGE_BACKEND", DEFAULT_STORAGE_BACKEND.value).lower()
    if backend_str == "sqlite":
        return StorageBackend.SQLITE
    return StorageBackend.FILE


def get_simulations_path() -> str:
    """Get configured generated-simulations path from environment."""
    return os.environ.get("CIVICSIM_SIMULATIONS_PATH", DEFAULT_SIMULATIONS_PATH)


def get_progress_path() -> str:
    """Get configured progress path from environment."""
    return os.environ.get("CIVICSIM_PROGRESS_PATH", DEFAULT_PROGRESS_PATH)


def get_database_uri() -> str:
    """Get configured database URI from environment."""
    return os.environ.get("CIVICSIM_DATABASE_URI", DEFAULT_DATABASE_URI)


def get_simulation_repository(
    backend: StorageBackend | None = None,
) -> SimulationRepository:
    """Factory function to create simulation repository.

    Args:
        backend: Storage backend to use. If None, uses environment config.

    Returns:
        SimulationRepository instance
    """
    if backend is None:
        backend = get_storage_backend()

    if backend == StorageBackend.SQLITE:
        return SQLiteSimulationRepository(get_database_uri())
    return FileSimulationRepository(get_simulations_path())


def get_progress_repository(
    backend: StorageBackend | None = None,
) -> ProgressRepository:
    """Factory function to create progress repository.

    Args:
        backend: Storage backend to use. If None, uses environment config.

    Returns:
        ProgressRepository instance
    """
    if backend is None:
        backend = get_storage_backend()

    if backend == StorageBackend.SQLITE:
        return SQLiteProgressRepository(get_database_uri())
    return FileProgressRepository(get_progress_path())
