"""Storage module for civicsim.

This module provides repository interfaces and implementations for
persisting generated simulations and in-progress attempts.

Usage:
    from civicsim.storage import get_simulation_repository, get_progress_repository

    # Get repository using configured backend (from environment)
    simulations = get_simulation_repository()
    progress = get_progress_repository()

    # Or specify backend explicitly
    from civicsim.storage import StorageBackend
    simulations = get_simulation_repository(StorageBackend.SQLITE)

Configuration via environment variables:
    CIVICSIM_STORAGE_BACKEND: "file" or "sqlite" (default: "file")
    CIVICSIM_SIMULATIONS_PATH: Path to generated simulations (default: "simulations")
    CIVICSIM_PROGRESS_PATH: Path to progress records (default: "progress")
    CIVICSIM_DATABASE_URI: SQLite database path (default: "instance/civicsim.db")
"""

from .config import (
    StorageBackend,
    get_database_uri,
    get_progress_path,
    get_progress_repository,
    get_simulation_repository,
    get_simulations_path,
    get_storage_backend,
)
from .file_repo import FileProgressRepository, FileSimulationRepository, slugify
from .outcome import StorageResult
from .progress_store import ProgressStore
from .repository import ProgressRepository, SimulationRepository
from .sqlite_repo import SQLiteProgressRepository, SQLiteSimulationRepository

__all__ = [
    # Abstract interfaces
    "SimulationRepository",
    "ProgressRepository",
    # File implementations
    "FileSimulationRepository",
    "FileProgressRepository",
    "slugify",
    # SQLite implementations
    "SQLiteSimulationRepository",
    "SQLiteProgressRepository",
    # Call-site policy
    "ProgressStore",
    "StorageResult",
    # Configuration
    "StorageBackend",
    "get_storage_backend",
    "get_simulations_path",
    "get_progress_path",
    "get_database_uri",
    # Factory functions
    "get_simulation_repository",
    "get_progress_repository",
]
