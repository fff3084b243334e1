"""Policy wrapper around a ProgressRepository.

Repositories raise; the store turns every outcome into a StorageResult so
each call site states its own policy. Conflicts are reported as
ProgressConflictError and every other failure as TransientStorageError.
"""

import logging
from typing import Any, Optional

from civicsim.errors import ProgressConflictError, TransientStorageError

from .outcome import StorageResult
from .repository import ProgressRepository

logger = logging.getLogger(__name__)


class ProgressStore:
    """Progress persistence with failures captured as values."""

    def __init__(self, repository: ProgressRepository):
        self.repository = repository

    def load(self, user_id: Any, simulation_id: str) -> StorageResult[Optional[dict]]:
        try:
            return StorageResult.success(self.repository.load_progress(user_id, simulation_id))
        except Exception as e:
            logger.warning(f"Failed to load progress for user {user_id} on {simulation_id}: {e}")
            return StorageResult.failure(_transient("load", e))

    def save(
        self,
        user_id: Any,
        simulation_id: str,
        progress: dict,
        expected_step: Optional[int] = None,
    ) -> StorageResult[None]:
        try:
            self.repository.save_progress(user_id, simulation_id, progress, expected_step=expected_step)
            return StorageResult.success()
        except ProgressConflictError as e:
            logger.info(f"Rejected stale progress write: {e}")
            return StorageResult.failure(e)
        except Exception as e:
            logger.warning(f"Failed to save progress for user {user_id} on {simulation_id}: {e}")
            return StorageResult.failure(_transient("save", e))

    def delete(self, user_id: Any, simulation_id: str) -> StorageResult[bool]:
        try:
            return StorageResult.success(self.repository.delete_progress(user_id, simulation_id))
        except Exception as e:
            logger.warning(f"Failed to delete progress for user {user_id} on {simulation_id}: {e}")
            return StorageResult.failure(_transient("delete", e))

    def list_for_user(self, user_id: Any) -> StorageResult[list[dict]]:
        try:
            return StorageResult.success(self.repository.list_progress(user_id))
        except Exception as e:
            logger.warning(f"Failed to list progress for user {user_id}: {e}")
            return StorageResult.failure(_transient("list", e))


def _transient(operation: str, error: Exception) -> TransientStorageError:
    wrapped = TransientStorageError(f"Progress {operation} failed: {error}")
    wrapped.__cause__ = error
    return wrapped
