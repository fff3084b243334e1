"""SQLite-based repository implementations.

This module provides SQLite storage for generated simulations and progress
records using the standard library sqlite3 module.
"""

import json
import logging
import sqlite3
import uuid
from pathlib import Path
from typing import Any, Optional

from civicsim.clock import utcnow
from civicsim.errors import ProgressConflictError

from .repository import ProgressRepository, SimulationRepository

logger = logging.getLogger(__name__)


def dict_factory(cursor: sqlite3.Cursor, row: tuple) -> dict:
    """Convert sqlite3 row to dict."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


class _SQLiteRepository:
    """Connection handling shared by the SQLite repositories."""

    def __init__(self, database_uri: str = "instance/civicsim.db"):
        """Initialize repository.

        Args:
            database_uri: Path to SQLite database file
        """
        self.database_path = Path(database_uri)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path, timeout=10)
        conn.row_factory = dict_factory
        return conn

    def _init_db(self) -> None:
        raise NotImplementedError


class SQLiteSimulationRepository(_SQLiteRepository, SimulationRepository):
    """SQLite-based simulation repository.

    Stores each simulation as a JSON document with a few indexed columns.
    """

    def _init_db(self) -> None:
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS simulations (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                category TEXT,
                difficulty TEXT,
                total_steps INTEGER,
                data TEXT NOT NULL,
                created_at TEXT,
                updated_at TEXT
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_simulations_title ON simulations(title)")
        conn.commit()
        conn.close()

    def list_simulations(self) -> list[dict]:
        """Return metadata for all stored simulations."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id, title, category, difficulty, total_steps FROM simulations ORDER BY title"
        )
        rows = cursor.fetchall()
        conn.close()
        return rows

    def get_simulation(self, simulation_id: str) -> Optional[dict]:
        """Load complete simulation by ID."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT data FROM simulations WHERE id = ?", (simulation_id,))
        row = cursor.fetchone()
        conn.close()

        if row is None:
            return None

        data = json.loads(row["data"])
        data["id"] = simulation_id
        return data

    def save_simulation(self, simulation: dict) -> str:
        """Save simulation, return ID."""
        title = simulation.get("title")
        if not title:
            raise ValueError("Simulation must have a 'title' field")

        simulation_id = str(simulation.get("id") or uuid.uuid4())
        now = utcnow().isoformat()

        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO simulations (id, title, category, difficulty, total_steps, data, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                title = excluded.title,
                category = excluded.category,
                difficulty = excluded.difficulty,
                total_steps = excluded.total_steps,
                data = excluded.data,
                updated_at = excluded.updated_at
        """, (
            simulation_id,
            title,
            simulation.get("category", ""),
            simulation.get("difficulty", ""),
            len(simulation.get("steps", [])),
            json.dumps({**simulation, "id": simulation_id}),
            now,
            now,
        ))
        conn.commit()
        conn.close()
        return simulation_id

    def delete_simulation(self, simulation_id: str) -> bool:
        """Delete simulation."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM simulations WHERE id = ?", (simulation_id,))
        deleted = cursor.rowcount > 0
        conn.commit()
        conn.close()
        return deleted


class SQLiteProgressRepository(_SQLiteRepository, ProgressRepository):
    """SQLite-based progress repository.

    Conditional writes run inside a ``BEGIN IMMEDIATE`` transaction, so two
    processes sharing the database cannot both advance the same pointer.
    """

    def _init_db(self) -> None:
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS progress (
                user_id TEXT NOT NULL,
                simulation_id TEXT NOT NULL,
                current_step INTEGER NOT NULL DEFAULT 1,
                total_score INTEGER NOT NULL DEFAULT 0,
                data TEXT NOT NULL,
                updated_at TEXT,
                PRIMARY KEY (user_id, simulation_id)
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_progress_user_id ON progress(user_id)")
        conn.commit()
        conn.close()

    def load_progress(self, user_id: Any, simulation_id: str) -> Optional[dict]:
        """Load progress for a user and simulation."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT data FROM progress WHERE user_id = ? AND simulation_id = ?",
            (str(user_id), simulation_id),
        )
        row = cursor.fetchone()
        conn.close()

        if row is None:
            return None
        return json.loads(row["data"])

    def save_progress(
        self,
        user_id: Any,
        simulation_id: str,
        progress: dict,
        expected_step: Optional[int] = None,
    ) -> None:
        """Persist progress, rejecting stale conditional writes."""
        now = utcnow().isoformat()
        record = {**progress, "user_id": user_id, "simulation_id": simulation_id, "updated_at": now}

        conn = self._get_connection()
        conn.isolation_level = None
        cursor = conn.cursor()
        try:
            cursor.execute("BEGIN IMMEDIATE")
            if expected_step is not None:
                cursor.execute(
                    "SELECT current_step FROM progress WHERE user_id = ? AND simulation_id = ?",
                    (str(user_id), simulation_id),
                )
                row = cursor.fetchone()
                stored_step = row["current_step"] if row else 1
                if stored_step != expected_step:
                    raise ProgressConflictError(user_id, simulation_id, expected_step, stored_step)

            cursor.execute("""
                INSERT INTO progress (user_id, simulation_id, current_step, total_score, data, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id, simulation_id) DO UPDATE SET
                    current_step = excluded.current_step,
                    total_score = excluded.total_score,
                    data = excluded.data,
                    updated_at = excluded.updated_at
            """, (
                str(user_id),
                simulation_id,
                progress.get("current_step", 1),
                progress.get("total_score", 0),
                json.dumps(record),
                now,
            ))
            cursor.execute("COMMIT")
        except Exception:
            if conn.in_transaction:
                conn.rollback()
            raise
        finally:
            conn.close()

        logger.debug(f"Saved progress: user={user_id} simulation={simulation_id} step={progress.get('current_step')}")

    def delete_progress(self, user_id: Any, simulation_id: str) -> bool:
        """Delete progress."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "DELETE FROM progress WHERE user_id = ? AND simulation_id = ?",
            (str(user_id), simulation_id),
        )
        deleted = cursor.rowcount > 0
        conn.commit()
        conn.close()
        return deleted

    def list_progress(self, user_id: Any) -> list[dict]:
        """List saved progress of a user, most recently updated first."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT data FROM progress WHERE user_id = ? ORDER BY updated_at DESC",
            (str(user_id),),
        )
        rows = cursor.fetchall()
        conn.close()
        return [json.loads(row["data"]) for row in rows]
