"""File-based repository implementations using JSON files.

Generated simulations are stored in the simulations/ directory, one file per
simulation. Progress records are stored under progress/<user>/<simulation>.json.
"""

import json
import logging
import re
import threading
from pathlib import Path
from typing import Any, Optional

from civicsim.clock import utcnow
from civicsim.errors import ProgressConflictError

from .repository import ProgressRepository, SimulationRepository

logger = logging.getLogger(__name__)


def slugify(text: str) -> str:
    """Convert text to a filesystem-safe slug.

    Examples:
        >>> slugify("Local Election Campaign")
        'local-election-campaign'
        >>> slugify("ai_sim_1700000000_x7k2")
        'ai-sim-1700000000-x7k2'
    """
    text = text.lower()
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"[^a-z0-9-]", "", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


def _safe_filename(identifier: Any) -> str:
    """Identifiers made of word characters are used as-is, anything else is slugified."""
    identifier = str(identifier)
    if re.fullmatch(r"[A-Za-z0-9_-]+", identifier):
        return identifier
    return slugify(identifier) or "_"


class FileSimulationRepository(SimulationRepository):
    """JSON file-based simulation repository.

    Stores simulations as individual JSON files named after their id.
    """

    def __init__(self, simulations_path: str | Path = "simulations"):
        self.simulations_path = Path(simulations_path)
        self.simulations_path.mkdir(parents=True, exist_ok=True)

    def _get_simulation_path(self, simulation_id: str) -> Path:
        return self.simulations_path / f"{_safe_filename(simulation_id)}.json"

    def list_simulations(self) -> list[dict]:
        """Return metadata for all stored simulations."""
        simulations = []
        for path in self.simulations_path.glob("*.json"):
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            simulations.append({
                "id": data.get("id", path.stem),
                "title": data.get("title", path.stem),
                "category": data.get("category", ""),
                "difficulty": data.get("difficulty", ""),
                "total_steps": len(data.get("steps", [])),
            })
        return sorted(simulations, key=lambda x: x["title"])

    def get_simulation(self, simulation_id: str) -> Optional[dict]:
        """Load complete simulation by ID."""
        path = self._get_simulation_path(simulation_id)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        data.setdefault("id", simulation_id)
        return data

    def save_simulation(self, simulation: dict) -> str:
        """Save simulation, return ID."""
        title = simulation.get("title")
        if not title:
            raise ValueError("Simulation must have a 'title' field")

        simulation_id = str(simulation.get("id") or slugify(title))
        path = self._get_simulation_path(simulation_id)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(
                {**simulation, "id": simulation_id, "updated_at": utcnow().isoformat()},
                f,
                indent=2,
                ensure_ascii=False,
            )

        return simulation_id

    def delete_simulation(self, simulation_id: str) -> bool:
        """Delete simulation."""
        path = self._get_simulation_path(simulation_id)
        if path.exists():
            path.unlink()
            return True
        return False


class FileProgressRepository(ProgressRepository):
    """JSON file-based progress repository.

    Conditional writes are serialised with a lock held by the repository
    instance, so they are only safe within a single process.
    """

    def __init__(self, progress_path: str | Path = "progress"):
        self.progress_path = Path(progress_path)
        self.progress_path.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _get_user_dir(self, user_id: Any) -> Path:
        return self.progress_path / _safe_filename(user_id)

    def _get_progress_path(self, user_id: Any, simulation_id: str) -> Path:
        return self._get_user_dir(user_id) / f"{_safe_filename(simulation_id)}.json"

    def _read(self, path: Path) -> Optional[dict]:
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def load_progress(self, user_id: Any, simulation_id: str) -> Optional[dict]:
        """Load progress for a user and simulation."""
        return self._read(self._get_progress_path(user_id, simulation_id))

    def save_progress(
        self,
        user_id: Any,
        simulation_id: str,
        progress: dict,
        expected_step: Optional[int] = None,
    ) -> None:
        """Persist progress, rejecting stale conditional writes."""
        path = self._get_progress_path(user_id, simulation_id)

        with self._lock:
            if expected_step is not None:
                existing = self._read(path)
                stored_step = existing.get("current_step", 1) if existing else 1
                if stored_step != expected_step:
                    raise ProgressConflictError(user_id, simulation_id, expected_step, stored_step)

            path.parent.mkdir(parents=True, exist_ok=True)
            record = {
                **progress,
                "user_id": user_id,
                "simulation_id": simulation_id,
                "updated_at": utcnow().isoformat(),
            }
            # Write to a sibling file first so readers never see a partial record
            tmp_path = path.with_suffix(".json.tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2, ensure_ascii=False)
            tmp_path.replace(path)

        logger.debug(f"Saved progress: user={user_id} simulation={simulation_id} step={progress.get('current_step')}")

    def delete_progress(self, user_id: Any, simulation_id: str) -> bool:
        """Delete progress."""
        path = self._get_progress_path(user_id, simulation_id)
        with self._lock:
            if path.exists():
                path.unlink()
                return True
        return False

    def list_progress(self, user_id: Any) -> list[dict]:
        """List saved progress of a user, most recently updated first."""
        user_dir = self._get_user_dir(user_id)
        if not user_dir.exists():
            return []
        records = []
        for path in user_dir.glob("*.json"):
            with open(path, encoding="utf-8") as f:
                records.append(json.load(f))
        return sorted(records, key=lambda x: x.get("updated_at", ""), reverse=True)
