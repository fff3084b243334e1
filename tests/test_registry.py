"""Tests for the simulation registry."""

import re
from unittest.mock import MagicMock

import pytest

from civicsim.errors import TransientStorageError
from civicsim.models.simulation import Simulation
from civicsim.scenarios import BUILTIN_SIMULATIONS, SimulationRegistry, new_generated_id
from civicsim.storage import FileSimulationRepository


@pytest.fixture
def repo(tmp_path):
    return FileSimulationRepository(tmp_path / "simulations")


@pytest.fixture
def stored_registry(repo):
    return SimulationRegistry(BUILTIN_SIMULATIONS, repo)


def test_new_generated_id_format():
    assert re.fullmatch(r"ai_sim_\d+_[a-z0-9]{9}", new_generated_id())


def test_builtins_listed_first_in_id_order(registry):
    assert [s.id for s in registry.list()] == ["1", "2", "3"]


def test_get_unknown_returns_none(registry):
    assert registry.get("nope") is None
    assert "nope" not in registry
    assert "1" in registry


def test_add_generated_requires_repository(registry, simulation_data):
    with pytest.raises(TransientStorageError):
        registry.add_generated(Simulation.model_validate(simulation_data()))


def test_add_generated_persists_under_new_id(stored_registry, repo, simulation_data):
    draft = Simulation.model_validate(simulation_data(simulation_id="draft"))

    stored = stored_registry.add_generated(draft)

    assert stored.id.startswith("ai_sim_")
    assert stored.is_generated is True
    assert repo.get_simulation(stored.id)["title"] == draft.title
    assert stored_registry.get(stored.id).model_dump() == stored.model_dump()
    assert [s.id for s in stored_registry.list()] == ["1", "2", "3", stored.id]


def test_builtin_table_is_not_extended(stored_registry, simulation_data):
    stored_registry.add_generated(Simulation.model_validate(simulation_data()))
    assert sorted(BUILTIN_SIMULATIONS) == ["1", "2", "3"]


def test_invalid_stored_simulation_is_skipped(stored_registry, repo):
    repo.save_simulation({"id": "broken", "title": "Broken", "steps": []})
    assert stored_registry.get("broken") is None
    assert [s.id for s in stored_registry.list()] == ["1", "2", "3"]


def test_repository_failure_reads_as_not_found(simulation_data):
    repo = MagicMock()
    repo.get_simulation.side_effect = OSError("disk gone")
    registry = SimulationRegistry(BUILTIN_SIMULATIONS, repo)

    assert registry.get("ai_sim_1_abc") is None
    assert registry.get("1").id == "1"


def test_save_failure_raises_transient(simulation_data):
    repo = MagicMock()
    repo.save_simulation.side_effect = OSError("read-only")
    registry = SimulationRegistry(BUILTIN_SIMULATIONS, repo)

    with pytest.raises(TransientStorageError):
        registry.add_generated(Simulation.model_validate(simulation_data()))
