"""Shared pytest fixtures and markers for all tests."""

from datetime import datetime, timedelta

import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "webapp: marks webapp-specific tests"
    )


class FakeClock:
    """Controllable clock for engine tests."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry():
    """Registry over the built-in simulations only."""
    from civicsim.scenarios import BUILTIN_SIMULATIONS, SimulationRegistry

    return SimulationRegistry(BUILTIN_SIMULATIONS)


@pytest.fixture
def engine(registry, clock):
    from civicsim.engine import SimulationEngine

    return SimulationEngine(registry, clock=clock)


def make_simulation_data(simulation_id: str = "custom", points=((10, 5), (20, 0))) -> dict:
    """Simulation dict with one step per tuple of choice points."""
    return {
        "id": simulation_id,
        "title": f"Simulation {simulation_id}",
        "description": "Test simulation",
        "steps": [
            {
                "step": number,
                "title": f"Step {number}",
                "description": f"Decision {number}",
                "choices": [
                    {"id": chr(ord("A") + index), "text": f"Option {index}", "points": value}
                    for index, value in enumerate(step_points)
                ],
            }
            for number, step_points in enumerate(points, start=1)
        ],
    }


@pytest.fixture
def simulation_data():
    return make_simulation_data
