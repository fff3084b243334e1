"""Pytest fixtures for webapp tests."""

import pytest

from civicsim.webapp.config import TestConfig
from civicsim.webapp.extensions import db
from civicsim.webapp.models import User
from civicsim.webapp.services import leaderboard


@pytest.fixture
def app(tmp_path):
    """Create test application with storage under a temporary directory."""
    from civicsim.webapp import create_app

    class Config(TestConfig):
        INSTANCE_PATH = tmp_path / "instance"
        SIMULATIONS_PATH = str(tmp_path / "simulations")
        PROGRESS_PATH = str(tmp_path / "progress")

    leaderboard.clear_cache()
    app = create_app(Config)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
    leaderboard.clear_cache()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def create_user(app, username: str, password: str = "testpassword123", **kwargs) -> int:
    with app.app_context():
        user = User(username=username, **kwargs)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        # Return just the ID to avoid DetachedInstanceError
        return user.id


@pytest.fixture
def make_user(app):
    """Factory creating extra users; returns the new user_id."""

    def make(username: str, **kwargs) -> int:
        return create_user(app, username, **kwargs)

    return make


@pytest.fixture
def user(app):
    """Create a test user and return user_id."""
    return create_user(app, "testuser")


@pytest.fixture
def auth_client(client, user):
    """Create authenticated test client."""
    client.post(
        "/auth/login",
        data={"username": "testuser", "password": "testpassword123"},
    )
    return client


@pytest.fixture
def service(app):
    """The app's simulation service."""
    from civicsim.webapp.services import get_simulation_service

    with app.app_context():
        return get_simulation_service()
