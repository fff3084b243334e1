"""Tests for achievement conditions and awarding."""

from datetime import datetime
from types import SimpleNamespace

import pytest

from civicsim.webapp.extensions import db
from civicsim.webapp.models import Achievement, SimulationCompletion, User, UserAchievement
from civicsim.webapp.services.achievements import (
    DEFAULT_ACHIEVEMENTS,
    CompletionStats,
    check_and_award,
    evaluate_conditions,
    get_completion_stats,
    seed_achievements,
)


class TestEvaluateConditions:
    @pytest.mark.parametrize(
        "conditions,stats,percentage,expected",
        [
            ({"min_simulations": 1}, CompletionStats(1, 40.0, 0), None, True),
            ({"min_simulations": 5}, CompletionStats(4, 100.0, 4), None, False),
            ({"min_average_score": 90}, CompletionStats(2, 90.0, 0), None, True),
            ({"min_average_score": 90}, CompletionStats(0, 0.0, 0), None, False),
            ({"min_perfect_scores": 1}, CompletionStats(3, 70.0, 1), None, True),
            ({"min_score": 85}, CompletionStats(1, 50.0, 0), 85, True),
            ({"min_score": 85}, CompletionStats(1, 50.0, 0), 84, False),
            ({"min_score": 85}, CompletionStats(1, 95.0, 0), None, False),
        ],
    )
    def test_single_condition(self, conditions, stats, percentage, expected):
        result = SimpleNamespace(percentage=percentage) if percentage is not None else None

        assert evaluate_conditions(conditions, stats, result) is expected

    def test_any_condition_suffices(self):
        conditions = {"min_simulations": 10, "min_score": 50}

        assert evaluate_conditions(conditions, CompletionStats(1, 60.0, 0), SimpleNamespace(percentage=60))

    def test_empty_and_unknown_conditions(self):
        stats = CompletionStats(10, 100.0, 10)

        assert not evaluate_conditions({}, stats)
        assert not evaluate_conditions({"min_streak": 3}, stats)


def add_completion(user_id, percentage, started_at):
    db.session.add(
        SimulationCompletion(
            user_id=user_id,
            simulation_id="1",
            simulation_title="Local Election Campaign",
            total_score=percentage,
            max_possible_score=100,
            percentage=percentage,
            performance_level="good",
            badge="Engaged Citizen",
            points_awarded=0,
            started_at=started_at,
            completed_at=started_at,
        )
    )
    db.session.commit()


class TestAwarding:
    def test_seed_is_idempotent(self, app):
        with app.app_context():
            seed_achievements()
            seed_achievements()

            assert Achievement.query.count() == len(DEFAULT_ACHIEVEMENTS)

    def test_completion_stats(self, app, user):
        with app.app_context():
            add_completion(user, 100, datetime(2024, 1, 1))
            add_completion(user, 50, datetime(2024, 1, 2))

            stats = get_completion_stats(user)

        assert stats == CompletionStats(completed=2, average_score=75.0, perfect_scores=1)

    def test_awards_once_and_adds_points(self, app, user):
        with app.app_context():
            account = db.session.get(User, user)
            add_completion(user, 60, datetime(2024, 1, 1))

            first = check_and_award(account, SimpleNamespace(percentage=60))
            second = check_and_award(account, SimpleNamespace(percentage=60))

            assert [a.code for a in first] == ["first_steps"]
            assert second == []
            assert account.total_points == 50
            assert UserAchievement.query.filter_by(user_id=user).count() == 1

    def test_no_completions_no_awards(self, app, user):
        with app.app_context():
            account = db.session.get(User, user)

            assert check_and_award(account) == []
