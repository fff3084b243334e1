"""Tests for simulation definitions, attempts and preferences."""

import pytest
from pydantic import ValidationError

from civicsim.models.attempt import Attempt, RecordedChoice
from civicsim.models.preferences import Difficulty, GenerationPreferences, Topic, image_for_topic
from civicsim.models.simulation import Simulation
from civicsim.scenarios import BUILTIN_SIMULATIONS


class TestSimulation:
    def test_max_possible_score_sums_best_choice_per_step(self, simulation_data):
        simulation = Simulation.model_validate(simulation_data(points=((10, 5), (0, 20), (7,))))
        assert simulation.max_possible_score == 37

    def test_local_election_campaign_max_score(self):
        assert BUILTIN_SIMULATIONS["1"].max_possible_score == 155

    def test_steps_must_be_numbered_in_order(self, simulation_data):
        data = simulation_data(points=((1,), (2,)))
        data["steps"][1]["step"] = 3
        with pytest.raises(ValidationError, match="numbered"):
            Simulation.model_validate(data)

    def test_step_requires_a_choice(self, simulation_data):
        data = simulation_data(points=((1,),))
        data["steps"][0]["choices"] = []
        with pytest.raises(ValidationError):
            Simulation.model_validate(data)

    def test_duplicate_choice_ids_rejected(self, simulation_data):
        data = simulation_data(points=((1, 2),))
        data["steps"][0]["choices"][1]["id"] = "A"
        with pytest.raises(ValidationError, match="duplicate choice ids"):
            Simulation.model_validate(data)

    def test_numeric_ids_are_coerced_to_strings(self, simulation_data):
        data = simulation_data(simulation_id=7)
        assert Simulation.model_validate(data).id == "7"

    def test_get_step_out_of_range(self):
        simulation = BUILTIN_SIMULATIONS["2"]
        assert simulation.get_step(0) is None
        assert simulation.get_step(simulation.total_steps + 1) is None
        assert simulation.get_step(1).title == "Budget Assessment"

    def test_get_choice(self):
        simulation = BUILTIN_SIMULATIONS["1"]
        assert simulation.get_choice(1, "B").points == 25
        assert simulation.get_choice(1, "Z") is None
        assert simulation.get_choice(9, "A") is None

    def test_summary_falls_back_to_first_step_description(self, simulation_data):
        data = simulation_data()
        data["description"] = ""
        summary = Simulation.model_validate(data).summary()
        assert summary["description"] == "Decision 1"
        assert summary["total_steps"] == 2

    def test_definitions_are_immutable(self):
        with pytest.raises(ValidationError):
            BUILTIN_SIMULATIONS["1"].title = "Changed"


class TestBuiltinSimulations:
    def test_builtin_table(self):
        assert sorted(BUILTIN_SIMULATIONS) == ["1", "2", "3"]
        assert [BUILTIN_SIMULATIONS[k].total_steps for k in ("1", "2", "3")] == [5, 4, 4]

    def test_builtin_categories(self):
        assert BUILTIN_SIMULATIONS["1"].category == Topic.GOVERNANCE
        assert BUILTIN_SIMULATIONS["2"].difficulty == Difficulty.INTERMEDIATE
        assert BUILTIN_SIMULATIONS["3"].category == Topic.CITIZENSHIP


class TestAttempt:
    def test_to_progress_shape(self, clock):
        attempt = Attempt(user_id=4, simulation_id="1", total_steps=5, started_at=clock())
        attempt.choices.append(RecordedChoice(step=1, choice_id="B", points=25))
        attempt.score = 25
        attempt.current_step = 2

        progress = attempt.to_progress()
        assert progress["current_step"] == 2
        assert progress["total_score"] == 25
        assert progress["choices"][0]["choice_id"] == "B"
        assert progress["started_at"] == "2024-01-01T12:00:00"

    def test_is_completed(self):
        attempt = Attempt(user_id=1, simulation_id="1", total_steps=2, current_step=3)
        assert attempt.is_completed


class TestGenerationPreferences:
    def test_defaults(self):
        preferences = GenerationPreferences()
        assert preferences.difficulty == Difficulty.BEGINNER
        assert preferences.topic == Topic.GOVERNANCE
        assert preferences.question_count == 5

    @pytest.mark.parametrize("count", [0, 21])
    def test_question_count_bounds(self, count):
        with pytest.raises(ValidationError):
            GenerationPreferences(question_count=count)

    def test_unknown_topic_rejected(self):
        with pytest.raises(ValidationError):
            GenerationPreferences(topic="sports")

    def test_image_for_topic(self):
        assert image_for_topic(Topic.HEALTHCARE) == "🏥"
        assert image_for_topic("nonsense") == "📋"
