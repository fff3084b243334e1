"""Tests for LLM simulation generation (LLM calls are mocked)."""

import copy
from unittest.mock import AsyncMock, patch

import pytest

from civicsim.generation import (
    DRAFT_SIMULATION_ID,
    SimulationGenerator,
    convert_generated,
    fallback_simulation,
    sanitize_text,
    validate_simulation_structure,
)
from civicsim.llm import extract_json
from civicsim.models.preferences import Difficulty, GenerationPreferences, Topic
from civicsim.prompts import format_simulation_generation_prompt

GENERATE_JSON = "civicsim.generation.simulation_generator.generate_json"

VALID_RESPONSE = {
    "title": "Clean Water Committee",
    "description": "Decide how your sector improves water access.",
    "category": "environment",
    "difficulty_level": "intermediate",
    "estimated_time": "10 minutes",
    "learning_objectives": ["Understand participatory planning"],
    "scenario": {"context": "A dry season is coming.", "role": "Sector leader", "challenge": "Limited budget"},
    "steps": [
        {
            "id": "step_a",
            "title": "Listen first",
            "description": "Residents disagree about priorities.",
            "choices": [
                {"id": "choice_1", "text": "Hold an umuganda meeting", "points": 20, "feedback": "Inclusive."},
                {"id": "choice_2", "text": "Decide alone", "points": 5, "feedback": "Risky."},
            ],
        },
        {
            "id": "step_b",
            "title": "Fund it",
            "description": "Pick a funding source.",
            "choices": [
                {"id": "choice_1", "text": "Apply for a district grant", "points": 15, "feedback": "Good.",
                 "consequences": "The grant arrives in a month."},
                {"id": "choice_2", "text": "Skip it", "points": 0, "feedback": "Nothing happens."},
            ],
        },
    ],
    "conclusion": {"success_message": "Well done", "failure_message": "Try again", "key_learnings": ["Listen"]},
}


@pytest.fixture
def preferences():
    return GenerationPreferences(topic=Topic.ENVIRONMENT, difficulty=Difficulty.INTERMEDIATE, question_count=2)


class TestSanitize:
    def test_strips_script_and_iframe(self):
        text = 'Hello <script>alert("x")</script>world<iframe src="x"></iframe>'
        assert sanitize_text(text) == "Hello world"

    def test_strips_javascript_scheme(self):
        assert sanitize_text("javascript:alert(1)") == "alert(1)"

    def test_non_strings_unchanged(self):
        assert sanitize_text(5) == 5


class TestValidateStructure:
    def test_valid_response(self):
        assert validate_simulation_structure(VALID_RESPONSE) == []

    def test_not_an_object(self):
        assert validate_simulation_structure(["x"]) == ["Response is not a JSON object"]

    def test_missing_fields_reported(self):
        errors = validate_simulation_structure({"title": "Only a title"})
        assert "Missing required field: steps" in errors
        assert "Missing required field: scenario" in errors

    def test_non_integer_points(self):
        data = copy.deepcopy(VALID_RESPONSE)
        data["steps"][0]["choices"][0]["points"] = "twenty"
        assert validate_simulation_structure(data) == ["Step 1 choice 1 points must be an integer"]


class TestConvert:
    def test_renumbers_steps_and_sets_images(self, preferences):
        simulation = convert_generated(VALID_RESPONSE, preferences)

        assert simulation.id == DRAFT_SIMULATION_ID
        assert [s.step for s in simulation.steps] == [1, 2]
        assert {s.image for s in simulation.steps} == {"🌍"}
        assert simulation.max_possible_score == 35
        assert simulation.is_generated

    def test_consequences_default_to_feedback(self, preferences):
        simulation = convert_generated(VALID_RESPONSE, preferences)
        assert simulation.get_choice(1, "choice_1").consequences == "Inclusive."
        assert simulation.get_choice(2, "choice_1").consequences == "The grant arrives in a month."

    def test_unknown_category_uses_preferences(self, preferences):
        data = {**VALID_RESPONSE, "category": "space", "difficulty_level": "legendary"}
        simulation = convert_generated(data, preferences)
        assert simulation.category == Topic.ENVIRONMENT
        assert simulation.difficulty == Difficulty.INTERMEDIATE


class TestFallback:
    def test_topic_without_template_uses_governance(self):
        simulation = fallback_simulation(GenerationPreferences(topic=Topic.HEALTHCARE))
        assert simulation.title == "Local Government Decision Making"
        assert simulation.total_steps == 1


class TestSimulationGenerator:
    @pytest.mark.asyncio
    async def test_generates_simulation(self, preferences):
        with patch(GENERATE_JSON, new=AsyncMock(return_value=copy.deepcopy(VALID_RESPONSE))) as mock_generate:
            result = await SimulationGenerator().generate("Water access", preferences)

        assert result.used_fallback is False
        assert result.simulation.title == "Clean Water Committee"
        prompt = mock_generate.call_args.kwargs["prompt"]
        assert "Water access" in prompt

    @pytest.mark.asyncio
    async def test_llm_error_falls_back(self, preferences):
        with patch(GENERATE_JSON, new=AsyncMock(side_effect=RuntimeError("CLI missing"))):
            result = await SimulationGenerator().generate("Water access", preferences)

        assert result.used_fallback is True
        assert "CLI missing" in result.error
        assert result.simulation.total_steps == 1

    @pytest.mark.asyncio
    async def test_invalid_structure_falls_back(self, preferences):
        with patch(GENERATE_JSON, new=AsyncMock(return_value={"title": "Half"})):
            result = await SimulationGenerator().generate("Water access", preferences)
        assert result.used_fallback is True

    @pytest.mark.asyncio
    async def test_malicious_text_is_sanitised(self, preferences):
        data = copy.deepcopy(VALID_RESPONSE)
        data["title"] = "Water <script>steal()</script>Plan"
        with patch(GENERATE_JSON, new=AsyncMock(return_value=data)):
            result = await SimulationGenerator().generate("Water access", preferences)
        assert result.simulation.title == "Water Plan"

    @pytest.mark.asyncio
    async def test_disabled_generator_never_calls_llm(self, preferences):
        with patch(GENERATE_JSON, new=AsyncMock()) as mock_generate:
            result = await SimulationGenerator(enabled=False).generate("Water access", preferences)
        mock_generate.assert_not_called()
        assert result.used_fallback is True


class TestPromptAndParsing:
    def test_prompt_mentions_preferences(self):
        prompt = format_simulation_generation_prompt("Budget vote", "economic", "advanced", step_count=4)
        assert "economic" in prompt
        assert "advanced" in prompt
        assert "Budget vote" in prompt

    def test_extract_json_from_fenced_block(self):
        assert extract_json('Here:\n```json\n{"a": 1}\n```') == {"a": 1}

    def test_extract_json_from_bare_object(self):
        assert extract_json('noise {"a": {"b": 2}} trailing') == {"a": {"b": 2}}

    def test_extract_json_rejects_garbage(self):
        with pytest.raises(ValueError):
            extract_json("no json here")
