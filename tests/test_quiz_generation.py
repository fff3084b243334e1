"""Tests for LLM quiz generation (LLM calls are mocked)."""

import copy
from unittest.mock import AsyncMock, patch

import pytest
from pydantic import ValidationError

from civicsim.generation import (
    QuizGenerator,
    convert_quiz,
    fallback_quiz,
    sanitize_quiz,
    validate_quiz_structure,
)
from civicsim.models.preferences import Difficulty, GenerationPreferences, Topic
from civicsim.models.quiz import QuizQuestion
from civicsim.prompts import format_quiz_generation_prompt

GENERATE_JSON = "civicsim.generation.quiz_generator.generate_json"

VALID_QUIZ = {
    "quiz_title": "Local Leaders",
    "description": "Who runs your district.",
    "difficulty_level": "intermediate",
    "estimated_time": "5 minutes",
    "questions": [
        {
            "question": "Who leads a District Council?",
            "options": {"A": "The Mayor", "B": "The Council chairperson", "C": "The Governor"},
            "correct_answer": "B",
            "explanation": "Councils elect their own chairperson.",
            "topic": "governance",
            "difficulty": "intermediate",
        },
        {
            "question": "What is umuganda?",
            "options": {"A": "A tax", "B": "Monthly community work"},
            "correct_answer": "B",
            "explanation": "Umuganda is held on the last Saturday of each month.",
        },
    ],
    "learning_objectives": ["Know local institutions"],
    "additional_resources": ["Rwanda Governance Board"],
}


@pytest.fixture
def preferences():
    return GenerationPreferences(topic=Topic.GOVERNANCE, difficulty=Difficulty.INTERMEDIATE, question_count=2)


class TestValidateQuizStructure:
    def test_valid_quiz(self):
        assert validate_quiz_structure(VALID_QUIZ) == []

    def test_not_an_object(self):
        assert validate_quiz_structure("quiz") == ["Response is not a JSON object"]

    def test_missing_fields_reported(self):
        errors = validate_quiz_structure({"description": "No title"})
        assert "Missing required field: quiz_title" in errors
        assert "Missing required field: questions" in errors

    def test_single_option_rejected(self):
        data = copy.deepcopy(VALID_QUIZ)
        data["questions"][1]["options"] = {"B": "Monthly community work"}
        assert validate_quiz_structure(data) == ["Question 2 needs at least two options"]

    def test_answer_must_be_an_option(self):
        data = copy.deepcopy(VALID_QUIZ)
        data["questions"][0]["correct_answer"] = "D"
        errors = validate_quiz_structure(data)
        assert len(errors) == 1
        assert "Question 1 correct answer 'D'" in errors[0]

    def test_missing_explanation(self):
        data = copy.deepcopy(VALID_QUIZ)
        del data["questions"][0]["explanation"]
        assert validate_quiz_structure(data) == ["Question 1 missing required field: explanation"]


class TestSanitizeQuiz:
    def test_strips_markup_from_every_text_field(self):
        data = copy.deepcopy(VALID_QUIZ)
        data["quiz_title"] = "Leaders<script>x()</script>"
        data["questions"][0]["options"]["A"] = "javascript:The Mayor"
        data["questions"][0]["explanation"] = '<iframe src="x"></iframe> Elected.'

        clean = sanitize_quiz(data)

        assert clean["quiz_title"] == "Leaders"
        assert clean["questions"][0]["options"]["A"] == "The Mayor"
        assert clean["questions"][0]["explanation"] == "Elected."
        assert data["quiz_title"] == "Leaders<script>x()</script>"


class TestConvertQuiz:
    def test_keeps_requested_question_count(self):
        quiz = convert_quiz(VALID_QUIZ, GenerationPreferences(question_count=1))

        assert quiz.question_count == 1
        assert quiz.questions[0].correct_answer == "B"
        assert quiz.difficulty_level is Difficulty.INTERMEDIATE

    def test_answer_letter_is_normalised(self):
        question = QuizQuestion(
            question="Q?", options={"A": "yes", "B": "no"}, correct_answer=" a ", explanation="Because."
        )
        assert question.correct_answer == "A"

    def test_answer_outside_options_is_invalid(self):
        with pytest.raises(ValidationError):
            QuizQuestion(question="Q?", options={"A": "yes", "B": "no"}, correct_answer="C", explanation="x")


class TestFallbackQuiz:
    def test_citizenship_template(self):
        quiz = fallback_quiz(GenerationPreferences(topic=Topic.CITIZENSHIP, difficulty=Difficulty.ADVANCED))

        assert quiz.quiz_title == "Rwanda Citizenship and Rights"
        assert quiz.difficulty_level is Difficulty.ADVANCED

    def test_topic_without_template_uses_governance(self):
        quiz = fallback_quiz(GenerationPreferences(topic=Topic.HEALTHCARE))

        assert quiz.quiz_title == "Rwanda Governance Basics"
        assert quiz.question_count == 2


class TestQuizGenerator:
    @pytest.mark.asyncio
    async def test_generates_quiz(self, preferences):
        with patch(GENERATE_JSON, new=AsyncMock(return_value=copy.deepcopy(VALID_QUIZ))) as mock_generate:
            result = await QuizGenerator().generate("District councils", preferences)

        assert result.used_fallback is False
        assert result.quiz.quiz_title == "Local Leaders"
        assert result.quiz.question_count == 2
        prompt = mock_generate.call_args.kwargs["prompt"]
        assert "District councils" in prompt
        assert "2 questions" in prompt

    @pytest.mark.asyncio
    async def test_llm_error_falls_back(self, preferences):
        with patch(GENERATE_JSON, new=AsyncMock(side_effect=RuntimeError("CLI missing"))):
            result = await QuizGenerator().generate("District councils", preferences)

        assert result.used_fallback is True
        assert "CLI missing" in result.error
        assert result.quiz.quiz_title == "Rwanda Governance Basics"

    @pytest.mark.asyncio
    async def test_invalid_structure_falls_back(self, preferences):
        with patch(GENERATE_JSON, new=AsyncMock(return_value={"quiz_title": "Empty", "questions": []})):
            result = await QuizGenerator().generate("District councils", preferences)

        assert result.used_fallback is True
        assert "questions" in result.error

    @pytest.mark.asyncio
    async def test_unconvertible_output_falls_back(self, preferences):
        data = copy.deepcopy(VALID_QUIZ)
        data["difficulty_level"] = "expert"
        with patch(GENERATE_JSON, new=AsyncMock(return_value=data)):
            result = await QuizGenerator().generate("District councils", preferences)

        assert result.used_fallback is True

    @pytest.mark.asyncio
    async def test_disabled_generator_never_calls_llm(self, preferences):
        with patch(GENERATE_JSON, new=AsyncMock()) as mock_generate:
            result = await QuizGenerator(enabled=False).generate("District councils", preferences)

        mock_generate.assert_not_called()
        assert result.used_fallback is True


def test_quiz_prompt_mentions_preferences():
    prompt = format_quiz_generation_prompt("Elections", "citizenship", "beginner", question_count=3)

    assert "beginner level quiz about citizenship" in prompt
    assert "3 questions" in prompt
    assert "Elections" in prompt
