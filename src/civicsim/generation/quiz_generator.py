"""LLM-based quiz generation.

Works like simulation generation: request a fixed JSON shape, check it, strip
unsafe markup and build a Quiz, serving a hand-written quiz for the topic when
the model is unavailable or its output is unusable.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from civicsim.generation.schemas import GENERATED_QUIZ_SCHEMA
from civicsim.generation.simulation_generator import sanitize_text
from civicsim.llm import generate_json
from civicsim.models.preferences import GenerationPreferences, Topic
from civicsim.models.quiz import Quiz
from civicsim.prompts import QUIZ_GENERATION_SYSTEM_PROMPT, format_quiz_generation_prompt

logger = logging.getLogger(__name__)


@dataclass
class QuizResult:
    """Outcome of a quiz generation request."""

    quiz: Quiz
    used_fallback: bool = False
    error: Optional[str] = None


def validate_quiz_structure(data: Any) -> list[str]:
    """Check raw model output against the requested quiz shape.

    Returns:
        List of problems; empty when the structure is usable
    """
    if not isinstance(data, dict):
        return ["Response is not a JSON object"]

    errors = []
    for field in ("quiz_title", "questions"):
        if not data.get(field):
            errors.append(f"Missing required field: {field}")

    questions = data.get("questions")
    if questions and not isinstance(questions, list):
        errors.append("Questions must be a list")
        return errors

    for index, question in enumerate(questions or [], start=1):
        if not isinstance(question, dict):
            errors.append(f"Question {index} is not an object")
            continue
        for field in ("question", "options", "correct_answer", "explanation"):
            if not question.get(field):
                errors.append(f"Question {index} missing required field: {field}")
        options = question.get("options")
        if not options:
            continue
        if not isinstance(options, dict) or len(options) < 2:
            errors.append(f"Question {index} needs at least two options")
        elif question.get("correct_answer") and not options.get(question["correct_answer"]):
            errors.append(f"Question {index} correct answer {question['correct_answer']!r} is not an option")

    return errors


def sanitize_quiz(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of raw model output with every text field sanitised."""
    return {
        **data,
        "quiz_title": sanitize_text(data.get("quiz_title", "")),
        "description": sanitize_text(data.get("description", "")),
        "learning_objectives": [sanitize_text(o) for o in data.get("learning_objectives") or []],
        "additional_resources": [sanitize_text(r) for r in data.get("additional_resources") or []],
        "questions": [
            {
                **question,
                "question": sanitize_text(question.get("question", "")),
                "explanation": sanitize_text(question.get("explanation", "")),
                "options": {key: sanitize_text(value) for key, value in question.get("options", {}).items()},
            }
            for question in data.get("questions", [])
        ],
    }


def convert_quiz(data: dict[str, Any], preferences: GenerationPreferences) -> Quiz:
    """Build a Quiz from sanitised model output, keeping at most question_count questions.

    Raises:
        ValidationError: If the data is still not a valid Quiz
    """
    questions = data["questions"]
    if len(questions) > preferences.question_count:
        logger.info(f"Model returned {len(questions)} questions, keeping {preferences.question_count}")
        questions = questions[: preferences.question_count]

    return Quiz.model_validate({
        "quiz_title": data["quiz_title"],
        "description": data.get("description") or "",
        "difficulty_level": str(data.get("difficulty_level") or preferences.difficulty.value).lower(),
        "estimated_time": data.get("estimated_time") or "",
        "questions": questions,
        "learning_objectives": data.get("learning_objectives") or [],
        "additional_resources": data.get("additional_resources") or [],
    })


# Hand-written quizzes served when generation fails; keyed by topic
_FALLBACK_QUIZZES: dict[Topic, dict[str, Any]] = {
    Topic.GOVERNANCE: {
        "quiz_title": "Rwanda Governance Basics",
        "estimated_time": "5-10 minutes",
        "questions": [
            {
                "question": "What is the highest law in Rwanda?",
                "options": {
                    "A": "Parliamentary Act",
                    "B": "The Constitution",
                    "C": "Presidential Decree",
                    "D": "Ministerial Order",
                },
                "correct_answer": "B",
                "explanation": "The Constitution of Rwanda is the supreme law of the country, "
                "adopted in 2003 and amended in 2015.",
                "topic": "governance",
                "difficulty": "beginner",
            },
            {
                "question": "How many chambers does the Rwanda Parliament have?",
                "options": {
                    "A": "One chamber",
                    "B": "Two chambers",
                    "C": "Three chambers",
                    "D": "Four chambers",
                },
                "correct_answer": "B",
                "explanation": "Rwanda has a bicameral parliament with the Chamber of Deputies and the Senate.",
                "topic": "governance",
                "difficulty": "beginner",
            },
        ],
        "learning_objectives": [
            "Understand Rwanda's constitutional framework",
            "Learn about parliamentary structure",
        ],
        "additional_resources": [
            "Rwanda Constitution 2003 (amended 2015)",
            "Rwanda Governance Board resources",
        ],
    },
    Topic.CITIZENSHIP: {
        "quiz_title": "Rwanda Citizenship and Rights",
        "estimated_time": "5-10 minutes",
        "questions": [
            {
                "question": "What is required to become a Rwandan citizen by naturalization?",
                "options": {
                    "A": "5 years of residence",
                    "B": "10 years of residence",
                    "C": "15 years of residence",
                    "D": "20 years of residence",
                },
                "correct_answer": "A",
                "explanation": "The Rwanda nationality law requires 5 years of legal residence for naturalization.",
                "topic": "citizenship",
                "difficulty": "intermediate",
            },
        ],
        "learning_objectives": [
            "Understand citizenship requirements",
            "Learn about civic rights and responsibilities",
        ],
        "additional_resources": [
            "Rwanda Nationality Law",
            "National Identity Card procedures",
        ],
    },
}


def fallback_quiz(preferences: GenerationPreferences) -> Quiz:
    """Hand-written quiz for the topic (governance when the topic has none)."""
    data = _FALLBACK_QUIZZES.get(preferences.topic, _FALLBACK_QUIZZES[Topic.GOVERNANCE])
    return Quiz.model_validate({**data, "difficulty_level": preferences.difficulty})


class QuizGenerator:
    """Generates civic quizzes with the LLM, falling back on failure.

    Args:
        enabled: When False, the model is never called
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def _fallback(self, preferences: GenerationPreferences, error: str) -> QuizResult:
        return QuizResult(quiz=fallback_quiz(preferences), used_fallback=True, error=error)

    async def generate(
        self,
        prompt: str,
        preferences: GenerationPreferences | None = None,
    ) -> QuizResult:
        """Generate a quiz (never raises for model errors)."""
        preferences = preferences or GenerationPreferences()

        if not self.enabled:
            logger.info("Quiz generation disabled, serving fallback quiz")
            return self._fallback(preferences, "generation disabled")

        user_prompt = format_quiz_generation_prompt(
            context=prompt,
            topic=preferences.topic.value,
            difficulty=preferences.difficulty.value,
            question_count=preferences.question_count,
        )

        try:
            response = await generate_json(
                prompt=user_prompt,
                system_prompt=QUIZ_GENERATION_SYSTEM_PROMPT,
                schema=GENERATED_QUIZ_SCHEMA,
            )
        except Exception as e:
            logger.warning(f"Quiz generation failed, using fallback: {e}")
            return self._fallback(preferences, str(e))

        errors = validate_quiz_structure(response)
        if errors:
            logger.warning(f"Generated quiz rejected ({len(errors)} problems): {errors[:5]}")
            return self._fallback(preferences, "; ".join(errors))

        try:
            quiz = convert_quiz(sanitize_quiz(response), preferences)
        except (ValidationError, KeyError, TypeError) as e:
            logger.warning(f"Generated quiz could not be converted, using fallback: {e}")
            return self._fallback(preferences, str(e))

        logger.info(f"Generated quiz '{quiz.quiz_title}' with {quiz.question_count} questions")
        return QuizResult(quiz=quiz)
