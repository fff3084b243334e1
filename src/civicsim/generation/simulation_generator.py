"""LLM-based simulation generation.

The generator asks the model for a simulation in a fixed JSON shape, checks
the structure, strips unsafe markup from every text field and converts the
result to a Simulation. Whenever the model is unavailable or returns something
unusable, a hand-written fallback simulation for the requested topic is
returned instead, so generation never fails outright.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from civicsim.generation.schemas import GENERATED_SIMULATION_SCHEMA
from civicsim.llm import generate_json
from civicsim.models.preferences import Difficulty, GenerationPreferences, Topic, image_for_topic
from civicsim.models.simulation import Simulation
from civicsim.prompts import (
    SIMULATION_GENERATION_SYSTEM_PROMPT,
    format_simulation_generation_prompt,
)

logger = logging.getLogger(__name__)

# Placeholder id; the registry assigns the real one when the simulation is stored
DRAFT_SIMULATION_ID = "draft"

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_IFRAME_RE = re.compile(r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE)
_JS_SCHEME_RE = re.compile(r"javascript:", re.IGNORECASE)


@dataclass
class GenerationResult:
    """Outcome of a generation request.

    Attributes:
        simulation: The generated (or fallback) simulation
        used_fallback: True when the fallback simulation was returned
        error: Why the model output was rejected, when used_fallback is True
    """

    simulation: Simulation
    used_fallback: bool = False
    error: Optional[str] = None


def sanitize_text(text: Any) -> Any:
    """Strip script/iframe elements and javascript: schemes from a string.

    Non-string values are returned unchanged.
    """
    if not isinstance(text, str):
        return text
    text = _SCRIPT_RE.sub("", text)
    text = _IFRAME_RE.sub("", text)
    text = _JS_SCHEME_RE.sub("", text)
    return text.strip()


def validate_simulation_structure(data: Any) -> list[str]:
    """Check raw model output against the requested shape.

    Returns:
        List of problems; empty when the structure is usable
    """
    if not isinstance(data, dict):
        return ["Response is not a JSON object"]

    errors = []
    for field in ("title", "description", "scenario", "steps"):
        if not data.get(field):
            errors.append(f"Missing required field: {field}")

    scenario = data.get("scenario")
    if isinstance(scenario, dict):
        if not scenario.get("context") or not scenario.get("role"):
            errors.append("Scenario must include context and role")
    elif scenario:
        errors.append("Scenario must be an object")

    steps = data.get("steps")
    if steps and not isinstance(steps, list):
        errors.append("Steps must be a list")
        return errors

    for index, step in enumerate(steps or [], start=1):
        if not isinstance(step, dict):
            errors.append(f"Step {index} is not an object")
            continue
        for field in ("id", "title", "description", "choices"):
            if not step.get(field):
                errors.append(f"Step {index} missing required field: {field}")
        choices = step.get("choices")
        if not isinstance(choices, list) or not choices:
            continue
        for choice_index, choice in enumerate(choices, start=1):
            if not isinstance(choice, dict) or not choice.get("id") or not choice.get("text"):
                errors.append(f"Step {index} choice {choice_index} needs an id and text")
            elif not isinstance(choice.get("points"), int) or isinstance(choice.get("points"), bool):
                errors.append(f"Step {index} choice {choice_index} points must be an integer")

    return errors


def sanitize_simulation(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of raw model output with every text field sanitised."""
    scenario = data.get("scenario") or {}
    conclusion = data.get("conclusion") or {}

    return {
        **data,
        "title": sanitize_text(data.get("title", "")),
        "description": sanitize_text(data.get("description", "")),
        "learning_objectives": [sanitize_text(o) for o in data.get("learning_objectives") or []],
        "scenario": {key: sanitize_text(value) for key, value in scenario.items()},
        "steps": [
            {
                **step,
                "title": sanitize_text(step.get("title", "")),
                "description": sanitize_text(step.get("description", "")),
                "choices": [
                    {
                        **choice,
                        "text": sanitize_text(choice.get("text", "")),
                        "feedback": sanitize_text(choice.get("feedback", "")),
                        "consequences": sanitize_text(choice.get("consequences")),
                    }
                    for choice in step.get("choices", [])
                ],
            }
            for step in data.get("steps", [])
        ],
        "conclusion": {
            **conclusion,
            "success_message": sanitize_text(conclusion.get("success_message", "")),
            "failure_message": sanitize_text(conclusion.get("failure_message", "")),
            "key_learnings": [sanitize_text(k) for k in conclusion.get("key_learnings") or []],
        },
    }


def _parse_enum(enum_cls, value: Any, default):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        return default


def convert_generated(data: dict[str, Any], preferences: GenerationPreferences) -> Simulation:
    """Build a Simulation from sanitised model output.

    Steps are renumbered 1..N in the order given, every step uses the glyph
    of the simulation's category, and a choice without consequences reuses
    its feedback.

    Raises:
        ValidationError: If the converted data is still not a valid Simulation
    """
    category = _parse_enum(Topic, data.get("category"), preferences.topic)
    difficulty = _parse_enum(Difficulty, data.get("difficulty_level"), preferences.difficulty)
    image = image_for_topic(category)

    steps = []
    for number, step in enumerate(data["steps"], start=1):
        steps.append({
            "step": number,
            "title": step["title"],
            "description": step["description"],
            "image": image,
            "choices": [
                {
                    "id": choice["id"],
                    "text": choice["text"],
                    "points": choice["points"],
                    "feedback": choice.get("feedback") or "",
                    "consequences": choice.get("consequences") or choice.get("feedback") or None,
                }
                for choice in step["choices"]
            ],
        })

    return Simulation.model_validate({
        "id": DRAFT_SIMULATION_ID,
        "title": data["title"],
        "description": data.get("description", ""),
        "category": category,
        "difficulty": difficulty,
        "estimated_time": data.get("estimated_time") or "",
        "learning_objectives": data.get("learning_objectives") or [],
        "steps": steps,
        "context": data.get("scenario"),
        "conclusion": data.get("conclusion"),
        "is_generated": True,
    })


# Hand-written simulations served when generation fails; keyed by topic
_FALLBACK_SIMULATIONS: dict[Topic, dict[str, Any]] = {
    Topic.GOVERNANCE: {
        "title": "Local Government Decision Making",
        "description": "You are a local government official making decisions about community development.",
        "category": "governance",
        "estimated_time": "10-15 minutes",
        "learning_objectives": [
            "Understand local governance processes",
            "Learn about community engagement",
        ],
        "scenario": {
            "context": "Your district has received funding for infrastructure development.",
            "role": "District Development Officer",
            "challenge": "Decide how to allocate limited resources for maximum community benefit.",
        },
        "steps": [
            {
                "id": "step_1",
                "title": "Community Consultation",
                "description": "The community has different priorities for development.",
                "choices": [
                    {
                        "id": "choice_1",
                        "text": "Hold public meetings to gather input",
                        "points": 15,
                        "feedback": "Excellent! Community participation is essential for good governance.",
                    },
                    {
                        "id": "choice_2",
                        "text": "Make decisions based on technical assessments only",
                        "points": 5,
                        "feedback": "While technical input is important, community voices are crucial.",
                    },
                ],
            },
        ],
        "conclusion": {
            "success_message": "Great job! You've shown good governance principles.",
            "failure_message": "Consider how better community engagement could improve outcomes.",
            "key_learnings": [
                "Community participation improves decision quality",
                "Transparency builds trust in government",
            ],
        },
    },
}


def fallback_simulation(preferences: GenerationPreferences) -> Simulation:
    """Hand-written simulation for the topic (governance when the topic has none)."""
    data = _FALLBACK_SIMULATIONS.get(preferences.topic, _FALLBACK_SIMULATIONS[Topic.GOVERNANCE])
    return convert_generated({**data, "difficulty_level": preferences.difficulty.value}, preferences)


class SimulationGenerator:
    """Generates civic simulations with the LLM, falling back on failure.

    Args:
        enabled: When False, the model is never called and every request is
            served with the fallback simulation
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    async def generate(
        self,
        prompt: str,
        preferences: GenerationPreferences | None = None,
    ) -> GenerationResult:
        """Generate a simulation.

        Args:
            prompt: Free-text description of the desired scenario
            preferences: Topic, difficulty and number of decision points

        Returns:
            GenerationResult with the simulation (never raises for model errors)
        """
        preferences = preferences or GenerationPreferences()

        if not self.enabled:
            logger.info("Simulation generation disabled, serving fallback simulation")
            return GenerationResult(
                simulation=fallback_simulation(preferences),
                used_fallback=True,
                error="generation disabled",
            )

        user_prompt = format_simulation_generation_prompt(
            context=prompt,
            topic=preferences.topic.value,
            difficulty=preferences.difficulty.value,
            step_count=preferences.question_count,
        )

        try:
            response = await generate_json(
                prompt=user_prompt,
                system_prompt=SIMULATION_GENERATION_SYSTEM_PROMPT,
                schema=GENERATED_SIMULATION_SCHEMA,
            )
        except Exception as e:
            logger.warning(f"Simulation generation failed, using fallback: {e}")
            return GenerationResult(
                simulation=fallback_simulation(preferences),
                used_fallback=True,
                error=str(e),
            )

        errors = validate_simulation_structure(response)
        if errors:
            logger.warning(f"Generated simulation rejected ({len(errors)} problems): {errors[:5]}")
            return GenerationResult(
                simulation=fallback_simulation(preferences),
                used_fallback=True,
                error="; ".join(errors),
            )

        try:
            simulation = convert_generated(sanitize_simulation(response), preferences)
        except (ValidationError, KeyError, TypeError) as e:
            logger.warning(f"Generated simulation could not be converted, using fallback: {e}")
            return GenerationResult(
                simulation=fallback_simulation(preferences),
                used_fallback=True,
                error=str(e),
            )

        logger.info(f"Generated simulation '{simulation.title}' with {simulation.total_steps} steps")
        return GenerationResult(simulation=simulation)
