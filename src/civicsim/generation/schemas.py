"""JSON schemas for LLM-generated simulations and quizzes.

The schema mirrors the raw shape requested in the generation prompt, not the
internal Simulation model: steps carry string ids and no step numbers, and
the background lives under "scenario".
"""

from typing import Any

_CHOICE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "text": {"type": "string"},
        "points": {"type": "integer", "minimum": 0},
        "feedback": {"type": "string"},
        "consequences": {"type": "string"},
    },
    "required": ["id", "text", "points", "feedback"],
}

_STEP_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "title": {"type": "string"},
        "description": {"type": "string"},
        "choices": {"type": "array", "items": _CHOICE_SCHEMA, "minItems": 2, "maxItems": 4},
    },
    "required": ["id", "title", "description", "choices"],
}

GENERATED_SIMULATION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "difficulty_level": {"type": "string", "enum": ["beginner", "intermediate", "advanced"]},
        "category": {"type": "string"},
        "estimated_time": {"type": "string"},
        "learning_objectives": {"type": "array", "items": {"type": "string"}},
        "scenario": {
            "type": "object",
            "properties": {
                "context": {"type": "string"},
                "role": {"type": "string"},
                "challenge": {"type": "string"},
            },
            "required": ["context", "role"],
        },
        "steps": {"type": "array", "items": _STEP_SCHEMA, "minItems": 1},
        "conclusion": {
            "type": "object",
            "properties": {
                "success_message": {"type": "string"},
                "failure_message": {"type": "string"},
                "key_learnings": {"type": "array", "items": {"type": "string"}},
            },
        },
    },
    "required": ["title", "description", "scenario", "steps"],
}

_DIFFICULTY_SCHEMA: dict[str, Any] = {"type": "string", "enum": ["beginner", "intermediate", "advanced"]}

_QUESTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "question": {"type": "string"},
        "options": {
            "type": "object",
            "additionalProperties": {"type": "string"},
            "minProperties": 2,
            "maxProperties": 4,
        },
        "correct_answer": {"type": "string"},
        "explanation": {"type": "string"},
        "topic": {"type": "string"},
        "difficulty": _DIFFICULTY_SCHEMA,
    },
    "required": ["question", "options", "correct_answer", "explanation"],
}

GENERATED_QUIZ_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "quiz_title": {"type": "string"},
        "description": {"type": "string"},
        "difficulty_level": _DIFFICULTY_SCHEMA,
        "estimated_time": {"type": "string"},
        "questions": {"type": "array", "items": _QUESTION_SCHEMA, "minItems": 1},
        "learning_objectives": {"type": "array", "items": {"type": "string"}},
        "additional_resources": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["quiz_title", "questions"],
}
