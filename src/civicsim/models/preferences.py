"""Generation preferences and the enumerations shared with simulation metadata."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Difficulty(str, Enum):
    """How demanding a simulation or generated quiz is.

    Inherits from str for proper JSON serialization.
    """

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Topic(str, Enum):
    """Civic topic a simulation belongs to."""

    GOVERNANCE = "governance"
    CITIZENSHIP = "citizenship"
    COMMUNITY = "community"
    ECONOMIC = "economic"
    EDUCATION = "education"
    HEALTHCARE = "healthcare"
    ENVIRONMENT = "environment"


# Display glyph per topic, used as the step image of generated simulations
TOPIC_IMAGES: dict[Topic, str] = {
    Topic.GOVERNANCE: "🏛️",
    Topic.CITIZENSHIP: "🗳️",
    Topic.COMMUNITY: "🏘️",
    Topic.ECONOMIC: "💼",
    Topic.EDUCATION: "🎓",
    Topic.HEALTHCARE: "🏥",
    Topic.ENVIRONMENT: "🌍",
}
DEFAULT_IMAGE = "📋"


def image_for_topic(topic: Topic | str | None) -> str:
    """Return the display glyph for a topic, or the default glyph."""
    try:
        return TOPIC_IMAGES[Topic(topic)]
    except ValueError:
        return DEFAULT_IMAGE


class GenerationPreferences(BaseModel):
    """Options for AI generation of simulations and quizzes.

    Attributes:
        difficulty: Target difficulty level
        topic: Civic topic to cover
        question_count: Number of questions (quizzes) or decision points
            requested from the model
    """

    model_config = ConfigDict(frozen=True)

    difficulty: Difficulty = Difficulty.BEGINNER
    topic: Topic = Topic.GOVERNANCE
    question_count: int = Field(default=5, ge=1, le=20)
