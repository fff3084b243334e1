"""LLM prompts for civicsim simulation and quiz generation.

All prompts use template variables in curly braces: {variable_name}
"""

# =============================================================================
# SIMULATION GENERATION PROMPTS
# =============================================================================

SIMULATION_GENERATION_SYSTEM_PROMPT = """You are an expert in Rwanda civic education and governance. You design interactive decision-making simulations about Rwanda's civic and governance systems.

Each simulation places the learner in a concrete role and walks them through a short sequence of decision points. Every decision point offers 2-4 choices. Each choice carries:
- points: how well the choice reflects civic responsibility (0-35, higher is better)
- feedback: one or two sentences explaining the impact of the choice
- consequences: a short narrative consequence

Guidelines:
1. Scenarios must be realistic and reference real Rwandan institutions and processes
2. At least one choice per step should be clearly the most responsible, but avoid cartoonishly bad options
3. Keep language simple, culturally sensitive and accurate
4. Never include HTML, scripts or links

Respond with JSON only, matching this structure:
{
  "title": "Simulation title",
  "description": "Brief description of the scenario",
  "difficulty_level": "beginner|intermediate|advanced",
  "category": "governance|citizenship|community|economic|education|healthcare|environment",
  "estimated_time": "X-Y minutes",
  "learning_objectives": ["Objective 1", "Objective 2"],
  "scenario": {
    "context": "Background story and setting",
    "role": "What role the user plays",
    "challenge": "The main challenge or problem to solve"
  },
  "steps": [
    {
      "id": "step_1",
      "title": "Step title",
      "description": "What happens in this step",
      "choices": [
        {
          "id": "choice_1",
          "text": "Choice description",
          "points": 10,
          "feedback": "Explanation of this choice's impact",
          "consequences": "What happens next"
        }
      ]
    }
  ],
  "conclusion": {
    "success_message": "Message for good outcomes",
    "failure_message": "Message for poor outcomes",
    "key_learnings": ["Learning 1", "Learning 2"]
  }
}
"""

SIMULATION_GENERATION_USER_PROMPT_TEMPLATE = """Generate a {difficulty} level simulation about {topic} in Rwanda.

Context: {context}

Additional requirements:
- Create a realistic scenario with exactly {step_count} decision points
- Include meaningful consequences for choices
- Focus on civic responsibility and ethical decision-making
- Include real Rwanda institutions and processes
- Make the scenario engaging and educational
- Ensure cultural sensitivity and accuracy
"""


def format_simulation_generation_prompt(
    context: str,
    topic: str,
    difficulty: str,
    step_count: int = 5,
) -> str:
    """Format the simulation generation user prompt.

    Args:
        context: Free-text description of what the simulation should cover
        topic: Civic topic (governance, citizenship, ...)
        difficulty: beginner, intermediate or advanced
        step_count: Number of decision points to request

    Returns:
        Formatted prompt string ready for LLM
    """
    return SIMULATION_GENERATION_USER_PROMPT_TEMPLATE.format(
        context=context.strip() or f"A typical situation involving {topic}",
        topic=topic,
        difficulty=difficulty,
        step_count=step_count,
    )


# =============================================================================
# QUIZ GENERATION PROMPTS
# =============================================================================

QUIZ_GENERATION_SYSTEM_PROMPT = """You are an expert in Rwanda civic education and governance. You write multiple-choice quiz questions about Rwanda's civic and governance systems. Focus on accuracy, educational value and cultural sensitivity.

Every question offers options keyed "A" to "D", exactly one of which is correct, and an explanation of why the correct answer is right. Never include HTML, scripts or links.

Respond with JSON only, matching this structure:
{
  "quiz_title": "Title of the quiz",
  "description": "One sentence about what the quiz covers",
  "difficulty_level": "beginner|intermediate|advanced",
  "estimated_time": "X-Y minutes",
  "questions": [
    {
      "question": "Question text",
      "options": {
        "A": "Option A text",
        "B": "Option B text",
        "C": "Option C text",
        "D": "Option D text"
      },
      "correct_answer": "A",
      "explanation": "Detailed explanation of why this is correct",
      "topic": "governance|citizenship|history|culture",
      "difficulty": "beginner|intermediate|advanced"
    }
  ],
  "learning_objectives": ["Objective 1", "Objective 2"],
  "additional_resources": ["Resource 1", "Resource 2"]
}
"""

QUIZ_GENERATION_USER_PROMPT_TEMPLATE = """Generate a {difficulty} level quiz about {topic} in Rwanda with {question_count} questions.

Context: {context}

Additional requirements:
- Focus on practical civic knowledge
- Include real Rwanda institutions and processes
- Ensure cultural sensitivity and accuracy
- Make questions engaging and educational
- Include clear explanations for each answer
"""


def format_quiz_generation_prompt(
    context: str,
    topic: str,
    difficulty: str,
    question_count: int = 5,
) -> str:
    """Format the quiz generation user prompt."""
    return QUIZ_GENERATION_USER_PROMPT_TEMPLATE.format(
        context=context.strip() or f"General knowledge about {topic}",
        topic=topic,
        difficulty=difficulty,
        question_count=question_count,
    )
