"""LLM utilities using Claude Agent SDK.

All LLM calls in this project go through these helpers. The Agent SDK shells
out to the Claude Code CLI, so authentication uses the existing CLI login and
no separate API key configuration is needed.
"""

import json
import logging
import re
from typing import Any

from claude_agent_sdk import (
    AssistantMessage,
    ClaudeAgentOptions,
    ResultMessage,
    TextBlock,
    query,
)

logger = logging.getLogger(__name__)


def extract_json(text: str) -> dict[str, Any]:
    """Parse a JSON object out of free-form model output.

    Accepts a ```json fenced block, a bare fenced block, or the outermost
    {...} span of the text.

    Raises:
        ValueError: If no JSON object can be parsed.
    """
    text = text.strip()

    json_block_match = re.search(r"```json\s*\n(.*?)\n```", text, re.DOTALL)
    if json_block_match:
        text = json_block_match.group(1).strip()
    else:
        code_block_match = re.search(r"```\s*\n(.*?)\n```", text, re.DOTALL)
        if code_block_match:
            text = code_block_match.group(1).strip()
        else:
            start, end = text.find("{"), text.rfind("}")
            if start != -1 and end > start:
                text = text[start : end + 1]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse JSON response: {e}\nResponse: {text[:500]}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


async def generate_json(
    prompt: str,
    system_prompt: str | None = None,
    schema: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Generate structured JSON from Claude.

    When a schema is provided, uses the SDK's structured output feature,
    which returns JSON matching the schema. Without a schema (or if the
    structured output is missing), parses the text response.

    Args:
        prompt: The user prompt to send to Claude.
        system_prompt: Optional system prompt to set context.
        schema: Optional JSON schema for structured outputs.

    Returns:
        The parsed JSON response as a dictionary.

    Raises:
        ValueError: If the response cannot be parsed as JSON.
    """
    logger.debug(f"generate_json: prompt={len(prompt)} chars, schema={schema is not None}")

    options_kwargs: dict[str, Any] = {
        # Structured output goes through a tool call, which needs a few turns
        "max_turns": 10 if schema is not None else 1,
    }
    if system_prompt is not None:
        options_kwargs["system_prompt"] = system_prompt
    if schema is not None:
        options_kwargs["output_format"] = {"type": "json_schema", "schema": schema}

    options = ClaudeAgentOptions(**options_kwargs)

    response_text = ""
    structured_output = None

    async for message in query(prompt=prompt, options=options):
        if isinstance(message, AssistantMessage):
            for block in message.content:
                if isinstance(block, TextBlock):
                    response_text += block.text
        elif isinstance(message, ResultMessage):
            if getattr(message, "structured_output", None):
                structured_output = message.structured_output
            elif message.result:
                response_text = str(message.result)

    if structured_output is not None:
        logger.debug(f"Received structured_output: {list(structured_output.keys())}")
        return structured_output

    if schema is not None:
        logger.warning("Schema provided but structured_output not returned - falling back to text parsing")

    try:
        return extract_json(response_text)
    except ValueError:
        logger.error(f"Failed to parse JSON. Raw response: {response_text[:500]}")
        raise
