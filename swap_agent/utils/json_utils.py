"""JSON parsing utilities for LLM responses."""

import json
from typing import Any, Dict


def parse_llm_json(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object from an LLM response, handling markdown code blocks.

    Args:
        text: Raw text from the LLM that may contain JSON wrapped in markdown.

    Returns:
        Parsed JSON object.

    Raises:
        json.JSONDecodeError: If the text cannot be parsed as JSON.
        ValueError: If the JSON is valid but not an object.
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    parsed = json.loads(cleaned.strip())
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed
