"""Unwrapping of MCP tool results that carry JSON inside a text block."""

from __future__ import annotations

import json
from typing import Any

from swap_agent.errors import MalformedRemoteResponseError
from swap_agent.utils.logging import get_logger

logger = get_logger(__name__)


def _first_text_block(raw: Any) -> Any:
    if not isinstance(raw, dict):
        return None
    content = raw.get("content")
    if not isinstance(content, list) or not content:
        return None
    block = content[0]
    if isinstance(block, dict) and block.get("type") == "text":
        text = block.get("text")
        if isinstance(text, str):
            return text
    return None


def normalize_tool_response(raw: Any, tool_name: str) -> Any:
    """Return the payload of a tool result, parsing a nested JSON text block.

    MCP servers differ in whether they return the data directly or as
    ``{"content": [{"type": "text", "text": "<json>"}]}``; both shapes
    yield the same value here.

    Raises:
        MalformedRemoteResponseError: The text block is not valid JSON.
    """
    text = _first_text_block(raw)
    if text is None:
        logger.debug("tool_response_unwrapped", tool=tool_name, nested=False)
        return raw

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.error("tool_response_parse_failed", tool=tool_name, error=str(exc))
        raise MalformedRemoteResponseError(
            f"Failed to parse nested JSON response from {tool_name}: {exc}"
        ) from exc

    logger.debug("tool_response_unwrapped", tool=tool_name, nested=True)
    return parsed
