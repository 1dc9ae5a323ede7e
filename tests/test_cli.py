"""Tests for the CLI query runner."""

import io
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from swap_agent.agent import SWAP_DETAILS_PROMPT, SwapAgent
from swap_agent.cli import run_interactive, run_single_query
from swap_agent.cli_output import CLIOutput, OutputFormat
from swap_agent.errors import UnsupportedTokenError
from swap_agent.llm_parser import GeminiSwapParser
from swap_agent.planner_types import SwapPlanResult


@pytest.mark.asyncio
async def test_run_single_query_prints_result() -> None:
    agent = MagicMock()
    agent.handle = AsyncMock(return_value=SwapPlanResult.input_required("which chain?"))
    stream = io.StringIO()

    code = await run_single_query(
        agent, "swap 1 USDC for ETH", "0xabc", CLIOutput(OutputFormat.JSON, stream=stream)
    )

    assert code == 0
    agent.handle.assert_awaited_once_with("swap 1 USDC for ETH", "0xabc")
    assert json.loads(stream.getvalue())["state"] == "input-required"


@pytest.mark.asyncio
async def test_run_single_query_reports_planning_errors(capsys) -> None:
    agent = MagicMock()
    agent.handle = AsyncMock(side_effect=UnsupportedTokenError("Token DOGE not supported."))
    stream = io.StringIO()

    code = await run_single_query(
        agent, "swap 1 DOGE for ETH", "0xabc", CLIOutput(OutputFormat.TEXT, stream=stream)
    )

    assert code == 1
    assert stream.getvalue() == ""
    assert "Token DOGE not supported." in capsys.readouterr().err


@pytest.mark.asyncio
async def test_interactive_survives_llm_outage(monkeypatch) -> None:
    model = MagicMock()
    model.generate_content_async = AsyncMock(side_effect=RuntimeError("429 quota exceeded"))
    parser = GeminiSwapParser(api_key="unused", model_name="unused", model=model)
    planner = MagicMock()
    planner.plan = AsyncMock()
    agent = SwapAgent(planner, parser)
    replies = iter(["what can you do?"])

    def fake_input(prompt: str) -> str:
        try:
            return next(replies)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)
    stream = io.StringIO()

    await run_interactive(agent, "0xabc", CLIOutput(OutputFormat.TEXT, stream=stream))

    assert SWAP_DETAILS_PROMPT in stream.getvalue()
    assert stream.getvalue().rstrip().endswith("Goodbye!")
    planner.plan.assert_not_awaited()
