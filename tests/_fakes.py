"""Fakes for the swap-quote tool and allowance reader, plus shared addresses."""

from typing import Any, Dict, List, Optional

from swap_agent.allowance import AllowanceOracle
from swap_agent.planner import SwapPlanner
from swap_agent.tokens import TokenResolver

USDC_ETHEREUM = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
USDC_BASE = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
ETH_BASE = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
WETH_ARBITRUM = "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1"
USER = "0x1111111111111111111111111111111111111111"
ROUTER = "0x2222222222222222222222222222222222222222"


class FakeQuoteTool:
    """Swap tool stand-in that records its arguments and replays a canned result."""

    def __init__(self, result: Any, name: str = "swapTokens") -> None:
        self.name = name
        self.result = result
        self.calls: List[Dict[str, Any]] = []

    async def quote(self, arguments: Dict[str, Any]) -> Any:
        self.calls.append(arguments)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class FakeAllowanceReader:
    def __init__(self, allowance: int = 0, error: Optional[Exception] = None) -> None:
        self.allowance = allowance
        self.error = error
        self.calls: List[tuple] = []

    async def read_allowance(
        self, rpc_url: str, token_address: str, owner: str, spender: str
    ) -> int:
        self.calls.append((rpc_url, token_address, owner, spender))
        if self.error is not None:
            raise self.error
        return self.allowance


def make_planner(
    resolver: TokenResolver,
    quote_result: Any,
    allowance: int = 0,
    reader_error: Optional[Exception] = None,
) -> tuple:
    """Build a planner wired to fakes; returns (planner, quote_tool, reader)."""
    quote_tool = FakeQuoteTool(quote_result)
    reader = FakeAllowanceReader(allowance, reader_error)
    oracle = AllowanceOracle(
        resolver.registry, subdomain="test-node", api_key="secret", reader=reader
    )
    planner = SwapPlanner(resolver, resolver.registry, quote_tool, oracle)
    return planner, quote_tool, reader
