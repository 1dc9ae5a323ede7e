"""Conversational entry point: free text in, swap plan or follow-up question out."""

from __future__ import annotations

from typing import Optional, Protocol

from swap_agent.allowance import AllowanceOracle
from swap_agent.chains import load_chain_registry
from swap_agent.config import Settings
from swap_agent.intent_matcher import match_swap_intent
from swap_agent.mcp_client import MCPClient, MCPSwapQuoteTool
from swap_agent.planner import SwapPlanner
from swap_agent.planner_types import SwapPlanResult, SwapRequest
from swap_agent.tokens import TokenResolver, load_token_table
from swap_agent.utils.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

SWAP_DETAILS_PROMPT = (
    "I can build a token swap for you. Tell me the amount, the token to sell "
    "and the token to buy, e.g. 'swap 10 USDC on Ethereum for WETH on Base'."
)


class SwapRequestParser(Protocol):
    async def parse(self, message: str) -> Optional[SwapRequest]: ...


class SwapAgent:
    """Hybrid parser (patterns first, then LLM) in front of the swap planner."""

    def __init__(
        self, planner: SwapPlanner, parser: Optional[SwapRequestParser] = None
    ) -> None:
        self.planner = planner
        self.parser = parser

    async def handle(self, message: str, user_address: Optional[str]) -> SwapPlanResult:
        clear_context()
        bind_context(user_address=user_address)

        request = match_swap_intent(message)
        if request is None and self.parser is not None:
            logger.info("swap_intent_llm_fallback")
            request = await self.parser.parse(message)
        if request is None:
            logger.info("swap_intent_unmatched", message=message)
            return SwapPlanResult.input_required(SWAP_DETAILS_PROMPT)

        return await self.planner.plan(request, user_address)


def build_planner(settings: Settings, client: MCPClient) -> SwapPlanner:
    """Wire the planner with the configured tables, swap tool and RPC credentials."""
    registry = load_chain_registry(settings.chains_json)
    table = load_token_table(settings.tokens_json)
    return SwapPlanner(
        resolver=TokenResolver(table, registry),
        registry=registry,
        quote_tool=MCPSwapQuoteTool(client, settings.swap_tool_name),
        oracle=AllowanceOracle(
            registry,
            subdomain=settings.quicknode_subdomain,
            api_key=settings.quicknode_api_key,
        ),
    )


def build_agent(settings: Settings, client: MCPClient) -> SwapAgent:
    planner = build_planner(settings, client)
    parser: Optional[SwapRequestParser] = None
    if settings.gemini_api_key:
        from swap_agent.llm_parser import GeminiSwapParser

        parser = GeminiSwapParser(
            api_key=settings.gemini_api_key,
            model_name=settings.gemini_model,
            chains=[chain.display_name for chain in planner.registry.chains],
            symbols=planner.resolver.table.symbols(),
        )
    return SwapAgent(planner, parser)


__all__ = ["SwapAgent", "build_agent", "build_planner"]
