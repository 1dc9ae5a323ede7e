"""Swap planner: resolves tokens, fetches a quote and assembles the transaction plan."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from eth_utils import is_address
from pydantic import TypeAdapter, ValidationError

from swap_agent.allowance import AllowanceOracle
from swap_agent.chains import ChainRegistry
from swap_agent.errors import (
    InvalidQuotePlanError,
    MissingUserAddressError,
    RemoteToolReportedError,
)
from swap_agent.mcp_client import SwapQuoteTool
from swap_agent.planner_types import (
    SwapPlanResult,
    SwapPreview,
    SwapRequest,
    TransactionArtifact,
    TransactionStep,
)
from swap_agent.tokens import NeedsDisambiguation, TokenDescriptor, TokenResolver
from swap_agent.utils.logging import get_logger
from swap_agent.utils.tool_response import normalize_tool_response
from swap_agent.utils.units import MAX_UINT256, encode_approve, to_atomic_units

logger = get_logger(__name__)

_STEPS_ADAPTER = TypeAdapter(List[TransactionStep])


class SwapPlanner:
    """Builds an approval-aware transaction plan for a single swap request.

    A run moves through token resolution, the remote quote, quote validation
    and the allowance check. It ends with a completed plan, an
    input-required prompt, or a raised ``SwapAgentError``; a partial plan is
    never returned.
    """

    def __init__(
        self,
        resolver: TokenResolver,
        registry: ChainRegistry,
        quote_tool: SwapQuoteTool,
        oracle: AllowanceOracle,
    ) -> None:
        self.resolver = resolver
        self.registry = registry
        self.quote_tool = quote_tool
        self.oracle = oracle

    async def plan(
        self, request: SwapRequest, user_address: Optional[str]
    ) -> SwapPlanResult:
        """Produce the transaction plan for ``request`` on behalf of ``user_address``."""
        if not user_address:
            raise MissingUserAddressError("User address not set!")

        logger.info(
            "swap_plan_started",
            from_token=request.from_token,
            to_token=request.to_token,
            amount=request.amount,
            from_chain=request.from_chain,
            to_chain=request.to_chain,
        )

        from_result = self.resolver.resolve(request.from_token, request.from_chain, "from")
        if isinstance(from_result, NeedsDisambiguation):
            return SwapPlanResult.input_required(from_result.prompt)
        to_result = self.resolver.resolve(request.to_token, request.to_chain, "to")
        if isinstance(to_result, NeedsDisambiguation):
            return SwapPlanResult.input_required(to_result.prompt)
        source = from_result.token
        target = to_result.token

        atomic_amount = to_atomic_units(request.amount, source.decimals)
        logger.info(
            "swap_quote_requesting",
            from_address=source.address,
            from_chain_id=source.chain_id,
            to_address=target.address,
            to_chain_id=target.chain_id,
            atomic_amount=str(atomic_amount),
            user_address=user_address,
        )
        raw_quote = await self.quote_tool.quote(
            {
                "fromTokenAddress": source.address,
                "fromTokenChainId": source.chain_id,
                "toTokenAddress": target.address,
                "toTokenChainId": target.chain_id,
                "amount": str(atomic_amount),
                "userAddress": user_address,
            }
        )

        steps = self._validate_quote(
            normalize_tool_response(raw_quote, self.quote_tool.name), source
        )

        approval = await self._approval_step(
            source, user_address, spender=steps[0].to, required=atomic_amount
        )
        tx_plan = ([approval] if approval else []) + steps

        artifact = TransactionArtifact(
            tx_preview=SwapPreview(
                from_token=request.from_token,
                to_token=request.to_token,
                amount=request.amount,
                from_chain=self.registry.display_name_for(source.chain_id),
                to_chain=self.registry.display_name_for(target.chain_id),
            ),
            tx_plan=tx_plan,
        )
        logger.info(
            "swap_plan_assembled", steps=len(tx_plan), approval=approval is not None
        )
        return SwapPlanResult.completed(artifact)

    def _validate_quote(
        self, data: Any, source: TokenDescriptor
    ) -> List[TransactionStep]:
        if not isinstance(data, list) or not data:
            if isinstance(data, dict) and "error" in data:
                logger.error("swap_quote_reported_error", payload=data)
                raise RemoteToolReportedError(
                    f"MCP tool returned an error: {json.dumps(data)}", payload=data
                )
            logger.error("swap_quote_invalid", payload=data)
            raise InvalidQuotePlanError(
                "Expected a transaction plan array from MCP tool, but received invalid data."
            )

        first = data[0]
        if not isinstance(first, dict) or not is_address(first.get("to") or ""):
            logger.error("swap_quote_invalid_step", step=first)
            raise InvalidQuotePlanError("Invalid swap transaction structure in plan.")

        if not first.get("chainId"):
            logger.info("swap_quote_chain_id_added", chain_id=source.chain_id)
            data = [{**first, "chainId": source.chain_id}, *data[1:]]

        try:
            return _STEPS_ADAPTER.validate_python(data)
        except ValidationError as exc:
            logger.error("swap_quote_validation_failed", error=str(exc))
            raise InvalidQuotePlanError(
                f"MCP tool '{self.quote_tool.name}' returned invalid transaction data."
            ) from exc

    async def _approval_step(
        self,
        source: TokenDescriptor,
        owner: str,
        spender: str,
        required: int,
    ) -> Optional[TransactionStep]:
        allowance = await self.oracle.current_allowance(
            source.address, source.chain_id, owner, spender
        )
        if allowance >= required:
            logger.info("allowance_sufficient", allowance=str(allowance))
            return None

        logger.info(
            "approval_required",
            allowance=str(allowance),
            required=str(required),
            spender=spender,
        )
        fields: Dict[str, Any] = {
            "to": source.address,
            "data": encode_approve(spender, MAX_UINT256),
            "value": "0",
            "chainId": source.chain_id,
        }
        return TransactionStep.model_validate(fields)


__all__ = ["SwapPlanner"]
