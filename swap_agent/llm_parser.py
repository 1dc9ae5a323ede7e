"""Gemini fallback for swap requests the regex matcher cannot parse."""

from __future__ import annotations

import json
from string import Template
from typing import Any, Dict, Optional, Sequence

import google.generativeai as genai

from swap_agent.planner_types import SwapRequest
from swap_agent.utils.json_utils import parse_llm_json
from swap_agent.utils.logging import get_logger

logger = get_logger(__name__)

EXTRACTION_PROMPT = Template(
    """You extract token swap requests for a wallet assistant.

Supported chains: $chains
Known token symbols: $symbols

Read the user message and answer with a single JSON object:
{"isSwap": bool, "fromToken": str, "toToken": str, "amount": str,
 "fromChain": str | null, "toChain": str | null}

Rules:
- "amount" is the quantity of fromToken exactly as written, digits and an
  optional decimal point only.
- Leave a chain null unless the user names it.
- If the message is not a request to swap tokens, answer {"isSwap": false}.

User message: $message"""
)


class GeminiSwapParser:
    """Extract ``SwapRequest`` fields from free text with a Gemini model."""

    def __init__(
        self,
        api_key: str,
        model_name: str,
        chains: Sequence[str] = (),
        symbols: Sequence[str] = (),
        model: Optional[Any] = None,
    ) -> None:
        if model is None:
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(model_name=model_name)
        self.model = model
        self.chains = list(chains)
        self.symbols = list(symbols)

    async def parse(self, message: str) -> Optional[SwapRequest]:
        prompt = EXTRACTION_PROMPT.safe_substitute(
            chains=", ".join(self.chains) or "any",
            symbols=", ".join(self.symbols) or "any",
            message=message,
        )
        try:
            response = await self.model.generate_content_async(
                [{"role": "user", "parts": [{"text": prompt}]}],
                generation_config={"response_mime_type": "application/json"},
            )
        except Exception as exc:
            logger.warning("llm_swap_parse_failed", error=str(exc))
            return None

        try:
            data = parse_llm_json(response.text)
        except (json.JSONDecodeError, ValueError) as exc:
            logger.warning("llm_swap_parse_failed", error=str(exc))
            return None

        return self._to_request(data)

    @staticmethod
    def _to_request(data: Dict[str, Any]) -> Optional[SwapRequest]:
        if not data.get("isSwap"):
            logger.info("llm_not_a_swap")
            return None

        from_token = data.get("fromToken")
        to_token = data.get("toToken")
        amount = data.get("amount")
        if not (from_token and to_token and amount):
            logger.warning("llm_swap_incomplete", data=data)
            return None

        return SwapRequest(
            from_token=str(from_token),
            to_token=str(to_token),
            amount=str(amount),
            from_chain=data.get("fromChain") or None,
            to_chain=data.get("toChain") or None,
        )


__all__ = ["GeminiSwapParser"]
