"""Pattern-based extraction of swap requests from free text."""

import re
from typing import Optional

from swap_agent.planner_types import SwapRequest

SWAP_VERBS = r"(?:swap|trade|convert|exchange|sell)"
AMOUNT = r"(?P<amount>\d[\d,]*(?:\.\d+)?|\.\d+)"
TOKEN = r"[A-Za-z][A-Za-z0-9\-]*(?:\.[A-Za-z0-9]+)?"  # allows bridged symbols like USDC.e
CHAIN = r"[A-Za-z][A-Za-z0-9\-]*(?:\s+[A-Za-z][A-Za-z0-9\-]*)?"

SWAP_PATTERN = re.compile(
    rf"\b{SWAP_VERBS}\s+{AMOUNT}\s+(?P<from_token>{TOKEN})"
    rf"(?:\s+(?:on|from)\s+(?P<from_chain>{CHAIN}?))?"
    rf"\s+(?:for|to|into)\s+(?P<to_token>{TOKEN})"
    rf"(?:\s+on\s+(?P<to_chain>{CHAIN}?))?"
    r"\s*[.!?]?\s*$",
    re.IGNORECASE,
)


def match_swap_intent(message: str) -> Optional[SwapRequest]:
    """Extract a swap request from messages like "swap 10 USDC on Ethereum for ETH on Base".

    Args:
        message: The user's input message.

    Returns:
        SwapRequest with the parsed fields, or None if the message is not a
        recognizable swap.
    """
    match = SWAP_PATTERN.search(message.strip())
    if not match:
        return None

    return SwapRequest(
        from_token=match.group("from_token"),
        to_token=match.group("to_token"),
        amount=match.group("amount").replace(",", ""),
        from_chain=match.group("from_chain") or None,
        to_chain=match.group("to_chain") or None,
    )
