"""Token amount scaling and ERC-20 calldata helpers."""

from __future__ import annotations

import re

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from swap_agent.errors import InvalidAmountError

MAX_UINT256 = 2**256 - 1

APPROVE_SELECTOR = function_signature_to_4byte_selector("approve(address,uint256)")

_AMOUNT_PATTERN = re.compile(r"^\d+(\.\d*)?$|^\.\d+$")


def to_atomic_units(amount: str, decimals: int) -> int:
    """Scale a human-readable decimal string by ``10**decimals`` exactly.

    >>> to_atomic_units("1.5", 6)
    1500000

    Raises:
        InvalidAmountError: The string is not a plain non-negative decimal, or
            has more fractional digits than the token supports.
    """
    text = str(amount).strip()
    if not _AMOUNT_PATTERN.match(text):
        raise InvalidAmountError(f"Amount {amount!r} is not a valid decimal number.")

    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise InvalidAmountError(
            f"Amount {amount} has more than {decimals} decimal places."
        )
    return int((whole or "0") + fraction.ljust(decimals, "0"))


def encode_approve(spender: str, amount: int = MAX_UINT256) -> str:
    """Return ``0x``-prefixed calldata for ERC-20 ``approve(spender, amount)``."""
    args = encode(["address", "uint256"], [to_checksum_address(spender), amount])
    return "0x" + (APPROVE_SELECTOR + args).hex()
