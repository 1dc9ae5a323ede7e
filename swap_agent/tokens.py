"""Token table and symbol → on-chain token resolution."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from swap_agent.chains import ChainRegistry
from swap_agent.errors import UnsupportedChainError, UnsupportedTokenError
from swap_agent.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TokenDescriptor:
    """A token deployment on one chain."""

    chain_id: str
    address: str
    decimals: int


@dataclass(frozen=True)
class Resolved:
    token: TokenDescriptor


@dataclass(frozen=True)
class NeedsDisambiguation:
    """The symbol exists on several chains and no chain was given."""

    prompt: str
    chain_names: Tuple[str, ...]


Resolution = Union[Resolved, NeedsDisambiguation]


DEFAULT_TOKENS: Dict[str, List[Dict[str, object]]] = {
    "USDC": [
        {"chainId": "1", "address": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", "decimals": 6},
        {"chainId": "42161", "address": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831", "decimals": 6},
        {"chainId": "10", "address": "0x0b2C639c533813f4Aa9D7837cAf62653d097Ff85", "decimals": 6},
        {"chainId": "137", "address": "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359", "decimals": 6},
        {"chainId": "8453", "address": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", "decimals": 6},
    ],
    "WETH": [
        {"chainId": "1", "address": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2", "decimals": 18},
        {"chainId": "42161", "address": "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1", "decimals": 18},
        {"chainId": "10", "address": "0x4200000000000000000000000000000000000006", "decimals": 18},
        {"chainId": "8453", "address": "0x4200000000000000000000000000000000000006", "decimals": 18},
    ],
    "DAI": [
        {"chainId": "1", "address": "0x6B175474E89094C44Da98b954EedeAC495271d0F", "decimals": 18},
    ],
    "ARB": [
        {"chainId": "42161", "address": "0x912CE59144191C1204E64559FE8253a0e49E6548", "decimals": 18},
    ],
}


class TokenTable:
    """Read-only symbol → descriptors table with a case-insensitive index."""

    def __init__(self, entries: Mapping[str, Iterable[TokenDescriptor]]) -> None:
        frozen = {symbol: tuple(tokens) for symbol, tokens in entries.items()}
        self._entries: Mapping[str, Tuple[TokenDescriptor, ...]] = MappingProxyType(
            frozen
        )
        # The first key in table order wins when two symbols differ only by case.
        index: Dict[str, str] = {}
        for symbol in frozen:
            index.setdefault(symbol.lower(), symbol)
        self._index: Mapping[str, str] = MappingProxyType(index)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Iterable[Mapping[str, object]]]) -> "TokenTable":
        """Build a table from ``{symbol: [{chainId, address, decimals}, ...]}``."""
        entries: Dict[str, List[TokenDescriptor]] = {}
        for symbol, tokens in data.items():
            entries[symbol] = [
                TokenDescriptor(
                    chain_id=str(token["chainId"]),
                    address=str(token["address"]),
                    decimals=int(token["decimals"]),  # type: ignore[arg-type]
                )
                for token in tokens
            ]
        return cls(entries)

    def lookup(self, symbol: str) -> Optional[Tuple[TokenDescriptor, ...]]:
        key = self._index.get(symbol.strip().lower())
        if key is None:
            return None
        return self._entries[key]

    def symbols(self) -> List[str]:
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)


def load_token_table(path: Optional[Path] = None) -> TokenTable:
    """Load tokens from JSON file or fall back to defaults."""
    if path is None:
        return TokenTable.from_mapping(DEFAULT_TOKENS)

    if not path.exists():
        raise FileNotFoundError(f"Token configuration not found: {path}")

    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)

    table = TokenTable.from_mapping(data)
    logger.info("token_table_loaded", path=str(path), symbols=len(table))
    return table


class TokenResolver:
    """Resolve a symbol plus optional chain hint to a single token deployment."""

    def __init__(self, table: TokenTable, registry: ChainRegistry) -> None:
        self.table = table
        self.registry = registry

    def resolve(
        self, symbol: str, chain_hint: Optional[str], side: str
    ) -> Resolution:
        """Resolve one side (``"from"`` or ``"to"``) of a swap.

        Returns ``Resolved`` with the descriptor, or ``NeedsDisambiguation``
        when the symbol lives on several chains and no hint was supplied.

        Raises:
            UnsupportedTokenError: Unknown symbol, or not deployed on the hinted chain.
            UnsupportedChainError: The hint is not a known chain name or alias.
        """
        tokens = self.table.lookup(symbol)
        if not tokens:
            raise UnsupportedTokenError(f"Token {symbol} not supported.")

        if chain_hint:
            chain_id = self.registry.chain_id_for(chain_hint)
            if chain_id is None:
                raise UnsupportedChainError(
                    f"Chain name {chain_hint} is not recognized."
                )
            for token in tokens:
                if token.chain_id == chain_id:
                    return Resolved(token)
            available = [self.registry.display_name_for(t.chain_id) for t in tokens]
            raise UnsupportedTokenError(
                f"Token {symbol} not supported on chain {chain_hint}. "
                f"Available chains: {', '.join(available)}",
                available_chains=available,
            )

        if len(tokens) > 1:
            names = tuple(self.registry.display_name_for(t.chain_id) for t in tokens)
            chain_list = "\n".join(f"{idx}. {name}" for idx, name in enumerate(names, 1))
            prompt = (
                f"Multiple chains supported for {symbol}:\n{chain_list}\n"
                f"Please specify the '{side}Chain'."
            )
            logger.info("token_needs_disambiguation", symbol=symbol, chains=list(names))
            return NeedsDisambiguation(prompt=prompt, chain_names=names)

        return Resolved(tokens[0])


__all__ = [
    "DEFAULT_TOKENS",
    "NeedsDisambiguation",
    "Resolution",
    "Resolved",
    "TokenDescriptor",
    "TokenResolver",
    "TokenTable",
    "load_token_table",
]
