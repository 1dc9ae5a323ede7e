"""Helpers for resolving chain metadata."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ChainMapping:
    """A supported chain and the names users may call it by."""

    id: str
    display_name: str
    aliases: Tuple[str, ...] = field(default_factory=tuple)

    def matches(self, name: str) -> bool:
        normalized = name.strip().lower()
        if normalized == self.display_name.lower():
            return True
        return normalized in (alias.lower() for alias in self.aliases)


DEFAULT_CHAINS: Tuple[ChainMapping, ...] = (
    ChainMapping(id="1", display_name="Ethereum", aliases=("mainnet",)),
    ChainMapping(id="42161", display_name="Arbitrum"),
    ChainMapping(id="10", display_name="Optimism"),
    ChainMapping(id="137", display_name="Polygon", aliases=("matic",)),
    ChainMapping(id="8453", display_name="Base"),
)

# QuickNode host segment per chain id; Ethereum mainnet uses the bare subdomain.
DEFAULT_NETWORK_SEGMENTS: Dict[str, str] = {
    "1": "",
    "42161": "arbitrum-mainnet",
    "10": "optimism",
    "137": "matic",
    "8453": "base-mainnet",
}


class ChainRegistry:
    """Immutable lookup table between chain ids, display names and aliases."""

    def __init__(
        self,
        chains: Iterable[ChainMapping] = DEFAULT_CHAINS,
        network_segments: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._chains: Tuple[ChainMapping, ...] = tuple(chains)
        self._by_id: Mapping[str, ChainMapping] = MappingProxyType(
            {chain.id: chain for chain in self._chains}
        )
        segments = (
            DEFAULT_NETWORK_SEGMENTS if network_segments is None else network_segments
        )
        self._segments: Mapping[str, str] = MappingProxyType(dict(segments))

    @property
    def chains(self) -> Tuple[ChainMapping, ...]:
        return self._chains

    def chain_id_for(self, name: str) -> Optional[str]:
        """Map a display name or alias (any case) to a chain id."""
        for chain in self._chains:
            if chain.matches(name):
                return chain.id
        return None

    def display_name_for(self, chain_id: str) -> str:
        """Return the display name for a chain id, or the id itself if unknown."""
        chain = self._by_id.get(str(chain_id))
        return chain.display_name if chain else str(chain_id)

    def network_segment_for(self, chain_id: str) -> Optional[str]:
        """Return the RPC host segment for a chain id, ``None`` when unconfigured."""
        return self._segments.get(str(chain_id))


def load_chain_registry(path: Optional[Path] = None) -> ChainRegistry:
    """Load chains from JSON file or fall back to defaults.

    The file holds a list of ``{"id", "name", "aliases", "networkSegment"}``
    objects; ``networkSegment`` may be omitted for chains without an RPC
    endpoint.
    """
    if path is None:
        return ChainRegistry()

    if not path.exists():
        raise FileNotFoundError(f"Chain configuration not found: {path}")

    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)

    chains = []
    segments: Dict[str, str] = {}
    for entry in data:
        chain_id = str(entry["id"])
        chains.append(
            ChainMapping(
                id=chain_id,
                display_name=entry["name"],
                aliases=tuple(entry.get("aliases", [])),
            )
        )
        if entry.get("networkSegment") is not None:
            segments[chain_id] = entry["networkSegment"]

    return ChainRegistry(chains, segments)


__all__ = [
    "ChainMapping",
    "ChainRegistry",
    "DEFAULT_CHAINS",
    "DEFAULT_NETWORK_SEGMENTS",
    "load_chain_registry",
]
