"""Read-only ERC-20 allowance checks against per-chain RPC endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Protocol

from web3 import AsyncHTTPProvider, AsyncWeb3

from swap_agent.chains import ChainRegistry
from swap_agent.errors import UnsupportedChainConfigError
from swap_agent.utils.logging import get_logger

logger = get_logger(__name__)

ERC20_ALLOWANCE_ABI: List[Dict[str, Any]] = [
    {
        "constant": True,
        "inputs": [
            {"name": "_owner", "type": "address"},
            {"name": "_spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function",
    }
]


class AllowanceReader(Protocol):
    """Port for the ``allowance(owner, spender)`` contract read."""

    async def read_allowance(
        self, rpc_url: str, token_address: str, owner: str, spender: str
    ) -> int: ...


class Web3AllowanceReader:
    """Performs the read with web3's async client over HTTP."""

    async def read_allowance(
        self, rpc_url: str, token_address: str, owner: str, spender: str
    ) -> int:
        w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        contract = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(token_address),
            abi=ERC20_ALLOWANCE_ABI,
        )
        allowance = await contract.functions.allowance(
            AsyncWeb3.to_checksum_address(owner),
            AsyncWeb3.to_checksum_address(spender),
        ).call()
        return int(allowance)


class AllowanceOracle:
    """Looks up how much a spender may currently move on an owner's behalf."""

    def __init__(
        self,
        registry: ChainRegistry,
        subdomain: str,
        api_key: str,
        reader: AllowanceReader | None = None,
    ) -> None:
        self.registry = registry
        self._subdomain = subdomain
        self._api_key = api_key
        self.reader = reader or Web3AllowanceReader()

    def rpc_url_for(self, chain_id: str) -> str:
        """Build the QuickNode endpoint for a chain.

        Raises:
            UnsupportedChainConfigError: No network segment is registered.
        """
        segment = self.registry.network_segment_for(chain_id)
        if segment is None:
            raise UnsupportedChainConfigError(
                f"Unsupported chain or configuration error for chainId {chain_id}."
            )
        if segment == "":
            return f"https://{self._subdomain}.quiknode.pro/{self._api_key}"
        return f"https://{self._subdomain}.{segment}.quiknode.pro/{self._api_key}"

    async def current_allowance(
        self, token_address: str, chain_id: str, owner: str, spender: str
    ) -> int:
        """Return the live allowance, or 0 when the read fails.

        Returning 0 makes the caller include an approval step, which is
        always safe to submit.
        """
        rpc_url = self.rpc_url_for(chain_id)
        try:
            allowance = await self.reader.read_allowance(
                rpc_url, token_address, owner, spender
            )
        except Exception as exc:
            logger.warning(
                "allowance_read_failed",
                chain_id=chain_id,
                token=token_address,
                spender=spender,
                error=str(exc),
            )
            return 0

        logger.info(
            "allowance_read",
            chain_id=chain_id,
            token=token_address,
            spender=spender,
            allowance=str(allowance),
        )
        return allowance


__all__ = [
    "AllowanceOracle",
    "AllowanceReader",
    "ERC20_ALLOWANCE_ABI",
    "Web3AllowanceReader",
]
