import pytest

from _fakes import ETH_BASE, USDC_BASE, USDC_ETHEREUM, WETH_ARBITRUM
from swap_agent.chains import ChainRegistry
from swap_agent.tokens import TokenResolver, TokenTable


@pytest.fixture
def registry() -> ChainRegistry:
    return ChainRegistry()


@pytest.fixture
def token_table() -> TokenTable:
    """USDC on two chains, ETH and WETH on one each."""
    return TokenTable.from_mapping(
        {
            "USDC": [
                {"chainId": "1", "address": USDC_ETHEREUM, "decimals": 6},
                {"chainId": "8453", "address": USDC_BASE, "decimals": 6},
            ],
            "ETH": [{"chainId": "8453", "address": ETH_BASE, "decimals": 18}],
            "WETH": [{"chainId": "42161", "address": WETH_ARBITRUM, "decimals": 18}],
        }
    )


@pytest.fixture
def resolver(token_table: TokenTable, registry: ChainRegistry) -> TokenResolver:
    return TokenResolver(token_table, registry)
