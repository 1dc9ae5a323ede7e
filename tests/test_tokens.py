"""Tests for token table loading and symbol resolution."""

import json

import pytest

from _fakes import ETH_BASE, USDC_BASE, USDC_ETHEREUM, WETH_ARBITRUM
from swap_agent.errors import UnsupportedChainError, UnsupportedTokenError
from swap_agent.tokens import (
    DEFAULT_TOKENS,
    NeedsDisambiguation,
    Resolved,
    TokenDescriptor,
    TokenResolver,
    TokenTable,
    load_token_table,
)


class TestResolveWithoutHint:
    def test_single_chain_symbol_resolves_directly(self, resolver) -> None:
        result = resolver.resolve("ETH", None, "to")
        assert result == Resolved(TokenDescriptor("8453", ETH_BASE, 18))

    def test_lookup_is_case_insensitive(self, resolver) -> None:
        result = resolver.resolve("weth", None, "from")
        assert isinstance(result, Resolved)
        assert result.token.address == WETH_ARBITRUM

    def test_multi_chain_symbol_needs_disambiguation(self, resolver) -> None:
        result = resolver.resolve("usdc", None, "from")

        assert isinstance(result, NeedsDisambiguation)
        assert result.chain_names == ("Ethereum", "Base")
        assert result.prompt == (
            "Multiple chains supported for usdc:\n"
            "1. Ethereum\n"
            "2. Base\n"
            "Please specify the 'fromChain'."
        )

    def test_prompt_names_the_side(self, resolver) -> None:
        result = resolver.resolve("USDC", None, "to")
        assert isinstance(result, NeedsDisambiguation)
        assert result.prompt.endswith("Please specify the 'toChain'.")

    def test_one_option_per_chain_in_table_order(self, registry) -> None:
        chains = ["137", "10", "1", "42161"]
        table = TokenTable.from_mapping(
            {"DAI": [{"chainId": c, "address": f"0x{c:0>40}", "decimals": 18} for c in chains]}
        )
        result = TokenResolver(table, registry).resolve("DAI", None, "from")

        assert isinstance(result, NeedsDisambiguation)
        assert result.chain_names == ("Polygon", "Optimism", "Ethereum", "Arbitrum")
        lines = result.prompt.splitlines()
        assert lines[1:5] == ["1. Polygon", "2. Optimism", "3. Ethereum", "4. Arbitrum"]

    def test_unknown_symbol_raises(self, resolver) -> None:
        with pytest.raises(UnsupportedTokenError, match="Token DOGE not supported."):
            resolver.resolve("DOGE", None, "from")

    def test_empty_descriptor_list_is_unsupported(self, registry) -> None:
        resolver = TokenResolver(TokenTable.from_mapping({"GHOST": []}), registry)
        with pytest.raises(UnsupportedTokenError):
            resolver.resolve("GHOST", None, "from")


class TestResolveWithHint:
    @pytest.mark.parametrize("hint", ["Ethereum", "ethereum", "MAINNET", "mainnet"])
    def test_hint_by_name_or_alias(self, resolver, hint) -> None:
        result = resolver.resolve("USDC", hint, "from")
        assert result == Resolved(TokenDescriptor("1", USDC_ETHEREUM, 6))

    def test_hint_selects_second_chain(self, resolver) -> None:
        result = resolver.resolve("USDC", "base", "to")
        assert isinstance(result, Resolved)
        assert result.token.address == USDC_BASE

    def test_unrecognized_chain_raises(self, resolver) -> None:
        with pytest.raises(UnsupportedChainError, match="Chain name Solana is not recognized."):
            resolver.resolve("USDC", "Solana", "from")

    def test_token_missing_on_chain_lists_available(self, resolver) -> None:
        with pytest.raises(UnsupportedTokenError) as exc_info:
            resolver.resolve("USDC", "Polygon", "from")

        assert exc_info.value.available_chains == ["Ethereum", "Base"]
        assert str(exc_info.value) == (
            "Token USDC not supported on chain Polygon. Available chains: Ethereum, Base"
        )

    def test_unknown_symbol_checked_before_chain(self, resolver) -> None:
        with pytest.raises(UnsupportedTokenError):
            resolver.resolve("DOGE", "Solana", "from")


class TestTokenTable:
    def test_table_is_read_only(self, token_table) -> None:
        with pytest.raises(TypeError):
            token_table._entries["NEW"] = ()  # type: ignore[index]
        assert isinstance(token_table.lookup("USDC"), tuple)

    def test_symbols_keep_original_case(self) -> None:
        table = TokenTable.from_mapping(
            {"cbETH": [{"chainId": "8453", "address": "0x" + "1" * 40, "decimals": 18}]}
        )
        assert table.symbols() == ["cbETH"]
        assert table.lookup("CBETH") is not None

    def test_first_symbol_wins_on_case_collision(self) -> None:
        table = TokenTable.from_mapping(
            {
                "USDC": [{"chainId": "1", "address": USDC_ETHEREUM, "decimals": 6}],
                "usdc": [{"chainId": "8453", "address": USDC_BASE, "decimals": 6}],
            }
        )

        tokens = table.lookup("Usdc")

        assert tokens is not None
        assert tokens[0].chain_id == "1"

    def test_default_table(self) -> None:
        table = load_token_table()
        assert set(table.symbols()) == set(DEFAULT_TOKENS)
        usdc = table.lookup("usdc")
        assert usdc is not None
        assert all(token.decimals == 6 for token in usdc)

    def test_loads_json_file(self, tmp_path) -> None:
        path = tmp_path / "tokens.json"
        path.write_text(
            json.dumps({"PEPE": [{"chainId": 1, "address": "0x" + "a" * 40, "decimals": "18"}]})
        )
        table = load_token_table(path)
        assert table.lookup("pepe") == (TokenDescriptor("1", "0x" + "a" * 40, 18),)

    def test_missing_file_raises(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_token_table(tmp_path / "missing.json")
