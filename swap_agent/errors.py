"""Exceptions raised while planning a swap."""

from __future__ import annotations

from typing import Any, List, Optional


class SwapAgentError(Exception):
    """Base class for every failure surfaced to the caller."""


class UnsupportedTokenError(SwapAgentError):
    """Token symbol is unknown, or not available on the requested chain."""

    def __init__(
        self, message: str, available_chains: Optional[List[str]] = None
    ) -> None:
        super().__init__(message)
        self.available_chains = available_chains or []


class UnsupportedChainError(SwapAgentError):
    """A chain hint did not match any known chain name or alias."""


class UnsupportedChainConfigError(SwapAgentError):
    """No RPC network configuration exists for a chain id."""


class InvalidAmountError(SwapAgentError):
    """Amount is not a non-negative decimal representable in the token's units."""


class MissingUserAddressError(SwapAgentError):
    """The caller did not supply the wallet address the plan is built for."""


class RemoteToolError(SwapAgentError):
    """The remote MCP tool could not be reached or failed at the protocol level."""


class MalformedRemoteResponseError(SwapAgentError):
    """The text envelope returned by a tool did not contain valid JSON."""


class InvalidQuotePlanError(SwapAgentError):
    """The swap tool returned something that is not a transaction plan."""


class RemoteToolReportedError(SwapAgentError):
    """The swap tool answered with an explicit ``error`` payload."""

    def __init__(self, message: str, payload: Any) -> None:
        super().__init__(message)
        self.payload = payload


__all__ = [
    "SwapAgentError",
    "UnsupportedTokenError",
    "UnsupportedChainError",
    "UnsupportedChainConfigError",
    "InvalidAmountError",
    "MissingUserAddressError",
    "RemoteToolError",
    "MalformedRemoteResponseError",
    "InvalidQuotePlanError",
    "RemoteToolReportedError",
]
