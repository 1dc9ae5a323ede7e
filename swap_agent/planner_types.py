"""Shared types for the swap planner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TransactionStep(BaseModel):
    """One unsigned transaction; unknown fields from the swap tool are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    to: str
    data: str
    value: Optional[str] = None
    chain_id: str = Field(alias="chainId")
    from_address: Optional[str] = Field(default=None, alias="from")


class SwapPreview(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_token: str = Field(alias="fromToken")
    to_token: str = Field(alias="toToken")
    amount: str
    from_chain: str = Field(alias="fromChain")
    to_chain: str = Field(alias="toChain")


class TransactionArtifact(BaseModel):
    """The plan handed back to the caller for signing."""

    model_config = ConfigDict(populate_by_name=True)

    tx_preview: SwapPreview = Field(alias="txPreview")
    tx_plan: List[TransactionStep] = Field(alias="txPlan")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class SwapRequest:
    """Arguments of a swap as the agent collects them from the user.

    Attributes:
        from_token: Symbol being sold, as typed by the user.
        to_token: Symbol being bought.
        amount: Human-readable amount of ``from_token``.
        from_chain: Optional chain name or alias for the sold token.
        to_chain: Optional chain name or alias for the bought token.
    """

    from_token: str
    to_token: str
    amount: str
    from_chain: Optional[str] = None
    to_chain: Optional[str] = None


class PlanState(Enum):
    COMPLETED = "completed"
    INPUT_REQUIRED = "input-required"


@dataclass
class SwapPlanResult:
    """Outcome of one planning run.

    Attributes:
        state: ``COMPLETED`` when ``artifact`` holds a plan, ``INPUT_REQUIRED``
            when the user must supply more details first.
        message: Text to show the user.
        artifact: The transaction plan, only set when completed.
    """

    state: PlanState
    message: str
    artifact: Optional[TransactionArtifact] = None

    @classmethod
    def input_required(cls, message: str) -> "SwapPlanResult":
        return cls(state=PlanState.INPUT_REQUIRED, message=message)

    @classmethod
    def completed(cls, artifact: TransactionArtifact) -> "SwapPlanResult":
        return cls(
            state=PlanState.COMPLETED,
            message="Transaction plan successfully created. Ready to sign.",
            artifact=artifact,
        )
