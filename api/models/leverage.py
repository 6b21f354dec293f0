"""Pydantic models for leverage planning API."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_amount(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("amount must be an integer, not a boolean")
    if isinstance(value, str):
        text = value.strip()
        if not text.lstrip("-").isdigit():
            raise ValueError(f"amount must be a base-10 integer string, got {value!r}")
        return int(text)
    if isinstance(value, float):
        raise ValueError("amounts are integers in base units; floats lose precision")
    return value


class CallModel(BaseModel):
    target: str
    data: str
    value: str = "0"


class MintPlanRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    token: str
    input_asset: str
    equity_in_input_asset: int
    share_slippage_bps: int | None = None
    swap_slippage_bps: int | None = None
    flash_loan_adjustment_bps: int | None = None

    @field_validator("equity_in_input_asset", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Any:
        return _coerce_amount(value)


class RedeemPlanRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    token: str
    shares_to_redeem: int
    collateral_slippage_bps: int | None = None
    swap_slippage_bps: int | None = None
    collateral_swap_adjustment_bps: int | None = None
    swap_kind: Literal["exactIn", "exactOut"] | None = None
    output_asset: str | None = None

    @field_validator("shares_to_redeem", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Any:
        return _coerce_amount(value)


class MintPlanResponse(BaseModel):
    token: str
    input_asset: str
    equity_in_input_asset: str
    collateral_asset: str
    debt_asset: str
    user_collateral: str
    flash_loan_amount: str
    min_shares: str
    preview_shares: str
    min_excess_debt: str
    preview_excess_debt: str
    preview_total_collateral: str
    calls: list[CallModel] = Field(default_factory=list)


class RedeemPlanResponse(BaseModel):
    token: str
    shares_to_redeem: str
    collateral_asset: str
    debt_asset: str
    swap_kind: Literal["exactIn", "exactOut"]
    collateral_to_swap: str
    min_collateral_for_sender: str
    preview_collateral_for_sender: str
    preview_excess_debt: str
    min_excess_debt: str
    preview_equity: str
    preview_debt: str
    payout_asset: str
    preview_debt_payout: str
    min_debt_payout: str
    calls: list[CallModel] = Field(default_factory=list)


class PlanningErrorDetail(BaseModel):
    error: str
    message: str
    hint: str = ""


class PlanningErrorResponse(BaseModel):
    detail: PlanningErrorDetail
