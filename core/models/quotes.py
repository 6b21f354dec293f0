"""Pydantic models for aggregator quote responses."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _parse_amount(value: Any) -> Any:
    """Accept decimal strings, ``0x`` hex strings and ints."""
    if isinstance(value, str):
        text = value.strip()
        if text.lower().startswith("0x"):
            return int(text, 16)
        if text == "":
            return None
        return int(text)
    return value


class LifiEstimate(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    from_amount: Optional[int] = Field(default=None, alias="fromAmount")
    to_amount: Optional[int] = Field(default=None, alias="toAmount")
    to_amount_min: Optional[int] = Field(default=None, alias="toAmountMin")
    approval_address: Optional[str] = Field(default=None, alias="approvalAddress")

    @field_validator("from_amount", "to_amount", "to_amount_min", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Any:
        return _parse_amount(value)


class TransactionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    to: Optional[str] = None
    data: Optional[str] = None
    value: int = 0

    @field_validator("value", mode="before")
    @classmethod
    def parse_value(cls, value: Any) -> Any:
        parsed = _parse_amount(value)
        return 0 if parsed is None else parsed


class LifiStep(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    tool: Optional[str] = None
    estimate: Optional[LifiEstimate] = None
    transaction_request: Optional[TransactionRequest] = Field(default=None, alias="transactionRequest")


class VeloraPriceRoute(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    src_amount: int = Field(alias="srcAmount")
    dest_amount: int = Field(alias="destAmount")
    contract_address: Optional[str] = Field(default=None, alias="contractAddress")
    token_transfer_proxy: Optional[str] = Field(default=None, alias="tokenTransferProxy")
    contract_method: Optional[str] = Field(default=None, alias="contractMethod")
    side: Optional[str] = None

    @field_validator("src_amount", "dest_amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Any:
        return _parse_amount(value)


class VeloraSwapResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    price_route: VeloraPriceRoute = Field(alias="priceRoute")
    tx_params: TransactionRequest = Field(alias="txParams")


class StaticQuoteSnapshot(BaseModel):
    """Recorded quote replayed by the static source."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    in_token: Optional[str] = Field(default=None, alias="inToken")
    out_token: Optional[str] = Field(default=None, alias="outToken")
    amount_in: Optional[int] = Field(default=None, alias="amountIn")
    out: int
    min_out: Optional[int] = Field(default=None, alias="minOut")
    max_in: Optional[int] = Field(default=None, alias="maxIn")
    approval_target: str = Field(alias="approvalTarget")
    calls: list[TransactionRequest] = Field(default_factory=list)
    wants_native_in: bool = Field(default=False, alias="wantsNativeIn")

    @field_validator("amount_in", "out", "min_out", "max_in", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Any:
        return _parse_amount(value)
