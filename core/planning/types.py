"""Value objects exchanged between planners, quote sources and the oracle."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from core.planning.errors import InvalidParameter


class QuoteIntent(str, Enum):
    EXACT_IN = "exactIn"
    EXACT_OUT = "exactOut"


class SwapKind(str, Enum):
    """Capability of the swap source configured for redeems."""

    EXACT_IN = "exactIn"
    EXACT_OUT = "exactOut"


class Direction(str, Enum):
    MINT = "mint"
    REDEEM = "redeem"


@dataclass(frozen=True)
class Call:
    target: str
    data: str
    value: int = 0

    def to_dict(self) -> dict[str, str]:
        return {"target": self.target, "data": self.data, "value": str(self.value)}


@dataclass(frozen=True)
class QuoteRequest:
    in_token: str
    out_token: str
    intent: QuoteIntent
    slippage_bps: int
    amount_in: Optional[int] = None
    amount_out: Optional[int] = None

    def __post_init__(self) -> None:
        if self.intent == QuoteIntent.EXACT_IN and self.amount_in is None:
            raise InvalidParameter("exactIn quote requests need amount_in")
        if self.intent == QuoteIntent.EXACT_OUT and self.amount_out is None:
            raise InvalidParameter("exactOut quote requests need amount_out")

    @classmethod
    def exact_in(cls, in_token: str, out_token: str, amount_in: int, slippage_bps: int) -> "QuoteRequest":
        return cls(
            in_token=in_token,
            out_token=out_token,
            intent=QuoteIntent.EXACT_IN,
            slippage_bps=slippage_bps,
            amount_in=amount_in,
        )

    @classmethod
    def exact_out(cls, in_token: str, out_token: str, amount_out: int, slippage_bps: int) -> "QuoteRequest":
        return cls(
            in_token=in_token,
            out_token=out_token,
            intent=QuoteIntent.EXACT_OUT,
            slippage_bps=slippage_bps,
            amount_out=amount_out,
        )


@dataclass(frozen=True)
class Quote:
    out: int
    min_out: int
    approval_target: str
    calls: tuple[Call, ...] = ()
    amount_in: Optional[int] = None
    max_in: Optional[int] = None
    wants_native_in: bool = False
    source: str = ""


QuoteFn = Callable[[QuoteRequest], Awaitable[Quote]]


@dataclass(frozen=True)
class PreviewSnapshot:
    collateral: int
    debt: int
    shares: int
    token_fee: int = 0
    treasury_fee: int = 0
    equity: Optional[int] = None


@dataclass(frozen=True)
class PositionIntent:
    """Input of one planning call.

    ``asset`` is the input asset for mints and the optional payout asset for
    redeems (collateral by default, or the debt asset). Slippage
    fields left as ``None`` take the planner's configured defaults.
    """

    direction: Direction
    token: str
    amount: int
    asset: Optional[str] = None
    share_slippage_bps: Optional[int] = None
    collateral_slippage_bps: Optional[int] = None
    swap_slippage_bps: Optional[int] = None
    flash_loan_adjustment_bps: Optional[int] = None
    collateral_swap_adjustment_bps: Optional[int] = None


def _serialize(value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value


@dataclass(frozen=True)
class MintPlan:
    token: str
    input_asset: str
    equity_in_input_asset: int
    collateral_asset: str
    debt_asset: str
    user_collateral: int
    flash_loan_amount: int
    min_shares: int
    preview_shares: int
    min_excess_debt: int
    preview_excess_debt: int
    preview_total_collateral: int
    calls: tuple[Call, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return _serialize(asdict(self))


@dataclass(frozen=True)
class RedeemPlan:
    token: str
    shares_to_redeem: int
    collateral_asset: str
    debt_asset: str
    swap_kind: SwapKind
    collateral_to_swap: int
    min_collateral_for_sender: int
    preview_collateral_for_sender: int
    preview_excess_debt: int
    min_excess_debt: int
    preview_equity: int
    preview_debt: int
    payout_asset: str
    preview_debt_payout: int
    min_debt_payout: int
    calls: tuple[Call, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return _serialize(asdict(self))
