"""Flash-loan sizing between the swap-implied and manager-implied rates."""

from __future__ import annotations

from core.logging import log
from core.planning.errors import InsufficientLiquidity, InvalidParameter
from core.planning.slippage import mul_div_floor
from core.planning.types import Quote, QuoteFn, QuoteRequest

RATE_SCALE = 10**18


def solve_flash_loan_amount_from_implied_rates(
    equity: int,
    rate_quote: int,
    rate_manager: int,
    scale: int,
    sample_flash_loan: int,
    sample_debt: int,
) -> int:
    """Largest flash loan the manager's debt can repay, in closed form.

    Both rates are debt per unit of collateral multiplied by ``scale``. With
    collateral ``equity + F * scale / rate_quote`` the manager lends
    ``rate_manager / scale`` of it, so repaying ``F`` requires
    ``F <= rate_manager * rate_quote * equity / (scale * (rate_quote - rate_manager))``.
    When the swap is no more expensive than the manager rate any size repays and
    the sample is kept, clamped to the debt the sample produced.
    """
    if scale <= 0:
        raise InvalidParameter(f"scale must be positive, got {scale}")
    if rate_quote <= 0 or rate_manager <= 0:
        raise InvalidParameter("implied rates must be positive")

    if rate_quote <= rate_manager:
        return sample_flash_loan if sample_debt >= sample_flash_loan else sample_debt

    bound = mul_div_floor(rate_manager * rate_quote, equity, scale * (rate_quote - rate_manager))
    if bound == 0:
        return sample_flash_loan
    return bound


async def quote_debt_for_missing_collateral(
    *,
    ideal_debt: int,
    needed_out: int,
    equity: int,
    sample_collateral: int,
    in_token: str,
    out_token: str,
    slippage_bps: int,
    quote: QuoteFn,
) -> tuple[int, Quote]:
    """Quote the manager-sized debt once and derive the debt to flash borrow.

    An output short of ``needed_out`` rescales the input proportionally; a
    sufficient output is capped by the closed-form bound. The caller re-quotes
    the resulting amount, so this never loops.
    """
    first = await quote(QuoteRequest.exact_in(in_token, out_token, ideal_debt, slippage_bps))
    log.debug(f"Debt quote sample debt_in={ideal_debt} out={first.out} needed={needed_out}")

    if first.out < needed_out:
        debt_in = mul_div_floor(ideal_debt, first.out, needed_out)
        if debt_in == 0:
            raise InsufficientLiquidity(
                f"Debt swap returned {first.out} of {needed_out} collateral needed",
                hint="Try a smaller amount or a different swap source",
            )
        return debt_in, first

    rate_quote = mul_div_floor(ideal_debt, RATE_SCALE, first.out)
    rate_manager = mul_div_floor(ideal_debt, RATE_SCALE, sample_collateral)
    bound = solve_flash_loan_amount_from_implied_rates(
        equity=equity,
        rate_quote=rate_quote,
        rate_manager=rate_manager,
        scale=RATE_SCALE,
        sample_flash_loan=ideal_debt,
        sample_debt=ideal_debt,
    )
    return min(bound, ideal_debt), first
