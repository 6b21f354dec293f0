"""Redeem planning: size the collateral swap that repays a position's debt."""

from __future__ import annotations

import asyncio
from typing import Optional

from core.logging import log
from core.models.chain import NATIVE_TOKEN_SENTINEL
from core.planning.calls import build_spend_calls
from core.planning.errors import (
    InsufficientLiquidity,
    InvalidParameter,
    PlanningError,
    SlippageViolated,
    UnsupportedAssetPair,
)
from core.planning.oracle import PreviewOracle
from core.planning.slippage import BPS_DENOMINATOR, apply_slippage_floor, mul_div_floor, validate_bps
from core.planning.types import Call, PreviewSnapshot, Quote, QuoteFn, QuoteRequest, RedeemPlan, SwapKind


def validate_redeem_params(
    shares_to_redeem: int,
    collateral_slippage_bps: int,
    swap_slippage_bps: int,
    collateral_swap_adjustment_bps: int,
) -> None:
    if isinstance(shares_to_redeem, bool) or not isinstance(shares_to_redeem, int):
        raise InvalidParameter("shares_to_redeem must be an integer amount")
    if shares_to_redeem <= 0:
        raise InvalidParameter(f"shares_to_redeem must be positive, got {shares_to_redeem}")
    validate_bps("collateral_slippage_bps", collateral_slippage_bps)
    validate_bps("swap_slippage_bps", swap_slippage_bps, minimum=1)
    validate_bps("collateral_swap_adjustment_bps", collateral_swap_adjustment_bps)


async def _size_exact_out(
    *,
    preview: PreviewSnapshot,
    in_token: str,
    debt_asset: str,
    collateral_slippage_bps: int,
    swap_slippage_bps: int,
    quote: QuoteFn,
) -> tuple[Quote, int, int, int, int]:
    """Return ``(quote, collateral_to_swap, approval_amount, preview_cfs, min_cfs)``."""
    debt_quote = await quote(QuoteRequest.exact_out(in_token, debt_asset, preview.debt, swap_slippage_bps))
    amount_in = debt_quote.amount_in if debt_quote.amount_in is not None else debt_quote.max_in
    if amount_in is None:
        raise PlanningError(f"Exact-out quote from {debt_quote.source or 'quote source'} has no input amount")
    max_in = debt_quote.max_in if debt_quote.max_in is not None else amount_in
    if amount_in > preview.collateral:
        raise InsufficientLiquidity(
            f"Repaying {preview.debt} debt needs {amount_in} collateral, only {preview.collateral} redeemed",
            hint="Try redeeming fewer shares",
        )

    preview_cfs = preview.collateral - amount_in
    min_cfs = apply_slippage_floor(preview_cfs, collateral_slippage_bps)
    if preview.collateral - max_in < min_cfs:
        raise InsufficientLiquidity(
            f"Worst-case swap input {max_in} leaves less than minimum collateral {min_cfs}",
            hint="Try decreasing swap slippage or increasing collateral slippage",
        )
    return debt_quote, max_in, max_in, preview_cfs, min_cfs


async def _size_exact_in(
    *,
    preview: PreviewSnapshot,
    preview_equity: int,
    in_token: str,
    debt_asset: str,
    collateral_slippage_bps: int,
    swap_slippage_bps: int,
    collateral_swap_adjustment_bps: int,
    quote: QuoteFn,
) -> tuple[Quote, int, int, int, int]:
    """Return ``(quote, collateral_to_swap, approval_amount, preview_cfs, min_cfs)``."""
    collateral_for_debt = preview.collateral - preview_equity
    if collateral_for_debt <= 0:
        raise InsufficientLiquidity(
            f"Preview equity {preview_equity} leaves no collateral to repay {preview.debt} debt"
        )

    sample = await quote(QuoteRequest.exact_in(in_token, debt_asset, collateral_for_debt, swap_slippage_bps))
    if sample.out <= 0:
        raise InsufficientLiquidity("Quote returned zero output while sizing collateral swap")
    base = collateral_for_debt
    if sample.out != preview.debt:
        base = mul_div_floor(collateral_for_debt, preview.debt, sample.out)
    collateral_to_spend = mul_div_floor(base, BPS_DENOMINATOR + collateral_swap_adjustment_bps, BPS_DENOMINATOR)
    log.debug(
        f"Collateral swap sized sample_in={collateral_for_debt} sample_out={sample.out} "
        f"rescaled={base} to_spend={collateral_to_spend}"
    )

    budget = preview.collateral - apply_slippage_floor(preview_equity, collateral_slippage_bps)
    if collateral_to_spend > budget:
        raise SlippageViolated(
            f"Collateral swap of {collateral_to_spend} exceeds the {budget} allowed by collateral slippage",
            hint="Try increasing collateral slippage or decreasing collateral swap adjustment",
        )

    debt_quote = await quote(QuoteRequest.exact_in(in_token, debt_asset, collateral_to_spend, swap_slippage_bps))
    if debt_quote.out < preview.debt:
        raise InsufficientLiquidity(
            f"Collateral swap returns {debt_quote.out} of {preview.debt} debt to repay",
            hint="Try increasing collateral swap adjustment",
        )
    if debt_quote.min_out < preview.debt:
        raise InsufficientLiquidity(
            f"Worst-case collateral swap returns {debt_quote.min_out} of {preview.debt} debt to repay",
            hint="Try decreasing swap slippage or increasing collateral swap adjustment",
        )

    preview_cfs = preview.collateral - collateral_to_spend
    min_cfs = apply_slippage_floor(preview_cfs, collateral_slippage_bps)
    return debt_quote, collateral_to_spend, collateral_to_spend, preview_cfs, min_cfs


async def _quote_debt_payout(
    *,
    remaining_collateral: int,
    in_token: str,
    collateral_asset: str,
    debt_asset: str,
    swap_slippage_bps: int,
    quote: QuoteFn,
    use_native_collateral: bool,
    wrapped_native: Optional[str],
) -> tuple[Quote, list[Call]]:
    """Swap the collateral left after repayment into the debt asset."""
    payout_quote = await quote(
        QuoteRequest.exact_in(in_token, debt_asset, remaining_collateral, swap_slippage_bps)
    )
    if payout_quote.out <= 0:
        raise InsufficientLiquidity(
            f"Payout swap of {remaining_collateral} collateral returned no {debt_asset}",
            hint="Try receiving the collateral asset instead",
        )
    calls = build_spend_calls(
        collateral_asset,
        remaining_collateral,
        payout_quote.approval_target,
        wants_native_in=use_native_collateral or payout_quote.wants_native_in,
        wrapped_native=wrapped_native,
    )
    calls.extend(payout_quote.calls)
    log.debug(
        f"Debt payout quoted collateral_in={remaining_collateral} out={payout_quote.out} "
        f"min_out={payout_quote.min_out}"
    )
    return payout_quote, calls


async def plan_redeem(
    *,
    oracle: PreviewOracle,
    token: str,
    shares_to_redeem: int,
    collateral_slippage_bps: int,
    swap_slippage_bps: int,
    collateral_swap_adjustment_bps: int,
    quote_collateral_to_debt: QuoteFn,
    swap_kind: SwapKind = SwapKind.EXACT_IN,
    wrapped_native: Optional[str] = None,
    output_asset: Optional[str] = None,
) -> RedeemPlan:
    """Plan a redeem of ``shares_to_redeem`` that repays debt from redeemed collateral.

    The sender receives the remaining collateral, or with ``output_asset`` set to
    the debt asset, that collateral swapped into debt. In the latter case the
    collateral guarantees are zero and ``min_debt_payout`` is the guarantee.
    """
    validate_redeem_params(
        shares_to_redeem, collateral_slippage_bps, swap_slippage_bps, collateral_swap_adjustment_bps
    )

    collateral_asset, debt_asset = await asyncio.gather(
        oracle.get_collateral_asset(token),
        oracle.get_debt_asset(token),
    )
    wants_debt_output = False
    if output_asset is not None:
        if output_asset.lower() == debt_asset.lower():
            wants_debt_output = True
        elif output_asset.lower() != collateral_asset.lower():
            raise UnsupportedAssetPair(
                f"Redeem output {output_asset} must be the collateral {collateral_asset} or debt {debt_asset}"
            )

    preview = await oracle.preview_redeem(token, shares_to_redeem)
    net_shares = shares_to_redeem - preview.token_fee - preview.treasury_fee
    if net_shares < 0:
        raise PlanningError(f"Redeem fees exceed shares: {shares_to_redeem} shares, net {net_shares}")
    preview_equity = await oracle.convert_to_assets(token, net_shares)
    log.debug(
        f"Redeem preview token={token} collateral={preview.collateral} debt={preview.debt} "
        f"net_shares={net_shares} equity={preview_equity}"
    )

    use_native_collateral = bool(wrapped_native) and collateral_asset.lower() == wrapped_native.lower()
    in_token = NATIVE_TOKEN_SENTINEL if use_native_collateral else collateral_asset

    calls: list[Call] = []
    collateral_to_swap = 0
    preview_excess_debt = 0
    min_excess_debt = 0
    preview_cfs = preview.collateral
    min_cfs = apply_slippage_floor(preview.collateral, collateral_slippage_bps)

    if preview.debt > 0:
        if swap_kind == SwapKind.EXACT_OUT:
            debt_quote, collateral_to_swap, approval_amount, preview_cfs, min_cfs = await _size_exact_out(
                preview=preview,
                in_token=in_token,
                debt_asset=debt_asset,
                collateral_slippage_bps=collateral_slippage_bps,
                swap_slippage_bps=swap_slippage_bps,
                quote=quote_collateral_to_debt,
            )
        else:
            debt_quote, collateral_to_swap, approval_amount, preview_cfs, min_cfs = await _size_exact_in(
                preview=preview,
                preview_equity=preview_equity,
                in_token=in_token,
                debt_asset=debt_asset,
                collateral_slippage_bps=collateral_slippage_bps,
                swap_slippage_bps=swap_slippage_bps,
                collateral_swap_adjustment_bps=collateral_swap_adjustment_bps,
                quote=quote_collateral_to_debt,
            )

        preview_excess_debt = debt_quote.out - preview.debt
        min_excess_debt = max(debt_quote.min_out - preview.debt, 0)
        if min_cfs > preview_cfs:
            raise SlippageViolated(
                f"Minimum collateral {min_cfs} exceeds previewed collateral {preview_cfs}",
                hint="Try increasing collateral slippage",
            )

        calls.extend(
            build_spend_calls(
                collateral_asset,
                approval_amount,
                debt_quote.approval_target,
                wants_native_in=use_native_collateral or debt_quote.wants_native_in,
                wrapped_native=wrapped_native,
            )
        )
        calls.extend(debt_quote.calls)

    payout_asset = collateral_asset
    preview_debt_payout = 0
    min_debt_payout = 0
    if wants_debt_output:
        payout_asset = debt_asset
        # exact-out swaps may pull up to max_in
        remaining_collateral = preview.collateral - collateral_to_swap
        if remaining_collateral > 0:
            payout_quote, payout_calls = await _quote_debt_payout(
                remaining_collateral=remaining_collateral,
                in_token=in_token,
                collateral_asset=collateral_asset,
                debt_asset=debt_asset,
                swap_slippage_bps=swap_slippage_bps,
                quote=quote_collateral_to_debt,
                use_native_collateral=use_native_collateral,
                wrapped_native=wrapped_native,
            )
            calls.extend(payout_calls)
            preview_debt_payout = payout_quote.out
            min_debt_payout = payout_quote.min_out
        preview_cfs = 0
        min_cfs = 0

    plan = RedeemPlan(
        token=token,
        shares_to_redeem=shares_to_redeem,
        collateral_asset=collateral_asset,
        debt_asset=debt_asset,
        swap_kind=swap_kind,
        collateral_to_swap=collateral_to_swap,
        min_collateral_for_sender=min_cfs,
        preview_collateral_for_sender=preview_cfs,
        preview_excess_debt=preview_excess_debt,
        min_excess_debt=min_excess_debt,
        preview_equity=preview_equity,
        preview_debt=max(preview.debt, 0),
        payout_asset=payout_asset,
        preview_debt_payout=preview_debt_payout,
        min_debt_payout=min_debt_payout,
        calls=tuple(calls),
    )
    log.bind(PLAN_TRACE=True).info(
        f"Built redeem plan token={token} kind={swap_kind.value} collateral_to_swap={collateral_to_swap} "
        f"min_collateral_for_sender={min_cfs} preview_collateral_for_sender={preview_cfs} "
        f"payout_asset={payout_asset} min_debt_payout={min_debt_payout} calls={len(plan.calls)}"
    )
    return plan
