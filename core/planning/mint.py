"""Mint planning: size the flash loan and debt swap for a leveraged deposit."""

from __future__ import annotations

import asyncio
from typing import Optional

from core.logging import log
from core.models.chain import NATIVE_TOKEN_SENTINEL
from core.planning.calls import build_spend_calls
from core.planning.errors import (
    FlashLoanTooLarge,
    InsufficientLiquidity,
    InvalidParameter,
    PlanningError,
    SlippageViolated,
    UnsupportedAssetPair,
)
from core.planning.oracle import PreviewOracle
from core.planning.slippage import apply_slippage_floor, validate_bps
from core.planning.solver import quote_debt_for_missing_collateral
from core.planning.types import Call, MintPlan, Quote, QuoteFn, QuoteRequest


def _same_address(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a.lower() == b.lower()


def validate_mint_params(
    equity_in_input_asset: int,
    share_slippage_bps: int,
    swap_slippage_bps: int,
    flash_loan_adjustment_bps: int,
) -> None:
    if isinstance(equity_in_input_asset, bool) or not isinstance(equity_in_input_asset, int):
        raise InvalidParameter("equity_in_input_asset must be an integer amount")
    if equity_in_input_asset <= 0:
        raise InvalidParameter(f"equity_in_input_asset must be positive, got {equity_in_input_asset}")
    validate_bps("share_slippage_bps", share_slippage_bps)
    validate_bps("swap_slippage_bps", swap_slippage_bps, minimum=1)
    validate_bps("flash_loan_adjustment_bps", flash_loan_adjustment_bps)


async def plan_mint(
    *,
    oracle: PreviewOracle,
    token: str,
    input_asset: str,
    equity_in_input_asset: int,
    share_slippage_bps: int,
    swap_slippage_bps: int,
    flash_loan_adjustment_bps: int,
    quote_debt_to_collateral: QuoteFn,
    quote_input_to_collateral: Optional[QuoteFn] = None,
    wrapped_native: Optional[str] = None,
    require_collateral_input: bool = False,
) -> MintPlan:
    """Plan a leveraged mint of ``token`` funded with ``equity_in_input_asset``.

    The manager is sampled once with the user's collateral, the debt swap is
    quoted and corrected once, and a final batched preview at the nominal and
    worst-case totals checks that the borrowed debt can repay the flash loan
    and that the share floor holds.
    """
    validate_mint_params(
        equity_in_input_asset, share_slippage_bps, swap_slippage_bps, flash_loan_adjustment_bps
    )

    collateral_asset, debt_asset = await asyncio.gather(
        oracle.get_collateral_asset(token),
        oracle.get_debt_asset(token),
    )
    log.debug(f"Mint assets token={token} collateral={collateral_asset} debt={debt_asset}")

    approvals: list[Call] = []
    swaps: list[Call] = []

    user_collateral = equity_in_input_asset
    user_collateral_min = equity_in_input_asset
    if not _same_address(input_asset, collateral_asset):
        if require_collateral_input:
            raise UnsupportedAssetPair(
                f"Router requires collateral-only input, got {input_asset} for collateral {collateral_asset}"
            )
        if quote_input_to_collateral is None:
            raise UnsupportedAssetPair(f"No quote source converts {input_asset} into {collateral_asset}")
        input_quote = await quote_input_to_collateral(
            QuoteRequest.exact_in(input_asset, collateral_asset, equity_in_input_asset, swap_slippage_bps)
        )
        if input_quote.out <= 0:
            raise InsufficientLiquidity(f"Input swap from {input_asset} returned no collateral")
        user_collateral = input_quote.out
        user_collateral_min = input_quote.min_out
        approvals.extend(
            build_spend_calls(
                input_asset,
                equity_in_input_asset,
                input_quote.approval_target,
                wants_native_in=input_quote.wants_native_in,
                wrapped_native=wrapped_native,
            )
        )
        swaps.extend(input_quote.calls)
        log.debug(f"Input swap quoted out={input_quote.out} min_out={input_quote.min_out}")

    sample = await oracle.preview_mint(token, user_collateral)
    needed_from_debt_swap = sample.collateral - user_collateral
    log.debug(
        f"Mint sample collateral={sample.collateral} debt={sample.debt} "
        f"needed_from_debt_swap={needed_from_debt_swap}"
    )
    if needed_from_debt_swap <= 0:
        raise PlanningError("Preview indicates no debt swap needed")
    if sample.debt <= 0:
        raise InsufficientLiquidity("Preview returned no debt for the sampled collateral")

    use_native_debt = _same_address(debt_asset, wrapped_native)
    debt_quote_in = NATIVE_TOKEN_SENTINEL if use_native_debt else debt_asset

    candidate, first_quote = await quote_debt_for_missing_collateral(
        ideal_debt=sample.debt,
        needed_out=needed_from_debt_swap,
        equity=user_collateral,
        sample_collateral=sample.collateral,
        in_token=debt_quote_in,
        out_token=collateral_asset,
        slippage_bps=swap_slippage_bps,
        quote=quote_debt_to_collateral,
    )
    flash_loan_amount = apply_slippage_floor(candidate, flash_loan_adjustment_bps)
    if flash_loan_amount <= 0:
        raise InsufficientLiquidity(
            "Flash loan rounds to zero", hint="Try a larger amount or a smaller flash loan adjustment"
        )

    debt_quote: Quote = first_quote
    if flash_loan_amount != sample.debt:
        debt_quote = await quote_debt_to_collateral(
            QuoteRequest.exact_in(debt_quote_in, collateral_asset, flash_loan_amount, swap_slippage_bps)
        )
    log.debug(
        f"Debt swap quoted flash_loan={flash_loan_amount} out={debt_quote.out} min_out={debt_quote.min_out}"
    )

    total_collateral = user_collateral + debt_quote.out
    total_collateral_min = user_collateral_min + debt_quote.min_out
    preview, min_preview = await oracle.preview_mint_many(token, [total_collateral, total_collateral_min])

    if preview.debt < flash_loan_amount:
        raise FlashLoanTooLarge(
            f"Previewed debt {preview.debt} is below flash loan {flash_loan_amount}",
            hint="Try increasing the flash loan adjustment",
        )
    if min_preview.debt < flash_loan_amount:
        raise FlashLoanTooLarge(
            f"Worst-case previewed debt {min_preview.debt} is below flash loan {flash_loan_amount}",
            hint="Try decreasing swap slippage or increasing the flash loan adjustment",
        )

    min_shares = apply_slippage_floor(preview.shares, share_slippage_bps)
    if min_preview.shares < min_shares:
        raise SlippageViolated(
            f"Worst-case shares {min_preview.shares} are below minimum shares {min_shares}",
            hint="Try increasing share slippage or decreasing swap slippage",
        )

    approvals.extend(
        build_spend_calls(
            debt_asset,
            flash_loan_amount,
            debt_quote.approval_target,
            wants_native_in=use_native_debt or debt_quote.wants_native_in,
            wrapped_native=wrapped_native,
        )
    )
    swaps.extend(debt_quote.calls)

    plan = MintPlan(
        token=token,
        input_asset=input_asset,
        equity_in_input_asset=equity_in_input_asset,
        collateral_asset=collateral_asset,
        debt_asset=debt_asset,
        user_collateral=user_collateral,
        flash_loan_amount=flash_loan_amount,
        min_shares=min_shares,
        preview_shares=preview.shares,
        min_excess_debt=min_preview.debt - flash_loan_amount,
        preview_excess_debt=preview.debt - flash_loan_amount,
        preview_total_collateral=total_collateral,
        calls=tuple(approvals + swaps),
    )
    log.bind(PLAN_TRACE=True).info(
        f"Built mint plan token={token} flash_loan={plan.flash_loan_amount} "
        f"min_shares={plan.min_shares} preview_shares={plan.preview_shares} calls={len(plan.calls)}"
    )
    return plan
