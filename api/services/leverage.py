"""Leverage planning service for the API."""

from __future__ import annotations

from core.logging import log
from core.planning.planner import LeveragePlanner
from core.planning.types import MintPlan, RedeemPlan, SwapKind
from api.models.leverage import MintPlanRequest, RedeemPlanRequest


class LeveragePlanningService:
    """Holds one lazily-built planner shared by all requests."""

    def __init__(self) -> None:
        self._planner: LeveragePlanner | None = None

    def get_planner(self) -> LeveragePlanner:
        if self._planner is None:
            self._planner = LeveragePlanner.from_settings()
        return self._planner

    def set_planner(self, planner: LeveragePlanner | None) -> None:
        self._planner = planner

    async def plan_mint(self, request: MintPlanRequest) -> MintPlan:
        planner = self.get_planner()
        log.info(
            f"Mint plan requested token={request.token} input={request.input_asset} "
            f"equity={request.equity_in_input_asset}"
        )
        return await planner.plan_mint(
            request.token,
            request.input_asset,
            request.equity_in_input_asset,
            share_slippage_bps=request.share_slippage_bps,
            swap_slippage_bps=request.swap_slippage_bps,
            flash_loan_adjustment_bps=request.flash_loan_adjustment_bps,
        )

    async def plan_redeem(self, request: RedeemPlanRequest) -> RedeemPlan:
        planner = self.get_planner()
        log.info(
            f"Redeem plan requested token={request.token} shares={request.shares_to_redeem} "
            f"output={request.output_asset or 'collateral'}"
        )
        return await planner.plan_redeem(
            request.token,
            request.shares_to_redeem,
            collateral_slippage_bps=request.collateral_slippage_bps,
            swap_slippage_bps=request.swap_slippage_bps,
            collateral_swap_adjustment_bps=request.collateral_swap_adjustment_bps,
            swap_kind=SwapKind(request.swap_kind) if request.swap_kind else None,
            output_asset=request.output_asset,
        )

    async def close(self) -> None:
        if self._planner is not None:
            await self._planner.close()


leverage_planning_service = LeveragePlanningService()
