"""Planner facade wiring an oracle and quote sources to the mint/redeem planners."""

from __future__ import annotations

from typing import Optional, Union

from core.logging import log
from core.planning.errors import InvalidParameter
from core.planning.mint import plan_mint
from core.planning.oracle import PreviewOracle
from core.planning.redeem import plan_redeem
from core.planning.types import Direction, MintPlan, PositionIntent, RedeemPlan, SwapKind
from core.settings.config import Settings, settings as default_settings


def _pick(value: Optional[int], default: int) -> int:
    return default if value is None else value


class LeveragePlanner:
    """Plans mints and redeems with defaults taken from settings."""

    def __init__(
        self,
        oracle: PreviewOracle,
        mint_quote_source,
        redeem_quote_source,
        *,
        input_quote_source=None,
        wrapped_native: Optional[str] = None,
        app_settings: Optional[Settings] = None,
    ) -> None:
        self.oracle = oracle
        self.mint_quote_source = mint_quote_source
        self.redeem_quote_source = redeem_quote_source
        self.input_quote_source = input_quote_source
        self.settings = app_settings or default_settings
        self.wrapped_native = wrapped_native

    @classmethod
    def from_settings(cls, app_settings: Optional[Settings] = None) -> "LeveragePlanner":
        from core.clients.leverage import AsyncRPC, LeverageManagerOracle
        from core.clients.quotes import create_quote_source

        app_settings = app_settings or default_settings
        rpc = AsyncRPC(app_settings.rpc_url, timeout=app_settings.rpc_timeout)
        oracle = LeverageManagerOracle.from_rpc(
            rpc, app_settings.leverage_manager, block_identifier=app_settings.preview_block_tag
        )
        mint_source = create_quote_source(app_settings.mint_quote_source, app_settings)
        redeem_source = (
            mint_source
            if app_settings.redeem_quote_source == app_settings.mint_quote_source
            else create_quote_source(app_settings.redeem_quote_source, app_settings)
        )
        log.info(
            f"Leverage planner configured chain={app_settings.chain} manager={app_settings.leverage_manager} "
            f"mint_source={mint_source.name} redeem_source={redeem_source.name}"
        )
        return cls(
            oracle,
            mint_source,
            redeem_source,
            input_quote_source=mint_source,
            wrapped_native=app_settings.chain_config.wrapped_native,
            app_settings=app_settings,
        )

    @property
    def redeem_swap_kind(self) -> SwapKind:
        if getattr(self.redeem_quote_source, "supports_exact_out", False):
            return SwapKind.EXACT_OUT
        return SwapKind.EXACT_IN

    async def plan_mint(
        self,
        token: str,
        input_asset: str,
        equity_in_input_asset: int,
        *,
        share_slippage_bps: Optional[int] = None,
        swap_slippage_bps: Optional[int] = None,
        flash_loan_adjustment_bps: Optional[int] = None,
    ) -> MintPlan:
        s = self.settings
        input_source = self.input_quote_source
        return await plan_mint(
            oracle=self.oracle,
            token=token,
            input_asset=input_asset,
            equity_in_input_asset=equity_in_input_asset,
            share_slippage_bps=_pick(share_slippage_bps, s.default_share_slippage_bps),
            swap_slippage_bps=_pick(swap_slippage_bps, s.default_swap_slippage_bps),
            flash_loan_adjustment_bps=_pick(flash_loan_adjustment_bps, s.default_flash_loan_adjustment_bps),
            quote_debt_to_collateral=self.mint_quote_source.quote,
            quote_input_to_collateral=input_source.quote if input_source is not None else None,
            wrapped_native=self.wrapped_native,
            require_collateral_input=s.router_version == "v1",
        )

    async def plan_redeem(
        self,
        token: str,
        shares_to_redeem: int,
        *,
        collateral_slippage_bps: Optional[int] = None,
        swap_slippage_bps: Optional[int] = None,
        collateral_swap_adjustment_bps: Optional[int] = None,
        swap_kind: Optional[SwapKind] = None,
        output_asset: Optional[str] = None,
    ) -> RedeemPlan:
        s = self.settings
        return await plan_redeem(
            oracle=self.oracle,
            token=token,
            shares_to_redeem=shares_to_redeem,
            collateral_slippage_bps=_pick(collateral_slippage_bps, s.default_collateral_slippage_bps),
            swap_slippage_bps=_pick(swap_slippage_bps, s.default_swap_slippage_bps),
            collateral_swap_adjustment_bps=_pick(
                collateral_swap_adjustment_bps, s.default_collateral_swap_adjustment_bps
            ),
            quote_collateral_to_debt=self.redeem_quote_source.quote,
            swap_kind=swap_kind or self.redeem_swap_kind,
            wrapped_native=self.wrapped_native,
            output_asset=output_asset,
        )

    async def plan(self, intent: PositionIntent) -> Union[MintPlan, RedeemPlan]:
        if intent.direction == Direction.MINT:
            if not intent.asset:
                raise InvalidParameter("Mint intents need an input asset")
            return await self.plan_mint(
                intent.token,
                intent.asset,
                intent.amount,
                share_slippage_bps=intent.share_slippage_bps,
                swap_slippage_bps=intent.swap_slippage_bps,
                flash_loan_adjustment_bps=intent.flash_loan_adjustment_bps,
            )
        return await self.plan_redeem(
            intent.token,
            intent.amount,
            collateral_slippage_bps=intent.collateral_slippage_bps,
            swap_slippage_bps=intent.swap_slippage_bps,
            collateral_swap_adjustment_bps=intent.collateral_swap_adjustment_bps,
            output_asset=intent.asset,
        )

    async def close(self) -> None:
        sources = (self.mint_quote_source, self.redeem_quote_source, self.input_quote_source)
        unique = {id(source): source for source in sources if source is not None}
        for source in unique.values():
            close = getattr(source, "close", None)
            if close is not None:
                await close()
