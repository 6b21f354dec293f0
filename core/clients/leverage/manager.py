"""Preview oracle backed by the LeverageManager contract."""

from __future__ import annotations

import asyncio
from typing import Any, Sequence, Union

from web3 import AsyncWeb3

from core.clients.leverage.rpc import AsyncRPC
from core.logging import log
from core.planning.types import PreviewSnapshot
from core.settings.config import LEVERAGE_MANAGER_ABI

ACTION_DATA_FIELDS = ("collateral", "debt", "shares", "tokenFee", "treasuryFee")


class PreviewOracleError(Exception):
    """Raised when a manager preview read fails."""


def snapshot_from_action_data(result: Any) -> PreviewSnapshot:
    """Map an ``ActionData`` return (tuple or mapping) to a snapshot."""
    if isinstance(result, dict):
        values = [result[name] for name in ACTION_DATA_FIELDS]
    else:
        values = list(result)
        if len(values) != len(ACTION_DATA_FIELDS):
            raise PreviewOracleError(f"Unexpected ActionData shape: {result!r}")
    collateral, debt, shares, token_fee, treasury_fee = (int(value) for value in values)
    return PreviewSnapshot(
        collateral=collateral,
        debt=debt,
        shares=shares,
        token_fee=token_fee,
        treasury_fee=treasury_fee,
    )


class LeverageManagerOracle:
    """Read-only previews from a LeverageManager, optionally pinned to a block."""

    def __init__(self, contract, block_identifier: Union[str, int] = "latest") -> None:
        self.contract = contract
        self.block_identifier = block_identifier

    @classmethod
    def from_rpc(cls, rpc: AsyncRPC, address: str, block_identifier: Union[str, int] = "latest"):
        return cls(rpc.contract(address, LEVERAGE_MANAGER_ABI), block_identifier=block_identifier)

    @property
    def address(self) -> str:
        return str(self.contract.address)

    async def _call(self, fn_name: str, *args: Any) -> Any:
        try:
            fn = getattr(self.contract.functions, fn_name)
            return await fn(*args).call(block_identifier=self.block_identifier)
        except Exception as exc:
            raise PreviewOracleError(f"LeverageManager.{fn_name} failed: {exc}") from exc

    async def get_collateral_asset(self, token: str) -> str:
        asset = await self._call("getLeverageTokenCollateralAsset", AsyncWeb3.to_checksum_address(token))
        return AsyncWeb3.to_checksum_address(asset)

    async def get_debt_asset(self, token: str) -> str:
        asset = await self._call("getLeverageTokenDebtAsset", AsyncWeb3.to_checksum_address(token))
        return AsyncWeb3.to_checksum_address(asset)

    async def preview_mint(self, token: str, collateral: int) -> PreviewSnapshot:
        result = await self._call("previewDeposit", AsyncWeb3.to_checksum_address(token), int(collateral))
        snapshot = snapshot_from_action_data(result)
        log.debug(f"previewDeposit token={token} collateral={collateral} -> {snapshot}")
        return snapshot

    async def preview_mint_many(self, token: str, collaterals: Sequence[int]) -> list[PreviewSnapshot]:
        return list(await asyncio.gather(*(self.preview_mint(token, amount) for amount in collaterals)))

    async def preview_redeem(self, token: str, shares: int) -> PreviewSnapshot:
        result = await self._call("previewRedeem", AsyncWeb3.to_checksum_address(token), int(shares))
        snapshot = snapshot_from_action_data(result)
        log.debug(f"previewRedeem token={token} shares={shares} -> {snapshot}")
        return snapshot

    async def convert_to_assets(self, token: str, shares: int) -> int:
        return int(await self._call("convertToAssets", AsyncWeb3.to_checksum_address(token), int(shares)))
