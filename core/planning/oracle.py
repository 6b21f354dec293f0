"""Read-only preview oracle consumed by the planners."""

from __future__ import annotations

from typing import Protocol, Sequence

from core.planning.types import PreviewSnapshot


class PreviewOracle(Protocol):
    async def get_collateral_asset(self, token: str) -> str: ...

    async def get_debt_asset(self, token: str) -> str: ...

    async def preview_mint(self, token: str, collateral: int) -> PreviewSnapshot: ...

    async def preview_mint_many(self, token: str, collaterals: Sequence[int]) -> list[PreviewSnapshot]:
        """One snapshot per amount, in input order."""
        ...

    async def preview_redeem(self, token: str, shares: int) -> PreviewSnapshot: ...

    async def convert_to_assets(self, token: str, shares: int) -> int: ...
