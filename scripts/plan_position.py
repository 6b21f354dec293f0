"""Leverage plan CLI (planning only, nothing is sent).

Usage examples:
  python scripts/plan_position.py mint --token 0x... --input-asset 0x... --amount 1000000000000000000
  python scripts/plan_position.py mint --token 0x... --input-asset 0x... --amount 1000000 --swap-slippage-bps 30
  python scripts/plan_position.py redeem --token 0x... --shares 500000000000000000 --collateral-slippage-bps 50
"""

import argparse
import asyncio
import json
import sys

from core.clients.leverage import PreviewOracleError
from core.clients.quotes import QuoteError
from core.planning.errors import PlanningError
from core.planning.planner import LeveragePlanner
from core.planning.types import Direction, PositionIntent


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Plan a leverage token mint or redeem")
    sub = parser.add_subparsers(dest="direction", required=True)

    mint = sub.add_parser("mint", help="Plan a leveraged mint")
    mint.add_argument("--token", required=True, help="Leverage token address")
    mint.add_argument("--input-asset", required=True, help="Asset the equity is paid in")
    mint.add_argument("--amount", required=True, type=int, help="Equity in input asset base units")
    mint.add_argument("--share-slippage-bps", type=int)
    mint.add_argument("--swap-slippage-bps", type=int)
    mint.add_argument("--flash-loan-adjustment-bps", type=int)

    redeem = sub.add_parser("redeem", help="Plan a redeem")
    redeem.add_argument("--token", required=True, help="Leverage token address")
    redeem.add_argument("--shares", required=True, type=int, help="Shares to redeem in base units")
    redeem.add_argument("--collateral-slippage-bps", type=int)
    redeem.add_argument("--swap-slippage-bps", type=int)
    redeem.add_argument("--collateral-swap-adjustment-bps", type=int)
    redeem.add_argument("--output-asset", help="Receive the debt asset instead of collateral by passing its address")
    return parser


def _intent_from_args(args: argparse.Namespace) -> PositionIntent:
    if args.direction == "mint":
        return PositionIntent(
            direction=Direction.MINT,
            token=args.token,
            asset=args.input_asset,
            amount=args.amount,
            share_slippage_bps=args.share_slippage_bps,
            swap_slippage_bps=args.swap_slippage_bps,
            flash_loan_adjustment_bps=args.flash_loan_adjustment_bps,
        )
    return PositionIntent(
        direction=Direction.REDEEM,
        token=args.token,
        amount=args.shares,
        asset=args.output_asset,
        collateral_slippage_bps=args.collateral_slippage_bps,
        swap_slippage_bps=args.swap_slippage_bps,
        collateral_swap_adjustment_bps=args.collateral_swap_adjustment_bps,
    )


async def main() -> int:
    args = _build_parser().parse_args()
    planner = LeveragePlanner.from_settings()
    try:
        plan = await planner.plan(_intent_from_args(args))
    except PlanningError as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 2
    except (QuoteError, PreviewOracleError) as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 3
    finally:
        await planner.close()

    print(json.dumps(plan.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
