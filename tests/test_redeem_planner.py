import asyncio

import pytest

from core.models.chain import NATIVE_TOKEN_SENTINEL
from core.planning.errors import (
    InsufficientLiquidity,
    InvalidParameter,
    PlanningError,
    SlippageViolated,
    UnsupportedAssetPair,
)
from core.planning.redeem import plan_redeem
from core.planning.types import PreviewSnapshot, QuoteIntent, SwapKind

from fakes import COLLATERAL, DEBT, INPUT, SWAP_TARGET, TOKEN, WETH, FakeOracle, ScriptedQuotes, make_quote


def _oracle(preview=None, equity=800):
    return FakeOracle(
        redeem_preview=preview or PreviewSnapshot(collateral=1000, debt=300, shares=100),
        equity=equity,
    )


def _plan(oracle, quotes, **overrides):
    params = dict(
        oracle=oracle,
        token=TOKEN,
        shares_to_redeem=100,
        collateral_slippage_bps=100,
        swap_slippage_bps=100,
        collateral_swap_adjustment_bps=100,
        quote_collateral_to_debt=quotes,
    )
    params.update(overrides)
    return asyncio.run(plan_redeem(**params))


def test_exact_in_redeem_sizes_collateral_swap():
    oracle = _oracle()
    quotes = ScriptedQuotes({}, default=make_quote(350, 330))

    plan = _plan(oracle, quotes)

    assert plan.min_collateral_for_sender == 819
    assert plan.preview_collateral_for_sender == 828
    assert plan.min_collateral_for_sender <= plan.preview_collateral_for_sender
    assert plan.collateral_to_swap == 172
    assert plan.preview_excess_debt == 50
    assert plan.min_excess_debt == 30
    assert plan.preview_equity == 800
    assert plan.swap_kind == SwapKind.EXACT_IN
    assert plan.payout_asset == COLLATERAL
    assert plan.preview_debt_payout == plan.min_debt_payout == 0
    assert [r.amount_in for r in quotes.requests] == [200, 172]
    assert all(r.in_token == COLLATERAL and r.out_token == DEBT for r in quotes.requests)


def test_exact_in_calls_approve_collateral_then_swap():
    plan = _plan(_oracle(), ScriptedQuotes({}, default=make_quote(350, 330)))

    approve, swap = plan.calls
    assert approve.target == COLLATERAL
    assert approve.data.startswith("0x095ea7b3")
    assert int(approve.data[-64:], 16) == 172
    assert swap.target == SWAP_TARGET


def test_fees_are_removed_before_converting_to_assets():
    oracle = _oracle(preview=PreviewSnapshot(collateral=1000, debt=300, shares=100, token_fee=3, treasury_fee=2))
    _plan(oracle, ScriptedQuotes({}, default=make_quote(350, 330)))
    assert ("convert_to_assets", 95) in oracle.calls


def test_zero_debt_returns_collateral_without_calls():
    oracle = _oracle(preview=PreviewSnapshot(collateral=1000, debt=0, shares=100), equity=1000)
    quotes = ScriptedQuotes({})

    plan = _plan(oracle, quotes)

    assert plan.calls == ()
    assert plan.preview_collateral_for_sender == 1000
    assert plan.min_collateral_for_sender == 990
    assert quotes.requests == []


def test_final_quote_short_of_debt():
    quotes = ScriptedQuotes({200: make_quote(350, 330), 172: make_quote(290, 280)})
    with pytest.raises(InsufficientLiquidity) as exc_info:
        _plan(_oracle(), quotes)
    assert "increasing collateral swap adjustment" in exc_info.value.hint
    assert "swap slippage" not in exc_info.value.hint


def test_worst_case_quote_short_of_debt():
    quotes = ScriptedQuotes({200: make_quote(350, 330), 172: make_quote(310, 290)})
    with pytest.raises(InsufficientLiquidity) as exc_info:
        _plan(_oracle(), quotes)
    assert "decreasing swap slippage" in exc_info.value.hint


def test_swap_beyond_collateral_budget():
    quotes = ScriptedQuotes({200: make_quote(200, 190)})
    with pytest.raises(SlippageViolated):
        _plan(_oracle(), quotes)
    assert len(quotes.requests) == 1


@pytest.mark.parametrize(
    "overrides",
    [
        {"shares_to_redeem": 0},
        {"collateral_slippage_bps": -1},
        {"swap_slippage_bps": 0},
        {"collateral_swap_adjustment_bps": -1},
    ],
)
def test_invalid_parameters_rejected_before_io(overrides):
    oracle = _oracle()
    quotes = ScriptedQuotes({}, default=make_quote(350, 330))
    with pytest.raises(InvalidParameter):
        _plan(oracle, quotes, **overrides)
    assert oracle.calls == []
    assert quotes.requests == []


def test_exact_out_redeem_uses_quoted_input():
    quotes = ScriptedQuotes({300: make_quote(300, 300, amount_in=180, max_in=182)}, supports_exact_out=True)

    plan = _plan(_oracle(), quotes, swap_kind=SwapKind.EXACT_OUT)

    request = quotes.requests[0]
    assert request.intent == QuoteIntent.EXACT_OUT
    assert request.amount_out == 300
    assert plan.preview_collateral_for_sender == 820
    assert plan.min_collateral_for_sender == 811
    assert plan.collateral_to_swap == 182
    assert int(plan.calls[0].data[-64:], 16) == 182
    assert plan.preview_excess_debt == 0
    assert plan.min_excess_debt == 0


def test_exact_out_worst_case_input_breaks_collateral_floor():
    quotes = ScriptedQuotes({300: make_quote(300, 300, amount_in=180, max_in=195)}, supports_exact_out=True)
    with pytest.raises(InsufficientLiquidity) as exc_info:
        _plan(_oracle(), quotes, swap_kind=SwapKind.EXACT_OUT)
    assert "increasing collateral slippage" in exc_info.value.hint


def test_exact_out_input_above_redeemed_collateral():
    quotes = ScriptedQuotes({300: make_quote(300, 300, amount_in=1001, max_in=1011)}, supports_exact_out=True)
    with pytest.raises(InsufficientLiquidity) as exc_info:
        _plan(_oracle(), quotes, swap_kind=SwapKind.EXACT_OUT)
    assert "redeeming fewer shares" in exc_info.value.hint


def test_fees_above_redeemed_shares():
    oracle = _oracle(preview=PreviewSnapshot(collateral=1000, debt=300, shares=100, token_fee=80, treasury_fee=30))
    quotes = ScriptedQuotes({}, default=make_quote(350, 330))

    with pytest.raises(PlanningError, match="fees exceed"):
        _plan(oracle, quotes)
    assert not any(call[0] == "convert_to_assets" for call in oracle.calls)
    assert quotes.requests == []


def test_native_collateral_unwraps_before_swap():
    oracle = FakeOracle(
        collateral_asset=WETH,
        redeem_preview=PreviewSnapshot(collateral=1000, debt=300, shares=100),
        equity=800,
    )
    quotes = ScriptedQuotes({}, default=make_quote(350, 330))

    plan = _plan(oracle, quotes, wrapped_native=WETH)

    assert all(r.in_token == NATIVE_TOKEN_SENTINEL for r in quotes.requests)
    unwrap, swap = plan.calls
    assert unwrap.target == WETH
    assert unwrap.data.startswith("0x2e1a7d4d")
    assert int(unwrap.data[-64:], 16) == 172
    assert swap.target == SWAP_TARGET
    assert plan.min_collateral_for_sender == 819


def test_debt_output_swaps_remaining_collateral():
    quotes = ScriptedQuotes({828: make_quote(1400, 1386)}, default=make_quote(350, 330))

    plan = _plan(_oracle(), quotes, output_asset=DEBT)

    assert [r.amount_in for r in quotes.requests] == [200, 172, 828]
    assert plan.payout_asset == DEBT
    assert plan.preview_debt_payout == 1400
    assert plan.min_debt_payout == 1386
    assert plan.min_collateral_for_sender == 0
    assert plan.preview_collateral_for_sender == 0
    assert plan.collateral_to_swap == 172
    repay_approve, repay_swap, payout_approve, payout_swap = plan.calls
    assert int(repay_approve.data[-64:], 16) == 172
    assert int(payout_approve.data[-64:], 16) == 828
    assert payout_approve.target == COLLATERAL
    assert repay_swap.target == payout_swap.target == SWAP_TARGET


def test_debt_output_after_exact_out_swaps_worst_case_leftover():
    quotes = ScriptedQuotes(
        {300: make_quote(300, 300, amount_in=180, max_in=182), 818: make_quote(1380, 1366)},
        supports_exact_out=True,
    )

    plan = _plan(_oracle(), quotes, swap_kind=SwapKind.EXACT_OUT, output_asset=DEBT)

    assert quotes.requests[1].intent == QuoteIntent.EXACT_IN
    assert quotes.requests[1].amount_in == 818
    assert plan.min_debt_payout == 1366
    assert len(plan.calls) == 4


def test_debt_output_without_debt_to_repay():
    oracle = _oracle(preview=PreviewSnapshot(collateral=1000, debt=0, shares=100), equity=1000)
    quotes = ScriptedQuotes({1000: make_quote(2000, 1980)})

    plan = _plan(oracle, quotes, output_asset=DEBT)

    assert plan.collateral_to_swap == 0
    assert plan.preview_debt_payout == 2000
    assert plan.min_debt_payout == 1980
    assert len(plan.calls) == 2


def test_collateral_output_is_the_default_payout():
    quotes = ScriptedQuotes({}, default=make_quote(350, 330))

    plan = _plan(_oracle(), quotes, output_asset=COLLATERAL)

    assert plan.payout_asset == COLLATERAL
    assert plan.min_collateral_for_sender == 819
    assert len(quotes.requests) == 2


def test_unrelated_output_asset_rejected_before_preview():
    oracle = _oracle()
    with pytest.raises(UnsupportedAssetPair):
        _plan(oracle, ScriptedQuotes({}), output_asset=INPUT)
    assert not any(call[0] == "preview_redeem" for call in oracle.calls)
