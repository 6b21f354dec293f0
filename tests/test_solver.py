import asyncio

import pytest

from core.planning.errors import InsufficientLiquidity, InvalidParameter
from core.planning.solver import quote_debt_for_missing_collateral, solve_flash_loan_amount_from_implied_rates

from fakes import COLLATERAL, DEBT, ScriptedQuotes, make_quote


def test_quote_cheaper_than_manager_keeps_feasible_sample():
    assert solve_flash_loan_amount_from_implied_rates(500, 8000, 9000, 10_000, 1000, 1100) == 1000


def test_quote_cheaper_than_manager_falls_back_to_sample_debt():
    assert solve_flash_loan_amount_from_implied_rates(500, 8000, 9000, 10_000, 1000, 900) == 900


def test_quote_dearer_than_manager_uses_closed_form():
    # (7000 * 8000 * 500) / (10000 * 1000)
    assert solve_flash_loan_amount_from_implied_rates(500, 8000, 7000, 10_000, 1000, 1100) == 2800


def test_closed_form_rounding_to_zero_returns_sample():
    assert solve_flash_loan_amount_from_implied_rates(0, 8000, 7000, 10_000, 123, 456) == 123


@pytest.mark.parametrize(
    "rate_quote, rate_manager, scale",
    [(8000, 7000, 0), (0, 7000, 10_000), (8000, -1, 10_000)],
)
def test_invalid_rates_rejected(rate_quote, rate_manager, scale):
    with pytest.raises(InvalidParameter):
        solve_flash_loan_amount_from_implied_rates(500, rate_quote, rate_manager, scale, 1, 1)


def test_short_quote_rescales_once():
    quotes = ScriptedQuotes({950: make_quote(893, 892)})
    debt_in, first = asyncio.run(
        quote_debt_for_missing_collateral(
            ideal_debt=950,
            needed_out=1000,
            equity=1000,
            sample_collateral=2000,
            in_token=DEBT,
            out_token=COLLATERAL,
            slippage_bps=10,
            quote=quotes,
        )
    )
    assert debt_in == 848
    assert first.out == 893
    assert [r.amount_in for r in quotes.requests] == [950]


def test_sufficient_quote_keeps_manager_debt():
    quotes = ScriptedQuotes({950: make_quote(1000, 999)})
    debt_in, _ = asyncio.run(
        quote_debt_for_missing_collateral(
            ideal_debt=950,
            needed_out=1000,
            equity=1000,
            sample_collateral=2000,
            in_token=DEBT,
            out_token=COLLATERAL,
            slippage_bps=10,
            quote=quotes,
        )
    )
    assert debt_in == 950


def test_zero_output_is_insufficient_liquidity():
    quotes = ScriptedQuotes({950: make_quote(0, 0)})
    with pytest.raises(InsufficientLiquidity):
        asyncio.run(
            quote_debt_for_missing_collateral(
                ideal_debt=950,
                needed_out=1000,
                equity=1000,
                sample_collateral=2000,
                in_token=DEBT,
                out_token=COLLATERAL,
                slippage_bps=10,
                quote=quotes,
            )
        )
