import asyncio
import json

import httpx
import pytest

from core.clients.quotes import LifiQuoteSource, QuoteError, StaticQuoteSource, VeloraQuoteSource
from core.clients.quotes.base import bps_to_decimal_string
from core.models.chain import NATIVE_TOKEN_SENTINEL, ZERO_ADDRESS
from core.planning.types import QuoteRequest

from fakes import COLLATERAL, DEBT, SPENDER, SWAP_TARGET

ROUTER = "0x7777777777777777777777777777777777777777"

LIFI_STEP = {
    "tool": "uniswap",
    "estimate": {"fromAmount": "839", "toAmount": "880", "toAmountMin": "879", "approvalAddress": SPENDER},
    "transactionRequest": {"to": SWAP_TARGET, "data": "0xabcdef", "value": "0x0"},
}

VELORA_SELL = {
    "priceRoute": {
        "srcAmount": "172",
        "destAmount": "350",
        "contractAddress": SWAP_TARGET,
        "tokenTransferProxy": SPENDER,
        "side": "SELL",
    },
    "txParams": {"to": SWAP_TARGET, "data": "0xfeed", "value": "0"},
}


def _run(source, request):
    async def _go():
        try:
            return await source.quote(request)
        finally:
            close = getattr(source, "close", None)
            if close is not None:
                await close()

    return asyncio.run(_go())


def _lifi(handler, **kwargs):
    return LifiQuoteSource(
        chain_id=8453,
        from_address=ROUTER,
        api_key="test-key",
        integrator="leverage-planner",
        retry_delay=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _velora(handler):
    return VeloraQuoteSource(
        chain_id=8453,
        router=ROUTER,
        token_decimals={COLLATERAL: 18, DEBT: 6},
        retry_delay=0,
        transport=httpx.MockTransport(handler),
    )


def test_bps_to_decimal_string():
    assert bps_to_decimal_string(10) == "0.001"
    assert bps_to_decimal_string(50) == "0.005"
    assert bps_to_decimal_string(125) == "0.0125"
    assert bps_to_decimal_string(10_000) == "1"


def test_lifi_exact_in_request_and_mapping():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["api_key"] = request.headers.get("x-lifi-api-key")
        return httpx.Response(200, json=LIFI_STEP)

    quote = _run(_lifi(handler), QuoteRequest.exact_in(DEBT, COLLATERAL, 839, 10))

    assert seen["path"] == "/v1/quote"
    assert seen["api_key"] == "test-key"
    params = seen["params"]
    assert params["fromChain"] == params["toChain"] == "8453"
    assert params["fromToken"] == DEBT
    assert params["toToken"] == COLLATERAL
    assert params["fromAmount"] == "839"
    assert params["fromAddress"] == ROUTER
    assert params["slippage"] == "0.001"
    assert params["integrator"] == "leverage-planner"
    assert params["order"] == "CHEAPEST"

    assert quote.out == 880
    assert quote.min_out == 879
    assert quote.amount_in == 839
    assert quote.approval_target == SPENDER
    assert quote.calls[0].target == SWAP_TARGET
    assert quote.calls[0].data == "0xabcdef"
    assert quote.wants_native_in is False
    assert quote.source == "lifi"


def test_lifi_rejects_exact_out():
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(QuoteError):
        _run(_lifi(handler), QuoteRequest.exact_out(COLLATERAL, DEBT, 300, 10))


def test_lifi_http_error_becomes_quote_error():
    def handler(request):
        return httpx.Response(500, json={"message": "boom"})

    with pytest.raises(QuoteError, match="LiFi quote failed"):
        _run(_lifi(handler), QuoteRequest.exact_in(DEBT, COLLATERAL, 839, 10))


def test_lifi_missing_transaction_data():
    step = {**LIFI_STEP, "transactionRequest": {"to": SWAP_TARGET}}

    def handler(request):
        return httpx.Response(200, json=step)

    with pytest.raises(QuoteError, match="transaction data"):
        _run(_lifi(handler), QuoteRequest.exact_in(DEBT, COLLATERAL, 839, 10))


def test_transport_errors_are_retried():
    attempts = {"count": 0}

    def handler(request):
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=LIFI_STEP)

    quote = _run(_lifi(handler, retry_attempts=2), QuoteRequest.exact_in(DEBT, COLLATERAL, 839, 10))
    assert quote.out == 880
    assert attempts["count"] == 2


def test_velora_exact_in_sell():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=VELORA_SELL)

    quote = _run(_velora(handler), QuoteRequest.exact_in(COLLATERAL, DEBT, 172, 100))

    params = seen["params"]
    assert seen["path"] == "/swap"
    assert params["side"] == "SELL"
    assert params["amount"] == "172"
    assert params["srcDecimals"] == "18"
    assert params["destDecimals"] == "6"
    assert params["slippage"] == "100"
    assert params["version"] == "6.2"
    assert params["network"] == "8453"
    assert params["userAddress"] == ROUTER
    assert params["receiver"] == ROUTER

    assert quote.out == 350
    assert quote.min_out == 346
    assert quote.amount_in == 172
    assert quote.approval_target == SPENDER
    assert quote.calls[0].data == "0xfeed"


def test_velora_exact_out_buy():
    seen = {}
    payload = {
        "priceRoute": {**VELORA_SELL["priceRoute"], "srcAmount": "180", "destAmount": "300", "side": "BUY"},
        "txParams": VELORA_SELL["txParams"],
    }

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=payload)

    quote = _run(_velora(handler), QuoteRequest.exact_out(COLLATERAL, DEBT, 300, 100))

    assert seen["params"]["side"] == "BUY"
    assert seen["params"]["amount"] == "300"
    assert quote.amount_in == 180
    assert quote.max_in == 182
    assert quote.out == 300
    assert quote.min_out == 300


def test_velora_exact_out_max_in_covers_slippage_headroom():
    payload = {
        "priceRoute": {**VELORA_SELL["priceRoute"], "srcAmount": "171", "destAmount": "300", "side": "BUY"},
        "txParams": VELORA_SELL["txParams"],
    }

    def handler(request):
        return httpx.Response(200, json=payload)

    quote = _run(_velora(handler), QuoteRequest.exact_out(COLLATERAL, DEBT, 300, 100))

    assert quote.max_in == 173
    assert quote.max_in * 10_000 >= 171 * 10_100


def test_velora_native_token_maps_to_zero_address():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=VELORA_SELL)

    quote = _run(_velora(handler), QuoteRequest.exact_in(NATIVE_TOKEN_SENTINEL, DEBT, 172, 100))

    assert seen["params"]["srcToken"] == ZERO_ADDRESS
    assert seen["params"]["srcDecimals"] == "18"
    assert quote.wants_native_in is True


def test_velora_error_body():
    def handler(request):
        return httpx.Response(200, json={"error": "No routes found with enough liquidity"})

    with pytest.raises(QuoteError, match="No routes found"):
        _run(_velora(handler), QuoteRequest.exact_in(COLLATERAL, DEBT, 172, 100))


def test_velora_unknown_decimals():
    def handler(request):
        raise AssertionError("no request expected")

    other = "0x8888888888888888888888888888888888888888"
    with pytest.raises(QuoteError, match="Unknown decimals"):
        _run(_velora(handler), QuoteRequest.exact_in(other, DEBT, 172, 100))


STATIC_SNAPSHOT = {
    "inToken": DEBT,
    "outToken": COLLATERAL,
    "amountIn": "839",
    "out": "880",
    "minOut": "879",
    "approvalTarget": SPENDER,
    "calls": [{"to": SWAP_TARGET, "data": "0x01", "value": "0"}],
}


def test_static_source_replays_snapshot():
    source = StaticQuoteSource.from_payload(STATIC_SNAPSHOT)
    quote = _run(source, QuoteRequest.exact_in(DEBT, COLLATERAL, 839, 10))
    assert (quote.out, quote.min_out) == (880, 879)
    assert quote.calls[0].target == SWAP_TARGET
    assert quote.source == "static"


def test_static_source_enforces_tokens():
    source = StaticQuoteSource.from_payload(STATIC_SNAPSHOT)
    with pytest.raises(QuoteError):
        _run(source, QuoteRequest.exact_in(COLLATERAL, DEBT, 839, 10))

    relaxed = StaticQuoteSource.from_payload(STATIC_SNAPSHOT, enforce=False)
    assert _run(relaxed, QuoteRequest.exact_in(COLLATERAL, DEBT, 839, 10)).out == 880


def test_static_source_answers_requotes_at_other_amounts():
    source = StaticQuoteSource.from_payload(STATIC_SNAPSHOT)

    first = _run(source, QuoteRequest.exact_in(DEBT, COLLATERAL, 950, 10))
    second = _run(source, QuoteRequest.exact_in(DEBT, COLLATERAL, 839, 10))

    assert first.out == second.out == 880
    assert second.amount_in == 839


def test_static_source_can_pin_the_recorded_amount():
    source = StaticQuoteSource.from_payload(STATIC_SNAPSHOT, match_amount=True)
    with pytest.raises(QuoteError, match="amount"):
        _run(source, QuoteRequest.exact_in(DEBT, COLLATERAL, 840, 10))
    assert _run(source, QuoteRequest.exact_in(DEBT, COLLATERAL, 839, 10)).out == 880


def test_static_source_replays_recorded_lifi_step(tmp_path):
    path = tmp_path / "quote.json"
    path.write_text(json.dumps({"kind": "lifi", "step": LIFI_STEP}))

    quote = _run(StaticQuoteSource.from_file(path), QuoteRequest.exact_in(DEBT, COLLATERAL, 839, 10))

    assert quote.out == 880
    assert quote.approval_target == SPENDER


def test_static_source_invalid_snapshot(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(QuoteError):
        StaticQuoteSource.from_file(path)


def test_factory_builds_configured_sources(tmp_path):
    from core.clients.quotes import create_quote_source
    from core.settings.config import Settings

    app_settings = Settings(TOKEN_DECIMALS={COLLATERAL: 18}, LIFI_API_KEY="abc")

    lifi = create_quote_source("lifi", app_settings)
    assert isinstance(lifi, LifiQuoteSource)
    assert lifi.chain_id == 8453
    assert lifi.from_address == app_settings.chain_config.leverage_router
    assert lifi.headers["x-lifi-api-key"] == "abc"

    velora = create_quote_source("Velora", app_settings)
    assert isinstance(velora, VeloraQuoteSource)
    assert velora.decimals_for(COLLATERAL) == 18

    with pytest.raises(ValueError, match="STATIC_QUOTE_PATH"):
        create_quote_source("static", app_settings)

    path = tmp_path / "quote.json"
    path.write_text(json.dumps(STATIC_SNAPSHOT))
    static = create_quote_source("static", Settings(STATIC_QUOTE_PATH=str(path)))
    assert isinstance(static, StaticQuoteSource)
    assert static.match_amount is False
    requote = _run(static, QuoteRequest.exact_in(DEBT, COLLATERAL, 950, 10))
    assert requote.out == 880

    with pytest.raises(ValueError, match="Unknown quote source"):
        create_quote_source("oneinch", app_settings)
