"""Velora (ParaSwap) market API quote source."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx
from pydantic import ValidationError
from web3 import Web3

from core.clients.base_client import BaseHTTPClient
from core.clients.quotes.base import QuoteError, normalize_native_to_zero
from core.logging import log
from core.models.chain import is_native_token
from core.models.quotes import VeloraSwapResponse
from core.planning.slippage import apply_slippage_ceiling, apply_slippage_floor
from core.planning.types import Call, Quote, QuoteIntent, QuoteRequest

NATIVE_DECIMALS = 18


class VeloraQuoteSource(BaseHTTPClient):
    """Quotes ``GET /swap`` with ``side=SELL`` for exactIn and ``side=BUY`` for exactOut."""

    name = "velora"
    supports_exact_out = True

    def __init__(
        self,
        *,
        chain_id: int,
        router: str,
        token_decimals: Mapping[str, int],
        from_address: Optional[str] = None,
        base_url: str = "https://api.paraswap.io",
        partner: Optional[str] = None,
        timeout: float = 15.0,
        retry_attempts: int = 2,
        retry_delay: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(
            {
                "base_url": base_url,
                "timeout": timeout,
                "retry_attempts": retry_attempts,
                "retry_delay": retry_delay,
                "transport": transport,
            }
        )
        self.chain_id = chain_id
        self.router = Web3.to_checksum_address(router)
        self.from_address = Web3.to_checksum_address(from_address or router)
        self.token_decimals = {address.lower(): int(decimals) for address, decimals in token_decimals.items()}
        self.partner = partner

    def decimals_for(self, token: str) -> int:
        if is_native_token(token):
            return NATIVE_DECIMALS
        try:
            return self.token_decimals[token.lower()]
        except KeyError as exc:
            raise QuoteError(f"Unknown decimals for token {token}") from exc

    def build_params(self, request: QuoteRequest) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "srcToken": normalize_native_to_zero(request.in_token),
            "destToken": normalize_native_to_zero(request.out_token),
            "network": str(self.chain_id),
            "userAddress": self.from_address,
            "receiver": self.router,
            "version": "6.2",
            "srcDecimals": str(self.decimals_for(request.in_token)),
            "destDecimals": str(self.decimals_for(request.out_token)),
            "slippage": str(request.slippage_bps),
        }
        if request.intent == QuoteIntent.EXACT_OUT:
            params["side"] = "BUY"
            params["amount"] = str(request.amount_out)
        else:
            params["side"] = "SELL"
            params["amount"] = str(request.amount_in)
        if self.partner:
            params["partner"] = self.partner
        return params

    async def quote(self, request: QuoteRequest) -> Quote:
        try:
            response = await self._request_with_retry(
                "GET", f"{self.base_url}/swap", params=self.build_params(request)
            )
            payload = response.json()
        except httpx.HTTPError as exc:
            raise QuoteError(f"Velora quote failed: {exc}") from exc
        except ValueError as exc:
            raise QuoteError(f"Velora quote returned invalid JSON: {exc}") from exc

        if isinstance(payload, dict) and payload.get("error"):
            raise QuoteError(f"Velora quote failed: {payload['error']}")
        try:
            swap = VeloraSwapResponse.model_validate(payload)
        except ValidationError as exc:
            raise QuoteError(f"Velora quote returned an invalid payload: {exc}") from exc

        return self.map_response(swap, request)

    def map_response(self, swap: VeloraSwapResponse, request: QuoteRequest) -> Quote:
        route = swap.price_route
        approval_target = route.token_transfer_proxy or route.contract_address
        if not approval_target:
            raise QuoteError("Velora quote missing contract address")
        if not swap.tx_params.data:
            raise QuoteError("Velora quote missing transaction data")
        target = swap.tx_params.to or route.contract_address
        if not target:
            raise QuoteError("Velora quote missing transaction target")

        out = route.dest_amount
        if request.intent == QuoteIntent.EXACT_OUT:
            amount_in = route.src_amount
            max_in = apply_slippage_ceiling(amount_in, request.slippage_bps)
            min_out = out
        else:
            amount_in = request.amount_in
            max_in = amount_in
            min_out = apply_slippage_floor(out, request.slippage_bps)

        log.debug(
            f"Velora quote side={'BUY' if request.intent == QuoteIntent.EXACT_OUT else 'SELL'} "
            f"amount_in={amount_in} max_in={max_in} out={out} min_out={min_out}"
        )
        return Quote(
            out=out,
            min_out=min_out,
            amount_in=amount_in,
            max_in=max_in,
            approval_target=Web3.to_checksum_address(approval_target),
            calls=(Call(target=Web3.to_checksum_address(target), data=swap.tx_params.data, value=swap.tx_params.value),),
            wants_native_in=is_native_token(request.in_token),
            source=self.name,
        )
