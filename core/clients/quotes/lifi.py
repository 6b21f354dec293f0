"""LiFi aggregator quote source (exact-in only)."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError
from web3 import Web3

from core.clients.base_client import BaseHTTPClient
from core.clients.quotes.base import QuoteError, bps_to_decimal_string, normalize_token
from core.logging import log
from core.models.quotes import LifiStep
from core.planning.types import Call, Quote, QuoteIntent, QuoteRequest


class LifiQuoteSource(BaseHTTPClient):
    """Same-chain swaps quoted through ``GET /v1/quote``.

    The router executes the swap, so it is used as ``fromAddress``.
    """

    name = "lifi"
    supports_exact_out = False

    def __init__(
        self,
        *,
        chain_id: int,
        from_address: str,
        base_url: str = "https://li.quest",
        api_key: Optional[str] = None,
        integrator: Optional[str] = None,
        order: str = "CHEAPEST",
        allow_bridges: Optional[str] = None,
        timeout: float = 15.0,
        retry_attempts: int = 2,
        retry_delay: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"content-type": "application/json"}
        if api_key:
            headers["x-lifi-api-key"] = api_key
        super().__init__(
            {
                "base_url": base_url,
                "timeout": timeout,
                "retry_attempts": retry_attempts,
                "retry_delay": retry_delay,
                "headers": headers,
                "transport": transport,
            }
        )
        self.chain_id = chain_id
        self.from_address = Web3.to_checksum_address(from_address)
        self.integrator = integrator
        self.order = order
        self.allow_bridges = allow_bridges

    def build_params(self, request: QuoteRequest) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "fromChain": str(self.chain_id),
            "toChain": str(self.chain_id),
            "fromToken": normalize_token(request.in_token),
            "toToken": normalize_token(request.out_token),
            "fromAmount": str(request.amount_in),
            "fromAddress": self.from_address,
            "slippage": bps_to_decimal_string(request.slippage_bps),
            "order": self.order,
        }
        if self.integrator:
            params["integrator"] = self.integrator
        if self.allow_bridges:
            params["allowBridges"] = self.allow_bridges
        return params

    async def quote(self, request: QuoteRequest) -> Quote:
        if request.intent != QuoteIntent.EXACT_IN:
            raise QuoteError("LiFi quote source only supports exactIn quotes")

        try:
            response = await self._request_with_retry(
                "GET", f"{self.base_url}/v1/quote", params=self.build_params(request)
            )
            step = LifiStep.model_validate(response.json())
        except httpx.HTTPError as exc:
            raise QuoteError(f"LiFi quote failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise QuoteError(f"LiFi quote returned an invalid payload: {exc}") from exc

        return self.map_step(step, request)

    @staticmethod
    def map_step(step: LifiStep, request: QuoteRequest) -> Quote:
        tx = step.transaction_request
        estimate = step.estimate
        approval_target = (estimate.approval_address if estimate else None) or (tx.to if tx else None)
        if not approval_target:
            raise QuoteError("LiFi quote missing approval target")
        if tx is None or not tx.data or not tx.to:
            raise QuoteError("LiFi quote missing transaction data")
        if estimate is None or estimate.to_amount is None:
            raise QuoteError("LiFi quote missing output estimate")

        out = estimate.to_amount
        min_out = estimate.to_amount_min if estimate.to_amount_min is not None else out
        log.debug(f"LiFi quote tool={step.tool} amount_in={request.amount_in} out={out} min_out={min_out}")
        return Quote(
            out=out,
            min_out=min(min_out, out),
            amount_in=request.amount_in,
            approval_target=Web3.to_checksum_address(approval_target),
            calls=(Call(target=Web3.to_checksum_address(tx.to), data=tx.data, value=tx.value),),
            wants_native_in=tx.value > 0,
            source=LifiQuoteSource.name,
        )
