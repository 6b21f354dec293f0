"""Replay a recorded quote, for tests and fork runs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import ValidationError
from web3 import Web3

from core.clients.quotes.base import QuoteError
from core.clients.quotes.lifi import LifiQuoteSource
from core.models.quotes import LifiStep, StaticQuoteSnapshot
from core.planning.types import Call, Quote, QuoteIntent, QuoteRequest


class StaticQuoteSource:
    """Return the same recorded quote for every matching request.

    With ``enforce`` set, requests for other tokens are rejected instead of being
    answered with stale numbers. The recorded ``amountIn`` is only checked with
    ``match_amount``: planners re-quote at adjusted amounts, so a plan built from a
    snapshot needs the same answer for every amount.
    """

    name = "static"
    supports_exact_out = False

    def __init__(
        self,
        snapshot: Union[StaticQuoteSnapshot, LifiStep],
        *,
        enforce: bool = True,
        match_amount: bool = False,
    ) -> None:
        self.snapshot = snapshot
        self.enforce = enforce
        self.match_amount = match_amount

    @classmethod
    def from_payload(
        cls, payload: Dict[str, Any], *, enforce: bool = True, match_amount: bool = False
    ) -> "StaticQuoteSource":
        try:
            if payload.get("kind") == "lifi":
                return cls(LifiStep.model_validate(payload["step"]), enforce=False)
            return cls(StaticQuoteSnapshot.model_validate(payload), enforce=enforce, match_amount=match_amount)
        except (KeyError, ValidationError) as exc:
            raise QuoteError(f"Invalid static quote snapshot: {exc}") from exc

    @classmethod
    def from_file(
        cls, path: Union[str, Path], *, enforce: bool = True, match_amount: bool = False
    ) -> "StaticQuoteSource":
        try:
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise QuoteError(f"Cannot load static quote snapshot {path}: {exc}") from exc
        return cls.from_payload(payload, enforce=enforce, match_amount=match_amount)

    def _check_request(self, snapshot: StaticQuoteSnapshot, request: QuoteRequest) -> None:
        if snapshot.in_token and snapshot.in_token.lower() != request.in_token.lower():
            raise QuoteError(f"Static quote is for {snapshot.in_token}, requested {request.in_token}")
        if snapshot.out_token and snapshot.out_token.lower() != request.out_token.lower():
            raise QuoteError(f"Static quote is for {snapshot.out_token}, requested {request.out_token}")
        if self.match_amount and snapshot.amount_in is not None and snapshot.amount_in != request.amount_in:
            raise QuoteError(f"Static quote is for amount {snapshot.amount_in}, requested {request.amount_in}")

    async def quote(self, request: QuoteRequest) -> Quote:
        if request.intent != QuoteIntent.EXACT_IN:
            raise QuoteError("Static quote source only supports exactIn quotes")

        if isinstance(self.snapshot, LifiStep):
            return LifiQuoteSource.map_step(self.snapshot, request)

        snapshot = self.snapshot
        if self.enforce:
            self._check_request(snapshot, request)
        calls = tuple(
            Call(target=Web3.to_checksum_address(call.to), data=call.data or "0x", value=call.value)
            for call in snapshot.calls
            if call.to
        )
        return Quote(
            out=snapshot.out,
            min_out=snapshot.min_out if snapshot.min_out is not None else snapshot.out,
            amount_in=request.amount_in,
            max_in=snapshot.max_in,
            approval_target=Web3.to_checksum_address(snapshot.approval_target),
            calls=calls,
            wants_native_in=snapshot.wants_native_in,
            source=self.name,
        )
