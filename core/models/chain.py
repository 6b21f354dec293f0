"""Typed chain/network models and default leverage deployment registry."""

from __future__ import annotations

import re
from typing import Final
from urllib.parse import urlparse

from pydantic import BaseModel, field_validator

ADDRESS_REGEX: Final[re.Pattern[str]] = re.compile(r"^0x[a-fA-F0-9]{40}$")

NATIVE_TOKEN_SENTINEL: Final[str] = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
ZERO_ADDRESS: Final[str] = "0x0000000000000000000000000000000000000000"


def is_native_token(address: str | None) -> bool:
    if not address:
        return False
    return address.lower() in {NATIVE_TOKEN_SENTINEL.lower(), ZERO_ADDRESS}


class ChainConfig(BaseModel):
    """Runtime chain configuration for leverage token planning."""

    name: str
    chain_id: int
    leverage_manager: str
    leverage_router: str
    wrapped_native: str
    explorer_base_url: str | None = None
    is_testnet: bool = False

    model_config = {
        "frozen": True,
    }

    @field_validator("leverage_manager", "leverage_router", "wrapped_native")
    @classmethod
    def validate_address(cls, value: str) -> str:
        if not ADDRESS_REGEX.match(value):
            raise ValueError(f"Invalid Ethereum address: {value}")
        return value

    @field_validator("explorer_base_url")
    @classmethod
    def validate_explorer_base_url(cls, value: str | None) -> str | None:
        if value is None:
            return value
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(f"Invalid explorer URL: {value}")
        return value.rstrip("/")

    def explorer_address_url(self, address: str) -> str | None:
        if not self.explorer_base_url:
            return None
        return f"{self.explorer_base_url}/address/{address}"


LEVERAGE_CHAIN_CONFIGS: dict[str, ChainConfig] = {
    "base": ChainConfig(
        name="base",
        chain_id=8453,
        leverage_manager="0x38Ba21C6Bf31dF1b1798FCEd07B4e9b07C5ec3a8",
        leverage_router="0xDbA92fC3dc10a17b96b6E807a908155C389A887C",
        wrapped_native="0x4200000000000000000000000000000000000006",
        explorer_base_url="https://basescan.org",
    ),
}

CHAIN_KEY_BY_ID: dict[int, str] = {config.chain_id: key for key, config in LEVERAGE_CHAIN_CONFIGS.items()}
