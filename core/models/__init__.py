"""
Pydantic models for chain deployments and aggregator responses.
"""
from core.models.chain import (
    CHAIN_KEY_BY_ID,
    LEVERAGE_CHAIN_CONFIGS,
    NATIVE_TOKEN_SENTINEL,
    ZERO_ADDRESS,
    ChainConfig,
    is_native_token,
)
from core.models.quotes import (
    LifiEstimate,
    LifiStep,
    StaticQuoteSnapshot,
    TransactionRequest,
    VeloraPriceRoute,
    VeloraSwapResponse,
)

__all__ = [
    "CHAIN_KEY_BY_ID",
    "LEVERAGE_CHAIN_CONFIGS",
    "NATIVE_TOKEN_SENTINEL",
    "ZERO_ADDRESS",
    "ChainConfig",
    "LifiEstimate",
    "LifiStep",
    "StaticQuoteSnapshot",
    "TransactionRequest",
    "VeloraPriceRoute",
    "VeloraSwapResponse",
    "is_native_token",
]
