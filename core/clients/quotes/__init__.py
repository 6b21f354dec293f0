"""Quote sources and the factory that builds them from settings."""

from __future__ import annotations

from typing import Optional

from core.clients.quotes.base import QuoteError, QuoteSource
from core.clients.quotes.lifi import LifiQuoteSource
from core.clients.quotes.static import StaticQuoteSource
from core.clients.quotes.velora import VeloraQuoteSource
from core.settings.config import Settings, settings as default_settings

__all__ = [
    "LifiQuoteSource",
    "QuoteError",
    "QuoteSource",
    "StaticQuoteSource",
    "VeloraQuoteSource",
    "create_quote_source",
]


def create_quote_source(kind: str, app_settings: Optional[Settings] = None) -> QuoteSource:
    """Build the quote source named ``kind`` ("lifi", "velora" or "static")."""
    app_settings = app_settings or default_settings
    chain = app_settings.chain_config
    key = (kind or "").strip().lower()

    if key == "lifi":
        return LifiQuoteSource(
            chain_id=chain.chain_id,
            from_address=chain.leverage_router,
            base_url=app_settings.lifi_base_url,
            api_key=app_settings.lifi_api_key,
            integrator=app_settings.lifi_integrator,
            order=app_settings.lifi_order,
            allow_bridges="none",
            timeout=app_settings.quote_timeout,
            retry_attempts=app_settings.quote_retry_attempts,
            retry_delay=app_settings.quote_retry_delay,
        )
    if key == "velora":
        return VeloraQuoteSource(
            chain_id=chain.chain_id,
            router=chain.leverage_router,
            token_decimals=app_settings.token_decimals,
            base_url=app_settings.velora_base_url,
            partner=app_settings.velora_partner,
            timeout=app_settings.quote_timeout,
            retry_attempts=app_settings.quote_retry_attempts,
            retry_delay=app_settings.quote_retry_delay,
        )
    if key == "static":
        if not app_settings.static_quote_path:
            raise ValueError("STATIC_QUOTE_PATH is required for the static quote source")
        return StaticQuoteSource.from_file(app_settings.static_quote_path)
    raise ValueError(f"Unknown quote source: {kind}")
