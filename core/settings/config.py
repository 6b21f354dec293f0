"""
Configuration management for the leverage planner.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Dict, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.models.chain import CHAIN_KEY_BY_ID, LEVERAGE_CHAIN_CONFIGS, ChainConfig

PROJECT_ROOT = Path(__file__).resolve().parents[2]

CHAIN_CONFIGS: dict[str, ChainConfig] = LEVERAGE_CHAIN_CONFIGS
CHAIN_BY_ID: dict[int, str] = dict(CHAIN_KEY_BY_ID)


def get_chain_config(chain: str | int | None) -> ChainConfig | None:
    """Return chain configuration by chain name or chain id."""
    if chain is None:
        return None
    if isinstance(chain, int):
        chain_key = CHAIN_BY_ID.get(chain)
        return CHAIN_CONFIGS.get(chain_key) if chain_key else None
    return CHAIN_CONFIGS.get(chain.strip().lower())


_ACTION_DATA_COMPONENTS: list[dict[str, str]] = [
    {"internalType": "uint256", "name": "collateral", "type": "uint256"},
    {"internalType": "uint256", "name": "debt", "type": "uint256"},
    {"internalType": "uint256", "name": "shares", "type": "uint256"},
    {"internalType": "uint256", "name": "tokenFee", "type": "uint256"},
    {"internalType": "uint256", "name": "treasuryFee", "type": "uint256"},
]

LEVERAGE_MANAGER_ABI: list[dict[str, Any]] = [
    {
        "inputs": [
            {"internalType": "contract ILeverageToken", "name": "token", "type": "address"},
            {"internalType": "uint256", "name": "collateral", "type": "uint256"},
        ],
        "name": "previewDeposit",
        "outputs": [
            {
                "components": _ACTION_DATA_COMPONENTS,
                "internalType": "struct ActionData",
                "name": "",
                "type": "tuple",
            }
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "contract ILeverageToken", "name": "token", "type": "address"},
            {"internalType": "uint256", "name": "shares", "type": "uint256"},
        ],
        "name": "previewRedeem",
        "outputs": [
            {
                "components": _ACTION_DATA_COMPONENTS,
                "internalType": "struct ActionData",
                "name": "",
                "type": "tuple",
            }
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "contract ILeverageToken", "name": "token", "type": "address"},
            {"internalType": "uint256", "name": "shares", "type": "uint256"},
        ],
        "name": "convertToAssets",
        "outputs": [{"internalType": "uint256", "name": "equityInCollateralAsset", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "contract ILeverageToken", "name": "token", "type": "address"}],
        "name": "getLeverageTokenCollateralAsset",
        "outputs": [{"internalType": "contract IERC20", "name": "collateralAsset", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "contract ILeverageToken", "name": "token", "type": "address"}],
        "name": "getLeverageTokenDebtAsset",
        "outputs": [{"internalType": "contract IERC20", "name": "debtAsset", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
]

ERC20_APPROVE_ABI: list[dict[str, Any]] = [
    {
        "inputs": [
            {"internalType": "address", "name": "spender", "type": "address"},
            {"internalType": "uint256", "name": "amount", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

WRAPPED_NATIVE_ABI: list[dict[str, Any]] = [
    {
        "inputs": [{"internalType": "uint256", "name": "wad", "type": "uint256"}],
        "name": "withdraw",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        extra="ignore",
        env_ignore_empty=True,
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
    )

    # API Configuration
    app_name: str = "Leverage Planner"
    app_version: str = "1.0.0"
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    api_host: str = Field(default="0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(default=8000, validation_alias="API_PORT")

    # Logging Configuration
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str = Field(default=str(PROJECT_ROOT / "logs" / "planner.log"), validation_alias="LOG_FILE")
    log_redis_enabled: bool = Field(default=False, validation_alias="LOG_REDIS_ENABLED")
    log_redis_list_key: str = Field(default="logs:planner", validation_alias="LOG_REDIS_LIST_KEY")
    log_redis_max_entries: int = Field(default=5000, validation_alias="LOG_REDIS_MAX_ENTRIES")

    # Redis Configuration
    redis_host: str = Field(default="localhost", validation_alias="REDIS_HOST")
    redis_port: int = Field(default=6379, validation_alias="REDIS_PORT")
    redis_db: int = Field(default=0, validation_alias="REDIS_DB")

    # Chain / RPC Configuration
    chain: str = Field(default="base", validation_alias="LEVERAGE_CHAIN")
    rpc_url: str = Field(default="https://mainnet.base.org", validation_alias="RPC_URL")
    rpc_timeout: float = Field(default=20.0, validation_alias="RPC_TIMEOUT")
    leverage_manager_address: Optional[str] = Field(default=None, validation_alias="LEVERAGE_MANAGER_ADDRESS")
    preview_block_tag: str = Field(default="latest", validation_alias="PREVIEW_BLOCK_TAG")
    router_version: Literal["v1", "v2"] = Field(default="v2", validation_alias="ROUTER_VERSION")

    # Planning defaults (basis points)
    default_share_slippage_bps: int = Field(default=100, ge=0, validation_alias="DEFAULT_SHARE_SLIPPAGE_BPS")
    default_swap_slippage_bps: int = Field(default=10, ge=1, validation_alias="DEFAULT_SWAP_SLIPPAGE_BPS")
    default_flash_loan_adjustment_bps: int = Field(
        default=100, ge=0, validation_alias="DEFAULT_FLASH_LOAN_ADJUSTMENT_BPS"
    )
    default_collateral_slippage_bps: int = Field(
        default=100, ge=0, validation_alias="DEFAULT_COLLATERAL_SLIPPAGE_BPS"
    )
    default_collateral_swap_adjustment_bps: int = Field(
        default=100, ge=0, validation_alias="DEFAULT_COLLATERAL_SWAP_ADJUSTMENT_BPS"
    )

    # Quote sources
    mint_quote_source: Literal["lifi", "velora", "static"] = Field(default="lifi", validation_alias="MINT_QUOTE_SOURCE")
    redeem_quote_source: Literal["lifi", "velora", "static"] = Field(
        default="velora", validation_alias="REDEEM_QUOTE_SOURCE"
    )
    static_quote_path: Optional[str] = Field(default=None, validation_alias="STATIC_QUOTE_PATH")
    lifi_base_url: str = Field(default="https://li.quest", validation_alias="LIFI_BASE_URL")
    lifi_api_key: Optional[str] = Field(default=None, validation_alias="LIFI_API_KEY")
    lifi_integrator: str = Field(default="leverage-planner", validation_alias="LIFI_INTEGRATOR")
    lifi_order: Literal["CHEAPEST", "FASTEST"] = Field(default="CHEAPEST", validation_alias="LIFI_ORDER")
    velora_base_url: str = Field(default="https://api.paraswap.io", validation_alias="VELORA_BASE_URL")
    velora_partner: Optional[str] = Field(default=None, validation_alias="VELORA_PARTNER")
    token_decimals: Dict[str, int] = Field(default_factory=dict, validation_alias="TOKEN_DECIMALS")
    quote_timeout: float = Field(default=15.0, validation_alias="QUOTE_TIMEOUT")
    quote_retry_attempts: int = Field(default=2, ge=1, validation_alias="QUOTE_RETRY_ATTEMPTS")
    quote_retry_delay: float = Field(default=0.5, ge=0, validation_alias="QUOTE_RETRY_DELAY")

    CHAIN_CONFIGS: ClassVar[dict[str, ChainConfig]] = CHAIN_CONFIGS

    @field_validator("token_decimals")
    @classmethod
    def normalize_token_decimals(cls, value: Dict[str, int]) -> Dict[str, int]:
        return {address.lower(): int(decimals) for address, decimals in value.items()}

    @property
    def chain_config(self) -> ChainConfig:
        config = get_chain_config(self.chain)
        if config is None:
            raise ValueError(f"Unsupported chain: {self.chain}")
        return config

    @property
    def leverage_manager(self) -> str:
        return self.leverage_manager_address or self.chain_config.leverage_manager


# Global settings instance
settings = Settings()
