"""Application settings and configuration."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / ".poolkeeper"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "PoolKeeper AMM Control Plane"
    app_version: str = "0.1.0"

    # Ledger access
    network: str = "testnet"
    operator_id: Optional[str] = None
    operator_key: Optional[str] = None
    mirror_node_url: str = "https://testnet.mirrornode.hedera.com"
    ledger_gateway_url: Optional[str] = None
    ledger_backend: Literal["stub", "http"] = "stub"
    remote_timeout_seconds: float = Field(default=10.0, gt=0)

    # Persistence
    data_dir: Optional[Path] = None
    database_url: Optional[str] = None
    registry_path: Optional[Path] = None
    pool_secrets_path: Optional[Path] = None

    # Pool behavior
    reserve_cache_ttl_ms: int = Field(default=1200, ge=0)
    pending_ttl_seconds: int = Field(default=180, gt=0)
    tx_valid_duration_seconds: int = Field(default=120, gt=0)
    max_transaction_fee: int = Field(default=500_000_000, ge=0)
    faucet_max_transaction_fee: int = Field(default=1_000_000_000, ge=0)
    tx_memo_prefix: str = "HashSwap"
    default_fee_bps: int = Field(default=30, ge=0, le=10_000)
    default_slippage_bps: int = Field(default=50, ge=0, le=10_000)
    default_token_decimals: int = Field(default=6, ge=0, le=18)

    # Faucet
    faucet_amount_tokens: int = Field(default=20, gt=0)
    faucet_cooldown_seconds: int = Field(default=24 * 60 * 60, ge=0)

    # Server
    host: str = "0.0.0.0"
    port: int = 8787
    log_level: str = "INFO"

    @model_validator(mode="after")
    def check_pending_outlives_submission(self) -> "Settings":
        """Pending entries must survive a full validity window plus one remote call."""
        if self.pending_ttl_seconds <= self.tx_valid_duration_seconds + self.remote_timeout_seconds:
            raise ValueError(
                "pending_ttl_seconds must exceed tx_valid_duration_seconds + remote_timeout_seconds"
            )
        return self

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "poolkeeper.db"
        return f"sqlite:///{db_path}"

    @property
    def faucet_cooldown_ms(self) -> int:
        return self.faucet_cooldown_seconds * 1000


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
