"""Application configuration using pydantic-settings.

Covers the chain endpoint, the caller's wallet, the confidential token
contracts and the encryption gateway used for client-side FHE inputs.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Log level when debug is off")

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")

    # ======================
    # Safety Guards
    # ======================
    dry_run: bool = Field(
        default=True,
        description="Use simulated encryption and chain layers (no real transactions)",
    )

    # ======================
    # Chain
    # ======================
    rpc_url: str = Field(
        default="https://ethereum-sepolia-rpc.publicnode.com", description="EVM RPC URL"
    )
    expected_chain_id: int = Field(default=11155111, description="Chain the contracts live on")
    network_name: str = Field(default="Sepolia", description="Human-readable network name")
    explorer_tx_url: str = Field(
        default="https://sepolia.etherscan.io/tx/{tx_hash}",
        description="Block explorer transaction URL template",
    )

    # ======================
    # Wallet
    # ======================
    wallet_address: Optional[str] = Field(default=None, description="Caller / owner address")
    wallet_private_key: Optional[str] = Field(
        default=None,
        description="Optional local signing key (node-managed account is used when unset)",
    )

    # ======================
    # Confidential token contracts
    # ======================
    dgold_token_address: str = Field(
        default="", description="Digital Gold confidential token contract"
    )
    usdt_token_address: str = Field(
        default="", description="Confidential USDT token contract"
    )
    silver_token_address: str = Field(
        default="0x1111111111111111111111111111111111111111",
        description="Digital Silver contract (placeholder)",
    )
    platinum_token_address: str = Field(
        default="0x2222222222222222222222222222222222222222",
        description="Digital Platinum contract (placeholder)",
    )

    # ======================
    # Encryption gateway
    # ======================
    encryption_gateway_url: str = Field(
        default="http://localhost:8545/fhe", description="Encryption gateway base URL"
    )
    encryption_timeout: float = Field(
        default=60.0, description="Seconds to wait for an encrypt/decrypt response"
    )

    # ======================
    # Transaction confirmation
    # ======================
    confirmation_depth: int = Field(default=1, ge=1, description="Blocks required for finality")
    confirmation_timeout: float = Field(
        default=120.0, description="Maximum seconds to wait for confirmation"
    )
    confirmation_poll_interval: float = Field(
        default=2.0, description="Seconds between receipt polls"
    )
    confirmation_read_retries: int = Field(
        default=3, description="Transient read failures tolerated while watching"
    )

    # ======================
    # Notifications
    # ======================
    notification_history: int = Field(
        default=50, description="Status notifications kept for the UI"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def get_token_address(self, symbol: str) -> str:
        """Get the configured contract address for an asset key."""
        address_map = {
            "DGOLD": self.dgold_token_address,
            "USDT": self.usdt_token_address,
            "SILVER": self.silver_token_address,
            "PLATINUM": self.platinum_token_address,
        }
        return address_map.get(symbol.upper(), "")

    def get_explorer_url(self, tx_hash: str) -> str:
        """Build a block explorer link for a transaction hash."""
        return self.explorer_tx_url.format(tx_hash=tx_hash)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "dry_run": self.dry_run,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "chain": {
                "rpc": self.rpc_url,
                "expected_chain_id": self.expected_chain_id,
                "network": self.network_name,
            },
            "wallet": {
                "address": self.wallet_address or "(not set)",
                "private_key": "***" if self.wallet_private_key else "(not set)",
            },
            "tokens": {
                "DGOLD": self.dgold_token_address or "(not set)",
                "USDT": self.usdt_token_address or "(not set)",
                "SILVER": self.silver_token_address,
                "PLATINUM": self.platinum_token_address,
            },
            "encryption": {
                "gateway": self.encryption_gateway_url,
                "timeout": self.encryption_timeout,
            },
            "confirmation": {
                "depth": self.confirmation_depth,
                "timeout": self.confirmation_timeout,
                "poll_interval": self.confirmation_poll_interval,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
