import os

from pathlib import Path
from typing import Any, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Ensure we pick up legacy environment variable aliases."""

        super().model_post_init(__context)

        if not self.kana_api_key:
            fallback = os.getenv("KANA_API_KEY") or os.getenv("XYRA_API_KEY")
            if fallback:
                object.__setattr__(self, "kana_api_key", fallback)

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="auto", description="json, console, or auto (console on a TTY)")

    # Kana aggregation API
    kana_api_url: str = Field(default="https://ag.kanalabs.io", description="Kana aggregator base URL")
    kana_api_key: str = Field(
        default="",
        description="Kana aggregator API key (sent as X-API-KEY)",
        validation_alias=AliasChoices("kana_api_key", "KANA_API_KEY", "XYRA_API_KEY"),
    )
    kana_timeout_seconds: float = Field(default=15.0, description="Kana request timeout")
    rate_limit_retry_after_seconds: float = Field(
        default=5.0,
        description="Back-off used on HTTP 429 when no Retry-After header is present",
    )
    rate_limit_max_retries: int = Field(
        default=10,
        ge=0,
        description="How many 429 responses to absorb before giving up",
    )

    # Circle CCTP attestation service
    circle_attestation_url: str = Field(
        default="https://iris-api.circle.com",
        description="Circle attestation (Iris) API base URL",
    )
    cctp_version: str = Field(default="v1", description="Attestation API flavour: v1 or v2")
    attestation_poll_interval_seconds: float = Field(default=3.0, description="Delay between attestation lookups")
    attestation_max_polls: int = Field(default=300, ge=1, description="Attestation lookups before timing out")

    # Submission / confirmation policy
    submission_poll_interval_seconds: float = Field(default=1.0, description="Status lookup interval")
    submission_resend_interval_seconds: float = Field(default=2.0, description="Re-broadcast interval")
    submission_max_attempts: int = Field(
        default=30,
        ge=1,
        description="Maximum broadcasts (initial + re-broadcasts) per submission",
    )
    submission_timeout_seconds: float = Field(default=90.0, description="Wall-clock ceiling per submission")
    solana_commitment: str = Field(default="confirmed", description="Commitment level treated as landed")

    # Flows
    default_slippage: float = Field(default=0.5, description="Default slippage percentage")
    flow_max_refetch_attempts: int = Field(
        default=5,
        ge=1,
        description="Fresh instructions fetched after an expired submission",
    )
    balance_sync_delay_seconds: float = Field(
        default=5.0,
        description="Pause between legs so RPC balances catch up",
    )

    # Solana
    solana_rpc_url: str = Field(default="https://api.mainnet-beta.solana.com", description="Solana RPC URL")
    solana_private_key: str = Field(default="", description="Base58 encoded Solana secret key")

    # Aptos
    aptos_node_url: str = Field(default="https://fullnode.mainnet.aptoslabs.com/v1", description="Aptos REST API")
    aptos_private_key: str = Field(default="", description="Hex encoded Aptos ed25519 private key")
    aptos_max_gas_amount: int = Field(default=4000, description="Aptos max gas amount")
    aptos_gas_unit_price: int = Field(default=100, description="Aptos gas unit price (octas)")
    aptos_expiration_seconds: int = Field(default=60, description="Aptos transaction expiration window")

    # EVM
    evm_private_key: str = Field(default="", description="Hex encoded EVM private key")
    ethereum_rpc_url: str = Field(default="", description="Ethereum RPC URL")
    polygon_rpc_url: str = Field(default="", description="Polygon RPC URL")
    bsc_rpc_url: str = Field(default="", description="BNB Smart Chain RPC URL")
    base_rpc_url: str = Field(default="", description="Base RPC URL")
    zksync_rpc_url: str = Field(default="", description="zkSync Era RPC URL")
    avalanche_rpc_url: str = Field(default="", description="Avalanche C-Chain RPC URL")
    arbitrum_rpc_url: str = Field(default="", description="Arbitrum One RPC URL")
    evm_gas_limit_multiplier: float = Field(default=1.1, description="Headroom applied to gas estimates")
    evm_fallback_gas_limit: int = Field(default=150000, description="Gas limit used when estimation fails")

    @property
    def has_kana_key(self) -> bool:
        return bool(self.kana_api_key)

    def rpc_url_for(self, network: Any) -> Optional[str]:
        """Return the configured RPC/REST endpoint for a network, if any."""
        from .core.chain_types import CHAIN_METADATA, normalize_network

        network_id = normalize_network(network)
        field_name = CHAIN_METADATA[network_id].get("rpc_setting")
        if not field_name:
            return None
        return getattr(self, field_name, "") or None

    def submission_policy(self):
        from .core.submission.models import SubmissionPolicy

        return SubmissionPolicy(
            poll_interval_seconds=self.submission_poll_interval_seconds,
            resend_interval_seconds=self.submission_resend_interval_seconds,
            max_attempts=self.submission_max_attempts,
            timeout_seconds=self.submission_timeout_seconds,
        )


# Global settings instance
settings = Settings()
