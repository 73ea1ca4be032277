"""Client configuration using pydantic-settings.

Endpoints, network selection and gas/fee constants for both legs of a swap.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Bitcoin
    # ======================
    bitcoin_network: Literal["mainnet", "testnet"] = Field(
        default="testnet", description="UTXO chain network"
    )
    insight_mainnet_url: str = Field(
        default="https://insight.bitpay.com/api", description="Insight explorer (mainnet)"
    )
    insight_testnet_url: str = Field(
        default="https://test-insight.bitpay.com/api", description="Insight explorer (testnet)"
    )
    blockcypher_api_url: str = Field(
        default="https://api.blockcypher.com/v1/btc", description="BlockCypher BTC API root"
    )
    blockcypher_api_token: Optional[str] = Field(default=None, description="BlockCypher API token")
    fee_oracle_url: str = Field(
        default="https://mempool.space/api/v1/fees/recommended",
        description="Secondary fee oracle (fastestFee/halfHourFee/hourFee)",
    )
    omni_explorer_url: str = Field(
        default="https://api.omniexplorer.info/v1/address/addr/", description="Omni explorer"
    )
    btc_fee_value: int = Field(default=1000, description="Fixed funding fee in satoshis")
    http_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")

    # ======================
    # Ethereum
    # ======================
    eth_rpc_url: str = Field(default="https://rpc.sepolia.org", description="Ethereum RPC URL")
    swap_contract_address: str = Field(default="", description="Deployed swap contract")
    token_address: str = Field(default="", description="ERC20 token locked in swaps")
    token_decimals: int = Field(default=18, description="ERC20 token decimals")
    gas_limit: int = Field(default=200_000, description="Gas cap used while estimating")
    gas_price: int = Field(default=2_000_000_000, description="Initial gas price in wei")
    gas_price_margin: int = Field(
        default=1_300_000_000, description="Added on top of the network gas price"
    )
    fallback_gas_price: int = Field(
        default=15_000_000_000, description="Used when the gas price query fails"
    )

    # ======================
    # Polling
    # ======================
    poll_delay: float = Field(default=5.0, description="Seconds between polls")
    poll_retries: int = Field(default=9, description="Retries for bounded polls")

    debug: bool = Field(default=False, description="Enable debug logging")

    @property
    def is_mainnet(self) -> bool:
        """Check if the UTXO leg runs on mainnet."""
        return self.bitcoin_network == "mainnet"

    @property
    def insight_url(self) -> str:
        return self.insight_mainnet_url if self.is_mainnet else self.insight_testnet_url

    @property
    def blockcypher_url(self) -> str:
        """BlockCypher root for the configured network."""
        suffix = "main" if self.is_mainnet else "test3"
        return f"{self.blockcypher_api_url.rstrip('/')}/{suffix}"

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "bitcoin": {
                "network": self.bitcoin_network,
                "insight": self.insight_url,
                "blockcypher": self.blockcypher_url,
                "blockcypher_token": "***" if self.blockcypher_api_token else "(not set)",
                "fee_oracle": self.fee_oracle_url,
                "fee_value": self.btc_fee_value,
            },
            "ethereum": {
                "rpc": self.eth_rpc_url,
                "swap_contract": self.swap_contract_address or "(not set)",
                "token": self.token_address or "(not set)",
                "token_decimals": self.token_decimals,
                "gas_limit": self.gas_limit,
            },
            "polling": {
                "delay": self.poll_delay,
                "retries": self.poll_retries,
            },
            "debug": self.debug,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
