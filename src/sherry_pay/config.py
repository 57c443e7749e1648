"""
Gateway Configuration Management

Provides the explicit configuration object handed to the chain client, the
payment service, the intent responder and the HTTP server. Nothing in the
package reads the process environment on its own; callers build a
``GatewayConfig`` directly or through :meth:`GatewayConfig.from_env`.

Environment Variables (all optional):
    - RPC_URL / NEXT_PUBLIC_RPC_URL: JSON-RPC endpoint of the target chain
    - GATEWAY_CONTRACT / NEXT_PUBLIC_GATEWAY_CONTRACT: Payment gateway contract
    - MULTICALL3_ADDRESS: Batch executor (defaults to canonical Multicall3)
    - CHAIN_ID, CHAIN_NAME, CHAIN_SOURCE: Target chain id, display name, renderer alias
    - SETTLEMENT_MODE: ``transfer`` or ``approve``
    - PAYMENT_TTL_SECONDS: Payment lifetime (default 1800)
    - KV_URL / REDIS_URL: Redis-protocol key-value store
    - ENFORCE_PENDING_STATUS: Reject executing non-pending payments (default true)
    - METADATA_VARIANT: ``pending`` or ``deposit``
    - DEPOSIT_MERCHANT_ADDRESS: Merchant used by the deposit variant
    - RPC_TIMEOUT: RPC request timeout in seconds
"""

import logging
import os
from typing import List, Literal, Optional

import dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .adapters.evm.constants import (
    AVALANCHE_FUJI_CHAIN_ID,
    DEFAULT_CHAIN_NAME,
    DEFAULT_CHAIN_SOURCE,
    DEFAULT_RPC_URL,
    FUJI_SUPPORTED_TOKENS,
    MULTICALL3_ADDRESS,
    SupportedToken,
)
from .engine.exceptions import ConfigurationError
from .stores.bases import KeyValueStore
from .stores.memory import MemoryKVStore
from .stores.redis_store import RedisKVStore

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


class GatewayConfig(BaseModel):
    """
    Runtime configuration of the gateway.

    Attributes:
        rpc_url: JSON-RPC endpoint used for token reads
        gateway_address: Payment gateway contract receiving ``executePayment``
        multicall_address: Batch executor the unsigned transaction targets
        chain_id: Numeric EIP-155 chain id embedded in the transaction
        chain_name: Display name returned as ``chainId`` in execution responses
        chain_source: Chain alias written into action descriptors
        settlement_mode: ``transfer`` (token transfer + execute) or
            ``approve`` (create + optional approve + execute)
        payment_ttl_seconds: Lifetime of a payment record
        kv_url: Redis URL; the in-memory store is used when empty
        enforce_pending_status: Refuse to execute payments that are not pending
        execution_lock_seconds: TTL of the per-payment execution lock
        request_timeout: RPC timeout in seconds
        metadata_variant: Descriptor served on ``GET /api/gateway``
        deposit_merchant_address: Default merchant for deposit creations
        supported_tokens: Tokens offered by the deposit selector
        app_url, app_icon, app_title, app_description: Descriptor header fields
    """

    rpc_url: str = Field(default=DEFAULT_RPC_URL)
    gateway_address: Optional[str] = Field(default=None)
    multicall_address: str = Field(default=MULTICALL3_ADDRESS)
    chain_id: int = Field(default=AVALANCHE_FUJI_CHAIN_ID, ge=1)
    chain_name: str = Field(default=DEFAULT_CHAIN_NAME)
    chain_source: str = Field(default=DEFAULT_CHAIN_SOURCE)
    settlement_mode: Literal["transfer", "approve"] = Field(default="transfer")
    payment_ttl_seconds: int = Field(default=1800, ge=1)
    kv_url: Optional[str] = Field(default=None)
    enforce_pending_status: bool = Field(default=True)
    execution_lock_seconds: int = Field(default=30, ge=1)
    request_timeout: int = Field(default=60, ge=1)
    metadata_variant: Literal["pending", "deposit"] = Field(default="pending")
    deposit_merchant_address: Optional[str] = Field(default=None)
    supported_tokens: List[SupportedToken] = Field(default_factory=lambda: list(FUJI_SUPPORTED_TOKENS))
    app_url: str = Field(default="https://sherry.social")
    app_icon: str = Field(default="https://avatars.githubusercontent.com/u/117962315")
    app_title: str = Field(default="Pagos Sherry")
    app_description: str = Field(default="Permite realizar pagos a comercios y servicios")

    @field_validator("gateway_address", "deposit_merchant_address", "kv_url", mode="before")
    @classmethod
    def _empty_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "GatewayConfig":
        """
        Build a configuration from environment variables (and a ``.env`` file).

        Args:
            env_file: Optional path to a dotenv file; defaults to the nearest ``.env``.

        Returns:
            GatewayConfig: Configuration with unset variables left at their defaults.

        Raises:
            ConfigurationError: If a variable holds a value of the wrong shape.
        """
        dotenv.load_dotenv(env_file)

        values = {
            "rpc_url": _first_env("RPC_URL", "NEXT_PUBLIC_RPC_URL"),
            "gateway_address": _first_env("GATEWAY_CONTRACT", "NEXT_PUBLIC_GATEWAY_CONTRACT"),
            "multicall_address": _first_env("MULTICALL3_ADDRESS"),
            "chain_id": _first_env("CHAIN_ID"),
            "chain_name": _first_env("CHAIN_NAME"),
            "chain_source": _first_env("CHAIN_SOURCE"),
            "settlement_mode": _first_env("SETTLEMENT_MODE"),
            "payment_ttl_seconds": _first_env("PAYMENT_TTL_SECONDS"),
            "kv_url": _first_env("KV_URL", "REDIS_URL"),
            "metadata_variant": _first_env("METADATA_VARIANT"),
            "deposit_merchant_address": _first_env("DEPOSIT_MERCHANT_ADDRESS"),
            "request_timeout": _first_env("RPC_TIMEOUT"),
        }
        enforce = _first_env("ENFORCE_PENDING_STATUS")
        if enforce is not None:
            values["enforce_pending_status"] = enforce.strip().lower() in _TRUE_VALUES

        try:
            return cls(**{key: value for key, value in values.items() if value is not None})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid gateway configuration: {e}") from e

    def require_gateway_address(self) -> str:
        """
        Return the gateway contract address or fail loudly.

        Raises:
            ConfigurationError: If no gateway contract is configured.
        """
        if not self.gateway_address:
            raise ConfigurationError(
                "Gateway contract not configured. Set 'GATEWAY_CONTRACT' or pass gateway_address."
            )
        return self.gateway_address


def _first_env(*names: str) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


def build_store(config: GatewayConfig) -> KeyValueStore:
    """
    Create the key-value store described by ``config``.

    Returns a :class:`RedisKVStore` when ``kv_url`` is set, otherwise a
    process-local :class:`MemoryKVStore` (payments then vanish on restart).
    """
    if config.kv_url:
        return RedisKVStore.from_url(config.kv_url)

    logger.warning("No KV_URL configured, payments are kept in process memory")
    return MemoryKVStore()
