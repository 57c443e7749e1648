"""
Sherry payment gateway: intent descriptors, off-chain pending payments and
Multicall3 execution transactions for EVM chains.
"""

from .config import GatewayConfig, build_store
from .adapters import EVMChainClient, ChainClientFactory
from .stores import KeyValueStore, MemoryKVStore, RedisKVStore, PaymentRecordStore
from .services import PaymentService, IntentResponder
from .servers import GatewayServer, create_app
from .clients import GatewayClient
from .engine import (
    EventBus,
    PaymentCreatedEvent,
    PaymentExecutedEvent,
    PaymentRejectedEvent,
    GatewayError,
)
from .schemas import PaymentRecord, PaymentSummary, PaymentStatus, Metadata, create_metadata

__version__ = "0.1.0"

__all__ = [
    "GatewayConfig",
    "build_store",
    "EVMChainClient",
    "ChainClientFactory",
    "KeyValueStore",
    "MemoryKVStore",
    "RedisKVStore",
    "PaymentRecordStore",
    "PaymentService",
    "IntentResponder",
    "GatewayServer",
    "create_app",
    "GatewayClient",
    "EventBus",
    "PaymentCreatedEvent",
    "PaymentExecutedEvent",
    "PaymentRejectedEvent",
    "GatewayError",
    "PaymentRecord",
    "PaymentSummary",
    "PaymentStatus",
    "Metadata",
    "create_metadata",
]
