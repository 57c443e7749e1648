"""
Gateway Test Mocks Module

Mock data and helpers shared by the test suites, so no test needs a running
node or Redis server.

Key Components:
    - Deterministic EVM addresses derived from fixed test keys
    - FakeClock for driving expiry without sleeping
    - Mock AsyncWeb3 with scripted ERC-20 reads
    - Mock chain client for service-level tests
    - Factories for configurations and payment records

Usage:
    from gateway_mocks import MERCHANT_ADDRESS, FakeClock, create_mock_web3

    web3 = create_mock_web3(allowance=0)
    client = EVMChainClient(make_config(), web3=web3)
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from unittest.mock import AsyncMock, Mock

from eth_account import Account
from web3 import AsyncWeb3

from sherry_pay.adapters.evm.schemas import BalanceCheck, TokenInfo
from sherry_pay.config import GatewayConfig
from sherry_pay.schemas.bases import PaymentStatus
from sherry_pay.schemas.payments import PaymentRecord
from sherry_pay.stores.memory import MemoryKVStore


# ========================================================================
# Mock Blockchain Constants
# ========================================================================

# Test keys only, never funded
_merchant_account = Account.from_key("0x1234567890123456789012345678901234567890123456789012345678901234")
_payer_account = Account.from_key("0xabcdefabcdefabcdefabcdefabcdefabcdefabcdefabcdefabcdefabcdefabcd")

MERCHANT_ADDRESS = AsyncWeb3.to_checksum_address(_merchant_account.address)
PAYER_ADDRESS = AsyncWeb3.to_checksum_address(_payer_account.address)
GATEWAY_ADDRESS = AsyncWeb3.to_checksum_address("0x1234567890123456789012345678901234567890")

# USDC on Avalanche Fuji
USDC_FUJI = "0x5425890298aed601595a70ab815c96711a31bc65"

AMOUNT_1_USDC = "1000000"

PAYMENT_ID = "0x" + "ab" * 32
MOCK_SERIALIZED_TX = '{"to":"0xcA11bde05977b3631167028862bE2a173976CA11","data":"0x82ad56cb","chainId":43113,"type":"legacy"}'

FIXED_NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# ========================================================================
# Time
# ========================================================================

class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)

    def monotonic(self) -> float:
        """Seconds view of the same clock, for MemoryKVStore."""
        return self.now.timestamp()


# ========================================================================
# Factories
# ========================================================================

def make_config(**overrides: Any) -> GatewayConfig:
    """Gateway configuration pointing at mock contracts."""
    values = {
        "rpc_url": "http://localhost:8545",
        "gateway_address": GATEWAY_ADDRESS,
    }
    values.update(overrides)
    return GatewayConfig(**values)


def make_record(
    payment_id: str = PAYMENT_ID,
    created_at: datetime = FIXED_NOW,
    ttl_seconds: int = 1800,
    **overrides: Any,
) -> PaymentRecord:
    """Pending payment record created at ``created_at``."""
    values = {
        "payment_id": payment_id,
        "merchant": MERCHANT_ADDRESS,
        "token": USDC_FUJI,
        "amount": AMOUNT_1_USDC,
        "metadata": "{}",
        "payer_address": None,
        "status": PaymentStatus.PENDING,
        "created_at": created_at,
        "expires_at": created_at + timedelta(seconds=ttl_seconds),
    }
    values.update(overrides)
    return PaymentRecord(**values)


def store_raw(store: MemoryKVStore, key: str, raw: str, ttl_seconds: Optional[int] = None) -> None:
    """Write an already-encoded string into a memory store, bypassing JSON encoding."""
    store._data[key] = (raw, store._expires_at(ttl_seconds))


# ========================================================================
# Mock Web3
# ========================================================================

def create_mock_web3(
    symbol: str = "USDC",
    decimals: int = 6,
    balance: int = 5_000_000,
    allowance: int = 0,
    read_error: Optional[Exception] = None,
) -> Mock:
    """
    Mock AsyncWeb3 whose every ``eth.contract(...)`` is the same scripted ERC-20.

    When ``read_error`` is given, every contract read raises it.
    """
    contract = Mock()
    reads = {
        "symbol": symbol,
        "decimals": decimals,
        "balanceOf": balance,
        "allowance": allowance,
    }
    for name, value in reads.items():
        call = AsyncMock(side_effect=read_error) if read_error else AsyncMock(return_value=value)
        getattr(contract.functions, name).return_value.call = call

    web3 = Mock()
    web3.eth.contract.return_value = contract
    return web3


def create_mock_chain_client(serialized: str = MOCK_SERIALIZED_TX) -> Mock:
    """Chain client double with the ``ChainClientFactory`` methods as AsyncMocks."""
    client = Mock()
    client.get_token_info = AsyncMock(return_value=TokenInfo(symbol="USDC", decimals=6))
    client.check_user_balance = AsyncMock(return_value=BalanceCheck(
        has_balance=True, balance="5000000", required=AMOUNT_1_USDC,
    ))
    client.build_execution_transaction = AsyncMock(return_value=serialized)
    return client
