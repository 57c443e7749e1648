"""
Payment Lifecycle Service

Creates pending payment records and turns them into unsigned execution
transactions. The service owns every precondition check; the chain client
only reads and encodes, the record store only persists.

Flow:
    create_payment   validate -> confirm token -> derive id -> store (TTL) -> summary
    execute_payment  load -> expiry/status guard -> lock -> re-check -> build tx -> write back
"""

import logging
import re
import secrets
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from web3 import Web3

from ..adapters.bases import ChainClientFactory
from ..adapters.evm.schemas import BalanceCheck, ExecutionDetails
from ..config import GatewayConfig
from ..engine.events import (
    EventBus,
    PaymentCreatedEvent,
    PaymentExecutedEvent,
    PaymentRejectedEvent,
    publish,
)
from ..engine.exceptions import (
    InvalidAddressError,
    InvalidAmountError,
    PaymentError,
    PaymentExpiredError,
    PaymentNotFoundError,
    PaymentStatusError,
)
from ..schemas.bases import PaymentStatus, utc_now
from ..schemas.payments import PaymentRecord, PaymentSummary, canonicalize_metadata
from ..stores.payments import PaymentRecordStore

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"^[0-9]+$")


def parse_amount(amount: Any) -> str:
    """
    Normalize a payment amount to a positive integer decimal string.

    Accepts ``int`` values and strings of ASCII digits (surrounding whitespace
    ignored). Booleans, floats, signs, decimals and zero are rejected.

    Raises:
        InvalidAmountError: If the amount is not a positive integer.
    """
    if isinstance(amount, bool):
        raise InvalidAmountError("Monto inválido")
    if isinstance(amount, int):
        value = amount
    elif isinstance(amount, str) and _DIGITS.match(amount.strip()):
        value = int(amount.strip())
    else:
        raise InvalidAmountError("Monto inválido")

    if value <= 0:
        raise InvalidAmountError("Monto inválido")
    return str(value)


def generate_payment_id(merchant: str, token: str, amount: str, created_at: datetime) -> str:
    """
    Derive a fresh bytes32 payment id.

    keccak256 of ``"{merchant}-{token}-{amount}-{createdAtMillis}-{salt}"``
    with a random salt, so two creations in the same millisecond still differ.
    """
    millis = int(created_at.timestamp() * 1000)
    salt = secrets.token_hex(16)
    return Web3.to_hex(Web3.keccak(text=f"{merchant}-{token}-{amount}-{millis}-{salt}"))


def _truncate_to_millis(value: datetime) -> datetime:
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


class PaymentService:
    """
    Payment lifecycle operations.

    Attributes:
        chain_client: Token reads and transaction assembly
        store: Payment record persistence
        config: Gateway configuration (TTL, status enforcement, lock TTL)
        event_bus: Optional bus receiving lifecycle events
        clock: Source of the current UTC time (injectable for tests)

    Example:
        service = PaymentService(EVMChainClient(config), PaymentRecordStore(kv), config)
        summary = await service.create_payment(merchant, token, "1000000")
        tx = await service.execute_payment(summary.payment_id, payer)
    """

    def __init__(
        self,
        chain_client: ChainClientFactory,
        store: PaymentRecordStore,
        config: GatewayConfig,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.chain_client = chain_client
        self.store = store
        self.config = config
        self.event_bus = event_bus
        self.clock = clock

    async def create_payment(
        self,
        merchant_address: Optional[str],
        token_address: Optional[str],
        amount: Any,
        metadata: Any = None,
        payer_address: Optional[str] = None,
    ) -> PaymentSummary:
        """
        Create and store a pending payment.

        Inputs are validated before the chain or the store is touched.

        Args:
            merchant_address: Address receiving the funds.
            token_address: ERC-20 token the payment is made in.
            amount: Positive integer amount in the token's smallest unit.
            metadata: Application payload, stored in canonical string form.
            payer_address: Optional account expected to pay.

        Returns:
            PaymentSummary: ``{paymentId, amount, expiresAt}``.

        Raises:
            InvalidAddressError: If an address is missing or malformed.
            InvalidAmountError: If the amount is not a positive integer.
            InvalidTokenError: If the token contract cannot be confirmed.
        """
        if not _is_address(merchant_address) or not _is_address(token_address):
            raise InvalidAddressError("Direcciones inválidas")
        if payer_address is not None and not _is_address(payer_address):
            raise InvalidAddressError("Direcciones inválidas")
        amount_value = parse_amount(amount)

        # Confirms the token contract; the metadata itself is not kept.
        await self.chain_client.get_token_info(token_address)

        created_at = _truncate_to_millis(self.clock())
        record = PaymentRecord(
            payment_id=generate_payment_id(merchant_address, token_address, amount_value, created_at),
            merchant=merchant_address,
            token=token_address,
            amount=amount_value,
            metadata=canonicalize_metadata(metadata),
            payer_address=payer_address,
            status=PaymentStatus.PENDING,
            created_at=created_at,
            expires_at=created_at + timedelta(seconds=self.config.payment_ttl_seconds),
        )
        await self.store.put(record, ttl_seconds=self.config.payment_ttl_seconds)

        logger.info(
            "Created payment %s: %s of token %s to %s",
            record.payment_id, record.amount, record.token, record.merchant,
        )
        await publish(self.event_bus, PaymentCreatedEvent(
            payment_id=record.payment_id,
            merchant=record.merchant,
            token=record.token,
            amount=record.amount,
            expires_at=record.expires_at,
        ))
        return record.summary()

    async def execute_payment(self, payment_id: str, payer_address: Optional[str] = None) -> str:
        """
        Build the unsigned execution transaction of a pending payment.

        Args:
            payment_id: Identifier returned by :meth:`create_payment`.
            payer_address: Account signing the transaction; defaults to the
                payer stored on the record.

        Returns:
            str: Serialized unsigned transaction request.

        Raises:
            PaymentNotFoundError: If no live record exists.
            PaymentExpiredError: If the record is past ``expiresAt``.
            PaymentStatusError: If status enforcement is on and the payment is
                not pending or is being executed concurrently.
            InvalidAddressError: If no valid payer address is available.
            ChainCallError: If assembling the transaction fails.
        """
        try:
            return await self._execute(payment_id, payer_address)
        except PaymentError as e:
            logger.info("Rejected execution of payment %s: %s", payment_id, e)
            await publish(self.event_bus, PaymentRejectedEvent(
                payment_id=payment_id,
                reason=str(e),
                error_type=type(e).__name__,
            ))
            raise

    async def _load_executable(self, payment_id: str) -> PaymentRecord:
        record = await self.store.get(payment_id)
        if record is None:
            raise PaymentNotFoundError("Pago no válido o expirado")
        if record.is_expired(self.clock()):
            raise PaymentExpiredError("Pago no válido o expirado")
        if self.config.enforce_pending_status and record.status != PaymentStatus.PENDING:
            raise PaymentStatusError(f"Payment {payment_id} is already {record.status.value}")
        return record

    async def _execute(self, payment_id: str, payer_address: Optional[str]) -> str:
        record = await self._load_executable(payment_id)

        payer = payer_address or record.payer_address
        if not _is_address(payer):
            raise InvalidAddressError("Dirección del pagador inválida")

        enforce = self.config.enforce_pending_status
        if enforce and not await self.store.acquire_execution_lock(
            payment_id, self.config.execution_lock_seconds
        ):
            raise PaymentStatusError(f"Payment {payment_id} is already being executed")

        try:
            if enforce:
                # Another execution may have completed between the first read and the lock.
                record = await self._load_executable(payment_id)

            serialized = await self.chain_client.build_execution_transaction(ExecutionDetails(
                payment_id=record.payment_id,
                payer_address=payer,
                merchant=record.merchant,
                token=record.token,
                amount=record.amount,
                metadata=record.metadata,
            ))

            updated = record
            if enforce:
                updated = record.model_copy(update={
                    "status": PaymentStatus.COMPLETED,
                    "payer_address": payer,
                })
            # Write-back keeps the original expiry.
            await self.store.put(updated, ttl_seconds=record.remaining_ttl(self.clock()))
        finally:
            if enforce:
                await self.store.release_execution_lock(payment_id)

        logger.info("Issued execution transaction for payment %s (payer %s)", payment_id, payer)
        await publish(self.event_bus, PaymentExecutedEvent(
            payment_id=payment_id,
            payer_address=payer,
            serialized_transaction=serialized,
        ))
        return serialized

    async def check_payer_balance(self, payment_id: str, payer_address: str) -> BalanceCheck:
        """
        Check whether ``payer_address`` holds enough of the payment's token.

        Raises:
            PaymentNotFoundError: If no live record exists.
            InvalidAddressError: If the payer address is malformed.
        """
        record = await self.store.get(payment_id)
        if record is None:
            raise PaymentNotFoundError("Pago no válido o expirado")
        if not _is_address(payer_address):
            raise InvalidAddressError("Dirección del pagador inválida")
        return await self.chain_client.check_user_balance(payer_address, record.token, record.amount)


def _is_address(value: Any) -> bool:
    return isinstance(value, str) and Web3.is_address(value)
