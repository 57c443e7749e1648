"""
Payment Record Store

Typed access to payment records kept in a :class:`KeyValueStore`.

Layout:
    ``payment:<paymentId>``       JSON PaymentRecord, TTL = remaining lifetime
    ``payment-lock:<paymentId>``  short-lived execution lock (SET NX EX)

Records are written whole and never deleted by the application; the store's
TTL is the only eviction mechanism.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from pydantic import ValidationError

from .bases import KeyValueStore
from ..engine.exceptions import InvalidPaymentRecordError
from ..schemas.payments import PaymentRecord

logger = logging.getLogger(__name__)

PAYMENT_KEY_PREFIX = "payment:"
PAYMENT_LOCK_PREFIX = "payment-lock:"


def payment_key(payment_id: str) -> str:
    return f"{PAYMENT_KEY_PREFIX}{payment_id}"


class PaymentRecordStore:
    """
    Persistence facade for :class:`PaymentRecord`.

    Attributes:
        kv: Underlying key-value store

    Example:
        records = PaymentRecordStore(MemoryKVStore())
        await records.put(record, ttl_seconds=1800)
        record = await records.get(record.payment_id)
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    async def put(self, record: PaymentRecord, ttl_seconds: int) -> None:
        """Overwrite the record and set its expiry to ``ttl_seconds`` from now."""
        await self.kv.set(payment_key(record.payment_id), record.to_dict(), ttl_seconds=ttl_seconds)

    async def get(self, payment_id: str) -> Optional[PaymentRecord]:
        """
        Read a record by id.

        Returns:
            The record, or None when it was never created or has expired.

        Raises:
            InvalidPaymentRecordError: If the stored entry does not match the schema.
        """
        return await self._load(payment_key(payment_id))

    async def _load(self, key: str) -> Optional[PaymentRecord]:
        try:
            raw = await self.kv.get(key)
            if raw is None:
                return None
            return PaymentRecord.model_validate(raw)
        except (ValidationError, ValueError, TypeError) as e:
            raise InvalidPaymentRecordError(f"Malformed payment record at {key}: {e}") from e

    async def list_by_prefix(self, prefix: str = PAYMENT_KEY_PREFIX) -> List[Tuple[str, PaymentRecord]]:
        """
        Return ``(key, record)`` pairs for every live key starting with ``prefix``.

        Records are read concurrently; entries that vanish between the key scan
        and the read are dropped, malformed ones are skipped with a warning.
        No ordering is guaranteed.
        """
        keys = await self.kv.keys(f"{prefix}*")
        results = await asyncio.gather(*(self._load(key) for key in keys), return_exceptions=True)

        records: List[Tuple[str, PaymentRecord]] = []
        for key, result in zip(keys, results):
            if isinstance(result, InvalidPaymentRecordError):
                logger.warning("Skipping payment entry %s: %s", key, result)
                continue
            if isinstance(result, BaseException):
                raise result
            if result is not None:
                records.append((key, result))
        return records

    async def acquire_execution_lock(self, payment_id: str, ttl_seconds: int) -> bool:
        """
        Try to take the execution lock of a payment.

        Returns:
            bool: False when another execution already holds it.
        """
        return await self.kv.set_if_absent(f"{PAYMENT_LOCK_PREFIX}{payment_id}", "locked", ttl_seconds)

    async def release_execution_lock(self, payment_id: str) -> None:
        await self.kv.delete(f"{PAYMENT_LOCK_PREFIX}{payment_id}")
