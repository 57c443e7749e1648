"""
PaymentRecordStore tests: typed records over the memory store, schema
enforcement on reads, listing and execution locks.
"""

import pytest

from sherry_pay.engine.exceptions import InvalidPaymentRecordError
from sherry_pay.schemas.bases import PaymentStatus
from sherry_pay.stores.payments import PAYMENT_KEY_PREFIX, payment_key

from gateway_mocks import MERCHANT_ADDRESS, PAYMENT_ID, make_record, store_raw


class TestPutAndGet:

    @pytest.mark.asyncio
    async def test_round_trip_uses_camel_case_keys(self, kv, records):
        record = make_record(metadata='{"order":42}')
        await records.put(record, ttl_seconds=1800)

        stored = await kv.get(payment_key(PAYMENT_ID))
        assert stored["paymentId"] == PAYMENT_ID
        assert stored["status"] == "pending"
        assert stored["createdAt"] == "2025-01-01T12:00:00.000Z"
        assert stored["expiresAt"] == "2025-01-01T12:30:00.000Z"

        loaded = await records.get(PAYMENT_ID)
        assert loaded == record

    @pytest.mark.asyncio
    async def test_get_absent(self, records):
        assert await records.get(PAYMENT_ID) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", [
        {"paymentId": PAYMENT_ID, "merchant": MERCHANT_ADDRESS},
        "just a string",
        [1, 2, 3],
    ])
    async def test_malformed_entry_rejected(self, kv, records, raw):
        await kv.set(payment_key(PAYMENT_ID), raw)

        with pytest.raises(InvalidPaymentRecordError):
            await records.get(PAYMENT_ID)

    @pytest.mark.asyncio
    async def test_invalid_json_rejected(self, kv, records):
        store_raw(kv, payment_key(PAYMENT_ID), "{oops")

        with pytest.raises(InvalidPaymentRecordError):
            await records.get(PAYMENT_ID)

    @pytest.mark.asyncio
    async def test_wrong_window_rejected(self, kv, records):
        raw = make_record().to_dict()
        raw["expiresAt"] = raw["createdAt"]
        await kv.set(payment_key(PAYMENT_ID), raw)

        with pytest.raises(InvalidPaymentRecordError):
            await records.get(PAYMENT_ID)


class TestListing:

    @pytest.mark.asyncio
    async def test_lists_records_and_skips_malformed(self, kv, records):
        first = make_record(payment_id="0x" + "01" * 32)
        second = make_record(payment_id="0x" + "02" * 32, status=PaymentStatus.COMPLETED)
        await records.put(first, ttl_seconds=1800)
        await records.put(second, ttl_seconds=1800)
        await kv.set(f"{PAYMENT_KEY_PREFIX}garbage", {"hello": "world"})
        await records.acquire_execution_lock(first.payment_id, ttl_seconds=30)

        listed = dict(await records.list_by_prefix())

        assert set(listed) == {payment_key(first.payment_id), payment_key(second.payment_id)}
        assert listed[payment_key(second.payment_id)].status == PaymentStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_empty_store(self, records):
        assert await records.list_by_prefix() == []


class TestExecutionLock:

    @pytest.mark.asyncio
    async def test_lock_is_exclusive_until_released(self, records):
        assert await records.acquire_execution_lock(PAYMENT_ID, ttl_seconds=30) is True
        assert await records.acquire_execution_lock(PAYMENT_ID, ttl_seconds=30) is False

        await records.release_execution_lock(PAYMENT_ID)
        assert await records.acquire_execution_lock(PAYMENT_ID, ttl_seconds=30) is True

    @pytest.mark.asyncio
    async def test_lock_does_not_touch_record(self, kv, records):
        await records.put(make_record(), ttl_seconds=1800)
        await records.acquire_execution_lock(PAYMENT_ID, ttl_seconds=30)
        await records.release_execution_lock(PAYMENT_ID)

        assert (await kv.get(payment_key(PAYMENT_ID)))["paymentId"] == PAYMENT_ID
