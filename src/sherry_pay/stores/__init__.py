from .bases import KeyValueStore
from .memory import MemoryKVStore
from .redis_store import RedisKVStore
from .payments import PaymentRecordStore, PAYMENT_KEY_PREFIX, PAYMENT_LOCK_PREFIX, payment_key

__all__ = [
    "KeyValueStore",
    "MemoryKVStore",
    "RedisKVStore",
    "PaymentRecordStore",
    "PAYMENT_KEY_PREFIX",
    "PAYMENT_LOCK_PREFIX",
    "payment_key",
]
