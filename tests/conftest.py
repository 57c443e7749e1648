import pytest

from sherry_pay.engine.events import EventBus
from sherry_pay.stores.memory import MemoryKVStore
from sherry_pay.stores.payments import PaymentRecordStore

from gateway_mocks import FakeClock, create_mock_chain_client, make_config


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def kv():
    """Memory store on the real monotonic clock, so records outlive FakeClock jumps."""
    return MemoryKVStore()


@pytest.fixture
def records(kv):
    return PaymentRecordStore(kv)


@pytest.fixture
def chain_client():
    return create_mock_chain_client()


@pytest.fixture
def event_bus():
    return EventBus()
