import pytest

from agendamento.admin import AccessGate
from agendamento.booking_manager import BookingManager
from agendamento.stores.fallback import FallbackStore
from agendamento.stores.local_cache import LocalCacheStore
from tests.fakes import ADMIN_PASSWORD, InMemoryRemoteStore, UnreachableStore


@pytest.fixture
def remote():
    return InMemoryRemoteStore()


@pytest.fixture
def cache(tmp_path):
    return LocalCacheStore(path=str(tmp_path / "cache.json"), key="scheduling_appointments")


@pytest.fixture
def store(remote, cache):
    return FallbackStore(primary=remote, secondary=cache)


@pytest.fixture
def offline_store(cache):
    return FallbackStore(primary=UnreachableStore(), secondary=cache)


@pytest.fixture
def manager(store):
    return BookingManager(store)


@pytest.fixture
def offline_manager(offline_store):
    return BookingManager(offline_store)


@pytest.fixture
def gate():
    return AccessGate(password=ADMIN_PASSWORD, ttl_minutes=30)
