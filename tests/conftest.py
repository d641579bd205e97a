import pytest

from core.counter_storage import CounterStore


@pytest.fixture
def counter_store():
    store = CounterStore(":memory:")
    store.open()
    yield store
    store.close()


@pytest.fixture
def file_counter_store(tmp_path):
    store = CounterStore(tmp_path / "counters.sqlite3")
    store.open()
    yield store
    store.close()
