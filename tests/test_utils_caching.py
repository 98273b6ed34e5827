from overdrive_import.utils.caching import TokenCache
from overdrive_import.utils.persistence import MemoryStore

from conftest import FakeClock


def test_value_expires_after_ttl():
    clock = FakeClock(100)
    cache = TokenCache(MemoryStore(), clock=clock)

    assert cache.set("token", "abc", 60) == 160
    assert cache.get("token") == "abc"
    assert cache.expires_at("token") == 160

    clock.now = 160
    assert cache.get("token") is None
    assert cache.expires_at("token") is None


def test_missing_and_deleted_entries():
    store = MemoryStore()
    cache = TokenCache(store, clock=FakeClock())
    assert cache.get("token") is None
    cache.set("token", "abc", 60)
    cache.delete("token")
    assert cache.get("token") is None
    assert "_timeout_token" not in store
