"""Token revocation store tests."""

from medreminder.utils import state_store
from medreminder.utils.state_store import StateStore


def test_in_memory_revocation():
    store = StateStore()
    assert not store.is_revoked("jti-1")
    store.revoke("jti-1", ttl=60)
    assert store.is_revoked("jti-1")
    assert not store.is_revoked("jti-2")


def test_in_memory_entries_expire(monkeypatch):
    clock = {"t": 1000.0}
    monkeypatch.setattr(state_store.time, "time", lambda: clock["t"])
    store = StateStore()
    store.revoke("jti-1", ttl=30)
    clock["t"] += 31
    assert not store.is_revoked("jti-1")


class _FakeRedis:
    def __init__(self):
        self.data = {}

    def setex(self, key, ttl, value):
        self.data[key] = (ttl, value)

    def get(self, key):
        entry = self.data.get(key)
        return entry[1] if entry else None


def test_redis_backend_is_used_when_configured(monkeypatch):
    fake = _FakeRedis()
    monkeypatch.setattr(state_store.redis.Redis, "from_url", lambda url, decode_responses: fake)
    store = StateStore(namespace="test", redis_url="redis://localhost:6379/0")
    store.revoke("jti-9", ttl=120)
    assert fake.data == {"test:revoked:jti-9": (120, "1")}
    assert store.is_revoked("jti-9")
