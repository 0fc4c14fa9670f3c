# medreminder/utils/state_store.py
import threading
import time

import redis


class _InMemoryTTL:
    def __init__(self):
        self._d = {}
        self._lock = threading.Lock()

    def get(self, k):
        now = time.time()
        with self._lock:
            v = self._d.get(k)
            if not v: return None
            exp, payload = v
            if exp and now > exp:
                self._d.pop(k, None)
                return None
            return payload

    def set(self, k, payload, ttl=None):
        exp = time.time() + ttl if ttl else None
        with self._lock:
            self._d[k] = (exp, payload)


class StateStore:
    """
    Namespaced key/value store for revoked access tokens:
      - Uses REDIS_URL if given (needed when running several workers)
      - Else falls back to a process-local in-memory TTL cache
    """
    def __init__(self, namespace="medreminder", redis_url=None, default_ttl_secs=12*3600):
        self.ns = namespace
        self.default_ttl = default_ttl_secs

        self._redis = None
        if redis_url:
            self._redis = redis.Redis.from_url(redis_url, decode_responses=True)

        self._mem = _InMemoryTTL()

    def _key(self, jti, suffix="revoked"):
        return f"{self.ns}:{suffix}:{jti}"

    def revoke(self, jti, ttl=None):
        key = self._key(jti)
        ttl = int(ttl or self.default_ttl)
        if self._redis:
            # setex expires the entry together with the token itself
            self._redis.setex(key, max(ttl, 1), "1")
            return
        self._mem.set(key, True, ttl=ttl)

    def is_revoked(self, jti):
        key = self._key(jti)
        if self._redis:
            return self._redis.get(key) is not None
        return bool(self._mem.get(key))
