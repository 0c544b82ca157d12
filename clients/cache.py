import threading
import time

from django.conf import settings


def _key(client_id):
    return str(client_id).strip().lower()


class ClientDetailCache:
    """
    TTL cache for serialized client details, keyed by client id.

    `clock` returns seconds and is injectable so expiry can be tested without
    sleeping. Entries are dropped by `invalidate` from the Client save/delete
    signal handlers. Each invalidation bumps the key's version; a `set` that
    carries an older version (read before the write) is ignored.
    """

    def __init__(self, ttl=300, clock=time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._entries = {}
        self._versions = {}
        self._lock = threading.Lock()

    def get(self, client_id):
        key = _key(client_id)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self.clock() - stored_at >= self.ttl:
                del self._entries[key]
                return None
            return value

    def version(self, client_id):
        with self._lock:
            return self._versions.get(_key(client_id), 0)

    def set(self, client_id, value, version=None):
        if self.ttl <= 0:
            return False
        key = _key(client_id)
        with self._lock:
            if version is not None and version != self._versions.get(key, 0):
                return False
            self._entries[key] = (self.clock(), value)
            return True

    def invalidate(self, client_id):
        key = _key(client_id)
        with self._lock:
            self._entries.pop(key, None)
            self._versions[key] = self._versions.get(key, 0) + 1

    def clear(self):
        with self._lock:
            self._entries.clear()
            self._versions.clear()

    def __len__(self):
        return len(self._entries)


client_cache = ClientDetailCache(ttl=getattr(settings, "CLIENT_CACHE_TTL", 300))
