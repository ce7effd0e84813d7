"""Bounded TTL cache and content hashing for generated topics.

The cache is process-local and advisory. Entries are never served past their
TTL: an entry stored at T expires at T + ttl and is deleted on the first
lookup at or after that instant.
"""

import hashlib
import json
import threading
import time
from collections import OrderedDict
from typing import Callable, Generic, Optional, Tuple, TypeVar

V = TypeVar("V")


def hash_string(text: str) -> str:
    """SHA-1 hex digest of the text. A fingerprint for deduplication, not for security."""
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def _normalize(value: Optional[str]) -> str:
    return " ".join((value or "").lower().split())


def build_topic_cache_key(vibe: str, people: int, theme: Optional[str] = None, hint: Optional[str] = None) -> str:
    """Deterministic cache key from the fields that change generated topics.

    Text fields are lowercased and whitespace-collapsed so cosmetically
    different requests share an entry.
    """
    canonical = json.dumps(
        {
            "hint": _normalize(hint),
            "people": int(people),
            "theme": _normalize(theme),
            "vibe": _normalize(vibe),
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return hash_string(canonical)


class TTLCache(Generic[V]):
    """Thread-safe key/value cache with per-entry expiry and a size bound.

    When full, the entry inserted first is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float = 900,
        max_entries: int = 512,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, V]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[V]:
        """Return the live value, or None. Expired entries are deleted."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: V) -> None:
        """Store the value until now + ttl, replacing any previous entry."""
        with self._lock:
            self._entries.pop(key, None)
            while len(self._entries) >= self.max_entries:
                self._entries.popitem(last=False)
            self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def __len__(self) -> int:
        return len(self._entries)
