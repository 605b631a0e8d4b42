import threading
from collections.abc import Iterable


class KnownTimestamps:
    """Thread-safe set of time keys shared by every extraction call of a batch."""

    def __init__(self, keys: Iterable[str] = ()) -> None:
        self._keys: set[str] = set(keys)
        self._lock = threading.Lock()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def add_if_absent(self, key: str) -> bool:
        """Claim ``key``. Returns False when it was already known."""
        with self._lock:
            if key in self._keys:
                return False
            self._keys.add(key)
            return True

    def snapshot(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._keys)
