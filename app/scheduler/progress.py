import threading
from collections.abc import Callable

ProgressListener = Callable[[float], None]


class BatchProgress:
    """Aggregates per-worker recognition progress into one batch fraction.

    Each worker owns an in-flight fraction for its current chunk; finished
    chunks are counted separately. The published value is the running maximum
    of ``min(0.99, (completed + sum(in_flight)) / total)`` and becomes exactly
    1.0 only through ``finish``.
    """

    CEILING = 0.99

    def __init__(
        self,
        total_chunks: int,
        worker_count: int,
        listener: ProgressListener | None = None,
    ) -> None:
        self._total = total_chunks
        self._in_flight = [0.0] * worker_count
        self._completed = 0
        self._value = 0.0
        self._listener = listener
        self._lock = threading.Lock()

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    def report(self, worker: int, fraction: float) -> float:
        """Record the recognizer's progress on ``worker``'s current chunk."""
        with self._lock:
            self._in_flight[worker] = min(1.0, max(0.0, fraction))
            return self._publish_locked()

    def complete(self, worker: int) -> float:
        """Count ``worker``'s current chunk as done.

        The in-flight share is zeroed before the counter moves so the chunk is
        never counted twice.
        """
        with self._lock:
            self._in_flight[worker] = 0.0
            self._completed += 1
            return self._publish_locked()

    def finish(self) -> float:
        with self._lock:
            self._value = 1.0
            self._notify_locked()
            return self._value

    def _publish_locked(self) -> float:
        if self._total <= 0:
            return self._value
        current = min(self.CEILING, (self._completed + sum(self._in_flight)) / self._total)
        if current > self._value:
            self._value = current
            self._notify_locked()
        return self._value

    def _notify_locked(self) -> None:
        if self._listener is not None:
            self._listener(self._value)
