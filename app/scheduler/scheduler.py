"""Bounded pool of recognition workers draining one shared chunk queue."""

import queue
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait

from app.logging.logger import Log
from app.ocr.base import BaseRecognizer
from app.ocr.models import RecognitionOutcome
from app.scheduler.exceptions import BatchRecognitionError
from app.scheduler.progress import BatchProgress, ProgressListener
from app.segmentation.models import ImageChunk

OutcomeHandler = Callable[[RecognitionOutcome], None]


class RecognitionScheduler:
    """Distributes chunks over at most ``max_workers`` recognizers in parallel.

    Outcomes come back in completion order, not chunk order.
    """

    def __init__(
        self,
        recognizer_factory: Callable[[], BaseRecognizer],
        max_workers: int = 4,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._recognizer_factory = recognizer_factory
        self._max_workers = max_workers

    def process(
        self,
        chunks: Sequence[ImageChunk],
        on_progress: ProgressListener | None = None,
        on_outcome: OutcomeHandler | None = None,
    ) -> list[RecognitionOutcome]:
        """Recognize every chunk and return the outcomes.

        ``on_outcome`` runs on the worker thread right after a chunk is
        recognized. The first failure in any worker stops the others from
        taking new chunks and is raised once all workers have exited.

        Raises:
            BatchRecognitionError: if recognition or ``on_outcome`` failed.
        """
        pool_size = min(self._max_workers, len(chunks))
        progress = BatchProgress(len(chunks), pool_size, on_progress)
        if pool_size == 0:
            progress.finish()
            return []

        work: queue.Queue[ImageChunk] = queue.Queue()
        for chunk in chunks:
            work.put(chunk)

        recognizers: list[BaseRecognizer] = []
        try:
            for _ in range(pool_size):
                recognizers.append(self._recognizer_factory())
            Log.info(f"Recognizing {len(chunks)} chunks with {pool_size} workers")
            outcomes = self._run_workers(work, recognizers, progress, on_outcome)
        finally:
            self._close_all(recognizers)

        progress.finish()
        return outcomes

    def _run_workers(
        self,
        work: "queue.Queue[ImageChunk]",
        recognizers: list[BaseRecognizer],
        progress: BatchProgress,
        on_outcome: OutcomeHandler | None,
    ) -> list[RecognitionOutcome]:
        abort = threading.Event()
        per_worker: list[list[RecognitionOutcome]] = [[] for _ in recognizers]
        failures: list[tuple[int | None, BaseException]] = []
        failures_lock = threading.Lock()

        def drain(worker: int) -> None:
            recognizer = recognizers[worker]
            while not abort.is_set():
                try:
                    chunk = work.get_nowait()
                except queue.Empty:
                    return
                try:
                    text = recognizer.recognize(
                        chunk, lambda fraction: progress.report(worker, fraction)
                    )
                    progress.complete(worker)
                    outcome = RecognitionOutcome(ordinal=chunk.ordinal, text=text)
                    if on_outcome is not None:
                        on_outcome(outcome)
                except Exception as exc:
                    with failures_lock:
                        failures.append((chunk.ordinal, exc))
                    abort.set()
                    Log.debug(f"Worker {worker} failed on chunk {chunk.ordinal}: {exc}")
                    return
                per_worker[worker].append(outcome)
                Log.debug(f"Worker {worker} recognized chunk {chunk.ordinal}")

        with ThreadPoolExecutor(
            max_workers=len(recognizers), thread_name_prefix="ocr-worker"
        ) as executor:
            wait([executor.submit(drain, worker) for worker in range(len(recognizers))])

        if failures:
            ordinal, first = failures[0]
            raise BatchRecognitionError(
                f"Recognition failed on chunk {ordinal}: {first}", ordinal=ordinal
            ) from first
        return [outcome for outcomes in per_worker for outcome in outcomes]

    @staticmethod
    def _close_all(recognizers: list[BaseRecognizer]) -> None:
        for recognizer in recognizers:
            try:
                recognizer.close()
            except Exception as exc:
                Log.warning(f"Failed to close recognizer: {exc}")
