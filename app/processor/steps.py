import threading

from app.extraction.extractor import RecordExtractor
from app.extraction.known_timestamps import KnownTimestamps
from app.logging.logger import Log
from app.ocr.models import RecognitionOutcome
from app.processor.file_loader import FileLoader
from app.processor.models import SourceImage
from app.processor.pipeline import PipelineContext, PipelineStep
from app.records.merger import merge
from app.scheduler.progress import ProgressListener
from app.scheduler.scheduler import RecognitionScheduler
from app.segmentation.segmenter import Segmenter, decode_image
from app.storage.base import BaseRecordStore
from app.storage.migration import load_normalized_records


class LoadRecordsStep(PipelineStep):
    """Loads stored records and seeds the batch's known time keys.

    Records stored before time keys were normalized are rewritten and the
    collection is saved back once.
    """

    def __init__(self, store: BaseRecordStore) -> None:
        self._store = store

    def run(self, context: PipelineContext) -> PipelineContext:
        context.existing_records = load_normalized_records(self._store)
        context.known_timestamps = KnownTimestamps(r.time for r in context.existing_records)
        Log.info(f"Loaded {len(context.existing_records)} stored records")
        return context


class LoadImagesStep(PipelineStep):
    def __init__(self, file_loader: FileLoader) -> None:
        self._file_loader = file_loader

    def run(self, context: PipelineContext) -> PipelineContext:
        context.images = [
            SourceImage(path=path, raw_bytes=self._file_loader.load(path))
            for path in context.image_paths
        ]
        Log.info(
            f"Loaded {len(context.images)} images "
            f"({sum(len(i.raw_bytes) for i in context.images)} bytes)"
        )
        return context


class SegmentImagesStep(PipelineStep):
    def __init__(self, segmenter: Segmenter) -> None:
        self._segmenter = segmenter

    def run(self, context: PipelineContext) -> PipelineContext:
        chunks = []
        for source in context.images:
            image = decode_image(source.raw_bytes)
            image_chunks = self._segmenter.segment(image, start_ordinal=len(chunks))
            Log.debug(f"{source.path.name}: {len(image_chunks)} chunks")
            chunks.extend(image_chunks)
        context.chunks = chunks
        Log.info(f"Segmented {len(context.images)} images into {len(chunks)} chunks")
        return context


class RecognizeStep(PipelineStep):
    """Recognizes every chunk in parallel and extracts records as each finishes."""

    def __init__(
        self,
        scheduler: RecognitionScheduler,
        extractor: RecordExtractor,
        on_progress: ProgressListener | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._extractor = extractor
        self._on_progress = on_progress

    def run(self, context: PipelineContext) -> PipelineContext:
        extracted_lock = threading.Lock()

        def extract(outcome: RecognitionOutcome) -> None:
            records = self._extractor.extract(outcome.text, context.known_timestamps)
            with extracted_lock:
                context.extracted[outcome.ordinal] = records
            Log.debug(f"Chunk {outcome.ordinal}: {len(records)} new records")

        def track(value: float) -> None:
            context.progress = value
            if self._on_progress is not None:
                self._on_progress(value)

        context.outcomes = self._scheduler.process(
            context.chunks, on_progress=track, on_outcome=extract
        )
        return context


class MergeRecordsStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        context.new_records = [
            record
            for ordinal in sorted(context.extracted)
            for record in context.extracted[ordinal]
        ]
        context.merged_records = merge(context.existing_records, context.new_records)
        Log.info(
            f"Merged {len(context.new_records)} new records "
            f"into {len(context.existing_records)} existing"
        )
        return context


class PersistRecordsStep(PipelineStep):
    def __init__(self, store: BaseRecordStore) -> None:
        self._store = store

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.new_records:
            Log.info("No new records, nothing to save")
            return context
        self._store.save_all(context.merged_records)
        return context


class ReportFailureStep(PipelineStep):
    """Logs the failure once; runs while the exception is being handled."""

    def run(self, context: PipelineContext) -> PipelineContext:
        log = Log.exception if Log.is_debug() else Log.error
        log(
            f"Ingestion of {len(context.image_paths)} images failed: {context.error_message}"
        )
        return context

