from collections.abc import Sequence
from pathlib import Path

from app.config.settings import Settings
from app.extraction.extractor import RecordExtractor
from app.logging.logger import Log
from app.ocr.factory import RecognizerFactory
from app.processor.file_loader import FileLoader
from app.processor.models import IngestResult
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.steps import (
    LoadImagesStep,
    LoadRecordsStep,
    MergeRecordsStep,
    PersistRecordsStep,
    RecognizeStep,
    ReportFailureStep,
    SegmentImagesStep,
)
from app.scheduler.progress import ProgressListener
from app.scheduler.scheduler import RecognitionScheduler
from app.segmentation.segmenter import Segmenter
from app.storage.base import BaseRecordStore


class Processor:
    """Runs the ingestion pipeline for one batch of images.

    Pipeline: load records -> load images -> segment -> recognize + extract
    -> merge -> persist. Any failure aborts the batch, runs the failure step
    and propagates; nothing is saved in that case.
    """

    def __init__(self, steps: Sequence[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = list(steps)
        self._failed_step = failed_step

    def process(self, image_paths: Sequence[Path]) -> IngestResult:
        context = PipelineContext(image_paths=list(image_paths))
        Log.info(f"Processing batch of {len(context.image_paths)} images")
        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            context.error_message = str(exc)
            self._failed_step.run(context)
            raise

        return IngestResult(
            new_records=context.new_records,
            total_records=len(context.merged_records),
            chunk_count=len(context.chunks),
        )


def build_processor(
    settings: Settings,
    store: BaseRecordStore,
    on_progress: ProgressListener | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    scheduler = RecognitionScheduler(
        RecognizerFactory.provider(settings),
        max_workers=settings.ocr_max_workers,
    )
    steps: list[PipelineStep] = [
        LoadRecordsStep(store),
        LoadImagesStep(FileLoader()),
        SegmentImagesStep(Segmenter.from_settings(settings)),
        RecognizeStep(scheduler, RecordExtractor(), on_progress=on_progress),
        MergeRecordsStep(),
        PersistRecordsStep(store),
    ]
    return Processor(steps=steps, failed_step=ReportFailureStep())
