from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image

from app.extraction.extractor import RecordExtractor
from app.ocr.example_adapter import ExampleRecognizer
from app.processor.file_loader import FileLoader
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.processor import Processor
from app.processor.steps import (
    LoadImagesStep,
    LoadRecordsStep,
    MergeRecordsStep,
    PersistRecordsStep,
    RecognizeStep,
    ReportFailureStep,
    SegmentImagesStep,
)
from app.records.models import Category, Record
from app.scheduler.exceptions import BatchRecognitionError
from app.scheduler.scheduler import RecognitionScheduler
from app.segmentation.segmenter import Segmenter
from app.storage.base import BaseRecordStore
from app.storage.json_file_store import JsonFileRecordStore

LOG_TEXT = (
    "饮水\n-1.50\n2025-01-05 08:03:02\n余额 23.10\n"
    "洗浴\n-3.00\n2025-01-05 21:10:45\n余额 20.10"
)


def _passthrough_step(name: str, call_order: list[str]) -> MagicMock:
    step = MagicMock(spec=PipelineStep)

    def run(context: PipelineContext) -> PipelineContext:
        call_order.append(name)
        return context

    step.run.side_effect = run
    return step


def _make_pipeline(
    tmp_path: Path, text: str = LOG_TEXT, max_workers: int = 2
) -> tuple[Processor, JsonFileRecordStore]:
    store = JsonFileRecordStore(tmp_path / "records.json")
    scheduler = RecognitionScheduler(lambda: ExampleRecognizer(text), max_workers=max_workers)
    steps: list[PipelineStep] = [
        LoadRecordsStep(store),
        LoadImagesStep(FileLoader()),
        SegmentImagesStep(Segmenter(target_height=40, scan_range=10, scan_stride=1)),
        RecognizeStep(scheduler, RecordExtractor()),
        MergeRecordsStep(),
        PersistRecordsStep(store),
    ]
    return Processor(steps=steps, failed_step=ReportFailureStep()), store


def _write_image(path: Path, height: int = 100) -> Path:
    Image.new("RGB", (60, height), "white").save(path, format="PNG")
    return path


class TestProcessorSteps:
    def test_runs_steps_in_order(self) -> None:
        call_order: list[str] = []
        steps = [_passthrough_step(name, call_order) for name in ("first", "second", "third")]
        failed_step = _passthrough_step("failed", call_order)

        result = Processor(steps=steps, failed_step=failed_step).process([Path("a.png")])

        assert call_order == ["first", "second", "third"]
        assert result.new_records == []
        assert result.chunk_count == 0

    def test_runs_failed_step_and_reraises(self) -> None:
        call_order: list[str] = []
        first = _passthrough_step("first", call_order)
        broken = MagicMock(spec=PipelineStep)
        broken.run.side_effect = BatchRecognitionError("engine crashed", ordinal=3)
        never = _passthrough_step("never", call_order)
        failed_step = MagicMock(spec=PipelineStep)

        processor = Processor(steps=[first, broken, never], failed_step=failed_step)
        with pytest.raises(BatchRecognitionError, match="engine crashed"):
            processor.process([Path("a.png")])

        assert call_order == ["first"]
        context = failed_step.run.call_args.args[0]
        assert context.error_message == "engine crashed"

    def test_persist_skipped_without_new_records(self) -> None:
        store = MagicMock(spec=BaseRecordStore)
        context = PipelineContext(image_paths=[])

        PersistRecordsStep(store).run(context)

        store.save_all.assert_not_called()

    def test_merge_orders_records_by_chunk(self) -> None:
        early = Record(time="2025-01-05 08:03:02", category=Category.WATER, amount=Decimal("1"))
        late = Record(time="2025-01-04 08:03:02", category=Category.BATH, amount=Decimal("2"))
        context = PipelineContext(image_paths=[], extracted={2: [late], 0: [early]})

        MergeRecordsStep().run(context)

        assert context.new_records == [early, late]
        assert context.merged_records == [early, late]


class TestProcessorEndToEnd:
    def test_ingests_images_once_per_time_key(self, tmp_path: Path) -> None:
        processor, store = _make_pipeline(tmp_path)
        paths = [_write_image(tmp_path / "a.png"), _write_image(tmp_path / "b.png", height=30)]

        result = processor.process(paths)

        assert result.chunk_count >= 3
        assert sorted(r.time for r in result.new_records) == [
            "2025-01-05 08:03:02",
            "2025-01-05 21:10:45",
        ]
        assert result.total_records == 2
        assert store.get_all() == result.new_records
        assert result.new_records[0].category is not result.new_records[1].category

    def test_second_batch_adds_nothing(self, tmp_path: Path) -> None:
        processor, store = _make_pipeline(tmp_path)
        path = _write_image(tmp_path / "a.png")
        processor.process([path])

        result = processor.process([path])

        assert result.new_records == []
        assert len(store.get_all()) == 2

    def test_existing_records_are_never_replaced(self, tmp_path: Path) -> None:
        processor, store = _make_pipeline(tmp_path)
        stored = Record(time="2025-01-05 08:03:02", category=Category.OTHER, amount=Decimal("9"))
        store.save_all([stored])

        result = processor.process([_write_image(tmp_path / "a.png")])

        assert [r.time for r in result.new_records] == ["2025-01-05 21:10:45"]
        assert store.get_all()[0] == stored

    def test_unsupported_file_saves_nothing(self, tmp_path: Path) -> None:
        processor, store = _make_pipeline(tmp_path)
        bad = tmp_path / "notes.txt"
        bad.write_text("hello", encoding="utf-8")

        with pytest.raises(Exception, match="not a supported image type"):
            processor.process([_write_image(tmp_path / "a.png"), bad])

        assert not store.path.exists()

    def test_progress_reaches_one(self, tmp_path: Path) -> None:
        store = JsonFileRecordStore(tmp_path / "records.json")
        seen: list[float] = []
        step = RecognizeStep(
            RecognitionScheduler(lambda: ExampleRecognizer(LOG_TEXT), max_workers=2),
            RecordExtractor(),
            on_progress=seen.append,
        )
        context = LoadRecordsStep(store).run(PipelineContext(image_paths=[]))
        context.chunks = Segmenter(target_height=40, scan_range=10).segment(
            Image.new("RGB", (60, 100), "white")
        )

        step.run(context)

        assert seen[-1] == 1.0
        assert seen == sorted(seen)
        assert context.progress == 1.0
