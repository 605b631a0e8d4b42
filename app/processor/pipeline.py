from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from app.extraction.known_timestamps import KnownTimestamps
from app.ocr.models import RecognitionOutcome
from app.processor.models import SourceImage
from app.records.models import Record
from app.segmentation.models import ImageChunk


@dataclass(slots=True)
class PipelineContext:
    image_paths: list[Path]
    existing_records: list[Record] = field(default_factory=list)
    known_timestamps: KnownTimestamps = field(default_factory=KnownTimestamps)
    images: list[SourceImage] = field(default_factory=list)
    chunks: list[ImageChunk] = field(default_factory=list)
    outcomes: list[RecognitionOutcome] = field(default_factory=list)
    extracted: dict[int, list[Record]] = field(default_factory=dict)
    new_records: list[Record] = field(default_factory=list)
    merged_records: list[Record] = field(default_factory=list)
    progress: float = 0.0
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
