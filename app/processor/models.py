from dataclasses import dataclass, field
from pathlib import Path

from app.records.models import Record


@dataclass(frozen=True)
class SourceImage:
    """An uploaded image file and its raw bytes."""

    path: Path
    raw_bytes: bytes


@dataclass
class IngestResult:
    """Summary of one ingestion batch handed back to the caller."""

    new_records: list[Record] = field(default_factory=list)
    total_records: int = 0
    chunk_count: int = 0
