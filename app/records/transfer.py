"""File import and export of the record collection."""

from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import ClassVar

from app.logging.logger import Log
from app.records.csv_codec import export_csv, import_csv
from app.records.exceptions import (
    EmptyCollectionError,
    ImportParseError,
    UnsupportedFormatError,
)
from app.records.json_codec import export_json, import_json
from app.records.merger import filter_new
from app.records.models import Record
from app.storage.base import BaseRecordStore
from app.storage.migration import load_normalized_records


class RecordTransfer:
    """Imports record files into the store and exports the store to files."""

    IMPORTERS: ClassVar[dict[str, Callable[[str], list[Record]]]] = {
        ".json": import_json,
        ".csv": import_csv,
    }
    EXPORTERS: ClassVar[dict[str, Callable[[list[Record]], str]]] = {
        "json": export_json,
        "csv": export_csv,
    }
    # CSV rows are validated one by one, so undecodable bytes are replaced
    # and left to the row checks; a JSON document must decode as a whole.
    DECODE_ERRORS: ClassVar[dict[str, str]] = {
        ".json": "strict",
        ".csv": "replace",
    }
    FILE_PREFIXES: ClassVar[dict[str, str]] = {
        "json": "expense_backup",
        "csv": "expense_export",
    }

    def __init__(self, store: BaseRecordStore) -> None:
        self._store = store

    def import_file(self, path: Path) -> list[Record]:
        """Import records from a ``.json`` or ``.csv`` file.

        Only records with new time keys are added; the store is written once.

        Returns:
            The records that were added.

        Raises:
            UnsupportedFormatError: for any other extension.
            ImportParseError: if a JSON file cannot be decoded or parsed.
        """
        suffix = path.suffix.lower()
        importer = self.IMPORTERS.get(suffix)
        if importer is None:
            raise UnsupportedFormatError(f"Unsupported import file: {path.name}")
        try:
            content = path.read_bytes().decode("utf-8-sig", errors=self.DECODE_ERRORS[suffix])
        except UnicodeDecodeError as exc:
            raise ImportParseError(f"{path.name} is not valid UTF-8: {exc}") from exc
        items = importer(content)

        existing = load_normalized_records(self._store)
        fresh = filter_new(existing, items)
        if fresh:
            self._store.save_all([*existing, *fresh])
        Log.info(f"Imported {len(fresh)} of {len(items)} records from {path.name}")
        return fresh

    def export_text(self, fmt: str) -> str:
        exporter = self.EXPORTERS.get(fmt)
        if exporter is None:
            raise UnsupportedFormatError(f"Unsupported export format: {fmt}")
        records = self._store.get_all()
        if not records:
            raise EmptyCollectionError("No records to export")
        return exporter(records)

    def export_file(self, directory: Path, fmt: str, today: date | None = None) -> Path:
        """Write the collection to ``directory`` and return the file path."""
        content = self.export_text(fmt)
        path = directory / export_file_name(fmt, today or date.today())
        directory.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8", newline="")
        Log.info(f"Exported records to {path}")
        return path


def export_file_name(fmt: str, day: date) -> str:
    return f"{RecordTransfer.FILE_PREFIXES[fmt]}_{day.isoformat()}.{fmt}"
