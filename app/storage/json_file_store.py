import json
import os
import tempfile
from pathlib import Path

from app.records.exceptions import ImportParseError
from app.records.json_codec import record_from_dict
from app.records.models import Record
from app.storage.base import BaseRecordStore
from app.storage.exceptions import StorageError


class JsonFileRecordStore(BaseRecordStore):
    """Keeps the record collection as a flat JSON array in a single file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def get_all(self) -> list[Record]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Failed to read {self._path}: {exc}") from exc
        if not isinstance(data, list):
            raise StorageError(f"{self._path} does not contain a JSON array")
        try:
            return [record_from_dict(item, i, normalize=False) for i, item in enumerate(data)]
        except (ImportParseError, AttributeError) as exc:
            raise StorageError(f"Corrupt record in {self._path}: {exc}") from exc

    def save_all(self, records: list[Record]) -> None:
        payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write {self._path}: {exc}") from exc

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to remove {self._path}: {exc}") from exc
