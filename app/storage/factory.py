from pathlib import Path

from app.config.settings import Settings
from app.database.connection import init_pool
from app.database.repositories.records_repository import RecordsRepository
from app.storage.base import BaseRecordStore
from app.storage.json_file_store import JsonFileRecordStore


class RecordStoreFactory:
    """Creates the record store selected by ``storage_backend``."""

    BACKENDS: tuple[str, ...] = ("json", "postgres")

    @classmethod
    def create(cls, settings: Settings) -> BaseRecordStore:
        backend = settings.storage_backend.lower()
        if backend == "json":
            return JsonFileRecordStore(Path(settings.storage_path))
        if backend == "postgres":
            init_pool(settings)
            repo = RecordsRepository()
            repo.ensure_schema()
            return repo
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
