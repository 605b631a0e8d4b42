from app.extraction.timekeys import normalize_time
from app.logging.logger import Log
from app.records.merger import filter_new
from app.records.models import Record
from app.storage.base import BaseRecordStore


def load_normalized_records(store: BaseRecordStore) -> list[Record]:
    """Return stored records with normalized time keys.

    Collections written before keys were normalized (``2025/1/5 ...``) are
    rewritten in place once; records that collapse onto the same key keep the
    first occurrence.
    """
    stored = store.get_all()
    normalized = [_with_normalized_time(record) for record in stored]
    if normalized == stored:
        return stored
    migrated = filter_new([], normalized)
    Log.info(f"Normalized stored time keys ({len(stored)} -> {len(migrated)} records)")
    store.save_all(migrated)
    return migrated


def _with_normalized_time(record: Record) -> Record:
    time = normalize_time(record.time)
    if time == record.time:
        return record
    return Record(time=time, category=record.category, amount=record.amount)
