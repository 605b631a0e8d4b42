import psycopg

from app.database.connection import get_connection
from app.database.models import ExpenseRecordRow
from app.records.models import Category, Record
from app.storage.base import BaseRecordStore
from app.storage.exceptions import StorageError


class RecordsRepository(BaseRecordStore):
    """Database operations for the expense_records table."""

    def ensure_schema(self) -> None:
        """Create the expense_records table if it does not exist yet."""
        with get_connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS expense_records (
                    time TEXT PRIMARY KEY,
                    type TEXT NOT NULL,
                    amount NUMERIC NOT NULL CHECK (amount >= 0)
                )
                """
            )
            conn.commit()

    def get_all(self) -> list[Record]:
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT time, type, amount
                        FROM expense_records
                        ORDER BY time
                        """
                    )
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to load records: {exc}") from exc

        return [self._to_record(ExpenseRecordRow(*row)) for row in rows]

    def save_all(self, records: list[Record]) -> None:
        """Replace all rows in a single transaction."""
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("DELETE FROM expense_records")
                    if records:
                        cur.executemany(
                            """
                            INSERT INTO expense_records (time, type, amount)
                            VALUES (%s, %s, %s)
                            """,
                            [(r.time, r.category.value, r.amount) for r in records],
                        )
                conn.commit()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to save {len(records)} records: {exc}") from exc

    def clear(self) -> None:
        try:
            with get_connection() as conn:
                conn.execute("DELETE FROM expense_records")
                conn.commit()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to clear records: {exc}") from exc

    @staticmethod
    def _to_record(row: ExpenseRecordRow) -> Record:
        return Record(
            time=row.time,
            category=Category.from_label(row.type),
            amount=row.amount,
        )
