from decimal import Decimal
from unittest.mock import MagicMock, patch

import psycopg
import pytest

from app.database.repositories.records_repository import RecordsRepository
from app.records.models import Category, Record
from app.storage.exceptions import StorageError


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestGetAll:
    @patch("app.database.repositories.records_repository.get_connection")
    def test_maps_rows_to_records(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [
            ("2025-01-05 08:03:02", "饮水", Decimal("12.50")),
            ("2025-01-06 08:03:02", "unknown", Decimal("1")),
        ]

        records = RecordsRepository().get_all()

        assert records == [
            Record(time="2025-01-05 08:03:02", category=Category.WATER, amount=Decimal("12.50")),
            Record(time="2025-01-06 08:03:02", category=Category.OTHER, amount=Decimal("1")),
        ]
        sql = mock_cursor.execute.call_args.args[0]
        assert "expense_records" in sql

    @patch("app.database.repositories.records_repository.get_connection")
    def test_wraps_database_errors(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = psycopg.OperationalError("connection lost")

        with pytest.raises(StorageError, match="connection lost"):
            RecordsRepository().get_all()


class TestSaveAll:
    @patch("app.database.repositories.records_repository.get_connection")
    def test_replaces_rows_in_one_transaction(
        self, mock_get_conn: MagicMock, sample_records: list[Record]
    ) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)

        RecordsRepository().save_all(sample_records)

        assert "DELETE FROM expense_records" in mock_cursor.execute.call_args.args[0]
        sql, rows = mock_cursor.executemany.call_args.args
        assert "INSERT INTO expense_records" in sql
        assert rows[0] == ("2025-01-05 08:03:02", "饮水", Decimal("12.50"))
        assert len(rows) == len(sample_records)
        mock_conn.commit.assert_called_once()

    @patch("app.database.repositories.records_repository.get_connection")
    def test_empty_collection_only_deletes(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)

        RecordsRepository().save_all([])

        mock_cursor.executemany.assert_not_called()
        mock_conn.commit.assert_called_once()


class TestClear:
    @patch("app.database.repositories.records_repository.get_connection")
    def test_deletes_all_rows(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        RecordsRepository().clear()

        mock_conn.execute.assert_called_once_with("DELETE FROM expense_records")
        mock_conn.commit.assert_called_once()
