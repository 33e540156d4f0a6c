"""
Content store interface and in-memory backend.

The ingestion engine talks to persistence only through ``ContentStore``.
Rows are plain dicts with snake_case keys and an integer ``id`` drawn from a
per-table sequence.
"""
import copy
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from content_ingest.core.logging_config import logger
from content_ingest.utils.exceptions import ResetError, StorageError


class ContentTable(str, Enum):
    """Tables managed by the store, in dependency order (parents first)."""
    CHAPTER = "chapter"
    QUESTION = "question"
    REVISION = "revision_content"


# Natural unique keys enforced by the store itself
UNIQUE_KEYS = {
    ContentTable.CHAPTER: "chapter_number",
}


class ContentStore(ABC):
    """Persistence collaborator for chapters, questions and revision notes."""

    backend_name = "abstract"

    @abstractmethod
    def find_all(self, table: ContentTable) -> List[Dict[str, Any]]:
        """Return every row of ``table``."""

    @abstractmethod
    def find_duplicate(self, table: ContentTable, criteria: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Return the first row whose fields equal all of ``criteria``."""

    @abstractmethod
    def create(self, table: ContentTable, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert ``data`` under the next sequence id and return the stored row."""

    @abstractmethod
    def update(self, table: ContentTable, criteria: Dict[str, Any], data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Merge ``data`` into the first row matching ``criteria``."""

    @abstractmethod
    def delete_all(self, table: ContentTable) -> int:
        """Delete every row of ``table`` and return how many were removed."""

    @abstractmethod
    def reset_sequence(self, table: ContentTable) -> None:
        """Restart the id sequence of ``table`` so the next id is 1."""

    def upsert(
        self,
        table: ContentTable,
        key: Dict[str, Any],
        create: Dict[str, Any],
        update: Dict[str, Any]
    ) -> Tuple[Dict[str, Any], bool]:
        """
        Create or update the row identified by ``key``.

        Returns:
            (row, created) where created is False when an existing row was updated
        """
        if self.find_duplicate(table, key) is not None:
            return self.update(table, key, update), False
        return self.create(table, {**create, **key}), True

    def reset_tables(self, tables: Iterable[ContentTable]) -> None:
        """Wipe ``tables`` in the given order, then restart their sequences."""
        tables = list(tables)
        for table in tables:
            removed = self.delete_all(table)
            logger.info(f"[ContentStore] Deleted {removed} rows from {table.value}")
        for table in tables:
            self.reset_sequence(table)
            logger.info(f"[ContentStore] Sequence restarted for {table.value}")


class InMemoryContentStore(ContentStore):
    """Dict-backed store; resets are all-or-nothing."""

    backend_name = "memory"

    def __init__(self):
        self._lock = threading.RLock()
        self._rows: Dict[ContentTable, Dict[int, Dict[str, Any]]] = {table: {} for table in ContentTable}
        self._sequences: Dict[ContentTable, int] = {table: 0 for table in ContentTable}

    @staticmethod
    def _matches(row: Dict[str, Any], criteria: Dict[str, Any]) -> bool:
        return all(row.get(field) == value for field, value in criteria.items())

    def find_all(self, table: ContentTable) -> List[Dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(row) for _, row in sorted(self._rows[table].items())]

    def find_duplicate(self, table: ContentTable, criteria: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            for _, row in sorted(self._rows[table].items()):
                if self._matches(row, criteria):
                    return copy.deepcopy(row)
        return None

    def create(self, table: ContentTable, data: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            unique_field = UNIQUE_KEYS.get(table)
            if unique_field and self.find_duplicate(table, {unique_field: data.get(unique_field)}):
                raise StorageError(
                    f"Unique constraint failed on {table.value}.{unique_field}={data.get(unique_field)}"
                )

            self._sequences[table] += 1
            row = copy.deepcopy(data)
            row["id"] = self._sequences[table]
            self._rows[table][row["id"]] = row
            return copy.deepcopy(row)

    def update(self, table: ContentTable, criteria: Dict[str, Any], data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            for _, row in sorted(self._rows[table].items()):
                if self._matches(row, criteria):
                    row.update(copy.deepcopy({k: v for k, v in data.items() if k != "id"}))
                    return copy.deepcopy(row)
        return None

    def delete_all(self, table: ContentTable) -> int:
        with self._lock:
            removed = len(self._rows[table])
            self._rows[table] = {}
            return removed

    def reset_sequence(self, table: ContentTable) -> None:
        with self._lock:
            self._sequences[table] = 0

    def reset_tables(self, tables: Iterable[ContentTable]) -> None:
        with self._lock:
            rows_snapshot = copy.deepcopy(self._rows)
            sequences_snapshot = dict(self._sequences)
            try:
                super().reset_tables(tables)
            except Exception as e:
                self._rows = rows_snapshot
                self._sequences = sequences_snapshot
                logger.error(f"[ContentStore] Reset failed, previous state restored: {e}")
                raise ResetError(f"Reset failed: {e}") from e
