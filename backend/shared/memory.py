"""
In-memory relational store for development and testing.

Mirrors the Supabase schema closely enough for the in-memory repositories:
rows are plain dicts keyed by primary key, unique constraints are declared
per table, and every operation runs under a single lock so each repository
call is atomic, the same way a database function call is.
"""

import threading
from typing import Any, Callable, Iterator, Optional

from .database import UNIQUE_VIOLATION

Row = dict[str, Any]

UNIQUE_CONSTRAINTS: dict[str, list[tuple[str, ...]]] = {
    "users": [("external_id",)],
    "sessions": [],
    "rfds": [("number",), ("doc_id",)],
    "rfd_status_history": [],
    "rfd_endorsements": [("rfd_id", "user_id")],
}


class UniqueViolation(Exception):
    """Raised when an insert would break a unique constraint."""

    code = UNIQUE_VIOLATION

    def __init__(self, table: str, columns: tuple[str, ...]):
        # Named the way Postgres names inline unique constraints
        self.constraint = f"{table}_{'_'.join(columns)}_key"
        super().__init__(f'duplicate key value violates unique constraint "{self.constraint}"')
        self.table = table
        self.columns = columns


class InMemoryDatabase:
    """Thread-safe dict-of-tables store with unique constraints."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._tables: dict[str, dict[str, Row]] = {name: {} for name in UNIQUE_CONSTRAINTS}

    def rows(self, table: str) -> Iterator[Row]:
        """Iterate over copies of all rows in a table."""
        with self.lock:
            snapshot = [dict(row) for row in self._tables[table].values()]
        return iter(snapshot)

    def select(self, table: str, predicate: Callable[[Row], bool]) -> list[Row]:
        return [row for row in self.rows(table) if predicate(row)]

    def get(self, table: str, row_id: str) -> Optional[Row]:
        with self.lock:
            row = self._tables[table].get(row_id)
            return dict(row) if row is not None else None

    def insert(self, table: str, row: Row) -> Row:
        with self.lock:
            self._check_unique(table, row)
            self._tables[table][row["id"]] = dict(row)
            return dict(row)

    def update(self, table: str, row_id: str, changes: Row) -> Optional[Row]:
        with self.lock:
            current = self._tables[table].get(row_id)
            if current is None:
                return None
            merged = {**current, **changes}
            self._check_unique(table, merged, ignore_id=row_id)
            self._tables[table][row_id] = merged
            return dict(merged)

    def delete(self, table: str, row_id: str) -> bool:
        with self.lock:
            return self._tables[table].pop(row_id, None) is not None

    def delete_where(self, table: str, predicate: Callable[[Row], bool]) -> int:
        with self.lock:
            doomed = [key for key, row in self._tables[table].items() if predicate(row)]
            for key in doomed:
                del self._tables[table][key]
            return len(doomed)

    def _check_unique(self, table: str, row: Row, ignore_id: Optional[str] = None) -> None:
        for columns in UNIQUE_CONSTRAINTS[table]:
            key = tuple(row.get(column) for column in columns)
            if any(value is None for value in key):
                continue
            for existing_id, existing in self._tables[table].items():
                if existing_id == ignore_id:
                    continue
                if tuple(existing.get(column) for column in columns) == key:
                    raise UniqueViolation(table, columns)
