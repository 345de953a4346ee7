"""Tests for shared/repository.py."""

from datetime import datetime
from typing import Optional
from unittest.mock import MagicMock

from shared.repository import BaseRepository


class TestBaseRepository:
    """Tests for BaseRepository base class."""

    def test_init_stores_db_client(self):
        """Should store the database client in _db attribute."""
        mock_db = MagicMock()
        repo = BaseRepository(mock_db)
        assert repo._db is mock_db

    def test_generic_type_parameter(self):
        """Should work with generic type parameter."""

        class MockModel:
            pass

        class TestRepository(BaseRepository[MockModel]):
            def get_by_id(self, id: str) -> Optional[MockModel]:
                return None

        repo = TestRepository(MagicMock())
        assert repo.get_by_id("x") is None

    def test_now_iso_is_utc(self):
        stamp = datetime.fromisoformat(BaseRepository._now_iso())
        assert stamp.utcoffset().total_seconds() == 0
