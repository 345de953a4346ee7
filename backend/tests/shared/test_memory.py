"""Tests for shared/memory.py."""

import pytest

from shared.memory import InMemoryDatabase, UniqueViolation


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


class TestInMemoryDatabase:
    def test_insert_and_get_return_copies(self, db):
        db.insert("rfds", {"id": "r1", "number": 1, "doc_id": "d1"})

        row = db.get("rfds", "r1")
        row["number"] = 99

        assert db.get("rfds", "r1")["number"] == 1

    def test_get_missing(self, db):
        assert db.get("rfds", "missing") is None

    def test_unique_single_column(self, db):
        db.insert("rfds", {"id": "r1", "number": 1, "doc_id": "d1"})

        with pytest.raises(UniqueViolation) as exc_info:
            db.insert("rfds", {"id": "r2", "number": 1, "doc_id": "d2"})

        assert exc_info.value.columns == ("number",)
        assert exc_info.value.code == "23505"
        assert exc_info.value.constraint == "rfds_number_key"

    def test_unique_composite(self, db):
        db.insert("rfd_endorsements", {"id": "e1", "rfd_id": "r1", "user_id": "u1"})
        db.insert("rfd_endorsements", {"id": "e2", "rfd_id": "r1", "user_id": "u2"})

        with pytest.raises(UniqueViolation) as exc_info:
            db.insert("rfd_endorsements", {"id": "e3", "rfd_id": "r1", "user_id": "u1"})

        assert exc_info.value.constraint == "rfd_endorsements_rfd_id_user_id_key"

    def test_null_values_do_not_collide(self, db):
        db.insert("rfds", {"id": "r1", "number": 1, "doc_id": None})
        db.insert("rfds", {"id": "r2", "number": 2, "doc_id": None})

        assert len(list(db.rows("rfds"))) == 2

    def test_update_checks_unique_against_other_rows(self, db):
        db.insert("rfds", {"id": "r1", "number": 1, "doc_id": "d1"})
        db.insert("rfds", {"id": "r2", "number": 2, "doc_id": "d2"})

        assert db.update("rfds", "r1", {"number": 1, "title": "Same"})["title"] == "Same"
        with pytest.raises(UniqueViolation):
            db.update("rfds", "r2", {"number": 1})

    def test_update_missing_row(self, db):
        assert db.update("rfds", "missing", {"title": "x"}) is None

    def test_delete_and_delete_where(self, db):
        db.insert("sessions", {"id": "s1", "user_id": "u1"})
        db.insert("sessions", {"id": "s2", "user_id": "u1"})
        db.insert("sessions", {"id": "s3", "user_id": "u2"})

        assert db.delete("sessions", "s3") is True
        assert db.delete("sessions", "s3") is False
        assert db.delete_where("sessions", lambda r: r["user_id"] == "u1") == 2
        assert list(db.rows("sessions")) == []

    def test_select(self, db):
        db.insert("users", {"id": "u1", "external_id": "g1", "role": "admin"})
        db.insert("users", {"id": "u2", "external_id": "g2", "role": "member"})

        admins = db.select("users", lambda r: r["role"] == "admin")

        assert [row["id"] for row in admins] == ["u1"]
