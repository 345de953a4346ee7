"""
Endorsement repository for database access (`rfd_endorsements` table).

The `(rfd_id, user_id)` unique constraint is the authority on double
endorsements; `create` reports a violation by returning None.
"""

import logging
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Optional

from shared.database import is_unique_violation
from shared.memory import InMemoryDatabase, UniqueViolation
from shared.repository import BaseRepository

from .models import Endorsement, Endorser

logger = logging.getLogger(__name__)

ENDORSER_COLUMNS = "user_id, created_at, users(name, avatar_url)"


def map_to_endorser(data: dict[str, Any]) -> Endorser:
    user = data.get("users") or {}
    return Endorser(
        user_id=str(data["user_id"]),
        name=user.get("name") or "Unknown",
        avatar_url=user.get("avatar_url"),
        endorsed_at=data["created_at"],
    )


class EndorsementRepository(BaseRepository[Endorsement]):
    """Supabase-backed endorsement repository."""

    def exists(self, rfd_id: str, user_id: str) -> bool:
        result = (
            self._db.table("rfd_endorsements")
            .select("id")
            .eq("rfd_id", rfd_id)
            .eq("user_id", user_id)
            .execute()
        )
        return bool(result.data)

    def create(self, rfd_id: str, user_id: str) -> Optional[Endorsement]:
        data = {"id": str(uuid.uuid4()), "rfd_id": rfd_id, "user_id": user_id}
        try:
            result = self._db.table("rfd_endorsements").insert(data).execute()
        except Exception as e:
            if is_unique_violation(e):
                return None
            raise
        return Endorsement(**result.data[0])

    def delete(self, rfd_id: str, user_id: str) -> bool:
        result = (
            self._db.table("rfd_endorsements")
            .delete()
            .eq("rfd_id", rfd_id)
            .eq("user_id", user_id)
            .execute()
        )
        return bool(result.data)

    def list_endorsers(self, rfd_id: str) -> list[Endorser]:
        result = (
            self._db.table("rfd_endorsements")
            .select(ENDORSER_COLUMNS)
            .eq("rfd_id", rfd_id)
            .order("created_at")
            .execute()
        )
        return [map_to_endorser(row) for row in result.data]

    def count_by_rfd(self, rfd_ids: list[str]) -> dict[str, int]:
        if not rfd_ids:
            return {}
        result = (
            self._db.table("rfd_endorsements")
            .select("rfd_id")
            .in_("rfd_id", rfd_ids)
            .execute()
        )
        return dict(Counter(str(row["rfd_id"]) for row in result.data))

    def endorsed_rfd_ids(self, user_id: str, rfd_ids: list[str]) -> set[str]:
        if not rfd_ids:
            return set()
        result = (
            self._db.table("rfd_endorsements")
            .select("rfd_id")
            .eq("user_id", user_id)
            .in_("rfd_id", rfd_ids)
            .execute()
        )
        return {str(row["rfd_id"]) for row in result.data}


class InMemoryEndorsementRepository:
    """Endorsement repository backed by the in-memory database."""

    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def exists(self, rfd_id: str, user_id: str) -> bool:
        return bool(self._db.select("rfd_endorsements", self._pair(rfd_id, user_id)))

    def create(self, rfd_id: str, user_id: str) -> Optional[Endorsement]:
        try:
            row = self._db.insert("rfd_endorsements", {
                "id": str(uuid.uuid4()),
                "rfd_id": rfd_id,
                "user_id": user_id,
                "created_at": datetime.now(timezone.utc),
            })
        except UniqueViolation:
            return None
        return Endorsement(**row)

    def delete(self, rfd_id: str, user_id: str) -> bool:
        return self._db.delete_where("rfd_endorsements", self._pair(rfd_id, user_id)) > 0

    def list_endorsers(self, rfd_id: str) -> list[Endorser]:
        rows = self._db.select("rfd_endorsements", lambda r: r["rfd_id"] == rfd_id)
        rows.sort(key=lambda r: r["created_at"])
        return [
            map_to_endorser({**row, "users": self._db.get("users", row["user_id"])})
            for row in rows
        ]

    def count_by_rfd(self, rfd_ids: list[str]) -> dict[str, int]:
        wanted = set(rfd_ids)
        rows = self._db.select("rfd_endorsements", lambda r: r["rfd_id"] in wanted)
        return dict(Counter(row["rfd_id"] for row in rows))

    def endorsed_rfd_ids(self, user_id: str, rfd_ids: list[str]) -> set[str]:
        wanted = set(rfd_ids)
        rows = self._db.select(
            "rfd_endorsements",
            lambda r: r["user_id"] == user_id and r["rfd_id"] in wanted,
        )
        return {row["rfd_id"] for row in rows}

    @staticmethod
    def _pair(rfd_id: str, user_id: str):
        return lambda r: r["rfd_id"] == rfd_id and r["user_id"] == user_id
