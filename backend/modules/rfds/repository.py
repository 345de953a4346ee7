"""
RFD repository for database access.

Encapsulates all queries and data mapping for the RFD tables:
- rfds
- rfd_status_history

Number allocation and the update-plus-history write go through database
functions (`create_rfd`, `update_rfd_with_history`) so each is a single
transaction. The in-memory repository gets the same guarantee from the
database lock.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from shared.database import is_serialization_failure, is_uuid
from shared.memory import InMemoryDatabase, Row
from shared.models import AuthenticatedUser
from shared.repository import BaseRepository

from .exceptions import MalformedRecordError
from .models import (
    RfdQuery,
    RfdRecord,
    RfdStatus,
    StatusHistoryEntry,
    stored_values,
)

logger = logging.getLogger(__name__)

RFD_COLUMNS = "*, author:users(name, email)"
HISTORY_COLUMNS = "*, changed_by_user:users(name)"


def _describe(error: PydanticValidationError) -> str:
    return "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in error.errors())


def map_to_rfd(data: dict[str, Any]) -> RfdRecord:
    """
    Map an `rfds` row (optionally with its joined author) to a model.

    Raises:
        MalformedRecordError: If the row does not validate
    """
    row = dict(data)
    author = row.pop("author", None) or {}
    row.setdefault("author_name", author.get("name"))
    row.setdefault("author_email", author.get("email"))
    try:
        return RfdRecord.model_validate(row)
    except PydanticValidationError as e:
        reason = _describe(e)
        logger.error(f"Malformed RFD row {row.get('id')}: {reason}")
        raise MalformedRecordError("rfds", str(row.get("id")), reason) from e


def map_to_history(data: dict[str, Any]) -> StatusHistoryEntry:
    row = dict(data)
    changed_by_user = row.pop("changed_by_user", None) or {}
    row.setdefault("changed_by_name", changed_by_user.get("name"))
    try:
        return StatusHistoryEntry.model_validate(row)
    except PydanticValidationError as e:
        reason = _describe(e)
        logger.error(f"Malformed status history row {row.get('id')}: {reason}")
        raise MalformedRecordError("rfd_status_history", str(row.get("id")), reason) from e


def collect_tags(rows: list[dict[str, Any]]) -> list[str]:
    """Unique, sorted tags across rows. Malformed tag values are an error."""
    tags: set[str] = set()
    for row in rows:
        value = row.get("tags")
        if value is None:
            continue
        if not isinstance(value, list) or not all(isinstance(tag, str) for tag in value):
            raise MalformedRecordError("rfds", str(row.get("id")), "tags must be a list of strings")
        tags.update(value)
    return sorted(tags)


def _visibility_filter(viewer: AuthenticatedUser) -> str:
    """PostgREST `or` filter: non-drafts, plus the viewer's own drafts."""
    return f"status.neq.{RfdStatus.DRAFT.value},author_id.eq.{viewer.id}"


class RfdRepository(BaseRepository[RfdRecord]):
    """
    Supabase-backed RFD repository.

    Note: This repository does NOT perform policy checks. Visibility is
    applied in the queries of the `*_visible` methods; everything else is
    the service layer's job.
    """

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create_rfd(self, data: dict[str, Any]) -> RfdRecord:
        params = {
            "p_id": data["id"],
            "p_title": data["title"],
            "p_summary": data.get("summary"),
            "p_author_id": data["author_id"],
            "p_doc_id": data.get("doc_id"),
            "p_doc_url": data.get("doc_url"),
            "p_tags": data.get("tags", []),
        }
        self._db.rpc("create_rfd", params).execute()
        created = self.get(data["id"])
        if created is None:
            raise RuntimeError(f"RFD {data['id']} missing after insert")
        return created

    def update_rfd(
        self,
        rfd_id: str,
        expected_status: RfdStatus,
        changes: dict[str, Any],
        history: Optional[dict[str, Any]] = None,
    ) -> Optional[RfdRecord]:
        params = {
            "p_rfd_id": rfd_id,
            "p_expected_statuses": stored_values(expected_status),
            "p_changes": changes,
            "p_changed_by": history["changed_by"] if history else None,
            "p_comment": history.get("comment") if history else None,
        }
        try:
            self._db.rpc("update_rfd_with_history", params).execute()
        except Exception as e:
            if is_serialization_failure(e):
                logger.info(f"Lost concurrent update on RFD {rfd_id}")
                return None
            raise
        return self.get(rfd_id)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, rfd_id: str) -> Optional[RfdRecord]:
        if not is_uuid(rfd_id):
            return None
        result = self._db.table("rfds").select(RFD_COLUMNS).eq("id", rfd_id).execute()
        if not result.data:
            return None
        return map_to_rfd(result.data[0])

    def get_visible(self, rfd_id: str, viewer: AuthenticatedUser) -> Optional[RfdRecord]:
        # Ids come from the URL; Postgres rejects non-uuid text outright
        if not is_uuid(rfd_id):
            return None
        query = self._db.table("rfds").select(RFD_COLUMNS).eq("id", rfd_id)
        if not viewer.is_admin:
            query = query.or_(_visibility_filter(viewer))
        result = query.execute()
        if not result.data:
            return None
        return map_to_rfd(result.data[0])

    def get_visible_by_number(
        self,
        number: int,
        viewer: AuthenticatedUser,
    ) -> Optional[RfdRecord]:
        query = self._db.table("rfds").select(RFD_COLUMNS).eq("number", number)
        if not viewer.is_admin:
            query = query.or_(_visibility_filter(viewer))
        result = query.execute()
        if not result.data:
            return None
        return map_to_rfd(result.data[0])

    def list_visible(
        self,
        viewer: AuthenticatedUser,
        query: RfdQuery,
        offset: int,
        limit: int,
    ) -> tuple[list[RfdRecord], int]:
        if query.author_id and not is_uuid(query.author_id):
            return [], 0
        db_query = (
            self._db.table("rfds")
            .select(RFD_COLUMNS, count="exact")
            .eq("is_active", True)
        )
        if not (viewer.is_admin and query.include_drafts):
            db_query = db_query.or_(_visibility_filter(viewer))
        if query.status is not None:
            db_query = db_query.in_("status", stored_values(query.status))
        if query.author_id:
            db_query = db_query.eq("author_id", query.author_id)
        if query.tag:
            db_query = db_query.contains("tags", [query.tag])

        result = (
            db_query
            .order("updated_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        rfds = [map_to_rfd(row) for row in result.data]
        return rfds, result.count or 0

    def list_history(self, rfd_id: str) -> list[StatusHistoryEntry]:
        if not is_uuid(rfd_id):
            return []
        result = (
            self._db.table("rfd_status_history")
            .select(HISTORY_COLUMNS)
            .eq("rfd_id", rfd_id)
            .order("created_at")
            .execute()
        )
        return [map_to_history(row) for row in result.data]

    def list_visible_tags(self, viewer: AuthenticatedUser) -> list[str]:
        result = (
            self._db.table("rfds")
            .select("id, tags")
            .eq("is_active", True)
            .or_(_visibility_filter(viewer))
            .execute()
        )
        return collect_tags(result.data)


class InMemoryRfdRepository:
    """
    RFD repository backed by the in-memory database.

    Each method holds the database lock for its whole body, which gives
    number allocation and update-plus-history the same atomicity as the
    database functions.
    """

    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def create_rfd(self, data: dict[str, Any]) -> RfdRecord:
        now = datetime.now(timezone.utc)
        with self._db.lock:
            numbers = [row["number"] for row in self._db.rows("rfds")]
            row = {
                "summary": None,
                "doc_id": None,
                "doc_url": None,
                "tags": [],
                "is_active": True,
                "last_synced_at": now,
                **data,
                "number": max(numbers, default=0) + 1,
                "status": RfdStatus.DRAFT.value,
                "created_at": now,
                "updated_at": now,
            }
            self._db.insert("rfds", row)
            return self._with_author(row)

    def update_rfd(
        self,
        rfd_id: str,
        expected_status: RfdStatus,
        changes: dict[str, Any],
        history: Optional[dict[str, Any]] = None,
    ) -> Optional[RfdRecord]:
        now = datetime.now(timezone.utc)
        with self._db.lock:
            current = self._db.get("rfds", rfd_id)
            if current is None:
                return None
            if RfdStatus.from_stored(current["status"]) is not expected_status:
                logger.info(f"Lost concurrent update on RFD {rfd_id}")
                return None

            updated = self._db.update("rfds", rfd_id, {**changes, "updated_at": now})
            if history is not None:
                self._db.insert("rfd_status_history", {
                    "id": str(uuid.uuid4()),
                    "rfd_id": rfd_id,
                    "from_status": current["status"],
                    "to_status": changes["status"],
                    "changed_by": history["changed_by"],
                    "comment": history.get("comment"),
                    "created_at": now,
                })
            return self._with_author(updated)

    def get(self, rfd_id: str) -> Optional[RfdRecord]:
        row = self._db.get("rfds", rfd_id)
        return self._with_author(row) if row else None

    def get_visible(self, rfd_id: str, viewer: AuthenticatedUser) -> Optional[RfdRecord]:
        row = self._db.get("rfds", rfd_id)
        if row is None or not self._visible(row, viewer, include_drafts=viewer.is_admin):
            return None
        return self._with_author(row)

    def get_visible_by_number(
        self,
        number: int,
        viewer: AuthenticatedUser,
    ) -> Optional[RfdRecord]:
        rows = self._db.select(
            "rfds",
            lambda r: r["number"] == number and self._visible(r, viewer, viewer.is_admin),
        )
        return self._with_author(rows[0]) if rows else None

    def list_visible(
        self,
        viewer: AuthenticatedUser,
        query: RfdQuery,
        offset: int,
        limit: int,
    ) -> tuple[list[RfdRecord], int]:
        include_drafts = viewer.is_admin and query.include_drafts
        statuses = stored_values(query.status) if query.status is not None else None

        def matches(row: Row) -> bool:
            if not row.get("is_active", True):
                return False
            if not self._visible(row, viewer, include_drafts):
                return False
            if statuses is not None and row["status"] not in statuses:
                return False
            if query.author_id and row["author_id"] != query.author_id:
                return False
            if query.tag and query.tag not in (row.get("tags") or []):
                return False
            return True

        rows = self._db.select("rfds", matches)
        rows.sort(key=lambda r: r["updated_at"], reverse=True)
        page = rows[offset:offset + limit]
        return [self._with_author(row) for row in page], len(rows)

    def list_history(self, rfd_id: str) -> list[StatusHistoryEntry]:
        rows = self._db.select("rfd_status_history", lambda r: r["rfd_id"] == rfd_id)
        rows.sort(key=lambda r: r["created_at"])
        entries = []
        for row in rows:
            user = self._db.get("users", row["changed_by"])
            entries.append(map_to_history({
                **row,
                "changed_by_user": {"name": user["name"]} if user else None,
            }))
        return entries

    def list_visible_tags(self, viewer: AuthenticatedUser) -> list[str]:
        rows = self._db.select(
            "rfds",
            lambda r: r.get("is_active", True) and self._visible(r, viewer, False),
        )
        return collect_tags(rows)

    @staticmethod
    def _visible(row: Row, viewer: AuthenticatedUser, include_drafts: bool) -> bool:
        if include_drafts:
            return True
        return row["status"] != RfdStatus.DRAFT.value or row["author_id"] == viewer.id

    def _with_author(self, row: Row) -> RfdRecord:
        author = self._db.get("users", row["author_id"])
        return map_to_rfd({
            **row,
            "author": {"name": author["name"], "email": author["email"]} if author else None,
        })
