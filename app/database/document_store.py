"""
Generic document-store access over Supabase tables.

Services talk to collections through ``DocumentStore`` instead of building
PostgREST queries themselves, so every collection gets the same
create/get/list/update/delete surface and the same filter vocabulary.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union
import logging

from supabase import Client

from app.core.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

USERS = "users"
WORKSHOPS = "workshops"
APPLICATIONS = "applications"


@dataclass(frozen=True)
class Equal:
    field: str
    value: Any


@dataclass(frozen=True)
class OrderDesc:
    field: str


@dataclass(frozen=True)
class Search:
    """Case-insensitive substring match on a text column."""
    field: str
    text: str


@dataclass(frozen=True)
class Limit:
    count: int


@dataclass(frozen=True)
class Offset:
    count: int


Filter = Union[Equal, OrderDesc, Search, Limit, Offset]


@dataclass
class ListResult:
    records: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0


class RecordNotFound(NotFoundError):
    def __init__(self, collection: str, record_id: str):
        super().__init__(detail=f"{collection} record {record_id} not found")
        self.collection = collection
        self.record_id = record_id


class StaleRecordError(ConflictError):
    """Conditional update lost: the record no longer matches the expected values."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(detail=f"{collection} record {record_id} was modified concurrently")
        self.collection = collection
        self.record_id = record_id


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class DocumentStore:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create(self, collection: str, data: Dict[str, Any], record_id: Optional[str] = None) -> Dict[str, Any]:
        """Insert a record. The store assigns id and created_at unless record_id is given."""
        payload = dict(data)
        if record_id:
            payload["id"] = record_id
        result = self.supabase.table(collection).insert(payload).execute()
        if not result.data:
            raise RuntimeError(f"Insert into {collection} returned no rows")
        return result.data[0]

    def get(self, collection: str, record_id: str) -> Dict[str, Any]:
        result = self.supabase.table(collection)\
            .select("*")\
            .eq("id", record_id)\
            .maybe_single()\
            .execute()
        # maybe_single() yields None instead of an empty response on recent clients
        if result is None or not result.data:
            raise RecordNotFound(collection, record_id)
        return result.data

    def list(self, collection: str, filters: Sequence[Filter] = ()) -> ListResult:
        """List records matching every filter. total counts all matches, ignoring limit/offset."""
        query = self.supabase.table(collection).select("*", count="exact")
        limit = None
        offset = None
        for f in filters:
            if isinstance(f, Equal):
                query = query.eq(f.field, f.value)
            elif isinstance(f, OrderDesc):
                query = query.order(f.field, desc=True)
            elif isinstance(f, Search):
                query = query.ilike(f.field, f"%{_escape_like(f.text)}%")
            elif isinstance(f, Limit):
                limit = f.count
            elif isinstance(f, Offset):
                offset = f.count
            else:
                raise TypeError(f"Unsupported filter: {f!r}")
        if limit is not None:
            query = query.limit(limit)
        if offset is not None:
            query = query.offset(offset)
        result = query.execute()
        records = result.data or []
        total = result.count if result.count is not None else len(records)
        return ListResult(records=records, total=total)

    def update(
        self,
        collection: str,
        record_id: str,
        data: Dict[str, Any],
        expected: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Partial update. With expected, the write only applies while those columns still hold those values."""
        query = self.supabase.table(collection)\
            .update(data)\
            .eq("id", record_id)
        for column, value in (expected or {}).items():
            query = query.eq(column, value)
        result = query.execute()
        if result.data:
            return result.data[0]
        if expected:
            # Distinguish a missing record from a lost precondition
            self.get(collection, record_id)
            raise StaleRecordError(collection, record_id)
        raise RecordNotFound(collection, record_id)

    def delete(self, collection: str, record_id: str) -> None:
        self.supabase.table(collection)\
            .delete()\
            .eq("id", record_id)\
            .execute()
        logger.debug(f"Deleted {collection} record {record_id}")
