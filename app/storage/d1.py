"""
Cloudflare D1 backend over the D1 HTTP query API.

Each operation posts one SQL statement to
``{base}/accounts/{account}/d1/database/{database}/query``.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.core.config import Settings
from app.core.errors import StoreError
from app.schemas.message import MessageRecord, NewMessage
from app.storage.base import MessageStore, RootFilter, utcnow

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

# D1 limit on bound parameters per query
MAX_BOUND_PARAMS = 100

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS messages (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT,
        message TEXT NOT NULL,
        language TEXT NOT NULL DEFAULT 'global',
        parent_id INTEGER DEFAULT NULL,
        is_admin_reply BOOLEAN NOT NULL DEFAULT 0,
        status TEXT NOT NULL DEFAULT 'pending',
        ip TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_status ON messages(status)",
    "CREATE INDEX IF NOT EXISTS idx_created_at ON messages(created_at)",
    "CREATE INDEX IF NOT EXISTS idx_parent_id ON messages(parent_id)",
)

COLUMNS = "id, name, email, message, language, parent_id, is_admin_reply, status, ip, created_at, updated_at"


def _to_record(row: Dict[str, Any]) -> MessageRecord:
    try:
        return MessageRecord.model_validate(row)
    except PydanticValidationError as e:
        raise StoreError(f"Malformed D1 row: {e}") from e


class D1MessageStore(MessageStore):

    def __init__(
        self,
        account_id: str,
        database_id: str,
        api_token: str,
        base_url: str = "https://api.cloudflare.com/client/v4",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_token}"},
            timeout=timeout,
            transport=transport,
        )
        self.query_path = f"/accounts/{account_id}/d1/database/{database_id}/query"

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.BaseTransport] = None) -> "D1MessageStore":
        return cls(
            account_id=settings.D1_ACCOUNT_ID,
            database_id=settings.D1_DATABASE_ID,
            api_token=settings.D1_API_TOKEN,
            base_url=settings.D1_BASE_URL,
            timeout=settings.STORE_TIMEOUT_SECONDS,
            transport=transport,
        )

    def _query(self, sql: str, params: Sequence[Any] = ()) -> Dict[str, Any]:
        """Run one statement; returns the first result set ``{"results", "meta"}``."""
        try:
            response = self.client.post(self.query_path, json={"sql": sql, "params": list(params)})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error("D1 request failed: %s", e)
            raise StoreError(f"D1 request failed: {e}") from e
        except ValueError as e:
            raise StoreError(f"D1 returned invalid JSON: {e}") from e

        if not isinstance(payload, dict) or not payload.get("success"):
            errors = payload.get("errors") if isinstance(payload, dict) else payload
            logger.error("D1 query unsuccessful: %s", errors)
            raise StoreError(f"D1 query unsuccessful: {errors}")

        result = payload.get("result")
        if not isinstance(result, list) or not result or not isinstance(result[0], dict):
            raise StoreError(f"D1 returned malformed result: {result!r}")
        first = result[0]
        if first.get("success") is False:
            raise StoreError(f"D1 statement failed: {first}")
        return first

    def _rows(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        rows = self._query(sql, params).get("results")
        if not isinstance(rows, list):
            raise StoreError(f"D1 returned malformed rows: {rows!r}")
        return rows

    def ensure_schema(self) -> None:
        for statement in SCHEMA_STATEMENTS:
            self._query(statement)

    def insert(self, new: NewMessage) -> MessageRecord:
        now = utcnow().strftime(TIMESTAMP_FORMAT)
        result = self._query(
            "INSERT INTO messages (name, email, message, language, parent_id, is_admin_reply, status, ip, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                new.name, new.email, new.message, new.language, new.parent_id,
                1 if new.is_admin_reply else 0, new.status, new.ip, now, now,
            ],
        )
        row_id = (result.get("meta") or {}).get("last_row_id")
        if row_id is None:
            raise StoreError("D1 insert did not report last_row_id")

        record = self.get(int(row_id))
        if record is None:
            raise StoreError(f"Inserted message {row_id} not readable")
        return record

    def get(self, message_id: int) -> Optional[MessageRecord]:
        rows = self._rows(f"SELECT {COLUMNS} FROM messages WHERE id = ?", [message_id])
        return _to_record(rows[0]) if rows else None

    def _root_where(self, flt: RootFilter):
        clauses = ["parent_id IS NULL"]
        params: List[Any] = []
        if flt.status is not None:
            clauses.append("status = ?")
            params.append(flt.status)
        if flt.language is not None:
            clauses.append("language = ?")
            params.append(flt.language)
        return " AND ".join(clauses), params

    def list_roots(self, flt: RootFilter, offset: int = 0, limit: Optional[int] = None) -> List[MessageRecord]:
        where, params = self._root_where(flt)
        sql = f"SELECT {COLUMNS} FROM messages WHERE {where} ORDER BY created_at DESC, id DESC"
        # sqlite needs a LIMIT before OFFSET; -1 is unbounded
        sql += " LIMIT ? OFFSET ?"
        params += [limit if limit is not None else -1, offset]
        return [_to_record(row) for row in self._rows(sql, params)]

    def count_roots(self, flt: RootFilter) -> int:
        where, params = self._root_where(flt)
        rows = self._rows(f"SELECT COUNT(*) AS total FROM messages WHERE {where}", params)
        try:
            return int(rows[0]["total"])
        except (IndexError, KeyError, TypeError, ValueError) as e:
            raise StoreError(f"D1 returned malformed count: {rows!r}") from e

    def list_replies(self, parent_ids: Sequence[int], status: Optional[str] = None) -> List[MessageRecord]:
        ids = list(parent_ids)
        if not ids:
            return []
        # one slot per query is kept for the status parameter
        chunk_size = MAX_BOUND_PARAMS - 1
        records: List[MessageRecord] = []
        for start in range(0, len(ids), chunk_size):
            chunk = ids[start:start + chunk_size]
            placeholders = ", ".join("?" for _ in chunk)
            sql = f"SELECT {COLUMNS} FROM messages WHERE parent_id IN ({placeholders})"
            params: List[Any] = list(chunk)
            if status is not None:
                sql += " AND status = ?"
                params.append(status)
            sql += " ORDER BY created_at ASC, id ASC"
            records.extend(_to_record(row) for row in self._rows(sql, params))

        records.sort(key=lambda r: (r.created_at, r.id))
        return records

    def update_status(self, message_id: int, status: str) -> Optional[MessageRecord]:
        now = utcnow().strftime(TIMESTAMP_FORMAT)
        result = self._query(
            "UPDATE messages SET status = ?, updated_at = MAX(?, created_at) WHERE id = ?",
            [status, now, message_id],
        )
        if not (result.get("meta") or {}).get("changes"):
            return None
        return self.get(message_id)

    def delete_cascade(self, message_id: int) -> List[int]:
        reply_rows = self._rows("SELECT id FROM messages WHERE parent_id = ?", [message_id])
        reply_ids = [int(row["id"]) for row in reply_rows]
        if reply_ids:
            self._query("DELETE FROM messages WHERE parent_id = ?", [message_id])

        result = self._query("DELETE FROM messages WHERE id = ?", [message_id])
        deleted_ids = list(reply_ids)
        if (result.get("meta") or {}).get("changes"):
            deleted_ids.insert(0, message_id)
        return deleted_ids

    def close(self) -> None:
        self.client.close()
