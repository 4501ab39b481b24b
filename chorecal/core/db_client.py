"""Record store contract and its SQLite implementation."""

import asyncio
import json
import logging
import re
import uuid
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any, Protocol

import aiosqlite

from chorecal.core.config import constants, settings


logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised when a store operation fails."""


class RecordNotFoundError(DatabaseError, KeyError):
    """Raised when a record id does not exist in a collection."""


class DuplicateRecordError(DatabaseError):
    """Raised when an insert violates a uniqueness constraint."""


class RecordStore(Protocol):
    """Contract every record store offers to the services.

    Records are plain dicts keyed by a string ``id``. ``create_record`` allocates
    an id when none is supplied and stamps ``created_at``/``updated_at``;
    ``update_record`` refreshes ``updated_at``.
    """

    async def create_record(self, *, collection: str, data: dict[str, Any]) -> dict[str, Any]: ...

    async def get_record(self, *, collection: str, record_id: str) -> dict[str, Any]: ...

    async def update_record(self, *, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]: ...

    async def delete_record(self, *, collection: str, record_id: str) -> None: ...

    async def list_records(
        self,
        *,
        collection: str,
        page: int = 1,
        per_page: int = constants.DEFAULT_PER_PAGE_LIMIT,
        filter_query: str = "",
        sort: str = "",
    ) -> list[dict[str, Any]]: ...

    async def get_first_record(self, *, collection: str, filter_query: str) -> dict[str, Any] | None: ...


async def list_all_records(
    store: RecordStore,
    *,
    collection: str,
    filter_query: str = "",
    sort: str = "",
    page_size: int | None = None,
) -> list[dict[str, Any]]:
    """List every record matching a filter, paging until a short page comes back.

    Args:
        store: Record store to read from
        collection: Collection name
        filter_query: Optional filter expression
        sort: Optional ``+field``/``-field`` sort
        page_size: Records per page (defaults to the store page limit)

    Returns:
        All matching records in sort order
    """
    per_page = page_size or constants.DEFAULT_PER_PAGE_LIMIT
    records: list[dict[str, Any]] = []
    page = 1
    while True:
        batch = await store.list_records(
            collection=collection,
            page=page,
            per_page=per_page,
            filter_query=filter_query,
            sort=sort,
        )
        records.extend(batch)
        if len(batch) < per_page:
            return records
        page += 1


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with a Z suffix."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def sanitize_param(value: str | int | float | bool | None) -> str:
    """Escape a value for safe embedding in filter queries via json.dumps."""
    return json.dumps(str(value))[1:-1]


def _parse_value(value: str, *, is_like: bool = False) -> str | int | float | bool | None:
    """Parse a string value to the appropriate Python type for SQLite."""
    if is_like:
        escaped = value.replace("%", "\\%").replace("_", "\\_")
        return f"%{escaped}%"

    if value.isdigit():
        return int(value)
    if value.replace(".", "", 1).isdigit():
        return float(value)

    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False

    return value


def _get_sql_operator(op: str) -> str:
    """Map filter operator to SQL operator."""
    op_map = {
        "=": "=",
        "!=": "!=",
        ">": ">",
        "<": "<",
        ">=": ">=",
        "<=": "<=",
        "~": "LIKE",
    }
    sql_op = op_map.get(op)
    if not sql_op:
        msg = f"Unsupported operator: {op}"
        raise ValueError(msg)
    return sql_op


_COMPARISON_PATTERN = re.compile(r'(\w+)\s*(!=|>=|<=|=|>|<|~)\s*"((?:[^"\\]|\\.)*)"')


def _parse_single_comparison(comparison: str) -> tuple[str, str | int | float | None]:
    """Parse a single comparison expression into a SQL condition and parameter.

    Values are double-quoted with JSON escapes, matching ``sanitize_param``.
    """
    match = _COMPARISON_PATTERN.fullmatch(comparison.strip())
    if not match:
        msg = f"Invalid filter syntax: {comparison}"
        raise ValueError(msg)

    field = match.group(1)
    op = match.group(2)
    try:
        raw_value = json.loads(f'"{match.group(3)}"')
    except json.JSONDecodeError as e:
        msg = f"Invalid filter syntax: {comparison}"
        raise ValueError(msg) from e

    sql_op = _get_sql_operator(op)
    is_like = sql_op == "LIKE"
    value = _parse_value(raw_value, is_like=is_like)

    if is_like:
        return f"{field} LIKE ? ESCAPE '\\'", value
    return f"{field} {sql_op} ?", value


def _split_top_level(text: str, separator: str) -> list[str]:
    """Split on a separator that sits outside quoted values and parentheses."""
    parts = []
    current = ""
    paren_depth = 0
    in_quotes = False
    escaped = False

    for char in text:
        current += char

        if in_quotes:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_quotes = False
            continue

        if char == '"':
            in_quotes = True
        elif char == "(":
            paren_depth += 1
        elif char == ")":
            paren_depth -= 1
        elif paren_depth == 0 and current.endswith(separator):
            parts.append(current[: -len(separator)].strip())
            current = ""

    if current.strip():
        parts.append(current.strip())

    return parts


def _parse_or_group(or_group: str) -> tuple[str, list[str | int | float | None]]:
    """Parse a parenthesized OR group into a SQL condition and parameters."""
    or_conditions = []
    or_params = []

    for part in _split_top_level(or_group[1:-1], "||"):
        cond, value = _parse_single_comparison(part)
        or_conditions.append(cond)
        or_params.append(value)

    return f"({' OR '.join(or_conditions)})", or_params


def _split_and_conditions(filter_query: str) -> list[str]:
    """Split filter query by && while preserving parenthesized groups and quoted values."""
    return _split_top_level(filter_query, "&&")


def parse_filter(filter_query: str) -> tuple[str, list[str | int | float | None]]:
    """Parse filter syntax into a SQL WHERE clause and parameter list.

    Supports ``field <op> "value"`` comparisons joined by ``&&`` and
    parenthesized ``||`` groups, e.g. ``assignee_id = "tm-1" && (status = "pending" || status = "in_progress")``.
    """
    if not filter_query:
        return "", []

    parts = _split_and_conditions(filter_query)
    conditions = []
    params = []

    for raw_part in parts:
        part = raw_part.strip()

        if part.startswith("(") and part.endswith(")"):
            cond, cond_params = _parse_or_group(part)
            conditions.append(cond)
            params.extend(cond_params)
        else:
            cond, value = _parse_single_comparison(part)
            conditions.append(cond)
            params.append(value)

    return " AND ".join(conditions), params


def _parse_sort(sort: str) -> str:
    """Translate ``+field``/``-field`` sort syntax into a safe ORDER BY clause."""
    if not sort:
        return "rowid ASC"

    direction = "DESC" if sort.startswith("-") else "ASC"
    field = sort.lstrip("+-").strip()
    if not re.match(r"^[A-Za-z_][A-Za-z0-9_]*$", field):
        logger.warning("Invalid sort parameter, using default", extra={"sort": sort})
        return "rowid ASC"
    return f"{field} {direction}, rowid ASC"


def _encode_value(val: Any) -> Any:
    """Convert a Python value into something SQLite can bind."""
    if isinstance(val, datetime | date):
        return val.isoformat()
    if isinstance(val, dict | list):
        return json.dumps(val)
    return val


class SqliteRecordStore:
    """Record store backed by a single aiosqlite connection."""

    def __init__(self, db_path: str | None = None) -> None:
        self._path = Path(db_path or settings.sqlite_db_path).resolve()
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def connect(self) -> aiosqlite.Connection:
        """Open the connection on first use and reuse it afterwards."""
        if self._conn is not None:
            return self._conn

        async with self._lock:
            if self._conn is not None:
                return self._conn

            self._path.parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(str(self._path))
            conn.row_factory = aiosqlite.Row
            await conn.execute("PRAGMA journal_mode = WAL")
            self._conn = conn

            logger.info("Created new SQLite connection", extra={"db_path": str(self._path)})
            return conn

    async def close(self) -> None:
        """Close the connection if it is open."""
        async with self._lock:
            if self._conn is None:
                return
            try:
                await self._conn.close()
                logger.info("Closed SQLite connection", extra={"db_path": str(self._path)})
            except Exception as e:
                logger.warning("Error closing SQLite connection", extra={"error": str(e)})
            finally:
                self._conn = None

    async def init_schema(self) -> None:
        """Create tables and indexes when they do not exist yet."""
        from chorecal.core.schema import SCHEMA_STATEMENTS

        conn = await self.connect()
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)
        await conn.commit()
        logger.info("Database schema initialized", extra={"db_path": str(self._path)})

    async def create_record(self, *, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a new record and return it as stored."""
        _validate_collection_name(collection)
        now = utc_now_iso()
        record = {"id": uuid.uuid4().hex, "created_at": now, "updated_at": now, **data}

        columns = list(record.keys())
        columns_str = ", ".join(columns)
        placeholders_str = ", ".join("?" for _ in columns)
        values = [_encode_value(record[key]) for key in columns]

        try:
            conn = await self.connect()
            query = f"INSERT INTO {collection} ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - collection is validated
            await conn.execute(query, values)
            await conn.commit()
        except aiosqlite.IntegrityError as e:
            logger.warning("create_record_conflict", extra={"collection": collection, "error": str(e)})
            msg = f"Duplicate record in {collection}: {e}"
            raise DuplicateRecordError(msg) from e
        except aiosqlite.OperationalError as e:
            logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
            if "no such table" in str(e):
                msg = f"Table '{collection}' does not exist. Call init_schema() first."
                raise DatabaseError(msg) from e
            msg = f"Failed to create record in {collection}: {e}"
            raise DatabaseError(msg) from e

        logger.info("Created record", extra={"collection": collection, "record_id": record["id"]})
        return await self.get_record(collection=collection, record_id=record["id"])

    async def get_record(self, *, collection: str, record_id: str) -> dict[str, Any]:
        """Fetch a single record by ID, raising RecordNotFoundError if not found."""
        _validate_collection_name(collection)
        try:
            conn = await self.connect()
            query = f"SELECT * FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
            cursor = await conn.execute(query, (record_id,))
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
            msg = f"Failed to get record from {collection}: {e}"
            raise DatabaseError(msg) from e

        if row is None:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        return dict(row)

    async def update_record(self, *, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Update a record by ID and return the updated record."""
        if not data:
            msg = "Empty update payload"
            raise ValueError(msg)

        _validate_collection_name(collection)
        payload = {**data, "updated_at": utc_now_iso()}
        payload.pop("id", None)

        set_clause = ", ".join(f"{key} = ?" for key in payload)
        values = [_encode_value(val) for val in payload.values()]
        values.append(record_id)

        try:
            conn = await self.connect()
            query = f"UPDATE {collection} SET {set_clause} WHERE id = ?"  # noqa: S608 - collection is validated
            cursor = await conn.execute(query, values)
            await conn.commit()
        except aiosqlite.IntegrityError as e:
            msg = f"Duplicate record in {collection}: {e}"
            raise DuplicateRecordError(msg) from e
        except aiosqlite.Error as e:
            logger.error(
                "update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)}
            )
            msg = f"Failed to update record in {collection}: {e}"
            raise DatabaseError(msg) from e

        if cursor.rowcount == 0:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
        return await self.get_record(collection=collection, record_id=record_id)

    async def delete_record(self, *, collection: str, record_id: str) -> None:
        """Delete a record by ID, raising RecordNotFoundError if not found."""
        _validate_collection_name(collection)
        try:
            conn = await self.connect()
            query = f"DELETE FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
            cursor = await conn.execute(query, (record_id,))
            await conn.commit()
        except aiosqlite.Error as e:
            logger.error(
                "delete_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)}
            )
            msg = f"Failed to delete record from {collection}: {e}"
            raise DatabaseError(msg) from e

        if cursor.rowcount == 0:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})

    async def list_records(
        self,
        *,
        collection: str,
        page: int = 1,
        per_page: int = constants.DEFAULT_PER_PAGE_LIMIT,
        filter_query: str = "",
        sort: str = "",
    ) -> list[dict[str, Any]]:
        """List records with optional filtering, sorting, and pagination."""
        _validate_collection_name(collection)

        where_clause = ""
        params: list[Any] = []
        if filter_query:
            condition, params = parse_filter(filter_query)
            where_clause = f"WHERE {condition}"

        order_by = _parse_sort(sort)
        offset = (page - 1) * per_page

        try:
            conn = await self.connect()
            query = f"SELECT * FROM {collection} {where_clause} ORDER BY {order_by} LIMIT ? OFFSET ?"  # noqa: S608 - collection is validated
            cursor = await conn.execute(query, [*params, per_page, offset])
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error("list_records_failed", extra={"collection": collection, "error": str(e)})
            msg = f"Failed to list records from {collection}: {e}"
            raise DatabaseError(msg) from e

        records = [dict(row) for row in rows]
        logger.debug("Listed records", extra={"collection": collection, "count": len(records)})
        return records

    async def get_first_record(self, *, collection: str, filter_query: str) -> dict[str, Any] | None:
        """Return the first record matching the filter, or None."""
        records = await self.list_records(collection=collection, filter_query=filter_query, per_page=1)
        return records[0] if records else None
