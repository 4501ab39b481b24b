"""Pure Python in-memory record store for unit testing."""

import copy
import re
from datetime import UTC, datetime
from typing import Any

from chorecal.core.config import constants
from chorecal.core.db_client import DatabaseError, DuplicateRecordError, RecordNotFoundError


_COMPARISON = re.compile(r"""^(\w+)\s*(!=|>=|<=|=|>|<|~)\s*(['"])(.*)\3$""")


class InMemoryDBClient:
    """Pure Python in-memory record store for unit testing.

    Implements the same keyword-only interface as ``SqliteRecordStore`` and the
    same filter mini-language (comparisons joined by ``&&`` plus parenthesized
    ``||`` groups), so services can be exercised without SQLite. The unique
    (parent_chore_id, due_date) constraint on persisted instances is enforced too.
    """

    def __init__(self):
        """Initialize empty in-memory store."""
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._id_counter = 1000

    @staticmethod
    def _now() -> str:
        return datetime.now(UTC).isoformat().replace("+00:00", "Z")

    def _check_instance_unique(self, collection: str, record: dict[str, Any], *, exclude_id: str | None = None) -> None:
        parent = record.get("parent_chore_id")
        if collection != "chores" or parent is None:
            return
        for other in self._collections.get(collection, {}).values():
            if other["id"] == exclude_id:
                continue
            if other.get("parent_chore_id") == parent and other.get("due_date") == record.get("due_date"):
                raise DuplicateRecordError(f"Duplicate instance of {parent} on {record.get('due_date')}")

    async def create_record(self, *, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create a new record in the specified collection.

        Raises:
            DuplicateRecordError: If the id or the (parent_chore_id, due_date) pair is taken
            DatabaseError: If data is not a dictionary
        """
        if not isinstance(data, dict):
            raise DatabaseError(f"Data must be a dictionary, got {type(data)}")

        records = self._collections.setdefault(collection, {})

        record_id = data.get("id")
        if record_id is None:
            record_id = str(self._id_counter)
            self._id_counter += 1

        if record_id in records:
            raise DuplicateRecordError(f"Duplicate record in {collection}: {record_id}")

        now = self._now()
        record = {"created_at": now, "updated_at": now, **copy.deepcopy(data), "id": record_id}
        self._check_instance_unique(collection, record)

        records[record_id] = record
        return copy.deepcopy(record)

    async def get_record(self, *, collection: str, record_id: str) -> dict[str, Any]:
        """Get a record by ID, raising RecordNotFoundError if missing."""
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")
        return copy.deepcopy(records[record_id])

    async def update_record(self, *, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Update an existing record and return it."""
        if not isinstance(data, dict):
            raise DatabaseError(f"Data must be a dictionary, got {type(data)}")

        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")

        changes = {key: value for key, value in copy.deepcopy(data).items() if key != "id"}
        candidate = {**records[record_id], **changes}
        self._check_instance_unique(collection, candidate, exclude_id=record_id)

        candidate["updated_at"] = self._now()
        records[record_id] = candidate
        return copy.deepcopy(candidate)

    async def delete_record(self, *, collection: str, record_id: str) -> None:
        """Delete a record, raising RecordNotFoundError if missing."""
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")
        del records[record_id]

    async def list_records(
        self,
        *,
        collection: str,
        page: int = 1,
        per_page: int = constants.DEFAULT_PER_PAGE_LIMIT,
        filter_query: str = "",
        sort: str = "",
    ) -> list[dict[str, Any]]:
        """List records with optional filtering, sorting and pagination."""
        records = list(self._collections.get(collection, {}).values())

        if filter_query:
            records = [r for r in records if self._matches(filter_query, r)]

        if sort:
            records = self._apply_sort(records, sort)

        start_idx = (page - 1) * per_page
        return [copy.deepcopy(r) for r in records[start_idx : start_idx + per_page]]

    async def get_first_record(self, *, collection: str, filter_query: str) -> dict[str, Any] | None:
        """Get the first matching record or None."""
        records = await self.list_records(collection=collection, filter_query=filter_query, per_page=1)
        return records[0] if records else None

    def _matches(self, filter_query: str, record: dict[str, Any]) -> bool:
        """Evaluate a filter expression against a record."""
        for part in self._split_and(filter_query):
            if part.startswith("(") and part.endswith(")"):
                options = [p.strip() for p in part[1:-1].split("||")]
                if not any(self._compare(option, record) for option in options):
                    return False
            elif not self._compare(part, record):
                return False
        return True

    @staticmethod
    def _split_and(filter_query: str) -> list[str]:
        parts = []
        depth = 0
        current = ""
        for char in filter_query:
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
            current += char
            if depth == 0 and current.endswith("&&"):
                parts.append(current[:-2].strip())
                current = ""
        if current.strip():
            parts.append(current.strip())
        return parts

    @staticmethod
    def _compare(comparison: str, record: dict[str, Any]) -> bool:
        match = _COMPARISON.match(comparison.strip())
        if not match:
            raise DatabaseError(f"Invalid filter syntax: {comparison}")

        field, op, _, value = match.groups()
        actual = record.get(field)

        if value.lower() in ("true", "false") and isinstance(actual, bool):
            expected = value.lower() == "true"
            return actual == expected if op == "=" else actual != expected

        text = "" if actual is None else str(actual)
        if op == "=":
            return actual is not None and text == value
        if op == "!=":
            return text != value
        if op == "~":
            return value.lower() in text.lower()
        if actual is None:
            return False
        if op == ">=":
            return text >= value
        if op == "<=":
            return text <= value
        if op == ">":
            return text > value
        return text < value

    def _apply_sort(self, records: list[dict], sort: str) -> list[dict]:
        """Sort records by ``+field`` / ``-field``."""
        reverse = sort.startswith("-")
        field = sort.lstrip("+-")
        return sorted(records, key=lambda r: str(r.get(field) or ""), reverse=reverse)
