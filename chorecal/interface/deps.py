"""Request-scoped dependencies shared by the routers."""

from fastapi import Request

from chorecal.core.db_client import RecordStore
from chorecal.core.errors import InvalidStatusFilterError
from chorecal.domain.chore import ChoreStatus


def get_store(request: Request) -> RecordStore:
    """Return the record store opened by the application lifespan."""
    return request.app.state.store


def parse_status_list(raw: str | None) -> list[ChoreStatus] | None:
    """Parse a comma separated ``status`` query value.

    Raises:
        InvalidStatusFilterError: If any entry is not a known status
    """
    if not raw:
        return None

    try:
        return [ChoreStatus(part.strip()) for part in raw.split(",") if part.strip()]
    except ValueError as e:
        raise InvalidStatusFilterError(raw) from e
