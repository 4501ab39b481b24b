"""chorecal - recurring chore tracker with on-demand calendar projection."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chorecal.core.config import settings
from chorecal.core.db_client import SqliteRecordStore
from chorecal.core.logging import configure_logfire, instrument_fastapi
from chorecal.interface.chore_router import router as chore_router
from chorecal.interface.error_handlers import register_error_handlers
from chorecal.interface.reminder_router import router as reminder_router
from chorecal.interface.team_member_router import router as team_member_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Configure logging first so startup logs are captured
    configure_logfire()

    store = SqliteRecordStore(settings.sqlite_db_path)
    await store.init_schema()
    app.state.store = store
    logger.info("Database initialized", extra={"db_path": str(store.path)})

    yield

    await store.close()


app = FastAPI(
    title="chorecal",
    description="Recurring chore tracker with on-demand calendar projection",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

register_error_handlers(app)

# Register routers
app.include_router(team_member_router)
app.include_router(chore_router)
app.include_router(reminder_router)


@app.get("/api/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)
