from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from newsdesk.db.connection import ConnectionManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """FastAPI lifespan context manager for startup/shutdown events."""
    connections: ConnectionManager = app.state.connections
    try:
        # Startup
        if app.state.settings.environment != "test":
            await verify_database_connection(connections)
        yield

        # Shutdown
    finally:
        await connections.close()


async def verify_database_connection(connections: ConnectionManager) -> None:
    """Verify database connectivity at startup. Raises if connection fails."""
    if not await connections.check_health():
        if connections.is_mock_mode:
            logger.warning("In-memory database did not answer the startup check")
            return
        raise RuntimeError("Failed to connect to database")
    logger.info("Database connection verified (mock_mode=%s)", connections.is_mock_mode)
