"""
This module contains the reservation store setup and session management.
"""
import logging
from typing import Any, AsyncGenerator

from alchemical.aio import Alchemical
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .config import DATABASE_URL
from .errors import PersistenceFailure
from .models import Reservation

logger = logging.getLogger(__name__)

db = Alchemical(DATABASE_URL)


async def get_db_session() -> AsyncGenerator[AsyncSession | Any, Any]:
    """
    Dependency that provides a database session, one per request.
    """
    async with db.Session() as session:
        yield session


async def init_db() -> list[str]:
    """
    Creates the reservation tables if missing and checks that the store answers.

    Returns:
        list[str]: The table names found in the store.

    Raises:
        PersistenceFailure: If the store cannot be reached or the tables cannot be created.
    """
    try:
        await db.create_all()
        async with db.get_engine().connect() as connection:
            await connection.execute(text("SELECT 1"))
            tables = await connection.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    except SQLAlchemyError as exc:
        logger.error(f"Reservation store unavailable at {db.get_engine().url!r}: {exc}")
        raise PersistenceFailure("Reservation store unavailable") from exc

    if Reservation.__tablename__ not in tables:
        raise PersistenceFailure(f"Table {Reservation.__tablename__} is missing")
    logger.info(f"Reservation store ready ({', '.join(tables)})")
    return tables


async def close_db():
    """
    Releases the pooled connections of the store.
    """
    await db.get_engine().dispose()
    logger.info("Reservation store connections closed")
