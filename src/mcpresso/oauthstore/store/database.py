"""Connection pool handle shared by the OAuth stores.

A Database is created explicitly by the process that owns it and handed to
every store; nothing in this package keeps a module-level pool. Closing the
handle drains and disposes of the pool.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mcpresso.oauthstore.app.config import Settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class Database:
    """Owns the async engine, its session factory and the store clock.

    By default the store clock is the database's CURRENT_TIMESTAMP, so
    expiry is judged against one clock no matter how many application
    processes share the database. Passing a clock callable replaces it with
    a bound timestamp, which the test suite uses to move time forward.
    """

    def __init__(self, engine: AsyncEngine, clock: Optional[Clock] = None) -> None:
        self.engine = engine
        self.session_maker = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )
        self._clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings, clock: Optional[Clock] = None
    ) -> "Database":
        engine = create_async_engine(
            str(settings.pg_dsn),
            echo=settings.debug,
            pool_size=settings.pg_pool_size,
            max_overflow=settings.pg_max_overflow,
            pool_timeout=settings.pg_pool_timeout,
            pool_pre_ping=True,
        )
        return cls(engine, clock=clock)

    def session(self) -> AsyncSession:
        return self.session_maker()

    def now(self):
        """Current store time, usable as a value or comparand in any statement."""
        if self._clock is None:
            return func.now()
        return self._clock()

    async def close(self) -> None:
        logger.info("Disposing database connection pool")
        await self.engine.dispose()

    async def __aenter__(self) -> "Database":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
