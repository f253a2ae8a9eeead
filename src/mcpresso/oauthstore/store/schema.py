import logging
from typing import List, Sequence

from sqlalchemy import func, select

from mcpresso.oauthstore.model import REQUIRED_TABLES
from mcpresso.oauthstore.store.database import Database
from mcpresso.oauthstore.store.errors import SchemaIncomplete, translate_errors

logger = logging.getLogger(__name__)


class SchemaGuard:
    """Startup check that the migration has created every required relation.

    Only reads the catalog; the schema itself is owned by the alembic
    migration.
    """

    def __init__(
        self, database: Database, required_tables: Sequence[str] = REQUIRED_TABLES
    ) -> None:
        self.database = database
        self.required_tables = tuple(required_tables)

    async def missing_tables(self) -> List[str]:
        missing: List[str] = []
        with translate_errors("schema check"):
            async with self.database.engine.connect() as conn:
                for table in self.required_tables:
                    exists = await conn.scalar(
                        select(func.to_regclass(table).is_not(None))
                    )
                    if not exists:
                        missing.append(table)
        return missing

    async def initialize(self) -> None:
        missing = await self.missing_tables()
        if missing:
            logger.error("Database schema is incomplete, missing: %s", missing)
            raise SchemaIncomplete(missing)
        logger.info("Database schema verified: %s", ", ".join(self.required_tables))
