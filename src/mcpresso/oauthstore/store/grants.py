"""Shared persistence for expiring grants.

Authorization codes, access tokens and refresh tokens share one lifecycle:
a pure insert at issue time, reads that treat an expired row as absent,
explicit deletion, and a bulk sweep of expired rows. The sweep only removes
rows the read filter already hides, so it can run alongside normal traffic.
"""
import logging
from typing import Generic, Optional, Type, TypeVar

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from mcpresso.oauthstore.model.base import Base
from mcpresso.oauthstore.store.database import Database
from mcpresso.oauthstore.store.errors import translate_errors
from mcpresso.oauthstore.store.types import StoreModel

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT", bound=Base)
EntityT = TypeVar("EntityT", bound=StoreModel)


class GrantStore(Generic[RowT, EntityT]):
    row_class: Type[RowT]
    entity_class: Type[EntityT]
    key_column: str
    label: str

    def __init__(self, database: Database) -> None:
        self.database = database

    @property
    def key(self):
        return getattr(self.row_class, self.key_column)

    def _insert_values(self, entity: EntityT) -> dict:
        values = entity.model_dump(exclude={"created_at"})
        values["created_at"] = self.database.now()
        return values

    async def create(self, entity: EntityT) -> None:
        """Insert a new grant; an existing key value raises Conflict."""
        stmt = insert(self.row_class).values(**self._insert_values(entity))
        with translate_errors(f"create {self.label}"):
            async with self.database.session() as database_session:
                async with database_session.begin():
                    await database_session.execute(stmt)
        logger.debug(
            "Created %s for client %s, expires %s",
            self.label,
            entity.client_id,
            entity.expires_at.isoformat(),
        )

    async def get(self, key: str) -> Optional[EntityT]:
        """Return the grant only while its expires_at is in the future."""
        stmt = select(self.row_class).where(
            self.key == key,
            self.row_class.expires_at > self.database.now(),
        )
        with translate_errors(f"get {self.label}"):
            async with self.database.session() as database_session:
                row: Optional[RowT] = (await database_session.scalars(stmt)).first()
        if row is None:
            return None
        return self.entity_class.model_validate(row)

    async def _delete_in(self, database_session: AsyncSession, key: str) -> int:
        result = await database_session.execute(
            delete(self.row_class).where(self.key == key)
        )
        return result.rowcount

    async def delete(self, key: str) -> int:
        with translate_errors(f"delete {self.label}"):
            async with self.database.session() as database_session:
                async with database_session.begin():
                    removed = await self._delete_in(database_session, key)
        logger.debug("Deleted %d %s", removed, self.label)
        return removed

    async def cleanup_expired(self) -> int:
        """Delete every row whose expires_at has passed; returns the count."""
        with translate_errors(f"cleanup {self.label}"):
            async with self.database.session() as database_session:
                async with database_session.begin():
                    result = await database_session.execute(
                        delete(self.row_class).where(
                            self.row_class.expires_at <= self.database.now()
                        )
                    )
        if result.rowcount > 0:
            logger.info("Cleaned up %d expired %s rows", result.rowcount, self.label)
        return result.rowcount
