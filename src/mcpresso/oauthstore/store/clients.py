import logging
from typing import List, Optional

from sqlalchemy import delete, select, update

from mcpresso.oauthstore.model.clients import Client, upsert_client_stmt
from mcpresso.oauthstore.store.database import Database
from mcpresso.oauthstore.store.errors import translate_errors
from mcpresso.oauthstore.store.types import ClientUpdate, OAuthClient

logger = logging.getLogger(__name__)


class ClientStore:
    """Registered OAuth clients."""

    def __init__(self, database: Database) -> None:
        self.database = database

    async def create(self, client: OAuthClient) -> None:
        """Register a client, overwriting every mutable field if the id exists."""
        stmt = upsert_client_stmt(
            id=client.id,
            secret=client.secret,
            name=client.name,
            type=client.type,
            redirect_uris=list(client.redirect_uris),
            scopes=list(client.scopes),
            grant_types=list(client.grant_types),
            now=self.database.now(),
        )
        with translate_errors("create client"):
            async with self.database.session() as database_session:
                async with database_session.begin():
                    await database_session.execute(stmt)
        logger.debug("Upserted client %s", client.id)

    async def get(self, client_id: str) -> Optional[OAuthClient]:
        with translate_errors("get client"):
            async with self.database.session() as database_session:
                client: Optional[Client] = (
                    await database_session.scalars(
                        select(Client).where(Client.id == client_id)
                    )
                ).first()
        if client is None:
            return None
        return OAuthClient.model_validate(client)

    async def list(self) -> List[OAuthClient]:
        with translate_errors("list clients"):
            async with self.database.session() as database_session:
                clients = (
                    await database_session.scalars(
                        select(Client).order_by(Client.created_at.desc(), Client.id)
                    )
                ).all()
        return [OAuthClient.model_validate(client) for client in clients]

    async def update(self, client_id: str, updates: ClientUpdate) -> int:
        """Apply the fields present in updates; unknown ids affect no rows."""
        values = updates.changes()
        values["updated_at"] = self.database.now()
        with translate_errors("update client"):
            async with self.database.session() as database_session:
                async with database_session.begin():
                    result = await database_session.execute(
                        update(Client)
                        .where(Client.id == client_id)
                        .values(**values)
                        .execution_options(synchronize_session=False)
                    )
        logger.debug("Updated client %s (%d row)", client_id, result.rowcount)
        return result.rowcount

    async def delete(self, client_id: str) -> int:
        """Remove a client; its codes and tokens go with it by cascade."""
        with translate_errors("delete client"):
            async with self.database.session() as database_session:
                async with database_session.begin():
                    result = await database_session.execute(
                        delete(Client).where(Client.id == client_id)
                    )
        if result.rowcount:
            logger.info("Deleted client %s", client_id)
        return result.rowcount
