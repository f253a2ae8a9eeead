import logging

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from mcpresso.oauthstore.model.tokens import RefreshToken as RefreshTokenRow
from mcpresso.oauthstore.store.errors import translate_errors
from mcpresso.oauthstore.store.grants import GrantStore
from mcpresso.oauthstore.store.types import RefreshToken

logger = logging.getLogger(__name__)


class RefreshTokenStore(GrantStore[RefreshTokenRow, RefreshToken]):
    row_class = RefreshTokenRow
    entity_class = RefreshToken
    key_column = "token"
    label = "refresh token"

    async def delete_by_access_token_in(
        self, database_session: AsyncSession, access_token_id: str
    ) -> int:
        """Remove refresh tokens issued with an access token, inside a caller's transaction."""
        result = await database_session.execute(
            delete(RefreshTokenRow).where(
                RefreshTokenRow.access_token_id == access_token_id
            )
        )
        return result.rowcount

    async def delete_by_access_token(self, access_token_id: str) -> int:
        with translate_errors("delete refresh tokens by access token"):
            async with self.database.session() as database_session:
                async with database_session.begin():
                    removed = await self.delete_by_access_token_in(
                        database_session, access_token_id
                    )
        if removed:
            logger.info("Deleted %d refresh tokens issued with an access token", removed)
        return removed
