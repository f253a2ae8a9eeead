import logging
from typing import Optional

from mcpresso.oauthstore.model.tokens import AccessToken as AccessTokenRow
from mcpresso.oauthstore.store.database import Database
from mcpresso.oauthstore.store.errors import translate_errors
from mcpresso.oauthstore.store.grants import GrantStore
from mcpresso.oauthstore.store.refresh_tokens import RefreshTokenStore
from mcpresso.oauthstore.store.types import AccessToken

logger = logging.getLogger(__name__)


class AccessTokenStore(GrantStore[AccessTokenRow, AccessToken]):
    """Bearer access tokens.

    delete() is the revoke path: refresh tokens issued with the access
    token are removed in the same transaction, so no reader can see the
    access token gone while one of its refresh tokens still resolves.
    Expiry sweeps do not touch refresh tokens.
    """

    row_class = AccessTokenRow
    entity_class = AccessToken
    key_column = "token"
    label = "access token"

    def __init__(
        self, database: Database, refresh_tokens: Optional[RefreshTokenStore] = None
    ) -> None:
        super().__init__(database)
        self.refresh_tokens = refresh_tokens or RefreshTokenStore(database)

    async def delete(self, key: str) -> int:
        with translate_errors("revoke access token"):
            async with self.database.session() as database_session:
                async with database_session.begin():
                    refresh_removed = await self.refresh_tokens.delete_by_access_token_in(
                        database_session, key
                    )
                    removed = await self._delete_in(database_session, key)
        logger.info(
            "Revoked %d access token and %d refresh tokens", removed, refresh_removed
        )
        return removed
