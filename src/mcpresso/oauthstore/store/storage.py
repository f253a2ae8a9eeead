"""PostgreSQL storage for an OAuth 2.0 authorization server.

PostgresStorage is the single object the authorization-server engine talks
to. It owns no state beyond the Database handle and delegates every call to
the entity store that matches it:

- ClientStore: client registrations (upsert, partial update, cascade delete)
- UserStore: user accounts with username and email lookups
- AuthorizationCodeStore: single-use codes behind a live-expiry filter
- AccessTokenStore: bearer tokens; revoking one removes its refresh tokens
- RefreshTokenStore: refresh tokens, removable by their issuing access token

Typical lifecycle:

    storage = PostgresStorage.from_settings(Settings())
    await storage.initialize()
    ...
    await storage.close()
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import func, select

from mcpresso.oauthstore.app.config import Settings
from mcpresso.oauthstore.model import (
    AccessToken as AccessTokenRow,
    AuthorizationCode as AuthorizationCodeRow,
    Client,
    RefreshToken as RefreshTokenRow,
    User,
)
from mcpresso.oauthstore.store.access_tokens import AccessTokenStore
from mcpresso.oauthstore.store.clients import ClientStore
from mcpresso.oauthstore.store.codes import AuthorizationCodeStore
from mcpresso.oauthstore.store.database import Clock, Database
from mcpresso.oauthstore.store.errors import translate_errors
from mcpresso.oauthstore.store.refresh_tokens import RefreshTokenStore
from mcpresso.oauthstore.store.schema import SchemaGuard
from mcpresso.oauthstore.store.types import (
    AccessToken,
    AuthorizationCode,
    ClientUpdate,
    OAuthClient,
    OAuthUser,
    RefreshToken,
    StorageStats,
    UserUpdate,
)
from mcpresso.oauthstore.store.users import UserStore

logger = logging.getLogger(__name__)


class PostgresStorage:
    def __init__(self, database: Database) -> None:
        self.database = database
        self.schema = SchemaGuard(database)
        self.clients = ClientStore(database)
        self.users = UserStore(database)
        self.authorization_codes = AuthorizationCodeStore(database)
        self.refresh_tokens = RefreshTokenStore(database)
        self.access_tokens = AccessTokenStore(database, self.refresh_tokens)

    @classmethod
    def from_settings(
        cls, settings: Settings, clock: Optional[Clock] = None
    ) -> "PostgresStorage":
        return cls(Database.from_settings(settings, clock=clock))

    async def initialize(self) -> None:
        """Fail with SchemaIncomplete unless every required relation exists."""
        await self.schema.initialize()

    # ===== CLIENTS =====

    async def create_client(self, client: OAuthClient) -> None:
        await self.clients.create(client)

    async def get_client(self, client_id: str) -> Optional[OAuthClient]:
        return await self.clients.get(client_id)

    async def list_clients(self) -> List[OAuthClient]:
        return await self.clients.list()

    async def update_client(self, client_id: str, updates: ClientUpdate) -> int:
        return await self.clients.update(client_id, updates)

    async def delete_client(self, client_id: str) -> int:
        return await self.clients.delete(client_id)

    # ===== USERS =====

    async def create_user(self, user: OAuthUser) -> None:
        await self.users.create(user)

    async def get_user(self, user_id: str) -> Optional[OAuthUser]:
        return await self.users.get(user_id)

    async def get_user_by_id(self, user_id: str) -> Optional[OAuthUser]:
        return await self.users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[OAuthUser]:
        return await self.users.get_by_username(username)

    async def get_user_by_email(self, email: str) -> Optional[OAuthUser]:
        return await self.users.get_by_email(email)

    async def list_users(self) -> List[OAuthUser]:
        return await self.users.list()

    async def update_user(self, user_id: str, updates: UserUpdate) -> int:
        return await self.users.update(user_id, updates)

    async def delete_user(self, user_id: str) -> int:
        return await self.users.delete(user_id)

    # ===== AUTHORIZATION CODES =====

    async def create_authorization_code(self, code: AuthorizationCode) -> None:
        await self.authorization_codes.create(code)

    async def get_authorization_code(self, code: str) -> Optional[AuthorizationCode]:
        return await self.authorization_codes.get(code)

    async def delete_authorization_code(self, code: str) -> int:
        return await self.authorization_codes.delete(code)

    async def cleanup_expired_codes(self) -> int:
        return await self.authorization_codes.cleanup_expired()

    # ===== ACCESS TOKENS =====

    async def create_access_token(self, token: AccessToken) -> None:
        await self.access_tokens.create(token)

    async def get_access_token(self, token: str) -> Optional[AccessToken]:
        return await self.access_tokens.get(token)

    async def delete_access_token(self, token: str) -> int:
        return await self.access_tokens.delete(token)

    async def cleanup_expired_tokens(self) -> int:
        return await self.access_tokens.cleanup_expired()

    # ===== REFRESH TOKENS =====

    async def create_refresh_token(self, token: RefreshToken) -> None:
        await self.refresh_tokens.create(token)

    async def get_refresh_token(self, token: str) -> Optional[RefreshToken]:
        return await self.refresh_tokens.get(token)

    async def delete_refresh_token(self, token: str) -> int:
        return await self.refresh_tokens.delete(token)

    async def delete_refresh_tokens_by_access_token(self, access_token_id: str) -> int:
        return await self.refresh_tokens.delete_by_access_token(access_token_id)

    async def cleanup_expired_refresh_tokens(self) -> int:
        return await self.refresh_tokens.cleanup_expired()

    # ===== UTILITY =====

    async def cleanup_expired(self) -> Dict[str, int]:
        """Run every expiry sweep and return the removed row counts by relation."""
        return {
            AuthorizationCodeRow.__tablename__: await self.cleanup_expired_codes(),
            AccessTokenRow.__tablename__: await self.cleanup_expired_tokens(),
            RefreshTokenRow.__tablename__: await self.cleanup_expired_refresh_tokens(),
        }

    async def get_stats(self) -> StorageStats:
        """
        Count the rows in every relation.

        Counts are computed live in a single round trip and include expired
        grants that have not been swept yet.
        """
        stmt = select(
            select(func.count()).select_from(Client).scalar_subquery().label("clients"),
            select(func.count()).select_from(User).scalar_subquery().label("users"),
            select(func.count())
            .select_from(AuthorizationCodeRow)
            .scalar_subquery()
            .label("authorization_codes"),
            select(func.count())
            .select_from(AccessTokenRow)
            .scalar_subquery()
            .label("access_tokens"),
            select(func.count())
            .select_from(RefreshTokenRow)
            .scalar_subquery()
            .label("refresh_tokens"),
        )
        with translate_errors("get stats"):
            async with self.database.session() as database_session:
                row = (await database_session.execute(stmt)).one()
        return StorageStats(**row._asdict())

    async def close(self) -> None:
        await self.database.close()

    async def __aenter__(self) -> "PostgresStorage":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
