import logging
from typing import List, Optional

from sqlalchemy import delete, select, update

from mcpresso.oauthstore.model.users import User, upsert_user_stmt
from mcpresso.oauthstore.store.database import Database
from mcpresso.oauthstore.store.errors import translate_errors
from mcpresso.oauthstore.store.types import OAuthUser, UserUpdate

logger = logging.getLogger(__name__)


class UserStore:
    """User accounts, looked up by id, username or email.

    create() is an upsert on id only. Registering a brand new user with a
    username or email that is already taken raises Conflict from the unique
    indexes; callers that mean "register" rather than "overwrite" should
    check get_by_username/get_by_email first.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    async def create(self, user: OAuthUser) -> None:
        stmt = upsert_user_stmt(
            id=user.id,
            username=user.username,
            email=user.email,
            hashed_password=user.hashed_password,
            scopes=list(user.scopes),
            profile=user.profile,
            now=self.database.now(),
        )
        with translate_errors("create user"):
            async with self.database.session() as database_session:
                async with database_session.begin():
                    await database_session.execute(stmt)
        logger.debug("Upserted user %s", user.id)

    async def _get_one(self, operation: str, criterion) -> Optional[OAuthUser]:
        with translate_errors(operation):
            async with self.database.session() as database_session:
                user: Optional[User] = (
                    await database_session.scalars(select(User).where(criterion))
                ).first()
        if user is None:
            return None
        return OAuthUser.model_validate(user)

    async def get(self, user_id: str) -> Optional[OAuthUser]:
        return await self._get_one("get user", User.id == user_id)

    async def get_by_username(self, username: str) -> Optional[OAuthUser]:
        return await self._get_one("get user by username", User.username == username)

    async def get_by_email(self, email: str) -> Optional[OAuthUser]:
        return await self._get_one("get user by email", User.email == email)

    async def list(self) -> List[OAuthUser]:
        with translate_errors("list users"):
            async with self.database.session() as database_session:
                users = (
                    await database_session.scalars(
                        select(User).order_by(User.created_at.desc(), User.id)
                    )
                ).all()
        return [OAuthUser.model_validate(user) for user in users]

    async def update(self, user_id: str, updates: UserUpdate) -> int:
        values = updates.changes()
        values["updated_at"] = self.database.now()
        with translate_errors("update user"):
            async with self.database.session() as database_session:
                async with database_session.begin():
                    result = await database_session.execute(
                        update(User)
                        .where(User.id == user_id)
                        .values(**values)
                        .execution_options(synchronize_session=False)
                    )
        logger.debug("Updated user %s (%d row)", user_id, result.rowcount)
        return result.rowcount

    async def delete(self, user_id: str) -> int:
        """Remove a user; codes and tokens issued to the user go with it."""
        with translate_errors("delete user"):
            async with self.database.session() as database_session:
                async with database_session.begin():
                    result = await database_session.execute(
                        delete(User).where(User.id == user_id)
                    )
        if result.rowcount:
            logger.info("Deleted user %s", user_id)
        return result.rowcount
