"""User account data model.

Provides the SQLAlchemy model for user accounts that authorize OAuth
clients, keyed by id with unique username and email lookups.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import DateTime, Index, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, insert
from sqlalchemy.orm import Mapped, mapped_column

from mcpresso.oauthstore.model.base import Base, idpk, str255


class User(Base):
    """User account with credentials, granted scopes and profile.

    The profile is an opaque JSON document; it is stored and returned
    verbatim.
    """

    __tablename__ = "users"

    id: Mapped[idpk]
    username: Mapped[str255]
    email: Mapped[str255]
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    scopes: Mapped[List[str]] = mapped_column(ARRAY(Text), nullable=False, default=list)
    profile: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSONB(none_as_null=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_users_email", "email", unique=True),
        Index("idx_users_username", "username", unique=True),
    )


USER_MUTABLE_COLUMNS = (
    "username",
    "email",
    "hashed_password",
    "scopes",
    "profile",
)


def upsert_user_stmt(
    id: str,
    username: str,
    email: str,
    hashed_password: str,
    scopes: List[str],
    profile: Optional[Dict[str, Any]],
    now,
):
    """Create PostgreSQL upsert statement for user records.

    Only the primary key is the conflict target: a new id that collides with
    another user's username or email still fails on the unique indexes.
    """
    stmt = insert(User).values(
        [
            {
                "id": id,
                "username": username,
                "email": email,
                "hashed_password": hashed_password,
                "scopes": scopes,
                "profile": profile,
                "created_at": now,
                "updated_at": now,
            }
        ]
    )
    return stmt.on_conflict_do_update(
        index_elements=["id"],
        set_={
            **{column: stmt.excluded[column] for column in USER_MUTABLE_COLUMNS},
            "updated_at": stmt.excluded.updated_at,
        },
    )
