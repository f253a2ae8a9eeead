"""OAuth client registration data model.

Provides the SQLAlchemy model for registered OAuth clients and the
PostgreSQL upsert statement used to register or re-register a client.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy import CheckConstraint, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY, insert
from sqlalchemy.orm import Mapped, mapped_column

from mcpresso.oauthstore.model.base import Base, idpk, str255


class Client(Base):
    """Registered OAuth client.

    Codes and tokens reference the client by id and are removed with it
    through the ON DELETE CASCADE foreign keys on their tables.
    """

    __tablename__ = "clients"

    id: Mapped[idpk]
    secret: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    name: Mapped[str255]
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    redirect_uris: Mapped[List[str]] = mapped_column(
        ARRAY(Text), nullable=False, default=list
    )
    scopes: Mapped[List[str]] = mapped_column(ARRAY(Text), nullable=False, default=list)
    grant_types: Mapped[List[str]] = mapped_column(
        ARRAY(Text), nullable=False, default=list
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("type IN ('confidential', 'public')", name="ck_clients_type"),
    )


CLIENT_MUTABLE_COLUMNS = (
    "secret",
    "name",
    "type",
    "redirect_uris",
    "scopes",
    "grant_types",
)


def upsert_client_stmt(
    id: str,
    secret: Optional[str],
    name: str,
    type: str,
    redirect_uris: List[str],
    scopes: List[str],
    grant_types: List[str],
    now,
):
    """Create PostgreSQL upsert statement for client records.

    Inserts a new client or, when the id already exists, overwrites every
    mutable column and refreshes updated_at. created_at is left untouched
    on conflict.
    """
    stmt = insert(Client).values(
        [
            {
                "id": id,
                "secret": secret,
                "name": name,
                "type": type,
                "redirect_uris": redirect_uris,
                "scopes": scopes,
                "grant_types": grant_types,
                "created_at": now,
                "updated_at": now,
            }
        ]
    )
    return stmt.on_conflict_do_update(
        index_elements=["id"],
        set_={
            **{column: stmt.excluded[column] for column in CLIENT_MUTABLE_COLUMNS},
            "updated_at": stmt.excluded.updated_at,
        },
    )
