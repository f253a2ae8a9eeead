"""OAuth grant data models.

Provides SQLAlchemy models for short-lived authorization codes, access
tokens and refresh tokens. Every row belongs to a client and a user and is
removed with either of them by the ON DELETE CASCADE foreign keys.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from mcpresso.oauthstore.model.base import Base, str2048, tokenpk


class AuthorizationCode(Base):
    """Single-use authorization code with optional PKCE parameters."""

    __tablename__ = "authorization_codes"

    code: Mapped[tokenpk]
    client_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    redirect_uri: Mapped[str2048]
    scope: Mapped[str2048]
    resource: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    code_challenge: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    code_challenge_method: Mapped[Optional[str]] = mapped_column(
        String(32), nullable=True
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_authorization_codes_expires", "expires_at"),
        Index("idx_authorization_codes_client_id", "client_id"),
        Index("idx_authorization_codes_user_id", "user_id"),
    )


class AccessToken(Base):
    """Bearer access token issued to a client on behalf of a user."""

    __tablename__ = "access_tokens"

    token: Mapped[tokenpk]
    client_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    scope: Mapped[str2048]
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_access_tokens_expires", "expires_at"),
        Index("idx_access_tokens_client_id", "client_id"),
        Index("idx_access_tokens_user_id", "user_id"),
    )


class RefreshToken(Base):
    """Long-lived refresh token.

    access_token_id names the access token the refresh token was issued
    with. It is not a foreign key: expiry sweeps remove access tokens long
    before their refresh tokens, so the revoke cascade is applied by
    AccessTokenStore.delete instead.
    """

    __tablename__ = "refresh_tokens"

    token: Mapped[tokenpk]
    access_token_id: Mapped[str] = mapped_column(String(1024), nullable=False)
    client_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    scope: Mapped[str2048]
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_refresh_tokens_expires", "expires_at"),
        Index("idx_refresh_tokens_access_token_id", "access_token_id"),
        Index("idx_refresh_tokens_client_id", "client_id"),
        Index("idx_refresh_tokens_user_id", "user_id"),
    )
