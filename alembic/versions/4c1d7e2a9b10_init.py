"""init

Revision ID: 4c1d7e2a9b10
Revises:
Create Date: 2025-06-02 09:41:17.508312

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "4c1d7e2a9b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column(
            "scopes",
            postgresql.ARRAY(sa.Text),
            nullable=False,
            server_default=sa.text("ARRAY['read', 'write']::text[]"),
        ),
        sa.Column("profile", postgresql.JSONB, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_users_email", "users", ["email"], unique=True)
    op.create_index("idx_users_username", "users", ["username"], unique=True)

    op.create_table(
        "clients",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("secret", sa.String(512), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column(
            "redirect_uris",
            postgresql.ARRAY(sa.Text),
            nullable=False,
            server_default="{}",
        ),
        sa.Column(
            "scopes", postgresql.ARRAY(sa.Text), nullable=False, server_default="{}"
        ),
        sa.Column(
            "grant_types",
            postgresql.ARRAY(sa.Text),
            nullable=False,
            server_default="{}",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("type IN ('confidential', 'public')", name="ck_clients_type"),
    )

    op.create_table(
        "authorization_codes",
        sa.Column("code", sa.String(1024), primary_key=True),
        sa.Column(
            "client_id",
            sa.String(255),
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(255),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("redirect_uri", sa.String(2048), nullable=False),
        sa.Column("scope", sa.String(2048), nullable=False),
        sa.Column("resource", sa.String(2048), nullable=True),
        sa.Column("code_challenge", sa.String(255), nullable=True),
        sa.Column("code_challenge_method", sa.String(32), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_authorization_codes_expires", "authorization_codes", ["expires_at"]
    )
    op.create_index(
        "idx_authorization_codes_client_id", "authorization_codes", ["client_id"]
    )
    op.create_index(
        "idx_authorization_codes_user_id", "authorization_codes", ["user_id"]
    )

    op.create_table(
        "access_tokens",
        sa.Column("token", sa.String(1024), primary_key=True),
        sa.Column(
            "client_id",
            sa.String(255),
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(255),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("scope", sa.String(2048), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_access_tokens_expires", "access_tokens", ["expires_at"])
    op.create_index("idx_access_tokens_client_id", "access_tokens", ["client_id"])
    op.create_index("idx_access_tokens_user_id", "access_tokens", ["user_id"])

    # access_token_id names the issuing access token by value; it is not a
    # foreign key because access tokens are swept long before their refresh
    # tokens expire.
    op.create_table(
        "refresh_tokens",
        sa.Column("token", sa.String(1024), primary_key=True),
        sa.Column("access_token_id", sa.String(1024), nullable=False),
        sa.Column(
            "client_id",
            sa.String(255),
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(255),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("scope", sa.String(2048), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_refresh_tokens_expires", "refresh_tokens", ["expires_at"])
    op.create_index(
        "idx_refresh_tokens_access_token_id", "refresh_tokens", ["access_token_id"]
    )
    op.create_index("idx_refresh_tokens_client_id", "refresh_tokens", ["client_id"])
    op.create_index("idx_refresh_tokens_user_id", "refresh_tokens", ["user_id"])


def downgrade() -> None:
    op.drop_table("refresh_tokens")
    op.drop_table("access_tokens")
    op.drop_table("authorization_codes")
    op.drop_table("clients")
    op.drop_table("users")
