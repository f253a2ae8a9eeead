"""
Common testing utilities for the OAuth store tests.

Provides builders for valid entities and helpers for comparing what was
written with what the store returns.
"""

from datetime import datetime, timezone, timedelta
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from ulid import ULID

from mcpresso.oauthstore.store.database import Database
from mcpresso.oauthstore.store.types import (
    AccessToken,
    AuthorizationCode,
    OAuthClient,
    OAuthUser,
    RefreshToken,
)

STORE_ASSIGNED = {"created_at", "updated_at"}


def generate_ulid_string() -> str:
    """Generate a ULID string for testing."""
    return str(ULID())


def generate_test_datetime(offset_seconds: int = 0, base: Optional[datetime] = None) -> datetime:
    """Generate a timezone-aware datetime for testing."""
    return (base or datetime.now(timezone.utc)) + timedelta(seconds=offset_seconds)


def make_client(**overrides: Any) -> OAuthClient:
    data: Dict[str, Any] = {
        "id": "client_" + generate_ulid_string(),
        "secret": "secret_" + generate_ulid_string(),
        "name": "Test Client",
        "type": "confidential",
        "redirect_uris": ["https://app/cb"],
        "scopes": ["read", "write"],
        "grant_types": ["authorization_code", "refresh_token"],
    }
    data.update(overrides)
    return OAuthClient(**data)


def make_user(**overrides: Any) -> OAuthUser:
    suffix = generate_ulid_string().lower()
    data: Dict[str, Any] = {
        "id": "user_" + suffix,
        "username": "user_" + suffix,
        "email": f"{suffix}@example.com",
        "hashed_password": "$2b$12$" + "x" * 53,
        "scopes": ["read", "write"],
        "profile": {"name": "Test User", "preferences": {"theme": "dark"}},
    }
    data.update(overrides)
    return OAuthUser(**data)


def make_code(client_id: str, user_id: str, expires_at: datetime, **overrides: Any) -> AuthorizationCode:
    data: Dict[str, Any] = {
        "code": "code_" + generate_ulid_string(),
        "client_id": client_id,
        "user_id": user_id,
        "redirect_uri": "https://app/cb",
        "scope": "read write",
        "resource": "https://api.example.com",
        "code_challenge": "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM",
        "code_challenge_method": "S256",
        "expires_at": expires_at,
    }
    data.update(overrides)
    return AuthorizationCode(**data)


def make_access_token(client_id: str, user_id: str, expires_at: datetime, **overrides: Any) -> AccessToken:
    data: Dict[str, Any] = {
        "token": "at_" + generate_ulid_string(),
        "client_id": client_id,
        "user_id": user_id,
        "scope": "read write",
        "expires_at": expires_at,
    }
    data.update(overrides)
    return AccessToken(**data)


def make_refresh_token(
    access_token_id: str, client_id: str, user_id: str, expires_at: datetime, **overrides: Any
) -> RefreshToken:
    data: Dict[str, Any] = {
        "token": "rt_" + generate_ulid_string(),
        "access_token_id": access_token_id,
        "client_id": client_id,
        "user_id": user_id,
        "scope": "read write",
        "expires_at": expires_at,
    }
    data.update(overrides)
    return RefreshToken(**data)


def assert_same_entity(actual, expected) -> None:
    """Assert that every caller-supplied field round-tripped unchanged."""
    assert actual is not None
    actual_data = actual.model_dump(exclude=STORE_ASSIGNED)
    expected_data = expected.model_dump(exclude=STORE_ASSIGNED)
    assert actual_data == expected_data


async def count_rows(database: Database, model_class) -> int:
    async with database.session() as database_session:
        return await database_session.scalar(select(func.count()).select_from(model_class))
