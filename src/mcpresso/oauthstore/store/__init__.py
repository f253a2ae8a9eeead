"""
OAuth Stores

Persistence contracts for the authorization-server engine. Each store owns
one entity family and shares a single Database handle (connection pool)
with the others; PostgresStorage bundles them behind one object.

Failure semantics shared by every store:
- Absent rows, including expired grants, are returned as None
- Conflict: a unique key is already taken on a pure insert path
- InvalidReference: an unknown client or user id was referenced
- StorageUnavailable: anything else the backing store reported
"""

from mcpresso.oauthstore.store.errors import (
    Conflict,
    InvalidReference,
    SchemaIncomplete,
    StorageError,
    StorageUnavailable,
)
from mcpresso.oauthstore.store.database import Database
from mcpresso.oauthstore.store.storage import PostgresStorage
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

__all__ = [
    "AccessToken",
    "AuthorizationCode",
    "ClientUpdate",
    "Conflict",
    "Database",
    "InvalidReference",
    "OAuthClient",
    "OAuthUser",
    "PostgresStorage",
    "RefreshToken",
    "SchemaIncomplete",
    "StorageError",
    "StorageStats",
    "StorageUnavailable",
    "UserUpdate",
]
