"""
Database Models

This package defines the relational schema for the OAuth persistence layer
using SQLAlchemy ORM. The tables mirror the alembic migration and are also
used by the test suite to create a throwaway schema.

Key Models:
- base.py: Base SQLAlchemy model with common type definitions
- clients.py: Registered OAuth clients and the client upsert statement
- users.py: User accounts and the user upsert statement
- tokens.py: Authorization codes, access tokens and refresh tokens

The data models follow these relationships:
- AuthorizationCode, AccessToken and RefreshToken reference a Client and a
  User through ON DELETE CASCADE foreign keys
- RefreshToken names its issuing AccessToken by value (access_token_id);
  that link is maintained by the store, not by the schema

Each grant model includes:
- A store-assigned creation timestamp
- An expiration timestamp used by the live-expiry read filter and by the
  cleanup sweeps
"""

from mcpresso.oauthstore.model.base import Base
from mcpresso.oauthstore.model.clients import Client
from mcpresso.oauthstore.model.users import User
from mcpresso.oauthstore.model.tokens import AuthorizationCode, AccessToken, RefreshToken

REQUIRED_TABLES = (
    User.__tablename__,
    Client.__tablename__,
    AuthorizationCode.__tablename__,
    AccessToken.__tablename__,
    RefreshToken.__tablename__,
)
