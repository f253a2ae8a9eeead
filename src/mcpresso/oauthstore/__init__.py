"""
OAuth Store - PostgreSQL persistence for an OAuth 2.0 authorization server

This package holds the durable state of an authorization server: registered
clients, user accounts, authorization codes, access tokens and refresh
tokens. The authorization-server engine implements the protocol itself and
delegates every read and write of that state to this package.

Key Components:
- model: SQLAlchemy tables matching the alembic migration
- store: Entity stores, error taxonomy and the PostgresStorage facade
- app: Settings, logging, metrics and the expiry sweep task
- util: Bootstrap CLI (schema check, user provisioning, cleanup, stats)

Consistency Overview:
1. Uniqueness, foreign keys and cascades are enforced by PostgreSQL
2. Client and user writes are atomic upserts (INSERT ... ON CONFLICT)
3. Expired grants are filtered out at read time and swept out of band
4. Revoking an access token removes its refresh tokens in one transaction

Nothing is cached in memory; every call is an independent request against
the shared connection pool.
"""
