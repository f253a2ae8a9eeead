"""Storage error taxonomy and backing-store error classification.

Not-found is never an error: reads return None. Everything else raised by
the database driver is translated into one of the classes below, with the
original exception chained for diagnostics. Nothing is retried here; the
caller decides whether a StorageUnavailable is worth another attempt.
"""
import asyncio
import contextlib
import logging
from typing import Iterator, List, Optional, Sequence

import asyncpg
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


class StorageError(Exception):
    """Base class for every error raised by the OAuth stores."""


class Conflict(StorageError):
    """A unique key (id, username, email, code or token value) is taken."""


class InvalidReference(StorageError):
    """A row references a client or user that does not exist."""


class SchemaIncomplete(StorageError):
    """One or more required relations are missing; run the migration."""

    def __init__(self, missing: Sequence[str], hint: str = "alembic upgrade head"):
        self.missing: List[str] = list(missing)
        super().__init__(
            f"Database schema is incomplete (missing: {', '.join(self.missing)}). "
            f"Please run: {hint}"
        )


class StorageUnavailable(StorageError):
    """Connectivity, timeout or otherwise unclassified backing-store failure."""


def sqlstate_of(error: BaseException) -> Optional[str]:
    """Find the SQLSTATE code of a driver error.

    The asyncpg adapter exposes it on the wrapped DBAPI exception and on the
    native asyncpg exception that caused it, depending on the SQLAlchemy
    release, so both are checked.
    """
    orig = getattr(error, "orig", None)
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def classify(error: BaseException) -> StorageError:
    if isinstance(error, StorageError):
        return error

    if isinstance(error, asyncpg.PostgresError):
        code = error.sqlstate
        message = str(error)
    elif isinstance(error, IntegrityError):
        code = sqlstate_of(error)
        message = str(error.orig)
        if code is None:
            lowered = str(error).lower()
            if "foreign key" in lowered:
                code = FOREIGN_KEY_VIOLATION
            elif "unique" in lowered or "duplicate" in lowered:
                code = UNIQUE_VIOLATION
    else:
        code = None
        message = str(error)

    if code == UNIQUE_VIOLATION:
        return Conflict(message)
    if code == FOREIGN_KEY_VIOLATION:
        return InvalidReference(message)

    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return StorageUnavailable(f"connection lost: {error.orig}")

    return StorageUnavailable(str(error) or type(error).__name__)


@contextlib.contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise backing-store failures as StorageError subclasses."""
    try:
        yield
    except StorageError:
        raise
    except (
        SQLAlchemyError,
        asyncpg.PostgresError,
        asyncpg.InterfaceError,
        OSError,
        asyncio.TimeoutError,
    ) as e:
        translated = classify(e)
        if isinstance(translated, StorageUnavailable):
            logger.warning("%s failed: %s", operation, e)
        else:
            logger.debug("%s rejected: %s", operation, translated)
        raise translated from e
