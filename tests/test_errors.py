"""
Unit tests for error classification in mcpresso.oauthstore.store.errors

These tests build driver exceptions by hand and need no database.
"""

import asyncio

import asyncpg
import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeoutError

from mcpresso.oauthstore.store.errors import (
    Conflict,
    InvalidReference,
    SchemaIncomplete,
    StorageError,
    StorageUnavailable,
    classify,
    sqlstate_of,
    translate_errors,
)


class FakeDriverError(Exception):
    def __init__(self, message, sqlstate=None):
        super().__init__(message)
        self.sqlstate = sqlstate


def integrity_error(message, sqlstate=None):
    return IntegrityError("INSERT ...", {}, FakeDriverError(message, sqlstate))


class TestClassify:
    def test_unique_violation_is_conflict(self):
        error = integrity_error("duplicate key value", "23505")
        assert isinstance(classify(error), Conflict)

    def test_foreign_key_violation_is_invalid_reference(self):
        error = integrity_error("violates foreign key constraint", "23503")
        assert isinstance(classify(error), InvalidReference)

    def test_sqlstate_on_chained_cause(self):
        orig = FakeDriverError("wrapped")
        orig.__cause__ = FakeDriverError("native", "23503")
        error = IntegrityError("INSERT ...", {}, orig)

        assert sqlstate_of(error) == "23503"
        assert isinstance(classify(error), InvalidReference)

    def test_message_fallback_without_sqlstate(self):
        fk = integrity_error('insert violates foreign key constraint "fk"')
        unique = integrity_error('duplicate key value violates unique constraint "pk"')

        assert isinstance(classify(fk), InvalidReference)
        assert isinstance(classify(unique), Conflict)

    def test_other_integrity_errors_are_unavailable(self):
        error = integrity_error("null value in column", "23502")
        assert isinstance(classify(error), StorageUnavailable)

    def test_native_asyncpg_unique_violation(self):
        error = asyncpg.exceptions.UniqueViolationError("duplicate key value")
        assert isinstance(classify(error), Conflict)

    def test_native_asyncpg_foreign_key_violation(self):
        error = asyncpg.exceptions.ForeignKeyViolationError("violates foreign key")
        assert isinstance(classify(error), InvalidReference)

    def test_operational_error_is_unavailable(self):
        error = OperationalError("SELECT 1", {}, FakeDriverError("connection refused"))
        assert isinstance(classify(error), StorageUnavailable)

    def test_storage_errors_pass_through(self):
        error = Conflict("already")
        assert classify(error) is error


class TestTranslateErrors:
    def test_translates_and_chains(self):
        original = integrity_error("duplicate key value", "23505")

        with pytest.raises(Conflict) as exc_info:
            with translate_errors("create client"):
                raise original

        assert exc_info.value.__cause__ is original

    @pytest.mark.parametrize(
        "error",
        [
            ConnectionRefusedError("refused"),
            asyncio.TimeoutError(),
            PoolTimeoutError("QueuePool limit reached"),
        ],
    )
    def test_connectivity_failures_are_unavailable(self, error):
        with pytest.raises(StorageUnavailable):
            with translate_errors("get client"):
                raise error

    def test_storage_errors_are_not_rewrapped(self):
        with pytest.raises(SchemaIncomplete):
            with translate_errors("schema check"):
                raise SchemaIncomplete(["users"])

    def test_unrelated_errors_propagate(self):
        with pytest.raises(KeyError):
            with translate_errors("get client"):
                raise KeyError("bug")

    def test_no_error_passes(self):
        with translate_errors("get client"):
            pass


class TestSchemaIncomplete:
    def test_message_lists_missing_relations(self):
        error = SchemaIncomplete(["clients", "refresh_tokens"])

        assert isinstance(error, StorageError)
        assert error.missing == ["clients", "refresh_tokens"]
        assert "missing: clients, refresh_tokens" in str(error)
        assert "alembic upgrade head" in str(error)
