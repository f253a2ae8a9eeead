"""
Tests for UserStore in mcpresso.oauthstore.store.users

Covers keyed lookups, upsert semantics, uniqueness conflicts, opaque
profiles, partial updates and cascade deletion.
"""

import pytest

from mcpresso.oauthstore.store.errors import Conflict
from mcpresso.oauthstore.store.types import UserUpdate
from mcpresso.oauthstore.store.users import UserStore
from tests.test_helpers import (
    assert_same_entity,
    generate_test_datetime,
    make_access_token,
    make_client,
    make_code,
    make_refresh_token,
    make_user,
)


@pytest.fixture
def users(database):
    return UserStore(database)


class TestUserStoreLookups:
    """Test suite for reading users by id, username and email."""

    async def test_create_then_get_round_trips(self, users):
        user = make_user()
        await users.create(user)

        assert_same_entity(await users.get(user.id), user)

    async def test_get_by_username(self, users):
        user = make_user()
        await users.create(user)

        assert_same_entity(await users.get_by_username(user.username), user)
        assert await users.get_by_username("nobody") is None

    async def test_get_by_email(self, users):
        user = make_user()
        await users.create(user)

        assert_same_entity(await users.get_by_email(user.email), user)
        assert await users.get_by_email("nobody@example.com") is None

    async def test_get_unknown_returns_none(self, users):
        assert await users.get("no-such-user") is None

    async def test_list_newest_first(self, users, clock):
        created = []
        for _ in range(3):
            user = make_user()
            await users.create(user)
            created.append(user.id)
            clock.advance(seconds=1)

        assert [user.id for user in await users.list()] == list(reversed(created))

    async def test_list_same_instant_ordered_by_id(self, users):
        for user_id in ("u-b", "u-c", "u-a"):
            await users.create(make_user(id=user_id))

        assert [user.id for user in await users.list()] == ["u-a", "u-b", "u-c"]


class TestUserStoreProfile:
    """Test suite for the opaque profile document."""

    async def test_nested_profile_returned_verbatim(self, users):
        profile = {
            "name": "Ada",
            "tags": ["admin", "beta"],
            "limits": {"daily": 10, "ratio": 0.5, "enabled": True},
            "avatar": None,
        }
        user = make_user(profile=profile)
        await users.create(user)

        assert (await users.get(user.id)).profile == profile

    async def test_missing_profile_is_none(self, users):
        user = make_user(profile=None)
        await users.create(user)

        assert (await users.get(user.id)).profile is None


class TestUserStoreWrites:
    """Test suite for upserts, conflicts and updates."""

    async def test_upsert_same_id_overwrites(self, users, clock):
        user = make_user()
        await users.create(user)
        before = await users.get(user.id)

        clock.advance(seconds=3)
        replacement = make_user(id=user.id, scopes=["read"], profile={"v": 2})
        await users.create(replacement)

        after = await users.get(user.id)
        assert_same_entity(after, replacement)
        assert after.created_at == before.created_at
        assert after.updated_at > before.updated_at

    async def test_new_id_with_taken_username_conflicts(self, users):
        user = make_user()
        await users.create(user)

        with pytest.raises(Conflict):
            await users.create(make_user(username=user.username))

        assert_same_entity(await users.get(user.id), user)

    async def test_new_id_with_taken_email_conflicts(self, users):
        user = make_user()
        await users.create(user)

        with pytest.raises(Conflict):
            await users.create(make_user(email=user.email))

    async def test_update_only_present_fields(self, users, clock):
        user = make_user()
        await users.create(user)
        before = await users.get(user.id)

        clock.advance(seconds=1)
        affected = await users.update(user.id, UserUpdate(email="changed@example.com"))

        after = await users.get(user.id)
        assert affected == 1
        assert after.email == "changed@example.com"
        assert after.username == user.username
        assert after.hashed_password == user.hashed_password
        assert after.profile == user.profile
        assert after.updated_at > before.updated_at
        assert await users.get_by_email(user.email) is None

    async def test_update_clears_profile(self, users):
        user = make_user()
        await users.create(user)

        await users.update(user.id, UserUpdate(profile=None))

        assert (await users.get(user.id)).profile is None

    async def test_update_to_taken_username_conflicts(self, users):
        first = make_user()
        second = make_user()
        await users.create(first)
        await users.create(second)

        with pytest.raises(Conflict):
            await users.update(second.id, UserUpdate(username=first.username))

    async def test_update_unknown_is_noop(self, users):
        assert await users.update("no-such-user", UserUpdate(scopes=["read"])) == 0

    async def test_delete_cascades_to_grants(self, storage, database):
        client = make_client()
        user = make_user()
        other = make_user()
        await storage.create_client(client)
        await storage.create_user(user)
        await storage.create_user(other)
        expires_at = generate_test_datetime(3600, base=database.now())

        code = make_code(client.id, user.id, expires_at)
        access_token = make_access_token(client.id, user.id, expires_at)
        refresh_token = make_refresh_token(
            access_token.token, client.id, user.id, expires_at
        )
        other_token = make_access_token(client.id, other.id, expires_at)
        await storage.create_authorization_code(code)
        await storage.create_access_token(access_token)
        await storage.create_refresh_token(refresh_token)
        await storage.create_access_token(other_token)

        await storage.delete_user(user.id)

        assert await storage.get_user(user.id) is None
        assert await storage.get_authorization_code(code.code) is None
        assert await storage.get_access_token(access_token.token) is None
        assert await storage.get_refresh_token(refresh_token.token) is None
        assert await storage.get_access_token(other_token.token) is not None
