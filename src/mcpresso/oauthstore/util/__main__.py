import argparse
import asyncio
import contextlib
import logging
import sys
from typing import Optional

import bcrypt
from ulid import ULID

from mcpresso.oauthstore.app.cli import configure_logging, init_sentry
from mcpresso.oauthstore.app.config import Settings
from mcpresso.oauthstore.app.metrics import create_metrics_client
from mcpresso.oauthstore.app.tasks import cleanup_expired_once, cleanup_expired_task
from mcpresso.oauthstore.store.errors import StorageError
from mcpresso.oauthstore.store.storage import PostgresStorage
from mcpresso.oauthstore.store.types import OAuthUser

logger = logging.getLogger(__name__)

# bcrypt only reads the first 72 bytes of a password and refuses longer input.
BCRYPT_MAX_PASSWORD_BYTES = 72


class BootstrapError(Exception):
    """Unrecoverable setup failure; the message is shown to the operator."""


def hash_password(password: str, rounds: int = 12) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


async def checkSchema(storage: PostgresStorage) -> None:
    await storage.initialize()
    print("Database schema is complete.")


async def createUser(
    storage: PostgresStorage,
    settings: Settings,
    name: str,
    email: str,
    password: str,
) -> OAuthUser:
    await storage.initialize()

    if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise BootstrapError(
            f"Password is longer than {BCRYPT_MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
        )

    # Checked before hashing or writing so a refused run leaves nothing behind.
    if await storage.get_user_by_email(email) is not None:
        raise BootstrapError(f"A user with email {email} already exists")
    if await storage.get_user_by_username(name) is not None:
        raise BootstrapError(f"A user with username {name} already exists")

    user = OAuthUser(
        id=str(ULID()),
        username=name,
        email=email,
        hashed_password=hash_password(password, settings.bcrypt_rounds),
        scopes=list(settings.default_user_scopes),
        profile={"name": name, "email": email},
    )
    await storage.create_user(user)

    print("User created successfully")
    print(f"   User ID: {user.id}")
    print(f"   Username: {user.username}")
    print(f"   Email: {user.email}")
    print(f"   Scopes: {', '.join(user.scopes)}")
    return user


async def cleanup(storage: PostgresStorage, settings: Settings, loop: bool) -> None:
    await storage.initialize()
    metrics_client = await create_metrics_client(
        settings.metrics_backend,
        host=settings.statsd_host,
        port=settings.statsd_port,
        debug=settings.debug,
    )
    try:
        if loop:
            await cleanup_expired_task(
                storage,
                metrics_client,
                interval=settings.cleanup_interval,
                prefix=settings.statsd_prefix,
            )
        else:
            removed = await cleanup_expired_once(
                storage, metrics_client, settings.statsd_prefix
            )
            for table, count in removed.items():
                print(f"{table}: {count} expired rows removed")
    finally:
        await metrics_client.close()


async def stats(storage: PostgresStorage) -> None:
    await storage.initialize()
    for name, count in (await storage.get_stats()).model_dump().items():
        print(f"{name}: {count}")


async def realMain(argv: Optional[list] = None, settings: Optional[Settings] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="oauthstore", description="OAuth store bootstrap utilities"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    _ = subparsers.add_parser(
        "check-schema", help="Verify that the database migration has been run"
    )

    create_user = subparsers.add_parser("create-user", help="Provision a user")
    create_user.add_argument("name", help="The username for the new user.")
    create_user.add_argument("email", help="The email address for the new user.")
    create_user.add_argument("password", help="The plain-text password to hash.")

    cleanup_parser = subparsers.add_parser(
        "cleanup", help="Remove expired authorization codes and tokens"
    )
    cleanup_parser.add_argument(
        "--loop",
        action="store_true",
        help="Keep running, sweeping every CLEANUP_INTERVAL seconds.",
    )

    _ = subparsers.add_parser("stats", help="Print row counts for every relation")

    args = vars(parser.parse_args(argv))
    command = args.get("command", None)

    if settings is None:
        settings = Settings()  # type: ignore
    init_sentry(settings)

    storage = PostgresStorage.from_settings(settings)
    try:
        if command == "check-schema":
            await checkSchema(storage)
        elif command == "create-user":
            await createUser(
                storage, settings, args["name"], args["email"], args["password"]
            )
        elif command == "cleanup":
            await cleanup(storage, settings, args.get("loop", False))
        elif command == "stats":
            await stats(storage)
    except (StorageError, BootstrapError) as e:
        logger.debug("%s failed", command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await storage.close()
    return 0


def main() -> None:
    configure_logging()
    with contextlib.suppress(KeyboardInterrupt):
        sys.exit(asyncio.run(realMain()))


if __name__ == "__main__":
    main()
