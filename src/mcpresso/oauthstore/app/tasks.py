import asyncio
import logging
from time import time
from typing import Dict, NoReturn

import sentry_sdk

from mcpresso.oauthstore.app.metrics import MetricsClient
from mcpresso.oauthstore.store.storage import PostgresStorage

logger = logging.getLogger(__name__)


async def cleanup_expired_once(
    storage: PostgresStorage,
    metrics_client: MetricsClient,
    prefix: str = "oauthstore",
) -> Dict[str, int]:
    """
    Sweep expired authorization codes, access tokens and refresh tokens.

    Reports the removed row count per relation and the sweep duration.
    """
    start_time = time()
    removed = await storage.cleanup_expired()

    for table, count in removed.items():
        metrics_client.increment(f"{prefix}.cleanup.{table}.removed", count)
    metrics_client.timer(f"{prefix}.cleanup.time", time() - start_time)

    if any(removed.values()):
        logger.info(
            "Cleaned up %d expired authorization codes, %d access tokens and %d refresh tokens",
            removed.get("authorization_codes", 0),
            removed.get("access_tokens", 0),
            removed.get("refresh_tokens", 0),
        )
    return removed


async def cleanup_expired_task(
    storage: PostgresStorage,
    metrics_client: MetricsClient,
    interval: int = 3600,
    prefix: str = "oauthstore",
) -> NoReturn:
    """
    Background task to clean up expired grants.

    Runs one sweep every `interval` seconds. Sweeps only remove rows that
    reads already treat as absent, so this is safe to run next to live
    traffic and on more than one worker at a time.
    """
    logger.info("Starting expiry cleanup task, interval %ds", interval)

    while True:
        try:
            await asyncio.sleep(interval)
            await cleanup_expired_once(storage, metrics_client, prefix)
        except asyncio.CancelledError:
            logger.info("Expiry cleanup task cancelled")
            raise
        except Exception as e:
            logger.exception("Error in expiry cleanup task")
            sentry_sdk.capture_exception(e)
            metrics_client.increment(
                f"{prefix}.cleanup.exception",
                1,
                tag_dict={"exception": type(e).__name__},
            )
