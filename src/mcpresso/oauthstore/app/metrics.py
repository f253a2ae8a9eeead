"""
Metrics for the OAuth store

A small vendor-agnostic metrics interface used by the expiry sweep task.
Two backends are provided:

- TelegrafCompatibilityClient: wraps aio-statsd's TelegrafStatsdClient
- NoOpMetricsClient: discards everything, for tests or disabled metrics

create_metrics_client picks one from the configured backend name.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

from aio_statsd import TelegrafStatsdClient

logger = logging.getLogger(__name__)


class MetricsClient(ABC):
    """
    Abstract metrics client interface.

    Tag handling follows StatsD-style tag dictionaries.
    """

    @abstractmethod
    def increment(
        self,
        name: str,
        value: Union[int, float] = 1,
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Increment a counter metric by the specified value.

        Args:
            name: Metric name (e.g., 'oauthstore.cleanup.access_tokens.removed')
            value: Amount to increment by (default: 1)
            tag_dict: Optional tags for metric dimensions
        """
        pass

    @abstractmethod
    def gauge(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Set a gauge metric to the specified value."""
        pass

    @abstractmethod
    def timer(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Record a duration, in seconds."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Flush pending metrics and close network resources."""
        pass


class TelegrafCompatibilityClient(MetricsClient):
    """
    MetricsClient over an aio-statsd TelegrafStatsdClient.

    The wrapped client must already be connected; close() closes it.
    """

    def __init__(self, telegraf_client: Any):
        self.client = telegraf_client

    def increment(
        self,
        name: str,
        value: Union[int, float] = 1,
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.client.increment(name, value, tag_dict=tag_dict or {})

    def gauge(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.client.gauge(name, value, tag_dict=tag_dict or {})

    def timer(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.client.timer(name, value, tag_dict=tag_dict or {})

    async def close(self) -> None:
        try:
            await self.client.close()
        except Exception as e:
            logger.warning("Error closing Telegraf client: %s", e)


class NoOpMetricsClient(MetricsClient):
    """No-operation metrics client for disabled metrics collection."""

    def increment(
        self,
        name: str,
        value: Union[int, float] = 1,
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        pass

    def timer(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        pass

    async def close(self) -> None:
        pass


async def create_metrics_client(
    backend: str,
    host: str = "localhost",
    port: int = 8125,
    debug: bool = False,
) -> MetricsClient:
    """
    Create and connect the metrics client for a backend name.

    Args:
        backend: Backend type ('telegraf' or 'none')
        host: Telegraf/StatsD host
        port: Telegraf/StatsD port
        debug: Enable aio-statsd debug logging

    Raises:
        ValueError: If the backend type is unknown
    """
    backend = backend.lower()

    if backend == "telegraf":
        telegraf_client = TelegrafStatsdClient(host=host, port=port, debug=debug)
        await telegraf_client.connect()
        return TelegrafCompatibilityClient(telegraf_client)

    if backend == "none":
        logger.info("Metrics collection disabled (no-op client)")
        return NoOpMetricsClient()

    raise ValueError(
        f"Invalid metrics backend: {backend}. Supported backends: 'telegraf', 'none'"
    )
