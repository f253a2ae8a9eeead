import os
import logging
from logging.config import dictConfig
import json
from typing import Optional

import sentry_sdk

from mcpresso.oauthstore.app.config import Settings

logger = logging.getLogger(__name__)


def configure_logging(config_file: Optional[str] = None, level: int = logging.DEBUG) -> None:
    """Apply a JSON dictConfig from LOGGING_CONFIG_FILE, or log to stderr at level."""
    if config_file is None:
        config_file = os.getenv("LOGGING_CONFIG_FILE") or None

    if config_file:
        with open(config_file) as fl:
            dictConfig(json.load(fl))
    else:
        logging.basicConfig(level=level)


def init_sentry(settings: Settings) -> bool:
    if not settings.sentry_dsn:
        return False
    sentry_sdk.init(dsn=settings.sentry_dsn, send_default_pii=False)
    logger.debug("Sentry error reporting enabled")
    return True
