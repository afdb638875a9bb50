"""Logging and error reporting for the VaaS hook.

``setup_logging`` configures the root logger, switching to DEBUG when the
``DEBUG`` setting is on. ``init_sentry`` forwards error level records to
Sentry, tagged with the release and the deployment environment.
"""
import logging
import os

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from vaas_hook.core import runenv
from vaas_hook.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

log = logging.getLogger("vaas.logging")


def setup_logging() -> None:
    """Configure root logging from the DEBUG setting or LOG_LEVEL."""
    level = "DEBUG" if settings.debug else os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(format=LOG_FORMAT)
    # basicConfig is a no-op once handlers exist, the level is applied regardless
    logging.getLogger().setLevel(level)


def init_sentry() -> bool:
    """Enable Sentry when a DSN is configured. Returns whether it was enabled.

    Sentry stays off in the local environment and when the environment cannot
    be determined; neither stops the hook from starting.
    """
    if not settings.sentry_dsn:
        return False

    try:
        environment = runenv.environment()
    except runenv.RuntimeEnvironmentError as e:
        log.warning("Unable to determine runtime environment, Sentry disabled: %s", e)
        return False

    if environment == "local":
        log.info("Disabling Sentry integration for the %s environment", environment)
        return False

    log.info("Enabling Sentry integration for the %s environment", environment)
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        release=settings.release,
        environment=environment,
        integrations=[LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)],
        shutdown_timeout=1,
    )
    return True
