import logging
import sys

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from backend.settings import Settings


LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging to stdout and quiet the HTTP libraries."""

    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def init_sentry(app_settings: Settings) -> bool:
    """Report degraded remote fetches to Sentry when a DSN is configured.

    Fetch failures are logged rather than raised, so log records at or above
    `sentry_event_level` become Sentry events and lower ones breadcrumbs.
    Returns whether the SDK was initialized.
    """

    dsn = (app_settings.sentry_dsn or "").strip()
    if not dsn:
        return False

    event_level = logging.getLevelName(app_settings.sentry_event_level.upper())
    sentry_sdk.init(
        dsn=dsn,
        environment=app_settings.environment,
        release=app_settings.release,
        traces_sample_rate=app_settings.sentry_traces_sample_rate,
        send_default_pii=False,
        integrations=[
            LoggingIntegration(level=logging.INFO, event_level=event_level),
        ],
    )
    return True
