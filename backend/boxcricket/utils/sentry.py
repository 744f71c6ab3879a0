import logging
import os
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

from ..config import _env_number

logger = logging.getLogger(__name__)


def init_sentry(dsn: Optional[str] = None) -> bool:
    """Initialise error tracking; returns ``False`` when no DSN is configured."""
    dsn = dsn or os.getenv("SENTRY_DSN")
    if not dsn:
        logger.info("SENTRY_DSN not provided; skipping Sentry initialization.")
        return False

    environment = (os.getenv("SENTRY_ENVIRONMENT") or "").strip() or None
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FastApiIntegration()],
        environment=environment,
        traces_sample_rate=_env_number("SENTRY_TRACES_SAMPLE_RATE", 0.0),
        profiles_sample_rate=_env_number("SENTRY_PROFILES_SAMPLE_RATE", 0.0),
    )
    sentry_sdk.set_tag("service", "boxcricket")
    logger.info(
        "Initialized Sentry%s",
        f" (environment={environment})" if environment else "",
    )
    return True
