import logging
import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

logger = logging.getLogger(__name__)


def sample_rate(env_var: str, default: float = 0.0) -> float:
    """Read a Sentry sample rate from ``env_var``, clamped to ``[0, 1]``."""

    raw_value = os.getenv(env_var)
    if raw_value is None or not raw_value.strip():
        return default

    try:
        value = float(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid float (got %r); defaulting to %.2f",
            env_var,
            raw_value,
            default,
        )
        return default

    if value < 0:
        logger.warning("%s cannot be negative; defaulting to %.2f", env_var, default)
        return default
    if value > 1:
        logger.warning("%s is above 1.0; capping at 1.0", env_var)
        return 1.0

    return value


def init_sentry() -> bool:
    """Initialise Sentry when ``SENTRY_DSN`` is configured.

    Returns ``True`` when the SDK was initialised.
    """

    dsn = (os.getenv("SENTRY_DSN") or "").strip()
    if not dsn:
        logger.info("SENTRY_DSN not provided; skipping Sentry initialization.")
        return False

    environment = (os.getenv("SENTRY_ENVIRONMENT") or "").strip() or None
    release = (os.getenv("SENTRY_RELEASE") or "").strip() or None

    sentry_sdk.init(
        dsn=dsn,
        integrations=[FastApiIntegration()],
        environment=environment,
        release=release,
        traces_sample_rate=sample_rate("SENTRY_TRACES_SAMPLE_RATE"),
        profiles_sample_rate=sample_rate("SENTRY_PROFILES_SAMPLE_RATE"),
        send_default_pii=False,
    )
    logger.info(
        "Initialized Sentry%s",
        f" (environment={environment})" if environment else "",
    )
    return True
