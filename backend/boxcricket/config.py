import logging
import os

logger = logging.getLogger(__name__)


def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def _env_number(env_var: str, default, cast=float, minimum=0):
    raw_value = os.getenv(env_var)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        value = cast(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid number (got %r); defaulting to %r",
            env_var,
            raw_value,
            default,
        )
        return default
    if value < minimum:
        logger.warning("%s must be >= %r; defaulting to %r", env_var, minimum, default)
        return default
    return value


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")

# "box" (house rule) or "classic"; see scoring.illegal_delivery
SCORING_BONUS_POLICY = (os.getenv("SCORING_BONUS_POLICY") or "box").strip().lower()

SYNC_MAX_ATTEMPTS = _env_number("SYNC_MAX_ATTEMPTS", 3, cast=int, minimum=1)
SYNC_BACKOFF_BASE = _env_number("SYNC_BACKOFF_BASE", 0.2)
SYNC_TIMEOUT = _env_number("SYNC_TIMEOUT", 10.0)

SCORECARD_CACHE_TTL = _env_number("SCORECARD_CACHE_TTL", 30.0)
