import logging
import time
from functools import wraps

from django.db import OperationalError

logger = logging.getLogger(__name__)

# PostgreSQL serialization failure / deadlock
PG_RETRY_ERRCODES = {"40001", "40P01"}


def _pgcode_from(exc: Exception):
    for candidate in (exc, getattr(exc, "__cause__", None)):
        if candidate is None:
            continue
        # psycopg 3 exposes sqlstate, psycopg2 pgcode
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return code
    return None


def is_retryable(exc: Exception) -> bool:
    code = _pgcode_from(exc)
    if code and code in PG_RETRY_ERRCODES:
        return True
    msg = str(exc).lower()
    if any(k in msg for k in ("deadlock detected", "could not serialize access")):
        return True
    # sqlite reports writer contention this way
    return isinstance(exc, OperationalError) and "database is locked" in msg


def retry_on_tx_failure(max_attempts=3, backoff=0.05):
    """Re-run a whole transaction on serialization failures. Idempotent work only."""
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                attempt += 1
                try:
                    return fn(*args, **kwargs)
                except Exception as e:
                    if attempt >= max_attempts or not is_retryable(e):
                        raise
                    logger.warning(f"[retry] {fn.__name__} failed ({attempt}/{max_attempts}): {e}")
                    time.sleep(backoff * attempt)
        return wrapper
    return deco
