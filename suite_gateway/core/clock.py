"""Millisecond clock helpers shared by the session lifecycle."""

import math
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

DEFAULT_TOKEN_LIFETIME = timedelta(hours=1)
MAX_TOKEN_LIFETIME = timedelta(days=366)
REFRESH_BUFFER = timedelta(minutes=5)


def now_ms() -> int:
    """Current time in milliseconds since epoch."""
    return int(time.time() * 1000)


def to_ms(delta: timedelta) -> int:
    return int(delta.total_seconds() * 1000)


def _positive_seconds(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("Token expiry must be a number of seconds.")
    seconds = float(value)
    if not math.isfinite(seconds) or seconds <= 0:
        raise ValueError(f"Token expiry {value!r} is not a positive finite number.")
    return seconds


def resolve_expiry_ms(
    *, expires_at: Optional[Any] = None, expires_in: Optional[Any] = None, now: int
) -> int:
    """Absolute expiry in ms from a provider's ``expires_at`` or ``expires_in`` (seconds).

    Falls back to ``DEFAULT_TOKEN_LIFETIME`` when neither is present. Raises
    ``TypeError`` or ``ValueError`` for values that are not numeric, not finite,
    not positive, or further out than ``MAX_TOKEN_LIFETIME``.
    """
    if expires_at is not None:
        resolved = int(_positive_seconds(expires_at) * 1000)
    elif expires_in is not None:
        resolved = now + int(_positive_seconds(expires_in) * 1000)
    else:
        return now + to_ms(DEFAULT_TOKEN_LIFETIME)

    if resolved > now + to_ms(MAX_TOKEN_LIFETIME):
        raise ValueError("Token expiry is too far in the future.")
    return resolved


def is_token_expired(
    expires_at: int, *, now: int | None = None, buffer: timedelta = REFRESH_BUFFER
) -> bool:
    """True when ``expires_at`` is in the past or within ``buffer`` of now."""
    current = now_ms() if now is None else now
    return current >= expires_at - to_ms(buffer)


def ms_to_datetime(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


__all__ = [
    "DEFAULT_TOKEN_LIFETIME",
    "MAX_TOKEN_LIFETIME",
    "REFRESH_BUFFER",
    "is_token_expired",
    "ms_to_datetime",
    "now_ms",
    "resolve_expiry_ms",
    "to_ms",
]
