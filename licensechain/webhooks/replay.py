"""Replay protection for webhook deliveries.

A delivery is fresh when its creation time lies within ``tolerance`` seconds
of the verifier's clock, in either direction.
"""

import math
import time
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from dateutil import parser as dtparse

from ..config import DEFAULT_WEBHOOK_TOLERANCE
from ..exceptions import InvalidTimestampError

TimestampLike = Union[str, int, float, datetime, None]


def parse_timestamp(value: Union[str, int, float, datetime]) -> float:
    """Convert an epoch number, numeric string, ISO-8601 string or datetime
    to epoch seconds. Naive datetimes are taken as UTC.

    Raises:
        InvalidTimestampError: If the value cannot be interpreted
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        try:
            return value.timestamp()
        except (OverflowError, ValueError, OSError) as e:
            raise InvalidTimestampError(f"Invalid timestamp format: {value!r}") from e

    if isinstance(value, bool):
        raise InvalidTimestampError(f"Invalid timestamp format: {value!r}")

    if isinstance(value, (int, float)):
        try:
            seconds = float(value)
        except OverflowError as e:
            raise InvalidTimestampError(f"Invalid timestamp format: {value!r}") from e
    elif isinstance(value, str):
        text = value.strip()
        try:
            seconds = float(text)
        except ValueError:
            return parse_timestamp(_parse_date_string(text))
    else:
        raise InvalidTimestampError(f"Invalid timestamp format: {value!r}")

    if not math.isfinite(seconds):
        raise InvalidTimestampError(f"Invalid timestamp format: {value!r}")
    return seconds


def _parse_date_string(text: str) -> datetime:
    try:
        return dtparse.isoparse(text)
    except (ValueError, OverflowError):
        pass
    try:
        return dtparse.parse(text)
    except (ValueError, OverflowError) as e:
        raise InvalidTimestampError(f"Invalid timestamp format: {text!r}") from e


def is_fresh(
    event_timestamp: TimestampLike,
    now: Union[float, datetime, None] = None,
    tolerance: float = DEFAULT_WEBHOOK_TOLERANCE,
) -> bool:
    """Return whether ``|now - event_timestamp| <= tolerance``.

    A missing timestamp (None or blank string) counts as fresh.

    Raises:
        InvalidTimestampError: If the timestamp is malformed
    """
    if event_timestamp is None or (
        isinstance(event_timestamp, str) and not event_timestamp.strip()
    ):
        return True

    event_seconds = parse_timestamp(event_timestamp)
    if now is None:
        now_seconds = time.time()
    else:
        now_seconds = parse_timestamp(now)
    return abs(now_seconds - event_seconds) <= tolerance


class ReplayGuard:
    """Freshness policy for one webhook endpoint.

    Attributes:
        tolerance: Allowed clock skew in seconds
        require_timestamp: Treat a missing timestamp as stale instead of fresh
    """

    def __init__(
        self,
        tolerance: float = DEFAULT_WEBHOOK_TOLERANCE,
        require_timestamp: bool = False,
        clock: Callable[[], float] = time.time,
    ):
        if tolerance < 0:
            raise ValueError("Tolerance must be non-negative")
        self.tolerance = tolerance
        self.require_timestamp = require_timestamp
        self._clock = clock

    def is_fresh(self, event_timestamp: TimestampLike, now: Optional[float] = None) -> bool:
        """Apply the policy.

        Raises:
            InvalidTimestampError: If the timestamp is malformed
        """
        missing = event_timestamp is None or (
            isinstance(event_timestamp, str) and not event_timestamp.strip()
        )
        if missing:
            return not self.require_timestamp
        return is_fresh(
            event_timestamp,
            now=self._clock() if now is None else now,
            tolerance=self.tolerance,
        )
