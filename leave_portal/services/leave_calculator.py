"""Date-span and balance arithmetic used by the leave pages.

All values here are for display. Balances are computed by the backend; the
portal only classifies them and sizes progress bars.
"""

import math
from datetime import date, datetime, time
from enum import Enum
from typing import Optional, Union

DateLike = Union[date, datetime, str, None]

LOW_BALANCE_THRESHOLD = 2
SECONDS_PER_DAY = 24 * 60 * 60


class BalanceStatus(str, Enum):
    AVAILABLE = "available"
    LOW = "low"
    EXHAUSTED = "exhausted"


def _coerce(value: DateLike) -> Optional[Union[date, datetime]]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if "T" in value or " " in value:
            return datetime.fromisoformat(value)
        return date.fromisoformat(value)
    return value


def total_days(start: DateLike, end: DateLike) -> int:
    """Inclusive number of calendar days between two dates.

    Returns 0 while either date is missing. The difference is absolute, so
    ``total_days(a, b) == total_days(b, a)``.
    """
    start_value = _coerce(start)
    end_value = _coerce(end)
    if start_value is None or end_value is None:
        return 0

    if isinstance(start_value, datetime) or isinstance(end_value, datetime):
        if not isinstance(start_value, datetime):
            start_value = datetime.combine(start_value, time.min)
        if not isinstance(end_value, datetime):
            end_value = datetime.combine(end_value, time.min)
        if (start_value.tzinfo is None) != (end_value.tzinfo is None):
            # Compare wall-clock times when only one side carries an offset.
            start_value = start_value.replace(tzinfo=None)
            end_value = end_value.replace(tzinfo=None)
        seconds = abs((end_value - start_value).total_seconds())
        return math.ceil(seconds / SECONDS_PER_DAY) + 1

    return abs((end_value - start_value).days) + 1


def classify_balance(remaining_days: float) -> BalanceStatus:
    if remaining_days == 0:
        return BalanceStatus.EXHAUSTED
    if remaining_days <= LOW_BALANCE_THRESHOLD:
        return BalanceStatus.LOW
    return BalanceStatus.AVAILABLE


def usage_percent(used: float, total: float) -> int:
    """Percentage of the allocation used, rounded half up and not clamped."""
    if total <= 0:
        return 0
    return int(math.floor(100 * used / total + 0.5))


def bar_width(percent: float) -> int:
    """Clamp a usage percentage into the 0-100 range of a progress bar."""
    return int(min(max(percent, 0), 100))
