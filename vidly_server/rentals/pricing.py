"""Rental fee computation."""

from __future__ import annotations

import math
from datetime import datetime

SECONDS_PER_DAY = 24 * 60 * 60


def rental_days(date_out: datetime, date_returned: datetime) -> int:
    """Number of days charged: every started day counts, minimum one."""
    elapsed = (date_returned - date_out).total_seconds()
    return max(1, math.ceil(elapsed / SECONDS_PER_DAY))


def compute_rental_fee(date_out: datetime, date_returned: datetime, daily_rental_rate: float) -> float:
    """Fee for a rental returned at date_returned.

    Example:
        36 hours at a daily rate of 2 is charged as 2 days, i.e. 4.
    """
    return rental_days(date_out, date_returned) * daily_rental_rate
