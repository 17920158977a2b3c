"""Recurrence period resolution."""
import logging
import math
from datetime import datetime, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

from spendwatch.models.budget import Period, Recurrence
from spendwatch.utils.timestamp import ensure_utc

logger = logging.getLogger(__name__)

RecurrenceLike = Union[Recurrence, str]


class PeriodResolver:
    """Maps a recurrence anchor and a moment onto the period containing it."""

    def boundary(self, recurrence: RecurrenceLike, start_date: datetime, n: int) -> datetime:
        """
        The n-th period boundary after ``start_date``.

        Always computed from the anchor, so a monthly budget started on the
        31st lands on the last day of shorter months and returns to the 31st
        afterwards. Feb 29 anchors land on Feb 28 in non-leap years.
        """
        recurrence = Recurrence.coerce(recurrence)
        start = ensure_utc(start_date)
        if recurrence == Recurrence.DAILY:
            return start + timedelta(days=n)
        if recurrence == Recurrence.WEEKLY:
            return start + timedelta(weeks=n)
        if recurrence == Recurrence.MONTHLY:
            return start + relativedelta(months=n)
        return start + relativedelta(years=n)

    def elapsed_units(self, recurrence: RecurrenceLike, start_date: datetime, now: datetime) -> int:
        """Whole recurrence units between ``start_date`` and ``now`` (0 if not started)."""
        recurrence = Recurrence.coerce(recurrence)
        start = ensure_utc(start_date)
        now = ensure_utc(now)
        if now < start:
            return 0

        if recurrence == Recurrence.DAILY:
            return (now - start) // timedelta(days=1)
        if recurrence == Recurrence.WEEKLY:
            return (now - start) // timedelta(weeks=1)

        if recurrence == Recurrence.MONTHLY:
            n = (now.year - start.year) * 12 + (now.month - start.month)
        else:
            n = now.year - start.year
        # The calendar difference can overshoot by one when the anchor's
        # day (or time) has not been reached yet in the current month/year.
        if self.boundary(recurrence, start, n) > now:
            n -= 1
        return n

    def resolve(self, recurrence: RecurrenceLike, start_date: datetime, now: datetime) -> Period:
        """
        Resolve the half-open period ``[start, end)`` containing ``now``.

        Args:
            recurrence: daily, weekly, monthly or yearly
            start_date: Budget anchor date
            now: Reference moment supplied by the caller

        Returns:
            Period with ``start <= now < end``. When ``now`` is before the
            anchor the first period is returned.

        Raises:
            InvalidRecurrenceError: If ``recurrence`` is not supported
        """
        recurrence = Recurrence.coerce(recurrence)
        n = self.elapsed_units(recurrence, start_date, now)
        period = Period(
            start=self.boundary(recurrence, start_date, n),
            end=self.boundary(recurrence, start_date, n + 1),
        )
        logger.debug(
            "Resolved period",
            extra={"recurrence": recurrence.value, "n": n, "start": period.start, "end": period.end},
        )
        return period

    def days_until_reset(self, recurrence: RecurrenceLike, start_date: datetime, now: datetime) -> int:
        """Days (rounded up) from ``now`` until the current period ends."""
        period = self.resolve(recurrence, start_date, now)
        remaining = period.end - ensure_utc(now)
        return math.ceil(remaining / timedelta(days=1))
