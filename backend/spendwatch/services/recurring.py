"""Occurrence planning for recurring transaction templates."""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from spendwatch.config import settings
from spendwatch.models.transaction import RecurringFrequency, Transaction
from spendwatch.utils.timestamp import start_of_day

logger = logging.getLogger(__name__)

_STEPS = {
    RecurringFrequency.DAILY.value: lambda k: timedelta(days=k),
    RecurringFrequency.WEEKLY.value: lambda k: timedelta(weeks=k),
    RecurringFrequency.MONTHLY.value: lambda k: relativedelta(months=k),
    RecurringFrequency.QUARTERLY.value: lambda k: relativedelta(months=3 * k),
    RecurringFrequency.YEARLY.value: lambda k: relativedelta(years=k),
}


class RecurringOccurrencePlanner:
    """Works out which instances of a recurring template are due."""

    def __init__(self, max_catch_up: Optional[int] = None):
        self.max_catch_up = max_catch_up or settings.max_recurring_catch_up

    def occurrence(self, template: Transaction, k: int) -> datetime:
        """The k-th occurrence (k=0 is the template date), computed from the template anchor."""
        return start_of_day(template.date) + _STEPS[template.recurring_frequency](k)

    def due_dates(
        self,
        template: Transaction,
        today: datetime,
        last_occurrence: Optional[datetime] = None,
    ) -> List[datetime]:
        """
        Occurrence dates not yet materialized, up to today or the template end date.

        Args:
            template: Recurring template transaction
            today: Reference day supplied by the caller
            last_occurrence: Date of the latest instance already created, if any

        Returns:
            Start-of-day dates in ascending order, at most ``max_catch_up`` of them
        """
        if not template.is_recurring or not template.recurring_frequency:
            return []

        boundary = start_of_day(today)
        if template.end_date is not None:
            boundary = min(boundary, start_of_day(template.end_date))

        k = 0
        if last_occurrence is not None:
            last = start_of_day(last_occurrence)
            while self.occurrence(template, k) <= last:
                k += 1

        dates = []
        candidate = self.occurrence(template, k)
        while candidate <= boundary:
            if len(dates) == self.max_catch_up:
                logger.warning(
                    "Recurring catch-up truncated",
                    extra={"template_id": template.id, "limit": self.max_catch_up},
                )
                break
            dates.append(candidate)
            k += 1
            candidate = self.occurrence(template, k)
        return dates

    @staticmethod
    def build_instance(template: Transaction, on: datetime) -> Transaction:
        """A plain (non-recurring) transaction for one occurrence of ``template``."""
        return template.model_copy(update={
            "id": f"{template.id}-{on:%Y%m%d}",
            "date": on,
            "is_recurring": False,
            "recurring_frequency": None,
            "end_date": None,
            "template_id": template.id,
        })
