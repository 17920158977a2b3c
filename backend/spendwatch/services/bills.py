"""Bill due-date classification, bill reminders and status transitions."""
import logging
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Union

from spendwatch.errors import InvalidBillTransitionError, MalformedDateError
from spendwatch.models.reminder import (
    BillAlertSummary,
    BillBuckets,
    BillState,
    BillUrgency,
    Reminder,
    ReminderKind,
    ReminderSeverity,
)
from spendwatch.models.transaction import BillStatus, Transaction
from spendwatch.services.records import iter_valid
from spendwatch.utils.timestamp import days_between

logger = logging.getLogger(__name__)

UPCOMING_WINDOW_DAYS = 7
URGENT_WINDOW_DAYS = 3


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


class BillStateResolver:
    """Derives upcoming/overdue/reminder state of bills for a given day."""

    def resolve(self, bill: Transaction, now: datetime) -> BillState:
        """
        Classify one bill. Both dates are compared as calendar days.

        Raises:
            MalformedDateError: If the bill has no due date
        """
        if bill.due_date is None:
            raise MalformedDateError(None, field="due_date")

        days_left = days_between(bill.due_date, now)
        common = dict(
            bill_id=bill.id,
            title=bill.title,
            amount=bill.amount,
            currency=bill.currency,
            due_date=bill.due_date,
            days_left=days_left,
        )

        # Paid is terminal: nothing else is derived
        if bill.bill_status == BillStatus.PAID.value:
            return BillState(**common, is_paid=True, urgency=BillUrgency.PAID)

        is_overdue = days_left < 0
        is_upcoming = 0 <= days_left <= UPCOMING_WINDOW_DAYS
        is_reminder_due = bill.reminder_days is not None and 0 <= days_left <= bill.reminder_days

        if is_overdue:
            urgency = BillUrgency.OVERDUE
        elif days_left <= URGENT_WINDOW_DAYS:
            urgency = BillUrgency.URGENT
        elif is_upcoming:
            urgency = BillUrgency.UPCOMING
        else:
            urgency = BillUrgency.SCHEDULED

        return BillState(
            **common,
            is_overdue=is_overdue,
            is_upcoming=is_upcoming,
            is_reminder_due=is_reminder_due,
            urgency=urgency,
        )

    def resolve_all(self, bills: Iterable, now: datetime) -> List[BillState]:
        """States for every valid bill record, overdue first then by days left."""
        states = []
        for record in iter_valid(bills, Transaction):
            if not record.is_bill:
                logger.debug("Ignoring transaction without due date", extra={"transaction_id": record.id})
                continue
            states.append(self.resolve(record, now))
        states.sort(key=lambda s: (s.days_left >= 0, s.days_left))
        return states

    def classify(self, bills: Iterable, now: datetime) -> BillBuckets:
        """Split bills into upcoming, overdue and reminder lists. Paid bills appear in none."""
        states = self.resolve_all(bills, now)
        buckets = BillBuckets(
            upcoming=[s for s in states if s.is_upcoming],
            overdue=[s for s in states if s.is_overdue],
            reminders=[s for s in states if s.is_reminder_due],
        )
        logger.debug(
            "Classified bills",
            extra={
                "upcoming": len(buckets.upcoming),
                "overdue": len(buckets.overdue),
                "reminders": len(buckets.reminders),
            },
        )
        return buckets

    def bill_reminders(self, bills: Iterable, now: datetime) -> List[Reminder]:
        """Danger reminders for overdue bills, warnings for bills inside their reminder window."""
        buckets = self.classify(bills, now)
        reminders = []
        for state in buckets.overdue:
            name = state.title or "Bill"
            reminders.append(Reminder(
                id=f"bill-overdue-{state.bill_id}",
                source_id=state.bill_id,
                kind=ReminderKind.BILL,
                severity=ReminderSeverity.DANGER,
                title="Bill Overdue",
                message=(
                    f'"{name}" was due on {state.due_date:%Y-%m-%d} and is '
                    f"{_plural(abs(state.days_left), 'day')} overdue."
                ),
                progress_or_days_left=state.days_left,
            ))
        for state in buckets.reminders:
            name = state.title or "Bill"
            when = "today" if state.days_left == 0 else f"in {_plural(state.days_left, 'day')}"
            reminders.append(Reminder(
                id=f"bill-reminder-{state.bill_id}",
                source_id=state.bill_id,
                kind=ReminderKind.BILL,
                severity=ReminderSeverity.WARNING,
                title="Bill Reminder",
                message=(
                    f'"{name}" ({state.amount:.2f} {state.currency}) is due {when}, '
                    f"on {state.due_date:%Y-%m-%d}."
                ),
                progress_or_days_left=state.days_left,
            ))
        return reminders

    @staticmethod
    def summarize(buckets: BillBuckets) -> BillAlertSummary:
        """Headline for the alert banner: overdue beats reminders beats upcoming."""
        overdue = len(buckets.overdue)
        reminders = len(buckets.reminders)
        upcoming = len(buckets.upcoming)
        counts = dict(overdue_count=overdue, reminder_count=reminders, upcoming_count=upcoming)

        if overdue:
            return BillAlertSummary(
                alert_type=BillUrgency.OVERDUE,
                title=f"{_plural(overdue, 'bill')} overdue",
                description=(
                    f"You have {_plural(overdue, 'bill')} that {'is' if overdue == 1 else 'are'} "
                    "past due date. Please review and take action."
                ),
                **counts,
            )
        if reminders:
            return BillAlertSummary(
                alert_type=BillUrgency.URGENT,
                title=_plural(reminders, "bill reminder"),
                description=(
                    f"You have {_plural(reminders, 'bill')} with active reminders. "
                    "Don't forget to pay them on time."
                ),
                **counts,
            )
        if upcoming:
            return BillAlertSummary(
                alert_type=BillUrgency.UPCOMING,
                title=_plural(upcoming, "upcoming bill"),
                description=(
                    f"You have {_plural(upcoming, 'bill')} due within the next "
                    f"{UPCOMING_WINDOW_DAYS} days. Plan your payments accordingly."
                ),
                **counts,
            )
        return BillAlertSummary(**counts)


class BillStatusMachine:
    """Allowed moves between stored bill statuses. Paid is terminal."""

    TRANSITIONS: Dict[BillStatus, FrozenSet[BillStatus]] = {
        BillStatus.UNPAID: frozenset({BillStatus.PENDING, BillStatus.PAID}),
        BillStatus.PENDING: frozenset({BillStatus.UNPAID, BillStatus.PAID}),
        BillStatus.PAID: frozenset(),
    }

    def transition(
        self,
        current: Union[BillStatus, str, None],
        target: Union[BillStatus, str],
    ) -> BillStatus:
        """
        Validate a status change and return the new status.

        A bill without a status is treated as unpaid. Moving to the same
        status is a no-op.

        Raises:
            InvalidBillTransitionError: For unknown statuses (including
                "overdue", which is derived and never stored) or disallowed moves
        """
        try:
            current_status = BillStatus(current) if current is not None else BillStatus.UNPAID
            target_status = BillStatus(target)
        except ValueError:
            raise InvalidBillTransitionError(current, target) from None

        if current_status == target_status:
            return target_status
        if target_status not in self.TRANSITIONS[current_status]:
            raise InvalidBillTransitionError(current_status, target_status)
        return target_status

    def mark_paid(self, bill: Transaction) -> Transaction:
        """Copy of ``bill`` with status paid."""
        status = self.transition(bill.bill_status, BillStatus.PAID)
        return bill.model_copy(update={"bill_status": status.value})
