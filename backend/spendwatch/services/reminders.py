"""Budget reminder classification."""
import logging
from typing import Iterable, List, Optional

from spendwatch.models.budget import BudgetProgress
from spendwatch.models.reminder import Reminder, ReminderKind, ReminderSeverity

logger = logging.getLogger(__name__)

WARNING_PERCENT = 80.0
UPDATE_PERCENT = 60.0
CRITICAL_PERCENT = 90.0


class ReminderClassifier:
    """Maps budget progress onto a severity tier and message."""

    def classify(self, progress: BudgetProgress) -> Optional[Reminder]:
        """
        Build the reminder for one budget, if any.

        Precedence: over budget (danger), then >= 80% (warning, "Budget
        Warning"), then >= 60% (warning, "Budget Update"). Thresholds use the
        raw progress value; only message text is rounded.
        """
        title = progress.title
        currency = progress.currency

        if progress.is_over_budget:
            return Reminder(
                id=f"over-{progress.budget_id}",
                source_id=progress.budget_id,
                kind=ReminderKind.BUDGET,
                severity=ReminderSeverity.DANGER,
                title="Budget Exceeded!",
                message=(
                    f'You\'ve exceeded your budget "{title}" by '
                    f"{abs(progress.remaining):.2f} {currency}. "
                    "Consider reviewing your spending in this category."
                ),
                progress_or_days_left=progress.progress,
            )

        if progress.progress >= WARNING_PERCENT:
            return Reminder(
                id=f"warning-{progress.budget_id}",
                source_id=progress.budget_id,
                kind=ReminderKind.BUDGET,
                severity=ReminderSeverity.WARNING,
                title="Budget Warning",
                message=(
                    f'You\'ve used {progress.progress:.1f}% of your budget "{title}". '
                    f"Only {progress.remaining:.2f} {currency} remaining."
                ),
                progress_or_days_left=progress.progress,
            )

        if progress.progress >= UPDATE_PERCENT:
            return Reminder(
                id=f"info-{progress.budget_id}",
                source_id=progress.budget_id,
                kind=ReminderKind.BUDGET,
                severity=ReminderSeverity.WARNING,
                title="Budget Update",
                message=(
                    f'You\'ve used {progress.progress:.1f}% of your budget "{title}". '
                    f"{progress.remaining:.2f} {currency} remaining."
                ),
                progress_or_days_left=progress.progress,
            )

        return None

    def classify_all(self, progress_list: Iterable[BudgetProgress]) -> List[Reminder]:
        """Reminders for every budget that needs one, most urgent first."""
        reminders = [r for r in (self.classify(p) for p in progress_list) if r is not None]
        reminders.sort(key=lambda r: -self.priority(r))
        logger.debug("Classified budget reminders", extra={"count": len(reminders)})
        return reminders

    @staticmethod
    def priority(reminder: Reminder) -> int:
        if reminder.severity == ReminderSeverity.DANGER.value:
            return 3
        if reminder.progress_or_days_left >= CRITICAL_PERCENT:
            return 2
        if reminder.progress_or_days_left >= WARNING_PERCENT:
            return 1
        return 0

    @staticmethod
    def should_show(reminder: Reminder) -> bool:
        """Banner-worthy reminders: over budget or at least 80% used."""
        return (
            reminder.severity == ReminderSeverity.DANGER.value
            or reminder.progress_or_days_left >= WARNING_PERCENT
        )
