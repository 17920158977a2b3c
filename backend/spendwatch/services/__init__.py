from .periods import PeriodResolver
from .currency import CurrencyNormalizer, ZERO_DECIMAL_CURRENCIES, round_amount
from .progress import BudgetProgressAggregator, BudgetHealthScorer, BudgetOverviewBuilder
from .reminders import ReminderClassifier
from .bills import BillStateResolver, BillStatusMachine
from .audit import AuditLogDiffer, AuditLogFilter
from .mutations import BudgetMutationRecorder
from .recurring import RecurringOccurrencePlanner

__all__ = [
    "PeriodResolver",
    "CurrencyNormalizer",
    "ZERO_DECIMAL_CURRENCIES",
    "round_amount",
    "BudgetProgressAggregator",
    "BudgetHealthScorer",
    "BudgetOverviewBuilder",
    "ReminderClassifier",
    "BillStateResolver",
    "BillStatusMachine",
    "AuditLogDiffer",
    "AuditLogFilter",
    "BudgetMutationRecorder",
    "RecurringOccurrencePlanner",
]
