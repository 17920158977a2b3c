from .transaction import (
    Transaction,
    TransactionType,
    RecurringFrequency,
    BillStatus,
    BillFrequency,
)
from .budget import (
    AUDITED_FIELDS,
    Budget,
    BudgetCategory,
    BudgetHealth,
    BudgetOverview,
    BudgetProgress,
    HealthBreakdown,
    Period,
    Recurrence,
    matches_category,
    validate_budget_amount,
)
from .audit import (
    BudgetChange,
    BudgetChangeType,
    BudgetLogEntry,
    DateRange,
    LogFilters,
)
from .reminder import (
    BillAlertSummary,
    BillBuckets,
    BillState,
    BillUrgency,
    Reminder,
    ReminderKind,
    ReminderSeverity,
)

__all__ = [
    "Transaction",
    "TransactionType",
    "RecurringFrequency",
    "BillStatus",
    "BillFrequency",
    "AUDITED_FIELDS",
    "Budget",
    "BudgetCategory",
    "BudgetHealth",
    "BudgetOverview",
    "BudgetProgress",
    "HealthBreakdown",
    "Period",
    "Recurrence",
    "matches_category",
    "validate_budget_amount",
    "BudgetChange",
    "BudgetChangeType",
    "BudgetLogEntry",
    "DateRange",
    "LogFilters",
    "BillAlertSummary",
    "BillBuckets",
    "BillState",
    "BillUrgency",
    "Reminder",
    "ReminderKind",
    "ReminderSeverity",
]
