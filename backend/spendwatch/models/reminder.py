"""Reminder and bill-state models."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReminderSeverity(str, Enum):
    DANGER = "danger"
    WARNING = "warning"


class ReminderKind(str, Enum):
    BUDGET = "budget"
    BILL = "bill"


class Reminder(BaseModel):
    """Derived notification for a budget or a bill."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str
    source_id: str
    kind: ReminderKind = ReminderKind.BUDGET
    severity: ReminderSeverity
    title: str
    message: str
    progress_or_days_left: float = Field(..., description="Budget progress percent, or days left for bills")


class BillUrgency(str, Enum):
    OVERDUE = "overdue"
    URGENT = "urgent"
    UPCOMING = "upcoming"
    SCHEDULED = "scheduled"
    PAID = "paid"


class BillState(BaseModel):
    """Due/overdue view of one bill at a given day."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    bill_id: str
    title: Optional[str] = None
    amount: float
    currency: str
    due_date: datetime
    days_left: int
    is_paid: bool = False
    is_overdue: bool = False
    is_upcoming: bool = False
    is_reminder_due: bool = False
    urgency: BillUrgency


class BillBuckets(BaseModel):
    upcoming: List[BillState] = Field(default_factory=list)
    overdue: List[BillState] = Field(default_factory=list)
    reminders: List[BillState] = Field(default_factory=list)


class BillAlertSummary(BaseModel):
    """Headline for the bill alert banner."""

    alert_type: Optional[BillUrgency] = None
    overdue_count: int = 0
    reminder_count: int = 0
    upcoming_count: int = 0
    title: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)
