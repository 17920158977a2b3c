"""Transaction data models."""
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spendwatch.config import settings
from spendwatch.utils.timestamp import parse_timestamp

_DATE_FIELDS = ("date", "end_date", "due_date")


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class RecurringFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class BillStatus(str, Enum):
    """Stored bill status. Overdue is derived from the due date and never stored."""

    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"


class BillFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    ONE_TIME = "one-time"


class Transaction(BaseModel):
    """Transaction model, optionally carrying bill fields."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str
    user_id: Optional[str] = None
    date: datetime
    title: Optional[str] = None
    amount: float = Field(..., description="Amount in the transaction's own currency")
    currency: str = Field(default_factory=lambda: settings.default_currency, description="Currency code")
    from_rate: float = Field(default=1.0, gt=0, description="Rate captured at creation time")
    to_rate: float = Field(default=1.0, gt=0, description="Rate captured at creation time")
    category: Optional[str] = Field(None, description="Transaction category")
    type: TransactionType = TransactionType.EXPENSE

    # Recurring template fields
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequency] = None
    end_date: Optional[datetime] = None
    template_id: Optional[str] = Field(None, description="Recurring template this instance was generated from")

    # Bill fields
    due_date: Optional[datetime] = None
    bill_status: Optional[BillStatus] = None
    bill_frequency: Optional[BillFrequency] = None
    reminder_days: Optional[int] = Field(None, ge=0, description="Days before the due date to start reminding")

    @field_validator(*_DATE_FIELDS, mode="before")
    @classmethod
    def _parse_dates(cls, value, info):
        if value is None:
            return value
        return parse_timestamp(value, field=info.field_name)

    @field_validator("from_rate", "to_rate", mode="before")
    @classmethod
    def _default_rate(cls, value):
        # A missing rate means no conversion
        return 1.0 if value is None else value

    @property
    def is_bill(self) -> bool:
        return self.due_date is not None

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE.value

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> "Transaction":
        """
        Validate a raw record, raising ``MalformedDateError`` for a missing or bad date.

        ``Transaction(...)`` reports the same problem wrapped in a ``ValidationError``.
        """
        for field in _DATE_FIELDS:
            value = data.get(field)
            if value is not None or field == "date":
                parse_timestamp(value, field=field)
        return cls.model_validate(data)
