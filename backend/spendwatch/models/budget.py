"""Budget models and derived progress/overview models."""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spendwatch.errors import InvalidBudgetAmountError, InvalidRecurrenceError
from spendwatch.utils.timestamp import ensure_utc, parse_timestamp

# Fields recorded in audit snapshots and compared on update, in log order
AUDITED_FIELDS = ("title", "amount", "currency", "recurrence", "start_date", "category")


class Recurrence(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def coerce(cls, value: Any) -> "Recurrence":
        """Return the member for ``value`` or raise ``InvalidRecurrenceError``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidRecurrenceError(value) from None


class BudgetCategory(str, Enum):
    """Expense categories a budget can track, plus the match-everything sentinel."""

    FOOD_DINING = "Food & Dining"
    GROCERIES = "Groceries"
    TRANSPORT = "Transport"
    SHOPPING = "Shopping"
    WORK = "Work"
    HOUSEHOLD = "Household"
    CAR = "Car"
    ENTERTAINMENT = "Entertainment"
    UTILITIES = "Utilities"
    HEALTHCARE = "Healthcare"
    VACATION = "Vacation"
    EDUCATION = "Education"
    HOUSING = "Housing"
    PERSONAL_CARE = "Personal Care"
    GIFTS = "Gifts"
    OTHER = "Other"
    BILLS = "Bills"
    ALL_CATEGORIES = "All Categories"


def matches_category(budget_category: str, category: Optional[str]) -> bool:
    """True if a transaction in ``category`` counts towards a budget on ``budget_category``."""
    if budget_category == BudgetCategory.ALL_CATEGORIES.value:
        return True
    return category == budget_category


def validate_budget_amount(amount: Any) -> float:
    """Reject missing, non-numeric and non-positive budget amounts."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise InvalidBudgetAmountError(amount)
    if not amount > 0:
        raise InvalidBudgetAmountError(amount)
    return amount


class Budget(BaseModel):
    """Budget model."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str
    user_id: Optional[str] = None
    title: str
    amount: float = Field(..., description="Limit per period, always > 0")
    currency: str = Field(default="INR", description="Currency code")
    recurrence: Recurrence
    start_date: datetime = Field(..., description="Recurrence anchor")
    category: BudgetCategory = BudgetCategory.ALL_CATEGORIES
    created_at: Optional[datetime] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _check_amount(cls, value):
        return validate_budget_amount(value)

    @field_validator("start_date", "created_at", mode="before")
    @classmethod
    def _parse_dates(cls, value, info):
        if value is None:
            return value
        return parse_timestamp(value, field=info.field_name)

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data copy of the audited fields."""
        return {field: getattr(self, field) for field in AUDITED_FIELDS}

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> "Budget":
        """
        Validate raw budget data, raising the engine's own error for a bad amount.

        Raises:
            InvalidBudgetAmountError: If the amount is missing, non-numeric or <= 0
            MalformedDateError: If the start date is missing or unparseable
            ValidationError: For any other invalid field
        """
        validate_budget_amount(data.get("amount"))
        parse_timestamp(data.get("start_date"), field="start_date")
        return cls.model_validate(data)


class Period(BaseModel):
    """Half-open interval ``[start, end)``."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        moment = ensure_utc(moment)
        return self.start <= moment < self.end


class BudgetProgress(BaseModel):
    """Spend against one budget for the period containing ``now``."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    budget_id: str
    title: str
    amount: float
    currency: str
    recurrence: Recurrence
    category: str
    period_start: datetime
    period_end: datetime
    total_spent: float = 0.0
    remaining: float
    progress: float = Field(0.0, description="Percent of amount spent, unbounded above 100")
    is_over_budget: bool = False
    expenses_count: int = 0


class HealthBreakdown(BaseModel):
    base_score: int = 0
    over_budget_penalty: int = 0
    high_usage_penalty: int = 0
    medium_usage_penalty: int = 0
    low_usage_bonus: int = 0
    perfect_record_bonus: int = 0
    over_budget_count: int = 0
    high_usage_count: int = 0
    medium_usage_count: int = 0
    low_usage_count: int = 0


class BudgetHealth(BaseModel):
    score: int
    label: str
    color: str
    breakdown: HealthBreakdown = Field(default_factory=HealthBreakdown)


class BudgetOverview(BaseModel):
    """Totals across all of a user's budgets."""

    budgets: List[BudgetProgress] = Field(default_factory=list)
    total_budget_amount: float = 0.0
    total_spent: float = 0.0
    total_progress: float = 0.0
    active_budgets_this_month: int = 0
    savings_achieved: float = 0.0
    days_until_reset: Optional[int] = None
    on_track_budgets: int = 0
    budget_health: BudgetHealth
