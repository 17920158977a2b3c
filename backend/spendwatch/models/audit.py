"""Budget audit-log models."""
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spendwatch.utils.timestamp import parse_timestamp


class BudgetChangeType(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class BudgetChange(BaseModel):
    """One field-level change. ``field == "budget"`` holds a full snapshot."""

    model_config = ConfigDict(frozen=True)

    field: str
    old_value: Any = None
    new_value: Any = None


class BudgetLogEntry(BaseModel):
    """Append-only record of a single budget mutation."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str
    budget_id: str
    user_id: Optional[str] = None
    change_type: BudgetChangeType
    changes: List[BudgetChange] = Field(default_factory=list)
    reason: str
    timestamp: datetime

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_timestamp(cls, value):
        return parse_timestamp(value, field="timestamp")


class DateRange(BaseModel):
    """Inclusive range; a missing side is unbounded."""

    from_: Optional[datetime] = Field(None, alias="from")
    to: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("from_", "to", mode="before")
    @classmethod
    def _parse_bounds(cls, value, info):
        if value is None:
            return value
        return parse_timestamp(value, field=info.field_name)


class LogFilters(BaseModel):
    """Predicates for narrowing a budget log collection. Unset means no filtering."""

    change_types: Optional[List[BudgetChangeType]] = None
    categories: Optional[List[str]] = None
    search_query: Optional[str] = None
    date_range: Optional[DateRange] = None
    budget_id: Optional[str] = None
    limit: Optional[int] = Field(None, ge=0)

    model_config = ConfigDict(use_enum_values=True)
