"""Budget audit-log differ and filter."""
import logging
import uuid
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Union

from spendwatch.models.audit import BudgetChange, BudgetChangeType, BudgetLogEntry, LogFilters
from spendwatch.models.budget import AUDITED_FIELDS, Budget
from spendwatch.utils.timestamp import ensure_utc

logger = logging.getLogger(__name__)

DEFAULT_REASONS = {
    BudgetChangeType.CREATED: "Initial budget creation",
    BudgetChangeType.UPDATED: "Budget update",
    BudgetChangeType.DELETED: "Budget deletion",
}

SNAPSHOT_FIELD = "budget"
CATEGORY_FIELD = "category"


def _differs(old: Any, new: Any) -> bool:
    # A date and a datetime for the same day are different values; 500 and 500.0 are not
    if isinstance(old, datetime) != isinstance(new, datetime):
        return True
    return old != new


class AuditLogDiffer:
    """Turns a budget mutation into a single append-only log entry."""

    def diff(
        self,
        old: Optional[Budget],
        new: Optional[Budget],
        *,
        timestamp: datetime,
        reason: Optional[str] = None,
        entry_id: Optional[str] = None,
    ) -> Optional[BudgetLogEntry]:
        """
        Build the log entry for a create (``old`` is None), delete (``new`` is
        None) or update.

        Args:
            old: Budget before the mutation
            new: Budget after the mutation
            timestamp: When the mutation happened, supplied by the caller
            reason: User-supplied reason; a default per change type otherwise
            entry_id: Log entry id; a random UUID otherwise

        Returns:
            The entry, or None for an update that changed nothing
        """
        if old is None and new is None:
            raise ValueError("Nothing to diff: both budget snapshots are missing")

        if old is None:
            change_type = BudgetChangeType.CREATED
            source = new
            changes = [BudgetChange(field=SNAPSHOT_FIELD, old_value=None, new_value=new.snapshot())]
        elif new is None:
            change_type = BudgetChangeType.DELETED
            source = old
            changes = [BudgetChange(field=SNAPSHOT_FIELD, old_value=old.snapshot(), new_value=None)]
        else:
            if old.id != new.id:
                raise ValueError(f"Cannot diff different budgets: {old.id} vs {new.id}")
            change_type = BudgetChangeType.UPDATED
            source = new
            changes = self.detect_changes(old, new)
            if not changes:
                logger.debug("Budget update without changes, no log entry", extra={"budget_id": new.id})
                return None

        return BudgetLogEntry(
            id=entry_id or str(uuid.uuid4()),
            budget_id=source.id,
            user_id=source.user_id,
            change_type=change_type,
            changes=changes,
            reason=reason or DEFAULT_REASONS[change_type],
            timestamp=timestamp,
        )

    @staticmethod
    def detect_changes(old: Budget, new: Budget) -> List[BudgetChange]:
        """One change per audited field whose value differs, in field order."""
        changes = []
        for field in AUDITED_FIELDS:
            old_value = getattr(old, field)
            new_value = getattr(new, field)
            if _differs(old_value, new_value):
                changes.append(BudgetChange(field=field, old_value=old_value, new_value=new_value))
        return changes


def _stringify(value: Any) -> str:
    """Text form of a change value used for free-text search."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return ", ".join(f"{key}: {_stringify(item)}" for key, item in value.items())
    return str(value)


class AuditLogFilter:
    """Applies change-type, category, text, date-range and budget predicates."""

    def apply(
        self,
        logs: Iterable[BudgetLogEntry],
        filters: Union[LogFilters, Mapping[str, Any], None] = None,
    ) -> List[BudgetLogEntry]:
        """
        Filter a log collection. Predicates are ANDed; list predicates match
        if any listed value matches. Unset or empty predicates do not filter.
        Input order is preserved and ``limit`` is applied last.
        """
        entries = list(logs)
        if filters is None:
            return entries
        if not isinstance(filters, LogFilters):
            filters = LogFilters.model_validate(filters)

        if filters.budget_id:
            entries = [e for e in entries if e.budget_id == filters.budget_id]

        if filters.change_types:
            allowed = set(filters.change_types)
            entries = [e for e in entries if e.change_type in allowed]

        if filters.categories:
            categories = set(filters.categories)
            entries = [e for e in entries if self._matches_categories(e, categories)]

        if filters.search_query:
            needle = filters.search_query.lower()
            entries = [e for e in entries if self._matches_search(e, needle)]

        if filters.date_range:
            lower = filters.date_range.from_
            upper = filters.date_range.to
            entries = [
                e
                for e in entries
                if (lower is None or ensure_utc(e.timestamp) >= lower)
                and (upper is None or ensure_utc(e.timestamp) <= upper)
            ]

        if filters.limit is not None:
            entries = entries[:filters.limit]
        return entries

    @staticmethod
    def _matches_categories(entry: BudgetLogEntry, categories: set) -> bool:
        for change in entry.changes:
            if change.field == CATEGORY_FIELD:
                if change.old_value in categories or change.new_value in categories:
                    return True
            elif change.field == SNAPSHOT_FIELD:
                for snapshot in (change.old_value, change.new_value):
                    if isinstance(snapshot, Mapping) and snapshot.get(CATEGORY_FIELD) in categories:
                        return True
        return False

    @staticmethod
    def _matches_search(entry: BudgetLogEntry, needle: str) -> bool:
        if needle in entry.reason.lower():
            return True
        return any(
            needle in change.field.lower()
            or needle in _stringify(change.old_value).lower()
            or needle in _stringify(change.new_value).lower()
            for change in entry.changes
        )
