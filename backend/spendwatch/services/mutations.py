"""Synchronous audit recording for budget mutations.

The mutation layer calls the recorder inside the same request that changes
the budget. Interested parties (progress views, reminder lists, log views)
subscribe explicitly and are called with each new log entry.
"""
import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Union

from spendwatch.models.audit import BudgetLogEntry
from spendwatch.models.budget import Budget
from spendwatch.services.audit import AuditLogDiffer

logger = logging.getLogger(__name__)

LogListener = Callable[[BudgetLogEntry], None]
BudgetLike = Union[Budget, Mapping[str, Any]]


def coerce_budget(data: BudgetLike) -> Budget:
    """Validate incoming budget data; see ``Budget.create`` for the errors raised."""
    if isinstance(data, Budget):
        return data
    return Budget.create(data)


class BudgetMutationRecorder:
    """Emits exactly one log entry per budget mutation and notifies listeners."""

    def __init__(self, differ: Optional[AuditLogDiffer] = None):
        self.differ = differ or AuditLogDiffer()
        self._listeners: List[LogListener] = []

    def subscribe(self, listener: LogListener) -> Callable[[], None]:
        """Register ``listener``; returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def created(
        self,
        budget: BudgetLike,
        *,
        timestamp: datetime,
        reason: Optional[str] = None,
    ) -> BudgetLogEntry:
        new = coerce_budget(budget)
        return self._publish(self.differ.diff(None, new, timestamp=timestamp, reason=reason))

    def updated(
        self,
        old: BudgetLike,
        new: BudgetLike,
        *,
        timestamp: datetime,
        reason: Optional[str] = None,
    ) -> Optional[BudgetLogEntry]:
        """Log an update; returns None (and notifies nobody) when nothing changed."""
        entry = self.differ.diff(
            coerce_budget(old),
            coerce_budget(new),
            timestamp=timestamp,
            reason=reason,
        )
        if entry is None:
            return None
        return self._publish(entry)

    def deleted(
        self,
        budget: BudgetLike,
        *,
        timestamp: datetime,
        reason: Optional[str] = None,
    ) -> BudgetLogEntry:
        old = coerce_budget(budget)
        return self._publish(self.differ.diff(old, None, timestamp=timestamp, reason=reason))

    def _publish(self, entry: BudgetLogEntry) -> BudgetLogEntry:
        logger.info(
            "Budget %s",
            entry.change_type,
            extra={"budget_id": entry.budget_id, "changes": [c.field for c in entry.changes]},
        )
        for listener in list(self._listeners):
            listener(entry)
        return entry
