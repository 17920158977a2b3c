"""Tests for the budget audit log: diffing, filtering and mutation recording."""
import pytest
from datetime import datetime, timezone

from spendwatch.errors import InvalidBudgetAmountError
from spendwatch.models.audit import BudgetChange, BudgetLogEntry, LogFilters
from spendwatch.models.budget import Budget
from spendwatch.services.audit import AuditLogDiffer, AuditLogFilter
from spendwatch.services.mutations import BudgetMutationRecorder


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def budget():
    return Budget(
        id="b1",
        user_id="u1",
        title="Groceries",
        amount=500,
        currency="USD",
        recurrence="monthly",
        start_date=utc(2024, 1, 15),
        category="Groceries",
    )


@pytest.fixture
def differ():
    return AuditLogDiffer()


def test_created_entry_holds_full_snapshot(differ, budget):
    """Creation logs one "budget" change with the new snapshot."""
    entry = differ.diff(None, budget, timestamp=utc(2024, 1, 15, 9), entry_id="log-1")

    assert entry.id == "log-1"
    assert entry.change_type == "created"
    assert entry.reason == "Initial budget creation"
    assert entry.budget_id == "b1"
    assert entry.user_id == "u1"
    assert len(entry.changes) == 1
    assert entry.changes[0].field == "budget"
    assert entry.changes[0].old_value is None
    assert entry.changes[0].new_value["amount"] == 500
    assert entry.changes[0].new_value["category"] == "Groceries"


def test_deleted_entry_holds_old_snapshot(differ, budget):
    """Deletion logs the snapshot as the old value."""
    entry = differ.diff(budget, None, timestamp=utc(2024, 6, 1), reason="No longer needed")

    assert entry.change_type == "deleted"
    assert entry.reason == "No longer needed"
    assert entry.changes[0].old_value["title"] == "Groceries"
    assert entry.changes[0].new_value is None


def test_update_lists_only_changed_fields(differ, budget):
    """Changing the amount yields exactly one amount change."""
    entry = differ.diff(budget, budget.model_copy(update={"amount": 600.0}), timestamp=utc(2024, 2, 1))

    assert entry.change_type == "updated"
    assert entry.reason == "Budget update"
    assert entry.changes == [BudgetChange(field="amount", old_value=500.0, new_value=600.0)]


def test_update_without_changes_is_not_logged(differ, budget):
    """Saving an unchanged budget produces no entry."""
    assert differ.diff(budget, budget, timestamp=utc(2024, 2, 1)) is None


def test_int_and_float_amounts_are_equal(differ, budget):
    """500 and 500.0 are the same amount; only date versus datetime is a type change."""
    assert differ.diff(budget, budget.model_copy(update={"amount": 500}), timestamp=utc(2024, 2, 1)) is None

    as_date = budget.model_copy(update={"start_date": utc(2024, 1, 15).date()})
    entry = differ.diff(budget, as_date, timestamp=utc(2024, 2, 1))
    assert [c.field for c in entry.changes] == ["start_date"]


def test_update_with_several_changes_keeps_field_order(differ, budget):
    """Changes follow the audited field order."""
    updated = budget.model_copy(
        update={"category": "Food & Dining", "title": "Food", "start_date": utc(2024, 2, 1)}
    )
    entry = differ.diff(budget, updated, timestamp=utc(2024, 2, 1))

    assert [c.field for c in entry.changes] == ["title", "start_date", "category"]
    assert entry.changes[1].old_value == utc(2024, 1, 15)
    assert entry.changes[2].new_value == "Food & Dining"


def test_diff_rejects_bad_input(differ, budget):
    """Two missing snapshots or two different budgets cannot be diffed."""
    with pytest.raises(ValueError):
        differ.diff(None, None, timestamp=utc(2024, 2, 1))
    with pytest.raises(ValueError):
        differ.diff(budget, budget.model_copy(update={"id": "b2"}), timestamp=utc(2024, 2, 1))


def entry(entry_id, budget_id, change_type, changes, reason, timestamp):
    return BudgetLogEntry(
        id=entry_id,
        budget_id=budget_id,
        change_type=change_type,
        changes=changes,
        reason=reason,
        timestamp=timestamp,
    )


@pytest.fixture
def logs():
    """Four entries across two budgets and all change types."""
    return [
        entry(
            "L1",
            "b1",
            "created",
            [BudgetChange(field="budget", new_value={"title": "Groceries", "amount": 500.0, "category": "Groceries"})],
            "Initial budget creation",
            utc(2024, 1, 15, 9),
        ),
        entry(
            "L2",
            "b1",
            "updated",
            [BudgetChange(field="amount", old_value=500.0, new_value=600.0)],
            "Prices went up",
            utc(2024, 2, 1, 10),
        ),
        entry(
            "L3",
            "b2",
            "created",
            [BudgetChange(field="budget", new_value={"title": "Trip", "amount": 2000.0, "category": "Vacation"})],
            "Saving for the holiday",
            utc(2024, 3, 5, 12),
        ),
        entry(
            "L4",
            "b2",
            "updated",
            [BudgetChange(field="category", old_value="Vacation", new_value="Entertainment")],
            "Budget update",
            utc(2024, 4, 10, 8),
        ),
    ]


@pytest.fixture
def log_filter():
    return AuditLogFilter()


def ids(entries):
    return [e.id for e in entries]


def test_no_filters_returns_everything(log_filter, logs):
    """Unset and empty predicates keep every entry in input order."""
    assert ids(log_filter.apply(logs)) == ["L1", "L2", "L3", "L4"]
    assert ids(log_filter.apply(logs, LogFilters())) == ["L1", "L2", "L3", "L4"]
    assert ids(log_filter.apply(logs, LogFilters(change_types=[], categories=[], search_query=""))) == [
        "L1",
        "L2",
        "L3",
        "L4",
    ]


def test_filter_by_change_type(log_filter, logs):
    """Any listed change type matches."""
    assert ids(log_filter.apply(logs, LogFilters(change_types=["updated"]))) == ["L2", "L4"]
    assert ids(log_filter.apply(logs, LogFilters(change_types=["created", "deleted"]))) == ["L1", "L3"]


def test_filter_by_category(log_filter, logs):
    """Categories match snapshots and either side of a category change."""
    assert ids(log_filter.apply(logs, LogFilters(categories=["Groceries"]))) == ["L1"]
    assert ids(log_filter.apply(logs, LogFilters(categories=["Vacation"]))) == ["L3", "L4"]
    assert ids(log_filter.apply(logs, LogFilters(categories=["Entertainment"]))) == ["L4"]


@pytest.mark.parametrize(
    "query, expected",
    [
        ("holiday", ["L3"]),
        ("600", ["L2"]),
        ("GROCER", ["L1"]),
        ("amount", ["L1", "L2", "L3"]),
        ("nothing like this", []),
    ],
)
def test_filter_by_search(log_filter, logs, query, expected):
    """Case-insensitive search over reason, field names and values."""
    assert ids(log_filter.apply(logs, LogFilters(search_query=query))) == expected


def test_filter_by_date_range(log_filter, logs):
    """Inclusive bounds, each side optional."""
    both = LogFilters.model_validate({"date_range": {"from": "2024-02-01T10:00:00Z", "to": "2024-03-05T12:00:00Z"}})
    open_start = LogFilters.model_validate({"date_range": {"to": "2024-01-31"}})
    open_end = LogFilters.model_validate({"date_range": {"from": "2024-04-01"}})

    assert ids(log_filter.apply(logs, both)) == ["L2", "L3"]
    assert ids(log_filter.apply(logs, open_start)) == ["L1"]
    assert ids(log_filter.apply(logs, open_end)) == ["L4"]


def test_combined_filters_are_anded(log_filter, logs):
    """Every set predicate has to match."""
    filters = LogFilters(change_types=["created"], categories=["Vacation", "Groceries"], search_query="holiday")

    assert ids(log_filter.apply(logs, filters)) == ["L3"]


def test_filter_by_budget_and_limit(log_filter, logs):
    """Budget id narrows the collection, the limit applies last."""
    assert ids(log_filter.apply(logs, LogFilters(budget_id="b2"))) == ["L3", "L4"]
    assert ids(log_filter.apply(logs, LogFilters(change_types=["updated"], limit=1))) == ["L2"]
    assert ids(log_filter.apply(logs, LogFilters(limit=0))) == []


def test_filters_accept_plain_mappings(log_filter, logs):
    """Callers may pass filters as a dict."""
    assert ids(log_filter.apply(logs, {"change_types": ["updated"], "budget_id": "b1"})) == ["L2"]


def test_filter_does_not_mutate_input(log_filter, logs):
    """The original collection is left as it was."""
    before = list(logs)
    log_filter.apply(logs, LogFilters(change_types=["created"]))

    assert logs == before


@pytest.fixture
def recorder():
    return BudgetMutationRecorder()


def test_recorder_notifies_listeners(recorder, budget):
    """Each mutation is published to every listener."""
    received = []
    recorder.subscribe(received.append)

    created = recorder.created(budget, timestamp=utc(2024, 1, 15))
    updated = recorder.updated(budget, budget.model_copy(update={"amount": 550.0}), timestamp=utc(2024, 2, 1))
    deleted = recorder.deleted(budget, timestamp=utc(2024, 3, 1), reason="Closed")

    assert received == [created, updated, deleted]
    assert [e.change_type for e in received] == ["created", "updated", "deleted"]


def test_recorder_skips_no_op_update(recorder, budget):
    """An update that changes nothing notifies nobody."""
    received = []
    recorder.subscribe(received.append)

    assert recorder.updated(budget, budget, timestamp=utc(2024, 2, 1)) is None
    assert received == []


def test_unsubscribe_stops_notifications(recorder, budget):
    """Listeners can detach again."""
    received = []
    unsubscribe = recorder.subscribe(received.append)
    unsubscribe()

    recorder.created(budget, timestamp=utc(2024, 1, 15))

    assert received == []


def test_recorder_accepts_raw_budget_data(recorder):
    """Mappings are validated before logging."""
    data = {
        "id": "b9",
        "title": "Fuel",
        "amount": 120,
        "recurrence": "weekly",
        "start_date": "2024-01-01",
        "category": "Car",
    }
    logged = recorder.created(data, timestamp=utc(2024, 1, 1))

    assert logged.budget_id == "b9"
    assert logged.changes[0].new_value["recurrence"] == "weekly"


def test_recorder_rejects_non_positive_amount(recorder):
    """A zero amount is refused before anything is logged."""
    received = []
    recorder.subscribe(received.append)
    data = {"id": "b9", "title": "Fuel", "amount": 0, "recurrence": "weekly", "start_date": "2024-01-01"}

    with pytest.raises(InvalidBudgetAmountError):
        recorder.created(data, timestamp=utc(2024, 1, 1))
    assert received == []
