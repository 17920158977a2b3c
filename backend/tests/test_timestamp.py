"""Tests for timestamp parsing, settings and log formatting."""
import json
import logging
import pytest
from datetime import date, datetime, timedelta, timezone

from pydantic import ValidationError

from spendwatch.config import Settings
from spendwatch.errors import MalformedDateError
from spendwatch.models.transaction import Transaction
from spendwatch.utils.log_config import ExtraFormatter, configure_logging
from spendwatch.utils.timestamp import days_between, ensure_utc, parse_timestamp, start_of_day


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-01-02T09:10:00Z", utc(2024, 1, 2, 9, 10)),
        ("2024-01-02T09:10:00+00:00", utc(2024, 1, 2, 9, 10)),
        ("2024-01-02T11:10:00+02:00", utc(2024, 1, 2, 9, 10)),
        ("2024-01-02", utc(2024, 1, 2)),
        ("2024-01-02 09:10:00", utc(2024, 1, 2, 9, 10)),
        ("02/01/2024", utc(2024, 1, 2)),
        ("15/03/2024 18:30", utc(2024, 3, 15, 18, 30)),
        ("2 Jan 2024", utc(2024, 1, 2)),
        ("2024-01-02T09:10:00-05:00", utc(2024, 1, 2, 14, 10)),
        (date(2024, 1, 2), utc(2024, 1, 2)),
        (datetime(2024, 1, 2, 9, 10), utc(2024, 1, 2, 9, 10)),
    ],
)
def test_parse_timestamp_formats(value, expected):
    """Supported inputs all come back as aware UTC datetimes."""
    assert parse_timestamp(value) == expected
    assert parse_timestamp(value).tzinfo is not None


@pytest.mark.parametrize("value", ["", "   ", "yesterday", "2024-13-45", None, 1704186600])
def test_parse_timestamp_rejects_garbage(value):
    """Unparseable dates raise instead of falling back to now."""
    with pytest.raises(MalformedDateError):
        parse_timestamp(value, field="due_date")


def test_malformed_date_error_names_field():
    """The error says which field was bad."""
    with pytest.raises(MalformedDateError) as exc_info:
        parse_timestamp("soon", field="due_date")

    assert exc_info.value.field == "due_date"
    assert "due_date" in str(exc_info.value)


def test_ensure_utc_converts_offsets():
    """Aware datetimes are moved to UTC."""
    plus_five = timezone(timedelta(hours=5))

    assert ensure_utc(datetime(2024, 1, 2, 5, 0, tzinfo=plus_five)) == utc(2024, 1, 2)
    assert ensure_utc(datetime(2024, 1, 2, 5, 0, tzinfo=plus_five)).tzinfo == timezone.utc


def test_calendar_day_helpers():
    """Day differences ignore the time of day."""
    assert days_between(utc(2024, 3, 1, 0, 1), utc(2024, 2, 28, 23, 59)) == 2
    assert days_between(utc(2024, 2, 28), utc(2024, 3, 1)) == -2
    assert start_of_day(utc(2024, 3, 1, 17, 45)) == utc(2024, 3, 1)


def test_transaction_with_bad_date_fails_validation():
    """A malformed date surfaces as a validation error on the record."""
    with pytest.raises(ValidationError):
        Transaction(id="t1", date="not a date", amount=10)


def test_transaction_create_raises_malformed_date():
    """Raw records surface date problems as ``MalformedDateError`` naming the field."""
    with pytest.raises(MalformedDateError) as exc_info:
        Transaction.create({"id": "t1", "date": "2024-04-01", "amount": 10, "due_date": "someday"})
    assert exc_info.value.field == "due_date"

    with pytest.raises(MalformedDateError):
        Transaction.create({"id": "t1", "amount": 10})

    tx = Transaction.create({"id": "t1", "date": "01/04/2024", "amount": 10})
    assert tx.date == utc(2024, 4, 1)


def test_days_between_reads_days_in_reference_timezone():
    """The target is moved into the reference's timezone before comparing days."""
    eastern = timezone(timedelta(hours=-5))
    now = datetime(2024, 4, 29, 20, 0, tzinfo=eastern)

    assert days_between(utc(2024, 5, 1, 5), now) == 2
    assert days_between(datetime(2024, 5, 1, 5), datetime(2024, 4, 29, 23)) == 2
    assert days_between(date(2024, 5, 1), date(2024, 4, 29)) == 2


def test_transaction_defaults():
    """Missing rates mean no conversion; type defaults to expense."""
    tx = Transaction(id="t1", date="2024-01-02", amount=10, from_rate=None, to_rate=None)

    assert tx.from_rate == 1.0
    assert tx.to_rate == 1.0
    assert tx.is_expense
    assert not tx.is_bill
    assert tx.currency == "INR"


def test_settings_read_environment(monkeypatch):
    """Settings are overridable through SPENDWATCH_ variables."""
    monkeypatch.setenv("SPENDWATCH_DEFAULT_CURRENCY", "EUR")
    monkeypatch.setenv("SPENDWATCH_MAX_RECURRING_CATCH_UP", "30")
    monkeypatch.setenv("SPENDWATCH_DEBUG", "true")

    settings = Settings(_env_file=None)

    assert settings.default_currency == "EUR"
    assert settings.max_recurring_catch_up == 30
    assert settings.debug is True


def test_extra_formatter_appends_json():
    """Fields passed through ``extra`` are appended as sorted JSON."""
    formatter = ExtraFormatter("%(levelname)s | %(message)s")
    record = logging.makeLogRecord(
        {"levelname": "INFO", "msg": "Budget %s", "args": ("created",), "budget_id": "b1", "changes": ["budget"]}
    )

    text = formatter.format(record)
    message, extra = text.split(" | ", 2)[1:]

    assert message == "Budget created"
    assert json.loads(extra) == {"budget_id": "b1", "changes": ["budget"]}


def test_extra_formatter_without_extra():
    """Plain records are formatted unchanged."""
    formatter = ExtraFormatter("%(message)s")
    record = logging.makeLogRecord({"msg": "hello"})

    assert formatter.format(record) == "hello"


def test_configure_logging_installs_extra_formatter(monkeypatch):
    """Root handlers get the formatter that appends extra fields."""
    monkeypatch.setattr(logging.root, "handlers", [])
    monkeypatch.setattr(logging.root, "level", logging.root.level)

    configure_logging("debug")

    assert logging.root.level == logging.DEBUG
    assert all(isinstance(h.formatter, ExtraFormatter) for h in logging.root.handlers)
    assert logging.root.handlers
