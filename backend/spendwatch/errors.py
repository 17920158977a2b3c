"""Error taxonomy raised by the engine.

All errors derive from ``ValueError`` so callers that already guard
against bad input with ``except ValueError`` keep working.
"""


class SpendwatchError(ValueError):
    """Base class for engine errors."""


class InvalidRecurrenceError(SpendwatchError):
    """Recurrence value is not one of the supported periods."""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Invalid recurrence: {value!r}. Expected one of daily, weekly, monthly, yearly"
        )


class InvalidBudgetAmountError(SpendwatchError):
    """Budget amount is zero or negative."""

    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Budget amount must be greater than 0, got {amount!r}")


class MalformedDateError(SpendwatchError):
    """A date field could not be parsed or is missing where required."""

    def __init__(self, value, field: str = "date"):
        self.value = value
        self.field = field
        super().__init__(f"Malformed {field}: {value!r}")


class InvalidBillTransitionError(SpendwatchError):
    """Bill status change is not allowed."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot move bill from {getattr(current, 'value', current)} "
            f"to {getattr(target, 'value', target)}"
        )
