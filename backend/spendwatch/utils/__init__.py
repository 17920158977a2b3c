from .timestamp import parse_timestamp, ensure_utc, start_of_day, days_between
from .log_config import configure_logging, ExtraFormatter

__all__ = [
    "parse_timestamp",
    "ensure_utc",
    "start_of_day",
    "days_between",
    "configure_logging",
    "ExtraFormatter",
]
