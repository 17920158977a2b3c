"""Validation of raw records handed over by the data layer."""
import logging
from typing import Any, Iterable, Iterator, Type, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def iter_valid(records: Iterable[Any], model: Type[ModelT]) -> Iterator[ModelT]:
    """
    Yield records as ``model`` instances, skipping the ones that fail validation.

    A single malformed record must not hide the rest of the collection, so
    invalid records are logged and dropped instead of raising.
    """
    for record in records:
        if isinstance(record, model):
            yield record
            continue
        try:
            yield model.model_validate(record)
        except ValidationError as exc:
            record_id = record.get("id") if isinstance(record, dict) else None
            logger.warning(
                "Skipping invalid %s record",
                model.__name__,
                extra={
                    "record_id": record_id,
                    "error_fields": [".".join(str(p) for p in err["loc"]) for err in exc.errors()],
                },
            )
