"""Helpers shared by the entity services."""

import logging
import sqlite3
from datetime import date
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from insurance_backoffice.errors import InvalidArgumentError, NotFoundError
from insurance_backoffice.models.entities import Created, Policy, PolicyDetails
from insurance_backoffice.rules.status import effective_policy_status, is_policy_in_force
from insurance_backoffice.utils.sanitization import sanitize_fields

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")


def validate_payload(model_cls: type[M], data: M | dict[str, Any], entity: str) -> M:
    """Sanitize and validate a request payload; pydantic errors become InvalidArgumentError."""
    if isinstance(data, model_cls):
        data = data.model_dump(exclude_unset=True)
    try:
        return model_cls.model_validate(sanitize_fields(dict(data or {})))
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise InvalidArgumentError(
            f"Invalid {entity} data", details={"errors": errors}
        ) from None


def changed_fields(update: BaseModel) -> dict[str, Any]:
    """Fields the caller actually supplied (explicit None values are dropped)."""
    return {k: v for k, v in update.model_dump(exclude_unset=True).items() if v is not None}


def to_policy_details(row: dict[str, Any], today: date) -> PolicyDetails:
    """Build the consumer view of a policy row, applying lazy expiry."""
    policy = Policy.model_validate(row)
    data = dict(row)
    data["stored_status"] = policy.status
    data["status"] = effective_policy_status(policy.status, policy.end_date, today)
    return PolicyDetails.model_validate(data)


def count_in_force(rows: list[dict[str, Any]], today: date) -> int:
    """Number of policy rows whose effective status is active."""
    count = 0
    for row in rows:
        policy = Policy.model_validate(row)
        if is_policy_in_force(policy.status, policy.end_date, today):
            count += 1
    return count


def fetch_created(
    entity: str,
    entity_id: int,
    fetch: Callable[[], T | None],
    logger: logging.LoggerAdapter,
) -> Created[T]:
    """Read back a committed record; a failed read degrades the result instead of raising."""
    try:
        record = fetch()
    except (sqlite3.Error, NotFoundError) as e:
        logger.warning("%s %s created but failed to fetch: %s", entity, entity_id, e)
        record = None
    if record is None:
        return Created(
            id=entity_id,
            complete=False,
            message=f"{entity.capitalize()} created but failed to fetch",
        )
    return Created(id=entity_id, record=record)
