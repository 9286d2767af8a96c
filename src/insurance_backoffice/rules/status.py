"""Status parsing, transition legality, and lazy policy expiry.

Transition tables are keyed by every member of the status enum; a missing
member fails at import time rather than at the first unlucky call.
"""

from datetime import date
from enum import Enum
from typing import Any, TypeVar

from insurance_backoffice.errors import InvalidArgumentError, InvalidStateError
from insurance_backoffice.models.enums import ClaimStatus, ClientStatus, PolicyStatus

S = TypeVar("S", bound=Enum)

CLIENT_TRANSITIONS: dict[ClientStatus, frozenset[ClientStatus]] = {
    ClientStatus.ACTIVE: frozenset(ClientStatus),
    ClientStatus.INACTIVE: frozenset(ClientStatus),
}

# Administrative action may move a policy between any two statuses
POLICY_TRANSITIONS: dict[PolicyStatus, frozenset[PolicyStatus]] = {
    status: frozenset(PolicyStatus) for status in PolicyStatus
}

# Decisions are final except for re-opening to pending
CLAIM_TRANSITIONS: dict[ClaimStatus, frozenset[ClaimStatus]] = {
    ClaimStatus.PENDING: frozenset(
        {ClaimStatus.PENDING, ClaimStatus.APPROVED, ClaimStatus.REJECTED}
    ),
    ClaimStatus.APPROVED: frozenset({ClaimStatus.APPROVED, ClaimStatus.PENDING}),
    ClaimStatus.REJECTED: frozenset({ClaimStatus.REJECTED, ClaimStatus.PENDING}),
}

_TRANSITIONS: dict[type, dict] = {
    ClientStatus: CLIENT_TRANSITIONS,
    PolicyStatus: POLICY_TRANSITIONS,
    ClaimStatus: CLAIM_TRANSITIONS,
}


def _assert_exhaustive() -> None:
    for enum_cls, table in _TRANSITIONS.items():
        missing = set(enum_cls) - set(table)
        if missing:
            names = ", ".join(sorted(m.value for m in missing))
            raise RuntimeError(f"{enum_cls.__name__} transitions missing: {names}")


_assert_exhaustive()


def parse_status(enum_cls: type[S], value: Any, entity: str, field: str = "status") -> S:
    """Coerce value to a member of enum_cls or raise InvalidArgumentError."""
    if isinstance(value, enum_cls):
        return value
    allowed = [m.value for m in enum_cls]
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise InvalidArgumentError(
            f"Invalid {entity} {field}. Must be one of: {', '.join(allowed)}",
            details={"entity": entity, field: value, "allowed": allowed},
        ) from None


def check_transition(current: S, target: S, entity: str) -> None:
    """Raise InvalidStateError when target is not reachable from current."""
    allowed = _TRANSITIONS[type(current)][current]
    if target not in allowed:
        raise InvalidStateError(
            f"Cannot move {entity} from {current.value} to {target.value}",
            details={
                "entity": entity,
                "current_status": current.value,
                "new_status": target.value,
            },
        )


def effective_policy_status(
    stored: PolicyStatus | str,
    end_date: date | None,
    today: date,
) -> PolicyStatus:
    """Status a consumer sees: an active policy past its end date reads as expired."""
    stored = PolicyStatus(stored)
    if stored == PolicyStatus.ACTIVE and end_date is not None and end_date < today:
        return PolicyStatus.EXPIRED
    return stored


def is_policy_in_force(stored: PolicyStatus | str, end_date: date | None, today: date) -> bool:
    return effective_policy_status(stored, end_date, today) == PolicyStatus.ACTIVE
