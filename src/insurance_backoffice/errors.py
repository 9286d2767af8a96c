"""Domain errors raised by the back-office rules."""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base exception for all rule violations reported to callers."""

    error_code = "DOMAIN_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class NotFoundError(DomainError):
    """Referenced entity does not exist."""

    error_code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            message=f"{entity.capitalize()} not found: {entity_id}",
            details={"entity": entity, "id": entity_id},
        )


class InvalidArgumentError(DomainError):
    """Value outside its allowed domain."""

    error_code = "INVALID_ARGUMENT"


class InvalidStateError(DomainError):
    """Operation not allowed given the entity's current state."""

    error_code = "INVALID_STATE"


class PreconditionFailedError(DomainError):
    """A required related entity or relationship is missing."""

    error_code = "PRECONDITION_FAILED"


class ConflictError(DomainError):
    """Uniqueness violation, or deletion blocked by dependent records."""

    error_code = "CONFLICT"
