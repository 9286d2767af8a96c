"""Claim value checks shared by creation and amount edits."""

import math

from insurance_backoffice.errors import InvalidArgumentError, InvalidStateError
from insurance_backoffice.models.entities import Claim


def check_amount(amount: float, coverage: float) -> None:
    """Amount must be positive and no greater than the product's coverage."""
    if amount is None or not math.isfinite(amount) or amount <= 0:
        raise InvalidArgumentError(
            "Amount must be a positive number",
            details={"field": "amount", "amount": amount},
        )
    if amount > coverage:
        raise InvalidArgumentError(
            "Claim amount exceeds policy coverage",
            details={"amount": amount, "max_coverage": coverage},
        )


def check_description(description: str | None) -> str:
    if description is None or not description.strip():
        raise InvalidArgumentError(
            "Description is required", details={"field": "description"}
        )
    return description.strip()


def require_pending(claim: Claim, action: str) -> None:
    """Decided claims are immutable: no deletes, amount or description edits."""
    if not claim.is_pending:
        raise InvalidStateError(
            f"Cannot {action} processed claim",
            details={"claim_id": claim.id, "status": claim.status.value},
        )
