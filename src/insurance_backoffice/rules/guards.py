"""Deletion guards: refuse deletes that would drop blocking dependents."""

from insurance_backoffice.errors import ConflictError


def check_client_deletable(client_id: int, active_policies: int, pending_claims: int) -> None:
    """A client with any active policy or pending claim cannot be deleted."""
    if active_policies > 0 or pending_claims > 0:
        raise ConflictError(
            "Cannot delete client with active policies or pending claims",
            details={
                "client_id": client_id,
                "active_policies": active_policies,
                "pending_claims": pending_claims,
            },
        )


def check_product_deletable(product_id: int, active_policy_count: int) -> None:
    if active_policy_count > 0:
        raise ConflictError(
            "Cannot delete product with active policies",
            details={"product_id": product_id, "active_policy_count": active_policy_count},
        )
