"""Claim intake, validation against coverage, and claim decisions."""

from typing import Any

from insurance_backoffice.db.constants import (
    ACTION_CREATED,
    ACTION_DELETED,
    ACTION_STATUS_CHANGED,
    ACTION_UPDATED,
)
from insurance_backoffice.db.repository import (
    AuditRecord,
    ClaimRepository,
    ClientRepository,
    PolicyRepository,
    ProductRepository,
    UniqueViolation,
)
from insurance_backoffice.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    PreconditionFailedError,
)
from insurance_backoffice.models.entities import (
    ClaimDetails,
    ClaimInput,
    ClaimStats,
    ClaimUpdate,
    Created,
    Deleted,
    Policy,
    Product,
)
from insurance_backoffice.models.enums import ClaimStatus, EntityType
from insurance_backoffice.observability import get_logger
from insurance_backoffice.rules.claims import check_amount, check_description, require_pending
from insurance_backoffice.rules.dates import Clock, system_today
from insurance_backoffice.rules.identifiers import CLAIM_PREFIX, resolve_identifier
from insurance_backoffice.rules.status import check_transition, is_policy_in_force, parse_status
from insurance_backoffice.services.common import changed_fields, fetch_created, validate_payload

logger = get_logger(__name__)

ENTITY = EntityType.CLAIM.value


class ClaimService:
    """Files, edits and decides claims."""

    def __init__(self, db_path: str | None = None, clock: Clock = system_today):
        self._claims = ClaimRepository(db_path)
        self._clients = ClientRepository(db_path)
        self._products = ProductRepository(db_path)
        self._policies = PolicyRepository(db_path)
        self._clock = clock

    def _details(self, claim_id: int) -> ClaimDetails:
        row = self._claims.get_details(claim_id)
        if row is None:
            raise NotFoundError(ENTITY, claim_id)
        return ClaimDetails.model_validate(row)

    def _require_active_policy(self, client_id: int, product_id: int) -> None:
        row = self._policies.find_binding(client_id, product_id)
        if row is not None:
            policy = Policy.model_validate(row)
            if is_policy_in_force(policy.status, policy.end_date, self._clock()):
                return
        raise PreconditionFailedError(
            "Client does not have an active policy for this product",
            details={"client_id": client_id, "product_id": product_id},
        )

    def create_claim(self, data: ClaimInput | dict[str, Any]) -> Created[ClaimDetails]:
        """File a claim for a client under a product.

        Checks run in order: client exists, product exists, the pair has an
        active policy, then the description and the amount (positive and
        within the product's coverage). The claim starts pending with today
        as its submitted date; policy and product are left untouched.
        """
        payload = validate_payload(ClaimInput, data, ENTITY)
        if self._clients.get(payload.client_id) is None:
            raise NotFoundError(EntityType.CLIENT.value, payload.client_id)
        product_row = self._products.get(payload.product_id)
        if product_row is None:
            raise NotFoundError(EntityType.PRODUCT.value, payload.product_id)
        product = Product.model_validate(product_row)
        self._require_active_policy(payload.client_id, payload.product_id)

        description = check_description(payload.description)
        check_amount(payload.amount, product.coverage)

        claim_number = resolve_identifier(payload.claim_number, CLAIM_PREFIX)
        try:
            claim_id = self._claims.insert(
                {
                    "client_id": payload.client_id,
                    "product_id": payload.product_id,
                    "claim_number": claim_number,
                    "amount": payload.amount,
                    "description": description,
                    "status": ClaimStatus.PENDING,
                    "submitted_date": self._clock(),
                },
                audit=AuditRecord(
                    ENTITY,
                    ACTION_CREATED,
                    new_status=ClaimStatus.PENDING.value,
                    details=claim_number,
                ),
            )
        except UniqueViolation:
            raise ConflictError(
                "Claim number already exists", details={"claim_number": claim_number}
            ) from None

        logger.bind(ENTITY, claim_id).log_event(
            "claim_created",
            claim_number=claim_number,
            amount=payload.amount,
            client_id=payload.client_id,
            product_id=payload.product_id,
        )
        return fetch_created(ENTITY, claim_id, lambda: self.get_claim(claim_id), logger)

    def get_claim(self, claim_id: int) -> ClaimDetails:
        return self._details(claim_id)

    def list_claims(
        self,
        status: ClaimStatus | str | None = None,
        client_id: int | None = None,
        product_id: int | None = None,
    ) -> list[ClaimDetails]:
        if status is not None:
            status = parse_status(ClaimStatus, status, ENTITY)
        rows = self._claims.list_details(status=status, client_id=client_id, product_id=product_id)
        return [ClaimDetails.model_validate(r) for r in rows]

    def update_claim_status(
        self,
        claim_id: int,
        status: ClaimStatus | str,
        notes: str | None = None,
        processor_id: int | str | None = None,
    ) -> ClaimDetails:
        """Approve, reject, or re-open a claim.

        A decision stamps today's date and the processor; re-opening to
        pending clears both. Approved and rejected never switch directly.
        """
        target = parse_status(ClaimStatus, status, ENTITY)
        claim = self._details(claim_id)
        check_transition(claim.status, target, ENTITY)

        fields: dict[str, Any] = {"status": target}
        if target == ClaimStatus.PENDING:
            fields["processed_date"] = None
            fields["processed_by"] = None
        else:
            fields["processed_date"] = self._clock()
            fields["processed_by"] = None if processor_id is None else str(processor_id)
        notes = (notes or "").strip() or None
        # Blank notes keep the stored ones
        if notes is not None:
            fields["notes"] = notes

        self._claims.update(
            claim_id,
            fields,
            audit=AuditRecord(
                ENTITY,
                ACTION_STATUS_CHANGED,
                old_status=claim.status.value,
                new_status=target.value,
                details=notes,
            ),
        )
        logger.bind(ENTITY, claim_id).log_event(
            "claim_status_changed",
            old_status=claim.status.value,
            new_status=target.value,
            processed_by=fields["processed_by"],
        )
        return self._details(claim_id)

    def update_claim(self, claim_id: int, data: ClaimUpdate | dict[str, Any]) -> ClaimDetails:
        """Edit amount or description while pending; notes may change at any time."""
        payload = validate_payload(ClaimUpdate, data, ENTITY)
        fields = changed_fields(payload)
        if not fields:
            raise InvalidArgumentError("No fields to update")
        claim = self._details(claim_id)
        if "amount" in fields or "description" in fields:
            require_pending(claim, "edit")
        if "description" in fields:
            fields["description"] = check_description(fields["description"])
        if "amount" in fields:
            check_amount(fields["amount"], claim.coverage or 0.0)

        self._claims.update(
            claim_id,
            fields,
            audit=AuditRecord(ENTITY, ACTION_UPDATED, details=", ".join(sorted(fields))),
        )
        logger.bind(ENTITY, claim_id).log_event("claim_updated", fields=sorted(fields))
        return self._details(claim_id)

    def delete_claim(self, claim_id: int) -> Deleted:
        claim = self._details(claim_id)
        require_pending(claim, "delete")
        self._claims.delete(
            claim_id,
            audit=AuditRecord(
                ENTITY,
                ACTION_DELETED,
                old_status=claim.status.value,
                details=claim.claim_number,
            ),
        )
        logger.bind(ENTITY, claim_id).log_event("claim_deleted")
        return Deleted(entity=ENTITY, id=claim_id, message="Claim deleted successfully")

    def claim_stats(self) -> ClaimStats:
        return ClaimStats.model_validate(self._claims.stats())
