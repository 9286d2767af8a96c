"""Policy binding, status administration, lazy expiry and renewal."""

from datetime import date
from typing import Any

from insurance_backoffice.config.settings import DEFAULT_RENEWAL_MONTHS
from insurance_backoffice.db.constants import (
    ACTION_CREATED,
    ACTION_DELETED,
    ACTION_RENEWED,
    ACTION_STATUS_CHANGED,
    ACTION_UPDATED,
)
from insurance_backoffice.db.repository import (
    AuditRecord,
    ClientRepository,
    PolicyRepository,
    ProductRepository,
    UniqueViolation,
)
from insurance_backoffice.errors import ConflictError, InvalidArgumentError, NotFoundError
from insurance_backoffice.models.entities import (
    Created,
    Deleted,
    PolicyDetails,
    PolicyInput,
    PolicyUpdate,
)
from insurance_backoffice.models.enums import EntityType, PolicyStatus
from insurance_backoffice.observability import get_logger
from insurance_backoffice.rules.dates import Clock, add_months, parse_date, system_today
from insurance_backoffice.rules.identifiers import POLICY_PREFIX, resolve_identifier
from insurance_backoffice.rules.status import check_transition, parse_status
from insurance_backoffice.services.common import (
    changed_fields,
    fetch_created,
    to_policy_details,
    validate_payload,
)

logger = get_logger(__name__)

ENTITY = EntityType.POLICY.value


def _binding_conflict(client_id: int, product_id: int) -> ConflictError:
    return ConflictError(
        "Client already has this product",
        details={"client_id": client_id, "product_id": product_id},
    )


def _number_conflict(policy_number: str) -> ConflictError:
    return ConflictError(
        "Policy number already exists", details={"policy_number": policy_number}
    )


def _check_dates(start: date | None, end: date | None) -> None:
    if start is not None and end is not None and end < start:
        raise InvalidArgumentError(
            "End date must not precede start date",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )


class PolicyService:
    """Policies bind one client to one product.

    Every policy returned carries its effective status: a stored ``active``
    policy whose end date has passed reads as ``expired``. The stored value
    is never rewritten by a read and is exposed as ``stored_status``.
    """

    def __init__(self, db_path: str | None = None, clock: Clock = system_today):
        self._policies = PolicyRepository(db_path)
        self._clients = ClientRepository(db_path)
        self._products = ProductRepository(db_path)
        self._clock = clock

    def _details(self, policy_id: int) -> PolicyDetails:
        row = self._policies.get_details(policy_id)
        if row is None:
            raise NotFoundError(ENTITY, policy_id)
        return to_policy_details(row, self._clock())

    def create_policy(self, data: PolicyInput | dict[str, Any]) -> Created[PolicyDetails]:
        """Bind a client to a product.

        Raises:
            NotFoundError: client or product does not exist.
            ConflictError: the pair is already bound, or the policy number is taken.
            InvalidArgumentError: malformed payload or end date before start date.
        """
        payload = validate_payload(PolicyInput, data, ENTITY)
        if self._clients.get(payload.client_id) is None:
            raise NotFoundError(EntityType.CLIENT.value, payload.client_id)
        if self._products.get(payload.product_id) is None:
            raise NotFoundError(EntityType.PRODUCT.value, payload.product_id)
        if self._policies.find_binding(payload.client_id, payload.product_id) is not None:
            raise _binding_conflict(payload.client_id, payload.product_id)

        start = payload.start_date or self._clock()
        _check_dates(start, payload.end_date)
        policy_number = resolve_identifier(payload.policy_number, POLICY_PREFIX)
        try:
            policy_id = self._policies.insert(
                {
                    "client_id": payload.client_id,
                    "product_id": payload.product_id,
                    "policy_number": policy_number,
                    "start_date": start,
                    "end_date": payload.end_date,
                    "status": PolicyStatus.ACTIVE,
                },
                audit=AuditRecord(
                    ENTITY,
                    ACTION_CREATED,
                    new_status=PolicyStatus.ACTIVE.value,
                    details=policy_number,
                ),
            )
        except UniqueViolation as e:
            # The pair check above races with concurrent writers
            if "policy_number" in e.columns:
                raise _number_conflict(policy_number) from None
            raise _binding_conflict(payload.client_id, payload.product_id) from None

        logger.bind(ENTITY, policy_id).log_event(
            "policy_created",
            policy_number=policy_number,
            client_id=payload.client_id,
            product_id=payload.product_id,
        )
        return fetch_created(ENTITY, policy_id, lambda: self.get_policy(policy_id), logger)

    def get_policy(self, policy_id: int) -> PolicyDetails:
        return self._details(policy_id)

    def list_policies(
        self,
        status: PolicyStatus | str | None = None,
        client_id: int | None = None,
        product_id: int | None = None,
    ) -> list[PolicyDetails]:
        """Policies newest first, filtered on effective status."""
        if status is not None:
            status = parse_status(PolicyStatus, status, ENTITY)
        today = self._clock()
        policies = [
            to_policy_details(row, today)
            for row in self._policies.list_details(client_id=client_id, product_id=product_id)
        ]
        if status is None:
            return policies
        return [p for p in policies if p.status == status]

    def search_policies(self, term: str) -> list[PolicyDetails]:
        """Match number, client name or email, product name, or effective status."""
        term = (term or "").strip()
        if not term:
            return []
        matched_ids = {row["id"] for row in self._policies.search_details(term)}
        needle = term.lower()
        return [
            p
            for p in self.list_policies()
            if p.id in matched_ids or needle in p.status.value
        ]

    def update_policy(self, policy_id: int, data: PolicyUpdate | dict[str, Any]) -> PolicyDetails:
        payload = validate_payload(PolicyUpdate, data, ENTITY)
        fields = changed_fields(payload)
        if not fields:
            raise InvalidArgumentError("No fields to update")
        current = self._details(policy_id)
        _check_dates(
            fields.get("start_date", current.start_date),
            fields.get("end_date", current.end_date),
        )
        audit = AuditRecord(ENTITY, ACTION_UPDATED, details=", ".join(sorted(fields)))
        if "status" in fields and fields["status"] != current.stored_status:
            audit = AuditRecord(
                ENTITY,
                ACTION_STATUS_CHANGED,
                old_status=current.stored_status.value,
                new_status=fields["status"].value,
                details=", ".join(sorted(fields)),
            )
        try:
            self._policies.update(policy_id, fields, audit=audit)
        except UniqueViolation:
            raise _number_conflict(fields.get("policy_number", "")) from None
        logger.bind(ENTITY, policy_id).log_event("policy_updated", fields=sorted(fields))
        return self._details(policy_id)

    def update_policy_status(
        self,
        policy_id: int,
        status: PolicyStatus | str,
        notes: str | None = None,
    ) -> PolicyDetails:
        """Administratively move a policy to any of its statuses; notes go to the audit log."""
        target = parse_status(PolicyStatus, status, ENTITY)
        current = self._details(policy_id)
        check_transition(current.stored_status, target, ENTITY)
        self._policies.update(
            policy_id,
            {"status": target},
            audit=AuditRecord(
                ENTITY,
                ACTION_STATUS_CHANGED,
                old_status=current.stored_status.value,
                new_status=target.value,
                details=notes,
            ),
        )
        logger.bind(ENTITY, policy_id).log_event(
            "policy_status_changed",
            old_status=current.stored_status.value,
            new_status=target.value,
        )
        return self._details(policy_id)

    def renew_policy(
        self,
        policy_id: int,
        months: int | None = None,
        new_end_date: date | str | None = None,
    ) -> PolicyDetails:
        """Extend a policy and force it back to active.

        The new end date is ``new_end_date`` when given, otherwise today plus
        ``months`` (default BACKOFFICE_DEFAULT_RENEWAL_MONTHS). Renewal
        reactivates cancelled and suspended policies too; the previous status
        is kept in the audit entry.
        """
        if months is None:
            months = DEFAULT_RENEWAL_MONTHS
        if isinstance(months, bool) or not isinstance(months, int) or months < 1:
            raise InvalidArgumentError(
                "Renewal period must be a positive number of months",
                details={"months": months},
            )
        explicit_end = parse_date(new_end_date, "new_end_date")
        current = self._details(policy_id)
        today = self._clock()
        end = explicit_end or add_months(today, months)
        _check_dates(current.start_date, end)

        self._policies.update(
            policy_id,
            {"end_date": end, "status": PolicyStatus.ACTIVE},
            audit=AuditRecord(
                ENTITY,
                ACTION_RENEWED,
                old_status=current.stored_status.value,
                new_status=PolicyStatus.ACTIVE.value,
                details=f"end_date={end.isoformat()}",
            ),
        )
        logger.bind(ENTITY, policy_id).log_event(
            "policy_renewed",
            old_status=current.stored_status.value,
            end_date=end.isoformat(),
        )
        return self._details(policy_id)

    def delete_policy(self, policy_id: int) -> Deleted:
        """Delete a policy unconditionally; claims for the pair are left in place."""
        current = self._details(policy_id)
        self._policies.delete(
            policy_id,
            audit=AuditRecord(
                ENTITY,
                ACTION_DELETED,
                old_status=current.stored_status.value,
                details=current.policy_number,
            ),
        )
        logger.bind(ENTITY, policy_id).log_event("policy_deleted")
        return Deleted(entity=ENTITY, id=policy_id, message="Policy deleted successfully")
