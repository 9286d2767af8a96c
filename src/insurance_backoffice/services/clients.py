"""Client registry operations, client status, and the client deletion guard."""

import logging
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
    UniqueViolation,
)
from insurance_backoffice.errors import ConflictError, InvalidArgumentError, NotFoundError
from insurance_backoffice.models.entities import (
    Client,
    ClientDetails,
    ClientInput,
    ClientUpdate,
    Created,
    Deleted,
)
from insurance_backoffice.models.enums import ClaimStatus, ClientStatus, EntityType, PolicyStatus
from insurance_backoffice.observability import get_logger
from insurance_backoffice.rules.dates import Clock, system_today
from insurance_backoffice.rules.guards import check_client_deletable
from insurance_backoffice.rules.status import check_transition, parse_status
from insurance_backoffice.services.common import (
    changed_fields,
    count_in_force,
    fetch_created,
    to_policy_details,
    validate_payload,
)

logger = get_logger(__name__)

ENTITY = EntityType.CLIENT.value


def _email_conflict(email: str) -> ConflictError:
    return ConflictError("Email already exists", details={"field": "email", "email": email})


class ClientService:
    """Client registry backed by the clients table."""

    def __init__(self, db_path: str | None = None, clock: Clock = system_today):
        self._clients = ClientRepository(db_path)
        self._policies = PolicyRepository(db_path)
        self._claims = ClaimRepository(db_path)
        self._clock = clock

    def _load(self, client_id: int) -> Client:
        row = self._clients.get(client_id)
        if row is None:
            raise NotFoundError(ENTITY, client_id)
        return Client.model_validate(row)

    def _active_policy_count(self, client_id: int) -> int:
        return count_in_force(self._policies.find_all(client_id=client_id), self._clock())

    def create_client(self, data: ClientInput | dict[str, Any]) -> Created[ClientDetails]:
        payload = validate_payload(ClientInput, data, ENTITY)
        try:
            client_id = self._clients.insert(
                payload.model_dump(),
                audit=AuditRecord(
                    ENTITY,
                    ACTION_CREATED,
                    new_status=ClientStatus.ACTIVE.value,
                    details=payload.email,
                ),
            )
        except UniqueViolation:
            raise _email_conflict(payload.email) from None
        logger.bind(ENTITY, client_id).log_event("client_created", email=payload.email)
        return fetch_created(ENTITY, client_id, lambda: self.get_client(client_id), logger)

    def get_client(self, client_id: int) -> ClientDetails:
        """Client with its policies (effective statuses) and active policy count."""
        client = self._load(client_id)
        today = self._clock()
        policies = [
            to_policy_details(row, today)
            for row in self._policies.list_details(client_id=client_id)
        ]
        return ClientDetails(
            **client.model_dump(),
            active_policies=sum(1 for p in policies if p.status == PolicyStatus.ACTIVE),
            policies=policies,
        )

    def list_clients(self, status: ClientStatus | str | None = None) -> list[ClientDetails]:
        if status is not None:
            status = parse_status(ClientStatus, status, ENTITY)
        result = []
        for row in self._clients.find_all(status=status):
            client = Client.model_validate(row)
            result.append(
                ClientDetails(
                    **client.model_dump(),
                    active_policies=self._active_policy_count(client.id),
                )
            )
        return result

    def search_clients(self, term: str) -> list[Client]:
        term = (term or "").strip()
        if not term:
            return []
        return [Client.model_validate(r) for r in self._clients.search(term)]

    def update_client(self, client_id: int, data: ClientUpdate | dict[str, Any]) -> Client:
        payload = validate_payload(ClientUpdate, data, ENTITY)
        fields = changed_fields(payload)
        if not fields:
            raise InvalidArgumentError("No fields to update")
        current = self._load(client_id)
        audit = AuditRecord(ENTITY, ACTION_UPDATED, details=", ".join(sorted(fields)))
        if "status" in fields and fields["status"] != current.status:
            audit = AuditRecord(
                ENTITY,
                ACTION_STATUS_CHANGED,
                old_status=current.status.value,
                new_status=fields["status"].value,
                details=", ".join(sorted(fields)),
            )
        try:
            self._clients.update(client_id, fields, audit=audit)
        except UniqueViolation:
            raise _email_conflict(fields.get("email", "")) from None
        logger.bind(ENTITY, client_id).log_event("client_updated", fields=sorted(fields))
        return self._load(client_id)

    def update_client_status(
        self,
        client_id: int,
        status: ClientStatus | str,
        notes: str | None = None,
    ) -> Client:
        """Set a client active or inactive.

        Deactivating a client that still holds active policies is allowed.
        """
        target = parse_status(ClientStatus, status, ENTITY)
        current = self._load(client_id)
        check_transition(current.status, target, ENTITY)
        self._clients.update(
            client_id,
            {"status": target},
            audit=AuditRecord(
                ENTITY,
                ACTION_STATUS_CHANGED,
                old_status=current.status.value,
                new_status=target.value,
                details=notes,
            ),
        )
        logger.bind(ENTITY, client_id).log_event(
            "client_status_changed", old_status=current.status.value, new_status=target.value
        )
        return self._load(client_id)

    def delete_client(self, client_id: int) -> Deleted:
        """Delete a client unless an active policy or a pending claim still depends on it.

        Remaining policies and claims are removed by the store's cascade.
        """
        client = self._load(client_id)
        active = self._active_policy_count(client_id)
        pending = self._claims.count(client_id=client_id, status=ClaimStatus.PENDING)
        bound = logger.bind(ENTITY, client_id)
        if active or pending:
            bound.log_event(
                "client_delete_blocked",
                level=logging.WARNING,
                active_policies=active,
                pending_claims=pending,
            )
        check_client_deletable(client_id, active, pending)
        self._clients.delete(
            client_id, audit=AuditRecord(ENTITY, ACTION_DELETED, details=client.email)
        )
        bound.log_event("client_deleted")
        return Deleted(entity=ENTITY, id=client_id, message="Client deleted successfully")
