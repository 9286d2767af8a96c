"""Single entry point bundling the entity services over one store and one clock."""

from insurance_backoffice.db.repository import AuditRepository
from insurance_backoffice.models.entities import AuditEntry
from insurance_backoffice.models.enums import EntityType
from insurance_backoffice.rules.dates import Clock, system_today
from insurance_backoffice.rules.status import parse_status
from insurance_backoffice.services import (
    ClaimService,
    ClientService,
    PolicyService,
    ProductService,
    ReportService,
)


class BackOffice:
    """Back-office rules engine.

    All services share ``db_path`` (default: BACKOFFICE_DB_PATH) and ``clock``,
    the source of "today" for expiry, renewal and claim dates.
    """

    def __init__(self, db_path: str | None = None, clock: Clock = system_today):
        self.db_path = db_path
        self.clock = clock
        self.products = ProductService(db_path, clock)
        self.clients = ClientService(db_path, clock)
        self.policies = PolicyService(db_path, clock)
        self.claims = ClaimService(db_path, clock)
        self.reports = ReportService(db_path, clock)
        self._audit = AuditRepository(db_path)

    def get_history(self, entity_type: EntityType | str, entity_id: int) -> list[AuditEntry]:
        """Audit entries for one entity, oldest first (kept after the entity is deleted)."""
        kind = parse_status(EntityType, entity_type, "audit", field="entity type")
        return [AuditEntry.model_validate(r) for r in self._audit.history(kind.value, entity_id)]
