"""SQLite persistence gateway for the back-office entities and audit log."""

from insurance_backoffice.db.database import get_connection, get_db_path, init_db
from insurance_backoffice.db.repository import (
    AuditRecord,
    AuditRepository,
    ClaimRepository,
    ClientRepository,
    PolicyRepository,
    ProductRepository,
    ReportRepository,
    UniqueViolation,
)
from insurance_backoffice.db.seed import seed_sample_data

__all__ = [
    "AuditRecord",
    "AuditRepository",
    "ClaimRepository",
    "ClientRepository",
    "PolicyRepository",
    "ProductRepository",
    "ReportRepository",
    "UniqueViolation",
    "get_connection",
    "get_db_path",
    "init_db",
    "seed_sample_data",
]
