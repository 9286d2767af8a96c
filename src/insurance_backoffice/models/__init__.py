"""Pydantic models and enums for back-office entities."""

from insurance_backoffice.models.entities import (
    ActivityItem,
    AuditEntry,
    Claim,
    ClaimDetails,
    ClaimInput,
    ClaimStats,
    ClaimUpdate,
    Client,
    ClientDetails,
    ClientInput,
    ClientUpdate,
    Created,
    DashboardStats,
    Deleted,
    Policy,
    PolicyDetails,
    PolicyInput,
    PolicyUpdate,
    Product,
    ProductInput,
    ProductUpdate,
    SummaryReport,
)
from insurance_backoffice.models.enums import (
    ClaimStatus,
    ClientStatus,
    EntityType,
    PolicyStatus,
    ProductType,
)

__all__ = [
    "ActivityItem",
    "AuditEntry",
    "Claim",
    "ClaimDetails",
    "ClaimInput",
    "ClaimStats",
    "ClaimStatus",
    "ClaimUpdate",
    "Client",
    "ClientDetails",
    "ClientInput",
    "ClientStatus",
    "ClientUpdate",
    "Created",
    "DashboardStats",
    "Deleted",
    "EntityType",
    "Policy",
    "PolicyDetails",
    "PolicyInput",
    "PolicyStatus",
    "PolicyUpdate",
    "Product",
    "ProductInput",
    "ProductType",
    "ProductUpdate",
    "SummaryReport",
]
