"""Entity services applying the domain rules against the store."""

from insurance_backoffice.services.claims import ClaimService
from insurance_backoffice.services.clients import ClientService
from insurance_backoffice.services.policies import PolicyService
from insurance_backoffice.services.products import ProductService
from insurance_backoffice.services.reports import ReportService

__all__ = [
    "ClaimService",
    "ClientService",
    "PolicyService",
    "ProductService",
    "ReportService",
]
