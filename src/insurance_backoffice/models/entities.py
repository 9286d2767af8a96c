"""Pydantic models for back-office entities, request payloads, and results."""

import re
from datetime import date
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator

from insurance_backoffice.models.enums import (
    ClaimStatus,
    ClientStatus,
    EntityType,
    PolicyStatus,
    ProductType,
)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(value: str) -> str:
    email = value.strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValueError("Valid email is required")
    return email


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value.strip()


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class ProductInput(BaseModel):
    """Payload for creating a product."""

    name: str = Field(..., min_length=1, description="Product name")
    type: ProductType = Field(..., description="Line of business")
    premium: float = Field(..., ge=0, description="Monthly premium")
    coverage: float = Field(..., ge=0, description="Maximum payable amount")
    description: Optional[str] = Field(default=None, description="Free-text description")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _require_text(v)


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[ProductType] = None
    premium: Optional[float] = Field(default=None, ge=0)
    coverage: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _require_text(v)


class Product(BaseModel):
    id: int
    name: str
    type: ProductType
    premium: float
    coverage: float
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


class ClientInput(BaseModel):
    """Payload for creating a client."""

    name: str = Field(..., min_length=1, description="Client full name")
    email: str = Field(..., description="Unique email address (stored lower-cased)")
    phone: Optional[str] = Field(default=None, description="Contact phone")
    date_of_birth: Optional[date] = Field(default=None, description="Date of birth (YYYY-MM-DD)")
    address: Optional[str] = Field(default=None, description="Postal address")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _normalize_email(v)


class ClientUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    status: Optional[ClientStatus] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _require_text(v)

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _normalize_email(v)


class Client(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    status: ClientStatus = ClientStatus.ACTIVE
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------


class PolicyInput(BaseModel):
    """Payload for binding a client to a product."""

    client_id: int = Field(..., ge=1, description="Client reference")
    product_id: int = Field(..., ge=1, description="Product reference")
    policy_number: Optional[str] = Field(
        default=None, description="Policy number; generated when absent"
    )
    start_date: Optional[date] = Field(
        default=None, description="Start date; defaults to the current date"
    )
    end_date: Optional[date] = Field(default=None, description="Optional end date")

    @model_validator(mode="after")
    def end_not_before_start(self) -> "PolicyInput":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


class PolicyUpdate(BaseModel):
    policy_number: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[PolicyStatus] = None

    @field_validator("policy_number")
    @classmethod
    def number_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _require_text(v)


class Policy(BaseModel):
    """Policy as stored. ``status`` is the raw stored value."""

    id: int
    client_id: int
    product_id: int
    policy_number: str
    start_date: date
    end_date: Optional[date] = None
    status: PolicyStatus = PolicyStatus.ACTIVE
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class PolicyDetails(Policy):
    """Policy as shown to consumers.

    ``status`` is the effective status (lazy expiry applied at read time) and
    ``stored_status`` keeps the raw value from the store.
    """

    stored_status: PolicyStatus
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    product_name: Optional[str] = None
    product_type: Optional[ProductType] = None
    monthly_premium: Optional[float] = None
    coverage: Optional[float] = None


# ---------------------------------------------------------------------------
# Claims
# ---------------------------------------------------------------------------


class ClaimInput(BaseModel):
    """Payload for filing a claim.

    Only shapes are checked here; amount and description values are checked
    by the claim validator after the policy precondition.
    """

    client_id: int = Field(..., ge=1, description="Client reference")
    product_id: int = Field(..., ge=1, description="Product reference")
    amount: float = Field(..., allow_inf_nan=False, description="Requested amount")
    description: str = Field(default="", description="What happened")
    claim_number: Optional[str] = Field(
        default=None, description="Claim number; generated when absent"
    )


class ClaimUpdate(BaseModel):
    amount: Optional[float] = Field(default=None, allow_inf_nan=False)
    description: Optional[str] = None
    notes: Optional[str] = None


class Claim(BaseModel):
    id: int
    client_id: int
    product_id: int
    claim_number: str
    amount: float
    description: str
    status: ClaimStatus = ClaimStatus.PENDING
    submitted_date: date
    processed_date: Optional[date] = None
    processed_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ClaimStatus.PENDING


class ClaimDetails(Claim):
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    product_name: Optional[str] = None
    product_type: Optional[ProductType] = None
    coverage: Optional[float] = None


class ClientDetails(Client):
    """Client with the number of active policies and, when requested, the policies."""

    active_policies: int = 0
    policies: list[PolicyDetails] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

T = TypeVar("T")


class Created(BaseModel, Generic[T]):
    """Outcome of a creation.

    ``complete`` is False when the record was committed but the follow-up
    read failed; ``record`` is then None and callers should still treat the
    creation as successful.
    """

    id: int
    record: Optional[T] = None
    complete: bool = True
    message: Optional[str] = None


class Deleted(BaseModel):
    entity: str
    id: int
    message: str


class AuditEntry(BaseModel):
    id: int
    entity_type: str
    entity_id: int
    action: str
    old_status: Optional[str] = None
    new_status: Optional[str] = None
    details: Optional[str] = None
    created_at: Optional[str] = None


class ClaimStats(BaseModel):
    total_claims: int = 0
    pending_claims: int = 0
    approved_claims: int = 0
    rejected_claims: int = 0
    total_approved_amount: float = 0.0
    total_pending_amount: float = 0.0


class DashboardStats(BaseModel):
    """Headline figures; policy counts and revenue use effective status."""

    total_products: int = 0
    active_clients: int = 0
    pending_claims: int = 0
    active_policies: int = 0
    total_revenue: float = Field(default=0.0, description="Annualised premium of active policies")


class ActivityItem(BaseModel):
    type: EntityType
    entity_id: int
    description: str
    timestamp: Optional[str] = None


class SummaryReport(BaseModel):
    total_products: int = Field(default=0, description="Products open for sale")
    active_clients: int = 0
    inactive_clients: int = 0
    active_policies: int = 0
    expired_policies: int = 0
    cancelled_policies: int = 0
    suspended_policies: int = 0
    pending_claims: int = 0
    approved_claims: int = 0
    rejected_claims: int = 0
    monthly_revenue: float = 0.0
    total_claims_paid: float = 0.0
