"""Enumerations for entity types and statuses.

Each entity's legal status set lives here and nowhere else; validation and
transition rules look these up instead of repeating literal lists.
"""

from enum import Enum


class ProductType(str, Enum):
    """Line of business a product belongs to."""

    LIFE = "life"
    HEALTH = "health"
    AUTO = "auto"
    HOME = "home"
    TRAVEL = "travel"


class ClientStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PolicyStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


class ClaimStatus(str, Enum):
    """Claim workflow status. ``pending`` is initial; the other two are decisions."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EntityType(str, Enum):
    """Entity kinds recorded in the audit log."""

    PRODUCT = "product"
    CLIENT = "client"
    POLICY = "policy"
    CLAIM = "claim"
