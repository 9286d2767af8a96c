"""Pure domain rules: statuses, transitions, expiry, identifiers, guards."""

from insurance_backoffice.rules.claims import check_amount, check_description, require_pending
from insurance_backoffice.rules.dates import (
    Clock,
    add_months,
    fixed_clock,
    parse_date,
    system_today,
)
from insurance_backoffice.rules.guards import check_client_deletable, check_product_deletable
from insurance_backoffice.rules.identifiers import (
    CLAIM_PREFIX,
    POLICY_PREFIX,
    generate_identifier,
    resolve_identifier,
)
from insurance_backoffice.rules.status import (
    check_transition,
    effective_policy_status,
    is_policy_in_force,
    parse_status,
)

__all__ = [
    "CLAIM_PREFIX",
    "Clock",
    "POLICY_PREFIX",
    "add_months",
    "check_amount",
    "check_client_deletable",
    "check_description",
    "check_product_deletable",
    "check_transition",
    "effective_policy_status",
    "fixed_clock",
    "generate_identifier",
    "is_policy_in_force",
    "parse_date",
    "parse_status",
    "require_pending",
    "resolve_identifier",
    "system_today",
]
