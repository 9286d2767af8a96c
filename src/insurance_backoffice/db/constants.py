"""Table names and audit-log action names.

Entity statuses are enumerated in insurance_backoffice.models.enums.
"""

PRODUCTS_TABLE = "products"
CLIENTS_TABLE = "clients"
POLICIES_TABLE = "policies"
CLAIMS_TABLE = "claims"
AUDIT_TABLE = "status_audit_log"

ACTION_CREATED = "created"
ACTION_UPDATED = "updated"
ACTION_STATUS_CHANGED = "status_changed"
ACTION_RENEWED = "renewed"
ACTION_DELETED = "deleted"

# Actions accepted by AuditRecord
AUDIT_ACTIONS = (
    ACTION_CREATED,
    ACTION_UPDATED,
    ACTION_STATUS_CHANGED,
    ACTION_RENEWED,
    ACTION_DELETED,
)
