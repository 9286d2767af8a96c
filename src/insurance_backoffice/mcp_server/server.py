"""MCP server exposing the back-office operations as tools via stdio transport.

Every tool returns a JSON string. Rule violations come back as
``{"error": ..., "error_code": ..., "details": ...}`` instead of raising.
"""

import json
from typing import Any, Callable

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel

from insurance_backoffice.db.seed import seed_sample_data as _seed
from insurance_backoffice.engine import BackOffice
from insurance_backoffice.errors import DomainError
from insurance_backoffice.observability import get_logger
from insurance_backoffice.rules.identifiers import generate_identifier as _generate_identifier

logger = get_logger(__name__)

mcp = FastMCP("insurance-backoffice", json_response=True)

# Services resolve BACKOFFICE_DB_PATH per call, so one engine serves the process
backoffice = BackOffice()


def _to_json(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_to_json(v) for v in value]
    return value


def _call(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> str:
    try:
        result = fn(*args, **kwargs)
    except DomainError as e:
        logger.info("%s refused: %s (%s)", fn.__name__, e.message, e.error_code)
        return json.dumps(e.to_dict(), default=str)
    return json.dumps(_to_json(result), default=str)


def _supplied(**fields: Any) -> dict[str, Any]:
    """Drop parameters the caller left at None so they are not treated as updates."""
    return {k: v for k, v in fields.items() if v is not None}


# ============================================================================
# PRODUCTS
# ============================================================================


@mcp.tool()
def create_product(
    name: str,
    type: str,
    premium: float,
    coverage: float,
    description: str | None = None,
) -> str:
    """Add a product to the catalogue. type: life, health, auto, home or travel."""
    return _call(
        backoffice.products.create_product,
        _supplied(name=name, type=type, premium=premium, coverage=coverage, description=description),
    )


@mcp.tool()
def update_product(
    product_id: int,
    name: str | None = None,
    type: str | None = None,
    premium: float | None = None,
    coverage: float | None = None,
    description: str | None = None,
    is_active: bool | None = None,
) -> str:
    """Change product fields; only the fields given are updated."""
    return _call(
        backoffice.products.update_product,
        product_id,
        _supplied(
            name=name,
            type=type,
            premium=premium,
            coverage=coverage,
            description=description,
            is_active=is_active,
        ),
    )


@mcp.tool()
def get_product(product_id: int) -> str:
    """Fetch one product by id."""
    return _call(backoffice.products.get_product, product_id)


@mcp.tool()
def list_products(product_type: str | None = None, active: bool | None = None) -> str:
    """List products, optionally filtered by type and active flag."""
    return _call(backoffice.products.list_products, product_type, active)


@mcp.tool()
def search_products(term: str) -> str:
    """Search active products by name, type or description."""
    return _call(backoffice.products.search_products, term)


@mcp.tool()
def delete_product(product_id: int) -> str:
    """Delete a product. Refused while any policy on it is active."""
    return _call(backoffice.products.delete_product, product_id)


# ============================================================================
# CLIENTS
# ============================================================================


@mcp.tool()
def create_client(
    name: str,
    email: str,
    phone: str | None = None,
    date_of_birth: str | None = None,
    address: str | None = None,
) -> str:
    """Register a client. Email must be unique."""
    return _call(
        backoffice.clients.create_client,
        _supplied(
            name=name, email=email, phone=phone, date_of_birth=date_of_birth, address=address
        ),
    )


@mcp.tool()
def update_client(
    client_id: int,
    name: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    date_of_birth: str | None = None,
    address: str | None = None,
    status: str | None = None,
) -> str:
    """Change client fields; only the fields given are updated."""
    return _call(
        backoffice.clients.update_client,
        client_id,
        _supplied(
            name=name,
            email=email,
            phone=phone,
            date_of_birth=date_of_birth,
            address=address,
            status=status,
        ),
    )


@mcp.tool()
def update_client_status(client_id: int, status: str, notes: str | None = None) -> str:
    """Set a client active or inactive."""
    return _call(backoffice.clients.update_client_status, client_id, status, notes)


@mcp.tool()
def get_client(client_id: int) -> str:
    """Fetch a client with its policies and active policy count."""
    return _call(backoffice.clients.get_client, client_id)


@mcp.tool()
def list_clients(status: str | None = None) -> str:
    """List clients, optionally filtered by status."""
    return _call(backoffice.clients.list_clients, status)


@mcp.tool()
def search_clients(term: str) -> str:
    """Search clients by name, email or phone."""
    return _call(backoffice.clients.search_clients, term)


@mcp.tool()
def delete_client(client_id: int) -> str:
    """Delete a client. Refused while it has active policies or pending claims."""
    return _call(backoffice.clients.delete_client, client_id)


# ============================================================================
# POLICIES
# ============================================================================


@mcp.tool()
def create_policy(
    client_id: int,
    product_id: int,
    policy_number: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> str:
    """Bind a client to a product. The policy number is generated when omitted."""
    return _call(
        backoffice.policies.create_policy,
        _supplied(
            client_id=client_id,
            product_id=product_id,
            policy_number=policy_number,
            start_date=start_date,
            end_date=end_date,
        ),
    )


@mcp.tool()
def get_policy(policy_id: int) -> str:
    """Fetch a policy; status is the effective status (expired once past end date)."""
    return _call(backoffice.policies.get_policy, policy_id)


@mcp.tool()
def update_policy(
    policy_id: int,
    policy_number: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    status: str | None = None,
) -> str:
    """Change policy fields; only the fields given are updated."""
    return _call(
        backoffice.policies.update_policy,
        policy_id,
        _supplied(
            policy_number=policy_number, start_date=start_date, end_date=end_date, status=status
        ),
    )


@mcp.tool()
def update_policy_status(policy_id: int, status: str, notes: str | None = None) -> str:
    """Set a policy's status: active, inactive, cancelled, expired or suspended."""
    return _call(backoffice.policies.update_policy_status, policy_id, status, notes)


@mcp.tool()
def renew_policy(
    policy_id: int,
    renewal_period_months: int | None = None,
    new_end_date: str | None = None,
) -> str:
    """Extend a policy (default 12 months from today) and set it active."""
    return _call(
        backoffice.policies.renew_policy, policy_id, renewal_period_months, new_end_date
    )


@mcp.tool()
def list_policies(
    status: str | None = None,
    client_id: int | None = None,
    product_id: int | None = None,
) -> str:
    """List policies filtered by effective status, client or product."""
    return _call(backoffice.policies.list_policies, status, client_id, product_id)


@mcp.tool()
def search_policies(term: str) -> str:
    """Search policies by number, client, product or status."""
    return _call(backoffice.policies.search_policies, term)


@mcp.tool()
def delete_policy(policy_id: int) -> str:
    """Delete a policy."""
    return _call(backoffice.policies.delete_policy, policy_id)


# ============================================================================
# CLAIMS
# ============================================================================


@mcp.tool()
def create_claim(
    client_id: int,
    product_id: int,
    amount: float,
    description: str,
    claim_number: str | None = None,
) -> str:
    """File a claim. Requires an active policy; amount may not exceed coverage."""
    return _call(
        backoffice.claims.create_claim,
        _supplied(
            client_id=client_id,
            product_id=product_id,
            amount=amount,
            description=description,
            claim_number=claim_number,
        ),
    )


@mcp.tool()
def get_claim(claim_id: int) -> str:
    """Fetch one claim with client and product details."""
    return _call(backoffice.claims.get_claim, claim_id)


@mcp.tool()
def update_claim(
    claim_id: int,
    amount: float | None = None,
    description: str | None = None,
    notes: str | None = None,
) -> str:
    """Edit a claim. Amount and description only while pending."""
    return _call(
        backoffice.claims.update_claim,
        claim_id,
        _supplied(amount=amount, description=description, notes=notes),
    )


@mcp.tool()
def update_claim_status(
    claim_id: int,
    status: str,
    notes: str | None = None,
    processor_id: str | None = None,
) -> str:
    """Approve, reject or re-open (pending) a claim."""
    return _call(backoffice.claims.update_claim_status, claim_id, status, notes, processor_id)


@mcp.tool()
def list_claims(
    status: str | None = None,
    client_id: int | None = None,
    product_id: int | None = None,
) -> str:
    """List claims, optionally filtered by status, client or product."""
    return _call(backoffice.claims.list_claims, status, client_id, product_id)


@mcp.tool()
def delete_claim(claim_id: int) -> str:
    """Delete a pending claim."""
    return _call(backoffice.claims.delete_claim, claim_id)


@mcp.tool()
def claim_stats() -> str:
    """Claim counts per status and approved/pending amounts."""
    return _call(backoffice.claims.claim_stats)


# ============================================================================
# DASHBOARD AND REPORTS
# ============================================================================


@mcp.tool()
def dashboard_stats() -> str:
    """Products, active clients, pending claims, active policies and annual revenue."""
    return _call(backoffice.reports.dashboard_stats)


@mcp.tool()
def recent_activity(limit: int = 10) -> str:
    """Most recent client, policy and claim creations."""
    return _call(backoffice.reports.recent_activity, limit)


@mcp.tool()
def summary_report() -> str:
    """Per-status counts, monthly premium in force and total claims paid."""
    return _call(backoffice.reports.summary_report)


# ============================================================================
# HISTORY AND UTILITIES
# ============================================================================


@mcp.tool()
def get_history(entity_type: str, entity_id: int) -> str:
    """Audit log for a product, client, policy or claim."""
    return _call(backoffice.get_history, entity_type, entity_id)


@mcp.tool()
def generate_identifier(prefix: str = "CLM") -> str:
    """Generate a unique identifier such as CLM-1A2B3C4D5E6F."""
    return json.dumps({"identifier": _generate_identifier(prefix.strip().upper() or "CLM")})


@mcp.tool()
def seed_sample_data() -> str:
    """Load the demo catalogue into an empty store."""
    return json.dumps({"inserted": _seed()})


def main() -> None:
    """Run the MCP server with stdio transport (default)."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
