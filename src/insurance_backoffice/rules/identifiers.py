"""Human-readable policy and claim numbers."""

import uuid

from insurance_backoffice.config.settings import ID_SUFFIX_LENGTH

POLICY_PREFIX = "POL"
CLAIM_PREFIX = "CLM"


def generate_identifier(prefix: str, length: int = ID_SUFFIX_LENGTH) -> str:
    """Generate ``<PREFIX>-<random hex>``; the generator never checks the store."""
    length = max(4, min(length, 32))
    return f"{prefix}-{uuid.uuid4().hex[:length].upper()}"


def resolve_identifier(supplied: str | None, prefix: str) -> str:
    """Use the caller's identifier when non-blank, otherwise generate one."""
    if supplied is not None and supplied.strip():
        return supplied.strip()
    return generate_identifier(prefix)
