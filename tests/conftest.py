"""Shared pytest fixtures for all test files."""

import os
import tempfile
from datetime import date

import pytest

from insurance_backoffice.db.database import init_db
from insurance_backoffice.engine import BackOffice
from insurance_backoffice.rules.dates import fixed_clock

# All date rules under test read this as "today"
TODAY = date(2025, 1, 15)


@pytest.fixture(autouse=True)
def temp_db():
    """Use a temporary SQLite DB for tests."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    init_db(path)
    prev = os.environ.get("BACKOFFICE_DB_PATH")
    os.environ["BACKOFFICE_DB_PATH"] = path
    try:
        yield path
    finally:
        if prev is None:
            os.environ.pop("BACKOFFICE_DB_PATH", None)
        else:
            os.environ["BACKOFFICE_DB_PATH"] = prev
        try:
            os.unlink(path)
        except OSError:
            # Ignore errors when cleaning up the temporary DB file (e.g., if already removed).
            pass


@pytest.fixture
def office(temp_db):
    """Back office on the temporary DB with the clock pinned to TODAY."""
    return BackOffice(db_path=temp_db, clock=fixed_clock(TODAY))


@pytest.fixture
def product(office):
    """Auto product with 75,000 coverage."""
    created = office.products.create_product(
        {
            "name": "Auto Protection Plus",
            "type": "auto",
            "premium": 85.0,
            "coverage": 75000,
            "description": "Collision and comprehensive cover.",
        }
    )
    return created.record


@pytest.fixture
def client(office):
    created = office.clients.create_client(
        {"name": "Sarah Johnson", "email": "Sarah.J@Email.com", "phone": "(555) 987-6543"}
    )
    return created.record


@pytest.fixture
def policy(office, client, product):
    """Active policy binding client to product, no end date."""
    created = office.policies.create_policy(
        {"client_id": client.id, "product_id": product.id, "start_date": "2024-06-01"}
    )
    return created.record


@pytest.fixture
def claim(office, client, product, policy):
    """Pending claim under the active policy."""
    created = office.claims.create_claim(
        {
            "client_id": client.id,
            "product_id": product.id,
            "amount": 4200.0,
            "description": "Vehicle damage from accident",
        }
    )
    return created.record
