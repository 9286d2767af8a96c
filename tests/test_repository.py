"""Tests for the table repositories and the audit log."""

import sqlite3
from unittest.mock import patch

import pytest

from insurance_backoffice.db.repository import (
    AuditRecord,
    AuditRepository,
    ClaimRepository,
    ClientRepository,
    PolicyRepository,
    ProductRepository,
    UniqueViolation,
    _raise_unique,
)
from insurance_backoffice.models.enums import ProductType


def _product(repo, name="Life", type_="life", coverage=1000.0):
    return repo.insert({"name": name, "type": type_, "premium": 10.0, "coverage": coverage})


def test_insert_and_get(temp_db):
    """insert returns the new id; get returns the row as a dict."""
    repo = ProductRepository(temp_db)
    product_id = _product(repo)
    row = repo.get(product_id)
    assert row["name"] == "Life"
    assert row["is_active"] == 1
    assert repo.get(9999) is None


def test_insert_converts_enums_and_bools(temp_db):
    """Enum members and bools are stored as their plain values."""
    repo = ProductRepository(temp_db)
    product_id = repo.insert(
        {"name": "Trip", "type": ProductType.TRAVEL, "premium": 1, "coverage": 2, "is_active": False}
    )
    row = repo.get(product_id)
    assert row["type"] == "travel"
    assert row["is_active"] == 0


def test_update_missing_row_returns_false(temp_db):
    """update and delete report False for an unknown id."""
    repo = ProductRepository(temp_db)
    assert repo.update(42, {"name": "x"}) is False
    assert repo.delete(42) is False


def test_unique_violation_carries_columns(temp_db):
    """Duplicate emails raise UniqueViolation naming the table and column."""
    repo = ClientRepository(temp_db)
    repo.insert({"name": "A", "email": "a@example.com"})
    with pytest.raises(UniqueViolation) as exc_info:
        repo.insert({"name": "B", "email": "a@example.com"})
    assert exc_info.value.table == "clients"
    assert exc_info.value.columns == ["email"]


def test_raise_unique_passes_through_other_integrity_errors():
    """Non-unique integrity failures are re-raised unchanged."""
    err = sqlite3.IntegrityError("NOT NULL constraint failed: clients.name")
    with pytest.raises(sqlite3.IntegrityError):
        _raise_unique(err)


def test_pair_uniqueness_reports_both_columns(temp_db):
    """A second policy for the same pair fails on (client_id, product_id)."""
    products = ProductRepository(temp_db)
    clients = ClientRepository(temp_db)
    policies = PolicyRepository(temp_db)
    product_id = _product(products)
    client_id = clients.insert({"name": "A", "email": "a@example.com"})
    policies.insert(
        {"client_id": client_id, "product_id": product_id, "policy_number": "P1", "start_date": "2024-01-01"}
    )
    with pytest.raises(UniqueViolation) as exc_info:
        policies.insert(
            {"client_id": client_id, "product_id": product_id, "policy_number": "P2", "start_date": "2024-01-01"}
        )
    assert exc_info.value.columns == ["client_id", "product_id"]


def test_count_ignores_none_criteria(temp_db):
    """count filters on given columns and skips None values."""
    repo = ProductRepository(temp_db)
    _product(repo, name="A", type_="life")
    _product(repo, name="B", type_="auto")
    assert repo.count() == 2
    assert repo.count(type=ProductType.AUTO) == 1
    assert repo.count(type=None) == 2


def test_find_all_filters_and_orders_newest_first(temp_db):
    """find_all filters by type and active flag; newest rows come first."""
    repo = ProductRepository(temp_db)
    first = _product(repo, name="A", type_="life")
    second = _product(repo, name="B", type_="life")
    repo.update(first, {"is_active": False})
    assert [r["id"] for r in repo.find_all(product_type="life")] == [second, first]
    assert [r["id"] for r in repo.find_all(active=True)] == [second]


def test_product_search_only_active(temp_db):
    """Inactive products are hidden from search."""
    repo = ProductRepository(temp_db)
    active = _product(repo, name="Home Shield", type_="home")
    hidden = _product(repo, name="Home Legacy", type_="home")
    repo.update(hidden, {"is_active": False})
    assert [r["id"] for r in repo.search("Home")] == [active]


def test_policy_details_join(temp_db):
    """Policy details include client and product fields."""
    product_id = _product(ProductRepository(temp_db), name="Life Plus")
    client_id = ClientRepository(temp_db).insert({"name": "Ann", "email": "ann@example.com"})
    repo = PolicyRepository(temp_db)
    policy_id = repo.insert(
        {"client_id": client_id, "product_id": product_id, "policy_number": "POL-X", "start_date": "2024-01-01"}
    )
    row = repo.get_details(policy_id)
    assert row["client_name"] == "Ann"
    assert row["product_name"] == "Life Plus"
    assert row["coverage"] == 1000.0
    assert repo.find_binding(client_id, product_id)["id"] == policy_id
    assert [r["id"] for r in repo.search_details("ann@")] == [policy_id]


def test_claim_stats_empty(temp_db):
    """Stats over an empty table are zeros."""
    stats = ClaimRepository(temp_db).stats()
    assert stats["total_claims"] == 0
    assert stats["total_approved_amount"] == 0


def test_audit_written_with_change(temp_db):
    """Audit entries share the write's transaction and survive the row's deletion."""
    repo = ClientRepository(temp_db)
    audit = AuditRepository(temp_db)
    client_id = repo.insert(
        {"name": "A", "email": "a@example.com"},
        audit=AuditRecord("client", "created", new_status="active"),
    )
    repo.delete(client_id, audit=AuditRecord("client", "deleted"))
    history = audit.history("client", client_id)
    assert [h["action"] for h in history] == ["created", "deleted"]
    assert history[0]["new_status"] == "active"


def test_audit_record_rejects_unknown_action():
    """Only the known audit actions can be recorded."""
    with pytest.raises(ValueError, match="Unknown audit action"):
        AuditRecord("policy", "archived")
    assert AuditRecord("policy", "renewed", "cancelled", "active").action == "renewed"


def test_get_retries_on_locked_database(temp_db):
    """A transient lock error is retried and the call then succeeds."""
    repo = ProductRepository(temp_db)
    product_id = _product(repo)
    from insurance_backoffice.db import repository as repo_module

    real = repo_module.get_connection
    calls = []

    def flaky(path=None):
        calls.append(1)
        if len(calls) == 1:
            raise sqlite3.OperationalError("database is locked")
        return real(path)

    with patch.object(repo_module, "get_connection", side_effect=flaky):
        assert repo.get(product_id)["id"] == product_id
    assert len(calls) == 2
