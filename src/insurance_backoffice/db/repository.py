"""Repositories for products, clients, policies, claims and the audit log.

Each method opens its own connection; a write and its audit entry share one
transaction. Rows are returned as plain dicts.
"""

import re
import sqlite3
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from insurance_backoffice.db.constants import (
    AUDIT_ACTIONS,
    AUDIT_TABLE,
    CLAIMS_TABLE,
    CLIENTS_TABLE,
    POLICIES_TABLE,
    PRODUCTS_TABLE,
)
from insurance_backoffice.db.database import get_connection
from insurance_backoffice.utils.retry import with_db_retry

_UNIQUE_RE = re.compile(r"UNIQUE constraint failed: (.+)")


class UniqueViolation(Exception):
    """A write was refused by a uniqueness constraint of the store."""

    def __init__(self, table: str, columns: list[str]):
        self.table = table
        self.columns = columns
        super().__init__(f"Unique constraint failed on {table}({', '.join(columns)})")


@dataclass
class AuditRecord:
    """Audit entry to write alongside a change; entity_id is filled in by the repository."""

    entity_type: str
    action: str
    old_status: str | None = None
    new_status: str | None = None
    details: str | None = None

    def __post_init__(self):
        if self.action not in AUDIT_ACTIONS:
            raise ValueError(f"Unknown audit action: {self.action}")


def _to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def _raise_unique(exc: sqlite3.IntegrityError) -> None:
    """Re-raise a UNIQUE failure as UniqueViolation; other integrity errors pass through."""
    match = _UNIQUE_RE.search(str(exc))
    if not match:
        raise exc
    qualified = [c.strip() for c in match.group(1).split(",")]
    table = qualified[0].split(".")[0]
    columns = [c.split(".", 1)[-1] for c in qualified]
    raise UniqueViolation(table, columns) from exc


def _write_audit(conn: sqlite3.Connection, entity_id: int, audit: AuditRecord) -> None:
    conn.execute(
        f"""
        INSERT INTO {AUDIT_TABLE} (entity_type, entity_id, action, old_status, new_status, details)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            audit.entity_type,
            entity_id,
            audit.action,
            audit.old_status,
            audit.new_status,
            audit.details or "",
        ),
    )


class _TableRepository:
    """Generic CRUD primitives against one table."""

    table: str = ""

    def __init__(self, db_path: str | None = None):
        self._db_path = db_path

    @with_db_retry()
    def get(self, entity_id: int) -> dict[str, Any] | None:
        """Fetch a row by id."""
        with get_connection(self._db_path) as conn:
            row = conn.execute(
                f"SELECT * FROM {self.table} WHERE id = ?", (entity_id,)
            ).fetchone()
        if row is None:
            return None
        return dict(row)

    @with_db_retry()
    def insert(self, values: dict[str, Any], audit: AuditRecord | None = None) -> int:
        """Insert a row and return its id. Raises UniqueViolation on duplicates."""
        columns = list(values)
        placeholders = ", ".join("?" for _ in columns)
        params = [_to_db(values[c]) for c in columns]
        with get_connection(self._db_path) as conn:
            try:
                cur = conn.execute(
                    f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({placeholders})",
                    params,
                )
            except sqlite3.IntegrityError as e:
                _raise_unique(e)
            new_id = cur.lastrowid
            if audit is not None:
                _write_audit(conn, new_id, audit)
        return new_id

    @with_db_retry()
    def update(
        self,
        entity_id: int,
        fields: dict[str, Any],
        audit: AuditRecord | None = None,
    ) -> bool:
        """Update fields on a row; stamps updated_at. Returns False when the row is absent."""
        updates = [f"{column} = ?" for column in fields]
        updates.append("updated_at = datetime('now')")
        params: list[Any] = [_to_db(v) for v in fields.values()]
        params.append(entity_id)
        with get_connection(self._db_path) as conn:
            try:
                cur = conn.execute(
                    f"UPDATE {self.table} SET {', '.join(updates)} WHERE id = ?",
                    params,
                )
            except sqlite3.IntegrityError as e:
                _raise_unique(e)
            if cur.rowcount == 0:
                return False
            if audit is not None:
                _write_audit(conn, entity_id, audit)
        return True

    @with_db_retry()
    def delete(self, entity_id: int, audit: AuditRecord | None = None) -> bool:
        """Delete a row by id. Returns False when the row is absent."""
        with get_connection(self._db_path) as conn:
            cur = conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (entity_id,))
            if cur.rowcount == 0:
                return False
            if audit is not None:
                _write_audit(conn, entity_id, audit)
        return True

    @with_db_retry()
    def count(self, **criteria: Any) -> int:
        """Count rows matching all column=value criteria (None values are ignored)."""
        clauses = []
        params: list[Any] = []
        for column, value in criteria.items():
            if value is None:
                continue
            clauses.append(f"{column} = ?")
            params.append(_to_db(value))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        with get_connection(self._db_path) as conn:
            row = conn.execute(
                f"SELECT COUNT(*) AS n FROM {self.table}{where}", params
            ).fetchone()
        return int(row["n"])

    def _select(self, query: str, params: list[Any] | tuple = ()) -> list[dict[str, Any]]:
        with get_connection(self._db_path) as conn:
            rows = conn.execute(query, params).fetchall()
        return [dict(r) for r in rows]


class ProductRepository(_TableRepository):
    """Repository for the product catalogue."""

    table = PRODUCTS_TABLE

    @with_db_retry()
    def find_all(
        self,
        product_type: str | None = None,
        active: bool | None = None,
    ) -> list[dict[str, Any]]:
        query = f"SELECT * FROM {self.table} WHERE 1=1"
        params: list[Any] = []
        if product_type:
            query += " AND type = ?"
            params.append(_to_db(product_type))
        if active is not None:
            query += " AND is_active = ?"
            params.append(int(active))
        query += " ORDER BY created_at DESC, id DESC"
        return self._select(query, params)

    @with_db_retry()
    def search(self, term: str) -> list[dict[str, Any]]:
        """Active products whose name, type or description contains term."""
        like = f"%{term}%"
        return self._select(
            f"""
            SELECT * FROM {self.table}
            WHERE (name LIKE ? OR type LIKE ? OR description LIKE ?)
              AND is_active = 1
            ORDER BY name
            """,
            (like, like, like),
        )


class ClientRepository(_TableRepository):
    """Repository for clients."""

    table = CLIENTS_TABLE

    @with_db_retry()
    def find_all(self, status: str | None = None) -> list[dict[str, Any]]:
        query = f"SELECT * FROM {self.table} WHERE 1=1"
        params: list[Any] = []
        if status:
            query += " AND status = ?"
            params.append(_to_db(status))
        query += " ORDER BY created_at DESC, id DESC"
        return self._select(query, params)

    @with_db_retry()
    def search(self, term: str) -> list[dict[str, Any]]:
        like = f"%{term}%"
        return self._select(
            f"""
            SELECT * FROM {self.table}
            WHERE name LIKE ? OR email LIKE ? OR phone LIKE ?
            ORDER BY name
            """,
            (like, like, like),
        )


_POLICY_DETAILS_SQL = f"""
    SELECT
        p.*,
        c.name AS client_name,
        c.email AS client_email,
        pr.name AS product_name,
        pr.type AS product_type,
        pr.premium AS monthly_premium,
        pr.coverage AS coverage
    FROM {POLICIES_TABLE} p
    INNER JOIN {CLIENTS_TABLE} c ON p.client_id = c.id
    INNER JOIN {PRODUCTS_TABLE} pr ON p.product_id = pr.id
"""


class PolicyRepository(_TableRepository):
    """Repository for policies (client-product bindings)."""

    table = POLICIES_TABLE

    @with_db_retry()
    def find_binding(self, client_id: int, product_id: int) -> dict[str, Any] | None:
        """The policy binding client and product, if any."""
        with get_connection(self._db_path) as conn:
            row = conn.execute(
                f"SELECT * FROM {self.table} WHERE client_id = ? AND product_id = ?",
                (client_id, product_id),
            ).fetchone()
        return None if row is None else dict(row)

    @with_db_retry()
    def find_all(
        self,
        client_id: int | None = None,
        product_id: int | None = None,
    ) -> list[dict[str, Any]]:
        """Raw policy rows, optionally restricted to a client and/or product."""
        query = f"SELECT * FROM {self.table} WHERE 1=1"
        params: list[Any] = []
        if client_id is not None:
            query += " AND client_id = ?"
            params.append(client_id)
        if product_id is not None:
            query += " AND product_id = ?"
            params.append(product_id)
        return self._select(query, params)

    @with_db_retry()
    def get_details(self, policy_id: int) -> dict[str, Any] | None:
        """Policy joined with client and product fields."""
        rows = self._select(_POLICY_DETAILS_SQL + " WHERE p.id = ?", (policy_id,))
        return rows[0] if rows else None

    @with_db_retry()
    def list_details(
        self,
        client_id: int | None = None,
        product_id: int | None = None,
    ) -> list[dict[str, Any]]:
        query = _POLICY_DETAILS_SQL + " WHERE 1=1"
        params: list[Any] = []
        if client_id is not None:
            query += " AND p.client_id = ?"
            params.append(client_id)
        if product_id is not None:
            query += " AND p.product_id = ?"
            params.append(product_id)
        query += " ORDER BY p.created_at DESC, p.id DESC"
        return self._select(query, params)

    @with_db_retry()
    def search_details(self, term: str) -> list[dict[str, Any]]:
        """Policies whose number, client name/email or product name contains term."""
        like = f"%{term}%"
        return self._select(
            _POLICY_DETAILS_SQL
            + """
            WHERE p.policy_number LIKE ?
               OR c.name LIKE ?
               OR c.email LIKE ?
               OR pr.name LIKE ?
            ORDER BY p.created_at DESC, p.id DESC
            """,
            (like, like, like, like),
        )


_CLAIM_DETAILS_SQL = f"""
    SELECT
        cl.*,
        c.name AS client_name,
        c.email AS client_email,
        pr.name AS product_name,
        pr.type AS product_type,
        pr.coverage AS coverage
    FROM {CLAIMS_TABLE} cl
    INNER JOIN {CLIENTS_TABLE} c ON cl.client_id = c.id
    INNER JOIN {PRODUCTS_TABLE} pr ON cl.product_id = pr.id
"""


class ClaimRepository(_TableRepository):
    """Repository for claims."""

    table = CLAIMS_TABLE

    @with_db_retry()
    def get_details(self, claim_id: int) -> dict[str, Any] | None:
        """Claim joined with client and product fields."""
        rows = self._select(_CLAIM_DETAILS_SQL + " WHERE cl.id = ?", (claim_id,))
        return rows[0] if rows else None

    @with_db_retry()
    def list_details(
        self,
        status: str | None = None,
        client_id: int | None = None,
        product_id: int | None = None,
    ) -> list[dict[str, Any]]:
        query = _CLAIM_DETAILS_SQL + " WHERE 1=1"
        params: list[Any] = []
        if status:
            query += " AND cl.status = ?"
            params.append(_to_db(status))
        if client_id is not None:
            query += " AND cl.client_id = ?"
            params.append(client_id)
        if product_id is not None:
            query += " AND cl.product_id = ?"
            params.append(product_id)
        query += " ORDER BY cl.created_at DESC, cl.id DESC"
        return self._select(query, params)

    @with_db_retry()
    def stats(self) -> dict[str, Any]:
        """Counts per status plus approved and pending totals."""
        with get_connection(self._db_path) as conn:
            row = conn.execute(
                f"""
                SELECT
                    COUNT(*) AS total_claims,
                    COUNT(CASE WHEN status = 'pending' THEN 1 END) AS pending_claims,
                    COUNT(CASE WHEN status = 'approved' THEN 1 END) AS approved_claims,
                    COUNT(CASE WHEN status = 'rejected' THEN 1 END) AS rejected_claims,
                    COALESCE(SUM(CASE WHEN status = 'approved' THEN amount ELSE 0 END), 0)
                        AS total_approved_amount,
                    COALESCE(SUM(CASE WHEN status = 'pending' THEN amount ELSE 0 END), 0)
                        AS total_pending_amount
                FROM {self.table}
                """
            ).fetchone()
        return dict(row)


class AuditRepository:
    """Read access to the status audit log; entries are written with the change they describe."""

    def __init__(self, db_path: str | None = None):
        self._db_path = db_path

    @with_db_retry()
    def history(self, entity_type: str, entity_id: int) -> list[dict[str, Any]]:
        """Audit entries for one entity, oldest first."""
        with get_connection(self._db_path) as conn:
            rows = conn.execute(
                f"""
                SELECT id, entity_type, entity_id, action, old_status, new_status, details, created_at
                FROM {AUDIT_TABLE}
                WHERE entity_type = ? AND entity_id = ?
                ORDER BY id ASC
                """,
                (entity_type, entity_id),
            ).fetchall()
        return [dict(r) for r in rows]


class ReportRepository:
    """Cross-table aggregates for the dashboard and the summary report."""

    def __init__(self, db_path: str | None = None):
        self._db_path = db_path

    @with_db_retry()
    def counts(self) -> dict[str, Any]:
        """Product, client and claim counts plus the approved claim total."""
        with get_connection(self._db_path) as conn:
            row = conn.execute(
                f"""
                SELECT
                    (SELECT COUNT(*) FROM {PRODUCTS_TABLE}) AS total_products,
                    (SELECT COUNT(*) FROM {PRODUCTS_TABLE} WHERE is_active = 1) AS active_products,
                    (SELECT COUNT(*) FROM {CLIENTS_TABLE} WHERE status = 'active') AS active_clients,
                    (SELECT COUNT(*) FROM {CLIENTS_TABLE} WHERE status = 'inactive')
                        AS inactive_clients,
                    (SELECT COUNT(*) FROM {CLAIMS_TABLE} WHERE status = 'pending') AS pending_claims,
                    (SELECT COUNT(*) FROM {CLAIMS_TABLE} WHERE status = 'approved')
                        AS approved_claims,
                    (SELECT COUNT(*) FROM {CLAIMS_TABLE} WHERE status = 'rejected')
                        AS rejected_claims,
                    (SELECT COALESCE(SUM(amount), 0) FROM {CLAIMS_TABLE} WHERE status = 'approved')
                        AS total_claims_paid
                """
            ).fetchone()
        return dict(row)

    @with_db_retry()
    def policy_premiums(self) -> list[dict[str, Any]]:
        """Stored status, end date and monthly premium of every policy."""
        with get_connection(self._db_path) as conn:
            rows = conn.execute(
                f"""
                SELECT p.id, p.status, p.end_date, pr.premium
                FROM {POLICIES_TABLE} p
                INNER JOIN {PRODUCTS_TABLE} pr ON p.product_id = pr.id
                """
            ).fetchall()
        return [dict(r) for r in rows]

    @with_db_retry()
    def recent_activity(self, limit: int) -> list[dict[str, Any]]:
        """Newest client, policy and claim creations, most recent first."""
        with get_connection(self._db_path) as conn:
            rows = conn.execute(
                f"""
                SELECT 'client' AS type, c.id AS entity_id, c.name AS client_name,
                       NULL AS policy_number, NULL AS amount, c.created_at AS timestamp
                FROM {CLIENTS_TABLE} c
                UNION ALL
                SELECT 'policy', p.id, c.name, p.policy_number, NULL, p.created_at
                FROM {POLICIES_TABLE} p
                INNER JOIN {CLIENTS_TABLE} c ON p.client_id = c.id
                UNION ALL
                SELECT 'claim', cl.id, c.name, NULL, cl.amount, cl.created_at
                FROM {CLAIMS_TABLE} cl
                INNER JOIN {CLIENTS_TABLE} c ON cl.client_id = c.id
                ORDER BY timestamp DESC, entity_id DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [dict(r) for r in rows]
