"""Demo catalogue: sample products, clients, policies and claims.

Re-running does nothing once the products table holds any row.
"""

from datetime import date

from insurance_backoffice.db.constants import (
    CLAIMS_TABLE,
    CLIENTS_TABLE,
    POLICIES_TABLE,
    PRODUCTS_TABLE,
)
from insurance_backoffice.db.database import get_connection
from insurance_backoffice.observability import get_logger

logger = get_logger(__name__)

SAMPLE_PRODUCTS = [
    ("Comprehensive Life Insurance", "life", 150.00, 500000,
     "Complete life coverage with additional benefits for family protection."),
    ("Premium Health Coverage", "health", 220.00, 100000,
     "Comprehensive health insurance covering major medical expenses."),
    ("Auto Protection Plus", "auto", 85.00, 75000,
     "Full auto insurance with collision and comprehensive coverage."),
    ("Home Security Insurance", "home", 120.00, 300000,
     "Complete home protection against damages and theft."),
    ("Travel Safe Insurance", "travel", 45.00, 25000,
     "International travel insurance with medical and trip coverage."),
]

SAMPLE_CLIENTS = [
    ("John Smith", "john.smith@email.com", "(555) 123-4567", "1985-03-15",
     "123 Main St, City, State 12345"),
    ("Sarah Johnson", "sarah.j@email.com", "(555) 987-6543", "1990-07-22",
     "456 Oak Ave, City, State 12345"),
    ("Michael Brown", "michael.brown@email.com", "(555) 456-7890", "1988-11-08",
     "789 Pine Rd, City, State 12345"),
    ("Emily Davis", "emily.davis@email.com", "(555) 321-0987", "1992-05-20",
     "321 Elm St, City, State 12345"),
]

# (client index, product index, policy number); indexes are 1-based
SAMPLE_POLICIES = [
    (1, 1, "POL-LIFE-001"),
    (1, 2, "POL-HEALTH-001"),
    (2, 3, "POL-AUTO-001"),
    (3, 1, "POL-LIFE-002"),
    (3, 4, "POL-HOME-001"),
    (4, 2, "POL-HEALTH-002"),
    (4, 5, "POL-TRAVEL-001"),
]

SAMPLE_CLAIMS = [
    (1, 2, "CLM-001", 2500.00, "Medical expenses for routine surgery", "pending", "2024-10-15"),
    (2, 3, "CLM-002", 4200.00, "Vehicle damage from accident", "approved", "2024-10-10"),
    (3, 4, "CLM-003", 1500.00, "Water damage in kitchen", "pending", "2024-10-12"),
    (4, 5, "CLM-004", 800.00, "Flight cancellation compensation", "approved", "2024-10-08"),
]


def seed_sample_data(db_path: str | None = None, today: date | None = None) -> dict[str, int]:
    """Load the sample catalogue into an empty store.

    Policies start on ``today`` (default: the current date) with no end date.

    Returns:
        Rows inserted per table; all zero when the store already had products.
    """
    start = (today or date.today()).isoformat()
    inserted = {PRODUCTS_TABLE: 0, CLIENTS_TABLE: 0, POLICIES_TABLE: 0, CLAIMS_TABLE: 0}
    with get_connection(db_path) as conn:
        existing = conn.execute(f"SELECT COUNT(*) AS n FROM {PRODUCTS_TABLE}").fetchone()["n"]
        if existing:
            logger.info("Sample data already present (%d products); skipping", existing)
            return inserted

        product_ids = []
        for row in SAMPLE_PRODUCTS:
            cur = conn.execute(
                f"INSERT INTO {PRODUCTS_TABLE} (name, type, premium, coverage, description) "
                "VALUES (?, ?, ?, ?, ?)",
                row,
            )
            product_ids.append(cur.lastrowid)

        client_ids = []
        for row in SAMPLE_CLIENTS:
            cur = conn.execute(
                f"INSERT INTO {CLIENTS_TABLE} (name, email, phone, date_of_birth, address) "
                "VALUES (?, ?, ?, ?, ?)",
                row,
            )
            client_ids.append(cur.lastrowid)

        for client_idx, product_idx, number in SAMPLE_POLICIES:
            conn.execute(
                f"INSERT INTO {POLICIES_TABLE} (client_id, product_id, policy_number, start_date) "
                "VALUES (?, ?, ?, ?)",
                (client_ids[client_idx - 1], product_ids[product_idx - 1], number, start),
            )

        for client_idx, product_idx, number, amount, description, status, submitted in SAMPLE_CLAIMS:
            conn.execute(
                f"INSERT INTO {CLAIMS_TABLE} "
                "(client_id, product_id, claim_number, amount, description, status, submitted_date) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    client_ids[client_idx - 1],
                    product_ids[product_idx - 1],
                    number,
                    amount,
                    description,
                    status,
                    submitted,
                ),
            )

    inserted.update(
        {
            PRODUCTS_TABLE: len(SAMPLE_PRODUCTS),
            CLIENTS_TABLE: len(SAMPLE_CLIENTS),
            POLICIES_TABLE: len(SAMPLE_POLICIES),
            CLAIMS_TABLE: len(SAMPLE_CLAIMS),
        }
    )
    logger.info("Seeded sample data: %s", inserted)
    return inserted
