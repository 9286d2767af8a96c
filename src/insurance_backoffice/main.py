"""CLI entry point for the insurance back-office.

Administrative commands over the local store: initialise and seed the
database, inspect policies, claims, clients and audit history, and renew
policies.
"""

import json
import logging
import sys
from pathlib import Path

# Ensure src is on path when run as script
if __name__ == "__main__" and str(Path(__file__).resolve().parent.parent) not in sys.path:
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


def _setup_logging() -> None:
    """Configure logging for CLI usage."""
    from insurance_backoffice.observability import get_logger

    get_logger("insurance_backoffice")
    logging.getLogger("insurance_backoffice").setLevel(
        logging.DEBUG if "--debug" in sys.argv else logging.INFO
    )


def _usage() -> str:
    return """Usage:
  backoffice init                          Create the database schema
  backoffice seed                          Load the sample catalogue into an empty store
  backoffice policies [status]             List policies (effective status filter)
  backoffice claim <claim_id>              Show a claim
  backoffice client <client_id>            Show a client with its policies
  backoffice history <entity> <id>         Show the audit log (product|client|policy|claim)
  backoffice stats [report]                Show claims (default), dashboard, summary or activity
  backoffice renew <policy_id> [months]    Renew a policy (default 12 months)

Options:
  --debug                                  Enable debug logging
  --json                                   Use JSON log format
"""


def _print(value) -> None:
    from pydantic import BaseModel

    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    elif isinstance(value, list):
        value = [v.model_dump(mode="json") if isinstance(v, BaseModel) else v for v in value]
    print(json.dumps(value, indent=2, default=str))


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _int_arg(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError:
        _fail(f"{name} must be an integer: {value}")


def cmd_init() -> None:
    """Create the database schema at BACKOFFICE_DB_PATH."""
    from insurance_backoffice.db.database import get_db_path, init_db

    init_db()
    print(f"Database initialised: {get_db_path()}")


def cmd_seed() -> None:
    """Load sample products, clients, policies and claims."""
    from insurance_backoffice.db.seed import seed_sample_data

    inserted = seed_sample_data()
    if not any(inserted.values()):
        print("Sample data already present; nothing inserted.")
        return
    _print(inserted)


def cmd_policies(status: str | None = None) -> None:
    from insurance_backoffice.engine import BackOffice

    _print(BackOffice().policies.list_policies(status=status))


def cmd_claim(claim_id: int) -> None:
    """Print one claim."""
    from insurance_backoffice.engine import BackOffice

    _print(BackOffice().claims.get_claim(claim_id))


def cmd_client(client_id: int) -> None:
    """Print one client with its policies."""
    from insurance_backoffice.engine import BackOffice

    _print(BackOffice().clients.get_client(client_id))


def cmd_history(entity_type: str, entity_id: int) -> None:
    """Print the audit log of an entity."""
    from insurance_backoffice.engine import BackOffice

    _print(BackOffice().get_history(entity_type, entity_id))


STATS_REPORTS = ("claims", "dashboard", "summary", "activity")


def cmd_stats(report: str = "claims") -> None:
    """Print one of the aggregate reports (see STATS_REPORTS)."""
    from insurance_backoffice.engine import BackOffice

    office = BackOffice()
    if report == "claims":
        _print(office.claims.claim_stats())
    elif report == "dashboard":
        _print(office.reports.dashboard_stats())
    elif report == "summary":
        _print(office.reports.summary_report())
    else:
        _print(office.reports.recent_activity())


def cmd_renew(policy_id: int, months: int | None = None) -> None:
    """Renew a policy and print it."""
    from insurance_backoffice.engine import BackOffice

    _print(BackOffice().policies.renew_policy(policy_id, months=months))


def _dispatch(argv: list[str]) -> None:
    first = argv[0].lower()

    if first == "init":
        cmd_init()
        return
    if first == "seed":
        cmd_seed()
        return
    if first == "stats":
        report = argv[1].lower() if len(argv) > 1 else "claims"
        if report not in STATS_REPORTS:
            choices = ", ".join(STATS_REPORTS)
            print(f"Error: stats report must be one of: {choices}", file=sys.stderr)
            sys.exit(1)
        cmd_stats(report)
        return
    if first == "policies":
        cmd_policies(argv[1] if len(argv) > 1 else None)
        return

    # Commands that require an id argument
    if first in ("claim", "client"):
        if len(argv) < 2:
            print(f"Error: {first} requires <{first}_id>", file=sys.stderr)
            print(_usage(), file=sys.stderr)
            sys.exit(1)
        entity_id = _int_arg(argv[1], f"{first}_id")
        if first == "claim":
            cmd_claim(entity_id)
        else:
            cmd_client(entity_id)
        return

    if first == "history":
        if len(argv) < 3:
            print("Error: history requires <entity> <id>", file=sys.stderr)
            print(_usage(), file=sys.stderr)
            sys.exit(1)
        cmd_history(argv[1], _int_arg(argv[2], "id"))
        return

    if first == "renew":
        if len(argv) < 2:
            print("Error: renew requires <policy_id>", file=sys.stderr)
            print(_usage(), file=sys.stderr)
            sys.exit(1)
        months = _int_arg(argv[2], "months") if len(argv) > 2 else None
        cmd_renew(_int_arg(argv[1], "policy_id"), months)
        return

    print(f"Error: Unknown command: {first}", file=sys.stderr)
    print(_usage(), file=sys.stderr)
    sys.exit(1)


def main() -> None:
    """Run a back-office command: init, seed, policies, claim, client, history, stats, renew."""
    import os

    from insurance_backoffice.errors import DomainError

    # Handle global options
    argv = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    options = [arg for arg in sys.argv[1:] if arg.startswith("--")]

    # Set log format from options
    if "--json" in options:
        os.environ["BACKOFFICE_LOG_FORMAT"] = "json"
    if "--debug" in options:
        os.environ["BACKOFFICE_LOG_LEVEL"] = "DEBUG"

    # Initialize logging
    _setup_logging()

    if not argv:
        print(_usage(), file=sys.stderr)
        sys.exit(1)

    try:
        _dispatch(argv)
    except DomainError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.details:
            print(json.dumps(e.details, indent=2, default=str), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
