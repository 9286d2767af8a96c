"""Dashboard figures, recent activity and the summary report."""

from collections import Counter
from datetime import date
from typing import Any

from insurance_backoffice.db.repository import ReportRepository
from insurance_backoffice.errors import InvalidArgumentError
from insurance_backoffice.models.entities import ActivityItem, DashboardStats, SummaryReport
from insurance_backoffice.models.enums import EntityType, PolicyStatus
from insurance_backoffice.observability import get_logger
from insurance_backoffice.rules.dates import Clock, system_today
from insurance_backoffice.rules.status import effective_policy_status

logger = get_logger(__name__)

DEFAULT_ACTIVITY_LIMIT = 10


def _describe(row: dict[str, Any]) -> str:
    if row["type"] == EntityType.CLIENT.value:
        return f"New client: {row['client_name']}"
    if row["type"] == EntityType.POLICY.value:
        return f"New policy: {row['policy_number']} for {row['client_name']}"
    return f"New claim: ${row['amount']:,.2f} from {row['client_name']}"


class ReportService:
    """Read-only aggregates over the whole book of business."""

    def __init__(self, db_path: str | None = None, clock: Clock = system_today):
        self._reports = ReportRepository(db_path)
        self._clock = clock

    def _policy_totals(self) -> tuple[Counter, float]:
        """Policy counts per effective status and the monthly premium in force."""
        today = self._clock()
        counts: Counter = Counter()
        monthly = 0.0
        for row in self._reports.policy_premiums():
            end = date.fromisoformat(row["end_date"]) if row["end_date"] else None
            status = effective_policy_status(row["status"], end, today)
            counts[status] += 1
            if status == PolicyStatus.ACTIVE:
                monthly += row["premium"]
        return counts, monthly

    def dashboard_stats(self) -> DashboardStats:
        counts = self._reports.counts()
        policies, monthly = self._policy_totals()
        return DashboardStats(
            total_products=counts["total_products"],
            active_clients=counts["active_clients"],
            pending_claims=counts["pending_claims"],
            active_policies=policies[PolicyStatus.ACTIVE],
            total_revenue=round(monthly * 12, 2),
        )

    def recent_activity(self, limit: int = DEFAULT_ACTIVITY_LIMIT) -> list[ActivityItem]:
        """Latest client, policy and claim creations, newest first."""
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidArgumentError(
                "Limit must be a positive integer", details={"limit": limit}
            )
        return [
            ActivityItem(
                type=row["type"],
                entity_id=row["entity_id"],
                description=_describe(row),
                timestamp=row["timestamp"],
            )
            for row in self._reports.recent_activity(limit)
        ]

    def summary_report(self) -> SummaryReport:
        """Counts per status, premium in force and claims paid.

        Policy figures follow the effective status, so a lapsed active policy
        counts as expired and adds nothing to monthly revenue.
        """
        counts = self._reports.counts()
        policies, monthly = self._policy_totals()
        report = SummaryReport(
            total_products=counts["active_products"],
            active_clients=counts["active_clients"],
            inactive_clients=counts["inactive_clients"],
            active_policies=policies[PolicyStatus.ACTIVE],
            expired_policies=policies[PolicyStatus.EXPIRED],
            cancelled_policies=policies[PolicyStatus.CANCELLED],
            suspended_policies=policies[PolicyStatus.SUSPENDED],
            pending_claims=counts["pending_claims"],
            approved_claims=counts["approved_claims"],
            rejected_claims=counts["rejected_claims"],
            monthly_revenue=round(monthly, 2),
            total_claims_paid=counts["total_claims_paid"],
        )
        logger.debug("summary report built for %s", self._clock().isoformat())
        return report
