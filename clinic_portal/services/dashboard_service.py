"""
Service layer for the staff dashboard headline numbers.

Revenue is aggregated in memory from the service agreements table.
"""
import logging
from collections import Counter
from datetime import datetime
from typing import Optional

from repositories import ServiceAgreementRepository
from schemas.dashboard import DashboardStats, ProgramCount
from core.datetime_utils import month_bounds, parse_datetime_safe, previous_month_bounds, utc_now
from core.validators import normalize_email

logger = logging.getLogger(__name__)

PROGRAM_LABELS = {
    "neurological": "Neurological",
    "mental_health": "Mental Health",
    "addiction": "Addiction",
}


def revenue_change_percent(current: float, previous: float) -> Optional[float]:
    """Rounded month-over-month change; 100 when growing from zero; None otherwise."""
    if previous > 0:
        return float(round((current - previous) / previous * 100))
    if current > 0:
        return 100.0
    return None


class DashboardService:
    """Revenue, client and program statistics."""

    def __init__(self, agreement_repository: ServiceAgreementRepository):
        self._agreement_repo = agreement_repository

    def get_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        now = now or utc_now()
        this_start, this_end = month_bounds(now)
        last_start, last_end = previous_month_bounds(now)

        agreements = self._agreement_repo.list_all()

        total_revenue = 0.0
        monthly_revenue = 0.0
        last_month_revenue = 0.0
        clients = set()
        programs: Counter = Counter()

        for agreement in agreements:
            fee = float(agreement.get("total_program_fee") or 0)
            total_revenue += fee

            client_key = agreement.get("patient_id") or normalize_email(agreement.get("patient_email"))
            if client_key:
                clients.add(client_key)

            if agreement.get("program_type"):
                programs[agreement["program_type"]] += 1

            if not agreement.get("is_activated"):
                continue
            activated_at = parse_datetime_safe(agreement.get("activated_at"))
            if activated_at is None:
                continue
            if this_start <= activated_at < this_end:
                monthly_revenue += fee
            elif last_start <= activated_at < last_end:
                last_month_revenue += fee

        programs_by_type = [
            ProgramCount(program_type=key, label=label, count=programs.get(key, 0))
            for key, label in PROGRAM_LABELS.items()
        ]

        return DashboardStats(
            total_revenue=total_revenue,
            total_client_count=len(clients),
            monthly_revenue=monthly_revenue,
            last_month_revenue=last_month_revenue,
            monthly_revenue_change_percent=revenue_change_percent(monthly_revenue, last_month_revenue),
            programs_by_type=programs_by_type,
        )
