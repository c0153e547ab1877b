"""Dashboard read models.

All values here are point-in-time snapshots computed on request.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..enums import PrescriptionStatus
from .activity import RecentActivity
from .patient import Patient


@dataclass(frozen=True)
class DashboardStats:
    total_patients: int
    recent_prescriptions: int  # trailing 7 days
    todays_prescriptions: int  # local calendar day
    active_patients: int  # distinct patients prescribed in trailing 30 days


@dataclass
class LatestPrescription:
    id: str
    consultation_date: datetime
    pdf_url: str
    status: PrescriptionStatus


@dataclass
class PatientWithLatestPrescription:
    patient: Patient
    latest_prescription: Optional[LatestPrescription] = None


@dataclass
class DashboardData:
    stats: DashboardStats
    recent_patients: List[PatientWithLatestPrescription] = field(default_factory=list)
    recent_activities: List[RecentActivity] = field(default_factory=list)


@dataclass
class DailyStatsSnapshot:
    """Dated dashboard counters persisted by ``update_dashboard_stats``."""

    stats_id: str
    date: datetime
    total_patients: int
    total_prescriptions: int
    prescriptions_today: int
    prescriptions_this_week: int
    prescriptions_this_month: int
    active_patients: int
    last_updated: datetime

    @staticmethod
    def id_for(day: datetime) -> str:
        return f"stats_{day.year}_{day.month:02d}_{day.day:02d}"
