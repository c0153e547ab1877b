"""Dashboard aggregates of the data access facade.

Counts are re-derived from the patients and prescriptions collections on every
call; nothing here reads a precomputed counter. Stored timestamps are naive
UTC, while "today", "this week" and "this month" follow the caller's local
calendar.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from ...domain.entities.activity import RecentActivity
from ...domain.entities.dashboard import (
    DailyStatsSnapshot,
    DashboardData,
    DashboardStats,
    LatestPrescription,
    PatientWithLatestPrescription,
)
from ...domain.value_objects.patient_id import PatientId
from ..ports.repositories.activity_repo import ActivityRepository
from ..ports.repositories.dashboard_stats_repo import DashboardStatsRepository
from ..ports.repositories.patient_repo import PatientRepository
from ..ports.repositories.prescription_repo import PrescriptionRepository

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(days=7)
ACTIVE_WINDOW = timedelta(days=30)


def _local_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now().astimezone()
    if now.tzinfo is None:
        # naive values are taken as UTC, like everything we store
        return now.replace(tzinfo=timezone.utc)
    return now


def _to_storage(moment: datetime) -> datetime:
    """Aware datetime -> naive UTC as stored in the database."""
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def _local_day_bounds(now: datetime) -> Tuple[datetime, datetime]:
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return _to_storage(start), _to_storage(start + timedelta(days=1))


class DashboardService:
    """Point-in-time dashboard statistics and feeds."""

    def __init__(
        self,
        patient_repository: PatientRepository,
        prescription_repository: PrescriptionRepository,
        activity_repository: ActivityRepository,
        stats_repository: Optional[DashboardStatsRepository] = None,
    ):
        self._patient_repository = patient_repository
        self._prescription_repository = prescription_repository
        self._activity_repository = activity_repository
        self._stats_repository = stats_repository

    async def get_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        """Recompute the four headline counts."""
        local_now = _local_now(now)
        now_utc = _to_storage(local_now)
        today_start, today_end = _local_day_bounds(local_now)

        total_patients = await self._patient_repository.count_active()
        recent_prescriptions = await self._prescription_repository.count_created_between(
            start=now_utc - RECENT_WINDOW
        )
        todays_prescriptions = await self._prescription_repository.count_created_between(
            start=today_start, end=today_end
        )
        active_patient_ids = await self._prescription_repository.distinct_patient_ids_since(
            now_utc - ACTIVE_WINDOW
        )

        return DashboardStats(
            total_patients=total_patients,
            recent_prescriptions=recent_prescriptions,
            todays_prescriptions=todays_prescriptions,
            active_patients=len(active_patient_ids),
        )

    async def get_recent_patients_with_prescriptions(
        self, limit: int = 5
    ) -> List[PatientWithLatestPrescription]:
        """Patients behind the most recent prescriptions, each with that prescription."""
        results: List[PatientWithLatestPrescription] = []
        for prescription in await self._prescription_repository.find_recent(limit):
            patient = await self._patient_repository.find_by_id(
                PatientId(prescription.patient_id)
            )
            if patient is None:
                continue
            results.append(
                PatientWithLatestPrescription(
                    patient=patient,
                    latest_prescription=LatestPrescription(
                        id=prescription.prescription_id.value,
                        consultation_date=prescription.consultation_info.consultation_date,
                        pdf_url=prescription.document.pdf_url,
                        status=prescription.status,
                    ),
                )
            )
        return results

    async def get_recent_activities(self, limit: int = 10) -> List[RecentActivity]:
        return await self._activity_repository.find_recent(limit)

    async def get_dashboard_data(self, now: Optional[datetime] = None) -> DashboardData:
        return DashboardData(
            stats=await self.get_stats(now),
            recent_patients=await self.get_recent_patients_with_prescriptions(5),
            recent_activities=await self.get_recent_activities(10),
        )

    async def update_dashboard_stats(
        self, now: Optional[datetime] = None
    ) -> DailyStatsSnapshot:
        """Compute and upsert today's dated statistics snapshot."""
        if self._stats_repository is None:
            raise RuntimeError("No dashboard stats repository configured")

        local_now = _local_now(now)
        now_utc = _to_storage(local_now)
        today_start, today_end = _local_day_bounds(local_now)

        midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
        # weeks start on Sunday
        week_start = _to_storage(midnight - timedelta(days=(midnight.weekday() + 1) % 7))
        month_start = _to_storage(midnight.replace(day=1))

        snapshot = DailyStatsSnapshot(
            stats_id=DailyStatsSnapshot.id_for(local_now),
            date=now_utc,
            total_patients=await self._patient_repository.count_active(),
            total_prescriptions=await self._prescription_repository.count_created_between(),
            prescriptions_today=await self._prescription_repository.count_created_between(
                start=today_start, end=today_end
            ),
            prescriptions_this_week=await self._prescription_repository.count_created_between(
                start=week_start
            ),
            prescriptions_this_month=await self._prescription_repository.count_created_between(
                start=month_start
            ),
            active_patients=len(
                await self._prescription_repository.distinct_patient_ids_since(
                    now_utc - ACTIVE_WINDOW
                )
            ),
            last_updated=datetime.utcnow(),
        )
        saved = await self._stats_repository.upsert(snapshot)
        logger.info("Dashboard stats snapshot updated", extra={"stats_id": saved.stats_id})
        return saved
