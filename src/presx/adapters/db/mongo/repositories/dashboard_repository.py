"""
MongoDB implementations of the activity feed and stats snapshot repositories.
"""

from dataclasses import asdict
from typing import List, Optional

from presx.application.ports.repositories.activity_repo import ActivityRepository
from presx.application.ports.repositories.dashboard_stats_repo import (
    DashboardStatsRepository,
)
from presx.domain.entities.activity import RecentActivity
from presx.domain.entities.dashboard import DailyStatsSnapshot
from presx.domain.enums import ActivityType

from ..models.dashboard_m import DashboardStatsMongo, RecentActivityMongo


class MongoActivityRepository(ActivityRepository):
    """MongoDB implementation of ActivityRepository."""

    async def append(self, activity: RecentActivity) -> RecentActivity:
        await RecentActivityMongo(**activity.to_record()).insert()
        return activity

    async def find_recent(self, limit: int = 10) -> List[RecentActivity]:
        activities_mongo = (
            await RecentActivityMongo.find().sort("-timestamp").limit(limit).to_list()
        )
        return [
            RecentActivity(
                type=ActivityType(a.type),
                patient_id=a.patient_id,
                patient_name=a.patient_name,
                description=a.description,
                prescription_id=a.prescription_id,
                timestamp=a.timestamp,
            )
            for a in activities_mongo
        ]


class MongoDashboardStatsRepository(DashboardStatsRepository):
    """MongoDB implementation of DashboardStatsRepository."""

    async def upsert(self, snapshot: DailyStatsSnapshot) -> DailyStatsSnapshot:
        existing = await DashboardStatsMongo.find_one(
            DashboardStatsMongo.stats_id == snapshot.stats_id
        )
        stats_mongo = DashboardStatsMongo(**asdict(snapshot))
        if existing is None:
            await stats_mongo.insert()
        else:
            stats_mongo.id = existing.id
            await stats_mongo.replace()
        return snapshot

    async def find_by_id(self, stats_id: str) -> Optional[DailyStatsSnapshot]:
        stats_mongo = await DashboardStatsMongo.find_one(
            DashboardStatsMongo.stats_id == stats_id
        )
        if not stats_mongo:
            return None
        return DailyStatsSnapshot(
            stats_id=stats_mongo.stats_id,
            date=stats_mongo.date,
            total_patients=stats_mongo.total_patients,
            total_prescriptions=stats_mongo.total_prescriptions,
            prescriptions_today=stats_mongo.prescriptions_today,
            prescriptions_this_week=stats_mongo.prescriptions_this_week,
            prescriptions_this_month=stats_mongo.prescriptions_this_month,
            active_patients=stats_mongo.active_patients,
            last_updated=stats_mongo.last_updated,
        )
