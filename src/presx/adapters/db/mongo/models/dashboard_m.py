"""
MongoDB Beanie models behind the dashboard: the activity feed and dated
statistics snapshots.
"""

from datetime import datetime
from typing import Optional

from beanie import Document
from pydantic import Field


class RecentActivityMongo(Document):
    """Append-only activity log entry."""

    type: str = Field(..., description="patient_added, prescription_created or test_uploaded")
    patient_id: str
    patient_name: str
    prescription_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    description: str

    class Settings:
        name = "recentActivities"
        keep_nulls = False
        indexes = ["timestamp"]


class DashboardStatsMongo(Document):
    """Dashboard counters for one calendar day, keyed ``stats_YYYY_MM_DD``."""

    stats_id: str = Field(..., description="Dated snapshot ID")
    date: datetime
    total_patients: int = 0
    total_prescriptions: int = 0
    prescriptions_today: int = 0
    prescriptions_this_week: int = 0
    prescriptions_this_month: int = 0
    active_patients: int = 0
    last_updated: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "dashboardStats"
        indexes = ["stats_id"]
