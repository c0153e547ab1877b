"""
Pydantic schemas for dashboard endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ...domain.entities.activity import RecentActivity
from ...domain.entities.dashboard import (
    DailyStatsSnapshot,
    DashboardData,
    DashboardStats,
    PatientWithLatestPrescription,
)
from .patient import PatientResponse


class DashboardStatsSchema(BaseModel):
    total_patients: int = Field(..., description="Active patients")
    recent_prescriptions: int = Field(..., description="Prescriptions in the last 7 days")
    todays_prescriptions: int = Field(..., description="Prescriptions today")
    active_patients: int = Field(
        ..., description="Patients with a prescription in the last 30 days"
    )

    @classmethod
    def from_domain(cls, stats: DashboardStats) -> "DashboardStatsSchema":
        return cls(
            total_patients=stats.total_patients,
            recent_prescriptions=stats.recent_prescriptions,
            todays_prescriptions=stats.todays_prescriptions,
            active_patients=stats.active_patients,
        )


class LatestPrescriptionSchema(BaseModel):
    id: str
    consultation_date: datetime
    pdf_url: str
    status: str


class RecentPatientSchema(BaseModel):
    patient: PatientResponse
    latest_prescription: Optional[LatestPrescriptionSchema] = None

    @classmethod
    def from_domain(cls, item: PatientWithLatestPrescription) -> "RecentPatientSchema":
        latest = None
        if item.latest_prescription:
            latest = LatestPrescriptionSchema(
                id=item.latest_prescription.id,
                consultation_date=item.latest_prescription.consultation_date,
                pdf_url=item.latest_prescription.pdf_url,
                status=item.latest_prescription.status.value,
            )
        return cls(patient=PatientResponse.from_domain(item.patient), latest_prescription=latest)


class ActivitySchema(BaseModel):
    type: str
    patient_id: str
    patient_name: str
    prescription_id: Optional[str] = None
    timestamp: datetime
    description: str

    @classmethod
    def from_domain(cls, activity: RecentActivity) -> "ActivitySchema":
        return cls(**activity.to_record())


class DashboardResponse(BaseModel):
    stats: DashboardStatsSchema
    recent_patients: List[RecentPatientSchema]
    recent_activities: List[ActivitySchema]

    @classmethod
    def from_domain(cls, data: DashboardData) -> "DashboardResponse":
        return cls(
            stats=DashboardStatsSchema.from_domain(data.stats),
            recent_patients=[RecentPatientSchema.from_domain(p) for p in data.recent_patients],
            recent_activities=[ActivitySchema.from_domain(a) for a in data.recent_activities],
        )


class StatsSnapshotSchema(BaseModel):
    stats_id: str
    date: datetime
    total_patients: int
    total_prescriptions: int
    prescriptions_today: int
    prescriptions_this_week: int
    prescriptions_this_month: int
    active_patients: int
    last_updated: datetime

    @classmethod
    def from_domain(cls, snapshot: DailyStatsSnapshot) -> "StatsSnapshotSchema":
        return cls(
            stats_id=snapshot.stats_id,
            date=snapshot.date,
            total_patients=snapshot.total_patients,
            total_prescriptions=snapshot.total_prescriptions,
            prescriptions_today=snapshot.prescriptions_today,
            prescriptions_this_week=snapshot.prescriptions_this_week,
            prescriptions_this_month=snapshot.prescriptions_this_month,
            active_patients=snapshot.active_patients,
            last_updated=snapshot.last_updated,
        )
