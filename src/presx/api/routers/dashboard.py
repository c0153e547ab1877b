"""Dashboard endpoints. Every read recomputes its counts."""

from typing import List

from fastapi import APIRouter, Query

from ..deps import DashboardServiceDep
from ..errors import internal_error
from ..schemas.dashboard import (
    ActivitySchema,
    DashboardResponse,
    DashboardStatsSchema,
    StatsSnapshotSchema,
)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/", response_model=DashboardResponse, response_model_exclude_none=True)
async def get_dashboard(dashboard_service: DashboardServiceDep):
    """Stats, five recent patients with their latest prescription, ten recent activities."""
    try:
        data = await dashboard_service.get_dashboard_data()
    except Exception as e:
        raise internal_error("get_dashboard", e)
    return DashboardResponse.from_domain(data)


@router.get("/stats", response_model=DashboardStatsSchema)
async def get_stats(dashboard_service: DashboardServiceDep):
    try:
        stats = await dashboard_service.get_stats()
    except Exception as e:
        raise internal_error("get_stats", e)
    return DashboardStatsSchema.from_domain(stats)


@router.get("/activities", response_model=List[ActivitySchema], response_model_exclude_none=True)
async def get_activities(
    dashboard_service: DashboardServiceDep,
    limit: int = Query(10, ge=1, le=100),
):
    try:
        activities = await dashboard_service.get_recent_activities(limit)
    except Exception as e:
        raise internal_error("get_activities", e)
    return [ActivitySchema.from_domain(a) for a in activities]


@router.post("/stats/snapshot", response_model=StatsSnapshotSchema)
async def update_stats_snapshot(dashboard_service: DashboardServiceDep):
    """Recompute and store today's dated statistics snapshot."""
    try:
        snapshot = await dashboard_service.update_dashboard_stats()
    except Exception as e:
        raise internal_error("update_stats_snapshot", e)
    return StatsSnapshotSchema.from_domain(snapshot)
