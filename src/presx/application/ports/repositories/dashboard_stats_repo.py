"""Dashboard statistics snapshot repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from ....domain.entities.dashboard import DailyStatsSnapshot


class DashboardStatsRepository(ABC):
    """Stores dated dashboard counter snapshots."""

    @abstractmethod
    async def upsert(self, snapshot: DailyStatsSnapshot) -> DailyStatsSnapshot:
        """Create or replace the snapshot with the same ``stats_id``."""
        pass

    @abstractmethod
    async def find_by_id(self, stats_id: str) -> Optional[DailyStatsSnapshot]:
        """Find a snapshot by its dated id."""
        pass
