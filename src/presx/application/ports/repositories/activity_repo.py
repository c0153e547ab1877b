"""Recent activity repository interface."""

from abc import ABC, abstractmethod
from typing import List

from ....domain.entities.activity import RecentActivity


class ActivityRepository(ABC):
    """Append-only store for dashboard activity entries."""

    @abstractmethod
    async def append(self, activity: RecentActivity) -> RecentActivity:
        """Append one entry. Entries are never modified or removed."""
        pass

    @abstractmethod
    async def find_recent(self, limit: int = 10) -> List[RecentActivity]:
        """Latest entries, newest first."""
        pass
