from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from forest_rescue.domain.models.score import LeaderboardPeriod, ScoreRecord


class LeaderboardRepository(ABC):
    @abstractmethod
    def add(self, record: ScoreRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_top(
        self,
        period: LeaderboardPeriod,
        limit: int = 20,
        now: Optional[datetime] = None,
    ) -> List[ScoreRecord]:
        raise NotImplementedError

    @abstractmethod
    def best_for_user(self, user_id: str) -> Optional[ScoreRecord]:
        raise NotImplementedError

    def close(self) -> None:
        """Release any held resources; no-op for repositories without any."""
        return None
