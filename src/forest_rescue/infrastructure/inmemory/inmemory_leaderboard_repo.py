from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from forest_rescue.domain.models.score import LeaderboardPeriod, ScoreRecord
from forest_rescue.domain.repositories import LeaderboardRepository


class InMemoryLeaderboardRepository(LeaderboardRepository):
    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._records: List[ScoreRecord] = []
        self._clock = clock

    def add(self, record: ScoreRecord) -> None:
        stored = replace(record, created_at=record.created_at or self._clock())
        self._records.append(stored)

    def list_top(
        self,
        period: LeaderboardPeriod,
        limit: int = 20,
        now: Optional[datetime] = None,
    ) -> List[ScoreRecord]:
        cutoff = LeaderboardPeriod.normalize(period).cutoff(now or self._clock())
        rows = [
            record
            for record in self._records
            if cutoff is None or (record.created_at is not None and record.created_at >= cutoff)
        ]
        # Stable sort keeps earlier submissions ahead on ties.
        rows.sort(key=lambda record: record.score, reverse=True)
        return [replace(record) for record in rows[: max(0, int(limit))]]

    def best_for_user(self, user_id: str) -> Optional[ScoreRecord]:
        rows = [record for record in self._records if user_id and record.user_id == user_id]
        if not rows:
            return None
        return replace(max(rows, key=lambda record: record.score))

    def __len__(self) -> int:
        return len(self._records)
