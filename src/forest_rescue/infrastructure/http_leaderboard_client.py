from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

import httpx

from forest_rescue.domain.models.score import LeaderboardPeriod, ScoreRecord
from forest_rescue.domain.repositories import LeaderboardRepository
from forest_rescue.infrastructure.resilient_http import get_json_with_retry, post_json_with_retry


class HttpLeaderboardRepository(LeaderboardRepository):
    """Leaderboard stored behind a small JSON HTTP service.

    ``GET /scores?period=&limit=`` answers ``{"scores": [...]}`` already filtered
    and ordered by the server; ``POST /scores`` stores one record;
    ``GET /users/{id}/best`` answers ``{"score": {...}}`` or ``{"score": null}``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        retries: int = 1,
        backoff_seconds: float = 0.2,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._retries = retries
        self._backoff_seconds = backoff_seconds
        self.client = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def add(self, record: ScoreRecord) -> None:
        payload = record.to_payload()
        if payload["createdAt"] is None:
            payload["createdAt"] = datetime.now().isoformat()
        post_json_with_retry(
            self.client,
            "/scores",
            payload,
            headers={"Accept": "application/json"},
            retries=self._retries,
            backoff_seconds=self._backoff_seconds,
        )

    def list_top(
        self,
        period: LeaderboardPeriod,
        limit: int = 20,
        now: Optional[datetime] = None,
    ) -> List[ScoreRecord]:
        resolved = LeaderboardPeriod.normalize(period)
        params: dict[str, object] = {"period": resolved.value, "limit": max(0, int(limit))}
        if now is not None:
            params["now"] = now.isoformat()
        payload = get_json_with_retry(
            self.client,
            "/scores",
            params=params,
            headers={"Accept": "application/json"},
            retries=self._retries,
            backoff_seconds=self._backoff_seconds,
        )
        rows = payload.get("scores", payload.get("results", []))
        if not isinstance(rows, list):
            return []
        records = [ScoreRecord.from_payload(row) for row in rows if isinstance(row, dict)]
        records.sort(key=lambda record: record.score, reverse=True)
        return records[: max(0, int(limit))]

    def best_for_user(self, user_id: str) -> Optional[ScoreRecord]:
        payload = get_json_with_retry(
            self.client,
            f"/users/{quote(str(user_id), safe='')}/best",
            headers={"Accept": "application/json"},
            retries=self._retries,
            backoff_seconds=self._backoff_seconds,
        )
        row = payload.get("score")
        if not isinstance(row, dict):
            return None
        return ScoreRecord.from_payload(row)

    def close(self) -> None:
        self.client.close()
