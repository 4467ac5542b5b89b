from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from forest_rescue.application.dtos import (
    LeaderboardEntryView,
    LeaderboardQueryResult,
    SubmitScoreResult,
    TopScoreCheck,
    UserBestResult,
)
from forest_rescue.application.mappers.session_mapper import to_leaderboard_entry_views
from forest_rescue.application.services.balance_tables import LEADERBOARD_DEFAULT_LIMIT, LEADERBOARD_TOP_N
from forest_rescue.application.services.event_bus import EventBus
from forest_rescue.domain.events import GameEnded
from forest_rescue.domain.models.score import LeaderboardPeriod, ScoreRecord
from forest_rescue.domain.repositories import LeaderboardRepository


logger = logging.getLogger(__name__)


class LeaderboardService:
    """Hall of fame operations that never raise into the game.

    Repository failures are logged and reported through the ``error`` field of
    the returned result.
    """

    def __init__(
        self,
        repository: LeaderboardRepository,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.repository = repository
        self._clock = clock

    def submit_score(self, record: ScoreRecord) -> SubmitScoreResult:
        if record.created_at is None:
            record.created_at = self._clock()
        try:
            self.repository.add(record)
        except Exception as exc:
            logger.exception("Failed to store score for %s", record.pseudonym)
            return SubmitScoreResult(success=False, error=str(exc) or type(exc).__name__)
        return SubmitScoreResult(success=True)

    def top_scores(
        self,
        period: LeaderboardPeriod | str = LeaderboardPeriod.ALLTIME,
        limit: int = LEADERBOARD_DEFAULT_LIMIT,
    ) -> LeaderboardQueryResult:
        resolved = LeaderboardPeriod.normalize(period)
        try:
            scores = self.repository.list_top(resolved, limit=limit, now=self._clock())
        except Exception as exc:
            logger.exception("Failed to load %s leaderboard", resolved.value)
            return LeaderboardQueryResult(scores=[], error=str(exc) or type(exc).__name__)
        return LeaderboardQueryResult(scores=scores)

    def top_entry_views(
        self,
        period: LeaderboardPeriod | str = LeaderboardPeriod.ALLTIME,
        limit: int = LEADERBOARD_DEFAULT_LIMIT,
    ) -> list[LeaderboardEntryView]:
        return to_leaderboard_entry_views(self.top_scores(period, limit).scores)

    def user_best(self, user_id: str) -> UserBestResult:
        try:
            record = self.repository.best_for_user(user_id)
        except Exception as exc:
            logger.exception("Failed to load best score for user %s", user_id)
            return UserBestResult(error=str(exc) or type(exc).__name__)
        if record is None:
            return UserBestResult()
        return UserBestResult(score=record.score, title=record.title)

    def check_if_top_score(
        self,
        score: int,
        period: LeaderboardPeriod | str = LeaderboardPeriod.ALLTIME,
        top_n: int = LEADERBOARD_TOP_N,
    ) -> TopScoreCheck:
        """Locate ``score`` within the top ``top_n`` of ``period``.

        The score is expected to be stored already, so the position is the first
        listed entry it meets or beats. An unreachable leaderboard counts as not
        top.
        """
        listed = self.top_scores(period, top_n).scores
        for index, record in enumerate(listed, start=1):
            if score >= record.score:
                return TopScoreCheck(is_top=True, position=index)
        return TopScoreCheck(is_top=False)

    def register_handlers(self, event_bus: EventBus) -> None:
        event_bus.subscribe(GameEnded, self.on_game_ended, priority=50)

    def on_game_ended(self, event: GameEnded) -> None:
        self.submit_score(event.record)


def register_leaderboard_handlers(event_bus: EventBus, service: LeaderboardService | None) -> None:
    if service is None:
        return
    service.register_handlers(event_bus)
