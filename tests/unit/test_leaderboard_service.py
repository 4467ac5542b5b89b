import sys
from datetime import datetime, timedelta
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "support"))

from forest_fixtures import build_world, start_game
from forest_rescue.application.services.event_bus import EventBus
from forest_rescue.application.services.game_service import GameService
from forest_rescue.application.services.leaderboard_service import (
    LeaderboardService,
    register_leaderboard_handlers,
)
from forest_rescue.domain.models.score import LeaderboardPeriod, PlayerIdentity, ScoreRecord
from forest_rescue.domain.repositories import LeaderboardRepository
from forest_rescue.infrastructure.inmemory.inmemory_leaderboard_repo import InMemoryLeaderboardRepository


NOW = datetime(2025, 6, 15, 14, 0, 0)


def _record(score: int, *, created_at=None, pseudonym="Rowan", user_id=None) -> ScoreRecord:
    return ScoreRecord(
        score=score,
        title="",
        total_gold=score,
        total_kill_value=0,
        has_princess=False,
        kills_count=0,
        ending="coward",
        pseudonym=pseudonym,
        user_id=user_id,
        created_at=created_at,
    )


class _BrokenRepository(LeaderboardRepository):
    def add(self, record):
        raise ConnectionError("database is down")

    def list_top(self, period, limit=20, now=None):
        raise ConnectionError("database is down")

    def best_for_user(self, user_id):
        raise ConnectionError("database is down")


class InMemoryLeaderboardTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = InMemoryLeaderboardRepository(clock=lambda: NOW)
        self.service = LeaderboardService(self.repo, clock=lambda: NOW)
        self.service.submit_score(_record(300, created_at=NOW - timedelta(days=30), pseudonym="Old"))
        self.service.submit_score(_record(200, created_at=NOW - timedelta(days=3), pseudonym="Week"))
        self.service.submit_score(_record(100, created_at=NOW.replace(hour=9), pseudonym="Today"))

    def test_period_windows(self) -> None:
        def names(period):
            return [record.pseudonym for record in self.service.top_scores(period).scores]

        self.assertEqual(["Today"], names("today"))
        self.assertEqual(["Week", "Today"], names(LeaderboardPeriod.WEEK))
        self.assertEqual(["Old", "Week", "Today"], names("alltime"))
        self.assertEqual(["Old", "Week", "Today"], names("whenever"))

    def test_limit_and_tie_order(self) -> None:
        self.service.submit_score(_record(200, created_at=NOW, pseudonym="Later"))
        scores = self.service.top_scores("alltime", limit=3).scores
        self.assertEqual(["Old", "Week", "Later"], [record.pseudonym for record in scores])

    def test_submit_fills_missing_timestamp(self) -> None:
        record = _record(50)
        result = self.service.submit_score(record)
        self.assertTrue(result.success)
        self.assertIsNone(result.error)
        self.assertEqual(NOW, record.created_at)
        self.assertEqual(4, len(self.repo))

    def test_entry_views_are_ranked(self) -> None:
        views = self.service.top_entry_views("week")
        self.assertEqual([1, 2], [view.rank for view in views])
        self.assertEqual("Week", views[0].pseudonym)
        self.assertEqual((NOW - timedelta(days=3)).isoformat(), views[0].created_at)

    def test_user_best(self) -> None:
        self.service.submit_score(_record(40, created_at=NOW, user_id="u-1"))
        self.service.submit_score(_record(90, created_at=NOW, user_id="u-1"))
        self.service.submit_score(_record(500, created_at=NOW, user_id="u-2"))

        best = self.service.user_best("u-1")

        self.assertEqual(90, best.score)
        self.assertIsNone(best.error)
        self.assertIsNone(self.service.user_best("nobody").score)

    def test_check_if_top_score(self) -> None:
        first = self.service.check_if_top_score(300)
        self.assertEqual((True, 1), (first.is_top, first.position))
        check = self.service.check_if_top_score(150)
        self.assertTrue(check.is_top)
        self.assertEqual(3, check.position)
        self.assertFalse(self.service.check_if_top_score(5).is_top)
        self.assertFalse(self.service.check_if_top_score(500, top_n=0).is_top)

    def test_top_check_only_ranks_within_the_window(self) -> None:
        edge = self.service.check_if_top_score(200, top_n=2)
        self.assertEqual((True, 2), (edge.is_top, edge.position))
        self.assertFalse(self.service.check_if_top_score(150, top_n=2).is_top)


class FailureTests(unittest.TestCase):
    def setUp(self) -> None:
        self.service = LeaderboardService(_BrokenRepository(), clock=lambda: NOW)

    def test_failures_are_reported_not_raised(self) -> None:
        with self.assertLogs("forest_rescue.application.services.leaderboard_service", level="ERROR"):
            submitted = self.service.submit_score(_record(10))
            listed = self.service.top_scores("week")
            best = self.service.user_best("u-1")

        self.assertFalse(submitted.success)
        self.assertEqual("database is down", submitted.error)
        self.assertEqual([], listed.scores)
        self.assertEqual("database is down", listed.error)
        self.assertIsNone(best.score)
        self.assertEqual("database is down", best.error)

    def test_unreachable_leaderboard_is_never_top(self) -> None:
        with self.assertLogs("forest_rescue.application.services.leaderboard_service", level="ERROR"):
            self.assertFalse(self.service.check_if_top_score(10_000).is_top)


class AutoSubmitTests(unittest.TestCase):
    def test_finished_games_are_submitted(self) -> None:
        bus = EventBus()
        repo = InMemoryLeaderboardRepository(clock=lambda: NOW)
        leaderboard = LeaderboardService(repo, clock=lambda: NOW)
        register_leaderboard_handlers(bus, leaderboard)
        service, session = start_game(
            world_map=build_world(start=(0, 4)),
            service=GameService(bus, leaderboard=leaderboard, clock=lambda: 1.0),
            identity=PlayerIdentity(pseudonym="Rowan", user_id="u-3"),
        )
        session.player.gold = 30

        service.move(session, "north")

        stored = repo.list_top(LeaderboardPeriod.ALLTIME, now=NOW)
        self.assertEqual(1, len(stored))
        self.assertEqual(30, stored[0].score)
        self.assertEqual("coward", stored[0].ending)
        self.assertEqual("u-3", stored[0].user_id)

    def test_no_service_means_no_subscription(self) -> None:
        bus = EventBus()
        register_leaderboard_handlers(bus, None)
        service, session = start_game(world_map=build_world(start=(0, 4)), service=GameService(bus))
        self.assertEqual("coward", service.move(session, "north").status)


if __name__ == "__main__":
    unittest.main()
