import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "support"))

from forest_fixtures import build_world, start_game
from forest_rescue.application.services.event_bus import EventBus
from forest_rescue.application.services.game_service import GameService
from forest_rescue.domain.events import GameEnded
from forest_rescue.domain.models.session import GamePhase


class EventBusTests(unittest.TestCase):
    def test_publish_notifies_all_handlers_for_event_type(self) -> None:
        bus = EventBus()
        seen: list[str] = []

        class ExampleEvent:
            pass

        bus.subscribe(ExampleEvent, lambda evt: seen.append("first"))
        bus.subscribe(ExampleEvent, lambda evt: seen.append("second"))

        bus.publish(ExampleEvent())

        self.assertEqual(["first", "second"], seen)
        self.assertEqual(1, bus.published_count)

    def test_publish_filters_handlers_by_event_class(self) -> None:
        bus = EventBus()
        seen: list[str] = []

        class Alpha:
            pass

        class Beta:
            pass

        bus.subscribe(Alpha, lambda evt: seen.append("alpha"))
        bus.subscribe(Beta, lambda evt: seen.append("beta"))

        bus.publish(Alpha())

        self.assertEqual(["alpha"], seen)

    def test_publish_honors_priority_order(self) -> None:
        bus = EventBus()
        seen: list[str] = []

        class ExampleEvent:
            pass

        bus.subscribe(ExampleEvent, lambda evt: seen.append("normal"), priority=100)
        bus.subscribe(ExampleEvent, lambda evt: seen.append("early"), priority=10)
        bus.subscribe(ExampleEvent, lambda evt: seen.append("late"), priority=200)
        bus.subscribe(ExampleEvent, lambda evt: seen.append("early-too"), priority=10)

        bus.publish(ExampleEvent())

        self.assertEqual(["early", "early-too", "normal", "late"], seen)

    def test_publish_continues_when_one_handler_raises(self) -> None:
        bus = EventBus()
        seen: list[str] = []

        class ExampleEvent:
            pass

        def _broken(_evt) -> None:
            raise RuntimeError("boom")

        bus.subscribe(ExampleEvent, _broken, priority=10)
        bus.subscribe(ExampleEvent, lambda evt: seen.append("still-runs"), priority=20)

        with self.assertLogs("forest_rescue.application.services.event_bus", level="ERROR"):
            bus.publish(ExampleEvent())

        self.assertEqual(["still-runs"], seen)
        self.assertEqual(1, len(bus.last_publish_errors()))

        bus.unsubscribe(ExampleEvent, _broken)
        bus.publish(ExampleEvent())
        self.assertEqual([], bus.last_publish_errors())

    def test_unsubscribe_reports_whether_a_handler_was_removed(self) -> None:
        bus = EventBus()
        seen: list[str] = []

        class ExampleEvent:
            pass

        def _handler(_evt) -> None:
            seen.append("called")

        bus.subscribe(ExampleEvent, _handler)
        self.assertTrue(bus.unsubscribe(ExampleEvent, _handler))
        self.assertFalse(bus.unsubscribe(ExampleEvent, _handler))

        bus.publish(ExampleEvent())

        self.assertEqual([], seen)


class GameEventIsolationTests(unittest.TestCase):
    def test_failing_subscriber_never_breaks_the_game(self) -> None:
        bus = EventBus()

        def _broken(_evt) -> None:
            raise RuntimeError("leaderboard offline")

        bus.subscribe(GameEnded, _broken)
        service, session = start_game(
            world_map=build_world(start=(0, 4)),
            service=GameService(bus, clock=lambda: 1.0),
        )

        with self.assertLogs("forest_rescue.application.services.event_bus", level="ERROR"):
            result = service.move(session, "north")

        self.assertEqual("coward", result.status)
        self.assertEqual(GamePhase.GAME_OVER, session.phase)
        self.assertEqual(1, len(bus.last_publish_errors()))


if __name__ == "__main__":
    unittest.main()
