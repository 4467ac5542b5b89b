import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from forest_rescue.application.services.phase_machine import (
    ALLOWED_ACTIONS,
    TRANSITIONS,
    PhaseAction,
    PhaseTransitionError,
    allowed_actions,
    is_action_allowed,
    next_phase,
)
from forest_rescue.application.services.encounter_resolver import FightOutcome
from forest_rescue.domain.models.session import GamePhase


class PhaseMachineTests(unittest.TestCase):
    def test_every_phase_has_an_entry(self) -> None:
        self.assertEqual(set(GamePhase), set(ALLOWED_ACTIONS))

    def test_terminal_and_start_phases_allow_nothing(self) -> None:
        self.assertEqual([], allowed_actions(GamePhase.GAME_OVER))
        self.assertEqual([], allowed_actions(GamePhase.START))

    def test_exploring_allows_movement_and_items_only(self) -> None:
        self.assertTrue(is_action_allowed(GamePhase.EXPLORING, PhaseAction.MOVE))
        self.assertTrue(is_action_allowed(GamePhase.EXPLORING, PhaseAction.USE_ITEM))
        self.assertFalse(is_action_allowed(GamePhase.EXPLORING, PhaseAction.FIGHT))
        self.assertFalse(is_action_allowed(GamePhase.EXPLORING, PhaseAction.BRIBE))

    def test_forced_fight_forbids_flee_and_bribe(self) -> None:
        for phase in (GamePhase.FORCED_FIGHT, GamePhase.FORCED_FIGHT_INPUT):
            self.assertFalse(is_action_allowed(phase, PhaseAction.FLEE))
            self.assertFalse(is_action_allowed(phase, PhaseAction.BRIBE))
            self.assertFalse(is_action_allowed(phase, PhaseAction.CANCEL_INPUT))
            self.assertTrue(is_action_allowed(phase, PhaseAction.FIGHT))

    def test_input_phases_can_be_cancelled(self) -> None:
        self.assertEqual(GamePhase.ENCOUNTER, next_phase(GamePhase.FIGHT_INPUT, PhaseAction.CANCEL_INPUT, "normal"))
        self.assertEqual(GamePhase.ENCOUNTER, next_phase(GamePhase.BRIBE_INPUT, PhaseAction.CANCEL_INPUT, "normal"))

    def test_outcomes_map_to_next_phase(self) -> None:
        self.assertEqual(GamePhase.EXPLORING, next_phase(GamePhase.ENCOUNTER, PhaseAction.FIGHT, FightOutcome.WIN))
        self.assertEqual(GamePhase.ENCOUNTER, next_phase(GamePhase.FORCED_FIGHT, PhaseAction.FIGHT, "draw"))
        self.assertEqual(GamePhase.GAME_OVER, next_phase(GamePhase.FIGHT_INPUT, PhaseAction.FIGHT, "lose"))
        self.assertEqual(GamePhase.FORCED_FIGHT, next_phase(GamePhase.ENCOUNTER, PhaseAction.FLEE, "forced_fight"))
        self.assertEqual(GamePhase.FORCED_FIGHT, next_phase(GamePhase.BRIBE_INPUT, PhaseAction.BRIBE, "insult"))
        self.assertEqual(GamePhase.GAME_OVER, next_phase(GamePhase.EXPLORING, PhaseAction.MOVE, "exit"))

    def test_stay_outcomes_keep_the_current_phase(self) -> None:
        self.assertEqual(GamePhase.EXPLORING, next_phase(GamePhase.EXPLORING, PhaseAction.MOVE, "blocked"))
        self.assertEqual(GamePhase.FORCED_FIGHT, next_phase(GamePhase.FORCED_FIGHT, PhaseAction.USE_ITEM, "wasted"))
        self.assertEqual(GamePhase.ENCOUNTER, next_phase(GamePhase.ENCOUNTER, PhaseAction.USE_ITEM, "healed"))

    def test_disallowed_action_raises(self) -> None:
        with self.assertRaises(PhaseTransitionError):
            next_phase(GamePhase.GAME_OVER, PhaseAction.MOVE, "exit")

    def test_unknown_outcome_raises(self) -> None:
        with self.assertRaises(PhaseTransitionError):
            next_phase(GamePhase.ENCOUNTER, PhaseAction.FIGHT, "surrender")

    def test_every_transition_target_is_a_known_phase(self) -> None:
        for target in TRANSITIONS.values():
            self.assertTrue(target is None or isinstance(target, GamePhase))


if __name__ == "__main__":
    unittest.main()
