import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "support"))

from forest_fixtures import build_world, hidden_treasure, make_enemy, start_game
from forest_rescue.domain.models.session import DeathCause, GamePhase, LogCategory


def _give(session, *effects):
    for effect in effects:
        session.player.inventory.append(hidden_treasure(effect))


class UseItemValidationTests(unittest.TestCase):
    def test_empty_slot_is_invalid(self) -> None:
        service, session = start_game()
        for index in (0, -1, 3, True, "0", None):
            result = service.use_item(session, index)
            self.assertEqual("invalid", result.status)
        self.assertEqual(2, len(session.log))

    def test_encounter_only_item_is_returned_to_its_slot(self) -> None:
        service, session = start_game()
        _give(session, "full_heal", "instant_kill", "teleport")

        result = service.use_item(session, 1)

        self.assertEqual("invalid", result.status)
        self.assertEqual(
            ["elixir_of_life", "ring_of_power", "bat_wings"],
            [item.id for item in session.player.inventory],
        )
        self.assertEqual(LogCategory.ERROR, session.log[-1].category)
        self.assertEqual(GamePhase.EXPLORING, session.phase)

    def test_items_cannot_be_used_while_typing_an_amount(self) -> None:
        service, session = start_game()
        _give(session, "full_heal")
        service.move(session, "north")
        service.choose_fight(session)
        self.assertEqual("rejected", service.use_item(session, 0).status)
        self.assertEqual(1, len(session.player.inventory))


class KillingItemTests(unittest.TestCase):
    def test_ring_slays_any_enemy(self) -> None:
        service, session = start_game(rolls=[0.99])
        _give(session, "instant_kill")
        service.move(session, "north")

        result = service.use_item(session, 0)

        self.assertEqual("win", result.status)
        self.assertEqual("ring_of_power", result.item_id)
        self.assertEqual([], session.player.inventory)
        self.assertEqual(1, len(session.player.kills))
        self.assertEqual(10, session.player.gold)
        self.assertEqual(1000, session.player.energy)
        self.assertEqual(GamePhase.EXPLORING, session.phase)
        self.assertEqual(LogCategory.ITEM_USE, session.log[-2].category)
        self.assertEqual(LogCategory.COMBAT_WIN, session.log[-1].category)

    def test_dragon_sword_is_wasted_on_other_enemies(self) -> None:
        service, session = start_game()
        _give(session, "dragon_kill")
        service.move(session, "north")

        result = service.use_item(session, 0)

        self.assertEqual("wasted", result.status)
        self.assertEqual([], session.player.inventory)
        self.assertEqual(GamePhase.ENCOUNTER, session.phase)
        self.assertIsNotNone(session.active_encounter)
        self.assertEqual([], session.player.kills)

    def test_dragon_sword_slays_a_dragon(self) -> None:
        world = build_world(enemies={(1, 2): make_enemy(90, treasure_value=90)})
        service, session = start_game(world_map=world, rolls=[0.99])
        _give(session, "dragon_kill")
        service.move(session, "north")

        self.assertEqual("win", service.use_item(session, 0).status)
        self.assertEqual(90, session.player.gold)

    def test_dragon_sword_slays_the_captor_through_its_pet(self) -> None:
        service, session = start_game(world_map=build_world(princess=(1, 2)), rolls=[0.99])
        _give(session, "dragon_kill")
        service.move(session, "north")

        service.use_item(session, 0)

        self.assertTrue(session.player.has_princess)
        self.assertEqual(190, session.player.kills[0].enemy.total_strength)

    def test_items_work_during_a_forced_fight(self) -> None:
        service, session = start_game(rolls=[0.8, 0.99])
        _give(session, "instant_kill")
        service.move(session, "north")
        service.flee(session)
        self.assertEqual(GamePhase.FORCED_FIGHT, session.phase)

        self.assertEqual("win", service.use_item(session, 0).status)
        self.assertEqual(GamePhase.EXPLORING, session.phase)


class UtilityItemTests(unittest.TestCase):
    def test_elixir_restores_full_energy_in_place(self) -> None:
        service, session = start_game()
        _give(session, "full_heal")
        service.move(session, "north")
        session.player.energy = 120

        result = service.use_item(session, 0)

        self.assertEqual("healed", result.status)
        self.assertEqual(1000, session.player.energy)
        self.assertEqual(GamePhase.ENCOUNTER, session.phase)
        self.assertIn("120 → 1000", result.messages[0])

    def test_bat_wings_teleport_and_defer_the_tile_entry(self) -> None:
        world = build_world(swamps=[(4, 4), (4, 3)])
        service, session = start_game(world_map=world)
        _give(session, "teleport")
        service.move(session, "north")
        session.bribe_lost_gold = 15

        result = service.use_item(session, 0)

        self.assertEqual("teleport", result.status)
        self.assertEqual(GamePhase.EXPLORING, session.phase)
        self.assertIsNone(session.active_encounter)
        self.assertEqual(0, session.bribe_lost_gold)
        self.assertTrue(session.pending_entry)
        self.assertFalse(session.current_tile().is_swamp)
        landed = session.player.position
        self.assertEqual((landed.row, landed.col), result.new_position)

        entry = service.enter_current_tile(session)
        self.assertIn(entry.status, ("cleared", "encounter"))
        self.assertFalse(session.pending_entry)
        self.assertTrue(session.current_tile().visited)

    def test_enter_current_tile_requires_a_pending_entry(self) -> None:
        service, session = start_game()
        self.assertEqual("invalid", service.enter_current_tile(session).status)

    def test_explosive_pill_kills_outside_combat(self) -> None:
        service, session = start_game()
        _give(session, "self_destruct")

        result = service.use_item(session, 0)

        self.assertEqual("death", result.status)
        self.assertEqual(DeathCause.PILL, session.death_cause)
        self.assertEqual("the forest", session.killed_by)
        self.assertEqual("death_without_princess", result.ending)
        self.assertEqual(GamePhase.GAME_OVER, session.phase)

    def test_explosive_pill_during_an_encounter_credits_the_enemy(self) -> None:
        service, session = start_game()
        _give(session, "self_destruct")
        service.move(session, "north")
        service.use_item(session, 0)
        self.assertEqual("Toad, Lurking and Horrid", session.killed_by)


if __name__ == "__main__":
    unittest.main()
