from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from forest_rescue.application.dtos import ActionResult, SessionView
from forest_rescue.application.mappers.session_mapper import to_session_view
from forest_rescue.application.services import scoring
from forest_rescue.application.services.balance_tables import (
    LOG_VIEW_LIMIT,
    clamp_bribe_gold,
    clamp_fight_energy,
)
from forest_rescue.application.services.encounter_resolver import (
    BribeOutcome,
    FightOutcome,
    FleeOutcome,
    resolve_bribe,
    resolve_fight,
    resolve_flee,
)
from forest_rescue.application.services.event_bus import EventBus
from forest_rescue.application.services.phase_machine import PhaseAction, is_action_allowed, next_phase
from forest_rescue.application.services.seed_policy import derive_seed, session_rng
from forest_rescue.domain.events import EnemyDefeated, GameEnded, HiddenTreasureFound, PrincessRescued
from forest_rescue.domain.models.enemy import ItemEffect, KillRecord
from forest_rescue.domain.models.player import MAX_ENERGY, Player
from forest_rescue.domain.models.position import Direction, Position
from forest_rescue.domain.models.score import PlayerIdentity, ScoreRecord, ScoreSummary
from forest_rescue.domain.models.session import (
    DeathCause,
    Encounter,
    Ending,
    GamePhase,
    GameSession,
    LogCategory,
    LogEntry,
)
from forest_rescue.domain.models.world_map import Tile, WorldMap
from forest_rescue.domain.services.entity_catalog import MOUSE_TIER, roll_hidden_treasure
from forest_rescue.domain.services.map_generator import (
    generate_map,
    random_adjacent_position,
    random_passable_position,
)


logger = logging.getLogger(__name__)

FOREST_KILLER = "the forest"


class GameService:
    """Drives one rescue run at a time through its phases.

    The service holds no session state of its own: every operation receives the
    ``GameSession`` it acts on, mutates it, and answers with an ``ActionResult``
    carrying the outcome status and the narrative lines written by the action.
    """

    def __init__(
        self,
        event_bus: Optional[EventBus] = None,
        *,
        leaderboard=None,
        default_seed: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.event_bus = event_bus or EventBus()
        self.leaderboard = leaderboard
        self.default_seed = default_seed
        self._clock = clock

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start_session(
        self,
        identity: Optional[PlayerIdentity] = None,
        seed: Optional[int] = None,
        world_map: Optional[WorldMap] = None,
    ) -> GameSession:
        session_id = uuid.uuid4().hex
        if seed is None:
            seed = self.default_seed
        if seed is None:
            seed = derive_seed("session.start", {"session_id": session_id})
        rng = session_rng(seed)
        if world_map is None:
            world_map = generate_map(rng)

        start_tile = world_map.tile_at(world_map.start)
        start_tile.visited = True
        start_tile.cleared = True

        session = GameSession(
            session_id=session_id,
            seed=int(seed),
            player=Player(position=world_map.start),
            world_map=world_map,
            phase=GamePhase.EXPLORING,
            identity=identity or PlayerIdentity(),
            rng=rng,
        )
        self._log(
            session,
            "🌲 You enter the Forest of Shadows. Somewhere among the trees a sorcerer holds the princess captive.",
            LogCategory.INTRO,
        )
        self._log(
            session,
            "🧭 Choose a direction to explore. Leave the forest by any edge once the princess is safe.",
            LogCategory.INTRO,
        )
        logger.info("Session %s started with seed %s", session_id, seed)
        return session

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def move(self, session: GameSession, direction: Direction | str) -> ActionResult:
        rejected = self._reject_if_not_allowed(session, PhaseAction.MOVE)
        if rejected:
            return rejected
        resolved = Direction.parse(direction)
        mark = len(session.log)
        target = session.player.position.step(resolved)
        session.pending_entry = False

        if not session.world_map.in_bounds(target):
            return self._exit_forest(session, mark, resolved)

        if session.world_map.tile_at(target).is_swamp:
            self._log(
                session,
                "🟤 A thick, impassable swamp blocks your way. You must find another route.",
                LogCategory.INFO,
            )
            return self._result(session, mark, "blocked", direction=resolved.value)

        status = self._enter_tile(session, target)
        return self._result(session, mark, status, direction=resolved.value, new_position=(target.row, target.col))

    def enter_current_tile(self, session: GameSession) -> ActionResult:
        """Resolve the tile the player landed on after being carried there by an item."""
        rejected = self._reject_if_not_allowed(session, PhaseAction.ENTER_TILE)
        if rejected:
            return rejected
        if not session.pending_entry:
            return ActionResult(
                status="invalid",
                phase=session.phase.value,
                messages=["There is nothing new to discover here."],
            )
        mark = len(session.log)
        session.pending_entry = False
        position = session.player.position
        status = self._enter_tile(session, position)
        return self._result(session, mark, status, new_position=(position.row, position.col))

    def _enter_tile(self, session: GameSession, position: Position) -> str:
        player = session.player
        player.position = position
        tile = session.world_map.tile_at(position)
        tile.visited = True
        session.bribe_lost_gold = 0

        if tile.cleared:
            self._log(session, "This area is already clear. You may move freely.", LogCategory.INFO)
            session.active_encounter = None
            session.phase = next_phase(session.phase, PhaseAction.ENTER_TILE, "cleared")
            return "cleared"

        enemy = tile.enemy
        if enemy.tier == MOUSE_TIER:
            self._loot_mouse(session, tile)
            session.phase = next_phase(session.phase, PhaseAction.ENTER_TILE, "looted")
            return "looted"

        session.active_encounter = Encounter(tile=tile, enemy=enemy)
        if enemy.treasure is not None:
            message = (
                f"A {enemy.full_name} holds {enemy.treasure.name}. "
                f"Its strength is {enemy.total_strength}."
            )
        else:
            message = f"A {enemy.full_name} blocks your path. Its strength is {enemy.total_strength}."
        if enemy.pet is not None:
            message += f" It keeps a {enemy.pet.full_name} as a pet."
        if enemy.is_princess_captor:
            message += " It holds the princess captive!"
        self._log(session, message, LogCategory.ENCOUNTER)
        session.phase = next_phase(session.phase, PhaseAction.ENTER_TILE, "encounter")
        return "encounter"

    def _loot_mouse(self, session: GameSession, tile: Tile) -> None:
        enemy = tile.enemy
        treasure = enemy.treasure
        value = treasure.value if treasure is not None else 0
        session.player.gold += value
        session.player.kills.append(KillRecord(enemy=enemy.snapshot(), treasure_value=value))
        tile.cleared = True
        enemy.defeated = True
        session.active_encounter = None
        if treasure is not None:
            loot = f"({treasure.icon} {treasure.name}, {value} coins)"
        else:
            loot = "(nothing of value)"
        self._log(
            session,
            f"🐭 You find a small, defenceless mouse and help yourself to its belongings {loot}. What a bully!",
            LogCategory.MOUSE,
        )
        self._roll_hidden_treasure(session, "Surprise! Among the mouse's belongings you find")

    def _exit_forest(self, session: GameSession, mark: int, direction: Direction) -> ActionResult:
        if session.player.has_princess:
            ending = Ending.VICTORY
            self._log(
                session,
                "🏆 You leave the forest with the princess safe at your side. "
                "The creatures you slew prove your courage and the riches you took are your reward. Victory!",
                LogCategory.VICTORY,
            )
        else:
            ending = Ending.COWARD
            self._log(
                session,
                "🐔 You leave the forest without the princess. Coward! "
                "The sorcerer's dragon devours her and you are jeered out of the kingdom.",
                LogCategory.COWARD,
            )
        session.phase = next_phase(session.phase, PhaseAction.MOVE, "exit")
        self._finish(session, ending)
        return self._result(session, mark, ending.value, direction=direction.value)

    # ------------------------------------------------------------------
    # Input sub-phases
    # ------------------------------------------------------------------

    def choose_fight(self, session: GameSession) -> ActionResult:
        rejected = self._reject_if_not_allowed(session, PhaseAction.CHOOSE_FIGHT)
        if rejected:
            return rejected
        outcome = "forced" if session.phase == GamePhase.FORCED_FIGHT else "normal"
        session.phase = next_phase(session.phase, PhaseAction.CHOOSE_FIGHT, outcome)
        return ActionResult(
            status="awaiting_energy",
            phase=session.phase.value,
            messages=[f"How much energy will you commit? You have {session.player.energy}."],
        )

    def choose_bribe(self, session: GameSession) -> ActionResult:
        rejected = self._reject_if_not_allowed(session, PhaseAction.CHOOSE_BRIBE)
        if rejected:
            return rejected
        session.phase = next_phase(session.phase, PhaseAction.CHOOSE_BRIBE, "normal")
        return ActionResult(
            status="awaiting_gold",
            phase=session.phase.value,
            messages=[f"How much gold will you offer? You have {session.player.gold}."],
        )

    def cancel_input(self, session: GameSession) -> ActionResult:
        rejected = self._reject_if_not_allowed(session, PhaseAction.CANCEL_INPUT)
        if rejected:
            return rejected
        session.phase = next_phase(session.phase, PhaseAction.CANCEL_INPUT, "normal")
        return ActionResult(status="cancelled", phase=session.phase.value)

    # ------------------------------------------------------------------
    # Encounter actions
    # ------------------------------------------------------------------

    def fight(self, session: GameSession, energy: object) -> ActionResult:
        rejected = self._reject_if_not_allowed(session, PhaseAction.FIGHT)
        if rejected:
            return rejected
        mark = len(session.log)
        player = session.player
        enemy = session.active_encounter.enemy

        if player.energy <= 0:
            self._log(
                session,
                f"⚔️ With no energy left to fight, the {enemy.full_name} dispatches you without mercy.",
                LogCategory.COMBAT_DRAW,
            )
            session.phase = next_phase(session.phase, PhaseAction.FIGHT, "no_energy")
            self._handle_death(session, DeathCause.COMBAT)
            return self._result(session, mark, "death", energy_spent=0)

        spent = player.spend_energy(clamp_fight_energy(energy, player.energy))
        outcome = resolve_fight(session.rng, spent, enemy.total_strength)

        if outcome == FightOutcome.WIN:
            recovered = self._handle_win(session)
            session.phase = next_phase(session.phase, PhaseAction.FIGHT, outcome)
            return self._result(session, mark, "win", energy_spent=spent, gold_recovered=recovered)

        if outcome == FightOutcome.DRAW:
            self._log(
                session,
                f"⚔️ You commit {spent} energy against the {enemy.full_name} "
                f"(strength {enemy.total_strength}). The fight is even and neither side yields. "
                f"The energy is lost. You have {player.energy} left.",
                LogCategory.COMBAT_DRAW,
            )
            session.phase = next_phase(session.phase, PhaseAction.FIGHT, outcome)
            return self._result(session, mark, "draw", energy_spent=spent)

        session.phase = next_phase(session.phase, PhaseAction.FIGHT, outcome)
        self._handle_death(session, DeathCause.COMBAT)
        return self._result(session, mark, "death", energy_spent=spent)

    def flee(self, session: GameSession) -> ActionResult:
        rejected = self._reject_if_not_allowed(session, PhaseAction.FLEE)
        if rejected:
            return rejected
        mark = len(session.log)
        enemy = session.active_encounter.enemy
        outcome = resolve_flee(session.rng)

        if outcome == FleeOutcome.ESCAPE:
            step = random_adjacent_position(session.world_map, session.player.position, session.rng)
            if step is None:
                self._log(session, "🏃 You try to run but there is nowhere to go.", LogCategory.FLEE_FAIL)
                session.phase = next_phase(session.phase, PhaseAction.FLEE, FleeOutcome.CAUGHT)
                return self._result(session, mark, FleeOutcome.CAUGHT.value)
            direction, target = step
            self._log(
                session,
                f"🏃 You escape from the {enemy.full_name}! You run {direction.value}.",
                LogCategory.FLEE_ESCAPE,
            )
            session.active_encounter = None
            session.bribe_lost_gold = 0
            session.phase = next_phase(session.phase, PhaseAction.FLEE, outcome)
            entry = self._enter_tile(session, target)
            return self._result(
                session,
                mark,
                FleeOutcome.ESCAPE.value,
                direction=direction.value,
                new_position=(target.row, target.col),
                entry=entry,
            )

        if outcome == FleeOutcome.CAUGHT:
            self._log(
                session,
                f"🏃 You try to run but the {enemy.full_name} catches up and blocks your way. Decide what to do.",
                LogCategory.FLEE_CAUGHT,
            )
            session.phase = next_phase(session.phase, PhaseAction.FLEE, outcome)
            return self._result(session, mark, outcome.value)

        if outcome == FleeOutcome.FORCED_FIGHT:
            self._log(
                session,
                f"🏃 The {enemy.full_name} grabs you by the neck as you turn to run! There is no escape: you must fight.",
                LogCategory.FLEE_FORCED,
            )
            session.phase = next_phase(session.phase, PhaseAction.FLEE, outcome)
            return self._result(session, mark, outcome.value)

        session.phase = next_phase(session.phase, PhaseAction.FLEE, outcome)
        self._handle_death(session, DeathCause.FLEE)
        return self._result(session, mark, "death")

    def bribe(self, session: GameSession, gold: object) -> ActionResult:
        rejected = self._reject_if_not_allowed(session, PhaseAction.BRIBE)
        if rejected:
            return rejected
        mark = len(session.log)
        encounter = session.active_encounter
        enemy = encounter.enemy
        offered = session.player.spend_gold(clamp_bribe_gold(gold, session.player.gold))
        outcome = resolve_bribe(session.rng, offered)

        if outcome == BribeOutcome.ACCEPT:
            encounter.tile.cleared = True
            self._log(
                session,
                f"💰 You offer {offered} gold to the {enemy.full_name}. "
                "The creature accepts and lets you pass in peace.",
                LogCategory.BRIBE_ACCEPT,
            )
            if enemy.is_princess_captor:
                self._release_princess(
                    session,
                    "👸 The sorcerer frees the princess as part of the deal! Now get her out of the forest.",
                    by_bribe=True,
                )
            session.active_encounter = None
            session.bribe_lost_gold = 0
            session.phase = next_phase(session.phase, PhaseAction.BRIBE, outcome)
            return self._result(session, mark, outcome.value, gold_offered=offered)

        session.bribe_lost_gold += offered
        if outcome == BribeOutcome.REJECT:
            self._log(
                session,
                f"💰 You offer {offered} gold to the {enemy.full_name}. "
                'It pockets the coins and refuses with contempt. "Not enough," it growls.',
                LogCategory.BRIBE_REJECT,
            )
        else:
            self._log(
                session,
                f"💰 You offer {offered} gold to the {enemy.full_name}. "
                "The creature is insulted by your miserable offer! It keeps your gold and forces you to fight.",
                LogCategory.BRIBE_INSULT,
            )
        session.phase = next_phase(session.phase, PhaseAction.BRIBE, outcome)
        return self._result(session, mark, outcome.value, gold_offered=offered)

    def use_item(self, session: GameSession, index: object) -> ActionResult:
        rejected = self._reject_if_not_allowed(session, PhaseAction.USE_ITEM)
        if rejected:
            return rejected
        mark = len(session.log)
        player = session.player
        item = player.remove_item(index)
        if item is None:
            return ActionResult(
                status="invalid",
                phase=session.phase.value,
                messages=["There is no item in that slot."],
            )

        encounter = session.active_encounter
        if item.effect.needs_encounter and encounter is None:
            player.restore_item(index, item)
            self._log(session, f"There is no enemy to use the {item.name} on.", LogCategory.ERROR)
            session.phase = next_phase(session.phase, PhaseAction.USE_ITEM, "invalid")
            return self._result(session, mark, "invalid", item_id=item.id)

        if item.effect == ItemEffect.INSTANT_KILL:
            self._log(
                session,
                f"💍 You raise the {item.name}! A golden glow engulfs the {encounter.enemy.full_name}, "
                "which crumbles to dust.",
                LogCategory.ITEM_USE,
            )
            recovered = self._handle_win(session)
            session.phase = next_phase(session.phase, PhaseAction.USE_ITEM, "win")
            return self._result(session, mark, "win", item_id=item.id, gold_recovered=recovered)

        if item.effect == ItemEffect.DRAGON_KILL:
            enemy = encounter.enemy
            if not enemy.has_dragon:
                self._log(
                    session,
                    f"⚔️ You lift the {item.name}, but the {enemy.full_name} is no dragon. "
                    "The blade stays dark and crumbles in your hands. A legendary weapon, wasted.",
                    LogCategory.ITEM_USE,
                )
                session.phase = next_phase(session.phase, PhaseAction.USE_ITEM, "wasted")
                return self._result(session, mark, "wasted", item_id=item.id)
            self._log(
                session,
                f"⚔️ You draw the {item.name}! The blade burns with blue fire and the "
                f"{enemy.full_name} falls before its ancient power.",
                LogCategory.ITEM_USE,
            )
            recovered = self._handle_win(session)
            session.phase = next_phase(session.phase, PhaseAction.USE_ITEM, "win")
            return self._result(session, mark, "win", item_id=item.id, gold_recovered=recovered)

        if item.effect == ItemEffect.TELEPORT:
            destination = random_passable_position(session.world_map, session.rng)
            self._log(
                session,
                f"🦇 You use the {item.name}! Dark wings sprout from your back and lift you above the trees. "
                "You land somewhere else in the forest.",
                LogCategory.ITEM_USE,
            )
            session.active_encounter = None
            session.bribe_lost_gold = 0
            session.player.position = destination
            session.pending_entry = True
            session.phase = next_phase(session.phase, PhaseAction.USE_ITEM, "teleport")
            return self._result(
                session,
                mark,
                "teleport",
                item_id=item.id,
                new_position=(destination.row, destination.col),
            )

        if item.effect == ItemEffect.SELF_DESTRUCT:
            session.phase = next_phase(session.phase, PhaseAction.USE_ITEM, "death")
            self._handle_death(session, DeathCause.PILL)
            return self._result(session, mark, "death", item_id=item.id)

        previous = player.energy
        player.energy = MAX_ENERGY
        self._log(
            session,
            f"🧪 You drink the {item.name}! Warm energy floods your body ({previous} → {MAX_ENERGY}).",
            LogCategory.ITEM_USE,
        )
        session.phase = next_phase(session.phase, PhaseAction.USE_ITEM, "healed")
        return self._result(session, mark, "healed", item_id=item.id)

    # ------------------------------------------------------------------
    # Outcome handlers
    # ------------------------------------------------------------------

    def _handle_win(self, session: GameSession) -> int:
        encounter = session.active_encounter
        tile, enemy = encounter.tile, encounter.enemy
        player = session.player
        treasure = enemy.treasure
        value = treasure.value if treasure is not None else 0
        recovered = session.bribe_lost_gold

        player.gold += value + recovered
        player.kills.append(KillRecord(enemy=enemy.snapshot(), treasure_value=value))
        tile.cleared = True
        enemy.defeated = True

        if treasure is not None:
            message = (
                f"⚔️ Victory! You defeat the {enemy.full_name} and take "
                f"{treasure.icon} {treasure.name} ({treasure.value} coins)."
            )
        else:
            message = f"⚔️ Victory! You defeat the {enemy.full_name}."
        if recovered > 0:
            message += f" You recover {recovered} coins from failed bribes."
        self._log(session, message, LogCategory.COMBAT_WIN)
        self.event_bus.publish(
            EnemyDefeated(
                session_id=session.session_id,
                enemy_name=enemy.full_name,
                total_strength=enemy.total_strength,
                treasure_value=value,
                row=tile.row,
                col=tile.col,
            )
        )

        self._roll_hidden_treasure(session, "🎁 Hidden treasure! Among the remains you find")

        if enemy.is_princess_captor:
            self._release_princess(
                session,
                "👸 You have rescued the princess! Now lead her out of the forest by any edge of the map.",
                by_bribe=False,
            )

        session.active_encounter = None
        session.bribe_lost_gold = 0
        return recovered

    def _roll_hidden_treasure(self, session: GameSession, prefix: str) -> None:
        hidden = roll_hidden_treasure(session.rng)
        if hidden is None:
            return
        session.player.inventory.append(hidden)
        self._log(
            session,
            f"{prefix}: {hidden.icon} {hidden.name} - {hidden.description}",
            LogCategory.HIDDEN_TREASURE,
        )
        self.event_bus.publish(
            HiddenTreasureFound(session_id=session.session_id, item_id=hidden.id, effect=hidden.effect.value)
        )

    def _release_princess(self, session: GameSession, message: str, *, by_bribe: bool) -> None:
        session.player.has_princess = True
        self._log(session, message, LogCategory.PRINCESS_RESCUED)
        self.event_bus.publish(PrincessRescued(session_id=session.session_id, by_bribe=by_bribe))

    def _handle_death(self, session: GameSession, cause: DeathCause) -> None:
        encounter = session.active_encounter
        killer = encounter.enemy.full_name if encounter is not None else FOREST_KILLER
        if cause == DeathCause.FLEE:
            message = f"💀 You try to run but the {killer} catches you and cuts you down."
        elif cause == DeathCause.PILL:
            message = "💊💥 You swallow the explosive pill. A deafening blast shakes the forest. Nothing is left of you."
        else:
            message = f"💀 The {killer} defeats you in combat."

        if session.player.has_princess:
            ending = Ending.DEATH_WITH_PRINCESS
            message += " The princess, who was travelling with you, dies as well."
        else:
            ending = Ending.DEATH_WITHOUT_PRINCESS
            message += (
                " The sorcerer, smiling darkly, serves the princess to his dragon on a silver platter."
                " The beast swallows her in a single bite."
            )
        self._log(session, message, LogCategory.DEATH)
        session.death_cause = cause
        session.killed_by = killer
        self._finish(session, ending)

    def _finish(self, session: GameSession, ending: Ending) -> None:
        session.ending = ending
        session.final_score = scoring.calculate_score(session)
        logger.info(
            "Session %s ended: %s (score %s)",
            session.session_id,
            ending.value,
            session.final_score.score,
        )
        record = self.build_score_record(session)
        self.event_bus.publish(
            GameEnded(
                session_id=session.session_id,
                ending=ending.value,
                death_cause=session.death_cause.value if session.death_cause is not None else None,
                record=record,
            )
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def calculate_score(self, session: GameSession) -> ScoreSummary:
        return scoring.calculate_score(session)

    def build_score_record(self, session: GameSession, created_at: Optional[datetime] = None) -> ScoreRecord:
        return scoring.build_score_record(session, created_at=created_at)

    def get_session_view(self, session: GameSession, log_limit: int = LOG_VIEW_LIMIT) -> SessionView:
        return to_session_view(session, log_limit=log_limit)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _reject_if_not_allowed(self, session: GameSession, action: PhaseAction) -> Optional[ActionResult]:
        if is_action_allowed(session.phase, action):
            return None
        logger.debug("Rejected %s during %s for session %s", action.value, session.phase.value, session.session_id)
        return ActionResult(
            status="rejected",
            phase=session.phase.value,
            messages=[f"You cannot {action.value.replace('_', ' ')} right now."],
            game_over=session.is_over,
        )

    def _log(self, session: GameSession, message: str, category: LogCategory) -> None:
        session.log.append(LogEntry(message=message, category=category, timestamp=self._clock()))

    def _result(self, session: GameSession, mark: int, status: str, **details) -> ActionResult:
        return ActionResult(
            status=status,
            phase=session.phase.value,
            messages=[entry.message for entry in session.log[mark:]],
            game_over=session.is_over,
            ending=session.ending.value if session.ending is not None else None,
            death_cause=session.death_cause.value if session.death_cause is not None else None,
            killed_by=session.killed_by,
            **details,
        )
