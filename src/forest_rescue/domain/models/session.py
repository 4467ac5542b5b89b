from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from forest_rescue.domain.models.enemy import Enemy
from forest_rescue.domain.models.player import Player
from forest_rescue.domain.models.score import PlayerIdentity, ScoreSummary
from forest_rescue.domain.models.world_map import Tile, WorldMap


class GamePhase(str, Enum):
    START = "start"
    EXPLORING = "exploring"
    ENCOUNTER = "encounter"
    FIGHT_INPUT = "fight_input"
    BRIBE_INPUT = "bribe_input"
    FORCED_FIGHT = "forced_fight"
    FORCED_FIGHT_INPUT = "forced_fight_input"
    GAME_OVER = "game_over"


class Ending(str, Enum):
    VICTORY = "victory"
    COWARD = "coward"
    DEATH_WITH_PRINCESS = "death_with_princess"
    DEATH_WITHOUT_PRINCESS = "death_without_princess"


class DeathCause(str, Enum):
    COMBAT = "combat"
    FLEE = "flee"
    PILL = "pill"


class LogCategory(str, Enum):
    INTRO = "intro"
    INFO = "info"
    ENCOUNTER = "encounter"
    MOUSE = "mouse"
    HIDDEN_TREASURE = "hidden_treasure"
    COMBAT_WIN = "combat_win"
    COMBAT_DRAW = "combat_draw"
    PRINCESS_RESCUED = "princess_rescued"
    FLEE_ESCAPE = "flee_escape"
    FLEE_FAIL = "flee_fail"
    FLEE_CAUGHT = "flee_caught"
    FLEE_FORCED = "flee_forced"
    BRIBE_ACCEPT = "bribe_accept"
    BRIBE_REJECT = "bribe_reject"
    BRIBE_INSULT = "bribe_insult"
    ITEM_USE = "item_use"
    ERROR = "error"
    DEATH = "death"
    VICTORY = "victory"
    COWARD = "coward"


@dataclass(frozen=True)
class LogEntry:
    message: str
    category: LogCategory
    timestamp: float


@dataclass
class Encounter:
    tile: Tile
    enemy: Enemy


@dataclass
class GameSession:
    session_id: str
    seed: int
    player: Player
    world_map: WorldMap
    phase: GamePhase = GamePhase.START
    identity: PlayerIdentity = field(default_factory=PlayerIdentity)
    active_encounter: Optional[Encounter] = None
    bribe_lost_gold: int = 0
    pending_entry: bool = False
    log: List[LogEntry] = field(default_factory=list)
    ending: Optional[Ending] = None
    death_cause: Optional[DeathCause] = None
    killed_by: Optional[str] = None
    final_score: Optional[ScoreSummary] = None
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    def current_tile(self) -> Tile:
        return self.world_map.tile_at(self.player.position)

    def recent_log(self, limit: int = 8) -> List[LogEntry]:
        if limit <= 0:
            return []
        return list(self.log[-limit:])
