from dataclasses import dataclass, field
from typing import List, Optional

from forest_rescue.domain.models.score import ScoreRecord


@dataclass
class ActionResult:
    status: str
    phase: str
    messages: List[str] = field(default_factory=list)
    game_over: bool = False
    ending: Optional[str] = None
    death_cause: Optional[str] = None
    killed_by: Optional[str] = None
    energy_spent: Optional[int] = None
    gold_offered: Optional[int] = None
    gold_recovered: int = 0
    new_position: Optional[tuple[int, int]] = None
    direction: Optional[str] = None
    item_id: Optional[str] = None
    entry: Optional[str] = None


@dataclass
class PlayerView:
    row: int
    col: int
    energy: int
    gold: int
    has_princess: bool
    inventory: List[str] = field(default_factory=list)
    kills_count: int = 0


@dataclass
class TileView:
    row: int
    col: int
    visited: bool
    cleared: bool
    is_swamp: bool
    is_player: bool
    enemy_icon: str = ""


@dataclass
class EncounterView:
    enemy_name: str
    enemy_icon: str
    total_strength: int
    treasure_name: str = ""
    treasure_value: int = 0
    pet_name: str = ""
    is_princess_captor: bool = False
    bribe_lost_gold: int = 0


@dataclass
class LogEntryView:
    message: str
    category: str
    timestamp: float


@dataclass
class ScoreView:
    score: int
    title: str
    total_gold: int
    total_kill_value: int
    total_treasure_value: int
    kills_count: int
    has_princess: bool
    ending: str = ""


@dataclass
class SessionView:
    session_id: str
    phase: str
    player: PlayerView
    tiles: List[List[TileView]] = field(default_factory=list)
    encounter: Optional[EncounterView] = None
    log: List[LogEntryView] = field(default_factory=list)
    available_actions: List[str] = field(default_factory=list)
    pending_entry: bool = False
    score: Optional[ScoreView] = None


@dataclass
class LeaderboardEntryView:
    rank: int
    pseudonym: str
    score: int
    title: str
    has_princess: bool
    ending: str
    created_at: str = ""


@dataclass
class SubmitScoreResult:
    success: bool
    error: Optional[str] = None


@dataclass
class LeaderboardQueryResult:
    scores: List[ScoreRecord] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class UserBestResult:
    score: Optional[int] = None
    title: Optional[str] = None
    error: Optional[str] = None


@dataclass
class TopScoreCheck:
    is_top: bool
    position: Optional[int] = None
