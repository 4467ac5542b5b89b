from dataclasses import dataclass
from typing import Optional

from forest_rescue.domain.models.score import ScoreRecord


@dataclass
class EnemyDefeated:
    session_id: str
    enemy_name: str
    total_strength: int
    treasure_value: int
    row: int
    col: int


@dataclass
class HiddenTreasureFound:
    session_id: str
    item_id: str
    effect: str


@dataclass
class PrincessRescued:
    session_id: str
    by_bribe: bool


@dataclass
class GameEnded:
    session_id: str
    ending: str
    death_cause: Optional[str]
    record: ScoreRecord
