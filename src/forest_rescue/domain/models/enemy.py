from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


DRAGON_TIER = 90


class ItemEffect(str, Enum):
    INSTANT_KILL = "instant_kill"
    DRAGON_KILL = "dragon_kill"
    TELEPORT = "teleport"
    SELF_DESTRUCT = "self_destruct"
    FULL_HEAL = "full_heal"

    @property
    def needs_encounter(self) -> bool:
        return self in {ItemEffect.INSTANT_KILL, ItemEffect.DRAGON_KILL}


@dataclass(frozen=True)
class EnemyType:
    tier: int
    name: str
    icon: str
    description: str


@dataclass(frozen=True)
class Treasure:
    value: int
    name: str
    icon: str


@dataclass(frozen=True)
class HiddenTreasure:
    id: str
    name: str
    icon: str
    description: str
    effect: ItemEffect


@dataclass(frozen=True)
class Companion:
    tier: int
    name: str
    icon: str
    adjectives: tuple[str, ...]
    full_name: str


@dataclass
class Enemy:
    tier: int
    name: str
    icon: str
    description: str
    adjectives: tuple[str, ...] = ()
    full_name: str = ""
    pet: Optional[Companion] = None
    total_strength: int = 0
    treasure: Optional[Treasure] = None
    is_princess_captor: bool = False
    defeated: bool = False

    @property
    def has_dragon(self) -> bool:
        if self.tier == DRAGON_TIER:
            return True
        return self.pet is not None and self.pet.tier == DRAGON_TIER

    def snapshot(self) -> "Enemy":
        return replace(self)


@dataclass(frozen=True)
class KillRecord:
    enemy: Enemy
    treasure_value: int = 0
