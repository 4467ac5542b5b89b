from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from forest_rescue.domain.models.enemy import HiddenTreasure, KillRecord
from forest_rescue.domain.models.position import Position


MAX_ENERGY = 1000


@dataclass
class Player:
    position: Position
    energy: int = MAX_ENERGY
    gold: int = 0
    has_princess: bool = False
    inventory: List[HiddenTreasure] = field(default_factory=list)
    kills: List[KillRecord] = field(default_factory=list)

    def remove_item(self, index: int) -> Optional[HiddenTreasure]:
        """Remove and return the item at ``index``; ``None`` when the slot is empty."""
        if not isinstance(index, int) or isinstance(index, bool):
            return None
        if index < 0 or index >= len(self.inventory):
            return None
        return self.inventory.pop(index)

    def restore_item(self, index: int, item: HiddenTreasure) -> None:
        self.inventory.insert(max(0, min(index, len(self.inventory))), item)

    def spend_energy(self, amount: int) -> int:
        spent = max(0, min(int(amount), self.energy))
        self.energy -= spent
        return spent

    def spend_gold(self, amount: int) -> int:
        spent = max(0, min(int(amount), self.gold))
        self.gold -= spent
        return spent
