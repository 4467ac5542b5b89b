from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List

from forest_rescue.domain.models.enemy import Enemy
from forest_rescue.domain.models.position import Position


@dataclass
class Tile:
    position: Position
    enemy: Enemy
    visited: bool = False
    cleared: bool = False
    is_swamp: bool = False
    is_princess_tile: bool = False
    is_player_start: bool = False

    @property
    def row(self) -> int:
        return self.position.row

    @property
    def col(self) -> int:
        return self.position.col


@dataclass
class WorldMap:
    size: int
    start: Position
    princess: Position
    grid: List[List[Tile]] = field(default_factory=list)

    def in_bounds(self, position: Position) -> bool:
        return 0 <= position.row < self.size and 0 <= position.col < self.size

    def tile_at(self, position: Position) -> Tile:
        if not self.in_bounds(position):
            raise IndexError(f"Position out of bounds: {position}")
        return self.grid[position.row][position.col]

    def is_passable(self, position: Position) -> bool:
        return self.in_bounds(position) and not self.tile_at(position).is_swamp

    def tiles(self) -> Iterator[Tile]:
        for row in self.grid:
            yield from row

    def swamp_count(self) -> int:
        return sum(1 for tile in self.tiles() if tile.is_swamp)

    def princess_tile(self) -> Tile:
        return self.tile_at(self.princess)
