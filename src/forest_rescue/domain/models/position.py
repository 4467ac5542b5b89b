from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Direction(str, Enum):
    NORTH = "north"
    SOUTH = "south"
    WEST = "west"
    EAST = "east"

    @property
    def offset(self) -> tuple[int, int]:
        return _OFFSETS[self]

    @classmethod
    def parse(cls, value: "Direction | str") -> "Direction":
        if isinstance(value, Direction):
            return value
        raw = str(value or "").strip().lower()
        aliases = {"n": "north", "s": "south", "w": "west", "e": "east", "up": "north", "down": "south", "left": "west", "right": "east"}
        resolved = aliases.get(raw, raw)
        try:
            return cls(resolved)
        except ValueError:
            raise ValueError(f"Unknown direction: {value!r}") from None


_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.NORTH: (-1, 0),
    Direction.SOUTH: (1, 0),
    Direction.WEST: (0, -1),
    Direction.EAST: (0, 1),
}


@dataclass(frozen=True)
class Position:
    row: int
    col: int

    def step(self, direction: Direction | str) -> "Position":
        d_row, d_col = Direction.parse(direction).offset
        return Position(self.row + d_row, self.col + d_col)

    def neighbors(self) -> list[tuple[Direction, "Position"]]:
        return [(direction, self.step(direction)) for direction in Direction]


def manhattan_distance(a: Position, b: Position) -> int:
    return abs(a.row - b.row) + abs(a.col - b.col)
