from __future__ import annotations

import logging
import math
import random
from collections import deque
from typing import Optional

from forest_rescue.domain.models.position import Direction, Position, manhattan_distance
from forest_rescue.domain.models.world_map import Tile, WorldMap
from forest_rescue.domain.services.entity_catalog import create_enemy
from forest_rescue.domain.services.probability import clamp, round_half_up, shuffle, uniform_int


MAP_SIZE = 11
SWAMP_RATIO = 0.20
PRINCESS_MIN_DISTANCE = 5
PRINCESS_PLACEMENT_ATTEMPTS = 1000
TIER_VARIANCE = 1
MAX_TIER_INDEX = 10
TIER_STEP = 10

logger = logging.getLogger(__name__)


def _random_position(rng: random.Random, size: int) -> Position:
    return Position(uniform_int(rng, 0, size - 1), uniform_int(rng, 0, size - 1))


def place_princess(start: Position, rng: random.Random, size: int = MAP_SIZE) -> Position:
    """Rejection-sample a princess position at least ``PRINCESS_MIN_DISTANCE`` from ``start``.

    After ``PRINCESS_PLACEMENT_ATTEMPTS`` draws the last sample is accepted even
    if it is too close.
    """
    position = _random_position(rng, size)
    attempts = 1
    while (
        manhattan_distance(start, position) < PRINCESS_MIN_DISTANCE or position == start
    ) and attempts < PRINCESS_PLACEMENT_ATTEMPTS:
        position = _random_position(rng, size)
        attempts += 1
    if manhattan_distance(start, position) < PRINCESS_MIN_DISTANCE:
        logger.debug(
            "Princess placement cap reached after %s attempts; accepting %s for start %s",
            attempts,
            position,
            start,
        )
    return position


def max_corner_distance(princess: Position, size: int = MAP_SIZE) -> int:
    corners = (
        Position(0, 0),
        Position(0, size - 1),
        Position(size - 1, 0),
        Position(size - 1, size - 1),
    )
    return max(manhattan_distance(princess, corner) for corner in corners)


def base_tier_for_distance(distance: int, max_distance: int) -> int:
    """Tier index 0..10 before variance; closer to the princess means stronger."""
    if max_distance <= 0:
        return MAX_TIER_INDEX
    normalized = distance / max_distance
    return round_half_up((1 - normalized) * MAX_TIER_INDEX)


def enemy_tier_for_distance(distance: int, max_distance: int, rng: random.Random) -> int:
    variance = uniform_int(rng, -TIER_VARIANCE, TIER_VARIANCE)
    index = clamp(base_tier_for_distance(distance, max_distance) + variance, 0, MAX_TIER_INDEX)
    return int(index) * TIER_STEP


def _build_grid(size: int, start: Position, princess: Position, rng: random.Random) -> list[list[Tile]]:
    max_distance = max_corner_distance(princess, size)
    grid: list[list[Tile]] = []
    for row in range(size):
        tiles: list[Tile] = []
        for col in range(size):
            position = Position(row, col)
            is_princess_tile = position == princess
            if is_princess_tile:
                enemy = create_enemy(100, rng, is_princess_captor=True)
            else:
                tier = enemy_tier_for_distance(manhattan_distance(position, princess), max_distance, rng)
                enemy = create_enemy(tier, rng)
            tiles.append(
                Tile(
                    position=position,
                    enemy=enemy,
                    visited=position == start,
                    is_princess_tile=is_princess_tile,
                    is_player_start=position == start,
                )
            )
        grid.append(tiles)
    return grid


def has_path(world_map: WorldMap, start: Position, goal: Position) -> bool:
    """Breadth-first search over 4-neighbours, treating swamp tiles as blocked."""
    if not world_map.is_passable(start) or not world_map.is_passable(goal):
        return False
    seen = {start}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        if current == goal:
            return True
        for _, neighbor in current.neighbors():
            if neighbor in seen or not world_map.is_passable(neighbor):
                continue
            seen.add(neighbor)
            queue.append(neighbor)
    return False


def swamp_target(size: int = MAP_SIZE, swamp_ratio: float = SWAMP_RATIO) -> int:
    return int(math.floor(size * size * swamp_ratio))


def place_swamps(world_map: WorldMap, rng: random.Random, swamp_ratio: float = SWAMP_RATIO) -> int:
    target = swamp_target(world_map.size, swamp_ratio)
    candidates = [
        tile
        for tile in world_map.tiles()
        if tile.position != world_map.start and tile.position != world_map.princess
    ]
    shuffle(rng, candidates)

    placed = 0
    for tile in candidates:
        if placed >= target:
            break
        tile.is_swamp = True
        if has_path(world_map, world_map.start, world_map.princess):
            placed += 1
        else:
            tile.is_swamp = False

    if placed < target:
        logger.debug("Placed %s of %s swamp tiles; connectivity blocked the rest", placed, target)
    return placed


def generate_map(
    rng: random.Random,
    size: int = MAP_SIZE,
    swamp_ratio: float = SWAMP_RATIO,
) -> WorldMap:
    start = _random_position(rng, size)
    princess = place_princess(start, rng, size)
    world_map = WorldMap(size=size, start=start, princess=princess)
    world_map.grid = _build_grid(size, start, princess, rng)
    place_swamps(world_map, rng, swamp_ratio)
    return world_map


def passable_neighbors(world_map: WorldMap, position: Position) -> list[tuple[Direction, Position]]:
    return [
        (direction, neighbor)
        for direction, neighbor in position.neighbors()
        if world_map.is_passable(neighbor)
    ]


def random_adjacent_position(
    world_map: WorldMap,
    position: Position,
    rng: random.Random,
) -> Optional[tuple[Direction, Position]]:
    options = passable_neighbors(world_map, position)
    if not options:
        return None
    shuffle(rng, options)
    return options[0]


def random_passable_position(world_map: WorldMap, rng: random.Random) -> Position:
    options = [tile.position for tile in world_map.tiles() if not tile.is_swamp]
    return rng.choice(options)
