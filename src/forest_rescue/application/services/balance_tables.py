from __future__ import annotations

import math
import sys

from forest_rescue.domain.models.player import MAX_ENERGY


MIN_FIGHT_ENERGY = 1

FIGHT_DRAW_PEAK = 0.45
FIGHT_DRAW_SIGMA = 0.38
FIGHT_WIN_STEEPNESS = 5.0

FLEE_ESCAPE_CHANCE = 0.45
FLEE_CAUGHT_CHANCE = 0.30
FLEE_FORCED_FIGHT_CHANCE = 0.20
FLEE_KILLED_CHANCE = 0.05

BRIBE_ACCEPT_MAX = 0.95
BRIBE_ACCEPT_CENTER = 60.0
BRIBE_ACCEPT_STEEPNESS = 0.05

BRIBE_INSULT_MAX = 0.55
BRIBE_INSULT_CENTER = 30.0
BRIBE_INSULT_STEEPNESS = 0.06

SCORE_TITLES = (
    (1000, "Legend"),
    (700, "Forest Hero"),
    (400, "Valiant Warrior"),
    (200, "Seasoned Hunter"),
    (100, "Novice Adventurer"),
)
DEFAULT_SCORE_TITLE = "Lost Wanderer"

LOG_VIEW_LIMIT = 8
LEADERBOARD_DEFAULT_LIMIT = 20
LEADERBOARD_TOP_N = 10


def title_for_score(score: int) -> str:
    for threshold, title in SCORE_TITLES:
        if score >= threshold:
            return title
    return DEFAULT_SCORE_TITLE


def _floor_amount(requested: object, default: int) -> int:
    try:
        number = float(requested)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    if math.isinf(number):
        return sys.maxsize if number > 0 else -sys.maxsize
    return math.floor(number)


def clamp_fight_energy(requested: object, available: int) -> int:
    amount = _floor_amount(requested, MIN_FIGHT_ENERGY)
    return max(MIN_FIGHT_ENERGY, min(amount, int(available)))


def clamp_bribe_gold(requested: object, available: int) -> int:
    amount = _floor_amount(requested, 0)
    return max(0, min(amount, int(available)))
