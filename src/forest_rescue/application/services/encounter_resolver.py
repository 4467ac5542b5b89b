"""Probability curves for fight, flee and bribe decisions.

Every resolver is a pure function of its inputs and the ``random.Random``
passed in; none of them touch session state.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from enum import Enum

from forest_rescue.application.services.balance_tables import (
    BRIBE_ACCEPT_CENTER,
    BRIBE_ACCEPT_MAX,
    BRIBE_ACCEPT_STEEPNESS,
    BRIBE_INSULT_CENTER,
    BRIBE_INSULT_MAX,
    BRIBE_INSULT_STEEPNESS,
    FIGHT_DRAW_PEAK,
    FIGHT_DRAW_SIGMA,
    FIGHT_WIN_STEEPNESS,
    FLEE_CAUGHT_CHANCE,
    FLEE_ESCAPE_CHANCE,
    FLEE_FORCED_FIGHT_CHANCE,
    FLEE_KILLED_CHANCE,
)
from forest_rescue.domain.services.probability import clamp, sigmoid, weighted_choice


class FightOutcome(str, Enum):
    WIN = "win"
    DRAW = "draw"
    LOSE = "lose"


class FleeOutcome(str, Enum):
    ESCAPE = "escape"
    CAUGHT = "caught"
    FORCED_FIGHT = "forced_fight"
    KILLED = "killed"


class BribeOutcome(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    INSULT = "insult"


@dataclass(frozen=True)
class FightOdds:
    win: float
    draw: float
    lose: float


@dataclass(frozen=True)
class BribeOdds:
    accept: float
    reject: float
    insult: float


FLEE_DISTRIBUTION: tuple[tuple[float, FleeOutcome], ...] = (
    (FLEE_ESCAPE_CHANCE, FleeOutcome.ESCAPE),
    (FLEE_CAUGHT_CHANCE, FleeOutcome.CAUGHT),
    (FLEE_FORCED_FIGHT_CHANCE, FleeOutcome.FORCED_FIGHT),
    (FLEE_KILLED_CHANCE, FleeOutcome.KILLED),
)


def fight_probabilities(energy_spent: float, enemy_strength: float) -> FightOdds:
    if enemy_strength == 0:
        return FightOdds(win=1.0, draw=0.0, lose=0.0)
    ratio = energy_spent / enemy_strength
    # Evenly matched forces are the most likely to stalemate.
    draw = FIGHT_DRAW_PEAK * math.exp(-((ratio - 1) ** 2) / (2 * FIGHT_DRAW_SIGMA**2))
    win = (1 - draw) * sigmoid(FIGHT_WIN_STEEPNESS * (ratio - 1))
    lose = 1 - win - draw
    return FightOdds(win=win, draw=draw, lose=lose)


def win_probability(energy_spent: float, enemy_strength: float) -> float:
    return fight_probabilities(energy_spent, enemy_strength).win


def resolve_fight(rng: random.Random, energy_spent: float, enemy_strength: float) -> FightOutcome:
    if enemy_strength == 0:
        return FightOutcome.WIN
    odds = fight_probabilities(energy_spent, enemy_strength)
    return weighted_choice(
        rng,
        (
            (odds.win, FightOutcome.WIN),
            (odds.draw, FightOutcome.DRAW),
            (odds.lose, FightOutcome.LOSE),
        ),
    )


def resolve_flee(rng: random.Random) -> FleeOutcome:
    return weighted_choice(rng, FLEE_DISTRIBUTION)


def accept_probability(gold: float) -> float:
    return BRIBE_ACCEPT_MAX * sigmoid(BRIBE_ACCEPT_STEEPNESS * (gold - BRIBE_ACCEPT_CENTER))


def insult_probability(gold: float) -> float:
    return BRIBE_INSULT_MAX * sigmoid(-BRIBE_INSULT_STEEPNESS * (gold - BRIBE_INSULT_CENTER))


def bribe_probabilities(gold: float) -> BribeOdds:
    """Accept and insult follow their own curves; reject is the clamped residual.

    The three masses are not renormalised when accept + insult
    exceeds 1.
    """
    accept = accept_probability(gold)
    insult = insult_probability(gold)
    reject = clamp(1 - accept - insult, 0.0, 1.0)
    return BribeOdds(accept=accept, reject=reject, insult=insult)


def resolve_bribe(rng: random.Random, gold: float) -> BribeOutcome:
    odds = bribe_probabilities(gold)
    return weighted_choice(
        rng,
        (
            (odds.accept, BribeOutcome.ACCEPT),
            (odds.reject, BribeOutcome.REJECT),
            (odds.insult, BribeOutcome.INSULT),
        ),
    )
