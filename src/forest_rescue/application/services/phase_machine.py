from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Optional

from forest_rescue.domain.models.session import GamePhase


class PhaseAction(str, Enum):
    MOVE = "move"
    ENTER_TILE = "enter_tile"
    CHOOSE_FIGHT = "choose_fight"
    CHOOSE_BRIBE = "choose_bribe"
    CANCEL_INPUT = "cancel_input"
    FIGHT = "fight"
    FLEE = "flee"
    BRIBE = "bribe"
    USE_ITEM = "use_item"


class PhaseTransitionError(RuntimeError):
    pass


# Sentinel meaning "remain in the current phase".
STAY = None

ALLOWED_ACTIONS: Mapping[GamePhase, frozenset[PhaseAction]] = {
    GamePhase.START: frozenset(),
    GamePhase.EXPLORING: frozenset({PhaseAction.MOVE, PhaseAction.ENTER_TILE, PhaseAction.USE_ITEM}),
    GamePhase.ENCOUNTER: frozenset(
        {
            PhaseAction.CHOOSE_FIGHT,
            PhaseAction.CHOOSE_BRIBE,
            PhaseAction.FIGHT,
            PhaseAction.FLEE,
            PhaseAction.BRIBE,
            PhaseAction.USE_ITEM,
        }
    ),
    GamePhase.FIGHT_INPUT: frozenset({PhaseAction.FIGHT, PhaseAction.CANCEL_INPUT}),
    GamePhase.BRIBE_INPUT: frozenset({PhaseAction.BRIBE, PhaseAction.CANCEL_INPUT}),
    GamePhase.FORCED_FIGHT: frozenset({PhaseAction.CHOOSE_FIGHT, PhaseAction.FIGHT, PhaseAction.USE_ITEM}),
    GamePhase.FORCED_FIGHT_INPUT: frozenset({PhaseAction.FIGHT}),
    GamePhase.GAME_OVER: frozenset(),
}

TRANSITIONS: Mapping[tuple[PhaseAction, str], Optional[GamePhase]] = {
    (PhaseAction.MOVE, "exit"): GamePhase.GAME_OVER,
    (PhaseAction.MOVE, "blocked"): STAY,
    (PhaseAction.ENTER_TILE, "cleared"): GamePhase.EXPLORING,
    (PhaseAction.ENTER_TILE, "looted"): GamePhase.EXPLORING,
    (PhaseAction.ENTER_TILE, "encounter"): GamePhase.ENCOUNTER,
    (PhaseAction.CHOOSE_FIGHT, "normal"): GamePhase.FIGHT_INPUT,
    (PhaseAction.CHOOSE_FIGHT, "forced"): GamePhase.FORCED_FIGHT_INPUT,
    (PhaseAction.CHOOSE_BRIBE, "normal"): GamePhase.BRIBE_INPUT,
    (PhaseAction.CANCEL_INPUT, "normal"): GamePhase.ENCOUNTER,
    (PhaseAction.FIGHT, "win"): GamePhase.EXPLORING,
    (PhaseAction.FIGHT, "draw"): GamePhase.ENCOUNTER,
    (PhaseAction.FIGHT, "lose"): GamePhase.GAME_OVER,
    (PhaseAction.FIGHT, "no_energy"): GamePhase.GAME_OVER,
    (PhaseAction.FLEE, "escape"): GamePhase.EXPLORING,
    (PhaseAction.FLEE, "caught"): GamePhase.ENCOUNTER,
    (PhaseAction.FLEE, "forced_fight"): GamePhase.FORCED_FIGHT,
    (PhaseAction.FLEE, "killed"): GamePhase.GAME_OVER,
    (PhaseAction.BRIBE, "accept"): GamePhase.EXPLORING,
    (PhaseAction.BRIBE, "reject"): GamePhase.ENCOUNTER,
    (PhaseAction.BRIBE, "insult"): GamePhase.FORCED_FIGHT,
    (PhaseAction.USE_ITEM, "win"): GamePhase.EXPLORING,
    (PhaseAction.USE_ITEM, "wasted"): STAY,
    (PhaseAction.USE_ITEM, "invalid"): STAY,
    (PhaseAction.USE_ITEM, "healed"): STAY,
    (PhaseAction.USE_ITEM, "teleport"): GamePhase.EXPLORING,
    (PhaseAction.USE_ITEM, "death"): GamePhase.GAME_OVER,
}


def is_action_allowed(phase: GamePhase, action: PhaseAction) -> bool:
    return action in ALLOWED_ACTIONS.get(phase, frozenset())


def allowed_actions(phase: GamePhase) -> list[PhaseAction]:
    return sorted(ALLOWED_ACTIONS.get(phase, frozenset()), key=lambda action: action.value)


def next_phase(current: GamePhase, action: PhaseAction, outcome: str | Enum) -> GamePhase:
    if not is_action_allowed(current, action):
        raise PhaseTransitionError(f"{action.value} is not allowed during {current.value}")
    outcome_key = outcome.value if isinstance(outcome, Enum) else str(outcome)
    key = (action, outcome_key)
    if key not in TRANSITIONS:
        raise PhaseTransitionError(f"Unknown outcome {outcome!r} for {action.value}")
    target = TRANSITIONS[key]
    return current if target is STAY else target
