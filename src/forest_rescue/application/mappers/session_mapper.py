from __future__ import annotations

from typing import Optional, Sequence

from forest_rescue.application.dtos import (
    EncounterView,
    LeaderboardEntryView,
    LogEntryView,
    PlayerView,
    ScoreView,
    SessionView,
    TileView,
)
from forest_rescue.application.services.phase_machine import allowed_actions
from forest_rescue.domain.models.score import ScoreRecord, ScoreSummary
from forest_rescue.domain.models.session import Encounter, GameSession, LogEntry
from forest_rescue.domain.models.world_map import Tile


def to_player_view(session: GameSession) -> PlayerView:
    player = session.player
    return PlayerView(
        row=player.position.row,
        col=player.position.col,
        energy=player.energy,
        gold=player.gold,
        has_princess=player.has_princess,
        inventory=[item.name for item in player.inventory],
        kills_count=len(player.kills),
    )


def to_tile_view(tile: Tile, *, is_player: bool) -> TileView:
    # Unvisited tiles keep their occupant hidden.
    icon = tile.enemy.icon if tile.visited and not tile.cleared else ""
    return TileView(
        row=tile.row,
        col=tile.col,
        visited=tile.visited,
        cleared=tile.cleared,
        is_swamp=tile.is_swamp,
        is_player=is_player,
        enemy_icon=icon,
    )


def to_encounter_view(encounter: Optional[Encounter], bribe_lost_gold: int = 0) -> Optional[EncounterView]:
    if encounter is None:
        return None
    enemy = encounter.enemy
    return EncounterView(
        enemy_name=enemy.full_name,
        enemy_icon=enemy.icon,
        total_strength=enemy.total_strength,
        treasure_name=enemy.treasure.name if enemy.treasure is not None else "",
        treasure_value=enemy.treasure.value if enemy.treasure is not None else 0,
        pet_name=enemy.pet.full_name if enemy.pet is not None else "",
        is_princess_captor=enemy.is_princess_captor,
        bribe_lost_gold=bribe_lost_gold,
    )


def to_log_entry_view(entry: LogEntry) -> LogEntryView:
    return LogEntryView(message=entry.message, category=entry.category.value, timestamp=entry.timestamp)


def to_score_view(summary: ScoreSummary, ending: str = "") -> ScoreView:
    return ScoreView(
        score=summary.score,
        title=summary.title,
        total_gold=summary.total_gold,
        total_kill_value=summary.total_kill_value,
        total_treasure_value=summary.total_treasure_value,
        kills_count=summary.kills_count,
        has_princess=summary.has_princess,
        ending=ending,
    )


def to_session_view(session: GameSession, *, log_limit: int) -> SessionView:
    position = session.player.position
    tiles = [
        [to_tile_view(tile, is_player=tile.position == position) for tile in row]
        for row in session.world_map.grid
    ]
    score = None
    if session.final_score is not None:
        score = to_score_view(session.final_score, session.ending.value if session.ending else "")
    return SessionView(
        session_id=session.session_id,
        phase=session.phase.value,
        player=to_player_view(session),
        tiles=tiles,
        encounter=to_encounter_view(session.active_encounter, session.bribe_lost_gold),
        log=[to_log_entry_view(entry) for entry in session.recent_log(log_limit)],
        available_actions=[action.value for action in allowed_actions(session.phase)],
        pending_entry=session.pending_entry,
        score=score,
    )


def to_leaderboard_entry_views(records: Sequence[ScoreRecord]) -> list[LeaderboardEntryView]:
    return [
        LeaderboardEntryView(
            rank=index,
            pseudonym=record.pseudonym,
            score=record.score,
            title=record.title,
            has_princess=record.has_princess,
            ending=record.ending,
            created_at=record.created_at.isoformat() if record.created_at else "",
        )
        for index, record in enumerate(records, start=1)
    ]
