from __future__ import annotations

from datetime import datetime
from typing import Optional

from forest_rescue.application.services.balance_tables import title_for_score
from forest_rescue.domain.models.score import ANONYMOUS_PSEUDONYM, ScoreRecord, ScoreSummary
from forest_rescue.domain.models.session import GameSession


def calculate_score(session: GameSession) -> ScoreSummary:
    player = session.player
    total_gold = int(player.gold)
    total_kill_value = sum(int(kill.enemy.total_strength) for kill in player.kills)
    total_treasure_value = sum(int(kill.treasure_value) for kill in player.kills)
    score = total_gold + total_kill_value
    return ScoreSummary(
        score=score,
        title=title_for_score(score),
        total_gold=total_gold,
        total_kill_value=total_kill_value,
        total_treasure_value=total_treasure_value,
        kills_count=len(player.kills),
        has_princess=bool(player.has_princess),
        energy=int(player.energy),
    )


def build_score_record(session: GameSession, created_at: Optional[datetime] = None) -> ScoreRecord:
    summary = session.final_score or calculate_score(session)
    identity = session.identity
    return ScoreRecord(
        score=summary.score,
        title=summary.title,
        total_gold=summary.total_gold,
        total_kill_value=summary.total_kill_value,
        has_princess=summary.has_princess,
        kills_count=summary.kills_count,
        ending=session.ending.value if session.ending is not None else "",
        pseudonym=(identity.pseudonym or "").strip() or ANONYMOUS_PSEUDONYM,
        user_id=identity.user_id,
        created_at=created_at or datetime.now(),
    )
