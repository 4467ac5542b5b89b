from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import text

from forest_rescue.domain.models.score import ANONYMOUS_PSEUDONYM, LeaderboardPeriod, ScoreRecord
from forest_rescue.domain.repositories import LeaderboardRepository
from .connection import SessionLocal


_SCORE_COLUMNS = """
    score_id, user_id, pseudonym, score, title, total_gold, total_kill_value,
    has_princess, kills_count, ending, created_at
"""


def _dialect_name(session) -> str:
    return session.bind.dialect.name if session.bind is not None else "mysql"


def _bind_timestamp(value: datetime, dialect: str):
    # SQLite keeps timestamps as ISO text; fixed precision keeps them comparable.
    if dialect == "mysql":
        return value
    return value.isoformat(timespec="microseconds")


def _parse_timestamp(raw) -> Optional[datetime]:
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        return None


def _row_to_record(row) -> ScoreRecord:
    return ScoreRecord(
        score=int(row.score),
        title=row.title,
        total_gold=int(row.total_gold),
        total_kill_value=int(row.total_kill_value),
        has_princess=bool(row.has_princess),
        kills_count=int(row.kills_count),
        ending=row.ending,
        pseudonym=row.pseudonym or ANONYMOUS_PSEUDONYM,
        user_id=row.user_id,
        created_at=_parse_timestamp(row.created_at),
    )


class SqlLeaderboardRepository(LeaderboardRepository):
    def __init__(self, session_factory=None) -> None:
        self._session_factory = session_factory

    def _session(self):
        factory = self._session_factory or SessionLocal
        return factory()

    def _session_begin(self):
        factory = self._session_factory or SessionLocal
        return factory.begin()

    def add(self, record: ScoreRecord) -> None:
        created_at = record.created_at or datetime.now()
        with self._session_begin() as session:
            dialect = _dialect_name(session)
            session.execute(
                text(
                    """
                    INSERT INTO score (
                        user_id, pseudonym, score, title, total_gold, total_kill_value,
                        has_princess, kills_count, ending, created_at
                    )
                    VALUES (
                        :user_id, :pseudonym, :score, :title, :total_gold, :total_kill_value,
                        :has_princess, :kills_count, :ending, :created_at
                    )
                    """
                ),
                {
                    "user_id": record.user_id,
                    "pseudonym": record.pseudonym or ANONYMOUS_PSEUDONYM,
                    "score": int(record.score),
                    "title": record.title,
                    "total_gold": int(record.total_gold),
                    "total_kill_value": int(record.total_kill_value),
                    "has_princess": 1 if record.has_princess else 0,
                    "kills_count": int(record.kills_count),
                    "ending": record.ending,
                    "created_at": _bind_timestamp(created_at, dialect),
                },
            )

    def list_top(
        self,
        period: LeaderboardPeriod,
        limit: int = 20,
        now: Optional[datetime] = None,
    ) -> List[ScoreRecord]:
        cutoff = LeaderboardPeriod.normalize(period).cutoff(now or datetime.now())
        with self._session() as session:
            params: dict[str, object] = {"limit": max(0, int(limit))}
            where = ""
            if cutoff is not None:
                where = "WHERE created_at >= :cutoff"
                params["cutoff"] = _bind_timestamp(cutoff, _dialect_name(session))
            rows = session.execute(
                text(
                    f"""
                    SELECT {_SCORE_COLUMNS}
                    FROM score
                    {where}
                    ORDER BY score DESC, score_id ASC
                    LIMIT :limit
                    """
                ),
                params,
            ).all()
            return [_row_to_record(row) for row in rows]

    def best_for_user(self, user_id: str) -> Optional[ScoreRecord]:
        with self._session() as session:
            row = session.execute(
                text(
                    f"""
                    SELECT {_SCORE_COLUMNS}
                    FROM score
                    WHERE user_id = :user_id
                    ORDER BY score DESC, score_id ASC
                    LIMIT 1
                    """
                ),
                {"user_id": user_id},
            ).first()
            return _row_to_record(row) if row else None
