from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


ANONYMOUS_PSEUDONYM = "Anonymous"


class LeaderboardPeriod(str, Enum):
    TODAY = "today"
    WEEK = "week"
    ALLTIME = "alltime"

    @classmethod
    def normalize(cls, value: "LeaderboardPeriod | str | None") -> "LeaderboardPeriod":
        if isinstance(value, LeaderboardPeriod):
            return value
        raw = str(value or "").strip().lower().replace("_", "").replace("-", "")
        aliases = {"all": cls.ALLTIME.value, "alltime": cls.ALLTIME.value, "day": cls.TODAY.value}
        resolved = aliases.get(raw, raw)
        valid = {item.value for item in cls}
        return cls(resolved) if resolved in valid else cls.ALLTIME

    def cutoff(self, now: datetime) -> Optional[datetime]:
        """Earliest ``created_at`` included in this window, or ``None`` for all time."""
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if self is LeaderboardPeriod.TODAY:
            return midnight
        if self is LeaderboardPeriod.WEEK:
            return midnight - timedelta(days=7)
        return None


@dataclass(frozen=True)
class PlayerIdentity:
    pseudonym: str = ANONYMOUS_PSEUDONYM
    user_id: Optional[str] = None


@dataclass(frozen=True)
class ScoreSummary:
    score: int
    title: str
    total_gold: int
    total_kill_value: int
    total_treasure_value: int
    kills_count: int
    has_princess: bool
    energy: int


@dataclass
class ScoreRecord:
    score: int
    title: str
    total_gold: int
    total_kill_value: int
    has_princess: bool
    kills_count: int
    ending: str
    pseudonym: str = ANONYMOUS_PSEUDONYM
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_payload(self) -> dict[str, object]:
        return {
            "score": int(self.score),
            "title": self.title,
            "totalGold": int(self.total_gold),
            "totalKillValue": int(self.total_kill_value),
            "hasPrincess": bool(self.has_princess),
            "killsCount": int(self.kills_count),
            "ending": self.ending,
            "pseudonym": self.pseudonym or ANONYMOUS_PSEUDONYM,
            "userId": self.user_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> "ScoreRecord":
        created_raw = payload.get("createdAt") or payload.get("created_at")
        created_at = None
        if isinstance(created_raw, datetime):
            created_at = created_raw
        elif created_raw:
            try:
                created_at = datetime.fromisoformat(str(created_raw))
            except ValueError:
                created_at = None
        user_id = payload.get("userId", payload.get("user_id"))
        return cls(
            score=int(payload.get("score", 0) or 0),
            title=str(payload.get("title", "") or ""),
            total_gold=int(payload.get("totalGold", payload.get("total_gold", 0)) or 0),
            total_kill_value=int(payload.get("totalKillValue", payload.get("total_kill_value", 0)) or 0),
            has_princess=bool(payload.get("hasPrincess", payload.get("has_princess", False))),
            kills_count=int(payload.get("killsCount", payload.get("kills_count", 0)) or 0),
            ending=str(payload.get("ending", "") or ""),
            pseudonym=str(payload.get("pseudonym") or ANONYMOUS_PSEUDONYM),
            user_id=None if user_id is None else str(user_id),
            created_at=created_at,
        )
