import logging
import os
from typing import Optional

from dotenv import load_dotenv

from forest_rescue.application.services.event_bus import EventBus
from forest_rescue.application.services.game_service import GameService
from forest_rescue.application.services.leaderboard_service import (
    LeaderboardService,
    register_leaderboard_handlers,
)
from forest_rescue.domain.repositories import LeaderboardRepository
from forest_rescue.infrastructure.inmemory.inmemory_leaderboard_repo import InMemoryLeaderboardRepository


logger = logging.getLogger(__name__)

LEADERBOARD_BACKENDS = {"memory", "sql", "http"}


def _is_truthy(value: str | None, *, default: str) -> bool:
    normalized = str(value if value is not None else default).strip().lower()
    return normalized in {"1", "true", "yes"}


def configure_logging(level: str | None = None) -> None:
    name = (level or os.getenv("FOREST_LOG_LEVEL", "WARNING")).strip().upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        resolved = logging.WARNING
    logging.basicConfig(level=resolved, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _configured_seed() -> Optional[int]:
    raw = os.getenv("FOREST_SEED", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer FOREST_SEED=%r", raw)
        return None


def _build_sql_repository() -> LeaderboardRepository:
    from forest_rescue.infrastructure.db.sql.connection import SessionLocal, engine
    from forest_rescue.infrastructure.db.sql.repos import SqlLeaderboardRepository
    from forest_rescue.infrastructure.db.sql.schema import ensure_schema

    # Force an early connectivity check so fallback happens before play starts.
    try:
        ensure_schema(engine)
    except Exception as exc:
        raise RuntimeError(f"SQL leaderboard connectivity check failed: {exc}") from exc
    return SqlLeaderboardRepository(session_factory=SessionLocal)


def _build_http_repository() -> LeaderboardRepository:
    from forest_rescue.infrastructure.http_leaderboard_client import HttpLeaderboardRepository

    base_url = os.getenv("FOREST_LEADERBOARD_URL", "").strip()
    if not base_url:
        raise RuntimeError("FOREST_LEADERBOARD_URL is required for the http leaderboard backend")
    timeout = float(os.getenv("FOREST_HTTP_TIMEOUT_S", "5"))
    retries = int(os.getenv("FOREST_HTTP_RETRIES", "1"))
    backoff_seconds = float(os.getenv("FOREST_HTTP_BACKOFF_S", "0.2"))
    return HttpLeaderboardRepository(
        base_url=base_url,
        timeout=timeout,
        retries=retries,
        backoff_seconds=backoff_seconds,
    )


def create_leaderboard_repository(backend: str | None = None) -> LeaderboardRepository:
    selected = (backend or os.getenv("FOREST_LEADERBOARD_BACKEND", "memory")).strip().lower()
    if selected not in LEADERBOARD_BACKENDS:
        logger.warning("Unknown leaderboard backend %r, using memory", selected)
        selected = "memory"
    try:
        if selected == "sql":
            return _build_sql_repository()
        if selected == "http":
            return _build_http_repository()
    except Exception as exc:
        logger.warning("%s leaderboard unavailable, falling back to in-memory. Reason: %s", selected, exc)
    return InMemoryLeaderboardRepository()


def create_game_service() -> GameService:
    load_dotenv()
    configure_logging()
    event_bus = EventBus()
    leaderboard = LeaderboardService(create_leaderboard_repository())
    if _is_truthy(os.getenv("FOREST_LEADERBOARD_AUTO_SUBMIT"), default="1"):
        register_leaderboard_handlers(event_bus, leaderboard)
    return GameService(event_bus, leaderboard=leaderboard, default_seed=_configured_seed())
