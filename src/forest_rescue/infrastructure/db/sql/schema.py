from sqlalchemy import text
from sqlalchemy.engine import Engine


_MYSQL_SCORE_TABLE = """
CREATE TABLE IF NOT EXISTS score (
    score_id INT AUTO_INCREMENT PRIMARY KEY,
    user_id VARCHAR(128) NULL,
    pseudonym VARCHAR(64) NOT NULL,
    score INT NOT NULL,
    title VARCHAR(64) NOT NULL,
    total_gold INT NOT NULL,
    total_kill_value INT NOT NULL,
    has_princess TINYINT(1) NOT NULL,
    kills_count INT NOT NULL,
    ending VARCHAR(32) NOT NULL,
    created_at DATETIME NOT NULL,
    INDEX idx_score_created_at (created_at),
    INDEX idx_score_user (user_id, score)
)
"""

_SQLITE_SCORE_TABLE = """
CREATE TABLE IF NOT EXISTS score (
    score_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NULL,
    pseudonym TEXT NOT NULL,
    score INTEGER NOT NULL,
    title TEXT NOT NULL,
    total_gold INTEGER NOT NULL,
    total_kill_value INTEGER NOT NULL,
    has_princess INTEGER NOT NULL,
    kills_count INTEGER NOT NULL,
    ending TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""


def ensure_schema(engine: Engine) -> None:
    """Create the ``score`` table when it does not exist yet."""
    statement = _MYSQL_SCORE_TABLE if engine.dialect.name == "mysql" else _SQLITE_SCORE_TABLE
    with engine.begin() as conn:
        conn.execute(text(statement))
        if engine.dialect.name != "mysql":
            conn.execute(text("CREATE INDEX IF NOT EXISTS idx_score_created_at ON score (created_at)"))
            conn.execute(text("CREATE INDEX IF NOT EXISTS idx_score_user ON score (user_id, score)"))
