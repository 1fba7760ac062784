"""Tournament database operations."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from .models import BattleRecord, LeaderboardEntry

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS games (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        state TEXT NOT NULL,
        champion_id TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS battles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        game_id INTEGER REFERENCES games(id) ON DELETE CASCADE,
        round_number INTEGER NOT NULL,
        fighter1 TEXT NOT NULL,
        fighter2 TEXT NOT NULL,
        winner_id TEXT NOT NULL,
        winner_name TEXT NOT NULL,
        loser_id TEXT NOT NULL,
        loser_name TEXT NOT NULL,
        stats TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_battles_winner ON battles(winner_id)",
    "CREATE INDEX IF NOT EXISTS idx_battles_game ON battles(game_id)",
]


class TournamentDatabaseManager:
    """Manages SQLite storage of tournament snapshots and battles."""

    def __init__(self, db_path: str = "tournament.db"):
        self.db_path = Path(db_path)
        self._initialize_schema()

    @contextmanager
    def _get_connection(self):
        """Get a database connection with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row  # Enable column access by name
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            logger.error(f"Tournament database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    def _initialize_schema(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._get_connection() as conn:
            cursor = conn.cursor()
            for statement in SCHEMA_STATEMENTS:
                cursor.execute(statement)
            conn.commit()
        logger.debug(f"Initialized tournament database at {self.db_path}")

    def create_game(self, state: dict[str, Any]) -> int:
        """Store an initial tournament snapshot and return its ID."""
        now = datetime.now().isoformat()
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO games (state, champion_id, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                """,
                (json.dumps(state), state.get("champion"), now, now),
            )

            game_id = cursor.lastrowid
            if game_id is None:
                raise RuntimeError("Failed to get game ID from database")

            conn.commit()
            logger.info(f"Created game {game_id}")
            return game_id

    def save_game(self, game_id: int, state: dict[str, Any]) -> bool:
        """Overwrite the stored snapshot of a game."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE games
                SET state = ?, champion_id = ?, updated_at = ?
                WHERE id = ?
                """,
                (json.dumps(state), state.get("champion"), datetime.now().isoformat(), game_id),
            )
            updated = cursor.rowcount > 0
            conn.commit()

            if updated:
                logger.debug(f"Saved game {game_id}")

            return updated

    def get_game(self, game_id: int) -> dict[str, Any] | None:
        """Load the latest snapshot of a game."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT state FROM games WHERE id = ?", (game_id,))
            row = cursor.fetchone()

            if not row:
                return None

            return json.loads(row["state"])

    def add_battle(self, record: BattleRecord, game_id: int | None = None) -> int:
        """Store a completed match."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO battles (
                    game_id, round_number, fighter1, fighter2, winner_id,
                    winner_name, loser_id, loser_name, stats, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    game_id,
                    record.round,
                    record.fighter1.model_dump_json(),
                    record.fighter2.model_dump_json(),
                    record.winner.id,
                    record.winner.name,
                    record.loser.id,
                    record.loser.name,
                    json.dumps(record.stats),
                    datetime.now().isoformat(),
                ),
            )

            battle_id = cursor.lastrowid
            if battle_id is None:
                raise RuntimeError("Failed to get battle ID from database")

            conn.commit()
            logger.info(
                f"Stored battle {battle_id}: {record.winner.name} beat {record.loser.name} "
                f"in round {record.round}"
            )
            return battle_id

    def get_battles(self, game_id: int | None = None) -> list[dict[str, Any]]:
        """List stored battles, optionally for one game."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            query = "SELECT * FROM battles"
            params: list[Any] = []
            if game_id is not None:
                query += " WHERE game_id = ?"
                params.append(game_id)
            query += " ORDER BY id"

            cursor.execute(query, params)
            rows = cursor.fetchall()

            return [
                {
                    "id": row["id"],
                    "game_id": row["game_id"],
                    "round": row["round_number"],
                    "fighter1": json.loads(row["fighter1"]),
                    "fighter2": json.loads(row["fighter2"]),
                    "winner_id": row["winner_id"],
                    "loser_id": row["loser_id"],
                    "stats": json.loads(row["stats"]),
                    "created_at": row["created_at"],
                }
                for row in rows
            ]

    def get_leaderboard(self, limit: int = 15) -> list[LeaderboardEntry]:
        """Fighters with at least one win, most wins first."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT w.winner_id AS fighter_id,
                       MAX(w.winner_name) AS name,
                       COUNT(*) AS wins,
                       (SELECT COUNT(*) FROM battles l WHERE l.loser_id = w.winner_id) AS losses
                FROM battles w
                GROUP BY w.winner_id
                ORDER BY wins DESC, fighter_id
                LIMIT ?
                """,
                (limit,),
            )
            rows = cursor.fetchall()

            return [
                LeaderboardEntry(
                    fighter_id=row["fighter_id"],
                    name=row["name"],
                    wins=row["wins"],
                    losses=row["losses"],
                )
                for row in rows
            ]
