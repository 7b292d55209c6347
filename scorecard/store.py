"""sqlite storage for matches, players and scorecards."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from typing import Any, Generator, Optional

from scorecard import (
    BattingPerformance,
    BowlingPerformance,
    ComputedStats,
    Extras,
    Innings,
    InningsTotal,
    Match,
    MatchInfo,
    MatchOutcome,
    Player,
    ProcessingStatus,
    Scorecard,
    StatLeader,
    Team,
)

log = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path('data/scorecards.db')


def get_connection(db_path: str | Path = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Create a database connection with row factory enabled."""
    if str(db_path) != ':memory:':
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Generator[sqlite3.Connection, None, None]:
    """Context manager for database transactions."""
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def init_database(conn: sqlite3.Connection) -> None:
    """Initialize the database schema."""
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS players (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            short_name TEXT,
            team TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT '',
            is_active INTEGER NOT NULL DEFAULT 1
        );

        CREATE TABLE IF NOT EXISTS matches (
            id INTEGER PRIMARY KEY,
            team1_name TEXT NOT NULL,
            team1_short TEXT NOT NULL,
            team2_name TEXT NOT NULL,
            team2_short TEXT NOT NULL,
            match_date TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'upcoming',
            is_team_selection_open INTEGER NOT NULL DEFAULT 1,
            scorecard_id INTEGER,
            result_winner TEXT NOT NULL DEFAULT '',
            result_summary TEXT NOT NULL DEFAULT '',
            team1_score TEXT NOT NULL DEFAULT '',
            team2_score TEXT NOT NULL DEFAULT '',
            stats_snapshot TEXT
        );

        -- One scorecard per match
        CREATE TABLE IF NOT EXISTS scorecards (
            id INTEGER PRIMARY KEY,
            match_id INTEGER NOT NULL UNIQUE REFERENCES matches(id),
            match_info TEXT NOT NULL,
            first_innings TEXT NOT NULL,
            second_innings TEXT NOT NULL,
            computed_stats TEXT NOT NULL,
            fantasy_points_calculated INTEGER NOT NULL DEFAULT 0,
            predictions_evaluated INTEGER NOT NULL DEFAULT 0,
            leaderboard_updated INTEGER NOT NULL DEFAULT 0,
            imported_at TEXT NOT NULL,
            imported_by TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_players_team ON players(team, is_active);
        CREATE INDEX IF NOT EXISTS idx_matches_date ON matches(match_date);
        CREATE INDEX IF NOT EXISTS idx_matches_teams ON matches(team1_short, team2_short);
    """)
    conn.commit()
    log.debug("Database schema initialized")


# Serialization of nested records
def _json_default(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def to_json(record: Any) -> str:
    return json.dumps(asdict(record), default=_json_default)


def match_info_from_dict(data: dict) -> MatchInfo:
    info = MatchInfo(**data)
    if isinstance(info.date, str):
        info.date = date.fromisoformat(info.date)
    return info


def innings_from_dict(data: dict) -> Innings:
    return Innings(
        batting_team=data.get('batting_team', ''),
        bowling_team=data.get('bowling_team', ''),
        batting=[BattingPerformance(**b) for b in data.get('batting', [])],
        bowling=[BowlingPerformance(**b) for b in data.get('bowling', [])],
        extras=Extras(**data.get('extras', {})),
        total=InningsTotal(**data.get('total', {})),
        fall_of_wickets=list(data.get('fall_of_wickets', [])),
        did_not_bat=list(data.get('did_not_bat', [])),
    )


def computed_stats_from_dict(data: dict) -> ComputedStats:
    return ComputedStats(
        total_match_score=data.get('total_match_score', 0),
        most_sixes=StatLeader(**data.get('most_sixes', {})),
        most_fours=StatLeader(**data.get('most_fours', {})),
        most_wickets=StatLeader(**data.get('most_wickets', {})),
        powerplay_score=data.get('powerplay_score', 0),
        fifties_count=data.get('fifties_count', 0),
    )


class PlayerStore:
    """Read access to stored players (plus inserts for seeding)."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Player:
        return Player(
            id=row['id'],
            name=row['name'],
            short_name=row['short_name'],
            team=row['team'],
            role=row['role'],
            is_active=bool(row['is_active']),
        )

    def add(self, player: Player) -> int:
        """Insert a player, returning its ID. Does not commit."""
        cursor = self.conn.execute(
            "INSERT INTO players (name, short_name, team, role, is_active) VALUES (?, ?, ?, ?, ?)",
            (player.name, player.short_name, player.team, player.role, int(player.is_active)),
        )
        return cursor.lastrowid

    def get(self, player_id: int) -> Optional[Player]:
        row = self.conn.execute("SELECT * FROM players WHERE id = ?", (player_id,)).fetchone()
        return self._from_row(row) if row else None

    def find_active(self, team: Optional[str] = None) -> list[Player]:
        """All active players, optionally restricted to one team short code."""
        if team:
            cursor = self.conn.execute(
                "SELECT * FROM players WHERE is_active = 1 AND team = ? ORDER BY id", (team,)
            )
        else:
            cursor = self.conn.execute("SELECT * FROM players WHERE is_active = 1 ORDER BY id")
        return [self._from_row(row) for row in cursor.fetchall()]


class MatchStore:
    """Access to stored matches."""

    # Fields update() accepts, besides result and stats_snapshot
    COLUMNS = ('scorecard_id', 'status', 'is_team_selection_open')

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Match:
        snapshot = row['stats_snapshot']
        return Match(
            id=row['id'],
            team1=Team(row['team1_name'], row['team1_short']),
            team2=Team(row['team2_name'], row['team2_short']),
            match_date=datetime.fromisoformat(row['match_date']),
            status=row['status'],
            scorecard_id=row['scorecard_id'],
            is_team_selection_open=bool(row['is_team_selection_open']),
            result=MatchOutcome(
                winner=row['result_winner'],
                summary=row['result_summary'],
                team1_score=row['team1_score'],
                team2_score=row['team2_score'],
            ),
            stats_snapshot=computed_stats_from_dict(json.loads(snapshot)) if snapshot else None,
        )

    def add(self, match: Match) -> int:
        """Insert a match fixture, returning its ID. Does not commit."""
        cursor = self.conn.execute(
            """INSERT INTO matches (team1_name, team1_short, team2_name, team2_short,
                                    match_date, status, is_team_selection_open)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                match.team1.name, match.team1.short_name,
                match.team2.name, match.team2.short_name,
                match.match_date.isoformat(), match.status,
                int(match.is_team_selection_open),
            ),
        )
        return cursor.lastrowid

    def get(self, match_id: int) -> Optional[Match]:
        """Get a match by its ID."""
        row = self.conn.execute("SELECT * FROM matches WHERE id = ?", (match_id,)).fetchone()
        return self._from_row(row) if row else None

    def find_by_date_range(self, start: datetime, end: datetime) -> list[Match]:
        """Matches whose date lies within [start, end], earliest first."""
        cursor = self.conn.execute(
            "SELECT * FROM matches WHERE match_date >= ? AND match_date <= ? ORDER BY match_date, id",
            (start.isoformat(), end.isoformat()),
        )
        return [self._from_row(row) for row in cursor.fetchall()]

    def find_by_short_names(self, short1: str, short2: str) -> Optional[Match]:
        """Most recent match between two teams (either order) without a scorecard."""
        row = self.conn.execute(
            """SELECT * FROM matches
               WHERE ((team1_short = ? AND team2_short = ?) OR (team1_short = ? AND team2_short = ?))
                 AND scorecard_id IS NULL
               ORDER BY match_date DESC, id DESC
               LIMIT 1""",
            (short1, short2, short2, short1),
        ).fetchone()
        return self._from_row(row) if row else None

    def find_without_scorecard(self) -> list[Match]:
        """Matches still lacking a scorecard, most recent first."""
        cursor = self.conn.execute(
            "SELECT * FROM matches WHERE scorecard_id IS NULL ORDER BY match_date DESC, id DESC"
        )
        return [self._from_row(row) for row in cursor.fetchall()]

    def update(
        self,
        match_id: int,
        result: Optional[MatchOutcome] = None,
        stats_snapshot: Optional[ComputedStats] = None,
        **fields: Any,
    ) -> None:
        """Update a subset of a match's fields. Does not commit.

        Raises:
            ValueError: On unknown field names.
            LookupError: If no match has the given ID.
        """
        unknown = set(fields) - set(self.COLUMNS)
        if unknown:
            raise ValueError(f"Unknown match fields: {', '.join(sorted(unknown))}")

        values: dict[str, Any] = dict(fields)
        if 'is_team_selection_open' in values:
            values['is_team_selection_open'] = int(values['is_team_selection_open'])
        if result is not None:
            values.update(
                result_winner=result.winner,
                result_summary=result.summary,
                team1_score=result.team1_score,
                team2_score=result.team2_score,
            )
        if stats_snapshot is not None:
            values['stats_snapshot'] = to_json(stats_snapshot)
        if not values:
            return

        assignments = ', '.join(f"{column} = ?" for column in values)
        cursor = self.conn.execute(
            f"UPDATE matches SET {assignments} WHERE id = ?",
            (*values.values(), match_id),
        )
        if cursor.rowcount != 1:
            raise LookupError(f"Match {match_id} not found")


class ScorecardStore:
    """Access to persisted scorecards."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Scorecard:
        return Scorecard(
            id=row['id'],
            match_id=row['match_id'],
            match_info=match_info_from_dict(json.loads(row['match_info'])),
            first_innings=innings_from_dict(json.loads(row['first_innings'])),
            second_innings=innings_from_dict(json.loads(row['second_innings'])),
            computed_stats=computed_stats_from_dict(json.loads(row['computed_stats'])),
            processing_status=ProcessingStatus(
                fantasy_points_calculated=bool(row['fantasy_points_calculated']),
                predictions_evaluated=bool(row['predictions_evaluated']),
                leaderboard_updated=bool(row['leaderboard_updated']),
            ),
            imported_at=datetime.fromisoformat(row['imported_at']),
            imported_by=row['imported_by'],
        )

    def create(self, scorecard: Scorecard) -> int:
        """Insert a scorecard, returning its ID. Does not commit.

        Raises:
            sqlite3.IntegrityError: If the match already has a scorecard.
        """
        imported_at = scorecard.imported_at or datetime.now()
        status = scorecard.processing_status
        cursor = self.conn.execute(
            """INSERT INTO scorecards (match_id, match_info, first_innings, second_innings,
                                       computed_stats, fantasy_points_calculated,
                                       predictions_evaluated, leaderboard_updated,
                                       imported_at, imported_by)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                scorecard.match_id,
                to_json(scorecard.match_info),
                to_json(scorecard.first_innings),
                to_json(scorecard.second_innings),
                to_json(scorecard.computed_stats),
                int(status.fantasy_points_calculated),
                int(status.predictions_evaluated),
                int(status.leaderboard_updated),
                imported_at.isoformat(),
                scorecard.imported_by,
            ),
        )
        return cursor.lastrowid

    def get(self, scorecard_id: int) -> Optional[Scorecard]:
        row = self.conn.execute("SELECT * FROM scorecards WHERE id = ?", (scorecard_id,)).fetchone()
        return self._from_row(row) if row else None

    def get_by_match_id(self, match_id: int) -> Optional[Scorecard]:
        row = self.conn.execute(
            "SELECT * FROM scorecards WHERE match_id = ?", (match_id,)
        ).fetchone()
        return self._from_row(row) if row else None

    def all(self) -> list[Scorecard]:
        """All scorecards, most recently imported first."""
        cursor = self.conn.execute("SELECT * FROM scorecards ORDER BY imported_at DESC, id DESC")
        return [self._from_row(row) for row in cursor.fetchall()]

    def delete(self, scorecard_id: int) -> None:
        """Delete a scorecard. Does not commit."""
        self.conn.execute("DELETE FROM scorecards WHERE id = ?", (scorecard_id,))
