"""Scorecard import pipeline and scorecard service operations."""

import logging
import re
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Iterator, Optional

from scorecard import (
    ComputedStats,
    ImportResult,
    Innings,
    InningsTotal,
    Match,
    MatchInfo,
    MatchOutcome,
    PlayerResolution,
    Scorecard,
    StatLeader,
)
from scorecard.extractor import parse_scorecard
from scorecard.matching import ACCEPT_THRESHOLD, MatchCorrelator, PlayerResolver
from scorecard.reader import tokenize
from scorecard.stats import compute_stats
from scorecard.store import MatchStore, PlayerStore, ScorecardStore, transaction
from scorecard.teams import get_team_short_name

log = logging.getLogger(__name__)

_WINNER_RE = re.compile(r'^([\w\s]+?)\s+won', re.IGNORECASE)

NO_BATTING_DATA = 'No batting data found in CSV. Please check the file format.'
MATCH_ID_NOT_FOUND = 'Provided match ID not found in database.'
SCORECARD_EXISTS = 'Scorecard already exists for this match. Delete it first to reimport.'


class ImportState(Enum):
    PARSING = 'parsing'
    VALIDATING = 'validating'
    CORRELATING = 'correlating'
    RESOLVING = 'resolving'
    AGGREGATING = 'aggregating'
    PERSISTING = 'persisting'
    DONE = 'done'
    FAILED = 'failed'


class ScorecardImportError(Exception):
    """Base class for import failures."""


class FormatError(ScorecardImportError):
    """The export contains no batting data at all."""


class ResolutionError(ScorecardImportError):
    """The target match could not be found."""


class ConflictError(ScorecardImportError):
    """The match already has a scorecard."""


class StorageError(ScorecardImportError):
    """Database access failed; carries the partial import result."""

    def __init__(self, message: str, result: ImportResult):
        super().__init__(message)
        self.result = result


class _MatchLock:
    """A lock plus the number of callers holding or waiting for it."""

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


_match_locks: dict[int, _MatchLock] = {}
_match_locks_guard = threading.Lock()


@contextmanager
def match_lock(match_id: int) -> Iterator[None]:
    """Serialize imports targeting the same match within this process.

    The entry for a match is dropped once its last user leaves.
    """
    with _match_locks_guard:
        entry = _match_locks.setdefault(match_id, _MatchLock())
        entry.users += 1
    try:
        with entry.lock:
            yield
    finally:
        with _match_locks_guard:
            entry.users -= 1
            if not entry.users:
                del _match_locks[match_id]


def extract_winner(result_text: Optional[str]) -> str:
    """Return the team named before "won" in a result line, else ''."""
    if not result_text:
        return ''
    match = _WINNER_RE.match(result_text)
    return match.group(1).strip() if match else ''


def format_score(total: InningsTotal) -> str:
    return f"{total.runs}/{total.wickets} ({total.overs})"


def team_scores(match: Match, first: Innings, second: Innings) -> tuple[str, str]:
    """Assign the innings totals to the match's team1 and team2."""
    first_short = get_team_short_name(first.batting_team)
    if (match.team1.short_name == first_short
            or first.batting_team.lower() in match.team1.name.lower()):
        return format_score(first.total), format_score(second.total)
    return format_score(second.total), format_score(first.total)


def _backfill_player_id(leader: StatLeader, performances: list) -> None:
    """Copy the player ID of the first performance named like the leader."""
    for performance in performances:
        if performance.player_name == leader.player_name:
            if performance.player_id is not None:
                leader.player_id = performance.player_id
            return


class ScorecardImporter:
    """Imports scorecard exports and manages stored scorecards.

    Args:
        conn: Open database connection (schema initialized).
        threshold: Minimum score for accepting a player match.
    """

    def __init__(self, conn: sqlite3.Connection, threshold: float = ACCEPT_THRESHOLD):
        self.conn = conn
        self.matches = MatchStore(conn)
        self.players = PlayerStore(conn)
        self.scorecards = ScorecardStore(conn)
        self.correlator = MatchCorrelator(self.matches)
        self.resolver = PlayerResolver(self.players, threshold)

    def import_scorecard(
        self,
        csv_text: str,
        match_id: Optional[int] = None,
        imported_by: Optional[str] = None,
    ) -> ImportResult:
        """Parse an export, resolve it and store it as the match's scorecard.

        Format, resolution and conflict failures are reported in
        ``result.errors`` with ``success`` False. Any other unexpected
        exception is logged and propagates unchanged.

        Args:
            csv_text: Raw scorecard export.
            match_id: Target match; correlated from the export if None.
            imported_by: Identifier of the importing user.

        Returns:
            ImportResult describing the outcome.

        Raises:
            StorageError: On database failures, after logging them and
                appending them to the attached result's errors.
        """
        result = ImportResult()
        state = ImportState.PARSING
        try:
            match_info, first, second = parse_scorecard(tokenize(csv_text))

            state = self._advance(state, ImportState.VALIDATING)
            if not first.batting and not second.batting:
                raise FormatError(NO_BATTING_DATA)

            state = self._advance(state, ImportState.CORRELATING)
            match = self._find_match(match_info, first, second, match_id)
            result.match_found = True
            result.match_id = match.id

            with match_lock(match.id):
                if self.scorecards.get_by_match_id(match.id) is not None:
                    raise ConflictError(SCORECARD_EXISTS)

                state = self._advance(state, ImportState.RESOLVING)
                self._resolve_innings(first, 1, result)
                self._resolve_innings(second, 2, result)

                state = self._advance(state, ImportState.AGGREGATING)
                stats = compute_stats(first, second)
                batting = [*first.batting, *second.batting]
                bowling = [*first.bowling, *second.bowling]
                _backfill_player_id(stats.most_sixes, batting)
                _backfill_player_id(stats.most_fours, batting)
                _backfill_player_id(stats.most_wickets, bowling)

                state = self._advance(state, ImportState.PERSISTING)
                result.scorecard_id = self._persist(
                    match, match_info, first, second, stats, imported_by,
                )

            self._advance(state, ImportState.DONE)
            result.success = True
            log.info(
                "Imported scorecard %d for match %d (%d players matched, %d unmatched)",
                result.scorecard_id, match.id,
                result.players_matched, result.players_unmatched,
            )
        except (FormatError, ResolutionError, ConflictError) as exc:
            self._advance(state, ImportState.FAILED)
            log.warning("Scorecard import failed: %s", exc)
            result.errors.append(str(exc))
        except sqlite3.Error as exc:
            self._advance(state, ImportState.FAILED)
            log.exception("Scorecard import error")
            result.errors.append(str(exc))
            raise StorageError(str(exc), result) from exc
        except Exception as exc:
            self._advance(state, ImportState.FAILED)
            log.exception("Unexpected scorecard import error")
            result.errors.append(str(exc))
            raise

        return result

    @staticmethod
    def _advance(current: ImportState, target: ImportState) -> ImportState:
        log.debug("Import state %s -> %s", current.name, target.name)
        return target

    def _find_match(
        self,
        match_info: MatchInfo,
        first: Innings,
        second: Innings,
        match_id: Optional[int],
    ) -> Match:
        if match_id is not None:
            match = self.matches.get(match_id)
            if match is None:
                raise ResolutionError(MATCH_ID_NOT_FOUND)
            return match

        match = self.correlator.find_matching_match(
            match_info.date, first.batting_team, second.batting_team,
        )
        if match is None:
            date_text = match_info.date.isoformat() if match_info.date else 'unknown'
            raise ResolutionError(
                f"Could not find matching match. Teams: {first.batting_team} vs "
                f"{second.batting_team}, Date: {date_text}. Please select a match manually."
            )
        return match

    def _resolve_innings(self, innings: Innings, number: int, result: ImportResult) -> None:
        """Resolve batting then bowling names of one innings in place."""
        sides = (
            ('batting', innings.batting, innings.batting_team),
            ('bowling', innings.bowling, innings.bowling_team),
        )
        for role, performances, team in sides:
            for performance in performances:
                found = self.resolver.find_matching_player(performance.player_name, team)
                if found:
                    performance.player_id = found.player.id
                    result.players_matched += 1
                else:
                    performance.player_id = None
                    result.players_unmatched += 1
                    result.unmatched_players.append(
                        f"{performance.player_name} ({team} - {role})"
                    )
                    log.warning("Unmatched player: %s (%s - %s)", performance.player_name, team, role)
                result.resolutions.append(PlayerResolution(
                    innings=number,
                    role=role,
                    player_name=performance.player_name,
                    team=team,
                    player_id=found.player.id if found else None,
                    confidence=round(found.confidence, 4) if found else 0.0,
                    match_type=found.match_type if found else 'none',
                ))

    def _persist(
        self,
        match: Match,
        match_info: MatchInfo,
        first: Innings,
        second: Innings,
        stats: ComputedStats,
        imported_by: Optional[str],
    ) -> int:
        """Create the scorecard and update the match in one transaction."""
        team1_score, team2_score = team_scores(match, first, second)
        scorecard = Scorecard(
            id=None,
            match_id=match.id,
            match_info=match_info,
            first_innings=first,
            second_innings=second,
            computed_stats=stats,
            imported_at=datetime.now(),
            imported_by=imported_by,
        )
        try:
            with transaction(self.conn):
                scorecard_id = self.scorecards.create(scorecard)
                self.matches.update(
                    match.id,
                    scorecard_id=scorecard_id,
                    status='completed',
                    is_team_selection_open=False,
                    result=MatchOutcome(
                        winner=extract_winner(match_info.result),
                        summary=match_info.result or '',
                        team1_score=team1_score,
                        team2_score=team2_score,
                    ),
                    stats_snapshot=stats,
                )
        except sqlite3.IntegrityError as exc:
            raise ConflictError(SCORECARD_EXISTS) from exc
        except LookupError as exc:
            raise ResolutionError(str(exc)) from exc
        return scorecard_id

    def get_all_scorecards(self) -> list[Scorecard]:
        return self.scorecards.all()

    def get_scorecard_by_match_id(self, match_id: int) -> Optional[Scorecard]:
        return self.scorecards.get_by_match_id(match_id)

    def get_matches_without_scorecards(self) -> list[Match]:
        return self.matches.find_without_scorecard()

    def delete_scorecard(self, scorecard_id: int) -> bool:
        """Delete a scorecard and clear the match's reference to it.

        Returns:
            True if the scorecard existed.
        """
        scorecard = self.scorecards.get(scorecard_id)
        if scorecard is None:
            return False

        with transaction(self.conn):
            self.matches.update(scorecard.match_id, scorecard_id=None)
            self.scorecards.delete(scorecard_id)
        log.info("Deleted scorecard %d of match %d", scorecard_id, scorecard.match_id)
        return True
