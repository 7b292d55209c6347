"""Resolution of free-text player and team names to stored records."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from scorecard import Match, Player
from scorecard.scoring import score_candidate
from scorecard.store import MatchStore, PlayerStore
from scorecard.teams import get_team_short_name

log = logging.getLogger(__name__)

# Minimum score for accepting a player match
ACCEPT_THRESHOLD = 0.6
# Scores at or above this count as exact matches
EXACT_THRESHOLD = 0.95

_DAY_END = time(23, 59, 59, 999000)


@dataclass
class PlayerMatch:
    """A stored player accepted for a scorecard name."""

    player: Player
    confidence: float     # 0.0 – 1.0
    match_type: str       # exact, fuzzy


class PlayerResolver:
    """Resolves scorecard player names against the active players."""

    def __init__(self, players: PlayerStore, threshold: float = ACCEPT_THRESHOLD):
        self.players = players
        self.threshold = threshold

    def find_matching_player(
        self,
        player_name: str,
        team_name: Optional[str] = None,
    ) -> Optional[PlayerMatch]:
        """Find the best stored player for a name.

        Candidates are all active players, limited to the team's short
        code when a team is given. The first candidate with the highest
        score wins.

        Args:
            player_name: Name as written in the scorecard.
            team_name: Team the player appeared for, if known.

        Returns:
            PlayerMatch if the best score reaches the threshold, None otherwise.
        """
        if not player_name:
            return None

        team = get_team_short_name(team_name)
        candidates = self.players.find_active(team)

        best_player: Player | None = None
        best_score = 0.0

        for player in candidates:
            score = score_candidate(player_name, player)
            if score > best_score:
                best_score = score
                best_player = player

        if best_player is None or best_score < self.threshold:
            log.debug(
                "No player for %r (team %s, best score %.2f)",
                player_name, team or '-', best_score,
            )
            return None

        return PlayerMatch(
            player=best_player,
            confidence=best_score,
            match_type='exact' if best_score >= EXACT_THRESHOLD else 'fuzzy',
        )


def _team_matches(team_name: str, match_names: list[str]) -> bool:
    """Check a parsed team name against a match's lowercased team names."""
    normalized = team_name.lower()
    short_name = (get_team_short_name(team_name) or '').lower()
    return any(
        name == normalized
        or name == short_name
        or normalized in name
        or name in normalized
        for name in match_names
    )


class MatchCorrelator:
    """Finds the stored match a parsed scorecard describes."""

    def __init__(self, matches: MatchStore):
        self.matches = matches

    def _find_on_date(self, match_date: date, team_names: list[str]) -> Optional[Match]:
        day_start = datetime.combine(match_date, time.min)
        day_end = datetime.combine(match_date, _DAY_END)

        for match in self.matches.find_by_date_range(day_start, day_end):
            match_names = [
                match.team1.name.lower(),
                match.team1.short_name.lower(),
                match.team2.name.lower(),
                match.team2.short_name.lower(),
            ]
            matched = sum(1 for t in team_names if _team_matches(t, match_names))
            if matched >= 2:
                return match
        return None

    def find_matching_match(
        self,
        match_date: Optional[date],
        first_batting_team: str,
        second_batting_team: str,
    ) -> Optional[Match]:
        """Find the match played on a date between two teams.

        First looks at matches on the same calendar day where both teams
        appear by name or short code. If none qualifies (or the date is
        unknown), falls back to the most recent match without a scorecard
        between the two teams' short codes.

        Returns:
            The match, or None if neither pass finds one.
        """
        team_names = [t for t in (first_batting_team, second_batting_team) if t]

        if match_date is not None:
            match = self._find_on_date(match_date, team_names)
            if match:
                log.info("Match %s found by date %s", match.id, match_date)
                return match

        if len(team_names) >= 2:
            short1 = get_team_short_name(team_names[0])
            short2 = get_team_short_name(team_names[1])
            match = self.matches.find_by_short_names(short1, short2)
            if match:
                log.info("Match %s found by teams %s/%s", match.id, short1, short2)
                return match

        return None
