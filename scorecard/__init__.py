"""Core module for cricket-scorecard-import."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass
class MatchInfo:
    """Match metadata from the MATCH INFORMATION block.

    Every field is optional; None means the key was absent in the export.
    """

    match_number: Optional[str] = None
    series: Optional[str] = None
    venue: Optional[str] = None
    date: Optional[date] = None
    result: Optional[str] = None
    toss: Optional[str] = None
    match_type: Optional[str] = None
    overs: int = 20
    player_of_the_match: Optional[str] = None


@dataclass
class BattingPerformance:
    """A single batting row of an innings."""

    player_name: str
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    strike_rate: float = 0.0
    dismissal: str = ''
    player_id: Optional[int] = None

    @property
    def is_matched(self) -> bool:
        return self.player_id is not None


@dataclass
class BowlingPerformance:
    """A single bowling row of an innings."""

    player_name: str
    overs: float = 0.0
    maidens: int = 0
    runs: int = 0
    wickets: int = 0
    economy: float = 0.0
    player_id: Optional[int] = None

    @property
    def is_matched(self) -> bool:
        return self.player_id is not None


@dataclass
class Extras:
    total: int = 0
    details: str = ''


@dataclass
class InningsTotal:
    runs: int = 0
    wickets: str = ''
    overs: str = ''
    run_rate: float = 0.0


@dataclass
class Innings:
    """One team's batting turn as it appeared in the export."""

    batting_team: str = ''
    bowling_team: str = ''
    batting: list[BattingPerformance] = field(default_factory=list)
    bowling: list[BowlingPerformance] = field(default_factory=list)
    extras: Extras = field(default_factory=Extras)
    total: InningsTotal = field(default_factory=InningsTotal)
    fall_of_wickets: list[str] = field(default_factory=list)
    did_not_bat: list[str] = field(default_factory=list)


@dataclass
class StatLeader:
    player_name: str = ''
    count: int = 0
    player_id: Optional[int] = None


@dataclass
class ComputedStats:
    """Match-level statistics derived from both innings."""

    total_match_score: int = 0
    most_sixes: StatLeader = field(default_factory=StatLeader)
    most_fours: StatLeader = field(default_factory=StatLeader)
    most_wickets: StatLeader = field(default_factory=StatLeader)
    powerplay_score: int = 0
    fifties_count: int = 0


@dataclass
class PlayerResolution:
    """Outcome of resolving one performance's player name."""

    innings: int          # 1 or 2
    role: str             # batting, bowling
    player_name: str
    team: str
    player_id: Optional[int]
    confidence: float     # 0.0 – 1.0
    match_type: str       # exact, fuzzy, none


@dataclass
class ImportResult:
    """Structured outcome of a scorecard import."""

    success: bool = False
    match_found: bool = False
    match_id: Optional[int] = None
    players_matched: int = 0
    players_unmatched: int = 0
    unmatched_players: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    scorecard_id: Optional[int] = None
    resolutions: list[PlayerResolution] = field(default_factory=list)


@dataclass
class Player:
    """A stored player record."""

    id: Optional[int]
    name: str
    team: str                         # team short code, e.g. IND
    short_name: Optional[str] = None
    role: str = ''
    is_active: bool = True


@dataclass
class Team:
    name: str
    short_name: str


@dataclass
class MatchOutcome:
    winner: str = ''
    summary: str = ''
    team1_score: str = ''
    team2_score: str = ''


@dataclass
class Match:
    """A stored match fixture."""

    id: Optional[int]
    team1: Team
    team2: Team
    match_date: datetime
    status: str = 'upcoming'          # upcoming, live, completed
    scorecard_id: Optional[int] = None
    is_team_selection_open: bool = True
    result: MatchOutcome = field(default_factory=MatchOutcome)
    stats_snapshot: Optional[ComputedStats] = None


@dataclass
class ProcessingStatus:
    fantasy_points_calculated: bool = False
    predictions_evaluated: bool = False
    leaderboard_updated: bool = False


@dataclass
class Scorecard:
    """The persisted, resolved record of a match's two innings."""

    id: Optional[int]
    match_id: int
    match_info: MatchInfo
    first_innings: Innings
    second_innings: Innings
    computed_stats: ComputedStats
    processing_status: ProcessingStatus = field(default_factory=ProcessingStatus)
    imported_at: Optional[datetime] = None
    imported_by: Optional[str] = None
