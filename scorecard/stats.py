"""Match-level statistics derived from both innings."""

from typing import Sequence

from scorecard import ComputedStats, Innings, StatLeader

FIFTY = 50


def _leader(performances: Sequence, attr: str) -> StatLeader:
    """Find the performance with the strictly highest value of attr.

    On ties the first performance in sequence order keeps the lead.
    """
    leader = StatLeader()
    for performance in performances:
        value = getattr(performance, attr)
        if value > leader.count:
            leader = StatLeader(
                player_name=performance.player_name,
                count=value,
                player_id=performance.player_id,
            )
    return leader


def compute_stats(first: Innings, second: Innings) -> ComputedStats:
    """Compute match statistics, first innings before second.

    Args:
        first: First innings.
        second: Second innings.

    Returns:
        ComputedStats; powerplay_score is left at its default.
    """
    batting = [*first.batting, *second.batting]
    bowling = [*first.bowling, *second.bowling]

    return ComputedStats(
        total_match_score=first.total.runs + second.total.runs,
        most_sixes=_leader(batting, 'sixes'),
        most_fours=_leader(batting, 'fours'),
        most_wickets=_leader(bowling, 'wickets'),
        fifties_count=sum(1 for b in batting if b.runs >= FIFTY),
    )
