"""Extraction of match info and innings records from a tokenized export."""

import logging
import re
from enum import Enum
from typing import Optional

from scorecard import (
    BattingPerformance,
    BowlingPerformance,
    Extras,
    Innings,
    InningsTotal,
    MatchInfo,
)
from scorecard.dates import parse_match_date

log = logging.getLogger(__name__)

FIRST_INNINGS = '1ST INNINGS'
SECOND_INNINGS = '2ND INNINGS'
MATCH_INFO_MARKER = 'MATCH INFORMATION'
SECTION_END = '==='

_BATTING_TEAM_RE = re.compile(r'(?:^|\s)([A-Z][A-Z\s]+?)\s+BATTING')
_BOWLING_TEAM_RE = re.compile(r'(?:^|\s)([A-Z][A-Z\s]+?)\s+BOWLING')
_INT_RE = re.compile(r'^\s*([+-]?\d+)')
_FLOAT_RE = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+))')

MATCH_INFO_FIELDS: dict[str, str] = {
    'Match Number': 'match_number',
    'Series': 'series',
    'Venue': 'venue',
    'Date': 'date',
    'Result': 'result',
    'Toss': 'toss',
    'Match Type': 'match_type',
    'Overs': 'overs',
    'Player of the Match': 'player_of_the_match',
}


class Section(Enum):
    NONE = 'none'
    MATCH_INFO = 'match_info'
    BATTING = 'batting'
    BOWLING = 'bowling'
    FALL_OF_WICKETS = 'fall_of_wickets'


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse the leading integer of a cell ("45*" -> 45), None if absent."""
    match = _INT_RE.match(value or '')
    return int(match.group(1)) if match else None


def parse_float(value: Optional[str]) -> Optional[float]:
    """Parse the leading decimal number of a cell, None if absent."""
    match = _FLOAT_RE.match(value or '')
    return float(match.group(1)) if match else None


def _cell(row: list[str], index: int) -> str:
    return row[index] if index < len(row) else ''


def extract_match_info(rows: list[list[str]]) -> MatchInfo:
    """Read the key/value pairs of the MATCH INFORMATION block.

    Unknown keys are ignored; the block ends at the first "===" row.
    """
    info = MatchInfo()
    section = Section.NONE

    for row in rows:
        text = ' '.join(row)
        if MATCH_INFO_MARKER in text:
            section = Section.MATCH_INFO
            continue
        if section is not Section.MATCH_INFO:
            continue
        if SECTION_END in text:
            break
        if len(row) < 2 or not row[0]:
            continue

        attr = MATCH_INFO_FIELDS.get(row[0])
        if attr is None:
            continue
        value = row[1]
        if attr == 'date':
            info.date = parse_match_date(value)
        elif attr == 'overs':
            info.overs = parse_int(value) or 20
        else:
            setattr(info, attr, value)

    return info


def _batting_row(row: list[str]) -> Optional[BattingPerformance]:
    """Build a batting record, or None when the row is not one."""
    name = row[0]
    if len(row) < 3 or not name:
        return None
    if SECTION_END in name or name in ('TOTAL', 'Extras'):
        return None
    runs = parse_int(row[2])
    if runs is None:
        log.debug("Skipping batting row without runs: %s", row)
        return None
    return BattingPerformance(
        player_name=name,
        dismissal=row[1],
        runs=runs,
        balls=parse_int(_cell(row, 3)) or 0,
        fours=parse_int(_cell(row, 4)) or 0,
        sixes=parse_int(_cell(row, 5)) or 0,
        strike_rate=parse_float(_cell(row, 6)) or 0.0,
    )


def _bowling_row(row: list[str]) -> Optional[BowlingPerformance]:
    """Build a bowling record, or None when the row is not one."""
    if len(row) < 2 or not row[0]:
        return None
    overs = parse_float(row[1])
    if overs is None:
        log.debug("Skipping bowling row without overs: %s", row)
        return None
    return BowlingPerformance(
        player_name=row[0],
        overs=overs,
        maidens=parse_int(_cell(row, 2)) or 0,
        runs=parse_int(_cell(row, 3)) or 0,
        wickets=parse_int(_cell(row, 4)) or 0,
        economy=parse_float(_cell(row, 5)) or 0.0,
    )


def _total_row(row: list[str]) -> InningsTotal:
    run_rate = _cell(row, 4).replace('Run Rate:', '').strip()
    return InningsTotal(
        wickets=_cell(row, 1),
        runs=parse_int(_cell(row, 2)) or 0,
        overs=_cell(row, 3).replace(' overs', '').strip(),
        run_rate=parse_float(run_rate) or 0.0,
    )


def extract_innings(rows: list[list[str]], marker: str) -> Innings:
    """Extract one innings from the full row sequence.

    Scanning starts at the "<marker> ... <TEAM> BATTING" header and stops
    at the first row mentioning the other innings' marker. Rows that fail
    a numeric parse are skipped.

    Args:
        rows: Tokenized export rows.
        marker: FIRST_INNINGS or SECOND_INNINGS.

    Returns:
        The innings; its lists are empty if the section is missing.
    """
    other_marker = SECOND_INNINGS if marker == FIRST_INNINGS else FIRST_INNINGS
    innings = Innings()
    section = Section.NONE
    found = False

    for row in rows:
        text = ' '.join(row)

        if marker in text and 'BATTING' in text:
            match = _BATTING_TEAM_RE.search(text)
            if match:
                innings.batting_team = match.group(1).strip()
            section = Section.BATTING
            found = True
            continue

        if marker in text and 'BOWLING' in text:
            match = _BOWLING_TEAM_RE.search(text)
            if match:
                innings.bowling_team = match.group(1).strip()
            section = Section.BOWLING
            continue

        if not found:
            continue

        if other_marker in text:
            break

        if SECTION_END in text:
            if section is Section.FALL_OF_WICKETS:
                section = Section.NONE
            continue
        if row[0] == 'Name':
            continue

        first = row[0]
        if section is Section.BATTING:
            if first == 'Extras':
                innings.extras = Extras(
                    details=_cell(row, 1),
                    total=parse_int(_cell(row, 2)) or 0,
                )
            elif first == 'TOTAL':
                innings.total = _total_row(row)
            elif first == 'Did Not Bat':
                innings.did_not_bat = [
                    p.strip() for p in _cell(row, 1).split(',') if p.strip()
                ]
            elif first == 'Fall of Wickets':
                section = Section.FALL_OF_WICKETS
            else:
                batsman = _batting_row(row)
                if batsman:
                    innings.batting.append(batsman)

        elif section is Section.BOWLING:
            if 'NOTE:' in first:
                break
            bowler = _bowling_row(row)
            if bowler:
                innings.bowling.append(bowler)

        elif section is Section.FALL_OF_WICKETS:
            wicket = _cell(row, 1)
            if wicket:
                innings.fall_of_wickets.append(wicket)
            else:
                section = Section.NONE

    log.debug(
        "%s: %s batting (%d rows), %s bowling (%d rows)",
        marker, innings.batting_team or '?', len(innings.batting),
        innings.bowling_team or '?', len(innings.bowling),
    )
    return innings


def parse_scorecard(rows: list[list[str]]) -> tuple[MatchInfo, Innings, Innings]:
    """Extract match info and both innings from tokenized rows."""
    return (
        extract_match_info(rows),
        extract_innings(rows, FIRST_INNINGS),
        extract_innings(rows, SECOND_INNINGS),
    )
