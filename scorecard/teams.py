"""Mapping of free-text team names to canonical short codes."""

from typing import Optional

TEAM_SHORT_NAMES: dict[str, str] = {
    'india': 'IND',
    'new zealand': 'NZ',
    'australia': 'AUS',
    'england': 'ENG',
    'pakistan': 'PAK',
    'south africa': 'SA',
    'sri lanka': 'SL',
    'bangladesh': 'BAN',
    'west indies': 'WI',
    'afghanistan': 'AFG',
    'ireland': 'IRE',
    'zimbabwe': 'ZIM',
    'scotland': 'SCO',
    'netherlands': 'NED',
    'nepal': 'NEP',
    'uae': 'UAE',
    'oman': 'OMN',
    'namibia': 'NAM',
    'usa': 'USA',
    'canada': 'CAN',
}


def get_team_short_name(team_name: Optional[str]) -> Optional[str]:
    """Resolve a team name to its short code.

    Unknown names fall back to their first three letters, uppercased,
    so "Kenya" becomes "KEN" and an already-short "IND" stays "IND".

    Args:
        team_name: Team name as written in the export or the store.

    Returns:
        Short code, or None for an empty name.
    """
    if not team_name:
        return None
    normalized = team_name.lower().strip()
    return TEAM_SHORT_NAMES.get(normalized, team_name.strip()[:3].upper())
