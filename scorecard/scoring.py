"""Name similarity scoring for player resolution."""

import re

from rapidfuzz.distance import Levenshtein

from scorecard import Player

_NON_LETTER_RE = re.compile(r'[^a-z\s]')
_WHITESPACE_RE = re.compile(r'\s+')

SUBSTRING_BOOST = 0.4
WORD_OVERLAP_MIN = 0.5
WORD_OVERLAP_BOOST = 0.3
LAST_NAME_WEIGHT = 0.85
LAST_NAME_MATCH_SCORE = 0.8
INITIAL_MATCH_SCORE = 0.95


def normalize_name(name: str) -> str:
    """Lowercase, drop everything but letters and spaces, collapse spaces.

    Args:
        name: Raw player name.

    Returns:
        Normalized name; empty string for empty input.
    """
    if not name:
        return ''
    cleaned = _NON_LETTER_RE.sub('', name.lower())
    return _WHITESPACE_RE.sub(' ', cleaned).strip()


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit cost for insert, delete and substitute."""
    return Levenshtein.distance(a, b)


def _words_match(w1: str, w2: str) -> bool:
    if w1 == w2:
        return True
    return len(w1) > 2 and len(w2) > 2 and (w1 in w2 or w2 in w1)


def calculate_similarity(str1: str, str2: str) -> float:
    """Similarity of two names between 0.0 and 1.0.

    Checked in order, first hit wins:
    1. identical after normalization -> 1.0
    2. one contains the other -> shorter/longer + 0.4 (capped at 1.0)
    3. at least half of the words overlap -> overlap ratio + 0.3 (capped)
    4. otherwise 1 - levenshtein / longer length

    Identical names score 1.0 even when nothing survives normalization;
    otherwise an empty normalized name scores 0.0.
    """
    s1 = normalize_name(str1)
    s2 = normalize_name(str2)

    if s1 == s2:
        return 1.0
    if not s1 or not s2:
        return 0.0

    longer, shorter = (s1, s2) if len(s1) > len(s2) else (s2, s1)

    if shorter in longer:
        return min(1.0, len(shorter) / len(longer) + SUBSTRING_BOOST)

    words1 = s1.split(' ')
    words2 = s2.split(' ')
    matched = sum(
        1 for w1 in words1 if any(_words_match(w1, w2) for w2 in words2)
    )
    if matched > 0:
        ratio = matched / max(len(words1), len(words2))
        if ratio >= WORD_OVERLAP_MIN:
            return min(1.0, ratio + WORD_OVERLAP_BOOST)

    return 1 - levenshtein_distance(s1, s2) / len(longer)


def get_last_name(name: str) -> str:
    """Return the final whitespace-delimited token of a name."""
    parts = name.split()
    return parts[-1] if parts else ''


def name_parts_score(name: str, candidate: str) -> float:
    """Bonus for "V Kohli" vs "Virat Kohli" style names.

    0.8 when both names have two or more tokens and the last tokens are
    equal, 0.95 if the first tokens also start with the same letter.
    """
    parts = name.lower().split()
    candidate_parts = candidate.lower().split()
    if len(parts) < 2 or len(candidate_parts) < 2:
        return 0.0
    if parts[-1] != candidate_parts[-1]:
        return 0.0
    if parts[0][0] == candidate_parts[0][0]:
        return INITIAL_MATCH_SCORE
    return LAST_NAME_MATCH_SCORE


def score_candidate(name: str, player: Player) -> float:
    """Score a stored player against a free-text name.

    The score is the best of four signals: full-name similarity,
    short-name similarity, weighted last-name similarity and the
    name-parts bonus.

    Args:
        name: Player name from the scorecard.
        player: Stored candidate.

    Returns:
        Score between 0.0 and 1.0.
    """
    full_name = calculate_similarity(name, player.name)
    short_name = (
        calculate_similarity(name, player.short_name) if player.short_name else 0.0
    )
    last_name = calculate_similarity(
        normalize_name(get_last_name(name)),
        normalize_name(get_last_name(player.name)),
    )
    return max(
        full_name,
        short_name,
        last_name * LAST_NAME_WEIGHT,
        name_parts_score(name, player.name),
    )
