"""Shared test fixtures."""

from datetime import datetime
from pathlib import Path

import pytest

from scorecard import Match, Player, Team
from scorecard.importer import ScorecardImporter
from scorecard.reader import read_scorecard_text
from scorecard.store import MatchStore, PlayerStore, get_connection, init_database, transaction


DATA_DIR = Path(__file__).resolve().parent.parent / 'data'

INDIA_PLAYERS = [
    'Abhishek Sharma', 'Sanju Samson', 'Ishan Kishan', 'Suryakumar Yadav',
    'Hardik Pandya', 'Rinku Singh', 'Shivam Dube', 'Axar Patel',
    'Kuldeep Yadav', 'Jasprit Bumrah', 'Arshdeep Singh', 'Virat Kohli',
]
NEW_ZEALAND_PLAYERS = [
    'Devon Conway', 'Finn Allen', 'Rachin Ravindra', 'Daryl Mitchell',
    'Glenn Phillips', 'Mitchell Santner', 'Matt Henry', 'Lockie Ferguson',
    'Ish Sodhi',
]


@pytest.fixture(scope='session')
def data_dir() -> Path:
    """Path to the data directory."""
    return DATA_DIR


@pytest.fixture(scope='session')
def sample_text() -> str:
    """Content of the sample scorecard export."""
    return read_scorecard_text(DATA_DIR / 'sample_scorecard.csv')


@pytest.fixture
def conn():
    """In-memory database with the schema initialized."""
    connection = get_connection(':memory:')
    init_database(connection)
    yield connection
    connection.close()


@pytest.fixture
def players(conn):
    """Active India and New Zealand squads, keyed by name."""
    store = PlayerStore(conn)
    ids = {}
    with transaction(conn):
        for name in INDIA_PLAYERS:
            short_name = 'SKY' if name == 'Suryakumar Yadav' else None
            ids[name] = store.add(Player(id=None, name=name, team='IND', short_name=short_name))
        for name in NEW_ZEALAND_PLAYERS:
            ids[name] = store.add(Player(id=None, name=name, team='NZ'))
        store.add(Player(id=None, name='Martin Guptill', team='NZ', is_active=False))
    return ids


@pytest.fixture
def make_match(conn):
    """Factory inserting a match fixture and returning its ID."""
    def _make(team1=('India', 'IND'), team2=('New Zealand', 'NZ'),
              match_date=datetime(2026, 1, 28, 19, 0)) -> int:
        with transaction(conn):
            return MatchStore(conn).add(Match(
                id=None, team1=Team(*team1), team2=Team(*team2), match_date=match_date,
            ))
    return _make


@pytest.fixture
def match_id(make_match) -> int:
    """India vs New Zealand on the sample export's date."""
    return make_match()


@pytest.fixture
def importer(conn, players) -> ScorecardImporter:
    return ScorecardImporter(conn)
