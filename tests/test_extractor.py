"""Tests for scorecard.extractor module."""

from datetime import date

from scorecard.extractor import (
    FIRST_INNINGS,
    SECOND_INNINGS,
    extract_innings,
    extract_match_info,
    parse_float,
    parse_int,
    parse_scorecard,
)
from scorecard.reader import tokenize


MATCH_INFO_TEXT = '\n'.join([
    '=== MATCH INFORMATION ===',
    'Match Number,1st ODI',
    'Series,England tour of South Africa',
    'Date,"3rd March, 2025"',
    'Overs,fifty',
    'Umpires,Someone',
    'Player of the Match,Jos Buttler',
    '===',
    'Venue,Ignored after the block',
])

INNINGS_TEXT = '\n'.join([
    '=== 1ST INNINGS - SOUTH AFRICA BATTING ===',
    'Name,Dismissal,Runs,Balls,4s,6s,SR',
    'Quinton de Kock,c Buttler b Wood,45*,30,5,2,150.00',
    'Reeza Hendricks,b Archer,DNB,0,0,0,0',
    'Aiden Markram,lbw b Rashid,20,x,y,z,abc',
    'Extras,"(w 3)",three',
    'TOTAL,3,65,(10 overs),Run Rate: n/a',
    'Did Not Bat,"David Miller, Marco Jansen"',
    'Fall of Wickets,',
    '1,1-20 (Hendricks)',
    '2,2-50 (Markram)',
    '===',
    '3,3-60 (after the section end)',
    '=== 1ST INNINGS - ENGLAND BOWLING ===',
    'Name,Overs,Maidens,Runs,Wickets,Economy',
    'Mark Wood,2,0,20,1,10.00',
    'Jofra Archer,-,0,10,1,5.00',
    'Adil Rashid,2.3,zero,15,1,n/a',
    'NOTE: rain delay',
    'Liam Livingstone,1,0,8,0,8.00',
    '=== 2ND INNINGS - ENGLAND BATTING ===',
    'Jos Buttler,not out,30,20,3,1,150.00',
])


class TestParseNumbers:
    """Tests for lenient numeric cell parsing."""

    def test_int_leading_digits(self):
        assert parse_int('45*') == 45

    def test_int_unparseable(self):
        assert parse_int('DNB') is None
        assert parse_int('') is None
        assert parse_int(None) is None

    def test_float(self):
        assert parse_float('3.4') == 3.4
        assert parse_float('4') == 4.0

    def test_float_unparseable(self):
        assert parse_float('-') is None


class TestExtractMatchInfo:
    """Tests for the MATCH INFORMATION block."""

    def test_known_keys(self):
        info = extract_match_info(tokenize(MATCH_INFO_TEXT))
        assert info.match_number == '1st ODI'
        assert info.series == 'England tour of South Africa'
        assert info.player_of_the_match == 'Jos Buttler'

    def test_date_is_parsed(self):
        info = extract_match_info(tokenize(MATCH_INFO_TEXT))
        assert info.date == date(2025, 3, 3)

    def test_unparseable_overs_default_to_twenty(self):
        info = extract_match_info(tokenize(MATCH_INFO_TEXT))
        assert info.overs == 20

    def test_block_ends_at_section_end(self):
        info = extract_match_info(tokenize(MATCH_INFO_TEXT))
        assert info.venue is None

    def test_missing_block(self):
        info = extract_match_info(tokenize('Series,Ignored'))
        assert info.series is None
        assert info.date is None

    def test_sample(self, sample_text):
        info = extract_match_info(tokenize(sample_text))
        assert info.venue == 'Barsapara Cricket Stadium, Guwahati'
        assert info.date == date(2026, 1, 28)
        assert info.result == 'India won by 48 runs'
        assert info.toss == 'New Zealand, elected to field'
        assert info.match_type == 'T20I'


class TestExtractBatting:
    """Tests for the batting section of an innings."""

    def setup_method(self):
        self.innings = extract_innings(tokenize(INNINGS_TEXT), FIRST_INNINGS)

    def test_teams(self):
        assert self.innings.batting_team == 'SOUTH AFRICA'
        assert self.innings.bowling_team == 'ENGLAND'

    def test_unparseable_runs_row_skipped(self):
        names = [b.player_name for b in self.innings.batting]
        assert names == ['Quinton de Kock', 'Aiden Markram']

    def test_batting_fields(self):
        qdk = self.innings.batting[0]
        assert qdk.dismissal == 'c Buttler b Wood'
        assert qdk.runs == 45
        assert qdk.balls == 30
        assert qdk.fours == 5
        assert qdk.sixes == 2
        assert qdk.strike_rate == 150.0
        assert qdk.player_id is None
        assert qdk.is_matched is False

    def test_unparseable_secondary_fields_default(self):
        markram = self.innings.batting[1]
        assert markram.runs == 20
        assert (markram.balls, markram.fours, markram.sixes) == (0, 0, 0)
        assert markram.strike_rate == 0.0

    def test_extras_with_unparseable_total(self):
        assert self.innings.extras.details == '(w 3)'
        assert self.innings.extras.total == 0

    def test_total_with_unparseable_run_rate(self):
        total = self.innings.total
        assert total.wickets == '3'
        assert total.runs == 65
        assert total.overs == '(10)'
        assert total.run_rate == 0.0

    def test_did_not_bat(self):
        assert self.innings.did_not_bat == ['David Miller', 'Marco Jansen']

    def test_fall_of_wickets_ends_at_section_end(self):
        assert self.innings.fall_of_wickets == ['1-20 (Hendricks)', '2-50 (Markram)']


class TestExtractBowling:
    """Tests for the bowling section of an innings."""

    def setup_method(self):
        self.innings = extract_innings(tokenize(INNINGS_TEXT), FIRST_INNINGS)

    def test_unparseable_overs_row_skipped(self):
        names = [b.player_name for b in self.innings.bowling]
        assert 'Jofra Archer' not in names

    def test_note_terminates_bowling(self):
        names = [b.player_name for b in self.innings.bowling]
        assert names == ['Mark Wood', 'Adil Rashid']

    def test_bowling_fields(self):
        wood = self.innings.bowling[0]
        assert wood.overs == 2.0
        assert wood.maidens == 0
        assert wood.runs == 20
        assert wood.wickets == 1
        assert wood.economy == 10.0

    def test_unparseable_secondary_fields_default(self):
        rashid = self.innings.bowling[1]
        assert rashid.overs == 2.3
        assert rashid.maidens == 0
        assert rashid.economy == 0.0


class TestInningsBoundaries:
    """Tests for keeping the two innings apart."""

    def test_second_innings(self):
        innings = extract_innings(tokenize(INNINGS_TEXT), SECOND_INNINGS)
        assert innings.batting_team == 'ENGLAND'
        assert [b.player_name for b in innings.batting] == ['Jos Buttler']
        assert innings.bowling == []

    def test_stops_at_other_innings_marker(self):
        text = '\n'.join([
            '=== 1ST INNINGS - INDIA BATTING ===',
            'Rohit Sharma,b Starc,10,8,1,0,125.00',
            '=== 2ND INNINGS - AUSTRALIA BATTING ===',
            'Travis Head,b Bumrah,40,25,5,1,160.00',
        ])
        innings = extract_innings(tokenize(text), FIRST_INNINGS)
        assert [b.player_name for b in innings.batting] == ['Rohit Sharma']

    def test_sections_in_reverse_order(self):
        text = '\n'.join([
            '=== 2ND INNINGS - AUSTRALIA BATTING ===',
            'Travis Head,b Bumrah,40,25,5,1,160.00',
            '=== 1ST INNINGS - INDIA BATTING ===',
            'Rohit Sharma,b Starc,10,8,1,0,125.00',
        ])
        first = extract_innings(tokenize(text), FIRST_INNINGS)
        second = extract_innings(tokenize(text), SECOND_INNINGS)
        assert [b.player_name for b in first.batting] == ['Rohit Sharma']
        assert [b.player_name for b in second.batting] == ['Travis Head']

    def test_missing_innings_is_empty(self):
        innings = extract_innings(tokenize(MATCH_INFO_TEXT), FIRST_INNINGS)
        assert innings.batting == []
        assert innings.bowling == []
        assert innings.batting_team == ''
        assert innings.total.runs == 0


class TestParseScorecard:
    """Tests for the sample export as a whole."""

    def test_sample(self, sample_text):
        info, first, second = parse_scorecard(tokenize(sample_text))
        assert info.overs == 20
        assert first.batting_team == 'INDIA'
        assert first.bowling_team == 'NEW ZEALAND'
        assert second.batting_team == 'NEW ZEALAND'
        assert second.bowling_team == 'INDIA'
        assert len(first.batting) == 7
        assert len(first.bowling) == 6
        assert len(second.batting) == 10
        assert len(second.bowling) == 6

    def test_sample_totals(self, sample_text):
        _, first, second = parse_scorecard(tokenize(sample_text))
        assert first.total.runs == 180
        assert first.total.wickets == '5'
        assert first.total.run_rate == 9.0
        assert first.extras.total == 6
        assert second.total.runs == 132
        assert len(first.fall_of_wickets) == 5
        assert first.fall_of_wickets[0] == '1-30 (Sanju Samson, 3.4 ov)'
        assert second.fall_of_wickets == []
