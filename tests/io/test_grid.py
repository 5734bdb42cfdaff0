import sys
import os
import io

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
import runofftally.io.grid
import runofftally.tally
from runofftally.ballot import Ballot
from runofftally.candidate import Candidate
from runofftally.io.core import PollData

LUNCH_GRID = '''ballot,Pizza,Sushi,Tacos
1,1,2,
2,,1,2
3,2,1,3

4, , 1 ,
'''


def test_load():
    poll = runofftally.io.grid.loads(LUNCH_GRID)
    assert poll.title is None
    assert poll.candidates == [
        Candidate(1, 'Pizza'), Candidate(2, 'Sushi'), Candidate(3, 'Tacos')
    ]
    assert poll.ballots == [
        Ballot('1', (1, 2)),
        Ballot('2', (2, 3)),
        Ballot('3', (2, 1, 3)),
        Ballot('4', (2,)),
    ]
    result = runofftally.tally.compute(poll.candidates, poll.ballots)
    assert result.winner == 2
    assert result.decided_in == 1


def test_load_file_and_delimiter():
    poll = runofftally.io.grid.load(
        io.StringIO('id;A;B\nx;2;1\n'), delimiter=';'
    )
    assert poll.ballots == [Ballot('x', (2, 1))]


def test_short_rows():
    poll = runofftally.io.grid.loads('ballot,A,B,C\n1,1\n')
    assert poll.ballots == [Ballot('1', (1,))]


@pytest.mark.parametrize('text', [
    'ballot,A,B\n1,1,1\n',
    'ballot,A,B\n1,1,3\n',
    'ballot,A,B\n1,first,\n',
    'ballot,A,B\n1,-1,\n',
    'ballot,A,B\n1,0,1\n',
    'ballot,A,B\n1,\u00b2,1\n',
    'ballot,A,B\n1,1,2,3\n',
    'ballot\n1\n',
    '',
])
def test_invalid(text):
    with pytest.raises(runofftally.io.grid.GridParseError):
        runofftally.io.grid.loads(text)


def test_skipped_ignore():
    poll = runofftally.io.grid.loads(
        'ballot,A,B,C\n1,3,,1\n', skipped='ignore'
    )
    assert poll.ballots == [Ballot('1', (3, 1))]


def test_dumps():
    poll = PollData(
        candidates=[Candidate(1, 'Pizza'), Candidate(2, 'Sushi, raw')],
        ballots=[Ballot(1, (2, 1)), Ballot(2, ())],
    )
    assert runofftally.io.grid.dumps(poll) \
        == 'ballot,Pizza,"Sushi, raw"\n1,2,1\n2,,\n'


def test_dump_reload():
    poll = runofftally.io.grid.loads(LUNCH_GRID)
    out = io.StringIO()
    runofftally.io.grid.dump(out, poll)
    assert runofftally.io.grid.loads(out.getvalue()) == poll


def test_multiline_label_roundtrip():
    poll = PollData(
        candidates=[Candidate(1, 'Pi\nzza'), Candidate(2, 'Sushi')],
        ballots=[Ballot('7\n8', (1, 2))],
    )
    text = runofftally.io.grid.dumps(poll)
    assert text == 'ballot,"Pi\nzza",Sushi\n"7\n8",1,2\n'
    assert runofftally.io.grid.loads(text) == poll


def test_loads_matches_load():
    text = 'ballot,"Pi\nzza",Sushi\n1,2,1\n'
    poll = runofftally.io.grid.loads(text)
    assert [cand.label for cand in poll.candidates] == ['Pi\nzza', 'Sushi']
    assert poll == runofftally.io.grid.load(io.StringIO(text))
