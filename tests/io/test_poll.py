import sys
import os
import io
import json

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
import runofftally.io.poll
import runofftally.tally
from runofftally.ballot import Ballot
from runofftally.candidate import Candidate

LUNCH_POLL = {
    'title': 'Team lunch',
    'pollOptions': [
        {'id': 1, 'text': 'Pizza'},
        {'id': 2, 'text': 'Sushi'},
        {'id': 3, 'text': 'Tacos'},
    ],
    'ballots': [
        {'id': 11, 'rankedChoices': [1, 2]},
        {'id': 12, 'rankedChoices': [1]},
        {'id': 13, 'rankedChoices': [2, 1]},
        {'id': 14, 'rankedChoices': [2]},
        {'id': 15, 'rankedChoices': [3, 2]},
    ],
}


def test_parse():
    poll = runofftally.io.poll.parse(LUNCH_POLL)
    assert poll.title == 'Team lunch'
    assert poll.candidates == [
        Candidate(1, 'Pizza'), Candidate(2, 'Sushi'), Candidate(3, 'Tacos')
    ]
    assert poll.ballots[0] == Ballot(11, (1, 2))
    assert [ballot.id for ballot in poll.ballots] == [11, 12, 13, 14, 15]


def test_loads_and_load():
    text = json.dumps(LUNCH_POLL)
    assert runofftally.io.poll.loads(text) \
        == runofftally.io.poll.load(io.StringIO(text))


def test_options_alias_and_defaults():
    poll = runofftally.io.poll.parse({
        'options': [{'id': 'a', 'text': 'Apple'}, {'id': 'b'}],
        'ballots': [{'rankedChoices': ['b']}, {'rankedChoices': []}],
    })
    assert poll.title is None
    assert poll.candidates == [Candidate('a', 'Apple'), Candidate('b', 'b')]
    assert poll.ballots == [Ballot(1, ('b',)), Ballot(2, ())]


def test_no_ballots():
    poll = runofftally.io.poll.parse({'pollOptions': [{'id': 1}]})
    assert poll.ballots == []


@pytest.mark.parametrize('data', [
    [],
    {},
    {'pollOptions': {'id': 1}},
    {'pollOptions': [{'text': 'Pizza'}]},
    {'pollOptions': [{'id': 1.5}]},
    {'pollOptions': [{'id': True}]},
    {'pollOptions': [{'id': 1, 'text': 5}]},
    {'pollOptions': [{'id': 1}], 'ballots': {}},
    {'pollOptions': [{'id': 1}], 'ballots': [[1]]},
    {'pollOptions': [{'id': 1}], 'ballots': [{'rankedChoices': 1}]},
    {'pollOptions': [{'id': 1}], 'ballots': [{'rankedChoices': [None]}]},
    {'pollOptions': [{'id': 1}], 'title': 7},
])
def test_invalid(data):
    with pytest.raises(runofftally.io.poll.PollParseError):
        runofftally.io.poll.parse(data)


def test_invalid_json():
    with pytest.raises(runofftally.io.poll.PollParseError):
        runofftally.io.poll.loads('{"pollOptions": [')


def test_dumps_roundtrip():
    poll = runofftally.io.poll.parse(LUNCH_POLL)
    text = runofftally.io.poll.dumps(poll)
    assert json.loads(text) == LUNCH_POLL
    assert runofftally.io.poll.loads(text) == poll


def test_dump():
    poll = runofftally.io.poll.parse(LUNCH_POLL)
    out = io.StringIO()
    runofftally.io.poll.dump(out, poll, indent=None)
    assert json.loads(out.getvalue()) == LUNCH_POLL


def test_result_payload():
    poll = runofftally.io.poll.parse(LUNCH_POLL)
    result = runofftally.tally.compute(poll.candidates, poll.ballots)
    payload = runofftally.io.poll.result_payload(result)
    assert payload['winner'] == 2
    assert payload['totalBallots'] == 5
    assert len(payload['rounds']) == 1
    first_round = payload['rounds'][0]
    assert first_round['roundNumber'] == 1
    assert first_round['exhaustedBallots'] == 0
    assert first_round['eliminated'] == [3]
    assert first_round['votesByOption'] == {
        '1': {'optionText': 'Pizza', 'votes': 2, 'percentage': '40.0'},
        '2': {'optionText': 'Sushi', 'votes': 2, 'percentage': '40.0'},
        '3': {'optionText': 'Tacos', 'votes': 1, 'percentage': '20.0'},
    }


def test_dumps_result_no_winner():
    result = runofftally.tally.compute([Candidate(1), Candidate(2)], [])
    assert json.loads(runofftally.io.poll.dumps_result(result)) == {
        'rounds': [], 'winner': None, 'totalBallots': 0
    }
    out = io.StringIO()
    runofftally.io.poll.dump_result(out, result)
    assert json.loads(out.getvalue())['winner'] is None
