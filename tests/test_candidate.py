import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import runofftally.candidate
from runofftally.candidate import Candidate


def test_sorted_roster():
    cands = [
        Candidate(3, 'Tacos'), Candidate(1, 'Pizza'), Candidate(2, 'Sushi')
    ]
    roster = runofftally.candidate.sorted_roster(cands)
    assert [cand.id for cand in roster] == [1, 2, 3]
    assert [cand.label for cand in roster] == ['Pizza', 'Sushi', 'Tacos']


def test_sorted_roster_accepts_iterables():
    roster = runofftally.candidate.sorted_roster(
        Candidate(cand_id) for cand_id in 'CAB'
    )
    assert [cand.id for cand in roster] == ['A', 'B', 'C']


@pytest.mark.parametrize('cands', [
    [],
    [Candidate(1), Candidate(1, 'Again')],
    [Candidate(1), Candidate('1')],
    [Candidate(1), 2],
    ['A'],
])
def test_invalid_roster(cands):
    with pytest.raises(runofftally.candidate.CandidateError):
        runofftally.candidate.sorted_roster(cands)


def test_candidate_error_is_invalid_input():
    with pytest.raises(runofftally.candidate.InvalidInput):
        runofftally.candidate.sorted_roster([])
    with pytest.raises(ValueError):
        runofftally.candidate.sorted_roster([])


def test_unhashable_id():
    with pytest.raises(runofftally.candidate.CandidateError):
        Candidate(['A'])


def test_default_label():
    assert Candidate(7).label == '7'
    assert Candidate('Pizza').label == 'Pizza'


def test_value_semantics():
    assert Candidate(1, 'Pizza') == Candidate(1, 'Pizza')
    assert Candidate(1, 'Pizza') != Candidate(1, 'Sushi')
    assert Candidate(1) != 1
    assert len({Candidate(1, 'Pizza'), Candidate(1, 'Pizza')}) == 1


def test_repr():
    assert repr(Candidate('A')) == "<Candidate('A')>"
    assert repr(Candidate(1, 'Pizza')) == "<Candidate(1,'Pizza')>"


def test_candidates_from_labels():
    cands = runofftally.candidate.candidates_from_labels(['Amy', 'Bob'])
    assert cands == [Candidate(1, 'Amy'), Candidate(2, 'Bob')]
    cands = runofftally.candidate.candidates_from_labels(['Amy'], start_at=0)
    assert cands == [Candidate(0, 'Amy')]
