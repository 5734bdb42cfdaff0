import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import runofftally.ballot
import runofftally.candidate
from runofftally.ballot import Ballot

CANDIDATE_IDS = frozenset('ABCD')

DEFAULT_VALIDATOR = runofftally.ballot.BallotValidator()


@pytest.mark.parametrize('choices', [
    (),
    ('A',),
    tuple('AB'),
    tuple('DCBA'),
    ['C', 'A'],
])
def test_valid(choices):
    ballot = Ballot(1, choices)
    DEFAULT_VALIDATOR.validate(ballot, CANDIDATE_IDS)
    assert DEFAULT_VALIDATOR.is_valid(ballot, CANDIDATE_IDS)


@pytest.mark.parametrize(('ballot', 'error'), [
    (Ballot(1, tuple('ABA')), runofftally.ballot.DuplicateChoiceError),
    (Ballot(1, tuple('AE')), runofftally.ballot.UnknownChoiceError),
    (Ballot(1, (1,)), runofftally.ballot.UnknownChoiceError),
    (Ballot(1, (['A'],)), runofftally.ballot.BallotTypeError),
    (('A', 'B'), runofftally.ballot.BallotTypeError),
    ('AB', runofftally.ballot.BallotTypeError),
])
def test_invalid(ballot, error):
    with pytest.raises(error):
        DEFAULT_VALIDATOR.validate(ballot, CANDIDATE_IDS)
    assert not DEFAULT_VALIDATOR.is_valid(ballot, CANDIDATE_IDS)


@pytest.mark.parametrize('choices', ['AB', 3, None])
def test_construct_invalid(choices):
    with pytest.raises(runofftally.ballot.BallotTypeError):
        Ballot(1, choices)


def test_errors_are_invalid_input():
    assert issubclass(
        runofftally.ballot.BallotError, runofftally.candidate.InvalidInput
    )
    assert issubclass(runofftally.ballot.BallotError, ValueError)


def test_duplicate_error_details():
    ballot = Ballot('b7', tuple('ABA'))
    with pytest.raises(runofftally.ballot.DuplicateChoiceError) as excinfo:
        DEFAULT_VALIDATOR.validate(ballot, CANDIDATE_IDS)
    assert excinfo.value.choice == 'A'
    assert excinfo.value.ballot is ballot
    assert 'b7' in str(excinfo.value)


@pytest.mark.parametrize(('bounds', 'length', 'is_valid'), [
    ((None, None), 0, True),
    ((1, None), 0, False),
    ((1, None), 4, True),
    ((None, 2), 2, True),
    ((None, 2), 3, False),
    ((2, 3), 1, False),
    ((2, 3), 3, True),
])
def test_length_bounds(bounds, length, is_valid):
    validator = runofftally.ballot.BallotValidator(bounds)
    ballot = Ballot(1, tuple('ABCD'[:length]))
    if is_valid:
        validator.validate(ballot, CANDIDATE_IDS)
    else:
        with pytest.raises(runofftally.ballot.RankingLengthError):
            validator.validate(ballot, CANDIDATE_IDS)


def test_length_error_message():
    error = runofftally.ballot.RankingLengthError(5, 1, 3)
    assert str(error) == 'invalid ranking length: 5, must be >=1, <=3'


def test_length_checker():
    checker = runofftally.ballot.RankingLengthChecker()
    assert not checker
    assert checker.is_valid(100)
    checker = runofftally.ballot.RankingLengthChecker((1, None))
    assert checker
    assert checker.bounds == (1, None)
    assert not checker.is_valid(0)


def test_first_choice():
    ballot = Ballot(1, tuple('CAB'))
    assert ballot.first_choice({'A', 'B', 'C'}) == 'C'
    assert ballot.first_choice({'A', 'B'}) == 'A'
    assert ballot.first_choice({'D'}) is None
    assert Ballot(2).first_choice({'A'}) is None


def test_ballot_value_semantics():
    ballot = Ballot(1, ['A', 'B'])
    assert ballot.choices == ('A', 'B')
    assert len(ballot) == 2
    assert ballot == Ballot(1, ('A', 'B'))
    assert ballot != Ballot(2, ('A', 'B'))
    assert len({ballot, Ballot(1, ('A', 'B'))}) == 1


def test_count_rankings():
    ballots = [
        Ballot(1, ('A', 'B')),
        Ballot(2, ('B',)),
        Ballot(3, ('A', 'B')),
    ]
    assert runofftally.ballot.count_rankings(ballots) == {
        ('A', 'B'): 2,
        ('B',): 1,
    }
