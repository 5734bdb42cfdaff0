'''Ballot specification and ballot validation.

A ballot is a single voter's ranking of the poll candidates, represented by
the :class:`Ballot` object holding a tuple of candidate identifiers (most
preferred first). Ballots may rank any number of the candidates, including
none; a voter who ranks only some of them simply stops contributing to the
count once all of their ranked candidates are eliminated.

The ballot validator checks the ballots against the candidate roster of the
poll. If a ballot is invalid, it raises a subclass of :class:`BallotError`;
the tally runs the validator on all ballots before counting anything, so an
invalid ballot rejects the whole input rather than being skipped.
'''

import collections.abc
from numbers import Number
from typing import Any, Dict, Hashable, Iterable, Optional, Tuple

from runofftally.candidate import InvalidInput
from runofftally.persist import simple_serialization


class BallotError(InvalidInput):
    '''A ballot is invalid given the poll setup.

    :param message: Description of the problem.
    :param ballot: The offending ballot, if known.
    '''
    def __init__(self, message: str, ballot: Any = None):
        self.ballot = ballot
        if ballot is not None:
            message += f' in {ballot!r}'
        super().__init__(message)


class BallotTypeError(BallotError):
    '''A ballot is not a ballot object or its ranking is not a sequence.'''
    pass


class DuplicateChoiceError(BallotError):
    '''A ballot ranks a candidate more than once.

    :param choice: Identifier of the repeated candidate.
    :param ballot: The offending ballot.
    '''
    def __init__(self, choice: Hashable, ballot: Any = None):
        self.choice = choice
        super().__init__(f'duplicated candidate {choice!r}', ballot)


class UnknownChoiceError(BallotError):
    '''A ballot ranks an identifier that does not denote any candidate.

    :param choice: The unknown identifier.
    :param ballot: The offending ballot.
    '''
    def __init__(self, choice: Hashable, ballot: Any = None):
        self.choice = choice
        super().__init__(f'unknown candidate {choice!r}', ballot)


class RankingLengthError(BallotError):
    '''A ballot ranks too few or too many candidates.

    :param value: Number of ranked candidates found to be invalid.
    :param min_value: Minimum number permissible.
    :param max_value: Maximum number permissible.
    :param ballot: The offending ballot.
    '''
    def __init__(self,
                 value: int,
                 min_value: Optional[int] = None,
                 max_value: Optional[int] = None,
                 ballot: Any = None,
                 ):
        self.value = value
        self.min_value = min_value
        self.max_value = max_value
        message = f'invalid ranking length: {value}'
        parts = []
        if min_value is not None:
            parts.append(f'>={min_value}')
        if max_value is not None:
            parts.append(f'<={max_value}')
        if parts:
            message += ', must be ' + ', '.join(parts)
        super().__init__(message, ballot)


@simple_serialization
class Ballot:
    '''A single voter's ranking of the poll candidates.

    :param id: Identifier of the ballot (for auditing purposes only, it
        plays no role in the count).
    :param choices: Identifiers of the ranked candidates, most preferred
        first. Any finite sequence is accepted and stored as a tuple.
    '''
    __slots__ = ('_id', '_choices')

    def __init__(self, id: Hashable, choices: Iterable[Hashable] = ()):
        if isinstance(choices, (str, bytes)) or not isinstance(
            choices, collections.abc.Iterable
        ):
            raise BallotTypeError(
                f'ranking must be a sequence of candidate ids, got {choices!r}'
            )
        self._id = id
        self._choices = tuple(choices)

    @property
    def id(self) -> Hashable:
        return self._id

    @property
    def choices(self) -> Tuple[Hashable, ...]:
        return self._choices

    def first_choice(self,
                     active: collections.abc.Container,
                     ) -> Optional[Hashable]:
        '''Return the highest ranked candidate still in the race.

        :param active: Identifiers of the candidates not yet eliminated.
        :returns: The candidate identifier, or None if the ballot is
            exhausted (ranks none of the active candidates).
        '''
        for choice in self._choices:
            if choice in active:
                return choice
        return None

    def __len__(self) -> int:
        return len(self._choices)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Ballot):
            return NotImplemented
        return self._id == other._id and self._choices == other._choices

    def __hash__(self) -> int:
        return hash((self._id, self._choices))

    def __repr__(self) -> str:
        return f'<Ballot({self._id!r},{list(self._choices)!r})>'


IntBoundsTupleType = Tuple[Optional[int], Optional[int]]


@simple_serialization
class RankingLengthChecker:
    '''A helper class to check if a ranking length is in a specified range.

    :param bounds: A tuple with lower and upper bounds (inclusive) for the
        number of ranked candidates. None means the respective bound is not
        checked.
    '''
    def __init__(self, bounds: IntBoundsTupleType = (None, None)):
        self.min_value, self.max_value = bounds
        self._active = self.min_value is not None or self.max_value is not None

    @property
    def bounds(self) -> IntBoundsTupleType:
        return (self.min_value, self.max_value)

    def __bool__(self) -> bool:
        '''Return True if the checker contains any constraints to check.'''
        return self._active

    def is_valid(self, value: Number) -> bool:
        '''Return True if the value is within the given range.'''
        return (
            (self.min_value is None or value >= self.min_value)
            and (self.max_value is None or value <= self.max_value)
        )

    def check(self, value: int, ballot: Any = None) -> None:
        '''Check if the ranking length is within the given range.

        :raises RankingLengthError: If the length is outside the range.
        '''
        if not self.is_valid(value):
            raise RankingLengthError(
                value, self.min_value, self.max_value, ballot
            )


@simple_serialization
class BallotValidator:
    '''Validate ballots against the candidate roster of a poll.

    A ballot is valid if it is a :class:`Ballot`, ranks only identifiers
    of the given candidates, ranks none of them twice and ranks a number
    of candidates within the configured bounds.

    :param ranking_length_bounds: A tuple with lower and upper bounds
        (inclusive) for the number of candidates any ballot can rank.
        None means the respective bound is not checked. Ignored if
        length_checker is given.
    :param length_checker: A :class:`RankingLengthChecker` that checks the
        number of candidates any ballot ranks.
    '''
    serialize_params = ['length_checker']

    def __init__(self,
                 ranking_length_bounds: IntBoundsTupleType = (None, None),
                 length_checker: Optional[RankingLengthChecker] = None,
                 ):
        if length_checker is None:
            length_checker = RankingLengthChecker(ranking_length_bounds)
        self.length_checker = length_checker

    def validate(self,
                 ballot: Ballot,
                 candidate_ids: collections.abc.Container,
                 ) -> None:
        '''Check if the ballot is valid.

        :param ballot: Ballot to be checked.
        :param candidate_ids: Identifiers of all the poll candidates.
        :raises BallotTypeError: If the ballot is not a :class:`Ballot`.
        :raises UnknownChoiceError: If the ballot ranks an identifier not
            among the candidate identifiers.
        :raises DuplicateChoiceError: If any candidate is ranked more than
            once.
        :raises RankingLengthError: If the number of ranked candidates is out
            of the configured bounds.
        '''
        if not isinstance(ballot, Ballot):
            raise BallotTypeError(f'not a Ballot object: {ballot!r}')
        seen = set()
        for choice in ballot.choices:
            try:
                known = choice in candidate_ids
            except TypeError as e:
                raise BallotTypeError(
                    f'unhashable candidate id {choice!r}', ballot
                ) from e
            if not known:
                raise UnknownChoiceError(choice, ballot)
            if choice in seen:
                raise DuplicateChoiceError(choice, ballot)
            seen.add(choice)
        self.length_checker.check(len(ballot), ballot)

    def validate_all(self,
                     ballots: Iterable[Ballot],
                     candidate_ids: collections.abc.Container,
                     ) -> None:
        '''Check all ballots, stopping at the first invalid one.'''
        for ballot in ballots:
            self.validate(ballot, candidate_ids)

    def is_valid(self,
                 ballot: Ballot,
                 candidate_ids: collections.abc.Container,
                 ) -> bool:
        '''Return True if the ballot passes validation, False otherwise.'''
        try:
            self.validate(ballot, candidate_ids)
        except BallotError:
            return False
        return True


def count_rankings(ballots: Iterable[Ballot],
                   ) -> Dict[Tuple[Hashable, ...], int]:
    '''Count how many ballots carry each distinct ranking.

    Preserves the order of first appearance of the rankings.
    '''
    counts = {}
    for ballot in ballots:
        counts[ballot.choices] = counts.get(ballot.choices, 0) + 1
    return counts
