'''Candidate specification and candidate roster validation.

The candidates of a poll are the options the voters rank. Each has an
identifier that is unique within the poll and stays the same throughout the
count, and a human readable label. The identifiers must be mutually orderable
(all integers or all strings, typically) because the tally processes the
candidates ordered by identifier to make its tiebreaks deterministic.
'''

from __future__ import annotations

from typing import Any, Hashable, Iterable, List, Optional

from runofftally.persist import simple_serialization


class InvalidInput(ValueError):
    '''The candidates or ballots passed to the tally are not valid.

    The root of all input errors raised by Runofftally; the tally rejects
    invalid input before counting any round.
    '''
    pass


class CandidateError(InvalidInput):
    '''The candidate roster is invalid.

    E.g. empty, with duplicate identifiers or with identifiers that cannot
    be ordered.

    :param message: Description of the problem.
    :param candidate: The offending candidate, if a single one can be
        pinpointed.
    '''
    def __init__(self, message: str, candidate: Any = None):
        self.candidate = candidate
        if candidate is not None:
            message += f': {candidate!r}'
        super().__init__(message)


@simple_serialization
class Candidate:
    '''A poll option that can be ranked by the voters.

    :param id: Identifier of the candidate, unique within the poll. Any
        hashable value orderable against the other identifiers of the poll.
    :param label: Display text of the candidate. Defaults to the string form
        of the identifier.
    '''
    __slots__ = ('_id', '_label')

    def __init__(self, id: Hashable, label: Optional[str] = None):
        try:
            hash(id)
        except TypeError as e:
            raise CandidateError('unhashable candidate identifier', id) from e
        self._id = id
        self._label = str(id) if label is None else label

    @property
    def id(self) -> Hashable:
        return self._id

    @property
    def label(self) -> str:
        return self._label

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Candidate):
            return NotImplemented
        return self._id == other._id and self._label == other._label

    def __hash__(self) -> int:
        return hash((self._id, self._label))

    def __repr__(self) -> str:
        if self._label == str(self._id):
            return f'<Candidate({self._id!r})>'
        return f'<Candidate({self._id!r},{self._label!r})>'


def sorted_roster(candidates: Iterable[Candidate]) -> List[Candidate]:
    '''Validate the candidates of a poll and order them by identifier.

    :param candidates: Candidates standing in the poll, in any order.
    :returns: The candidates as a list ordered by their identifiers.
    :raises CandidateError: If there are no candidates, if any item is not
        a :class:`Candidate`, if any identifier repeats or if the identifiers
        cannot be compared with each other.
    '''
    roster = list(candidates)
    if not roster:
        raise CandidateError('no candidates given')
    seen = set()
    for cand in roster:
        if not isinstance(cand, Candidate):
            raise CandidateError('not a Candidate object', cand)
        if cand.id in seen:
            raise CandidateError('duplicate candidate identifier', cand.id)
        seen.add(cand.id)
    try:
        return sorted(roster, key=lambda cand: cand.id)
    except TypeError as e:
        raise CandidateError(
            'candidate identifiers must be mutually orderable'
        ) from e


def candidates_from_labels(labels: Iterable[str],
                           start_at: int = 1,
                           ) -> List[Candidate]:
    '''Create candidates numbered sequentially from a list of labels.

    Useful for ballot formats that identify the candidates by position.

    :param labels: Candidate labels in the order of their numbering.
    :param start_at: Identifier of the first candidate.
    '''
    return [
        Candidate(i, label) for i, label in enumerate(labels, start=start_at)
    ]
