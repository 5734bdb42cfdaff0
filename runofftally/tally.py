'''Instant-runoff tally of ranked ballots.

This hosts the tally engine (:class:`InstantRunoffTally`, with the
:func:`compute` shortcut) and the objects describing its result.

The count proceeds in rounds. In each round, every ballot is credited to the
highest ranked candidate on it that has not been eliminated yet; a ballot
that ranks no such candidate is exhausted and credited to nobody. If any
candidate has strictly more than half of all ballots cast (the total number
of ballots is kept fixed for the whole count, exhausted ballots included),
that candidate wins. Otherwise all candidates with the lowest number of
votes in the round are eliminated together and the next round starts. The
count ends when a candidate wins by majority, when a single candidate
remains (who then wins), or when the round limit is hit or nobody remains
(the result is then inconclusive and has no winner).

The rounds that ended with an elimination are recorded in the result; the
round in which a candidate reached the majority is not, so a poll decided
outright in the first round has an empty round history.

All tiebreaks follow the ordering of the candidate identifiers, which makes
the result fully determined by the input regardless of the order in which
the candidates were given.
'''

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Hashable, Iterable, List, Optional, Tuple

from runofftally.ballot import Ballot, BallotValidator
from runofftally.candidate import Candidate, sorted_roster
from runofftally.persist import simple_serialization, serialize_value

ROUND_LIMIT = 10
'''Default maximum number of rounds to count before giving up.'''

PERCENTAGE_STEP = Decimal('0.1')

DEFAULT_VALIDATOR = BallotValidator()

logger = logging.getLogger(__name__)


class Tie(frozenset):
    '''Candidates tied for the win.

    This object, a subclass of ``frozenset`` holding candidate identifiers,
    is recorded in the tally result when more than one candidate exceeded
    the majority threshold in the same round. The tally resolves the tie in
    favour of the lowest identifier (see :meth:`lowest`) but keeps the tie
    in the result so that the resolution can be reviewed.
    '''
    def lowest(self) -> Hashable:
        '''Return the candidate identifier that wins the tiebreak.'''
        return min(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'class': f'{__name__}.{self.__class__.__name__}',
            'candidates': serialize_value(sorted(self)),
        }

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> Tie:
        return cls(params['candidates'])

    def __repr__(self) -> str:
        return f'Tie({sorted(self)!r})'


@simple_serialization
class CandidateTally:
    '''Votes of a single candidate in a single round.

    :param candidate_id: Identifier of the candidate.
    :param label: Display text of the candidate.
    :param votes: Number of ballots credited to the candidate in the round.
    :param percentage: The votes as a percentage of all ballots cast,
        rounded to one decimal place.
    '''
    def __init__(self,
                 candidate_id: Hashable,
                 label: str,
                 votes: int,
                 percentage: Decimal,
                 ):
        self.candidate_id = candidate_id
        self.label = label
        self.votes = votes
        self.percentage = percentage

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, CandidateTally):
            return NotImplemented
        return (
            self.candidate_id == other.candidate_id
            and self.label == other.label
            and self.votes == other.votes
            and self.percentage == other.percentage
        )

    def __repr__(self) -> str:
        return (f'<CandidateTally({self.candidate_id!r},{self.votes},'
                f'{self.percentage}%)>')


@simple_serialization
class Round:
    '''A record of one counting round that ended with an elimination.

    :param number: 1-based number of the round.
    :param entries: Mapping of identifiers of the candidates active in the
        round to their :class:`CandidateTally`, ordered by identifier.
    :param exhausted: Number of ballots credited to nobody in the round.
    :param eliminated: Identifiers of the candidates eliminated at the end
        of the round.
    '''
    def __init__(self,
                 number: int,
                 entries: Dict[Hashable, CandidateTally],
                 exhausted: int = 0,
                 eliminated: Iterable[Hashable] = (),
                 ):
        self.number = number
        self.entries = dict(entries)
        self.exhausted = exhausted
        self.eliminated = tuple(eliminated)

    @property
    def active(self) -> Tuple[Hashable, ...]:
        '''Identifiers of the candidates that were active in the round.'''
        return tuple(self.entries.keys())

    @property
    def votes(self) -> Dict[Hashable, int]:
        '''Mapping of candidate identifiers to their votes in the round.'''
        return {
            cand_id: entry.votes for cand_id, entry in self.entries.items()
        }

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Round):
            return NotImplemented
        return (
            self.number == other.number
            and list(self.entries.items()) == list(other.entries.items())
            and self.exhausted == other.exhausted
            and self.eliminated == other.eliminated
        )

    def __repr__(self) -> str:
        return f'<Round({self.number},{self.votes!r})>'


@simple_serialization
class TallyResult:
    '''The outcome of an instant-runoff tally.

    :param rounds: Records of the rounds that ended with an elimination,
        in order. Empty if the poll was decided in the first round.
    :param winner: Identifier of the winning candidate, or None if the
        tally was inconclusive (no majority reached within the round limit,
        or all remaining candidates eliminated at once).
    :param total_ballots: Number of ballots cast; the fixed denominator of
        all percentages and of the majority threshold.
    :param decided_in: Number of the round in which the winner was
        determined (0 if a sole candidate won without any counting), None for
        an inconclusive tally.
    :param majority_tie: The candidates that exceeded the majority threshold
        together in the deciding round, if there was more than one.
    :param candidates: The candidate roster of the poll, ordered by
        identifier.
    '''
    def __init__(self,
                 rounds: Iterable[Round],
                 winner: Optional[Hashable],
                 total_ballots: int,
                 decided_in: Optional[int] = None,
                 majority_tie: Optional[Tie] = None,
                 candidates: Iterable[Candidate] = (),
                 ):
        self.rounds = tuple(rounds)
        self.winner = winner
        self.total_ballots = total_ballots
        self.decided_in = decided_in
        self.majority_tie = majority_tie
        self.candidates = tuple(candidates)

    @property
    def is_conclusive(self) -> bool:
        '''Whether the tally determined a winner.'''
        return self.winner is not None

    @property
    def winner_label(self) -> Optional[str]:
        '''Display text of the winning candidate, if there is one.'''
        if self.winner is None:
            return None
        for cand in self.candidates:
            if cand.id == self.winner:
                return cand.label
        return str(self.winner)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TallyResult):
            return NotImplemented
        return (
            self.rounds == other.rounds
            and self.winner == other.winner
            and self.total_ballots == other.total_ballots
            and self.decided_in == other.decided_in
            and self.majority_tie == other.majority_tie
            and self.candidates == other.candidates
        )

    def __repr__(self) -> str:
        return (f'<TallyResult(winner={self.winner!r},'
                f'rounds={len(self.rounds)})>')


@simple_serialization
class InstantRunoffTally:
    '''Determine the winner of a poll by instant-runoff voting.

    The engine holds no state between calls; one instance can count any
    number of polls, concurrently if desired.

    :param round_limit: Maximum number of rounds to count. If no winner is
        determined within this many rounds, the tally is inconclusive.
    :param validator: A :class:`runofftally.ballot.BallotValidator` to check
        the ballots with before counting. The default checks that the ballots
        rank only known candidates, each at most once.
    '''
    def __init__(self,
                 round_limit: int = ROUND_LIMIT,
                 validator: Optional[BallotValidator] = None,
                 ):
        if (isinstance(round_limit, bool)
                or not isinstance(round_limit, int)
                or round_limit < 1):
            raise ValueError(
                f'round limit must be a positive integer, got {round_limit!r}'
            )
        self.round_limit = round_limit
        self.validator = validator

    def compute(self,
                candidates: Iterable[Candidate],
                ballots: Iterable[Ballot],
                ) -> TallyResult:
        '''Count the ballots and determine the winner.

        :param candidates: Candidates standing in the poll. Must not be
            empty; identifiers must be unique and mutually orderable.
        :param ballots: Ballots cast in the poll.
        :returns: The winner with the round-by-round breakdown.
        :raises runofftally.candidate.CandidateError: If the candidates are
            invalid.
        :raises runofftally.ballot.BallotError: If any of the ballots is
            invalid.
        '''
        roster = sorted_roster(candidates)
        ballots = list(ballots)
        cand_ids = [cand.id for cand in roster]
        validator = self.validator or DEFAULT_VALIDATOR
        validator.validate_all(ballots, frozenset(cand_ids))
        total_ballots = len(ballots)
        if not ballots:
            logger.warning('no ballots cast, cannot determine a winner')
            return TallyResult([], None, 0, candidates=roster)
        labels = {cand.id: cand.label for cand in roster}
        threshold = majority_threshold(total_ballots)
        logger.info('counting %d ballots for %d candidates',
                    total_ballots, len(roster))
        logger.debug('majority threshold: over %d votes', threshold)
        active = cand_ids
        rounds = []
        winner = None
        majority_tie = None
        round_number = 0
        while len(active) > 1 and round_number < self.round_limit:
            round_number += 1
            logger.info('proceeding to round %d', round_number)
            counts, n_exhausted = count_first_choices(ballots, active)
            logger.info('current vote totals: %s', counts)
            logger.debug('%d ballots exhausted', n_exhausted)
            winner, majority_tie = select_majority(counts, threshold)
            if winner is not None:
                logger.info('%r elected by majority in round %d',
                            winner, round_number)
                break
            eliminated = bottom_candidates(counts)
            rounds.append(build_round(
                round_number, counts, labels, total_ballots,
                n_exhausted, eliminated
            ))
            logger.info('eliminating %s', list(eliminated))
            active = [cand for cand in active if cand not in eliminated]
        if winner is None and len(active) == 1:
            winner = active[0]
            logger.info('%r elected as the last remaining candidate', winner)
        if winner is None:
            logger.warning('no majority reached after %d rounds',
                           round_number)
            decided_in = None
        else:
            decided_in = round_number
        return TallyResult(
            rounds,
            winner,
            total_ballots,
            decided_in=decided_in,
            majority_tie=majority_tie,
            candidates=roster,
        )


def compute(candidates: Iterable[Candidate],
            ballots: Iterable[Ballot],
            round_limit: int = ROUND_LIMIT,
            ) -> TallyResult:
    '''Count the ballots of a poll by instant-runoff voting.

    A shortcut for :meth:`InstantRunoffTally.compute` with default ballot
    validation.

    :param candidates: Candidates standing in the poll.
    :param ballots: Ballots cast in the poll.
    :param round_limit: Maximum number of rounds to count.
    '''
    return InstantRunoffTally(round_limit=round_limit).compute(
        candidates, ballots
    )


def majority_threshold(total_ballots: int) -> int:
    '''Return the vote count a candidate must strictly exceed to win.'''
    return total_ballots // 2


def count_first_choices(ballots: List[Ballot],
                        active: List[Hashable],
                        ) -> Tuple[Dict[Hashable, int], int]:
    '''Credit every ballot to its highest ranked active candidate.

    :param ballots: All ballots cast.
    :param active: Identifiers of the candidates still in the race, ordered.
    :returns: A 2-tuple of the mapping of active candidates to their votes
        (in the order of ``active``, zero-vote candidates included) and the
        number of exhausted ballots.
    '''
    counts = {cand: 0 for cand in active}
    n_exhausted = 0
    for ballot in ballots:
        choice = ballot.first_choice(counts)
        if choice is None:
            n_exhausted += 1
        else:
            counts[choice] += 1
    return counts, n_exhausted


def select_majority(counts: Dict[Hashable, int],
                    threshold: int,
                    ) -> Tuple[Optional[Hashable], Optional[Tie]]:
    '''Find the candidate with votes over the majority threshold.

    :param counts: Votes of the active candidates.
    :param threshold: The majority threshold.
    :returns: A 2-tuple of the winner (None if nobody exceeds the threshold)
        and a :class:`Tie` of all candidates over the threshold if there is
        more than one (None otherwise). Such a tie is won by the lowest
        identifier.
    '''
    over = [cand for cand, n_votes in counts.items() if n_votes > threshold]
    if not over:
        return None, None
    elif len(over) == 1:
        return over[0], None
    else:
        tie = Tie(over)
        logger.warning('%s all over the majority threshold,'
                       ' electing the lowest identifier', tie)
        return tie.lowest(), tie


def bottom_candidates(counts: Dict[Hashable, int]) -> Tuple[Hashable, ...]:
    '''Return all candidates tied for the lowest number of votes.'''
    min_votes = min(counts.values())
    return tuple(
        cand for cand, n_votes in counts.items() if n_votes == min_votes
    )


def vote_percentage(n_votes: int, total_ballots: int) -> Decimal:
    '''Express votes as a percentage of all ballots, to one decimal place.'''
    if not total_ballots:
        return Decimal('0.0')
    return (Decimal(n_votes) * 100 / total_ballots).quantize(
        PERCENTAGE_STEP, rounding=ROUND_HALF_UP
    )


def build_round(number: int,
                counts: Dict[Hashable, int],
                labels: Dict[Hashable, str],
                total_ballots: int,
                n_exhausted: int = 0,
                eliminated: Iterable[Hashable] = (),
                ) -> Round:
    '''Create the record of a counting round.

    :param number: 1-based round number.
    :param counts: Votes of the candidates active in the round.
    :param labels: Display texts of the candidates.
    :param total_ballots: All ballots cast, the denominator of percentages.
    :param n_exhausted: Number of ballots credited to nobody.
    :param eliminated: Candidates eliminated at the end of the round.
    '''
    return Round(
        number,
        {
            cand: CandidateTally(
                cand,
                labels[cand],
                n_votes,
                vote_percentage(n_votes, total_ballots),
            )
            for cand, n_votes in counts.items()
        },
        exhausted=n_exhausted,
        eliminated=eliminated,
    )
