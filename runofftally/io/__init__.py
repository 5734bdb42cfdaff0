"""Input/output of polls in file formats such as poll JSON exports and BLT.

This subpackage is structured into modules by file format. Its root namespace
contains a general-purpose function to transform numeric rankings into the
ordered candidate lists used by :class:`runofftally.ballot.Ballot`.
"""

from typing import Dict, Hashable, Optional, Tuple

from runofftally.ballot import BallotError


def choices_from_rankings(rankings: Dict[Hashable, Optional[int]],
                          skipped: str = 'error',
                          start_at: int = 1,
                          ) -> Tuple[Hashable, ...]:
    '''Transform numeric rankings of candidates to their ordering.

    :param rankings: A dictionary mapping candidate identifiers to their
        numeric rankings. The rankings should start at the value of start_at,
        higher numbers mean lower (worse) ranks. Candidates mapped to None are
        considered unranked.
    :param skipped: How to behave for skipped ranks (e.g. rankings 1, 3, 4):

        -   ``error``: Raise a :class:`BallotError`.
        -   ``ignore``: Behave as if the skipped rank did not exist.

    :param start_at: The best ranking present in the rankings, to allow other
        than 1-based systems.
    :returns: Candidate identifiers in the order of their rankings.
    :raises BallotError: If two candidates share a rank, or a rank is
        skipped and ``skipped`` is ``error``.
    '''
    if skipped not in ('error', 'ignore'):
        raise ValueError(f'invalid skipped setting: {skipped!r}')
    filled_rankings = {
        cand: rank for cand, rank in rankings.items() if rank is not None
    }
    if not filled_rankings:
        return tuple()
    by_rank = {}
    for cand, rank in filled_rankings.items():
        if rank < start_at:
            raise BallotError(f'rank {rank} better than {start_at}'
                              f' in {rankings!r}')
        if rank in by_rank:
            raise BallotError(f'shared rank {rank}: {by_rank[rank]!r}'
                              f' and {cand!r}')
        by_rank[rank] = cand
    choices = []
    for rank in range(start_at, max(by_rank) + 1):
        if rank in by_rank:
            choices.append(by_rank[rank])
        elif skipped == 'error':
            raise BallotError(f'skipped rank: {rank} in {rankings!r}')
    return tuple(choices)
