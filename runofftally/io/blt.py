"""BLT ballot files.

The BLT format (used by OpenSTV, Election Buddy and others) looks like this::

    4 1              # number of candidates, number of seats
    -2               # optional withdrawn candidate lines
    3 1 3 4 0        # weight, ranked candidate numbers, zero terminator
    2 2 0
    0                # end of ballots
    "Amy"            # candidate names
    "Bob"
    "Chuck"
    "Diane"
    "Lunch Poll"     # optional title

The candidates are numbered from 1 in the order of their names and those
numbers become the candidate identifiers. Every ballot line is expanded into
as many ballots as its weight says, so the weights must be positive integers;
the ballots are numbered from 1 in file order. Withdrawn candidates are left
out of the candidate list and their numbers dropped from the rankings.

The seat count is ignored on load (instant-runoff polls have a single
winner) and written as 1 on dump.
"""

from __future__ import annotations

import itertools
from typing import Iterable, List, Optional, Set, Tuple

import runofftally.ballot
import runofftally.io.core
from runofftally.ballot import Ballot
from runofftally.candidate import candidates_from_labels
from runofftally.io.core import PollData


class NotSupportedInBLT(runofftally.io.core.NotSupportedInFormat):
    FORMAT = 'BLT file'


class BLTParseError(runofftally.io.core.ParseError):
    pass


def dump_lines(poll: PollData) -> Iterable[str]:
    numbers = {cand.id: i for i, cand in enumerate(poll.candidates, start=1)}
    yield _dump_numline([len(poll.candidates), 1])
    rankings = runofftally.ballot.count_rankings(poll.ballots)
    for ranking, n_ballots in rankings.items():
        yield _dump_numline(_dump_ranking(ranking, numbers, n_ballots))
    yield _dump_numline([0])
    for cand in poll.candidates:
        yield _dump_strline(cand.label)
    if poll.title is not None:
        yield _dump_strline(poll.title)


dump, dumps = runofftally.io.core.dumpers(dump_lines)


def _dump_ranking(ranking: Tuple,
                  numbers: dict,
                  n_ballots: int,
                  ) -> List[int]:
    try:
        cand_numbers = [numbers[cand_id] for cand_id in ranking]
    except KeyError as e:
        raise NotSupportedInBLT(f'ranking of unlisted candidate {e}') from e
    return [n_ballots] + cand_numbers + [0]


def _dump_numline(nums: List[int]) -> str:
    return ' '.join(str(num) for num in nums)


def _dump_strline(string: str) -> str:
    if '"' in string:
        raise NotSupportedInBLT(f'double quote in name {string!r}')
    return f'"{string}"'


def load_lines(blt_lines: Iterable[str]) -> PollData:
    blt_lines = iter(blt_lines)
    try:
        n_cands = _parse_header(next(blt_lines))
    except StopIteration as e:
        raise BLTParseError('empty BLT file') from e
    rankings, withdrawn = _parse_body(blt_lines, n_cands)
    labels, title = _parse_strings(blt_lines, n_cands)
    if labels is None:
        labels = [str(i+1) for i in range(n_cands)]
    candidates = [
        cand for cand in candidates_from_labels(labels)
        if cand.id not in withdrawn
    ]
    return PollData(
        candidates=candidates,
        ballots=_expand_ballots(rankings, withdrawn),
        title=title,
    )


load, loads = runofftally.io.core.loaders(load_lines)


def _expand_ballots(rankings: List[Tuple[int, Tuple[int, ...]]],
                    withdrawn: Set[int],
                    ) -> List[Ballot]:
    ballot_ids = itertools.count(1)
    return [
        Ballot(
            next(ballot_ids),
            [cand for cand in ranking if cand not in withdrawn],
        )
        for weight, ranking in rankings
        for _ in range(weight)
    ]


def _parse_header(blt_line: str) -> int:
    blt_result = _parse_numline(blt_line)
    if len(blt_result) == 2:
        return blt_result[0]
    else:
        raise BLTParseError(f'need two integers (candidate and seat count)'
                            f' in BLT file header line, got {blt_result!r}')


def _parse_body(blt_lines: Iterable[str],
                n_cands: int,
                ) -> Tuple[List[Tuple[int, Tuple[int, ...]]], Set[int]]:
    rankings = []
    withdrawn = set()
    for line in blt_lines:
        result = _parse_numline(line, allow_negative=not rankings)
        if not result:
            continue    # ignore empty lines
        elif result == [0]:
            # End-of-ballots line, return.
            return rankings, withdrawn
        elif result[0] < 0:
            # Withdrawn candidates. Allow more than one per line.
            withdrawn.update(-n for n in result)
        else:
            weight, ranking = _parse_ranking(result, n_cands)
            rankings.append((weight, ranking))
    raise BLTParseError('incomplete BLT file:'
                        ' EOF before ballot list terminator')


def _parse_strings(blt_lines: Iterable[str],
                   n_cands: int,
                   ) -> Tuple[Optional[List[str]], Optional[str]]:
    parsed_lines = []
    empty_encountered = False
    for blt_line in blt_lines:
        blt_line = _clean_line(blt_line)
        if blt_line.startswith('"') and blt_line.endswith('"'):
            if empty_encountered:
                raise BLTParseError(f'nonempty line after empty: {blt_line!r}')
            parsed_lines.append(blt_line[1:-1])
        elif not blt_line:
            empty_encountered = True
        else:
            raise BLTParseError(f'invalid BLT string line: {blt_line!r}')
    if not parsed_lines:
        return None, None
    elif len(parsed_lines) < n_cands:
        if len(parsed_lines) == 1:
            return None, parsed_lines[0]
        raise BLTParseError(f'not enough candidate names: {len(parsed_lines)}'
                            f' given, {n_cands} set in header')
    elif len(parsed_lines) == n_cands:
        return parsed_lines, None
    elif len(parsed_lines) == n_cands + 1:
        return parsed_lines[:-1], parsed_lines[-1]
    else:
        raise BLTParseError(f'too many strings: {len(parsed_lines)} found'
                            f' but expecting {n_cands} candidate names + title')


def _clean_line(blt_line: str) -> str:
    blt_line = blt_line.strip()
    # Ignore everything after the first hash sign after the last double quote.
    hash_search_start = blt_line.rfind('"') if '"' in blt_line else 0
    leftmost_hash = blt_line[hash_search_start:].find('#')
    if leftmost_hash == -1:
        return blt_line
    else:
        return blt_line[:(hash_search_start + leftmost_hash)].rstrip()


def _parse_ranking(nums: List[int],
                   n_cands: int,
                   ) -> Tuple[int, Tuple[int, ...]]:
    # Check the trailing zero and strip it.
    if nums[-1] != 0:
        raise BLTParseError('ballot line must be zero-terminated,'
                            f' got {nums!r}')
    weight, ranking = nums[0], tuple(nums[1:-1])
    if weight < 1:
        raise BLTParseError(f'ballot weight must be positive, got {nums!r}')
    for cand in ranking:
        if not 1 <= cand <= n_cands:
            raise BLTParseError(f'candidate number {cand} out of range'
                                f' 1-{n_cands} in {nums!r}')
    return weight, ranking


def _parse_numline(blt_line: str, allow_negative: bool = False) -> List[int]:
    blt_line = _clean_line(blt_line)
    # Return empty lines as empty lists.
    if not blt_line:
        return []
    # Split the line by spaces to obtain numbers.
    nums = []
    for i, numstr in enumerate(blt_line.split()):
        if numstr.isdecimal():
            nums.append(int(numstr))
        elif allow_negative and numstr.startswith('-') and numstr[1:].isdecimal():
            nums.append(int(numstr))
        else:
            raise BLTParseError(f'invalid BLT numberline item {i}: {numstr!r}'
                                ' (ballot weights must be whole numbers)')
    if nums and nums[0] < 0 and any(num >= 0 for num in nums):
        raise BLTParseError(f'mixed withdrawn candidate line: {blt_line!r}')
    return nums
