"""CSV rank grids, as exported by survey and form tools.

A rank grid has one row per ballot and one column per candidate; the cells
hold the rank the voter gave to the candidate (1 = most preferred) or are
blank for unranked candidates. The first column holds the ballot
identifier::

    ballot,Pizza,Sushi,Tacos
    1,1,2,
    2,,1,2
    3,2,1,3

The candidates are numbered from 1 in the order of the header columns and
those numbers become the candidate identifiers. Rankings are converted by
:func:`runofftally.io.choices_from_rankings`, so shared ranks are rejected;
skipped ranks are rejected unless ``skipped='ignore'`` is passed.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable, List

import runofftally.io
import runofftally.io.core
from runofftally.ballot import Ballot, BallotError
from runofftally.candidate import candidates_from_labels
from runofftally.io.core import PollData


class GridParseError(runofftally.io.core.ParseError):
    pass


def load_lines(lines: Iterable[str],
               skipped: str = 'error',
               delimiter: str = ',',
               ) -> PollData:
    reader = csv.reader(lines, delimiter=delimiter)
    try:
        header = next(reader)
    except StopIteration as e:
        raise GridParseError('empty rank grid') from e
    labels = [label.strip() for label in header[1:]]
    if not labels:
        raise GridParseError('rank grid header has no candidate columns')
    candidates = candidates_from_labels(labels)
    ballots = []
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue    # ignore empty lines
        ballots.append(_parse_row(row, candidates, reader.line_num, skipped))
    return PollData(candidates=candidates, ballots=ballots)


load, loads = runofftally.io.core.loaders(load_lines)


def _parse_row(row: List[str],
               candidates: list,
               line_num: int,
               skipped: str,
               ) -> Ballot:
    if len(row) > len(candidates) + 1:
        raise GridParseError(f'line {line_num}: {len(row)} cells'
                             f' for {len(candidates)} candidates')
    rankings = {}
    for cand, cell in zip(candidates, row[1:]):
        cell = cell.strip()
        if not cell:
            rankings[cand.id] = None
        elif cell.isdecimal():
            rankings[cand.id] = int(cell)
        else:
            raise GridParseError(f'line {line_num}: invalid rank {cell!r}'
                                 f' for {cand.label!r}')
    try:
        choices = runofftally.io.choices_from_rankings(
            rankings, skipped=skipped
        )
    except BallotError as e:
        raise GridParseError(f'line {line_num}: {e}') from e
    return Ballot(row[0].strip(), choices)


def dump_lines(poll: PollData, delimiter: str = ',') -> Iterable[str]:
    yield _dump_row(['ballot'] + [cand.label for cand in poll.candidates],
                    delimiter)
    for ballot in poll.ballots:
        ranks = {cand_id: i for i, cand_id in enumerate(ballot.choices, 1)}
        yield _dump_row(
            [str(ballot.id)]
            + [str(ranks.get(cand.id, '')) for cand in poll.candidates],
            delimiter,
        )


dump, dumps = runofftally.io.core.dumpers(dump_lines)


def _dump_row(cells: List[str], delimiter: str) -> str:
    # cells with line breaks are only quoted given a line terminator
    buffer = io.StringIO()
    csv.writer(buffer, delimiter=delimiter).writerow(cells)
    return buffer.getvalue().rstrip('\r\n')
