"""A commandline tool for counting instant-runoff polls.

Loads the candidates and ballots of a poll from a file, counts them round by
round and shows the rounds and the winner (or that no majority was reached).
"""

import argparse
import io
import logging
import sys
import warnings
from typing import Optional

import runofftally.io.blt
import runofftally.io.grid
import runofftally.io.poll
import runofftally.persist
from runofftally.io.core import PollData
from runofftally.tally import InstantRunoffTally, Round, TallyResult, \
    ROUND_LIMIT

argparser = argparse.ArgumentParser(
    prog='runofftally',
    description=__doc__,
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
)
argparser.add_argument(
    '-i', '--input-file',
    type=argparse.FileType('r', encoding='utf8'),
    help='file to load the poll from',
)
argparser.add_argument(
    '-I', '--use-stdin',
    action='store_true',
    help='load the poll from standard input',
)
argparser.add_argument(
    '-f', '--input-format',
    choices=['poll', 'blt', 'grid'],
    default='poll',
    help='format of the poll file',
)
argparser.add_argument(
    '-r', '--round-limit',
    type=int,
    help=(
        'give up after this many rounds (overrides the configuration file);'
        f' default (None) uses the configuration or {ROUND_LIMIT}'
    ),
)
argparser.add_argument(
    '-c', '--config',
    type=argparse.FileType('r', encoding='utf8'),
    help='JSON file with a serialized tally engine setup',
)
argparser.add_argument(
    '-j', '--json',
    action='store_true',
    help='print the results payload as JSON instead of the round tables',
)
argparser.add_argument(
    '-v', '--verbose',
    action='store_true',
    help='show all tally log messages',
)
argparser.add_argument(
    '-q', '--quiet',
    action='store_true',
    help='do not show any tally log messages',
)

INPUT_FORMATS = {
    'poll': runofftally.io.poll.load,
    'blt': runofftally.io.blt.load,
    'grid': runofftally.io.grid.load,
}


def main(input_file: Optional[io.TextIOBase],
         use_stdin: bool = False,
         input_format: str = 'poll',
         round_limit: Optional[int] = None,
         config: Optional[io.TextIOBase] = None,
         json: bool = False,
         verbose: bool = False,
         quiet: bool = False,
         ) -> Optional[TallyResult]:
    logging.basicConfig(
        level=(
            logging.DEBUG if verbose
            else (logging.WARNING if quiet else logging.INFO)
        ),
        format='%(levelname)-10s %(message)s'
    )
    if use_stdin:
        input_file = sys.stdin
    poll = load_poll(input_file, input_format=input_format)
    if not poll.ballots:
        warnings.warn('no ballots in the poll file, terminating')
        return None
    engine = create_engine(config, round_limit)
    result = engine.compute(poll.candidates, poll.ballots)
    if json:
        print(runofftally.io.poll.dumps_result(result), end='')
    else:
        show_poll_stats(poll)
        print()
        show_result(result)
    return result


def load_poll(input_file: io.TextIOBase, input_format: str) -> PollData:
    """Load the poll from the given file, expecting the given format."""
    try:
        loader = INPUT_FORMATS[input_format]
    except KeyError as e:
        raise ValueError(
            f'invalid input poll file format: {input_format}, '
            'supported: ' + ', '.join(INPUT_FORMATS.keys())
        ) from e
    return loader(input_file)


def create_engine(config: Optional[io.TextIOBase] = None,
                  round_limit: Optional[int] = None,
                  ) -> InstantRunoffTally:
    """Create the tally engine from the configuration file and options."""
    if config is None:
        engine = InstantRunoffTally()
    else:
        engine = runofftally.persist.loads(config.read())
        if not isinstance(engine, InstantRunoffTally):
            raise ValueError(
                f'configuration does not define a tally: {engine!r}'
            )
    if round_limit is not None:
        engine = InstantRunoffTally(
            round_limit=round_limit, validator=engine.validator
        )
    return engine


def show_poll_stats(poll: PollData) -> None:
    if poll.title:
        print(poll.title)
    print(f'Received {len(poll.ballots)} ballots'
          f' for {len(poll.candidates)} candidates')


def show_round(tally_round: Round, total_ballots: int) -> None:
    print(f'Round {tally_round.number}')
    entries = list(tally_round.entries.values())
    n_just_chars = max(len(entry.label) for entry in entries)
    n_vote_chars = len(str(total_ballots))
    for entry in entries:
        print(
            ' ' * 2 + entry.label.ljust(n_just_chars),
            str(entry.votes).rjust(n_vote_chars),
            f'{entry.percentage}%'.rjust(7),
        )
    if tally_round.exhausted:
        print(f'  {tally_round.exhausted} ballots exhausted')
    eliminated = ', '.join(
        tally_round.entries[cand_id].label
        for cand_id in tally_round.eliminated
    )
    print(f'  Eliminated: {eliminated}')


def show_result(result: TallyResult) -> None:
    """Show the recorded rounds and the outcome of the tally."""
    for tally_round in result.rounds:
        show_round(tally_round, result.total_ballots)
        print()
    if result.is_conclusive:
        if result.decided_in:
            print(f'Winner: {result.winner_label}'
                  f' (decided in round {result.decided_in})')
        else:
            print(f'Winner: {result.winner_label} (sole candidate)')
        if result.majority_tie:
            tied = ', '.join(str(cand) for cand in sorted(result.majority_tie))
            print(f'Note: majority tie between {tied}, lowest id elected')
    else:
        print('No majority reached')


if __name__ == '__main__':
    args = argparser.parse_args()
    if not args.input_file and not args.use_stdin:
        argparser.print_usage()
    else:
        main(**vars(args))
