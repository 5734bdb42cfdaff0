"""Poll JSON exports of the polling web application.

The application stores a poll as a list of options and a list of ballots,
each ballot ranking option identifiers. Its export looks like this::

    {
        "title": "Team lunch",
        "pollOptions": [{"id": 1, "text": "Pizza"}, {"id": 2, "text": "Sushi"}],
        "ballots": [{"id": 7, "rankedChoices": [2, 1]}, ...]
    }

``options`` is accepted in place of ``pollOptions``; the ballot ``id`` may be
omitted, in which case the ballots are numbered from 1 in file order.

The module also renders tally results into the payload the application's
results page consumes (:func:`result_payload`)::

    {
        "rounds": [
            {
                "roundNumber": 1,
                "votesByOption": {
                    "1": {"optionText": "Pizza", "votes": 4, "percentage": "40.0"},
                    ...
                },
                "exhaustedBallots": 0,
                "eliminated": [3]
            },
            ...
        ],
        "winner": 2,
        "totalBallots": 10
    }
"""

from __future__ import annotations

import json
from typing import Any, Dict, Hashable, TextIO

from runofftally.ballot import Ballot, BallotError
from runofftally.candidate import Candidate, CandidateError
from runofftally.io.core import ParseError, PollData
from runofftally.tally import TallyResult


class PollParseError(ParseError):
    pass


def load(file: TextIO) -> PollData:
    """Load a poll export from an open JSON file."""
    return loads(file.read())


def loads(text: str) -> PollData:
    """Load a poll export from a JSON string."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PollParseError(f'invalid poll JSON: {e}') from e
    return parse(data)


def parse(data: Any) -> PollData:
    """Create poll data from an already decoded poll export.

    :raises PollParseError: If the export does not have the expected
        structure.
    """
    if not isinstance(data, dict):
        raise PollParseError(f'poll export must be an object, got {data!r}')
    options = data.get('pollOptions', data.get('options'))
    if not isinstance(options, list):
        raise PollParseError('poll export needs a list of pollOptions')
    raw_ballots = data.get('ballots', [])
    if not isinstance(raw_ballots, list):
        raise PollParseError('ballots must be a list')
    title = data.get('title')
    if title is not None and not isinstance(title, str):
        raise PollParseError(f'invalid poll title: {title!r}')
    return PollData(
        candidates=[_parse_option(option) for option in options],
        ballots=[
            _parse_ballot(raw_ballot, i)
            for i, raw_ballot in enumerate(raw_ballots, start=1)
        ],
        title=title,
    )


def _parse_option(option: Any) -> Candidate:
    if not isinstance(option, dict) or 'id' not in option:
        raise PollParseError(f'invalid poll option: {option!r}')
    text = option.get('text')
    if text is not None and not isinstance(text, str):
        raise PollParseError(f'invalid poll option text: {option!r}')
    try:
        return Candidate(_parse_id(option['id']), text)
    except CandidateError as e:
        raise PollParseError(str(e)) from e


def _parse_ballot(raw_ballot: Any, default_id: int) -> Ballot:
    if not isinstance(raw_ballot, dict):
        raise PollParseError(f'invalid ballot: {raw_ballot!r}')
    choices = raw_ballot.get('rankedChoices')
    if not isinstance(choices, list):
        raise PollParseError(f'ballot needs rankedChoices list: {raw_ballot!r}')
    try:
        return Ballot(
            raw_ballot.get('id', default_id),
            [_parse_id(choice) for choice in choices],
        )
    except BallotError as e:
        raise PollParseError(str(e)) from e


def _parse_id(value: Any) -> Hashable:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise PollParseError(f'invalid option id: {value!r}')
    return value


def dump(file: TextIO, poll: PollData, **kwargs) -> None:
    """Write poll data to an open file as a poll export."""
    file.write(dumps(poll, **kwargs))


def dumps(poll: PollData, indent: int = 2) -> str:
    """Render poll data as a poll export JSON string."""
    return json.dumps(poll_payload(poll), indent=indent) + '\n'


def poll_payload(poll: PollData) -> Dict[str, Any]:
    payload = {}
    if poll.title is not None:
        payload['title'] = poll.title
    payload['pollOptions'] = [
        {'id': cand.id, 'text': cand.label} for cand in poll.candidates
    ]
    payload['ballots'] = [
        {'id': ballot.id, 'rankedChoices': list(ballot.choices)}
        for ballot in poll.ballots
    ]
    return payload


def result_payload(result: TallyResult) -> Dict[str, Any]:
    """Render a tally result as the results page payload.

    Percentages are rendered as strings with one decimal place and the
    option identifiers as string keys, as JSON object keys must be.
    """
    return {
        'rounds': [
            {
                'roundNumber': tally_round.number,
                'votesByOption': {
                    str(cand_id): {
                        'optionText': entry.label,
                        'votes': entry.votes,
                        'percentage': str(entry.percentage),
                    }
                    for cand_id, entry in tally_round.entries.items()
                },
                'exhaustedBallots': tally_round.exhausted,
                'eliminated': list(tally_round.eliminated),
            }
            for tally_round in result.rounds
        ],
        'winner': result.winner,
        'totalBallots': result.total_ballots,
    }


def dump_result(file: TextIO, result: TallyResult, **kwargs) -> None:
    """Write the results page payload of a tally result to an open file."""
    file.write(dumps_result(result, **kwargs))


def dumps_result(result: TallyResult, indent: int = 2) -> str:
    """Render the results page payload of a tally result as JSON."""
    return json.dumps(result_payload(result), indent=indent) + '\n'

