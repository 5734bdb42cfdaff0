"""Shared functionality for poll file I/O. Internal."""

from __future__ import annotations

import dataclasses
import io
import typing
from typing import Any, List, Tuple, Callable, Iterable, TextIO, Optional

from runofftally.ballot import Ballot
from runofftally.candidate import Candidate


class NotSupportedInFormat(Exception):
    """Signals that the given element is not supported by the I/O format."""

    FORMAT: str = NotImplemented

    def __init__(self, what: str):
        super().__init__(f'{what} not supported by {self.FORMAT}')


class ParseError(Exception):
    """An input that is invalid according to the given format was detected."""
    pass


@dataclasses.dataclass
class PollData:
    """A container for data returnable from a poll file."""
    candidates: List[Candidate]
    ballots: List[Ballot]
    title: Optional[str] = None


def loaders(line_loader: Callable[..., PollData]
            ) -> Tuple[Callable[..., PollData], Callable[..., PollData]]:
    """Create load() and loads() functions from an iterating function."""
    return_annot = typing.get_type_hints(line_loader).get('return')
    if return_annot is None:
        return_annot = Any

    def load(file: TextIO, **kwargs) -> return_annot:
        return line_loader(iter(file), **kwargs)

    def loads(text: str, **kwargs) -> return_annot:
        return line_loader(io.StringIO(text), **kwargs)

    return load, loads


def dumpers(line_dumper: Callable[..., Iterable[str]]
            ) -> Tuple[Callable[..., None], Callable[..., str]]:
    """Create dump() and dumps() functions from a line generator function."""

    def dump(file: TextIO, *args, **kwargs) -> None:
        for line in line_dumper(*args, **kwargs):
            if not line.endswith('\n'):
                line += '\n'
            file.write(line)

    def dumps(*args, **kwargs) -> str:
        return ''.join(
            line + ('' if line.endswith('\n') else '\n')
            for line in line_dumper(*args, **kwargs)
        )

    return dump, dumps
