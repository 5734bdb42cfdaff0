"""Runofftally - a library for counting ranked-choice (instant-runoff) polls.

A poll is counted from a closed list of candidates and a closed list of
ballots, each ballot being one voter's ordering of (some of) the candidates.
The count proceeds in rounds: every ballot is credited to its highest ranked
candidate still in the race, and unless somebody holds a majority of all
ballots cast, the candidates with the fewest votes are eliminated and the
next round starts.

The library is organized as follows:

-   The ``candidate`` module defines the :class:`Candidate` objects and the
    root :class:`InvalidInput` error.
-   The ``ballot`` module defines the :class:`Ballot` objects and the ballot
    validator that checks them against the candidate roster.
-   The ``tally`` module contains the tally engine itself
    (:class:`InstantRunoffTally` and the :func:`compute` shortcut) and the
    round-by-round result objects.
-   The ``persist`` module serializes results and engine setups to
    JSON-ready dictionaries and back.
-   The ``io`` subpackage loads and dumps ballots in several file formats.

A commandline tool is available as ``python -m runofftally``.
"""
