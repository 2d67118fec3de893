"""Writing recorded ballots as BLT files.

BLT is the plain text ballot format read by most preferential vote counting
programs, so exporting an election to it allows the instant-runoff result to
be recounted independently. The file is written for a single seat; candidates
are numbered from 1 in their election order.
"""

from typing import List, Dict, Iterable, Optional, Sequence

import rcvote.util
import rcvote.io.core
from rcvote.vote import RankedBallot


def dump_lines(ballots: Sequence[RankedBallot],
               candidates: Sequence[str],
               election_name: Optional[str] = None,
               ) -> Iterable[str]:
    """Generate the lines of a BLT file.

    :param ballots: Recorded ballots as candidate indices (0-based).
    :param candidates: Candidate names in index order.
    :param election_name: Title of the election, if any.
    """
    yield _dump_numline([len(candidates), 1])
    votes: Dict[RankedBallot, int] = rcvote.util.aggregate_ballots(ballots)
    for ballot, n_votes in votes.items():
        yield _dump_numline(_dump_vote(ballot, n_votes))
    yield _dump_numline([0])
    for cand in candidates:
        yield _dump_strline(cand)
    if election_name is not None:
        yield _dump_strline(election_name)


dump, dumps = rcvote.io.core.dumpers(dump_lines)


def _dump_vote(ballot: RankedBallot, n_votes: int) -> List[int]:
    return [n_votes] + [cand + 1 for cand in ballot] + [0]


def _dump_numline(nums: List[int]) -> str:
    return ' '.join(str(num) for num in nums)


def _dump_strline(string: str) -> str:
    return '"' + string.replace('"', "'") + '"'
