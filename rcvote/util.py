'''Various utility functions for other modules of rcvote.

There should normally be no need to use these functions directly.
'''

import operator
import collections
from typing import Any, List, Tuple, Dict, Iterable, Collection, Optional

from rcvote.vote import RankedBallot


def aggregate_ballots(ballots: Iterable[RankedBallot]
                      ) -> Dict[RankedBallot, int]:
    '''Count identical ballots, keeping the order of first appearance.'''
    return dict(collections.Counter(ballots))


def sorted_votes(votes: Dict[Any, int],
                 descending: bool = True,
                 ) -> List[Tuple[Any, int]]:
    '''Return votes items sorted by value.'''
    return list(sorted(
        votes.items(),
        key=operator.itemgetter(1),
        reverse=descending
    ))


def top_surviving(ballot: RankedBallot,
                  allowed: Collection[int],
                  ) -> Optional[int]:
    '''Return the highest-ranked candidate on the ballot that is allowed.

    :param ballot: The ranked ballot to examine.
    :param allowed: Candidates still in the contest.
    :returns: A candidate index, or None if the ballot is exhausted (ranks
        none of the allowed candidates).
    '''
    for cand in ballot:
        if cand in allowed:
            return cand
    return None
