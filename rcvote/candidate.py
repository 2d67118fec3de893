'''Candidate list validation for new elections.

Candidates are plain strings (names). Their position in the list given at
election creation is their candidate index, which ballots refer to.
'''

import logging
import collections
from typing import Any, Sequence, Tuple, Optional

from rcvote.environment import ElectionEngineError
from rcvote.persist import simple_serialization


MIN_CANDIDATES = 2
MAX_CANDIDATES = 5

logger = logging.getLogger(__name__)


class InvalidCandidateList(ElectionEngineError, ValueError):
    '''The candidates given for a new election are not acceptable.

    :param candidates: The offending candidate list.
    :param reason: What is wrong with it.
    '''
    def __init__(self, candidates: Any, reason: str = 'invalid type'):
        self.candidates = candidates
        self.reason = reason
        super().__init__(f'invalid candidate list {candidates!r}: {reason}')


class InvalidCandidateCount(InvalidCandidateList):
    '''The number of candidates is outside the allowed range.

    :param candidates: The offending candidate list.
    :param min_count: Minimum number of candidates.
    :param max_count: Maximum number of candidates.
    '''
    def __init__(self,
                 candidates: Sequence[str],
                 min_count: Optional[int] = None,
                 max_count: Optional[int] = None,
                 ):
        self.min_count = min_count
        self.max_count = max_count
        reason = f'{len(candidates)} candidates given'
        if min_count is not None and len(candidates) < min_count:
            reason += f', must be at least {min_count}'
        if max_count is not None and len(candidates) > max_count:
            reason += f', must be at most {max_count}'
        super().__init__(candidates, reason)


class InvalidCandidateName(InvalidCandidateList):
    '''A candidate name is empty.

    :param candidates: The offending candidate list.
    :param index: Index of the empty name.
    '''
    def __init__(self, candidates: Sequence[str], index: int):
        self.index = index
        super().__init__(candidates, f'empty name at position {index}')


@simple_serialization
class CandidateListValidator:
    '''Check the candidate list of an election before it is created.

    The list must be a list or tuple of strings whose length is within the
    count bounds and none of which is empty or whitespace only. Duplicate
    names are accepted (ballots can always refer to candidates by index)
    but logged as a warning.

    :param count_bounds: Inclusive lower and upper bound for the number of
        candidates. None means the respective bound is not checked.
    '''
    def __init__(self,
                 count_bounds: Tuple[Optional[int], Optional[int]] = (
                     MIN_CANDIDATES, MAX_CANDIDATES
                 ),
                 ):
        self.count_bounds = tuple(count_bounds)
        self.min_count, self.max_count = self.count_bounds

    def validate(self, candidates: Sequence[str]) -> None:
        '''Check if the candidate list is acceptable.

        :param candidates: Candidate names in ballot index order.
        :raises InvalidCandidateList: If it is not a sequence of strings.
        :raises InvalidCandidateCount: If there are too few or too many
            candidates.
        :raises InvalidCandidateName: If any name is empty.
        '''
        if not isinstance(candidates, (list, tuple)):
            raise InvalidCandidateList(candidates, 'must be a list of names')
        if not self.count_is_valid(len(candidates)):
            raise InvalidCandidateCount(
                candidates, self.min_count, self.max_count
            )
        for i, name in enumerate(candidates):
            if not isinstance(name, str):
                raise InvalidCandidateList(
                    candidates, f'name at position {i} is not a string'
                )
            if not name.strip():
                raise InvalidCandidateName(candidates, i)
        duplicates = [
            name for name, n in collections.Counter(candidates).items()
            if n > 1
        ]
        if duplicates:
            logger.warning('duplicate candidate names: %s', duplicates)

    def count_is_valid(self, count: int) -> bool:
        return (
            (self.min_count is None or count >= self.min_count)
            and (self.max_count is None or count <= self.max_count)
        )
