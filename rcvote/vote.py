'''Ballot types and ballot validators.

A ballot is a ranking of the candidates of one election, best first. The
canonical form stored by the ledger is a tuple of candidate indices
(0-based positions in the election's candidate list); for convenience, voters
may also rank by candidate names, which are resolved to indices by
:func:`resolve_names` before validation.

Whether a ballot has to rank all candidates is a policy setting of
:class:`RankedBallotValidator`. If a ballot is invalid, a subclass of
:class:`InvalidBallot` is raised.
'''

import numbers
from typing import Any, Tuple, Sequence, Optional

from rcvote.environment import ElectionEngineError
from rcvote.persist import simple_serialization


RankedBallot = Tuple[int, ...]


class InvalidBallot(ElectionEngineError, ValueError):
    '''A ballot is malformed given the election's candidates.'''
    pass


class BallotTypeError(InvalidBallot):
    '''A ballot or its item is of an invalid type.

    :param value: The offending ballot or item.
    :param expected: Type that was expected.
    '''
    def __init__(self, value: Any, expected: type = None):
        self.value = value
        self.expected = expected
        message = f'invalid ballot item type: {value!r}'
        if expected:
            message += f', must be {expected.__name__}'
        super().__init__(message)


class BallotValueError(InvalidBallot):
    '''A ballot refers to a candidate that does not exist.

    :param value: The offending candidate reference (index or name).
    :param allowed: Description of the allowed values.
    '''
    def __init__(self, value: Any, allowed: Any = None):
        self.value = value
        self.allowed = allowed
        message = f'invalid candidate reference: {value!r}'
        if allowed is not None:
            message += f', allowed: {allowed}'
        super().__init__(message)


class BallotLengthError(InvalidBallot):
    '''A ballot ranks too few candidates.

    :param length: Number of candidates ranked.
    :param min_length: Number of candidates that must be ranked.
    '''
    def __init__(self, length: int, min_length: int):
        self.length = length
        self.min_length = min_length
        super().__init__(
            f'ballot ranks {length} candidates, must rank at least'
            f' {min_length}'
        )


class DuplicateRanking(InvalidBallot):
    '''A candidate is ranked more than once.

    :param ballot: The offending ballot.
    :param candidate: The candidate index ranked repeatedly.
    '''
    def __init__(self, ballot: Sequence[int], candidate: int):
        self.ballot = ballot
        self.candidate = candidate
        super().__init__(
            f'candidate {candidate} ranked more than once in {ballot!r}'
        )


def resolve_names(choices: Sequence[Any],
                  candidates: Sequence[str],
                  ) -> RankedBallot:
    '''Turn a ranking given by candidate names into candidate indices.

    Integer items are passed through unchanged so that rankings may mix
    both forms.

    :param choices: Ranking by names and/or indices, best first.
    :param candidates: Candidate names of the election in index order.
    :raises BallotTypeError: If the ranking is not a sequence, or has an item
        that is neither a name nor an index.
    :raises BallotValueError: If a name is unknown, or shared by several
        candidates so that it cannot be resolved.
    '''
    if isinstance(choices, (str, bytes)) or not isinstance(
        choices, Sequence
    ):
        raise BallotTypeError(choices, tuple)
    resolved = []
    for item in choices:
        if isinstance(item, str):
            indices = [i for i, name in enumerate(candidates) if name == item]
            if not indices:
                raise BallotValueError(item, list(candidates))
            elif len(indices) > 1:
                raise BallotValueError(
                    item, 'a unique name; use a candidate index instead'
                )
            resolved.append(indices[0])
        elif _is_index(item):
            resolved.append(int(item))
        else:
            raise BallotTypeError(item, int)
    return tuple(resolved)


def _is_index(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@simple_serialization
class RankedBallotValidator:
    '''Validate a ranked ballot in its index form.

    A valid ballot is a tuple of integer candidate indices, each referring to
    an existing candidate and each appearing at most once.

    :param allow_partial: If False, every ballot must rank all candidates of
        the election. If True, rankings may be truncated to any length
        of at least ``min_ranked``; unranked candidates are below all ranked
        ones for the voter.
    :param min_ranked: Minimum number of candidates a ballot must rank.
        Empty ballots are never valid.
    '''
    def __init__(self,
                 allow_partial: bool = False,
                 min_ranked: int = 1,
                 ):
        if min_ranked < 1:
            raise ValueError(f'min_ranked must be positive, got {min_ranked}')
        self.allow_partial = allow_partial
        self.min_ranked = min_ranked

    def validate(self, ballot: RankedBallot, n_candidates: int) -> None:
        '''Check if the ranked ballot is valid.

        :param ballot: Ranked ballot to be checked.
        :param n_candidates: Number of candidates in the election.
        :raises BallotTypeError: If the ballot is not a tuple of integers.
        :raises BallotValueError: If an index is out of range.
        :raises DuplicateRanking: If any candidate is ranked twice.
        :raises BallotLengthError: If the ballot ranks too few candidates.
        '''
        if not isinstance(ballot, tuple):
            raise BallotTypeError(ballot, tuple)
        seen = set()
        for item in ballot:
            if not _is_index(item):
                raise BallotTypeError(item, int)
            if not 0 <= item < n_candidates:
                raise BallotValueError(item, f'0 to {n_candidates - 1}')
            if item in seen:
                raise DuplicateRanking(ballot, item)
            seen.add(item)
        required = self.required_length(n_candidates)
        if len(ballot) < required:
            raise BallotLengthError(len(ballot), required)

    def required_length(self, n_candidates: int) -> int:
        if self.allow_partial:
            return min(self.min_ranked, n_candidates)
        else:
            return n_candidates


def ranked_to_names(ballot: RankedBallot,
                    candidates: Sequence[str],
                    ) -> Tuple[str, ...]:
    return tuple(candidates[i] for i in ballot)


def first_preference(ballot: RankedBallot) -> Optional[int]:
    return ballot[0] if ballot else None
