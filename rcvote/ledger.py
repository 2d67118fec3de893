'''The voting ledger: one ranked ballot per voter per election.

The ledger accepts a ballot only after checking it against the registry's
live state, inside the same serialized call, so that an election cannot be
closed between the check and the write. A recorded ballot is final: there is
no way to change or withdraw it.
'''

from __future__ import annotations

import logging
import dataclasses
from typing import Any, List, Dict, Tuple, Optional, Sequence

import rcvote.event
from rcvote.environment import ElectionEngineError, serialized
from rcvote.registry import (
    ElectionRegistry,
    ElectionStatus,
    ElectionNotFound,
    ElectionClosed,
)
from rcvote.vote import (
    RankedBallot,
    RankedBallotValidator,
    resolve_names,
    ranked_to_names,
)


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class VoterRecord:
    has_voted: bool = False
    ranked_choices: RankedBallot = ()


class VoterStateError(ElectionEngineError):
    '''The voter's record does not allow the operation.

    :param voter: Identity of the voter.
    :param election_id: The election concerned.
    '''
    message = 'invalid voter state'

    def __init__(self, voter: Any, election_id: int):
        self.voter = voter
        self.election_id = election_id
        super().__init__(
            f'voter {voter!r} in election {election_id}: {self.message}'
        )


class AlreadyVoted(VoterStateError):
    message = 'has already voted'


class HasNotVoted(VoterStateError):
    message = 'has not voted'


class VotingLedger:
    '''Record ranked ballots and enforce one vote per voter and election.

    :param registry: The registry holding the elections to vote in. The
        ledger shares its execution environment.
    :param ballot_validator: Decides which rankings are acceptable; by
        default every ballot must rank all candidates.
    '''
    def __init__(self,
                 registry: ElectionRegistry,
                 ballot_validator: Optional[RankedBallotValidator] = None,
                 ):
        self.registry = registry
        self.environment = registry.environment
        if ballot_validator is None:
            ballot_validator = RankedBallotValidator()
        self.ballot_validator = ballot_validator
        self._records: Dict[Tuple[Any, int], VoterRecord] = {}
        self._ballots: Dict[int, List[RankedBallot]] = {}

    @serialized
    def cast_vote(self,
                  caller: Any,
                  election_id: int,
                  ranked_choices: Sequence[Any],
                  ) -> RankedBallot:
        '''Record the caller's ballot in an open election.

        :param caller: Identity of the voter.
        :param election_id: The election to vote in.
        :param ranked_choices: The voter's preference order, best first,
            given as candidate indices or candidate names.
        :returns: The recorded ballot as candidate indices.
        :raises ElectionNotFound: If there is no such election.
        :raises ElectionClosed: If the election has been closed.
        :raises AlreadyVoted: If the caller already voted in this election.
        :raises InvalidBallot: If the ranking is not acceptable.
        '''
        election = self.registry.get_election(election_id)
        if election.status is ElectionStatus.NOT_CREATED:
            raise ElectionNotFound(election_id)
        key = (caller, election_id)
        # a cast ballot is final, closing the election does not change that
        if key in self._records:
            raise AlreadyVoted(caller, election_id)
        if election.status is ElectionStatus.CLOSED:
            raise ElectionClosed(election_id)
        ballot = resolve_names(ranked_choices, election.candidates)
        self.ballot_validator.validate(ballot, len(election.candidates))
        self._records[key] = VoterRecord(has_voted=True, ranked_choices=ballot)
        self._ballots.setdefault(election_id, []).append(ballot)
        self.environment.emit(rcvote.event.VoteCast(
            voter=caller,
            election_id=election_id,
            ranked_choices=ballot,
        ))
        logger.info('vote cast in election %d by %r', election_id, caller)
        return ballot

    @serialized
    def get_voter_choices(self, voter: Any, election_id: int) -> RankedBallot:
        '''Return the voter's recorded ballot as candidate indices.

        :raises HasNotVoted: If the voter has no ballot in the election.
        '''
        record = self._records.get((voter, election_id))
        if record is None:
            raise HasNotVoted(voter, election_id)
        return record.ranked_choices

    @serialized
    def get_voter_choice_names(self,
                               voter: Any,
                               election_id: int,
                               ) -> Tuple[str, ...]:
        '''Return the voter's recorded ballot as candidate names.

        :raises HasNotVoted: If the voter has no ballot in the election.
        '''
        return ranked_to_names(
            self.get_voter_choices(voter, election_id),
            self.registry.get_election_candidates(election_id),
        )

    @serialized
    def get_voter_status(self, voter: Any, election_id: int) -> bool:
        return (voter, election_id) in self._records

    @serialized
    def get_voter_record(self, voter: Any, election_id: int) -> VoterRecord:
        return self._records.get((voter, election_id), VoterRecord())

    @serialized
    def get_ballots(self, election_id: int) -> List[RankedBallot]:
        '''Return all ballots recorded in the election, in casting order.'''
        return list(self._ballots.get(election_id, []))

    @serialized
    def get_vote_count(self, election_id: int) -> int:
        return len(self._ballots.get(election_id, []))
