'''The election registry: catalog and lifecycle of elections.

The registry owns every election's candidate list, time window and status.
Only its administrator, fixed when the registry is constructed, may create
and close elections; anyone may query. Elections are numbered from 1 in
creation order and are never deleted.

Status moves strictly ``NOT_CREATED -> OPEN -> CLOSED``. An election can be
closed only once its end time has been reached. Querying an id that was never
assigned is not an error: it reads as a ``NOT_CREATED`` election with no
candidates and zero timestamps.
'''

from __future__ import annotations

import enum
import logging
import numbers
import dataclasses
from typing import Any, List, Dict, Tuple, Optional, Sequence

import rcvote.event
from rcvote.candidate import CandidateListValidator
from rcvote.environment import (
    SECONDS_PER_DAY,
    ElectionEngineError,
    ExecutionEnvironment,
    serialized,
)


logger = logging.getLogger(__name__)


class ElectionStatus(enum.Enum):
    NOT_CREATED = 0
    OPEN = 1
    CLOSED = 2


@dataclasses.dataclass(frozen=True)
class Election:
    '''A snapshot of an election's registry record.'''
    election_id: int
    candidates: Tuple[str, ...] = ()
    start_time: int = 0
    end_time: int = 0
    status: ElectionStatus = ElectionStatus.NOT_CREATED

    @property
    def exists(self) -> bool:
        return self.status is not ElectionStatus.NOT_CREATED


class Unauthorized(ElectionEngineError):
    '''A caller other than the administrator tried an administrative action.

    :param caller: Identity of the rejected caller.
    :param action: Name of the attempted operation.
    '''
    def __init__(self, caller: Any, action: str):
        self.caller = caller
        self.action = action
        super().__init__(f'{caller!r} is not allowed to {action}')


class ElectionLifecycleError(ElectionEngineError):
    '''An operation does not fit the current status of the election.

    :param election_id: The election concerned.
    '''
    message = 'invalid election state'

    def __init__(self, election_id: int):
        self.election_id = election_id
        super().__init__(f'election {election_id}: {self.message}')


class ElectionNotFound(ElectionLifecycleError):
    message = 'election does not exist'


class ElectionAlreadyClosed(ElectionLifecycleError):
    message = 'election is already closed'


class ElectionClosed(ElectionLifecycleError):
    message = 'election is closed, no more votes accepted'


class ElectionStillOpen(ElectionLifecycleError):
    '''The election cannot be closed before its end time.

    :param election_id: The election concerned.
    :param end_time: When the election may be closed.
    :param now: Current time.
    '''
    def __init__(self, election_id: int, end_time: int, now: int):
        self.end_time = end_time
        self.now = now
        self.message = (
            f'election runs until {end_time}, {end_time - now} s remaining'
        )
        super().__init__(election_id)


class InvalidDuration(ElectionEngineError, ValueError):
    '''The election duration is not a positive whole number of days.'''
    def __init__(self, duration_days: Any):
        self.duration_days = duration_days
        super().__init__(
            f'invalid election duration: {duration_days!r},'
            ' must be a positive number of days'
        )


class ElectionRegistry:
    '''Create, close and look up elections.

    :param administrator: Identity of the only caller allowed to create and
        close elections. Cannot be changed later.
    :param environment: Execution environment providing the clock, the event
        log and call serialization. A fresh one using the system clock is
        created if not given.
    :param candidate_validator: Checks candidate lists of new elections;
        by default 2 to 5 non-empty names are required.
    '''
    def __init__(self,
                 administrator: Any,
                 environment: Optional[ExecutionEnvironment] = None,
                 candidate_validator: Optional[CandidateListValidator] = None,
                 ):
        self._administrator = administrator
        if environment is None:
            environment = ExecutionEnvironment()
        self.environment = environment
        if candidate_validator is None:
            candidate_validator = CandidateListValidator()
        self.candidate_validator = candidate_validator
        self._elections: Dict[int, Election] = {}
        self._open: List[int] = []
        self._closed: List[int] = []

    @property
    def administrator(self) -> Any:
        return self._administrator

    def get_owner(self) -> Any:
        return self._administrator

    @serialized
    def create_election(self,
                        caller: Any,
                        candidates: Sequence[str],
                        duration_days: int,
                        ) -> int:
        '''Open a new election with the given candidates.

        The election starts now and can be closed after ``duration_days``
        days.

        :param caller: Identity of the caller; must be the administrator.
        :param candidates: Candidate names. Their order defines the candidate
            indices used by ballots.
        :param duration_days: Length of the election in days.
        :returns: The identifier of the new election.
        :raises Unauthorized: If the caller is not the administrator.
        :raises InvalidCandidateList: If the candidates are not acceptable
            (most commonly :class:`InvalidCandidateCount`).
        :raises InvalidDuration: If the duration is not a positive integer.
        '''
        self._check_administrator(caller, 'create elections')
        self.candidate_validator.validate(candidates)
        if (
            not isinstance(duration_days, numbers.Integral)
            or isinstance(duration_days, bool)
            or duration_days <= 0
        ):
            raise InvalidDuration(duration_days)
        election_id = len(self._elections) + 1
        start_time = self.environment.now()
        election = Election(
            election_id=election_id,
            candidates=tuple(candidates),
            start_time=start_time,
            end_time=start_time + int(duration_days) * SECONDS_PER_DAY,
            status=ElectionStatus.OPEN,
        )
        self._elections[election_id] = election
        self._open.append(election_id)
        self.environment.emit(rcvote.event.ElectionCreated(
            election_id=election_id,
            candidates=election.candidates,
            start_time=election.start_time,
            end_time=election.end_time,
        ))
        logger.info('election %d created: %s, open until %d',
                    election_id, election.candidates, election.end_time)
        return election_id

    @serialized
    def close_election(self, caller: Any, election_id: int) -> None:
        '''Close an election whose time is up.

        Closing twice is an error, not a no-op.

        :raises Unauthorized: If the caller is not the administrator.
        :raises ElectionNotFound: If there is no such election.
        :raises ElectionAlreadyClosed: If the election was already closed.
        :raises ElectionStillOpen: If the end time has not been reached yet.
        '''
        self._check_administrator(caller, 'close elections')
        election = self._lookup(election_id)
        if election.status is ElectionStatus.NOT_CREATED:
            raise ElectionNotFound(election_id)
        elif election.status is ElectionStatus.CLOSED:
            raise ElectionAlreadyClosed(election_id)
        now = self.environment.now()
        if now < election.end_time:
            raise ElectionStillOpen(election_id, election.end_time, now)
        self._elections[election_id] = dataclasses.replace(
            election, status=ElectionStatus.CLOSED
        )
        self._open.remove(election_id)
        self._closed.append(election_id)
        self.environment.emit(
            rcvote.event.ElectionClosed(election_id=election_id)
        )
        logger.info('election %d closed', election_id)

    @serialized
    def get_election(self, election_id: int) -> Election:
        return self._lookup(election_id)

    @serialized
    def get_election_status(self, election_id: int) -> ElectionStatus:
        return self._lookup(election_id).status

    @serialized
    def get_election_candidates(self, election_id: int) -> Tuple[str, ...]:
        return self._lookup(election_id).candidates

    @serialized
    def get_election_start_time(self, election_id: int) -> int:
        return self._lookup(election_id).start_time

    @serialized
    def get_election_end_time(self, election_id: int) -> int:
        return self._lookup(election_id).end_time

    @serialized
    def get_election_count(self) -> int:
        return len(self._elections)

    @serialized
    def get_open_elections(self) -> Tuple[int, ...]:
        return tuple(self._open)

    @serialized
    def get_closed_elections(self) -> Tuple[int, ...]:
        return tuple(self._closed)

    def _lookup(self, election_id: int) -> Election:
        # bools compare equal to 1 and 0 but are never election ids
        if (
            not isinstance(election_id, numbers.Integral)
            or isinstance(election_id, bool)
        ):
            return Election(election_id=election_id)
        election = self._elections.get(election_id)
        if election is None:
            return Election(election_id=election_id)
        return election

    def _check_administrator(self, caller: Any, action: str) -> None:
        if caller != self._administrator:
            logger.debug('rejected %r: not allowed to %s', caller, action)
            raise Unauthorized(caller, action)
