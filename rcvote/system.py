"""A complete election engine behind one object.

:class:`VotingSystem` wires an execution environment, a registry, a ledger
and a tally together from a handful of policy objects. Its configuration can
be stored with :func:`rcvote.persist.to_dict` and restored with
:func:`rcvote.persist.from_dict`; the state of the elections is not part of
the configuration.
"""

from typing import Any, List, Dict, Tuple, Optional, Sequence

from rcvote.persist import simple_serialization
from rcvote.candidate import CandidateListValidator
from rcvote.environment import Clock, ExecutionEnvironment
from rcvote.event import EventLog
from rcvote.ledger import VotingLedger
from rcvote.registry import ElectionRegistry, Election, ElectionStatus
from rcvote.tally import ElectionTally, InstantRunoff, InstantRunoffResult
from rcvote.vote import RankedBallot, RankedBallotValidator


@simple_serialization
class VotingSystem:
    """An election registry with its voting ledger and tally.

    :param administrator: Identity allowed to create and close elections.
    :param clock: Time source; the system clock if not given.
    :param candidate_validator: Policy for candidate lists of new elections.
    :param ballot_validator: Policy for acceptable ballots, notably whether
        partial rankings are allowed.
    :param evaluator: Instant-runoff evaluator used by the tally.
    :param event_log: Log to emit events into; not part of the stored
        configuration.
    """
    serialize_params = [
        'administrator',
        'clock',
        'candidate_validator',
        'ballot_validator',
        'evaluator',
    ]

    def __init__(self,
                 administrator: Any,
                 clock: Optional[Clock] = None,
                 candidate_validator: Optional[CandidateListValidator] = None,
                 ballot_validator: Optional[RankedBallotValidator] = None,
                 evaluator: Optional[InstantRunoff] = None,
                 event_log: Optional[EventLog] = None,
                 ):
        self.environment = ExecutionEnvironment(clock, event_log)
        self.registry = ElectionRegistry(
            administrator, self.environment, candidate_validator
        )
        self.ledger = VotingLedger(self.registry, ballot_validator)
        self.tallier = ElectionTally(self.registry, self.ledger, evaluator)

    @property
    def administrator(self) -> Any:
        return self.registry.administrator

    def get_owner(self) -> Any:
        return self.registry.get_owner()

    @property
    def clock(self) -> Clock:
        return self.environment.clock

    @property
    def event_log(self) -> EventLog:
        return self.environment.event_log

    @property
    def candidate_validator(self) -> CandidateListValidator:
        return self.registry.candidate_validator

    @property
    def ballot_validator(self) -> RankedBallotValidator:
        return self.ledger.ballot_validator

    @property
    def evaluator(self) -> InstantRunoff:
        return self.tallier.evaluator

    def create_election(self,
                        caller: Any,
                        candidates: Sequence[str],
                        duration_days: int,
                        ) -> int:
        return self.registry.create_election(caller, candidates, duration_days)

    def close_election(self, caller: Any, election_id: int) -> None:
        self.registry.close_election(caller, election_id)

    def cast_vote(self,
                  caller: Any,
                  election_id: int,
                  ranked_choices: Sequence[Any],
                  ) -> RankedBallot:
        return self.ledger.cast_vote(caller, election_id, ranked_choices)

    def get_election(self, election_id: int) -> Election:
        return self.registry.get_election(election_id)

    def get_election_status(self, election_id: int) -> ElectionStatus:
        return self.registry.get_election_status(election_id)

    def get_election_candidates(self, election_id: int) -> Tuple[str, ...]:
        return self.registry.get_election_candidates(election_id)

    def get_election_start_time(self, election_id: int) -> int:
        return self.registry.get_election_start_time(election_id)

    def get_election_end_time(self, election_id: int) -> int:
        return self.registry.get_election_end_time(election_id)

    def get_election_count(self) -> int:
        return self.registry.get_election_count()

    def get_open_elections(self) -> Tuple[int, ...]:
        return self.registry.get_open_elections()

    def get_closed_elections(self) -> Tuple[int, ...]:
        return self.registry.get_closed_elections()

    def get_voter_choices(self, voter: Any, election_id: int) -> RankedBallot:
        return self.ledger.get_voter_choices(voter, election_id)

    def get_voter_choice_names(self,
                               voter: Any,
                               election_id: int,
                               ) -> Tuple[str, ...]:
        return self.ledger.get_voter_choice_names(voter, election_id)

    def get_voter_status(self, voter: Any, election_id: int) -> bool:
        return self.ledger.get_voter_status(voter, election_id)

    def get_ballots(self, election_id: int) -> List[RankedBallot]:
        return self.ledger.get_ballots(election_id)

    def first_preferences(self, election_id: int) -> Dict[int, int]:
        return self.tallier.first_preferences(election_id)

    def tally(self, election_id: int) -> InstantRunoffResult:
        """Evaluate the election by instant-runoff."""
        return self.tallier.instant_runoff(election_id)

    def winner_name(self, election_id: int) -> Optional[str]:
        return self.tallier.winner_name(election_id)
