'''Evaluating recorded ballots: first preferences and instant-runoff.

Evaluators work on aggregated ranked votes, a dictionary mapping ranked
ballots (tuples of candidate indices) to the number of voters who cast them,
together with the list of candidate indices standing in the election.
:class:`ElectionTally` feeds them from the registry and ledger.

The instant-runoff count proceeds in rounds. In each round, every ballot
counts for its highest-ranked candidate still in the contest; ballots that
rank none of them are exhausted and no longer counted. A candidate with
a strict majority of the ballots still counted wins, as does the last
candidate remaining. Otherwise the candidate with the fewest votes is
eliminated and the next round begins. When several candidates share the
fewest votes, the one with the lowest candidate index is eliminated (one
elimination per round).
'''

from __future__ import annotations

import logging
import dataclasses
from typing import List, Dict, Tuple, Optional, Sequence

import rcvote.util
from rcvote.persist import simple_serialization
from rcvote.registry import ElectionRegistry, ElectionStatus
from rcvote.ledger import VotingLedger
from rcvote.vote import RankedBallot, first_preference


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class RunoffRound:
    '''Counts of a single instant-runoff round.

    :param counts: Votes of every candidate still in the contest, in
        candidate index order.
    :param active: Number of ballots counted for some candidate.
    :param exhausted: Number of ballots ranking no remaining candidate.
    :param eliminated: Candidate eliminated at the end of the round, None in
        the final round.
    '''
    counts: Dict[int, int]
    active: int
    exhausted: int
    eliminated: Optional[int] = None


@dataclasses.dataclass(frozen=True)
class InstantRunoffResult:
    winner: Optional[int]
    rounds: Tuple[RunoffRound, ...] = ()
    final: bool = False

    @property
    def eliminated(self) -> List[int]:
        return [rnd.eliminated for rnd in self.rounds
                if rnd.eliminated is not None]


@simple_serialization
class Plurality:
    '''Count first preferences.

    Useful as a quick overview; not an election method of this engine by
    itself.
    '''
    def evaluate(self,
                 votes: Dict[RankedBallot, int],
                 candidates: Sequence[int],
                 ) -> Dict[int, int]:
        '''Return the number of first preferences of every candidate.

        :param votes: Aggregated ranked votes.
        :param candidates: Candidate indices; all appear in the result, in
            this order, including those without any first preference.
        '''
        totals = {cand: 0 for cand in candidates}
        for ballot, n_votes in votes.items():
            first = first_preference(ballot)
            if first in totals:
                totals[first] += n_votes
        return totals


@simple_serialization
class InstantRunoff:
    '''Elect a single candidate by instant-runoff voting.

    :param majority_of_active: If True, the winning majority is computed
        from ballots still counted in the round (exhausted ballots are
        disregarded). If False, it is computed from all ballots cast, which
        may leave the count to run until a single candidate remains.
    '''
    def __init__(self, majority_of_active: bool = True):
        self.majority_of_active = majority_of_active

    def evaluate(self,
                 votes: Dict[RankedBallot, int],
                 candidates: Sequence[int],
                 ) -> InstantRunoffResult:
        '''Run the instant-runoff count.

        :param votes: Aggregated ranked votes.
        :param candidates: Candidate indices standing in the election.
        :returns: The winner (None if there are no votes or no candidates)
            and the counts of all rounds.
        '''
        total = sum(votes.values())
        if total == 0 or not candidates:
            logger.info('no votes to count, no winner')
            return InstantRunoffResult(winner=None)
        remaining = sorted(candidates)
        rounds = []
        while True:
            counts, exhausted = self.count_round(votes, remaining)
            active = total - exhausted
            logger.debug('round %d counts: %s, exhausted: %d',
                         len(rounds) + 1, counts, exhausted)
            winner = self._majority_winner(counts, active, total)
            if winner is None and len(remaining) == 1:
                winner = remaining[0]
            if winner is not None:
                rounds.append(RunoffRound(counts, active, exhausted))
                logger.info('candidate %d elected in round %d',
                            winner, len(rounds))
                return InstantRunoffResult(winner=winner, rounds=tuple(rounds))
            loser = self.select_loser(counts)
            logger.debug('eliminating candidate %d', loser)
            rounds.append(RunoffRound(counts, active, exhausted, loser))
            remaining.remove(loser)

    def count_round(self,
                    votes: Dict[RankedBallot, int],
                    remaining: Sequence[int],
                    ) -> Tuple[Dict[int, int], int]:
        '''Count the ballots for the remaining candidates.

        :returns: Votes per remaining candidate and the number of exhausted
            ballots.
        '''
        counts = {cand: 0 for cand in remaining}
        exhausted = 0
        for ballot, n_votes in votes.items():
            top = rcvote.util.top_surviving(ballot, counts)
            if top is None:
                exhausted += n_votes
            else:
                counts[top] += n_votes
        return counts, exhausted

    @staticmethod
    def select_loser(counts: Dict[int, int]) -> int:
        '''Return the candidate to eliminate: fewest votes, lowest index.'''
        return min(counts, key=lambda cand: (counts[cand], cand))

    def _majority_winner(self,
                         counts: Dict[int, int],
                         active: int,
                         total: int,
                         ) -> Optional[int]:
        base = active if self.majority_of_active else total
        leader, n_votes = rcvote.util.sorted_votes(counts)[0]
        return leader if 2 * n_votes > base else None


class ElectionTally:
    '''Read-only evaluation of elections from registry and ledger state.

    Unknown elections evaluate to empty results. Results of elections that are
    still open are provisional; they are marked final once the election is
    closed.

    :param registry: Source of election metadata.
    :param ledger: Source of recorded ballots.
    :param evaluator: Instant-runoff evaluator to use.
    '''
    def __init__(self,
                 registry: ElectionRegistry,
                 ledger: VotingLedger,
                 evaluator: Optional[InstantRunoff] = None,
                 ):
        self.registry = registry
        self.ledger = ledger
        self.environment = registry.environment
        if evaluator is None:
            evaluator = InstantRunoff()
        self.evaluator = evaluator

    def votes(self, election_id: int) -> Dict[RankedBallot, int]:
        return rcvote.util.aggregate_ballots(
            self.ledger.get_ballots(election_id)
        )

    def first_preferences(self, election_id: int) -> Dict[int, int]:
        with self.environment.lock:
            election = self.registry.get_election(election_id)
            return Plurality().evaluate(
                self.votes(election_id), range(len(election.candidates))
            )

    def instant_runoff(self, election_id: int) -> InstantRunoffResult:
        with self.environment.lock:
            election = self.registry.get_election(election_id)
            result = self.evaluator.evaluate(
                self.votes(election_id), range(len(election.candidates))
            )
        return dataclasses.replace(
            result, final=(election.status is ElectionStatus.CLOSED)
        )

    def winner(self, election_id: int) -> Optional[int]:
        return self.instant_runoff(election_id).winner

    def winner_name(self, election_id: int) -> Optional[str]:
        with self.environment.lock:
            winner = self.winner(election_id)
            if winner is None:
                return None
            return self.registry.get_election_candidates(election_id)[winner]
