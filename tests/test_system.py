
import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import rcvote.event
import rcvote.ledger
import rcvote.registry
import rcvote.system
import rcvote.vote
from rcvote.environment import ManualClock, SECONDS_PER_DAY
from rcvote.registry import ElectionStatus

ADMIN = 'admin'
START = 1_700_000_000


@pytest.fixture
def system():
    return rcvote.system.VotingSystem(ADMIN, clock=ManualClock(START))


def test_election_lifecycle(system):
    election_id = system.create_election(ADMIN, ['A', 'B', 'C'], 1)
    assert election_id == 1
    assert system.get_election_status(1) is ElectionStatus.OPEN
    assert system.get_open_elections() == (1,)
    system.cast_vote('V', 1, ['B', 'A', 'C'])
    assert system.get_voter_choice_names('V', 1) == ('B', 'A', 'C')
    assert system.get_voter_choices('V', 1) == (1, 0, 2)
    assert system.get_voter_status('V', 1)
    system.clock.advance(days=1)
    system.close_election(ADMIN, 1)
    assert system.get_election_status(1) is ElectionStatus.CLOSED
    assert system.get_open_elections() == ()
    assert system.get_closed_elections() == (1,)
    with pytest.raises(rcvote.ledger.AlreadyVoted):
        system.cast_vote('V', 1, ['B', 'A', 'C'])
    with pytest.raises(rcvote.registry.ElectionClosed):
        system.cast_vote('W', 1, ['A', 'B', 'C'])
    assert system.get_voter_choices('V', 1) == (1, 0, 2)
    assert not system.get_voter_status('W', 1)


def test_election_times(system):
    system.create_election(ADMIN, ['A', 'B'], 3)
    assert system.get_election_start_time(1) == START
    assert system.get_election_end_time(1) == START + 3 * SECONDS_PER_DAY
    assert system.get_election_start_time(2) == 0
    assert system.get_election_end_time(2) == 0
    assert system.get_owner() == ADMIN


def test_event_sequence(system):
    system.create_election(ADMIN, ['A', 'B'], 1)
    system.cast_vote('V', 1, [1, 0])
    with pytest.raises(rcvote.registry.ElectionStillOpen):
        system.close_election(ADMIN, 1)
    system.clock.advance(days=1)
    system.close_election(ADMIN, 1)
    assert list(system.event_log) == [
        rcvote.event.ElectionCreated(
            1, ('A', 'B'), START, START + SECONDS_PER_DAY
        ),
        rcvote.event.VoteCast('V', 1, (1, 0)),
        rcvote.event.ElectionClosed(1),
    ]


def test_tally(system):
    system.create_election(ADMIN, ['Ann', 'Bob', 'Cid', 'Dee'], 2)
    ballots = {
        'v1': ['Dee', 'Ann', 'Bob', 'Cid'],
        'v2': ['Dee', 'Ann', 'Bob', 'Cid'],
        'v3': ['Bob', 'Dee', 'Ann', 'Cid'],
        'v4': ['Cid', 'Bob', 'Dee', 'Ann'],
        'v5': ['Ann', 'Cid', 'Bob', 'Dee'],
    }
    for voter, choices in ballots.items():
        system.cast_vote(voter, 1, choices)
    assert system.first_preferences(1) == {0: 1, 1: 1, 2: 1, 3: 2}
    provisional = system.tally(1)
    assert not provisional.final
    system.clock.advance(days=2)
    system.close_election(ADMIN, 1)
    result = system.tally(1)
    assert result.final
    assert result.eliminated == [0, 1]
    assert result.winner == 3
    assert system.winner_name(1) == 'Dee'
    assert len(system.get_ballots(1)) == 5


def test_partial_configuration():
    system = rcvote.system.VotingSystem(
        ADMIN,
        clock=ManualClock(),
        ballot_validator=rcvote.vote.RankedBallotValidator(allow_partial=True),
    )
    system.create_election(ADMIN, ['A', 'B', 'C'], 1)
    system.cast_vote('V', 1, ['C'])
    assert system.get_voter_choices('V', 1) == (2,)
    assert system.ballot_validator.allow_partial


def test_unauthorized(system):
    with pytest.raises(rcvote.registry.Unauthorized):
        system.create_election('mallory', ['A', 'B'], 1)
    assert system.get_election_count() == 0
    assert len(system.event_log) == 0


def test_shared_event_log():
    log = rcvote.event.EventLog()
    system = rcvote.system.VotingSystem(ADMIN, clock=ManualClock(),
                                        event_log=log)
    system.create_election(ADMIN, ['A', 'B'], 1)
    assert system.event_log is log
    assert len(log) == 1
