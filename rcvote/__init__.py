"""rcvote - an election registry and ranked-choice voting ledger.

rcvote lets an administrator run time-bounded elections with two to five
candidates, in which every participant may cast one ranked ballot, and
evaluates them by instant-runoff.

The engine consists of the following parts:

-   The **registry** (:mod:`registry`) keeps the elections: their candidates,
    time windows and open/closed status. Only the administrator may create
    and close elections; an election can be closed once its time is up.
-   The **ledger** (:mod:`ledger`) records ballots, one per voter and
    election, after checking them against the registry. Which rankings are
    acceptable is decided by the ballot validators from the :mod:`vote`
    module.
-   The **tally** (:mod:`tally`) evaluates the recorded ballots without
    changing anything.

Both the registry and the ledger run inside an execution environment
(:mod:`environment`) that provides the clock, the event log (:mod:`event`)
and serialization of calls. The :class:`VotingSystem` object from the
:mod:`system` module wires all of this together from a single configuration.
"""
