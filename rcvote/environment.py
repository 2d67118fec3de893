'''The execution environment the election engine runs in.

The registry and ledger never read the wall clock, never keep their own audit
trail and never synchronize by themselves. They consume three primitives
provided by the environment:

-   a **clock** giving the current time in whole seconds
    (:class:`SystemClock` for real use, :class:`ManualClock` for simulations
    and tests),
-   an **event log** (:class:`rcvote.event.EventLog`), an append-only
    sequence of event records that the engine writes and external tooling
    reads,
-   **serialized execution** of calls: every public operation of the engine
    is decorated by :func:`serialized` so that it runs as one indivisible unit
    under the environment lock.

The caller identity primitive is represented by the explicit ``caller``
argument of the engine operations.
'''

from __future__ import annotations

import abc
import time
import threading
import functools
from typing import Any, Callable, Optional

from rcvote.event import EventLog
from rcvote.persist import simple_serialization


SECONDS_PER_DAY = 86400


class ElectionEngineError(Exception):
    '''Base class for all failures reported by the election engine.

    Every error is permanent for the given arguments and state: repeating
    the call unchanged fails the same way.
    '''
    pass


class Clock(metaclass=abc.ABCMeta):
    '''A source of the current time, in whole seconds.'''
    @abc.abstractmethod
    def now(self) -> int:
        raise NotImplementedError


@simple_serialization
class SystemClock(Clock):
    '''The wall clock of the machine (UNIX timestamps).'''
    def now(self) -> int:
        return int(time.time())


@simple_serialization
class ManualClock(Clock):
    '''A clock that only moves when told to.

    Useful for simulating election deadlines.

    :param start: The initial timestamp.
    '''
    def __init__(self, start: int = 0):
        self.start = start
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, days: int = 0, seconds: int = 0) -> int:
        '''Move the clock forward and return the new time.

        :raises ValueError: If the step is negative.
        '''
        step = days * SECONDS_PER_DAY + seconds
        if step < 0:
            raise ValueError(f'clock cannot go backwards: step {step}')
        self._now += step
        return self._now

    def set(self, timestamp: int) -> None:
        if timestamp < self._now:
            raise ValueError(
                f'clock cannot go backwards: {timestamp} < {self._now}'
            )
        self._now = timestamp


class ExecutionEnvironment:
    '''Clock, event log and call serialization shared by engine components.

    Components that must validate against each other's state (the ledger
    reading the registry) have to share one environment so that the check
    and the write happen under the same lock.

    :param clock: Time source; the system clock by default.
    :param event_log: Log to emit events into; a new empty one by default.
    '''
    def __init__(self,
                 clock: Optional[Clock] = None,
                 event_log: Optional[EventLog] = None,
                 ):
        self.clock = clock if clock is not None else SystemClock()
        self.event_log = event_log if event_log is not None else EventLog()
        self.lock = threading.RLock()

    def now(self) -> int:
        return self.clock.now()

    def emit(self, event: Any) -> int:
        return self.event_log.append(event)


def serialized(method: Callable) -> Callable:
    '''Run a component method under its environment lock.

    The decorated method's instance must have an ``environment`` attribute.
    '''
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.environment.lock:
            return method(self, *args, **kwargs)

    return wrapper
