'''Event records emitted by the election engine and the log they go to.

Each successful state-changing operation emits exactly one event; failed
operations emit none. The engine only ever appends to the :class:`EventLog`;
external tooling reads it, subscribes to it or exports it
(see :mod:`rcvote.io.audit`).
'''

import logging
import dataclasses
from typing import Any, List, Tuple, Callable, Iterator


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ElectionCreated:
    election_id: int
    candidates: Tuple[str, ...]
    start_time: int
    end_time: int


@dataclasses.dataclass(frozen=True)
class ElectionClosed:
    election_id: int


@dataclasses.dataclass(frozen=True)
class VoteCast:
    voter: Any
    election_id: int
    ranked_choices: Tuple[int, ...]


Event = Any
Subscriber = Callable[[int, Event], None]


class EventLog:
    '''An append-only log of engine events.

    Events get consecutive sequence numbers starting at 1 in the order they
    are appended. Subscribers are called synchronously with the sequence
    number and the event after each append; an exception raised by a
    subscriber is logged and does not reach the appending operation.
    '''
    def __init__(self):
        self._events: List[Event] = []
        self._subscribers: List[Subscriber] = []

    def append(self, event: Event) -> int:
        self._events.append(event)
        sequence = len(self._events)
        logger.debug('event %d: %r', sequence, event)
        for subscriber in list(self._subscribers):
            try:
                subscriber(sequence, event)
            except Exception:
                # the event is already recorded, a failing reader cannot undo it
                logger.exception('event subscriber %r failed on event %d',
                                 subscriber, sequence)
        return sequence

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        '''Register a callback for new events.

        :returns: A function that removes the subscription when called.
        '''
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def of_type(self, event_class: type) -> List[Event]:
        return [ev for ev in self._events if isinstance(ev, event_class)]

    def entries(self) -> Iterator[Tuple[int, Event]]:
        '''Iterate over (sequence number, event) pairs.'''
        return enumerate(list(self._events), start=1)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __getitem__(self, index):
        return self._events[index]
