"""Writing the event log as JSON lines.

Each line holds one event as a JSON object with its sequence number, the
event type name and the event fields, e.g.::

    {"sequence": 1, "event": "ElectionCreated", "election_id": 1, ...}
"""

import json
from typing import Any, Dict, Iterable

import rcvote.persist
import rcvote.io.core
from rcvote.event import EventLog


def event_to_dict(sequence: int, event: Any) -> Dict[str, Any]:
    record = {'sequence': sequence, 'event': type(event).__name__}
    record.update(rcvote.persist.to_dict(event))
    return record


def dump_lines(event_log: EventLog) -> Iterable[str]:
    for sequence, event in event_log.entries():
        yield json.dumps(event_to_dict(sequence, event), default=str)


dump, dumps = rcvote.io.core.dumpers(dump_lines)
