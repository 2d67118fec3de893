"""A commandline tool to replay an election script against the engine.

The script is a JSON file with the administrator identity and a list of
operations, run in order on a simulated clock that starts at zero::

    {
        "administrator": "admin",
        "operations": [
            {"op": "create", "candidates": ["A", "B", "C"], "days": 1},
            {"op": "vote", "voter": "alice", "election": 1,
             "choices": ["B", "A", "C"]},
            {"op": "advance", "days": 1},
            {"op": "close", "election": 1},
            {"op": "tally", "election": 1}
        ]
    }

Operations ``create`` and ``close`` run as the administrator unless a
``caller`` is given. A failing operation, including one with missing or
invalid fields, is reported and the replay goes on. An unknown ``op`` stops
the replay.
"""

import argparse
import io
import json
import logging
import os
import sys
import warnings
from typing import Any, Dict, List, Optional

import rcvote.persist
import rcvote.io.audit
import rcvote.io.blt
from rcvote.environment import ElectionEngineError, ManualClock
from rcvote.system import VotingSystem

argparser = argparse.ArgumentParser(
    description=__doc__,
    formatter_class=argparse.RawDescriptionHelpFormatter,
)
argparser.add_argument(
    '-i', '--input-file',
    type=argparse.FileType('r', encoding='utf8'),
    help='file to load the election script from',
)
argparser.add_argument(
    '-I', '--use-stdin',
    action='store_true',
    help='load the election script from standard input',
)
argparser.add_argument(
    '-c', '--config-file',
    type=argparse.FileType('r', encoding='utf8'),
    help='JSON voting system configuration (as produced by rcvote.persist)',
)
argparser.add_argument(
    '-a', '--audit-log',
    help='write the event log to this file as JSON lines',
)
argparser.add_argument(
    '-b', '--blt-dir',
    help='write ballots of every tallied election to BLT files here',
)
argparser.add_argument(
    '-v', '--verbose',
    action='store_true',
    help='show all engine log messages',
)
argparser.add_argument(
    '-q', '--quiet',
    action='store_true',
    help='do not show any engine log messages',
)


def main(input_file: io.TextIOBase,
         use_stdin: bool = False,
         config_file: Optional[io.TextIOBase] = None,
         audit_log: Optional[str] = None,
         blt_dir: Optional[str] = None,
         verbose: bool = False,
         quiet: bool = False,
         ) -> None:
    logging.basicConfig(
        level=(
            logging.DEBUG if verbose
            else (logging.WARNING if quiet else logging.INFO)
        ),
        format='%(levelname)-10s %(message)s'
    )
    if use_stdin:
        input_file = sys.stdin
    script = json.load(input_file)
    operations = script.get('operations', [])
    if not operations:
        warnings.warn('empty election script, terminating')
        return
    system = build_system(script['administrator'], config_file)
    for i, operation in enumerate(operations, start=1):
        run_operation(system, operation, i, blt_dir=blt_dir)
    if audit_log:
        with open(audit_log, 'w', encoding='utf8') as outfile:
            rcvote.io.audit.dump(outfile, system.event_log)
        print(f'Audit log with {len(system.event_log)} events'
              f' written to {audit_log}')


def build_system(administrator: Any,
                 config_file: Optional[io.TextIOBase] = None,
                 ) -> VotingSystem:
    """Create the voting system on a simulated clock."""
    if config_file is None:
        return VotingSystem(administrator, clock=ManualClock())
    config = json.load(config_file)
    if not isinstance(config, dict) or 'class' not in config:
        raise ValueError(f'invalid voting system config: {config!r}')
    config['administrator'] = administrator
    config['clock'] = ManualClock().to_dict()
    system = rcvote.persist.from_dict(config)
    if not isinstance(system, VotingSystem):
        raise ValueError(f'config does not define a voting system: {system}')
    return system


def run_operation(system: VotingSystem,
                  operation: Dict[str, Any],
                  number: int,
                  blt_dir: Optional[str] = None,
                  ) -> None:
    """Run one script operation and print its outcome."""
    op = operation.get('op')
    handler = OPERATIONS.get(op)
    if handler is None:
        raise ValueError(f'operation {number}: unknown op {op!r}, available: '
                         + ', '.join(OPERATIONS.keys()))
    try:
        handler(system, operation, blt_dir=blt_dir)
    except KeyError as e:
        print(f'[{number}] {op} failed: missing field {e}')
    except (ElectionEngineError, ValueError, TypeError) as e:
        print(f'[{number}] {op} failed: {type(e).__name__}: {e}')


def _create(system: VotingSystem, operation: Dict[str, Any], **kwargs) -> None:
    election_id = system.create_election(
        operation.get('caller', system.administrator),
        operation['candidates'],
        operation['days'],
    )
    print(f'Created election {election_id}:'
          f' {", ".join(system.get_election_candidates(election_id))}')


def _vote(system: VotingSystem, operation: Dict[str, Any], **kwargs) -> None:
    ballot = system.cast_vote(
        operation['voter'], operation['election'], operation['choices']
    )
    print(f'{operation["voter"]} voted in election {operation["election"]}:'
          f' {list(ballot)}')


def _advance(system: VotingSystem, operation: Dict[str, Any], **kwargs) -> None:
    now = system.clock.advance(
        days=operation.get('days', 0),
        seconds=operation.get('seconds', 0),
    )
    print(f'Clock advanced to {now}')


def _close(system: VotingSystem, operation: Dict[str, Any], **kwargs) -> None:
    system.close_election(
        operation.get('caller', system.administrator), operation['election']
    )
    print(f'Closed election {operation["election"]}')


def _status(system: VotingSystem, operation: Dict[str, Any], **kwargs) -> None:
    print('Open elections:', list(system.get_open_elections()))
    print('Closed elections:', list(system.get_closed_elections()))


def _tally(system: VotingSystem,
           operation: Dict[str, Any],
           blt_dir: Optional[str] = None,
           **kwargs) -> None:
    election_id = operation['election']
    candidates = system.get_election_candidates(election_id)
    result = system.tally(election_id)
    print()
    print(f'Election {election_id} result'
          + ('' if result.final else ' (provisional)') + ':')
    show_rounds(result.rounds, candidates)
    if result.winner is None:
        print('Nobody elected')
    else:
        print('Elected', ' ', candidates[result.winner])
    if blt_dir:
        path = os.path.join(blt_dir, f'election_{election_id}.blt')
        with open(path, 'w', encoding='utf8') as outfile:
            rcvote.io.blt.dump(
                outfile,
                system.get_ballots(election_id),
                candidates,
                election_name=f'Election {election_id}',
            )


def show_rounds(rounds: List[Any], candidates: List[str]) -> None:
    if not rounds:
        return
    n_just_chars = len(max(candidates, key=len))
    for i, rnd in enumerate(rounds, start=1):
        print(f'Round {i} ({rnd.exhausted} exhausted):')
        for cand, n_votes in rnd.counts.items():
            mark = ' (eliminated)' if cand == rnd.eliminated else ''
            print(' ' * 4 + candidates[cand].ljust(n_just_chars),
                  ' ', n_votes, mark, sep='')


OPERATIONS = {
    'create': _create,
    'vote': _vote,
    'advance': _advance,
    'close': _close,
    'status': _status,
    'tally': _tally,
}


if __name__ == '__main__':
    args = argparser.parse_args()
    if not args.input_file and not args.use_stdin:
        argparser.print_usage()
    else:
        main(**vars(args))
