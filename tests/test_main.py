
import sys
import os
import io
import json

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import rcvote.__main__
import rcvote.persist
import rcvote.vote
from rcvote.system import VotingSystem

SCRIPT = {
    'administrator': 'admin',
    'operations': [
        {'op': 'create', 'candidates': ['A', 'B', 'C'], 'days': 1},
        {'op': 'vote', 'voter': 'alice', 'election': 1,
         'choices': ['B', 'A', 'C']},
        {'op': 'vote', 'voter': 'bob', 'election': 1,
         'choices': ['A', 'B', 'C']},
        {'op': 'vote', 'voter': 'carol', 'election': 1,
         'choices': ['C', 'B', 'A']},
        {'op': 'vote', 'voter': 'alice', 'election': 1,
         'choices': ['A', 'B', 'C']},
        {'op': 'close', 'election': 1},
        {'op': 'advance', 'days': 1},
        {'op': 'close', 'election': 1},
        {'op': 'status'},
        {'op': 'tally', 'election': 1},
    ]
}


def script_file(script=SCRIPT):
    return io.StringIO(json.dumps(script))


def test_main(capsys):
    rcvote.__main__.main(script_file(), quiet=True)
    out = capsys.readouterr().out
    assert 'Created election 1: A, B, C' in out
    assert 'alice voted in election 1: [1, 0, 2]' in out
    assert '[5] vote failed: AlreadyVoted' in out
    assert '[6] close failed: ElectionStillOpen' in out
    assert 'Closed election 1' in out
    assert 'Closed elections: [1]' in out
    assert 'Election 1 result:' in out
    assert '(eliminated)' in out
    assert 'Elected   B' in out


def test_main_outputs(tmp_path, capsys):
    audit_path = tmp_path / 'audit.jsonl'
    rcvote.__main__.main(
        script_file(),
        audit_log=str(audit_path),
        blt_dir=str(tmp_path),
        quiet=True,
    )
    records = [
        json.loads(line)
        for line in audit_path.read_text(encoding='utf8').splitlines()
    ]
    assert [rec['event'] for rec in records] == [
        'ElectionCreated', 'VoteCast', 'VoteCast', 'VoteCast',
        'ElectionClosed',
    ]
    blt_text = (tmp_path / 'election_1.blt').read_text(encoding='utf8')
    assert blt_text.splitlines()[0] == '3 1'
    assert blt_text.splitlines()[-1] == '"Election 1"'
    assert 'Audit log with 5 events' in capsys.readouterr().out


def test_main_provisional(capsys):
    script = {
        'administrator': 'admin',
        'operations': [
            {'op': 'create', 'candidates': ['A', 'B'], 'days': 1},
            {'op': 'tally', 'election': 1},
        ],
    }
    rcvote.__main__.main(script_file(script), quiet=True)
    out = capsys.readouterr().out
    assert 'Election 1 result (provisional):' in out
    assert 'Nobody elected' in out


def test_main_config(capsys):
    config = rcvote.persist.to_dict(VotingSystem(
        'nobody',
        ballot_validator=rcvote.vote.RankedBallotValidator(allow_partial=True),
    ))
    script = {
        'administrator': 'admin',
        'operations': [
            {'op': 'create', 'candidates': ['A', 'B', 'C'], 'days': 1},
            {'op': 'vote', 'voter': 'alice', 'election': 1,
             'choices': ['C']},
        ],
    }
    rcvote.__main__.main(
        script_file(script),
        config_file=io.StringIO(json.dumps(config)),
        quiet=True,
    )
    assert 'alice voted in election 1: [2]' in capsys.readouterr().out


def test_build_system_invalid_config():
    with pytest.raises(ValueError):
        rcvote.__main__.build_system('admin', io.StringIO('[]'))
    with pytest.raises(ValueError):
        rcvote.__main__.build_system(
            'admin', io.StringIO('{"administrator": "admin"}')
        )


def test_main_empty_script():
    with pytest.warns(UserWarning):
        rcvote.__main__.main(script_file({'operations': []}), quiet=True)


def test_unknown_operation():
    system = rcvote.__main__.build_system('admin')
    with pytest.raises(ValueError):
        rcvote.__main__.run_operation(system, {'op': 'explode'}, 1)


def test_main_malformed_operations(capsys):
    script = {
        'administrator': 'admin',
        'operations': [
            {'op': 'create', 'candidates': ['A', 'B']},
            {'op': 'advance', 'days': -1},
            {'op': 'create', 'candidates': ['A', 'B'], 'days': 1},
            {'op': 'vote', 'election': 1, 'choices': ['A', 'B']},
            {'op': 'vote', 'voter': 'alice', 'election': 1,
             'choices': ['B', 'A']},
        ],
    }
    rcvote.__main__.main(script_file(script), quiet=True)
    out = capsys.readouterr().out
    assert "[1] create failed: missing field 'days'" in out
    assert '[2] advance failed: ValueError' in out
    assert 'Created election 1: A, B' in out
    assert "[4] vote failed: missing field 'voter'" in out
    assert 'alice voted in election 1: [1, 0]' in out
