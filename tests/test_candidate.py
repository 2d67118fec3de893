
import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import rcvote.candidate


def check_validation(validator, cands, is_ok,
                     error=rcvote.candidate.InvalidCandidateList):
    if is_ok:
        validator.validate(cands)
    else:
        with pytest.raises(error):
            validator.validate(cands)


@pytest.mark.parametrize(('cands', 'is_valid'), [
    ([], False),
    (['A'], False),
    (['A', 'B'], True),
    (('A', 'B', 'C'), True),
    (['A', 'B', 'C', 'D'], True),
    (['A', 'B', 'C', 'D', 'E'], True),
    (['A', 'B', 'C', 'D', 'E', 'F'], False),
])
def test_default_count(cands, is_valid):
    check_validation(
        rcvote.candidate.CandidateListValidator(), cands, is_valid,
        error=rcvote.candidate.InvalidCandidateCount,
    )


@pytest.mark.parametrize(('cands', 'is_valid'), [
    (['A', ''], False),
    (['  ', 'B'], False),
    (['A', '\t\n'], False),
    (['Candidate 1', 'Candidate 2'], True),
])
def test_empty_names(cands, is_valid):
    check_validation(
        rcvote.candidate.CandidateListValidator(), cands, is_valid,
        error=rcvote.candidate.InvalidCandidateName,
    )


@pytest.mark.parametrize('cands', [
    'AB',
    {'A', 'B'},
    None,
    ['A', 2],
    ['A', None, 'C'],
])
def test_bad_types(cands):
    check_validation(
        rcvote.candidate.CandidateListValidator(), cands, False
    )


def test_empty_name_index():
    with pytest.raises(rcvote.candidate.InvalidCandidateName) as excinfo:
        rcvote.candidate.CandidateListValidator().validate(['A', 'B', ''])
    assert excinfo.value.index == 2


def test_count_error_bounds():
    with pytest.raises(rcvote.candidate.InvalidCandidateCount) as excinfo:
        rcvote.candidate.CandidateListValidator().validate(['A'])
    assert excinfo.value.min_count == 2
    assert excinfo.value.max_count == 5
    assert 'at least 2' in str(excinfo.value)


def test_duplicates_allowed(caplog):
    rcvote.candidate.CandidateListValidator().validate(['A', 'B', 'A'])
    assert 'duplicate' in caplog.text


@pytest.mark.parametrize(('bounds', 'cands', 'is_valid'), [
    ((3, None), ['A', 'B'], False),
    ((3, None), list('ABCDEFGH'), True),
    ((None, 2), ['A'], True),
    ((None, 2), ['A', 'B', 'C'], False),
])
def test_custom_bounds(bounds, cands, is_valid):
    check_validation(
        rcvote.candidate.CandidateListValidator(bounds), cands, is_valid,
        error=rcvote.candidate.InvalidCandidateCount,
    )


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        rcvote.candidate.CandidateListValidator().validate(['A'])
