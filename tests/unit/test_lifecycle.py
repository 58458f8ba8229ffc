"""Unit tests for transaction status transitions"""

import pytest
from market_gateway.domain.exceptions import InvalidStateError
from market_gateway.domain.lifecycle import can_transition, is_terminal, transition
from market_gateway.domain.models import TransactionStatus

PENDING = TransactionStatus.PENDING
COMPLETED = TransactionStatus.COMPLETED
CANCELLED = TransactionStatus.CANCELLED
FAILED = TransactionStatus.FAILED


def test_pending_can_complete_or_cancel():
    assert transition(PENDING, COMPLETED) == COMPLETED
    assert transition(PENDING, CANCELLED) == CANCELLED


@pytest.mark.parametrize("current", [COMPLETED, CANCELLED, FAILED])
@pytest.mark.parametrize("target", list(TransactionStatus))
def test_nothing_leaves_terminal_states(current, target):
    assert not can_transition(current, target)
    with pytest.raises(InvalidStateError):
        transition(current, target)


def test_failed_is_unreachable():
    with pytest.raises(InvalidStateError):
        transition(PENDING, FAILED)


def test_pending_to_pending_is_not_a_transition():
    assert not can_transition(PENDING, PENDING)


def test_rejection_messages():
    with pytest.raises(InvalidStateError, match="transaction is not pending"):
        transition(CANCELLED, COMPLETED)
    with pytest.raises(InvalidStateError, match="only pending transactions can be cancelled"):
        transition(COMPLETED, CANCELLED)


def test_terminal_states():
    assert not is_terminal(PENDING)
    assert all(is_terminal(s) for s in (COMPLETED, CANCELLED, FAILED))
