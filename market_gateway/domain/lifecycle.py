"""Transaction lifecycle rules - the only allowed status transitions"""

from typing import Dict, FrozenSet

from market_gateway.domain.exceptions import InvalidStateError
from market_gateway.domain.models import TransactionStatus

TERMINAL_STATES: FrozenSet[TransactionStatus] = frozenset(
    {
        TransactionStatus.COMPLETED,
        TransactionStatus.CANCELLED,
        TransactionStatus.FAILED,
    }
)

ALLOWED_TRANSITIONS: Dict[TransactionStatus, FrozenSet[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset({TransactionStatus.COMPLETED, TransactionStatus.CANCELLED}),
}

_REJECTION_MESSAGES = {
    TransactionStatus.COMPLETED: "transaction is not pending",
    TransactionStatus.CANCELLED: "only pending transactions can be cancelled",
}


def can_transition(current: TransactionStatus, target: TransactionStatus) -> bool:
    if current in TERMINAL_STATES:
        return False
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def transition(current: TransactionStatus, target: TransactionStatus) -> TransactionStatus:
    """
    Return the next status or raise InvalidStateError.

    pending → completed | cancelled. Nothing leaves a terminal status.
    """
    if not can_transition(current, target):
        message = _REJECTION_MESSAGES.get(
            target,
            f"cannot transition transaction from '{current.value}' to '{target.value}'",
        )
        raise InvalidStateError(message)
    return target


def is_terminal(status: TransactionStatus) -> bool:
    return status in TERMINAL_STATES
