"""Order status state machine.

Pure decision logic: given the current status and a requested one, either
returns the resulting transition or raises ``InvalidStateTransition``. It never
touches an order, stock or payment; callers apply side effects only after a
transition has been granted.

Legal transitions:
    pending    → confirmed, cancelled
    confirmed  → processing, cancelled
    processing → shipped, cancelled
    shipped    → delivered
    delivered  → refunded
    cancelled  → (terminal)
    refunded   → (terminal)

Implicit transitions (auto-confirm on payment, auto-ship on tracking, refund
from any non-terminal status) are not table entries; they are separate Order
methods built on ``precedes`` and ``is_terminal``.
"""

from dataclasses import dataclass
from enum import Enum

from ordering.errors import InvalidStateTransition


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


_LEGAL_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),  # Terminal
    OrderStatus.REFUNDED: frozenset(),  # Terminal
}

# Forward fulfilment pipeline, used to decide implicit transitions
_PIPELINE = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)

TERMINAL_STATUSES = frozenset(status for status, targets in _LEGAL_TRANSITIONS.items() if not targets)


@dataclass(frozen=True)
class Transition:
    """A granted status change and the note to record with it."""

    previous: OrderStatus
    status: OrderStatus
    note: str | None = None

    @property
    def releases_stock(self) -> bool:
        """First entry into cancelled or refunded gives the reserved stock back."""
        return self.status in TERMINAL_STATUSES and self.previous not in TERMINAL_STATUSES


def _coerce(status) -> OrderStatus:
    return status if isinstance(status, OrderStatus) else OrderStatus(status)


def allowed_transitions(current) -> frozenset:
    return _LEGAL_TRANSITIONS[_coerce(current)]


def can_transition(current, requested) -> bool:
    return _coerce(requested) in allowed_transitions(current)


def is_terminal(status) -> bool:
    return _coerce(status) in TERMINAL_STATUSES


def precedes(status, other) -> bool:
    """True when ``status`` comes strictly before ``other`` in the fulfilment pipeline.

    Terminal statuses are outside the pipeline and never precede anything.
    """
    status, other = _coerce(status), _coerce(other)
    if status not in _PIPELINE or other not in _PIPELINE:
        return False
    return _PIPELINE.index(status) < _PIPELINE.index(other)


def transition(current, requested, note=None) -> Transition:
    """Decide whether ``current → requested`` is legal.

    Raises:
        InvalidStateTransition: the pair is not in the transition table.
    """
    current, requested = _coerce(current), _coerce(requested)
    if requested not in _LEGAL_TRANSITIONS[current]:
        raise InvalidStateTransition(current.value, requested.value)
    return Transition(previous=current, status=requested, note=note)
