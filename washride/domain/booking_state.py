"""Booking state machine.

A booking moves strictly forward through a fixed sequence. ``declined`` and
``cancelled`` are absorbing and can be reached from any state that is not
already terminal.
"""

from enum import Enum

from washride.core.exceptions import InvalidStatusTransition


class BookingStatus(str, Enum):
    """Booking status values (wire spelling)."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    PICKED_UP = "picked_up"
    AT_WASH = "at_wash"
    WAITING_BAY = "waiting_bay"
    WASHING_BAY = "washing_bay"
    DRYING_BAY = "drying_bay"
    WASH_COMPLETED = "wash_completed"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


BOOKING_SEQUENCE: tuple[BookingStatus, ...] = (
    BookingStatus.PENDING,
    BookingStatus.ACCEPTED,
    BookingStatus.PICKED_UP,
    BookingStatus.AT_WASH,
    BookingStatus.WAITING_BAY,
    BookingStatus.WASHING_BAY,
    BookingStatus.DRYING_BAY,
    BookingStatus.WASH_COMPLETED,
    BookingStatus.DELIVERED,
    BookingStatus.COMPLETED,
)

NEXT_STATUS: dict[BookingStatus, BookingStatus | None] = {
    **{
        current: following
        for current, following in zip(BOOKING_SEQUENCE, BOOKING_SEQUENCE[1:])
    },
    BookingStatus.COMPLETED: None,
    BookingStatus.DECLINED: None,
    BookingStatus.CANCELLED: None,
}

TERMINAL_STATUSES = frozenset(status for status, nxt in NEXT_STATUS.items() if nxt is None)
ABSORBING_STATUSES = frozenset({BookingStatus.DECLINED, BookingStatus.CANCELLED})

BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    status: (
        frozenset()
        if nxt is None
        else frozenset({nxt}) | ABSORBING_STATUSES
    )
    for status, nxt in NEXT_STATUS.items()
}


def _coerce(status: str | BookingStatus) -> BookingStatus | None:
    try:
        return BookingStatus(status)
    except ValueError:
        return None


def next_status(current: str | BookingStatus) -> BookingStatus | None:
    """Return the single forward successor of ``current``, or None if terminal."""
    status = _coerce(current)
    if status is None:
        return None
    return NEXT_STATUS[status]


def is_terminal(status: str | BookingStatus) -> bool:
    return _coerce(status) in TERMINAL_STATUSES


def allowed_transitions(current: str | BookingStatus) -> frozenset[BookingStatus]:
    """All statuses a booking may move to from ``current``."""
    status = _coerce(current)
    if status is None:
        return frozenset()
    return BOOKING_TRANSITIONS[status]


def assert_booking_transition(current: str | BookingStatus, target: str | BookingStatus) -> BookingStatus:
    """Raise unless ``current`` → ``target`` is legal; return the target status."""
    target_status = _coerce(target)
    if target_status is None or target_status not in allowed_transitions(current):
        raise InvalidStatusTransition(
            "booking",
            getattr(current, "value", current),
            getattr(target, "value", target),
        )
    return target_status
