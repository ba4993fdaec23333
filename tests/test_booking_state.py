import pytest

from washride.core.exceptions import InvalidStatusTransition
from washride.domain.booking_state import (
    BOOKING_SEQUENCE,
    BookingStatus,
    allowed_transitions,
    assert_booking_transition,
    is_terminal,
    next_status,
)

TERMINAL = (BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.DECLINED)
NON_TERMINAL = [s for s in BookingStatus if s not in TERMINAL]


def test_sequence_covers_every_forward_status():
    assert BOOKING_SEQUENCE[0] is BookingStatus.PENDING
    assert BOOKING_SEQUENCE[-1] is BookingStatus.COMPLETED
    assert set(BOOKING_SEQUENCE) | {BookingStatus.CANCELLED, BookingStatus.DECLINED} == set(BookingStatus)


@pytest.mark.parametrize("current", NON_TERMINAL)
def test_only_next_status_or_absorbing_is_allowed(current):
    successor = BOOKING_SEQUENCE[BOOKING_SEQUENCE.index(current) + 1]
    assert next_status(current) is successor
    assert allowed_transitions(current) == {successor, BookingStatus.CANCELLED, BookingStatus.DECLINED}

    for target in BookingStatus:
        if target in allowed_transitions(current):
            assert assert_booking_transition(current, target) is target
        else:
            with pytest.raises(InvalidStatusTransition):
                assert_booking_transition(current, target)


@pytest.mark.parametrize("current", TERMINAL)
def test_terminal_statuses_accept_nothing(current):
    assert is_terminal(current)
    assert next_status(current) is None
    assert allowed_transitions(current) == frozenset()
    for target in BookingStatus:
        with pytest.raises(InvalidStatusTransition):
            assert_booking_transition(current, target)


def test_pending_cannot_skip_to_picked_up():
    with pytest.raises(InvalidStatusTransition) as exc_info:
        assert_booking_transition("pending", "picked_up")
    assert exc_info.value.status_code == 409
    assert exc_info.value.current == "pending"
    assert exc_info.value.target == "picked_up"


def test_pending_to_accepted():
    assert assert_booking_transition("pending", "accepted") is BookingStatus.ACCEPTED


def test_accepted_can_be_cancelled():
    assert assert_booking_transition("accepted", "cancelled") is BookingStatus.CANCELLED


def test_no_status_moves_backwards():
    for i, current in enumerate(BOOKING_SEQUENCE):
        for earlier in BOOKING_SEQUENCE[: i + 1]:
            with pytest.raises(InvalidStatusTransition):
                assert_booking_transition(current, earlier)


def test_unknown_status_is_rejected():
    assert allowed_transitions("teleported") == frozenset()
    assert not is_terminal("teleported")
    with pytest.raises(InvalidStatusTransition):
        assert_booking_transition("pending", "teleported")
