"""Account approval state machine."""

from enum import Enum

from washride.core.exceptions import InvalidStatusTransition


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


APPROVAL_TRANSITIONS = {
    "pending": {"approved", "rejected"},
    "approved": set(),
    "rejected": set(),
}


def assert_approval_transition(current: str, target: str) -> None:
    allowed = APPROVAL_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidStatusTransition("approval", current, target)
