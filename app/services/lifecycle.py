"""
Appointment state machine.

Every status-changing action goes through :func:`resolve_transition`, so the
legal moves live in one table instead of being repeated per endpoint.
"""

from dataclasses import dataclass
from enum import Enum

from app.core.exceptions import TransitionConflictException
from app.schemas.appointments import AppointmentStatus


class AppointmentAction(str, Enum):
    """Actions that move an appointment through its lifecycle."""

    CONFIRM = "confirm"
    REJECT = "reject"
    REVERT_TO_PENDING = "revert_to_pending"
    MARK_NO_SHOW = "mark_no_show"
    CHECK_IN = "check_in"


@dataclass(frozen=True)
class Transition:
    """Source states an action accepts and the status it leaves behind."""

    allowed_from: frozenset[AppointmentStatus]
    # None keeps the current status (check-in only flags arrival)
    target: AppointmentStatus | None
    conflict_message: str


ANY_STATUS = frozenset(AppointmentStatus)

# Only confirm and check-in are guarded; repeating the other actions simply
# overwrites the previous outcome.
TRANSITIONS: dict[AppointmentAction, Transition] = {
    AppointmentAction.CONFIRM: Transition(
        allowed_from=ANY_STATUS - {AppointmentStatus.CONFIRMED},
        target=AppointmentStatus.CONFIRMED,
        conflict_message="Already confirmed",
    ),
    AppointmentAction.REJECT: Transition(
        allowed_from=ANY_STATUS,
        target=AppointmentStatus.REJECTED,
        conflict_message="Cannot reject this appointment",
    ),
    AppointmentAction.REVERT_TO_PENDING: Transition(
        allowed_from=ANY_STATUS,
        target=AppointmentStatus.PENDING,
        conflict_message="Cannot revert this appointment",
    ),
    AppointmentAction.MARK_NO_SHOW: Transition(
        allowed_from=ANY_STATUS,
        target=AppointmentStatus.NO_SHOW,
        conflict_message="Cannot mark this appointment as no-show",
    ),
    AppointmentAction.CHECK_IN: Transition(
        allowed_from=frozenset({AppointmentStatus.CONFIRMED}),
        target=None,
        conflict_message="Only confirmed appointments can be checked in",
    ),
}


def can_transition(action: AppointmentAction, current: AppointmentStatus | str) -> bool:
    """Whether ``action`` is legal for an appointment in ``current`` status."""
    return AppointmentStatus(current) in TRANSITIONS[action].allowed_from


def resolve_transition(
    action: AppointmentAction,
    current: AppointmentStatus | str,
) -> AppointmentStatus:
    """
    Validate an action against the current status.

    Args:
        action: Requested lifecycle action
        current: Status currently stored on the appointment

    Returns:
        Status the appointment must be persisted with

    Raises:
        TransitionConflictException: If the action is not allowed from ``current``
    """
    current_status = AppointmentStatus(current)
    transition = TRANSITIONS[action]

    if current_status not in transition.allowed_from:
        raise TransitionConflictException(transition.conflict_message)

    return transition.target or current_status
