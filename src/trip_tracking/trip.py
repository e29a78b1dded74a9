"""Trip status lifecycle and models."""

from datetime import datetime
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from trip_tracking.core.exceptions import StateError


class TripStatus(str, Enum):
    """Trip lifecycle states."""

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


VALID_TRANSITIONS: dict[TripStatus, set[TripStatus]] = {
    # Drivers may start a trip straight from scheduled without confirming first.
    TripStatus.SCHEDULED: {
        TripStatus.CONFIRMED,
        TripStatus.IN_PROGRESS,
        TripStatus.CANCELLED,
        TripStatus.NO_SHOW,
    },
    TripStatus.CONFIRMED: {TripStatus.IN_PROGRESS, TripStatus.CANCELLED, TripStatus.NO_SHOW},
    TripStatus.IN_PROGRESS: {TripStatus.COMPLETED},
    TripStatus.COMPLETED: set(),
    TripStatus.CANCELLED: set(),
    TripStatus.NO_SHOW: set(),
}

TRACKING_ROLES: frozenset[str] = frozenset({"driver", "super_admin"})

# Target states reachable only through the start/complete tracking actions.
TRANSITION_ROLES: dict[TripStatus, frozenset[str]] = {
    TripStatus.IN_PROGRESS: TRACKING_ROLES,
    TripStatus.COMPLETED: TRACKING_ROLES,
}

STATUS_ACTION_LABELS: dict[TripStatus, str] = {
    TripStatus.CONFIRMED: "Confirm Trip",
    TripStatus.IN_PROGRESS: "Start Trip",
    TripStatus.COMPLETED: "Complete Trip",
    TripStatus.NO_SHOW: "No Show",
    TripStatus.CANCELLED: "Cancel",
}

# Button order: progress actions first, cancellation last.
_ACTION_ORDER = [
    TripStatus.CONFIRMED,
    TripStatus.IN_PROGRESS,
    TripStatus.COMPLETED,
    TripStatus.NO_SHOW,
    TripStatus.CANCELLED,
]


class StatusTransition(NamedTuple):
    from_status: str
    to_status: str
    is_valid: bool
    reason: str


class StatusAction(NamedTuple):
    target: TripStatus
    label: str


class TimestampChanges(NamedTuple):
    set_pickup_time: bool
    set_dropoff_time: bool


def _coerce(status: TripStatus | str) -> TripStatus | None:
    try:
        return TripStatus(status)
    except ValueError:
        return None


def get_valid_next_statuses(status: TripStatus | str) -> list[TripStatus]:
    current = _coerce(status)
    if current is None:
        return []
    return [s for s in _ACTION_ORDER if s in VALID_TRANSITIONS[current]]


def is_terminal_status(status: TripStatus | str) -> bool:
    current = _coerce(status)
    return current is not None and not VALID_TRANSITIONS[current]


def can_track_trips(role: str | None) -> bool:
    """Whether the role may invoke the start/complete tracking actions."""
    return role in TRACKING_ROLES


def is_role_allowed(target: TripStatus | str, role: str | None) -> bool:
    new = _coerce(target)
    if new is None:
        return False
    allowed = TRANSITION_ROLES.get(new)
    return allowed is None or role in allowed


def validate_status_transition(
    current_status: TripStatus | str, new_status: TripStatus | str
) -> StatusTransition:
    """Check a status change against the transition table.

    Re-applying the current status is valid. An unrecognised current status
    is invalid.
    """
    current = _coerce(current_status)
    new = _coerce(new_status)
    from_value = current.value if current else str(current_status)
    to_value = new.value if new else str(new_status)

    if current is None:
        return StatusTransition(
            from_value, to_value, False, f"Unknown current status: {current_status}"
        )
    if new is None:
        return StatusTransition(from_value, to_value, False, f"Unknown status: {new_status}")
    if current == new:
        return StatusTransition(from_value, to_value, True, "Status unchanged")

    allowed = get_valid_next_statuses(current)
    if new not in allowed:
        allowed_text = ", ".join(s.value for s in allowed) or "none"
        return StatusTransition(
            from_value,
            to_value,
            False,
            f'Cannot transition from "{from_value}" to "{to_value}". '
            f"Allowed transitions: {allowed_text}",
        )

    return StatusTransition(
        from_value, to_value, True, f"Valid transition: {from_value} -> {to_value}"
    )


def get_status_actions(status: TripStatus | str, role: str | None) -> list[StatusAction]:
    """Status-change actions to offer for a trip in ``status`` to a user with ``role``."""
    return [
        StatusAction(target, STATUS_ACTION_LABELS[target])
        for target in get_valid_next_statuses(status)
        if is_role_allowed(target, role)
    ]


def timestamps_for_status_change(
    previous_status: TripStatus | str, new_status: TripStatus | str
) -> TimestampChanges:
    """Which actual-time fields a status change should stamp."""
    previous = _coerce(previous_status)
    new = _coerce(new_status)
    return TimestampChanges(
        set_pickup_time=new == TripStatus.IN_PROGRESS and previous != TripStatus.IN_PROGRESS,
        set_dropoff_time=new == TripStatus.COMPLETED and previous != TripStatus.COMPLETED,
    )


class RoleNotAllowedError(StateError):
    """The actor's role may not perform this transition."""

    pass


class Trip(BaseModel):
    """A trip record as returned by the trips API.

    Unknown backend fields are kept so that records round-trip intact.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    status: TripStatus = Field(default=TripStatus.SCHEDULED)
    pickup_address: str = ""
    dropoff_address: str = ""
    scheduled_pickup_time: datetime | None = None
    scheduled_return_time: datetime | None = None
    start_latitude: float | None = None
    start_longitude: float | None = None
    end_latitude: float | None = None
    end_longitude: float | None = None
    distance_miles: float | None = None
    fuel_cost: float | None = None
    driver_notes: str | None = None
    actual_pickup_time: datetime | None = None
    actual_dropoff_time: datetime | None = None

    @property
    def has_start_location(self) -> bool:
        return self.start_latitude is not None and self.start_longitude is not None

    @property
    def has_end_location(self) -> bool:
        return self.end_latitude is not None and self.end_longitude is not None

    @property
    def is_terminal(self) -> bool:
        return is_terminal_status(self.status)

    def available_actions(self, role: str | None) -> list[StatusAction]:
        return get_status_actions(self.status, role)

    def transition_to(self, new_status: TripStatus, role: str | None = None) -> None:
        """Transition to a new status with local validation.

        The backend remains authoritative; this is for callers that keep a
        local copy of the record.
        """
        if self.is_terminal:
            raise StateError(f"Cannot transition from terminal state {self.status.value}")

        transition = validate_status_transition(self.status, new_status)
        if not transition.is_valid:
            raise StateError(transition.reason)

        if not is_role_allowed(new_status, role):
            raise RoleNotAllowedError(
                f"Role {role!r} may not move a trip to {new_status.value}",
                details={"trip_id": self.id, "role": role},
            )

        self.status = new_status


class TripStatusUpdate(BaseModel):
    """Body of ``PUT /api/trips/{id}/status``. Unset fields are omitted on the wire."""

    status: TripStatus
    actual_pickup_time: datetime | None = None
    actual_dropoff_time: datetime | None = None
    start_latitude: float | None = None
    start_longitude: float | None = None
    end_latitude: float | None = None
    end_longitude: float | None = None
    distance_miles: float | None = None
    fuel_cost: float | None = None
    driver_notes: str | None = None


class TripTrackingSummary(BaseModel):
    has_start_location: bool
    has_end_location: bool
    distance_miles: float | None = None
    fuel_cost: float | None = None
    driver_notes: str | None = None
    actual_pickup_time: datetime | None = None
    actual_dropoff_time: datetime | None = None
