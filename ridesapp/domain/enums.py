"""Domain enumerations and state-transition rules."""

import enum


class RideStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    STARTED = "started"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# State machine: maps current status -> set of valid next statuses
RIDE_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.PENDING: {RideStatus.ACCEPTED, RideStatus.CANCELLED},
    RideStatus.ACCEPTED: {RideStatus.STARTED, RideStatus.CANCELLED},
    RideStatus.STARTED: {RideStatus.COMPLETED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}


class RideType(str, enum.Enum):
    SHARED = "shared"
    ON_DEMAND = "on_demand"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    WALLET = "wallet"


class PassengerStatus(str, enum.Enum):
    """Join state of a passenger on a shared ride.

    A successful join reserves seats immediately, so passengers are stored
    as CONFIRMED.  REQUESTED is kept for hosts that want to approve joins.
    """

    REQUESTED = "requested"
    CONFIRMED = "confirmed"


class UserRole(str, enum.Enum):
    RIDER = "rider"
    DRIVER = "driver"
