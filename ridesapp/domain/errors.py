"""Error taxonomy surfaced by the ride services."""


class RidesAppError(Exception):
    """Base class for all domain errors."""


class NotFound(RidesAppError):
    """A referenced ride, passenger or user does not exist."""

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class CapacityExceeded(RidesAppError):
    """Booking would push seats_booked above seats_available."""

    def __init__(self, ride_id: int, requested: int, remaining: int):
        super().__init__(
            f"Ride {ride_id} has {remaining} seat(s) left, {requested} requested"
        )
        self.ride_id = ride_id
        self.requested = requested
        self.remaining = remaining


class ValidationError(RidesAppError):
    """Malformed or out-of-range input."""


class InvalidTransition(RidesAppError):
    """Raised when a ride status change violates the state machine."""


class StorageFailure(RidesAppError):
    """Underlying persistence error that could not be recovered locally."""
