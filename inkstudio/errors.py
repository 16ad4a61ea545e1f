# inkstudio/errors.py

class StudioError(Exception):
    """Base error for the booking service."""
    pass


class InvalidOverrideError(StudioError):
    """Raised when a blocked/extended date row is malformed."""
    pass


class TransientFetchError(StudioError):
    """Raised by a record store when a read fails and may succeed on retry."""
    pass


class AvailabilityUnavailableError(StudioError):
    """Raised when availability cannot be computed because records could not be read.

    Callers must report this as "unknown availability", never as an empty day.
    """
    pass


class BookingConflictError(StudioError):
    """Raised when a submitted slot is no longer free at persistence time."""
    pass


class OffGridSlotError(StudioError):
    """Raised when a requested start is not one of the slots the day offers."""
    pass
