
class SchedulingError(Exception):
    """Base class for errors raised by the scheduling engine."""
    pass


class ValidationError(SchedulingError, ValueError):
    """Raised for malformed input (dates, times, day names, begin >= end) before any state changes."""
    pass


class InvalidStateError(SchedulingError, RuntimeError):
    """Raised when a lifecycle transition is attempted from a state that does not allow it."""
    pass


class EmailDeliveryError(SchedulingError, RuntimeError):
    """Raised by email adapters when a message could not be handed to the provider."""
    pass
