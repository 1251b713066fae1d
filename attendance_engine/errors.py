"""Exception types raised by the attendance engine."""


class AttendanceError(Exception):
    """Base class for attendance engine failures."""


class MalformedTime(AttendanceError, ValueError):
    """A stored time string could not be parsed as HH:MM[:SS]."""

    def __init__(self, value):
        super().__init__(f"malformed time '{value}'")
        self.value = value


class StoreUnavailable(AttendanceError):
    """An event store or summary sink call failed or timed out."""


class StoreTimeout(StoreUnavailable):
    """A collaborator call did not finish in time; its effect is unknown."""
