"""
Typed errors raised by the attendance core.

The core raises these instead of formatting responses; the HTTP layer and
the Slack command adapter each turn them into their own presentation.
"""


class AttendanceError(Exception):
    """Base class for attendance errors."""

    status_code = 400
    default_message = "Attendance request failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AttendanceError):
    """Missing or malformed input (e.g. an unparsable month)."""

    default_message = "Invalid request"


class AlreadyCheckedInError(AttendanceError):
    default_message = "Already checked in today"


class AlreadyCheckedOutError(AttendanceError):
    default_message = "Already checked out today"


class NoCheckInError(AttendanceError):
    default_message = "No check-in record for today"


class NotFoundError(AttendanceError):
    status_code = 404
    default_message = "Record not found"


class PersistenceError(AttendanceError):
    """The store failed (unreachable, unexpected constraint violation)."""

    status_code = 500
    default_message = "Attendance store is unavailable"


class InvalidIntervalError(AttendanceError):
    """clock_out <= clock_in. Clock monotonicity should make this impossible."""

    status_code = 500
    default_message = "Check-out must be after check-in"
