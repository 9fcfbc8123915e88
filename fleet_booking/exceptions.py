"""
Custom exception classes for the fleet booking engine.

These exceptions provide precise error types that the booking session and
controllers can catch to report friendly messages instead of generic 500 errors.
"""


class VehicleNotFoundError(Exception):
    """Raised when a vehicle ID cannot be found by the schedule provider."""

    def __init__(self, message: str = "Error: vehicle not found") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class ScheduleUnavailableError(Exception):
    """Raised when a vehicle's schedule cannot be loaded right now."""

    def __init__(self, message: str = "Error: vehicle schedule is unavailable") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class InvalidRateError(ValueError):
    """Raised when a negative daily rate is handed to the pricing calculator."""

    def __init__(self, message: str = "Error: daily rate must not be negative") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class BookingValidationError(Exception):
    """Base class for request validation failures (recovered locally, never retried)."""

    code = "invalid"

    def __init__(self, message: str = "Error: invalid reservation request") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class EmptySelectionError(BookingValidationError):
    """Raised when a reservation is built without any selected date."""

    code = "empty_selection"

    def __init__(self, message: str = "Please select at least one date") -> None:
        super().__init__(message)


class MissingCustomerFieldError(BookingValidationError):
    """Raised when a required customer field is blank."""

    code = "missing_customer_field"

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"Missing required field: {field}")


class RequestTooLongError(BookingValidationError):
    """Raised when the special requests text exceeds the allowed length."""

    code = "request_too_long"

    def __init__(self, limit: int, message: str | None = None) -> None:
        self.limit = limit
        super().__init__(message or f"Special requests must be at most {limit} characters")


class SubmissionInFlightError(Exception):
    """Raised when a second submission is attempted while one is still pending."""

    def __init__(self, message: str = "A reservation is already being submitted") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class StoreUnavailableError(Exception):
    """Raised when the backing store fails to persist a change."""

    def __init__(self, message: str = "Error: storage is temporarily unavailable") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message
