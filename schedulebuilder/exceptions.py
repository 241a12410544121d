"""
Exception hierarchy for schedulebuilder.

Only the validation layer raises: building an Event from user input or from a
stored record. The occurrence and conflict engine itself never raises; it
answers every question with a boolean or a (possibly empty) sequence.
"""

from typing import Any, Optional


class ScheduleError(Exception):
    """Base exception for all schedulebuilder errors.

    Args:
        message: Human-readable error description
        details: Optional dictionary containing additional error context

    Example:
        >>> raise ScheduleError("Calendar unavailable", {"calendar": "work"})
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class EventValidationError(ScheduleError):
    """An Event failed validation before reaching the engine.

    Raised when:
    - the title is missing or blank
    - the end date is before the anchor date
    - a timed event has no start/end time, or start is not before end
    - a weekly repeat limit is below one

    Args:
        message: Human-readable validation error description
        field_name: Name of the first field that failed validation
        field_value: The offending value
        validation_errors: Every validation message collected for the event
        details: Additional context about the failure

    Example:
        >>> raise EventValidationError(
        ...     "End time must be after start time",
        ...     field_name="end_time",
        ...     field_value="09:00",
        ... )
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        validation_errors: Optional[list[str]] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.field_name = field_name
        self.field_value = field_value
        self.validation_errors = validation_errors or [message]

        error_details = details or {}
        if field_name:
            error_details["field_name"] = field_name
        if field_value is not None:
            error_details["field_value"] = str(field_value)
        if len(self.validation_errors) > 1:
            error_details["validation_errors"] = self.validation_errors

        super().__init__(message, error_details)


class RecordDecodeError(EventValidationError):
    """A stored or submitted record could not be decoded into an Event at all.

    Raised when the record is not a mapping or a required field (anchor date)
    is missing or unparseable. Optional fields never raise this; they decode
    leniently and are logged instead.
    """
