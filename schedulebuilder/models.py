"""Event and recurrence models for schedulebuilder."""

import logging
import uuid
from datetime import date, time
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import EventValidationError

logger = logging.getLogger(__name__)


class RecurrenceType(str, Enum):
    """Recurrence patterns understood by the engine."""

    NONE = "none"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class NoRecurrence(BaseModel):
    """The event happens once (on one date or across one multi-day span)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class WeeklyRecurrence(BaseModel):
    """Same weekday every week, optionally bounded to a number of repetitions.

    ``repeat_weeks`` counts the anchor week as repetition 0, so ``repeat_weeks=3``
    yields the anchor week and the two weeks after it.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["weekly"] = "weekly"
    repeat_weeks: Optional[int] = Field(
        default=None, description="Number of weekly repetitions (None = unlimited)"
    )

    @field_validator("repeat_weeks")
    @classmethod
    def validate_repeat_weeks(cls, v: Optional[int]) -> Optional[int]:
        """Reject repeat limits below one.

        Raises:
            EventValidationError: If the limit is zero or negative
        """
        if v is not None and v < 1:
            raise EventValidationError(
                "Weekly repeat limit must be at least 1",
                field_name="repeat_weeks",
                field_value=v,
            )
        return v


class MonthlyRecurrence(BaseModel):
    """Same day-of-month in every month."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["monthly"] = "monthly"


class YearlyRecurrence(BaseModel):
    """Same month and day in every year."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["yearly"] = "yearly"


Recurrence = Annotated[
    Union[NoRecurrence, WeeklyRecurrence, MonthlyRecurrence, YearlyRecurrence],
    Field(discriminator="kind"),
]

_RECURRENCE_TYPES: dict[str, RecurrenceType] = {
    "none": RecurrenceType.NONE,
    "weekly": RecurrenceType.WEEKLY,
    "monthly": RecurrenceType.MONTHLY,
    "yearly": RecurrenceType.YEARLY,
}


def _new_event_id() -> str:
    return uuid.uuid4().hex


class Event(BaseModel):
    """A calendar event as seen by the occurrence and conflict engine.

    Events are immutable values. Editing an event means building a new one
    (``model_copy`` or ``EventBuilder.from_event``) and replacing the old value
    in the caller's collection; excluding or restoring a single date goes
    through ``with_excluded_date`` / ``without_excluded_date``.

    The model only checks field types. Business rules (non-empty title,
    ordered dates and times, both times on a timed event) are enforced by
    ``validate_event`` and ``EventBuilder`` so that already-stored records
    with legacy gaps can still be loaded and handled by the engine's
    fail-safe defaults.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_event_id, description="Opaque event identifier")
    title: str = Field(..., description="Event title")

    # Dates
    anchor_date: date = Field(..., description="First date of the event")
    end_date: Optional[date] = Field(default=None, description="Last date of a multi-day span")

    # Times
    start_time: Optional[time] = Field(default=None, description="Start time of day")
    end_time: Optional[time] = Field(default=None, description="End time of day")
    all_day: bool = Field(default=False, description="All-day event flag")

    # Recurrence
    recurrence: Recurrence = Field(default_factory=NoRecurrence, description="Recurrence rule")
    excluded_dates: frozenset[date] = Field(
        default_factory=frozenset, description="Dates removed from the recurrence"
    )

    # Display metadata (unused by the engine)
    color: Optional[str] = Field(default=None, description="Display color")
    description: str = Field(default="", description="Free-form description")

    @property
    def recurrence_type(self) -> RecurrenceType:
        return _RECURRENCE_TYPES[self.recurrence.kind]

    @property
    def recurring(self) -> bool:
        return self.recurrence_type is not RecurrenceType.NONE

    @property
    def repeat_weeks(self) -> Optional[int]:
        if isinstance(self.recurrence, WeeklyRecurrence):
            return self.recurrence.repeat_weeks
        return None

    @property
    def repeat_limited(self) -> bool:
        return self.repeat_weeks is not None

    @property
    def is_multi_day(self) -> bool:
        """True when the event's single occurrence covers more than one date."""
        return self.end_date is not None and self.end_date > self.anchor_date

    @property
    def duration_days(self) -> int:
        """Days from the first to the last date of one occurrence (0 for single-day)."""
        end_date = self.end_date
        if end_date is not None and end_date > self.anchor_date:
            return (end_date - self.anchor_date).days
        return 0

    @property
    def last_date(self) -> date:
        """Last date of the anchor occurrence."""
        return self.end_date if self.is_multi_day and self.end_date else self.anchor_date

    @property
    def time_range(self) -> Optional[tuple[time, time]]:
        """``(start_time, end_time)`` when both are present and ordered, else None."""
        start_time, end_time = self.start_time, self.end_time
        if start_time is None or end_time is None or start_time >= end_time:
            return None
        return start_time, end_time

    @property
    def has_usable_times(self) -> bool:
        """True when both times are present and ordered."""
        return self.time_range is not None

    def with_excluded_date(self, day: date) -> "Event":
        """Return a copy of this event that does not occur on ``day``."""
        return self.model_copy(update={"excluded_dates": self.excluded_dates | {day}})

    def without_excluded_date(self, day: date) -> "Event":
        """Return a copy of this event with ``day`` restored to its recurrence."""
        return self.model_copy(update={"excluded_dates": self.excluded_dates - {day}})


def recurrence_from_fields(
    recurring: bool,
    recurrence_type: Union[RecurrenceType, str, None] = None,
    repeat_limited: bool = False,
    repeat_weeks: Optional[int] = None,
) -> Union[NoRecurrence, WeeklyRecurrence, MonthlyRecurrence, YearlyRecurrence]:
    """Build a recurrence rule from the flat form/record fields.

    ``recurrence_type`` is ignored unless ``recurring`` is true, and the repeat
    limit is ignored unless the rule is weekly and ``repeat_limited`` is true.

    Raises:
        EventValidationError: If the type is unknown or a limited weekly rule
            has no usable week count
    """
    if not recurring or recurrence_type is None:
        return NoRecurrence()

    if isinstance(recurrence_type, RecurrenceType):
        kind = recurrence_type
    else:
        kind_name = str(recurrence_type).strip().lower()
        if kind_name not in _RECURRENCE_TYPES:
            raise EventValidationError(
                f"Unsupported recurrence type: {recurrence_type!r}",
                field_name="recurrence_type",
                field_value=recurrence_type,
            )
        kind = _RECURRENCE_TYPES[kind_name]

    if kind is RecurrenceType.WEEKLY:
        if not repeat_limited:
            return WeeklyRecurrence()
        if repeat_weeks is None:
            raise EventValidationError(
                "Limited weekly recurrence needs a number of weeks",
                field_name="repeat_weeks",
            )
        return WeeklyRecurrence(repeat_weeks=repeat_weeks)
    if kind is RecurrenceType.MONTHLY:
        return MonthlyRecurrence()
    if kind is RecurrenceType.YEARLY:
        return YearlyRecurrence()
    return NoRecurrence()


def collect_validation_errors(event: Event) -> list[tuple[str, str, Any]]:
    """Return ``(field_name, message, value)`` for every rule the event breaks."""
    errors: list[tuple[str, str, Any]] = []

    if not event.title.strip():
        errors.append(("title", "Title is required", event.title))

    if event.end_date is not None and event.end_date < event.anchor_date:
        errors.append(("end_date", "End date must not be before the start date", event.end_date))

    if not event.all_day:
        if event.start_time is None or event.end_time is None:
            errors.append(
                ("start_time", "Start and end time are required unless the event is all-day", None)
            )
        elif event.start_time >= event.end_time:
            errors.append(("end_time", "End time must be after start time", event.end_time))

    return errors


def validate_event(event: Event) -> Event:
    """Check the business rules an Event must satisfy before it is scheduled.

    Args:
        event: Event to check

    Returns:
        The same event, unchanged

    Raises:
        EventValidationError: Listing every broken rule; ``field_name`` names
            the first one
    """
    errors = collect_validation_errors(event)
    if errors:
        field_name, message, value = errors[0]
        logger.debug("Event %s failed validation: %s", event.id, [e[1] for e in errors])
        raise EventValidationError(
            message,
            field_name=field_name,
            field_value=value,
            validation_errors=[e[1] for e in errors],
        )
    return event


class EventBuilder:
    """Validating builder for Event values.

    Example:
        >>> event = (
        ...     EventBuilder("Algebra")
        ...     .on(date(2024, 1, 1))
        ...     .between(time(9, 0), time(10, 0))
        ...     .weekly(repeat_weeks=12)
        ...     .build()
        ... )
    """

    def __init__(self, title: str = "", anchor_date: Optional[date] = None) -> None:
        self._fields: dict[str, Any] = {"title": title}
        self._excluded: set[date] = set()
        if anchor_date is not None:
            self._fields["anchor_date"] = anchor_date

    @classmethod
    def from_event(cls, event: Event) -> "EventBuilder":
        """Start from an existing event, keeping its id (used for edits)."""
        builder = cls(event.title, event.anchor_date)
        builder._fields.update(event.model_dump(exclude={"excluded_dates"}))
        builder._fields["recurrence"] = event.recurrence
        builder._excluded = set(event.excluded_dates)
        return builder

    def with_id(self, event_id: str) -> "EventBuilder":
        self._fields["id"] = str(event_id)
        return self

    def titled(self, title: str) -> "EventBuilder":
        self._fields["title"] = title
        return self

    def on(self, anchor_date: date, end_date: Optional[date] = None) -> "EventBuilder":
        """Set the anchor date and, for multi-day events, the last date."""
        self._fields["anchor_date"] = anchor_date
        self._fields["end_date"] = end_date
        return self

    def between(self, start_time: time, end_time: time) -> "EventBuilder":
        self._fields["start_time"] = start_time
        self._fields["end_time"] = end_time
        self._fields["all_day"] = False
        return self

    def all_day(self) -> "EventBuilder":
        self._fields["all_day"] = True
        return self

    def once(self) -> "EventBuilder":
        self._fields["recurrence"] = NoRecurrence()
        return self

    def weekly(self, repeat_weeks: Optional[int] = None) -> "EventBuilder":
        self._fields["recurrence"] = WeeklyRecurrence(repeat_weeks=repeat_weeks)
        return self

    def monthly(self) -> "EventBuilder":
        self._fields["recurrence"] = MonthlyRecurrence()
        return self

    def yearly(self) -> "EventBuilder":
        self._fields["recurrence"] = YearlyRecurrence()
        return self

    def recurring(
        self,
        recurrence_type: Union[RecurrenceType, str, None],
        repeat_limited: bool = False,
        repeat_weeks: Optional[int] = None,
    ) -> "EventBuilder":
        """Set the recurrence from flat form fields (see ``recurrence_from_fields``)."""
        self._fields["recurrence"] = recurrence_from_fields(
            True, recurrence_type, repeat_limited, repeat_weeks
        )
        return self

    def excluding(self, *days: date) -> "EventBuilder":
        self._excluded.update(days)
        return self

    def styled(self, color: Optional[str] = None, description: str = "") -> "EventBuilder":
        self._fields["color"] = color
        self._fields["description"] = description
        return self

    def build(self) -> Event:
        """Build and validate the event.

        Raises:
            EventValidationError: If the anchor date is missing or any
                business rule is broken
        """
        if self._fields.get("anchor_date") is None:
            raise EventValidationError("Date is required", field_name="anchor_date")

        title = self._fields.get("title") or ""
        event = Event(
            **{**self._fields, "title": title.strip()},
            excluded_dates=frozenset(self._excluded),
        )
        return validate_event(event)
