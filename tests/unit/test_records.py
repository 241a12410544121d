"""Tests for schedulebuilder.records (stored/submitted record conversion)."""

import logging
from datetime import date, time

import pytest

from schedulebuilder.exceptions import EventValidationError, RecordDecodeError
from schedulebuilder.models import (
    MonthlyRecurrence,
    NoRecurrence,
    RecurrenceType,
    WeeklyRecurrence,
)
from schedulebuilder.records import (
    event_from_record,
    event_to_record,
    events_from_records,
    format_time,
    parse_date,
    parse_time,
)

pytestmark = pytest.mark.unit


def _record(**overrides):
    record = {
        "id": "evt-1",
        "title": "Algebra",
        "anchorDate": "2024-01-01",
        "startTime": "09:00",
        "endTime": "10:00",
        "allDay": False,
        "recurring": True,
        "recurrenceType": "weekly",
        "repeatLimited": True,
        "repeatWeeks": 12,
        "excludedDates": ["2024-01-08"],
        "color": "#3366ff",
        "description": "Room 101",
    }
    record.update(overrides)
    return record


class TestParsers:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2024-02-29", date(2024, 2, 29)),
            ("2024-01-15T00:00:00.000Z", date(2024, 1, 15)),
            (date(2024, 1, 1), date(2024, 1, 1)),
            ("2023-02-29", None),
            ("", None),
            (None, None),
            (20240101, None),
        ],
    )
    def test_parse_date(self, value, expected):
        assert parse_date(value) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("09:30", time(9, 30)),
            ("23:59:59", time(23, 59)),
            (time(8, 15, 30), time(8, 15)),
            ("25:00", None),
            ("noon", None),
            (None, None),
        ],
    )
    def test_parse_time(self, value, expected):
        assert parse_time(value) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (time(0, 5), "12:05 AM"),
            (time(9, 0), "9:00 AM"),
            (time(12, 0), "12:00 PM"),
            (time(13, 5), "1:05 PM"),
        ],
    )
    def test_format_time(self, value, expected):
        assert format_time(value) == expected


class TestEventFromRecord:
    def test_full_record(self):
        event = event_from_record(_record())
        assert event.id == "evt-1"
        assert event.title == "Algebra"
        assert event.anchor_date == date(2024, 1, 1)
        assert event.start_time == time(9, 0)
        assert event.end_time == time(10, 0)
        assert event.recurrence == WeeklyRecurrence(repeat_weeks=12)
        assert event.excluded_dates == frozenset({date(2024, 1, 8)})
        assert event.color == "#3366ff"
        assert event.description == "Room 101"

    def test_legacy_field_names(self):
        record = {"_id": 42, "course": "Biology", "date": "2024-01-02", "allDay": True}
        event = event_from_record(record)
        assert event.id == "42"
        assert event.title == "Biology"
        assert event.anchor_date == date(2024, 1, 2)
        assert event.all_day

    def test_record_without_id_gets_generated_id(self):
        record = _record()
        del record["id"]
        assert event_from_record(record).id

    def test_non_boolean_recurring_is_not_recurring(self):
        event = event_from_record(_record(recurring="yes"))
        assert isinstance(event.recurrence, NoRecurrence)

    def test_recurrence_type_defaults_to_weekly(self):
        event = event_from_record(_record(recurrenceType=None, repeatLimited=False))
        assert event.recurrence == WeeklyRecurrence()

    def test_monthly_ignores_repeat_limit(self):
        event = event_from_record(_record(recurrenceType="monthly"))
        assert isinstance(event.recurrence, MonthlyRecurrence)

    def test_not_a_mapping_raises(self):
        with pytest.raises(RecordDecodeError):
            event_from_record(["not", "a", "record"])  # type: ignore[arg-type]

    def test_missing_date_raises(self):
        record = _record()
        del record["anchorDate"]
        with pytest.raises(RecordDecodeError) as exc_info:
            event_from_record(record)
        assert exc_info.value.field_name == "anchor_date"


class TestLenientDecoding:
    def test_bad_time_becomes_missing(self, caplog):
        with caplog.at_level(logging.WARNING, logger="schedulebuilder.records"):
            event = event_from_record(_record(startTime="9am"))
        assert event.start_time is None
        assert not event.has_usable_times
        assert "unparseable startTime" in caplog.text

    def test_bad_excluded_date_skipped(self):
        event = event_from_record(_record(excludedDates=["2024-01-08", "soon"]))
        assert event.excluded_dates == frozenset({date(2024, 1, 8)})

    def test_invalid_weekly_limit_widens_to_unlimited(self):
        event = event_from_record(_record(repeatWeeks=0))
        assert event.recurrence == WeeklyRecurrence()

    def test_limited_without_weeks_widens_to_unlimited(self):
        event = event_from_record(_record(repeatWeeks=None))
        assert event.recurrence == WeeklyRecurrence()

    def test_unsupported_type_becomes_non_recurring(self):
        event = event_from_record(_record(recurrenceType="daily"))
        assert event.recurrence_type is RecurrenceType.NONE

    def test_bad_end_date_treated_as_single_day(self):
        event = event_from_record(_record(endDate="later"))
        assert event.end_date is None


class TestStrictDecoding:
    def test_valid_record_passes(self):
        assert event_from_record(_record(), strict=True).title == "Algebra"

    def test_blank_title_rejected(self):
        with pytest.raises(EventValidationError, match="Title is required"):
            event_from_record(_record(title="  "), strict=True)

    def test_inverted_times_rejected(self):
        with pytest.raises(EventValidationError, match="End time must be after start time"):
            event_from_record(_record(startTime="11:00"), strict=True)

    def test_invalid_weekly_limit_rejected(self):
        with pytest.raises(EventValidationError) as exc_info:
            event_from_record(_record(repeatWeeks=0), strict=True)
        assert exc_info.value.field_name == "repeat_weeks"

    def test_non_numeric_weeks_rejected(self):
        with pytest.raises(EventValidationError, match="whole number"):
            event_from_record(_record(repeatWeeks="many"), strict=True)

    def test_bad_end_date_rejected(self):
        with pytest.raises(EventValidationError) as exc_info:
            event_from_record(_record(endDate="later"), strict=True)
        assert exc_info.value.field_name == "end_date"


class TestEventsFromRecords:
    def test_lenient_skips_undecodable_records(self):
        events = events_from_records([_record(), {"title": "No date"}, "junk"])
        assert [e.id for e in events] == ["evt-1"]

    def test_strict_raises_first_failure(self):
        with pytest.raises(RecordDecodeError):
            events_from_records([_record(), {"title": "No date"}], strict=True)


class TestEventToRecord:
    def test_encodes_storage_shape(self):
        record = event_to_record(event_from_record(_record(endDate="2024-01-02")))
        assert record == {
            "id": "evt-1",
            "title": "Algebra",
            "anchorDate": "2024-01-01",
            "endDate": "2024-01-02",
            "startTime": "09:00",
            "endTime": "10:00",
            "allDay": False,
            "recurring": True,
            "recurrenceType": "weekly",
            "repeatLimited": True,
            "repeatWeeks": 12,
            "excludedDates": ["2024-01-08"],
            "color": "#3366ff",
            "description": "Room 101",
        }

    def test_encoded_record_decodes_to_same_event(self):
        event = event_from_record(_record())
        assert event_from_record(event_to_record(event)) == event
