"""Tests for single, from-date and series edits."""

from datetime import date, datetime, timedelta

import pytest

from multicalendar.calendars import Calendar
from multicalendar.editing import EditScope, coerce_property
from multicalendar.errors import (
    DuplicateEvent,
    InvalidPropertyValue,
    NotFound,
    UnknownProperty,
    ValidationError,
)
from multicalendar.models import EventLocation, EventStatus, Weekday

MWF = {Weekday.MON, Weekday.WED, Weekday.FRI}
MON = datetime(2024, 3, 18, 9, 0)
WED = datetime(2024, 3, 20, 9, 0)
FRI = datetime(2024, 3, 22, 9, 0)


@pytest.fixture
def calendar() -> Calendar:
    return Calendar("work", "America/New_York")


@pytest.fixture
def standup(calendar):
    """Standup on Mon 18th, Wed 20th and Fri 22nd March 2024, 09:00-09:30."""
    return calendar.create_recurring_timed(
        "Standup", MON, MON + timedelta(minutes=30), MWF, count=3
    )


def _get(calendar: Calendar, subject: str, start: datetime):
    return calendar.get_event(subject, start)


# ---------------------------------------------------------------------------
# Property coercion
# ---------------------------------------------------------------------------

class TestCoerceProperty:
    def test_property_names_case_insensitive(self):
        assert coerce_property("Location", "ONLINE") == ("location", EventLocation.ONLINE)
        assert coerce_property("STATUS", "private") == ("status", EventStatus.PRIVATE)

    def test_timestamp_string_parsed(self):
        assert coerce_property("start", "2024-03-20T10:30") == ("start", datetime(2024, 3, 20, 10, 30))

    def test_unparseable_timestamp(self):
        with pytest.raises(InvalidPropertyValue):
            coerce_property("end", "not-a-date")

    def test_invalid_location(self):
        with pytest.raises(InvalidPropertyValue, match="location"):
            coerce_property("location", "moon")

    def test_invalid_status(self):
        with pytest.raises(InvalidPropertyValue, match="status"):
            coerce_property("status", "secret")

    def test_unknown_property(self):
        with pytest.raises(UnknownProperty):
            coerce_property("color", "red")

    def test_blank_subject(self):
        with pytest.raises(ValidationError):
            coerce_property("subject", "  ")


# ---------------------------------------------------------------------------
# edit_single
# ---------------------------------------------------------------------------

class TestEditSingle:
    def test_single_event_description(self, calendar):
        calendar.create_single_timed("Lunch", datetime(2024, 3, 20, 12), datetime(2024, 3, 20, 13))
        calendar.edit_single("Lunch", datetime(2024, 3, 20, 12), "description", "With Sam")
        assert _get(calendar, "Lunch", datetime(2024, 3, 20, 12)).description == "With Sam"

    def test_missing_anchor(self, calendar):
        with pytest.raises(NotFound):
            calendar.edit_single("Ghost", datetime(2024, 3, 20, 12), "subject", "Boo")

    def test_end_must_match_when_given(self, calendar):
        calendar.create_single_timed("Lunch", datetime(2024, 3, 20, 12), datetime(2024, 3, 20, 13))
        with pytest.raises(NotFound):
            calendar.edit_single(
                "Lunch", datetime(2024, 3, 20, 12), "subject", "Brunch",
                end=datetime(2024, 3, 20, 14),
            )
        calendar.edit_single(
            "Lunch", datetime(2024, 3, 20, 12), "subject", "Brunch",
            end=datetime(2024, 3, 20, 13),
        )
        assert calendar.find_event("Brunch", datetime(2024, 3, 20, 12)) is not None

    def test_series_member_keeps_series_id(self, calendar, standup):
        series_id = standup[0].series_id
        calendar.edit_single("Standup", WED, "subject", "Sync")
        edited = _get(calendar, "Sync", WED)
        assert edited.series_id == series_id
        assert _get(calendar, "Standup", MON).series_id == series_id
        assert len(calendar.series(series_id)) == 3

    def test_end_before_start_rejected(self, calendar):
        calendar.create_single_timed("Lunch", datetime(2024, 3, 20, 12), datetime(2024, 3, 20, 13))
        with pytest.raises(ValidationError):
            calendar.edit_single("Lunch", datetime(2024, 3, 20, 12), "end", "2024-03-20T11:00")
        assert _get(calendar, "Lunch", datetime(2024, 3, 20, 12)).end == datetime(2024, 3, 20, 13)

    def test_start_edit_rekeys_event(self, calendar):
        calendar.create_single_timed("Lunch", datetime(2024, 3, 20, 12), datetime(2024, 3, 20, 13))
        calendar.edit_single("Lunch", datetime(2024, 3, 20, 12), "start", "2024-03-20T12:30")
        assert calendar.find_event("Lunch", datetime(2024, 3, 20, 12)) is None
        assert _get(calendar, "Lunch", datetime(2024, 3, 20, 12, 30)).end == datetime(2024, 3, 20, 13)

    def test_edit_into_existing_identity_rejected(self, calendar):
        calendar.create_single_timed("A", datetime(2024, 3, 20, 12), datetime(2024, 3, 20, 13))
        calendar.create_single_timed("B", datetime(2024, 3, 20, 12), datetime(2024, 3, 20, 13))
        with pytest.raises(DuplicateEvent):
            calendar.edit_single("A", datetime(2024, 3, 20, 12), "subject", "B")
        assert calendar.find_event("A", datetime(2024, 3, 20, 12)) is not None

    def test_moving_all_day_event_clears_flag(self, calendar):
        event = calendar.create_single_all_day("Offsite", date(2024, 3, 21))
        calendar.edit_single("Offsite", event.start, "end", "2024-03-21T12:00")
        assert _get(calendar, "Offsite", event.start).all_day is False


# ---------------------------------------------------------------------------
# edit_from_date
# ---------------------------------------------------------------------------

class TestEditFromDate:
    def test_split_series(self, calendar, standup):
        original = standup[0].series_id
        calendar.edit_from_date("Standup", WED, "subject", "X")

        e1 = _get(calendar, "Standup", MON)
        e2 = _get(calendar, "X", WED)
        e3 = _get(calendar, "X", FRI)
        assert e1.series_id == original
        assert e2.series_id == e3.series_id
        assert e2.series_id != original
        assert calendar.series(original) == [e1]

    def test_split_at_first_member_moves_everything(self, calendar, standup):
        original = standup[0].series_id
        edited = calendar.edit_from_date("Standup", MON, "status", "private")
        assert len(edited) == 3
        assert calendar.series(original) == []
        assert {e.status for e in calendar.all_events()} == {EventStatus.PRIVATE}

    def test_repeated_split(self, calendar, standup):
        calendar.edit_from_date("Standup", WED, "description", "moved")
        middle = _get(calendar, "Standup", WED).series_id
        calendar.edit_from_date("Standup", FRI, "description", "moved again")
        last = _get(calendar, "Standup", FRI).series_id
        ids = {_get(calendar, "Standup", d).series_id for d in (MON, WED, FRI)}
        assert len(ids) == 3
        assert calendar.series(middle) == [_get(calendar, "Standup", WED)]
        assert calendar.series(last)[0].description == "moved again"

    def test_non_series_event_behaves_like_single(self, calendar):
        calendar.create_single_timed("Lunch", datetime(2024, 3, 20, 12), datetime(2024, 3, 20, 13))
        edited = calendar.edit_from_date("Lunch", datetime(2024, 3, 20, 12), "location", "physical")
        assert edited[0].location is EventLocation.PHYSICAL
        assert edited[0].series_id is None

    def test_partition_is_by_date(self, calendar, standup):
        # Friday's occurrence moved to early Wednesday morning: same date as
        # the anchor but an earlier time, so it belongs to the tail.
        series_id = standup[0].series_id
        calendar.edit_single("Standup", FRI, "start", "2024-03-20T07:00")
        calendar.edit_from_date("Standup", WED, "description", "wed+")
        moved = _get(calendar, "Standup", datetime(2024, 3, 20, 7, 0))
        anchor = _get(calendar, "Standup", WED)
        assert moved.description == "wed+"
        assert moved.series_id == anchor.series_id != series_id
        assert _get(calendar, "Standup", MON).series_id == series_id

    def test_time_edit_shifts_whole_tail(self, calendar, standup):
        calendar.edit_from_date("Standup", WED, "start", "2024-03-20T08:45")
        assert _get(calendar, "Standup", MON).start == MON
        assert calendar.find_event("Standup", datetime(2024, 3, 20, 8, 45)) is not None
        assert calendar.find_event("Standup", datetime(2024, 3, 22, 8, 45)) is not None

    def test_failed_split_leaves_series_intact(self, calendar, standup):
        series_id = standup[0].series_id
        with pytest.raises(ValidationError):
            calendar.edit_from_date("Standup", WED, "end", "2024-03-20T08:00")
        assert len(calendar.series(series_id)) == 3
        assert calendar.series_ids.next_id == series_id + 1


# ---------------------------------------------------------------------------
# edit_series
# ---------------------------------------------------------------------------

class TestEditSeries:
    def test_location_for_all_members(self, calendar, standup):
        calendar.edit_series("Standup", WED, "location", "ONLINE")
        assert [e.location for e in calendar.all_events()] == [EventLocation.ONLINE] * 3

    def test_series_id_unchanged(self, calendar, standup):
        series_id = standup[0].series_id
        calendar.edit_series("Standup", FRI, "subject", "Daily")
        assert [e.subject for e in calendar.series(series_id)] == ["Daily"] * 3

    def test_includes_members_before_anchor(self, calendar, standup):
        calendar.edit_series("Standup", FRI, "description", "all")
        assert _get(calendar, "Standup", MON).description == "all"

    def test_non_series_event_behaves_like_single(self, calendar, standup):
        calendar.create_single_timed("Lunch", datetime(2024, 3, 20, 12), datetime(2024, 3, 20, 13))
        calendar.edit_series("Lunch", datetime(2024, 3, 20, 12), "subject", "Dinner")
        assert [e.subject for e in calendar.events_on_date(date(2024, 3, 20))] == ["Standup", "Dinner"]

    def test_end_edit_shifts_every_member(self, calendar, standup):
        calendar.edit_series("Standup", MON, "end", "2024-03-18T10:00")
        assert all(e.duration == timedelta(hours=1) for e in calendar.all_events())

    def test_scope_enum_dispatch(self, calendar, standup):
        calendar._editor.edit(EditScope.SERIES, "Standup", MON, "status", "public")
        assert {e.status for e in calendar.all_events()} == {EventStatus.PUBLIC}
