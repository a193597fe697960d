"""Tests for coursecal.utils.dates."""

import datetime

import pytest

from coursecal.utils import combine, iter_dates, parse_date, parse_datetime, parse_time, weekday_name


class TestParseDate:
    def test_iso_string(self):
        assert parse_date("2025-04-14") == datetime.date(2025, 4, 14)

    def test_datetime_string_keeps_date_part(self):
        assert parse_date("2025-04-14T23:30:00Z") == datetime.date(2025, 4, 14)

    def test_date_and_datetime_objects(self):
        assert parse_date(datetime.date(2025, 4, 14)) == datetime.date(2025, 4, 14)
        assert parse_date(datetime.datetime(2025, 4, 14, 23, 59)) == datetime.date(2025, 4, 14)

    @pytest.mark.parametrize("value", [None, "", "14/04/2025", "2025-02-30", 20250414])
    def test_invalid(self, value):
        assert parse_date(value) is None


class TestParseTime:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("09:00", datetime.time(9, 0)),
            ("23:59", datetime.time(23, 59)),
            ("09:00:30", datetime.time(9, 0, 30)),
            (" 10:15 ", datetime.time(10, 15)),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_time(value) == expected

    @pytest.mark.parametrize("value", [None, "", "9:00", "9am", "24:00", "12:60", "noon"])
    def test_invalid(self, value):
        assert parse_time(value) is None


def test_parse_datetime_with_zulu():
    assert parse_datetime("2025-04-14T09:00:00Z") == datetime.datetime(
        2025, 4, 14, 9, 0, tzinfo=datetime.timezone.utc
    )


def test_parse_datetime_invalid():
    assert parse_datetime("yesterday") is None
    assert parse_datetime(None) is None


def test_combine():
    assert combine("2025-04-14", "09:30") == datetime.datetime(2025, 4, 14, 9, 30)
    assert combine("2025-04-14", "9.30") is None
    assert combine(None, "09:30") is None


def test_iter_dates_inclusive_across_month_end():
    days = list(iter_dates(datetime.date(2025, 1, 30), datetime.date(2025, 2, 2)))
    assert days == [
        datetime.date(2025, 1, 30),
        datetime.date(2025, 1, 31),
        datetime.date(2025, 2, 1),
        datetime.date(2025, 2, 2),
    ]


def test_iter_dates_across_dst_change():
    # EU clocks change on 2025-03-30
    days = list(iter_dates(datetime.date(2025, 3, 28), datetime.date(2025, 4, 2)))
    assert len(days) == 6
    assert len(set(days)) == 6


def test_iter_dates_empty_when_reversed():
    assert list(iter_dates(datetime.date(2025, 1, 2), datetime.date(2025, 1, 1))) == []


@pytest.mark.parametrize(
    "day,expected",
    [
        (datetime.date(2025, 4, 13), "Sun"),
        (datetime.date(2025, 4, 14), "Mon"),
        (datetime.date(2025, 4, 19), "Sat"),
    ],
)
def test_weekday_name(day, expected):
    assert weekday_name(day) == expected
