"""Tests for sprint date helpers."""

from datetime import datetime

import pytest

from jira_sprint_bot.dates import (
    days_between,
    ordinal,
    ordinal_suffix,
    parse_tracker_date,
    pretty_date,
)
from jira_sprint_bot.exceptions import BadDateError

EXPECTED_ORDINALS = [
    "1st", "2nd", "3rd", "4th", "5th", "6th", "7th", "8th", "9th", "10th",
    "11th", "12th", "13th", "14th", "15th", "16th", "17th", "18th", "19th",
    "20th", "21st", "22nd", "23rd", "24th", "25th", "26th", "27th", "28th",
    "29th", "30th", "31st",
]


class TestParseTrackerDate:
    """Tests for parse_tracker_date."""

    def test_parses_morning_date(self):
        assert parse_tracker_date("03/Jan/18 10:48 AM") == datetime(2018, 1, 3, 10, 48)

    def test_parses_afternoon_date(self):
        assert parse_tracker_date("17/Jan/18 01:05 PM") == datetime(2018, 1, 17, 13, 5)

    def test_noon_and_midnight(self):
        assert parse_tracker_date("01/Feb/18 12:00 PM") == datetime(2018, 2, 1, 12, 0)
        assert parse_tracker_date("01/Feb/18 12:00 AM") == datetime(2018, 2, 1, 0, 0)

    @pytest.mark.parametrize(
        "value",
        [
            "2018-01-03",
            "3/Jan/18 10:48 AM",
            "03/Jan/2018 10:48 AM",
            "03/Jan/18 10:48",
            "03/jan/18 10:48 AM",
            " 03/Jan/18 10:48 AM",
            "03/Jan/18 13:48 PM",
            "32/Jan/18 10:48 AM",
            "",
            None,
            1514976480,
        ],
    )
    def test_rejects_anything_else(self, value):
        with pytest.raises(BadDateError):
            parse_tracker_date(value)


class TestOrdinals:
    """Tests for ordinal_suffix and ordinal."""

    def test_every_day_of_month(self):
        assert [ordinal(day) for day in range(1, 32)] == EXPECTED_ORDINALS

    @pytest.mark.parametrize("day", [11, 12, 13])
    def test_teens_are_th(self, day):
        assert ordinal_suffix(day) == "th"

    @pytest.mark.parametrize("day", [0, 32, -1])
    def test_rejects_out_of_range(self, day):
        with pytest.raises(BadDateError):
            ordinal_suffix(day)


class TestPrettyDate:
    """Tests for pretty_date."""

    def test_formats_weekday_month_day_year(self):
        assert pretty_date(datetime(2018, 1, 3, 10, 48)) == "Wednesday, January 3rd, 2018"

    def test_formats_teen_day(self):
        assert pretty_date(datetime(2018, 1, 12)) == "Friday, January 12th, 2018"

    def test_formats_twenty_first(self):
        assert pretty_date(datetime(2018, 3, 21)) == "Wednesday, March 21st, 2018"


class TestDaysBetween:
    """Tests for days_between."""

    def test_whole_days(self):
        assert days_between(datetime(2018, 1, 3, 10, 48), datetime(2018, 1, 17, 10, 48)) == 14

    def test_partial_day_is_truncated(self):
        assert days_between(datetime(2018, 1, 3, 12, 0), datetime(2018, 1, 5, 10, 0)) == 1

    def test_negative_is_truncated_toward_zero(self):
        assert days_between(datetime(2018, 1, 5, 12, 0), datetime(2018, 1, 4, 0, 0)) == -1
