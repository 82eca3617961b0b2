"""Tests for RFC 3339 parsing and epoch rendering."""

import pytest

from corelight_tsv.errors import TimestampError
from corelight_tsv.models import Timestamp
from corelight_tsv.timestamps import format_epoch, parse_rfc3339


class TestParse:
    def test_utc_z(self):
        assert parse_rfc3339("2021-01-01T00:00:00Z") == Timestamp(sec=1609459200, nsec=0)

    def test_microseconds(self):
        ts = parse_rfc3339("2021-01-01T00:00:00.123456Z")
        assert ts == Timestamp(sec=1609459200, nsec=123_456_000)

    def test_nanoseconds_kept_exactly(self):
        ts = parse_rfc3339("2021-01-01T00:00:00.123456789Z")
        assert ts.nsec == 123_456_789

    def test_single_fraction_digit(self):
        assert parse_rfc3339("2021-01-01T00:00:00.5Z").nsec == 500_000_000

    def test_positive_offset(self):
        ts = parse_rfc3339("2021-01-01T00:00:00+01:00")
        assert ts.sec == 1609459200 - 3600

    def test_negative_offset(self):
        ts = parse_rfc3339("2020-12-31T19:00:00-05:00")
        assert ts.sec == 1609459200

    def test_lowercase_separators(self):
        assert parse_rfc3339("2021-01-01t00:00:00z").sec == 1609459200

    def test_before_epoch(self):
        assert parse_rfc3339("1969-12-31T23:59:59Z") == Timestamp(sec=-1, nsec=0)

    def test_leap_day(self):
        assert parse_rfc3339("2020-02-29T00:00:00Z").sec == 1582934400

    @pytest.mark.parametrize("text", [
        "",
        "2021-01-01",
        "2021-01-01T00:00:00",
        "2021-01-01 00:00:00Z",
        "2021-01-01T00:00Z",
        "2021-1-01T00:00:00Z",
        "2021-01-01T00:00:00.Z",
        "2021-01-01T00:00:00.1234567891Z",
        "2021-01-01T00:00:00+0100",
        "2021-01-01T00:00:00+24:00",
        "2021-01-01T24:00:00Z",
        "2021-01-01T00:60:00Z",
        "2016-12-31T23:59:60Z",
        "2021-02-29T00:00:00Z",
        "2021-00-10T00:00:00Z",
        "0000-01-01T00:00:00Z",
        "2021-01-01T00:00:00Z\n",
        " 2021-01-01T00:00:00Z",
        "1609459200.123",
    ])
    def test_rejected(self, text):
        with pytest.raises(TimestampError):
            parse_rfc3339(text)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_rfc3339("yesterday")


class TestFormatEpoch:
    def test_whole_seconds(self):
        assert format_epoch(Timestamp(sec=1609459200, nsec=0)) == "1609459200.000000"

    def test_fraction(self):
        assert format_epoch(Timestamp(sec=1, nsec=250_000_000)) == "1.250000"

    def test_microsecond_precision(self):
        ts = parse_rfc3339("2021-01-01T00:00:00.123456Z")
        assert format_epoch(ts) == "1609459200.123456"

    def test_zero(self):
        assert format_epoch(Timestamp()) == "0.000000"


def test_unix_nano():
    assert Timestamp(sec=2, nsec=5).unix_nano() == 2_000_000_005


def test_now_is_recent():
    assert Timestamp.now().sec > 1609459200
