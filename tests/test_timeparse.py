import pytest

from vedic_api.errors import UnparseableDateTime, ValidationError
from vedic_api.services import timeparse
from vedic_api.services.timeparse import julian_day, normalize_timezone, parse_local, resolve_birth_moment


def test_julian_day_reference_epochs():
    assert julian_day(2000, 1, 1, 12.0) == 2451545.0
    assert julian_day(1990, 1, 15, 12.0) == 2447907.0
    assert julian_day(1582, 10, 15, 0.0) == 2299160.5


def test_julian_day_is_continuous_across_boundaries():
    # last hour of a month/year is exactly one day before the next midnight + 23h
    assert julian_day(1999, 12, 31, 24.0) == julian_day(2000, 1, 1, 0.0)
    assert julian_day(2024, 2, 29, 0.0) + 1 == julian_day(2024, 3, 1, 0.0)
    assert julian_day(2023, 2, 28, 0.0) + 1 == julian_day(2023, 3, 1, 0.0)


def test_resolve_birth_moment_utc():
    m = resolve_birth_moment("1990-01-15", "12:00:00", "UTC")
    assert m.jd_ut == 2447907.0
    assert m.ut_hour == 12.0


def test_local_zone_is_converted_to_ut():
    m = resolve_birth_moment("2000-01-01", "17:30", "Asia/Kolkata")
    assert m.utc.hour == 12 and m.utc.minute == 0
    assert m.jd_ut == 2451545.0


def test_dst_offset_applies():
    summer = resolve_birth_moment("2021-07-01", "12:00:00", "America/New_York")
    winter = resolve_birth_moment("2021-01-01", "12:00:00", "America/New_York")
    assert summer.utc.hour == 16
    assert winter.utc.hour == 17


@pytest.mark.parametrize(
    "date_str,time_str,expected",
    [
        ("1936-05-08", "07:22:00", (1936, 5, 8, 7, 22)),
        ("1936-05-08", "7:22", (1936, 5, 8, 7, 22)),
        ("1936-5-8", "07:22:00", (1936, 5, 8, 7, 22)),
        ("05/08/1936", "07:22 AM", (1936, 5, 8, 7, 22)),
        ("5/8/1936", "7:22:00 pm", (1936, 5, 8, 19, 22)),
        ("25/12/1936", "12:05 AM", (1936, 12, 25, 0, 5)),
        ("1936-05-08", "07:22PM", (1936, 5, 8, 19, 22)),
    ],
)
def test_flexible_formats(date_str, time_str, expected):
    dt = parse_local(date_str, time_str, "UTC")
    assert (dt.year, dt.month, dt.day, dt.hour, dt.minute) == expected


def test_ambiguous_slash_date_reads_month_first():
    dt = parse_local("01/02/1990", "10:00", "UTC")
    assert (dt.month, dt.day) == (1, 2)


def test_format_order_is_date_major():
    formats = list(timeparse.iter_formats())
    assert formats[0] == "%Y-%m-%d %H:%M:%S"
    assert len(formats) == len(timeparse.DATE_FORMATS) * len(timeparse.TIME_FORMATS)


def test_unparseable_raises():
    with pytest.raises(UnparseableDateTime):
        parse_local("the fifth of May", "noon", "UTC")


def test_iso_with_offset_is_respected():
    dt = parse_local("2000-01-01", "12:00:00+05:30", "UTC")
    assert dt.hour == 6 and dt.minute == 30


def test_timezone_repair():
    assert normalize_timezone("Asia/Kolkata") == ("Asia/Kolkata", None)
    assert normalize_timezone("Kolkata/Asia") == ("Asia/Kolkata", "Asia/Kolkata")
    assert normalize_timezone("New York/America") == ("America/New_York", "America/New_York")
    assert normalize_timezone("Bombay/Asia") == ("Asia/Kolkata", "Asia/Kolkata")
    with pytest.raises(ValidationError):
        normalize_timezone("Mars/Olympus_Mons")
    with pytest.raises(ValidationError):
        normalize_timezone("  ")
