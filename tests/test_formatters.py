import pytest

from pubroute.formatters import format_address, format_distance, format_duration


def test_format_address_skips_empty_parts():
    assert format_address("1 High Street", None, "", "SE1 9AA") == "1 High Street, SE1 9AA"


def test_format_address_all_empty():
    assert format_address(None, "") == ""


@pytest.mark.parametrize(
    "meters, expected",
    [
        (0, "0m"),
        (42.4, "42m"),
        (999, "999m"),
        (1000, "1.0km"),
        (1234, "1.2km"),
        (15750, "15.8km"),
    ],
)
def test_format_distance(meters, expected):
    assert format_distance(meters) == expected


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "0 min"),
        (89, "1 min"),
        (1500, "25 min"),
        (3600, "1 h 0 min"),
        (5400, "1 h 30 min"),
        (7260, "2 h 1 min"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
