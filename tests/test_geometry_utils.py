import pytest

from pubroute.geometry import Coordinate, bng_to_wgs84, is_within_london
from pubroute.geometry_utils import (
    EmptyPathError,
    calculate_cumulative_distances,
    haversine_distance,
    position_along,
    within_threshold,
)

LONDON = Coordinate(longitude=-0.1278, latitude=51.5074)
PARIS = Coordinate(longitude=2.3522, latitude=48.8566)


def test_haversine_distance_known_values():
    # London to Paris is about 343.5 km
    assert haversine_distance(LONDON, PARIS) == pytest.approx(343500, abs=1000)


def test_haversine_distance_zero_distance():
    assert haversine_distance(LONDON, LONDON) == 0.0


def test_haversine_distance_short_distance():
    # One thousandth of a degree of latitude is about 111 m
    a = Coordinate(longitude=-0.1, latitude=51.5)
    b = Coordinate(longitude=-0.1, latitude=51.501)
    assert haversine_distance(a, b) == pytest.approx(111.19, abs=0.05)


def test_haversine_distance_accepts_plain_tuples():
    assert haversine_distance((0.0, 0.0), (0.0, 1.0)) == pytest.approx(111195, abs=1)


# Tests for calculate_cumulative_distances
def test_calculate_cumulative_distances_simple_path():
    path = [Coordinate(0.0, 0.0), Coordinate(1.0, 0.0), Coordinate(2.0, 0.0)]
    distances = calculate_cumulative_distances(path)
    assert len(distances) == len(path)
    assert distances[0] == 0.0
    assert distances[1] == pytest.approx(haversine_distance(path[0], path[1]))
    assert distances[2] == pytest.approx(2 * haversine_distance(path[0], path[1]))


def test_calculate_cumulative_distances_empty_path():
    assert calculate_cumulative_distances([]) == []


def test_calculate_cumulative_distances_single_point():
    assert calculate_cumulative_distances([LONDON]) == [0.0]


# Tests for position_along
def test_position_along_empty_path_raises():
    with pytest.raises(EmptyPathError):
        position_along([], 0.5)


@pytest.mark.parametrize("t", [-1.0, 0.0, 0.3, 1.0, 2.0])
def test_position_along_single_point(t):
    assert position_along([LONDON], t) == LONDON


def test_position_along_endpoints():
    path = [Coordinate(0.0, 0.0), Coordinate(0.0, 1.0), Coordinate(0.5, 1.5)]
    assert position_along(path, 0) == path[0]
    assert position_along(path, 1) == path[-1]


def test_position_along_clamps_out_of_range():
    path = [Coordinate(0.0, 0.0), Coordinate(0.0, 2.0)]
    assert position_along(path, -0.5) == path[0]
    assert position_along(path, 1.5) == path[-1]


def test_position_along_straight_line_midpoint():
    path = [Coordinate(0.0, 0.0), Coordinate(0.0, 2.0)]
    mid = position_along(path, 0.5)
    assert mid.longitude == pytest.approx(0.0)
    assert mid.latitude == pytest.approx(1.0)


def test_position_along_multi_segment():
    # Segments of 1 and 2 degrees; half the length falls a quarter into the second
    path = [Coordinate(0.0, 0.0), Coordinate(0.0, 1.0), Coordinate(0.0, 3.0)]
    point = position_along(path, 0.5)
    assert point.longitude == pytest.approx(0.0)
    assert point.latitude == pytest.approx(1.5)


def test_position_along_zero_length_segment():
    path = [Coordinate(0.0, 0.0), Coordinate(0.0, 0.0), Coordinate(0.0, 2.0)]
    point = position_along(path, 0.5)
    assert point.latitude == pytest.approx(1.0)


def test_position_along_all_coincident_points_snaps_to_start():
    path = [LONDON, LONDON, LONDON]
    assert position_along(path, 0.5) == LONDON


# Tests for within_threshold
def test_within_threshold_flags_points():
    near = Coordinate(-0.1278, 51.5080)  # about 67 m north
    far = Coordinate(-0.1000, 51.5200)  # about 2.4 km away
    assert within_threshold(LONDON, [near, far, LONDON], 100) == [True, False, True]


def test_within_threshold_empty_points():
    assert within_threshold(LONDON, [], 100) == []


def test_within_threshold_zero_radius_includes_center():
    assert within_threshold(LONDON, [LONDON, PARIS], 0) == [True, False]


# CRS helpers
def test_bng_to_wgs84_central_london():
    # TQ 30000 80000 lies just south of the Strand
    coord = bng_to_wgs84(530000, 180000)
    assert coord.longitude == pytest.approx(-0.128, abs=0.02)
    assert coord.latitude == pytest.approx(51.505, abs=0.02)


def test_is_within_london():
    assert is_within_london(LONDON)
    assert not is_within_london(PARIS)


def test_coordinate_to_lat_lng():
    assert LONDON.to_lat_lng() == (51.5074, -0.1278)
