import pytest

from pubroute.geometry import Coordinate
from pubroute.polyline import DecodeError, encode_polyline
from pubroute.route import (
    BUS,
    TRANSIT,
    WALK,
    Route,
    RouteStep,
    detect_transport_mode,
    parse_duration_seconds,
    route_midpoint_by_duration,
)

# (0, 0) -> (0, 2) along the prime meridian
TWO_DEGREE_LINE = "??_seK?"


def meridian_step(start_lat, end_lat, duration, travel_mode=None, instruction=None):
    """Build a step running north along the prime meridian."""
    return RouteStep(
        encoded_polyline=encode_polyline([(0.0, start_lat), (0.0, end_lat)]),
        static_duration=duration,
        travel_mode=travel_mode,
        instruction=instruction,
    )


# Tests for parse_duration_seconds
@pytest.mark.parametrize(
    "duration, expected",
    [
        ("120s", 120.0),
        ("4.5s", 4.5),
        ("0s", 0.0),
        (" 30s ", 30.0),
        ("75", 75.0),
        (None, 0.0),
        ("", 0.0),
        ("abc", 0.0),
        ("infs", 0.0),
        ("nans", 0.0),
        ("-5s", 0.0),
    ],
)
def test_parse_duration_seconds(duration, expected):
    assert parse_duration_seconds(duration) == expected


# Tests for route_midpoint_by_duration
def test_midpoint_single_step():
    steps = [RouteStep(encoded_polyline=TWO_DEGREE_LINE, static_duration="100s")]
    midpoint = route_midpoint_by_duration(steps)
    assert midpoint is not None
    assert midpoint.longitude == pytest.approx(0.0, abs=1e-6)
    assert midpoint.latitude == pytest.approx(1.0, abs=1e-6)


def test_midpoint_selects_straddling_step():
    steps = [
        meridian_step(0.0, 1.0, "60s"),
        meridian_step(1.0, 2.0, "60s"),
        meridian_step(2.0, 3.0, "60s"),
    ]
    midpoint = route_midpoint_by_duration(steps)
    # Target is 90s: 30s into the second 60s step
    assert midpoint.latitude == pytest.approx(1.5, abs=1e-6)


def test_midpoint_weights_by_duration_not_distance():
    steps = [
        meridian_step(0.0, 1.0, "300s"),  # slow first step
        meridian_step(1.0, 3.0, "100s"),
    ]
    midpoint = route_midpoint_by_duration(steps)
    # Target is 200s: two thirds of the way through the first step
    assert midpoint.latitude == pytest.approx(2.0 / 3.0, abs=1e-6)


def test_midpoint_on_step_boundary_uses_end_of_earlier_step():
    steps = [meridian_step(0.0, 1.0, "50s"), meridian_step(1.0, 2.0, "50s")]
    midpoint = route_midpoint_by_duration(steps)
    assert midpoint.latitude == pytest.approx(1.0, abs=1e-6)


def test_midpoint_skips_zero_duration_steps():
    steps = [
        meridian_step(0.0, 5.0, "0s"),
        meridian_step(5.0, 7.0, "40s"),
    ]
    midpoint = route_midpoint_by_duration(steps)
    assert midpoint.latitude == pytest.approx(6.0, abs=1e-6)


@pytest.mark.parametrize("durations", [["0s", "0s"], [None, None], ["0s", "bad"]])
def test_midpoint_none_without_duration(durations):
    steps = [
        RouteStep(encoded_polyline=TWO_DEGREE_LINE, static_duration=duration)
        for duration in durations
    ]
    assert route_midpoint_by_duration(steps) is None


def test_midpoint_none_for_empty_steps():
    assert route_midpoint_by_duration([]) is None


def test_midpoint_none_when_straddling_step_has_no_polyline():
    steps = [
        meridian_step(0.0, 1.0, "60s"),
        RouteStep(encoded_polyline=None, static_duration="60s"),
        meridian_step(2.0, 3.0, "60s"),
    ]
    assert route_midpoint_by_duration(steps) is None


def test_midpoint_none_when_straddling_step_polyline_is_empty():
    steps = [RouteStep(encoded_polyline="", static_duration="60s")]
    assert route_midpoint_by_duration(steps) is None


def test_midpoint_propagates_decode_errors():
    steps = [RouteStep(encoded_polyline="_p~iF", static_duration="60s")]
    with pytest.raises(DecodeError):
        route_midpoint_by_duration(steps)


# Tests for detect_transport_mode
@pytest.mark.parametrize(
    "step, expected",
    [
        (RouteStep(travel_mode="BICYCLE", instruction="Take the bus"), "BICYCLE"),
        (RouteStep(instruction="Walk to Oxford Circus"), WALK),
        (RouteStep(instruction="Turn left onto Strand"), WALK),
        (RouteStep(instruction="Bus towards Aldwych"), BUS),
        (RouteStep(instruction="Underground towards Brixton"), "TRAIN"),
        (RouteStep(instruction="Metro line 4"), "SUBWAY"),
        (RouteStep(maneuver="DEPART"), WALK),
        (RouteStep(maneuver="RAMP_LEFT"), TRANSIT),
        (RouteStep(), TRANSIT),
    ],
)
def test_detect_transport_mode(step, expected):
    assert detect_transport_mode(step) == expected


# Tests for RouteStep and Route construction
def test_route_step_from_api():
    step = RouteStep.from_api(
        {
            "distanceMeters": 250,
            "staticDuration": "180s",
            "polyline": {"encodedPolyline": TWO_DEGREE_LINE},
            "navigationInstruction": {
                "maneuver": "TURN_LEFT",
                "instructions": "Turn left onto Whitehall",
            },
            "travelMode": "WALK",
        }
    )
    assert step.encoded_polyline == TWO_DEGREE_LINE
    assert step.static_duration == "180s"
    assert step.duration_seconds == 180.0
    assert step.distance_meters == 250
    assert step.travel_mode == "WALK"
    assert step.instruction == "Turn left onto Whitehall"
    assert step.maneuver == "TURN_LEFT"


def test_route_step_from_api_missing_fields():
    step = RouteStep.from_api({})
    assert step.encoded_polyline is None
    assert step.duration_seconds == 0.0
    assert step.instruction is None


def test_route_from_api_concatenates_legs():
    route = Route.from_api(
        {
            "distanceMeters": 1200,
            "duration": "900s",
            "polyline": {"encodedPolyline": TWO_DEGREE_LINE},
            "legs": [
                {"steps": [{"staticDuration": "60s"}, {"staticDuration": "120s"}]},
                {"steps": [{"staticDuration": "30s"}]},
                {},
            ],
        }
    )
    assert len(route) == 3
    assert [step.static_duration for step in route] == ["60s", "120s", "30s"]
    assert route[1].duration_seconds == 120.0
    assert route.distance_meters == 1200
    assert route.duration == "900s"
    assert route.encoded_polyline == TWO_DEGREE_LINE


def test_route_from_api_without_legs():
    route = Route.from_api({})
    assert len(route) == 0
    assert route.midpoint() is None
    assert route.coordinates == []


def test_route_totals():
    steps = [
        RouteStep(static_duration="60s", distance_meters=100),
        RouteStep(static_duration="90s", distance_meters=None),
        RouteStep(static_duration="30s", distance_meters=50),
    ]
    route = Route(steps)
    assert route.total_duration == 180.0
    assert route.total_distance == 150.0

    # The API total wins over the sum of steps
    assert Route(steps, distance_meters=1000).total_distance == 1000.0


def test_route_midpoint_delegates_to_steps():
    route = Route([RouteStep(encoded_polyline=TWO_DEGREE_LINE, static_duration="100s")])
    assert route.midpoint().latitude == pytest.approx(1.0, abs=1e-6)


# Tests for segments, coordinates and transition points
def test_route_segments_skip_steps_without_geometry():
    route = Route(
        [
            meridian_step(0.0, 1.0, "60s", travel_mode="WALK", instruction="Head north"),
            RouteStep(static_duration="10s"),
            meridian_step(1.0, 2.0, "60s", travel_mode="BUS"),
        ]
    )
    segments = route.segments()
    assert len(segments) == 2
    assert segments[0].travel_mode == "WALK"
    assert segments[0].instruction == "Head north"
    assert segments[0].coordinates == [Coordinate(0.0, 0.0), Coordinate(0.0, 1.0)]
    assert segments[1].travel_mode == "BUS"

    # Memoized
    assert route.segments() is segments


def test_route_coordinates_concatenate_segments():
    route = Route([meridian_step(0.0, 1.0, "60s"), meridian_step(1.0, 2.0, "60s")])
    assert route.coordinates == [
        Coordinate(0.0, 0.0),
        Coordinate(0.0, 1.0),
        Coordinate(0.0, 1.0),
        Coordinate(0.0, 2.0),
    ]


def test_route_transition_points():
    route = Route(
        [
            meridian_step(0.0, 1.0, "60s", travel_mode="WALK"),
            meridian_step(1.0, 2.0, "60s", travel_mode="BUS"),
            meridian_step(2.0, 3.0, "60s", travel_mode="BUS"),
            meridian_step(3.0, 4.0, "60s", travel_mode="WALK"),
        ]
    )
    transitions = route.transition_points()
    assert len(transitions) == 2
    assert transitions[0].coordinate == Coordinate(0.0, 1.0)
    assert (transitions[0].from_mode, transitions[0].to_mode) == ("WALK", "BUS")
    assert transitions[1].coordinate == Coordinate(0.0, 3.0)
    assert (transitions[1].from_mode, transitions[1].to_mode) == ("BUS", "WALK")


def test_route_transition_points_single_mode():
    route = Route([meridian_step(0.0, 1.0, "60s", "WALK"), meridian_step(1.0, 2.0, "60s", "WALK")])
    assert route.transition_points() == []


# Tests for get_bbox
def test_get_bbox_without_buffer():
    route = Route([RouteStep(encoded_polyline=encode_polyline([(-0.2, 51.5), (-0.1, 51.6)]))])
    south, west, north, east = route.get_bbox()
    assert south == pytest.approx(51.5)
    assert west == pytest.approx(-0.2)
    assert north == pytest.approx(51.6)
    assert east == pytest.approx(-0.1)


def test_get_bbox_with_buffer():
    route = Route([RouteStep(encoded_polyline=TWO_DEGREE_LINE)])
    south, west, north, east = route.get_bbox(buffer=111000.0)
    assert south == pytest.approx(-1.0)
    assert north == pytest.approx(3.0)
    # Longitude buffer widens slightly away from the equator
    assert west < -1.0
    assert east > 1.0


def test_get_bbox_empty_route_raises():
    with pytest.raises(ValueError, match="no coordinates"):
        Route([]).get_bbox()
