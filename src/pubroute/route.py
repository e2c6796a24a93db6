#!/usr/bin/env python3
"""
Route data model and duration-weighted midpoint resolution.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple
import logging
import math
from math import cos, radians

from .geometry import Coordinate
from .geometry_utils import position_along
from .polyline import decode_polyline

logger = logging.getLogger(__name__)

WALK = "WALK"
BUS = "BUS"
TRAIN = "TRAIN"
SUBWAY = "SUBWAY"
TRANSIT = "TRANSIT"

# Maneuvers that only occur on foot in Routes API transit/walking responses
WALKING_MANEUVERS = {"DEPART", "TURN_LEFT", "TURN_RIGHT", "STRAIGHT"}


@dataclass
class RouteStep:
    """One step of a route leg, as returned by the Routes API."""

    encoded_polyline: Optional[str] = None
    static_duration: Optional[str] = None
    distance_meters: Optional[int] = None
    travel_mode: Optional[str] = None
    instruction: Optional[str] = None
    maneuver: Optional[str] = None

    @classmethod
    def from_api(cls, step: Dict[str, Any]) -> "RouteStep":
        """Build a RouteStep from a Routes API step object."""
        navigation = step.get("navigationInstruction") or {}
        return cls(
            encoded_polyline=(step.get("polyline") or {}).get("encodedPolyline"),
            static_duration=step.get("staticDuration"),
            distance_meters=step.get("distanceMeters"),
            travel_mode=step.get("travelMode"),
            instruction=navigation.get("instructions"),
            maneuver=navigation.get("maneuver"),
        )

    @property
    def duration_seconds(self) -> float:
        return parse_duration_seconds(self.static_duration)


class RouteSegment(NamedTuple):
    """Decoded geometry of one step together with its transport mode."""

    coordinates: List[Coordinate]
    travel_mode: str
    instruction: Optional[str]


class TransitionPoint(NamedTuple):
    """Point where the route changes transport mode."""

    coordinate: Coordinate
    from_mode: str
    to_mode: str


def parse_duration_seconds(duration: Optional[str]) -> float:
    """
    Parse a Routes API duration string such as "120s" or "4.5s".

    Missing, unparseable, negative and non-finite values count as zero.
    """
    if not duration:
        return 0.0

    value = duration.strip()
    if value.endswith("s"):
        value = value[:-1]

    try:
        seconds = float(value)
    except ValueError:
        logger.debug(f"Ignoring unparseable duration {duration!r}")
        return 0.0

    if not math.isfinite(seconds) or seconds < 0:
        return 0.0
    return seconds


def route_midpoint_by_duration(steps: Sequence[RouteStep]) -> Optional[Coordinate]:
    """
    Find the coordinate reached after half of the route's total duration.

    The step whose time span contains the temporal midpoint is located, and the
    position within that step is interpolated along its decoded polyline in
    proportion to the time spent in the step.

    Args:
        steps: Route steps in travel order

    Returns:
        Coordinate(longitude, latitude) at the temporal midpoint, or None when
        the route has no duration or the relevant step has no geometry
    """
    if not steps:
        return None

    step_durations = [step.duration_seconds for step in steps]
    total_duration = sum(step_durations)

    if total_duration == 0:
        return None

    target_time = total_duration / 2
    accumulated_time = 0.0

    for step, step_duration in zip(steps, step_durations):
        if accumulated_time + step_duration >= target_time:
            if not step.encoded_polyline:
                return None

            path = decode_polyline(step.encoded_polyline)
            if not path:
                return None

            position_in_step = (
                (target_time - accumulated_time) / step_duration
                if step_duration > 0
                else 0.5
            )
            return position_along(path, position_in_step)

        accumulated_time += step_duration

    # Only reached when rounding keeps the accumulated time below the target
    last_step = steps[-1]
    if last_step.encoded_polyline:
        path = decode_polyline(last_step.encoded_polyline)
        if path:
            return position_along(path, 0.5)

    return None


def detect_transport_mode(step: RouteStep) -> str:
    """
    Work out the transport mode of a step.

    Uses the explicit travel mode when present, then keywords in the navigation
    instruction, then the maneuver.
    """
    if step.travel_mode:
        return step.travel_mode

    instruction = (step.instruction or "").lower()

    if "walk" in instruction or "turn" in instruction:
        return WALK
    if "bus" in instruction:
        return BUS
    if any(word in instruction for word in ("train", "rail", "tube", "underground")):
        return TRAIN
    if "subway" in instruction or "metro" in instruction:
        return SUBWAY

    if step.maneuver in WALKING_MANEUVERS:
        return WALK

    return TRANSIT


class Route:
    """Represents one computed route as an ordered list of steps."""

    def __init__(
        self,
        steps: List[RouteStep],
        distance_meters: Optional[int] = None,
        duration: Optional[str] = None,
        encoded_polyline: Optional[str] = None,
    ):
        """Initializes a Route object.

        Args:
            steps: RouteStep objects in travel order.
            distance_meters: Route distance reported by the API, if any.
            duration: Route duration string reported by the API, if any.
            encoded_polyline: Overview polyline of the whole route, if any.
        """
        self.steps = steps
        self.distance_meters = distance_meters
        self.duration = duration
        self.encoded_polyline = encoded_polyline
        self._segments: Optional[List[RouteSegment]] = None

    @classmethod
    def from_api(cls, route: Dict[str, Any]) -> "Route":
        """
        Build a Route from a Routes API route object.

        Steps of all legs are concatenated in order. Requests made by this
        package have no intermediate waypoints, so there is a single leg.
        """
        steps = [
            RouteStep.from_api(step)
            for leg in route.get("legs") or []
            for step in leg.get("steps") or []
        ]
        return cls(
            steps=steps,
            distance_meters=route.get("distanceMeters"),
            duration=route.get("duration"),
            encoded_polyline=(route.get("polyline") or {}).get("encodedPolyline"),
        )

    def __len__(self) -> int:
        return len(self.steps)

    def __getitem__(self, index: int) -> RouteStep:
        return self.steps[index]

    def __iter__(self) -> Iterator[RouteStep]:
        return iter(self.steps)

    @property
    def total_duration(self) -> float:
        """Sum of step durations in seconds."""
        return sum(step.duration_seconds for step in self.steps)

    @property
    def total_distance(self) -> float:
        """Route distance in meters, from the API total or the step distances."""
        if self.distance_meters is not None:
            return float(self.distance_meters)
        return float(sum(step.distance_meters or 0 for step in self.steps))

    def midpoint(self) -> Optional[Coordinate]:
        """Coordinate at the temporal midpoint of the route, or None."""
        return route_midpoint_by_duration(self.steps)

    def segments(self) -> List[RouteSegment]:
        """
        Decode each step into a segment, skipping steps without geometry.

        The result is memoized.
        """
        if self._segments is None:
            segments = []
            for step in self.steps:
                if not step.encoded_polyline:
                    continue
                coordinates = decode_polyline(step.encoded_polyline)
                if not coordinates:
                    continue
                segments.append(
                    RouteSegment(
                        coordinates=coordinates,
                        travel_mode=detect_transport_mode(step),
                        instruction=step.instruction,
                    )
                )
            self._segments = segments
        return self._segments

    @property
    def coordinates(self) -> List[Coordinate]:
        """All step coordinates in travel order."""
        return [coord for segment in self.segments() for coord in segment.coordinates]

    def transition_points(self) -> List[TransitionPoint]:
        """Points where one step's transport mode differs from the next step's."""
        transitions = []
        for index, step in enumerate(self.steps[:-1]):
            if not step.encoded_polyline:
                continue
            coordinates = decode_polyline(step.encoded_polyline)
            if not coordinates:
                continue

            from_mode = detect_transport_mode(step)
            to_mode = detect_transport_mode(self.steps[index + 1])
            if from_mode != to_mode:
                transitions.append(
                    TransitionPoint(
                        coordinate=coordinates[-1], from_mode=from_mode, to_mode=to_mode
                    )
                )
        return transitions

    def get_bbox(self, buffer: float = 0.0) -> Tuple[float, float, float, float]:
        """
        Get the bounding box of the route, optionally with a buffer.

        Args:
            buffer: Buffer distance in meters (default: 0.0)

        Returns:
            Tuple of (south, west, north, east) in decimal degrees

        Raises:
            ValueError: If the route has no coordinates
        """
        coordinates = self.coordinates
        if not coordinates:
            raise ValueError("Route has no coordinates")

        latitudes = [coord.latitude for coord in coordinates]
        longitudes = [coord.longitude for coord in coordinates]
        min_lat, max_lat = min(latitudes), max(latitudes)
        min_lon, max_lon = min(longitudes), max(longitudes)

        # 1 degree latitude is about 111 km; longitude shrinks with latitude
        avg_lat = (min_lat + max_lat) / 2
        lat_buffer = buffer / 111000.0
        lon_buffer = buffer / (111000.0 * abs(cos(radians(avg_lat))))

        south = max(-90.0, min_lat - lat_buffer)
        north = min(90.0, max_lat + lat_buffer)
        west = max(-180.0, min_lon - lon_buffer)
        east = min(180.0, max_lon + lon_buffer)

        logger.debug(
            f"Route bounding box: ({south:.4f}, {west:.4f}, {north:.4f}, {east:.4f}) with {buffer}m buffer"
        )
        return (south, west, north, east)
