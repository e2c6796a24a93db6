#!/usr/bin/env python3
"""
Distance and interpolation utilities for route geometry.
"""

from typing import List, Sequence
import logging
import math

from .geometry import Coordinate

logger = logging.getLogger(__name__)

# Mean Earth radius in meters
EARTH_RADIUS_M = 6371000.0


class EmptyPathError(ValueError):
    """Raised when a path operation needs at least one coordinate."""


def haversine_distance(coord1: Coordinate, coord2: Coordinate) -> float:
    """
    Calculate the great-circle distance between two coordinates.

    Args:
        coord1: First coordinate (longitude, latitude)
        coord2: Second coordinate (longitude, latitude)

    Returns:
        Distance in meters
    """
    lat1 = math.radians(coord1[1])
    lat2 = math.radians(coord2[1])
    dlat = math.radians(coord2[1] - coord1[1])
    dlon = math.radians(coord2[0] - coord1[0])

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    )
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def calculate_cumulative_distances(path: Sequence[Coordinate]) -> List[float]:
    """
    Calculate cumulative along-track distances for a path.

    Args:
        path: Coordinates in path order

    Returns:
        List of cumulative distances in meters, same length as path
    """
    if not path:
        return []

    cumulative_distances = [0.0]
    for i in range(1, len(path)):
        segment_distance = haversine_distance(path[i - 1], path[i])
        cumulative_distances.append(cumulative_distances[-1] + segment_distance)

    return cumulative_distances


def position_along(path: Sequence[Coordinate], position: float) -> Coordinate:
    """
    Get the coordinate at a fractional position along a path.

    The target is found by along-track (haversine) distance; within the segment
    that contains it, longitude and latitude are interpolated linearly.

    Args:
        path: Coordinates in path order
        position: Fraction of the path length, clamped to [0, 1]

    Returns:
        Interpolated Coordinate(longitude, latitude)

    Raises:
        EmptyPathError: If path has no coordinates
    """
    if not path:
        raise EmptyPathError("Path must have at least one coordinate")

    if len(path) == 1:
        return Coordinate(*path[0])

    position = max(0.0, min(1.0, position))

    if position == 0:
        return Coordinate(*path[0])
    if position == 1:
        return Coordinate(*path[-1])

    segment_lengths = [
        haversine_distance(path[i], path[i + 1]) for i in range(len(path) - 1)
    ]
    target_distance = position * sum(segment_lengths)

    accumulated = 0.0
    for i, segment_length in enumerate(segment_lengths):
        if accumulated + segment_length >= target_distance:
            ratio = (
                (target_distance - accumulated) / segment_length
                if segment_length > 0
                else 0.0
            )
            start, end = path[i], path[i + 1]
            return Coordinate(
                start[0] + (end[0] - start[0]) * ratio,
                start[1] + (end[1] - start[1]) * ratio,
            )
        accumulated += segment_length

    # Rounding can leave the target just past the summed segments
    return Coordinate(*path[-1])


def within_threshold(
    center: Coordinate, points: Sequence[Coordinate], threshold_m: float
) -> List[bool]:
    """
    Flag which points lie within a distance of a center coordinate.

    Args:
        center: Reference coordinate (longitude, latitude)
        points: Coordinates to test
        threshold_m: Maximum distance in meters (inclusive)

    Returns:
        One boolean per point, in input order
    """
    return [haversine_distance(center, point) <= threshold_m for point in points]
