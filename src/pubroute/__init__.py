#!/usr/bin/env python3
"""
pubroute - Find London pubs around the midpoint of a route.

This package decodes Google route geometry, locates the point reached after
half of a route's travel time, and maps the London pubs near it using data
from the London GIS cultural infrastructure dataset.
"""
import importlib.metadata

__version__ = importlib.metadata.version("pubroute")

# Import main classes for public API
from .geometry import Coordinate
from .geometry_utils import (
    EmptyPathError,
    haversine_distance,
    position_along,
    within_threshold,
)
from .polyline import DecodeError, decode_polyline, encode_polyline
from .route import Route, RouteStep, route_midpoint_by_duration

__all__ = [
    "Coordinate",
    "DecodeError",
    "EmptyPathError",
    "Route",
    "RouteStep",
    "decode_polyline",
    "encode_polyline",
    "haversine_distance",
    "position_along",
    "route_midpoint_by_duration",
    "within_threshold",
]
