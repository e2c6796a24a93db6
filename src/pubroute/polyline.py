#!/usr/bin/env python3
"""
Google encoded polyline decoding and encoding.

The Routes API returns step geometry in Google's polyline format: each point is
stored as a (latitude, longitude) delta from the previous point, scaled by
10**precision, zig-zag encoded and split into 5-bit groups offset by 63.
Decoded coordinates are returned in (longitude, latitude) order.
"""

from typing import List, Sequence, Tuple
import logging

from .geometry import Coordinate

logger = logging.getLogger(__name__)

DEFAULT_PRECISION = 5


class DecodeError(ValueError):
    """Raised when an encoded polyline is malformed."""


def _decode_value(encoded: str, index: int) -> Tuple[int, int]:
    """
    Decode one zig-zag encoded value starting at index.

    Returns:
        Tuple of (signed delta, index of the next unread character)

    Raises:
        DecodeError: If the string ends inside a group or holds an invalid character
    """
    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise DecodeError(
                f"Unexpected end of polyline at position {index} (incomplete value)"
            )
        b = ord(encoded[index]) - 63
        if b < 0 or b > 63:
            raise DecodeError(
                f"Invalid polyline character {encoded[index]!r} at position {index}"
            )
        index += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break

    delta = ~(result >> 1) if (result & 1) else (result >> 1)
    return delta, index


def decode_polyline(
    encoded: str, precision: int = DEFAULT_PRECISION
) -> List[Coordinate]:
    """
    Decode a Google encoded polyline into a list of coordinates.

    Args:
        encoded: Encoded polyline string
        precision: Number of decimal digits the deltas were scaled by
                   (5 for Google, 6 for polyline6/Mapbox)

    Returns:
        List of Coordinate(longitude, latitude) in path order

    Raises:
        DecodeError: If the input is truncated or contains invalid characters
    """
    factor = 10**precision
    coordinates: List[Coordinate] = []
    index = 0
    lat = 0
    lng = 0

    while index < len(encoded):
        dlat, index = _decode_value(encoded, index)
        if index >= len(encoded):
            raise DecodeError(
                f"Polyline ends after a latitude at position {index} (missing longitude)"
            )
        dlng, index = _decode_value(encoded, index)

        lat += dlat
        lng += dlng

        # Polyline stores lat first; we return lng first
        coordinates.append(Coordinate(lng / factor, lat / factor))

    return coordinates


def _encode_value(value: int) -> str:
    """Encode a single signed coordinate delta."""
    value = ~(value << 1) if value < 0 else (value << 1)

    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5

    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode_polyline(
    coordinates: Sequence[Tuple[float, float]], precision: int = DEFAULT_PRECISION
) -> str:
    """
    Encode (longitude, latitude) coordinates into a Google polyline string.

    Args:
        coordinates: Sequence of (longitude, latitude) pairs
        precision: Number of decimal digits to keep

    Returns:
        Encoded polyline string
    """
    factor = 10**precision
    encoded = []
    prev_lat = 0
    prev_lng = 0

    for lng, lat in coordinates:
        lat_int = int(round(lat * factor))
        lng_int = int(round(lng * factor))

        encoded.append(_encode_value(lat_int - prev_lat))
        encoded.append(_encode_value(lng_int - prev_lng))

        prev_lat = lat_int
        prev_lng = lng_int

    return "".join(encoded)
