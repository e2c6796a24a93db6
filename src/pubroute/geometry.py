"""
Coordinate type and coordinate reference system helpers.

Coordinates are (longitude, latitude) in WGS84 degrees, matching GeoJSON and
the map layers that consume them.
"""

from typing import NamedTuple, Tuple
import pyproj

from .constants import LONDON_BOUNDS

# British National Grid, used by the x/y columns of the London GIS datasets
BNG_CRS = "EPSG:27700"
WGS84_CRS = "EPSG:4326"


class Coordinate(NamedTuple):
    """A geographic position with longitude first."""

    longitude: float
    latitude: float

    def to_lat_lng(self) -> Tuple[float, float]:
        """Return (latitude, longitude), the order folium and Google expect."""
        return (self.latitude, self.longitude)


def bng_to_wgs84(x: float, y: float) -> Coordinate:
    """
    Convert a British National Grid easting/northing to WGS84.

    Args:
        x: Easting in meters (EPSG:27700)
        y: Northing in meters (EPSG:27700)

    Returns:
        Coordinate(longitude, latitude) in decimal degrees
    """
    transformer = pyproj.Transformer.from_crs(BNG_CRS, WGS84_CRS, always_xy=True)
    lon, lat = transformer.transform(x, y)
    return Coordinate(lon, lat)


def is_within_london(coord: Coordinate) -> bool:
    """Check whether a coordinate lies inside the London map bounds."""
    return (
        LONDON_BOUNDS["south"] <= coord.latitude <= LONDON_BOUNDS["north"]
        and LONDON_BOUNDS["west"] <= coord.longitude <= LONDON_BOUNDS["east"]
    )
