#!/usr/bin/env python3
"""
Pub Route Tool
This script computes a route between two points in London, finds the point
reached after half of the travel time, and generates an interactive HTML map
of the route with the pubs near that midpoint highlighted.

Requirements:
    pip install requests pyproj folium

"""

from typing import List, Optional, Tuple
import webbrowser
import argparse
import json
import logging
import sys
import os

from . import __version__
from . import visualization
from .config import PubRouteConfig
from .constants import API_KEY_ENV_VAR, DEFAULT_API_TIMEOUT, LONDON_BOROUGHS
from .file_utils import generate_output_filename
from .formatters import format_address, format_distance, format_duration
from .geometry import Coordinate, is_within_london
from .geometry_utils import haversine_distance, within_threshold
from .london_gis import (
    LondonGISError,
    Pub,
    fetch_all_pubs,
    fetch_pubs_by_borough,
    pubs_to_feature_collection,
)
from .metrics import collect_metrics, log_metrics
from .polyline import DecodeError
from .routes_api import (
    MODE_TO_TRAVEL_MODE,
    RouteRequestParams,
    RoutesAPIError,
    compute_routes,
)

# Configure logging
logger = logging.getLogger("pubroute")


def parse_lat_lng(value: str) -> Coordinate:
    """
    Parse a "lat,lng" command-line argument.

    Returns:
        Coordinate(longitude, latitude)

    Raises:
        argparse.ArgumentTypeError: If the value is not a valid coordinate pair
    """
    parts = value.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(
            f"Expected 'lat,lng' but got {value!r}"
        )
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid coordinates: {value!r}")

    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        raise argparse.ArgumentTypeError(f"Coordinates out of range: {value!r}")
    return Coordinate(lng, lat)


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Find London pubs around the midpoint of a route",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "origin",
        type=parse_lat_lng,
        nargs="?",
        help="Route start as 'lat,lng'",
    )
    parser.add_argument(
        "destination",
        type=parse_lat_lng,
        nargs="?",
        help="Route end as 'lat,lng'",
    )
    parser.add_argument(
        "--mode",
        type=str,
        default="walking",
        choices=sorted(MODE_TO_TRAVEL_MODE),
        help="Travel mode (default: walking)",
    )
    parser.add_argument(
        "--radius",
        type=float,
        default=PubRouteConfig.radius,
        help="Search radius around the route midpoint in meters (default: 500)",
    )
    parser.add_argument(
        "--borough",
        type=str,
        default=None,
        choices=LONDON_BOROUGHS,
        metavar="BOROUGH",
        help="Only load pubs from this London borough",
    )
    parser.add_argument(
        "--include-closed",
        action="store_true",
        help="Also show pubs marked as closed",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output HTML map file (default: auto-generated)",
    )
    parser.add_argument(
        "--geojson",
        type=str,
        default=None,
        help="Also write the pubs near the midpoint to this GeoJSON file",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=os.environ.get(API_KEY_ENV_VAR),
        help=f"Google Maps API key (default: ${API_KEY_ENV_VAR})",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_API_TIMEOUT,
        help=f"HTTP request timeout in seconds (default: {DEFAULT_API_TIMEOUT})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument(
        "--no-open",
        action="store_true",
        help="Don't automatically open the HTML file in browser",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Output structured metrics after processing",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"pubroute {__version__}",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> PubRouteConfig:
    return PubRouteConfig(
        radius=args.radius,
        include_closed=args.include_closed,
        timeout=args.timeout,
        log_level=args.log_level,
        metrics=args.metrics,
    )


def determine_output_filename(output_arg: Optional[str], mode: str) -> str:
    """
    Determine the output filename to use.

    Args:
        output_arg: Value from --output argument (None if not specified)
        mode: Travel mode, used in the generated name

    Returns:
        Output filename to use

    Raises:
        RuntimeError: If auto-generation fails
        ValueError: If constructed filename would be illegal
    """
    if output_arg is not None:
        return output_arg

    try:
        return generate_output_filename(f"pub route {mode}")
    except (RuntimeError, ValueError) as e:
        logger.error(f"Failed to generate output filename: {e}")
        raise


def open_file_in_browser(filename: str) -> None:
    """
    Open the specified file in the default browser.

    Args:
        filename: Path to the file to open
    """
    abs_path = os.path.abspath(filename)
    try:
        webbrowser.open(f"file://{abs_path}")
        logger.debug(f"Opening {abs_path} in your default browser...")
    except webbrowser.Error as e:
        logger.warning(f"Could not automatically open browser: {e}")
        logger.warning(f"Please manually open {abs_path}")


def setup_logging(args: argparse.Namespace) -> None:
    """Setup logging configuration."""
    level = getattr(logging, args.log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure the root logger so all modules inherit the configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Suppress overly verbose third-party logging
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def load_pubs(config: PubRouteConfig, borough: Optional[str]) -> List[Pub]:
    """
    Load pubs for the map.

    A failure to reach the pubs service is logged and yields no pubs, so the
    route can still be drawn.
    """
    try:
        if borough:
            pubs = fetch_pubs_by_borough(borough, timeout=config.timeout)
        else:
            pubs = fetch_all_pubs(timeout=config.timeout)
    except LondonGISError as e:
        logger.warning(f"Failed to fetch pub data: {e.message}")
        return []

    if not config.include_closed:
        pubs = [pub for pub in pubs if pub.is_open]
    return pubs


def find_nearby_pubs(
    pubs: List[Pub], midpoint: Optional[Coordinate], radius: float
) -> Tuple[List[bool], Optional[List[float]]]:
    """
    Flag the pubs within radius of the midpoint.

    Returns:
        Tuple of (nearby flags, distances from the midpoint); with no midpoint
        every flag is False and distances is None
    """
    if midpoint is None:
        return [False] * len(pubs), None

    coordinates = [pub.coordinate for pub in pubs]
    nearby = within_threshold(midpoint, coordinates, radius)
    distances = [haversine_distance(midpoint, coord) for coord in coordinates]
    return nearby, distances


def log_nearby_pubs(
    pubs: List[Pub], nearby: List[bool], distances: Optional[List[float]]
) -> None:
    """
    Print the pubs near the route midpoint, nearest first.

    Args:
        pubs: All loaded pubs
        nearby: One flag per pub
        distances: Distance of each pub from the midpoint, or None
    """
    if distances is None:
        print("Route midpoint unavailable; no nearby pubs")
        return

    found = sorted(
        (distance, index)
        for index, (is_nearby, distance) in enumerate(zip(nearby, distances))
        if is_nearby
    )

    if not found:
        print("No pubs found near the route midpoint")
        return

    print(f"Pubs near the route midpoint ({len(found)}):")
    width = max(len(format_distance(distance)) for distance, _ in found)
    for distance, index in found:
        pub = pubs[index]
        address = format_address(pub.address1, pub.postcode)
        print(f"{format_distance(distance):>{width}}  {pub.name} ({address})")


def write_geojson(
    filename: str, pubs: List[Pub], nearby: List[bool]
) -> None:
    """Write the nearby pubs to a GeoJSON file."""
    selected = [pub for pub, is_nearby in zip(pubs, nearby) if is_nearby]
    with open(filename, "w", encoding="utf-8") as f:
        json.dump(pubs_to_feature_collection(selected), f, indent=2)
    logger.info(f"Wrote {len(selected)} pubs to {filename}")


def main():
    """
    Parses command-line arguments, computes the route, finds the pubs near its
    midpoint, and generates an interactive map.
    """
    parser = create_argument_parser()
    args = parser.parse_args()

    if args.origin is None or args.destination is None:
        parser.print_help()
        sys.exit(1)

    setup_logging(args)
    config = config_from_args(args)

    if not args.api_key:
        logger.error(
            f"Google Maps API key is not configured (set {API_KEY_ENV_VAR} or use --api-key)"
        )
        sys.exit(1)

    for label, coord in (("Origin", args.origin), ("Destination", args.destination)):
        if not is_within_london(coord):
            logger.warning(f"{label} {coord.latitude:.5f},{coord.longitude:.5f} is outside London")

    try:
        output_filename = determine_output_filename(args.output, args.mode)
        logger.debug(f"Output filename: {output_filename}")
    except (RuntimeError, ValueError):
        sys.exit(1)

    params = RouteRequestParams(
        origin_lat=args.origin.latitude,
        origin_lng=args.origin.longitude,
        destination_lat=args.destination.latitude,
        destination_lng=args.destination.longitude,
        travel_mode=MODE_TO_TRAVEL_MODE[args.mode],
    )

    try:
        routes = compute_routes(params, args.api_key, timeout=config.timeout)
    except RoutesAPIError as e:
        logger.error(f"Failed to get directions: {e.message}")
        sys.exit(1)

    if not routes:
        logger.error("No route found between origin and destination")
        sys.exit(1)

    route = routes[0]
    logger.info(
        f"Route with {len(route)} steps: {format_distance(route.total_distance)}, {format_duration(route.total_duration)}"
    )

    try:
        midpoint = route.midpoint()
    except DecodeError as e:
        logger.warning(f"Could not decode route geometry: {e}")
        midpoint = None

    if midpoint is None:
        logger.warning("Route midpoint unavailable")
    else:
        logger.info(f"Route midpoint: {midpoint.latitude:.5f},{midpoint.longitude:.5f}")

    pubs = load_pubs(config, args.borough)
    nearby, distances = find_nearby_pubs(pubs, midpoint, config.radius)

    log_nearby_pubs(pubs, nearby, distances)

    if args.geojson:
        write_geojson(args.geojson, pubs, nearby)

    metrics = collect_metrics(route, pubs, nearby, midpoint)

    try:
        visualization.create_route_map(
            route, output_filename, pubs, nearby, midpoint, metrics, config, distances
        )
    except (ValueError, DecodeError, OSError) as e:
        logger.error(f"Failed to create map: {e}")
        sys.exit(1)

    log_metrics(metrics, config)

    if not args.no_open:
        open_file_in_browser(output_filename)


if __name__ == "__main__":
    main()
