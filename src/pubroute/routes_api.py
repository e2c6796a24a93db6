#!/usr/bin/env python3
"""
Google Routes API client.

Builds computeRoutes requests from simplified parameters, forwards them with
the API key and field mask, and parses the response into Route objects.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import logging
import requests

from .constants import (
    DEFAULT_API_TIMEOUT,
    GOOGLE_ROUTES_API_URL,
    ROUTES_LANGUAGE_CODE,
)
from .http_utils import request_with_retries
from .route import Route

logger = logging.getLogger(__name__)

TRAVEL_MODES = ["DRIVE", "BICYCLE", "WALK", "TWO_WHEELER", "TRANSIT"]

# Simplified modes offered to users
MODE_TO_TRAVEL_MODE = {
    "walking": "WALK",
    "transit": "TRANSIT",
    "cycling": "BICYCLE",
}

# routingPreference is rejected by the API for other travel modes
ROUTING_PREFERENCE_MODES = {"DRIVE", "TWO_WHEELER"}

REQUIRED_PARAMS = ["originLat", "originLng", "destinationLat", "destinationLng"]

ROUTES_FIELD_MASK = ",".join(
    [
        "routes.duration",
        "routes.distanceMeters",
        "routes.polyline.encodedPolyline",
        "routes.legs.duration",
        "routes.legs.distanceMeters",
        "routes.legs.startLocation",
        "routes.legs.endLocation",
        "routes.legs.steps.distanceMeters",
        "routes.legs.steps.staticDuration",
        "routes.legs.steps.polyline.encodedPolyline",
        "routes.legs.steps.navigationInstruction",
        "routes.legs.steps.travelMode",
        "routes.legs.steps.transitDetails",
        "routes.legs.localizedValues",
        "routes.localizedValues",
        "routes.viewport",
    ]
)


class RoutesAPIError(Exception):
    """Error raised when a route cannot be computed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class RouteRequestParams:
    """Simplified route request between two points."""

    origin_lat: float
    origin_lng: float
    destination_lat: float
    destination_lng: float
    travel_mode: str = "WALK"
    routing_preference: Optional[str] = None
    units: str = "METRIC"
    compute_alternative_routes: bool = False
    avoid_tolls: bool = False
    avoid_highways: bool = False
    avoid_ferries: bool = False

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "RouteRequestParams":
        """
        Build request parameters from a camelCase JSON payload.

        Raises:
            RoutesAPIError: If any of the origin/destination coordinates is missing
        """
        if any(payload.get(key) is None for key in REQUIRED_PARAMS):
            raise RoutesAPIError(
                f"Missing required parameters: {', '.join(REQUIRED_PARAMS)}",
                status_code=400,
            )

        return cls(
            origin_lat=payload["originLat"],
            origin_lng=payload["originLng"],
            destination_lat=payload["destinationLat"],
            destination_lng=payload["destinationLng"],
            travel_mode=payload.get("travelMode") or "WALK",
            routing_preference=payload.get("routingPreference"),
            units=payload.get("units") or "METRIC",
            compute_alternative_routes=bool(payload.get("computeAlternativeRoutes")),
            avoid_tolls=bool(payload.get("avoidTolls")),
            avoid_highways=bool(payload.get("avoidHighways")),
            avoid_ferries=bool(payload.get("avoidFerries")),
        )


def _waypoint(lat: float, lng: float) -> Dict[str, Any]:
    return {"location": {"latLng": {"latitude": lat, "longitude": lng}}}


def build_compute_routes_request(params: RouteRequestParams) -> Dict[str, Any]:
    """Build the computeRoutes request body for the given parameters."""
    body: Dict[str, Any] = {
        "origin": _waypoint(params.origin_lat, params.origin_lng),
        "destination": _waypoint(params.destination_lat, params.destination_lng),
        "travelMode": params.travel_mode,
        "computeAlternativeRoutes": params.compute_alternative_routes,
        "units": params.units,
        "languageCode": ROUTES_LANGUAGE_CODE,
    }

    if params.routing_preference and params.travel_mode in ROUTING_PREFERENCE_MODES:
        body["routingPreference"] = params.routing_preference

    if params.avoid_tolls or params.avoid_highways or params.avoid_ferries:
        body["routeModifiers"] = {
            "avoidTolls": params.avoid_tolls,
            "avoidHighways": params.avoid_highways,
            "avoidFerries": params.avoid_ferries,
        }

    return body


def request_routes(
    params: RouteRequestParams,
    api_key: Optional[str],
    timeout: int = DEFAULT_API_TIMEOUT,
) -> Dict[str, Any]:
    """
    Call computeRoutes and return the raw JSON response.

    Retries on 429 (rate limit) and 5xx errors with exponential backoff.

    Raises:
        RoutesAPIError: If the API key is missing, the request times out, or the
            API answers with an error status
    """
    if not api_key:
        raise RoutesAPIError("Google Maps API key is not configured", status_code=500)

    headers = {
        "Content-Type": "application/json",
        "X-Goog-Api-Key": api_key,
        "X-Goog-FieldMask": ROUTES_FIELD_MASK,
    }
    body = build_compute_routes_request(params)
    logger.debug(f"Requesting {params.travel_mode} route: {body}")

    try:
        response = request_with_retries(
            "POST", GOOGLE_ROUTES_API_URL, json=body, headers=headers, timeout=timeout
        )
    except requests.exceptions.HTTPError as e:
        status_code = e.response.status_code if e.response is not None else None
        reason = e.response.reason if e.response is not None else ""
        if e.response is not None:
            try:
                logger.error(f"Google Routes API error: {e.response.json()}")
            except ValueError:
                logger.error(f"Google Routes API error: {e.response.text}")
        raise RoutesAPIError(
            f"Google Routes API error: {status_code} {reason}".rstrip(),
            status_code=status_code,
        ) from e
    except requests.exceptions.Timeout as e:
        raise RoutesAPIError("Google Routes API request timed out", status_code=504) from e
    except requests.exceptions.RequestException as e:
        raise RoutesAPIError(f"Google Routes API request failed: {e}") from e

    return response.json()


def parse_routes(data: Dict[str, Any]) -> List[Route]:
    """Convert a computeRoutes response into Route objects."""
    return [Route.from_api(route) for route in data.get("routes") or []]


def compute_routes(
    params: RouteRequestParams,
    api_key: Optional[str],
    timeout: int = DEFAULT_API_TIMEOUT,
) -> List[Route]:
    """
    Compute routes between two points.

    Returns:
        Routes in the order returned by the API (the first is the default route)

    Raises:
        RoutesAPIError: See request_routes
    """
    routes = parse_routes(request_routes(params, api_key, timeout))
    logger.debug(f"Routes API returned {len(routes)} route(s)")
    return routes


def proxy_route_request(
    payload: Dict[str, Any],
    api_key: Optional[str],
    timeout: int = DEFAULT_API_TIMEOUT,
) -> Tuple[Dict[str, Any], int]:
    """
    Translate a client route request into a computeRoutes call.

    Returns:
        Tuple of (envelope, HTTP status) where the envelope is
        {"success": True, "data": ...} or {"success": False, "error": ...}
    """
    try:
        if not api_key:
            raise RoutesAPIError(
                "Google Maps API key is not configured", status_code=500
            )
        params = RouteRequestParams.from_payload(payload)
        data = request_routes(params, api_key, timeout)
    except RoutesAPIError as e:
        return {"success": False, "error": e.message}, e.status_code or 500
    except Exception as e:
        logger.error(f"Error in routes proxy: {e}")
        return {"success": False, "error": str(e) or "An unexpected error occurred"}, 500

    return {"success": True, "data": data}, 200
