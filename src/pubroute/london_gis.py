#!/usr/bin/env python3
"""
London GIS pubs client.

Fetches the pubs layer of the London Datastore Cultural Infrastructure
MapServer as GeoJSON and converts features into Pub records.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional
import logging
import requests

from .constants import (
    DEFAULT_API_TIMEOUT,
    PUBS_DEFAULT_PARAMS,
    PUBS_MAX_RECORDS,
    PUBS_QUERY_URL,
)
from .geometry import Coordinate, bng_to_wgs84
from .http_utils import request_with_retries

logger = logging.getLogger(__name__)


class LondonGISError(Exception):
    """Error raised when pub data cannot be fetched."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response


@dataclass
class Pub:
    """A pub from the London GIS cultural infrastructure pubs layer."""

    objectid: int
    name: str
    address1: str
    borough_name: str
    postcode: str
    x: float
    y: float
    open_status: int
    longitude: float
    latitude: float
    address2: Optional[str] = None
    address3: Optional[str] = None
    website: Optional[str] = None
    borough_code: Optional[str] = None
    ward_2022_name: Optional[str] = None
    ward_2022_code: Optional[str] = None
    feature_id: Optional[Any] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.longitude, self.latitude)

    @property
    def is_open(self) -> bool:
        return self.open_status == 1


def build_query_params(**overrides: Any) -> Dict[str, Any]:
    """Merge query overrides into the default pubs query parameters."""
    params = dict(PUBS_DEFAULT_PARAMS)
    for key, value in overrides.items():
        if value is not None:
            params[key] = value
    return params


def _feature_to_pub(feature: Dict[str, Any]) -> Pub:
    properties = feature.get("properties") or {}
    geometry = feature.get("geometry") or {}
    x = properties.get("x") or 0
    y = properties.get("y") or 0

    coordinates = geometry.get("coordinates")
    if coordinates:
        longitude, latitude = coordinates[0], coordinates[1]
    elif x and y:
        longitude, latitude = bng_to_wgs84(x, y)
    else:
        raise LondonGISError(
            f"Pub {properties.get('objectid')} has no geometry or grid reference"
        )

    objectid = properties.get("objectid") or 0
    return Pub(
        objectid=objectid,
        name=properties.get("name") or "Unknown",
        address1=properties.get("address1") or "",
        address2=properties.get("address2"),
        address3=properties.get("address3"),
        borough_name=properties.get("borough_name") or "",
        postcode=properties.get("postcode") or "",
        website=properties.get("website"),
        borough_code=properties.get("borough_code"),
        x=x,
        y=y,
        open_status=properties.get("open_status") or 0,
        ward_2022_name=properties.get("ward_2022_name"),
        ward_2022_code=properties.get("ward_2022_code"),
        longitude=longitude,
        latitude=latitude,
        feature_id=feature.get("id") or objectid,
    )


def transform_response(data: Dict[str, Any]) -> List[Pub]:
    """
    Convert a GeoJSON query response into Pub records.

    Missing properties get defaults. Features without a point geometry are
    located from their British National Grid x/y columns.
    """
    return [_feature_to_pub(feature) for feature in data.get("features") or []]


def _query(params: Dict[str, Any], timeout: int) -> Dict[str, Any]:
    try:
        response = request_with_retries(
            "GET",
            PUBS_QUERY_URL,
            params=params,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
    except requests.exceptions.HTTPError as e:
        status_code = e.response.status_code if e.response is not None else None
        raise LondonGISError(
            f"HTTP error! status: {status_code}",
            status_code=status_code,
            response=e.response,
        ) from e
    except requests.exceptions.Timeout as e:
        raise LondonGISError("Request timed out", status_code=408) from e
    except requests.exceptions.RequestException as e:
        raise LondonGISError(f"Failed to fetch pubs: {e}", response=e) from e

    try:
        return response.json()
    except ValueError as e:
        raise LondonGISError(
            f"Failed to fetch pubs: invalid JSON response ({e})", response=response
        ) from e


def fetch_pubs_with_query(
    params: Dict[str, Any], timeout: int = DEFAULT_API_TIMEOUT
) -> List[Pub]:
    """
    Fetch pubs matching custom query parameters.

    Args:
        params: ArcGIS query parameters overriding the defaults
        timeout: Request timeout in seconds

    Raises:
        LondonGISError: On network, HTTP or parsing errors
    """
    data = _query(build_query_params(**params), timeout)
    return transform_response(data)


def fetch_all_pubs(timeout: int = DEFAULT_API_TIMEOUT) -> List[Pub]:
    """
    Fetch every pub, following resultOffset pagination.

    Raises:
        LondonGISError: On network, HTTP or parsing errors
    """
    pubs: List[Pub] = []
    offset = 0

    while True:
        logger.debug(f"Fetching pubs: offset={offset}")
        data = _query(
            build_query_params(
                resultOffset=offset, resultRecordCount=PUBS_MAX_RECORDS
            ),
            timeout,
        )

        features = data.get("features") or []
        if not features:
            break

        pubs.extend(transform_response(data))

        if data.get("exceededTransferLimit"):
            logger.warning("Transfer limit exceeded, pagination may be required")

        if len(features) < PUBS_MAX_RECORDS:
            break
        offset += PUBS_MAX_RECORDS

    logger.info(f"Fetched {len(pubs)} pubs total")
    return pubs


def fetch_pub_by_id(
    object_id: int, timeout: int = DEFAULT_API_TIMEOUT
) -> Optional[Pub]:
    """Fetch a single pub by object ID, or None if it cannot be fetched."""
    try:
        pubs = fetch_pubs_with_query(
            {"where": f"objectid={int(object_id)}", "resultRecordCount": 1}, timeout
        )
    except LondonGISError as e:
        logger.error(f"Failed to fetch pub {object_id}: {e}")
        return None
    return pubs[0] if pubs else None


def fetch_pubs_by_borough(
    borough: str, timeout: int = DEFAULT_API_TIMEOUT
) -> List[Pub]:
    """
    Fetch the pubs of one London borough.

    Raises:
        LondonGISError: On network, HTTP or parsing errors
    """
    escaped = borough.replace("'", "''")
    try:
        return fetch_pubs_with_query({"where": f"borough_name='{escaped}'"}, timeout)
    except LondonGISError as e:
        raise LondonGISError(
            f"Failed to fetch pubs for borough {borough}: {e.message}",
            status_code=e.status_code,
            response=e.response,
        ) from e


def pubs_to_feature_collection(pubs: List[Pub]) -> Dict[str, Any]:
    """Build a GeoJSON FeatureCollection from Pub records."""
    features = []
    for pub in pubs:
        properties = asdict(pub)
        feature_id = properties.pop("feature_id")
        features.append(
            {
                "type": "Feature",
                "geometry": {
                    "type": "Point",
                    "coordinates": [pub.longitude, pub.latitude],
                },
                "properties": properties,
                "id": feature_id,
            }
        )
    return {"type": "FeatureCollection", "features": features}
