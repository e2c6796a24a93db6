"""
Module for collecting and logging metrics related to a pub route run.
"""

import collections
import logging
from typing import Dict, List, NamedTuple, Optional

from .config import PubRouteConfig
from .geometry import Coordinate
from .london_gis import Pub
from .route import Route, detect_transport_mode

logger = logging.getLogger(__name__)


class RouteMetrics(NamedTuple):
    """Container for route and pub metrics."""

    step_count: int
    total_duration: float
    total_distance: float
    mode_durations: Dict[str, float]
    midpoint_found: bool
    pub_counts: Dict[str, int]


def collect_metrics(
    route: Route,
    pubs: List[Pub],
    nearby: List[bool],
    midpoint: Optional[Coordinate],
) -> RouteMetrics:
    """
    Collect metrics before creating the route map.

    Args:
        route: The computed route
        pubs: All pubs shown on the map
        nearby: One flag per pub, True when within the search radius of the midpoint
        midpoint: Temporal midpoint of the route, or None

    Returns:
        RouteMetrics containing all collected metrics
    """
    mode_durations: Dict[str, float] = collections.defaultdict(float)
    for step in route:
        mode_durations[detect_transport_mode(step)] += step.duration_seconds

    pub_counts: Dict[str, int] = collections.defaultdict(int)
    for pub, is_nearby in zip(pubs, nearby):
        pub_counts["total"] += 1
        if is_nearby:
            pub_counts["nearby"] += 1
        if not pub.is_open:
            pub_counts["closed"] += 1

    return RouteMetrics(
        step_count=len(route),
        total_duration=route.total_duration,
        total_distance=route.total_distance,
        mode_durations=dict(mode_durations),
        midpoint_found=midpoint is not None,
        pub_counts=dict(pub_counts),
    )


def log_metrics(metrics: RouteMetrics, config: PubRouteConfig) -> None:
    """
    Log detailed metrics after creating the route map.

    Args:
        metrics: RouteMetrics collected for this run
        config: PubRouteConfig with the metrics flag
    """
    if not config.metrics:
        return

    logger.debug("=== PUBROUTE_METRICS ===")
    logger.debug(f"route_steps={metrics.step_count}")
    logger.debug(f"route_duration_s={metrics.total_duration:.0f}")
    logger.debug(f"route_distance_m={metrics.total_distance:.0f}")
    for mode, seconds in sorted(metrics.mode_durations.items()):
        logger.debug(f"mode_duration_s[{mode}]={seconds:.0f}")
    logger.debug(f"midpoint_found={metrics.midpoint_found}")
    logger.debug(f"pubs_total={metrics.pub_counts.get('total', 0)}")
    logger.debug(f"pubs_nearby={metrics.pub_counts.get('nearby', 0)}")
    logger.debug(f"pubs_closed={metrics.pub_counts.get('closed', 0)}")
    logger.debug(f"search_radius_m={config.radius:.0f}")
    logger.debug("=== END_PUBROUTE_METRICS ===")
