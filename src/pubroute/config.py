from dataclasses import dataclass

from .constants import DEFAULT_API_TIMEOUT, DEFAULT_SEARCH_RADIUS_M


@dataclass
class PubRouteConfig:
    """Configuration for the pubroute CLI."""

    radius: float = DEFAULT_SEARCH_RADIUS_M
    bbox_buffer: float = 200.0
    include_closed: bool = False
    timeout: int = DEFAULT_API_TIMEOUT
    log_level: str = "WARNING"
    metrics: bool = False
