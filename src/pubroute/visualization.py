#!/usr/bin/env python3
"""
Route and pub visualization using folium maps.
"""

from typing import Dict, List, Optional
import html
import logging
import folium
from folium.plugins import MarkerCluster
from folium.template import Template

from .config import PubRouteConfig
from .constants import (
    CLUSTER_MAX_ZOOM,
    CLUSTER_RADIUS,
    LONDON_CENTER,
    LONDON_DEFAULT_ZOOM,
    LONDON_MAX_ZOOM,
    LONDON_MIN_ZOOM,
    MARKER_CLOSED_COLOR,
    MARKER_DEFAULT_COLOR,
    MARKER_SELECTED_COLOR,
    MARKER_SIZE,
)
from .formatters import format_address, format_distance, format_duration
from .geometry import Coordinate
from .london_gis import Pub
from .metrics import RouteMetrics
from .route import Route

logger = logging.getLogger(__name__)

# Line style per transport mode; dash_array None draws a solid line
TRANSPORT_MODE_STYLES: Dict[str, Dict] = {
    "WALK": {"color": "#3b82f6", "weight": 4, "dash_array": "2, 8"},
    "TRANSIT": {"color": "#6b7280", "weight": 5, "dash_array": None},
    "BUS": {"color": "#ef4444", "weight": 5, "dash_array": None},
    "TRAIN": {"color": "#6b7280", "weight": 5, "dash_array": None},
    "SUBWAY": {"color": "#6b7280", "weight": 5, "dash_array": None},
    "RAIL": {"color": "#6b7280", "weight": 5, "dash_array": None},
    "DRIVE": {"color": "#10b981", "weight": 5, "dash_array": None},
    "BICYCLE": {"color": "#8b5cf6", "weight": 4, "dash_array": None},
    "DEFAULT": {"color": "#6b7280", "weight": 4, "dash_array": None},
}


def get_style_for_mode(mode: str) -> Dict:
    return TRANSPORT_MODE_STYLES.get(mode, TRANSPORT_MODE_STYLES["DEFAULT"])


class PubRouteLegend(folium.MacroElement):
    """Custom legend with route and pub counts."""

    def __init__(self, metrics: RouteMetrics, radius: float):
        super().__init__()
        self.pub_count = metrics.pub_counts.get("total", 0)
        self.nearby_count = metrics.pub_counts.get("nearby", 0)
        self.closed_count = metrics.pub_counts.get("closed", 0)
        self.duration = format_duration(metrics.total_duration)
        self.distance = format_distance(metrics.total_distance)
        self.radius = format_distance(radius)
        self.midpoint_found = metrics.midpoint_found
        self.default_color = MARKER_DEFAULT_COLOR
        self.selected_color = MARKER_SELECTED_COLOR
        self.closed_color = MARKER_CLOSED_COLOR

        self._template = Template(
            """
        {% macro html(this, kwargs) %}
        <div id="pubroute-legend" style="
            position: fixed;
            bottom: 50px;
            left: 50px;
            width: 240px;
            background-color: white;
            border: 2px solid grey;
            z-index: 9999;
            font-size: 13px;
            padding: 12px;
            font-family: Arial, sans-serif;
            border-radius: 5px;
            box-shadow: 0 2px 5px rgba(0,0,0,0.2);
            box-sizing: border-box;
        ">
            <b>Route</b>: {{ this.distance }}, {{ this.duration }}<br>
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: {{ this.selected_color }}; font-size: 18px;">&#9679;</span>
                Pubs within {{ this.radius }} of midpoint ({{ this.nearby_count }})
            </div>
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: {{ this.default_color }}; font-size: 18px;">&#9679;</span>
                Other pubs ({{ this.pub_count - this.nearby_count }})
            </div>
            {% if this.closed_count > 0 %}
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: {{ this.closed_color }}; font-size: 18px;">&#9679;</span>
                Closed pubs ({{ this.closed_count }})
            </div>
            {% endif %}
            {% if not this.midpoint_found %}
            <div style="margin: 4px 0; line-height: 1.3; color: #999;">
                Route midpoint unavailable
            </div>
            {% endif %}
        </div>
        {% endmacro %}
        """
        )


def pub_to_html(pub: Pub, distance_m: Optional[float] = None) -> str:
    """
    Format a pub's details into HTML for popup display.

    Args:
        pub: The Pub to format
        distance_m: Distance from the route midpoint, if known

    Returns:
        HTML-formatted string
    """
    html_parts = [f"<b>{html.escape(pub.name)}</b>"]

    address = format_address(pub.address1, pub.address2, pub.address3, pub.postcode)
    if address:
        html_parts.append(f"<br>{html.escape(address)}")
    if pub.borough_name:
        html_parts.append(f"<br><i>{html.escape(pub.borough_name)}</i>")
    if pub.website:
        url = html.escape(pub.website, quote=True)
        html_parts.append(f"<br><a href='{url}' target='_blank'>{url}</a>")
    if not pub.is_open:
        html_parts.append("<br><span style='color: red;'>Closed</span>")
    if distance_m is not None:
        html_parts.append(f"<br>{format_distance(distance_m)} from route midpoint")

    return "".join(html_parts)


def add_route_segments(route_map: folium.Map, route: Route) -> None:
    """Draw each route segment with the style of its transport mode."""
    for segment in route.segments():
        style = get_style_for_mode(segment.travel_mode)
        popup = segment.instruction or segment.travel_mode.title()
        folium.PolyLine(
            [coord.to_lat_lng() for coord in segment.coordinates],
            color=style["color"],
            weight=style["weight"],
            dash_array=style["dash_array"],
            opacity=0.8,
            popup=html.escape(popup),
            z_index=1,
        ).add_to(route_map)

    for transition in route.transition_points():
        folium.CircleMarker(
            transition.coordinate.to_lat_lng(),
            radius=6,
            color="#ffffff",
            weight=2,
            fill=True,
            fill_color=get_style_for_mode(transition.to_mode)["color"],
            fill_opacity=1.0,
            popup=f"{transition.from_mode.title()} to {transition.to_mode.title()}",
        ).add_to(route_map)


def add_pub_markers(
    route_map: folium.Map,
    pubs: List[Pub],
    nearby: List[bool],
    distances: Optional[List[float]] = None,
) -> None:
    """Add pubs to a clustered layer; nearby pubs get their own unclustered layer."""
    cluster = MarkerCluster(
        name="Pubs",
        options={
            "maxClusterRadius": CLUSTER_RADIUS,
            "disableClusteringAtZoom": CLUSTER_MAX_ZOOM + 1,
        },
    ).add_to(route_map)
    nearby_layer = folium.FeatureGroup(name="Nearby pubs").add_to(route_map)

    for index, (pub, is_nearby) in enumerate(zip(pubs, nearby)):
        if is_nearby:
            color = MARKER_SELECTED_COLOR
        elif not pub.is_open:
            color = MARKER_CLOSED_COLOR
        else:
            color = MARKER_DEFAULT_COLOR

        distance = distances[index] if distances is not None else None
        marker = folium.CircleMarker(
            pub.coordinate.to_lat_lng(),
            radius=MARKER_SIZE / 2 + (2 if is_nearby else 0),
            color=color,
            fill=True,
            fill_color=color,
            fill_opacity=0.9,
            tooltip=pub.name,
            popup=folium.Popup(pub_to_html(pub, distance), max_width=300),
        )
        marker.add_to(nearby_layer if is_nearby else cluster)


def create_route_map(
    route: Route,
    output_filename: str,
    pubs: List[Pub],
    nearby: List[bool],
    midpoint: Optional[Coordinate],
    metrics: RouteMetrics,
    config: PubRouteConfig,
    distances: Optional[List[float]] = None,
) -> None:
    """
    Create an interactive map of the route, its midpoint and pubs, save as HTML.

    Args:
        route: Route to draw
        output_filename: Path where HTML map file should be saved
        pubs: Pubs to display
        nearby: One flag per pub, True when within the search radius
        midpoint: Temporal midpoint of the route, or None to omit the marker
        metrics: RouteMetrics for the legend
        config: PubRouteConfig with radius and bbox buffer
        distances: Optional distance of each pub from the midpoint, for popups

    Raises:
        ValueError: If the route has no coordinates
    """
    coordinates = route.coordinates
    if not coordinates:
        raise ValueError("Cannot create map for a route without coordinates")

    south, west, north, east = route.get_bbox(config.bbox_buffer)
    logger.debug(f"Creating map for bounds ({south:.4f}, {west:.4f}, {north:.4f}, {east:.4f})")

    route_map = folium.Map(
        location=[LONDON_CENTER[1], LONDON_CENTER[0]],
        zoom_start=LONDON_DEFAULT_ZOOM,
        min_zoom=LONDON_MIN_ZOOM,
        max_zoom=LONDON_MAX_ZOOM,
        tiles=None,
    )

    folium.TileLayer(
        tiles="CartoDB positron",
        attr=(
            "&copy; <a href='https://www.openstreetmap.org/copyright'>OpenStreetMap</a> "
            "contributors &copy; <a href='https://carto.com/attributions'>CARTO</a>"
        ),
        name="Standard",
        control=True,
        show=True,
    ).add_to(route_map)

    folium.TileLayer(
        tiles="https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        attr=(
            "Tiles &copy; Esri &mdash; Source: Esri, i-cubed, USDA, USGS, AEX, GeoEye, "
            "Getmapping, Aerogrid, IGN, IGP, UPR-EGP, and the GIS User Community"
        ),
        name="Satellite",
        control=True,
        show=False,
    ).add_to(route_map)

    add_route_segments(route_map, route)

    folium.Marker(
        coordinates[0].to_lat_lng(),
        popup="Start",
        icon=folium.Icon(color="green", icon="play"),
    ).add_to(route_map)

    folium.Marker(
        coordinates[-1].to_lat_lng(),
        popup="End",
        icon=folium.Icon(color="red", icon="stop"),
    ).add_to(route_map)

    if midpoint is not None:
        folium.Circle(
            midpoint.to_lat_lng(),
            radius=config.radius,
            color=MARKER_SELECTED_COLOR,
            weight=1,
            fill=True,
            fill_opacity=0.08,
        ).add_to(route_map)
        folium.Marker(
            midpoint.to_lat_lng(),
            popup=f"Halfway ({format_duration(metrics.total_duration / 2)})",
            icon=folium.Icon(color="orange", icon="glass"),
        ).add_to(route_map)

    add_pub_markers(route_map, pubs, nearby, distances)

    folium.LayerControl().add_to(route_map)

    route_map.add_child(PubRouteLegend(metrics, config.radius))

    route_map.fit_bounds([[south, west], [north, east]])

    route_map.save(output_filename)

    logger.debug(
        f"Map saved to {output_filename} with {metrics.pub_counts.get('nearby', 0)}/{metrics.pub_counts.get('total', 0)} pubs near the midpoint"
    )
