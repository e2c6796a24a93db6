"""
Application constants: service endpoints, London map settings and styling.
"""

# London GIS (Cultural Infrastructure 2023 MapServer)
LONDON_GIS_BASE_URL = (
    "https://gis2.london.gov.uk/server/rest/services/apps/"
    "Cultural_infrastructure_2023_for_webapp_verified/MapServer"
)
PUBS_LAYER_ID = 29
PUBS_QUERY_URL = f"{LONDON_GIS_BASE_URL}/{PUBS_LAYER_ID}/query"
PUBS_MAX_RECORDS = 2000
PUBS_DEFAULT_PARAMS = {
    "where": "1=1",
    "outFields": "*",
    "f": "geojson",
    "outSR": 4326,
}

# Google Routes API
GOOGLE_ROUTES_API_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"
ROUTES_LANGUAGE_CODE = "en-GB"
API_KEY_ENV_VAR = "GOOGLE_MAPS_API_KEY"

# HTTP behaviour shared by both clients
DEFAULT_API_TIMEOUT = 10
MAX_RETRIES = 3
RETRY_BASE_DELAY = 1.0

# London map view, (longitude, latitude)
LONDON_CENTER = (-0.1276, 51.5074)
LONDON_DEFAULT_ZOOM = 10
LONDON_MIN_ZOOM = 8
LONDON_MAX_ZOOM = 18
LONDON_BOUNDS = {
    "north": 51.691874,
    "south": 51.28676,
    "east": 0.334015,
    "west": -0.510375,
}

# Marker clustering, passed through to Leaflet.markercluster
CLUSTER_RADIUS = 50
CLUSTER_MAX_ZOOM = 14

# Marker colours
MARKER_DEFAULT_COLOR = "#D4AF37"
MARKER_SELECTED_COLOR = "#FF6B35"
MARKER_CLOSED_COLOR = "#808080"
MARKER_SIZE = 10

DEFAULT_SEARCH_RADIUS_M = 500.0

LONDON_BOROUGHS = [
    "Barking and Dagenham",
    "Barnet",
    "Bexley",
    "Brent",
    "Bromley",
    "Camden",
    "City of London",
    "Croydon",
    "Ealing",
    "Enfield",
    "Greenwich",
    "Hackney",
    "Hammersmith and Fulham",
    "Haringey",
    "Harrow",
    "Havering",
    "Hillingdon",
    "Hounslow",
    "Islington",
    "Kensington and Chelsea",
    "Kingston upon Thames",
    "Lambeth",
    "Lewisham",
    "Merton",
    "Newham",
    "Redbridge",
    "Richmond upon Thames",
    "Southwark",
    "Sutton",
    "Tower Hamlets",
    "Waltham Forest",
    "Wandsworth",
    "Westminster",
]
