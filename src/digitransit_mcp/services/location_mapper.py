"""Map Digitransit places to canonical Locations.

Three upstream shapes are handled:
- geocoding hits (free-text search), coordinates as a GeoJSON [lon, lat] pair
- nearby-query edges (stops around a coordinate, with walking distance)
- itinerary leg endpoints (from/to/intermediate places of a leg)

Records without a usable coordinate pair are skipped.
"""

import logging
from typing import Any

from pydantic import ValidationError

from digitransit_mcp.models.domain import Location, LocationType
from digitransit_mcp.models.graphql import (
    Geocode,
    GeocodingHit,
    Nearest,
    NearbyEdge,
    NearbyNode,
    Place,
)
from digitransit_mcp.services.codec import to_microdegrees

logger = logging.getLogger(__name__)

# Geocoder layer -> location type
LAYER_TYPES: dict[str, LocationType] = {
    "stop": LocationType.STATION,
    "address": LocationType.ADDRESS,
    "venue": LocationType.POI,
    "place": LocationType.POI,
}


def location_type_for_layer(layer: str) -> LocationType:
    """Classify a geocoder layer; unknown or empty layers map to ANY."""
    return LAYER_TYPES.get(layer, LocationType.ANY)


def map_geocoding_hit(hit: GeocodingHit) -> Location | None:
    """Map a single geocoding hit to a Location.

    Returns None if the hit has no [lon, lat] coordinate pair.

    Raises:
        ValueError: If a coordinate is out of range.
    """
    coordinates = (hit.geometry.coordinates if hit.geometry else None) or []
    if len(coordinates) < 2:
        return None
    lon, lat = coordinates[0], coordinates[1]
    if lat is None or lon is None:
        return None

    properties = hit.properties
    name = (properties.name if properties else None) or ""
    label = (properties.label if properties else None) or ""
    layer = (properties.layer if properties else None) or ""

    return Location(
        type=location_type_for_layer(layer),
        id=None,  # the geocoder never returns registered stop ids
        lat=to_microdegrees(lat),
        lon=to_microdegrees(lon),
        name=name or None,
        place=label if label and label != name else None,
    )


def _map_geocoding_hit_or_skip(raw: Any) -> Location | None:
    try:
        return map_geocoding_hit(GeocodingHit.model_validate(raw))
    except (ValidationError, ValueError) as e:
        logger.debug(f"Skipping malformed geocoding hit: {e}")
        return None


def map_geocoding_to_locations(geocode: Geocode | None) -> list[Location]:
    """Map the ``geocode`` node of a search response to Locations."""
    hits = (geocode.hits if geocode else None) or []
    locations = [location for hit in hits if (location := _map_geocoding_hit_or_skip(hit)) is not None]
    if len(locations) < len(hits):
        logger.debug(f"Skipped {len(hits) - len(locations)} geocoding hits without coordinates")
    return locations


def format_nearby_name(name: str, distance_meters: int) -> str:
    """Display name for a nearby stop, e.g. "Koulukatu (120m)"."""
    return f"{name} ({distance_meters}m)"


def map_nearby_node(node: NearbyNode | None) -> Location | None:
    """Map one ``nearest.edges[].node`` to a station Location.

    The walking distance is folded into the display name. Returns None for
    nameless places and places without coordinates.

    Raises:
        ValueError: If a coordinate is out of range.
    """
    place = node.place if node else None
    if place is None or not place.name:
        return None
    if place.lat is None or place.lon is None:
        return None

    distance = int(node.distance) if node.distance is not None else 0

    return Location(
        type=LocationType.STATION,
        id=place.gtfs_id or None,
        lat=to_microdegrees(place.lat),
        lon=to_microdegrees(place.lon),
        name=format_nearby_name(place.name, distance),
    )


def _map_nearby_edge_or_skip(raw: Any) -> Location | None:
    try:
        return map_nearby_node(NearbyEdge.model_validate(raw).node)
    except (ValidationError, ValueError, OverflowError) as e:
        logger.debug(f"Skipping malformed nearby edge: {e}")
        return None


def map_nearby_to_locations(nearest: Nearest | None) -> list[Location]:
    """Map the ``nearest`` node of a nearby response to Locations."""
    edges = (nearest.edges if nearest else None) or []
    return [location for edge in edges if (location := _map_nearby_edge_or_skip(edge)) is not None]


def map_place_to_location(place: Place | None) -> Location | None:
    """Map an itinerary place (leg endpoint or intermediate place).

    A place with a nested ``stop`` object is a STATION carrying the stop's
    gtfsId; anything else is a bare COORD.

    Raises:
        ValueError: If a coordinate is out of range.
    """
    if place is None or place.lat is None or place.lon is None:
        return None

    if place.stop is not None:
        location_type = LocationType.STATION
        stop_id = place.stop.gtfs_id or None
    else:
        location_type = LocationType.COORD
        stop_id = None

    return Location(
        type=location_type,
        id=stop_id,
        lat=to_microdegrees(place.lat),
        lon=to_microdegrees(place.lon),
        name=place.name or None,
    )
