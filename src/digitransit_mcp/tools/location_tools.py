"""MCP tools for finding places and stops."""

from digitransit_mcp.app import mcp
from digitransit_mcp.models.domain import (
    Location,
    LocationType,
    NearbyLocationsResult,
    SuggestLocationsResult,
)
from digitransit_mcp.services.codec import to_microdegrees
from digitransit_mcp.services.transit_service import (
    query_nearby_locations as _query_nearby_locations,
)
from digitransit_mcp.services.transit_service import (
    suggest_locations as _suggest_locations,
)


@mcp.tool()
async def search_places(query: str, limit: int = 10) -> SuggestLocationsResult:
    """Search stops, addresses and points of interest by name.

    Examples:
        search_places(query="Lappeenranta rautatieasema")
        search_places(query="Koulukatu 5")

    Args:
        query: Free text to search for.
        limit: Maximum number of results (1-40, default: 10).

    Returns:
        SuggestLocationsResult with matching locations (coordinates in microdegrees).
    """
    # Validate and clamp limit to 1-40
    limit = max(1, min(40, limit))

    return await _suggest_locations(constraint=query, max_locations=limit)


@mcp.tool()
async def find_nearby_stops(
    lat: float,
    lon: float,
    radius_meters: int = 500,
    limit: int = 20,
) -> NearbyLocationsResult:
    """Find stops near a coordinate.

    Stop names include the walking distance, e.g. "Koulukatu (120m)".

    Args:
        lat: Latitude in degrees.
        lon: Longitude in degrees.
        radius_meters: Search radius (1-5000, default 500).
        limit: Maximum number of stops (1-100, default 20).

    Returns:
        NearbyLocationsResult with stops.
    """
    # Validate radius and limit
    radius_meters = max(1, min(5000, radius_meters))
    limit = max(1, min(100, limit))

    return await _query_nearby_locations(
        location=Location(type=LocationType.COORD, lat=to_microdegrees(lat), lon=to_microdegrees(lon)),
        max_distance=radius_meters,
        max_locations=limit,
    )
