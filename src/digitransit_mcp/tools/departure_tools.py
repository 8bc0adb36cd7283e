from digitransit_mcp.app import mcp
from digitransit_mcp.models.domain import QueryDeparturesResult
from digitransit_mcp.services.transit_service import query_departures as _query_departures


@mcp.tool()
async def get_departures(stop_id: str, limit: int = 10) -> QueryDeparturesResult:
    """Get upcoming departures at a stop, with real-time predictions when available.

    Use find_nearby_stops or search_places to find stop ids.

    Args:
        stop_id: GTFS stop id (e.g., "LINKKI:1234").
        limit: Maximum number of departures to return (1-50, default: 10).

    Returns:
        QueryDeparturesResult; empty when the stop is unknown or the service is down.
    """
    # Validate and clamp limit to 1-50
    limit = max(1, min(50, limit))

    return await _query_departures(stop_id=stop_id, max_departures=limit)
