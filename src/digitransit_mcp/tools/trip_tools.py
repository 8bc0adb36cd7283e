from datetime import datetime

from mcp.server.fastmcp.exceptions import ToolError

from digitransit_mcp.app import mcp
from digitransit_mcp.models.domain import Location, LocationType, QueryTripsResult
from digitransit_mcp.services.codec import HELSINKI, to_microdegrees
from digitransit_mcp.services.transit_service import query_trips as _query_trips


@mcp.tool()
async def plan_trip(
    from_lat: float,
    from_lon: float,
    to_lat: float,
    to_lon: float,
    time: str | None = None,
    arrive_by: bool = False,
) -> QueryTripsResult:
    """Plan a public transport trip between two coordinates in Finland.

    Returns up to 5 itineraries made of walking and public transport legs
    (bus, tram, train, metro).

    Status values:
    - ok: trips found
    - too_close: origin and destination are less than 100 m apart
    - ambiguous: the routing service could not resolve a location
    - no_trips: no itinerary was found
    - service_down: the routing service is unreachable or failed

    Args:
        from_lat: Origin latitude in degrees (e.g., 61.0586).
        from_lon: Origin longitude in degrees (e.g., 28.1887).
        to_lat: Destination latitude in degrees.
        to_lon: Destination longitude in degrees.
        time: ISO 8601 date-time (default: now). Naive values are Finnish local time.
        arrive_by: If True, arrive by `time` instead of departing at it.

    Returns:
        QueryTripsResult with status and trips.

    Raises:
        ToolError: If `time` is not an ISO 8601 date-time.
    """
    when = None
    if time:
        try:
            when = datetime.fromisoformat(time)
        except ValueError as e:
            raise ToolError(f"Invalid time {time!r}: expected ISO 8601, e.g. 2025-03-10T08:15") from e
        if when.tzinfo is None:
            when = when.replace(tzinfo=HELSINKI)

    return await _query_trips(
        from_location=Location(type=LocationType.COORD, lat=to_microdegrees(from_lat), lon=to_microdegrees(from_lon)),
        to_location=Location(type=LocationType.COORD, lat=to_microdegrees(to_lat), lon=to_microdegrees(to_lon)),
        when=when,
        departure=not arrive_by,
    )
