"""Trip planning, departures, place search and nearby stops via Digitransit.

Each operation makes at most one GraphQL request and always returns a result
value. Trip planning classifies failures into a QueryTripsStatus; the other
operations return an empty result when anything goes wrong. All errors are
caught and logged here - the mappers never raise past a single record.
"""

import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from digitransit_mcp.data.config import DigitransitConfig, get_digitransit_config
from digitransit_mcp.data.digitransit_client import DigitransitClient
from digitransit_mcp.data.queries import (
    build_departures_query,
    build_geocode_query,
    build_nearest_query,
    build_plan_query,
)
from digitransit_mcp.models.domain import (
    EMPTY_CONTEXT,
    Capability,
    Line,
    Location,
    LocationType,
    NearbyLocationsResult,
    Point,
    QueryDeparturesResult,
    QueryTripsContext,
    QueryTripsResult,
    QueryTripsStatus,
    StationDepartures,
    Style,
    SuggestedLocation,
    SuggestLocationsResult,
    Trip,
)
from digitransit_mcp.models.graphql import (
    GeocodeResponse,
    Itinerary,
    NearestResponse,
    PlanResponse,
    StopResponse,
)
from digitransit_mcp.services.codec import HELSINKI, haversine_distance, to_degrees
from digitransit_mcp.services.departure_mapper import map_to_departures
from digitransit_mcp.services.location_mapper import (
    map_geocoding_to_locations,
    map_nearby_to_locations,
)
from digitransit_mcp.services.trip_mapper import map_itinerary_to_trip

logger = logging.getLogger(__name__)

# Origins and destinations closer than this are not routed
MIN_TRIP_DISTANCE_METERS = 100

AMBIGUOUS_LOCATION_CODE = "AMBIGUOUS_LOCATION"

SUPPORTED_CAPABILITIES = frozenset(
    {
        Capability.TRIPS,
        Capability.TRIPS_VIA,
        Capability.DEPARTURES,
        Capability.SUGGEST_LOCATIONS,
        Capability.NEARBY_LOCATIONS,
    }
)

# Coverage of the Finland endpoint (southwest, northeast)
AREA = (Point(lat=59.0, lon=19.0), Point(lat=70.0, lon=32.0))

DEFAULT_LINE_COLOR = 0xFFFF0000
DEFAULT_LINE_TEXT_COLOR = 0xFFFFFFFF

_config: DigitransitConfig | None = None


def _get_config() -> DigitransitConfig:
    """Get or create the Digitransit config singleton."""
    global _config
    if _config is None:
        _config = get_digitransit_config()
    return _config


def reset_service() -> None:
    """Reset the service state completely.

    Resets config so the next call re-reads .env/environment. Useful for testing.
    """
    global _config
    _config = None
    # hasattr check handles case where function is mocked in tests
    if hasattr(get_digitransit_config, "cache_clear"):
        get_digitransit_config.cache_clear()


def has_capabilities(*capabilities: Capability) -> bool:
    """True if any of the given capabilities is supported."""
    return any(capability in SUPPORTED_CAPABILITIES for capability in capabilities)


def get_area() -> tuple[Point, Point]:
    """Static bounding box of the provider's coverage (southwest, northeast)."""
    return AREA


def line_style(line: Line) -> Style:
    """Badge style for a line, using its own colors when known."""
    return Style(
        background_color=line.color if line.color is not None else DEFAULT_LINE_COLOR,
        foreground_color=line.text_color if line.text_color is not None else DEFAULT_LINE_TEXT_COLOR,
    )


def are_locations_too_close(from_location: Location, to_location: Location) -> bool:
    """Check whether two locations are too close to plan a trip between.

    Locations with a zero latitude or longitude are treated as having unknown
    coordinates and never count as too close.
    """
    if not from_location.has_coordinates or not to_location.has_coordinates:
        return False
    distance = haversine_distance(
        from_location.lat_degrees,
        from_location.lon_degrees,
        to_location.lat_degrees,
        to_location.lon_degrees,
    )
    return distance < MIN_TRIP_DISTANCE_METERS


def parse_error_code(response: PlanResponse) -> str | None:
    """Return ``extensions.code`` of the first GraphQL error, if any."""
    if not response.errors:
        return None
    extensions = response.errors[0].extensions
    return (extensions.code if extensions else None) or None


def _map_itinerary_or_skip(raw: Any, from_location: Location, to_location: Location) -> Trip | None:
    try:
        return map_itinerary_to_trip(Itinerary.model_validate(raw), from_location, to_location)
    except (ValidationError, ValueError, OverflowError) as e:
        logger.debug(f"Skipping malformed itinerary: {e}")
        return None


def classify_trips_response(
    response: dict[str, Any] | None,
    from_location: Location,
    to_location: Location,
) -> QueryTripsResult:
    """Turn a plan response document into a QueryTripsResult.

    Args:
        response: Parsed response, or None for unsuccessful status / empty body.
        from_location: Requested origin.
        to_location: Requested destination.

    Raises:
        pydantic.ValidationError: If the response envelope is malformed.
    """
    if response is None:
        return QueryTripsResult(status=QueryTripsStatus.SERVICE_DOWN)

    plan_response = PlanResponse.model_validate(response)

    if plan_response.errors:
        error_code = parse_error_code(plan_response)
        logger.warning(f"Trip planning returned GraphQL error: {error_code}")
        if error_code == AMBIGUOUS_LOCATION_CODE:
            return QueryTripsResult(status=QueryTripsStatus.AMBIGUOUS)
        return QueryTripsResult(status=QueryTripsStatus.SERVICE_DOWN)

    plan = plan_response.data.plan if plan_response.data else None
    if plan is None or not plan.itineraries:
        return QueryTripsResult(status=QueryTripsStatus.NO_TRIPS)

    trips = [
        trip
        for raw in plan.itineraries
        if (trip := _map_itinerary_or_skip(raw, from_location, to_location)) is not None
    ]
    if not trips:
        return QueryTripsResult(status=QueryTripsStatus.NO_TRIPS)
    return QueryTripsResult(status=QueryTripsStatus.OK, context=EMPTY_CONTEXT, trips=trips)


async def _execute(query: str, config: DigitransitConfig) -> dict[str, Any] | None:
    async with DigitransitClient(config) as client:
        return await client.execute(query)


async def query_trips(
    from_location: Location,
    to_location: Location,
    when: datetime | None = None,
    departure: bool = True,
    config: DigitransitConfig | None = None,
) -> QueryTripsResult:
    """Plan trips between two locations.

    Args:
        from_location: Origin (coordinates in microdegrees).
        to_location: Destination (coordinates in microdegrees).
        when: Departure (or arrival) time; defaults to now.
        departure: True to depart at ``when``, False to arrive by it.
        config: Override configuration (default: from environment).

    Returns:
        QueryTripsResult; never raises.
    """
    if are_locations_too_close(from_location, to_location):
        return QueryTripsResult(status=QueryTripsStatus.TOO_CLOSE)

    config = config or _get_config()
    try:
        query = build_plan_query(
            from_location.lat_degrees,
            from_location.lon_degrees,
            to_location.lat_degrees,
            to_location.lon_degrees,
            when or datetime.now(HELSINKI),
            arrive_by=not departure,
        )
        response = await _execute(query, config)
        result = classify_trips_response(response, from_location, to_location)
    except Exception as e:
        logger.warning(f"Failed to query trips: {e}")
        return QueryTripsResult(status=QueryTripsStatus.SERVICE_DOWN)

    logger.debug(f"Trip query finished with {result.status.value}, {len(result.trips)} trips")
    return result


async def query_more_trips(context: QueryTripsContext, later: bool) -> QueryTripsResult:
    """Page through trips. Paging is not supported, so there are never more trips."""
    return QueryTripsResult(status=QueryTripsStatus.NO_TRIPS)


async def query_departures(
    stop_id: str,
    max_departures: int = 10,
    now: datetime | None = None,
    config: DigitransitConfig | None = None,
) -> QueryDeparturesResult:
    """Fetch upcoming departures at a stop.

    Args:
        stop_id: GTFS stop id (e.g., "LINKKI:1234").
        max_departures: Number of departures to request.
        now: Instant on the service day used to resolve times (default: now).
        config: Override configuration (default: from environment).

    Returns:
        QueryDeparturesResult, empty if the stop is unknown or on any error.
    """
    config = config or _get_config()
    try:
        response = await _execute(build_departures_query(stop_id, max_departures), config)
        if response is None:
            return QueryDeparturesResult()
        data = StopResponse.model_validate(response).data
        stop = data.stop if data else None
        if stop is None:
            return QueryDeparturesResult()

        departures = map_to_departures(stop, now=now)
    except Exception as e:
        logger.warning(f"Failed to query departures for {stop_id}: {e}")
        return QueryDeparturesResult()

    logger.debug(f"Fetched {len(departures)} departures for {stop_id}")
    station = Location(type=LocationType.STATION, id=stop_id, name=stop.name or None)
    return QueryDeparturesResult(
        station_departures=[StationDepartures(location=station, departures=departures)]
    )


async def suggest_locations(
    constraint: str,
    max_locations: int = 10,
    config: DigitransitConfig | None = None,
) -> SuggestLocationsResult:
    """Search places by free text.

    Returns:
        SuggestLocationsResult, empty on any error.
    """
    config = config or _get_config()
    try:
        response = await _execute(build_geocode_query(constraint, max_locations), config)
        if response is None:
            return SuggestLocationsResult()
        data = GeocodeResponse.model_validate(response).data
        locations = map_geocoding_to_locations(data.geocode if data else None)
    except Exception as e:
        logger.warning(f"Failed to search locations for {constraint!r}: {e}")
        return SuggestLocationsResult()

    return SuggestLocationsResult(
        suggested_locations=[SuggestedLocation(location=location, priority=0) for location in locations]
    )


async def query_nearby_locations(
    location: Location,
    max_distance: int = 1000,
    max_locations: int = 0,
    config: DigitransitConfig | None = None,
) -> NearbyLocationsResult:
    """List stops near a location.

    Args:
        location: Center point (coordinates in microdegrees).
        max_distance: Search radius in meters.
        max_locations: Keep at most this many stops (0 keeps all).
        config: Override configuration (default: from environment).

    Returns:
        NearbyLocationsResult, empty on any error.
    """
    config = config or _get_config()
    try:
        query = build_nearest_query(to_degrees(location.lat), to_degrees(location.lon), max_distance)
        response = await _execute(query, config)
        if response is None:
            return NearbyLocationsResult()
        data = NearestResponse.model_validate(response).data
        locations = map_nearby_to_locations(data.nearest if data else None)
    except Exception as e:
        logger.warning(f"Failed to query nearby locations: {e}")
        return NearbyLocationsResult()

    if max_locations > 0:
        locations = locations[:max_locations]
    return NearbyLocationsResult(locations=locations)
