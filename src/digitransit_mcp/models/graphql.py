"""Wire models for Digitransit GraphQL responses.

Every field is optional so missing and null values read the same way.
Lists of records (legs, stop times, hits, edges, intermediate places) are
kept as raw JSON and validated one record at a time by the mappers, so a
single malformed record fails on its own.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for response models: camelCase keys, unknown keys ignored."""

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ErrorExtensions(WireModel):
    code: str | None = None


class GraphQLError(WireModel):
    """One entry of the top-level ``errors`` list."""

    message: str | None = None
    extensions: ErrorExtensions | None = None


class Route(WireModel):
    """Route of a leg or stop time."""

    gtfs_id: str | None = None
    short_name: str | None = None
    long_name: str | None = None
    mode: str | None = None
    color: str | None = None
    text_color: str | None = None


class PlaceStop(WireModel):
    gtfs_id: str | None = None
    name: str | None = None


class Place(WireModel):
    """Leg endpoint. A nested ``stop`` marks a registered stop."""

    name: str | None = None
    lat: float | None = None
    lon: float | None = None
    stop: PlaceStop | None = None


class IntermediatePlace(Place):
    """Stop passed on a public leg, with its arrival in epoch millis."""

    arrival_time: int | None = None


class LegTrip(WireModel):
    gtfs_id: str | None = None
    trip_headsign: str | None = None


class Leg(WireModel):
    """One itinerary leg. Times are epoch milliseconds."""

    mode: str | None = None
    start_time: int | None = None
    end_time: int | None = None
    real_time: bool | None = None
    distance: float | None = None
    headsign: str | None = None
    from_: Place | None = Field(default=None, alias="from")
    to: Place | None = None
    route: Route | None = None
    trip: LegTrip | None = None
    intermediate_places: list[Any] | None = None


class Itinerary(WireModel):
    duration: float | None = None
    walk_distance: float | None = None
    legs: list[Any] | None = None


class Plan(WireModel):
    itineraries: list[Any] | None = None


class PlanData(WireModel):
    plan: Plan | None = None


class PlanResponse(WireModel):
    """Response of the ``plan`` query."""

    data: PlanData | None = None
    errors: list[GraphQLError] | None = None


class StopTimeTrip(WireModel):
    route: Route | None = None


class StopTime(WireModel):
    """One ``stoptimesWithoutPatterns`` entry. Times are seconds since midnight."""

    scheduled_departure: int | None = None
    realtime_departure: int | None = None
    departure_delay: int | None = None
    realtime_state: str | None = None
    headsign: str | None = None
    trip: StopTimeTrip | None = None


class StopNode(WireModel):
    gtfs_id: str | None = None
    name: str | None = None
    stoptimes_without_patterns: list[Any] | None = None


class StopData(WireModel):
    stop: StopNode | None = None


class StopResponse(WireModel):
    """Response of the ``stop`` departures query."""

    data: StopData | None = None


class HitProperties(WireModel):
    name: str | None = None
    label: str | None = None
    layer: str | None = None


class HitGeometry(WireModel):
    """GeoJSON point; coordinates are ``[lon, lat]``."""

    coordinates: list[float | None] | None = None


class GeocodingHit(WireModel):
    properties: HitProperties | None = None
    geometry: HitGeometry | None = None


class Geocode(WireModel):
    hits: list[Any] | None = None


class GeocodeData(WireModel):
    geocode: Geocode | None = None


class GeocodeResponse(WireModel):
    """Response of the ``geocode`` search query."""

    data: GeocodeData | None = None


class NearbyPlace(WireModel):
    gtfs_id: str | None = None
    name: str | None = None
    lat: float | None = None
    lon: float | None = None


class NearbyNode(WireModel):
    """Node of a ``nearest`` edge; distance is the walking distance in meters."""

    distance: float | None = None
    place: NearbyPlace | None = None


class NearbyEdge(WireModel):
    node: NearbyNode | None = None


class Nearest(WireModel):
    edges: list[Any] | None = None


class NearestData(WireModel):
    nearest: Nearest | None = None


class NearestResponse(WireModel):
    """Response of the ``nearest`` query."""

    data: NearestData | None = None
