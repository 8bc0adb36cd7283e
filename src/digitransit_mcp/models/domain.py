"""Canonical domain model for trips, departures and locations.

Every model here is an immutable value record built fresh per response.
Coordinates are fixed-point microdegrees (degrees * 1e6) and colors are
unsigned 32-bit ARGB integers.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LocationType(str, Enum):
    """Kind of place a Location refers to."""

    STATION = "station"
    ADDRESS = "address"
    POI = "poi"
    COORD = "coord"
    ANY = "any"


class Product(str, Enum):
    """Transport mode of a line."""

    BUS = "bus"
    TRAM = "tram"
    REGIONAL_TRAIN = "regional_train"
    SUBWAY = "subway"
    FERRY = "ferry"


class Capability(str, Enum):
    """Operations a provider may support."""

    TRIPS = "trips"
    TRIPS_VIA = "trips_via"
    DEPARTURES = "departures"
    SUGGEST_LOCATIONS = "suggest_locations"
    NEARBY_LOCATIONS = "nearby_locations"
    SERVING_LINES = "serving_lines"


class Location(BaseModel):
    """A station, address, point of interest or bare coordinate."""

    model_config = ConfigDict(frozen=True)

    type: LocationType
    id: str | None = None
    lat: int = 0  # microdegrees
    lon: int = 0  # microdegrees
    name: str | None = None
    place: str | None = None

    @field_validator("id", "name", "place")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        # empty strings are represented as "no value"
        return value or None

    @property
    def has_coordinates(self) -> bool:
        """True when both latitude and longitude are set (non-zero)."""
        return self.lat != 0 and self.lon != 0

    @property
    def lat_degrees(self) -> float:
        return self.lat / 1e6

    @property
    def lon_degrees(self) -> float:
        return self.lon / 1e6


class Point(BaseModel):
    """A coordinate in degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float


class Line(BaseModel):
    """A transit line (route) as shown to riders."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    name: str
    product: Product
    color: int | None = None  # ARGB
    text_color: int | None = None  # ARGB


class Style(BaseModel):
    """Visual style for rendering a line badge."""

    model_config = ConfigDict(frozen=True)

    shape: Literal["RECT"] = "RECT"
    background_color: int
    foreground_color: int


class Stop(BaseModel):
    """An intermediate stop inside a public leg."""

    model_config = ConfigDict(frozen=True)

    location: Location
    arrival_time: datetime


class IndividualType(str, Enum):
    """Self-powered leg type."""

    WALK = "walk"


class IndividualLeg(BaseModel):
    """A self-powered leg (walking)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["individual"] = "individual"
    type: IndividualType = IndividualType.WALK
    departure_location: Location
    departure_time: datetime
    arrival_location: Location
    arrival_time: datetime
    distance_meters: int = 0


class PublicLeg(BaseModel):
    """A ride on a scheduled vehicle."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["public"] = "public"
    line: Line
    destination: str
    departure_location: Location
    departure_time: datetime
    arrival_location: Location
    arrival_time: datetime
    intermediate_stops: list[Stop] = []
    is_realtime: bool = False


Leg = Annotated[IndividualLeg | PublicLeg, Field(discriminator="kind")]


class Trip(BaseModel):
    """One itinerary from origin to destination."""

    model_config = ConfigDict(frozen=True)

    from_location: Location
    to_location: Location
    legs: list[Leg] = []
    duration_seconds: int = 0
    walk_distance_meters: int = 0

    @property
    def first_departure_time(self) -> datetime | None:
        return self.legs[0].departure_time if self.legs else None

    @property
    def last_arrival_time(self) -> datetime | None:
        return self.legs[-1].arrival_time if self.legs else None

    @property
    def num_changes(self) -> int:
        """Number of vehicle changes (public legs minus one)."""
        public_legs = sum(1 for leg in self.legs if isinstance(leg, PublicLeg))
        return max(0, public_legs - 1)


class Departure(BaseModel):
    """A scheduled departure with optional real-time prediction."""

    model_config = ConfigDict(frozen=True)

    planned_time: datetime
    predicted_time: datetime | None = None
    line: Line
    destination: str
    is_cancelled: bool = False
    delay_seconds: int | None = None

    @property
    def time(self) -> datetime:
        """Best known departure time (predicted if available)."""
        return self.predicted_time or self.planned_time


class StationDepartures(BaseModel):
    """Departures grouped under the stop they leave from."""

    model_config = ConfigDict(frozen=True)

    location: Location
    departures: list[Departure] = []


class QueryTripsStatus(str, Enum):
    """Outcome of a trip planning request."""

    OK = "ok"
    TOO_CLOSE = "too_close"
    AMBIGUOUS = "ambiguous"
    NO_TRIPS = "no_trips"
    SERVICE_DOWN = "service_down"


class QueryTripsContext(BaseModel):
    """Pagination context for follow-up trip queries.

    Paging is not supported yet, so the context never allows earlier or later
    queries.
    """

    model_config = ConfigDict(frozen=True)

    can_query_earlier: bool = False
    can_query_later: bool = False


EMPTY_CONTEXT = QueryTripsContext()


class QueryTripsResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: QueryTripsStatus
    context: QueryTripsContext = EMPTY_CONTEXT
    trips: list[Trip] = []


class QueryDeparturesResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    station_departures: list[StationDepartures] = []


class SuggestedLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: Location
    priority: int = 0


class SuggestLocationsResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    suggested_locations: list[SuggestedLocation] = []

    @property
    def locations(self) -> list[Location]:
        return [suggestion.location for suggestion in self.suggested_locations]


class NearbyLocationsResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    locations: list[Location] = []
