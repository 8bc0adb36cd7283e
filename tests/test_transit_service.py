"""Tests for the transit query service and outcome classification."""

from datetime import datetime
from unittest.mock import AsyncMock

import httpx
import pytest

from digitransit_mcp.data.config import DigitransitConfig
from digitransit_mcp.models.domain import (
    Capability,
    IndividualLeg,
    Line,
    Location,
    LocationType,
    Product,
    QueryTripsStatus,
)
from digitransit_mcp.services import transit_service
from digitransit_mcp.services.codec import HELSINKI, to_microdegrees
from digitransit_mcp.services.transit_service import (
    are_locations_too_close,
    classify_trips_response,
    get_area,
    has_capabilities,
    line_style,
    query_departures,
    query_more_trips,
    query_nearby_locations,
    query_trips,
    suggest_locations,
)

LAPPEENRANTA = Location(type=LocationType.COORD, lat=61_058_600, lon=28_188_700)
SKINNARILA = Location(type=LocationType.COORD, lat=61_065_000, lon=28_093_000)

# 0.00044966 degrees of latitude is 50 m on the haversine sphere
FIFTY_METERS_NORTH = Location(
    type=LocationType.COORD,
    lat=to_microdegrees(61.0586 + 0.00044966),
    lon=28_188_700,
)


def _walk_itinerary() -> dict:
    return {
        "duration": 600,
        "walkDistance": 800,
        "legs": [
            {
                "mode": "WALK",
                "startTime": 1_700_000_000_000,
                "endTime": 1_700_000_600_000,
                "realTime": False,
                "distance": 800,
                "from": {"name": "Origin", "lat": 61.0586, "lon": 28.1887, "stop": None},
                "to": {"name": "Destination", "lat": 61.0590, "lon": 28.1890, "stop": None},
            }
        ],
    }


@pytest.fixture(autouse=True)
def reset_service():
    """Reset the service state before and after each test."""
    transit_service.reset_service()
    yield
    transit_service.reset_service()


class TestTooClose:
    """Pre-flight distance check."""

    def test_fifty_meters_is_too_close(self) -> None:
        assert are_locations_too_close(LAPPEENRANTA, FIFTY_METERS_NORTH) is True

    def test_far_apart(self) -> None:
        assert are_locations_too_close(LAPPEENRANTA, SKINNARILA) is False

    @pytest.mark.parametrize(
        "other",
        [
            Location(type=LocationType.STATION, id="LINKKI:1"),
            Location(type=LocationType.COORD, lat=0, lon=28_188_700),
            Location(type=LocationType.COORD, lat=61_058_600, lon=0),
        ],
    )
    def test_unknown_coordinates_are_never_too_close(self, other: Location) -> None:
        assert are_locations_too_close(LAPPEENRANTA, other) is False
        assert are_locations_too_close(other, LAPPEENRANTA) is False

    @pytest.mark.asyncio
    async def test_too_close_makes_no_request(self, config: DigitransitConfig, mock_http: AsyncMock):
        result = await query_trips(LAPPEENRANTA, FIFTY_METERS_NORTH, config=config)

        assert result.status == QueryTripsStatus.TOO_CLOSE
        assert result.trips == []
        mock_http.post.assert_not_called()
        mock_http.client_class.assert_not_called()


class TestClassifyTripsResponse:
    """Classification of plan responses."""

    def test_none_is_service_down(self) -> None:
        assert classify_trips_response(None, LAPPEENRANTA, SKINNARILA).status == QueryTripsStatus.SERVICE_DOWN

    def test_ambiguous_location(self) -> None:
        response = {"data": {"plan": None}, "errors": [{"extensions": {"code": "AMBIGUOUS_LOCATION"}}]}

        result = classify_trips_response(response, LAPPEENRANTA, SKINNARILA)

        assert result.status == QueryTripsStatus.AMBIGUOUS
        assert result.trips == []

    def test_only_first_error_counts(self) -> None:
        response = {
            "errors": [
                {"message": "boom", "extensions": {"code": "INTERNAL_SERVER_ERROR"}},
                {"extensions": {"code": "AMBIGUOUS_LOCATION"}},
            ]
        }
        result = classify_trips_response(response, LAPPEENRANTA, SKINNARILA)
        assert result.status == QueryTripsStatus.SERVICE_DOWN

    def test_error_without_code_is_service_down(self) -> None:
        response = {"data": {"plan": None}, "errors": [{"message": "Validation error"}]}
        result = classify_trips_response(response, LAPPEENRANTA, SKINNARILA)
        assert result.status == QueryTripsStatus.SERVICE_DOWN

    @pytest.mark.parametrize(
        "response",
        [
            {"data": {"plan": None}},
            {"data": {}},
            {},
            {"data": {"plan": {"itineraries": []}}},
            {"data": {"plan": {}}},
        ],
    )
    def test_no_trips(self, response: dict) -> None:
        result = classify_trips_response(response, LAPPEENRANTA, SKINNARILA)
        assert result.status == QueryTripsStatus.NO_TRIPS
        assert result.trips == []

    def test_malformed_itinerary_is_skipped(self) -> None:
        response = {"data": {"plan": {"itineraries": [{"duration": "long"}, _walk_itinerary()]}}}

        result = classify_trips_response(response, LAPPEENRANTA, SKINNARILA)

        assert result.status == QueryTripsStatus.OK
        assert len(result.trips) == 1

    def test_empty_error_list_is_ignored(self) -> None:
        response = {"data": {"plan": {"itineraries": [_walk_itinerary()]}}, "errors": []}
        result = classify_trips_response(response, LAPPEENRANTA, SKINNARILA)
        assert result.status == QueryTripsStatus.OK

    def test_ok_maps_every_itinerary(self) -> None:
        response = {"data": {"plan": {"itineraries": [_walk_itinerary(), _walk_itinerary()]}}}

        result = classify_trips_response(response, LAPPEENRANTA, SKINNARILA)

        assert result.status == QueryTripsStatus.OK
        assert len(result.trips) == 2
        assert result.context.can_query_later is False
        assert result.trips[0].from_location == LAPPEENRANTA


class TestQueryTrips:
    """End-to-end trip queries against a mocked transport."""

    @pytest.mark.asyncio
    async def test_single_walk_trip(self, config: DigitransitConfig, mock_http: AsyncMock):
        body = {"data": {"plan": {"itineraries": [_walk_itinerary()]}}}
        mock_http.post = AsyncMock(return_value=httpx.Response(200, json=body))

        result = await query_trips(LAPPEENRANTA, SKINNARILA, config=config)

        assert result.status == QueryTripsStatus.OK
        trip = result.trips[0]
        assert len(trip.legs) == 1
        assert isinstance(trip.legs[0], IndividualLeg)
        assert trip.legs[0].distance_meters == 800
        assert trip.duration_seconds == 600

    @pytest.mark.asyncio
    async def test_out_of_range_leg_does_not_discard_trip(self, config: DigitransitConfig, mock_http: AsyncMock):
        itinerary = _walk_itinerary()
        broken = {**itinerary["legs"][0], "startTime": 10**20}
        itinerary["legs"] = [broken, itinerary["legs"][0]]
        body = {"data": {"plan": {"itineraries": [itinerary]}}}
        mock_http.post = AsyncMock(return_value=httpx.Response(200, json=body))

        result = await query_trips(LAPPEENRANTA, SKINNARILA, config=config)

        assert result.status == QueryTripsStatus.OK
        assert len(result.trips[0].legs) == 1

    @pytest.mark.asyncio
    async def test_ambiguous_response(self, config: DigitransitConfig, mock_http: AsyncMock):
        mock_http.post = AsyncMock(
            return_value=httpx.Response(
                200,
                content=b'{"data":{"plan":null},"errors":[{"extensions":{"code":"AMBIGUOUS_LOCATION"}}]}',
            )
        )

        result = await query_trips(LAPPEENRANTA, SKINNARILA, config=config)

        assert result.status == QueryTripsStatus.AMBIGUOUS
        assert result.trips == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "post",
        [
            AsyncMock(return_value=httpx.Response(500, text="Internal Server Error")),
            AsyncMock(return_value=httpx.Response(200, content=b"")),
            AsyncMock(return_value=httpx.Response(200, content=b"not json")),
            AsyncMock(side_effect=httpx.ConnectError("connection refused")),
            AsyncMock(side_effect=httpx.ReadTimeout("timed out")),
            AsyncMock(side_effect=RuntimeError("unexpected")),
        ],
    )
    async def test_failures_are_service_down(self, config: DigitransitConfig, mock_http: AsyncMock, post):
        mock_http.post = post

        result = await query_trips(LAPPEENRANTA, SKINNARILA, config=config)

        assert result.status == QueryTripsStatus.SERVICE_DOWN
        assert result.trips == []

    @pytest.mark.asyncio
    async def test_request_carries_plan_arguments(self, config: DigitransitConfig, mock_http: AsyncMock):
        when = datetime(2025, 3, 10, 8, 15, tzinfo=HELSINKI)

        await query_trips(LAPPEENRANTA, SKINNARILA, when=when, departure=False, config=config)

        query = mock_http.post.call_args.kwargs["json"]["query"]
        assert "from: {lat: 61.0586, lon: 28.1887}" in query
        assert "to: {lat: 61.065, lon: 28.093}" in query
        assert 'date: "2025-03-10"' in query
        assert 'time: "08:15"' in query
        assert "arriveBy: true" in query
        assert "numItineraries: 5" in query

    @pytest.mark.asyncio
    async def test_uses_environment_config_by_default(self, monkeypatch, mock_http: AsyncMock):
        monkeypatch.setenv("DIGITRANSIT_API_KEY", "env_key")
        monkeypatch.setenv("DIGITRANSIT_BASE_URL", "https://env.example.com")

        await query_trips(LAPPEENRANTA, SKINNARILA)

        assert mock_http.post.call_args.args[0] == "https://env.example.com/index/graphql"
        headers = mock_http.client_class.call_args.kwargs["headers"]
        assert headers["digitransit-subscription-key"] == "env_key"


@pytest.mark.asyncio
async def test_query_more_trips_is_not_supported():
    result = await query_more_trips(transit_service.EMPTY_CONTEXT, later=True)
    assert result.status == QueryTripsStatus.NO_TRIPS


class TestQueryDepartures:
    """Departure queries."""

    @pytest.mark.asyncio
    async def test_departures(self, config: DigitransitConfig, mock_http: AsyncMock):
        body = {
            "data": {
                "stop": {
                    "name": "Koulukatu",
                    "gtfsId": "LINKKI:1234",
                    "stoptimesWithoutPatterns": [
                        {
                            "scheduledDeparture": 36000,
                            "realtimeDeparture": None,
                            "departureDelay": 0,
                            "realtimeState": "SCHEDULED",
                            "headsign": "Skinnarila",
                            "trip": {"route": {"gtfsId": "LINKKI:5", "shortName": "5", "mode": "BUS"}},
                        }
                    ],
                }
            }
        }
        mock_http.post = AsyncMock(return_value=httpx.Response(200, json=body))
        now = datetime(2025, 3, 10, 9, 0, tzinfo=HELSINKI)

        result = await query_departures("LINKKI:1234", max_departures=5, now=now, config=config)

        assert len(result.station_departures) == 1
        station = result.station_departures[0]
        assert station.location.type == LocationType.STATION
        assert station.location.id == "LINKKI:1234"
        assert station.location.name == "Koulukatu"
        assert station.departures[0].planned_time == datetime(2025, 3, 10, 10, 0, tzinfo=HELSINKI)
        assert station.departures[0].predicted_time is None

        query = mock_http.post.call_args.kwargs["json"]["query"]
        assert 'stop(id: "LINKKI:1234")' in query
        assert "numberOfDepartures: 5" in query

    @pytest.mark.asyncio
    async def test_out_of_range_stop_time_keeps_the_rest(self, config: DigitransitConfig, mock_http: AsyncMock):
        route = {"gtfsId": "LINKKI:5", "shortName": "5", "mode": "BUS"}
        stoptimes = [
            {"scheduledDeparture": 36000, "headsign": "Skinnarila", "trip": {"route": route}},
            {"scheduledDeparture": 10**12, "headsign": "Overflow", "trip": {"route": route}},
        ]
        body = {"data": {"stop": {"name": "Koulukatu", "stoptimesWithoutPatterns": stoptimes}}}
        mock_http.post = AsyncMock(return_value=httpx.Response(200, json=body))

        result = await query_departures("LINKKI:1234", config=config)

        assert len(result.station_departures) == 1
        assert [departure.destination for departure in result.station_departures[0].departures] == ["Skinnarila"]

    @pytest.mark.asyncio
    async def test_unknown_stop_is_empty(self, config: DigitransitConfig, mock_http: AsyncMock):
        mock_http.post = AsyncMock(return_value=httpx.Response(200, json={"data": {"stop": None}}))

        result = await query_departures("LINKKI:0", config=config)

        assert result.station_departures == []

    @pytest.mark.asyncio
    async def test_server_error_is_empty(self, config: DigitransitConfig, mock_http: AsyncMock):
        mock_http.post = AsyncMock(return_value=httpx.Response(500))

        result = await query_departures("LINKKI:1234", config=config)

        assert result.station_departures == []

    @pytest.mark.asyncio
    async def test_transport_error_is_empty(self, config: DigitransitConfig, mock_http: AsyncMock):
        mock_http.post = AsyncMock(side_effect=httpx.ConnectTimeout("timed out"))

        result = await query_departures("LINKKI:1234", config=config)

        assert result.station_departures == []


class TestSuggestLocations:
    """Free-text place search."""

    @pytest.mark.asyncio
    async def test_suggestions(self, config: DigitransitConfig, mock_http: AsyncMock):
        body = {
            "data": {
                "geocode": {
                    "hits": [
                        {
                            "properties": {"name": "Koulukatu", "label": "Koulukatu, Lappeenranta", "layer": "stop"},
                            "geometry": {"coordinates": [28.25, 61.5]},
                        },
                        {
                            "properties": {"name": "Koulukatu 5", "label": "Koulukatu 5", "layer": "address"},
                            "geometry": {"coordinates": [28.5, 61.25]},
                        },
                    ]
                }
            }
        }
        mock_http.post = AsyncMock(return_value=httpx.Response(200, json=body))

        result = await suggest_locations("Koulukatu", max_locations=3, config=config)

        assert [location.type for location in result.locations] == [LocationType.STATION, LocationType.ADDRESS]
        assert all(suggestion.priority == 0 for suggestion in result.suggested_locations)
        query = mock_http.post.call_args.kwargs["json"]["query"]
        assert 'geocode(query: "Koulukatu", size: 3)' in query

    @pytest.mark.asyncio
    async def test_query_text_is_escaped(self, config: DigitransitConfig, mock_http: AsyncMock):
        await suggest_locations('Bar "Olo"', config=config)

        query = mock_http.post.call_args.kwargs["json"]["query"]
        assert 'query: "Bar \\"Olo\\""' in query

    @pytest.mark.asyncio
    async def test_server_error_is_empty(self, config: DigitransitConfig, mock_http: AsyncMock):
        mock_http.post = AsyncMock(return_value=httpx.Response(500))

        result = await suggest_locations("Koulukatu", config=config)

        assert result.suggested_locations == []


class TestNearbyLocations:
    """Nearby stop queries."""

    @staticmethod
    def _body(count: int) -> dict:
        edges = [
            {"node": {"distance": 100 * (i + 1), "place": {"gtfsId": f"LINKKI:{i}", "name": f"Stop {i}", "lat": 61.5, "lon": 28.25}}}
            for i in range(count)
        ]
        return {"data": {"nearest": {"edges": edges}}}

    @pytest.mark.asyncio
    async def test_nearby(self, config: DigitransitConfig, mock_http: AsyncMock):
        mock_http.post = AsyncMock(return_value=httpx.Response(200, json=self._body(3)))

        result = await query_nearby_locations(LAPPEENRANTA, max_distance=750, config=config)

        assert [location.name for location in result.locations] == ["Stop 0 (100m)", "Stop 1 (200m)", "Stop 2 (300m)"]
        query = mock_http.post.call_args.kwargs["json"]["query"]
        assert "lat: 61.0586, lon: 28.1887, maxDistance: 750, filterByPlaceTypes: STOP" in query

    @pytest.mark.asyncio
    async def test_max_locations_truncates(self, config: DigitransitConfig, mock_http: AsyncMock):
        mock_http.post = AsyncMock(return_value=httpx.Response(200, json=self._body(5)))

        result = await query_nearby_locations(LAPPEENRANTA, max_locations=2, config=config)

        assert len(result.locations) == 2

    @pytest.mark.asyncio
    async def test_server_error_is_empty(self, config: DigitransitConfig, mock_http: AsyncMock):
        mock_http.post = AsyncMock(return_value=httpx.Response(500))

        result = await query_nearby_locations(LAPPEENRANTA, config=config)

        assert result.locations == []


def test_get_area():
    southwest, northeast = get_area()
    assert (southwest.lat, southwest.lon) == (59.0, 19.0)
    assert (northeast.lat, northeast.lon) == (70.0, 32.0)


def test_line_style_uses_line_colors():
    line = Line(id="LINKKI:5", label="5", name="Keskusta", product=Product.BUS, color=0xFF00A1DE, text_color=0xFF000000)
    style = line_style(line)
    assert style.background_color == 0xFF00A1DE
    assert style.foreground_color == 0xFF000000


def test_line_style_defaults():
    style = line_style(Line(id="", label="5", name="", product=Product.BUS))
    assert style.background_color == 0xFFFF0000
    assert style.foreground_color == 0xFFFFFFFF


def test_capabilities():
    assert has_capabilities(Capability.TRIPS) is True
    assert has_capabilities(Capability.SERVING_LINES, Capability.DEPARTURES) is True
    assert has_capabilities(Capability.SERVING_LINES) is False
