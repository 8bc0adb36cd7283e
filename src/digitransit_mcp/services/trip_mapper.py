"""Translate Digitransit itineraries into Trips.

Each leg becomes either a walking (individual) leg or a scheduled (public)
leg. Legs whose endpoints cannot be resolved, or whose mode is not one we
render, are dropped without failing the trip. Ferry legs are currently in the
dropped set even though lines know about ferries.
"""

import logging
from enum import Enum
from typing import Any

from pydantic import ValidationError

from digitransit_mcp.models.domain import (
    IndividualLeg,
    IndividualType,
    Location,
    PublicLeg,
    Stop,
    Trip,
)
from digitransit_mcp.models.graphql import IntermediatePlace, Itinerary, Leg
from digitransit_mcp.services.codec import from_epoch_millis
from digitransit_mcp.services.line_mapper import map_trip_line
from digitransit_mcp.services.location_mapper import map_place_to_location

logger = logging.getLogger(__name__)


class LegMode(str, Enum):
    """Leg mode as reported on an itinerary leg."""

    WALK = "WALK"
    BUS = "BUS"
    TRAM = "TRAM"
    RAIL = "RAIL"
    SUBWAY = "SUBWAY"
    FERRY = "FERRY"
    UNKNOWN = "UNKNOWN"


LEG_MODES: dict[str, LegMode] = {
    "WALK": LegMode.WALK,
    "BUS": LegMode.BUS,
    "TRAM": LegMode.TRAM,
    "RAIL": LegMode.RAIL,
    "TRAIN": LegMode.RAIL,
    "SUBWAY": LegMode.SUBWAY,
    "FERRY": LegMode.FERRY,
}

# Modes rendered as public legs. FERRY is classified but not rendered.
PUBLIC_MODES = frozenset({LegMode.BUS, LegMode.TRAM, LegMode.RAIL, LegMode.SUBWAY})


def classify_leg_mode(mode: str) -> LegMode:
    """Classify a leg mode string (case-insensitive)."""
    return LEG_MODES.get(mode.upper(), LegMode.UNKNOWN)


def map_intermediate_stop(raw: Any) -> Stop | None:
    """Map an intermediate place to a Stop (location and arrival only).

    Returns None for a place without coordinates or with a malformed
    arrival time; the rest of the leg is unaffected.
    """
    try:
        place = IntermediatePlace.model_validate(raw)
        location = map_place_to_location(place)
        if location is None:
            return None
        return Stop(location=location, arrival_time=from_epoch_millis(place.arrival_time or 0))
    except (ValidationError, ValueError) as e:
        logger.debug(f"Skipping malformed intermediate place: {e}")
        return None


def _destination(leg: Leg, to_location: Location) -> str:
    return (
        (leg.trip.trip_headsign if leg.trip else None)
        or leg.headsign
        or to_location.name
        or ""
    )


def map_leg(leg: Leg) -> IndividualLeg | PublicLeg | None:
    """Map one itinerary leg.

    Returns None when an endpoint is missing or the mode is not rendered.

    Raises:
        ValueError: If a timestamp or coordinate is out of range.
    """
    from_location = map_place_to_location(leg.from_)
    to_location = map_place_to_location(leg.to)
    if from_location is None or to_location is None:
        return None

    mode = classify_leg_mode(leg.mode or "")
    departure_time = from_epoch_millis(leg.start_time or 0)
    arrival_time = from_epoch_millis(leg.end_time or 0)

    if mode is LegMode.WALK:
        return IndividualLeg(
            type=IndividualType.WALK,
            departure_location=from_location,
            departure_time=departure_time,
            arrival_location=to_location,
            arrival_time=arrival_time,
            distance_meters=int(leg.distance or 0),
        )

    if mode in PUBLIC_MODES:
        intermediate_stops = [
            stop for place in leg.intermediate_places or [] if (stop := map_intermediate_stop(place)) is not None
        ]
        return PublicLeg(
            line=map_trip_line(leg.route),
            destination=_destination(leg, to_location),
            departure_location=from_location,
            departure_time=departure_time,
            arrival_location=to_location,
            arrival_time=arrival_time,
            intermediate_stops=intermediate_stops,
            is_realtime=bool(leg.real_time),
        )

    logger.debug(f"Dropping leg with unsupported mode {leg.mode!r}")
    return None


def _map_leg_or_skip(raw: Any) -> IndividualLeg | PublicLeg | None:
    try:
        return map_leg(Leg.model_validate(raw))
    except (ValidationError, ValueError, OverflowError) as e:
        logger.debug(f"Skipping malformed leg: {e}")
        return None


def map_itinerary_to_trip(itinerary: Itinerary, from_location: Location, to_location: Location) -> Trip:
    """Map an itinerary to a Trip between the requested locations.

    Args:
        itinerary: One validated element of ``plan.itineraries``.
        from_location: Origin the trip was requested for.
        to_location: Destination the trip was requested for.

    Returns:
        Trip with legs in upstream order. May have zero legs.
    """
    legs = [mapped for leg in itinerary.legs or [] if (mapped := _map_leg_or_skip(leg)) is not None]

    return Trip(
        from_location=from_location,
        to_location=to_location,
        legs=legs,
        duration_seconds=int(itinerary.duration or 0),
        walk_distance_meters=int(itinerary.walk_distance or 0),
    )
