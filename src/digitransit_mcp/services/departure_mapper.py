"""Map a stop's upcoming stop times to Departures.

Digitransit reports departure times as seconds since midnight of the service
day. A real-time prediction exists only when ``realtimeDeparture`` is present
and non-null; a zero value still counts as present.
"""

import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from digitransit_mcp.models.domain import Departure
from digitransit_mcp.models.graphql import StopNode, StopTime
from digitransit_mcp.services.codec import HELSINKI, midnight_plus_seconds
from digitransit_mcp.services.line_mapper import map_departure_line

logger = logging.getLogger(__name__)

CANCELED_STATE = "CANCELED"
UNKNOWN_DESTINATION = "Unknown"


def map_stoptime(stoptime: StopTime, service_day: datetime) -> Departure:
    """Map a single ``stoptimesWithoutPatterns`` entry.

    Raises:
        ValueError: If a time is outside the supported date range.
    """
    predicted_time = None
    delay = None
    if stoptime.realtime_departure is not None:
        predicted_time = midnight_plus_seconds(service_day, stoptime.realtime_departure)
        delay = stoptime.departure_delay or 0

    line = map_departure_line(stoptime.trip.route if stoptime.trip else None)
    destination = stoptime.headsign or line.name or UNKNOWN_DESTINATION

    return Departure(
        planned_time=midnight_plus_seconds(service_day, stoptime.scheduled_departure or 0),
        predicted_time=predicted_time,
        line=line,
        destination=destination,
        is_cancelled=stoptime.realtime_state == CANCELED_STATE,
        delay_seconds=delay,
    )


def map_stoptime_or_skip(raw: Any, service_day: datetime) -> Departure | None:
    """Validate and map one raw stop time; returns None for a malformed record."""
    try:
        return map_stoptime(StopTime.model_validate(raw), service_day)
    except (ValidationError, ValueError) as e:
        logger.debug(f"Skipping malformed stop time: {e}")
        return None


def map_to_departures(stop: StopNode, now: datetime | None = None) -> list[Departure]:
    """Map the ``stop`` node of a departures response.

    Args:
        stop: Stop node with a ``stoptimesWithoutPatterns`` list.
        now: Instant on the service day (default: current time).

    Returns:
        Departures in upstream order; malformed entries are left out.
    """
    service_day = now or datetime.now(HELSINKI)
    return [
        departure
        for raw in stop.stoptimes_without_patterns or []
        if (departure := map_stoptime_or_skip(raw, service_day)) is not None
    ]
