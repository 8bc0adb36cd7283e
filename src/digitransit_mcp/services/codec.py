"""Unit conversions shared by the response mappers.

Coordinates: degrees <-> fixed-point microdegrees.
Times: epoch milliseconds (itineraries) and seconds since local midnight
(departures) are two separate encodings with separate functions.
Colors: 6-digit hex strings -> opaque ARGB integers.
"""

import math
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

# Digitransit Finland serves service days in Finnish local time
HELSINKI = ZoneInfo("Europe/Helsinki")

# Earth's radius in meters for haversine calculation
EARTH_RADIUS_METERS = 6_371_000

OPAQUE_ALPHA = 0xFF000000


def to_microdegrees(degrees: float) -> int:
    """Convert degrees to microdegrees, truncating toward zero.

    Example: 61.0586 -> 61058600

    Raises:
        ValueError: If degrees is infinite or NaN.
    """
    try:
        return int(degrees * 1e6)
    except OverflowError as e:
        raise ValueError(f"Coordinate out of range: {degrees!r}") from e


def to_degrees(microdegrees: int) -> float:
    """Convert microdegrees back to degrees."""
    return microdegrees / 1e6


def from_epoch_millis(millis: int, tz: ZoneInfo = HELSINKI) -> datetime:
    """Convert an epoch-millisecond timestamp to an aware datetime in tz.

    Raises:
        ValueError: If the timestamp is outside the supported date range.
    """
    try:
        return datetime.fromtimestamp(millis / 1000, tz=tz)
    except (OverflowError, OSError) as e:
        raise ValueError(f"Timestamp out of range: {millis!r}") from e


def midnight_plus_seconds(
    reference: datetime,
    seconds: int,
    tz: ZoneInfo = HELSINKI,
) -> datetime:
    """Resolve a "seconds since midnight" value against a service day.

    Local midnight of the reference's calendar day (in tz) plus the given
    number of elapsed seconds. Values of 86400 and above land on the
    following day.

    Args:
        reference: Any instant on the service day. Naive values are taken as
            already being in tz.
        seconds: Seconds since local midnight.
        tz: Time zone the service day is defined in.

    Returns:
        Aware datetime in tz.

    Raises:
        ValueError: If the result is outside the supported date range.
    """
    if reference.tzinfo is None:
        local = reference.replace(tzinfo=tz)
    else:
        local = reference.astimezone(tz)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    # add as elapsed time so DST transitions do not shift the result
    try:
        return (midnight.astimezone(UTC) + timedelta(seconds=seconds)).astimezone(tz)
    except OverflowError as e:
        raise ValueError(f"Seconds since midnight out of range: {seconds!r}") from e


def parse_argb_color(value: str | None) -> int | None:
    """Parse a hex color such as "FF0000" into a fully opaque ARGB integer.

    Returns None for empty input or anything that is not valid hex.

    Example: "FF0000" -> 0xFFFF0000
    """
    if not value:
        return None
    try:
        rgb = int(value, 16)
    except ValueError:
        return None
    return (OPAQUE_ALPHA | rgb) & 0xFFFFFFFF


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance between two points in meters.

    Args:
        lat1, lon1: First point coordinates in degrees.
        lat2, lon2: Second point coordinates in degrees.

    Returns:
        Distance in meters.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c
