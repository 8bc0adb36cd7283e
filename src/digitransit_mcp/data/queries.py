"""GraphQL query text for the Digitransit routing API."""

import json
from datetime import datetime

from digitransit_mcp.services.codec import HELSINKI

# Itineraries requested per trip search
NUM_ITINERARIES = 5

ROUTE_FIELDS = """
    gtfsId
    shortName
    longName
    mode
    color
    textColor
"""


def graphql_string(value: str) -> str:
    """Quote a value as a GraphQL string literal (JSON escaping is compatible)."""
    return json.dumps(value, ensure_ascii=False)


def build_plan_query(
    from_lat: float,
    from_lon: float,
    to_lat: float,
    to_lon: float,
    when: datetime,
    arrive_by: bool = False,
) -> str:
    """Trip planning query between two coordinates (degrees).

    Date and time are expressed in Finnish local time.
    """
    local = when.astimezone(HELSINKI) if when.tzinfo else when
    return f"""
query {{
  plan(
    from: {{lat: {from_lat}, lon: {from_lon}}}
    to: {{lat: {to_lat}, lon: {to_lon}}}
    date: {graphql_string(local.strftime("%Y-%m-%d"))}
    time: {graphql_string(local.strftime("%H:%M"))}
    arriveBy: {"true" if arrive_by else "false"}
    numItineraries: {NUM_ITINERARIES}
  ) {{
    itineraries {{
      duration
      walkDistance
      legs {{
        mode
        startTime
        endTime
        realTime
        distance
        headsign
        from {{ name lat lon stop {{ gtfsId name }} }}
        to {{ name lat lon stop {{ gtfsId name }} }}
        route {{ {ROUTE_FIELDS} }}
        trip {{ gtfsId tripHeadsign }}
        intermediatePlaces {{ name lat lon arrivalTime stop {{ gtfsId }} }}
      }}
    }}
  }}
}}
""".strip()


def build_departures_query(stop_id: str, max_departures: int) -> str:
    """Upcoming departures at a stop."""
    return f"""
query {{
  stop(id: {graphql_string(stop_id)}) {{
    name
    gtfsId
    stoptimesWithoutPatterns(numberOfDepartures: {max_departures}) {{
      scheduledDeparture
      realtimeDeparture
      departureDelay
      realtimeState
      headsign
      trip {{
        route {{ {ROUTE_FIELDS} }}
      }}
    }}
  }}
}}
""".strip()


def build_geocode_query(text: str, size: int) -> str:
    """Free-text place search."""
    return f"""
query {{
  geocode(query: {graphql_string(text)}, size: {size}) {{
    hits {{
      properties {{ name label layer }}
      geometry {{ coordinates }}
    }}
  }}
}}
""".strip()


def build_nearest_query(lat: float, lon: float, max_distance: int) -> str:
    """Stops within max_distance meters of a coordinate (degrees)."""
    return f"""
query {{
  nearest(lat: {lat}, lon: {lon}, maxDistance: {max_distance}, filterByPlaceTypes: STOP) {{
    edges {{
      node {{
        distance
        place {{
          ... on Stop {{ gtfsId name lat lon }}
        }}
      }}
    }}
  }}
}}
""".strip()
