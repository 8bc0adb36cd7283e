"""Map Digitransit routes to canonical Lines.

Trips and departures label a line slightly differently when the route has no
short name: trips fall back to the full long name, departures to its first
four characters.
"""

from digitransit_mcp.models.domain import Line, Product
from digitransit_mcp.models.graphql import Route
from digitransit_mcp.services.codec import parse_argb_color

# Upper-cased route mode -> product; anything else is treated as a bus
MODE_PRODUCTS: dict[str, Product] = {
    "BUS": Product.BUS,
    "TRAM": Product.TRAM,
    "RAIL": Product.REGIONAL_TRAIN,
    "TRAIN": Product.REGIONAL_TRAIN,
    "SUBWAY": Product.SUBWAY,
    "FERRY": Product.FERRY,
}

DEPARTURE_LABEL_LENGTH = 4


def map_product(mode: str) -> Product:
    """Map a Digitransit mode string to a Product (default BUS)."""
    return MODE_PRODUCTS.get(mode.upper(), Product.BUS)


def _map_line(route: Route, label: str) -> Line:
    return Line(
        id=route.gtfs_id or "",
        label=label,
        name=route.long_name or route.short_name or "",
        product=map_product(route.mode or ""),
        color=parse_argb_color(route.color),
        text_color=parse_argb_color(route.text_color),
    )


def map_trip_line(route: Route | None) -> Line:
    """Line for a trip leg: label is the short name, else the long name."""
    route = route or Route()
    return _map_line(route, label=route.short_name or route.long_name or "")


def map_departure_line(route: Route | None) -> Line:
    """Line for a departure: label is the short name, else the long name's first 4 chars."""
    route = route or Route()
    long_name = route.long_name or ""
    return _map_line(route, label=route.short_name or long_name[:DEPARTURE_LABEL_LENGTH])
