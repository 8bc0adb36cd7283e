"""Registry of supported transport networks.

Built once at import time and never mutated. Callers look networks up by id
and read the endpoint from the returned record.
"""

from dataclasses import dataclass, field
from enum import Enum


class NetworkStatus(str, Enum):
    """Maturity of a network integration."""

    ALPHA = "alpha"
    BETA = "beta"
    STABLE = "stable"


@dataclass(frozen=True)
class TransportNetwork:
    """A transit network served by a Digitransit endpoint."""

    id: str
    name: str
    description: str
    agencies: str
    base_url: str
    status: NetworkStatus = NetworkStatus.STABLE


@dataclass(frozen=True)
class Country:
    """Networks grouped under one country."""

    name: str
    flag: str
    networks: tuple[TransportNetwork, ...] = field(default_factory=tuple)


FINLAND = TransportNetwork(
    id="FI",
    name="Finland",
    description="Nationwide public transport in Finland",
    agencies="Lappeenranta, Waltti cities, HSL, Matkahuolto, VR",
    base_url="https://api.digitransit.fi/routing/v2/finland/gtfs/v1",
    status=NetworkStatus.BETA,
)

HSL = TransportNetwork(
    id="FI_HSL",
    name="Helsinki region",
    description="Helsinki Regional Transport",
    agencies="HSL",
    base_url="https://api.digitransit.fi/routing/v2/hsl/gtfs/v1",
    status=NetworkStatus.BETA,
)

WALTTI = TransportNetwork(
    id="FI_WALTTI",
    name="Waltti cities",
    description="Regional transport in Waltti cities",
    agencies="Waltti",
    base_url="https://api.digitransit.fi/routing/v2/waltti/gtfs/v1",
    status=NetworkStatus.BETA,
)

DEFAULT_NETWORK_ID = FINLAND.id

COUNTRIES: tuple[Country, ...] = (
    Country(name="Finland", flag="🇫🇮", networks=(FINLAND, HSL, WALTTI)),
)


def all_networks() -> list[TransportNetwork]:
    """Return every registered network, in registry order."""
    return [network for country in COUNTRIES for network in country.networks]


def get_transport_network(network_id: str) -> TransportNetwork | None:
    """Look up a network by id.

    Args:
        network_id: Network identifier (e.g., "FI").

    Returns:
        The matching TransportNetwork, or None if the id is unknown.
    """
    for network in all_networks():
        if network.id == network_id:
            return network
    return None
