from pydantic import BaseModel

from digitransit_mcp.app import mcp
from digitransit_mcp.data.networks import all_networks
from digitransit_mcp.models.domain import Point
from digitransit_mcp.services.transit_service import get_area


class NetworkInfo(BaseModel):
    id: str
    name: str
    description: str
    agencies: str
    status: str


class ListNetworksResponse(BaseModel):
    networks: list[NetworkInfo]
    coverage_southwest: Point
    coverage_northeast: Point


@mcp.tool()
def list_networks() -> ListNetworksResponse:
    """List the supported transport networks and the covered area."""
    southwest, northeast = get_area()
    return ListNetworksResponse(
        networks=[
            NetworkInfo(
                id=network.id,
                name=network.name,
                description=network.description,
                agencies=network.agencies,
                status=network.status.value,
            )
            for network in all_networks()
        ],
        coverage_southwest=southwest,
        coverage_northeast=northeast,
    )
