import argparse
import logging
from datetime import UTC, datetime

from pydantic import BaseModel

from digitransit_mcp.app import mcp


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str


@mcp.tool()
def health() -> HealthResponse:
    """Check if the Digitransit MCP server is running and healthy.

    Returns the server status, version, and current timestamp.
    """
    from digitransit_mcp import __version__

    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


def register_tools() -> None:
    """Import tool modules so their @mcp.tool() decorators run."""
    from digitransit_mcp.tools import (  # noqa: F401
        departure_tools,
        location_tools,
        network_tools,
        trip_tools,
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="digitransit-mcp",
        description="Digitransit MCP Server",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    register_tools()
    mcp.run()


if __name__ == "__main__":
    main()
