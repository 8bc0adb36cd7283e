"""The shared FastMCP instance.

Tool modules register on this object; server.py imports them and runs it.
"""

from mcp.server.fastmcp import FastMCP

mcp = FastMCP(
    "Digitransit",
    instructions="Finnish public transport via Digitransit - trip planning, departures, place search and nearby stops",
)
