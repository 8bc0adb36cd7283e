from digitransit_mcp.server import main

main()
