"""REST routes and MCP tools over a TaskMapSession."""
