"""Google Maps Platform lookups exposed as MCP tools over stdio, WebSocket and streamable HTTP."""

SERVER_NAME = "googleplaces-mcp-server"
__version__ = "1.0.0"
