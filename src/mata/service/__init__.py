"""Service layer: MCP server and client helpers."""
