"""MCP server exposing the equity calculators (requires the 'mcp' extra)."""
