"""MCP servers exposing the support envelope to other processes."""
