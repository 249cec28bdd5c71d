"""MCP adapter exposing the graph store as tools (optional extra)."""
