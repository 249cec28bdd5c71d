"""Service layer: the graph store and the adapter result contract.

Services may import from domain and infrastructure layers.
They must never import from commands, output, or mcp.
"""
