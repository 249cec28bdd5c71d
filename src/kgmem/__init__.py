"""kgmem: persistent knowledge-graph memory store."""

__version__ = "0.1.0"
