"""Error taxonomy for graph store operations.

Every failure surfaced by :class:`kgmem.services.store.GraphStore` is a
:class:`GraphStoreError`. Adapters map the concrete subclasses to stable
error codes (see :func:`kgmem.services.graph.error_result`).
"""

from __future__ import annotations

from typing import Any


class GraphStoreError(Exception):
    """Base class for all graph store failures."""


class ValidationError(GraphStoreError):
    """An entity, relation, or record failed its shape constraints.

    Attributes:
        errors: pydantic error details (``loc``/``msg``/``type`` dicts).
        line: 1-based line number of the offending record, when raised
            while loading the persisted graph.
    """

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        line: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or []
        self.line = line


class NotFoundError(GraphStoreError):
    """An operation referenced an entity that does not exist."""

    def __init__(self, entity_name: str) -> None:
        super().__init__(f"Entity with name {entity_name} not found")
        self.entity_name = entity_name


class StorageIOError(GraphStoreError, OSError):
    """Reading or writing the backing resource failed.

    Also an :class:`OSError` carrying the original ``errno`` and
    ``filename`` so callers catching ``OSError`` keep working.
    """

    def __init__(self, message: str, *, errno: int | None = None, filename: str | None = None):
        OSError.__init__(self, errno, message, filename)
        self.message = message

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_os_error(cls, action: str, exc: OSError) -> StorageIOError:
        """Build from a raw ``OSError`` raised while *action* ing a resource."""
        filename = str(exc.filename) if exc.filename is not None else None
        reason = exc.strerror or str(exc)
        target = f" {filename}" if filename else ""
        return cls(f"Failed to {action}{target}: {reason}", errno=exc.errno, filename=filename)
