"""Storage backends for the persisted graph.

A backend reads and writes the whole resource as text. ``read_text``
returns None when the resource does not exist; every other failure is
raised as :class:`~kgmem.domain.errors.StorageIOError`. ``write_text``
always replaces the full content.

File I/O runs in a worker thread so the event loop only suspends while
the disk is busy.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from kgmem.domain.errors import StorageIOError

logger = logging.getLogger(__name__)


@runtime_checkable
class GraphBackend(Protocol):
    """Whole-resource text storage."""

    async def read_text(self) -> str | None: ...

    async def write_text(self, content: str) -> None: ...


class FileBackend:
    """UTF-8 file on the local filesystem."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"FileBackend({str(self.path)!r})"

    def _read(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("Memory file %s does not exist yet", self.path)
            return None
        except OSError as exc:
            raise StorageIOError.from_os_error("read", exc) from exc

    def _write(self, content: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise StorageIOError.from_os_error("write", exc) from exc

    async def read_text(self) -> str | None:
        return await asyncio.to_thread(self._read)

    async def write_text(self, content: str) -> None:
        await asyncio.to_thread(self._write, content)


class MemoryBackend:
    """In-memory resource, used as a fixture and for ephemeral stores.

    ``content`` is None until the first write, mirroring a file that
    has not been created yet.
    """

    def __init__(self, content: str | None = None) -> None:
        self.content = content
        self.writes = 0

    def __repr__(self) -> str:
        return f"MemoryBackend(writes={self.writes})"

    async def read_text(self) -> str | None:
        return self.content

    async def write_text(self, content: str) -> None:
        self.content = content
        self.writes += 1
