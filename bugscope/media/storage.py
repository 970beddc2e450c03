"""
Media Storage
=============
Key-addressed blob store used for internally hosted bug attachments.

Contract:
    await store.get(key)  → StoredObject | None
    await obj.read()      → bytes (full payload)

Implementations:
    - InMemoryBlobStore   — dict-backed, for tests and embedding
    - FilesystemBlobStore — keys resolved under a root directory; keys that
                            escape the root are reported as not found
"""
import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class StoredObject(Protocol):
    async def read(self) -> bytes: ...


class BlobStore(Protocol):
    async def get(self, key: str) -> Optional[StoredObject]: ...


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class BytesObject:
    data: bytes

    async def read(self) -> bytes:
        return self.data


class InMemoryBlobStore:
    """Dict-backed BlobStore."""

    def __init__(self, objects: Optional[Dict[str, bytes]] = None) -> None:
        self._objects: Dict[str, bytes] = dict(objects or {})

    def put(self, key: str, data: bytes) -> None:
        self._objects[key] = data

    async def get(self, key: str) -> Optional[BytesObject]:
        data = self._objects.get(key)
        if data is None:
            return None
        return BytesObject(data)


# ---------------------------------------------------------------------------
# Filesystem store
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class FileObject:
    path: str

    async def read(self) -> bytes:
        return await asyncio.to_thread(self._read_sync)

    def _read_sync(self) -> bytes:
        with open(self.path, "rb") as f:
            return f.read()


class FilesystemBlobStore:
    """BlobStore over a local directory (e.g. a mounted bucket)."""

    def __init__(self, root: str) -> None:
        self.root = os.path.realpath(root)

    def _resolve(self, key: str) -> Optional[str]:
        candidate = os.path.realpath(os.path.join(self.root, key.lstrip("/")))
        if candidate != self.root and not candidate.startswith(self.root + os.sep):
            logger.warning("Rejected media key outside storage root: %s", key)
            return None
        return candidate

    async def get(self, key: str) -> Optional[FileObject]:
        path = self._resolve(key)
        if path is None or not os.path.isfile(path):
            return None
        return FileObject(path)
