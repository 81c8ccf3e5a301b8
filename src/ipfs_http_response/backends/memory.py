"""In-memory content-addressed backend."""

import hashlib
from collections.abc import AsyncIterator, Mapping

from ipfs_http_response.backends.base import Backend
from ipfs_http_response.core.errors import NotFoundError
from ipfs_http_response.core.types import (
    BodyStream,
    ContentAddress,
    Directory,
    DirectoryEntry,
    File,
    ResolvedNode,
)

DEFAULT_CHUNK_SIZE = 64 * 1024

ADDRESS_PREFIX = "mem"


def compute_address(kind: bytes, payload: bytes) -> ContentAddress:
    """Derive a content address from a node's kind and canonical payload."""
    digest = hashlib.sha256(kind + b"\0" + payload).hexdigest()
    return ContentAddress(f"{ADDRESS_PREFIX}{digest}")


class MemoryBackend(Backend):
    """Content-addressed store held in dictionaries.

    Addresses are derived from content, so adding identical data twice
    yields the same address. Directory entries keep insertion order.

    Example:
        backend = MemoryBackend()
        root = backend.add_tree({
            "index.html": "<h1>Hello</h1>",
            "docs": {
                "guide.txt": "A guide",
            },
        })
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._chunk_size = chunk_size
        self._files: dict[str, bytes] = {}
        self._dirs: dict[str, tuple[DirectoryEntry, ...]] = {}

    def add_bytes(self, data: bytes | str) -> ContentAddress:
        """Store file content. Strings are encoded as UTF-8."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        address = compute_address(b"file", data)
        self._files[address] = data
        return address

    def add_directory(self, links: Mapping[str, ContentAddress]) -> ContentAddress:
        """Store a directory linking names to already stored addresses.

        Raises:
            ValueError: If a name is empty or contains "/", or an address is unknown
        """
        entries = []
        for name, address in links.items():
            if not name or "/" in name:
                raise ValueError(f"Invalid entry name: {name!r}")
            if address in self._files:
                entries.append(
                    DirectoryEntry(name, address, size=len(self._files[address]), is_dir=False)
                )
            elif address in self._dirs:
                entries.append(DirectoryEntry(name, address, is_dir=True))
            else:
                raise ValueError(f"Unknown address for entry {name!r}: {address}")

        payload = b"".join(
            f"{entry.name}\0{entry.address}\n".encode("utf-8") for entry in entries
        )
        address = compute_address(b"dir", payload)
        self._dirs[address] = tuple(entries)
        return address

    def add_tree(self, tree: Mapping[str, object]) -> ContentAddress:
        """Store a nested dict: dicts are directories, bytes/str values are files."""
        links: dict[str, ContentAddress] = {}
        for name, value in tree.items():
            if isinstance(value, Mapping):
                links[name] = self.add_tree(value)
            elif isinstance(value, bytes | str):
                links[name] = self.add_bytes(value)
            else:
                raise TypeError(f"Unsupported tree value for {name!r}: {type(value).__name__}")
        return self.add_directory(links)

    async def get_node(self, address: ContentAddress) -> ResolvedNode:
        if address in self._files:
            data = self._files[address]
            return File(BodyStream(self._iter_chunks(data)), size=len(data))
        if address in self._dirs:
            return Directory(self._dirs[address])
        raise NotFoundError(f"Unknown address: {address}")

    async def _iter_chunks(self, data: bytes) -> AsyncIterator[bytes]:
        for start in range(0, len(data), self._chunk_size):
            yield data[start : start + self._chunk_size]
