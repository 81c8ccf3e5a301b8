"""Core type definitions.

Every value here is request-scoped: created while resolving one path and
discarded once the response has been consumed.
"""

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import NewType, Self
from urllib.parse import quote

from multidict import CIMultiDict, CIMultiDictProxy

from ipfs_http_response.core.errors import GatewayError, InvalidPathError

# Opaque content identifier (e.g., "QmU1aW5x8tXfbRpJ71zoEVwxrRDHybC2iTVacCMabCUniZ")
# Distinct from plain str to catch mixing names and addresses
ContentAddress = NewType("ContentAddress", str)


@dataclass(frozen=True)
class ContentPath:
    """Parsed request path: scheme, root identifier and path segments."""

    scheme: str
    root: ContentAddress
    segments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.root:
            raise InvalidPathError("Content path requires a root identifier")
        for segment in self.segments:
            if not segment or "/" in segment:
                raise InvalidPathError(f"Invalid path segment: {segment!r}")

    def __str__(self) -> str:
        parts = [self.scheme, self.root, *(quote(s, safe="") for s in self.segments)]
        return "/" + "/".join(parts)

    @property
    def name(self) -> str:
        """Last segment, or empty string for a bare root."""
        return self.segments[-1] if self.segments else ""

    def child(self, name: str) -> Self:
        """Return the path one level below this one."""
        return type(self)(self.scheme, self.root, (*self.segments, name))


class BodyStream:
    """Lazy response body.

    Wraps an async iterator of byte chunks. It can be iterated at most once
    and is not restartable. Closing it releases the underlying iterator
    without reading further, whether or not iteration has started.
    """

    __slots__ = ("_chunks", "_closed", "_consumed")

    def __init__(self, chunks: AsyncIterator[bytes]) -> None:
        self._chunks = chunks
        self._consumed = False
        self._closed = False

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        """Create a body stream yielding ``data`` as a single chunk."""

        async def _single() -> AsyncIterator[bytes]:
            yield data

        return cls(_single())

    @property
    def consumed(self) -> bool:
        """Whether iteration has been started."""
        return self._consumed

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> AsyncIterator[bytes]:
        if self._closed:
            raise RuntimeError("Body stream is closed")
        if self._consumed:
            raise RuntimeError("Body stream has already been consumed")
        self._consumed = True
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._chunks:
                if chunk:
                    yield chunk
        finally:
            await self.aclose()

    async def read(self) -> bytes:
        """Consume the whole stream and return its bytes."""
        return b"".join([chunk async for chunk in self])

    async def aclose(self) -> None:
        """Release the underlying iterator. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        aclose = getattr(self._chunks, "aclose", None)
        if aclose is not None:
            await aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


@dataclass(frozen=True)
class DirectoryEntry:
    """Named link from a directory to a child node.

    size and is_dir are display hints supplied by the backend, if known.
    """

    name: str
    address: ContentAddress
    size: int | None = None
    is_dir: bool | None = None


@dataclass(frozen=True)
class File:
    """File node with a lazy byte stream."""

    stream: BodyStream
    size: int | None = None


@dataclass(frozen=True)
class Directory:
    """Directory node; entries keep the backend's order."""

    entries: tuple[DirectoryEntry, ...] = ()

    def get(self, name: str) -> DirectoryEntry | None:
        """Find an entry by exact, case-sensitive name."""
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None


ResolvedNode = File | Directory


@dataclass(frozen=True)
class MediaType:
    """MIME type with optional charset parameter."""

    mime_type: str
    charset: str | None = None

    def __str__(self) -> str:
        if self.charset:
            return f"{self.mime_type}; charset={self.charset}"
        return self.mime_type


@dataclass(frozen=True)
class GatewayResponse:
    """HTTP-like response produced for one request path.

    error keeps the original exception behind a 4xx/5xx status so the
    caller can log it; it is never rendered into the body.
    """

    status: int
    headers: CIMultiDictProxy[str]
    body: BodyStream | None = None
    error: GatewayError | None = None

    @classmethod
    def create(
        cls,
        status: int,
        headers: Mapping[str, str] | None = None,
        body: BodyStream | None = None,
        error: GatewayError | None = None,
    ) -> Self:
        """Create a response with an immutable copy of headers."""
        return cls(
            status=status,
            headers=CIMultiDictProxy(CIMultiDict(headers or {})),
            body=body,
            error=error,
        )

    @property
    def reason(self) -> str:
        return HTTPStatus(self.status).phrase
