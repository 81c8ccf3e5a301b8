"""Resolve IPFS content paths into HTTP responses."""

from ipfs_http_response.backends import Backend, HttpApiBackend, MemoryBackend
from ipfs_http_response.core.errors import (
    AmbiguousOrUnsupportedError,
    BackendError,
    GatewayError,
    InvalidPathError,
    NotFoundError,
)
from ipfs_http_response.core.response import build, get_response
from ipfs_http_response.core.types import (
    BodyStream,
    ContentPath,
    Directory,
    DirectoryEntry,
    File,
    GatewayResponse,
    MediaType,
)

__all__ = [
    "AmbiguousOrUnsupportedError",
    "Backend",
    "BackendError",
    "BodyStream",
    "ContentPath",
    "Directory",
    "DirectoryEntry",
    "File",
    "GatewayError",
    "GatewayResponse",
    "HttpApiBackend",
    "InvalidPathError",
    "MediaType",
    "MemoryBackend",
    "NotFoundError",
    "build",
    "get_response",
]
