"""Content-addressed backends."""

from ipfs_http_response.backends.base import Backend
from ipfs_http_response.backends.http_api import HttpApiBackend
from ipfs_http_response.backends.memory import MemoryBackend

__all__ = ["Backend", "HttpApiBackend", "MemoryBackend"]
