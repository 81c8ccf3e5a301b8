"""Shared test fixtures."""

import pytest
from ipfs_http_response.backends.base import Backend
from ipfs_http_response.backends.memory import MemoryBackend
from ipfs_http_response.config import BackendConfig, Config, GatewayConfig, ServerConfig
from ipfs_http_response.core.errors import BackendError
from ipfs_http_response.core.types import ContentAddress, ResolvedNode

TESTFILE = "Plain text test file.\nIt has two lines.\n"

PP_TXT = (
    "It is a truth universally acknowledged, that a single man in possession "
    "of a good fortune, must be in want of a wife.\n"
)
HOLMES_TXT = "To Sherlock Holmes she is always THE woman.\n"
INDEX_HTML = '<!DOCTYPE html>\n<html><body><a href="pp.txt">pp</a></body></html>\n'
CAT_JPG = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01" + bytes(range(256))
HEXAGONS_SVG = '<svg xmlns="http://www.w3.org/2000/svg"><polygon points="0,0 1,1"/></svg>\n'


class RecordingBackend(Backend):
    """Backend wrapper that records every queried address."""

    def __init__(self, inner: Backend) -> None:
        self.inner = inner
        self.queries: list[str] = []

    async def get_node(self, address: ContentAddress) -> ResolvedNode:
        self.queries.append(address)
        return await self.inner.get_node(address)


class FailingBackend(Backend):
    """Backend that fails for selected addresses (all when none given)."""

    def __init__(self, inner: Backend | None = None, fail_on: set[str] | None = None) -> None:
        self.inner = inner
        self.fail_on = fail_on

    async def get_node(self, address: ContentAddress) -> ResolvedNode:
        if self.inner is None or self.fail_on is None or address in self.fail_on:
            raise BackendError(f"connection refused while fetching {address}")
        return await self.inner.get_node(address)


@pytest.fixture
def backend() -> MemoryBackend:
    """Memory backend with a small chunk size so bodies span several chunks."""
    return MemoryBackend(chunk_size=16)


@pytest.fixture
def file_cid(backend: MemoryBackend) -> ContentAddress:
    return backend.add_bytes(TESTFILE)


@pytest.fixture
def folder_cid(backend: MemoryBackend) -> ContentAddress:
    """Directory without index.html."""
    return backend.add_tree({"pp.txt": PP_TXT, "holmes.txt": HOLMES_TXT})


@pytest.fixture
def site_cid(backend: MemoryBackend) -> ContentAddress:
    """Directory acting as a web site root."""
    return backend.add_tree(
        {"pp.txt": PP_TXT, "holmes.txt": HOLMES_TXT, "index.html": INDEX_HTML}
    )


@pytest.fixture
def mime_cid(backend: MemoryBackend) -> ContentAddress:
    """Directory with files of several media types."""
    return backend.add_tree(
        {
            "cat.jpg": CAT_JPG,
            "hexagons-xml.svg": '<?xml version="1.0"?>\n' + HEXAGONS_SVG,
            "hexagons.svg": HEXAGONS_SVG,
            "pp.txt": PP_TXT,
            "index.html": INDEX_HTML,
        }
    )


@pytest.fixture
def test_config() -> Config:
    """Create a test configuration pointing at an unused local API."""
    return Config(
        server=ServerConfig(),
        backend=BackendConfig(api_url="http://127.0.0.1:5999", timeout=1.0),
        gateway=GatewayConfig(),
    )
