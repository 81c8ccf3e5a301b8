"""IPFS node backend over the HTTP RPC API.

Uses three commands of the node's /api/v0 interface:

    files/stat  -> node type and size for /ipfs/<address>
    ls          -> directory links (Name, Hash, Size, Type)
    cat         -> file bytes, streamed
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, NoReturn

import httpx

from ipfs_http_response.backends.base import Backend
from ipfs_http_response.core.errors import (
    AmbiguousOrUnsupportedError,
    BackendError,
    InvalidPathError,
    NotFoundError,
)
from ipfs_http_response.core.types import (
    BodyStream,
    ContentAddress,
    Directory,
    DirectoryEntry,
    File,
    ResolvedNode,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://127.0.0.1:5001"
DEFAULT_TIMEOUT = 30.0

# UnixFS link types reported by `ls`
_LINK_TYPE_DIRECTORY = 1
_LINK_TYPE_FILE = 2

# InvalidURL and StreamError sit outside the HTTPError hierarchy
_TRANSPORT_ERRORS = (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError)

# Daemon error messages meaning the address itself is malformed
_INVALID_ADDRESS_MARKERS = ("invalid path", "invalid cid", "non-base58", "multihash length")


class HttpApiBackend(Backend):
    """Backend that queries an IPFS node through its RPC API."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            api_url: Base URL of the node's RPC API (without /api/v0)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (e.g., for testing)
        """
        self.api_url = api_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self.api_url}/api/v0",
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_node(self, address: ContentAddress) -> ResolvedNode:
        stat = await self._call("files/stat", f"/ipfs/{address}")
        node_type = stat.get("Type")

        if node_type == "directory":
            return Directory(await self._list(address))

        if node_type == "file":
            size = stat.get("Size")
            return File(
                BodyStream(self._cat(address)),
                size=size if isinstance(size, int) else None,
            )

        raise AmbiguousOrUnsupportedError(f"Unsupported node type {node_type!r} at {address}")

    async def _list(self, address: ContentAddress) -> tuple[DirectoryEntry, ...]:
        data = await self._call("ls", address)
        try:
            links = data["Objects"][0]["Links"] or []
            return tuple(
                DirectoryEntry(
                    name=link["Name"],
                    address=ContentAddress(link["Hash"]),
                    size=link.get("Size"),
                    is_dir=_link_is_dir(link.get("Type")),
                )
                for link in links
            )
        except (KeyError, IndexError, TypeError) as e:
            raise BackendError(f"Malformed ls response for {address}: {e}") from e

    async def _call(self, command: str, arg: str) -> dict[str, Any]:
        """POST an RPC command and decode its JSON answer."""
        logger.debug(f"IPFS API {command} {arg}")
        try:
            response = await self._client.post(f"/{command}", params={"arg": arg})
        except _TRANSPORT_ERRORS as e:
            raise BackendError(f"IPFS API {command} failed: {e}") from e

        if response.status_code != httpx.codes.OK:
            _raise_api_error(command, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise BackendError(f"IPFS API {command} returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise BackendError(f"IPFS API {command} returned unexpected payload")
        return data

    async def _cat(self, address: ContentAddress) -> AsyncIterator[bytes]:
        """Stream file bytes; the request is only sent on first iteration."""
        logger.debug(f"IPFS API cat {address}")
        try:
            async with self._client.stream("POST", "/cat", params={"arg": address}) as response:
                if response.status_code != httpx.codes.OK:
                    await response.aread()
                    _raise_api_error("cat", response.status_code, response.text)
                async for chunk in response.aiter_bytes():
                    yield chunk
        except _TRANSPORT_ERRORS as e:
            raise BackendError(f"IPFS API cat failed for {address}: {e}") from e


def _link_is_dir(link_type: object) -> bool | None:
    if link_type == _LINK_TYPE_DIRECTORY:
        return True
    if link_type == _LINK_TYPE_FILE:
        return False
    return None


def _raise_api_error(command: str, status: int, body: str) -> NoReturn:
    """Translate an RPC error answer into a gateway error.

    The daemon answers errors as {"Message": ..., "Code": ..., "Type": "error"}.
    """
    message = body
    try:
        payload = json.loads(body)
    except ValueError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("Message"), str):
        message = payload["Message"]

    lowered = message.lower()
    if any(marker in lowered for marker in _INVALID_ADDRESS_MARKERS):
        raise InvalidPathError(message)
    if "no link named" in lowered:
        raise NotFoundError(message)

    logger.debug(f"IPFS API {command} error {status}: {message}")
    raise BackendError(f"IPFS API {command} returned {status}: {message}")
