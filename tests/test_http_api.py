"""Tests for HttpApiBackend against a mocked IPFS RPC API."""

from collections.abc import Callable

import httpx
import pytest
from ipfs_http_response.backends.http_api import HttpApiBackend
from ipfs_http_response.core.errors import (
    AmbiguousOrUnsupportedError,
    BackendError,
    InvalidPathError,
    NotFoundError,
)
from ipfs_http_response.core.response import get_response
from ipfs_http_response.core.types import ContentAddress, Directory, File

DIR_CID = "QmU1aW5x8tXfbRpJ71zoEVwxrRDHybC2iTVacCMabCUniZ"
FILE_CID = "QmPpTxtFile"
FILE_BODY = b"It is a truth universally acknowledged.\n"

Handler = Callable[[httpx.Request], httpx.Response]


def _error(message: str, status: int = 500) -> httpx.Response:
    return httpx.Response(status, json={"Message": message, "Code": 0, "Type": "error"})


def make_node_api(calls: list[str]) -> Handler:
    """Mimic the files/stat, ls and cat commands for a tiny DAG."""

    def handler(request: httpx.Request) -> httpx.Response:
        command = request.url.path.removeprefix("/api/v0/")
        arg = request.url.params["arg"]
        calls.append(command)
        assert request.method == "POST"

        if command == "files/stat":
            if arg == f"/ipfs/{DIR_CID}":
                return httpx.Response(200, json={"Hash": DIR_CID, "Type": "directory", "Size": 0})
            if arg == f"/ipfs/{FILE_CID}":
                return httpx.Response(
                    200, json={"Hash": FILE_CID, "Type": "file", "Size": len(FILE_BODY)}
                )
            return _error(f"invalid path {arg!r}: invalid cid: selected encoding not supported")

        if command == "ls" and arg == DIR_CID:
            return httpx.Response(
                200,
                json={
                    "Objects": [
                        {
                            "Hash": DIR_CID,
                            "Links": [
                                {"Name": "pp.txt", "Hash": FILE_CID, "Size": len(FILE_BODY), "Type": 2},
                                {"Name": "sub", "Hash": "QmSub", "Size": 0, "Type": 1},
                            ],
                        }
                    ]
                },
            )

        if command == "cat" and arg == FILE_CID:
            return httpx.Response(200, content=FILE_BODY)

        return _error("unexpected command")

    return handler


def make_backend(handler: Handler) -> HttpApiBackend:
    return HttpApiBackend("http://ipfs.test:5001/", transport=httpx.MockTransport(handler))


class TestHttpApiBackend:
    """Tests for HttpApiBackend.get_node()."""

    @pytest.mark.asyncio
    async def test__directory__returns_links_in_order(self) -> None:
        """Map ls links to directory entries."""
        calls: list[str] = []
        async with make_backend(make_node_api(calls)) as backend:
            node = await backend.get_node(ContentAddress(DIR_CID))

        assert isinstance(node, Directory)
        assert [e.name for e in node.entries] == ["pp.txt", "sub"]
        assert node.entries[0].address == FILE_CID
        assert node.entries[0].is_dir is False
        assert node.entries[1].is_dir is True
        assert calls == ["files/stat", "ls"]

    @pytest.mark.asyncio
    async def test__file__streams_lazily(self) -> None:
        """Only request file bytes once the body is read."""
        calls: list[str] = []
        async with make_backend(make_node_api(calls)) as backend:
            node = await backend.get_node(ContentAddress(FILE_CID))

            assert isinstance(node, File)
            assert node.size == len(FILE_BODY)
            assert calls == ["files/stat"]

            assert await node.stream.read() == FILE_BODY
            assert calls == ["files/stat", "cat"]

    @pytest.mark.asyncio
    async def test__closed_unread_file__never_requests_content(self) -> None:
        """Closing an unread body does not contact the node."""
        calls: list[str] = []
        async with make_backend(make_node_api(calls)) as backend:
            node = await backend.get_node(ContentAddress(FILE_CID))
            assert isinstance(node, File)
            await node.stream.aclose()

        assert "cat" not in calls

    @pytest.mark.asyncio
    async def test__invalid_cid__raises_invalid_path(self) -> None:
        """Daemon reports of malformed identifiers become InvalidPathError."""
        async with make_backend(make_node_api([])) as backend:
            with pytest.raises(InvalidPathError):
                await backend.get_node(ContentAddress("not-a-cid"))

    @pytest.mark.asyncio
    async def test__no_link_message__raises_not_found(self) -> None:
        async with make_backend(lambda request: _error("no link named \"x\" under QmA")) as backend:
            with pytest.raises(NotFoundError):
                await backend.get_node(ContentAddress(DIR_CID))

    @pytest.mark.asyncio
    async def test__server_error__raises_backend_error(self) -> None:
        """Other error answers become BackendError with the daemon message."""
        async with make_backend(lambda request: _error("blockstore: corrupt block")) as backend:
            with pytest.raises(BackendError, match="corrupt block"):
                await backend.get_node(ContentAddress(DIR_CID))

    @pytest.mark.asyncio
    async def test__non_json_error__raises_backend_error(self) -> None:
        async with make_backend(lambda request: httpx.Response(502, text="Bad Gateway")) as backend:
            with pytest.raises(BackendError, match="502"):
                await backend.get_node(ContentAddress(DIR_CID))

    @pytest.mark.asyncio
    async def test__timeout__raises_backend_error(self) -> None:
        """Transport errors are wrapped, not retried."""
        attempts: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            raise httpx.ConnectTimeout("timed out", request=request)

        async with make_backend(handler) as backend:
            with pytest.raises(BackendError) as exc_info:
                await backend.get_node(ContentAddress(DIR_CID))

        assert isinstance(exc_info.value.__cause__, httpx.ConnectTimeout)
        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test__invalid_json__raises_backend_error(self) -> None:
        async with make_backend(lambda request: httpx.Response(200, text="{not json")) as backend:
            with pytest.raises(BackendError):
                await backend.get_node(ContentAddress(DIR_CID))

    @pytest.mark.asyncio
    async def test__malformed_ls__raises_backend_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("files/stat"):
                return httpx.Response(200, json={"Type": "directory"})
            return httpx.Response(200, json={"Objects": []})

        async with make_backend(handler) as backend:
            with pytest.raises(BackendError, match="Malformed ls"):
                await backend.get_node(ContentAddress(DIR_CID))

    @pytest.mark.asyncio
    async def test__unsupported_type__raises(self) -> None:
        async with make_backend(
            lambda request: httpx.Response(200, json={"Type": "symlink"})
        ) as backend:
            with pytest.raises(AmbiguousOrUnsupportedError):
                await backend.get_node(ContentAddress(DIR_CID))

    @pytest.mark.asyncio
    async def test__cat_error__raises_while_streaming(self) -> None:
        """Errors from cat surface when the body is consumed."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("files/stat"):
                return httpx.Response(200, json={"Type": "file", "Size": 3})
            return _error("failed to fetch block")

        async with make_backend(handler) as backend:
            node = await backend.get_node(ContentAddress(FILE_CID))
            assert isinstance(node, File)
            with pytest.raises(BackendError, match="failed to fetch block"):
                await node.stream.read()

    @pytest.mark.asyncio
    async def test__stream_error__raises_backend_error(self) -> None:
        """Wrap httpx errors outside the HTTPError hierarchy."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.StreamClosed()

        async with make_backend(handler) as backend:
            with pytest.raises(BackendError) as exc_info:
                await backend.get_node(ContentAddress(DIR_CID))

        assert isinstance(exc_info.value.__cause__, httpx.StreamError)

    def test__api_url__strips_trailing_slash(self) -> None:
        assert make_backend(make_node_api([])).api_url == "http://ipfs.test:5001"


class TestGetResponseOverHttpApi:
    """End-to-end resolution through the RPC API backend."""

    @pytest.mark.asyncio
    async def test__file_in_directory__returns_contents(self) -> None:
        async with make_backend(make_node_api([])) as backend:
            response = await get_response(backend, f"/ipfs/{DIR_CID}/pp.txt")

            assert response.status == 200
            assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
            assert response.headers["Content-Length"] == str(len(FILE_BODY))
            assert response.body is not None
            assert await response.body.read() == FILE_BODY

    @pytest.mark.asyncio
    async def test__directory__lists_entries(self) -> None:
        async with make_backend(make_node_api([])) as backend:
            response = await get_response(backend, f"/ipfs/{DIR_CID}")

            assert response.status == 200
            assert response.body is not None
            body = (await response.body.read()).decode()
            assert ">pp.txt</a>" in body
            assert ">sub/</a>" in body

    @pytest.mark.asyncio
    async def test__malformed_cid__returns_400(self) -> None:
        async with make_backend(make_node_api([])) as backend:
            response = await get_response(backend, "/ipfs/not-a-cid")

        assert response.status == 400

    @pytest.mark.asyncio
    async def test__node_unreachable__returns_500(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_backend(handler) as backend:
            response = await get_response(backend, f"/ipfs/{DIR_CID}")

        assert response.status == 500
        assert isinstance(response.error, BackendError)

