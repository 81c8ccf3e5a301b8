"""Backend query interface consumed by the resolver."""

from typing import Self

from ipfs_http_response.core.types import ContentAddress, ResolvedNode


class Backend:
    """Read-only content-addressed store.

    Implementations return a fresh node for every call; the resolver never
    caches them.
    """

    async def get_node(self, address: ContentAddress) -> ResolvedNode:
        """Fetch the File or Directory stored at address.

        Raises:
            BackendError: If the store cannot be queried
            NotFoundError: If the store knows address does not exist
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release connections held by the backend."""

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
