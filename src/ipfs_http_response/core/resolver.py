"""Path resolution against a content-addressed backend."""

import logging

from ipfs_http_response.backends.base import Backend
from ipfs_http_response.core.errors import NotFoundError
from ipfs_http_response.core.types import ContentPath, File, ResolvedNode

logger = logging.getLogger(__name__)


async def resolve(backend: Backend, path: ContentPath) -> ResolvedNode:
    """Walk from the root identifier through each path segment.

    Issues one backend query for the root and one per segment, strictly in
    order. Entry names are matched exactly (case-sensitive).

    Args:
        backend: Content-addressed store to query
        path: Parsed request path

    Returns:
        File or Directory node at the end of the path

    Raises:
        NotFoundError: If a segment is missing or names a child of a file
        BackendError: If the backend query fails (not retried)
    """
    logger.debug(f"Resolving root {path.root}")
    node = await backend.get_node(path.root)

    for index, segment in enumerate(path.segments):
        if isinstance(node, File):
            await node.stream.aclose()
            traversed = "/".join(path.segments[:index])
            raise NotFoundError(f"Cannot descend into file at {path.root}/{traversed}")

        entry = node.get(segment)
        if entry is None:
            raise NotFoundError(f"No link named {segment!r} under {path.root}")

        logger.debug(f"Resolving segment {segment!r} -> {entry.address}")
        node = await backend.get_node(entry.address)

    return node
