"""Response construction and the request pipeline entry point.

This module is the only place where error kinds become HTTP status codes.
"""

import logging
from collections.abc import Collection

from ipfs_http_response.backends.base import Backend
from ipfs_http_response.core.directory import respond
from ipfs_http_response.core.errors import BackendError, GatewayError
from ipfs_http_response.core.mime import classify
from ipfs_http_response.core.path import DEFAULT_SCHEMES, parse
from ipfs_http_response.core.resolver import resolve
from ipfs_http_response.core.types import (
    ContentPath,
    Directory,
    File,
    GatewayResponse,
    ResolvedNode,
)

logger = logging.getLogger(__name__)

ERROR_CONTENT_TYPE = "text/plain; charset=utf-8"


def build(node: ResolvedNode | GatewayError, path: ContentPath | None) -> GatewayResponse:
    """Assemble the response for a resolved node or a resolution failure.

    Args:
        node: Resolved File or Directory, or the error raised while resolving
        path: Requested path (None when the path itself failed to parse)

    Returns:
        Response with status, headers and body; errors get an empty body
        and are kept on response.error
    """
    if isinstance(node, GatewayError):
        return GatewayResponse.create(
            node.status, {"Content-Type": ERROR_CONTENT_TYPE}, error=node
        )

    if path is None:
        raise ValueError("A resolved node requires its request path")

    if isinstance(node, Directory):
        return respond(node, path)

    if isinstance(node, File):
        headers = {"Content-Type": str(classify(path.name))}
        if node.size is not None:
            headers["Content-Length"] = str(node.size)
        return GatewayResponse.create(200, headers, node.stream)

    raise TypeError(f"Unsupported node type: {type(node).__name__}")


async def get_response(
    backend: Backend,
    raw_path: str,
    *,
    schemes: Collection[str] = DEFAULT_SCHEMES,
) -> GatewayResponse:
    """Resolve a request path against backend and build its response.

    Never raises: gateway error kinds are mapped to 400/404/500, and any
    other failure is wrapped in a BackendError and answered with 500.

    Args:
        backend: Content-addressed store to query
        raw_path: Request path (e.g., "/ipfs/<cid>/pp.txt")
        schemes: Accepted addressing schemes

    Returns:
        GatewayResponse for the path
    """
    path: ContentPath | None = None
    try:
        path = parse(raw_path, schemes)
        node = await resolve(backend, path)
    except GatewayError as e:
        logger.debug(f"Resolution of {raw_path} failed: {e}")
        return build(e, path)
    except Exception as e:
        logger.debug(f"Unexpected failure resolving {raw_path}: {e!r}")
        error = BackendError(f"Unexpected failure resolving {raw_path}: {e!r}")
        error.__cause__ = e
        return build(error, path)
    return build(node, path)
