"""Request path parsing."""

from collections.abc import Collection
from urllib.parse import unquote

from ipfs_http_response.core.errors import InvalidPathError
from ipfs_http_response.core.types import ContentAddress, ContentPath

DEFAULT_SCHEMES = frozenset({"ipfs"})


def parse(path: str, schemes: Collection[str] = DEFAULT_SCHEMES) -> ContentPath:
    """Split a request path into scheme, root identifier and segments.

    Empty segments are dropped, so "/ipfs/<cid>/a//b/" has segments ("a", "b").
    Query string and fragment are ignored.

    Args:
        path: Request path (e.g., "/ipfs/<cid>/docs/index.html")
        schemes: Accepted addressing schemes

    Returns:
        Parsed ContentPath

    Raises:
        InvalidPathError: If the path is relative, or the scheme prefix or root
            identifier is missing
    """
    if not path.startswith("/"):
        raise InvalidPathError(f"Path must be absolute: {path!r}")

    path_only = path.partition("?")[0].partition("#")[0]
    raw_parts = [p for p in path_only.split("/") if p]
    if not raw_parts or raw_parts[0] not in schemes:
        raise InvalidPathError(f"Path must start with one of {sorted(schemes)}: {path!r}")
    if len(raw_parts) < 2:
        raise InvalidPathError(f"Missing root identifier: {path!r}")

    scheme, root, *rest = (unquote(p) for p in raw_parts)
    if "/" in root:
        raise InvalidPathError(f"Invalid root identifier: {root!r}")

    segments = tuple(rest)
    for segment in segments:
        if "/" in segment:
            raise InvalidPathError(f"Encoded separator in path segment: {segment!r}")

    return ContentPath(scheme=scheme, root=ContentAddress(root), segments=segments)
