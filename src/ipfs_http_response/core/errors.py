"""Error taxonomy for content path resolution.

Parser, resolver and backends raise these; the response builder is the only
place that turns them into HTTP status codes.
"""


class GatewayError(Exception):
    """Base error for resolving a content path."""

    status = 500


class InvalidPathError(GatewayError):
    """Request path is malformed (missing scheme prefix or root identifier)."""

    status = 400


class NotFoundError(GatewayError):
    """No node exists at the requested path."""

    status = 404


class BackendError(GatewayError):
    """Storage backend failed (network, timeout, corrupt data)."""

    status = 500


class AmbiguousOrUnsupportedError(GatewayError):
    """Reserved for nodes the resolver cannot represent."""

    status = 500
