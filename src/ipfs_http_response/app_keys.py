"""Application keys for type-safe app configuration access."""

from aiohttp import web

from ipfs_http_response.backends.base import Backend

backend_key = web.AppKey("backend", Backend)
schemes_key = web.AppKey("schemes", frozenset[str])
