"""aiohttp server for the gateway.

Application factory and route registration. Handlers only translate a
GatewayResponse into an aiohttp StreamResponse; all resolution policy lives
in ipfs_http_response.core.
"""

import logging

from aiohttp import web

from ipfs_http_response.app_keys import backend_key, schemes_key
from ipfs_http_response.backends.base import Backend
from ipfs_http_response.backends.http_api import HttpApiBackend
from ipfs_http_response.config import Config
from ipfs_http_response.core.errors import GatewayError
from ipfs_http_response.core.response import get_response

logger = logging.getLogger(__name__)


async def serve_content(request: web.Request) -> web.StreamResponse:
    """Resolve the request path and stream the resulting response.

    The body stream is closed on every exit path, including client
    disconnects and HEAD requests that never read it.
    """
    result = await get_response(
        request.app[backend_key],
        request.raw_path,
        schemes=request.app[schemes_key],
    )
    if result.error is not None and result.status >= 500:
        logger.error(f"{request.method} {request.path} failed: {result.error}", exc_info=result.error)

    response = web.StreamResponse(status=result.status, reason=result.reason, headers=result.headers)
    if result.body is None:
        response.content_length = 0
        await response.prepare(request)
        await response.write_eof()
        return response

    async with result.body as body:
        await response.prepare(request)
        if request.method != "HEAD":
            try:
                async for chunk in body:
                    await response.write(chunk)
            except GatewayError as e:
                # Headers are already sent; abort the connection instead
                logger.error(f"Streaming {request.path} failed: {e}", exc_info=e)
                raise
        await response.write_eof()
    return response


def create_content_routes(schemes: frozenset[str]) -> list[web.RouteDef]:
    return [web.get(f"/{scheme}/{{path:.*}}", serve_content) for scheme in sorted(schemes)]


def create_app(config: Config, *, backend: Backend | None = None) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        backend: Backend to resolve against; when omitted an HttpApiBackend is
            created from config.backend and closed on application cleanup

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    if backend is None:
        backend = HttpApiBackend(config.backend.api_url, timeout=config.backend.timeout)
        app.on_cleanup.append(_close_backend)

    schemes = frozenset(config.gateway.schemes)
    app[backend_key] = backend
    app[schemes_key] = schemes

    app.router.add_routes(create_content_routes(schemes))

    return app


async def _close_backend(app: web.Application) -> None:
    """Close the backend on application cleanup."""
    await app[backend_key].aclose()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    logger.info(f"Resolving content through IPFS API at {config.backend.api_url}")
    web.run_app(app, host=config.server.host, port=config.server.port)
