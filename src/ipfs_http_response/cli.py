"""CLI interface for the gateway.

Serve IPFS content over HTTP, or resolve a single path from the command line.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from ipfs_http_response.backends.http_api import HttpApiBackend
from ipfs_http_response.config import Config
from ipfs_http_response.core.response import get_response

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Path to configuration file (default: auto-discover gateway.toml)",
)
api_url_option = click.option(
    "--api-url",
    default=None,
    help="IPFS node RPC API URL (overrides config)",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)


@click.group()
def cli() -> None:
    """Resolve IPFS content paths into HTTP responses."""


@cli.command()
@config_option
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@api_url_option
@verbose_option
def serve(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    api_url: str | None,
    verbose: bool,
) -> None:
    """Start the HTTP gateway."""
    from ipfs_http_response.server import run_server

    _configure_logging(verbose)
    config = _load_config(config_path).with_overrides(host=host, port=port, api_url=api_url)

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"IPFS API: {config.backend.api_url}")
    click.echo(f"Schemes: {', '.join(config.gateway.schemes)}")

    run_server(config)


@cli.command()
@click.argument("path")
@config_option
@api_url_option
@click.option(
    "--include",
    "-i",
    is_flag=True,
    help="Print status line and headers to stderr",
)
@verbose_option
def get(
    path: str,
    config_path: Path | None,
    api_url: str | None,
    include: bool,
    verbose: bool,
) -> None:
    """Resolve PATH (e.g., /ipfs/<cid>/index.html) and write the body to stdout."""
    _configure_logging(verbose)
    config = _load_config(config_path).with_overrides(api_url=api_url)

    status = asyncio.run(_fetch(config, path, include=include))
    if status >= 400:
        raise SystemExit(1)


async def _fetch(config: Config, path: str, *, include: bool) -> int:
    """Resolve path and copy the response body to stdout.

    Returns:
        HTTP status of the response
    """
    async with HttpApiBackend(config.backend.api_url, timeout=config.backend.timeout) as backend:
        response = await get_response(backend, path, schemes=config.gateway.schemes)

        if include:
            click.echo(f"{response.status} {response.reason}", err=True)
            for name, value in response.headers.items():
                click.echo(f"{name}: {value}", err=True)
        if response.error is not None:
            click.echo(f"Error: {response.error}", err=True)

        if response.body is not None:
            out = click.get_binary_stream("stdout")
            async with response.body as body:
                async for chunk in body:
                    out.write(chunk)
            out.flush()

        return response.status


def _load_config(config_path: Path | None) -> Config:
    try:
        return Config.load(config_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )
