"""Configuration management for the gateway.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Self

from ipfs_http_response.backends.http_api import DEFAULT_API_URL, DEFAULT_TIMEOUT

CONFIG_FILENAME = "gateway.toml"


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class BackendConfig:
    """IPFS node connection configuration."""

    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class GatewayConfig:
    """Path resolution configuration."""

    schemes: list[str] = field(default_factory=lambda: ["ipfs"])


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    backend: BackendConfig
    gateway: GatewayConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for gateway.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls.default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def default(cls) -> Self:
        """Create config with all defaults."""
        return cls(
            server=ServerConfig(),
            backend=BackendConfig(),
            gateway=GatewayConfig(),
        )

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path) -> Self:
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        return cls(
            server=cls._parse_server(data.get("server")),
            backend=cls._parse_backend(data.get("backend")),
            gateway=cls._parse_gateway(data.get("gateway")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_backend(cls, data: object) -> BackendConfig:
        if data is None:
            return BackendConfig()

        if not isinstance(data, dict):
            raise ValueError("backend section must be a dictionary")

        api_url = data.get("api_url", DEFAULT_API_URL)
        if not isinstance(api_url, str):
            raise ValueError("backend.api_url must be a string")

        timeout = data.get("timeout", DEFAULT_TIMEOUT)
        if not isinstance(timeout, int | float) or isinstance(timeout, bool):
            raise ValueError("backend.timeout must be a number")
        if timeout <= 0:
            raise ValueError("backend.timeout must be positive")

        return BackendConfig(api_url=api_url, timeout=float(timeout))

    @classmethod
    def _parse_gateway(cls, data: object) -> GatewayConfig:
        """Parse gateway configuration section.

        Args:
            data: Raw gateway section data

        Returns:
            GatewayConfig instance
        """
        if data is None:
            return GatewayConfig()

        if not isinstance(data, dict):
            raise ValueError("gateway section must be a dictionary")

        schemes_raw = data.get("schemes", ["ipfs"])
        if not isinstance(schemes_raw, list) or not schemes_raw:
            raise ValueError("gateway.schemes must be a non-empty list")
        schemes: list[str] = []
        for item in schemes_raw:
            if not isinstance(item, str) or not item or "/" in item:
                raise ValueError("gateway.schemes items must be non-empty strings without '/'")
            schemes.append(item)

        return GatewayConfig(schemes=schemes)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
    ) -> Self:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            api_url: Override backend.api_url
            timeout: Override backend.timeout

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        backend = self.backend
        if api_url is not None or timeout is not None:
            backend = replace(
                self.backend,
                api_url=api_url if api_url is not None else self.backend.api_url,
                timeout=timeout if timeout is not None else self.backend.timeout,
            )

        return replace(self, server=server, backend=backend)
