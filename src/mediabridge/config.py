"""Configuration management for mediabridge."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

DEFAULT_PORT = 51234


class ConfigError(ValueError):
    """Raised when the configuration file is malformed."""


@dataclass
class DaemonConfig:
    """Daemon configuration."""

    log_level: str = "info"


@dataclass
class ServerConfig:
    """Command channel listener settings."""

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    read_timeout: float = 10.0  # 0 disables the per-connection timeout
    max_token_bytes: int = 32


@dataclass
class ReporterConfig:
    """State reporter settings."""

    interval: float = 1.0
    logger: str = "mediabridge.state"


@dataclass
class DiscoveryConfig:
    """Session discovery settings."""

    provider: str = ""


@dataclass
class PathsConfig:
    """Path configuration."""

    state_dir: str = ""


@dataclass
class ClientConfig:
    """Defaults for the command-sending client."""

    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    timeout: float = 5.0
    lyrics_dir: str = ""  # directory of .lrc files named after tracks


@dataclass
class Config:
    """Full mediabridge configuration."""

    daemon: DaemonConfig = field(default_factory=DaemonConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    reporter: ReporterConfig = field(default_factory=ReporterConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    client: ClientConfig = field(default_factory=ClientConfig)


def get_config_dir() -> Path:
    """Get the mediabridge config directory."""
    if xdg_config := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_config) / "mediabridge"
    return Path.home() / ".config" / "mediabridge"


def get_state_dir() -> Path:
    """Get the mediabridge state directory (for the daemon and state logs)."""
    if xdg_state := os.environ.get("XDG_STATE_HOME"):
        return Path(xdg_state) / "mediabridge"
    return Path.home() / ".local" / "state" / "mediabridge"


def get_config_file() -> Path:
    """Get the config file path, honouring MEDIABRIDGE_CONFIG."""
    if env_file := os.environ.get("MEDIABRIDGE_CONFIG"):
        return Path(env_file)
    return get_config_dir() / "config.toml"


def _build_section(cls: type, name: str, data: Any) -> Any:
    if not isinstance(data, dict):
        raise ConfigError(f"[{name}] must be a table")

    data = dict(data)
    known = {f.name: f for f in fields(cls)}
    for key, value in data.items():
        if key not in known:
            raise ConfigError(f"Unknown key '{key}' in [{name}]")
        default = getattr(cls(), key)
        # ints are accepted where floats are expected
        if isinstance(default, float) and isinstance(value, int) and not isinstance(value, bool):
            data[key] = float(value)
        elif type(value) is not type(default):
            raise ConfigError(
                f"[{name}] {key} must be {type(default).__name__}, "
                f"got {type(value).__name__}"
            )
    return cls(**data)


def parse_config(data: dict[str, Any]) -> Config:
    """Build a Config from a decoded TOML document."""
    sections = {f.name: f for f in fields(Config)}
    for name in data:
        if name not in sections:
            raise ConfigError(f"Unknown section [{name}]")

    return Config(
        daemon=_build_section(DaemonConfig, "daemon", data.get("daemon", {})),
        server=_build_section(ServerConfig, "server", data.get("server", {})),
        reporter=_build_section(ReporterConfig, "reporter", data.get("reporter", {})),
        discovery=_build_section(DiscoveryConfig, "discovery", data.get("discovery", {})),
        paths=_build_section(PathsConfig, "paths", data.get("paths", {})),
        client=_build_section(ClientConfig, "client", data.get("client", {})),
    )


def load_config(path: Path | None = None) -> Config:
    """Load configuration from file."""
    config_file = path or get_config_file()

    if not config_file.exists():
        return Config()

    with open(config_file, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_file}: {e}") from e

    return parse_config(data)


def get_effective_state_dir(config: Config) -> Path:
    """Get state directory, considering config overrides."""
    if config.paths.state_dir:
        return Path(config.paths.state_dir).expanduser()
    return get_state_dir()
