"""Configuration loading and validation for document loaders."""

from __future__ import annotations

import codecs
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from resref import __version__
from resref.errors import ConfigError

DEFAULT_CONFIG_PATH = "resref.yaml"
DEFAULT_ACCEPT = "application/json, application/yaml;q=0.9, text/yaml;q=0.9, */*;q=0.1"
SUPPORTED_SCHEMES = ("file", "http", "https")


@dataclass
class LoaderConfig:
    """Settings for opening and decoding resources."""

    http_timeout: float = 10.0  # seconds
    user_agent: str = f"resref/{__version__}"
    accept: str = DEFAULT_ACCEPT
    encoding: str = "utf-8"
    allowed_schemes: list[str] = field(default_factory=lambda: list(SUPPORTED_SCHEMES))
    base_dir: Optional[str] = None  # relative paths resolve here, else cwd


def get_default_config() -> LoaderConfig:
    """Return the default loader configuration."""
    return LoaderConfig()


def validate_config(config: LoaderConfig, config_file: Optional[str] = None) -> None:
    """Validate configuration values.

    Raises:
        ConfigError: If configuration is invalid.
    """
    if isinstance(config.http_timeout, bool) or not isinstance(config.http_timeout, (int, float)):
        raise ConfigError("'http_timeout' must be a number", file=config_file)
    if config.http_timeout <= 0:
        raise ConfigError(
            f"'http_timeout' must be positive, got {config.http_timeout}",
            file=config_file,
        )

    try:
        codecs.lookup(config.encoding)
    except (LookupError, TypeError):
        raise ConfigError(f"Unknown encoding: '{config.encoding}'", file=config_file)

    if not isinstance(config.allowed_schemes, list):
        raise ConfigError("'allowed_schemes' must be a list", file=config_file)
    for scheme in config.allowed_schemes:
        if scheme not in SUPPORTED_SCHEMES:
            raise ConfigError(
                f"Unsupported scheme: '{scheme}'."
                f" Must be one of: {', '.join(SUPPORTED_SCHEMES)}",
                file=config_file,
            )


def load_config(config_path: Path | str) -> LoaderConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the resref.yaml file.

    Returns:
        LoaderConfig with loaded values merged with defaults.

    Raises:
        ConfigError: If the file exists but contains invalid configuration.
    """
    config_path = Path(config_path)
    config_file = str(config_path)

    defaults = get_default_config()

    if not config_path.exists():
        return defaults

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read file: {e}", file=config_file)

    if not content.strip():
        return defaults

    try:
        data: Any = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}", file=config_file)

    if not data:
        return defaults
    if not isinstance(data, dict):
        raise ConfigError("Top-level resref config must be a mapping", file=config_file)

    base_dir = data.get("base_dir", defaults.base_dir)
    if base_dir is not None:
        # relative base_dir is taken relative to the config file
        base_dir = str((config_path.parent / base_dir).resolve())

    config = LoaderConfig(
        http_timeout=data.get("http_timeout", defaults.http_timeout),
        user_agent=data.get("user_agent", defaults.user_agent),
        accept=data.get("accept", defaults.accept),
        encoding=data.get("encoding", defaults.encoding),
        allowed_schemes=data.get("allowed_schemes", defaults.allowed_schemes),
        base_dir=base_dir,
    )

    validate_config(config, config_file)

    return config
