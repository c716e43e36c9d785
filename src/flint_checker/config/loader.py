"""Configuration loader for Flint.

Loads the JSON configuration file and returns a validated FlintConfig.
Uses module-level caching so each file is only parsed once per process.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from flint_checker.config.models import FlintConfig
from flint_checker.domain.errors import ConfigurationError

# Module-level cache
_config_cache: dict[str, FlintConfig] = {}

# Built-in defaults ship next to this module
_DEFAULT_CONFIG_PATH = Path(__file__).parent / "flint_default.json"


def load_config(path: Optional[Path] = None) -> FlintConfig:
    """Load and validate a Flint config from a JSON file.

    Parameters
    ----------
    path : Path | None
        Path to a custom JSON config file.
        If ``None``, the built-in ``flint_default.json`` is used.

    Returns
    -------
    FlintConfig
        Validated configuration instance.

    Raises
    ------
    FileNotFoundError
        If the specified path does not exist.
    ConfigurationError
        If the file is not JSON or does not match the expected schema.
    """
    config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH
    cache_key = str(config_path.resolve())

    if cache_key in _config_cache:
        return _config_cache[cache_key]

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
        config = FlintConfig.model_validate(raw)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigurationError(f"Invalid config file {config_path}: {exc}") from exc

    _config_cache[cache_key] = config
    return config


def get_config() -> FlintConfig:
    """Get the default configuration (cached)."""
    return load_config()


def clear_cache() -> None:
    """Forget every loaded config so the next load re-reads its file."""
    _config_cache.clear()
