"""Flint configuration package."""

from flint_checker.config.loader import get_config, load_config
from flint_checker.config.models import FlintConfig

__all__ = ["FlintConfig", "get_config", "load_config"]
